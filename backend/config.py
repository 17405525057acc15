"""
Configuration management for the Storefront Payments API.

Loads settings from .env via pydantic-settings.

Security notes:
    - The webhook secret is checked per request (fail closed), not at startup
    - validate_production_settings() enforces strict CORS and a JWT secret in production
"""
import logging

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ── Database ────────────────────────────────────────────────────
    database_url: str = "sqlite:///./data/storefront.db"

    # ── PayMongo ────────────────────────────────────────────────────
    paymongo_webhook_secret: str = ""
    paymongo_secret_key: str = ""
    paymongo_api_base: str = "https://api.paymongo.com/v1"
    paymongo_timeout_seconds: float = 20.0

    # ── Webhook Basic Gate ──────────────────────────────────────────
    # When both are empty, the presence of Basic credentials is enough.
    webhook_basic_username: str = ""
    webhook_basic_password: str = ""

    # ── Application ─────────────────────────────────────────────────
    environment: str = "development"

    # ── Auth (JWT) ──────────────────────────────────────────────────
    jwt_secret: str = ""
    jwt_issuer: str = "storefront-api"

    # ── CORS ────────────────────────────────────────────────────────
    cors_origins: str = "http://localhost:5173,http://127.0.0.1:5173,http://localhost:3000,http://127.0.0.1:3000"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # allow unknown .env keys without crashing
    )

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def webhook_basic_credentials_configured(self) -> bool:
        return bool(self.webhook_basic_username or self.webhook_basic_password)

    def validate_production_settings(self):
        """
        Validate settings for production safety.

        Called during app startup. A missing webhook secret is only warned
        about here; the webhook endpoint itself rejects every delivery until
        the secret is set.
        """
        if self.environment == "production":
            if "*" in self.cors_origins:
                raise ValueError(
                    "CORS_ORIGINS must not contain '*' in production. "
                    "Set explicit allowed origins."
                )
            if not self.jwt_secret:
                raise ValueError(
                    "JWT_SECRET must be set in production. "
                    "It is used to verify access tokens for order endpoints."
                )
            logger.info("✅ Production settings validated")

        warnings = []
        if not self.paymongo_webhook_secret:
            warnings.append("PAYMONGO_WEBHOOK_SECRET is empty (all webhooks will be rejected)")
        if not self.paymongo_secret_key:
            warnings.append("PAYMONGO_SECRET_KEY is empty (chargeable sources cannot be charged)")
        if "*" in self.cors_origins:
            warnings.append("CORS_ORIGINS contains '*' (open access)")
        for w in warnings:
            logger.warning(f"⚠️  {w}")


# Global settings instance
settings = Settings()
