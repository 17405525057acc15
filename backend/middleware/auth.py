"""
Request authentication helpers.

Two unrelated callers authenticate here:
  - PayMongo webhook deliveries carry `Authorization: Basic ...`. This is a
    coarse gate checked before the body is read; the HMAC signature is the
    real proof of origin (see services/signature_service.py).
  - Storefront users and admins carry `Authorization: Bearer <jwt>` (HS256,
    claims: sub, role, iss, iat, exp) issued by the identity provider.
"""
import base64
import binascii
import hmac
import logging
from fastapi import Header
from typing import Optional

import jwt

from config import settings
from domain.errors import UnauthorizedError, WebhookUnauthorizedError

logger = logging.getLogger(__name__)


def _split_scheme(authorization: Optional[str], scheme: str) -> Optional[str]:
    if not authorization:
        return None
    parts = authorization.split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != scheme:
        return None
    value = parts[1].strip()
    return value or None


# ── Webhook Basic gate ──────────────────────────────────────────────


def _decode_basic_credentials(encoded: str) -> Optional[tuple[str, str]]:
    try:
        decoded = base64.b64decode(encoded, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None
    username, sep, password = decoded.partition(":")
    if not sep:
        return None
    return username, password


def check_webhook_basic_auth(authorization: Optional[str]) -> None:
    """
    Raise WebhookUnauthorizedError unless Basic credentials are present.

    When WEBHOOK_BASIC_USERNAME / WEBHOOK_BASIC_PASSWORD are configured the
    credentials must also match them.
    """
    encoded = _split_scheme(authorization, "basic")
    if not encoded:
        raise WebhookUnauthorizedError()

    if not settings.webhook_basic_credentials_configured:
        return

    credentials = _decode_basic_credentials(encoded)
    if credentials is None:
        raise WebhookUnauthorizedError()

    username, password = credentials
    username_ok = hmac.compare_digest(username.encode("utf-8"), settings.webhook_basic_username.encode("utf-8"))
    password_ok = hmac.compare_digest(password.encode("utf-8"), settings.webhook_basic_password.encode("utf-8"))
    if not (username_ok and password_ok):
        logger.warning("Webhook delivery with wrong Basic credentials")
        raise WebhookUnauthorizedError()


async def require_webhook_basic_auth(
    authorization: Optional[str] = Header(None, alias="Authorization"),
) -> None:
    """FastAPI dependency wrapper around check_webhook_basic_auth()."""
    check_webhook_basic_auth(authorization)


# ── Bearer JWT ──────────────────────────────────────────────────────


def decode_access_token(token: str) -> dict:
    if not settings.jwt_secret:
        raise UnauthorizedError("Server auth misconfigured (JWT secret missing).")
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=["HS256"],
            issuer=settings.jwt_issuer,
            options={"require": ["exp", "iat", "iss", "sub"]},
        )
        return payload
    except jwt.ExpiredSignatureError:
        raise UnauthorizedError("Access token expired.")
    except jwt.InvalidTokenError:
        raise UnauthorizedError("Invalid access token.")


async def require_authenticated_user(
    authorization: Optional[str] = Header(None, alias="Authorization"),
) -> dict:
    """
    Dependency returning the verified token claims.

    Only `sub` and `role` are used downstream.
    """
    token = _split_scheme(authorization, "bearer")
    if not token:
        raise UnauthorizedError("Authentication required. Provide Authorization: Bearer <token>.")
    payload = decode_access_token(token)
    return {"sub": payload["sub"], "role": payload.get("role")}
