"""
Custom domain exceptions for consistent error handling.

These exceptions are mapped to HTTP status codes by the exception handlers
in main.py. WebhookError subclasses render as {"error": <message>} because
the payment provider, not the frontend, consumes them.
"""
from fastapi import HTTPException, status


class DomainError(HTTPException):
    """Base class for all domain-specific errors."""
    def __init__(self, message: str, status_code: int = status.HTTP_400_BAD_REQUEST, details: dict | None = None):
        super().__init__(status_code=status_code, detail=message)
        self.message = message
        self.details = details or {}


class NotFoundError(DomainError):
    """Resource not found (404)."""
    def __init__(self, resource_type: str, identifier: str, details: dict | None = None):
        message = f"{resource_type} not found: {identifier}"
        super().__init__(message, status_code=status.HTTP_404_NOT_FOUND, details=details)


class PermissionDeniedError(DomainError):
    """Permission denied (403)."""
    def __init__(self, message: str = "Permission denied", details: dict | None = None):
        super().__init__(message, status_code=status.HTTP_403_FORBIDDEN, details=details)


class UnauthorizedError(DomainError):
    """Unauthorized access (401)."""
    def __init__(self, message: str = "Unauthorized", details: dict | None = None):
        super().__init__(message, status_code=status.HTTP_401_UNAUTHORIZED, details=details)


class ConflictError(DomainError):
    """Resource conflict (409)."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, status_code=status.HTTP_409_CONFLICT, details=details)


class PersistenceError(DomainError):
    """Order write failed or lost an optimistic-concurrency race (400)."""
    def __init__(self, message: str = "Order could not be saved", details: dict | None = None):
        super().__init__(message, status_code=status.HTTP_400_BAD_REQUEST, details=details)


# ── Webhook errors ──────────────────────────────────────────────────


class WebhookError(DomainError):
    """Base class for errors returned to the payment provider (400)."""
    def __init__(self, message: str, status_code: int = status.HTTP_400_BAD_REQUEST, details: dict | None = None):
        super().__init__(message, status_code=status_code, details=details)


class WebhookUnauthorizedError(WebhookError):
    """Missing or wrong Basic credentials on a webhook delivery (401)."""
    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message, status_code=status.HTTP_401_UNAUTHORIZED)


class InvalidSignatureError(WebhookError):
    """Signature header missing or not matching the body."""
    def __init__(self, message: str = "Invalid webhook signature"):
        super().__init__(message)


class MalformedPayloadError(WebhookError):
    """Verified body is not a usable event envelope."""
    def __init__(self, message: str = "Malformed webhook payload"):
        super().__init__(message)


class WebhookConfigurationError(WebhookError):
    """Webhook secret absent from configuration (fail closed)."""
    def __init__(self, message: str = "Missing PAYMONGO_WEBHOOK_SECRET"):
        super().__init__(message)


class WebhookProcessingError(WebhookError):
    """Any other handler failure. The message stays generic."""
    def __init__(self, message: str = "Webhook processing failed"):
        super().__init__(message)
