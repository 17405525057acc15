"""
Custom exception classes for PayMongo API operations.
"""


class PaymentProviderError(Exception):
    """Raised when the PayMongo API rejects a request or cannot be reached."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class PaymentProviderConfigError(PaymentProviderError):
    """Raised when PAYMONGO_SECRET_KEY is not configured."""
    pass
