"""
Domain enums for orders, payments and PayMongo webhook events.
"""

from enum import Enum


class OrderStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    PAYMENT_FAILED = "payment_failed"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    UNPAID = "unpaid"
    PAID = "paid"
    FAILED = "failed"


class WebhookEventType(str, Enum):
    SOURCE_CHARGEABLE = "source.chargeable"
    PAYMENT_PAID = "payment.paid"
    PAYMENT_FAILED = "payment.failed"
    CHECKOUT_SESSION_PAYMENT_PAID = "checkout_session.payment.paid"
    # Catch-all for event types this service does not act on
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, raw: str | None) -> "WebhookEventType":
        try:
            member = cls(raw)
        except ValueError:
            return cls.UNKNOWN
        return member
