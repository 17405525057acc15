"""
SQLAlchemy ORM models for the Storefront Payments API.

Tables:
    orders — storefront orders with their embedded payment record

The payment record is embedded as payment_* columns rather than a separate
table: every webhook lookup filters on one of the three correlation columns.
"""
import uuid
from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, JSON, Index

from database import Base
from domain.enums import OrderStatus, PaymentStatus


def _new_order_id() -> str:
    return uuid.uuid4().hex


class Order(Base):
    """
    A storefront order as seen by the payment pipeline.

    Lifecycle:
        1. Checkout creates the row (status=pending, payment_status=unpaid)
           with exactly one correlation ID populated
        2. PayMongo webhooks move it to processing or payment_failed
        3. Admin fulfilment moves it through shipped → delivered → completed
    """
    __tablename__ = "orders"

    id = Column(String(64), primary_key=True, default=_new_order_id)
    user_id = Column(String(128), nullable=True, index=True)  # JWT sub of the buyer

    total_amount = Column(Integer, nullable=False, default=0)  # centavos
    currency = Column(String(3), nullable=False, default="PHP")

    status = Column(String(30), nullable=False, default=OrderStatus.PENDING.value, index=True)

    # Embedded payment record
    payment_source_id = Column(String(100), nullable=True, unique=True, index=True)
    payment_payment_id = Column(String(100), nullable=True, unique=True, index=True)
    payment_checkout_session_id = Column(String(100), nullable=True, unique=True, index=True)
    payment_status = Column(String(20), nullable=False, default=PaymentStatus.UNPAID.value)
    payment_details = Column(JSON, nullable=True)  # set only on checkout-session completion
    payment_last_event_at = Column(Integer, nullable=True)  # provider created_at (unix seconds)

    # Optimistic concurrency: UPDATE ... WHERE version = <read version>
    version = Column(Integer, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        # For admin order lists: filter by status, newest first
        Index("ix_orders_status_created", "status", "created_at"),
    )

    @property
    def payment(self) -> dict:
        """The embedded payment record in its wire shape."""
        return {
            "sourceId": self.payment_source_id,
            "paymentId": self.payment_payment_id,
            "checkoutSessionId": self.payment_checkout_session_id,
            "status": self.payment_status,
            "details": self.payment_details,
            "lastEventAt": self.payment_last_event_at,
        }
