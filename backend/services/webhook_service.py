"""
PayMongo Webhook Service

Handles:
    1. Dispatch of a verified event to exactly one handler by event type
    2. Order lookup by provider correlation ID (source / payment / checkout session)
    3. Order + payment status transitions

Transitions:
    source.chargeable              → charge the source, record paymentId (status unchanged)
    payment.paid                   → payment=paid,   order=processing
    payment.failed                 → payment=failed, order=payment_failed
    checkout_session.payment.paid  → payment=paid,   order=processing, details=payments[0]

A known event type that matches no order is a logged no-op; unknown event
types are acknowledged silently. Events older than the last applied event on
an order are skipped. Store and provider client are passed in by the caller.
"""
import logging
from typing import Awaitable, Callable

from db_models import Order
from domain.constants import CHECKOUT_SESSION_ID_FIELD, PAYMENT_ID_FIELD, SOURCE_ID_FIELD
from domain.enums import OrderStatus, PaymentStatus, WebhookEventType
from domain.errors import MalformedPayloadError, PersistenceError
from exceptions import PaymentProviderError
from models import WebhookEvent
from services.order_store import OrderStore
from services.paymongo_client import PayMongoClient

logger = logging.getLogger(__name__)

EventHandler = Callable[[WebhookEvent, OrderStore, PayMongoClient], Awaitable[dict]]


# ════════════════════════════════════════════════════════════════════
# Helpers
# ════════════════════════════════════════════════════════════════════


def _correlation_id(event: WebhookEvent) -> str:
    if not event.data.id:
        raise MalformedPayloadError(f"{event.type} event has no data.id")
    return event.data.id


async def _lookup(store: OrderStore, field: str, event: WebhookEvent) -> Order | None:
    correlation_id = _correlation_id(event)
    order = await store.find_one(field, correlation_id)
    if order is None:
        logger.warning(f"  {event.type} for unknown order ({field}={correlation_id})")
    return order


def _is_stale(order: Order, event: WebhookEvent) -> bool:
    """True when the order already reflects a newer provider event."""
    if event.created_at is None or order.payment_last_event_at is None:
        return False
    return event.created_at < order.payment_last_event_at


def _record_event_time(order: Order, event: WebhookEvent) -> None:
    if event.created_at is not None:
        order.payment_last_event_at = event.created_at


def _ignored(reason: str, **extra) -> dict:
    return {"status": "ignored", "reason": reason, **extra}


async def _apply_outcome(
    order: Order,
    event: WebhookEvent,
    store: OrderStore,
    payment_status: PaymentStatus,
    order_status: OrderStatus,
    details: dict | None = None,
) -> dict:
    if _is_stale(order, event):
        logger.info(
            f"  Skipping stale {event.type} for order {order.id} "
            f"(event {event.created_at} < last applied {order.payment_last_event_at})"
        )
        return _ignored("stale_event", orderId=order.id)

    order.payment_status = payment_status.value
    order.status = order_status.value
    if details is not None:
        order.payment_details = details
    _record_event_time(order, event)
    await store.save(order)

    logger.info(f"  ✅ Order {order.id} → {order_status.value} (payment {payment_status.value})")
    return {"status": order_status.value, "orderId": order.id}


# ════════════════════════════════════════════════════════════════════
# Handlers
# ════════════════════════════════════════════════════════════════════


async def handle_chargeable_source(event: WebhookEvent, store: OrderStore, provider: PayMongoClient) -> dict:
    """Create a payment from a source the customer has authorized."""
    order = await _lookup(store, SOURCE_ID_FIELD, event)
    if order is None:
        return _ignored("unknown_order")

    if order.payment_payment_id:
        logger.info(f"  Source {order.payment_source_id} already charged as {order.payment_payment_id}")
        return {"status": "already_charged", "orderId": order.id, "paymentId": order.payment_payment_id}

    order_id = order.id
    source_id = order.payment_source_id
    payment = await provider.create_payment(
        source_id=source_id,
        amount=order.total_amount,
        currency=order.currency,
        description=f"Order {order_id}",
    )
    payment_id = payment.get("id")
    if not payment_id:
        raise PaymentProviderError("PayMongo payment response carried no id")

    order.payment_payment_id = payment_id
    _record_event_time(order, event)
    try:
        await store.save(order)
    except PersistenceError:
        # The source is consumed now; a redelivery cannot charge it again
        logger.error(
            f"  ❌ Payment {payment_id} created for source {source_id} but not recorded "
            f"on order {order_id}; reconcile manually"
        )
        raise
    return {"status": "charged", "orderId": order_id, "paymentId": payment_id}


async def handle_payment_paid(event: WebhookEvent, store: OrderStore, provider: PayMongoClient) -> dict:
    order = await _lookup(store, PAYMENT_ID_FIELD, event)
    if order is None:
        return _ignored("unknown_order")
    return await _apply_outcome(order, event, store, PaymentStatus.PAID, OrderStatus.PROCESSING)


async def handle_payment_failed(event: WebhookEvent, store: OrderStore, provider: PayMongoClient) -> dict:
    order = await _lookup(store, PAYMENT_ID_FIELD, event)
    if order is None:
        return _ignored("unknown_order")
    return await _apply_outcome(order, event, store, PaymentStatus.FAILED, OrderStatus.PAYMENT_FAILED)


async def handle_checkout_session_paid(event: WebhookEvent, store: OrderStore, provider: PayMongoClient) -> dict:
    """
    Mark a checkout-session order paid.

    The first entry of data.attributes.payments becomes payment.details; an
    event without payments is rejected so the provider redelivers it.
    """
    order = await _lookup(store, CHECKOUT_SESSION_ID_FIELD, event)
    if order is None:
        return _ignored("unknown_order")

    payments = event.data.attributes.get("payments")
    if not isinstance(payments, list) or not payments:
        raise MalformedPayloadError("Checkout session event carries no payments")

    return await _apply_outcome(
        order,
        event,
        store,
        PaymentStatus.PAID,
        OrderStatus.PROCESSING,
        details=payments[0],
    )


EVENT_HANDLERS: dict[WebhookEventType, EventHandler] = {
    WebhookEventType.SOURCE_CHARGEABLE: handle_chargeable_source,
    WebhookEventType.PAYMENT_PAID: handle_payment_paid,
    WebhookEventType.PAYMENT_FAILED: handle_payment_failed,
    WebhookEventType.CHECKOUT_SESSION_PAYMENT_PAID: handle_checkout_session_paid,
}

# Every event type except UNKNOWN must have a handler
_unhandled = set(WebhookEventType) - set(EVENT_HANDLERS) - {WebhookEventType.UNKNOWN}
if _unhandled:
    raise RuntimeError(f"No webhook handler for: {sorted(t.value for t in _unhandled)}")


# ════════════════════════════════════════════════════════════════════
# Dispatch
# ════════════════════════════════════════════════════════════════════


async def dispatch_event(event: WebhookEvent, store: OrderStore, provider: PayMongoClient) -> dict:
    """
    Route a verified event to its handler.

    Exceptions from the handler propagate; the caller must not acknowledge
    the delivery in that case.
    """
    kind = event.kind
    if kind is WebhookEventType.UNKNOWN:
        logger.debug(f"  PayMongo webhook type ignored: {event.type}")
        return _ignored(f"unhandled_type_{event.type}")

    logger.info(f"  📩 PayMongo webhook: {event.type} (data.id={event.data.id}, event={event.id})")
    return await EVENT_HANDLERS[kind](event, store, provider)
