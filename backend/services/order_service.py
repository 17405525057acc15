"""
Order service — order tracking for buyers and fulfilment updates for admins.

Payment-driven transitions belong to webhook_service; this module only owns
the fulfilment side of the lifecycle and never touches payment_status.
"""
import logging

from db_models import Order
from domain.enums import OrderStatus
from domain.errors import ConflictError, NotFoundError, PermissionDeniedError
from services.order_store import OrderStore

logger = logging.getLogger(__name__)


# Allowed admin transitions: current status → statuses it may move to
FULFILMENT_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.CANCELLED}),
    OrderStatus.PROCESSING: frozenset({OrderStatus.SHIPPED, OrderStatus.CANCELLED}),
    OrderStatus.PAYMENT_FAILED: frozenset({OrderStatus.CANCELLED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset({OrderStatus.COMPLETED}),
    OrderStatus.COMPLETED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}


def serialize_order(order: Order) -> dict:
    return {
        "id": order.id,
        "userId": order.user_id,
        "status": order.status,
        "totalAmount": order.total_amount,
        "currency": order.currency,
        "payment": order.payment,
        "createdAt": order.created_at.isoformat() if order.created_at else None,
        "updatedAt": order.updated_at.isoformat() if order.updated_at else None,
    }


def can_transition(current: str, target: OrderStatus) -> bool:
    try:
        allowed = FULFILMENT_TRANSITIONS[OrderStatus(current)]
    except ValueError:
        return False
    return target in allowed


async def get_order_for_user(store: OrderStore, order_id: str, *, user_id: str, role: str | None) -> dict:
    """Return an order to its owner, or to any admin."""
    order = await store.get(order_id)
    if order is None:
        raise NotFoundError("Order", order_id)
    if role != "admin" and order.user_id != user_id:
        raise PermissionDeniedError("You can only view your own orders.")
    return serialize_order(order)


async def list_orders(
    store: OrderStore,
    *,
    status: OrderStatus | None = None,
    limit: int = 50,
    offset: int = 0,
) -> tuple[list[dict], int]:
    orders, total = await store.list_orders(
        status=status.value if status else None,
        limit=limit,
        offset=offset,
    )
    return [serialize_order(o) for o in orders], total


async def update_status(store: OrderStore, order_id: str, target: OrderStatus) -> dict:
    """
    Move an order along its fulfilment path.

    Raises:
        NotFoundError: no such order
        ConflictError: the transition is not allowed from the current status
    """
    order = await store.get(order_id)
    if order is None:
        raise NotFoundError("Order", order_id)

    if not can_transition(order.status, target):
        raise ConflictError(
            f"Cannot move order from {order.status} to {target.value}",
            details={"current": order.status, "requested": target.value},
        )

    previous = order.status
    order.status = target.value
    await store.save(order)

    logger.info(f"  📦 Order {order.id}: {previous} → {target.value}")
    return serialize_order(order)
