"""
Order endpoints — buyer order tracking + admin order management.

Endpoints:
    GET   /api/orders/{order_id}                — order + payment status (owner or admin)
    GET   /api/admin/orders                     — paginated order list, optional ?status=
    PATCH /api/admin/orders/{order_id}/status   — fulfilment transition (admin)
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from deps import Pagination, get_order_store, pagination_params, require_admin
from domain.enums import OrderStatus
from domain.responses import StandardErrorResponse, paginated_response, success_response
from middleware.auth import require_authenticated_user
from models import OrderStatusUpdateRequest
from services import order_service
from services.order_store import OrderStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["orders"])

_error_responses = {
    401: {"model": StandardErrorResponse},
    403: {"model": StandardErrorResponse},
    404: {"model": StandardErrorResponse},
}


@router.get("/orders/{order_id}", responses=_error_responses)
async def get_order(
    order_id: str,
    claims: dict = Depends(require_authenticated_user),
    store: OrderStore = Depends(get_order_store),
):
    """Track an order and its payment state."""
    order = await order_service.get_order_for_user(
        store, order_id, user_id=claims["sub"], role=claims.get("role")
    )
    return success_response(order)


@router.get("/admin/orders", responses=_error_responses)
async def list_orders(
    status: Optional[OrderStatus] = Query(None, description="Filter by order status"),
    page: Pagination = Depends(pagination_params),
    _admin: dict = Depends(require_admin),
    store: OrderStore = Depends(get_order_store),
):
    """List orders newest first."""
    orders, total = await order_service.list_orders(
        store, status=status, limit=page["limit"], offset=page["offset"]
    )
    return paginated_response(orders, limit=page["limit"], offset=page["offset"], total=total)


@router.patch(
    "/admin/orders/{order_id}/status",
    responses={**_error_responses, 409: {"model": StandardErrorResponse}},
)
async def update_order_status(
    order_id: str,
    req: OrderStatusUpdateRequest,
    admin: dict = Depends(require_admin),
    store: OrderStore = Depends(get_order_store),
):
    """Advance an order along shipped → delivered → completed, or cancel it."""
    logger.info(f"Admin {admin['sub']} requested {order_id} → {req.status.value}")
    order = await order_service.update_status(store, order_id, req.status)
    return success_response(order)
