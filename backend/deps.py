"""
Shared FastAPI dependencies.

Collaborators (order store, PayMongo client) are constructed here per request
and injected into routes, so services never reach for module-level clients.
"""

from __future__ import annotations

from typing import TypedDict

from fastapi import Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from database import get_db
from domain.constants import MAX_PAGE_SIZE
from domain.errors import PermissionDeniedError
from middleware.auth import require_authenticated_user
from services.order_store import OrderStore
from services.paymongo_client import PayMongoClient


class Pagination(TypedDict):
    limit: int
    offset: int


def pagination_params(
    limit: int = Query(50, ge=1, le=MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0, le=100_000),
) -> Pagination:
    return {"limit": limit, "offset": offset}


def get_order_store(db: AsyncSession = Depends(get_db)) -> OrderStore:
    return OrderStore(db)


def get_paymongo_client() -> PayMongoClient:
    return PayMongoClient(
        secret_key=settings.paymongo_secret_key,
        api_base=settings.paymongo_api_base,
        timeout=settings.paymongo_timeout_seconds,
    )


async def require_admin(
    claims: dict = Depends(require_authenticated_user),
) -> dict:
    """Require a bearer token with role == 'admin'."""
    if claims.get("role") != "admin":
        raise PermissionDeniedError("Admin role required for this endpoint.")
    return claims
