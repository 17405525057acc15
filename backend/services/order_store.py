"""
Order store — the document-store collaborator used by the webhook and order services.

Wraps one AsyncSession per request. Services receive an OrderStore instead of
importing a global session, so tests can hand in an in-memory store.
"""
import logging

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from db_models import Order
from domain.constants import CORRELATION_FIELDS
from domain.errors import PersistenceError

logger = logging.getLogger(__name__)


class OrderStore:
    """findOne / save access to Order rows."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def find_one(self, field: str, value: str) -> Order | None:
        """Find the order whose correlation column `field` equals `value`."""
        if field not in CORRELATION_FIELDS:
            raise ValueError(f"Not a correlation field: {field}")
        result = await self._session.execute(
            select(Order).where(getattr(Order, field) == value)
        )
        return result.scalar_one_or_none()

    async def get(self, order_id: str) -> Order | None:
        return await self._session.get(Order, order_id)

    async def save(self, order: Order) -> Order:
        """
        Commit pending changes to `order`.

        Raises PersistenceError when the write fails, including when another
        writer bumped the version since the order was read.
        """
        # Rollback expires loaded instances, so the id is read up front
        order_id = order.id
        self._session.add(order)
        try:
            await self._session.commit()
        except StaleDataError as e:
            await self._session.rollback()
            logger.warning(f"Concurrent update lost on order {order_id}: {e}")
            raise PersistenceError("Order was modified concurrently") from e
        except SQLAlchemyError as e:
            await self._session.rollback()
            logger.error(f"Failed to save order {order_id}: {e}")
            raise PersistenceError() from e
        return order

    async def list_orders(
        self,
        *,
        status: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[Order], int]:
        """Newest-first page of orders plus the total matching count."""
        query = select(Order)
        count_query = select(func.count()).select_from(Order)
        if status:
            query = query.where(Order.status == status)
            count_query = count_query.where(Order.status == status)

        total = (await self._session.execute(count_query)).scalar_one()
        result = await self._session.execute(
            query.order_by(Order.created_at.desc()).limit(limit).offset(offset)
        )
        return list(result.scalars().all()), total
