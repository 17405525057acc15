"""
Pytest configuration and shared fixtures for the Storefront Payments tests.

Provides an in-memory SQLite session, an httpx client bound to the FastAPI
app with the DB and PayMongo client overridden, and an order factory.
Request builders live in tests/helpers.py.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")

from typing import AsyncGenerator
from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from config import settings
from database import Base, get_db
from deps import get_paymongo_client
from main import app
from services.order_store import OrderStore
from services.paymongo_client import PayMongoClient
from tests.helpers import TEST_WEBHOOK_SECRET

# ── Test Configuration ───────────────────────────────────────────────
# Set test-only values for settings that would normally come from .env
settings.paymongo_webhook_secret = TEST_WEBHOOK_SECRET
settings.webhook_basic_username = ""
settings.webhook_basic_password = ""
if not settings.jwt_secret:
    settings.jwt_secret = "test-jwt-secret-for-pytest-only"


# ── Database Fixtures ────────────────────────────────────────────────


@pytest.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Create an in-memory SQLite database session for each test.

    Uses StaticPool to allow in-memory SQLite with async SQLAlchemy.
    """
    import db_models  # noqa: F401

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session_maker = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )

    async with async_session_maker() as session:
        yield session

    await engine.dispose()


@pytest.fixture
def store(db_session: AsyncSession) -> OrderStore:
    return OrderStore(db_session)


@pytest.fixture
def mock_paymongo() -> AsyncMock:
    """PayMongo client whose create_payment returns a fixed payment."""
    client = AsyncMock(spec=PayMongoClient)
    client.create_payment.return_value = {
        "id": "pay_created_123",
        "type": "payment",
        "attributes": {"status": "pending"},
    }
    return client


@pytest.fixture
async def client(db_session: AsyncSession, mock_paymongo: AsyncMock) -> AsyncGenerator[AsyncClient, None]:
    """
    httpx client against the app with the test DB session and mocked PayMongo.
    """
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_paymongo_client] = lambda: mock_paymongo

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()


# ── Test Data Fixtures ────────────────────────────────────────────────


@pytest.fixture
def make_order(db_session: AsyncSession):
    """Factory inserting a pending, unpaid order."""
    from db_models import Order

    async def _make(**overrides):
        values = {"user_id": "buyer_001", "total_amount": 150_000, "currency": "PHP"}
        values.update(overrides)
        order = Order(**values)
        db_session.add(order)
        await db_session.commit()
        await db_session.refresh(order)
        return order

    return _make

