"""
Database engine and session management for the Storefront Payments API.

Orders live in a SQL database accessed through SQLAlchemy's async engine
(aiosqlite by default). The session is handed to OrderStore per request, so
webhook and order services never touch a module-level connection directly.
"""
import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from config import settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""
    pass


def to_async_url(url: str) -> str:
    """Map sync driver URLs onto their async drivers (sqlite → aiosqlite)."""
    if url.startswith("sqlite:///"):
        return url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
    return url


def build_engine(url: str, **kwargs) -> AsyncEngine:
    return create_async_engine(to_async_url(url), future=True, **kwargs)


# ── Engine ──────────────────────────────────────────────────────────

engine = build_engine(settings.database_url)

async_session = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)


# ── Helpers ─────────────────────────────────────────────────────────

async def init_db() -> None:
    """Create all tables. Called once on server startup."""
    # Import models so Base.metadata knows about them
    import db_models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.info("Database tables created (or already exist)")


async def ping_db(session: AsyncSession) -> bool:
    """Round-trip a trivial query; raises if the database is unreachable."""
    result = await session.execute(text("SELECT 1"))
    return result.scalar() == 1


async def get_db() -> AsyncSession:
    """FastAPI dependency — yields an async session."""
    async with async_session() as session:
        try:
            yield session
        finally:
            await session.close()
