"""
Database Configuration

Async SQLAlchemy engine and session management.

The engine and session factory are created by ``init_db()`` at application
startup and disposed by ``close_db()`` at shutdown. Request handlers receive a
session through the ``get_db`` dependency; the session commits once when the
handler finishes and rolls back if anything raised, so every multi-step service
operation is all-or-nothing.
"""

import logging
from collections.abc import AsyncIterator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from edutrack.core.config import settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""


engine: AsyncEngine | None = None
async_session_maker: async_sessionmaker[AsyncSession] | None = None


def _create_engine() -> AsyncEngine:
    return create_async_engine(
        settings.database_url,
        echo=settings.database_echo,
        pool_size=settings.database_pool_size,
        pool_pre_ping=True,
    )


async def init_db() -> AsyncEngine:
    """
    Open the connection pool and verify connectivity.

    Call this on application startup.
    """
    global engine, async_session_maker

    if engine is None:
        engine = _create_engine()
        async_session_maker = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))

    logger.info("Database connection pool initialized")
    return engine


def get_session_maker() -> async_sessionmaker[AsyncSession]:
    """Return the session factory, failing loudly if the pool was never opened."""
    if async_session_maker is None:
        raise RuntimeError("Database not initialized. Call init_db() on startup.")
    return async_session_maker


async def get_db() -> AsyncIterator[AsyncSession]:
    """
    FastAPI dependency providing a transactional session.

    Usage:
        @router.get("/items")
        async def list_items(db: AsyncSession = Depends(get_db)):
            ...
    """
    session_maker = get_session_maker()
    async with session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def close_db() -> None:
    """Dispose of the connection pool."""
    global engine, async_session_maker
    if engine is not None:
        await engine.dispose()
        engine = None
        async_session_maker = None
        logger.info("Database connection pool closed")
