"""Async SQLAlchemy engine and session factory.

The engine is created lazily: with PERSISTENCE_ENABLED=False the ledger
runs purely in memory and never opens a connection.
"""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from config.settings import settings


class Base(DeclarativeBase):
    """Shared declarative base for all ORM models across modules."""

    pass


_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def get_engine() -> AsyncEngine:
    return _ensure_engine()[0]


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    return _ensure_engine()[1]


def _ensure_engine() -> tuple[AsyncEngine, async_sessionmaker[AsyncSession]]:
    global _engine, _session_factory  # noqa: PLW0603
    if _engine is None or _session_factory is None:
        _engine = create_async_engine(
            settings.DATABASE_URL,
            echo=settings.DEBUG,
            pool_size=20,
            max_overflow=10,
        )
        _session_factory = async_sessionmaker(
            _engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
    return _engine, _session_factory


async def dispose_engine() -> None:
    global _engine, _session_factory  # noqa: PLW0603
    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _session_factory = None


async def get_db_session() -> AsyncGenerator[AsyncSession | None, None]:
    """FastAPI dependency: yields an AsyncSession, or None when persistence is off."""
    if not settings.PERSISTENCE_ENABLED:
        yield None
        return
    async with get_session_factory()() as session:
        yield session
