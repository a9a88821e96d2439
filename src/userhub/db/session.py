"""Engine and session factory construction.

The engine belongs to an application instance (``app.state``) rather than
to this module, so tests and multiple apps never share a connection pool.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlmodel.ext.asyncio.session import AsyncSession
from starlette.requests import Request

from ..core.config import Settings
from .base import metadata

SessionFactory = async_sessionmaker[AsyncSession]


def create_engine(settings: Settings) -> AsyncEngine:
    return create_async_engine(
        settings.database_url,
        echo=settings.db_echo,
        pool_pre_ping=True,
    )


def create_session_factory(engine: AsyncEngine) -> SessionFactory:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def init_db(engine: AsyncEngine) -> None:
    """Create all tables; used for local development and tests."""
    async with engine.begin() as connection:
        await connection.run_sync(metadata.create_all)


async def get_session(request: Request) -> AsyncIterator[AsyncSession]:
    """Yield a request-scoped session from the application's factory."""
    session_factory: SessionFactory = request.app.state.session_factory
    async with session_factory() as session:
        yield session


__all__ = [
    "SessionFactory",
    "create_engine",
    "create_session_factory",
    "get_session",
    "init_db",
]
