"""
Async database engine and session management.

The engine is created lazily so importing the application (or its tests)
never opens a connection pool by itself.
"""

from collections.abc import AsyncGenerator

import structlog
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from core.config import settings
from db.base import Base

logger = structlog.get_logger(__name__)

_engine: AsyncEngine | None = None
_session_maker: async_sessionmaker[AsyncSession] | None = None


def get_engine() -> AsyncEngine:
    """Get (or create) the global async engine."""
    global _engine
    if _engine is None:
        _engine = create_async_engine(
            settings.DATABASE_URL,
            echo=settings.DB_ECHO,
            pool_pre_ping=True,
        )
    return _engine


def get_session_maker() -> async_sessionmaker[AsyncSession]:
    """Get (or create) the global session factory."""
    global _session_maker
    if _session_maker is None:
        _session_maker = async_sessionmaker(
            get_engine(),
            expire_on_commit=False,
            autoflush=False,
        )
    return _session_maker


def async_session_maker() -> AsyncSession:
    """Open a new session outside of a request (background jobs)."""
    return get_session_maker()()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency yielding a database session.

    Services own their commit points; anything left uncommitted when the
    request fails is rolled back here.
    """
    async with async_session_maker() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def init_db() -> None:
    """Verify connectivity and create missing tables outside production."""
    import models  # noqa: F401  (registers all tables on Base.metadata)

    engine = get_engine()
    async with engine.begin() as conn:
        if settings.APP_ENV != "production":
            await conn.run_sync(Base.metadata.create_all)
    logger.info("database_ready", env=settings.APP_ENV)


async def close_db() -> None:
    """Dispose of the engine and its connection pool."""
    global _engine, _session_maker
    if _engine is not None:
        await _engine.dispose()
        logger.info("database_closed")
    _engine = None
    _session_maker = None
