"""
Pytest fixtures for Vizu backend tests.
"""

import os
from collections.abc import AsyncGenerator, Awaitable, Callable
from datetime import date, datetime, timedelta, timezone
from typing import Any, Optional
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Set test environment variables before importing app
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-testing")
os.environ.setdefault("DATABASE_URL_OVERRIDE", "sqlite+aiosqlite://")
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DEBUG", "false")
os.environ.setdefault("ENABLE_BACKGROUND_JOBS", "false")


# =============================================================================
# Database
# =============================================================================


@pytest.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine, None]:
    """In-memory SQLite engine with the full schema."""
    import models  # noqa: F401
    from db.base import Base

    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(db_engine, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db_session(session_factory: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def mock_db_session() -> AsyncMock:
    """Create mock database session."""
    session = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.add = MagicMock()
    return session


# =============================================================================
# Factories
# =============================================================================


@pytest.fixture
def make_user(db_session: AsyncSession) -> Callable[..., Awaitable[Any]]:
    """Insert a user and return it."""
    from models.user import User

    async def _make(
        gender: Optional[str] = None,
        birth_date: Optional[date] = None,
        karma: int = 0,
    ) -> User:
        suffix = uuid4().hex[:8]
        user = User(
            id=str(uuid4()),
            email=f"user-{suffix}@example.com",
            username=f"user_{suffix}",
            gender=gender,
            birth_date=birth_date,
            karma=karma,
        )
        db_session.add(user)
        await db_session.commit()
        return user

    return _make


@pytest.fixture
def make_photo(db_session: AsyncSession) -> Callable[..., Awaitable[Any]]:
    """Insert an approved, unexpired photo and return it."""
    from models.photo import Photo, PhotoStatus, PhotoTestType

    counter = {"n": 0}

    async def _make(owner_id: str, **overrides: Any) -> Photo:
        counter["n"] += 1
        now = datetime.now(timezone.utc)
        values: dict[str, Any] = {
            "id": str(uuid4()),
            "user_id": owner_id,
            "image_url": f"https://cdn.example.com/photos/{counter['n']}.jpg",
            "category": "SOCIAL",
            "test_type": PhotoTestType.FREE.value,
            "status": PhotoStatus.APPROVED.value,
            "expires_at": now + timedelta(days=7),
            "vote_count": 0,
            # Strictly increasing so FIFO ordering is deterministic
            "created_at": now - timedelta(hours=1) + timedelta(seconds=counter["n"]),
        }
        values.update(overrides)
        photo = Photo(**values)
        db_session.add(photo)
        await db_session.commit()
        return photo

    return _make


# =============================================================================
# API
# =============================================================================


@pytest.fixture
async def app(session_factory: async_sessionmaker[AsyncSession]) -> AsyncGenerator[Any, None]:
    """FastAPI application wired to the test database and a fresh session registry."""
    from db.session import get_db
    from main import app as fastapi_app
    from services.pattern_detection import SessionRegistry, get_session_registry

    registry = SessionRegistry()

    async def _get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    fastapi_app.dependency_overrides[get_db] = _get_db
    fastapi_app.dependency_overrides[get_session_registry] = lambda: registry
    fastapi_app.state.test_registry = registry
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
async def client(app: Any) -> AsyncGenerator[AsyncClient, None]:
    """Create async test client."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


def _issue_token(claims: dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """Sign an access token the way the account service does."""
    from jose import jwt

    from core.config import settings
    from core.security import TOKEN_AUDIENCE, TOKEN_ISSUER

    now = datetime.now(timezone.utc)
    payload = {
        "iat": now,
        "exp": now + (expires_delta or timedelta(minutes=30)),
        "type": "access",
        "iss": TOKEN_ISSUER,
        "aud": TOKEN_AUDIENCE,
        "jti": uuid4().hex,
        **claims,
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


@pytest.fixture
def issue_token() -> Callable[..., str]:
    """Issue signed access tokens; this API only verifies them."""
    return _issue_token


@pytest.fixture
def auth_headers_for() -> Callable[..., dict[str, str]]:
    """Build bearer headers carrying a valid access token for a rater."""

    def _headers(rater_id: str, sid: Optional[str] = None) -> dict[str, str]:
        claims: dict[str, Any] = {"sub": rater_id}
        if sid:
            claims["sid"] = sid
        return {"Authorization": f"Bearer {_issue_token(claims)}"}

    return _headers
