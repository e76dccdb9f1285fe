"""Shared pytest fixtures for all test suites."""

import uuid
from collections.abc import AsyncGenerator, Callable

import pytest
import pytest_asyncio
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.pool import NullPool

from backend.app.config import Settings
from backend.app.db.context import RequestContext
from backend.app.db.models import Base
from backend.app.main import create_app


def make_settings(**overrides: object) -> Settings:
    """Settings isolated from the environment and any .env file."""
    values: dict[str, object] = {
        "database_url": None,
        "redis_url": None,
        "openai_api_key": None,
        "dev_mode": False,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)  # type: ignore[arg-type]


@pytest.fixture
def settings() -> Settings:
    """Default test settings."""
    return make_settings()


@pytest.fixture
def app_factory() -> Callable[..., FastAPI]:
    """Build a fresh app (own stores, cache and limiters) per call.

    Usage:
        def test_something(app_factory):
            app = app_factory(max_favorites=1)
    """

    def _build(**overrides: object) -> FastAPI:
        return create_app(make_settings(**overrides))

    return _build


@pytest.fixture
def app(app_factory: Callable[..., FastAPI]) -> FastAPI:
    """App with default settings."""
    return app_factory()


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """Create test client."""
    return TestClient(app)


@pytest.fixture
def user_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def user_headers(user_id: uuid.UUID) -> dict[str, str]:
    """Headers of a signed-in user."""
    return {"Authorization": f"Bearer {user_id}"}


@pytest.fixture
def guest_headers() -> dict[str, str]:
    """Headers of a guest browser session."""
    return {"X-Session-Id": f"session-{uuid.uuid4().hex[:8]}"}


@pytest.fixture
def user_ctx(user_id: uuid.UUID) -> RequestContext:
    return RequestContext(user_id=user_id)


@pytest.fixture
def guest_ctx() -> RequestContext:
    return RequestContext(user_id=None, session_id="guest-session")


@pytest_asyncio.fixture
async def sqlite_engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:  # type: ignore[no-untyped-def]
    """Async engine over a throwaway SQLite file with all tables created.

    Usage:
        async def test_something(sqlite_session):
            repo = SqlTripRepository(sqlite_session)
    """
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        poolclass=NullPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def sqlite_session(sqlite_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Async session bound to the SQLite test engine."""
    async with AsyncSession(sqlite_engine, expire_on_commit=False) as session:
        yield session
        await session.rollback()
