"""
E2E test fixtures: the FastAPI app over httpx ASGITransport.

- PostgreSQL (asyncpg, NullPool) when DATABASE_URL points at PostgreSQL
- SQLite in-memory (aiosqlite, StaticPool) otherwise
- Every request gets its own session, as in production
- The realtime broadcaster is replaced by a mock so emits can be asserted
"""

import os

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool, StaticPool

from main import app
from roomloop.core.database import Base, get_db
from roomloop.models.user import User
from roomloop.realtime.realtime_dependencies import get_broadcaster
from tests.fixtures import RoomFactory, create_mock_broadcaster
from tests.fixtures.api import register

# ============================================================================
# Database Fixtures
# ============================================================================


def _database_url() -> str | None:
    url = os.getenv("DATABASE_URL")
    if not url or not url.startswith(("postgresql://", "postgresql+asyncpg://")):
        return None
    if url.startswith("postgresql://"):
        url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


@pytest_asyncio.fixture(loop_scope="function")
async def e2e_engine():
    """
    Engine for E2E tests. Schema is created/dropped per test for complete isolation.
    """
    database_url = _database_url()
    if database_url:
        engine = create_async_engine(database_url, poolclass=NullPool, echo=False)
    else:
        engine = create_async_engine(
            "sqlite+aiosqlite:///:memory:",
            poolclass=StaticPool,
            echo=False,
            connect_args={"check_same_thread": False},
        )

        @event.listens_for(engine.sync_engine, "connect")
        def set_sqlite_pragma(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(e2e_engine):
    return async_sessionmaker(e2e_engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    """Session for arranging and inspecting rows outside the HTTP requests."""
    async with session_factory() as session:
        yield session


# ============================================================================
# FastAPI HTTP Client Fixtures
# ============================================================================


@pytest.fixture
def mock_broadcaster():
    return create_mock_broadcaster()


@pytest_asyncio.fixture
async def async_client(session_factory, mock_broadcaster):
    """
    Async HTTP client with get_db and get_broadcaster overridden.
    """

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_broadcaster] = lambda: mock_broadcaster

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        yield client

    app.dependency_overrides.clear()


# ============================================================================
# Users and Rooms
# ============================================================================


@pytest_asyncio.fixture
async def registered_user(async_client, sample_user_data):
    response = await async_client.post("/api/auth/register", json=sample_user_data)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def auth_headers(registered_user):
    return {"Authorization": f"Bearer {registered_user['token']}"}


@pytest_asyncio.fixture
async def host(async_client):
    return await register(async_client, "hostuser")


@pytest.fixture
def make_room(db_session, host):
    """Insert a room hosted by `host` directly, bypassing the start-time check."""

    async def _make_room(**kwargs):
        host_user = await db_session.get(User, host["user"]["id"])
        return await RoomFactory.create(db_session, host_user, **kwargs)

    return _make_room
