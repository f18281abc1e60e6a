"""
Unit test fixtures with SQLite and mocked dependencies.

- No event_loop fixture (removed in pytest-asyncio 1.x)
- Clean separation: SQLite for ledger and query tests, mocks for service rules
"""

import pytest
import pytest_asyncio
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from roomloop.core.config import Settings
from roomloop.core.database import Base
from roomloop.repositories.room_participant_repository import RoomParticipantRepository
from roomloop.repositories.room_repository import RoomRepository
from roomloop.repositories.user_repository import UserRepository
from roomloop.services.room_service import RoomService
from tests.fixtures import MockRepositories, ParticipantFactory, RoomFactory, UserFactory, create_mock_broadcaster

# ============================================================================
# Database Fixtures (SQLite in-memory)
# ============================================================================


@pytest_asyncio.fixture(loop_scope="function")
async def unit_engine():
    """
    SQLite in-memory engine for unit tests.

    Uses StaticPool to maintain in-memory database during test.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        echo=False,
        connect_args={"check_same_thread": False},
    )

    # Enable foreign key constraints for SQLite
    @event.listens_for(engine.sync_engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(unit_engine):
    """Isolated database session for each unit test."""
    async with AsyncSession(unit_engine, expire_on_commit=False) as session:
        yield session


# ============================================================================
# Mock Fixtures
# ============================================================================


@pytest.fixture
def test_settings():
    """Settings independent of the developer's environment."""
    return Settings(_env_file=None, secret_key="unit-test-secret", realtime_require_auth=False)


@pytest.fixture
def mock_repositories():
    return MockRepositories()


@pytest.fixture
def mock_broadcaster():
    return create_mock_broadcaster()


@pytest.fixture
def room_service(mock_repositories, mock_broadcaster, test_settings, fixed_now):
    """RoomService wired to repository mocks and a frozen clock."""
    return RoomService(
        room_repo=mock_repositories.room_repo,
        participant_repo=mock_repositories.participant_repo,
        broadcaster=mock_broadcaster,
        config=test_settings,
        clock=lambda: fixed_now,
    )


# ============================================================================
# Repository / Service over SQLite
# ============================================================================


@pytest.fixture
def room_repo(db_session):
    return RoomRepository(db_session)


@pytest.fixture
def participant_repo(db_session):
    return RoomParticipantRepository(db_session)


@pytest.fixture
def user_repo(db_session):
    return UserRepository(db_session)


@pytest.fixture
def ledger_service(room_repo, participant_repo, mock_broadcaster, test_settings):
    """RoomService backed by real repositories on SQLite."""
    return RoomService(
        room_repo=room_repo,
        participant_repo=participant_repo,
        broadcaster=mock_broadcaster,
        config=test_settings,
    )


# ============================================================================
# Factory Fixtures
# ============================================================================


@pytest.fixture
def user_factory():
    return UserFactory


@pytest.fixture
def room_factory():
    return RoomFactory


@pytest.fixture
def participant_factory():
    return ParticipantFactory


@pytest_asyncio.fixture
async def test_user(db_session, user_factory):
    """Quick access to a test user for simple unit tests."""
    return await user_factory.create(db_session)


@pytest_asyncio.fixture
async def host_user(db_session, user_factory):
    return await user_factory.create(db_session, username="host", email="host@example.com")
