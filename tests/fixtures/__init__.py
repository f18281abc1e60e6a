"""
Test fixtures and utilities for the RoomLoop test suite.

- Unit tests: Fast, isolated, mocked dependencies or in-memory SQLite
- Integration tests: Row locking and constraints against PostgreSQL
- E2E tests: Full API testing through the FastAPI app
"""

from .factories import ParticipantFactory, RoomFactory, UserFactory
from .mocks import MockRepositories, create_mock_broadcaster

__all__ = [
    "UserFactory",
    "RoomFactory",
    "ParticipantFactory",
    "MockRepositories",
    "create_mock_broadcaster",
]
