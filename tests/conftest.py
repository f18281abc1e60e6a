"""
Global test configuration and fixtures.

This module contains only global fixtures that are shared across all test types.
Test-specific fixtures are located in their respective conftest.py files:
- tests/unit/conftest.py - Unit test fixtures with SQLite + mocks
- tests/integration/conftest.py - Concurrency tests against PostgreSQL
- tests/e2e/conftest.py - Full API tests over ASGITransport
"""

from datetime import datetime, timezone

import pytest


# Global sample data fixtures (no database dependencies)
@pytest.fixture
def sample_user_data():
    """Standard user registration data for API testing."""
    return {
        "email": "user@example.com",
        "username": "testuser",
        "password": "password123",
    }


@pytest.fixture
def sample_room_data():
    """Standard room creation data for API testing (times filled in by the test)."""
    return {
        "name": "Morning Standup",
        "type": "public",
        "topic": "Engineering",
        "description": "Daily sync",
        "max_participants": 10,
    }


@pytest.fixture
def fixed_now():
    """Frozen wall-clock instant used by clock-injected services."""
    return datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


# Pytest configuration
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests with mocked dependencies or SQLite (fast)")
    config.addinivalue_line("markers", "integration: Integration tests with real PostgreSQL (medium)")
    config.addinivalue_line("markers", "e2e: End-to-end tests with full API (slow)")


def pytest_collection_modifyitems(config, items):
    """Auto-mark tests based on their location."""
    for item in items:
        path = str(item.fspath)
        if "unit" in path:
            item.add_marker(pytest.mark.unit)
        elif "integration" in path:
            item.add_marker(pytest.mark.integration)
        elif "e2e" in path:
            item.add_marker(pytest.mark.e2e)
