"""Shared fixtures."""

from datetime import datetime, timezone

import pytest

from eduthree.persistence import close_database, init_database

NOW = datetime(2025, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def database():
    """Fresh in-memory SQLite store with the schema created."""
    init_database("sqlite:///:memory:")
    yield
    close_database()


@pytest.fixture
def fixed_now():
    """Fixed clock reading for window calculations."""
    return NOW
