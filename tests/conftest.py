"""Shared fixtures for Splitly tests."""

import pytest

from splitly.config import Settings
from splitly.db import Database
from splitly.service import LedgerService


@pytest.fixture
def mock_settings(tmp_path):
    """Create settings pointing at a temporary database."""
    return Settings(database_path=tmp_path / "splitly" / "test.db")


@pytest.fixture
def mock_db(mock_settings):
    """Create a temporary database."""
    db = Database(mock_settings.database_path)
    yield db
    db.close()


@pytest.fixture
def service(mock_settings, mock_db):
    """Create a LedgerService instance."""
    return LedgerService(mock_settings, mock_db)
