"""
tests/conftest.py -- Shared fixtures for credential core tests.

This module provides:
  - store: a SqlCredentialStore on a fresh in-memory SQLite database
  - manager: a CredentialManager wired to that store

The bcrypt cost env var must be set before any core/credentials import so
get_settings() picks up the fast test cost instead of the production default.
DEBUG suppresses the low-cost warning.
"""

from __future__ import annotations

import os
from collections.abc import Generator

# CRITICAL: Set before any core/credentials import so get_settings() sees them.
os.environ.setdefault("CREDCORE_BCRYPT_ROUNDS", "4")
os.environ.setdefault("CREDCORE_DEBUG", "true")

import pytest

from core.config import Settings
from credentials.manager import CredentialManager
from credentials.store import SqlCredentialStore


@pytest.fixture
def settings() -> Settings:
    return Settings(bcrypt_rounds=4, debug=True)


@pytest.fixture
def store() -> Generator[SqlCredentialStore, None, None]:
    """Isolated in-memory store. Each test gets a blank auth_users table."""
    s = SqlCredentialStore("sqlite:///:memory:")
    yield s
    s.close()


@pytest.fixture
def manager(store: SqlCredentialStore, settings: Settings) -> CredentialManager:
    return CredentialManager(store, settings)

