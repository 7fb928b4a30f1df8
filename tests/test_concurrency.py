"""Concurrency tests for credential uniqueness.

Covers:
- Concurrent registrations of one email: exactly one succeeds, the rest get DuplicateEmail
- One shared CredentialManager serves concurrent authentications
- A named shared-cache in-memory store is readable from other threads

A file-backed SQLite database is used (not :memory:) because SQLAlchemy gives
each thread its own connection, and a plain in-memory database is
per-connection.
"""

from concurrent.futures import ThreadPoolExecutor

import pytest

from credentials.errors import DuplicateEmail
from credentials.manager import CredentialManager
from credentials.models import AuthenticateArgs, RegisterArgs
from credentials.store import SqlCredentialStore


@pytest.fixture
def file_manager(tmp_path, settings):
    store = SqlCredentialStore(f"sqlite:///{tmp_path / 'auth.db'}")
    yield CredentialManager(store, settings)
    store.close()


def test_concurrent_duplicate_registration_has_one_winner(file_manager):
    def attempt(_):
        try:
            return file_manager.register(RegisterArgs("race@mail.com", "password1", "password1"))
        except DuplicateEmail:
            return None

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(attempt, range(8)))

    winners = [r for r in results if r is not None]
    assert len(winners) == 1
    assert file_manager.authenticate(AuthenticateArgs("race@mail.com", "password1")) == winners[0]


def test_shared_manager_concurrent_authentication(file_manager):
    user_id = file_manager.register(RegisterArgs("shared@mail.com", "password1", "password1"))

    def attempt(_):
        return file_manager.authenticate(AuthenticateArgs("shared@mail.com", "password1"))

    with ThreadPoolExecutor(max_workers=4) as pool:
        results = list(pool.map(attempt, range(8)))

    assert results == [user_id] * 8


def test_shared_cache_memory_store_is_visible_across_threads():
    """A named shared-cache URI gives every pooled connection the same in-memory DB."""
    store = SqlCredentialStore("sqlite:///file:credcore_threads?mode=memory&cache=shared&uri=true")
    user_id = store.insert_user("threads@mail.com", "$2b$04$hash")

    with ThreadPoolExecutor(max_workers=1) as pool:
        user = pool.submit(store.select_user_by_email, "threads@mail.com").result()

    assert user.id == user_id
    store.close()
