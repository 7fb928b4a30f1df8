"""Unit tests for credentials/store.py -- SqlCredentialStore persistence.

Covers:
- insert_user() assigns sequential ids and stamps timestamps
- Case-insensitive uniqueness on insert and on email update (DuplicateEmail)
- select_user_by_email() is case-insensitive and keeps the stored spelling
- update_*_by_id() return affected row counts (0 for unknown ids)
- Uniqueness and lookup fold Unicode case, not just ASCII
- Unclassified database failures surface as StoreError
"""

import pytest
from sqlalchemy import text

from credentials.errors import DuplicateEmail, StoreError
from credentials.store import SqlCredentialStore


def test_insert_assigns_sequential_ids(store):
    first = store.insert_user("a@x.com", "$2b$04$hash-a")
    second = store.insert_user("b@x.com", "$2b$04$hash-b")
    assert (first, second) == (1, 2)


def test_insert_stamps_timestamps(store):
    user_id = store.insert_user("a@x.com", "$2b$04$hash-a")
    user = store.select_user_by_id(user_id)
    assert user.created_at
    assert user.updated_at == user.created_at


def test_insert_duplicate_email_raises(store):
    store.insert_user("a@x.com", "$2b$04$hash-a")
    with pytest.raises(DuplicateEmail) as exc_info:
        store.insert_user("a@x.com", "$2b$04$hash-b")
    assert exc_info.value.email == "a@x.com"


def test_insert_duplicate_email_differing_case_raises(store):
    store.insert_user("a@x.com", "$2b$04$hash-a")
    with pytest.raises(DuplicateEmail):
        store.insert_user("A@X.COM", "$2b$04$hash-b")


def test_select_by_email_is_case_insensitive(store):
    user_id = store.insert_user("Mixed.Case@x.com", "$2b$04$hash-a")
    user = store.select_user_by_email("mixed.case@X.COM")
    assert user is not None
    assert user.id == user_id
    assert user.email == "Mixed.Case@x.com"


def test_select_missing_returns_none(store):
    assert store.select_user_by_email("nobody@x.com") is None
    assert store.select_user_by_id(42) is None


def test_update_password_by_id(store):
    user_id = store.insert_user("a@x.com", "$2b$04$hash-a")
    assert store.update_password_by_id(user_id, "$2b$04$hash-new") == 1
    assert store.select_user_by_id(user_id).password_hash == "$2b$04$hash-new"


def test_update_unknown_id_affects_nothing(store):
    assert store.update_password_by_id(99, "$2b$04$hash") == 0
    assert store.update_email_by_id(99, "z@x.com") == 0


def test_update_email_by_id_keeps_id(store):
    user_id = store.insert_user("a@x.com", "$2b$04$hash-a")
    assert store.update_email_by_id(user_id, "b@x.com") == 1
    assert store.select_user_by_email("a@x.com") is None
    assert store.select_user_by_email("b@x.com").id == user_id


def test_update_email_collision_raises(store):
    store.insert_user("a@x.com", "$2b$04$hash-a")
    other = store.insert_user("b@x.com", "$2b$04$hash-b")
    with pytest.raises(DuplicateEmail):
        store.update_email_by_id(other, "A@x.com")
    assert store.select_user_by_id(other).email == "b@x.com"


def test_update_own_email_case_only_is_allowed(store):
    user_id = store.insert_user("a@x.com", "$2b$04$hash-a")
    assert store.update_email_by_id(user_id, "A@x.com") == 1
    assert store.select_user_by_id(user_id).email == "A@x.com"


def test_missing_table_surfaces_as_store_error():
    s = SqlCredentialStore("sqlite:///:memory:")
    with s.engine.connect() as conn:
        conn.execute(text("DROP TABLE auth_users"))
        conn.commit()
    with pytest.raises(StoreError):
        s.select_user_by_email("a@x.com")
    s.close()


def test_insert_duplicate_email_differing_unicode_case_raises(store):
    """SQL lower() folds ASCII only; the uniqueness key must fold Unicode too."""
    first = store.insert_user("Ärger@x.com", "$2b$04$hash-a")
    with pytest.raises(DuplicateEmail):
        store.insert_user("ärger@x.com", "$2b$04$hash-b")
    assert store.select_user_by_email("ÄRGER@X.COM").id == first


def test_update_email_collision_differing_unicode_case_raises(store):
    store.insert_user("Ärger@x.com", "$2b$04$hash-a")
    other = store.insert_user("b@x.com", "$2b$04$hash-b")
    with pytest.raises(DuplicateEmail):
        store.update_email_by_id(other, "ärger@x.com")
