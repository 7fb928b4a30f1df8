"""
credentials/store.py -- SQLAlchemy Core persistence layer for credentials.

Pattern: Repository + Data Mapper.
CredentialStore is the narrow interface the manager depends on (the four
insert/select/update operations plus a read by id). SqlCredentialStore is
the SQLAlchemy implementation; _row_to_user is the mapper. Manager code never
touches SQL directly, so the store technology can be swapped without touching
credential logic.

Security:
  All queries use bound parameters. No f-strings in SQL.

Uniqueness:
  Emails are unique case-insensitively. The email_key column holds
  models.email_key(email), Unicode case folding done in Python rather than SQL
  lower() (SQLite folds ASCII only), and carries the UNIQUE constraint. The
  database, not a check-then-insert in Python, decides which of two concurrent
  registrations for the same address wins. The loser gets IntegrityError,
  translated to DuplicateEmail. The email column keeps the caller's original
  spelling; lookups go through email_key.

Error translation:
  IntegrityError  -> DuplicateEmail
  SQLAlchemyError -> StoreError (original chained)

Every call takes a connection from the engine pool, executes one statement,
commits, and releases. No connection is held between calls.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Protocol

from sqlalchemy import Column, Integer, MetaData, String, Table, Text, create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from credentials.errors import DuplicateEmail, StoreError
from credentials.models import User, email_key

logger = logging.getLogger("credcore.store")

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_users = Table(
    "auth_users",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("email", String(320), nullable=False),  # RFC 5321 maximum
    Column("email_key", String(320), nullable=False, unique=True),  # email_key(email)
    Column("password_hash", Text, nullable=False),
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32), nullable=False),
)


# ---------------------------------------------------------------------------
# Interface
# ---------------------------------------------------------------------------


class CredentialStore(Protocol):
    """The store operations CredentialManager consumes.

    insert_user and update_email_by_id raise DuplicateEmail on a uniqueness
    violation. The update methods return the affected row count (0 when the
    id does not exist). Any other failure is StoreError.
    """

    def insert_user(self, email: str, password_hash: str) -> int: ...

    def select_user_by_email(self, email: str) -> User | None: ...

    def update_password_by_id(self, user_id: int, password_hash: str) -> int: ...

    def update_email_by_id(self, user_id: int, email: str) -> int: ...

    def select_user_by_id(self, user_id: int) -> User | None: ...


# ---------------------------------------------------------------------------
# WAL mode
# ---------------------------------------------------------------------------


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode so readers are not blocked during writes.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@contextmanager
def _translate_errors(operation: str, email: str | None = None) -> Iterator[None]:
    try:
        yield
    except IntegrityError as exc:
        if email is None:
            raise StoreError(f"{operation} violated a constraint") from exc
        raise DuplicateEmail(email) from exc
    except SQLAlchemyError as exc:
        logger.exception("Credential store failure during %s", operation)
        raise StoreError(f"{operation} failed") from exc


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class SqlCredentialStore:
    """SQLAlchemy Core implementation of CredentialStore.

    Usage:
        store = SqlCredentialStore("sqlite:///:memory:")
        user_id = store.insert_user("a@example.com", hash_password("password1"))
        user = store.select_user_by_email("A@Example.com")
        store.close()

    Threading: a plain "sqlite:///:memory:" URL gets one private database per
    thread (SQLAlchemy pools it per thread), so a store shared across threads
    would see an empty schema off the creating thread. Use a file URL or a
    named shared-cache URI such as
    "sqlite:///file:creds?mode=memory&cache=shared&uri=true" for shared use.
    """

    def __init__(self, db_url: str) -> None:
        connect_args: dict = {}
        if db_url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self.engine: Engine = create_engine(db_url, connect_args=connect_args)
        if db_url.startswith("sqlite"):
            event.listen(self.engine, "connect", _set_wal_mode)
        _metadata.create_all(self.engine)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def insert_user(self, email: str, password_hash: str) -> int:
        """Insert a new record and return its assigned id.

        Raises DuplicateEmail if email_key(email) already exists.
        """
        now = _now_iso()
        with _translate_errors("insert_user", email=email):
            with self.engine.connect() as conn:
                result = conn.execute(
                    _users.insert().values(
                        email=email,
                        email_key=email_key(email),
                        password_hash=password_hash,
                        created_at=now,
                        updated_at=now,
                    )
                )
                conn.commit()
        return result.inserted_primary_key[0]

    def update_password_by_id(self, user_id: int, password_hash: str) -> int:
        """Replace the stored hash. Returns the number of rows updated (0 or 1)."""
        with _translate_errors("update_password_by_id"):
            with self.engine.connect() as conn:
                result = conn.execute(
                    _users.update()
                    .where(_users.c.id == user_id)
                    .values(password_hash=password_hash, updated_at=_now_iso())
                )
                conn.commit()
        return result.rowcount

    def update_email_by_id(self, user_id: int, email: str) -> int:
        """Replace the stored email. Returns the number of rows updated (0 or 1).

        Raises DuplicateEmail if another record already holds email_key(email).
        """
        with _translate_errors("update_email_by_id", email=email):
            with self.engine.connect() as conn:
                result = conn.execute(
                    _users.update()
                    .where(_users.c.id == user_id)
                    .values(email=email, email_key=email_key(email), updated_at=_now_iso())
                )
                conn.commit()
        return result.rowcount

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def select_user_by_email(self, email: str) -> User | None:
        """Case-insensitive lookup by email. Returns None if not found."""
        with _translate_errors("select_user_by_email"):
            with self.engine.connect() as conn:
                row = conn.execute(
                    _users.select().where(_users.c.email_key == email_key(email))
                ).fetchone()
        return _row_to_user(row) if row is not None else None

    def select_user_by_id(self, user_id: int) -> User | None:
        """Look up a record by primary key. Returns None if not found."""
        with _translate_errors("select_user_by_id"):
            with self.engine.connect() as conn:
                row = conn.execute(_users.select().where(_users.c.id == user_id)).fetchone()
        return _row_to_user(row) if row is not None else None

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        email=row.email,
        password_hash=row.password_hash,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
