"""
credentials/models.py -- Domain dataclasses for credential entities and inputs.

Pattern: Data class (pure data container, zero logic). Dataclasses own the
domain shape; validation.py checks the input structs, store.py persists the
User record, manager.py does the work. The one exception is email_key(), a
domain rule shared by validation.py and store.py.

Layer rule: no imports from manager.py or store.py.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class User:
    """A persisted row of the auth_users table.

    password_hash is always a bcrypt hash string, never a plaintext password.
    id is None only before the record is written to the database.
    """

    email: str
    password_hash: str
    id: int | None = None
    created_at: str | None = None  # ISO 8601, set by store on insert
    updated_at: str | None = None  # ISO 8601, set by store on every update


@dataclass
class Violation:
    """One failed constraint on one input field.

    rule is the machine-readable constraint name ("required", "email",
    "min_length", "max_length", "max_bytes", "equals_field",
    "not_equals_field", "positive"); message is the human-readable form.
    """

    field: str
    rule: str
    message: str


# ---------------------------------------------------------------------------
# Operation inputs
# ---------------------------------------------------------------------------


@dataclass
class RegisterArgs:
    email: str
    password: str
    password_confirm: str


@dataclass
class AuthenticateArgs:
    email: str
    password: str


@dataclass
class ChangePasswordArgs:
    """Self-service password change. password is the current plaintext."""

    email: str
    password: str
    new_password: str
    new_password_confirm: str


@dataclass
class ChangeEmailArgs:
    """Self-service email change. email/password re-authenticate the caller."""

    email: str
    password: str
    new_email: str
    new_email_confirm: str


@dataclass
class ForceChangePasswordArgs:
    """Administrative password change. No re-authentication is performed."""

    user_id: int
    new_password: str
    new_password_confirm: str


@dataclass
class ForceChangeEmailArgs:
    """Administrative email change. No re-authentication is performed."""

    user_id: int
    new_email: str
    new_email_confirm: str


# ---------------------------------------------------------------------------
# Domain rules
# ---------------------------------------------------------------------------


def email_key(email: str) -> str:
    """Uniqueness key for an email address: full Unicode case folding.

    Two addresses are the same account iff their keys are equal. The store
    indexes this key and validation compares with it, so both agree.
    """
    return email.casefold()
