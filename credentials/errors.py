"""
credentials/errors.py -- Exception taxonomy for credential operations.

Every failure a CredentialManager operation can produce is a subclass of
CredentialError, so callers can catch the whole family in one clause and
still branch on the concrete type.

InvalidCredentials deliberately covers both "unknown email" and "wrong
password". Callers must not be able to tell the two apart.
"""

from __future__ import annotations

from credentials.models import Violation


class CredentialError(Exception):
    """Base class for all credential-core failures."""


class ValidationError(CredentialError):
    """Input failed one or more field constraints.

    violations holds one Violation per failed (field, rule) pair, in the
    order the fields were checked.
    """

    def __init__(self, violations: list[Violation]) -> None:
        self.violations = violations
        summary = "; ".join(f"{v.field}: {v.message}" for v in violations)
        super().__init__(f"Invalid input: {summary}")

    @property
    def fields(self) -> set[str]:
        return {v.field for v in self.violations}


class InvalidCredentials(CredentialError):
    """Authentication failed (unknown email or wrong password)."""

    def __init__(self) -> None:
        super().__init__("Invalid email or password.")


class DuplicateEmail(CredentialError):
    """The email is already taken by another record."""

    def __init__(self, email: str) -> None:
        self.email = email
        super().__init__(f"Email already registered: {email!r}")


class UserNotFound(CredentialError):
    """No record exists for the given id."""

    def __init__(self, user_id: int) -> None:
        self.user_id = user_id
        super().__init__(f"No user with id {user_id}")


class HashingError(CredentialError):
    """Password hashing failed (entropy source or bcrypt backend failure)."""


class StoreError(CredentialError):
    """Unclassified credential store failure. The original error is chained."""
