"""
credentials/manager.py -- Registration, authentication and credential changes.

CredentialManager composes a CredentialStore and the validate_* functions.
Each public operation is one request/response transaction:

    validate -> (authenticate) -> hash -> one store statement

Ordering guarantees:
  Self-service changes (change_password, change_email) authenticate before
  any mutation. An authentication failure propagates unchanged and the store
  is never written.

  Administrative changes (force_change_password, force_change_email) skip
  authentication. Callers MUST have verified the actor's authority out of
  band; that contract is not enforced here.

Authentication [timing]:
  authenticate() always runs exactly one bcrypt verification. For an unknown
  email it verifies against dummy_hash() at the configured cost, then raises
  the same InvalidCredentials as a wrong password. Neither the error nor the
  response time reveals whether the email exists.

The manager holds no mutable state beyond its store handle and settings, so
one instance may be shared by concurrent callers.
"""

from __future__ import annotations

import logging

from core.config import Settings, get_settings
from credentials.errors import InvalidCredentials, UserNotFound, ValidationError
from credentials.hashing import dummy_hash, hash_password, verify_password
from credentials.models import (
    AuthenticateArgs,
    ChangeEmailArgs,
    ChangePasswordArgs,
    ForceChangeEmailArgs,
    ForceChangePasswordArgs,
    RegisterArgs,
    User,
    Violation,
)
from credentials.store import CredentialStore, SqlCredentialStore
from credentials.validation import (
    validate_authenticate,
    validate_change_email,
    validate_change_password,
    validate_force_change_email,
    validate_force_change_password,
    validate_register,
)

logger = logging.getLogger("credcore.manager")


def _raise_if_invalid(violations: list[Violation]) -> None:
    if violations:
        raise ValidationError(violations)


class CredentialManager:
    """Credential operations over a CredentialStore.

    Usage:
        manager = CredentialManager(SqlCredentialStore("sqlite:///:memory:"))
        user_id = manager.register(RegisterArgs("a@x.com", "password1", "password1"))
        assert manager.authenticate(AuthenticateArgs("a@x.com", "password1")) == user_id

    Raises ValueError at construction if store is None.
    """

    def __init__(self, store: CredentialStore, settings: Settings | None = None) -> None:
        if store is None:
            raise ValueError("store can't be None")
        self.store = store
        self.settings = settings or get_settings()
        # Computed now so the first unknown-email login costs one verify, not hash + verify
        dummy_hash(self.settings.bcrypt_rounds)

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> CredentialManager:
        """Build a manager backed by a SqlCredentialStore at settings.database_url."""
        settings = settings or get_settings()
        return cls(SqlCredentialStore(settings.database_url), settings)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @property
    def _length_bounds(self) -> dict:
        return {
            "min_length": self.settings.password_min_length,
            "max_length": self.settings.password_max_length,
        }

    def _hash(self, plain: str) -> str:
        return hash_password(plain, self.settings.bcrypt_rounds)

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    def register(self, args: RegisterArgs) -> int:
        """Create a record and return its id.

        Raises ValidationError, DuplicateEmail (decided by the store's unique
        index, not pre-checked), HashingError, or StoreError.
        """
        _raise_if_invalid(validate_register(args, **self._length_bounds))
        user_id = self.store.insert_user(args.email, self._hash(args.password))
        logger.info("Registered user id=%d", user_id)
        return user_id

    def authenticate(self, args: AuthenticateArgs) -> int:
        """Return the record id if email and password match.

        Raises ValidationError on malformed input, otherwise InvalidCredentials
        for both an unknown email and a wrong password.
        """
        _raise_if_invalid(validate_authenticate(args))
        user = self.store.select_user_by_email(args.email)
        if user is None:
            # Equalize timing -- do NOT return before running bcrypt
            verify_password(args.password, dummy_hash(self.settings.bcrypt_rounds))
            logger.warning("Authentication failed")
            raise InvalidCredentials()
        if not verify_password(args.password, user.password_hash):
            logger.warning("Authentication failed")
            raise InvalidCredentials()
        return user.id

    def change_password(self, args: ChangePasswordArgs) -> None:
        """Re-authenticate with the current password, then store a hash of the NEW password."""
        _raise_if_invalid(validate_change_password(args, **self._length_bounds))
        user_id = self.authenticate(AuthenticateArgs(email=args.email, password=args.password))
        self._update_password(user_id, args.new_password)

    def change_email(self, args: ChangeEmailArgs) -> None:
        """Re-authenticate, then move the record to the new email.

        Raises DuplicateEmail if the new email belongs to another record.
        """
        _raise_if_invalid(validate_change_email(args))
        user_id = self.authenticate(AuthenticateArgs(email=args.email, password=args.password))
        self._update_email(user_id, args.new_email)

    def force_change_password(self, args: ForceChangePasswordArgs) -> None:
        """Administrative password change by id, without re-authentication.

        Raises UserNotFound if no record has the id.
        """
        _raise_if_invalid(validate_force_change_password(args, **self._length_bounds))
        self._update_password(args.user_id, args.new_password)

    def force_change_email(self, args: ForceChangeEmailArgs) -> None:
        """Administrative email change by id, without re-authentication.

        Raises UserNotFound if no record has the id, DuplicateEmail on collision.
        """
        _raise_if_invalid(validate_force_change_email(args))
        self._update_email(args.user_id, args.new_email)

    def get_user(self, user_id: int) -> User:
        """Return the stored record for user_id. Raises UserNotFound if absent."""
        user = self.store.select_user_by_id(user_id)
        if user is None:
            raise UserNotFound(user_id)
        return user

    # ------------------------------------------------------------------
    # Mutations shared by self-service and administrative paths
    # ------------------------------------------------------------------

    def _update_password(self, user_id: int, new_password: str) -> None:
        if self.store.update_password_by_id(user_id, self._hash(new_password)) == 0:
            raise UserNotFound(user_id)
        logger.info("Password changed for user id=%d", user_id)

    def _update_email(self, user_id: int, new_email: str) -> None:
        if self.store.update_email_by_id(user_id, new_email) == 0:
            raise UserNotFound(user_id)
        logger.info("Email changed for user id=%d", user_id)
