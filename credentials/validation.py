"""
credentials/validation.py -- Explicit input validation for credential operations.

One validate_* function per input struct. Each returns a list of Violation
records; an empty list means the input is valid. Nothing here raises -- the
manager turns a non-empty list into ValidationError.

Rules are small factories (required(), email(), length(8, 30), ...) that
return a checker callable. _check() runs a field's rules in order and stops
at the first failure, so an empty password reports "required" rather than
"required" plus "min_length".

Email syntax is checked with email-validator (no DNS lookups). Domains must
contain a dot, so "user@localhost"-style addresses are rejected.

Email comparisons use models.email_key(), the same Unicode case folding the
store indexes, so "must differ" here and "duplicate" there always agree.

Password length bounds default to Settings.password_min_length /
password_max_length; callers may pass explicit bounds.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Optional

from email_validator import EmailNotValidError, validate_email

from core.config import get_settings
from credentials.hashing import MAX_PASSWORD_BYTES
from credentials.models import (
    AuthenticateArgs,
    ChangeEmailArgs,
    ChangePasswordArgs,
    ForceChangeEmailArgs,
    ForceChangePasswordArgs,
    RegisterArgs,
    Violation,
    email_key,
)

Rule = Callable[[str, Any], Optional[Violation]]


# ---------------------------------------------------------------------------
# Rule factories
# ---------------------------------------------------------------------------


def required() -> Rule:
    def check(field: str, value: Any) -> Violation | None:
        if value is None or value == "":
            return Violation(field, "required", "is required")
        return None

    return check


def email() -> Rule:
    def check(field: str, value: Any) -> Violation | None:
        try:
            validate_email(value, check_deliverability=False)
        except EmailNotValidError as exc:
            return Violation(field, "email", f"is not a valid email address ({exc})")
        return None

    return check


def length(min_length: int, max_length: int) -> Rule:
    """Character-count bounds, inclusive on both ends."""

    def check(field: str, value: Any) -> Violation | None:
        if len(value) < min_length:
            return Violation(field, "min_length", f"must be at least {min_length} characters")
        if len(value) > max_length:
            return Violation(field, "max_length", f"must be at most {max_length} characters")
        return None

    return check


def max_bytes(limit: int) -> Rule:
    def check(field: str, value: Any) -> Violation | None:
        if len(value.encode("utf-8")) > limit:
            return Violation(field, "max_bytes", f"must be at most {limit} bytes when UTF-8 encoded")
        return None

    return check


def equals_field(other_field: str, other_value: Any) -> Rule:
    def check(field: str, value: Any) -> Violation | None:
        if value != other_value:
            return Violation(field, "equals_field", f"must match {other_field}")
        return None

    return check


def not_equals_field(other_field: str, other_value: Any, normalize: Callable[[Any], Any] | None = None) -> Rule:
    def check(field: str, value: Any) -> Violation | None:
        left, right = (normalize(value), normalize(other_value)) if normalize else (value, other_value)
        if left == right:
            return Violation(field, "not_equals_field", f"must differ from {other_field}")
        return None

    return check


def positive() -> Rule:
    def check(field: str, value: Any) -> Violation | None:
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            return Violation(field, "positive", "must be a positive integer")
        return None

    return check


def _check(field: str, value: Any, *rules: Rule) -> list[Violation]:
    for rule in rules:
        violation = rule(field, value)
        if violation is not None:
            return [violation]
    return []


def _new_password_rules(min_length: int | None, max_length: int | None) -> tuple[Rule, ...]:
    settings = get_settings()
    if min_length is None:
        min_length = settings.password_min_length
    if max_length is None:
        max_length = settings.password_max_length
    return required(), length(min_length, max_length), max_bytes(MAX_PASSWORD_BYTES)


# ---------------------------------------------------------------------------
# Per-input validators
# ---------------------------------------------------------------------------


def validate_register(
    args: RegisterArgs,
    min_length: int | None = None,
    max_length: int | None = None,
) -> list[Violation]:
    return [
        *_check("email", args.email, required(), email()),
        *_check("password", args.password, *_new_password_rules(min_length, max_length)),
        *_check("password_confirm", args.password_confirm, required(), equals_field("password", args.password)),
    ]


def validate_authenticate(args: AuthenticateArgs) -> list[Violation]:
    """Only presence and email syntax are checked.

    Length bounds are a registration policy; applying them here would turn a
    short wrong guess into a ValidationError instead of InvalidCredentials.
    """
    return [
        *_check("email", args.email, required(), email()),
        *_check("password", args.password, required()),
    ]


def validate_change_password(
    args: ChangePasswordArgs,
    min_length: int | None = None,
    max_length: int | None = None,
) -> list[Violation]:
    return [
        *_check("email", args.email, required(), email()),
        *_check("password", args.password, required()),
        *_check(
            "new_password",
            args.new_password,
            *_new_password_rules(min_length, max_length),
            not_equals_field("password", args.password),
        ),
        *_check(
            "new_password_confirm",
            args.new_password_confirm,
            required(),
            equals_field("new_password", args.new_password),
        ),
    ]


def validate_change_email(args: ChangeEmailArgs) -> list[Violation]:
    return [
        *_check("email", args.email, required(), email()),
        *_check("password", args.password, required()),
        *_check(
            "new_email",
            args.new_email,
            required(),
            email(),
            not_equals_field("email", args.email, normalize=email_key),
        ),
        *_check("new_email_confirm", args.new_email_confirm, required(), equals_field("new_email", args.new_email)),
    ]


def validate_force_change_password(
    args: ForceChangePasswordArgs,
    min_length: int | None = None,
    max_length: int | None = None,
) -> list[Violation]:
    return [
        *_check("user_id", args.user_id, required(), positive()),
        *_check("new_password", args.new_password, *_new_password_rules(min_length, max_length)),
        *_check(
            "new_password_confirm",
            args.new_password_confirm,
            required(),
            equals_field("new_password", args.new_password),
        ),
    ]


def validate_force_change_email(args: ForceChangeEmailArgs) -> list[Violation]:
    """The current email is not known here; sameness is left to the store (a no-op update)."""
    return [
        *_check("user_id", args.user_id, required(), positive()),
        *_check("new_email", args.new_email, required(), email()),
        *_check("new_email_confirm", args.new_email_confirm, required(), equals_field("new_email", args.new_email)),
    ]
