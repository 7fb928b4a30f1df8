"""Unit tests for core/config.py -- Settings validation.

Covers:
- Defaults match the documented password policy
- Environment variables with the CREDCORE_ prefix override defaults
- bcrypt cost outside 4..31 and inverted length bounds are rejected
- Low cost outside DEBUG mode logs a warning
"""

import logging

import pytest
from pydantic import ValidationError

from core.config import Settings, get_settings


def test_defaults():
    s = Settings(_env_file=None, debug=True, bcrypt_rounds=12)
    assert s.password_min_length == 8
    assert s.password_max_length == 30
    assert s.database_url.startswith("sqlite:///")


def test_env_override(monkeypatch):
    monkeypatch.setenv("CREDCORE_BCRYPT_ROUNDS", "6")
    monkeypatch.setenv("CREDCORE_DATABASE_URL", "sqlite:///:memory:")
    s = Settings(_env_file=None)
    assert s.bcrypt_rounds == 6
    assert s.database_url == "sqlite:///:memory:"


@pytest.mark.parametrize("rounds", [3, 32])
def test_rounds_out_of_range_rejected(rounds):
    with pytest.raises(ValidationError, match="BCRYPT_ROUNDS"):
        Settings(_env_file=None, bcrypt_rounds=rounds)


def test_inverted_length_bounds_rejected():
    with pytest.raises(ValidationError, match="PASSWORD_MIN_LENGTH"):
        Settings(_env_file=None, password_min_length=20, password_max_length=10)


def test_low_cost_warns_outside_debug(caplog):
    with caplog.at_level(logging.WARNING, logger="credcore.config"):
        Settings(_env_file=None, debug=False, bcrypt_rounds=4)
    assert "below the recommended minimum" in caplog.text


def test_get_settings_is_cached():
    assert get_settings() is get_settings()
