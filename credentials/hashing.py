"""
credentials/hashing.py -- bcrypt password hashing and verification.

Security design decisions:
  bcrypt is used directly (no passlib wrapper). Its cost factor makes each
  guess expensive, which is the point: stored hashes must resist offline
  brute force. The cost comes from Settings.bcrypt_rounds.

  bcrypt.checkpw() compares in constant time. verify_password() never raises
  on a malformed hash or over-long input -- both are simply a non-match, so
  callers only ever see True/False.

  dummy_hash() supplies a hash at the configured cost for timing equalization
  when an email does not exist: the caller still pays one bcrypt verification,
  so response time does not reveal whether an account exists.

  bcrypt only reads the first 72 bytes of its input. validation.py rejects new
  passwords longer than MAX_PASSWORD_BYTES so no two distinct accepted
  passwords can collide on a truncated prefix.
"""

from __future__ import annotations

import logging
from functools import lru_cache

import bcrypt

from credentials.errors import HashingError

logger = logging.getLogger("credcore.hashing")

MAX_PASSWORD_BYTES = 72


def hash_password(plain: str, rounds: int = 12) -> str:
    """Return a salted bcrypt hash of the plaintext password.

    Raises HashingError if salt generation or hashing fails. With valid input
    that only happens when the OS entropy source is unavailable, which the
    caller should treat as fatal.
    """
    try:
        salt = bcrypt.gensalt(rounds=rounds)
        return bcrypt.hashpw(plain.encode("utf-8"), salt).decode("utf-8")
    except (OSError, ValueError) as exc:
        logger.error("bcrypt hashing failed: %s", type(exc).__name__)
        raise HashingError("Password hashing failed") from exc


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash."""
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        return False


@lru_cache
def dummy_hash(rounds: int) -> str:
    """Return a throwaway hash at the given cost, computed once per cost."""
    return hash_password("credcore_timing_dummy", rounds)
