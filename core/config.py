"""
core/config.py -- Centralized configuration via pydantic-settings.

All environment variable reads for the credential core happen here. No module
should call os.getenv() or os.environ.get() directly -- import get_settings()
instead.

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call.

  BaseSettings (pydantic-settings): Reads values from environment variables
      and an optional .env file automatically. Field names map to env var names
      with the CREDCORE_ prefix (e.g. bcrypt_rounds -> CREDCORE_BCRYPT_ROUNDS).

  @model_validator(mode="after"): Cross-field validation after all fields are
      resolved. Rejects bcrypt cost factors outside the algorithm's range and
      inverted password length bounds.

Security notes:
  bcrypt_rounds is the adaptive work factor. Every +1 doubles the hashing
  cost. Values below 10 are only acceptable in tests and local development;
  outside DEBUG mode a low value is logged as a warning at startup.

Layer rule: core/ is the kernel. This module may not import from credentials/.
"""

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("credcore.config")

_DEFAULT_DB_URL = f"sqlite:///{Path(__file__).resolve().parent.parent / 'credcore_auth.db'}"

# bcrypt encodes the cost as a two-digit log2 value; 4 and 31 are the
# limits the C implementation accepts.
BCRYPT_MIN_ROUNDS = 4
BCRYPT_MAX_ROUNDS = 31


class Settings(BaseSettings):
    """Credential core settings loaded from environment variables and .env file.

    All fields have defaults so Settings() can be instantiated in test
    environments without a real .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="CREDCORE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Core
    # ------------------------------------------------------------------

    debug: bool = False
    database_url: str = _DEFAULT_DB_URL

    # ------------------------------------------------------------------
    # Password policy
    # ------------------------------------------------------------------

    # 12 matches the bcrypt library's gensalt() default.
    bcrypt_rounds: int = 12
    password_min_length: int = 8
    password_max_length: int = 30

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def validate_password_policy(self) -> "Settings":
        """Reject a bcrypt cost outside 4..31 and inverted length bounds.

        A cost below 10 is allowed (tests need fast hashing) but outside
        DEBUG mode it is logged as a warning because it weakens the offline
        brute-force protection the hash exists to provide.
        """
        if not BCRYPT_MIN_ROUNDS <= self.bcrypt_rounds <= BCRYPT_MAX_ROUNDS:
            raise ValueError(
                f"BCRYPT_ROUNDS must be between {BCRYPT_MIN_ROUNDS} and {BCRYPT_MAX_ROUNDS}, "
                f"got {self.bcrypt_rounds}."
            )
        if self.password_min_length < 1:
            raise ValueError("PASSWORD_MIN_LENGTH must be at least 1.")
        if self.password_min_length > self.password_max_length:
            raise ValueError("PASSWORD_MIN_LENGTH must not exceed PASSWORD_MAX_LENGTH.")
        if self.bcrypt_rounds < 10 and not self.debug:
            logger.warning(
                "WARNING: bcrypt cost factor %d is below the recommended minimum of 10.", self.bcrypt_rounds
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the Settings singleton.

    Uses lru_cache so Settings() is instantiated exactly once -- at first call.
    All modules should call get_settings() rather than constructing Settings()
    directly, except tests that need a one-off configuration.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    return Settings()
