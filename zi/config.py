"""
Environment configuration.

Values come from the process environment, optionally seeded from a .env
file in the working directory.
"""

from __future__ import annotations

import os
from typing import Optional

from dotenv import load_dotenv

from zi.errors import InvalidInput

load_dotenv()

DEFAULT_DATABASE_URL = "sqlite:///logs/zi_learning.db"
PROD_DB_NAME = "zi_learning"
TEST_DB_NAME = "test_zi_learning"


def _env_flag(name: str) -> bool:
    return os.getenv(name, "false").lower() == "true"


def is_test_mode() -> bool:
    """Check if running in test mode."""
    return _env_flag("TEST_MODE")


def get_database_url() -> str:
    """
    Get the database URL from the environment.

    Falls back to a local SQLite file. In test mode the production database
    name in the URL is replaced with the test database name.
    """
    url = os.getenv("DATABASE_URL") or DEFAULT_DATABASE_URL
    if is_test_mode():
        return url.replace(PROD_DB_NAME, TEST_DB_NAME)
    return url


def get_rng_seed() -> Optional[int]:
    """
    Optional RNG seed (ZI_RNG_SEED) for reproducible runs.
    """
    raw = os.getenv("ZI_RNG_SEED")
    if raw is None or raw.strip() == "":
        return None
    try:
        return int(raw)
    except ValueError as exc:
        raise InvalidInput(f"ZI_RNG_SEED must be an integer, got {raw!r}") from exc


def is_premium_env() -> bool:
    """Static entitlement used by scripts (ZI_PREMIUM=true)."""
    return _env_flag("ZI_PREMIUM")
