"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files

DEFAULT_CSV_PATH = "./data/users.csv"
DEFAULT_BATCH_SIZE = 1000
DEFAULT_PORT = 3000


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_positive_int_env(name: str, default: int) -> int:
    """
    Read a positive integer; missing, malformed or non-positive values fall back to ``default``.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        value = int(raw_value.strip(), 10)
    except ValueError:
        return default
    return value if value > 0 else default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


@dataclass(frozen=True)
class ImportSettings:
    """
    Runtime settings for the CSV import pipeline.
    """

    csv_path: str = DEFAULT_CSV_PATH
    batch_size: int = DEFAULT_BATCH_SIZE
    max_validation_errors: int = 500
    log_validation_errors: bool = True
    import_on_startup: bool = True


@dataclass(frozen=True)
class ServerSettings:
    """
    HTTP listener settings.
    """

    port: int = DEFAULT_PORT


@lru_cache(maxsize=1)
def get_import_settings() -> ImportSettings:
    """
    Return cached import settings.
    """

    return ImportSettings(
        csv_path=_get_str_env("CSV_PATH", DEFAULT_CSV_PATH),
        batch_size=_get_positive_int_env("BATCH_SIZE", DEFAULT_BATCH_SIZE),
        max_validation_errors=_get_positive_int_env("MAX_VALIDATION_ERRORS", 500),
        log_validation_errors=_get_bool_env("LOG_VALIDATION_ERRORS", True),
        import_on_startup=_get_bool_env("IMPORT_ON_STARTUP", True),
    )


@lru_cache(maxsize=1)
def get_server_settings() -> ServerSettings:
    """
    Return cached HTTP listener settings.
    """

    return ServerSettings(port=_get_positive_int_env("PORT", DEFAULT_PORT))
