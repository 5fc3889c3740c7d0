"""
app/config.py

Application-level configuration helpers for the ESG reporting pipeline.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files

_ALLOWED_STORE_BACKENDS = {"memory", "database"}
_ALLOWED_STATUSES = {"Pending", "Submitted", "Failed"}


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


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped or default


def _require_choice(name: str, default: str, allowed: set[str]) -> str:
    value = _get_str_env(name, default)
    if value not in allowed:
        raise RuntimeError(
            f"{name} '{value}' is not valid. Allowed values: {sorted(allowed)}."
        )
    return value


@dataclass(frozen=True)
class EngineSettings:
    """
    Runtime settings for loading, recomputing and scheduling ESG rollups.
    """

    default_status: str
    store_backend: str
    recompute_interval_minutes: int
    scheduler_enabled: bool
    log_level: str


@lru_cache(maxsize=1)
def get_engine_settings() -> EngineSettings:
    """
    Return cached engine settings.

    Raises RuntimeError when ESG_DEFAULT_STATUS or ESG_STORE_BACKEND holds
    an unsupported value.
    """

    interval = _get_int_env("ESG_RECOMPUTE_INTERVAL_MINUTES", 15)
    return EngineSettings(
        default_status=_require_choice("ESG_DEFAULT_STATUS", "Submitted", _ALLOWED_STATUSES),
        store_backend=_require_choice("ESG_STORE_BACKEND", "database", _ALLOWED_STORE_BACKENDS),
        recompute_interval_minutes=max(1, interval),
        scheduler_enabled=_get_bool_env("ESG_SCHEDULER_ENABLED", True),
        log_level=_get_str_env("LOG_LEVEL", "INFO").upper(),
    )


def configure_logging(level: str | None = None) -> None:
    """
    Install a basic root handler for scripts and scheduler processes.
    """

    resolved = (level or get_engine_settings().log_level).upper()
    logging.basicConfig(
        level=getattr(logging, resolved, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
