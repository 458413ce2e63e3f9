"""Central configuration for tm_stats_cache."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

_DEFAULT_API_BASE = "http://localhost:7071"
_DEFAULT_CACHE_DIR = "~/.cache/tm_stats_cache"


def _read_float(name: str, default: float) -> float:
    """Parse a float environment variable.

    Args:
        name: Environment variable name.
        default: Value used when the variable is unset, empty or invalid.

    Returns:
        The parsed value, or ``default``.

    Example:
        >>> os.environ["TM_HTTP_TIMEOUT_S"] = "2.5"
        >>> _read_float("TM_HTTP_TIMEOUT_S", 15.0)
        2.5
    """
    raw = (os.environ.get(name) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Invalid %s=%r; using %s", name, raw, default)
        return default


def _read_int(name: str, default: int) -> int:
    raw = (os.environ.get(name) or "").strip().replace("_", "")
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Invalid %s=%r; using %s", name, raw, default)
        return default


def _read_bool(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes"}


@dataclass
class Settings:
    """Configuration settings for tm_stats_cache.

    All settings are loaded from environment variables with sensible defaults.
    TTLs are kept in seconds here and converted to milliseconds by the caches.
    """

    API_BASE: str
    FUNCTIONS_KEY: str | None
    HTTP_TIMEOUT_S: float
    CACHE_DIR: Path
    CACHE_DISABLED: bool
    STORAGE_QUOTA_BYTES: int
    MAX_ENTRY_BYTES: int
    COLLECTION_TTL_S: float
    OPTIONS_TTL_S: float


def _read_settings() -> Settings:
    """Read all configuration from environment variables.

    Returns:
        Settings object with all configuration values.

    Note:
        Invalid numeric values fall back to sensible defaults.
        Boolean values accept: 1/true/yes (case-insensitive) as True.
    """
    api_base = (os.environ.get("TM_API_BASE") or _DEFAULT_API_BASE).strip()
    functions_key = os.environ.get("TM_FUNCTIONS_KEY") or None
    cache_dir = Path(
        os.environ.get("TM_CACHE_DIR") or _DEFAULT_CACHE_DIR
    ).expanduser()

    return Settings(
        API_BASE=api_base,
        FUNCTIONS_KEY=functions_key,
        HTTP_TIMEOUT_S=_read_float("TM_HTTP_TIMEOUT_S", 15.0),
        CACHE_DIR=cache_dir,
        CACHE_DISABLED=_read_bool("TM_CACHE_DISABLED"),
        STORAGE_QUOTA_BYTES=_read_int("TM_STORAGE_QUOTA_BYTES", 5_000_000),
        MAX_ENTRY_BYTES=_read_int("TM_MAX_ENTRY_BYTES", 2_400_000),
        COLLECTION_TTL_S=_read_float("TM_COLLECTION_TTL_S", 10 * 60),
        OPTIONS_TTL_S=_read_float("TM_OPTIONS_TTL_S", 30 * 60),
    )


settings = _read_settings()


def validate_settings(cfg: Settings | None = None) -> None:
    """Validate configuration and log warnings for likely mistakes.

    Nothing here is fatal: a zero TTL simply means every read refetches, and
    an entry budget above the quota means large payloads will fail to persist.
    """
    cfg = cfg or settings
    if not cfg.API_BASE.startswith(("http://", "https://")):
        logger.warning("TM_API_BASE does not look like a URL: %s", cfg.API_BASE)
    if cfg.COLLECTION_TTL_S <= 0 or cfg.OPTIONS_TTL_S <= 0:
        logger.warning("A cache TTL is <= 0; entries will never be fresh")
    if cfg.MAX_ENTRY_BYTES > cfg.STORAGE_QUOTA_BYTES:
        logger.warning(
            "TM_MAX_ENTRY_BYTES (%d) exceeds TM_STORAGE_QUOTA_BYTES (%d)",
            cfg.MAX_ENTRY_BYTES,
            cfg.STORAGE_QUOTA_BYTES,
        )
    if cfg.CACHE_DISABLED:
        logger.info("Persistent cache disabled; using in-memory storage only")


validate_settings()
