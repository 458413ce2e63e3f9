"""Logging helpers for tm_stats_cache
"""
import logging
import os


def setup_logging(level_name: str | None = None) -> None:
    """Configure the root logger once.

    ``level_name`` wins over ``LOG_LEVEL``; unknown names fall back to INFO.
    """
    level_name = (level_name or os.environ.get("LOG_LEVEL", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler.setFormatter(formatter)
        root.addHandler(handler)
    root.setLevel(level)

    # Per-request lines from the HTTP client drown out cache hit/miss logs
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


__all__ = ["setup_logging"]
