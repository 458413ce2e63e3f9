"""Freshness policy shared by every resource cache."""

from __future__ import annotations

import time


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def is_fresh(fetched_at: float, ttl: float, now: float) -> bool:
    """Return True when an entry fetched at ``fetched_at`` is younger than ``ttl``.

    All three values share one unit (the caches use epoch milliseconds). A
    non-positive TTL is never fresh. The caller's ``now`` is trusted as-is.
    """
    if ttl <= 0:
        return False
    return now - fetched_at < ttl
