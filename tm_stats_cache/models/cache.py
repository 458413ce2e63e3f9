"""Cache-related dataclasses."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any


@dataclass(frozen=True)
class CacheEntry:
    """A cached payload and the epoch-millisecond time it was fetched."""

    data: Any
    fetched_at: int

    def to_json(self) -> dict[str, Any]:
        return {"data": self.data, "fetchedAt": self.fetched_at}

    @classmethod
    def from_json(cls, raw: object) -> "CacheEntry":
        """Build an entry from its stored shape.

        Raises ValueError when ``raw`` is not ``{"data": ..., "fetchedAt": n}``.
        """
        if not isinstance(raw, dict) or "data" not in raw:
            raise ValueError("cache entry must be an object with 'data'")
        fetched_at = raw.get("fetchedAt")
        # bool is an int subclass but never a valid timestamp
        if isinstance(fetched_at, bool) or not isinstance(fetched_at, (int, float)):
            raise ValueError("cache entry 'fetchedAt' must be a number")
        if not math.isfinite(fetched_at):
            raise ValueError("cache entry 'fetchedAt' must be finite")
        return cls(data=raw["data"], fetched_at=int(fetched_at))


@dataclass(frozen=True)
class CacheStatus:
    in_memory: bool
    persistent: bool
    last_fetched: datetime | None = None

    @staticmethod
    def timestamp(fetched_at: int | None) -> datetime | None:
        if fetched_at is None:
            return None
        return datetime.fromtimestamp(fetched_at / 1000, tz=timezone.utc)

    def as_dict(self) -> dict[str, Any]:
        return {
            "inMemory": self.in_memory,
            "persistent": self.persistent,
            "lastFetched": self.last_fetched.isoformat() if self.last_fetched else None,
        }
