"""In-process cache slot: the cheapest tier, gone when the process exits."""

from __future__ import annotations

from .models.cache import CacheEntry


class MemorySlot:
    """Holds at most one `CacheEntry`. Freshness is the owner's concern."""

    __slots__ = ("_entry",)

    def __init__(self) -> None:
        self._entry: CacheEntry | None = None

    def get(self) -> CacheEntry | None:
        return self._entry

    def set(self, entry: CacheEntry) -> None:
        self._entry = entry

    def clear(self) -> None:
        self._entry = None
