"""Two-tier read-through cache for one API resource.

Reads go memory slot -> persistent store -> network. Freshness is checked at
read time only; nothing runs in the background.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable

from .freshness import is_fresh, now_ms
from .models.cache import CacheEntry, CacheStatus
from .slot import MemorySlot
from .storage import PersistentStore

logger = logging.getLogger(__name__)

Fetcher = Callable[[], Awaitable[Any]]
Clock = Callable[[], int]


class ResourceCache:
    """Cache for a single full-collection or options payload.

    Args:
        key: Persistent storage key, e.g. ``corp:all:v1``.
        ttl_ms: Freshness window in milliseconds.
        fetcher: Coroutine function performing the remote fetch.
        store: Shared persistent store; this cache only touches ``key``.
        clock: Returns "now" in epoch milliseconds.
        name: Label used in log messages (defaults to ``key``).

    Concurrent misses are not deduplicated: two callers racing past a stale
    cache both fetch and the later write wins.
    """

    def __init__(
        self,
        key: str,
        ttl_ms: int,
        fetcher: Fetcher,
        store: PersistentStore,
        *,
        clock: Clock | None = None,
        name: str | None = None,
    ) -> None:
        self.key = key
        self.ttl_ms = ttl_ms
        self.name = name or key
        self._fetcher = fetcher
        self._store = store
        self._clock = clock or now_ms
        self._slot = MemorySlot()

    def _fresh(self, entry: CacheEntry | None, now: int) -> bool:
        return entry is not None and is_fresh(entry.fetched_at, self.ttl_ms, now)

    async def get_cached(self, force_refresh: bool = False) -> Any:
        """Return the freshest known payload, fetching only when necessary.

        Raises whatever the fetcher raises; stale data is never returned in
        place of a failed fetch.
        """
        if force_refresh:
            self.clear_cache()

        entry = self._slot.get()
        if self._fresh(entry, self._clock()):
            return entry.data

        stored = self._store.read(self.key)
        if self._fresh(stored, self._clock()):
            self._slot.set(stored)
            logger.debug("Promoted %s from persistent cache", self.name)
            return stored.data

        logger.debug("Cache miss for %s; fetching", self.name)
        try:
            data = await self._fetcher()
        except Exception:
            logger.exception("Error fetching %s", self.name)
            raise

        fresh_entry = CacheEntry(data=data, fetched_at=self._clock())
        self._slot.set(fresh_entry)
        self._store.write(self.key, fresh_entry)
        return data

    def clear_cache(self) -> None:
        self._slot.clear()
        self._store.remove(self.key)

    def get_cache_status(self) -> CacheStatus:
        now = self._clock()
        memory = self._slot.get()
        stored = self._store.read(self.key)
        latest = memory or stored
        return CacheStatus(
            in_memory=self._fresh(memory, now),
            persistent=self._fresh(stored, now),
            last_fetched=CacheStatus.timestamp(latest.fetched_at if latest else None),
        )
