"""Registry of resource caches (one per catalogue entry)."""

from __future__ import annotations

import logging
from typing import Any

from .api import ApiClient
from .config import Settings
from .models.cache import CacheStatus
from .models.resource_spec import ResourceSpec
from .resource_cache import Clock, ResourceCache
from .resources import CARD_MODES, FETCHERS, RESOURCES, get_spec
from .storage import PersistentStore, build_storage

logger = logging.getLogger(__name__)


class CacheRegistry:
    """Creates each `ResourceCache` on first use and keeps it for its lifetime.

    Caches never share state beyond the persistent store, where each one owns
    its own key.
    """

    def __init__(
        self,
        client: ApiClient,
        store: PersistentStore,
        collection_ttl_ms: int = 10 * 60 * 1000,
        options_ttl_ms: int = 30 * 60 * 1000,
        clock: Clock | None = None,
    ) -> None:
        self.client = client
        self.store = store
        self.collection_ttl_ms = collection_ttl_ms
        self.options_ttl_ms = options_ttl_ms
        self._clock = clock
        self._caches: dict[str, ResourceCache] = {}

    @classmethod
    def from_settings(cls, cfg: Settings) -> "CacheRegistry":
        client = ApiClient(cfg.API_BASE, cfg.FUNCTIONS_KEY, cfg.HTTP_TIMEOUT_S)
        storage = build_storage(
            cfg.CACHE_DIR, cfg.STORAGE_QUOTA_BYTES, disabled=cfg.CACHE_DISABLED
        )
        store = PersistentStore(storage, cfg.MAX_ENTRY_BYTES)
        return cls(
            client,
            store,
            collection_ttl_ms=int(cfg.COLLECTION_TTL_S * 1000),
            options_ttl_ms=int(cfg.OPTIONS_TTL_S * 1000),
        )

    def ttl_for(self, spec: ResourceSpec) -> int:
        if spec.family == "options":
            return self.options_ttl_ms
        return self.collection_ttl_ms

    def names(self) -> list[str]:
        return [spec.name for spec in RESOURCES]

    def get(self, name: str) -> ResourceCache:
        cache = self._caches.get(name)
        if cache is not None:
            return cache
        spec = get_spec(name)
        fetch = FETCHERS[spec.name]
        client = self.client

        async def fetcher() -> Any:
            return await fetch(client)

        cache = ResourceCache(
            spec.key,
            self.ttl_for(spec),
            fetcher,
            self.store,
            clock=self._clock,
            name=spec.name,
        )
        self._caches[name] = cache
        return cache

    def clear_all(self) -> None:
        for name in self.names():
            self.get(name).clear_cache()
        logger.info("Cleared %d resource caches", len(RESOURCES))

    def statuses(self) -> dict[str, CacheStatus]:
        return {name: self.get(name).get_cache_status() for name in self.names()}

    async def get_all_corporation_stats_cached(self, force_refresh: bool = False):
        return await self.get("corporations").get_cached(force_refresh)

    async def get_corporation_filter_options(self, force_refresh: bool = False):
        return await self.get("corporations-options").get_cached(force_refresh)

    async def get_all_project_card_stats_cached(
        self, mode: str = "played", force_refresh: bool = False
    ):
        spec = CARD_MODES.get(mode)
        if spec is None:
            raise KeyError(
                f"Unknown card mode {mode!r}; expected one of {', '.join(CARD_MODES)}"
            )
        return await self.get(spec.name).get_cached(force_refresh)

    async def get_all_prelude_stats_cached(self, force_refresh: bool = False):
        return await self.get("preludes").get_cached(force_refresh)

    async def get_prelude_filter_options(self, force_refresh: bool = False):
        return await self.get("preludes-options").get_cached(force_refresh)

    async def get_all_award_rows_cached(self, force_refresh: bool = False):
        return await self.get("awards").get_cached(force_refresh)

    async def get_awards_filter_options(self, force_refresh: bool = False):
        return await self.get("awards-options").get_cached(force_refresh)

    async def get_all_milestone_claim_rows_cached(self, force_refresh: bool = False):
        return await self.get("milestones").get_cached(force_refresh)

    async def get_milestones_filter_options(self, force_refresh: bool = False):
        return await self.get("milestones-options").get_cached(force_refresh)
