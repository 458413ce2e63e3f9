"""Tests for the cache registry and its dashboard entry points."""

import httpx
import pytest

from tm_stats_cache.api import ApiClient, ApiError
from tm_stats_cache.config import Settings
from tm_stats_cache.registry import CacheRegistry
from tm_stats_cache.storage import FileStorage, MemoryStorage, PersistentStore

from conftest import FakeClock

PAYLOADS = {
    "/api/corporations/playerstats": [{"corporation": "Ecoline"}],
    "/api/corporations/options": {"maps": ["Hellas"]},
    "/api/cards/stats": [{"card": "Birds"}],
    "/api/cards/option-stats": [{"card": "Fish"}],
    "/api/preludes/stats": [{"card": "Donation"}],
    "/api/preludes/options": {"corporations": ["Helion"]},
    "/api/awards/rows": [{"award": "Miner"}],
    "/api/awards/options": {"corporations": ["Ecoline"]},
    "/api/milestones/claims": [{"milestone": "Builder"}],
    "/api/milestones/options": {"corporations": ["Thorgate"]},
}


class CountingApi:
    def __init__(self, payloads: dict[str, object]) -> None:
        self.payloads = payloads
        self.hits: dict[str, int] = {}

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.hits[path] = self.hits.get(path, 0) + 1
        if path not in self.payloads:
            return httpx.Response(503, text="unavailable")
        return httpx.Response(200, json=self.payloads[path])


@pytest.fixture
def api() -> CountingApi:
    return CountingApi(dict(PAYLOADS))


@pytest.fixture
def registry(api) -> CacheRegistry:
    client = ApiClient("https://api.test", transport=httpx.MockTransport(api))
    return CacheRegistry(
        client, PersistentStore(MemoryStorage()), clock=FakeClock(now=1_000)
    )


def test_get_returns_same_instance(registry) -> None:
    assert registry.get("awards") is registry.get("awards")


def test_get_unknown_resource(registry) -> None:
    with pytest.raises(KeyError):
        registry.get("greeneries")


def test_ttl_family(registry) -> None:
    assert registry.get("corporations").ttl_ms == 10 * 60 * 1000
    assert registry.get("corporations-options").ttl_ms == 30 * 60 * 1000
    assert registry.get("awards").key == "award:rows:v2"


@pytest.mark.asyncio
async def test_entry_points_fetch_once(registry, api) -> None:
    calls = [
        registry.get_all_corporation_stats_cached,
        registry.get_corporation_filter_options,
        registry.get_all_project_card_stats_cached,
        registry.get_all_prelude_stats_cached,
        registry.get_prelude_filter_options,
        registry.get_all_award_rows_cached,
        registry.get_awards_filter_options,
        registry.get_all_milestone_claim_rows_cached,
        registry.get_milestones_filter_options,
    ]
    for call in calls:
        await call()
        await call()
    assert await registry.get_all_prelude_stats_cached() == [{"card": "Donation"}]
    assert all(count == 1 for count in api.hits.values())
    assert len(api.hits) == len(calls)


@pytest.mark.asyncio
async def test_card_modes(registry, api) -> None:
    assert await registry.get_all_project_card_stats_cached() == [{"card": "Birds"}]
    assert await registry.get_all_project_card_stats_cached(mode="option") == [
        {"card": "Fish"}
    ]
    with pytest.raises(KeyError, match="card mode"):
        await registry.get_all_project_card_stats_cached(mode="drafted")


@pytest.mark.asyncio
async def test_force_refresh_entry_point(registry, api) -> None:
    await registry.get_awards_filter_options()
    await registry.get_awards_filter_options(force_refresh=True)
    assert api.hits["/api/awards/options"] == 2


@pytest.mark.asyncio
async def test_fetch_failure_surfaces(registry, api) -> None:
    del api.payloads["/api/milestones/claims"]
    with pytest.raises(ApiError, match="503"):
        await registry.get_all_milestone_claim_rows_cached()


@pytest.mark.asyncio
async def test_clear_all_and_statuses(registry) -> None:
    await registry.get_all_corporation_stats_cached()
    statuses = registry.statuses()
    assert statuses["corporations"].in_memory is True
    assert statuses["awards"].in_memory is False

    registry.clear_all()
    assert not any(s.in_memory or s.persistent for s in registry.statuses().values())


def test_from_settings(tmp_path) -> None:
    cfg = Settings(
        API_BASE="https://api.test",
        FUNCTIONS_KEY="key",
        HTTP_TIMEOUT_S=3.0,
        CACHE_DIR=tmp_path,
        CACHE_DISABLED=False,
        STORAGE_QUOTA_BYTES=1_000_000,
        MAX_ENTRY_BYTES=500_000,
        COLLECTION_TTL_S=60,
        OPTIONS_TTL_S=120,
    )
    registry = CacheRegistry.from_settings(cfg)
    assert isinstance(registry.store.storage, FileStorage)
    assert registry.store.max_bytes == 500_000
    assert registry.client.functions_key == "key"
    assert registry.get("awards").ttl_ms == 60_000
    assert registry.get("awards-options").ttl_ms == 120_000
