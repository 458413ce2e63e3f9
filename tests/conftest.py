"""Shared test fixtures and dummy classes."""

from __future__ import annotations

from typing import Any

import pytest

from tm_stats_cache.storage import MemoryStorage, PersistentStore


class FakeClock:
    """Settable epoch-millisecond clock."""

    def __init__(self, now: int = 0) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now


class DummyFetcher:
    """Async fetcher that counts calls and returns (or raises) a canned value."""

    def __init__(self, data: Any = None, error: Exception | None = None) -> None:
        self.data = data
        self.error = error
        self.calls = 0

    async def __call__(self) -> Any:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.data


class DummyStorage(MemoryStorage):
    """MemoryStorage that records calls and can be told to fail."""

    def __init__(self, quota_bytes: int = 5_000_000) -> None:
        super().__init__(quota_bytes)
        self.fail_get: Exception | None = None
        self.fail_set: Exception | None = None
        self.fail_remove: Exception | None = None
        self.gets: list[str] = []
        self.sets: list[str] = []
        self.removed: list[str] = []

    def get_item(self, key: str) -> str | None:
        self.gets.append(key)
        if self.fail_get is not None:
            raise self.fail_get
        return super().get_item(key)

    def set_item(self, key: str, value: str) -> None:
        self.sets.append(key)
        if self.fail_set is not None:
            raise self.fail_set
        super().set_item(key, value)

    def remove_item(self, key: str) -> None:
        self.removed.append(key)
        if self.fail_remove is not None:
            raise self.fail_remove
        super().remove_item(key)

    @property
    def io_count(self) -> int:
        return len(self.gets) + len(self.sets) + len(self.removed)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def storage() -> DummyStorage:
    return DummyStorage()


@pytest.fixture
def store(storage: DummyStorage) -> PersistentStore:
    return PersistentStore(storage)
