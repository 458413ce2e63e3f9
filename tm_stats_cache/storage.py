"""Persistent key/value storage for cache entries.

`PersistentStore` is the only thing the resource caches talk to. It wraps a
synchronous `KeyValueStorage` backend and never lets a storage problem escape:
quota errors, unwritable directories and corrupt JSON all degrade to "no
persistent entry". Every backend call is turned into a `Result` first so the
degrade paths are explicit.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Callable, Protocol, TypeVar
from urllib.parse import quote, unquote

from .models.cache import CacheEntry
from .models.result import Err, Ok, Result

logger = logging.getLogger(__name__)

DEFAULT_QUOTA_BYTES = 5_000_000
# Conservative against the shared quota; leaves room for other keys.
DEFAULT_MAX_ENTRY_BYTES = 2_400_000

_SUFFIX = ".json"

T = TypeVar("T")


class StorageError(Exception):
    """Base class for every persistent storage failure."""


class QuotaExceededError(StorageError):
    """The backend has no room left for the value."""


class StorageDisabledError(StorageError):
    """The backend cannot be used at all (unwritable, missing, disabled)."""


class CorruptEntryError(StorageError):
    """A stored value is not valid JSON or not a cache entry."""


class EntryTooLargeError(StorageError):
    """A value exceeds the per-entry byte budget and was not written."""


class KeyValueStorage(Protocol):
    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...

    def keys(self) -> list[str]: ...


def _utf8_len(text: str) -> int:
    return len(text.encode("utf-8"))


class MemoryStorage:
    """Dict-backed storage with the same quota behaviour as `FileStorage`."""

    def __init__(self, quota_bytes: int = DEFAULT_QUOTA_BYTES) -> None:
        self.quota_bytes = quota_bytes
        self._items: dict[str, str] = {}

    def used_bytes(self, exclude: str | None = None) -> int:
        return sum(
            _utf8_len(k) + _utf8_len(v) for k, v in self._items.items() if k != exclude
        )

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        needed = _utf8_len(key) + _utf8_len(value)
        if self.used_bytes(exclude=key) + needed > self.quota_bytes:
            raise QuotaExceededError(
                f"storing {key!r} needs {needed} bytes; quota is {self.quota_bytes}"
            )
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._items)


class FileStorage:
    """One UTF-8 file per key inside ``directory``.

    Keys are percent-encoded into file names, so ``corp:all:v1`` becomes
    ``corp%3Aall%3Av1.json``. Writes go through a temporary file and
    ``os.replace`` so a crash never leaves a half-written value behind.
    """

    def __init__(self, directory: Path | str, quota_bytes: int = DEFAULT_QUOTA_BYTES):
        self.directory = Path(directory)
        self.quota_bytes = quota_bytes

    def _path(self, key: str) -> Path:
        return self.directory / f"{quote(key, safe='')}{_SUFFIX}"

    def used_bytes(self, exclude: str | None = None) -> int:
        if not self.directory.is_dir():
            return 0
        total = 0
        for path in self.directory.glob(f"*{_SUFFIX}"):
            key = unquote(path.name[: -len(_SUFFIX)])
            if key == exclude:
                continue
            try:
                total += _utf8_len(key) + path.stat().st_size
            except OSError:
                # Removed between glob and stat
                continue
        return total

    def get_item(self, key: str) -> str | None:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            raise StorageDisabledError(f"cannot read {path}: {exc}") from exc

    def set_item(self, key: str, value: str) -> None:
        needed = _utf8_len(key) + _utf8_len(value)
        path = self._path(key)
        tmp = path.with_name(path.name + ".tmp")
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            if self.used_bytes(exclude=key) + needed > self.quota_bytes:
                raise QuotaExceededError(
                    f"storing {key!r} needs {needed} bytes; quota is {self.quota_bytes}"
                )
            tmp.write_text(value, encoding="utf-8")
            os.replace(tmp, path)
        except StorageError:
            raise
        except OSError as exc:
            try:
                tmp.unlink(missing_ok=True)
            except OSError:
                logger.debug("Could not remove %s", tmp)
            raise StorageDisabledError(f"cannot write {key!r}: {exc}") from exc

    def remove_item(self, key: str) -> None:
        try:
            self._path(key).unlink(missing_ok=True)
        except OSError as exc:
            raise StorageDisabledError(f"cannot remove {key!r}: {exc}") from exc

    def keys(self) -> list[str]:
        if not self.directory.is_dir():
            return []
        return sorted(
            unquote(p.name[: -len(_SUFFIX)]) for p in self.directory.glob(f"*{_SUFFIX}")
        )


def _attempt(op: Callable[[], T]) -> Result[T, StorageError]:
    try:
        return Ok(op())
    except StorageError as exc:
        return Err(exc)
    except Exception as exc:
        # Third-party backends may raise anything; treat it as unusable storage.
        err = StorageDisabledError(f"{type(exc).__name__}: {exc}")
        err.__cause__ = exc
        return Err(err)


def decode_entry(raw: str) -> Result[CacheEntry, StorageError]:
    try:
        return Ok(CacheEntry.from_json(json.loads(raw)))
    except (ValueError, OverflowError) as exc:
        # json.JSONDecodeError is a ValueError
        return Err(CorruptEntryError(str(exc)))
    except RecursionError:
        return Err(CorruptEntryError("cache entry is nested too deeply"))


def encode_entry(entry: CacheEntry) -> Result[str, StorageError]:
    try:
        return Ok(json.dumps(entry.to_json(), ensure_ascii=False, separators=(",", ":")))
    except (TypeError, ValueError) as exc:
        return Err(CorruptEntryError(f"entry is not JSON serialisable: {exc}"))


class PersistentStore:
    """Size-checked JSON persistence of `CacheEntry` values.

    Any operation may fail underneath; callers only ever see ``None`` (read),
    ``False`` (write) or nothing at all (remove).
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        max_bytes: int = DEFAULT_MAX_ENTRY_BYTES,
    ) -> None:
        self.storage = storage
        self.max_bytes = max_bytes

    def load(self, key: str) -> Result[CacheEntry | None, StorageError]:
        """Read ``key`` without any recovery; ``Ok(None)`` means no entry."""
        raw = _attempt(lambda: self.storage.get_item(key))
        if isinstance(raw, Err):
            return raw
        if raw.value is None:
            return Ok(None)
        return decode_entry(raw.value)

    def read(self, key: str) -> CacheEntry | None:
        result = self.load(key)
        if isinstance(result, Ok):
            return result.value
        if isinstance(result.error, CorruptEntryError):
            logger.warning("Discarding corrupt cache entry %s: %s", key, result.error)
            self.remove(key)
        else:
            logger.warning("Error reading cache entry %s: %s", key, result.error)
        return None

    def store(self, key: str, entry: CacheEntry) -> Result[int, StorageError]:
        """Write ``entry`` and return the stored size in bytes."""
        encoded = encode_entry(entry)
        if isinstance(encoded, Err):
            return encoded
        size = _utf8_len(encoded.value)
        if size > self.max_bytes:
            return Err(
                EntryTooLargeError(
                    f"payload {size} bytes exceeds threshold {self.max_bytes}"
                )
            )
        written = _attempt(lambda: self.storage.set_item(key, encoded.value))
        if isinstance(written, Err):
            return written
        return Ok(size)

    def write(self, key: str, entry: CacheEntry) -> bool:
        result = self.store(key, entry)
        if isinstance(result, Ok):
            logger.debug("Persisted %s (%d bytes)", key, result.value)
            return True
        if isinstance(result.error, (EntryTooLargeError, CorruptEntryError)):
            # Refused before touching the backend; any prior value stays.
            logger.warning("Skipping persistent cache for %s: %s", key, result.error)
            return False
        logger.warning("Error saving cache entry %s: %s", key, result.error)
        self.remove(key)
        return False

    def remove(self, key: str) -> None:
        result = _attempt(lambda: self.storage.remove_item(key))
        if isinstance(result, Err):
            logger.warning("Error removing cache entry %s: %s", key, result.error)


def build_storage(
    directory: Path | str | None,
    quota_bytes: int = DEFAULT_QUOTA_BYTES,
    disabled: bool = False,
) -> KeyValueStorage:
    """Pick the storage backend for the given configuration."""
    if disabled or directory is None:
        return MemoryStorage(quota_bytes)
    return FileStorage(directory, quota_bytes)
