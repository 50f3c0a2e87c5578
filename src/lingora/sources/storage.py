"""
Persistent storage backends for the caching source.

A backend maps a key (the locale) to a CacheEntry: the message dictionary
plus its creation time in epoch milliseconds. Storing the timestamp with
the payload lets the caching source apply its TTL on any backend.

Backends:
- FileStorage (default): one JSON file per key under a cache directory,
  named with a configurable prefix. Unreadable files count as a miss.
- MemoryStorage: process-local dict, for tests and short-lived processes.
"""

import asyncio
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

import structlog
from pydantic import BaseModel, Field, ValidationError

logger = structlog.get_logger()

DEFAULT_PREFIX = "lingora-i18n"
DEFAULT_CACHE_DIR = Path.home() / ".lingora" / "cache"

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


class CacheEntry(BaseModel):
    """Persisted record for one locale."""

    messages: dict[str, Any] = Field(description="Message dictionary payload")
    timestamp: int = Field(description="Creation time, epoch milliseconds")

    model_config = {"extra": "ignore"}


class CacheStorage(ABC):
    """Async key -> CacheEntry store."""

    @abstractmethod
    async def get(self, key: str) -> CacheEntry | None:
        """Return the entry for ``key``, or None if absent or unreadable."""

    @abstractmethod
    async def set(self, key: str, entry: CacheEntry) -> None: ...

    @abstractmethod
    async def remove(self, key: str) -> None: ...

    @abstractmethod
    async def clear(self) -> None:
        """Remove every entry this backend owns."""


class MemoryStorage(CacheStorage):
    """Dict-backed storage."""

    def __init__(self) -> None:
        self.entries: dict[str, CacheEntry] = {}

    async def get(self, key: str) -> CacheEntry | None:
        return self.entries.get(key)

    async def set(self, key: str, entry: CacheEntry) -> None:
        self.entries[key] = entry

    async def remove(self, key: str) -> None:
        self.entries.pop(key, None)

    async def clear(self) -> None:
        self.entries.clear()


class FileStorage(CacheStorage):
    """One ``<prefix>__<key>.json`` file per entry in ``cache_dir``.

    Write failures are logged and ignored: the cache is not critical.
    """

    def __init__(self, cache_dir: Path | str | None = None, prefix: str = DEFAULT_PREFIX) -> None:
        self.cache_dir = Path(cache_dir).expanduser() if cache_dir else DEFAULT_CACHE_DIR
        self.prefix = _UNSAFE_CHARS.sub("_", prefix)
        self.log = logger.bind(component="file_storage", dir=str(self.cache_dir))

    def path_for(self, key: str) -> Path:
        return self.cache_dir / f"{self.prefix}__{_UNSAFE_CHARS.sub('_', key)}.json"

    async def get(self, key: str) -> CacheEntry | None:
        return await asyncio.to_thread(self._read, key)

    async def set(self, key: str, entry: CacheEntry) -> None:
        await asyncio.to_thread(self._write, key, entry)

    async def remove(self, key: str) -> None:
        await asyncio.to_thread(self._unlink, self.path_for(key))

    async def clear(self) -> None:
        await asyncio.to_thread(self._clear)

    def _read(self, key: str) -> CacheEntry | None:
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            return CacheEntry.model_validate_json(path.read_bytes())
        except (OSError, ValidationError, ValueError) as e:
            # Corrupt entry or wrong shape -> miss
            self.log.warning("file_storage.corrupt_entry", file=path.name, error=str(e))
            return None

    def _write(self, key: str, entry: CacheEntry) -> None:
        path = self.path_for(key)
        tmp_path = path.with_suffix(".tmp")
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(entry.model_dump_json(), encoding="utf-8")
            tmp_path.replace(path)
        except OSError as e:
            self.log.warning("file_storage.write_failed", file=path.name, error=str(e))

    def _unlink(self, path: Path) -> bool:
        try:
            path.unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            self.log.warning("file_storage.remove_failed", file=path.name, error=str(e))
            return False

    def _clear(self) -> None:
        if not self.cache_dir.is_dir():
            return
        count = sum(1 for f in self.cache_dir.glob(f"{self.prefix}__*.json") if self._unlink(f))
        self.log.info("file_storage.cleared", count=count)
