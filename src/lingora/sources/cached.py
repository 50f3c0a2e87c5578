"""
Offline-first caching decorator for any MessageSource.

load(locale):
1. Fresh persisted entry (age <= ttl_ms)   -> return it, wrapped source untouched
2. Otherwise ask the wrapped source        -> persist with a new timestamp, return
3. Wrapped source failed + any entry exists -> return the stale entry
4. Wrapped source failed + no entry         -> propagate the error

Storage problems never fail a load: a storage read error is a miss, a
storage write error is logged.
"""

import time
from collections.abc import Callable

import structlog

from ..core.keypath import MessageTree
from .base import MessageSource
from .storage import DEFAULT_PREFIX, CacheEntry, CacheStorage, FileStorage

logger = structlog.get_logger()

# Default time-to-live for persisted entries: 24 hours
DEFAULT_TTL_MS = 24 * 60 * 60 * 1000


def _now_ms() -> int:
    return int(time.time() * 1000)


class CachedSource(MessageSource):
    """Wraps ``source`` with a persistent, TTL-bounded cache.

    Usage:
        cached = CachedSource(RemoteSource("https://cdn.example.com/i18n"), ttl_ms=60 * 60 * 1000)
        await cached.load("tr")  # fetched and persisted
        await cached.load("tr")  # served from storage while fresh
    """

    def __init__(
        self,
        source: MessageSource,
        ttl_ms: int = DEFAULT_TTL_MS,
        storage: CacheStorage | None = None,
        prefix: str = DEFAULT_PREFIX,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        """Initialize the decorator.

        Args:
            source: Wrapped source.
            ttl_ms: Entry validity in milliseconds. Defaults to 24 hours.
            storage: Persistent backend. Defaults to FileStorage under
                ~/.lingora/cache using ``prefix``.
            prefix: Storage key prefix for the default backend.
            clock: Epoch-milliseconds clock (injectable for tests).
        """
        self.source = source
        self.ttl_ms = ttl_ms
        self.storage = storage if storage is not None else FileStorage(prefix=prefix)
        self._clock = clock
        self._served: list[str] = []
        self.log = logger.bind(component="cached_source")

    def is_expired(self, entry: CacheEntry) -> bool:
        return self._clock() - entry.timestamp > self.ttl_ms

    async def load(self, locale: str) -> MessageTree:
        cached = await self._read(locale)

        if cached is not None and not self.is_expired(cached):
            self.log.debug("cached_source.hit", locale=locale)
            self._mark_served(locale)
            return cached.messages

        try:
            messages = await self.source.load(locale)
        except Exception as e:
            if cached is None:
                raise
            self.log.warning(
                "cached_source.stale_fallback",
                locale=locale,
                age_ms=self._clock() - cached.timestamp,
                error=str(e),
                error_type=type(e).__name__,
            )
            self._mark_served(locale)
            return cached.messages

        await self._write(locale, CacheEntry(messages=messages, timestamp=self._clock()))
        self._mark_served(locale)
        return messages

    def has_locale(self, locale: str) -> bool:
        return locale in self._served or self.source.has_locale(locale)

    def available_locales(self) -> list[str]:
        locales = list(self._served)
        for locale in self.source.available_locales():
            if locale not in locales:
                locales.append(locale)
        return locales

    async def clear_cache(self) -> None:
        """Empty persistent storage and forget which locales were served."""
        await self.storage.clear()
        self._served.clear()
        self.log.info("cached_source.cleared")

    def _mark_served(self, locale: str) -> None:
        if locale not in self._served:
            self._served.append(locale)

    async def _read(self, locale: str) -> CacheEntry | None:
        try:
            return await self.storage.get(locale)
        except Exception as e:
            self.log.warning("cached_source.read_failed", locale=locale, error=str(e))
            return None

    async def _write(self, locale: str, entry: CacheEntry) -> None:
        try:
            await self.storage.set(locale, entry)
        except Exception as e:
            self.log.warning("cached_source.write_failed", locale=locale, error=str(e))
