"""
Bounded least-recently-used cache.

Backs the compiled-template cache. One instance per formatter, never
shared at module level, so separate runtimes cannot leak entries into each
other.

Usage:
    cache = LRUCache(1000)
    cache.set(("en", template), compiled)
    cache.get(("en", template))  # hit, promoted to most recently used
"""

from collections import OrderedDict
from typing import Generic, TypeVar

K = TypeVar("K")
V = TypeVar("V")

# Compiled templates kept per formatter
DEFAULT_CACHE_SIZE = 1000


class LRUCache(Generic[K, V]):
    """Recency-ordered cache with a fixed maximum size.

    ``get`` on a hit and ``set`` on an existing key both move the entry to
    the most-recently-used end. Inserting past capacity evicts exactly the
    least recently used entry.
    """

    def __init__(self, max_size: int = DEFAULT_CACHE_SIZE) -> None:
        if max_size < 1:
            raise ValueError(f"max_size must be >= 1, got {max_size}")
        self._max_size = max_size
        self._data: OrderedDict[K, V] = OrderedDict()

    @property
    def max_size(self) -> int:
        return self._max_size

    def get(self, key: K) -> V | None:
        if key not in self._data:
            return None
        self._data.move_to_end(key)
        return self._data[key]

    def set(self, key: K, value: V) -> None:
        if key in self._data:
            self._data.move_to_end(key)
        self._data[key] = value
        while len(self._data) > self._max_size:
            self._data.popitem(last=False)

    def has(self, key: K) -> bool:
        """Membership test. Does not touch recency."""
        return key in self._data

    def delete(self, key: K) -> bool:
        return self._data.pop(key, _MISSING) is not _MISSING

    def clear(self) -> None:
        self._data.clear()

    def size(self) -> int:
        return len(self._data)

    def keys(self) -> list[K]:
        """Keys from least to most recently used."""
        return list(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data


_MISSING = object()
