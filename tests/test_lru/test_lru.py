"""
Tests for the bounded LRU cache.
"""

import pytest

from lingora.formatting.lru import DEFAULT_CACHE_SIZE, LRUCache


class TestLRUCache:
    def test_default_size(self):
        assert LRUCache().max_size == DEFAULT_CACHE_SIZE == 1000

    def test_invalid_size(self):
        with pytest.raises(ValueError):
            LRUCache(0)

    def test_get_set(self):
        cache = LRUCache(2)
        cache.set("a", 1)
        assert cache.get("a") == 1
        assert cache.get("missing") is None

    def test_capacity_plus_one_evicts_least_recent(self):
        cache = LRUCache(3)
        for key in ("a", "b", "c", "d"):
            cache.set(key, key.upper())
        assert cache.size() == 3
        assert not cache.has("a")
        assert cache.keys() == ["b", "c", "d"]

    def test_get_promotes(self):
        cache = LRUCache(2)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.get("a")
        cache.set("c", 3)
        assert cache.has("a")
        assert not cache.has("b")

    def test_set_existing_refreshes_position(self):
        cache = LRUCache(2)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.set("a", 10)
        cache.set("c", 3)
        assert cache.get("a") == 10
        assert "b" not in cache

    def test_has_does_not_promote(self):
        cache = LRUCache(2)
        cache.set("a", 1)
        cache.set("b", 2)
        assert cache.has("a")
        cache.set("c", 3)
        assert not cache.has("a")

    def test_delete(self):
        cache = LRUCache(2)
        cache.set("a", 1)
        assert cache.delete("a") is True
        assert cache.delete("a") is False
        assert len(cache) == 0

    def test_clear(self):
        cache = LRUCache(5)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.clear()
        assert cache.size() == 0
        assert cache.get("a") is None

    def test_instances_do_not_share_state(self):
        first, second = LRUCache(2), LRUCache(2)
        first.set("a", 1)
        assert not second.has("a")
