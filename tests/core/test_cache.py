"""Tests for jsonshred.core.cache module."""

import threading

import pytest

from jsonshred.core import cache as cache_module
from jsonshred.core.cache import InMemoryCache


class TestInMemoryCache:
    def test_get_set(self):
        cache = InMemoryCache()
        cache.set("k", {"type": "object"})
        assert cache.get("k") == {"type": "object"}
        assert cache.exists("k")

    def test_missing(self):
        cache = InMemoryCache()
        assert cache.get("nope") is None
        assert not cache.exists("nope")

    def test_delete_and_clear(self):
        cache = InMemoryCache()
        cache.set("a", 1)
        cache.set("b", 2)
        cache.delete("a")
        cache.delete("missing")
        assert cache.size() == 1
        cache.clear()
        assert cache.size() == 0

    def test_lru_eviction(self):
        cache = InMemoryCache(max_size=2)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.get("a")
        cache.set("c", 3)
        assert cache.get("b") is None
        assert cache.get("a") == 1
        assert cache.get("c") == 3

    def test_overwrite_does_not_evict(self):
        cache = InMemoryCache(max_size=2)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.set("a", 10)
        assert cache.size() == 2
        assert cache.get("b") == 2

    def test_ttl_expiry(self, monkeypatch: pytest.MonkeyPatch):
        now = [1000.0]
        monkeypatch.setattr(cache_module.time, "monotonic", lambda: now[0])
        cache = InMemoryCache(default_ttl_seconds=10)
        cache.set("a", 1)
        cache.set("b", 2, ttl_seconds=100)
        now[0] += 11
        assert cache.get("a") is None
        assert cache.get("b") == 2

    def test_invalid_max_size(self):
        with pytest.raises(ValueError):
            InMemoryCache(max_size=0)

    def test_concurrent_writers(self):
        cache = InMemoryCache(max_size=50)

        def writer(offset: int) -> None:
            for i in range(200):
                cache.set(f"{offset}-{i}", i)

        threads = [threading.Thread(target=writer, args=(n,)) for n in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        assert cache.size() == 50
