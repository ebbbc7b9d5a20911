"""
Caching abstraction for resolved schemas.

Provides a ``CacheBackend`` protocol and a bounded, thread-safe in-memory
implementation. ``CachingSchemaRepository`` uses it as a read-through cache so
concurrent shredding calls share one copy of each resolved schema.

Architecture:
    ::

        CacheBackend (Protocol)
        └── InMemoryCache    single-process, bounded LRU, TTL, lock-protected

        API: get(key) → value | None
             set(key, value, ttl_seconds=None)
             delete(key)
             exists(key) → bool
             clear()

Examples:
    >>> from jsonshred.core.cache import InMemoryCache
    >>> cache = InMemoryCache(max_size=100, default_ttl_seconds=600)
    >>> cache.set("iglu:com.acme/click/jsonschema/1-0-0", {"type": "object"})
    >>> cache.get("iglu:com.acme/click/jsonschema/1-0-0")
    {'type': 'object'}

Performance:
    - get/set: O(1) amortised (OrderedDict move_to_end)
    - TTL cleanup: lazy, checked on access

Tags:
    cache, in-memory, ttl, lru, thread-safe, jsonshred
"""

from __future__ import annotations

import threading
import time
from collections import OrderedDict
from typing import Any, Protocol


class CacheBackend(Protocol):
    """Protocol for cache backend implementations.

    All methods are synchronous. Keys are strings.
    """

    def get(self, key: str) -> Any | None:
        """Retrieve a value by key, or ``None`` if missing or expired."""
        ...

    def set(self, key: str, value: Any, *, ttl_seconds: int | None = None) -> None:
        """Store a value. ``ttl_seconds`` overrides the backend default."""
        ...

    def delete(self, key: str) -> None:
        """Remove a key. No-op if missing."""
        ...

    def exists(self, key: str) -> bool:
        """Check whether a non-expired key exists."""
        ...

    def clear(self) -> None:
        """Remove all keys."""
        ...


class InMemoryCache:
    """Bounded in-memory cache with TTL support.

    Uses LRU eviction when ``max_size`` is reached. Every operation holds an
    internal lock, so one instance can be shared across worker threads.

    Attributes:
        max_size: Maximum number of keys before LRU eviction.
        default_ttl_seconds: Default TTL for keys (``None`` → no expiry).
    """

    def __init__(
        self,
        *,
        max_size: int = 1_000,
        default_ttl_seconds: int | None = None,
    ):
        if max_size < 1:
            raise ValueError(f"max_size must be positive, got {max_size}")
        self._store: OrderedDict[str, tuple[Any, float | None]] = OrderedDict()
        self._max_size = max_size
        self._default_ttl = default_ttl_seconds
        self._lock = threading.Lock()

    @property
    def max_size(self) -> int:
        return self._max_size

    def get(self, key: str) -> Any | None:
        """Retrieve a value by key."""
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return None

            value, expires_at = entry
            if expires_at is not None and time.monotonic() > expires_at:
                del self._store[key]
                return None

            self._store.move_to_end(key)
            return value

    def set(self, key: str, value: Any, *, ttl_seconds: int | None = None) -> None:
        """Store a value with optional TTL."""
        ttl = ttl_seconds if ttl_seconds is not None else self._default_ttl
        expires_at = (time.monotonic() + ttl) if ttl else None

        with self._lock:
            if key not in self._store and len(self._store) >= self._max_size:
                self._store.popitem(last=False)
            self._store[key] = (value, expires_at)
            self._store.move_to_end(key)

    def delete(self, key: str) -> None:
        """Remove a key from the cache."""
        with self._lock:
            self._store.pop(key, None)

    def exists(self, key: str) -> bool:
        """Check if key exists and is not expired."""
        return self.get(key) is not None

    def clear(self) -> None:
        """Remove all keys."""
        with self._lock:
            self._store.clear()

    def size(self) -> int:
        """Return current number of cached keys."""
        with self._lock:
            return len(self._store)


__all__ = ["CacheBackend", "InMemoryCache"]
