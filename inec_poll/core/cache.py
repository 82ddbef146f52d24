"""
Simple in-memory cache with TTL (Time To Live) support.

Read endpoints (active poll list, poll detail, poll results) are served
through this cache keyed by their request path. Every write calls
``revalidate_path`` for the paths it affects, so the next read after a vote,
edit or delete always reaches the database.

Design decisions:
- In-memory OrderedDict storage for LRU eviction (no Redis needed for single-server deployment)
- Short TTL as a safety net; correctness comes from explicit invalidation
- Reentrant threading lock (RLock) for thread safety (works in both sync and async contexts)
- Size limit with LRU eviction to prevent unbounded growth
- Hit/miss metrics for the health endpoint
"""

import time
import threading
from typing import Any, Callable, Dict, Optional, Tuple
from collections import OrderedDict

from inec_poll.core.logging_config import get_logger

logger = get_logger(__name__)


class TTLCache:
    """
    Time-To-Live cache with thread-safe synchronous operations and LRU eviction.

    Storage format: OrderedDict[cache_key: (data, timestamp)]
    """

    def __init__(self, max_size: int = 256):
        """
        Initialize TTL cache.

        Args:
            max_size: Maximum number of entries to store (default: 256)
        """
        self._cache: OrderedDict[str, Tuple[Any, float]] = OrderedDict()
        # RLock: get_or_fetch holds the lock while calling get/set
        self._lock = threading.RLock()
        self._max_size = max_size
        self._hits = 0
        self._misses = 0

    def get(self, key: str) -> Optional[Any]:
        """
        Get cached value if it exists.

        Note: Does not track hits/misses - that's done in get_or_fetch().
        """
        with self._lock:
            if key in self._cache:
                data, _ = self._cache[key]
                # Move to end to mark as recently used (LRU)
                self._cache.move_to_end(key)
                return data
            return None

    def set(self, key: str, value: Any) -> None:
        """
        Store value in cache with current timestamp.

        Implements LRU eviction: if cache is full, removes oldest entry.
        """
        with self._lock:
            if key in self._cache:
                del self._cache[key]

            self._cache[key] = (value, time.time())

            while len(self._cache) > self._max_size:
                self._cache.popitem(last=False)

    def is_expired(self, key: str, ttl_seconds: float) -> bool:
        """Check if cached value is expired based on TTL."""
        with self._lock:
            if key not in self._cache:
                return True
            _, timestamp = self._cache[key]
            return time.time() - timestamp > ttl_seconds

    def invalidate(self, key: str) -> None:
        """Remove key from cache (for manual invalidation)."""
        with self._lock:
            self._cache.pop(key, None)

    def invalidate_path(self, path: str) -> int:
        """
        Remove the entry for ``path`` and every entry below it.

        ``/polls`` also drops ``/polls?state=Lagos`` and ``/polls/<id>/results``.

        Returns:
            Number of entries removed
        """
        with self._lock:
            stale = [
                key for key in self._cache
                if key == path or key.startswith(path + "/") or key.startswith(path + "?")
            ]
            for key in stale:
                del self._cache[key]
            return len(stale)

    def clear(self) -> None:
        """Clear entire cache."""
        with self._lock:
            self._cache.clear()

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics for monitoring."""
        with self._lock:
            total = self._hits + self._misses
            hit_rate = (self._hits / total * 100) if total > 0 else 0

            return {
                "size": len(self._cache),
                "max_size": self._max_size,
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate_percent": round(hit_rate, 2),
            }


def get_or_fetch(
    cache: TTLCache,
    cache_key: str,
    fetch_func: Callable[[], Any],
    ttl_seconds: float = 5.0
) -> Any:
    """
    Get data from cache or fetch fresh data if expired.

    Args:
        cache: TTLCache instance
        cache_key: Unique identifier for cached data (the request path)
        fetch_func: Function to call if cache miss or expired
        ttl_seconds: Time-to-live in seconds

    Returns:
        Cached or freshly fetched data

    Thread safety:
        - Double-check locking: a fresh entry is returned without taking the lock,
          otherwise the lock is held while fetching so concurrent misses fetch once
        - Exceptions from fetch_func propagate and nothing is cached
    """
    if not cache.is_expired(cache_key, ttl_seconds):
        cached_data = cache.get(cache_key)
        if cached_data is not None:
            with cache._lock:
                cache._hits += 1
            return cached_data

    with cache._lock:
        if not cache.is_expired(cache_key, ttl_seconds):
            cached_data = cache.get(cache_key)
            if cached_data is not None:
                cache._hits += 1
                return cached_data

        cache._misses += 1
        fresh_data = fetch_func()
        cache.set(cache_key, fresh_data)
        return fresh_data


# Global cache instance shared by all read endpoints
global_cache = TTLCache()


def revalidate_path(*paths: str, cache: TTLCache = global_cache) -> None:
    """Invalidate cached reads for the given paths after a write."""
    for path in paths:
        removed = cache.invalidate_path(path)
        logger.info("cache_invalidated", path=path, entries=removed)
