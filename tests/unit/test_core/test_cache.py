"""Unit tests for caching system."""
import threading
import time
from concurrent.futures import ThreadPoolExecutor

import pytest

from inec_poll.core.cache import TTLCache, get_or_fetch, revalidate_path


@pytest.mark.unit
class TestTTLCache:
    """Tests for TTLCache class."""

    def test_basic_get_set(self):
        """Test basic cache get/set operations."""
        cache = TTLCache()
        cache.set("key1", "value1")

        assert cache.get("key1") == "value1"

    def test_get_nonexistent_key(self):
        cache = TTLCache()
        assert cache.get("nonexistent") is None

    def test_ttl_expiration(self):
        """Test that cached values expire after TTL."""
        cache = TTLCache()
        cache.set("key1", "value1")

        assert not cache.is_expired("key1", ttl_seconds=0.2)
        time.sleep(0.3)
        assert cache.is_expired("key1", ttl_seconds=0.2)

    def test_lru_eviction(self):
        """Least recently used entry goes first when the cache is full."""
        cache = TTLCache(max_size=3)
        cache.set("key1", "value1")
        cache.set("key2", "value2")
        cache.set("key3", "value3")

        # Touch key1 so key2 becomes the oldest
        cache.get("key1")
        cache.set("key4", "value4")

        assert cache.get("key2") is None
        assert cache.get("key1") == "value1"
        assert cache.get("key4") == "value4"

    def test_invalidate(self):
        cache = TTLCache()
        cache.set("key1", "value1")
        cache.invalidate("key1")
        assert cache.get("key1") is None


@pytest.mark.unit
class TestPathInvalidation:
    """Tests for invalidate_path and revalidate_path."""

    def test_invalidate_path_removes_children_and_queries(self):
        cache = TTLCache()
        cache.set("/polls", 1)
        cache.set("/polls?state=Lagos", 2)
        cache.set("/polls/abc", 3)
        cache.set("/polls/abc/results", 4)
        cache.set("/pollsters", 5)

        removed = cache.invalidate_path("/polls")

        assert removed == 4
        assert cache.get("/pollsters") == 5

    def test_invalidate_single_poll_keeps_others(self):
        cache = TTLCache()
        cache.set("/polls/abc", 1)
        cache.set("/polls/abc/results", 2)
        cache.set("/polls/xyz/results", 3)

        cache.invalidate_path("/polls/abc")

        assert cache.get("/polls/abc") is None
        assert cache.get("/polls/abc/results") is None
        assert cache.get("/polls/xyz/results") == 3

    def test_revalidate_path_uses_given_cache(self):
        cache = TTLCache()
        cache.set("/polls/abc/results", 1)
        cache.set("/polls", 2)

        revalidate_path("/polls/abc", "/polls", cache=cache)

        assert cache.get_stats()["size"] == 0


@pytest.mark.unit
class TestGetOrFetch:
    """Tests for get_or_fetch."""

    def test_fetches_once_while_fresh(self):
        cache = TTLCache()
        calls = []

        def fetch():
            calls.append(1)
            return "data"

        assert get_or_fetch(cache, "k", fetch, ttl_seconds=60) == "data"
        assert get_or_fetch(cache, "k", fetch, ttl_seconds=60) == "data"
        assert len(calls) == 1

        stats = cache.get_stats()
        assert stats["hits"] == 1
        assert stats["misses"] == 1
        assert stats["hit_rate_percent"] == 50.0

    def test_fetch_error_is_not_cached(self):
        cache = TTLCache()

        def failing():
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            get_or_fetch(cache, "k", failing)

        assert cache.get("k") is None

    def test_concurrent_misses_fetch_once(self):
        cache = TTLCache()
        calls = []
        lock = threading.Lock()

        def fetch():
            with lock:
                calls.append(1)
            time.sleep(0.05)
            return "data"

        with ThreadPoolExecutor(max_workers=10) as executor:
            results = list(executor.map(lambda _: get_or_fetch(cache, "k", fetch, ttl_seconds=60), range(10)))

        assert results == ["data"] * 10
        assert len(calls) == 1
