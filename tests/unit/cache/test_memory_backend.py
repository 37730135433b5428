"""
Cloud Cache — Memory Cache Backend Tests

Comprehensive test suite for the in-memory cache backend.
Tests LRU eviction, TTL support, serialization at the boundary,
corruption handling and all interface methods.
"""

import asyncio
from typing import Any

import pytest

from cloud_cache.cache.backends.memory import MemoryCacheBackend
from cloud_cache.errors import SerializationError


class TestMemoryCacheBackend:
    """Test suite for MemoryCacheBackend."""

    @pytest.fixture
    async def cache(self, clock: Any) -> MemoryCacheBackend:
        """Create a fresh memory cache instance for each test."""
        return MemoryCacheBackend(max_size=100, default_ttl=0, clock=clock)

    async def test_initialization(self) -> None:
        """Test cache initialization with custom parameters."""
        cache = MemoryCacheBackend(max_size=50, default_ttl=1800)
        assert cache.max_size == 50
        assert cache.default_ttl == 1800

        stats = await cache.get_stats()
        assert stats["backend"] == "memory"
        assert stats["hits"] == 0
        assert stats["misses"] == 0
        assert stats["size"] == 0
        assert stats["max_size"] == 50
        assert stats["calculated_size"] == 0

    def test_invalid_capacity_rejected(self) -> None:
        with pytest.raises(ValueError):
            MemoryCacheBackend(max_size=0)

    async def test_set_and_get(self, cache: MemoryCacheBackend) -> None:
        """Test basic set and get operations."""
        assert await cache.set("key1", "value1") is None
        assert await cache.get("key1") == "value1"

        stats = await cache.get_stats()
        assert stats["hits"] == 1
        assert stats["misses"] == 0
        assert stats["sets"] == 1

    async def test_get_nonexistent_key(self, cache: MemoryCacheBackend) -> None:
        """Test getting a key that doesn't exist."""
        assert await cache.get("nonexistent") is None

        stats = await cache.get_stats()
        assert stats["misses"] == 1
        assert stats["hits"] == 0

    async def test_round_trip_various_types(self, cache: MemoryCacheBackend, sample_cache_data: dict[str, Any]) -> None:
        """Test storing different data types."""
        for key, value in sample_cache_data.items():
            await cache.set(key, value)

        for key, expected_value in sample_cache_data.items():
            assert await cache.get(key) == expected_value

    async def test_get_returns_copies(self, cache: MemoryCacheBackend) -> None:
        """Mutating a returned value must not change the cached one."""
        original = {"items": [1, 2]}
        await cache.set("doc", original)
        original["items"].append(3)

        fetched = await cache.get("doc")
        fetched["items"].append(4)

        assert await cache.get("doc") == {"items": [1, 2]}

    async def test_delete(self, cache: MemoryCacheBackend) -> None:
        """Test deleting keys."""
        await cache.set("key1", "value1")
        assert await cache.has("key1") is True

        await cache.delete("key1")

        assert await cache.has("key1") is False
        assert await cache.get("key1") is None

        # Deleting an absent key is a no-op
        await cache.delete("key1")
        stats = await cache.get_stats()
        assert stats["deletes"] == 1

    async def test_has(self, cache: MemoryCacheBackend) -> None:
        """Test checking key existence."""
        assert await cache.has("key1") is False
        await cache.set("key1", "value1")
        assert await cache.has("key1") is True

    async def test_has_for_stored_none(self, cache: MemoryCacheBackend) -> None:
        """None is a storable value; has() tells it apart from a miss."""
        await cache.set("nothing", None)
        assert await cache.get("nothing") is None
        assert await cache.has("nothing") is True

    async def test_clear(self, cache: MemoryCacheBackend) -> None:
        """Test clearing all cache entries."""
        for i in range(5):
            await cache.set(f"key{i}", f"value{i}")

        assert cache.stats().size == 5

        await cache.clear()

        assert cache.stats().size == 0
        for i in range(5):
            assert await cache.get(f"key{i}") is None

    async def test_ttl_expiration(self, cache: MemoryCacheBackend, clock: Any) -> None:
        """Test that entries expire after TTL."""
        await cache.set("x", 42, ttl=1)
        assert await cache.get("x") == 42

        clock.advance(1.5)

        assert await cache.has("x") is False
        assert await cache.get("x") is None

    async def test_default_ttl(self, clock: Any) -> None:
        """Test that a missing TTL uses the backend default."""
        cache = MemoryCacheBackend(max_size=10, default_ttl=2, clock=clock)
        await cache.set("key1", "value1")
        clock.advance(1)
        assert await cache.get("key1") == "value1"
        clock.advance(2)
        assert await cache.get("key1") is None

    async def test_ttl_zero_no_expiry(self, cache: MemoryCacheBackend, clock: Any) -> None:
        """Test that TTL=0 without a default means no expiration."""
        await cache.set("key1", "value1", ttl=0)
        clock.advance(86400)
        assert await cache.get("key1") == "value1"

    async def test_lru_eviction(self, clock: Any) -> None:
        """Test LRU eviction when max_size is reached."""
        cache = MemoryCacheBackend(max_size=10, clock=clock)

        for i in range(10):
            await cache.set(f"key{i}", f"value{i}")

        stats = await cache.get_stats()
        assert stats["size"] == 10
        assert stats["evictions"] == 0

        # Access key0 to make it recently used
        await cache.get("key0")

        # Add one more item (should evict key1, the least recently used)
        await cache.set("key10", "value10")

        stats = await cache.get_stats()
        assert stats["size"] == 10
        assert stats["evictions"] == 1

        assert await cache.has("key1") is False
        assert await cache.has("key0") is True
        assert await cache.has("key10") is True

    async def test_unserializable_value_rejected(self, cache: MemoryCacheBackend) -> None:
        """Failed serialization raises and leaves the previous value in place."""
        await cache.set("key", {"ok": True})

        cyclic: dict[str, Any] = {}
        cyclic["self"] = cyclic

        with pytest.raises(SerializationError):
            await cache.set("key", cyclic)
        with pytest.raises(SerializationError):
            await cache.set("other", object())

        assert await cache.get("key") == {"ok": True}
        assert await cache.has("other") is False
        assert (await cache.get_stats())["sets"] == 1

    async def test_lone_surrogate_round_trip(self, cache: MemoryCacheBackend) -> None:
        """Strings that are not valid UTF-8 still round-trip."""
        await cache.set("key", "bad\ud800")
        assert await cache.get("key") == "bad\ud800"

    async def test_corrupted_entry_treated_as_miss(self, cache: MemoryCacheBackend) -> None:
        """Undecodable stored data is removed and reported as a miss."""
        await cache.set("key", "value")
        # Corrupt the stored representation directly
        cache._store.set("key", "{not json")

        assert await cache.get("key") is None
        assert await cache.has("key") is False

        stats = await cache.get_stats()
        assert stats["misses"] == 1

    async def test_batch_operations(self, cache: MemoryCacheBackend) -> None:
        """Test the interface's default batch helpers."""
        count = await cache.set_many({"a": 1, "b": 2, "c": 3})
        assert count == 3

        assert await cache.get_many(["a", "c", "missing"]) == {"a": 1, "c": 3}
        assert await cache.delete_many(["a", "b", "missing"]) == 2
        assert await cache.has("c") is True

    async def test_async_context_manager(self) -> None:
        """Backends close when leaving an async with block."""
        async with MemoryCacheBackend(max_size=5) as cache:
            await cache.set("k", "v")
            assert await cache.get("k") == "v"

    async def test_concurrent_operations(self, cache: MemoryCacheBackend) -> None:
        """Test concurrent coroutines against one backend."""

        async def set_values(start: int, end: int) -> None:
            for i in range(start, end):
                await cache.set(f"key{i}", f"value{i}")

        await asyncio.gather(
            set_values(0, 5),
            set_values(5, 10),
            set_values(10, 15),
        )

        for i in range(15):
            assert await cache.get(f"key{i}") == f"value{i}"

    async def test_get_stats_hit_rate(self, cache: MemoryCacheBackend) -> None:
        """Test statistics tracking."""
        await cache.set("key1", "value1")
        await cache.get("key1")  # hit
        await cache.get("key2")  # miss

        stats = await cache.get_stats()
        assert stats["hits"] == 1
        assert stats["misses"] == 1
        assert stats["hit_rate"] == 50.0
