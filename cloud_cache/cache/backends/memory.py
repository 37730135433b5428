"""
Cloud Cache — Memory Cache Backend

In-memory cache implementation over the bounded LRU store.
Values are serialized at the boundary so the memory backend stores exactly
what a remote backend would, and callers only ever receive fresh copies.
"""

import logging
import time
from collections.abc import Callable
from typing import Any

from ...errors import DeserializationError
from ..interface import CacheInterface
from ..lru import LRUStore, StoreStats
from ..serialization import JsonSerializer, Serializer

logger = logging.getLogger(__name__)


class MemoryCacheBackend(CacheInterface):
    """
    In-memory cache backend with LRU eviction.

    Features:
    - LRU eviction when max_size is reached
    - Per-key TTL support with a store-wide default
    - Thread-safe operations
    - O(1) get/set/delete operations

    The async methods never suspend; they are coroutines only so the memory
    backend is interchangeable with the network-backed ones.
    """

    def __init__(
        self,
        max_size: int = 1000,
        default_ttl: int = 0,
        serializer: Serializer[Any] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize memory cache backend.

        Args:
            max_size: Maximum number of entries (LRU eviction when exceeded)
            default_ttl: Default TTL in seconds (0 = no expiry)
            serializer: Value codec (JSON by default)
            clock: Time source handed to the store

        Raises:
            ValueError: If max_size < 1 or default_ttl < 0
        """
        self._store: LRUStore[str] = LRUStore(max_size=max_size, default_ttl=default_ttl, clock=clock)
        self._serializer: Serializer[Any] = serializer or JsonSerializer()

        # Stats
        self._hits = 0
        self._misses = 0
        self._sets = 0
        self._deletes = 0

    @property
    def max_size(self) -> int:
        return self._store.max_size

    @property
    def default_ttl(self) -> int:
        return self._store.default_ttl

    async def get(self, key: str) -> Any | None:
        """Retrieve value from cache."""
        data = self._store.get(key)
        if data is None:
            self._misses += 1
            return None

        try:
            value = self._serializer.loads(data)
        except DeserializationError as e:
            # Corrupted entry: drop it so it cannot be served again
            self._store.delete(key)
            self._misses += 1
            logger.warning(
                "Removed corrupted entry '%s' from memory cache",
                key,
                extra={"key": key, "error": str(e)},
            )
            return None

        self._hits += 1
        return value

    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        """Store value in cache."""
        # Serialization errors propagate before the store is touched
        data = self._serializer.dumps(value)
        self._store.set(key, data, ttl)
        self._sets += 1

    async def delete(self, key: str) -> None:
        """Delete key from cache."""
        if self._store.delete(key):
            self._deletes += 1

    async def has(self, key: str) -> bool:
        """Check if key exists and is not expired."""
        return self._store.has(key)

    async def clear(self) -> None:
        """Clear all entries from cache."""
        size = len(self._store)
        self._store.clear()
        logger.info("Cleared %d entries from memory cache", size)

    def stats(self) -> StoreStats:
        """Synchronous size statistics of the underlying store."""
        return self._store.stats()

    async def get_stats(self) -> dict[str, Any]:
        """Get cache statistics."""
        store_stats = self._store.stats()
        total_requests = self._hits + self._misses
        hit_rate = (self._hits / total_requests * 100) if total_requests > 0 else 0.0

        return {
            "backend": "memory",
            "size": store_stats.size,
            "max_size": store_stats.max_size,
            "calculated_size": store_stats.calculated_size,
            "default_ttl": self.default_ttl,
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round(hit_rate, 2),
            "sets": self._sets,
            "deletes": self._deletes,
            "evictions": self._store.evictions,
        }

    async def close(self) -> None:
        """Close cache and release resources."""
        # Memory backend holds no external resource
        logger.debug("Memory cache backend closed")
