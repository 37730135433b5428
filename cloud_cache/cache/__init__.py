"""
Cloud Cache — Cache Module

Provides caching functionality with pluggable backends.

- factory.py: builds a backend from a {provider, options} descriptor
- interface.py: abstract cache interface all backends implement
- lru.py: bounded LRU store behind the memory backend
- serialization.py: JSON codec applied at the backend boundary
- backends/: memory, Redis/Valkey and Memcached implementations

Usage:
    from cloud_cache.cache import create_cache

    cache = create_cache({"provider": "memory", "options": {"max_size": 100}})
    await cache.set("key", "value", ttl=3600)
    value = await cache.get("key")
"""

from .factory import (
    create_cache,
    create_memcached_cache,
    create_memory_cache,
    create_redis_cache,
    create_valkey_cache,
)
from .interface import CacheInterface
from .lru import LRUStore, StoreStats
from .serialization import JsonSerializer, Serializer, deserialize, is_serializable, serialize

__all__ = [
    # Factory functions
    "create_cache",
    "create_memory_cache",
    "create_redis_cache",
    "create_valkey_cache",
    "create_memcached_cache",
    # Interface
    "CacheInterface",
    # Core store
    "LRUStore",
    "StoreStats",
    # Serialization
    "Serializer",
    "JsonSerializer",
    "serialize",
    "deserialize",
    "is_serializable",
]
