"""
Cloud Cache — Unified Caching Interface

One async cache API (get/set/delete/has/clear) over an in-process LRU store,
Redis, Valkey and Memcached, selected by a factory from a configuration
descriptor.
"""

__version__ = "1.0.0"

from .cache import (
    CacheInterface,
    LRUStore,
    create_cache,
    create_memcached_cache,
    create_memory_cache,
    create_redis_cache,
    create_valkey_cache,
    deserialize,
    is_serializable,
    serialize,
)
from .cache.backends import MemoryCacheBackend
from .config import CacheConfig, CacheProvider
from .errors import (
    CacheError,
    CacheOperationError,
    CloudCacheError,
    ConfigurationError,
    DependencyError,
    DeserializationError,
    SerializationError,
    UnsupportedProviderError,
)
from .observability import configure_logging, configure_logging_from_config

__all__ = [
    "create_cache",
    "create_memory_cache",
    "create_redis_cache",
    "create_valkey_cache",
    "create_memcached_cache",
    "CacheInterface",
    "MemoryCacheBackend",
    "LRUStore",
    "CacheConfig",
    "CacheProvider",
    "serialize",
    "deserialize",
    "is_serializable",
    "configure_logging",
    "configure_logging_from_config",
    "CloudCacheError",
    "ConfigurationError",
    "UnsupportedProviderError",
    "DependencyError",
    "CacheError",
    "SerializationError",
    "DeserializationError",
    "CacheOperationError",
]
