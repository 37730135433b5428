"""
Cloud Cache — Cache Factory

Canonical factory for creating cache instances from a configuration descriptor.

Key points:
- A descriptor is ``{provider, options}``; provider is one of
  memory | redis | valkey | memcached
- Every call builds a new backend that owns its own store or client;
  callers close remote backends themselves (or use ``async with``)
- Remote client libraries are imported only when their provider is selected
- Options are typed and validated via Pydantic models

Examples:
    from cloud_cache.cache.factory import create_cache, create_memory_cache

    cache = create_cache({"provider": "memory", "options": {"maxSize": 500, "ttl": 60}})

    async with create_cache({"provider": "redis", "options": {"url": "redis://localhost:6379"}}) as redis_cache:
        await redis_cache.set("key", "value")

    mem_cache = create_memory_cache({"max_size": 100})
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, TypeVar

from pydantic import BaseModel, ValidationError

from ..config import (
    CacheConfig,
    CacheProvider,
    MemcachedCacheOptions,
    MemoryCacheOptions,
    RedisCacheOptions,
    ValkeyCacheOptions,
    get_config,
)
from ..errors import ConfigurationError, DependencyError, UnsupportedProviderError
from .backends.memory import MemoryCacheBackend
from .interface import CacheInterface

if TYPE_CHECKING:
    from .backends.memcached import MemcachedCacheBackend
    from .backends.redis import RedisCacheBackend

logger = logging.getLogger(__name__)

OptionsT = TypeVar("OptionsT", bound=BaseModel)

CacheOptions = Mapping[str, Any] | BaseModel | None


def _parse_options(model: type[OptionsT], options: CacheOptions, provider: CacheProvider) -> OptionsT:
    """Validate a provider options record."""
    if isinstance(options, model):
        return options
    if isinstance(options, BaseModel):
        options = options.model_dump()

    try:
        return model.model_validate(dict(options or {}))
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid options for cache provider '{provider.value}'",
            details={"provider": provider.value, "validation_errors": e.errors()},
        ) from e


def _load_redis_backend(provider: CacheProvider) -> type[RedisCacheBackend]:
    # Lazy import to avoid a hard dependency when the memory backend is used
    try:
        from .backends.redis import RedisCacheBackend
    except ImportError as e:
        logger.error(
            "%s backend selected but redis client is not installed",
            provider.value,
            extra={"package": "redis>=5.0.1", "error": str(e)},
        )
        raise DependencyError(
            "redis",
            feature=f"the {provider.value} cache provider",
            install_hint="pip install 'redis>=5.0.1'",
            details={"error": str(e)},
        ) from e
    return RedisCacheBackend


def _load_memcached_backend() -> type[MemcachedCacheBackend]:
    try:
        from .backends.memcached import MemcachedCacheBackend
    except ImportError as e:
        logger.error(
            "memcached backend selected but pymemcache is not installed",
            extra={"package": "pymemcache>=4.0", "error": str(e)},
        )
        raise DependencyError(
            "pymemcache",
            feature="the memcached cache provider",
            install_hint="pip install 'pymemcache>=4.0'",
            details={"error": str(e)},
        ) from e
    return MemcachedCacheBackend


def create_memory_cache(options: CacheOptions = None) -> MemoryCacheBackend:
    """Create an in-process LRU cache."""
    opts = _parse_options(MemoryCacheOptions, options, CacheProvider.MEMORY)
    return MemoryCacheBackend(max_size=opts.max_size, default_ttl=opts.ttl)


def _create_redis_protocol_cache(provider: CacheProvider, opts: RedisCacheOptions) -> RedisCacheBackend:
    backend_cls = _load_redis_backend(provider)
    return backend_cls(
        opts.url,
        host=opts.host,
        port=opts.port,
        password=opts.password,
        db=opts.db,
        namespace=opts.namespace,
        default_ttl=opts.ttl,
        max_connections=opts.max_connections,
        socket_timeout=opts.socket_timeout,
        dialect=provider.value,
    )


def create_redis_cache(options: CacheOptions = None) -> RedisCacheBackend:
    """Create a Redis cache backend."""
    opts = _parse_options(RedisCacheOptions, options, CacheProvider.REDIS)
    return _create_redis_protocol_cache(CacheProvider.REDIS, opts)


def create_valkey_cache(options: CacheOptions = None) -> RedisCacheBackend:
    """Create a Valkey cache backend (Redis protocol, Valkey dialect)."""
    opts = _parse_options(ValkeyCacheOptions, options, CacheProvider.VALKEY)
    return _create_redis_protocol_cache(CacheProvider.VALKEY, opts)


def create_memcached_cache(options: CacheOptions = None) -> MemcachedCacheBackend:
    """Create a Memcached cache backend."""
    opts = _parse_options(MemcachedCacheOptions, options, CacheProvider.MEMCACHED)
    backend_cls = _load_memcached_backend()
    return backend_cls(
        servers=opts.servers(),
        pool_size=opts.pool_size,
        namespace=opts.namespace,
        default_ttl=opts.ttl,
        timeout=opts.timeout,
    )


def _coerce_config(config: CacheConfig | Mapping[str, Any] | None) -> CacheConfig:
    if config is None:
        return get_config().cache
    if isinstance(config, CacheConfig):
        return config

    provider = config.get("provider", CacheProvider.MEMORY)
    raw = provider.value if isinstance(provider, CacheProvider) else provider
    if raw not in CacheProvider.values():
        raise UnsupportedProviderError(provider, CacheProvider.values())

    try:
        return CacheConfig.model_validate(dict(config))
    except ValidationError as e:
        raise ConfigurationError(
            "Invalid cache configuration",
            details={"validation_errors": e.errors()},
        ) from e


def create_cache(config: CacheConfig | Mapping[str, Any] | None = None) -> CacheInterface:
    """
    Create a cache backend instance based on configuration.

    Args:
        config: Cache descriptor (CacheConfig or ``{"provider": ..., "options": {...}}``);
            uses the environment configuration if not provided

    Returns:
        Newly constructed cache backend

    Raises:
        UnsupportedProviderError: If the provider is not one of the supported names
        ConfigurationError: If the provider options are invalid
        DependencyError: If the provider's client library is not installed
    """
    cache_config = _coerce_config(config)
    provider = cache_config.provider

    logger.info(
        "Creating cache with provider: %s",
        provider.value,
        extra={"provider": provider.value},
    )

    if provider == CacheProvider.MEMORY:
        return create_memory_cache(cache_config.options)
    elif provider == CacheProvider.REDIS:
        return create_redis_cache(cache_config.options)
    elif provider == CacheProvider.VALKEY:
        return create_valkey_cache(cache_config.options)
    elif provider == CacheProvider.MEMCACHED:
        return create_memcached_cache(cache_config.options)

    raise UnsupportedProviderError(provider, CacheProvider.values())
