"""
Cloud Cache — Configuration Module

Provides typed configuration loading and validation.
"""

from .loader import get_config, load_config, reload_config, reset_config
from .schemas import (
    CacheConfig,
    CacheProvider,
    CloudCacheConfig,
    Environment,
    LogLevel,
    MemcachedCacheOptions,
    MemoryCacheOptions,
    RedisCacheOptions,
    ValkeyCacheOptions,
)

__all__ = [
    # Loader functions
    "load_config",
    "get_config",
    "reload_config",
    "reset_config",
    # Main config
    "CloudCacheConfig",
    # Enums
    "Environment",
    "CacheProvider",
    "LogLevel",
    # Config sections
    "CacheConfig",
    "MemoryCacheOptions",
    "RedisCacheOptions",
    "ValkeyCacheOptions",
    "MemcachedCacheOptions",
]
