"""
Cloud Cache — Configuration Loader

Loads and validates configuration from environment variables and .env files.
Provides a cached configuration instance used when the cache factory is
called without an explicit descriptor.
"""

import logging
import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import ValidationError

from ..errors import ConfigurationError
from .schemas import CacheProvider, CloudCacheConfig

logger = logging.getLogger(__name__)

_config_instance: CloudCacheConfig | None = None


def _cache_options_from_env(provider: str) -> dict[str, Any]:
    """Collect the options record for the selected provider."""
    namespace = os.getenv("CACHE_NAMESPACE") or None
    ttl = int(os.getenv("CACHE_TTL_SECONDS", "0"))

    if provider == CacheProvider.MEMORY.value:
        return {
            "max_size": int(os.getenv("CACHE_MAX_SIZE", "1000")),
            "ttl": ttl,
        }

    if provider in (CacheProvider.REDIS.value, CacheProvider.VALKEY.value):
        url_var = "VALKEY_URL" if provider == CacheProvider.VALKEY.value else "REDIS_URL"
        return {
            "url": os.getenv(url_var) or os.getenv("REDIS_URL"),
            "host": os.getenv("REDIS_HOST", "localhost"),
            "port": int(os.getenv("REDIS_PORT", "6379")),
            "password": os.getenv("REDIS_PASSWORD") or None,
            "db": int(os.getenv("REDIS_DB", "0")),
            "namespace": namespace,
            "ttl": ttl,
        }

    if provider == CacheProvider.MEMCACHED.value:
        return {
            "host": os.getenv("MEMCACHED_HOST", "127.0.0.1"),
            "port": int(os.getenv("MEMCACHED_PORT", "11211")),
            "hosts": os.getenv("MEMCACHED_HOSTS") or None,
            "pool_size": int(os.getenv("MEMCACHED_POOL_SIZE", "10")),
            "timeout": float(os.getenv("MEMCACHED_TIMEOUT", "5.0")),
            "namespace": namespace,
            "ttl": ttl,
        }

    # Unknown providers are rejected by CacheConfig validation
    return {}


def _config_dict_from_env() -> dict[str, Any]:
    # Auto-detect provider: Redis if REDIS_URL is set, else memory
    default_provider = CacheProvider.REDIS.value if os.getenv("REDIS_URL") else CacheProvider.MEMORY.value
    provider = os.getenv("CACHE_PROVIDER", default_provider).strip().lower()

    return {
        "environment": os.getenv("ENVIRONMENT", "development"),
        "log_level": os.getenv("LOG_LEVEL", "INFO").upper(),
        "json_logs": os.getenv("LOG_FORMAT", "text").lower() == "json",
        "cache": {
            "provider": provider,
            "options": _cache_options_from_env(provider),
        },
    }


def load_config(
    env_file: str | None = None,
    reload: bool = False,
) -> CloudCacheConfig:
    """
    Load configuration from environment variables and .env file.

    Args:
        env_file: Path to .env file (default: .env in the working directory)
        reload: Force reload even if config already loaded

    Returns:
        Validated CloudCacheConfig instance

    Raises:
        ConfigurationError: If configuration is invalid
    """
    global _config_instance

    if _config_instance is not None and not reload:
        return _config_instance

    env_path = Path(env_file) if env_file else Path.cwd() / ".env"

    if env_path.exists():
        logger.info("Loading environment from %s", env_path)
        try:
            load_dotenv(env_path, override=True)
        except Exception as e:
            logger.error(
                "Failed to load .env file from %s: %s",
                env_path,
                e,
                extra={"path": str(env_path), "error": str(e)},
                exc_info=True,
            )
            raise ConfigurationError(
                f"Failed to load environment file: {e}",
                details={"path": str(env_path), "error": str(e)},
            ) from e
    else:
        logger.debug("No .env file found, using environment variables only")

    try:
        config_dict = _config_dict_from_env()
    except ValueError as e:
        raise ConfigurationError(
            f"Invalid numeric value in environment: {e}",
            details={"error": str(e)},
        ) from e

    try:
        _config_instance = CloudCacheConfig(**config_dict)
    except ValidationError as e:
        logger.error(
            "Configuration validation failed: %s",
            e,
            extra={"validation_errors": e.errors()},
        )
        raise ConfigurationError(
            "Configuration validation failed. Check your environment variables and configuration.",
            details={"validation_errors": e.errors()},
        ) from e

    logger.info(
        "Configuration loaded successfully (environment: %s)",
        _config_instance.environment,
        extra={"environment": _config_instance.environment, "cache_provider": _config_instance.cache.provider.value},
    )
    return _config_instance


def get_config() -> CloudCacheConfig:
    """
    Get the current configuration instance, loading it on first access.

    Returns:
        Current CloudCacheConfig instance
    """
    if _config_instance is None:
        return load_config()

    return _config_instance


def reload_config(env_file: str | None = None) -> CloudCacheConfig:
    """
    Force reload configuration.

    Args:
        env_file: Optional path to .env file

    Returns:
        Reloaded CloudCacheConfig instance
    """
    return load_config(env_file=env_file, reload=True)


def reset_config() -> None:
    """Drop the cached configuration instance (used by tests)."""
    global _config_instance
    _config_instance = None
