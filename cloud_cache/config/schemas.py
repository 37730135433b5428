"""
Cloud Cache — Configuration Schemas

Defines typed configuration models using Pydantic for validation and type safety.
A cache is described by a provider name plus a provider-specific options record.
Option names are snake_case; camelCase spellings (maxSize, poolSize, ...) are
accepted as aliases.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..errors import UnsupportedProviderError


class Environment(str, Enum):
    """Runtime environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TEST = "test"


class CacheProvider(str, Enum):
    """Supported cache providers."""

    MEMORY = "memory"
    REDIS = "redis"
    VALKEY = "valkey"
    MEMCACHED = "memcached"

    @classmethod
    def values(cls) -> list[str]:
        return [member.value for member in cls]


class LogLevel(str, Enum):
    """Log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class MemoryCacheOptions(BaseModel):
    """In-process LRU cache options."""

    model_config = ConfigDict(populate_by_name=True)

    max_size: int = Field(default=1000, ge=1, alias="maxSize", description="Max cache entries before LRU eviction")
    ttl: int = Field(default=0, ge=0, description="Default TTL in seconds (0 = no default expiry)")


class RedisCacheOptions(BaseModel):
    """Redis connection options."""

    model_config = ConfigDict(populate_by_name=True)

    url: str | None = Field(default=None, description="Connection URL; overrides host/port/password/db")
    host: str = Field(default="localhost", description="Server host")
    port: int = Field(default=6379, ge=1, le=65535, description="Server port")
    password: str | None = Field(default=None, description="AUTH password")
    db: int = Field(default=0, ge=0, description="Database index")
    namespace: str | None = Field(default=None, description="Key prefix; clear() only removes this namespace")
    ttl: int = Field(default=0, ge=0, description="Default TTL in seconds (0 = no default expiry)")
    max_connections: int = Field(default=10, ge=1, alias="maxConnections", description="Connection pool size")
    socket_timeout: float = Field(default=5.0, gt=0, alias="socketTimeout", description="Socket timeout in seconds")


class ValkeyCacheOptions(RedisCacheOptions):
    """Valkey connection options (wire-compatible with Redis)."""


class MemcachedCacheOptions(BaseModel):
    """Memcached connection options."""

    model_config = ConfigDict(populate_by_name=True)

    hosts: list[str] | None = Field(
        default=None, description="Server list as 'host:port' entries; overrides host/port when non-empty"
    )
    host: str = Field(default="127.0.0.1", description="Server host")
    port: int = Field(default=11211, ge=1, le=65535, description="Server port")
    pool_size: int = Field(default=10, ge=1, alias="poolSize", description="Connection pool size (per server)")
    timeout: float = Field(default=5.0, gt=0, description="Connect and socket timeout in seconds")
    namespace: str | None = Field(default=None, description="Key prefix")
    ttl: int = Field(default=0, ge=0, description="Default TTL in seconds (0 = no default expiry)")

    @field_validator("hosts", mode="before")
    @classmethod
    def split_hosts(cls, v: Any) -> Any:
        """Accept a comma-separated string as well as a list."""
        if isinstance(v, str):
            return [h.strip() for h in v.split(",") if h.strip()]
        return v

    @field_validator("hosts")
    @classmethod
    def validate_hosts(cls, v: list[str] | None) -> list[str] | None:
        """Every entry must be 'host' or 'host:port' with a valid port."""
        for entry in v or []:
            _parse_server(entry)
        return v

    def servers(self) -> list[tuple[str, int]]:
        """Resolve the server list; falls back to host/port."""
        if self.hosts:
            return [_parse_server(entry, self.port) for entry in self.hosts]
        return [(self.host, self.port)]


def _parse_server(entry: str, default_port: int = 11211) -> tuple[str, int]:
    host, sep, port = entry.strip().rpartition(":")
    if not sep:
        host, port = port, str(default_port)
    if not host:
        raise ValueError(f"Invalid memcached server '{entry}': missing host")
    try:
        port_number = int(port)
    except ValueError:
        raise ValueError(f"Invalid memcached server '{entry}': port must be a number") from None
    if not 1 <= port_number <= 65535:
        raise ValueError(f"Invalid memcached server '{entry}': port out of range")
    return host, port_number


class CacheConfig(BaseModel):
    """Cache configuration descriptor consumed by the cache factory."""

    model_config = ConfigDict(frozen=True)

    provider: CacheProvider = Field(default=CacheProvider.MEMORY, description="Cache provider to use")
    options: dict[str, Any] = Field(default_factory=dict, description="Provider-specific options")

    @field_validator("provider", mode="before")
    @classmethod
    def validate_provider(cls, v: Any) -> Any:
        """Reject providers outside the supported set with a dedicated error."""
        raw = v.value if isinstance(v, CacheProvider) else v
        if raw not in CacheProvider.values():
            raise UnsupportedProviderError(v, CacheProvider.values())
        return v

    @field_validator("options", mode="before")
    @classmethod
    def default_options(cls, v: Any) -> Any:
        """Treat a missing options record as empty."""
        return {} if v is None else v


class CloudCacheConfig(BaseModel):
    """Root configuration."""

    environment: Environment = Field(default=Environment.DEVELOPMENT, description="Runtime environment")
    log_level: LogLevel = Field(default=LogLevel.INFO, description="Logging level")
    json_logs: bool = Field(default=False, description="Emit logs as JSON lines")

    cache: CacheConfig = Field(default_factory=CacheConfig)

    model_config = ConfigDict(use_enum_values=True, validate_assignment=True)
