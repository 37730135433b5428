"""
Cloud Cache — Redis / Valkey Cache Backend

Asynchronous cache backend for Redis-protocol servers with:
- JSON serialization for values
- Per-key TTL support with a backend default
- Optional namespace prefixing for shared databases
- Batch operations using MGET, pipelines and chunked DEL

Valkey is wire-compatible with Redis, so both are served by this one class;
the ``dialect`` only changes how the backend names itself in errors, logs
and statistics.

Requires: redis>=5.0.1 with asyncio support

Example:
    cache = RedisCacheBackend(url="redis://localhost:6379/0", default_ttl=3600)
    await cache.set("greeting", {"msg": "hello"}, ttl=60)
    val = await cache.get("greeting")
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any

from ...errors import CacheOperationError, DeserializationError
from ..interface import CacheInterface
from ..serialization import JsonSerializer, Serializer

logger = logging.getLogger(__name__)

try:
    # redis-py asyncio client (v4.2+)
    from redis.asyncio import Redis
    from redis.exceptions import RedisError
except ImportError as e:  # pragma: no cover
    raise ImportError(
        "Redis async client is required but not installed. "
        "Install with: pip install 'redis>=5.0.1' or add 'redis' to your dependencies."
    ) from e

# Network failures surface as RedisError subclasses or raw socket errors
_CLIENT_ERRORS = (RedisError, OSError)


class RemoteDialect(str, Enum):
    """Redis-protocol server flavours."""

    REDIS = "redis"
    VALKEY = "valkey"

    @property
    def display_name(self) -> str:
        return "Valkey" if self is RemoteDialect.VALKEY else "Redis"


class RedisCacheBackend(CacheInterface):
    """
    Redis/Valkey cache backend with JSON serialization and TTL.

    Notes:
    - Keys are prefixed with the namespace when one is configured.
    - Values are stored as UTF-8 JSON strings.
    - TTL is applied via SET EX seconds (0/None -> default_ttl, default 0 -> no expiry).
    - Client failures are raised as CacheOperationError; nothing is retried.
    """

    def __init__(
        self,
        url: str | None = None,
        *,
        host: str = "localhost",
        port: int = 6379,
        password: str | None = None,
        db: int = 0,
        namespace: str | None = None,
        default_ttl: int = 0,
        max_connections: int = 10,
        socket_timeout: float = 5.0,
        dialect: RemoteDialect | str = RemoteDialect.REDIS,
        serializer: Serializer[Any] | None = None,
        client: Redis | None = None,
    ) -> None:
        """
        Initialize Redis cache backend.

        Args:
            url: Connection URL, e.g. redis://localhost:6379/0 (overrides host/port/password/db)
            host: Server host
            port: Server port
            password: AUTH password
            db: Database index
            namespace: Prefix for all keys; clear() then only removes this namespace
            default_ttl: Default TTL in seconds (0 => no expiry)
            max_connections: Connection pool size
            socket_timeout: Socket timeout in seconds
            dialect: Which Redis-protocol server is targeted
            serializer: Value codec (JSON by default)
            client: Pre-built client, used instead of creating one
        """
        self.dialect = RemoteDialect(dialect)
        self.namespace = namespace.strip() if namespace and namespace.strip() else None
        self.default_ttl = max(0, int(default_ttl))
        self._serializer: Serializer[Any] = serializer or JsonSerializer()

        self._hits = 0
        self._misses = 0
        self._sets = 0
        self._deletes = 0

        # Client connects lazily on the first command
        if client is not None:
            self._client = client
        elif url:
            self._client = Redis.from_url(
                url,
                decode_responses=True,
                max_connections=max_connections,
                socket_timeout=socket_timeout,
            )
        else:
            self._client = Redis(
                host=host,
                port=port,
                password=password,
                db=db,
                decode_responses=True,
                max_connections=max_connections,
                socket_timeout=socket_timeout,
            )

    # ------------ Helpers ------------

    @property
    def backend_name(self) -> str:
        return self.dialect.display_name

    def _make_key(self, key: str) -> str:
        """Create namespaced key."""
        return f"{self.namespace}:{key}" if self.namespace else key

    def _ttl_seconds(self, ttl: int | None) -> int | None:
        """
        Normalize TTL:
        - positive -> provided ttl
        - None, 0 or negative -> default_ttl if positive, else no expiry (None)
        """
        if ttl is not None and int(ttl) > 0:
            return int(ttl)
        return self.default_ttl if self.default_ttl > 0 else None

    def _operation_error(self, operation: str, error: Exception, key: str | None = None) -> CacheOperationError:
        details: dict[str, Any] = {"namespace": self.namespace}
        if key is not None:
            details["key"] = key
        logger.error(
            "%s %s failed: %s",
            self.backend_name,
            operation,
            error,
            extra={"operation": operation, "backend": self.dialect.value, **details},
            exc_info=True,
        )
        return CacheOperationError(self.backend_name, operation, error, details=details)

    def _decode(self, key: str, data: str | bytes) -> tuple[bool, Any]:
        """Deserialize a stored value. Returns (ok, value)."""
        try:
            return True, self._serializer.loads(data)
        except DeserializationError as e:
            logger.warning(
                "Dropping corrupted entry '%s' from %s",
                key,
                self.backend_name,
                extra={"key": key, "namespace": self.namespace, "error": str(e)},
            )
            return False, None

    # ------------ Core Interface ------------

    async def get(self, key: str) -> Any | None:
        """Retrieve a value by key."""
        ns_key = self._make_key(key)
        try:
            data = await self._client.get(ns_key)
        except _CLIENT_ERRORS as e:
            raise self._operation_error("GET", e, key) from e

        if data is None:
            self._misses += 1
            return None

        ok, value = self._decode(key, data)
        if not ok:
            self._misses += 1
            try:
                await self._client.delete(ns_key)
            except _CLIENT_ERRORS as e:
                raise self._operation_error("DEL", e, key) from e
            return None

        self._hits += 1
        return value

    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        """Store a value with optional TTL."""
        payload = self._serializer.dumps(value)
        ex = self._ttl_seconds(ttl)
        try:
            await self._client.set(self._make_key(key), payload, ex=ex)
        except _CLIENT_ERRORS as e:
            raise self._operation_error("SET", e, key) from e
        self._sets += 1

    async def delete(self, key: str) -> None:
        """Delete a single key."""
        try:
            deleted = await self._client.delete(self._make_key(key))
        except _CLIENT_ERRORS as e:
            raise self._operation_error("DEL", e, key) from e
        if deleted:
            self._deletes += 1

    async def has(self, key: str) -> bool:
        """Check if a key exists."""
        try:
            return bool(await self._client.exists(self._make_key(key)))
        except _CLIENT_ERRORS as e:
            raise self._operation_error("EXISTS", e, key) from e

    async def clear(self) -> None:
        """
        Clear all entries.

        With a namespace: SCAN match "<namespace>:*" and DEL in batches.
        Without one: FLUSHDB on the selected database.
        """
        if not self.namespace:
            try:
                await self._client.flushdb()
            except _CLIENT_ERRORS as e:
                raise self._operation_error("FLUSHDB", e) from e
            logger.info("Flushed %s database", self.backend_name)
            return

        pattern = f"{self.namespace}:*"
        cursor = 0
        total_deleted = 0
        batch_size = 1000

        try:
            while True:
                cursor, keys = await self._client.scan(cursor=cursor, match=pattern, count=batch_size)
                if keys:
                    total_deleted += await self._client.delete(*keys)
                if cursor == 0:
                    break
        except _CLIENT_ERRORS as e:
            raise self._operation_error("CLEAR", e) from e

        self._deletes += total_deleted
        logger.info("Cleared %d keys from namespace '%s'", total_deleted, self.namespace)

    async def get_stats(self) -> dict[str, Any]:
        """Return cache statistics and basic server info."""
        total_requests = self._hits + self._misses
        stats: dict[str, Any] = {
            "backend": self.dialect.value,
            "namespace": self.namespace,
            "default_ttl": self.default_ttl,
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round((self._hits / total_requests) * 100, 2) if total_requests else 0.0,
            "sets": self._sets,
            "deletes": self._deletes,
            "connected": False,
        }

        try:
            stats["connected"] = bool(await self._client.ping())

            info = await self._client.info(section="server")
            stats["server_version"] = info.get("valkey_version") or info.get("redis_version")
            stats["server_mode"] = info.get("server_mode") or info.get("redis_mode")
            stats["keyspace"] = await self._client.info(section="keyspace")
        except _CLIENT_ERRORS as e:
            # INFO may be restricted; keep minimal stats
            logger.warning(
                "Failed to get %s INFO (restricted or unavailable): %s",
                self.backend_name,
                e,
                extra={"error": str(e)},
            )

        return stats

    def get_client(self) -> Redis:
        """Get the underlying client for advanced operations."""
        return self._client

    async def close(self) -> None:
        """Close the client and release its connection pool."""
        try:
            await self._client.aclose()
        except _CLIENT_ERRORS as e:
            raise self._operation_error("CLOSE", e) from e
        logger.info("Closed %s cache backend", self.backend_name, extra={"namespace": self.namespace})

    # ------------ Batch operations ------------

    async def get_many(self, keys: list[str]) -> dict[str, Any]:
        """
        Retrieve multiple values in one round-trip using MGET.
        Missing and corrupted keys are omitted from the result.
        """
        if not keys:
            return {}

        try:
            values = await self._client.mget([self._make_key(k) for k in keys])
        except _CLIENT_ERRORS as e:
            raise self._operation_error("MGET", e) from e

        result: dict[str, Any] = {}
        corrupted: list[str] = []
        # mget preserves order
        for k, raw in zip(keys, values, strict=True):
            if raw is None:
                self._misses += 1
                continue
            ok, value = self._decode(k, raw)
            if not ok:
                self._misses += 1
                corrupted.append(self._make_key(k))
                continue
            self._hits += 1
            result[k] = value

        if corrupted:
            try:
                await self._client.delete(*corrupted)
            except _CLIENT_ERRORS as e:
                raise self._operation_error("DEL", e) from e

        return result

    async def set_many(self, items: dict[str, Any], ttl: int | None = None) -> int:
        """
        Store multiple values using a pipeline. Applies the same TTL to all items.
        All values are serialized before anything is sent.
        """
        if not items:
            return 0

        payloads = {self._make_key(k): self._serializer.dumps(v) for k, v in items.items()}
        ex = self._ttl_seconds(ttl)

        try:
            pipe = self._client.pipeline(transaction=False)
            for ns_key, payload in payloads.items():
                pipe.set(ns_key, payload, ex=ex)
            results = await pipe.execute()
        except _CLIENT_ERRORS as e:
            raise self._operation_error("SET", e) from e

        success_count = sum(1 for r in results if r in (True, "OK", b"OK"))
        self._sets += success_count
        return success_count

    async def delete_many(self, keys: list[str]) -> int:
        """Delete multiple keys with chunked DEL calls. Returns number deleted."""
        if not keys:
            return 0

        ns_keys = [self._make_key(k) for k in keys]
        deleted_total = 0
        chunk_size = 1000

        try:
            for i in range(0, len(ns_keys), chunk_size):
                deleted_total += int(await self._client.delete(*ns_keys[i : i + chunk_size]))
        except _CLIENT_ERRORS as e:
            raise self._operation_error("DEL", e) from e

        self._deletes += deleted_total
        return deleted_total
