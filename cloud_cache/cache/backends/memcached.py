"""
Cloud Cache — Memcached Cache Backend

Async wrapper around pymemcache (sync-only library): a PooledClient for one
server, a HashClient sharding keys across several.
Every client call runs in a worker thread via ``asyncio.to_thread`` so the
event loop never blocks on the socket.

Memcached has no EXISTS command, so has() is a GET. Expiration times longer
than 30 days must be sent as absolute UNIX timestamps per the memcached
protocol.

Requires: pymemcache>=4.0
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any

from ...errors import CacheOperationError, DeserializationError, SerializationError
from ..interface import CacheInterface
from ..serialization import JsonSerializer, Serializer

logger = logging.getLogger(__name__)

try:
    from pymemcache.client.base import PooledClient
    from pymemcache.client.hash import HashClient
    from pymemcache.exceptions import MemcacheError
except ImportError as e:  # pragma: no cover
    raise ImportError(
        "Memcached client is required but not installed. "
        "Install with: pip install 'pymemcache>=4.0' or add 'pymemcache' to your dependencies."
    ) from e

# Protocol errors are MemcacheError subclasses; socket failures and timeouts are OSErrors
_CLIENT_ERRORS = (MemcacheError, OSError)

# Relative expiration limit; larger values are read as UNIX timestamps
MAX_RELATIVE_EXPTIME = 60 * 60 * 24 * 30


def _decode_stats(raw: dict[Any, Any]) -> dict[str, Any]:
    return {
        (k.decode() if isinstance(k, bytes) else k): (v.decode() if isinstance(v, bytes) else v)
        for k, v in raw.items()
    }


class MemcachedCacheBackend(CacheInterface):
    """Memcached cache backend with JSON serialization and TTL."""

    def __init__(
        self,
        host: str = "127.0.0.1",
        port: int = 11211,
        *,
        servers: list[tuple[str, int]] | None = None,
        pool_size: int = 10,
        namespace: str | None = None,
        default_ttl: int = 0,
        timeout: float | None = 5.0,
        serializer: Serializer[Any] | None = None,
        client: PooledClient | HashClient | None = None,
    ) -> None:
        """
        Initialize Memcached cache backend.

        Args:
            host: Server host
            port: Server port
            servers: (host, port) list; more than one entry shards keys across
                the servers with a HashClient. Overrides host/port.
            pool_size: Connection pool size (per server)
            namespace: Prefix for all keys
            default_ttl: Default TTL in seconds (0 => no expiry)
            timeout: Connect and socket timeout in seconds
            serializer: Value codec (JSON by default)
            client: Pre-built client, used instead of creating one
        """
        self.servers = list(servers) if servers else [(host, port)]
        self.host, self.port = self.servers[0]
        self.timeout = timeout
        self.namespace = namespace.strip() if namespace and namespace.strip() else None
        self.default_ttl = max(0, int(default_ttl))
        self._serializer: Serializer[Any] = serializer or JsonSerializer()

        self._hits = 0
        self._misses = 0
        self._sets = 0
        self._deletes = 0

        # Pools connect lazily; noreply off so storage commands report real outcomes
        self._client: PooledClient | HashClient
        if client is not None:
            self._client = client
        elif len(self.servers) > 1:
            self._client = HashClient(
                self.servers,
                use_pooling=True,
                max_pool_size=pool_size,
                connect_timeout=timeout,
                timeout=timeout,
                default_noreply=False,
                allow_unicode_keys=True,
            )
        else:
            self._client = PooledClient(
                self.servers[0],
                max_pool_size=pool_size,
                connect_timeout=timeout,
                timeout=timeout,
                default_noreply=False,
                allow_unicode_keys=True,
            )

    def _make_key(self, key: str) -> str:
        """Create namespaced key."""
        return f"{self.namespace}:{key}" if self.namespace else key

    def _exptime(self, ttl: int | None) -> int:
        """Resolve the expire argument (0 = never expires)."""
        if ttl is not None and int(ttl) > 0:
            seconds = int(ttl)
        else:
            seconds = self.default_ttl

        if seconds > MAX_RELATIVE_EXPTIME:
            return int(time.time()) + seconds
        return seconds

    def _operation_error(self, operation: str, error: Exception, key: str | None = None) -> CacheOperationError:
        details: dict[str, Any] = {"host": self.host, "port": self.port}
        if len(self.servers) > 1:
            details["servers"] = [f"{h}:{p}" for h, p in self.servers]
        if key is not None:
            details["key"] = key
        logger.error(
            "Memcached %s failed: %s",
            operation,
            error,
            extra={"operation": operation, "backend": "memcached", **details},
            exc_info=True,
        )
        return CacheOperationError("Memcached", operation, error, details=details)

    async def get(self, key: str) -> Any | None:
        """Retrieve a value by key."""
        mc_key = self._make_key(key)
        try:
            data = await asyncio.to_thread(self._client.get, mc_key)
        except _CLIENT_ERRORS as e:
            raise self._operation_error("GET", e, key) from e

        if data is None:
            self._misses += 1
            return None

        try:
            value = self._serializer.loads(data)
        except DeserializationError as e:
            self._misses += 1
            logger.warning(
                "Dropping corrupted entry '%s' from Memcached",
                key,
                extra={"key": key, "error": str(e)},
            )
            try:
                await asyncio.to_thread(self._client.delete, mc_key)
            except _CLIENT_ERRORS as del_error:
                raise self._operation_error("DEL", del_error, key) from del_error
            return None

        self._hits += 1
        return value

    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        """Store a value with optional TTL."""
        encoded = self._serializer.dumps(value)
        try:
            payload = encoded.encode("utf-8")
        except UnicodeEncodeError as e:
            raise SerializationError(
                f"Serialized value is not valid UTF-8: {e}",
                details={"value_type": type(value).__name__, "error": str(e)},
            ) from e
        try:
            await asyncio.to_thread(self._client.set, self._make_key(key), payload, expire=self._exptime(ttl))
        except _CLIENT_ERRORS as e:
            raise self._operation_error("SET", e, key) from e
        self._sets += 1

    async def delete(self, key: str) -> None:
        """Delete a single key."""
        try:
            deleted = await asyncio.to_thread(self._client.delete, self._make_key(key))
        except _CLIENT_ERRORS as e:
            raise self._operation_error("DEL", e, key) from e
        if deleted:
            self._deletes += 1

    async def has(self, key: str) -> bool:
        """Check if a key exists (via GET)."""
        try:
            return await asyncio.to_thread(self._client.get, self._make_key(key)) is not None
        except _CLIENT_ERRORS as e:
            raise self._operation_error("EXISTS", e, key) from e

    async def clear(self) -> None:
        """Flush every item on the server (memcached has no namespace scan)."""
        try:
            await asyncio.to_thread(self._client.flush_all)
        except _CLIENT_ERRORS as e:
            raise self._operation_error("FLUSH", e) from e
        logger.info("Flushed Memcached servers", extra={"servers": [f"{h}:{p}" for h, p in self.servers]})

    async def get_stats(self) -> dict[str, Any]:
        """Return cache counters plus the server's STATS output."""
        total_requests = self._hits + self._misses
        stats: dict[str, Any] = {
            "backend": "memcached",
            "namespace": self.namespace,
            "default_ttl": self.default_ttl,
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round((self._hits / total_requests) * 100, 2) if total_requests else 0.0,
            "sets": self._sets,
            "deletes": self._deletes,
        }

        try:
            if isinstance(self._client, HashClient):
                # HashClient has no STATS fan-out; ask each node
                stats["servers"] = {
                    name: _decode_stats(await asyncio.to_thread(node.stats))
                    for name, node in self._client.clients.items()
                }
            else:
                stats["server"] = _decode_stats(await asyncio.to_thread(self._client.stats))
        except _CLIENT_ERRORS as e:
            raise self._operation_error("STATS", e) from e

        return stats

    def get_client(self) -> PooledClient | HashClient:
        """Get the underlying client for advanced operations."""
        return self._client

    async def close(self) -> None:
        """Close pooled connections."""
        try:
            await asyncio.to_thread(self._client.close)
        except _CLIENT_ERRORS as e:
            raise self._operation_error("CLOSE", e) from e
        logger.info("Closed Memcached cache backend", extra={"servers": [f"{h}:{p}" for h, p in self.servers]})
