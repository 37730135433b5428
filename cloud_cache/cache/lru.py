"""
Cloud Cache — Bounded LRU Store

Capacity-bounded key/value container with least-recently-used eviction and
per-entry or store-wide TTL. Backs the memory cache backend.

Recency is the position in an OrderedDict (front = least recently used).
Expiration is independent of recency: an entry may be expired while sitting at
the most-recent end. It is checked by timestamp when a read observes the entry
and purged then, or eagerly via purge_expired().

All operations are synchronous, O(1) expected, and serialized by one lock so
the store can be shared across threads as well as coroutines.
"""

import logging
import threading
import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

V = TypeVar("V")


@dataclass(slots=True)
class _Entry(Generic[V]):
    value: V
    expires_at: float | None  # None = never expires


@dataclass(frozen=True)
class StoreStats:
    """Point-in-time store introspection."""

    size: int
    max_size: int
    calculated_size: int = 0


class LRUStore(Generic[V]):
    """
    Bounded LRU store with optional expiration.

    Features:
    - LRU eviction when max_size would be exceeded
    - Per-entry TTL, falling back to the store default
    - get() refreshes recency, has() does not
    - Thread-safe operations
    """

    def __init__(
        self,
        max_size: int = 1000,
        default_ttl: int = 0,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the store.

        Args:
            max_size: Maximum number of entries (must be at least 1)
            default_ttl: TTL in seconds applied when set() gets none (0 = no expiry)
            clock: Monotonic time source in seconds

        Raises:
            ValueError: If max_size < 1 or default_ttl < 0
        """
        if max_size < 1:
            raise ValueError(f"max_size must be at least 1, got {max_size}")
        if default_ttl < 0:
            raise ValueError(f"default_ttl must be non-negative, got {default_ttl}")

        self.max_size = max_size
        self.default_ttl = default_ttl
        self.evictions = 0

        self._clock = clock
        self._entries: OrderedDict[str, _Entry[V]] = OrderedDict()
        self._lock = threading.Lock()

    def _expiry_for(self, ttl: int | None) -> float | None:
        """Resolve the absolute expiry for a new entry."""
        if ttl is not None and ttl > 0:
            return self._clock() + ttl
        if self.default_ttl > 0:
            return self._clock() + self.default_ttl
        return None

    def _is_expired(self, entry: _Entry[V]) -> bool:
        return entry.expires_at is not None and self._clock() >= entry.expires_at

    def _live_entry(self, key: str) -> _Entry[V] | None:
        """Return the entry for key, purging it if expired. Caller holds the lock."""
        entry = self._entries.get(key)
        if entry is None:
            return None

        if self._is_expired(entry):
            del self._entries[key]
            logger.debug("Purged expired key from LRU store: %s", key)
            return None

        return entry

    def get(self, key: str, default: V | None = None) -> V | None:
        """Return the value for key and mark it most recently used."""
        with self._lock:
            entry = self._live_entry(key)
            if entry is None:
                return default

            self._entries.move_to_end(key)
            return entry.value

    def set(self, key: str, value: V, ttl: int | None = None) -> str | None:
        """
        Insert or replace the entry for key and mark it most recently used.

        Args:
            key: Entry key
            value: Value to store
            ttl: TTL in seconds; None or 0 falls back to the store default

        Returns:
            The key evicted to make room, if any
        """
        evicted_key = None

        with self._lock:
            entry = _Entry(value, self._expiry_for(ttl))

            if key in self._entries:
                self._entries[key] = entry
                self._entries.move_to_end(key)
                return None

            if len(self._entries) >= self.max_size:
                # Front of the ordering is the least recently used entry
                evicted_key, _ = self._entries.popitem(last=False)
                self.evictions += 1

            self._entries[key] = entry

        if evicted_key is not None:
            logger.debug("Evicted key from LRU store: %s", evicted_key, extra={"max_size": self.max_size})

        return evicted_key

    def delete(self, key: str) -> bool:
        """Remove key if present. Returns True if an entry was removed."""
        with self._lock:
            return self._entries.pop(key, None) is not None

    def has(self, key: str) -> bool:
        """Check for an unexpired entry without touching recency."""
        with self._lock:
            return self._live_entry(key) is not None

    def clear(self) -> None:
        """Drop every entry. Capacity and default TTL are kept."""
        with self._lock:
            self._entries = OrderedDict()

    def purge_expired(self) -> int:
        """Eagerly remove every expired entry. Returns the number removed."""
        with self._lock:
            expired = [key for key, entry in self._entries.items() if self._is_expired(entry)]
            for key in expired:
                del self._entries[key]

        if expired:
            logger.debug("Purged %d expired key(s) from LRU store", len(expired))
        return len(expired)

    def keys(self) -> list[str]:
        """Snapshot of keys from least to most recently used, expired ones included."""
        with self._lock:
            return list(self._entries)

    def stats(self) -> StoreStats:
        """Report size without purging expired entries."""
        with self._lock:
            return StoreStats(size=len(self._entries), max_size=self.max_size)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.has(key)
