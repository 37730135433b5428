"""
Cloud Cache — Cache Backends

Exports available cache backend implementations.

Redis/Valkey and Memcached backends are lazy-loaded via factory.py so their
client libraries are only imported when selected.
"""

from .memory import MemoryCacheBackend

__all__ = [
    "MemoryCacheBackend",
]
