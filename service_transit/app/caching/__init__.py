"""
Transit caching package.

Provides the TTL cache store shared by every resource service and the pure
functions deriving cache keys per resource kind. Caches are short-lived and
hold normalized values only.
"""

from . import cache_keys
from .cache_store import CacheEntry, CacheStore, MemoryCacheStore, RedisCacheStore, create_cache_store

__all__ = [
    "cache_keys",
    "CacheEntry",
    "CacheStore",
    "MemoryCacheStore",
    "RedisCacheStore",
    "create_cache_store",
]
