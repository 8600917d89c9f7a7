"""
TTL cache stores shared by the transit resource services.
"""

import json
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, TYPE_CHECKING

import redis.asyncio as redis
from pydantic import TypeAdapter, ValidationError
from redis.exceptions import RedisError

from shared.errors import CacheUnavailable
from shared.logging import get_logger

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


DEFAULT_TTL_SECONDS = 60

_JSON = TypeAdapter(Any)


@dataclass
class CacheEntry:
    """A cached value and the monotonic time at which it stops being live."""

    key: str
    value: Any
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class CacheStore(ABC):
    """Key/value store with a fixed TTL and hit/miss accounting.

    Every ``get`` emits exactly one observation for its key: a hit when a
    live entry is found, a miss otherwise. Every ``set`` emits a stats
    snapshot with the live key count and the cumulative hit/miss counters.
    """

    def __init__(self, ttl_seconds: int = DEFAULT_TTL_SECONDS, *, metrics: Optional["MetricsCollector"] = None):
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self.ttl_seconds = ttl_seconds
        self.metrics = metrics
        self.logger = get_logger("transit.cache")
        self.hits = 0
        self.misses = 0
        self._counter_lock = threading.Lock()

    async def get(self, key: str, decode: Optional[Callable[[Any], Any]] = None) -> Optional[Any]:
        """Return the live value for ``key`` or None.

        ``decode`` turns the stored value back into its typed form. An entry it
        rejects is stale and counts as a miss.
        """
        try:
            value = await self._read(key)
        except CacheUnavailable:
            self.log_miss(key)
            raise

        if value is None:
            self.log_miss(key)
            return None

        if decode is not None:
            try:
                value = decode(value)
            except ValidationError as exc:
                self.logger.warning("Discarding stale cache entry", key=key, error=str(exc))
                self.log_miss(key)
                return None

        self.log_hit(key)
        return value

    async def set(self, key: str, value: Any) -> bool:
        """Store ``value`` under ``key``, resetting its expiry."""
        if value is None:
            raise ValueError("None can not be cached; absence is the miss signal")

        await self._write(key, value)
        stats = await self.stats()
        self.logger.info("Cache stats", **stats)
        if self.metrics:
            self.metrics.set_gauge("cache_keys", stats["keys"])
        return True

    async def flush_all(self) -> None:
        """Drop every entry."""
        await self._flush()
        self.logger.info("Cache flushed")

    async def stats(self) -> Dict[str, int]:
        with self._counter_lock:
            hits, misses = self.hits, self.misses
        return {"keys": await self._count(), "hits": hits, "misses": misses}

    def log_hit(self, key: str) -> None:
        with self._counter_lock:
            self.hits += 1
        self.logger.info("Cache Hit", key=key)
        if self.metrics:
            self.metrics.record_cache_access(key, hit=True)

    def log_miss(self, key: str) -> None:
        with self._counter_lock:
            self.misses += 1
        self.logger.info("Cache Miss", key=key)
        if self.metrics:
            self.metrics.record_cache_access(key, hit=False)

    async def close(self) -> None:
        """Release backend resources."""

    @abstractmethod
    async def _read(self, key: str) -> Optional[Any]:
        ...

    @abstractmethod
    async def _write(self, key: str, value: Any) -> None:
        ...

    @abstractmethod
    async def _flush(self) -> None:
        ...

    @abstractmethod
    async def _count(self) -> int:
        ...


class MemoryCacheStore(CacheStore):
    """In-process store. Expired entries are swept lazily on read and count."""

    def __init__(
        self,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        *,
        metrics: Optional["MetricsCollector"] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        super().__init__(ttl_seconds, metrics=metrics)
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    async def _read(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.is_expired(self._clock()):
                del self._entries[key]
                return None
            return entry.value

    async def _write(self, key: str, value: Any) -> None:
        with self._lock:
            self._entries[key] = CacheEntry(key, value, self._clock() + self.ttl_seconds)

    async def _flush(self) -> None:
        with self._lock:
            self._entries.clear()

    async def _count(self) -> int:
        with self._lock:
            now = self._clock()
            expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
            for key in expired:
                del self._entries[key]
            return len(self._entries)


class RedisCacheStore(CacheStore):
    """Redis-backed store. Values are stored as JSON with ``SET ... EX``."""

    def __init__(
        self,
        redis_url: str,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        *,
        prefix: str = "transit:",
        metrics: Optional["MetricsCollector"] = None,
        client: Optional[redis.Redis] = None,
    ):
        super().__init__(ttl_seconds, metrics=metrics)
        self.redis_url = redis_url
        self.prefix = prefix
        self._redis = client or redis.from_url(
            redis_url,
            encoding="utf-8",
            decode_responses=True,
        )

    async def close(self) -> None:
        try:
            await self._redis.close()
        except RedisError as exc:
            self.logger.warning("Redis close failed", error=str(exc))

    async def ping(self) -> bool:
        try:
            return bool(await self._redis.ping())
        except RedisError as exc:
            self.logger.error("Redis health check failed", error=str(exc))
            return False

    async def _read(self, key: str) -> Optional[Any]:
        try:
            raw = await self._redis.get(self.prefix + key)
        except RedisError as exc:
            raise CacheUnavailable("Redis read failed", details={"key": key, "error": str(exc)})

        if raw is None:
            return None

        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            self.logger.warning("Discarding malformed cache payload", key=key)
            return None

    async def _write(self, key: str, value: Any) -> None:
        payload = json.dumps(_JSON.dump_python(value, mode="json", by_alias=True))
        try:
            await self._redis.set(self.prefix + key, payload, ex=self.ttl_seconds)
        except RedisError as exc:
            raise CacheUnavailable("Redis write failed", details={"key": key, "error": str(exc)})

    async def _flush(self) -> None:
        try:
            keys = [key async for key in self._redis.scan_iter(match=f"{self.prefix}*")]
            if keys:
                await self._redis.delete(*keys)
        except RedisError as exc:
            raise CacheUnavailable("Redis flush failed", details={"error": str(exc)})

    async def _count(self) -> int:
        try:
            return len([key async for key in self._redis.scan_iter(match=f"{self.prefix}*")])
        except RedisError as exc:
            raise CacheUnavailable("Redis key count failed", details={"error": str(exc)})


def create_cache_store(
    backend: str,
    ttl_seconds: int,
    *,
    redis_url: Optional[str] = None,
    metrics: Optional["MetricsCollector"] = None,
) -> CacheStore:
    """Build the configured cache backend."""
    if backend == "memory":
        return MemoryCacheStore(ttl_seconds, metrics=metrics)
    if backend == "redis":
        if not redis_url:
            raise ValueError("redis_url is required for the redis cache backend")
        return RedisCacheStore(redis_url, ttl_seconds, metrics=metrics)
    raise ValueError(f"Unknown cache backend: {backend}")
