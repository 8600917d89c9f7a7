"""
Cache-aside pipeline shared by the transit resource services.
"""

from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, TypeVar

from pydantic import TypeAdapter

from shared.errors import CacheUnavailable, ValidationError
from shared.logging import get_logger

from ..caching.cache_store import CacheStore
from ..normalization.models import NormalizedRoute

T = TypeVar("T")


class CachedResourceService:
    """Runs ``check cache -> fetch on miss -> normalize -> store -> return``.

    Upstream and normalization errors propagate unchanged and leave the
    cache untouched. A cache fault on read counts as a miss; a cache fault
    on write is logged and the fresh value is still returned.

    The cache holds a JSON-shaped dump, never the objects handed to callers.
    Every hit rebuilds fresh models, so a caller mutating its result can not
    alter the entry. A dump the adapter rejects is refetched and overwritten.
    """

    def __init__(self, cache: CacheStore, logger_name: str):
        self.cache = cache
        self.logger = get_logger(logger_name)

    async def _cached(
        self,
        key: str,
        fetch: Callable[[], Awaitable[Any]],
        normalize: Callable[[Any], T],
        adapter: TypeAdapter,
    ) -> T:
        cached = await self._cache_get(key, adapter.validate_python)
        if cached is not None:
            return cached

        raw = await fetch()
        value = normalize(raw)
        await self._cache_set(key, adapter.dump_python(value, mode="json", by_alias=True))
        return value

    async def _cache_get(self, key: str, decode: Callable[[Any], Any]) -> Optional[Any]:
        try:
            return await self.cache.get(key, decode)
        except CacheUnavailable as exc:
            self.logger.warning("Cache read failed, treating as miss", key=key, error=exc.message)
            return None

    async def _cache_set(self, key: str, value: Any) -> None:
        try:
            await self.cache.set(key, value)
        except CacheUnavailable as exc:
            self.logger.warning("Cache write failed", key=key, error=exc.message)


def filter_routes(
    routes: List[NormalizedRoute],
    search: Optional[str] = None,
    offset: int = 0,
    limit: Optional[int] = None,
) -> List[NormalizedRoute]:
    """Case-insensitive name search, then offset/limit slicing."""
    if offset < 0:
        raise ValidationError("offset must not be negative", details={"offset": offset})
    if limit is not None and limit < 0:
        raise ValidationError("limit must not be negative", details={"limit": limit})

    if search:
        needle = search.lower()
        routes = [route for route in routes if needle in route.name.lower()]

    end = None if limit is None else offset + limit
    return routes[offset:end]


def route_colors(routes: List[NormalizedRoute], ids: Iterable[str]) -> Dict[str, str]:
    """Map each requested route id to its color. Unknown ids are omitted."""
    wanted = set(ids)
    return {route.route: route.color for route in routes if route.route in wanted}
