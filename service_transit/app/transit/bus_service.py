"""
Bus resource service.
"""

from typing import Dict, Iterable, List, Optional, Union

from pydantic import TypeAdapter

from shared.errors import ValidationError

from ..adapters.bus_client import BusApiClient
from ..caching import cache_keys
from ..caching.cache_store import CacheStore
from ..normalization import bus
from ..normalization.models import (
    NormalizedPattern,
    NormalizedPrediction,
    NormalizedRoute,
    NormalizedStopSet,
    NormalizedVehicle,
)
from .base import CachedResourceService, filter_routes, route_colors

_ROUTES = TypeAdapter(List[NormalizedRoute])
_PATTERNS = TypeAdapter(List[NormalizedPattern])
_DIRECTIONS = TypeAdapter(List[str])
_STOP_SET = TypeAdapter(NormalizedStopSet)


class BusService(CachedResourceService):
    """Coordinates the cache and the bus tracker API for bus resources."""

    def __init__(self, client: BusApiClient, cache: CacheStore):
        super().__init__(cache, "transit.bus_service")
        self.client = client

    async def get_all_routes(self) -> List[NormalizedRoute]:
        """Full normalized route list, cached under the routes key."""
        return await self._cached(
            cache_keys.routes(),
            self.client.get_routes,
            bus.normalize_routes,
            _ROUTES,
        )

    async def get_routes(
        self,
        search: Optional[str] = None,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> List[NormalizedRoute]:
        """Routes filtered by name and paged. Filtering is never cached."""
        return filter_routes(await self.get_all_routes(), search, offset, limit)

    async def get_route_colors(self, ids: Iterable[str]) -> Dict[str, str]:
        return route_colors(await self.get_all_routes(), ids)

    async def get_vehicles(self, routes: Union[str, Iterable[str]]) -> List[NormalizedVehicle]:
        """Live vehicle positions for one or more routes (not cached)."""
        if not isinstance(routes, str):
            routes = ",".join(routes)
        if not routes:
            raise ValidationError("at least one route is required")
        payload = await self.client.get_vehicles(routes)
        return bus.normalize_vehicles(payload)

    async def get_patterns(self, route: str) -> List[NormalizedPattern]:
        return await self._cached(
            cache_keys.pattern(route),
            lambda: self.client.get_patterns(route),
            lambda payload: bus.normalize_patterns(payload, route),
            _PATTERNS,
        )

    async def get_predictions(self, stop_id: str) -> List[NormalizedPrediction]:
        """Arrival predictions for a stop (not cached)."""
        payload = await self.client.get_predictions(stop_id)
        return bus.normalize_predictions(payload)

    async def get_route_directions(self, route: str) -> List[str]:
        return await self._cached(
            cache_keys.direction(route),
            lambda: self.client.get_directions(route),
            bus.normalize_directions,
            _DIRECTIONS,
        )

    async def get_stops(self, route: str, direction: str) -> NormalizedStopSet:
        return await self._cached(
            cache_keys.stops(route, direction),
            lambda: self.client.get_stops(route, direction),
            lambda payload: bus.normalize_stops(payload, route, direction),
            _STOP_SET,
        )

    async def get_route_stops(self, route: str) -> List[NormalizedStopSet]:
        """Stops for every direction of a route.

        Directions are resolved first; a failure there or on any direction's
        stops aborts the whole call.
        """
        stop_sets = []
        for direction in await self.get_route_directions(route):
            stop_sets.append(await self.get_stops(route, direction))
        return stop_sets
