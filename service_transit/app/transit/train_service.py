"""
Train resource service.
"""

from typing import Dict, Iterable, List, Optional, Union

from pydantic import TypeAdapter

from shared.errors import ValidationError

from ..adapters.train_client import TrainApiClient
from ..caching import cache_keys
from ..caching.cache_store import CacheStore
from ..normalization import train
from ..normalization.models import (
    NormalizedPrediction,
    NormalizedRoute,
    NormalizedStopSet,
    NormalizedVehicle,
)
from .base import CachedResourceService, filter_routes, route_colors

_ROUTES = TypeAdapter(List[NormalizedRoute])
_DIRECTIONS = TypeAdapter(List[str])
_STOP_SETS = TypeAdapter(List[NormalizedStopSet])


class TrainService(CachedResourceService):
    """Coordinates the cache and the train tracker API for train resources."""

    def __init__(self, client: TrainApiClient, cache: CacheStore):
        super().__init__(cache, "transit.train_service")
        self.client = client

    async def get_all_routes(self) -> List[NormalizedRoute]:
        return await self._cached(
            cache_keys.train_routes(),
            self.client.get_routes,
            train.normalize_routes,
            _ROUTES,
        )

    async def get_routes(
        self,
        search: Optional[str] = None,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> List[NormalizedRoute]:
        return filter_routes(await self.get_all_routes(), search, offset, limit)

    async def get_route_colors(self, ids: Iterable[str]) -> Dict[str, str]:
        return route_colors(await self.get_all_routes(), ids)

    async def get_route_directions(self, route: str) -> List[str]:
        return await self._cached(
            cache_keys.train_direction(route),
            lambda: self.client.get_stops(route),
            train.normalize_directions,
            _DIRECTIONS,
        )

    async def get_stops(self, route: str) -> List[NormalizedStopSet]:
        """Stops of a line, one set per direction."""
        return await self._cached(
            cache_keys.train_stops(route),
            lambda: self.client.get_stops(route),
            lambda payload: train.normalize_stops(payload, route),
            _STOP_SETS,
        )

    async def get_predictions(
        self,
        station_id: Optional[str] = None,
        stop_id: Optional[str] = None,
        route: Optional[str] = None,
    ) -> List[NormalizedPrediction]:
        """Arrivals for a station or platform (not cached)."""
        if not station_id and not stop_id:
            raise ValidationError("station_id or stop_id is required")
        payload = await self.client.get_arrivals(station_id=station_id, stop_id=stop_id, route=route)
        return train.normalize_predictions(payload)

    async def get_vehicles(self, routes: Union[str, Iterable[str]]) -> List[NormalizedVehicle]:
        """Live train positions for one or more lines (not cached)."""
        if not isinstance(routes, str):
            routes = ",".join(routes)
        if not routes:
            raise ValidationError("at least one route is required")
        payload = await self.client.get_positions(routes)
        return train.normalize_vehicles(payload)
