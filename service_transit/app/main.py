"""
Transit service: HTTP surface over the cached, normalized bus and train APIs.
"""

from typing import Dict, List, Optional

from fastapi import Query

from shared.base_service import BaseService
from shared.config import ServiceConfig
from shared.metrics import MetricsCollector

from .adapters.bus_client import BusApiClient
from .adapters.github_client import GitHubClient
from .adapters.train_client import TrainApiClient
from .caching.cache_store import CacheStore, RedisCacheStore, create_cache_store
from .transit.bus_service import BusService
from .transit.locale_service import LocaleService
from .transit.status_service import StatusService
from .transit.train_service import TrainService


def _split_ids(value: str) -> List[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


class TransitService(BaseService):
    """Transit service implementation.

    One cache store is built at startup and handed to every resource
    service. Collaborators may be injected for tests.
    """

    def __init__(
        self,
        *,
        config: Optional[ServiceConfig] = None,
        metrics: Optional[MetricsCollector] = None,
        cache: Optional[CacheStore] = None,
        bus_client: Optional[BusApiClient] = None,
        train_client: Optional[TrainApiClient] = None,
        github_client: Optional[GitHubClient] = None,
    ):
        super().__init__("transit", 8000, config=config, metrics=metrics)

        self.cache = cache or create_cache_store(
            self.config.cache_backend,
            self.config.cache_ttl_seconds,
            redis_url=self.config.redis_url,
            metrics=self.metrics,
        )
        self.bus_client = bus_client or BusApiClient(
            self.config.bus_api_url,
            self.config.bus_api_key,
            timeout=self.config.upstream_timeout_seconds,
            metrics=self.metrics,
        )
        self.train_client = train_client or TrainApiClient(
            self.config.train_api_url,
            self.config.train_api_key,
            timeout=self.config.upstream_timeout_seconds,
            metrics=self.metrics,
        )
        self.github_client = github_client or GitHubClient(
            self.config.github_token,
            self.config.github_workflow_web_url,
            self.config.github_workflow_server_url,
            self.config.github_version_url,
            timeout=self.config.upstream_timeout_seconds,
        )

        self.bus_service = BusService(self.bus_client, self.cache)
        self.train_service = TrainService(self.train_client, self.cache)
        self.status_service = StatusService(self.github_client)
        self.locale_service = LocaleService(self.cache, self.config.locales_dir)

        @self.app.on_event("shutdown")
        async def _shutdown():
            await self.cache.close()

        self._setup_transit_routes()

        # Expose service instance via app state for introspection/testing
        self.app.state.transit_service = self

    async def _check_dependencies(self) -> Dict[str, str]:
        if isinstance(self.cache, RedisCacheStore):
            return {"cache": "ok" if await self.cache.ping() else "error"}
        return {"cache": "ok"}

    def _setup_transit_routes(self):
        """Set up transit-specific routes."""

        @self.app.get("/")
        async def root():
            return {"service": "transit", "message": "Transit Access Layer - Bus and Train API"}

        # Bus

        @self.app.get("/bus/routes")
        async def bus_routes(
            search: Optional[str] = Query(None),
            offset: int = Query(0, ge=0),
            limit: Optional[int] = Query(None, ge=0),
        ):
            routes = await self.bus_service.get_routes(search=search, offset=offset, limit=limit)
            return [route.to_dict() for route in routes]

        @self.app.get("/bus/routes/colors")
        async def bus_route_colors(ids: str = Query(..., min_length=1)):
            return await self.bus_service.get_route_colors(_split_ids(ids))

        @self.app.get("/bus/vehicles")
        async def bus_vehicles(rt: str = Query(..., min_length=1)):
            vehicles = await self.bus_service.get_vehicles(_split_ids(rt))
            return [vehicle.to_dict() for vehicle in vehicles]

        @self.app.get("/bus/patterns")
        async def bus_patterns(rt: str = Query(..., min_length=1)):
            patterns = await self.bus_service.get_patterns(rt)
            return [pattern.to_dict() for pattern in patterns]

        @self.app.get("/bus/predictions")
        async def bus_predictions(stpid: str = Query(..., min_length=1)):
            predictions = await self.bus_service.get_predictions(stpid)
            return [prediction.to_dict() for prediction in predictions]

        @self.app.get("/bus/directions")
        async def bus_directions(rt: str = Query(..., min_length=1)):
            return await self.bus_service.get_route_directions(rt)

        @self.app.get("/bus/stops")
        async def bus_stops(
            rt: str = Query(..., min_length=1),
            dir: Optional[str] = Query(None, min_length=1),
        ):
            if dir is None:
                stop_sets = await self.bus_service.get_route_stops(rt)
                return [stop_set.to_dict() for stop_set in stop_sets]
            stop_set = await self.bus_service.get_stops(rt, dir)
            return stop_set.to_dict()

        # Train

        @self.app.get("/train/routes")
        async def train_routes(
            search: Optional[str] = Query(None),
            offset: int = Query(0, ge=0),
            limit: Optional[int] = Query(None, ge=0),
        ):
            routes = await self.train_service.get_routes(search=search, offset=offset, limit=limit)
            return [route.to_dict() for route in routes]

        @self.app.get("/train/routes/colors")
        async def train_route_colors(ids: str = Query(..., min_length=1)):
            return await self.train_service.get_route_colors(_split_ids(ids))

        @self.app.get("/train/directions")
        async def train_directions(rt: str = Query(..., min_length=1)):
            return await self.train_service.get_route_directions(rt)

        @self.app.get("/train/stops")
        async def train_stops(rt: str = Query(..., min_length=1)):
            stop_sets = await self.train_service.get_stops(rt)
            return [stop_set.to_dict() for stop_set in stop_sets]

        @self.app.get("/train/predictions")
        async def train_predictions(
            staId: Optional[str] = Query(None, min_length=1),
            stpId: Optional[str] = Query(None, min_length=1),
            rt: Optional[str] = Query(None, min_length=1),
        ):
            predictions = await self.train_service.get_predictions(station_id=staId, stop_id=stpId, route=rt)
            return [prediction.to_dict() for prediction in predictions]

        @self.app.get("/train/vehicles")
        async def train_vehicles(rt: str = Query(..., min_length=1)):
            vehicles = await self.train_service.get_vehicles(_split_ids(rt))
            return [vehicle.to_dict() for vehicle in vehicles]

        # Operational status

        @self.app.get("/status/workflow")
        async def status_workflow():
            return await self.status_service.get_github_workflow()

        @self.app.get("/status/version")
        async def status_version():
            return {"version": await self.status_service.get_latest_version()}

        @self.app.get("/locale/{language}/{namespace}")
        async def locale(language: str, namespace: str):
            return await self.locale_service.get_locale(namespace, language)

        # Cache administration

        @self.app.get("/cache/stats")
        async def cache_stats():
            return await self.cache.stats()

        @self.app.post("/cache/flush")
        async def cache_flush():
            await self.cache.flush_all()
            return {"status": "flushed"}


def create_app():
    """Create FastAPI app instance."""
    return TransitService().app


if __name__ == "__main__":
    TransitService().run()
