"""
Transit resource services.

Each service derives a cache key, probes the shared cache store, and on a
miss calls its upstream client and normalizer before storing the result.
"""

from .base import CachedResourceService, filter_routes, route_colors
from .bus_service import BusService
from .train_service import TrainService
from .status_service import StatusService
from .locale_service import LocaleService

__all__ = [
    "CachedResourceService",
    "filter_routes",
    "route_colors",
    "BusService",
    "TrainService",
    "StatusService",
    "LocaleService",
]
