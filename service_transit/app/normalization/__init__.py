"""
Normalization of upstream transit payloads into one domain model.

``bus`` and ``train`` hold one pure transform per resource kind;
``models`` holds the normalized shapes both produce.
"""

from . import bus, train
from .models import (
    NormalizedPattern,
    NormalizedPrediction,
    NormalizedRoute,
    NormalizedStopSet,
    NormalizedVehicle,
    PatternPoint,
    PointKind,
    RouteType,
    Stop,
)

__all__ = [
    "bus",
    "train",
    "NormalizedPattern",
    "NormalizedPrediction",
    "NormalizedRoute",
    "NormalizedStopSet",
    "NormalizedVehicle",
    "PatternPoint",
    "PointKind",
    "RouteType",
    "Stop",
]
