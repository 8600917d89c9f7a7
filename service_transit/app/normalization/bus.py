"""
Normalizers for bus tracker payloads.

All functions are pure: they take the unwrapped ``bustime-response``
payload and return normalized models, raising ``UpstreamMalformed`` when a
required field is missing.
"""

from typing import Any, Dict, List

from .common import optional_time, parse_bus_time, unique_in_order
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
from .raw import (
    BusDirectionRecord,
    BusPatternRecord,
    BusPredictionRecord,
    BusRouteRecord,
    BusStopRecord,
    BusVehicleRecord,
    parse_records,
    require_list,
)

SERVICE = "bus_api"

# The bus upstream has no route type field. Every bus entity is stamped here.
BUS_ROUTE_TYPE = RouteType.BUS

_POINT_KINDS = {"S": PointKind.STOP, "W": PointKind.WAYPOINT}


def normalize_routes(payload: Dict[str, Any]) -> List[NormalizedRoute]:
    records = parse_records(BusRouteRecord, require_list(payload, "routes", SERVICE), SERVICE)
    return [
        NormalizedRoute(
            route=record.rt,
            name=record.rtnm or "",
            color=record.rtclr or "",
            type=BUS_ROUTE_TYPE,
        )
        for record in records
    ]


def normalize_patterns(payload: Dict[str, Any], route: str) -> List[NormalizedPattern]:
    """Normalize ``ptr`` records. Points follow ``seq`` when it is present."""
    records = parse_records(BusPatternRecord, require_list(payload, "ptr", SERVICE), SERVICE)
    patterns = []
    for record in records:
        points = record.pt
        if all(point.seq is not None for point in points):
            points = sorted(points, key=lambda point: point.seq)

        normalized_points = []
        for point in points:
            kind = _POINT_KINDS[point.typ]
            if kind is PointKind.STOP:
                normalized_points.append(PatternPoint(
                    kind=kind,
                    lat=point.lat,
                    lon=point.lon,
                    stop_name=point.stpnm or "",
                    stop_id=point.stpid or "",
                ))
            else:
                normalized_points.append(PatternPoint(kind=kind, lat=point.lat, lon=point.lon))

        patterns.append(NormalizedPattern(
            id=record.pid,
            route=route,
            direction=record.rtdir or "",
            type=BUS_ROUTE_TYPE,
            points=normalized_points,
        ))
    return patterns


def normalize_directions(payload: Dict[str, Any]) -> List[str]:
    records = parse_records(BusDirectionRecord, require_list(payload, "directions", SERVICE), SERVICE)
    return unique_in_order(record.label for record in records)


def normalize_stops(payload: Dict[str, Any], route: str, direction: str) -> NormalizedStopSet:
    records = parse_records(BusStopRecord, require_list(payload, "stops", SERVICE), SERVICE)
    return NormalizedStopSet(
        route=route,
        direction=direction,
        stops=[Stop(id=record.stpid, name=record.stpnm or "") for record in records],
    )


def normalize_predictions(payload: Dict[str, Any]) -> List[NormalizedPrediction]:
    records = parse_records(BusPredictionRecord, require_list(payload, "prd", SERVICE), SERVICE)
    return [
        NormalizedPrediction(
            type=BUS_ROUTE_TYPE.value,
            stop_name=record.stpnm or "",
            stop_id=record.stpid or "",
            vehicle_id=record.vid or "",
            route=record.rt or "",
            direction=record.rtdir or "",
            destination=record.des or "",
            predicted_time=parse_bus_time(record.prdtm, SERVICE),
            observed_at=parse_bus_time(record.tmstmp, SERVICE),
            delayed=bool(record.dly),
        )
        for record in records
    ]


def normalize_vehicles(payload: Dict[str, Any]) -> List[NormalizedVehicle]:
    records = parse_records(BusVehicleRecord, require_list(payload, "vehicle", SERVICE), SERVICE)
    return [
        NormalizedVehicle(
            id=record.vid,
            route=record.rt or "",
            type=BUS_ROUTE_TYPE,
            destination=record.des or "",
            lat=record.lat,
            lon=record.lon,
            heading=record.hdg or 0,
            pattern_id=record.pid or "",
            delayed=bool(record.dly),
            observed_at=optional_time(record.tmstmp, parse_bus_time, SERVICE),
        )
        for record in records
    ]
