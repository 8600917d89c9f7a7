"""
Normalizers for train tracker payloads.

Inputs are the unwrapped ``ctatt`` payloads. Train routes may arrive
without a type, in which case they are tagged ``Train``.
"""

from typing import Any, Dict, List

from .common import optional_time, parse_iso_time, unique_in_order
from .models import (
    NormalizedPrediction,
    NormalizedRoute,
    NormalizedStopSet,
    NormalizedVehicle,
    RouteType,
    Stop,
)
from .raw import (
    TrainArrivalRecord,
    TrainDirectionRecord,
    TrainRouteRecord,
    TrainRouteTrainsRecord,
    TrainStopRecord,
    parse_records,
    require_list,
)

SERVICE = "train_api"

TRAIN_ROUTE_TYPE = RouteType.TRAIN


def _route_type(value) -> RouteType:
    if not value:
        return TRAIN_ROUTE_TYPE
    for route_type in RouteType:
        if route_type.value.lower() == str(value).lower():
            return route_type
    return TRAIN_ROUTE_TYPE


def normalize_routes(payload: Dict[str, Any]) -> List[NormalizedRoute]:
    records = parse_records(TrainRouteRecord, require_list(payload, "routes", SERVICE), SERVICE)
    return [
        NormalizedRoute(
            route=record.rt,
            name=record.rtnm or "",
            color=record.rtclr or "",
            type=_route_type(record.type),
        )
        for record in records
    ]


def collapse_directions(items: List[Any]) -> List[str]:
    """``[{"dir": "North"}, {"dir": "South"}, {"dir": "North"}]`` -> ``["North", "South"]``."""
    records = parse_records(TrainDirectionRecord, items, SERVICE)
    return unique_in_order(record.dir for record in records)


def normalize_directions(payload: Dict[str, Any]) -> List[str]:
    """Directions served by a line, taken from its stop list."""
    return collapse_directions(require_list(payload, "stops", SERVICE))


def normalize_stops(payload: Dict[str, Any], route: str) -> List[NormalizedStopSet]:
    """Group a line's stops by direction, keeping first-seen order."""
    records = parse_records(TrainStopRecord, require_list(payload, "stops", SERVICE), SERVICE)
    grouped: Dict[str, List[Stop]] = {}
    for record in records:
        name = record.stpNm or record.staNm or ""
        grouped.setdefault(record.dir or "", []).append(Stop(id=record.stpId, name=name))

    return [
        NormalizedStopSet(route=route, direction=direction, stops=stops)
        for direction, stops in grouped.items()
    ]


def normalize_predictions(payload: Dict[str, Any]) -> List[NormalizedPrediction]:
    records = parse_records(TrainArrivalRecord, require_list(payload, "eta", SERVICE), SERVICE)
    return [
        NormalizedPrediction(
            type=TRAIN_ROUTE_TYPE.value,
            stop_name=record.staNm or "",
            stop_id=record.stpId or "",
            vehicle_id=record.rn or "",
            route=record.rt or "",
            direction=record.stpDe or "",
            destination=record.destNm or "",
            predicted_time=parse_iso_time(record.arrT, SERVICE),
            observed_at=parse_iso_time(record.prdt, SERVICE),
            delayed=bool(record.isDly),
        )
        for record in records
    ]


def normalize_vehicles(payload: Dict[str, Any]) -> List[NormalizedVehicle]:
    routes = parse_records(TrainRouteTrainsRecord, require_list(payload, "route", SERVICE), SERVICE)
    vehicles = []
    for route in routes:
        for train in route.train:
            vehicles.append(NormalizedVehicle(
                id=train.rn,
                route=route.name,
                type=TRAIN_ROUTE_TYPE,
                destination=train.destNm or "",
                lat=train.lat,
                lon=train.lon,
                heading=train.heading or 0,
                delayed=bool(train.isDly),
                observed_at=optional_time(train.prdt, parse_iso_time, SERVICE),
            ))
    return vehicles
