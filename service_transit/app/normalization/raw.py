"""
Raw upstream payload shapes.

Each upstream record is validated into one of these models before it is
normalized. Optional fields carry the documented default; a record missing
a required field is reported as ``UpstreamMalformed``.
"""

from typing import Any, List, Literal, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from shared.errors import UpstreamMalformed

RawT = TypeVar("RawT", bound="RawRecord")


class RawRecord(BaseModel):
    """Upstream record. Unknown fields are ignored, numbers accepted as ids."""

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True, populate_by_name=True)

    @field_validator("*", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        # Train tracker sends "" for unknown coordinates and headings
        if isinstance(value, str) and value == "":
            return None
        return value


# Bus tracker records

class BusRouteRecord(RawRecord):
    rt: str
    rtnm: Optional[str] = None
    rtclr: Optional[str] = None
    rtdd: Optional[str] = None


class BusPointRecord(RawRecord):
    seq: Optional[int] = None
    lat: float
    lon: float
    typ: Literal["S", "W"]
    stpid: Optional[str] = None
    stpnm: Optional[str] = None
    pdist: Optional[float] = None


class BusPatternRecord(RawRecord):
    pid: str
    ln: Optional[float] = None
    rtdir: Optional[str] = None
    pt: List[BusPointRecord] = []


class BusDirectionRecord(RawRecord):
    """v2 names the field ``dir``; v3 sends ``id`` and ``name``."""

    dir: Optional[str] = None
    id: Optional[str] = None
    name: Optional[str] = None

    @model_validator(mode="after")
    def _require_label(self) -> "BusDirectionRecord":
        if not self.label:
            raise ValueError("direction record has no name")
        return self

    @property
    def label(self) -> Optional[str]:
        return self.dir or self.name or self.id


class BusStopRecord(RawRecord):
    stpid: str
    stpnm: Optional[str] = None
    lat: Optional[float] = None
    lon: Optional[float] = None


class BusPredictionRecord(RawRecord):
    tmstmp: str
    typ: Optional[str] = None
    stpnm: Optional[str] = None
    stpid: Optional[str] = None
    vid: Optional[str] = None
    rt: Optional[str] = None
    rtdir: Optional[str] = None
    des: Optional[str] = None
    prdtm: str
    dly: Optional[bool] = None
    prdctdn: Optional[str] = None


class BusVehicleRecord(RawRecord):
    vid: str
    tmstmp: Optional[str] = None
    lat: Optional[float] = None
    lon: Optional[float] = None
    hdg: Optional[int] = None
    pid: Optional[str] = None
    rt: Optional[str] = None
    des: Optional[str] = None
    dly: Optional[bool] = None


# Train tracker records

class TrainRouteRecord(RawRecord):
    rt: str
    rtnm: Optional[str] = None
    rtclr: Optional[str] = None
    type: Optional[str] = None


class TrainDirectionRecord(RawRecord):
    dir: str


class TrainStopRecord(RawRecord):
    stpId: str
    stpNm: Optional[str] = None
    staId: Optional[str] = None
    staNm: Optional[str] = None
    dir: Optional[str] = None


class TrainArrivalRecord(RawRecord):
    staId: Optional[str] = None
    stpId: Optional[str] = None
    staNm: Optional[str] = None
    stpDe: Optional[str] = None
    rn: Optional[str] = None
    rt: Optional[str] = None
    destNm: Optional[str] = None
    trDr: Optional[str] = None
    prdt: str
    arrT: str
    isApp: Optional[bool] = None
    isDly: Optional[bool] = None


class TrainPositionRecord(RawRecord):
    rn: str
    destNm: Optional[str] = None
    trDr: Optional[str] = None
    nextStaNm: Optional[str] = None
    prdt: Optional[str] = None
    isDly: Optional[bool] = None
    lat: Optional[float] = None
    lon: Optional[float] = None
    heading: Optional[int] = None


class TrainRouteTrainsRecord(RawRecord):
    name: str = Field(alias="@name")
    train: List[TrainPositionRecord] = []

    @field_validator("train", mode="before")
    @classmethod
    def _single_train(cls, value: Any) -> Any:
        # A route with one train is sent as an object, not a list
        if value is None:
            return []
        if isinstance(value, dict):
            return [value]
        return value


def require_list(payload: Any, field: str, service: str) -> List[Any]:
    """Return ``payload[field]`` as a list, wrapping a lone object."""
    if not isinstance(payload, dict) or field not in payload:
        raise UpstreamMalformed(service=service, message=f"Response has no '{field}' field")

    items = payload[field]
    if items is None:
        return []
    if isinstance(items, dict):
        return [items]
    if not isinstance(items, list):
        raise UpstreamMalformed(service=service, message=f"'{field}' is not a list")
    return items


def parse_records(model: Type[RawT], items: List[Any], service: str) -> List[RawT]:
    """Validate upstream records, reporting the first failure as malformed."""
    try:
        return [model.model_validate(item) for item in items]
    except ValidationError as exc:
        raise UpstreamMalformed(
            service=service,
            message=f"Invalid {model.__name__}",
            details={"error": str(exc)}
        )
