"""
Normalized transit domain model.

These are the only shapes handed to callers and stored in the cache,
whichever upstream produced them. Attributes are snake_case in Python and
camelCase on the wire.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class RouteType(str, Enum):
    """Which upstream a normalized entity came from."""

    BUS = "Bus"
    TRAIN = "Train"


class PointKind(str, Enum):
    WAYPOINT = "Waypoint"
    STOP = "Stop"


class NormalizedModel(BaseModel):
    """Base for immutable normalized entities."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with wire field names, dropping unset optionals."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class NormalizedRoute(NormalizedModel):
    route: str
    name: str = ""
    color: str = ""
    type: RouteType


class PatternPoint(NormalizedModel):
    """A point on a pattern. Only stop points carry stop name and id."""

    kind: PointKind
    lat: float
    lon: float
    stop_name: Optional[str] = None
    stop_id: Optional[str] = None


class NormalizedPattern(NormalizedModel):
    id: str
    route: str
    direction: str = ""
    type: RouteType
    points: List[PatternPoint] = []


class NormalizedPrediction(NormalizedModel):
    type: str
    stop_name: str = ""
    stop_id: str = ""
    vehicle_id: str = ""
    route: str = ""
    direction: str = ""
    destination: str = ""
    predicted_time: datetime
    observed_at: datetime
    delayed: bool = False


class Stop(NormalizedModel):
    id: str
    name: str = ""


class NormalizedStopSet(NormalizedModel):
    route: str
    direction: str = ""
    stops: List[Stop] = []


class NormalizedVehicle(NormalizedModel):
    id: str
    route: str = ""
    type: RouteType
    destination: str = ""
    lat: Optional[float] = None
    lon: Optional[float] = None
    heading: int = 0
    pattern_id: str = ""
    delayed: bool = False
    observed_at: Optional[datetime] = None
