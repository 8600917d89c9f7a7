"""
Helpers shared by the bus and train normalizers.
"""

from datetime import datetime
from typing import Iterable, List, Optional

from shared.errors import UpstreamMalformed

# Bus tracker sends "YYYYMMDD HH:MM" or "YYYYMMDD HH:MM:SS" in agency local time
BUS_TIME_FORMATS = ("%Y%m%d %H:%M:%S", "%Y%m%d %H:%M")


def parse_bus_time(value: str, service: str) -> datetime:
    for fmt in BUS_TIME_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    raise UpstreamMalformed(service=service, message=f"Unparseable timestamp '{value}'")


def parse_iso_time(value: str, service: str) -> datetime:
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise UpstreamMalformed(service=service, message=f"Unparseable timestamp '{value}'")


def optional_time(value: Optional[str], parser, service: str) -> Optional[datetime]:
    if not value:
        return None
    return parser(value, service)


def unique_in_order(names: Iterable[str]) -> List[str]:
    """De-duplicate names, keeping the first occurrence of each."""
    seen = set()
    ordered = []
    for name in names:
        if name not in seen:
            seen.add(name)
            ordered.append(name)
    return ordered
