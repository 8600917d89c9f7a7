"""
Cache key derivation for transit resources.

Keys have the form ``<kind>-<param>...-cache``. Parameters are
percent-encoded, with ``-`` escaped as well, so the separator never occurs
inside an encoded identifier and two different parameter tuples can not
produce the same key.
"""

from urllib.parse import quote

SEPARATOR = "-"
SUFFIX = "cache"

ROUTES = "routes"
TRAIN_ROUTES = "train-routes"
PATTERN = "pattern"
DIRECTION = "dir"
STOPS = "stops"
LOCALE = "locale"
TRAIN_STOPS = "train-stops"
TRAIN_DIRECTION = "train-dir"


def _encode(value: object) -> str:
    return quote(str(value), safe="").replace(SEPARATOR, "%2D")


def _make_key(kind: str, *params: object) -> str:
    parts = [kind] + [_encode(param) for param in params] + [SUFFIX]
    return SEPARATOR.join(parts)


def routes() -> str:
    """Key for the full bus route list."""
    return _make_key(ROUTES)


def train_routes() -> str:
    """Key for the full train route list."""
    return _make_key(TRAIN_ROUTES)


def pattern(route: str) -> str:
    return _make_key(PATTERN, route)


def direction(route: str) -> str:
    return _make_key(DIRECTION, route)


def stops(route: str, direction: str) -> str:
    return _make_key(STOPS, route, direction)


def locale(namespace: str, language: str) -> str:
    return _make_key(LOCALE, namespace, language)


def train_stops(route: str) -> str:
    return _make_key(TRAIN_STOPS, route)


def train_direction(route: str) -> str:
    return _make_key(TRAIN_DIRECTION, route)
