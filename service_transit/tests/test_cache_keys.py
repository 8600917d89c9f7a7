"""
Unit tests for cache key derivation.
"""

import itertools

import pytest

from service_transit.app.caching import cache_keys


class TestCacheKeys:
    """Test cases for cache key functions."""

    def test_routes_key(self):
        assert cache_keys.routes() == "routes-cache"

    def test_train_routes_key(self):
        assert cache_keys.train_routes() == "train-routes-cache"

    def test_pattern_key(self):
        assert cache_keys.pattern("1") == "pattern-1-cache"

    def test_direction_key(self):
        assert cache_keys.direction("1") == "dir-1-cache"

    def test_stops_key(self):
        assert cache_keys.stops("1", "North") == "stops-1-North-cache"

    def test_locale_key(self):
        assert cache_keys.locale("common", "en") == "locale-common-en-cache"

    def test_train_stops_key(self):
        assert cache_keys.train_stops("red") == "train-stops-red-cache"

    def test_train_direction_key(self):
        assert cache_keys.train_direction("red") == "train-dir-red-cache"

    @pytest.mark.parametrize("route,direction", [
        ("1", "North"),
        ("X9", "Southbound"),
        ("1-North", ""),
        ("a b", "c/d"),
    ])
    def test_keys_are_deterministic(self, route, direction):
        assert cache_keys.stops(route, direction) == cache_keys.stops(route, direction)
        assert cache_keys.pattern(route) == cache_keys.pattern(route)
        assert cache_keys.direction(route) == cache_keys.direction(route)

    def test_separator_inside_identifier_does_not_collide(self):
        assert cache_keys.stops("1-North", "") != cache_keys.stops("1", "North")
        assert cache_keys.stops("1", "North-") != cache_keys.stops("1-North", "")
        assert cache_keys.locale("a-b", "c") != cache_keys.locale("a", "b-c")

    def test_parameter_order_matters(self):
        assert cache_keys.stops("North", "1") != cache_keys.stops("1", "North")

    def test_bus_and_train_namespaces_do_not_collide(self):
        assert cache_keys.routes() != cache_keys.train_routes()
        assert cache_keys.direction("1") != cache_keys.train_direction("1")
        assert cache_keys.stops("1", "") != cache_keys.train_stops("1")

    def test_no_collisions_across_kinds(self):
        ids = ["1", "North", "1-North", "", "train", "stops-1", "%2D"]
        keys = [cache_keys.routes(), cache_keys.train_routes()]
        for value in ids:
            keys.extend([
                cache_keys.pattern(value),
                cache_keys.direction(value),
                cache_keys.train_stops(value),
                cache_keys.train_direction(value),
            ])
        for first, second in itertools.product(ids, repeat=2):
            keys.append(cache_keys.stops(first, second))
            keys.append(cache_keys.locale(first, second))

        assert len(keys) == len(set(keys))
