"""
Unit tests for the Transit service HTTP surface.
"""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from service_transit.app.caching.cache_store import MemoryCacheStore
from service_transit.app.main import TransitService
from shared.config import get_config
from shared.errors import UpstreamUnavailable
from shared.metrics import MetricsCollector
from shared.test_helpers import TestDataFactory


class TestTransitService:
    """Test cases for TransitService."""

    @pytest.fixture
    def bus_client(self):
        client = AsyncMock()
        client.get_routes.return_value = TestDataFactory.bus_routes()
        client.get_patterns.return_value = TestDataFactory.bus_patterns()
        client.get_directions.return_value = TestDataFactory.bus_directions()
        client.get_stops.return_value = TestDataFactory.bus_stops()
        client.get_predictions.return_value = TestDataFactory.bus_predictions()
        client.get_vehicles.return_value = TestDataFactory.bus_vehicles()
        return client

    @pytest.fixture
    def train_client(self):
        client = AsyncMock()
        client.get_routes.return_value = TestDataFactory.train_routes()
        client.get_stops.return_value = TestDataFactory.train_stops()
        client.get_arrivals.return_value = TestDataFactory.train_arrivals()
        client.get_positions.return_value = TestDataFactory.train_positions()
        return client

    @pytest.fixture
    def github_client(self):
        client = AsyncMock()
        client.service_name = "github"
        client.get_web_workflow.return_value = {"workflow_runs": []}
        client.get_server_workflow.return_value = {"workflow_runs": []}
        client.get_latest_release.return_value = {"tag_name": "v1.0.3"}
        return client

    @pytest.fixture
    def metrics(self):
        return MetricsCollector("transit")

    @pytest.fixture
    def transit_service(self, bus_client, train_client, github_client, metrics):
        return TransitService(
            config=get_config("transit", 8000, cache_backend="memory", cache_ttl_seconds=60),
            metrics=metrics,
            cache=MemoryCacheStore(60, metrics=metrics),
            bus_client=bus_client,
            train_client=train_client,
            github_client=github_client,
        )

    @pytest.fixture
    def client(self, transit_service):
        return TestClient(transit_service.app)

    def test_root_endpoint(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["service"] == "transit"

    def test_health_endpoint(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["service"] == "transit"
        assert data["status"] == "ok"
        assert data["dependencies"] == {"cache": "ok"}

    @patch('service_transit.app.main.TransitService._check_dependencies')
    def test_health_failure(self, mock_check_deps, client):
        mock_check_deps.side_effect = RuntimeError("redis unreachable")

        response = client.get("/health")

        assert response.status_code == 503
        assert response.json()["status"] == "error"

    def test_request_id_is_echoed(self, client):
        response = client.get("/", headers={"X-Request-ID": "req-42"})
        assert response.headers["X-Request-ID"] == "req-42"

    def test_bus_routes(self, client):
        response = client.get("/bus/routes")
        assert response.status_code == 200
        data = response.json()
        assert [route["route"] for route in data] == ["1", "2", "X9"]
        assert data[0] == {
            "route": "1",
            "name": "Bronzeville/Union Station",
            "color": "#336633",
            "type": "Bus",
        }

    def test_bus_routes_search_and_paging(self, client, bus_client):
        searched = client.get("/bus/routes", params={"search": "express"}).json()
        paged = client.get("/bus/routes", params={"offset": 2, "limit": 5}).json()

        assert [route["route"] for route in searched] == ["2", "X9"]
        assert [route["route"] for route in paged] == ["X9"]
        assert bus_client.get_routes.call_count == 1

    def test_bus_routes_negative_offset(self, client):
        response = client.get("/bus/routes", params={"offset": -1})
        assert response.status_code == 422

    def test_bus_routes_upstream_failure(self, client, bus_client):
        bus_client.get_routes.side_effect = UpstreamUnavailable("bus_api", "timed out")

        response = client.get("/bus/routes", headers={"X-Request-ID": "req-7"})

        assert response.status_code == 400
        data = response.json()
        assert data["code"] == "UPSTREAM_UNAVAILABLE"
        assert data["request_id"] == "req-7"

    def test_bus_route_colors(self, client):
        response = client.get("/bus/routes/colors", params={"ids": "1, X9"})
        assert response.status_code == 200
        assert response.json() == {"1": "#336633", "X9": "#cc3300"}

    def test_bus_vehicles(self, client, bus_client):
        response = client.get("/bus/vehicles", params={"rt": "1,X9"})
        assert response.status_code == 200
        bus_client.get_vehicles.assert_called_once_with("1,X9")
        assert response.json()[0]["id"] == "8123"

    def test_bus_vehicles_require_a_route(self, client, bus_client):
        response = client.get("/bus/vehicles", params={"rt": " , "})
        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"
        bus_client.get_vehicles.assert_not_called()

    def test_bus_patterns(self, client):
        response = client.get("/bus/patterns", params={"rt": "1"})
        assert response.status_code == 200
        pattern = response.json()[0]
        assert pattern["id"] == "954"
        assert [point["kind"] for point in pattern["points"]] == ["Stop", "Waypoint", "Stop"]

    def test_bus_predictions(self, client):
        response = client.get("/bus/predictions", params={"stpid": "1106"})
        assert response.status_code == 200
        prediction = response.json()[0]
        assert prediction["type"] == "Bus"
        assert prediction["predictedTime"] == "2023-12-25T14:30:00"
        assert prediction["delayed"] is True

    def test_bus_predictions_requires_stop(self, client):
        response = client.get("/bus/predictions")
        assert response.status_code == 422

    def test_bus_directions(self, client):
        response = client.get("/bus/directions", params={"rt": "1"})
        assert response.status_code == 200
        assert response.json() == ["Northbound", "Southbound"]

    def test_bus_stops_for_direction(self, client):
        response = client.get("/bus/stops", params={"rt": "1", "dir": "Northbound"})
        assert response.status_code == 200
        data = response.json()
        assert data["route"] == "1"
        assert data["direction"] == "Northbound"
        assert [stop["id"] for stop in data["stops"]] == ["1106", "1107"]

    def test_bus_stops_for_all_directions(self, client):
        response = client.get("/bus/stops", params={"rt": "1"})
        assert response.status_code == 200
        assert [stop_set["direction"] for stop_set in response.json()] == ["Northbound", "Southbound"]

    def test_train_routes(self, client):
        response = client.get("/train/routes")
        assert response.status_code == 200
        assert all(route["type"] == "Train" for route in response.json())

    def test_train_routes_upstream_failure(self, client, train_client):
        train_client.get_routes.side_effect = UpstreamUnavailable("train_api", "Invalid API key")

        response = client.get("/train/routes")

        assert response.status_code == 400
        assert response.json()["code"] == "UPSTREAM_UNAVAILABLE"

    def test_train_directions(self, client):
        response = client.get("/train/directions", params={"rt": "Red"})
        assert response.status_code == 200
        assert response.json() == ["Southbound", "Northbound"]

    def test_train_stops(self, client):
        response = client.get("/train/stops", params={"rt": "Red"})
        assert response.status_code == 200
        assert len(response.json()) == 2

    def test_train_predictions(self, client, train_client):
        response = client.get("/train/predictions", params={"staId": "40380"})
        assert response.status_code == 200
        train_client.get_arrivals.assert_called_once_with(station_id="40380", stop_id=None, route=None)
        assert response.json()[0]["type"] == "Train"

    def test_train_predictions_requires_station_or_stop(self, client):
        response = client.get("/train/predictions", params={"rt": "Blue"})
        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_train_vehicles(self, client):
        response = client.get("/train/vehicles", params={"rt": "red,p"})
        assert response.status_code == 200
        vehicles = response.json()
        assert [vehicle["id"] for vehicle in vehicles] == ["804", "508"]
        assert "lat" not in vehicles[1]

    def test_status_workflow(self, client):
        response = client.get("/status/workflow")
        assert response.status_code == 200
        assert response.json() == {"web": {"workflow_runs": []}, "server": {"workflow_runs": []}}

    def test_status_version(self, client):
        response = client.get("/status/version")
        assert response.status_code == 200
        assert response.json() == {"version": "v1.0.3"}

    def test_locale(self, client):
        response = client.get("/locale/en/common")
        assert response.status_code == 200
        assert response.json()["bus"] == "Bus"

    def test_unknown_locale(self, client):
        response = client.get("/locale/fr/common")
        assert response.status_code == 404
        assert response.json()["code"] == "RESOURCE_NOT_FOUND"

    def test_cache_stats_and_flush(self, client, bus_client):
        client.get("/bus/routes")
        client.get("/bus/routes")

        stats = client.get("/cache/stats").json()
        assert stats == {"keys": 1, "hits": 1, "misses": 1}

        response = client.post("/cache/flush")
        assert response.status_code == 200
        assert client.get("/cache/stats").json()["keys"] == 0

        client.get("/bus/routes")
        assert bus_client.get_routes.call_count == 2

    def test_metrics_endpoint(self, client):
        client.get("/bus/routes")

        response = client.get("/metrics")

        assert response.status_code == 200
        assert 'cache_misses_total{key="routes-cache"} 1.0' in response.text
        assert "http_requests_total" in response.text
