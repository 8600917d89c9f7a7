"""
Bus tracker API client.
"""

from typing import Any, Dict

from shared.errors import UpstreamMalformed, UpstreamUnavailable

from .upstream_client import UpstreamClient

ENVELOPE = "bustime-response"


class BusApiClient(UpstreamClient):
    """Client for the bus agency's tracker API.

    Every response is wrapped in a ``bustime-response`` object. Errors are
    reported in-band as an ``error`` list; a response that carries only
    errors is raised as ``UpstreamUnavailable``.
    """

    service_name = "bus_api"

    def _default_params(self) -> Dict[str, Any]:
        return {"key": self.api_key, "format": "json"}

    def _unwrap(self, body: Any, path: str) -> Dict[str, Any]:
        if not isinstance(body, dict) or not isinstance(body.get(ENVELOPE), dict):
            raise UpstreamMalformed(
                service=self.service_name,
                message=f"Missing '{ENVELOPE}' envelope",
                details={"path": path}
            )

        payload = dict(body[ENVELOPE])
        errors = payload.pop("error", None)
        if errors and not payload:
            messages = [error.get("msg", "") for error in errors if isinstance(error, dict)]
            raise UpstreamUnavailable(
                service=self.service_name,
                message="; ".join(message for message in messages if message) or "Upstream error",
                details={"path": path, "errors": errors}
            )
        if errors:
            self.logger.warning("Partial upstream errors", path=path, errors=errors)
        return payload

    async def get_routes(self) -> Dict[str, Any]:
        return await self.get("/getroutes")

    async def get_vehicles(self, routes: str) -> Dict[str, Any]:
        return await self.get("/getvehicles", {"rt": routes})

    async def get_patterns(self, route: str) -> Dict[str, Any]:
        return await self.get("/getpatterns", {"rt": route})

    async def get_predictions(self, stop_id: str) -> Dict[str, Any]:
        return await self.get("/getpredictions", {"stpid": stop_id})

    async def get_directions(self, route: str) -> Dict[str, Any]:
        return await self.get("/getdirections", {"rt": route})

    async def get_stops(self, route: str, direction: str) -> Dict[str, Any]:
        return await self.get("/getstops", {"rt": route, "dir": direction})
