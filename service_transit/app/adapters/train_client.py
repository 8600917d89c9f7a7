"""
Train tracker API client.
"""

from typing import Any, Dict, Optional

from shared.errors import UpstreamMalformed, UpstreamUnavailable

from .upstream_client import UpstreamClient

ENVELOPE = "ctatt"


class TrainApiClient(UpstreamClient):
    """Client for the train agency's tracker API.

    Responses are wrapped in a ``ctatt`` object carrying ``errCd`` and
    ``errNm``; any error code other than ``"0"`` is an upstream failure.
    """

    service_name = "train_api"

    def _default_params(self) -> Dict[str, Any]:
        return {"key": self.api_key, "outputType": "JSON"}

    def _unwrap(self, body: Any, path: str) -> Dict[str, Any]:
        if not isinstance(body, dict) or not isinstance(body.get(ENVELOPE), dict):
            raise UpstreamMalformed(
                service=self.service_name,
                message=f"Missing '{ENVELOPE}' envelope",
                details={"path": path}
            )

        payload = body[ENVELOPE]
        error_code = str(payload.get("errCd", "0") or "0")
        if error_code != "0":
            raise UpstreamUnavailable(
                service=self.service_name,
                message=payload.get("errNm") or f"Error code {error_code}",
                details={"path": path, "errCd": error_code}
            )
        return payload

    async def get_routes(self) -> Dict[str, Any]:
        return await self.get("/routes")

    async def get_stops(self, route: str) -> Dict[str, Any]:
        return await self.get("/stops", {"rt": route})

    async def get_arrivals(
        self,
        station_id: Optional[str] = None,
        stop_id: Optional[str] = None,
        route: Optional[str] = None,
    ) -> Dict[str, Any]:
        params = {"mapid": station_id, "stpid": stop_id, "rt": route}
        return await self.get("/ttarrivals.aspx", {k: v for k, v in params.items() if v})

    async def get_positions(self, routes: str) -> Dict[str, Any]:
        return await self.get("/ttpositions.aspx", {"rt": routes})
