"""
Base HTTP client for upstream transit-agency APIs.
"""

import time
from typing import Any, Dict, Optional, TYPE_CHECKING

import httpx

from shared.errors import UpstreamMalformed, UpstreamUnavailable
from shared.logging import get_logger

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


class UpstreamClient:
    """Issues exactly one GET per call and returns the unwrapped payload.

    Failures surface as ``UpstreamUnavailable`` (transport errors, non-2xx
    statuses, errors the upstream reports in its body) or
    ``UpstreamMalformed`` (a body without the expected envelope). There is
    no retry and no caching at this layer.
    """

    service_name = "upstream"

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        *,
        timeout: float = 10.0,
        metrics: Optional["MetricsCollector"] = None,
    ):
        self.base_url = base_url.rstrip('/')
        self.api_key = api_key
        self.timeout = timeout
        self.metrics = metrics
        self.logger = get_logger(f"transit.{self.service_name}_client")

    def _default_params(self) -> Dict[str, Any]:
        return {}

    def _unwrap(self, body: Any, path: str) -> Any:
        """Strip the upstream envelope. Subclasses raise on upstream errors."""
        return body

    async def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """GET ``path`` and return the unwrapped payload."""
        url = f"{self.base_url}{path}"
        query = {**self._default_params(), **(params or {})}
        start_time = time.time()

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(url, params=query)
        except httpx.HTTPError as exc:
            self._record(start_time, "unavailable")
            self.logger.error("Upstream request failed", path=path, params=params, error=str(exc))
            raise UpstreamUnavailable(
                service=self.service_name,
                message=str(exc) or exc.__class__.__name__,
                details={"path": path}
            )

        if not response.is_success:
            self._record(start_time, "unavailable")
            self.logger.error(
                "Upstream returned error status",
                path=path,
                params=params,
                status_code=response.status_code,
            )
            raise UpstreamUnavailable(
                service=self.service_name,
                message=f"Unexpected status {response.status_code}",
                details={"path": path, "status_code": response.status_code, "body": response.text[:500]}
            )

        try:
            body = response.json()
        except ValueError:
            self._record(start_time, "malformed")
            self.logger.error("Upstream returned non-JSON body", path=path, params=params)
            raise UpstreamMalformed(
                service=self.service_name,
                message="Response body is not JSON",
                details={"path": path}
            )

        try:
            payload = self._unwrap(body, path)
        except UpstreamUnavailable:
            self._record(start_time, "rejected")
            raise
        except UpstreamMalformed:
            self._record(start_time, "malformed")
            raise

        self._record(start_time, "ok")
        self.logger.debug("Upstream payload retrieved", path=path, params=params)
        return payload

    def _record(self, start_time: float, outcome: str) -> None:
        if self.metrics:
            self.metrics.record_upstream_call(self.service_name, outcome, time.time() - start_time)
