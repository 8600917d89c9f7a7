"""
GitHub client used for operational status reporting.
"""

from typing import Any, Dict

import httpx

from shared.errors import UpstreamMalformed, UpstreamUnavailable
from shared.logging import get_logger


class GitHubClient:
    """Fetches workflow runs and the latest release from the GitHub API."""

    service_name = "github"

    def __init__(
        self,
        token: str,
        workflow_web_url: str,
        workflow_server_url: str,
        version_url: str,
        *,
        timeout: float = 10.0,
    ):
        self.token = token
        self.workflow_web_url = workflow_web_url
        self.workflow_server_url = workflow_server_url
        self.version_url = version_url
        self.timeout = timeout
        self.logger = get_logger("transit.github_client")

    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"token {self.token}"}

    async def fetch(self, url: str) -> Dict[str, Any]:
        """GET a GitHub API url and return its JSON body."""
        if not url:
            raise UpstreamUnavailable(service=self.service_name, message="URL not configured")

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(url, headers=self._headers())
        except httpx.HTTPError as exc:
            self.logger.error("GitHub request failed", url=url, error=str(exc))
            raise UpstreamUnavailable(service=self.service_name, message=str(exc) or exc.__class__.__name__)

        if not response.is_success:
            self.logger.error("GitHub returned error status", url=url, status_code=response.status_code)
            raise UpstreamUnavailable(
                service=self.service_name,
                message=f"Unexpected status {response.status_code}",
                details={"status_code": response.status_code}
            )

        try:
            return response.json()
        except ValueError:
            raise UpstreamMalformed(service=self.service_name, message="Response body is not JSON")

    async def get_web_workflow(self) -> Dict[str, Any]:
        return await self.fetch(self.workflow_web_url)

    async def get_server_workflow(self) -> Dict[str, Any]:
        return await self.fetch(self.workflow_server_url)

    async def get_latest_release(self) -> Dict[str, Any]:
        return await self.fetch(self.version_url)
