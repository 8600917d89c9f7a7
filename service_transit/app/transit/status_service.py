"""
Operational status: deployment workflow runs and the latest released version.
"""

from typing import Any, Dict

from shared.errors import UpstreamMalformed
from shared.logging import get_logger

from ..adapters.github_client import GitHubClient


class StatusService:
    """Stateless pass-through to GitHub. Nothing here is cached."""

    def __init__(self, client: GitHubClient):
        self.client = client
        self.logger = get_logger("transit.status_service")

    async def get_github_workflow(self) -> Dict[str, Any]:
        web = await self.client.get_web_workflow()
        server = await self.client.get_server_workflow()
        return {"web": web, "server": server}

    async def get_latest_version(self) -> str:
        release = await self.client.get_latest_release()
        tag_name = release.get("tag_name") if isinstance(release, dict) else None
        if not tag_name:
            raise UpstreamMalformed(service=self.client.service_name, message="Release has no tag_name")
        return tag_name
