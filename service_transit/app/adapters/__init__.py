"""
Adapters package for the Transit Service.

Contains HTTP client wrappers for the external APIs the service fronts
(bus tracker, train tracker, GitHub). These adapters encapsulate:

- Base URLs, API keys and request shapes
- Envelope unwrapping
- Error handling that maps to shared errors

Keep adapters thin: one outbound call per invocation, no retries and no
caching.
"""

from .upstream_client import UpstreamClient
from .bus_client import BusApiClient
from .train_client import TrainApiClient
from .github_client import GitHubClient

__all__ = [
    "UpstreamClient",
    "BusApiClient",
    "TrainApiClient",
    "GitHubClient",
]
