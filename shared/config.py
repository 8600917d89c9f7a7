"""
Shared configuration management for the Transit Access Layer.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="TRANSIT_",
        case_sensitive=False,
        extra="allow"
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")

    # Upstream transit agencies
    bus_api_url: str = Field(default="https://www.ctabustracker.com/bustime/api/v2")
    bus_api_key: str = Field(default="")
    train_api_url: str = Field(default="https://lapi.transitchicago.com/api/1.0")
    train_api_key: str = Field(default="")
    upstream_timeout_seconds: float = Field(default=10.0)

    # Cache
    cache_backend: str = Field(default="memory")
    cache_ttl_seconds: int = Field(default=60)
    redis_url: str = Field(default="redis://localhost:6379/0")

    # Operational status reporting
    github_token: str = Field(default="")
    github_workflow_web_url: str = Field(default="")
    github_workflow_server_url: str = Field(default="")
    github_version_url: str = Field(default="")

    # Locale catalog
    locales_dir: Optional[str] = Field(default=None)


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""

    service_name: str
    port: int
    host: str = "0.0.0.0"

    def __init__(self, service_name: str, port: int, **kwargs):
        super().__init__(service_name=service_name, port=port, **kwargs)


def get_config(service_name: str, port: int, **overrides) -> ServiceConfig:
    """Get configuration for a specific service."""
    return ServiceConfig(service_name=service_name, port=port, **overrides)
