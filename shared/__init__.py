"""
Shared utilities for the Transit Access Layer.

Common building blocks consumed by the transit service:

- config: Service configuration via pydantic-settings
- logging: Structured logging with request correlation
- metrics: Prometheus metrics helpers
- errors: Canonical error types and responses
- base_service: FastAPI service scaffold with health, metrics and error handlers

Do not import from service_* packages into shared/.
"""
