"""
Shared error handling for the Transit Access Layer.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel

from shared.logging import request_id_var


class ErrorResponse(BaseModel):
    """Standard error response format."""

    request_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = {}


class TransitServiceException(Exception):
    """Base exception for Transit Access Layer services."""

    status_code = 400

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            request_id=request_id_var.get(),
            code=self.code,
            message=self.message,
            details=self.details
        )


class UpstreamUnavailable(TransitServiceException):
    """Transport failure, non-2xx status or upstream-reported error."""

    def __init__(self, service: str, message: str = "Upstream unavailable", details: Optional[Dict[str, Any]] = None):
        self.service = service
        super().__init__("UPSTREAM_UNAVAILABLE", f"{service}: {message}", details)


class UpstreamMalformed(TransitServiceException):
    """Upstream response is missing the structure a normalizer requires."""

    def __init__(self, service: str, message: str = "Malformed upstream response", details: Optional[Dict[str, Any]] = None):
        self.service = service
        super().__init__("UPSTREAM_MALFORMED", f"{service}: {message}", details)


class CacheUnavailable(TransitServiceException):
    """Cache infrastructure fault. Callers treat it as a miss."""

    status_code = 503

    def __init__(self, message: str = "Cache unavailable", details: Optional[Dict[str, Any]] = None):
        super().__init__("CACHE_UNAVAILABLE", message, details)


class ValidationError(TransitServiceException):
    """Validation-related errors."""

    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("VALIDATION_ERROR", message, details)


class ResourceNotFound(TransitServiceException):
    """Requested resource does not exist."""

    status_code = 404

    def __init__(self, message: str = "Resource not found", details: Optional[Dict[str, Any]] = None):
        super().__init__("RESOURCE_NOT_FOUND", message, details)
