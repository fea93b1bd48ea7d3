"""
Shared error handling for fedipost.
"""

from typing import Dict, Any, Optional

from opentelemetry import trace
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response format."""

    trace_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = {}


class FediPostException(Exception):
    """Base exception for fedipost services."""

    status_code = 400

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        trace_id = None
        current_span = trace.get_current_span()
        if current_span and current_span.is_recording():
            span_context = current_span.get_span_context()
            if span_context.trace_id != 0:
                trace_id = f"{span_context.trace_id:032x}"

        return ErrorResponse(
            trace_id=trace_id,
            code=self.code,
            message=self.message,
            details=self.details
        )


class ValidationError(FediPostException):
    """Malformed input, rejected before any I/O."""

    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("VALIDATION_ERROR", message, details)


class NotFoundError(FediPostException):
    """Requested resource does not exist."""

    status_code = 404

    def __init__(self, message: str = "Not found", details: Optional[Dict[str, Any]] = None):
        super().__init__("NOT_FOUND", message, details)


class StoreError(FediPostException):
    """Durable store operation failed."""

    status_code = 500

    def __init__(
        self,
        message: str = "Store error",
        details: Optional[Dict[str, Any]] = None,
        code: str = "STORE_ERROR",
    ):
        super().__init__(code, message, details)


class StoreWriteError(StoreError):
    """Durable store rejected a write."""

    def __init__(self, message: str = "Store write failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details, code="STORE_WRITE_ERROR")


class StoreReadError(StoreError):
    """Durable store read, scan or query failed."""

    def __init__(self, message: str = "Store read failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details, code="STORE_READ_ERROR")


class CacheError(FediPostException):
    """Cache could not be reached when it was configured as required."""

    status_code = 503

    def __init__(self, message: str = "Cache unavailable", details: Optional[Dict[str, Any]] = None):
        super().__init__("CACHE_ERROR", message, details)
