"""
TravelTales Backend: Custom Exception Hierarchy
================================================

What:  Defines application-specific exceptions for different error scenarios.
How:   Each exception class carries a message, an optional context dict and the
       HTTP status code it maps to. The boundary handler registered in main.py
       turns any of them into the uniform error body:

           {"success": false, "statusCode": <int>, "message": <str>}

Who:   Raised by services, repositories, dependencies and middleware.

Exception Hierarchy:
    TravelTalesError (base)
    ├── ValidationError          → 400 Bad Request (client can fix)
    ├── UnauthorizedError        → 401 Unauthorized
    ├── NotFoundError            → 404 Not Found (absent OR not owned)
    ├── RateLimitExceededError   → 429 Too Many Requests
    └── InternalError            → 500 Internal Server Error
        ├── DatabaseError
        └── FileStorageError
"""

from typing import Any, Dict, Optional


class TravelTalesError(Exception):
    """
    Base exception for all TravelTales application errors.

    Attributes:
        message:      User-facing error description (safe to return in API response)
        context:      Additional debug info (logged but NOT returned to client)
        status_code:  HTTP status the boundary handler responds with
    """

    status_code: int = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(TravelTalesError):
    """
    Raised when client input fails validation.

    When:    Missing required fields, malformed story id, bad file type or size,
             non-boolean favorite flag, out-of-range epoch timestamps.
    HTTP:    400 Bad Request
    """

    status_code = 400

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class UnauthorizedError(TravelTalesError):
    """Raised when the request carries no valid access token."""

    status_code = 401

    def __init__(
        self,
        message: str = "Unauthorized",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(TravelTalesError):
    """
    Raised when a requested resource does not exist.

    What:    The record is missing, or it belongs to another user. Both cases
             produce the same message so callers cannot probe for existence.
    HTTP:    404 Not Found
    """

    status_code = 404

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message or f"{resource} not found!", context=ctx)


class RateLimitExceededError(TravelTalesError):
    """
    Raised when a client exceeds the per-IP request rate limit.

    Response includes a Retry-After header for HTTP-compliant clients.
    """

    status_code = 429

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Rate limit exceeded. Please wait {retry_after} seconds before making more requests."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after


class InternalError(TravelTalesError):
    """
    Raised when the server cannot complete an otherwise valid request.

    HTTP:    500 Internal Server Error
    The message returned to the client is always generic; `context` carries
    the details and is only logged.
    """

    status_code = 500

    def __init__(
        self,
        message: str = "Internal Server Error",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(InternalError):
    """A database query, insert, update or delete failed."""

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class FileStorageError(InternalError):
    """
    Raised when file system operations fail.

    When:    Disk full, permission denied, directory not writable, I/O error.
    """

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
