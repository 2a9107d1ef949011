"""
Memory Map Backend — Custom Exception Hierarchy
=================================================

What:  Application-specific exceptions for the error scenarios of the API.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with correct HTTP status codes.
Who:   Raised by services and middleware; caught by global handlers.

Exception Hierarchy:
    MemoryMapError (base)
    ├── ValidationError          → 400 Bad Request (client can fix)
    ├── DatabaseError            → 500 Internal Server Error
    └── RateLimitExceededError   → 429 Too Many Requests

The map view client has its own degraded-capability exception,
memorymap.mapview.location.GeolocationUnavailable, which never reaches HTTP.
"""

from typing import Any, Dict, List, Optional


class MemoryMapError(Exception):
    """
    Base exception for all Memory Map application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(MemoryMapError):
    """
    Raised when a submitted message fails the message schema.

    HTTP: 400 Bad Request

    Example response:
        {
            "error": "validation_error",
            "message": "Message failed validation",
            "details": {"errors": [{"field": "message", "reason": "..."}]}
        }
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        errors: Optional[List[Dict[str, Any]]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        if errors:
            ctx["errors"] = errors
        super().__init__(message=message, context=ctx)
        self.field = field
        self.errors = errors or []


class DatabaseError(MemoryMapError):
    """
    Raised when a store read or insert fails unexpectedly.

    HTTP: 500 Internal Server Error

    The message returned to the client is always generic; the context is
    logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(MemoryMapError):
    """
    Raised when a client creates too many messages within the window.

    HTTP: 429 Too Many Requests, with a Retry-After header.
    """

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
