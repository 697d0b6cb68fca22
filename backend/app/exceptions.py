"""
Notify Backend: Custom Exception Hierarchy
===========================================

What:  Application-specific exceptions for each error kind the API reports.
How:   Each exception class carries a message, an optional context dict, an
       HTTP status code and a machine-readable error code. Global exception
       handlers (registered in main.py) turn them into the response envelope.
Who:   Raised by services and dependencies; caught by global handlers.

Exception Hierarchy:
    NotifyError (base)
    ├── ValidationError          → 400 Bad Request (client can fix)
    ├── ConflictError            → 400 Bad Request (state/uniqueness violation)
    ├── InvalidOperationError    → 400 Bad Request (valid target, wrong state)
    ├── UnauthenticatedError     → 401 Unauthorized
    ├── ForbiddenError           → 403 Forbidden
    ├── NotFoundError            → 404 Not Found
    ├── RateLimitExceededError   → 429 Too Many Requests
    └── DatabaseError            → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class NotifyError(Exception):
    """
    Base exception for all Notify application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    status_code: int = 500
    error_code: str = "server_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(NotifyError):
    """
    Raised when client input fails validation.

    When:    Missing required fields, blank text, unsupported image type or size.
    HTTP:    400 Bad Request
    """

    status_code = 400
    error_code = "validation_error"

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


class ConflictError(NotifyError):
    """
    Raised when an operation would violate a uniqueness or relationship rule.

    When:    Duplicate friend request for a pair, already friends, phone number
             already registered.
    HTTP:    400 Bad Request
    """

    status_code = 400
    error_code = "conflict"

    def __init__(
        self,
        message: str = "The request conflicts with the current state",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class InvalidOperationError(NotifyError):
    """
    Raised when the target exists but is in the wrong state for the operation.

    When:    Self friend request, re-processing an accepted/rejected request.
    HTTP:    400 Bad Request
    """

    status_code = 400
    error_code = "invalid_operation"

    def __init__(
        self,
        message: str = "This operation is not allowed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class UnauthenticatedError(NotifyError):
    """
    Raised when the bearer credential is missing, malformed, expired, or
    when login credentials do not match.

    HTTP:    401 Unauthorized
    """

    status_code = 401
    error_code = "unauthenticated"

    def __init__(
        self,
        message: str = "Access token is required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ForbiddenError(NotifyError):
    """
    Raised when an authenticated user acts on a resource they do not own.

    When:    Accepting someone else's friend request, editing another user's post.
    HTTP:    403 Forbidden
    """

    status_code = 403
    error_code = "forbidden"

    def __init__(
        self,
        message: str = "You are not authorized to perform this action",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(NotifyError):
    """
    Raised when a requested resource does not exist.

    SQLAlchemy returns None for missing rows; services convert that into
    NotFoundError so the global handler can answer 404.
    """

    status_code = 404
    error_code = "not_found"

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        if message is None:
            message = f"{resource.capitalize()} not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class DatabaseError(NotifyError):
    """
    Raised when database operations fail unexpectedly.

    The message returned to the client is always generic. Details (constraint
    name, SQL error type) go to the server log only.
    """

    status_code = 500
    error_code = "server_error"

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(NotifyError):
    """
    A client exceeded the per-IP request rate limit. RateLimitMiddleware
    builds the 429 response from it directly, since middleware sits outside
    the exception handlers.

    HTTP:    429 Too Many Requests, with a Retry-After header.
    """

    status_code = 429
    error_code = "rate_limit_exceeded"

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Too many requests. Please wait {retry_after} seconds before retrying."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after
