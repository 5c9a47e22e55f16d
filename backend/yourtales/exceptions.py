"""
YourTales Backend - Custom Exception Hierarchy
===============================================

What:  Defines application-specific exceptions for different error scenarios.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with correct HTTP status codes.
Who:   Raised by services and dependencies; caught by global handlers.
When:  During request processing when recoverable errors occur.

Exception Hierarchy:
    YourTalesError (base)
    ├── ValidationError          → 400 Bad Request (client can fix)
    ├── AuthenticationError      → 401 Unauthorized
    ├── PermissionDeniedError    → 403 Forbidden
    ├── AccountNotVerifiedError  → 403 Forbidden
    ├── NotFoundError            → 404 Not Found
    ├── RateLimitExceededError   → 429 Too Many Requests
    └── DatabaseError            → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class YourTalesError(Exception):
    """
    Base exception for all YourTales application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, and only returned for 4xx errors)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(YourTalesError):
    """
    Raised when client input fails a business rule.

    When:    Missing required fields, duplicate email, duplicate invitation,
             wrong OTP, invitation already processed.
    HTTP:    400 Bad Request

    Schema-level problems (wrong types, out-of-range ratings) are rejected by
    FastAPI with 422 before a service ever runs.

    Example response:
        {
            "error": "validation_error",
            "message": "Email already in use",
            "details": {"field": "email"}
        }
    """

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


class AuthenticationError(YourTalesError):
    """
    Raised when the caller cannot be identified.

    When:    Missing or malformed bearer token, expired token, token for a
             deleted user, wrong email/password pair, wrong current password.
    HTTP:    401 Unauthorized (with WWW-Authenticate: Bearer)
    """

    def __init__(
        self,
        message: str = "Not authorized",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class PermissionDeniedError(YourTalesError):
    """
    Raised when an identified caller may not perform an action.

    When:    Non-author deleting a manuscript, viewer editing a chapter,
             answering someone else's invitation, deleting another user's comment.
    HTTP:    403 Forbidden
    """

    def __init__(
        self,
        message: str = "Permission denied",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class AccountNotVerifiedError(PermissionDeniedError):
    """
    Raised on login before the account's OTP has been confirmed.
    HTTP:    403 Forbidden
    """

    def __init__(
        self,
        message: str = "Account not verified. Please verify OTP.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(YourTalesError):
    """
    Raised when a requested resource does not exist.

    HTTP:    404 Not Found

    SQLAlchemy returns None for missing records (not an exception).
    Services convert None → NotFoundError so the global handler can answer 404.
    Notifications that belong to another user are also reported as missing.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource.capitalize()} not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class DatabaseError(YourTalesError):
    """
    Raised when database operations fail unexpectedly.

    HTTP:    500 Internal Server Error

    The message returned to the client is always generic; the SQL error
    itself is logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(YourTalesError):
    """
    Raised when a client exceeds the per-IP request rate limit.

    HTTP:    429 Too Many Requests (with Retry-After header)
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
