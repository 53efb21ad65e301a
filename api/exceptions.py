"""Standard exception classes for the API.

All custom exceptions inherit from OutfittedException and include:
- message: Human-readable error message
- error_code: Machine-readable error code (e.g., "FORBIDDEN")
- details: Optional dictionary with additional context

Domain-specific codes (NO_ITEMS, ITEMS_NOT_FOUND, OUTFIT_NOT_FOUND, ...)
are passed as ``error_code`` to the class carrying the right status.
"""

from typing import Any, Optional


class OutfittedException(Exception):
    """Base exception for all gateway API errors.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code for client handling
        details: Optional dictionary with additional error context
        status_code: HTTP status code (set by subclasses)
    """

    status_code: int = 500
    default_error_code: str = "INTERNAL_ERROR"
    default_message: str = "An unexpected error occurred"

    def __init__(
        self,
        message: Optional[str] = None,
        error_code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        self.message = message or self.default_message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for JSON response."""
        result = {
            "code": self.error_code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


class ValidationError(OutfittedException):
    """Request failed validation or referential checks (HTTP 400)."""

    status_code = 400
    default_error_code = "BAD_REQUEST"
    default_message = "Validation failed"


class AuthenticationError(OutfittedException):
    """Missing or wrong API key (HTTP 401)."""

    status_code = 401
    default_error_code = "UNAUTHORIZED"
    default_message = "Authentication required"


class AuthorizationError(OutfittedException):
    """Caller does not own the resource (HTTP 403)."""

    status_code = 403
    default_error_code = "FORBIDDEN"
    default_message = "Permission denied"


class NotFoundError(OutfittedException):
    """Resource not found (HTTP 404)."""

    status_code = 404
    default_error_code = "NOT_FOUND"
    default_message = "Resource not found"


class RateLimitError(OutfittedException):
    """Rate limit exceeded (HTTP 429)."""

    status_code = 429
    default_error_code = "RATE_LIMIT_EXCEEDED"
    default_message = "Rate limit exceeded"
