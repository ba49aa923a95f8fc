"""
Custom exceptions for the Goal Tracker service.

Each exception carries a descriptive message, an error code for API
responses, the HTTP status it maps to and optional details.
"""

from typing import Any, Dict, Optional
from enum import Enum


class ErrorCode(str, Enum):
    """Error codes for consistent API error responses."""

    # General errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_AUTHENTICATED = "NOT_AUTHENTICATED"

    # Upstream (Strava) errors
    STRAVA_NOT_CONFIGURED = "STRAVA_NOT_CONFIGURED"
    STRAVA_AUTH_FAILED = "STRAVA_AUTH_FAILED"
    STRAVA_RATE_LIMITED = "STRAVA_RATE_LIMITED"
    UPSTREAM_ERROR = "UPSTREAM_ERROR"


class GoalTrackerError(Exception):
    """
    Base exception for all Goal Tracker errors.

    Attributes:
        message: Human-readable error message
        code: Error code from ErrorCode enum
        status_code: HTTP status code for API responses
        details: Optional dictionary with additional error details
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API response."""
        result: Dict[str, Any] = {
            "error": {
                "code": self.code.value,
                "message": self.message,
            }
        }
        if self.details:
            result["error"]["details"] = self.details
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code.value}, message={self.message!r})"


# ============================================================================
# Client Errors (4xx)
# ============================================================================

class ValidationError(GoalTrackerError):
    """Raised when input validation fails."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        error_details = details or {}
        if field:
            error_details["field"] = field
        super().__init__(
            message=message,
            code=ErrorCode.VALIDATION_ERROR,
            status_code=400,
            details=error_details,
        )


class NotAuthenticatedError(GoalTrackerError):
    """Raised when a request carries no Strava session cookie."""

    def __init__(
        self,
        message: str = "Not authenticated",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCode.NOT_AUTHENTICATED,
            status_code=401,
            details=details,
        )


# ============================================================================
# Upstream Errors (5xx)
# ============================================================================

class StravaNotConfiguredError(GoalTrackerError):
    """Raised when Strava OAuth client credentials are missing."""

    def __init__(
        self,
        message: str = "Strava OAuth not configured. Set STRAVA_CLIENT_ID and STRAVA_CLIENT_SECRET.",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCode.STRAVA_NOT_CONFIGURED,
            status_code=500,
            details=details,
        )
