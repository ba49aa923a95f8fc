"""
Exception handlers for the FastAPI application.

Every failure leaves the API as `{"error": {"code", "message", "details"?}}`.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..exceptions import ErrorCode, GoalTrackerError
from ..integrations.base import AuthenticationError, IntegrationError, RateLimitError
from ..utils.log_sanitizer import sanitize_string

logger = logging.getLogger(__name__)

# Provider failures the client can act on; anything else is a 502
CLIENT_ACTIONABLE = (
    (AuthenticationError, 401, ErrorCode.STRAVA_AUTH_FAILED),
    (RateLimitError, 429, ErrorCode.STRAVA_RATE_LIMITED),
)


def error_body(code: ErrorCode, message: str, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    body: Dict[str, Any] = {"code": code.value, "message": message}
    if details:
        body["details"] = details
    return {"error": body}


def error_response(
    status_code: int,
    code: ErrorCode,
    message: str,
    details: Optional[Dict[str, Any]] = None,
) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=error_body(code, message, details))


async def goal_tracker_error_handler(request: Request, exc: GoalTrackerError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def integration_error_handler(request: Request, exc: IntegrationError) -> JSONResponse:
    """Strava failures: 401 and 429 pass through, the rest become 502."""
    message = sanitize_string(str(exc))

    for error_class, status_code, code in CLIENT_ACTIONABLE:
        if isinstance(exc, error_class):
            retry_after = getattr(exc, "retry_after", None)
            details = {"retry_after": retry_after} if retry_after else None
            return error_response(status_code, code, message, details)

    provider = exc.provider or "upstream service"
    logger.warning(f"{provider} error on {request.url.path}: {message}")
    return error_response(
        502,
        ErrorCode.UPSTREAM_ERROR,
        f"Failed to fetch data from {provider}",
        {"reason": exc.code} if exc.code else None,
    )


def _field_errors(exc: RequestValidationError) -> List[Dict[str, str]]:
    # loc is ("query", "goal") and the like
    return [
        {
            "field": ".".join(str(part) for part in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Query parameters FastAPI rejected before the route ran."""
    return error_response(
        422,
        ErrorCode.VALIDATION_ERROR,
        "Request validation failed",
        {"errors": _field_errors(exc)},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled exception on {request.url.path}: {exc!r}", exc_info=exc)
    return error_response(500, ErrorCode.INTERNAL_ERROR, "An unexpected error occurred")


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register all exception handlers with the FastAPI application.

    Args:
        app: The FastAPI application instance
    """
    app.add_exception_handler(GoalTrackerError, goal_tracker_error_handler)
    app.add_exception_handler(IntegrationError, integration_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)

    # Catches everything else, so it goes last
    app.add_exception_handler(Exception, unhandled_error_handler)
