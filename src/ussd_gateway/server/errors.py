"""Server error handling - sanitizes errors for client responses.

Prevents exposure of file paths, stack traces and configuration details to
HTTP clients. Full details go to the server log under an error reference.
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from ussd_gateway.core.errors import (
    GraphLoadError,
    SessionError,
    StoreUnavailableError,
    create_error_reference,
)

logger = logging.getLogger(__name__)


# Error messages safe to expose to clients
SAFE_ERROR_MESSAGES = {
    "ConfigError": "Configuration error. Please contact support.",
    "GraphLoadError": "Invalid automaton configuration.",
    "SessionNotFoundError": "Session not found.",
    "SessionExpiredError": "Session has expired.",
    "StoreUnavailableError": "Session storage is temporarily unavailable.",
    "BusinessHookError": "A backend service failed. Please try again later.",
}

DEFAULT_ERROR_MESSAGE = "An internal error occurred. Please try again later."


def get_safe_error_message(exception: Exception) -> str:
    """Get client-safe error message for exception type."""
    return SAFE_ERROR_MESSAGES.get(type(exception).__name__, DEFAULT_ERROR_MESSAGE)


def get_http_status_for_exception(exception: Exception) -> int:
    """Map exception types to HTTP status codes."""
    if isinstance(exception, SessionError):
        return 404
    if isinstance(exception, GraphLoadError):
        return 422
    if isinstance(exception, StoreUnavailableError):
        return 503
    return 500


def log_error_with_context(
    error_ref: str,
    exception: Exception,
    endpoint: str | None = None,
) -> None:
    """Log full error details server-side for debugging."""
    logger.error(
        f"[{error_ref}] Error in {endpoint or 'unknown'}: {type(exception).__name__}: {exception}",
        exc_info=True,
        extra={
            "error_reference": error_ref,
            "endpoint": endpoint,
            "exception_type": type(exception).__name__,
        },
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Global exception handler for uncaught exceptions."""
    error_ref = create_error_reference()
    log_error_with_context(error_ref, exc, request.url.path)

    return JSONResponse(
        status_code=get_http_status_for_exception(exc),
        content={
            "error": get_safe_error_message(exc),
            "reference": error_ref,
            "message": "If this problem persists, contact support with the reference code.",
        },
    )
