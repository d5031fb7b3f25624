"""
Centralized error handlers for the TrackPulse API.

Every application exception is rendered in the same envelope:
``{"error": {"code", "message", "status_code"}}``.
"""

import logging

from app.core.exceptions import BaseAppException
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


def _error_body(code: str, message: str, status_code: int) -> dict:
    return {
        "error": {
            "code": code,
            "message": message,
            "status_code": status_code,
        }
    }


async def base_exception_handler(
    request: Request, exc: BaseAppException
) -> JSONResponse:
    """Handle all application-specific exceptions.

    Client errors (4xx) are logged at warning level, server errors at error level.

    Args:
        request: The incoming request that caused the exception
        exc: The application exception that was raised

    Returns:
        JSON response with standardized error format
    """
    log = logger.warning if exc.status_code < 500 else logger.error
    log(
        f"Application error: {exc.error_code} - {exc.detail}",
        extra={
            "error_code": exc.error_code,
            "status_code": exc.status_code,
            "path": request.url.path,
            "method": request.method,
        },
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.error_code, str(exc.detail), exc.status_code),
        headers=exc.headers,
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected errors.

    Args:
        request: The incoming request that caused the exception
        exc: The unhandled exception that was raised

    Returns:
        JSON response with generic error message (no sensitive details)
    """
    logger.exception(
        f"Unhandled exception: {str(exc)}",
        extra={
            "path": request.url.path,
            "method": request.method,
            "exception_type": type(exc).__name__,
        },
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body(
            "INTERNAL_SERVER_ERROR", "An unexpected error occurred", 500
        ),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the application handlers, specific exceptions first."""
    app.add_exception_handler(BaseAppException, base_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, unhandled_exception_handler)
