"""Error Handlers — global exception handlers for the BookSwap API.

Invariants:
    - BookSwapError → structured JSON with error code, message, severity
    - 4xx domain errors log at WARNING, 5xx infrastructure errors at ERROR
    - RequestValidationError → field-level error details
    - Exception (catch-all) → never leaks internal details

Design Decisions:
    - Three-layer handler: domain (BookSwapError), validation (Pydantic), catch-all (Exception)
    - Extracted from main.py (ADR: ExMA import fan-out < 10)
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from app.core.errors import BookSwapError, ErrorSeverity

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_bookswap_error_handler(app)
    _register_validation_error_handler(app)
    _register_generic_error_handler(app)


def _register_bookswap_error_handler(app: FastAPI) -> None:
    """Register BookSwap domain/infrastructure error handler."""

    @app.exception_handler(BookSwapError)
    async def bookswap_error_handler(request: Request, exc: BookSwapError):
        """Handle all BookSwap domain/infrastructure errors."""
        log = logger.error if exc.http_status >= 500 else logger.warning
        log(
            f"BookSwapError: {exc.message}",
            extra={
                "error_code": exc.code,
                "path": request.url.path,
                "swap_id": exc.context.swap_id,
                "actor_id": exc.context.actor_id,
            },
        )
        return JSONResponse(
            status_code=exc.http_status, content=exc.to_response(),
        )


def _register_validation_error_handler(app: FastAPI) -> None:
    """Register Pydantic validation error handler."""

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        """Handle Pydantic validation errors."""
        logger.warning(
            f"Validation error on {request.url.path}: {exc.errors()}",
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_build_validation_error_response(exc),
        )


def _register_generic_error_handler(app: FastAPI) -> None:
    """Register catch-all error handler."""

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all — never leaks internal details."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": "An unexpected error occurred",
                    "category": "internal",
                    "severity": ErrorSeverity.CRITICAL.value,
                },
            },
        )


def _build_validation_error_response(exc: RequestValidationError) -> dict:
    """Build structured validation error response."""
    return {
        "error": {
            "code": "VALIDATION_ERROR",
            "message": "Invalid request data",
            "category": "validation",
            "severity": ErrorSeverity.ERROR.value,
            "details": [
                {
                    "field": ".".join(str(loc) for loc in e["loc"]),
                    "message": e["msg"],
                    "type": e["type"],
                }
                for e in exc.errors()
            ],
        },
    }
