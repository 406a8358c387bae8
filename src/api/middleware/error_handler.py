"""
Error envelope for every API failure.

Clients (the Streamlit UI in particular) read ``code`` to pick a message
and show ``detail`` to the user, so every failure, whether a recorder
precondition, a provider rejection, a bad form field or a bug, comes back
as ``{"detail", "code", "timestamp"}``.
"""

import logging
from datetime import UTC, datetime

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from src.core.exceptions import AfroglotError

logger = logging.getLogger(__name__)


def _envelope(
    status_code: int, detail: str, code: str, timestamp: str | None = None
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "detail": detail,
            "code": code,
            "timestamp": timestamp or datetime.now(UTC).isoformat(),
        },
    )


def _describe_validation(exc: RequestValidationError) -> str:
    """First offending field as ``"body.text: String should have ..."``."""
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    message = first.get("msg", "invalid value")
    return f"{location}: {message}" if location else message


def register_error_handlers(app: FastAPI) -> None:
    """Attach the domain, validation and catch-all handlers to *app*."""

    @app.exception_handler(AfroglotError)
    async def afroglot_error_handler(request: Request, exc: AfroglotError) -> JSONResponse:
        if exc.status_code >= 500:
            # Provider and storage failures; 4xx are the caller's to fix.
            logger.warning(
                "%s on %s %s: %s", exc.code, request.method, request.url.path, exc.detail
            )
        return _envelope(exc.status_code, exc.detail, exc.code, exc.timestamp)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        _request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return _envelope(422, _describe_validation(exc), "VALIDATION_ERROR")

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
        """Stack traces go to the log, never to clients."""
        logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        return _envelope(500, "Internal server error", "INTERNAL_ERROR")
