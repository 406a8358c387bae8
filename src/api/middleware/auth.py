"""
User authentication middleware for the Afroglot API.

Resolves ``Authorization: Bearer <token>`` headers on ``/api/v1/`` routes
to a user id through ``settings.auth_tokens`` and stores it on
``request.state.user_id``. When no tokens are configured every request
runs as ``settings.default_user_id``.
"""

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from src.core.config import get_settings


def _unauthorized(detail: str) -> JSONResponse:
    return JSONResponse(
        status_code=401,
        content={"detail": detail, "code": "AUTH_REQUIRED"},
        headers={"WWW-Authenticate": "Bearer"},
    )


class UserAuthMiddleware(BaseHTTPMiddleware):
    """Resolve the calling user on /api/v1/ routes when auth_tokens is set."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        settings = get_settings()

        # Single-user mode
        if not settings.auth_tokens:
            request.state.user_id = settings.default_user_id
            return await call_next(request)

        path = request.url.path

        # Health checks and the OpenAPI docs live outside /api/v1/
        if not path.startswith("/api/v1/"):
            return await call_next(request)

        auth_header = request.headers.get("authorization", "")
        if not auth_header.startswith("Bearer "):
            return _unauthorized("Please sign in to continue")

        token = auth_header[len("Bearer ") :]
        user_id = settings.auth_tokens.get(token)
        if user_id is None:
            return _unauthorized("Invalid access token")

        request.state.user_id = user_id
        return await call_next(request)
