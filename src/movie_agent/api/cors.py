from __future__ import annotations

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

ALLOW_METHODS = "GET, POST, OPTIONS"
ALLOW_HEADERS = "Content-Type"


def cors_headers(origin: str | None, allowed_origins: tuple[str, ...]) -> dict[str, str]:
    """Headers granting cross-origin access; empty when the origin is not allowed."""

    if "*" in allowed_origins:
        allow = "*"
    elif origin and origin in allowed_origins:
        allow = origin
    else:
        return {}

    headers = {
        "Access-Control-Allow-Origin": allow,
        "Access-Control-Allow-Methods": ALLOW_METHODS,
        "Access-Control-Allow-Headers": ALLOW_HEADERS,
    }
    if allow != "*":
        headers["Vary"] = "Origin"
    return headers


class CORSHeadersMiddleware(BaseHTTPMiddleware):
    """Stamp CORS headers on every response, not only on cross-origin requests."""

    def __init__(self, app, *, allowed_origins: tuple[str, ...] = ("*",)) -> None:
        super().__init__(app)
        self._allowed_origins = allowed_origins

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        for name, value in cors_headers(
            request.headers.get("origin"), self._allowed_origins
        ).items():
            response.headers[name] = value
        return response
