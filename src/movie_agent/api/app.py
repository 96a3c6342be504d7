from __future__ import annotations

import logging

import anthropic
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from movie_agent.api.cors import CORSHeadersMiddleware, cors_headers
from movie_agent.api.routes import router
from movie_agent.core.completion import CompletionError
from movie_agent.core.config import ConfigError, Settings
from movie_agent.core.logging_config import setup_logging
from movie_agent.core.recommender import RecommendationError

logger = logging.getLogger(__name__)

MISSING_PREFERENCES = "Missing required preferences"
COMPLETION_FAILED = "Completion service failed"


def create_app() -> FastAPI:
    settings = Settings.from_env()
    setup_logging(settings.log_level)

    app = FastAPI(title="Movie Night Agent", version="0.1.0")

    # Permissive by default; restrict via MOVIE_AGENT_CORS_ORIGINS.
    app.add_middleware(CORSHeadersMiddleware, allowed_origins=settings.cors_origins)

    @app.exception_handler(RequestValidationError)
    async def _validation_handler(_request: Request, _exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": MISSING_PREFERENCES})

    @app.exception_handler(StarletteHTTPException)
    async def _http_exception_handler(_request: Request, exc: StarletteHTTPException):
        message = "Method not allowed" if exc.status_code == 405 else str(exc.detail)
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": message},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(CompletionError)
    async def _completion_handler(_request: Request, exc: CompletionError):
        logger.error("Completion client is not configured: %s", exc)
        return JSONResponse(status_code=500, content={"error": str(exc)})

    @app.exception_handler(anthropic.APIError)
    async def _provider_handler(_request: Request, exc: anthropic.APIError):
        logger.error("Completion service failed: %s", exc)
        return JSONResponse(status_code=500, content={"error": COMPLETION_FAILED})

    @app.exception_handler(RecommendationError)
    async def _recommendation_handler(_request: Request, exc: RecommendationError):
        logger.error("Recommendation failed: %s", exc)
        return JSONResponse(status_code=500, content={"error": str(exc)})

    @app.exception_handler(ConfigError)
    async def _config_handler(_request: Request, exc: ConfigError):
        logger.error("Invalid configuration: %s", exc)
        return JSONResponse(status_code=500, content={"error": str(exc)})

    # Ensure unexpected errors don't leak internals. This handler runs outside
    # the middleware stack, so CORS headers are added here explicitly.
    @app.exception_handler(Exception)
    async def _unhandled_exception_handler(request: Request, exc: Exception):
        logger.error("Unhandled error", exc_info=exc)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error"},
            headers=cors_headers(request.headers.get("origin"), settings.cors_origins),
        )

    app.include_router(router)
    return app


def main() -> None:
    import uvicorn

    uvicorn.run("movie_agent.api.app:app", host="0.0.0.0", port=8000)


app = create_app()
