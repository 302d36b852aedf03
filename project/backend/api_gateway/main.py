"""
FastAPI application.

Wires the narration, voice and merge routes under /api. Each application
instance owns its media store and HTTP connection pool.
"""

import uuid
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from modules.merger.utils import FFMPEG_INSTALL_HINT, resolve_ffmpeg_binary
from shared.config import settings
from shared.errors import PipelineError, UpstreamServiceError
from shared.logging import get_logger, set_request_id
from shared.media_store import InMemoryMediaStore
from api_gateway.routes import health, media, merge, narration, voices

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # Startup
    app.state.media_store = InMemoryMediaStore(
        max_items_per_kind=settings.media_store_max_items_per_kind,
        max_bytes_per_kind=settings.media_store_max_bytes_per_kind
    )
    app.state.http_client = httpx.AsyncClient(
        timeout=httpx.Timeout(settings.upstream_timeout_seconds, connect=10.0)
    )
    app.state.narration_client = None

    ffmpeg = resolve_ffmpeg_binary()
    if ffmpeg:
        logger.info("FFmpeg available", extra={"ffmpeg_path": ffmpeg})
    else:
        logger.warning(f"FFmpeg not found, merging is unavailable. {FFMPEG_INSTALL_HINT}")

    yield

    # Shutdown
    await app.state.http_client.aclose()
    await app.state.media_store.clear()


async def pipeline_error_handler(request: Request, exc: PipelineError) -> JSONResponse:
    content = {"error": exc.message, "code": exc.code}
    if isinstance(exc, UpstreamServiceError) and exc.upstream_status is not None:
        content["upstream_status"] = exc.upstream_status

    logger.warning(
        f"Request failed: {exc.message}",
        extra={"path": request.url.path, "status_code": exc.status_code, "error_code": exc.code}
    )
    return JSONResponse(status_code=exc.status_code, content=content)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first_error = errors[0]
        loc = " -> ".join(str(x) for x in first_error.get("loc", []))
        msg = first_error.get("msg", "Validation error")
        message = f"{loc}: {msg}" if loc else msg
    else:
        message = "Request validation failed"
    return JSONResponse(status_code=422, content={"error": message, "code": "invalid_request"})


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled exception: {exc}", extra={"path": request.url.path}, exc_info=True)
    return JSONResponse(status_code=500, content={"error": "Internal server error", "code": "internal_error"})


def create_app() -> FastAPI:
    """Build the application with its routes, handlers and request-id middleware."""
    app = FastAPI(title="Video Narration API", lifespan=lifespan)

    @app.middleware("http")
    async def bind_request_id(request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        set_request_id(request_id)
        try:
            response = await call_next(request)
        finally:
            set_request_id(None)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response

    app.add_exception_handler(PipelineError, pipeline_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(merge.router, prefix="/api", tags=["merge"])
    app.include_router(media.router, prefix="/api", tags=["media"])
    app.include_router(narration.router, prefix="/api", tags=["narration"])
    app.include_router(voices.router, prefix="/api", tags=["voices"])
    app.include_router(health.router, prefix="/api", tags=["health"])
    return app


app = create_app()
