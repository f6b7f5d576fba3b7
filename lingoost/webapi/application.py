"""Application factory for the FastAPI backend."""

from __future__ import annotations

import os
import re

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import config_manager as cfg
from .. import load_environment
from .. import logging_manager as log_mgr
from ..services.errors import DubbingPlaybackError
from .dependencies import get_job_poller, get_session_registry
from .routes import dubbing_router, playback_router, system_router

load_environment()

logger = log_mgr.get_logger().getChild("webapi.application")

CORS_ORIGINS_ENV = "LINGOOST_API_CORS_ORIGINS"
REQUEST_ID_HEADER = "X-Request-Id"

# Default origins considered safe for local development convenience.
DEFAULT_LOCAL_ORIGINS = (
    "http://localhost",
    "http://127.0.0.1",
    "http://localhost:3000",
    "http://127.0.0.1:3000",
)


def _parse_cors_origins(raw_value: str | None) -> tuple[list[str], bool]:
    """Return the allowed origins and whether credentials are supported."""

    if raw_value is None:
        return list(DEFAULT_LOCAL_ORIGINS), True

    tokens = [token.strip() for token in re.split(r"[\s,]+", raw_value) if token.strip()]
    if not tokens:
        return [], False
    if "*" in tokens:
        return ["*"], False
    return tokens, True


def _configure_cors(app: FastAPI) -> None:
    allowed_origins, allow_credentials = _parse_cors_origins(os.environ.get(CORS_ORIGINS_ENV))
    if not allowed_origins:
        logger.info(
            "CORS middleware disabled; no allowed origins configured.",
            extra={"event": "webapi.cors.disabled"},
        )
        return

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )


def _install_request_context(app: FastAPI) -> None:
    @app.middleware("http")
    async def _bind_request_id(request: Request, call_next):
        with log_mgr.correlation_scope(request.headers.get(REQUEST_ID_HEADER)) as request_id:
            response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


def register_exception_handlers(app: FastAPI) -> None:
    """Render service errors as ``{"error": ..., "detail": ...}`` payloads."""

    @app.exception_handler(DubbingPlaybackError)
    async def _handle_service_error(request: Request, exc: DubbingPlaybackError) -> JSONResponse:
        logger.info(
            "Request failed with service error",
            extra={
                "event": "webapi.request.error",
                "error": exc.code,
                "status": exc.http_status,
                "path": request.url.path,
            },
        )
        return JSONResponse(status_code=exc.http_status, content=exc.to_payload())


def create_app() -> FastAPI:
    """Instantiate and configure the FastAPI application."""

    app = FastAPI(title="Lingoost dubbing API", version="0.1.0")

    register_exception_handlers(app)
    _install_request_context(app)

    @app.on_event("startup")
    async def _prepare_runtime() -> None:
        settings = cfg.get_settings()
        log_mgr.configure_logging_level(log_level=settings.log_level)
        if settings.start_poller:
            get_job_poller().start()

    @app.on_event("shutdown")
    async def _cleanup_runtime() -> None:
        settings = cfg.get_settings()
        if settings.start_poller:
            get_job_poller().stop()
        closed = get_session_registry().close_all()
        if closed:
            logger.info(
                "Closed playback sessions on shutdown",
                extra={"event": "webapi.shutdown", "count": closed},
            )

    _configure_cors(app)

    app.include_router(system_router)
    app.include_router(dubbing_router)
    app.include_router(playback_router)

    return app


__all__ = ["create_app", "register_exception_handlers"]
