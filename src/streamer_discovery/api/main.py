"""FastAPI application factory and entry point.

Creates the application instance, registers middleware and mounts the
live-status, cron, catalog and health routers.

Usage::

    # Development server (from project root)
    uvicorn streamer_discovery.api.main:app --reload

    # Production
    gunicorn streamer_discovery.api.main:app -k uvicorn.workers.UvicornWorker
"""

from __future__ import annotations

import time
import uuid
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from streamer_discovery import __version__
from streamer_discovery.config.settings import get_settings
from streamer_discovery.core.database import dispose_engine
from streamer_discovery.core.exceptions import InvalidRequestError, StreamerDiscoveryError
from streamer_discovery.core.logging_config import configure_logging, request_id_var

# ---------------------------------------------------------------------------
# Logging configuration: applied once at import time so that records
# emitted during app construction are captured.  The level from settings is
# re-applied inside create_app().
# ---------------------------------------------------------------------------

configure_logging("INFO")

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    logger.info(
        "application_startup",
        app_name=settings.app_name,
        debug=settings.debug,
        log_level=settings.log_level,
    )
    yield
    from streamer_discovery.api.dependencies import close_platform_clients  # noqa: PLC0415

    await close_platform_clients()
    await dispose_engine()
    logger.info("application_shutdown")


def create_app() -> FastAPI:
    """Build and configure the FastAPI application.

    Separated from the module-level ``app`` singleton so that tests can
    call ``create_app()`` with a patched settings environment.

    Returns:
        A fully configured ``FastAPI`` instance.
    """
    settings = get_settings()
    configure_logging(settings.log_level)

    application = FastAPI(
        title=settings.app_name,
        description=(
            "Discovery of Korean game streamers on YouTube, Twitch and Chzzk, "
            "with cached live-status lookups."
        ),
        version=__version__,
        debug=settings.debug,
        redirect_slashes=False,
        lifespan=_lifespan,
    )

    # ---- Middleware --------------------------------------------------------

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @application.middleware("http")
    async def request_logging_middleware(
        request: Request, call_next: Callable
    ) -> Response:
        """Log every request with its status and duration under a request ID."""
        request_id = str(uuid.uuid4())
        request_id_var.set(request_id)
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        start = time.perf_counter()
        response = None
        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error("unhandled_exception", exc_info=exc)
            raise
        finally:
            elapsed_ms = round((time.perf_counter() - start) * 1000, 2)
            status_code = getattr(response, "status_code", 500)
            log_fn = logger.warning if status_code >= 400 else logger.info
            log_fn("request_complete", status_code=status_code, elapsed_ms=elapsed_ms)

        response.headers["X-Request-ID"] = request_id
        return response

    @application.exception_handler(InvalidRequestError)
    async def invalid_request_handler(
        request: Request, exc: InvalidRequestError
    ) -> JSONResponse:
        return JSONResponse({"error": str(exc)}, status_code=400)

    @application.exception_handler(StreamerDiscoveryError)
    async def discovery_error_handler(
        request: Request, exc: StreamerDiscoveryError
    ) -> JSONResponse:
        logger.error("request_failed", error=str(exc), error_type=type(exc).__name__)
        return JSONResponse({"error": str(exc)}, status_code=500)

    # ---- Routers -----------------------------------------------------------

    from streamer_discovery.api.routes import (  # noqa: PLC0415
        catalog,
        cron,
        health as health_routes,
        live_status,
    )

    application.include_router(health_routes.router)
    application.include_router(live_status.router)
    application.include_router(cron.router)
    application.include_router(catalog.router)

    @application.get("/health", tags=["system"])
    async def health() -> JSONResponse:
        """Process-level liveness; no I/O.  Deep checks live at ``/api/health``."""
        return JSONResponse({"status": "ok"})

    return application


app = create_app()
"""The FastAPI application instance passed to Uvicorn / Gunicorn."""
