# src/waitlist_stage/main.py
"""Main entry point for the Waitlist Stage application."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from waitlist_stage.api.v1 import count_router, realtime_router, signups_router
from waitlist_stage.core.settings import Settings, settings
from waitlist_stage.services.broadcast import BroadcastChannel
from waitlist_stage.services.counter import CounterService
from waitlist_stage.services.errors import (
    DuplicateSignupError,
    InvalidEmailError,
    ServiceUnavailableError,
    WaitlistError,
)
from waitlist_stage.services.store import build_store

# Configure logger for this module
logger = logging.getLogger(__name__)

SIGNUPS_PATH = "/api/v1/signups"


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def invalid_body(request: Request, exc: RequestValidationError) -> JSONResponse:
        # A signup body that is not {"email": <string>} is an invalid email.
        if request.method == "POST" and request.url.path.rstrip("/") == SIGNUPS_PATH:
            return _error(status.HTTP_400_BAD_REQUEST, "invalid email")
        return await request_validation_exception_handler(request, exc)

    @app.exception_handler(InvalidEmailError)
    async def invalid_email(request: Request, exc: InvalidEmailError) -> JSONResponse:
        return _error(status.HTTP_400_BAD_REQUEST, "invalid email")

    @app.exception_handler(DuplicateSignupError)
    async def duplicate_signup(request: Request, exc: DuplicateSignupError) -> JSONResponse:
        return _error(status.HTTP_409_CONFLICT, "already registered")

    @app.exception_handler(ServiceUnavailableError)
    async def service_unavailable(request: Request, exc: ServiceUnavailableError) -> JSONResponse:
        return _error(status.HTTP_503_SERVICE_UNAVAILABLE, "unavailable")

    @app.exception_handler(WaitlistError)
    async def waitlist_error(request: Request, exc: WaitlistError) -> JSONResponse:
        logger.exception("Unhandled waitlist error: %s", exc)
        return _error(status.HTTP_503_SERVICE_UNAVAILABLE, "unavailable")


def create_app(config: Settings | None = None) -> FastAPI:
    """Build the FastAPI application.

    The signup store and broadcast channel are created on startup and torn
    down on shutdown; they live on ``app.state`` for the life of the process.
    """
    config = config or settings
    app = FastAPI(
        title=config.app_name,
        description="Waitlist signups with a live signup counter",
        version=config.app_version,
    )
    app.state.settings = config
    app.state.counter_service = None

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=config.cors_allow_credentials,
        allow_methods=config.cors_allow_methods,
        allow_headers=config.cors_allow_headers,
    )

    # Add GZip middleware for compression
    app.add_middleware(GZipMiddleware)

    # Include API routers
    app.include_router(signups_router, prefix="/api/v1")
    app.include_router(count_router, prefix="/api/v1")
    app.include_router(realtime_router, prefix="/api/v1")

    _register_error_handlers(app)

    @app.on_event("startup")
    async def on_startup() -> None:
        store = build_store(config)
        channel = BroadcastChannel(queue_size=config.realtime_queue_size)
        app.state.counter_service = CounterService(store, channel)
        logger.info("Waitlist counter started with seed %s", config.seed_count)

    @app.on_event("shutdown")
    async def on_shutdown() -> None:
        service: CounterService | None = app.state.counter_service
        if service is not None:
            service.close()
            app.state.counter_service = None
        logger.info("Waitlist counter stopped")

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint to verify the service is running."""
        return {"status": "ok"}

    @app.get("/")
    async def root() -> dict[str, str]:
        """Root endpoint with basic information about the API."""
        return {
            "name": config.app_name,
            "version": config.app_version,
            "description": "Waitlist signups with a live signup counter",
            "docs": "/docs",
            "realtime": "/api/v1/ws/count",
        }

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=logging.DEBUG if settings.debug else logging.INFO)
    uvicorn.run("waitlist_stage.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
