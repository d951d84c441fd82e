"""FastAPI application factory and lifespan management."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from search_sync.config import Settings
from search_sync.errors import (
    BackendUnavailableError,
    DecodeError,
    InvalidQueryError,
    SearchSyncError,
    UnknownEventError,
)
from search_sync.index.backend import IndexBackend, TypesenseBackend
from search_sync.middleware.auth import APIKeyMiddleware
from search_sync.middleware.logging import RequestLoggingMiddleware
from search_sync.routes import events, health, search
from search_sync.router import EventRouter

logger = structlog.get_logger()

_ERROR_STATUS: tuple[tuple[type[SearchSyncError], int], ...] = (
    (UnknownEventError, status.HTTP_400_BAD_REQUEST),
    (InvalidQueryError, status.HTTP_400_BAD_REQUEST),
    (DecodeError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (BackendUnavailableError, status.HTTP_503_SERVICE_UNAVAILABLE),
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Log service startup and shutdown.

    Args:
        app: FastAPI application instance.

    Yields:
        None during application runtime.
    """
    settings: Settings = app.state.settings
    logger.info(
        "api_startup",
        host=settings.host,
        port=settings.port,
        typesense_host=settings.typesense.host,
    )
    try:
        yield
    finally:
        logger.info(
            "api_shutdown",
            known_collections=len(app.state.event_router.executor.provisioner.cache),
        )


async def handle_sync_error(request: Request, exc: Exception) -> JSONResponse:
    """Render a SearchSyncError as a JSON error response.

    Args:
        request: Request that failed.
        exc: Raised error.

    Returns:
        JSON response with an ``error`` message and a mapped status code.
    """
    code = status.HTTP_502_BAD_GATEWAY
    for error_type, mapped in _ERROR_STATUS:
        if isinstance(exc, error_type):
            code = mapped
            break

    logger.error(
        "request_failed",
        path=request.url.path,
        error_type=type(exc).__name__,
        error=str(exc),
        status=code,
    )
    return JSONResponse(status_code=code, content={"error": str(exc)})


def create_app(
    settings: Settings | None = None,
    backend: IndexBackend | None = None,
) -> FastAPI:
    """Factory function to create configured FastAPI application.

    Args:
        settings: Configuration instance. Creates default if None.
        backend: Index backend. Built from ``settings.typesense`` if None.

    Returns:
        Configured FastAPI application.
    """
    if settings is None:
        settings = Settings()
    if backend is None:
        backend = TypesenseBackend.from_settings(settings.typesense)

    app = FastAPI(
        title="Search Sync",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/api/v1/docs" if settings.debug else None,
        redoc_url=None,
        openapi_url="/api/v1/openapi.json" if settings.debug else None,
    )
    app.state.settings = settings
    app.state.backend = backend
    app.state.event_router = EventRouter.from_backend(
        backend,
        fields_map=settings.typesense.fields_map,
    )

    app.add_exception_handler(SearchSyncError, handle_sync_error)
    app.add_middleware(RequestLoggingMiddleware)
    if settings.key:
        app.add_middleware(APIKeyMiddleware, api_key=settings.key)

    app.include_router(health.router, prefix="/api/v1")
    app.include_router(events.router, prefix="/api/v1")
    app.include_router(search.router, prefix="/api/v1")

    return app
