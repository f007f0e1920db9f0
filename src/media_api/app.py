"""FastAPI application factory and lifespan management."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from media_api.config import Settings
from media_api.delivery import AssetPipeline, DeliveryError, StaticRoot
from media_api.middleware.cors import configure_cors
from media_api.middleware.logging import RequestLoggingMiddleware
from media_api.middleware.path_guard import PathGuardMiddleware
from media_api.routes import health, uploads

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application lifecycle events.

    Logs the static root at startup and warns if it is not a directory.
    The pipeline is built in ``create_app`` so that the app serves
    requests even when the lifespan is not run.

    Args:
        app: FastAPI application instance.

    Yields:
        None during application runtime.
    """
    settings: Settings = app.state.settings
    root: StaticRoot = app.state.pipeline.root
    logger.info(
        "api_startup",
        host=settings.host,
        port=settings.port,
        static_root=str(root.path),
        mount_prefix=settings.mount_prefix,
    )
    if not root.path.is_dir():
        logger.warning("static_root_missing", static_root=str(root.path))

    try:
        yield
    finally:
        logger.info("api_shutdown")


async def delivery_error_handler(request: Request, exc: DeliveryError) -> JSONResponse:
    """Render a delivery rejection as the standard error envelope.

    Args:
        request: Request that was rejected.
        exc: The DeliveryError raised by the pipeline.

    Returns:
        JSON error response with the error's status code.
    """
    return JSONResponse(status_code=exc.status_code, content=exc.to_body(), headers=exc.headers or None)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Factory function to create configured FastAPI application.

    Args:
        settings: Configuration instance. Creates default if None.

    Returns:
        Configured FastAPI application.
    """
    if settings is None:
        settings = Settings()

    app = FastAPI(
        title="Media Delivery API",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/api/v1/docs" if settings.debug else None,
        redoc_url=None,
        openapi_url="/api/v1/openapi.json" if settings.debug else None,
    )
    app.state.settings = settings
    app.state.pipeline = AssetPipeline(
        StaticRoot.from_config(settings.static_root),
        structlog.get_logger("media_api.delivery"),
        cache_max_age=settings.cache_max_age,
        chunk_size=settings.chunk_size,
    )

    configure_cors(app, settings.cors_origins)
    app.add_middleware(PathGuardMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_exception_handler(DeliveryError, delivery_error_handler)

    app.include_router(health.router, prefix="/api/v1")
    app.include_router(uploads.router, prefix=settings.mount_prefix)

    return app
