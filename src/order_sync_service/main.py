"""FastAPI application entry point."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from order_sync_service import __version__
from order_sync_service.api.v1.router import api_router
from order_sync_service.config import get_settings
from order_sync_service.exceptions import ConfigurationError, StoreError, UpstreamError
from order_sync_service.infrastructure.database.connection import (
    get_async_engine,
    get_async_session_factory,
)
from order_sync_service.infrastructure.database.document_store import SqlDocumentStore
from order_sync_service.infrastructure.shopify.client import ShopifyClient
from order_sync_service.logging_config import configure_logging
from order_sync_service.services.background import BackgroundSyncRunner

configure_logging(get_settings())

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager for startup and shutdown events."""
    settings = get_settings()
    logger.info(
        "Starting Order Sync Service",
        app_env=settings.app_env,
        debug=settings.debug,
    )

    engine = get_async_engine(settings)
    app.state.document_store = SqlDocumentStore(
        get_async_session_factory(engine),
        operation_timeout=settings.store_operation_timeout_seconds,
    )
    app.state.sync_runner = BackgroundSyncRunner()
    try:
        app.state.order_source = ShopifyClient.from_settings(settings)
    except ConfigurationError as e:
        logger.warning("Shopify client disabled", error=str(e))
        app.state.order_source = None

    yield

    await app.state.sync_runner.drain(timeout=settings.shutdown_grace_seconds)
    # Runs must finish their job records before the client and engine close
    await app.state.sync_runner.cancel_pending()
    if app.state.order_source is not None:
        await app.state.order_source.aclose()
    await engine.dispose()
    logger.info("Shutting down Order Sync Service")


async def upstream_error_handler(request: Request, exc: UpstreamError) -> JSONResponse:
    logger.error("Upstream request failed", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=502, content={"detail": str(exc)})


async def unavailable_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Dependency unavailable", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=503, content={"detail": str(exc)})


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Order Sync API",
        description="Synchronizes Shopify orders into the order document store",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    app.add_exception_handler(UpstreamError, upstream_error_handler)
    app.add_exception_handler(StoreError, unavailable_error_handler)
    app.add_exception_handler(ConfigurationError, unavailable_error_handler)

    app.include_router(api_router, prefix="/api/v1")

    return app


app = create_app()


def run() -> None:
    """Run the application using uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "order_sync_service.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
        workers=1 if settings.debug else settings.api_workers,
    )


if __name__ == "__main__":
    run()
