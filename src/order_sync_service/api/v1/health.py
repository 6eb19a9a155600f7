"""Health check endpoints."""

from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from order_sync_service import __version__
from order_sync_service.api.dependencies import get_document_store
from order_sync_service.config import Settings, get_settings
from order_sync_service.infrastructure.database.document_store import DocumentStore

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str
    environment: str
    timestamp: str
    dependencies: dict[str, Any]


class ReadinessResponse(BaseModel):
    """Readiness check response model."""

    ready: bool
    checks: dict[str, bool]


@router.get("/health", response_model=HealthResponse)
async def health_check(settings: Settings = Depends(get_settings)) -> HealthResponse:
    """
    Basic health check endpoint.

    Returns the service status and version information.
    """
    return HealthResponse(
        status="healthy",
        version=__version__,
        environment=settings.app_env,
        timestamp=datetime.now(timezone.utc).isoformat(),
        dependencies={
            "postgres": "configured",
            "shopify": "configured" if settings.shopify_store_url else "missing",
        },
    )


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness_check(
    request: Request,
    store: DocumentStore = Depends(get_document_store),
) -> ReadinessResponse:
    """
    Readiness check endpoint.

    Pings the document store and reports whether the Shopify client could be
    built from the configured credentials.
    """
    checks = {
        "postgres": await store.ping(),
        "shopify": getattr(request.app.state, "order_source", None) is not None,
    }
    return ReadinessResponse(ready=all(checks.values()), checks=checks)


@router.get("/health/live")
async def liveness_check() -> dict[str, str]:
    """
    Liveness check endpoint.

    Returns 200 while the process is serving requests.
    """
    return {"status": "alive"}
