"""FastAPI dependencies wiring services from application state."""

from fastapi import Depends, HTTPException, Request

from order_sync_service.config import Settings, get_settings
from order_sync_service.infrastructure.database.document_store import DocumentStore
from order_sync_service.infrastructure.shopify.client import OrderSource
from order_sync_service.services.background import BackgroundSyncRunner
from order_sync_service.services.order_reader import OrderReader
from order_sync_service.services.order_sync import OrderSyncService
from order_sync_service.services.retry import RetryPolicy


def get_document_store(request: Request) -> DocumentStore:
    return request.app.state.document_store


def get_order_source(request: Request) -> OrderSource:
    source = getattr(request.app.state, "order_source", None)
    if source is None:
        raise HTTPException(status_code=503, detail="Shopify credentials are not configured")
    return source


def get_background_runner(request: Request) -> BackgroundSyncRunner:
    return request.app.state.sync_runner


def get_sync_service(
    source: OrderSource = Depends(get_order_source),
    store: DocumentStore = Depends(get_document_store),
    settings: Settings = Depends(get_settings),
) -> OrderSyncService:
    """A fresh service per request, so every full sync gets its own dedup index."""
    return OrderSyncService.from_settings(source, store, settings)


def get_order_reader(
    store: DocumentStore = Depends(get_document_store),
    settings: Settings = Depends(get_settings),
) -> OrderReader:
    return OrderReader(store, RetryPolicy.from_settings(settings))
