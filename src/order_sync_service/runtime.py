"""Standalone wiring of the sync service for the worker and scripts."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from order_sync_service.config import Settings, get_settings
from order_sync_service.infrastructure.database.connection import (
    engine_scope,
    get_async_session_factory,
)
from order_sync_service.infrastructure.database.document_store import SqlDocumentStore
from order_sync_service.infrastructure.shopify.client import ShopifyClient
from order_sync_service.services.order_sync import OrderSyncService


@asynccontextmanager
async def open_sync_service(
    settings: Settings | None = None,
) -> AsyncGenerator[OrderSyncService, None]:
    """Build an ``OrderSyncService`` with its own engine and HTTP client.

    Both are closed when the block exits, so this is safe to use from a
    fresh event loop per call (``asyncio.run`` inside a Celery task).
    """
    settings = settings or get_settings()
    async with engine_scope(settings) as engine, ShopifyClient.from_settings(settings) as client:
        store = SqlDocumentStore(
            get_async_session_factory(engine),
            operation_timeout=settings.store_operation_timeout_seconds,
        )
        yield OrderSyncService.from_settings(client, store, settings)
