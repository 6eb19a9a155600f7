"""Document store infrastructure."""

from order_sync_service.infrastructure.database.connection import (
    engine_scope,
    get_async_engine,
    get_async_session_factory,
)
from order_sync_service.infrastructure.database.document_store import (
    DocumentStore,
    PendingWrite,
    SqlDocumentStore,
    StoredDocument,
)

__all__ = [
    "DocumentStore",
    "PendingWrite",
    "SqlDocumentStore",
    "StoredDocument",
    "engine_scope",
    "get_async_engine",
    "get_async_session_factory",
]
