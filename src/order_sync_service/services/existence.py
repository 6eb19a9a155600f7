"""Existence check for upstream orders in the order collection."""

from order_sync_service.infrastructure.database.document_store import DocumentStore
from order_sync_service.services.retry import RetryPolicy
from shared.constants import ORDERS_COLLECTION


class ExistenceChecker:
    """Answers whether an order with a given upstream id is already stored."""

    def __init__(
        self,
        store: DocumentStore,
        retry: RetryPolicy,
        collection: str = ORDERS_COLLECTION,
    ):
        self.store = store
        self.retry = retry
        self.collection = collection

    async def exists(self, upstream_id: str) -> bool:
        matches = await self.retry.run(
            lambda: self.store.query(self.collection, {"id": upstream_id}, limit=1)
        )
        return len(matches) > 0
