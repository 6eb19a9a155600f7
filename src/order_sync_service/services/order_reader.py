"""Read path over stored orders and sync jobs."""

from typing import Any

from order_sync_service.domain import SyncJob
from order_sync_service.infrastructure.database.document_store import DocumentStore
from order_sync_service.services.job_tracker import JobTracker
from order_sync_service.services.retry import RetryPolicy
from shared.constants import DEFAULT_ORDERS_PAGE_SIZE, ORDERS_COLLECTION


class OrderReader:
    """Lists stored orders newest first and looks up job records."""

    def __init__(
        self,
        store: DocumentStore,
        retry: RetryPolicy | None = None,
        collection: str = ORDERS_COLLECTION,
    ):
        self.store = store
        self.retry = retry or RetryPolicy()
        self.collection = collection
        self.jobs = JobTracker(store, self.retry)

    async def list_orders(self, page_size: int | None = DEFAULT_ORDERS_PAGE_SIZE) -> dict[str, Any]:
        """
        Return the total stored order count and the newest ``page_size`` orders.

        ``page_size=None`` returns every stored order.
        """
        documents = await self.retry.run(
            lambda: self.store.query(
                self.collection, {}, limit=page_size, order_by="createdAt", descending=True
            )
        )
        if page_size is None:
            count = len(documents)
        else:
            count = await self.retry.run(lambda: self.store.count(self.collection))

        return {
            "count": count,
            "orders": [{**doc.data, "documentId": doc.id} for doc in documents],
        }

    async def get_job(self, job_id: str) -> SyncJob | None:
        return await self.jobs.get(job_id)
