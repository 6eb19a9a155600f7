"""Order synchronization engine.

Pages through the upstream order catalog and stores every order whose
upstream id is not yet in the order collection. Two entry points:

- ``run_bounded_sync``: one page of open orders, blocking, no job record.
- ``start_full_sync`` / ``run_full_sync``: the whole catalog, tracked by a
  ``SyncJob`` record that pollers can read while the run is in flight.

Failures are isolated per record: a malformed order or a failed existence
check is counted and the page continues. Fetch and commit failures end the
run and are written to the job record.
"""

import asyncio
from typing import Any

import structlog

from order_sync_service.config import Settings
from order_sync_service.domain import (
    BoundedSyncResult,
    FullSyncStarted,
    JobStatus,
    OrderPage,
    SyncCounters,
)
from order_sync_service.infrastructure.database.document_store import DocumentStore
from order_sync_service.infrastructure.shopify.client import OrderSource
from order_sync_service.services.background import BackgroundSyncRunner
from order_sync_service.services.batch_writer import BatchWriter
from order_sync_service.services.dedup import DedupIndex
from order_sync_service.services.existence import ExistenceChecker
from order_sync_service.services.job_tracker import JobTracker, new_job_id, utc_now
from order_sync_service.services.order_builder import build_order
from order_sync_service.services.retry import RetryPolicy
from shared.constants import (
    COMMIT_BATCH_SIZE,
    DEFAULT_BOUNDED_SYNC_LIMIT,
    INTER_PAGE_DELAY,
    ORDERS_COLLECTION,
    SYNC_JOBS_COLLECTION,
)

logger = structlog.get_logger()


class OrderSyncService:
    """Synchronizes upstream orders into the order collection.

    Each instance owns its own ``DedupIndex``; build a new instance per
    full sync.
    """

    def __init__(
        self,
        source: OrderSource,
        store: DocumentStore,
        retry: RetryPolicy | None = None,
        *,
        commit_threshold: int = COMMIT_BATCH_SIZE,
        page_delay: float = INTER_PAGE_DELAY,
        flush_each_page: bool = True,
        orders_collection: str = ORDERS_COLLECTION,
        jobs_collection: str = SYNC_JOBS_COLLECTION,
    ):
        self.source = source
        self.store = store
        self.retry = retry or RetryPolicy()
        self.commit_threshold = commit_threshold
        self.page_delay = page_delay
        self.flush_each_page = flush_each_page
        self.orders_collection = orders_collection

        self.dedup = DedupIndex()
        self.existence = ExistenceChecker(store, self.retry, orders_collection)
        self.jobs = JobTracker(store, self.retry, jobs_collection)

    @classmethod
    def from_settings(
        cls, source: OrderSource, store: DocumentStore, settings: Settings
    ) -> "OrderSyncService":
        return cls(
            source,
            store,
            RetryPolicy.from_settings(settings),
            commit_threshold=settings.sync_commit_batch_size,
            page_delay=settings.sync_page_delay_seconds,
            flush_each_page=settings.sync_flush_each_page,
        )

    # -------------------------------------------------------------------------
    # Bounded sync
    # -------------------------------------------------------------------------

    async def run_bounded_sync(
        self, page_limit: int = DEFAULT_BOUNDED_SYNC_LIMIT
    ) -> BoundedSyncResult:
        """
        Sync a single page of open orders, inserting new ones one by one.

        Args:
            page_limit: Maximum number of orders to fetch

        Returns:
            Counts of synced, skipped and failed orders
        """
        logger.info("Starting bounded order sync", limit=page_limit)
        nodes = await self.source.fetch_open_orders(page_limit)
        logger.info("Fetched open orders", count=len(nodes))

        synced = skipped = errors = 0
        for node in nodes:
            try:
                order = build_order(node)
                if self.dedup.seen(order.id) or await self.existence.exists(order.id):
                    logger.debug("Order already exists, skipping", order_id=order.id)
                    self.dedup.mark(order.id)
                    skipped += 1
                    continue

                document = order.to_document(utc_now())
                await self.retry.run(lambda: self.store.insert(self.orders_collection, document))
                self.dedup.mark(order.id)
                synced += 1
            except Exception as e:
                logger.error("Error syncing order", order_id=_node_id(node), error=str(e))
                errors += 1

        result = BoundedSyncResult(synced=synced, skipped=skipped, errors=errors)
        logger.info("Bounded order sync completed", synced=synced, skipped=skipped, errors=errors)
        return result

    # -------------------------------------------------------------------------
    # Full sync
    # -------------------------------------------------------------------------

    async def start_full_sync(self, runner: BackgroundSyncRunner) -> FullSyncStarted:
        """Create a job record and run the full sync in the background.

        Returns as soon as the job exists; the outcome is only visible on the
        job record.
        """
        job_id = new_job_id()
        await self.jobs.create(job_id)
        runner.launch(job_id, self.run_full_sync(job_id))
        return FullSyncStarted(job_id=job_id)

    async def run_full_sync(self, job_id: str) -> SyncCounters:
        """
        Page through the entire upstream catalog for ``job_id``.

        Returns:
            Final counters of the completed run

        Raises:
            Any fetch or commit failure, after the job has been marked failed
        """
        counters = SyncCounters()
        writer = BatchWriter(
            self.store, self.retry, self.orders_collection, self.commit_threshold
        )
        cursor: str | None = None
        page_number = 0

        with structlog.contextvars.bound_contextvars(job_id=job_id):
            logger.info("Starting full order sync")
            try:
                while True:
                    page_number += 1
                    logger.info("Fetching orders page", page=page_number, cursor=cursor)
                    page = await self.source.fetch_orders_page(cursor)
                    if not page.orders:
                        logger.info("Empty orders page, ending pagination", page=page_number)
                        break

                    await self._process_page(page, writer, counters)
                    if self.flush_each_page:
                        await writer.flush()
                    counters.synced = writer.committed

                    await self.jobs.update(job_id, counters.to_job_fields())
                    logger.info(
                        "Page complete",
                        page=page_number,
                        orders_in_page=len(page.orders),
                        has_next_page=page.has_next_page,
                        synced=counters.synced,
                        skipped=counters.skipped,
                        errors=counters.errors,
                    )

                    if not page.has_next_page:
                        break
                    if not page.end_cursor:
                        logger.warning("Page has no end cursor, ending pagination", page=page_number)
                        break
                    cursor = page.end_cursor
                    await asyncio.sleep(self.page_delay)

                await writer.flush()
                counters.synced = writer.committed
            except asyncio.CancelledError:
                counters.synced = writer.committed
                logger.warning("Full order sync cancelled", page=page_number, synced=counters.synced)
                await asyncio.shield(
                    self.jobs.finish(job_id, JobStatus.FAILED, counters, error="cancelled")
                )
                raise
            except Exception as e:
                counters.synced = writer.committed
                logger.error(
                    "Full order sync failed",
                    page=page_number,
                    error=str(e),
                    synced=counters.synced,
                    skipped=counters.skipped,
                    errors=counters.errors,
                )
                await self.jobs.finish(job_id, JobStatus.FAILED, counters, error=str(e))
                raise

            await self.jobs.finish(job_id, JobStatus.COMPLETED, counters)
            logger.info(
                "Full order sync completed",
                pages=page_number,
                synced=counters.synced,
                skipped=counters.skipped,
                errors=counters.errors,
            )
            return counters

    async def _process_page(
        self, page: OrderPage, writer: BatchWriter, counters: SyncCounters
    ) -> None:
        for node in page.orders:
            document = await self._prepare(node, counters)
            # Outside the per-record guard: a failed commit ends the run
            if document is not None:
                await writer.add(document)

    async def _prepare(self, node: Any, counters: SyncCounters) -> dict[str, Any] | None:
        """Return the document to store for ``node``, or None if it is skipped or bad."""
        try:
            order = build_order(node)
            if self.dedup.seen(order.id):
                logger.debug("Order repeated in this run, skipping", order_id=order.id)
                counters.skipped += 1
                return None
            exists = await self.existence.exists(order.id)
            self.dedup.mark(order.id)
            if exists:
                logger.debug("Order already exists, skipping", order_id=order.id)
                counters.skipped += 1
                return None
            return order.to_document(utc_now())
        except Exception as e:
            logger.error("Error processing order", order_id=_node_id(node), error=str(e))
            counters.errors += 1
            return None


def _node_id(node: Any) -> Any:
    return node.get("id") if isinstance(node, dict) else None
