"""Order synchronization tasks."""

import asyncio
from dataclasses import asdict

import structlog
from celery import shared_task

from order_sync_service.config import get_settings
from order_sync_service.exceptions import UpstreamError
from order_sync_service.runtime import open_sync_service
from order_sync_service.services.job_tracker import new_job_id

logger = structlog.get_logger()


async def _run_bounded_sync(limit: int | None) -> dict:
    async with open_sync_service() as service:
        result = await service.run_bounded_sync(limit or get_settings().sync_bounded_limit)
        return asdict(result)


async def _run_full_sync() -> dict:
    async with open_sync_service() as service:
        job_id = new_job_id()
        await service.jobs.create(job_id)
        try:
            counters = await service.run_full_sync(job_id)
        except Exception as e:
            # Already recorded on the job by the sync itself
            return {"job_id": job_id, "status": "failed", "error": str(e)}
        return {"job_id": job_id, "status": "completed", **asdict(counters)}


@shared_task(
    bind=True,
    max_retries=3,
    default_retry_delay=300,
    time_limit=get_settings().bounded_sync_time_limit_seconds,
)
def sync_orders_from_shopify(self, limit: int | None = None) -> dict:
    """
    Synchronize recent open orders from Shopify.

    This task:
    1. Fetches one page of unfulfilled / in-progress orders
    2. Skips orders already in the order collection
    3. Inserts the rest one by one

    Args:
        limit: Orders to fetch (defaults to the configured bounded limit)

    Returns:
        dict: synced, skipped and errors counts
    """
    logger.info("Starting order sync from Shopify", limit=limit)
    try:
        return asyncio.run(_run_bounded_sync(limit))
    except UpstreamError as exc:
        logger.warning("Shopify unavailable, retrying order sync", error=str(exc))
        raise self.retry(exc=exc)


# Unlimited: the run must always reach finish() on its job
@shared_task(bind=True, time_limit=None, soft_time_limit=None)
def run_full_order_sync(self) -> dict:
    """
    Synchronize the entire Shopify order catalog.

    Creates a sync job record and pages through every order. A failed run is
    reported through the job record and the returned status, not retried.

    Returns:
        dict: job id, final status and counters
    """
    logger.info("Starting full order sync from Shopify")
    return asyncio.run(_run_full_sync())
