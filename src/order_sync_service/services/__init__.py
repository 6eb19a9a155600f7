"""Business logic services."""

from order_sync_service.services.background import BackgroundSyncRunner
from order_sync_service.services.batch_writer import BatchWriter
from order_sync_service.services.dedup import DedupIndex
from order_sync_service.services.existence import ExistenceChecker
from order_sync_service.services.job_tracker import JobTracker, new_job_id
from order_sync_service.services.order_builder import build_order
from order_sync_service.services.order_reader import OrderReader
from order_sync_service.services.order_sync import OrderSyncService
from order_sync_service.services.retry import RetryPolicy, run_with_retry

__all__ = [
    "BackgroundSyncRunner",
    "BatchWriter",
    "DedupIndex",
    "ExistenceChecker",
    "JobTracker",
    "OrderReader",
    "OrderSyncService",
    "RetryPolicy",
    "build_order",
    "new_job_id",
    "run_with_retry",
]
