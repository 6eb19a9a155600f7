"""Persisted status records for full-sync jobs.

Job bookkeeping is best effort: once a job exists, failing to update it is
logged and never interrupts the sync it describes.
"""

import threading
import time
from datetime import datetime, timezone
from typing import Any

import structlog

from order_sync_service.domain import JobStatus, SyncCounters, SyncJob
from order_sync_service.infrastructure.database.document_store import DocumentStore, StoredDocument
from order_sync_service.services.retry import RetryPolicy
from shared.constants import JOB_ID_PREFIX, SYNC_JOBS_COLLECTION

logger = structlog.get_logger()

_job_id_lock = threading.Lock()
_last_job_ms = 0


def new_job_id() -> str:
    """Return a ``sync_<epoch ms>`` id, strictly increasing within the process."""
    global _last_job_ms
    with _job_id_lock:
        now_ms = max(int(time.time() * 1000), _last_job_ms + 1)
        _last_job_ms = now_ms
    return f"{JOB_ID_PREFIX}{now_ms}"


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class JobTracker:
    """Creates and updates ``SyncJob`` documents."""

    def __init__(
        self,
        store: DocumentStore,
        retry: RetryPolicy,
        collection: str = SYNC_JOBS_COLLECTION,
    ):
        self.store = store
        self.retry = retry
        self.collection = collection

    async def create(self, job_id: str) -> SyncJob:
        """Insert a new job in ``started`` state with zeroed counters."""
        now = utc_now()
        job = SyncJob(job_id=job_id, started_at=now, last_updated=now)
        await self.retry.run(lambda: self.store.insert(self.collection, job.to_document()))
        logger.info("Created sync job", job_id=job_id)
        return job

    async def update(self, job_id: str, fields: dict[str, Any]) -> None:
        """Merge ``fields`` into the job and refresh ``lastUpdated``."""
        await self._apply(job_id, {**fields, "lastUpdated": utc_now()})

    async def finish(
        self,
        job_id: str,
        outcome: JobStatus,
        counters: SyncCounters,
        error: str | None = None,
    ) -> None:
        """Move the job to its terminal state with final counters."""
        if not outcome.is_terminal:
            raise ValueError(f"{outcome.value} is not a terminal job status")

        now = utc_now()
        fields: dict[str, Any] = {
            "status": outcome.value,
            "completedAt": now,
            "lastUpdated": now,
            **counters.to_job_fields(),
        }
        if outcome is JobStatus.FAILED:
            fields["error"] = error or "Unknown error"
        await self._apply(job_id, fields)

    async def get(self, job_id: str) -> SyncJob | None:
        document = await self._find(job_id)
        if document is None:
            return None
        return SyncJob.model_validate(document.data)

    async def _find(self, job_id: str) -> StoredDocument | None:
        matches = await self.retry.run(
            lambda: self.store.query(self.collection, {"id": job_id}, limit=1)
        )
        return matches[0] if matches else None

    async def _apply(self, job_id: str, fields: dict[str, Any]) -> None:
        try:
            document = await self._find(job_id)
            if document is None:
                logger.warning("Sync job not found, skipping update", job_id=job_id)
                return
            await self.retry.run(
                lambda: self.store.update_by_id(self.collection, document.id, fields)
            )
        except Exception as e:
            logger.warning("Failed to update sync job", job_id=job_id, error=str(e))
