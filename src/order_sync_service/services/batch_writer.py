"""Buffered, atomic batch writes into a collection."""

from typing import Any

import structlog

from order_sync_service.infrastructure.database.document_store import DocumentStore, PendingWrite
from order_sync_service.services.retry import RetryPolicy
from shared.constants import COMMIT_BATCH_SIZE

logger = structlog.get_logger()


class BatchWriter:
    """Buffers documents and commits them in all-or-nothing batches.

    A commit happens as soon as the buffer holds ``threshold`` documents and
    again on ``flush()``. If a commit still fails after retries the error
    propagates, the batch is dropped, and none of its documents count as
    committed.
    """

    def __init__(
        self,
        store: DocumentStore,
        retry: RetryPolicy,
        collection: str,
        threshold: int = COMMIT_BATCH_SIZE,
    ):
        if threshold < 1:
            raise ValueError("threshold must be at least 1")
        self.store = store
        self.retry = retry
        self.collection = collection
        self.threshold = threshold
        self._buffer: list[PendingWrite] = []
        self.committed = 0
        self.commits = 0

    @property
    def pending(self) -> int:
        return len(self._buffer)

    async def add(self, document: dict[str, Any]) -> bool:
        """Queue ``document``; returns True if this call committed a batch."""
        self._buffer.append(
            PendingWrite(
                collection=self.collection,
                document_id=self.store.new_id(),
                data=document,
            )
        )
        if len(self._buffer) >= self.threshold:
            await self._commit()
            return True
        return False

    async def flush(self) -> int:
        """Commit whatever is buffered; returns the number of documents committed."""
        if not self._buffer:
            return 0
        return await self._commit()

    async def _commit(self) -> int:
        batch, self._buffer = self._buffer, []
        await self.retry.run(lambda: self.store.commit_batch(batch))
        self.committed += len(batch)
        self.commits += 1
        logger.info(
            "Committed batch",
            collection=self.collection,
            batch_size=len(batch),
            committed=self.committed,
        )
        return len(batch)
