"""Document store primitives over SQLAlchemy.

The sync engine only needs four primitives against named collections:
query by field equality, insert, merge-update by id, and an atomic batch
write. ``SqlDocumentStore`` implements them on a single JSON ``documents``
table and translates driver failures into the service's error kinds, with
operation deadlines surfacing as ``DeadlineExceededError``.
"""

import asyncio
from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Protocol, TypeVar
from uuid import uuid4

import structlog
from sqlalchemy import func, select, text
from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from order_sync_service.exceptions import DeadlineExceededError, StoreError
from order_sync_service.infrastructure.database.models import Document

logger = structlog.get_logger()

T = TypeVar("T")

# PostgreSQL "query_canceled", raised when statement_timeout fires
QUERY_CANCELED_SQLSTATE = "57014"


@dataclass(frozen=True)
class StoredDocument:
    """A document read back from a collection."""

    id: str
    data: dict[str, Any]


@dataclass(frozen=True)
class PendingWrite:
    """A document queued for an atomic batch write."""

    collection: str
    document_id: str
    data: dict[str, Any]


class DocumentStore(Protocol):
    """Store primitives the sync engine depends on."""

    def new_id(self) -> str: ...

    async def query(
        self,
        collection: str,
        filters: Mapping[str, Any],
        *,
        limit: int | None = None,
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[StoredDocument]: ...

    async def count(self, collection: str) -> int: ...

    async def insert(self, collection: str, data: Mapping[str, Any]) -> str: ...

    async def update_by_id(
        self, collection: str, document_id: str, fields: Mapping[str, Any]
    ) -> None: ...

    async def commit_batch(self, writes: Sequence[PendingWrite]) -> None: ...

    async def ping(self) -> bool: ...


def _field_equals(key: str, value: Any):
    """Build an equality clause on a top-level JSON field."""
    element = Document.data[key]
    if isinstance(value, bool):
        return element.as_boolean() == value
    if isinstance(value, int):
        return element.as_integer() == value
    if isinstance(value, float):
        return element.as_float() == value
    if isinstance(value, str):
        return element.as_string() == value
    raise TypeError(f"Unsupported filter value for {key!r}: {type(value).__name__}")


def _is_deadline(error: DBAPIError) -> bool:
    orig = error.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    return code == QUERY_CANCELED_SQLSTATE


class SqlDocumentStore:
    """Document store backed by the ``documents`` table."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        operation_timeout: float = 10.0,
    ):
        self.session_factory = session_factory
        self.operation_timeout = operation_timeout

    def new_id(self) -> str:
        return uuid4().hex

    async def _run(self, operation: str, work: Callable[[AsyncSession], Awaitable[T]]) -> T:
        """Run ``work`` in one transaction under the operation deadline."""

        async def in_transaction() -> T:
            async with self.session_factory() as session:
                async with session.begin():
                    return await work(session)

        try:
            return await asyncio.wait_for(in_transaction(), timeout=self.operation_timeout)
        except (asyncio.TimeoutError, PoolTimeoutError) as e:
            raise DeadlineExceededError(
                f"{operation} exceeded deadline of {self.operation_timeout}s"
            ) from e
        except DBAPIError as e:
            if _is_deadline(e):
                raise DeadlineExceededError(f"{operation} was cancelled by the database") from e
            raise StoreError(f"{operation} failed: {e}") from e
        except SQLAlchemyError as e:
            raise StoreError(f"{operation} failed: {e}") from e

    async def query(
        self,
        collection: str,
        filters: Mapping[str, Any],
        *,
        limit: int | None = None,
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[StoredDocument]:
        stmt = select(Document).where(Document.collection == collection)
        for key, value in filters.items():
            stmt = stmt.where(_field_equals(key, value))
        if order_by:
            column = Document.data[order_by].as_string()
            stmt = stmt.order_by(column.desc() if descending else column.asc())
        if limit is not None:
            stmt = stmt.limit(limit)

        async def work(session: AsyncSession) -> list[StoredDocument]:
            result = await session.execute(stmt)
            return [StoredDocument(id=row.id, data=dict(row.data)) for row in result.scalars()]

        return await self._run(f"query {collection}", work)

    async def count(self, collection: str) -> int:
        stmt = select(func.count()).select_from(Document).where(Document.collection == collection)

        async def work(session: AsyncSession) -> int:
            result = await session.execute(stmt)
            return result.scalar_one()

        return await self._run(f"count {collection}", work)

    async def insert(self, collection: str, data: Mapping[str, Any]) -> str:
        document_id = self.new_id()

        async def work(session: AsyncSession) -> str:
            session.add(Document(id=document_id, collection=collection, data=dict(data)))
            return document_id

        return await self._run(f"insert {collection}", work)

    async def update_by_id(
        self, collection: str, document_id: str, fields: Mapping[str, Any]
    ) -> None:
        async def work(session: AsyncSession) -> None:
            document = await session.get(Document, document_id)
            if document is None or document.collection != collection:
                raise StoreError(f"Document {document_id} not found in {collection}")
            # Reassign so the JSON column is flagged dirty
            document.data = {**document.data, **fields}

        await self._run(f"update {collection}", work)

    async def commit_batch(self, writes: Sequence[PendingWrite]) -> None:
        if not writes:
            return

        async def work(session: AsyncSession) -> None:
            session.add_all(
                Document(id=w.document_id, collection=w.collection, data=dict(w.data))
                for w in writes
            )

        try:
            await self._run(f"commit batch of {len(writes)}", work)
        except StoreError as e:
            # A retried batch whose first attempt committed after its deadline
            if isinstance(e.__cause__, IntegrityError) and await self._all_present(writes):
                logger.warning("Batch already committed", documents=len(writes))
                return
            raise

    async def _all_present(self, writes: Sequence[PendingWrite]) -> bool:
        ids = [w.document_id for w in writes]
        stmt = select(func.count()).select_from(Document).where(Document.id.in_(ids))

        async def work(session: AsyncSession) -> int:
            result = await session.execute(stmt)
            return result.scalar_one()

        return await self._run("check committed batch", work) == len(ids)

    async def ping(self) -> bool:
        async def work(session: AsyncSession) -> bool:
            await session.execute(text("SELECT 1"))
            return True

        try:
            return await self._run("ping", work)
        except StoreError as e:
            logger.warning("Document store unavailable", error=str(e))
            return False
