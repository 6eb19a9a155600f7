"""SQLAlchemy models for the document store.

Documents from every logical collection (orders, sync jobs) share a single
table; ``collection`` partitions them and ``data`` holds the JSON body.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Index, String, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSONDocument = JSON().with_variant(JSONB(), "postgresql")


class Base(DeclarativeBase):
    """Base class for all models."""


class Document(Base):
    """A schemaless document in a named collection.

    The id is assigned by the store client before the write, so batched
    writes can be prepared without a round trip.
    """

    __tablename__ = "documents"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    collection: Mapped[str] = mapped_column(String(100), nullable=False)
    data: Mapped[dict[str, Any]] = mapped_column(JSONDocument, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now(), nullable=False
    )

    __table_args__ = (
        Index("ix_documents_collection", "collection"),
    )


# Created by raw SQL in migrations; autogenerate cannot model expression indexes
EXPRESSION_INDEXES = frozenset(
    {
        "ix_documents_collection_data_id",
        "ix_documents_collection_created_at",
    }
)


def include_object(obj, name, type_, reflected, compare_to) -> bool:
    """Autogenerate filter: skip expression indexes and tables this service does not own."""
    if type_ == "index" and name in EXPRESSION_INDEXES:
        return False
    if type_ == "table" and reflected and compare_to is None:
        return name in Base.metadata.tables
    return True
