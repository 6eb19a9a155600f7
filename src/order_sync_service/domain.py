"""Domain types for order synchronization.

Upstream orders and sync jobs are pydantic models whose aliases follow the
camelCase field names of the upstream GraphQL API, so a stored document has
the same shape as the order node it came from (the upstream id lives at
field ``id``).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from shared.constants import FULL_ORDER_SYNC_JOB


class _UpstreamModel(BaseModel):
    """Base for immutable models parsed from upstream payloads."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


# =============================================================================
# Upstream Orders
# =============================================================================


class Money(_UpstreamModel):
    """Monetary amount in a single currency."""

    amount: str
    currency_code: str


class PriceSet(_UpstreamModel):
    """Price expressed in the shop currency."""

    shop_money: Money


class Customer(_UpstreamModel):
    """Customer attached to an order. Every field may be absent."""

    id: str | None = None
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None


class VariantRef(_UpstreamModel):
    """Reference to the product variant a line item was bought as."""

    id: str | None = None
    title: str | None = None
    price: str | None = None
    sku: str | None = None


class LineItem(_UpstreamModel):
    """A single order line."""

    id: str | None = None
    title: str
    quantity: int = Field(ge=0)
    original_unit_price: str | None = None
    variant: VariantRef | None = None


class Address(_UpstreamModel):
    """Shipping address."""

    address1: str | None = None
    address2: str | None = None
    city: str | None = None
    province: str | None = None
    zip: str | None = None
    country: str | None = None
    phone: str | None = None


class TrackingInfo(_UpstreamModel):
    number: str | None = None
    url: str | None = None


class Fulfillment(_UpstreamModel):
    status: str | None = None
    tracking_info: tuple[TrackingInfo, ...] = ()


class UpstreamOrder(_UpstreamModel):
    """An order as fetched from the upstream API for one sync pass."""

    id: str = Field(min_length=1)
    name: str | None = None
    email: str | None = None
    created_at: str | None = None
    customer: Customer | None = None
    total_price_set: PriceSet | None = None
    subtotal_price_set: PriceSet | None = None
    display_fulfillment_status: str | None = None
    display_financial_status: str | None = None
    line_items: tuple[LineItem, ...] = ()
    shipping_address: Address | None = None
    fulfillments: tuple[Fulfillment, ...] = ()
    tags: tuple[str, ...] = ()
    note: str | None = None

    def to_document(self, synced_at: str) -> dict[str, Any]:
        """Render the persisted form of this order, stamped with ``synced_at``."""
        document = self.model_dump(mode="json", by_alias=True)
        document["syncedAt"] = synced_at
        document["lastUpdated"] = synced_at
        return document


class StoredOrderRecord(UpstreamOrder):
    """An order as persisted in the order collection."""

    document_id: str = Field(alias="documentId")
    synced_at: str
    last_updated: str

    @classmethod
    def from_document(cls, document_id: str, data: dict[str, Any]) -> "StoredOrderRecord":
        return cls.model_validate({**data, "documentId": document_id})


# =============================================================================
# Sync Jobs
# =============================================================================


class JobStatus(str, Enum):
    """Lifecycle states of a full-sync job."""

    STARTED = "started"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self is not JobStatus.STARTED


class SyncJob(BaseModel):
    """Persisted progress record of one full-sync run."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    job_id: str = Field(alias="id")
    type: str = FULL_ORDER_SYNC_JOB
    status: JobStatus = JobStatus.STARTED
    total_orders: int = 0
    synced_orders: int = 0
    skipped_orders: int = 0
    errors: int = 0
    started_at: str
    last_updated: str
    completed_at: str | None = None
    error: str | None = None

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


@dataclass
class SyncCounters:
    """Running counters of a sync pass.

    ``synced`` only counts records whose batch has been committed.
    """

    synced: int = 0
    skipped: int = 0
    errors: int = 0

    @property
    def total(self) -> int:
        return self.synced + self.skipped

    def to_job_fields(self) -> dict[str, int]:
        return {
            "totalOrders": self.total,
            "syncedOrders": self.synced,
            "skippedOrders": self.skipped,
            "errors": self.errors,
        }


# =============================================================================
# Upstream Pages and Results
# =============================================================================


@dataclass(frozen=True)
class OrderPage:
    """One page of raw order nodes plus its continuation info."""

    orders: list[dict[str, Any]] = field(default_factory=list)
    has_next_page: bool = False
    end_cursor: str | None = None


@dataclass(frozen=True)
class BoundedSyncResult:
    synced: int
    skipped: int
    errors: int


@dataclass(frozen=True)
class FullSyncStarted:
    job_id: str
    message: str = "Order sync job started"
