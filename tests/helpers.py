"""Test doubles for the document store and the upstream order source."""

import itertools
from collections import Counter, defaultdict
from collections.abc import Mapping, Sequence
from typing import Any

from order_sync_service.domain import OrderPage
from order_sync_service.exceptions import StoreError
from order_sync_service.infrastructure.database.document_store import PendingWrite, StoredDocument


class InMemoryDocumentStore:
    """Dict-backed ``DocumentStore`` with scripted failures.

    ``script("commit_batch", None, err, err)`` makes the first commit succeed
    and the next two raise ``err``; unscripted calls succeed.
    """

    def __init__(self) -> None:
        self.collections: dict[str, dict[str, dict[str, Any]]] = defaultdict(dict)
        self.calls: Counter = Counter()
        self.committed_batches: list[int] = []
        self._scripts: dict[str, list[Exception | None]] = defaultdict(list)
        self._ids = itertools.count(1)

    def script(self, operation: str, *outcomes: Exception | None) -> None:
        self._scripts[operation].extend(outcomes)

    def _call(self, operation: str) -> None:
        self.calls[operation] += 1
        if self._scripts[operation]:
            outcome = self._scripts[operation].pop(0)
            if outcome is not None:
                raise outcome

    def documents(self, collection: str) -> list[dict[str, Any]]:
        return list(self.collections[collection].values())

    def new_id(self) -> str:
        return f"doc-{next(self._ids)}"

    async def query(
        self,
        collection: str,
        filters: Mapping[str, Any],
        *,
        limit: int | None = None,
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[StoredDocument]:
        self._call("query")
        docs = [
            StoredDocument(id=doc_id, data=dict(data))
            for doc_id, data in self.collections[collection].items()
            if all(data.get(key) == value for key, value in filters.items())
        ]
        if order_by:
            docs.sort(key=lambda d: d.data.get(order_by) or "", reverse=descending)
        return docs if limit is None else docs[:limit]

    async def count(self, collection: str) -> int:
        self._call("count")
        return len(self.collections[collection])

    async def insert(self, collection: str, data: Mapping[str, Any]) -> str:
        self._call("insert")
        doc_id = self.new_id()
        self.collections[collection][doc_id] = dict(data)
        return doc_id

    async def update_by_id(
        self, collection: str, document_id: str, fields: Mapping[str, Any]
    ) -> None:
        self._call("update")
        if document_id not in self.collections[collection]:
            raise StoreError(f"Document {document_id} not found in {collection}")
        self.collections[collection][document_id].update(fields)

    async def commit_batch(self, writes: Sequence[PendingWrite]) -> None:
        self._call("commit_batch")
        for write in writes:
            self.collections[write.collection][write.document_id] = dict(write.data)
        self.committed_batches.append(len(writes))

    async def ping(self) -> bool:
        return True


class FakeOrderSource:
    """Serves pre-built pages; cursors are ``"cursor-<page index>"``."""

    def __init__(
        self,
        pages: list[OrderPage] | None = None,
        open_orders: list[Any] | None = None,
        recent_orders: list[Any] | None = None,
        fail_on_page: int | None = None,
        error: Exception | None = None,
        open_orders_error: Exception | None = None,
    ):
        self.pages = pages or []
        self.open_orders = open_orders or []
        self.recent_orders = recent_orders or []
        self.fail_on_page = fail_on_page
        self.error = error
        self.open_orders_error = open_orders_error
        self.cursors: list[str | None] = []

    async def fetch_orders_page(self, cursor: str | None) -> OrderPage:
        self.cursors.append(cursor)
        index = 0 if cursor is None else int(cursor.split("-")[1])
        if index == self.fail_on_page:
            raise self.error
        if index >= len(self.pages):
            return OrderPage()
        return self.pages[index]

    async def fetch_open_orders(self, limit: int) -> list[Any]:
        if self.open_orders_error is not None:
            raise self.open_orders_error
        return self.open_orders[:limit]

    async def fetch_recent_orders(self, limit: int) -> list[Any]:
        return self.recent_orders[:limit]


def make_order_node(order_id: str, **overrides: Any) -> dict[str, Any]:
    """A Shopify order node as returned by the orders query."""
    node = {
        "id": order_id,
        "name": f"#{order_id.rsplit('/', 1)[-1]}",
        "email": "buyer@example.com",
        "createdAt": "2026-10-01T12:00:00Z",
        "displayFulfillmentStatus": "UNFULFILLED",
        "displayFinancialStatus": "PAID",
        "customer": {
            "id": "gid://shopify/Customer/1",
            "firstName": "Ada",
            "lastName": "Lovelace",
            "email": "buyer@example.com",
        },
        "totalPriceSet": {"shopMoney": {"amount": "42.00", "currencyCode": "USD"}},
        "lineItems": {
            "edges": [
                {
                    "node": {
                        "id": f"{order_id}-line-1",
                        "title": "Espresso Beans",
                        "quantity": 2,
                        "originalUnitPrice": "21.00",
                        "variant": {
                            "id": "gid://shopify/ProductVariant/7",
                            "title": "1kg",
                            "price": "21.00",
                            "sku": "BEAN-1KG",
                        },
                    }
                }
            ]
        },
        "tags": ["wholesale"],
        "note": None,
    }
    node.update(overrides)
    return node


def make_nodes(count: int, start: int = 1) -> list[dict[str, Any]]:
    return [make_order_node(f"gid://shopify/Order/{i}") for i in range(start, start + count)]


def paginate(nodes: list[Any], page_size: int) -> list[OrderPage]:
    """Split ``nodes`` into linked pages."""
    chunks = [nodes[i : i + page_size] for i in range(0, len(nodes), page_size)]
    return [
        OrderPage(
            orders=chunk,
            has_next_page=index < len(chunks) - 1,
            end_cursor=f"cursor-{index + 1}",
        )
        for index, chunk in enumerate(chunks)
    ]
