"""Shopify Admin GraphQL client."""

from typing import Any, Protocol

import httpx
import structlog

from order_sync_service.config import Settings
from order_sync_service.domain import OrderPage
from order_sync_service.exceptions import ConfigurationError, UpstreamError
from order_sync_service.infrastructure.shopify.queries import FETCH_OPEN_ORDERS, FETCH_ORDERS_PAGE
from shared.constants import ORDER_PAGE_SIZE

logger = structlog.get_logger()


class OrderSource(Protocol):
    """Paginated source of raw order nodes."""

    async def fetch_orders_page(self, cursor: str | None) -> OrderPage: ...

    async def fetch_open_orders(self, limit: int) -> list[dict[str, Any]]: ...

    async def fetch_recent_orders(self, limit: int) -> list[dict[str, Any]]: ...


def _edges(data: Any) -> tuple[dict[str, Any], list[Any]] | None:
    """Return ``(orders, edges)`` from a response, or None if the shape is off."""
    if not isinstance(data, dict):
        return None
    orders = data.get("orders")
    if not isinstance(orders, dict):
        return None
    edges = orders.get("edges")
    if not isinstance(edges, list):
        return None
    return orders, edges


def parse_orders_page(data: Any) -> OrderPage:
    """Turn an ``orders`` connection into an ``OrderPage``.

    A missing or malformed connection, or one with no edges, is an empty
    terminal page. Individual nodes are passed through untouched so that a
    single bad node can be rejected on its own.
    """
    parsed = _edges(data)
    if parsed is None:
        logger.warning("Unexpected orders response shape, ending pagination")
        return OrderPage()
    orders, edges = parsed
    if not edges:
        return OrderPage()

    page_info = orders.get("pageInfo") or {}
    return OrderPage(
        orders=[edge.get("node") if isinstance(edge, dict) else edge for edge in edges],
        has_next_page=bool(page_info.get("hasNextPage")),
        end_cursor=page_info.get("endCursor"),
    )


class ShopifyClient:
    """Thin async client for the Shopify Admin GraphQL endpoint."""

    def __init__(
        self,
        store_url: str,
        access_token: str,
        api_version: str = "2024-01",
        timeout: float = 30.0,
        page_size: int = ORDER_PAGE_SIZE,
        http_client: httpx.AsyncClient | None = None,
    ):
        if not store_url or not access_token:
            raise ConfigurationError("Missing Shopify credentials")

        self.endpoint = f"{store_url.rstrip('/')}/admin/api/{api_version}/graphql.json"
        self.page_size = page_size
        self._headers = {
            "X-Shopify-Access-Token": access_token,
            "Content-Type": "application/json",
        }
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=timeout)

    @classmethod
    def from_settings(
        cls, settings: Settings, http_client: httpx.AsyncClient | None = None
    ) -> "ShopifyClient":
        return cls(
            store_url=settings.shopify_store_url,
            access_token=settings.shopify_access_token,
            api_version=settings.shopify_api_version,
            timeout=settings.shopify_api_timeout,
            page_size=settings.sync_page_size,
            http_client=http_client,
        )

    async def request(self, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        """Execute a GraphQL document and return its ``data`` object."""
        try:
            response = await self._client.post(
                self.endpoint,
                json={"query": query, "variables": variables or {}},
                headers=self._headers,
            )
        except httpx.HTTPError as e:
            raise UpstreamError(f"Shopify request failed: {e}") from e

        if response.is_error:
            raise UpstreamError(
                f"Shopify returned HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise UpstreamError("Shopify returned a non-JSON response") from e

        if not isinstance(payload, dict):
            raise UpstreamError("Shopify returned an unexpected response body")

        errors = payload.get("errors")
        if errors:
            messages = "; ".join(
                err.get("message", str(err)) if isinstance(err, dict) else str(err)
                for err in (errors if isinstance(errors, list) else [errors])
            )
            raise UpstreamError(f"Shopify GraphQL error: {messages}")

        return payload.get("data") or {}

    async def fetch_orders_page(self, cursor: str | None) -> OrderPage:
        """Fetch one page of the full order catalog after ``cursor``."""
        logger.debug("Fetching orders page", cursor=cursor, first=self.page_size)
        data = await self.request(FETCH_ORDERS_PAGE, {"first": self.page_size, "cursor": cursor})
        return parse_orders_page(data)

    async def fetch_open_orders(self, limit: int) -> list[dict[str, Any]]:
        """Fetch up to ``limit`` unfulfilled or in-progress orders, newest first."""
        data = await self.request(FETCH_OPEN_ORDERS, {"first": limit})
        parsed = _edges(data)
        if parsed is None:
            return []
        _, edges = parsed
        return [edge.get("node") if isinstance(edge, dict) else edge for edge in edges]

    async def fetch_recent_orders(self, limit: int) -> list[dict[str, Any]]:
        """Fetch the ``limit`` most recently created orders, in any state."""
        data = await self.request(FETCH_ORDERS_PAGE, {"first": limit, "cursor": None})
        return parse_orders_page(data).orders

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "ShopifyClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
