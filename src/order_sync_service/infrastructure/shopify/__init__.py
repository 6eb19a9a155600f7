"""Shopify Admin API adapter."""

from order_sync_service.infrastructure.shopify.client import (
    OrderSource,
    ShopifyClient,
    parse_orders_page,
)

__all__ = ["OrderSource", "ShopifyClient", "parse_orders_page"]
