"""Read-only views straight from Shopify."""

from typing import Any

import structlog
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from order_sync_service.api.dependencies import get_order_source
from order_sync_service.exceptions import MalformedOrderError
from order_sync_service.infrastructure.shopify.client import OrderSource
from order_sync_service.services.order_builder import build_order

logger = structlog.get_logger()
router = APIRouter()


class OrdersPreviewResponse(BaseModel):
    success: bool
    count: int
    orders: list[dict[str, Any]]


def _preview(nodes: list[Any]) -> OrdersPreviewResponse:
    orders = []
    for node in nodes:
        try:
            orders.append(build_order(node).model_dump(mode="json", by_alias=True))
        except MalformedOrderError as e:
            logger.warning("Skipping malformed order in preview", error=str(e))
    return OrdersPreviewResponse(success=True, count=len(orders), orders=orders)


@router.get("/orders", response_model=OrdersPreviewResponse)
async def get_recent_orders(
    limit: int = Query(50, ge=1, le=250),
    source: OrderSource = Depends(get_order_source),
) -> OrdersPreviewResponse:
    """Preview the most recent orders in any state without storing them."""
    return _preview(await source.fetch_recent_orders(limit))


@router.get("/open-orders", response_model=OrdersPreviewResponse)
async def get_open_orders(
    limit: int = Query(50, ge=1, le=250),
    source: OrderSource = Depends(get_order_source),
) -> OrdersPreviewResponse:
    """Preview unfulfilled and in-progress orders without storing them."""
    return _preview(await source.fetch_open_orders(limit))
