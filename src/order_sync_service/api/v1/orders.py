"""Stored order endpoints."""

from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from order_sync_service.api.dependencies import get_order_reader
from order_sync_service.services.order_reader import OrderReader
from shared.constants import DEFAULT_ORDERS_PAGE_SIZE, MAX_ORDERS_PAGE_SIZE

router = APIRouter()


class OrdersResponse(BaseModel):
    """Stored orders, newest first."""

    success: bool
    count: int
    orders: list[dict[str, Any]]


@router.get("", response_model=OrdersResponse)
async def list_orders(
    page_size: int = Query(DEFAULT_ORDERS_PAGE_SIZE, ge=1, le=MAX_ORDERS_PAGE_SIZE),
    reader: OrderReader = Depends(get_order_reader),
) -> OrdersResponse:
    """
    List the newest stored orders.

    `count` is the total number of stored orders, not the size of this page.
    """
    result = await reader.list_orders(page_size)
    return OrdersResponse(success=True, **result)


@router.get("/all", response_model=OrdersResponse)
async def list_all_orders(
    reader: OrderReader = Depends(get_order_reader),
) -> OrdersResponse:
    """List every stored order, newest first."""
    result = await reader.list_orders(None)
    return OrdersResponse(success=True, **result)
