"""API v1 router that aggregates all endpoint routers."""

from fastapi import APIRouter

from order_sync_service.api.v1 import health, orders, shopify, sync

api_router = APIRouter()

api_router.include_router(
    health.router,
    tags=["Health"],
)

api_router.include_router(
    sync.router,
    prefix="/sync",
    tags=["Sync"],
)

api_router.include_router(
    orders.router,
    prefix="/orders",
    tags=["Orders"],
)

api_router.include_router(
    shopify.router,
    prefix="/shopify",
    tags=["Shopify"],
)
