"""Order sync endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from order_sync_service.api.dependencies import (
    get_background_runner,
    get_order_reader,
    get_sync_service,
)
from order_sync_service.config import Settings, get_settings
from order_sync_service.domain import SyncJob
from order_sync_service.services.background import BackgroundSyncRunner
from order_sync_service.services.order_reader import OrderReader
from order_sync_service.services.order_sync import OrderSyncService

router = APIRouter()


class BoundedSyncResponse(BaseModel):
    """Outcome of a single-page order sync."""

    success: bool
    message: str
    synced: int
    skipped: int
    errors: int


class FullSyncResponse(BaseModel):
    """Acknowledgement of a started full sync."""

    success: bool
    message: str
    job_id: str


@router.post("/orders", response_model=BoundedSyncResponse)
async def sync_orders(
    limit: int | None = Query(None, ge=1, le=250, description="Orders to fetch (default from settings)"),
    service: OrderSyncService = Depends(get_sync_service),
    settings: Settings = Depends(get_settings),
) -> BoundedSyncResponse:
    """
    Sync the most recent open orders.

    Fetches one page of unfulfilled or in-progress orders and stores the ones
    not yet present. Blocks until done; per-order failures are reported in
    `errors`.
    """
    result = await service.run_bounded_sync(limit or settings.sync_bounded_limit)
    return BoundedSyncResponse(
        success=True,
        message="Orders synced successfully",
        synced=result.synced,
        skipped=result.skipped,
        errors=result.errors,
    )


@router.post("/orders/full", response_model=FullSyncResponse)
async def start_full_order_sync(
    service: OrderSyncService = Depends(get_sync_service),
    runner: BackgroundSyncRunner = Depends(get_background_runner),
) -> FullSyncResponse:
    """
    Start a sync of the entire order catalog in the background.

    Returns the job id immediately. Poll `GET /sync/jobs/{job_id}` for
    progress; a failed run shows up there as status `failed`.
    """
    started = await service.start_full_sync(runner)
    return FullSyncResponse(success=True, message=started.message, job_id=started.job_id)


@router.get("/jobs/{job_id}", response_model=SyncJob)
async def get_sync_job(
    job_id: str,
    reader: OrderReader = Depends(get_order_reader),
) -> SyncJob:
    """Get the status record of a full sync job."""
    job = await reader.get_job(job_id)
    if job is None:
        raise HTTPException(status_code=404, detail=f"Sync job '{job_id}' not found")
    return job
