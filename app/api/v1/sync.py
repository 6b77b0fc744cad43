"""
Offline queue drain endpoint
"""
from fastapi import APIRouter, Depends
from app.core.deps import get_sync_service
from app.schemas.offline_queue import DrainSummaryOut
from app.services.sync_service import PunchSyncService

router = APIRouter()


@router.post("/drain", response_model=DrainSummaryOut, response_model_by_alias=True)
def drain_queue_endpoint(sync_service: PunchSyncService = Depends(get_sync_service)):
    """Push queued punches to the attendance API; failures stay queued"""
    summary = sync_service.drain()
    return DrainSummaryOut(
        attempted=summary.attempted,
        synced=summary.synced,
        failed=summary.failed,
        remaining=summary.remaining,
        skipped_offline=summary.skipped_offline,
        failed_ids=summary.failed_ids,
    )
