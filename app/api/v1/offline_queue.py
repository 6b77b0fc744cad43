"""
Offline punch queue endpoints
"""
import logging
from typing import List
from fastapi import APIRouter, Depends, Response, status
from app.core.deps import get_offline_queue
from app.services.offline_queue_service import OfflineQueue
from app.schemas.offline_queue import (
    EnqueueResponse,
    QueueCountOut,
    QueuedPunch,
    QueuedPunchIn,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=EnqueueResponse, status_code=202)
def enqueue_punch_endpoint(
    punch: QueuedPunchIn,
    queue: OfflineQueue = Depends(get_offline_queue),
):
    """
    Queue a punch for later sync.

    Queueing is best-effort: a storage failure or a full queue is reported in
    the body, never as an error status.
    """
    result = queue.try_enqueue(punch)
    if not result.ok:
        result.unwrap_or(None, logger, f"Queueing punch {punch.id}")
        return EnqueueResponse(queued=False, count=queue.count(), reason=result.failure.value)
    return EnqueueResponse(queued=True, count=queue.count())


@router.get("", response_model=List[QueuedPunch], response_model_by_alias=True, response_model_exclude_none=True)
def list_queued_punches_endpoint(queue: OfflineQueue = Depends(get_offline_queue)):
    """All queued punches in retry (insertion) order"""
    return queue.get_all()


@router.get("/count", response_model=QueueCountOut)
def count_queued_punches_endpoint(queue: OfflineQueue = Depends(get_offline_queue)):
    """Queue length for badge display"""
    return QueueCountOut(count=queue.count())


@router.delete("/{punch_id}", status_code=204)
def remove_queued_punch_endpoint(punch_id: str, queue: OfflineQueue = Depends(get_offline_queue)):
    """Remove a punch by id (no-op if it is not queued)"""
    queue.remove_by_id(punch_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("", status_code=204)
def clear_queue_endpoint(queue: OfflineQueue = Depends(get_offline_queue)):
    """Empty the queue after a full drain"""
    queue.clear_all()
    return Response(status_code=status.HTTP_204_NO_CONTENT)

