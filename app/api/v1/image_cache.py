"""
Worker image cache endpoints
"""
from fastapi import APIRouter, BackgroundTasks, Depends, Response, status
from app.core.deps import get_image_cache
from app.schemas.image_cache import (
    CachedImage,
    CachedImagesLookupRequest,
    CachedImagesLookupResponse,
    CacheImagesRequest,
)
from app.services.image_cache_service import WorkerImageCache

router = APIRouter()


@router.post("/lookup", response_model=CachedImagesLookupResponse, response_model_by_alias=True)
async def lookup_cached_images_endpoint(
    request: CachedImagesLookupRequest,
    cache: WorkerImageCache = Depends(get_image_cache),
):
    """
    Fresh cached photos for the given workers.

    Workers missing from the result should be fetched from the backend and
    written back with PUT /image-cache.
    """
    images = await cache.get_cached_images(request.worker_ids)
    return CachedImagesLookupResponse(images=images)


@router.put("", status_code=204)
async def cache_worker_images_endpoint(
    request: CacheImagesRequest,
    cache: WorkerImageCache = Depends(get_image_cache),
):
    """Upsert photos by worker id; a missing or future timestamp means now"""
    now = cache.clock()
    images = [
        CachedImage(
            worker_id=item.worker_id,
            photo_url=item.photo_url,
            aadhaar_photo_url=item.aadhaar_photo_url,
            timestamp=min(item.timestamp, now) if item.timestamp is not None else now,
        )
        for item in request.images
    ]
    await cache.cache_worker_images(images)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/sweep", status_code=202)
async def sweep_expired_images_endpoint(
    background_tasks: BackgroundTasks,
    cache: WorkerImageCache = Depends(get_image_cache),
):
    """Sweep expired photos after the response is sent"""
    background_tasks.add_task(cache.clear_expired_cache)
    return {"scheduled": True}
