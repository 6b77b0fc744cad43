"""
Main API router
"""
from fastapi import APIRouter

from app.api.v1 import (
    health,
    version,
    offline_queue,
    network,
    sync,
    image_cache,
)

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(version.router, tags=["version"])
api_router.include_router(offline_queue.router, prefix="/offline-queue", tags=["offline-queue"])
api_router.include_router(network.router, prefix="/network", tags=["network"])
api_router.include_router(sync.router, prefix="/sync", tags=["sync"])
api_router.include_router(image_cache.router, prefix="/image-cache", tags=["image-cache"])
