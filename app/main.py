"""
Site Attendance Sync Agent - Main Application Entry Point

Runs on the supervisor's device next to the attendance UI. Hosts the offline
punch queue and the worker photo cache so punches survive lost connectivity
and photos are not re-downloaded every session.
"""
import logging
from urllib.parse import urlparse, urlunparse

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi import HTTPException

from app.api.router import api_router
from app.core.config import settings
from app.core.deps import get_image_cache
from app.core.errors import (
    StoreUnavailable,
    http_exception_handler,
    validation_exception_handler,
    store_unavailable_handler,
    generic_exception_handler
)
from app.core.logging import setup_logging
from app.services.image_cache_service import ensure_store_available

# Setup logging first
setup_logging()
logger = logging.getLogger(__name__)


def _mask_database_url(url: str) -> str:
    """Mask password in a database URL for safe logging; show full path for sqlite."""
    try:
        parsed = urlparse(url)
        if parsed.scheme.startswith("sqlite"):
            return url  # Safe to log path
        if parsed.password:
            netloc = f"{parsed.username}:****@{parsed.hostname or ''}"
            if parsed.port:
                netloc += f":{parsed.port}"
            return urlunparse(parsed._replace(netloc=netloc))
    except ValueError:
        return "***"
    return url


# Create FastAPI app
app = FastAPI(
    title="Site Attendance Sync Agent",
    description="Offline punch queue and worker photo cache for construction-site attendance",
    version=settings.VERSION or "1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_allowed_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register exception handlers
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(StoreUnavailable, store_unavailable_handler)
app.add_exception_handler(Exception, generic_exception_handler)

# Include all API routes under /api/v1
app.include_router(api_router, prefix="/api/v1")


@app.on_event("startup")
def startup_log_config() -> None:
    """Log where the local stores live so they can be found on the device."""
    logger.info("Offline queue store: %s", _mask_database_url(settings.OFFLINE_QUEUE_DATABASE_URL))
    logger.info("Image cache store: %s", _mask_database_url(settings.IMAGE_CACHE_DATABASE_URL))
    logger.info("Attendance API: %s", settings.ATTENDANCE_API_URL)


@app.on_event("startup")
async def open_image_cache() -> None:
    """
    Open the photo cache and sweep expired entries in the background.

    An unavailable cache is logged and tolerated: photos are then always
    fetched from the backend.
    """
    cache = get_image_cache()
    await ensure_store_available(cache)
    cache.schedule_expiry_sweep()


@app.on_event("shutdown")
async def close_image_cache() -> None:
    await get_image_cache().close()
