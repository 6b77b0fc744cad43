"""
Dependencies for FastAPI endpoints.

Each store is built once per process from settings and shared by every
request; tests replace these with app.dependency_overrides.
"""
from functools import lru_cache

from fastapi import Depends

from app.api.clients.attendance_client import AttendanceClient
from app.core.config import settings
from app.services.image_cache_service import WorkerImageCache
from app.services.network_service import NetworkMonitor
from app.services.offline_queue_service import OfflineQueue
from app.services.sync_service import PunchSyncService
from app.stores.kv_store import SqlKeyValueStore
from app.stores.transactional_store import SqlAlchemyTransactionalStore


@lru_cache
def get_key_value_store() -> SqlKeyValueStore:
    return SqlKeyValueStore(settings.OFFLINE_QUEUE_DATABASE_URL)


def get_offline_queue() -> OfflineQueue:
    """Dependency for the offline punch queue"""
    return OfflineQueue(
        get_key_value_store(),
        key=settings.OFFLINE_QUEUE_KEY,
        max_size=settings.OFFLINE_QUEUE_MAX_SIZE,
    )


@lru_cache
def get_image_cache() -> WorkerImageCache:
    """Dependency for the worker image cache (store opens lazily on first use)"""
    store = SqlAlchemyTransactionalStore(
        settings.IMAGE_CACHE_DATABASE_URL,
        open_timeout=settings.IMAGE_CACHE_OPEN_TIMEOUT_SECONDS,
    )
    return WorkerImageCache(store, ttl_ms=settings.image_cache_ttl_ms)


def get_network_monitor() -> NetworkMonitor:
    return NetworkMonitor(
        settings.CONNECTIVITY_CHECK_URL,
        timeout=settings.CONNECTIVITY_TIMEOUT_SECONDS,
        force_offline=settings.FORCE_OFFLINE,
    )


def get_attendance_client() -> AttendanceClient:
    return AttendanceClient(settings.ATTENDANCE_API_URL, timeout=settings.ATTENDANCE_API_TIMEOUT_SECONDS)


def get_sync_service(
    queue: OfflineQueue = Depends(get_offline_queue),
    client: AttendanceClient = Depends(get_attendance_client),
    network: NetworkMonitor = Depends(get_network_monitor),
) -> PunchSyncService:
    """Dependency for the drain coordinator"""
    return PunchSyncService(
        queue,
        client,
        network,
        retries=settings.SYNC_RETRIES,
        retry_delay_seconds=settings.SYNC_RETRY_DELAY_SECONDS,
    )
