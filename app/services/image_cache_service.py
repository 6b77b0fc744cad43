"""
Worker image cache - keeps previously fetched worker photos on the device so
they are not downloaded again every session.

Entries expire after a fixed freshness window. Reads re-check freshness on their
own, so an expired entry is treated as absent even before the sweep deletes it.
The record-space is bounded by the active workforce, so reads load every row
and filter in memory instead of issuing range queries.
"""
import asyncio
import logging
from typing import Dict, Iterable, List, Optional, Set

from sqlalchemy import delete, select

from app.constants import MS_PER_DAY
from app.core.errors import StoreError, StoreUnavailable, TransactionAborted
from app.models.cached_image import CachedWorkerPhoto
from app.schemas.image_cache import CachedImage
from app.stores.transactional_store import AsyncTransactionalStore
from app.utils.datetime_utils import Clock, now_ms
from app.utils.result import FailureReason, StoreResult

logger = logging.getLogger(__name__)

DEFAULT_TTL_MS = 25 * MS_PER_DAY


def _failure_for(exc: StoreError) -> FailureReason:
    if isinstance(exc, TransactionAborted):
        return FailureReason.TRANSACTION_ABORTED
    return FailureReason.STORAGE_UNAVAILABLE


class WorkerImageCache:
    def __init__(
        self,
        store: AsyncTransactionalStore,
        ttl_ms: int = DEFAULT_TTL_MS,
        clock: Clock = now_ms,
    ):
        self.store = store
        self.ttl_ms = ttl_ms
        self.clock = clock
        self._sweeps: Set[asyncio.Task] = set()

    def is_fresh(self, timestamp: int, now: Optional[int] = None) -> bool:
        """An entry exactly ttl_ms old is already expired"""
        if now is None:
            now = self.clock()
        return now - timestamp < self.ttl_ms

    async def open_store(self) -> AsyncTransactionalStore:
        """Open (and on first use initialize) the backing store; raises StoreUnavailable"""
        return await self.store.open()

    # ---- internal, Result-returning ----

    async def try_get_cached_images(self, worker_ids: Iterable[str]) -> StoreResult[Dict[str, CachedImage]]:
        wanted = set(worker_ids)
        if not wanted:
            return StoreResult.success({})
        try:
            async with self.store.read_transaction() as session:
                rows = (await session.execute(select(CachedWorkerPhoto))).scalars().all()
        except StoreError as e:
            return StoreResult.failed(_failure_for(e), str(e))

        now = self.clock()
        found = {}
        for row in rows:
            if row.worker_id in wanted and self.is_fresh(row.timestamp, now):
                found[row.worker_id] = CachedImage(
                    worker_id=row.worker_id,
                    photo_url=row.photo_url,
                    aadhaar_photo_url=row.aadhaar_photo_url,
                    timestamp=row.timestamp,
                )
        return StoreResult.success(found)

    async def try_cache_worker_images(self, images: List[CachedImage]) -> StoreResult[int]:
        if not images:
            return StoreResult.success(0)
        try:
            async with self.store.write_transaction() as session:
                for image in images:
                    await session.merge(
                        CachedWorkerPhoto(
                            worker_id=image.worker_id,
                            photo_url=image.photo_url,
                            aadhaar_photo_url=image.aadhaar_photo_url,
                            timestamp=image.timestamp,
                        )
                    )
        except StoreError as e:
            return StoreResult.failed(_failure_for(e), str(e))
        return StoreResult.success(len(images))

    async def try_clear_expired_cache(self) -> StoreResult[int]:
        try:
            async with self.store.write_transaction() as session:
                rows = (await session.execute(select(CachedWorkerPhoto))).scalars().all()
                now = self.clock()
                expired = [row.worker_id for row in rows if not self.is_fresh(row.timestamp, now)]
                if expired:
                    await session.execute(
                        delete(CachedWorkerPhoto).where(CachedWorkerPhoto.worker_id.in_(expired))
                    )
        except StoreError as e:
            return StoreResult.failed(_failure_for(e), str(e))
        return StoreResult.success(len(expired))

    # ---- public, never raise ----

    async def get_cached_images(self, worker_ids: Iterable[str]) -> Dict[str, CachedImage]:
        """Fresh cached entries for the requested workers; any storage error reads as a miss"""
        result = await self.try_get_cached_images(worker_ids)
        return result.unwrap_or({}, logger, "Reading image cache")

    async def cache_worker_images(self, images: List[CachedImage]) -> None:
        """Upsert entries by worker id in one transaction (last write wins)"""
        result = await self.try_cache_worker_images(images)
        if result.ok:
            logger.debug(f"Cached photos for {result.value} worker(s)")
        else:
            result.unwrap_or(None, logger, "Saving to image cache")

    async def clear_expired_cache(self) -> None:
        result = await self.try_clear_expired_cache()
        if result.ok:
            if result.value:
                logger.info(f"Removed {result.value} expired worker photo(s) from cache")
        else:
            result.unwrap_or(None, logger, "Clearing expired image cache")

    def schedule_expiry_sweep(self) -> asyncio.Task:
        """Fire-and-forget clear_expired_cache on the running loop"""
        task = asyncio.get_running_loop().create_task(self.clear_expired_cache())
        # Hold a reference until the sweep finishes
        self._sweeps.add(task)
        task.add_done_callback(self._sweeps.discard)
        return task

    async def close(self) -> None:
        for task in list(self._sweeps):
            task.cancel()
        await self.store.close()


async def ensure_store_available(cache: WorkerImageCache) -> None:
    """Open the store eagerly, logging instead of raising when it is unavailable"""
    try:
        await cache.open_store()
    except StoreUnavailable as e:
        logger.error(f"Image cache unavailable, photos will be fetched from the backend: {e}")
