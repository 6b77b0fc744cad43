"""
Tests for the worker image cache
"""
import pytest
from sqlalchemy import func, select, text

from app.constants import MS_PER_DAY
from app.core.errors import StoreUnavailable
from app.models.cached_image import CachedWorkerPhoto
from app.schemas.image_cache import CachedImage
from app.services.image_cache_service import WorkerImageCache
from app.stores.transactional_store import SqlAlchemyTransactionalStore
from app.utils.result import FailureReason

WINDOW_MS = 25 * MS_PER_DAY


def photo(worker_id, timestamp, url=None, aadhaar=None) -> CachedImage:
    return CachedImage(
        worker_id=worker_id,
        photo_url=url or f"https://cdn.example.com/{worker_id}.jpg",
        aadhaar_photo_url=aadhaar,
        timestamp=timestamp,
    )


@pytest.fixture
def unavailable_cache(tmp_path, clock):
    store = SqlAlchemyTransactionalStore(f"sqlite+aiosqlite:///{tmp_path / 'missing-dir' / 'cache.db'}")
    return WorkerImageCache(store, clock=clock)


async def test_open_store_creates_record_space(image_cache, image_store):
    handle = await image_cache.open_store()

    assert handle is image_store
    assert image_store.is_open
    assert await image_cache.get_cached_images(["w1"]) == {}


async def test_open_store_is_idempotent(image_cache, image_store):
    await image_cache.open_store()
    await image_cache.open_store()

    assert image_store.is_open


async def test_cached_image_is_returned(image_cache, clock):
    await image_cache.cache_worker_images([photo("w1", clock.now, aadhaar="https://cdn.example.com/w1-id.jpg")])

    cached = await image_cache.get_cached_images(["w1"])

    assert set(cached) == {"w1"}
    assert cached["w1"].photo_url == "https://cdn.example.com/w1.jpg"
    assert cached["w1"].aadhaar_photo_url == "https://cdn.example.com/w1-id.jpg"
    assert cached["w1"].timestamp == clock.now


async def test_lookup_filters_to_requested_ids(image_cache, clock):
    await image_cache.cache_worker_images([photo("w1", clock.now), photo("w2", clock.now), photo("w3", clock.now)])

    cached = await image_cache.get_cached_images({"w1", "w3", "w9"})

    assert set(cached) == {"w1", "w3"}


async def test_empty_lookup_returns_empty_mapping(image_cache, clock):
    await image_cache.cache_worker_images([photo("w1", clock.now)])

    assert await image_cache.get_cached_images([]) == {}


async def test_freshness_boundary(image_cache, clock):
    """Fresh one millisecond before the window closes, expired exactly at it"""
    written_at = clock.now
    await image_cache.cache_worker_images([photo("w1", written_at)])

    clock.now = written_at + WINDOW_MS - 1
    assert "w1" in await image_cache.get_cached_images(["w1"])

    clock.now = written_at + WINDOW_MS
    assert await image_cache.get_cached_images(["w1"]) == {}

    clock.now = written_at + WINDOW_MS + MS_PER_DAY
    assert await image_cache.get_cached_images(["w1"]) == {}


async def test_recache_overwrites_instead_of_duplicating(image_cache, image_store, clock):
    await image_cache.cache_worker_images([photo("w1", clock.now, url="https://cdn.example.com/old.jpg")])
    clock.advance(1000)
    await image_cache.cache_worker_images([photo("w1", clock.now, url="https://cdn.example.com/new.jpg")])

    cached = await image_cache.get_cached_images(["w1"])
    assert cached["w1"].photo_url == "https://cdn.example.com/new.jpg"
    assert cached["w1"].timestamp == clock.now

    async with image_store.read_transaction() as session:
        rows = (await session.execute(select(func.count()).select_from(CachedWorkerPhoto))).scalar_one()
    assert rows == 1


async def test_recaching_refreshes_expired_entry(image_cache, clock):
    await image_cache.cache_worker_images([photo("w1", clock.now)])
    clock.advance(WINDOW_MS)
    assert await image_cache.get_cached_images(["w1"]) == {}

    await image_cache.cache_worker_images([photo("w1", clock.now)])

    assert "w1" in await image_cache.get_cached_images(["w1"])


async def test_clear_expired_cache_removes_only_stale_entries(image_cache, clock):
    start = clock.now
    await image_cache.cache_worker_images([
        photo("old", start - WINDOW_MS - 1),
        photo("boundary", start - WINDOW_MS),
        photo("recent", start - MS_PER_DAY),
        photo("new", start),
    ])

    result = await image_cache.try_clear_expired_cache()

    assert result.ok
    assert result.value == 2
    cached = await image_cache.get_cached_images(["old", "boundary", "recent", "new"])
    assert set(cached) == {"recent", "new"}


async def test_clear_expired_cache_on_empty_store(image_cache):
    await image_cache.clear_expired_cache()

    result = await image_cache.try_clear_expired_cache()
    assert result.ok
    assert result.value == 0


async def test_scheduled_sweep_runs_in_background(image_cache, clock):
    await image_cache.cache_worker_images([photo("old", clock.now - WINDOW_MS), photo("new", clock.now)])

    task = image_cache.schedule_expiry_sweep()
    await task

    result = await image_cache.try_get_cached_images(["old", "new"])
    assert set(result.value) == {"new"}


async def test_aborted_write_leaves_no_rows_from_batch(image_cache, image_store, clock):
    await image_cache.cache_worker_images([photo("w0", clock.now)])
    async with image_store.write_transaction() as session:
        await session.execute(text(
            "CREATE TRIGGER reject_bad_worker BEFORE INSERT ON worker_photos "
            "WHEN NEW.worker_id = 'bad' BEGIN SELECT RAISE(ABORT, 'worker rejected'); END"
        ))

    result = await image_cache.try_cache_worker_images([photo("w1", clock.now), photo("bad", clock.now)])

    assert result.failure == FailureReason.TRANSACTION_ABORTED
    cached = await image_cache.get_cached_images(["w0", "w1", "bad"])
    assert set(cached) == {"w0"}


async def test_aborted_write_is_logged_not_raised(image_cache, image_store, clock, caplog):
    async with image_store.write_transaction() as session:
        await session.execute(text(
            "CREATE TRIGGER reject_bad_worker BEFORE INSERT ON worker_photos "
            "WHEN NEW.worker_id = 'bad' BEGIN SELECT RAISE(ABORT, 'worker rejected'); END"
        ))

    await image_cache.cache_worker_images([photo("bad", clock.now)])

    assert "TRANSACTION_ABORTED" in caplog.text


async def test_open_store_raises_when_unavailable(unavailable_cache):
    with pytest.raises(StoreUnavailable):
        await unavailable_cache.open_store()


async def test_unavailable_store_reads_as_cache_miss(unavailable_cache, clock):
    assert await unavailable_cache.get_cached_images(["w1"]) == {}

    result = await unavailable_cache.try_get_cached_images(["w1"])
    assert result.failure == FailureReason.STORAGE_UNAVAILABLE


async def test_unavailable_store_swallows_write_and_sweep(unavailable_cache, clock, caplog):
    await unavailable_cache.cache_worker_images([photo("w1", clock.now)])
    await unavailable_cache.clear_expired_cache()

    assert "Saving to image cache failed" in caplog.text
    assert "Clearing expired image cache failed" in caplog.text
