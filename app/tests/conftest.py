"""
Pytest configuration and fixtures
"""
import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from app.main import app
from app.core.deps import (
    get_attendance_client,
    get_image_cache,
    get_network_monitor,
    get_offline_queue,
)
from app.services.image_cache_service import WorkerImageCache
from app.services.offline_queue_service import OfflineQueue
from app.stores.kv_store import SqlKeyValueStore
from app.stores.transactional_store import SqlAlchemyTransactionalStore


class FakeClock:
    """Epoch-millisecond clock that only moves when told to"""

    def __init__(self, start: int = 1_770_000_000_000):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class FakeNetworkMonitor:
    def __init__(self, connected: bool = True):
        self.connected = connected

    def is_connected(self) -> bool:
        return self.connected


class FakeAttendanceClient:
    """Records pushed punches; ids in fail_ids always fail"""

    def __init__(self, fail_ids=None):
        self.fail_ids = set(fail_ids or [])
        self.calls = []

    def record_attendance(self, punch):
        self.calls.append(punch.id)
        if punch.id in self.fail_ids:
            raise RuntimeError(f"backend rejected {punch.id}")
        return {"workerId": punch.worker_id, "date": punch.date}


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def kv_store(tmp_path):
    """Key-value store in a throwaway sqlite file"""
    store = SqlKeyValueStore(f"sqlite:///{tmp_path / 'offline_queue.db'}")
    yield store
    store.close()


@pytest.fixture
def offline_queue(kv_store, clock):
    return OfflineQueue(kv_store, key="attendance_offline_queue", max_size=500, clock=clock)


@pytest.fixture
def image_store(tmp_path):
    return SqlAlchemyTransactionalStore(f"sqlite+aiosqlite:///{tmp_path / 'worker_image_cache.db'}")


@pytest_asyncio.fixture
async def image_cache(image_store, clock):
    cache = WorkerImageCache(image_store, clock=clock)
    yield cache
    await cache.close()


@pytest.fixture
def network():
    return FakeNetworkMonitor(connected=True)


@pytest.fixture
def attendance_client():
    return FakeAttendanceClient()


@pytest.fixture(scope="function")
def client(offline_queue, image_store, clock, network, attendance_client):
    """Test client fixture with store and collaborator overrides"""
    cache = WorkerImageCache(image_store, clock=clock)

    app.dependency_overrides[get_offline_queue] = lambda: offline_queue
    app.dependency_overrides[get_image_cache] = lambda: cache
    app.dependency_overrides[get_network_monitor] = lambda: network
    app.dependency_overrides[get_attendance_client] = lambda: attendance_client
    yield TestClient(app)
    app.dependency_overrides.clear()
