"""
Tests for draining the offline queue
"""
import pytest

from app.schemas.offline_queue import QueuedPunchIn
from app.services.sync_service import PunchSyncService


def punch(punch_id: str) -> QueuedPunchIn:
    return QueuedPunchIn(
        id=punch_id,
        worker_id=f"worker-{punch_id}",
        site_id="s1",
        date="2026-02-11",
        type="PUNCH_IN",
        status="PRESENT",
        verified=True,
    )


@pytest.fixture
def sync_service(offline_queue, attendance_client, network):
    return PunchSyncService(
        offline_queue,
        attendance_client,
        network,
        retries=2,
        retry_delay_seconds=0.5,
        sleep=lambda seconds: None,
    )


def test_drain_pushes_in_fifo_order_and_empties_queue(sync_service, offline_queue, attendance_client):
    for punch_id in ["p1", "p2", "p3"]:
        offline_queue.enqueue(punch(punch_id))

    summary = sync_service.drain()

    assert attendance_client.calls == ["p1", "p2", "p3"]
    assert summary.attempted == 3
    assert summary.synced == 3
    assert summary.failed == 0
    assert summary.remaining == 0
    assert offline_queue.get_all() == []


def test_failed_punch_stays_queued_and_others_continue(sync_service, offline_queue, attendance_client):
    for punch_id in ["p1", "p2", "p3"]:
        offline_queue.enqueue(punch(punch_id))
    attendance_client.fail_ids = {"p2"}

    summary = sync_service.drain()

    # p2 is tried once plus two retries
    assert attendance_client.calls == ["p1", "p2", "p2", "p2", "p3"]
    assert summary.synced == 2
    assert summary.failed == 1
    assert summary.failed_ids == ["p2"]
    assert summary.remaining == 1
    assert [p.id for p in offline_queue.get_all()] == ["p2"]


def test_duplicate_id_is_pushed_once(sync_service, offline_queue, attendance_client):
    offline_queue.enqueue(punch("p1"))
    offline_queue.enqueue(punch("p2"))
    offline_queue.enqueue(punch("p1"))

    summary = sync_service.drain()

    assert attendance_client.calls == ["p1", "p2"]
    assert summary.attempted == 2
    assert summary.synced == 2
    assert summary.remaining == 0
    assert offline_queue.get_all() == []


def test_drain_skipped_when_offline(sync_service, offline_queue, attendance_client, network):
    offline_queue.enqueue(punch("p1"))
    network.connected = False

    summary = sync_service.drain()

    assert summary.skipped_offline is True
    assert summary.remaining == 1
    assert attendance_client.calls == []


def test_drain_of_empty_queue(sync_service):
    summary = sync_service.drain()

    assert summary.attempted == 0
    assert summary.remaining == 0
    assert summary.skipped_offline is False


def test_failed_punch_is_retried_on_next_drain(sync_service, offline_queue, attendance_client):
    offline_queue.enqueue(punch("p1"))
    attendance_client.fail_ids = {"p1"}

    assert sync_service.drain().remaining == 1

    attendance_client.fail_ids = set()
    summary = sync_service.drain()

    assert summary.synced == 1
    assert offline_queue.count() == 0
