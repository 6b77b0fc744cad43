"""
Punch sync service - drains the offline queue into the attendance API
"""
import logging
from dataclasses import dataclass, field
from typing import Callable, List

from app.api.clients.attendance_client import AttendanceClient
from app.services.network_service import NetworkMonitor, with_retry
from app.services.offline_queue_service import OfflineQueue
from app.utils.datetime_utils import iso_8601_utc, ms_to_utc

logger = logging.getLogger(__name__)


@dataclass
class DrainSummary:
    attempted: int = 0
    synced: int = 0
    failed: int = 0
    remaining: int = 0
    skipped_offline: bool = False
    failed_ids: List[str] = field(default_factory=list)


class PunchSyncService:
    def __init__(
        self,
        queue: OfflineQueue,
        client: AttendanceClient,
        network: NetworkMonitor,
        retries: int = 3,
        retry_delay_seconds: float = 1.0,
        sleep: Callable[[float], None] = None,
    ):
        self.queue = queue
        self.client = client
        self.network = network
        self.retries = retries
        self.retry_delay_seconds = retry_delay_seconds
        self.sleep = sleep

    def drain(self) -> DrainSummary:
        """
        Push every queued punch in FIFO order.

        Punches that still fail after retries stay queued for the next drain;
        the rest of the queue is still attempted.
        """
        if not self.network.is_connected():
            logger.info("Skipping offline queue drain: device is offline")
            return DrainSummary(remaining=self.queue.count(), skipped_offline=True)

        summary = DrainSummary()
        synced_ids = set()
        for punch in self.queue.get_all():
            if punch.id in synced_ids:
                # remove_by_id already dropped every copy of this id
                continue
            summary.attempted += 1
            retry_kwargs = {"retries": self.retries, "delay_seconds": self.retry_delay_seconds}
            if self.sleep is not None:
                retry_kwargs["sleep"] = self.sleep
            try:
                with_retry(lambda: self.client.record_attendance(punch), **retry_kwargs)
            except Exception as e:
                summary.failed += 1
                summary.failed_ids.append(punch.id)
                logger.error(
                    f"Punch {punch.id} (queued {iso_8601_utc(ms_to_utc(punch.timestamp))}) left in queue: {e}"
                )
                continue
            self.queue.remove_by_id(punch.id)
            synced_ids.add(punch.id)
            summary.synced += 1

        summary.remaining = self.queue.count()
        logger.info(
            f"Offline queue drain finished: synced={summary.synced} failed={summary.failed} remaining={summary.remaining}"
        )
        return summary
