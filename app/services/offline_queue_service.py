"""
Offline punch queue - durable FIFO staging area for attendance punches that
could not be written to the attendance API.

The whole queue lives in one key-value slot as a JSON array. Every operation is
a synchronous whole-value read and/or write, so nothing here suspends. Calls are
assumed to be serialized by the caller (one device, one UI thread); there is no
locking around the read-modify-write in enqueue/remove_by_id.
"""
import json
import logging
from typing import List, Optional

from pydantic import ValidationError

from app.core.errors import StoreUnavailable
from app.schemas.offline_queue import QueuedPunch, QueuedPunchIn
from app.stores.kv_store import SynchronousKeyValueStore
from app.utils.datetime_utils import Clock, now_ms
from app.utils.result import FailureReason, StoreResult

logger = logging.getLogger(__name__)


class OfflineQueue:
    def __init__(
        self,
        store: SynchronousKeyValueStore,
        key: str = "attendance_offline_queue",
        max_size: Optional[int] = None,
        clock: Clock = now_ms,
    ):
        self.store = store
        self.key = key
        self.max_size = max_size
        self.clock = clock

    # ---- internal, Result-returning ----

    def _read(self) -> StoreResult[List[QueuedPunch]]:
        try:
            raw = self.store.get(self.key)
        except StoreUnavailable as e:
            return StoreResult.failed(FailureReason.STORAGE_UNAVAILABLE, str(e))

        if raw is None or raw == "":
            return StoreResult.success([])

        try:
            data = json.loads(raw)
        except ValueError as e:
            return StoreResult.failed(FailureReason.MALFORMED_CONTENT, f"queue slot is not JSON: {e}")
        if not isinstance(data, list):
            return StoreResult.failed(FailureReason.MALFORMED_CONTENT, "queue slot is not a JSON array")

        punches = []
        for position, item in enumerate(data):
            try:
                punches.append(QueuedPunch.model_validate(item))
            except ValidationError as e:
                logger.warning(f"Skipping unreadable queued punch at position {position}: {e.error_count()} error(s)")
        return StoreResult.success(punches)

    def _write(self, punches: List[QueuedPunch]) -> StoreResult[None]:
        payload = json.dumps([p.to_record() for p in punches])
        try:
            self.store.set(self.key, payload)
        except StoreUnavailable as e:
            return StoreResult.failed(FailureReason.STORAGE_UNAVAILABLE, str(e))
        return StoreResult.success()

    def _read_for_update(self) -> StoreResult[List[QueuedPunch]]:
        """Malformed content is replaced by an empty queue on the next write"""
        result = self._read()
        if result.failure == FailureReason.MALFORMED_CONTENT:
            logger.warning(f"Discarding malformed offline queue content: {result.detail}")
            return StoreResult.success([])
        return result

    def try_enqueue(self, punch: QueuedPunchIn) -> StoreResult[QueuedPunch]:
        current = self._read_for_update()
        if not current.ok:
            return StoreResult.failed(current.failure, current.detail)
        queue = current.value

        if self.max_size is not None and len(queue) >= self.max_size:
            return StoreResult.failed(
                FailureReason.QUEUE_FULL,
                f"offline queue holds {len(queue)} punches (limit {self.max_size}); punch {punch.id} not queued",
            )

        timestamp = self.clock()
        if queue and queue[-1].timestamp > timestamp:
            # Wall clock stepped backwards; keep timestamps in insertion order
            timestamp = queue[-1].timestamp

        queued = QueuedPunch(**punch.model_dump(exclude={"timestamp"}), timestamp=timestamp)
        queue.append(queued)
        written = self._write(queue)
        if not written.ok:
            return StoreResult.failed(written.failure, written.detail)
        return StoreResult.success(queued)

    def try_remove_by_id(self, punch_id: str) -> StoreResult[int]:
        current = self._read_for_update()
        if not current.ok:
            return StoreResult.failed(current.failure, current.detail)
        remaining = [p for p in current.value if p.id != punch_id]
        removed = len(current.value) - len(remaining)
        if removed == 0:
            return StoreResult.success(0)
        written = self._write(remaining)
        if not written.ok:
            return StoreResult.failed(written.failure, written.detail)
        return StoreResult.success(removed)

    # ---- public, never raise ----

    def enqueue(self, punch: QueuedPunchIn) -> None:
        """Append a punch to the end of the queue; storage errors are logged, not raised"""
        result = self.try_enqueue(punch)
        if result.ok:
            logger.info(f"Punch queued for offline sync: {punch.id}")
        else:
            result.unwrap_or(None, logger, f"Queueing punch {punch.id}")

    def get_all(self) -> List[QueuedPunch]:
        """All queued punches in insertion order; empty if storage is empty or unreadable"""
        return self._read().unwrap_or([], logger, "Reading offline queue")

    def remove_by_id(self, punch_id: str) -> None:
        """Drop every record with this id. Unknown ids are a no-op."""
        result = self.try_remove_by_id(punch_id)
        if result.ok and result.value:
            logger.info(f"Removed punch {punch_id} from offline queue")
        elif not result.ok:
            result.unwrap_or(None, logger, f"Removing punch {punch_id}")

    def clear_all(self) -> None:
        result = self._write([])
        if result.ok:
            logger.info("Offline queue cleared")
        else:
            result.unwrap_or(None, logger, "Clearing offline queue")

    def count(self) -> int:
        return len(self.get_all())
