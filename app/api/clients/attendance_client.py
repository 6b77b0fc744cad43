"""
Client for the remote attendance API that queued punches are pushed to.
"""
from typing import Optional

import httpx

from app.core.errors import AttendanceSyncError
from app.core.logging import get_logger
from app.schemas.offline_queue import PunchType, QueuedPunch

logger = get_logger(__name__)


def build_attendance_payload(punch: QueuedPunch) -> dict:
    """
    Map a queued punch onto the attendance API's upsert body.

    The API upserts on (workerId, date), so a punch-out carries the punch-in
    fields it was queued with as well.
    """
    photo = punch.punch_out_photo if punch.type == PunchType.PUNCH_OUT else punch.punch_in_photo
    return {
        "workerId": punch.worker_id,
        "date": punch.date,
        "status": punch.status,
        "siteId": punch.site_id,
        "punchInTime": punch.punch_in_time,
        "punchOutTime": punch.punch_out_time,
        "punchInLocation": punch.punch_in_location.model_dump() if punch.punch_in_location else None,
        "punchOutLocation": punch.punch_out_location.model_dump() if punch.punch_out_location else None,
        "verified": punch.verified,
        "photo": photo,
    }


class AttendanceClient:
    """
    Writes attendance records to the backend.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 15.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Args:
            base_url: Base URL of the attendance API
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests pass a MockTransport)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    def record_attendance(self, punch: QueuedPunch) -> dict:
        """
        Push one queued punch.

        Returns:
            The saved attendance record as returned by the API

        Raises:
            AttendanceSyncError: on transport failure or a non-2xx response
        """
        payload = build_attendance_payload(punch)
        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.post(f"{self.base_url}/api/attendance", json=payload)
        except httpx.RequestError as e:
            raise AttendanceSyncError(f"Attendance API unreachable for punch {punch.id}: {e}") from e

        if response.status_code // 100 != 2:
            raise AttendanceSyncError(
                f"Attendance API rejected punch {punch.id} (status: {response.status_code})",
                status_code=response.status_code,
            )
        logger.info(f"Punch {punch.id} recorded for worker {punch.worker_id} on {punch.date}")
        try:
            return response.json()
        except ValueError:
            return {}
