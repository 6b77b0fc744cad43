"""
Offline punch queue schemas.

JSON field names are camelCase, matching the persisted queue layout; Python
attributes are snake_case.
"""
import enum
from datetime import date
from typing import Optional, List

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from app.constants import PUNCH_IN, PUNCH_OUT


class PunchType(str, enum.Enum):
    PUNCH_IN = PUNCH_IN
    PUNCH_OUT = PUNCH_OUT


class GeoPoint(BaseModel):
    """Latitude/longitude pair recorded with a punch"""
    lat: float = Field(..., ge=-90, le=90, description="Latitude")
    lng: float = Field(..., ge=-180, le=180, description="Longitude")


class QueuedPunchIn(BaseModel):
    """A punch handed to the queue by the caller (timestamp is assigned on insert)"""
    id: str = Field(..., min_length=1, description="Caller-supplied, unique per punch event")
    worker_id: str = Field(..., min_length=1)
    site_id: str = Field(..., min_length=1)
    date: str = Field(..., description="Calendar date YYYY-MM-DD")
    type: PunchType
    status: str = Field(..., description="Attendance status label, e.g. PRESENT")
    verified: bool = Field(default=False, description="Location validated against the site geofence")
    punch_in_time: Optional[str] = None
    punch_out_time: Optional[str] = None
    punch_in_location: Optional[GeoPoint] = None
    punch_out_location: Optional[GeoPoint] = None
    punch_in_photo: Optional[str] = Field(None, description="data-URL or remote URL")
    punch_out_photo: Optional[str] = Field(None, description="data-URL or remote URL")

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @field_validator("date")
    @classmethod
    def check_date(cls, v: str) -> str:
        try:
            date.fromisoformat(v)
        except ValueError:
            raise ValueError("date must be a calendar date in YYYY-MM-DD form")
        if len(v) != 10:
            raise ValueError("date must be a calendar date in YYYY-MM-DD form")
        return v

    @model_validator(mode="after")
    def check_type_fields(self):
        """Punch-out fields make no sense on a punch-in record"""
        if self.type == PunchType.PUNCH_IN and (
            self.punch_out_time or self.punch_out_location or self.punch_out_photo
        ):
            raise ValueError("PUNCH_IN records cannot carry punch-out fields")
        return self

    def to_record(self) -> dict:
        """Persisted JSON form (camelCase keys, unset optionals dropped)"""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class QueuedPunch(QueuedPunchIn):
    """A punch as stored in the queue"""
    timestamp: int = Field(..., description="Queueing time, epoch milliseconds")


class EnqueueResponse(BaseModel):
    queued: bool
    count: int
    reason: Optional[str] = None


class QueueCountOut(BaseModel):
    count: int


class DrainSummaryOut(BaseModel):
    attempted: int
    synced: int
    failed: int
    remaining: int
    skipped_offline: bool
    failed_ids: List[str] = []

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class NetworkStatusOut(BaseModel):
    connected: bool
