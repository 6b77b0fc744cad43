"""
Clock helpers.
- Queue and cache timestamps are epoch milliseconds (UTC).
- Services take a clock callable so tests can pin "now".
"""
from datetime import datetime, timezone
from typing import Callable, Optional

UTC = timezone.utc

Clock = Callable[[], int]


def now_utc() -> datetime:
    """Current time in UTC (timezone-aware)."""
    return datetime.now(UTC)


def now_ms() -> int:
    """Current time as epoch milliseconds. Default clock for the queue and cache."""
    return int(now_utc().timestamp() * 1000)


def ms_to_utc(ms: Optional[int]) -> Optional[datetime]:
    """Convert epoch milliseconds to an aware UTC datetime."""
    if ms is None:
        return None
    return datetime.fromtimestamp(ms / 1000, tz=UTC)


def iso_8601_utc(dt: Optional[datetime]) -> Optional[str]:
    """ISO-8601 with Z for UTC. Naive datetimes are treated as UTC."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    s = dt.astimezone(UTC).isoformat()
    if s.endswith("+00:00"):
        s = s[:-6] + "Z"
    return s
