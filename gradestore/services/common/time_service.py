from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_MS = timedelta(milliseconds=1)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_epoch_ms(dt: datetime) -> int:
    """Stored timestamp for ``dt``; naive datetimes are taken as UTC."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return (dt - EPOCH) // _MS


def from_epoch_ms(ms: Optional[int]) -> Optional[datetime]:
    if ms is None:
        return None
    return EPOCH + timedelta(milliseconds=int(ms))
