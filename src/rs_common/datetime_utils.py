"""UTC and local wall-clock helpers."""

from datetime import datetime, time, timezone
from zoneinfo import ZoneInfo


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def local_wall_clock(moment: datetime, tz_name: str) -> time:
    """Time of day of *moment* as read on a wall clock in *tz_name*.

    Naive datetimes are taken to already be local wall-clock time.
    """
    if moment.tzinfo is None:
        return moment.time().replace(tzinfo=None)
    return moment.astimezone(ZoneInfo(tz_name)).time().replace(tzinfo=None)
