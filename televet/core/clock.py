"""Clock helpers shared by the allocator.

Timestamps are stored as naive UTC datetimes. Doctor working hours are
interpreted in ``SCHEDULING_TIMEZONE``.
"""

from datetime import date, datetime, time, timezone
from zoneinfo import ZoneInfo

from televet.core import config


def utc_now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_scheduling_time(moment: datetime) -> datetime:
    """Convert a naive UTC datetime to naive wall-clock time in the scheduling zone."""
    if config.SCHEDULING_TIMEZONE.upper() == "UTC":
        return moment
    aware = moment.replace(tzinfo=timezone.utc)
    return aware.astimezone(ZoneInfo(config.SCHEDULING_TIMEZONE)).replace(tzinfo=None)


def day_bounds(day: date) -> tuple[datetime, datetime]:
    return datetime.combine(day, time.min), datetime.combine(day, time.max)
