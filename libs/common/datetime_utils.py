"""Datetime utilities.

Usage:
    from libs.common.datetime_utils import utc_now, local_today

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    attendance_date = local_today()
"""

from datetime import date, datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from libs.common.config import get_settings


def utc_now() -> datetime:
    """Return timezone-aware UTC datetime.

    Always use this for timestamps in the database.
    """
    return datetime.now(timezone.utc)


def local_zone() -> ZoneInfo:
    """Return the single configured institution time zone."""
    return ZoneInfo(get_settings().TIMEZONE)


def local_today(now: Optional[datetime] = None) -> date:
    """Return the calendar date in the configured zone.

    Attendance dates never carry a time of day, so "today" must be computed
    in the institution's zone rather than in UTC.
    """
    now = now or utc_now()
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(local_zone()).date()
