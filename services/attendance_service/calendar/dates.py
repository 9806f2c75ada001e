"""Date parsing and calendar arithmetic.

Every date that crosses the engine boundary is an ISO ``YYYY-MM-DD`` string
in the configured zone. Helpers here turn loose inputs into that form and do
the month/week arithmetic the resolver needs; none of them call out.
"""

import calendar
from datetime import date, datetime, timedelta
from typing import Iterator, Tuple, Union

from libs.common.datetime_utils import local_zone
from services.attendance_service.exceptions import InvalidDateError

DateInput = Union[str, date, datetime]

ISO_FORMAT = "%Y-%m-%d"
SUNDAY = 7


def parse_date(value: DateInput) -> date:
    """Parse a loose date input into a ``date``.

    Accepts ``date`` and ``datetime`` objects, ``YYYY-MM-DD`` strings and full
    ISO-8601 datetime strings. Aware datetimes are converted to the configured
    zone before the date part is taken; naive ones are taken as local.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(local_zone())
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise InvalidDateError(f"Invalid date supplied: {value!r}")

    text = value.strip()
    if not text:
        raise InvalidDateError("Invalid date supplied: empty string")

    try:
        if len(text) == 10:
            return date.fromisoformat(text)
        return parse_date(datetime.fromisoformat(text.replace("Z", "+00:00")))
    except ValueError as exc:
        raise InvalidDateError(f"Invalid date supplied: {value!r}") from exc


def normalize_date(value: DateInput) -> str:
    """Return ``value`` as a ``YYYY-MM-DD`` string or raise InvalidDateError."""
    return parse_date(value).strftime(ISO_FORMAT)


def is_sunday(day: date) -> bool:
    return day.isoweekday() == SUNDAY


def iter_dates(start: date, end: date) -> Iterator[date]:
    """Yield every date from ``start`` to ``end`` inclusive."""
    cursor = start
    while cursor <= end:
        yield cursor
        cursor += timedelta(days=1)


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def iter_months(start: date, end: date) -> Iterator[Tuple[int, int]]:
    """Yield (year, month) for every month overlapping [start, end]."""
    year, month = start.year, start.month
    while (year, month) <= (end.year, end.month):
        yield year, month
        month += 1
        if month > 12:
            year, month = year + 1, 1


def sundays_in_month(year: int, month: int) -> list[str]:
    first, last = month_bounds(year, month)
    return [d.strftime(ISO_FORMAT) for d in iter_dates(first, last) if is_sunday(d)]
