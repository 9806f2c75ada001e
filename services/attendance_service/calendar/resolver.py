"""Non-working day resolution.

A date is non-working when it is a Sunday, a public holiday for the
configured country (and region), or an institute-declared custom holiday.
Month calendars are built on demand, cached for a few hours, and merged for
range queries.
"""

from typing import Optional

from libs.common.config import get_settings
from libs.common.datetime_utils import utc_now
from libs.common.logging import get_logger
from services.attendance_service.calendar.cache import (
    Clock,
    MonthCalendar,
    MonthCalendarCache,
    MonthKey,
)
from services.attendance_service.calendar.dates import (
    DateInput,
    ISO_FORMAT,
    iter_months,
    month_bounds,
    normalize_date,
    parse_date,
    sundays_in_month,
)
from services.attendance_service.calendar.holiday_source import PublicHolidayProvider
from services.attendance_service.exceptions import (
    InvalidDateError,
    InvalidRangeError,
    PersistenceError,
)
from services.attendance_service.schemas import (
    CustomHolidayEntry,
    DayInfo,
    MonthCalendarView,
    NonWorkingDetail,
    PublicHoliday,
    RangeInfo,
)
from services.attendance_service.stores import CustomHolidayStore

logger = get_logger(__name__)

MIN_YEAR = 2000
MAX_YEAR = 2100


def _check_year(year: int) -> None:
    if not MIN_YEAR <= year <= MAX_YEAR:
        raise InvalidDateError(
            f"Year {year} is outside the supported range {MIN_YEAR}-{MAX_YEAR}"
        )


class NonWorkingDayResolver:
    def __init__(
        self,
        holidays: PublicHolidayProvider,
        custom_holidays: CustomHolidayStore,
        cache: Optional[MonthCalendarCache] = None,
        country_code: Optional[str] = None,
        region_code: Optional[str] = None,
        clock: Clock = utc_now,
    ):
        settings = get_settings()
        self.holidays = holidays
        self.custom_holidays = custom_holidays
        self.cache = cache or MonthCalendarCache(
            settings.CALENDAR_CACHE_TTL_SECONDS, clock=clock
        )
        self.country_code = (country_code or settings.HOLIDAY_COUNTRY).upper()
        self.region_code = region_code if region_code is not None else settings.HOLIDAY_REGION
        self.clock = clock

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def get_day_info(self, value: DateInput) -> DayInfo:
        day = normalize_date(value)
        year, month = int(day[:4]), int(day[5:7])
        _check_year(year)
        calendar = await self._month(year, month)

        is_sunday = day in calendar.sundays
        public_holiday = calendar.public_holidays.get(day)
        custom_holiday = calendar.custom_holidays.get(day)

        reasons = []
        if is_sunday:
            reasons.append("Sunday")
        if public_holiday:
            reasons.append(public_holiday.local_name or public_holiday.name or "Public holiday")
        if custom_holiday:
            reasons.append(custom_holiday.title or "Institute holiday")

        return DayInfo(
            date=day,
            is_non_working=bool(is_sunday or public_holiday or custom_holiday),
            is_sunday=is_sunday,
            public_holiday=public_holiday,
            custom_holiday=custom_holiday,
            reasons=reasons,
        )

    async def get_range_info(self, start: DateInput, end: DateInput) -> RangeInfo:
        start_day, end_day = parse_date(start), parse_date(end)
        _check_year(start_day.year)
        _check_year(end_day.year)
        if start_day > end_day:
            raise InvalidRangeError(
                f"Invalid date range supplied: {start_day} is after {end_day}"
            )
        lo, hi = start_day.strftime(ISO_FORMAT), end_day.strftime(ISO_FORMAT)

        details: dict[str, NonWorkingDetail] = {}

        def detail(day: str) -> NonWorkingDetail:
            return details.setdefault(day, NonWorkingDetail())

        for year, month in iter_months(start_day, end_day):
            calendar = await self._month(year, month)
            for day in calendar.sundays:
                if lo <= day <= hi:
                    detail(day).is_sunday = True
            for day, holiday in calendar.public_holidays.items():
                if lo <= day <= hi:
                    detail(day).public_holiday = holiday
            for day, custom in calendar.custom_holidays.items():
                if lo <= day <= hi:
                    detail(day).custom_holiday = custom

        ordered = dict(sorted(details.items()))
        return RangeInfo(start=lo, end=hi, dates=set(ordered), details=ordered)

    async def get_month_calendar(self, year: int, month: int) -> MonthCalendarView:
        if not (MIN_YEAR <= year <= MAX_YEAR) or not (1 <= month <= 12):
            raise InvalidDateError(f"Invalid month or year supplied: {year}-{month}")
        calendar = await self._month(year, month)
        return MonthCalendarView(
            year=year,
            month=month,
            country_code=calendar.key.country_code,
            sundays=sorted(calendar.sundays),
            public_holidays=[calendar.public_holidays[d] for d in sorted(calendar.public_holidays)],
            custom_holidays=[calendar.custom_holidays[d] for d in sorted(calendar.custom_holidays)],
            non_working_dates=sorted(calendar.non_working_dates),
            fetched_at=calendar.fetched_at,
        )

    def invalidate(self, year: Optional[int] = None, month: Optional[int] = None) -> int:
        """Drop cached month calendars; returns how many were dropped."""
        dropped = self.cache.invalidate_month(year, month)
        if dropped:
            logger.info(f"Invalidated {dropped} cached month calendar(s)")
        return dropped

    # ------------------------------------------------------------------
    # Month calendars
    # ------------------------------------------------------------------

    async def _month(self, year: int, month: int) -> MonthCalendar:
        key = MonthKey(year=year, month=month, country_code=self.country_code)
        return await self.cache.get_or_build(
            key,
            lambda: self._build_month(key),
            cacheable=lambda calendar: calendar.complete,
        )

    async def _build_month(self, key: MonthKey) -> MonthCalendar:
        first, last = month_bounds(key.year, key.month)
        public = await self.holidays.get_month(
            key.year, key.month, key.country_code, self.region_code
        )

        complete = True
        custom: list[CustomHolidayEntry] = []
        try:
            custom = await self.custom_holidays.list_in_range(
                first.strftime(ISO_FORMAT), last.strftime(ISO_FORMAT)
            )
        except PersistenceError as e:
            # Served once without custom holidays, not cached
            logger.warning(
                f"Custom holidays unavailable for {key.year}-{key.month:02d}: {e}"
            )
            complete = False

        # First listed holiday wins when two share a date
        public_by_date: dict[str, PublicHoliday] = {}
        for holiday in public:
            public_by_date.setdefault(holiday.date, holiday)

        now = self.clock()
        return MonthCalendar(
            key=key,
            sundays=frozenset(sundays_in_month(key.year, key.month)),
            public_holidays=public_by_date,
            custom_holidays={c.date: c for c in custom},
            fetched_at=now,
            expires_at=now + self.cache.ttl,
            complete=complete,
        )
