"""Non-working day calendar: Sundays, public holidays and custom holidays."""

from services.attendance_service.calendar.cache import (
    MonthCalendar,
    MonthCalendarCache,
    MonthKey,
)
from services.attendance_service.calendar.holiday_source import (
    NagerHolidaySource,
    PublicHolidayProvider,
)
from services.attendance_service.calendar.resolver import NonWorkingDayResolver

__all__ = [
    "MonthCalendar",
    "MonthCalendarCache",
    "MonthKey",
    "NagerHolidaySource",
    "NonWorkingDayResolver",
    "PublicHolidayProvider",
]
