"""
Background tasks for day-end attendance reports.

Both the worker job and manual runs go through `run_day_end_reports`, which
wires the SQL stores, the holiday source and the email dispatcher into a
DayEndOrchestrator for one date.
"""

from functools import lru_cache
from typing import Optional

from libs.common.config import get_settings
from libs.common.datetime_utils import local_today
from libs.common.logging import get_logger
from libs.db.session import get_async_db
from services.attendance_service.calendar import (
    MonthCalendarCache,
    NagerHolidaySource,
    NonWorkingDayResolver,
    PublicHolidayProvider,
)
from services.attendance_service.calendar.dates import DateInput, normalize_date
from services.attendance_service.dispatch import EmailReportDispatcher
from services.attendance_service.schemas import DispatchSummary
from services.attendance_service.services import DayEndOrchestrator
from services.attendance_service.sql_stores import (
    SqlAttendanceStore,
    SqlCustomHolidayStore,
    SqlRbacStore,
    SqlStudentStore,
)
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


# Calendar caches outlive a single run so repeated runs reuse them


@lru_cache
def get_holiday_provider() -> PublicHolidayProvider:
    return PublicHolidayProvider(NagerHolidaySource())


@lru_cache
def get_month_cache() -> MonthCalendarCache:
    return MonthCalendarCache(get_settings().CALENDAR_CACHE_TTL_SECONDS)


def build_resolver(db: AsyncSession) -> NonWorkingDayResolver:
    return NonWorkingDayResolver(
        holidays=get_holiday_provider(),
        custom_holidays=SqlCustomHolidayStore(db),
        cache=get_month_cache(),
    )


def build_orchestrator(db: AsyncSession) -> DayEndOrchestrator:
    return DayEndOrchestrator(
        attendance=SqlAttendanceStore(db),
        students=SqlStudentStore(db),
        rbac=SqlRbacStore(db),
        resolver=build_resolver(db),
        dispatcher=EmailReportDispatcher(),
    )


async def run_day_end_reports(
    date: Optional[DateInput] = None, dry_run: bool = False
) -> Optional[DispatchSummary]:
    """
    Run the day-end auto-complete and report dispatch for one date.

    Args:
        date: Attendance date; defaults to today in the configured zone.
        dry_run: Evaluate and plan sends without writing or emailing.
    """
    day = normalize_date(date if date is not None else local_today())
    summary = None

    async for db in get_async_db():
        summary = await build_orchestrator(db).run(day, dry_run=dry_run)

    if summary and summary.errors:
        logger.warning(
            f"Day-end run for {day} finished with {len(summary.errors)} error(s)"
        )
    return summary
