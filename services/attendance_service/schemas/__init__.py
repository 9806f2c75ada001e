"""Attendance Service schemas package."""

from services.attendance_service.schemas.main import (
    CohortStats,
    CustomHolidayEntry,
    DailyTotals,
    DayInfo,
    DispatchResult,
    DispatchSummary,
    GroupStatistics,
    GroupSummary,
    MonthCalendarView,
    NonWorkingDetail,
    PublicHoliday,
    RangeInfo,
    RangeStatistics,
    ReportPayload,
    StudentHistory,
    StudentRangeRow,
    StudentStats,
    StudentSummary,
)

__all__ = [
    "CohortStats",
    "CustomHolidayEntry",
    "DailyTotals",
    "DayInfo",
    "DispatchResult",
    "DispatchSummary",
    "GroupStatistics",
    "GroupSummary",
    "MonthCalendarView",
    "NonWorkingDetail",
    "PublicHoliday",
    "RangeInfo",
    "RangeStatistics",
    "ReportPayload",
    "StudentHistory",
    "StudentRangeRow",
    "StudentStats",
    "StudentSummary",
]
