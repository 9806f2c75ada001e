"""Aggregation, scope matching, statistics and day-end orchestration."""

from services.attendance_service.services.orchestrator import (
    DayEndOrchestrator,
    RunState,
)
from services.attendance_service.services.statistics import (
    AttendanceStatisticsService,
)

__all__ = [
    "AttendanceStatisticsService",
    "DayEndOrchestrator",
    "RunState",
]
