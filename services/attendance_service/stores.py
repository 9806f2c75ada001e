"""Ports to the collaborators the engine depends on.

Concrete SQL adapters live in ``sql_stores``; the holiday API adapter in
``calendar.holiday_source``; the email adapter in ``dispatch``. Tests swap
in the in-memory fakes from ``tests/fakes.py``.
"""

from __future__ import annotations

from typing import Iterable, Optional, Protocol, Sequence

from services.attendance_service.domain import (
    AttendanceEntry,
    StudentFilters,
    StudentProfile,
    UserScope,
)
from services.attendance_service.models.enums import AttendanceStatus, ScopeRole
from services.attendance_service.schemas import (
    CustomHolidayEntry,
    DispatchResult,
    PublicHoliday,
    ReportPayload,
)


class AttendanceStore(Protocol):
    async def get_records_for_date(self, date: str) -> Sequence[AttendanceEntry]:
        raise NotImplementedError

    async def get_records_for_range(
        self,
        start: str,
        end: str,
        student_ids: Optional[Iterable[int]] = None,
    ) -> Sequence[AttendanceEntry]:
        raise NotImplementedError

    async def insert_if_absent(
        self,
        student_id: int,
        date: str,
        status: AttendanceStatus,
        marked_by: Optional[int],
    ) -> bool:
        """Insert unless (student_id, date) exists; True when a row was written."""
        raise NotImplementedError


class StudentStore(Protocol):
    async def list_regular_students(
        self, filters: Optional[StudentFilters] = None
    ) -> Sequence[StudentProfile]:
        raise NotImplementedError

    async def get_student(self, student_id: int) -> Optional[StudentProfile]:
        raise NotImplementedError


class RbacStore(Protocol):
    async def list_scoped_users(
        self, roles: Sequence[ScopeRole]
    ) -> Sequence[UserScope]:
        raise NotImplementedError


class HolidaySource(Protocol):
    async def fetch_year(self, year: int, country_code: str) -> list[PublicHoliday]:
        raise NotImplementedError


class CustomHolidayStore(Protocol):
    async def list_in_range(self, start: str, end: str) -> list[CustomHolidayEntry]:
        raise NotImplementedError

    async def upsert(
        self,
        date: str,
        title: Optional[str],
        description: Optional[str] = None,
        created_by: Optional[int] = None,
    ) -> CustomHolidayEntry:
        raise NotImplementedError

    async def delete(self, date: str) -> bool:
        raise NotImplementedError


class ReportDispatcher(Protocol):
    async def send(self, payload: ReportPayload) -> DispatchResult:
        raise NotImplementedError
