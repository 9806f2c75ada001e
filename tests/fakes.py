"""
In-memory implementations of the store ports for unit tests.

Each fake keeps the behavior the engine relies on from the real adapter
(most importantly the (student_id, date) uniqueness of attendance rows) and
records calls so tests can assert on them.

Usage:
    attendance = FakeAttendanceStore()
    students = FakeStudentStore([make_student(1, college="GPT")])
"""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional, Sequence

from services.attendance_service.calendar import (
    MonthCalendarCache,
    NonWorkingDayResolver,
    PublicHolidayProvider,
)
from services.attendance_service.domain import (
    AttendanceEntry,
    StudentFilters,
    StudentProfile,
    UserScope,
    hierarchy_value,
)
from services.attendance_service.exceptions import (
    DispatchError,
    PersistenceError,
    UpstreamHolidaySourceError,
)
from services.attendance_service.models.enums import (
    AttendanceStatus,
    ScopeRole,
    StudentStatus,
)
from services.attendance_service.schemas import (
    CustomHolidayEntry,
    DispatchResult,
    PublicHoliday,
    ReportPayload,
)

# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


def make_student(
    student_id: int,
    college: Optional[str] = "Govt Polytechnic",
    course: Optional[str] = "Diploma",
    branch: Optional[str] = "CSE",
    batch: Optional[str] = "2024",
    year: Optional[str] = "1",
    semester: Optional[str] = "1",
    status: StudentStatus = StudentStatus.REGULAR,
) -> StudentProfile:
    return StudentProfile(
        student_id=student_id,
        admission_number=f"ADM{student_id:04d}",
        name=f"Student {student_id}",
        college=hierarchy_value(college),
        course=hierarchy_value(course),
        branch=hierarchy_value(branch),
        batch=hierarchy_value(batch),
        year=hierarchy_value(year),
        semester=hierarchy_value(semester),
        status=status,
    )


def make_scope(
    scope_id: str,
    role: ScopeRole = ScopeRole.PRINCIPAL,
    colleges: Sequence[str] = ("Govt Polytechnic",),
    courses: Sequence[str] = (),
    branches: Sequence[str] = (),
    all_courses: bool = True,
    all_branches: bool = True,
    email: Optional[str] = None,
) -> UserScope:
    return UserScope(
        id=scope_id,
        email=email or f"{scope_id}@college.test",
        role=role,
        name=scope_id.title(),
        college_names=tuple(colleges),
        course_names=tuple(courses),
        branch_names=tuple(branches),
        all_courses=all_courses,
        all_branches=all_branches,
    )


def holiday(day: str, name: str, counties: Optional[list[str]] = None) -> PublicHoliday:
    return PublicHoliday.model_validate(
        {
            "date": day,
            "localName": name,
            "name": name,
            "countryCode": "IN",
            "counties": counties,
        }
    )


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: Optional[datetime] = None):
        self.now = start or datetime(2025, 3, 1, 6, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


# ---------------------------------------------------------------------------
# Stores
# ---------------------------------------------------------------------------


class FakeAttendanceStore:
    def __init__(self, records: Iterable[AttendanceEntry] = ()):
        self.rows: dict[tuple[int, str], AttendanceEntry] = {}
        self.insert_calls = 0
        self.fail_for: set[int] = set()
        for record in records:
            self.rows[(record.student_id, record.date)] = record

    def mark(self, student_id: int, date: str, status: AttendanceStatus, marked_by: int = 99):
        self.rows[(student_id, date)] = AttendanceEntry(
            student_id=student_id, date=date, status=status, marked_by=marked_by
        )

    async def get_records_for_date(self, date: str) -> list[AttendanceEntry]:
        return [r for (_, d), r in sorted(self.rows.items()) if d == date]

    async def get_records_for_range(
        self,
        start: str,
        end: str,
        student_ids: Optional[Iterable[int]] = None,
    ) -> list[AttendanceEntry]:
        wanted = set(student_ids) if student_ids is not None else None
        return [
            r
            for (sid, d), r in sorted(self.rows.items())
            if start <= d <= end and (wanted is None or sid in wanted)
        ]

    async def insert_if_absent(
        self,
        student_id: int,
        date: str,
        status: AttendanceStatus,
        marked_by: Optional[int],
    ) -> bool:
        self.insert_calls += 1
        if student_id in self.fail_for:
            raise PersistenceError(f"Failed to insert attendance for student {student_id}")
        # Yield so concurrent runs interleave like real database round trips
        await asyncio.sleep(0)
        key = (student_id, date)
        if key in self.rows:
            return False
        self.rows[key] = AttendanceEntry(
            student_id=student_id,
            date=date,
            status=AttendanceStatus(status),
            marked_by=marked_by,
        )
        return True


class FakeStudentStore:
    def __init__(self, students: Iterable[StudentProfile] = ()):
        self.students = list(students)

    async def list_regular_students(
        self, filters: Optional[StudentFilters] = None
    ) -> list[StudentProfile]:
        return [
            s
            for s in self.students
            if s.status is StudentStatus.REGULAR
            and (filters is None or filters.accepts(s))
        ]

    async def get_student(self, student_id: int) -> Optional[StudentProfile]:
        return next((s for s in self.students if s.student_id == student_id), None)


class FakeRbacStore:
    def __init__(self, scopes: Iterable[UserScope] = ()):
        self.scopes = list(scopes)

    async def list_scoped_users(self, roles: Sequence[ScopeRole]) -> list[UserScope]:
        return [s for s in self.scopes if s.role in roles]


class FakeHolidaySource:
    """HolidaySource returning canned holidays and counting fetches."""

    def __init__(self, holidays: Iterable[PublicHoliday] = (), fail: bool = False):
        self.holidays = list(holidays)
        self.fail = fail
        self.calls: list[tuple[int, str]] = []

    async def fetch_year(self, year: int, country_code: str) -> list[PublicHoliday]:
        self.calls.append((year, country_code))
        await asyncio.sleep(0)
        if self.fail:
            raise UpstreamHolidaySourceError("Holiday API request timed out")
        return [h for h in self.holidays if h.date.startswith(f"{year:04d}-")]


class FakeCustomHolidayStore:
    def __init__(self, entries: Iterable[CustomHolidayEntry] = ()):
        self.entries = {e.date: e for e in entries}
        self.calls = 0
        self.fail = False

    async def list_in_range(self, start: str, end: str) -> list[CustomHolidayEntry]:
        self.calls += 1
        if self.fail:
            raise PersistenceError("Failed to load custom holidays")
        return [e for d, e in sorted(self.entries.items()) if start <= d <= end]

    async def upsert(
        self,
        date: str,
        title: Optional[str],
        description: Optional[str] = None,
        created_by: Optional[int] = None,
    ) -> CustomHolidayEntry:
        entry = CustomHolidayEntry(
            date=date,
            title=(title or "").strip() or "Holiday",
            description=(description or "").strip() or None,
        )
        self.entries[date] = entry
        return entry

    async def delete(self, date: str) -> bool:
        return self.entries.pop(date, None) is not None


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------


class RecordingDispatcher:
    """ReportDispatcher that records payloads; can fail chosen recipients."""

    def __init__(
        self,
        fail_emails: Iterable[str] = (),
        raise_emails: Iterable[str] = (),
        delay: float = 0,
    ):
        self.sent: list[ReportPayload] = []
        self.fail_emails = set(fail_emails)
        self.raise_emails = set(raise_emails)
        self.delay = delay
        self.in_flight = 0
        self.max_in_flight = 0

    async def send(self, payload: ReportPayload) -> DispatchResult:
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            if payload.recipient_email in self.raise_emails:
                raise DispatchError("connection refused")
            if payload.recipient_email in self.fail_emails:
                return DispatchResult(sent=False, error="email API returned 500")
            self.sent.append(payload)
            return DispatchResult(sent=True)
        finally:
            self.in_flight -= 1


# ---------------------------------------------------------------------------
# Calendar wiring
# ---------------------------------------------------------------------------


def no_fallback(country_code: str, year: int) -> list:
    return []


def build_resolver(
    source=None,
    custom=None,
    clock=None,
    fallback=no_fallback,
    region_code=None,
) -> NonWorkingDayResolver:
    """Resolver over fakes; the static fallback dataset is off unless passed."""
    clock = clock or FakeClock()
    provider = PublicHolidayProvider(
        source or FakeHolidaySource(),
        ttl_seconds=6 * 60 * 60,
        clock=clock,
        fallback=fallback,
    )
    return NonWorkingDayResolver(
        holidays=provider,
        custom_holidays=custom or FakeCustomHolidayStore(),
        cache=MonthCalendarCache(4 * 60 * 60, clock=clock),
        country_code="IN",
        region_code=region_code,
        clock=clock,
    )
