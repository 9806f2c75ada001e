"""SQLAlchemy adapters for the store ports.

Each adapter wraps one AsyncSession. Writes commit immediately; any
SQLAlchemyError is rolled back and re-raised as PersistenceError so callers
only ever see the engine's own error taxonomy.
"""

from datetime import date as date_type
from typing import Iterable, NoReturn, Optional, Sequence

from libs.common.datetime_utils import utc_now
from libs.common.logging import get_logger
from services.attendance_service.calendar.dates import (
    ISO_FORMAT,
    normalize_date,
    parse_date,
)
from services.attendance_service.domain import (
    AttendanceEntry,
    StudentFilters,
    StudentProfile,
    UserScope,
    hierarchy_value,
)
from services.attendance_service.exceptions import PersistenceError
from services.attendance_service.models import (
    AttendanceRecord,
    Branch,
    College,
    Course,
    CustomHoliday,
    RbacUser,
    Student,
)
from services.attendance_service.models.enums import (
    AttendanceStatus,
    ScopeRole,
    StudentStatus,
)
from services.attendance_service.schemas import CustomHolidayEntry
from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

DEFAULT_HOLIDAY_TITLE = "Holiday"


def _to_date(value: str) -> date_type:
    return parse_date(value)


def _to_iso(value: date_type) -> str:
    return value.strftime(ISO_FORMAT)


class _SqlStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _fail(self, action: str, error: SQLAlchemyError) -> NoReturn:
        await self.db.rollback()
        logger.error(f"Database error while trying to {action}: {error}")
        raise PersistenceError(f"Failed to {action}") from error


# ---------------------------------------------------------------------------
# Attendance
# ---------------------------------------------------------------------------


def _entry(record: AttendanceRecord) -> AttendanceEntry:
    return AttendanceEntry(
        student_id=record.student_id,
        date=_to_iso(record.attendance_date),
        status=AttendanceStatus(record.status),
        marked_by=record.marked_by,
    )


class SqlAttendanceStore(_SqlStore):
    async def get_records_for_date(self, date: str) -> list[AttendanceEntry]:
        query = select(AttendanceRecord).where(
            AttendanceRecord.attendance_date == _to_date(date)
        )
        try:
            result = await self.db.execute(query)
        except SQLAlchemyError as e:
            await self._fail(f"load attendance for {date}", e)
        return [_entry(r) for r in result.scalars().all()]

    async def get_records_for_range(
        self,
        start: str,
        end: str,
        student_ids: Optional[Iterable[int]] = None,
    ) -> list[AttendanceEntry]:
        query = select(AttendanceRecord).where(
            AttendanceRecord.attendance_date >= _to_date(start),
            AttendanceRecord.attendance_date <= _to_date(end),
        )
        if student_ids is not None:
            query = query.where(AttendanceRecord.student_id.in_(list(student_ids)))
        query = query.order_by(
            AttendanceRecord.student_id, AttendanceRecord.attendance_date
        )
        try:
            result = await self.db.execute(query)
        except SQLAlchemyError as e:
            await self._fail(f"load attendance for {start}..{end}", e)
        return [_entry(r) for r in result.scalars().all()]

    async def insert_if_absent(
        self,
        student_id: int,
        date: str,
        status: AttendanceStatus,
        marked_by: Optional[int],
    ) -> bool:
        admission_number = select(Student.admission_number).where(
            Student.id == student_id
        ).scalar_subquery()
        stmt = (
            insert(AttendanceRecord)
            .values(
                student_id=student_id,
                admission_number=admission_number,
                attendance_date=_to_date(date),
                status=AttendanceStatus(status),
                marked_by=marked_by,
            )
            .on_conflict_do_nothing(constraint="uq_student_attendance_date")
        )
        try:
            result = await self.db.execute(stmt)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self._fail(f"insert attendance for student {student_id} on {date}", e)
        return result.rowcount == 1


# ---------------------------------------------------------------------------
# Students
# ---------------------------------------------------------------------------

_FILTER_COLUMNS = {
    "college": Student.college,
    "course": Student.course,
    "branch": Student.branch,
    "batch": Student.batch,
    "year": Student.current_year,
    "semester": Student.current_semester,
}


def _profile(student: Student) -> StudentProfile:
    try:
        status = StudentStatus(student.student_status)
    except ValueError:
        status = StudentStatus.OTHER
    return StudentProfile(
        student_id=student.id,
        admission_number=student.admission_number,
        name=student.student_name,
        college=hierarchy_value(student.college),
        course=hierarchy_value(student.course),
        branch=hierarchy_value(student.branch),
        batch=hierarchy_value(student.batch),
        year=hierarchy_value(student.current_year),
        semester=hierarchy_value(student.current_semester),
        status=status,
    )


class SqlStudentStore(_SqlStore):
    async def list_regular_students(
        self, filters: Optional[StudentFilters] = None
    ) -> list[StudentProfile]:
        query = select(Student).where(
            Student.student_status == StudentStatus.REGULAR.value
        )
        if filters is not None:
            for attr, column in _FILTER_COLUMNS.items():
                wanted = getattr(filters, attr)
                if wanted is not None:
                    query = query.where(column == wanted)
        query = query.order_by(Student.id)

        try:
            result = await self.db.execute(query)
        except SQLAlchemyError as e:
            await self._fail("list regular students", e)

        profiles = [_profile(s) for s in result.scalars().all()]
        if filters is not None:
            # Exclusions compare normalized values, so they run in Python
            profiles = [p for p in profiles if filters.accepts(p)]
        return profiles

    async def get_student(self, student_id: int) -> Optional[StudentProfile]:
        try:
            student = await self.db.get(Student, student_id)
        except SQLAlchemyError as e:
            await self._fail(f"load student {student_id}", e)
        return _profile(student) if student else None


# ---------------------------------------------------------------------------
# RBAC scopes
# ---------------------------------------------------------------------------


def _ids(many: Optional[list], single: Optional[int]) -> list[int]:
    """List scope ids, falling back to the single-id column when empty."""
    values = many if many else ([single] if single is not None else [])
    ids = []
    for value in values:
        try:
            ids.append(int(value))
        except (TypeError, ValueError):
            continue
    return ids


class SqlRbacStore(_SqlStore):
    async def _names(self, model, ids: set[int]) -> dict[int, str]:
        if not ids:
            return {}
        result = await self.db.execute(
            select(model.id, model.name).where(
                model.id.in_(ids), model.is_active.is_(True)
            )
        )
        return {row.id: row.name for row in result.all()}

    async def list_scoped_users(self, roles: Sequence[ScopeRole]) -> list[UserScope]:
        query = select(RbacUser).where(
            RbacUser.role.in_([ScopeRole(r).value for r in roles]),
            RbacUser.is_active.is_(True),
        )
        try:
            users = (await self.db.execute(query)).scalars().all()

            user_ids = {
                u.id: (
                    _ids(u.college_ids, u.college_id),
                    _ids(u.course_ids, u.course_id),
                    _ids(u.branch_ids, u.branch_id),
                )
                for u in users
            }
            colleges = await self._names(
                College, {i for c, _, _ in user_ids.values() for i in c}
            )
            courses = await self._names(
                Course, {i for _, c, _ in user_ids.values() for i in c}
            )
            branches = await self._names(
                Branch, {i for _, _, b in user_ids.values() for i in b}
            )
        except SQLAlchemyError as e:
            await self._fail("load RBAC scopes", e)

        scopes = []
        for user in users:
            if not user.email:
                logger.warning(f"RBAC user {user.id} has no email; skipping")
                continue
            college_ids, course_ids, branch_ids = user_ids[user.id]
            scopes.append(
                UserScope(
                    id=str(user.id),
                    email=user.email,
                    role=ScopeRole(user.role),
                    name=user.name,
                    college_names=tuple(
                        sorted({colleges[i] for i in college_ids if i in colleges})
                    ),
                    course_names=tuple(
                        sorted({courses[i] for i in course_ids if i in courses})
                    ),
                    branch_names=tuple(
                        sorted({branches[i] for i in branch_ids if i in branches})
                    ),
                    all_courses=bool(user.all_courses),
                    all_branches=bool(user.all_branches),
                )
            )
        return scopes


# ---------------------------------------------------------------------------
# Custom holidays
# ---------------------------------------------------------------------------


def _holiday(row: CustomHoliday) -> CustomHolidayEntry:
    return CustomHolidayEntry(
        date=_to_iso(row.holiday_date),
        title=row.title or DEFAULT_HOLIDAY_TITLE,
        description=row.description,
    )


class SqlCustomHolidayStore(_SqlStore):
    async def list_in_range(self, start: str, end: str) -> list[CustomHolidayEntry]:
        query = (
            select(CustomHoliday)
            .where(
                CustomHoliday.holiday_date >= _to_date(start),
                CustomHoliday.holiday_date <= _to_date(end),
            )
            .order_by(CustomHoliday.holiday_date)
        )
        try:
            result = await self.db.execute(query)
        except SQLAlchemyError as e:
            await self._fail(f"load custom holidays for {start}..{end}", e)
        return [_holiday(row) for row in result.scalars().all()]

    async def upsert(
        self,
        date: str,
        title: Optional[str],
        description: Optional[str] = None,
        created_by: Optional[int] = None,
    ) -> CustomHolidayEntry:
        title = (title or "").strip() or DEFAULT_HOLIDAY_TITLE
        description = (description or "").strip() or None
        stmt = insert(CustomHoliday).values(
            holiday_date=_to_date(date),
            title=title,
            description=description,
            created_by=created_by,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["holiday_date"],
            set_=dict(
                title=stmt.excluded.title,
                description=stmt.excluded.description,
                updated_at=utc_now(),
            ),
        )
        try:
            await self.db.execute(stmt)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self._fail(f"save custom holiday {date}", e)
        return CustomHolidayEntry(
            date=normalize_date(date), title=title, description=description
        )

    async def delete(self, date: str) -> bool:
        stmt = delete(CustomHoliday).where(CustomHoliday.holiday_date == _to_date(date))
        try:
            result = await self.db.execute(stmt)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self._fail(f"delete custom holiday {date}", e)
        return result.rowcount > 0
