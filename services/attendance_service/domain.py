"""In-memory domain types shared by the aggregation, scope and dispatch code.

These are plain value objects built from store rows; they never touch the
database and live only for one query or one day-end run.
"""

from dataclasses import dataclass, field
from typing import NamedTuple, Optional, Union

from services.attendance_service.models.enums import (
    AttendanceStatus,
    ScopeRole,
    StudentStatus,
)


class Unspecified:
    """Marker for a hierarchy attribute the student record does not carry."""

    _instance: Optional["Unspecified"] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSPECIFIED"

    def __str__(self) -> str:
        return "Unspecified"

    def __lt__(self, other) -> bool:
        # Sorts after every known name
        return False

    def __gt__(self, other) -> bool:
        return not isinstance(other, Unspecified)


UNSPECIFIED = Unspecified()

HierarchyValue = Union[str, Unspecified]

_LEGACY_UNKNOWN = {"unknown", "-", "n/a"}


def hierarchy_value(raw: Optional[object]) -> HierarchyValue:
    """Map a raw column value to a known name or UNSPECIFIED."""
    if raw is None:
        return UNSPECIFIED
    text = str(raw).strip()
    if not text or text.lower() in _LEGACY_UNKNOWN:
        return UNSPECIFIED
    return text


def display(value: HierarchyValue) -> str:
    """Render a hierarchy value for reports and summaries."""
    return str(value)


@dataclass(frozen=True)
class AttendanceEntry:
    """One attendance row: a student's status on one date."""

    student_id: int
    date: str
    status: AttendanceStatus
    marked_by: Optional[int] = None

    @property
    def auto_marked(self) -> bool:
        return self.marked_by is None


@dataclass(frozen=True)
class StudentProfile:
    student_id: int
    admission_number: Optional[str] = None
    name: Optional[str] = None
    college: HierarchyValue = UNSPECIFIED
    course: HierarchyValue = UNSPECIFIED
    branch: HierarchyValue = UNSPECIFIED
    batch: HierarchyValue = UNSPECIFIED
    year: HierarchyValue = UNSPECIFIED
    semester: HierarchyValue = UNSPECIFIED
    status: StudentStatus = StudentStatus.REGULAR

    @property
    def group_key(self) -> "GroupKey":
        return GroupKey(
            college=self.college,
            course=self.course,
            branch=self.branch,
            batch=self.batch,
            year=self.year,
            semester=self.semester,
        )


@dataclass(frozen=True)
class StudentFilters:
    """Narrowing filters for student listings; None means "any"."""

    college: Optional[str] = None
    course: Optional[str] = None
    branch: Optional[str] = None
    batch: Optional[str] = None
    year: Optional[str] = None
    semester: Optional[str] = None
    exclude_courses: tuple[str, ...] = ()
    exclude_admission_numbers: tuple[str, ...] = ()

    def accepts(self, student: StudentProfile) -> bool:
        for attr in ("college", "course", "branch", "batch", "year", "semester"):
            wanted = getattr(self, attr)
            if wanted is not None and getattr(student, attr) != wanted:
                return False
        if student.course in self.exclude_courses:
            return False
        if student.admission_number in self.exclude_admission_numbers:
            return False
        return True


@dataclass(frozen=True, order=True)
class GroupKey:
    college: HierarchyValue
    course: HierarchyValue
    branch: HierarchyValue
    batch: HierarchyValue
    year: HierarchyValue
    semester: HierarchyValue

    def label(self) -> str:
        return " / ".join(
            display(v)
            for v in (self.college, self.course, self.batch, self.branch, self.year, self.semester)
        )


@dataclass
class AttendanceGroup:
    """A cohort and its recorded statuses for a single date."""

    key: GroupKey
    students: list[StudentProfile] = field(default_factory=list)
    statuses: dict[int, AttendanceStatus] = field(default_factory=dict)

    @property
    def college(self) -> HierarchyValue:
        return self.key.college

    @property
    def course(self) -> HierarchyValue:
        return self.key.course

    @property
    def branch(self) -> HierarchyValue:
        return self.key.branch

    @property
    def student_ids(self) -> list[int]:
        return [s.student_id for s in self.students]

    @property
    def total(self) -> int:
        return len(self.students)

    def _count(self, status: AttendanceStatus) -> int:
        return sum(1 for s in self.statuses.values() if s == status)

    @property
    def present(self) -> int:
        return self._count(AttendanceStatus.PRESENT)

    @property
    def absent(self) -> int:
        return self._count(AttendanceStatus.ABSENT)

    @property
    def holiday(self) -> int:
        return self._count(AttendanceStatus.HOLIDAY)

    @property
    def marked(self) -> int:
        return self.present + self.absent + self.holiday

    @property
    def unmarked(self) -> int:
        return max(0, self.total - self.marked)

    @property
    def percentage(self) -> float:
        if self.total == 0:
            return 0.0
        return round(self.present / self.total * 100, 2)

    @property
    def is_fully_marked(self) -> bool:
        return self.total > 0 and self.marked == self.total


@dataclass(frozen=True)
class UserScope:
    """The access granted to one Principal or HOD notification recipient."""

    id: str
    email: str
    role: ScopeRole
    name: Optional[str] = None
    college_names: tuple[str, ...] = ()
    course_names: tuple[str, ...] = ()
    branch_names: tuple[str, ...] = ()
    all_courses: bool = False
    all_branches: bool = False

    @property
    def course_key(self) -> str:
        if self.all_courses:
            return "*"
        return ",".join(sorted(self.course_names))

    def describe(self) -> str:
        return f"{self.role.value}:{self.email}"


class DispatchKey(NamedTuple):
    recipient_email: str
    college_name: str
    course_key: str
