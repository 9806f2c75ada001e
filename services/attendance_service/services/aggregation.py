"""Attendance statistics.

Pure functions over already-loaded data. Callers are responsible for
passing only Regular students; nothing here filters by student status.

Percentages:
- per student: present days / working days in the range
- per cohort: total present days / (distinct marked working dates * students)
- per group on one date: present / enrolled students
"""

from collections.abc import Iterable, Mapping
from datetime import date

from services.attendance_service.calendar.dates import (
    DateInput,
    ISO_FORMAT,
    iter_dates,
    parse_date,
)
from services.attendance_service.domain import (
    AttendanceEntry,
    AttendanceGroup,
    GroupKey,
    StudentProfile,
    display,
)
from services.attendance_service.models.enums import AttendanceStatus
from services.attendance_service.schemas import (
    CohortStats,
    DailyTotals,
    GroupSummary,
    StudentStats,
)

GOOD_ATTENDANCE_THRESHOLD = 75.0


def round2(value: float) -> float:
    return round(value, 2)


def percent(part: float, whole: float) -> float:
    """part/whole as a 2-decimal percentage; 0.0 when whole is zero."""
    if not whole:
        return 0.0
    return round2(part / whole * 100)


def build_date_set(start: DateInput, end: DateInput) -> list[str]:
    """Every date in [start, end] as ISO strings, in calendar order.

    Returns an empty list when start is after end.
    """
    first: date = parse_date(start)
    last: date = parse_date(end)
    return [d.strftime(ISO_FORMAT) for d in iter_dates(first, last)]


def per_student_stats(
    attendance: Mapping[str, AttendanceStatus | str],
    date_set: Iterable[str],
    non_working_dates: Iterable[str],
) -> StudentStats:
    non_working = set(non_working_dates)
    stats = StudentStats()

    for day in date_set:
        if day in non_working:
            stats.holidays += 1
            continue

        stats.working_days += 1
        status = attendance.get(day)
        if status == AttendanceStatus.PRESENT:
            stats.present_days += 1
        elif status == AttendanceStatus.ABSENT:
            stats.absent_days += 1
        else:
            stats.unmarked_days += 1

    stats.percentage = percent(stats.present_days, stats.working_days)
    return stats


def aggregate_stats(
    students: Iterable[StudentStats],
    marked_dates: Iterable[str],
    non_working_dates: Iterable[str],
    threshold: float = GOOD_ATTENDANCE_THRESHOLD,
) -> CohortStats:
    """Roll per-student stats up to the cohort.

    The working-day count is the number of distinct dates on which any
    attendance was recorded, so days nobody has marked yet do not dilute
    the overall percentage.
    """
    non_working = set(non_working_dates)
    total_working_days = len({d for d in marked_dates if d not in non_working})

    result = CohortStats(total_working_days=total_working_days)
    for stats in students:
        result.total_students += 1
        result.total_present_days += stats.present_days
        result.total_absent_days += stats.absent_days
        if stats.percentage >= threshold:
            result.good_attendance_count += 1
        else:
            result.poor_attendance_count += 1

    result.good_attendance_percentage = percent(
        result.good_attendance_count, result.total_students
    )
    result.poor_attendance_percentage = percent(
        result.poor_attendance_count, result.total_students
    )
    result.overall_percentage = percent(
        result.total_present_days, total_working_days * result.total_students
    )
    return result


def group_daily_counts(
    students: Iterable[StudentProfile],
    records: Iterable[AttendanceEntry],
) -> dict[GroupKey, AttendanceGroup]:
    """Bucket students into cohorts and attach their status for one date.

    Records for students outside ``students`` are ignored.
    """
    groups: dict[GroupKey, AttendanceGroup] = {}
    student_group: dict[int, AttendanceGroup] = {}

    for student in students:
        key = student.group_key
        group = groups.get(key)
        if group is None:
            group = groups[key] = AttendanceGroup(key=key)
        group.students.append(student)
        student_group[student.student_id] = group

    for record in records:
        group = student_group.get(record.student_id)
        if group is not None:
            group.statuses[record.student_id] = AttendanceStatus(record.status)

    return dict(sorted(groups.items()))


def attendance_maps(
    records: Iterable[AttendanceEntry],
) -> tuple[dict[int, dict[str, AttendanceStatus]], set[str]]:
    """Index records by student and date; also return the set of marked dates."""
    by_student: dict[int, dict[str, AttendanceStatus]] = {}
    marked_dates: set[str] = set()
    for record in records:
        by_student.setdefault(record.student_id, {})[record.date] = AttendanceStatus(
            record.status
        )
        marked_dates.add(record.date)
    return by_student, marked_dates


def summarize_group(group: AttendanceGroup) -> GroupSummary:
    key = group.key
    return GroupSummary(
        college=display(key.college),
        course=display(key.course),
        branch=display(key.branch),
        batch=display(key.batch),
        year=display(key.year),
        semester=display(key.semester),
        total_students=group.total,
        present=group.present,
        absent=group.absent,
        holiday=group.holiday,
        marked=group.marked,
        unmarked=group.unmarked,
        percentage=group.percentage,
        is_fully_marked=group.is_fully_marked,
    )


def daily_totals(groups: Iterable[AttendanceGroup]) -> DailyTotals:
    totals = DailyTotals()
    for group in groups:
        totals.total_students += group.total
        totals.present += group.present
        totals.absent += group.absent
        totals.holiday += group.holiday
        totals.marked += group.marked
        totals.unmarked += group.unmarked
    return totals
