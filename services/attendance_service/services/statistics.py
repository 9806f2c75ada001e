"""Read-side attendance statistics: daily groups, student history, ranges."""

from typing import Optional

from libs.common.config import get_settings
from libs.common.logging import get_logger
from services.attendance_service.calendar.dates import DateInput, normalize_date
from services.attendance_service.calendar.resolver import NonWorkingDayResolver
from services.attendance_service.domain import StudentFilters, StudentProfile
from services.attendance_service.schemas import (
    GroupStatistics,
    RangeStatistics,
    StudentHistory,
    StudentRangeRow,
    StudentSummary,
)
from services.attendance_service.services.aggregation import (
    aggregate_stats,
    attendance_maps,
    build_date_set,
    daily_totals,
    group_daily_counts,
    per_student_stats,
    summarize_group,
)
from services.attendance_service.stores import AttendanceStore, StudentStore

logger = get_logger(__name__)


def student_summary(student: StudentProfile) -> StudentSummary:
    return StudentSummary(
        student_id=student.student_id,
        admission_number=student.admission_number,
        name=student.name,
        college=str(student.college),
        course=str(student.course),
        branch=str(student.branch),
        batch=str(student.batch),
        year=str(student.year),
        semester=str(student.semester),
    )


class AttendanceStatisticsService:
    def __init__(
        self,
        attendance: AttendanceStore,
        students: StudentStore,
        resolver: NonWorkingDayResolver,
        threshold: Optional[float] = None,
    ):
        self.attendance = attendance
        self.students = students
        self.resolver = resolver
        self.threshold = (
            threshold if threshold is not None else get_settings().GOOD_ATTENDANCE_THRESHOLD
        )

    async def compute_group_statistics(
        self, date: DateInput, filters: Optional[StudentFilters] = None
    ) -> GroupStatistics:
        """Per-cohort counts for one date, plus totals and the day's status."""
        day = normalize_date(date)
        day_info = await self.resolver.get_day_info(day)
        students = await self.students.list_regular_students(filters)
        records = await self.attendance.get_records_for_date(day)

        groups = list(group_daily_counts(students, records).values())
        return GroupStatistics(
            date=day,
            is_non_working=day_info.is_non_working,
            reasons=day_info.reasons,
            groups=[summarize_group(g) for g in groups],
            totals=daily_totals(groups),
        )

    async def compute_student_history(
        self, student_id: int, start: DateInput, end: DateInput
    ) -> Optional[StudentHistory]:
        """
        One student's statuses and statistics over [start, end].

        Returns None when the student does not exist. Raises
        InvalidRangeError when start is after end.
        """
        range_info = await self.resolver.get_range_info(start, end)
        student = await self.students.get_student(student_id)
        if student is None:
            return None

        records = await self.attendance.get_records_for_range(
            range_info.start, range_info.end, student_ids=[student_id]
        )
        attendance = {r.date: r.status.value for r in records}
        stats = per_student_stats(
            attendance,
            build_date_set(range_info.start, range_info.end),
            range_info.dates,
        )
        return StudentHistory(
            student=student_summary(student),
            start=range_info.start,
            end=range_info.end,
            attendance=dict(sorted(attendance.items())),
            statistics=stats,
            non_working_days=range_info.details,
        )

    async def compute_range_statistics(
        self,
        start: DateInput,
        end: DateInput,
        filters: Optional[StudentFilters] = None,
    ) -> RangeStatistics:
        """Per-student statistics and the cohort rollup for a filtered set."""
        range_info = await self.resolver.get_range_info(start, end)
        date_set = build_date_set(range_info.start, range_info.end)
        students = list(await self.students.list_regular_students(filters))

        records = []
        if students:
            records = await self.attendance.get_records_for_range(
                range_info.start,
                range_info.end,
                student_ids=[s.student_id for s in students],
            )
        by_student, marked_dates = attendance_maps(records)

        rows: list[StudentRangeRow] = []
        for student in students:
            attendance = by_student.get(student.student_id, {})
            stats = per_student_stats(attendance, date_set, range_info.dates)
            rows.append(
                StudentRangeRow(
                    **student_summary(student).model_dump(),
                    attendance={d: s.value for d, s in sorted(attendance.items())},
                    statistics=stats,
                )
            )

        cohort = aggregate_stats(
            (row.statistics for row in rows),
            marked_dates,
            range_info.dates,
            threshold=self.threshold,
        )
        logger.debug(
            f"Range statistics {range_info.start}..{range_info.end}: "
            f"{cohort.total_students} students, {cohort.overall_percentage}%"
        )
        return RangeStatistics(
            start=range_info.start,
            end=range_info.end,
            dates=date_set,
            non_working_dates=sorted(range_info.dates),
            students=rows,
            statistics=cohort,
        )
