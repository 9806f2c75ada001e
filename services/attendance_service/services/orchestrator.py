"""Day-end attendance orchestration.

One run walks Collecting -> Evaluating -> Dispatching -> Done for a single
date. Students nobody marked are auto-completed as present (working days
only), then every Principal/HOD scope whose groups are all fully marked gets
one report per college. The run always finishes with a DispatchSummary;
individual store or send failures are recorded in it, never raised.

Concurrent runs for the same date are safe: auto-complete relies on the
store's (student_id, date) uniqueness and sends are deduplicated per run.
"""

import asyncio
import enum
import uuid
from collections import defaultdict
from typing import Optional, Sequence

from libs.common.config import get_settings
from libs.common.logging import get_logger, set_run_id
from services.attendance_service.calendar.dates import DateInput, normalize_date
from services.attendance_service.calendar.resolver import NonWorkingDayResolver
from services.attendance_service.domain import (
    AttendanceGroup,
    DispatchKey,
    StudentFilters,
    StudentProfile,
    UserScope,
    display,
)
from services.attendance_service.exceptions import (
    DispatchError,
    PartialDispatchFailure,
    PersistenceError,
)
from services.attendance_service.models.enums import AttendanceStatus, ScopeRole
from services.attendance_service.schemas import (
    DispatchResult,
    DispatchSummary,
    ReportPayload,
)
from services.attendance_service.services.aggregation import (
    daily_totals,
    group_daily_counts,
    summarize_group,
)
from services.attendance_service.services.scope import ScopeMatcher, is_scope_ready
from services.attendance_service.stores import (
    AttendanceStore,
    RbacStore,
    ReportDispatcher,
    StudentStore,
)

logger = get_logger(__name__)

REPORT_ROLES = (ScopeRole.PRINCIPAL, ScopeRole.HOD)


class RunState(str, enum.Enum):
    COLLECTING = "collecting"
    EVALUATING = "evaluating"
    DISPATCHING = "dispatching"
    DONE = "done"


def dispatch_key(payload: ReportPayload) -> DispatchKey:
    return DispatchKey(
        recipient_email=payload.recipient_email.strip().lower(),
        college_name=payload.college_name,
        course_key=payload.course_key,
    )


def format_key(key: DispatchKey) -> str:
    return f"{key.recipient_email}|{key.college_name}|{key.course_key}"


def build_payloads(
    scope: UserScope, groups: Sequence[AttendanceGroup], date: str
) -> list[ReportPayload]:
    """Merge a scope's matched groups into one payload per college."""
    by_college: dict[str, list[AttendanceGroup]] = defaultdict(list)
    for group in groups:
        by_college[display(group.college)].append(group)

    return [
        ReportPayload(
            recipient_id=scope.id,
            recipient_email=scope.email,
            recipient_name=scope.name,
            role=scope.role,
            college_name=college,
            course_key=scope.course_key,
            attendance_date=date,
            groups=[summarize_group(g) for g in college_groups],
            totals=daily_totals(college_groups),
        )
        for college, college_groups in sorted(by_college.items())
    ]


class _Run:
    """Mutable state of one orchestration run."""

    def __init__(self, date: str, dry_run: bool, cancel: Optional[asyncio.Event]):
        self.date = date
        self.cancel = cancel
        self.summary = DispatchSummary(
            date=date, state=RunState.COLLECTING.value, dry_run=dry_run
        )
        self.processed: set[DispatchKey] = set()

    @property
    def dry_run(self) -> bool:
        return self.summary.dry_run

    def transition(self, state: RunState) -> None:
        logger.info(f"Day-end run for {self.date}: {self.summary.state} -> {state.value}")
        self.summary.state = state.value

    def cancelled(self) -> bool:
        if self.cancel is not None and self.cancel.is_set():
            if not self.summary.cancelled:
                logger.warning(f"Day-end run for {self.date} cancelled")
            self.summary.cancelled = True
        return self.summary.cancelled

    def record_failure(self, failure: PartialDispatchFailure) -> None:
        self.summary.failed_count += 1
        self.summary.errors.append(str(failure))


class DayEndOrchestrator:
    def __init__(
        self,
        attendance: AttendanceStore,
        students: StudentStore,
        rbac: RbacStore,
        resolver: NonWorkingDayResolver,
        dispatcher: ReportDispatcher,
        concurrency: Optional[int] = None,
        excluded_courses: Optional[Sequence[str]] = None,
        excluded_admission_numbers: Optional[Sequence[str]] = None,
    ):
        settings = get_settings()
        self.attendance = attendance
        self.students = students
        self.rbac = rbac
        self.resolver = resolver
        self.dispatcher = dispatcher
        self.concurrency = concurrency or settings.DISPATCH_CONCURRENCY
        self.excluded_courses = tuple(
            settings.EXCLUDED_COURSES if excluded_courses is None else excluded_courses
        )
        self.excluded_admission_numbers = tuple(
            settings.EXCLUDED_ADMISSION_NUMBERS
            if excluded_admission_numbers is None
            else excluded_admission_numbers
        )

    async def run(
        self,
        date: DateInput,
        dry_run: bool = False,
        cancel: Optional[asyncio.Event] = None,
    ) -> DispatchSummary:
        day = normalize_date(date)
        set_run_id(f"day-end-{day}-{uuid.uuid4().hex[:8]}")
        run = _Run(day, dry_run, cancel)
        logger.info(f"Starting day-end run for {day} (dry_run={dry_run})")

        try:
            try:
                await self._execute(run)
            except PersistenceError as e:
                # A failed load ends the run early; the summary says why
                logger.error(f"Day-end run for {day} aborted: {e}")
                run.summary.errors.append(f"store: {e}")

            run.transition(RunState.DONE)
            summary = run.summary
            logger.info(
                f"Day-end run for {day} done: sent={summary.sent_count} "
                f"failed={summary.failed_count} auto_marked={summary.auto_marked_count} "
                f"skipped={len(summary.skipped_scopes)} planned={len(summary.planned)}"
            )
            return summary
        finally:
            set_run_id(None)

    async def _execute(self, run: _Run) -> None:
        # Collecting
        filters = StudentFilters(
            exclude_courses=self.excluded_courses,
            exclude_admission_numbers=self.excluded_admission_numbers,
        )
        students = list(await self.students.list_regular_students(filters))
        records = list(await self.attendance.get_records_for_date(run.date))
        scopes = list(await self.rbac.list_scoped_users(REPORT_ROLES))
        logger.info(
            f"Collected {len(students)} students, {len(records)} records "
            f"and {len(scopes)} scopes for {run.date}"
        )

        day_info = await self.resolver.get_day_info(run.date)
        if day_info.is_non_working:
            logger.info(
                f"{run.date} is non-working ({', '.join(day_info.reasons)}); "
                "skipping auto-complete"
            )
        elif not run.dry_run:
            marked = {record.student_id for record in records}
            unmarked = [s for s in students if s.student_id not in marked]
            if unmarked:
                await self._auto_complete(run, unmarked)
                records = list(await self.attendance.get_records_for_date(run.date))

        # Evaluating
        run.transition(RunState.EVALUATING)
        groups = list(group_daily_counts(students, records).values())
        payloads = self._evaluate(run, scopes, groups)

        # Dispatching
        run.transition(RunState.DISPATCHING)
        await self._dispatch(run, payloads)

    async def _auto_complete(
        self, run: _Run, unmarked: Sequence[StudentProfile]
    ) -> None:
        for student in unmarked:
            try:
                inserted = await self.attendance.insert_if_absent(
                    student.student_id,
                    run.date,
                    AttendanceStatus.PRESENT,
                    marked_by=None,
                )
            except PersistenceError as e:
                logger.error(f"Auto-mark failed for student {student.student_id}: {e}")
                run.summary.errors.append(
                    f"auto-mark {student.admission_number or student.student_id}: {e}"
                )
                continue
            if inserted:
                run.summary.auto_marked_count += 1

        logger.info(
            f"Auto-marked {run.summary.auto_marked_count} of {len(unmarked)} "
            f"unmarked students present for {run.date}"
        )

    def _evaluate(
        self,
        run: _Run,
        scopes: Sequence[UserScope],
        groups: Sequence[AttendanceGroup],
    ) -> list[ReportPayload]:
        matcher = ScopeMatcher()
        payloads: list[ReportPayload] = []

        for scope in scopes:
            if run.cancelled():
                break
            matched = matcher.filter_groups(groups, scope)
            if not matched:
                run.summary.skipped_scopes.append(f"{scope.describe()}: no groups")
                continue
            if not is_scope_ready(matched):
                pending = sum(1 for g in matched if not g.is_fully_marked)
                run.summary.skipped_scopes.append(
                    f"{scope.describe()}: {pending} group(s) not fully marked"
                )
                continue
            payloads.extend(build_payloads(scope, matched, run.date))

        return payloads

    async def _dispatch(self, run: _Run, payloads: Sequence[ReportPayload]) -> None:
        unique: list[ReportPayload] = []
        for payload in payloads:
            key = dispatch_key(payload)
            if key in run.processed:
                logger.info(f"Skipping duplicate report {format_key(key)}")
                continue
            run.processed.add(key)
            unique.append(payload)

        if run.dry_run:
            run.summary.planned.extend(format_key(dispatch_key(p)) for p in unique)
            return

        semaphore = asyncio.Semaphore(self.concurrency)

        async def worker(payload: ReportPayload) -> None:
            async with semaphore:
                if run.cancelled():
                    return
                await self._send(run, payload)

        await asyncio.gather(*(worker(p) for p in unique))

    async def _send(self, run: _Run, payload: ReportPayload) -> None:
        try:
            result = await self.dispatcher.send(payload)
        except DispatchError as e:
            result = DispatchResult(sent=False, error=str(e))
        except Exception as e:
            logger.exception(f"Unexpected error sending report to {payload.recipient_email}")
            result = DispatchResult(sent=False, error=f"unexpected error: {e}")

        if result.sent:
            run.summary.sent_count += 1
            logger.info(
                f"Sent day-end report to {payload.recipient_email} "
                f"for {payload.college_name}"
            )
            return

        failure = PartialDispatchFailure(
            recipient_email=payload.recipient_email,
            college_name=payload.college_name,
            message=result.error or "not sent",
            scope_id=payload.recipient_id,
        )
        logger.error(f"Day-end report failed: {failure}")
        run.record_failure(failure)
