"""
Day-end attendance report rendering.

One report covers one recipient and one college for one date: global totals
first, then one row per cohort.
"""

import os
import tempfile
from contextlib import contextmanager
from html import escape
from pathlib import Path
from typing import Iterator, Optional

from libs.common.config import get_settings
from libs.common.logging import get_logger
from services.attendance_service.schemas import ReportPayload
from services.attendance_service.services.aggregation import percent
from services.attendance_service.templates.base import (
    GRADIENT_BLUE,
    detail_box,
    table,
    wrap_html,
)

logger = get_logger(__name__)

REPORT_COLUMNS = (
    "Batch",
    "Course",
    "Branch",
    "Year",
    "Sem",
    "Total",
    "Present",
    "Absent",
    "Marked",
    "Pending",
    "%",
)


def render_day_end_report_html(payload: ReportPayload) -> str:
    totals = payload.totals
    summary = detail_box(
        {
            "College": payload.college_name,
            "Date": payload.attendance_date,
            "Students": totals.total_students,
            "Present": totals.present,
            "Absent": totals.absent,
            "Holiday": totals.holiday or None,
            "Pending": totals.unmarked,
            "Attendance": f"{percent(totals.present, totals.total_students):.2f}%",
        }
    )
    rows = [
        (
            g.batch,
            g.course,
            g.branch,
            g.year,
            g.semester,
            g.total_students,
            g.present,
            g.absent,
            g.marked,
            g.unmarked,
            f"{g.percentage:.2f}",
        )
        for g in payload.groups
    ]
    greeting = f"<p>Dear {escape(payload.recipient_name or 'Sir/Madam')},</p>"
    body = (
        greeting
        + "<p>Attendance for all groups in your scope has been marked. "
        "The day-end summary is below.</p>"
        + summary
        + f"<h3>{len(rows)} group(s)</h3>"
        + table(REPORT_COLUMNS, rows)
    )
    return wrap_html(
        title="Day End Attendance Report",
        subtitle=f"{payload.college_name} - {payload.attendance_date}",
        body_html=body,
        header_gradient=GRADIENT_BLUE,
        preheader=f"{totals.present}/{totals.total_students} present",
    )


def render_day_end_report_text(payload: ReportPayload) -> str:
    totals = payload.totals
    lines = [
        f"Day End Attendance Report - {payload.college_name} - {payload.attendance_date}",
        "",
        f"Students: {totals.total_students}",
        f"Present: {totals.present}",
        f"Absent: {totals.absent}",
        f"Pending: {totals.unmarked}",
        "",
    ]
    for g in payload.groups:
        lines.append(
            f"{g.batch} / {g.course} / {g.branch} / Y{g.year} S{g.semester}: "
            f"{g.present}/{g.total_students} present ({g.percentage:.2f}%)"
        )
    lines.append("")
    lines.append("The full report is attached.")
    return "\n".join(lines)


def report_filename(payload: ReportPayload) -> str:
    college = "".join(c if c.isalnum() else "_" for c in payload.college_name)
    return f"day_end_{college}_{payload.attendance_date}_"


@contextmanager
def report_file(
    payload: ReportPayload, directory: Optional[str] = None
) -> Iterator[Path]:
    """
    Write the rendered report to a temporary file for the duration of a send.

    The file is removed when the block exits, whether the send succeeded,
    failed or was cancelled.
    """
    directory = directory or get_settings().REPORTS_TMP_DIR
    fd, name = tempfile.mkstemp(
        prefix=report_filename(payload), suffix=".html", dir=directory
    )
    path = Path(name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(render_day_end_report_html(payload))
        yield path
    finally:
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Could not remove report file {path}: {e}")
