"""Unit tests for day-end report rendering and the temporary report file."""

import pytest
from services.attendance_service.domain import AttendanceEntry
from services.attendance_service.models.enums import AttendanceStatus
from services.attendance_service.services.aggregation import group_daily_counts
from services.attendance_service.services.orchestrator import build_payloads
from services.attendance_service.templates.day_end_report import (
    render_day_end_report_html,
    render_day_end_report_text,
    report_file,
    report_filename,
)
from tests.fakes import make_scope, make_student

DAY = "2026-03-12"


def _payload(name="Dr. <Rao>"):
    students = [make_student(1), make_student(2), make_student(3, branch=None)]
    records = [
        AttendanceEntry(1, DAY, AttendanceStatus.PRESENT),
        AttendanceEntry(2, DAY, AttendanceStatus.ABSENT),
        AttendanceEntry(3, DAY, AttendanceStatus.PRESENT),
    ]
    groups = list(group_daily_counts(students, records).values())
    scope = make_scope("principal")
    payload = build_payloads(scope, groups, DAY)[0]
    return payload.model_copy(update={"recipient_name": name})


@pytest.mark.unit
def test_html_report_contains_totals_and_rows():
    html = render_day_end_report_html(_payload())

    assert "Day End Attendance Report" in html
    assert "Govt Polytechnic - 2026-03-12" in html
    assert "2 group(s)" in html
    assert "<td>CSE</td>" in html
    assert "<td>Unspecified</td>" in html
    assert '<td class="num">50.00</td>' not in html
    assert "<td>50.00</td>" in html
    assert "66.67%" in html


@pytest.mark.unit
def test_html_report_escapes_recipient_name():
    html = render_day_end_report_html(_payload())

    assert "Dear Dr. &lt;Rao&gt;," in html
    assert "<Rao>" not in html


@pytest.mark.unit
def test_html_report_greets_unnamed_recipient():
    assert "Dear Sir/Madam," in render_day_end_report_html(_payload(name=None))


@pytest.mark.unit
def test_text_report_lists_each_group():
    text = render_day_end_report_text(_payload())

    assert text.splitlines()[0] == (
        "Day End Attendance Report - Govt Polytechnic - 2026-03-12"
    )
    assert "2024 / Diploma / CSE / Y1 S1: 1/2 present (50.00%)" in text
    assert "2024 / Diploma / Unspecified / Y1 S1: 1/1 present (100.00%)" in text
    assert text.endswith("The full report is attached.")


@pytest.mark.unit
def test_report_filename_is_filesystem_safe():
    payload = _payload().model_copy(update={"college_name": "St. Mary's / East"})
    assert report_filename(payload) == "day_end_St__Mary_s___East_2026-03-12_"


@pytest.mark.unit
def test_report_file_is_removed_after_use(tmp_path):
    with report_file(_payload(), directory=str(tmp_path)) as path:
        assert path.exists()
        assert path.parent == tmp_path
        assert path.suffix == ".html"
        assert "Govt Polytechnic" in path.read_text(encoding="utf-8")

    assert not path.exists()
    assert list(tmp_path.iterdir()) == []


@pytest.mark.unit
def test_report_file_is_removed_when_block_raises(tmp_path):
    with pytest.raises(RuntimeError):
        with report_file(_payload(), directory=str(tmp_path)) as path:
            raise RuntimeError("send failed")

    assert not path.exists()
    assert list(tmp_path.iterdir()) == []


@pytest.mark.unit
def test_report_file_tolerates_early_removal(tmp_path):
    with report_file(_payload(), directory=str(tmp_path)) as path:
        path.unlink()

    assert list(tmp_path.iterdir()) == []
