from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from services.attendance_service.models.enums import ScopeRole

# ---------------------------------------------------------------------------
# Calendar
# ---------------------------------------------------------------------------


class PublicHoliday(BaseModel):
    """A public holiday as returned by date.nager.at (camelCase aliases)."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    date: str
    local_name: str = Field(alias="localName")
    name: str
    country_code: Optional[str] = Field(default=None, alias="countryCode")
    fixed: bool = False
    global_: bool = Field(default=False, alias="global")
    counties: Optional[list[str]] = None
    launch_year: Optional[int] = Field(default=None, alias="launchYear")
    types: list[str] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def fill_names(cls, data):
        if isinstance(data, dict):
            data = dict(data)
            local_name = data.get("localName") or data.get("local_name")
            name = data.get("name")
            data["localName"] = local_name or name or "Unnamed Holiday"
            data["name"] = name or local_name or "Unnamed Holiday"
            data.pop("local_name", None)
            if not isinstance(data.get("types"), list):
                data["types"] = []
            data["fixed"] = bool(data.get("fixed"))
            data["global"] = bool(data.get("global"))
        return data

    def applies_to_region(self, region_code: Optional[str]) -> bool:
        """Holidays without counties apply everywhere."""
        if not region_code or not self.counties:
            return True
        return any(county.endswith(region_code) for county in self.counties)


class CustomHolidayEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: str
    title: str
    description: Optional[str] = None


class NonWorkingDetail(BaseModel):
    is_sunday: bool = False
    public_holiday: Optional[PublicHoliday] = None
    custom_holiday: Optional[CustomHolidayEntry] = None


class DayInfo(BaseModel):
    date: str
    is_non_working: bool
    is_sunday: bool
    public_holiday: Optional[PublicHoliday] = None
    custom_holiday: Optional[CustomHolidayEntry] = None
    reasons: list[str] = Field(default_factory=list)


class RangeInfo(BaseModel):
    start: str
    end: str
    dates: set[str] = Field(default_factory=set)
    details: dict[str, NonWorkingDetail] = Field(default_factory=dict)


class MonthCalendarView(BaseModel):
    year: int
    month: int
    country_code: str
    sundays: list[str]
    public_holidays: list[PublicHoliday]
    custom_holidays: list[CustomHolidayEntry]
    non_working_dates: list[str]
    fetched_at: datetime


# ---------------------------------------------------------------------------
# Statistics
# ---------------------------------------------------------------------------


class StudentStats(BaseModel):
    working_days: int = 0
    present_days: int = 0
    absent_days: int = 0
    holidays: int = 0
    unmarked_days: int = 0
    percentage: float = 0.0


class CohortStats(BaseModel):
    total_students: int = 0
    total_working_days: int = 0
    total_present_days: int = 0
    total_absent_days: int = 0
    good_attendance_count: int = 0
    poor_attendance_count: int = 0
    good_attendance_percentage: float = 0.0
    poor_attendance_percentage: float = 0.0
    overall_percentage: float = 0.0


class GroupSummary(BaseModel):
    """One (college, course, branch, batch, year, semester) cohort on one date."""

    college: str
    course: str
    branch: str
    batch: str
    year: str
    semester: str
    total_students: int
    present: int
    absent: int
    holiday: int
    marked: int
    unmarked: int
    percentage: float
    is_fully_marked: bool


class DailyTotals(BaseModel):
    total_students: int = 0
    present: int = 0
    absent: int = 0
    holiday: int = 0
    marked: int = 0
    unmarked: int = 0


class GroupStatistics(BaseModel):
    date: str
    is_non_working: bool
    reasons: list[str] = Field(default_factory=list)
    groups: list[GroupSummary] = Field(default_factory=list)
    totals: DailyTotals = Field(default_factory=DailyTotals)


class StudentSummary(BaseModel):
    student_id: int
    admission_number: Optional[str] = None
    name: Optional[str] = None
    college: Optional[str] = None
    course: Optional[str] = None
    branch: Optional[str] = None
    batch: Optional[str] = None
    year: Optional[str] = None
    semester: Optional[str] = None


class StudentRangeRow(StudentSummary):
    attendance: dict[str, str] = Field(default_factory=dict)
    statistics: StudentStats = Field(default_factory=StudentStats)


class RangeStatistics(BaseModel):
    start: str
    end: str
    dates: list[str]
    non_working_dates: list[str]
    students: list[StudentRangeRow]
    statistics: CohortStats


class StudentHistory(BaseModel):
    student: StudentSummary
    start: str
    end: str
    attendance: dict[str, str] = Field(default_factory=dict)
    statistics: StudentStats
    non_working_days: dict[str, NonWorkingDetail] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Day-end dispatch
# ---------------------------------------------------------------------------


class ReportPayload(BaseModel):
    """Everything one recipient receives for one college on one date."""

    recipient_id: str
    recipient_email: str
    recipient_name: Optional[str] = None
    role: ScopeRole
    college_name: str
    course_key: str
    attendance_date: str
    groups: list[GroupSummary]
    totals: DailyTotals

    @property
    def subject(self) -> str:
        return f"Day End Attendance Report - {self.college_name} - {self.attendance_date}"


class DispatchResult(BaseModel):
    sent: bool
    error: Optional[str] = None


class DispatchSummary(BaseModel):
    date: str
    state: str
    dry_run: bool = False
    cancelled: bool = False
    sent_count: int = 0
    failed_count: int = 0
    auto_marked_count: int = 0
    skipped_scopes: list[str] = Field(default_factory=list)
    planned: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
