"""Attendance Service models package."""

from services.attendance_service.models.core import (
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

__all__ = [
    "AttendanceRecord",
    "AttendanceStatus",
    "Branch",
    "College",
    "Course",
    "CustomHoliday",
    "RbacUser",
    "ScopeRole",
    "Student",
    "StudentStatus",
]
