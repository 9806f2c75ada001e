"""Enum definitions for attendance service models."""

import enum


def enum_values(enum_cls):
    """Return persistent DB values for SAEnum mappings."""
    return [member.value for member in enum_cls]


class AttendanceStatus(str, enum.Enum):
    PRESENT = "present"
    ABSENT = "absent"
    HOLIDAY = "holiday"


class StudentStatus(str, enum.Enum):
    REGULAR = "Regular"
    OTHER = "Other"


class ScopeRole(str, enum.Enum):
    PRINCIPAL = "college_principal"
    HOD = "branch_hod"
