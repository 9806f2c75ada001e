"""
Model factories for creating valid test data.

Every factory produces a valid, insertable SQLAlchemy model instance.
Override any field via kwargs.

Usage:
    student = StudentFactory.create(college="Govt Polytechnic")
    db_session.add(student)
    await db_session.commit()
"""

import uuid
from datetime import date

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _suffix() -> str:
    return uuid.uuid4().hex[:8]


def _unique_email() -> str:
    return f"staff-{_suffix()}@college.test"


# ---------------------------------------------------------------------------
# Hierarchy
# ---------------------------------------------------------------------------


class CollegeFactory:
    @staticmethod
    def create(**overrides):
        from services.attendance_service.models import College

        defaults = {"name": f"College {_suffix()}", "is_active": True}
        defaults.update(overrides)
        return College(**defaults)


class CourseFactory:
    @staticmethod
    def create(**overrides):
        from services.attendance_service.models import Course

        defaults = {"name": "Diploma", "is_active": True}
        defaults.update(overrides)
        return Course(**defaults)


class BranchFactory:
    @staticmethod
    def create(course_id=None, **overrides):
        from services.attendance_service.models import Branch

        defaults = {"course_id": course_id, "name": "CSE", "is_active": True}
        defaults.update(overrides)
        return Branch(**defaults)


# ---------------------------------------------------------------------------
# Students and attendance
# ---------------------------------------------------------------------------


class StudentFactory:
    @staticmethod
    def create(**overrides):
        from services.attendance_service.models import Student

        defaults = {
            "admission_number": f"ADM-{_suffix()}",
            "student_name": "Test Student",
            "college": "Govt Polytechnic",
            "course": "Diploma",
            "branch": "CSE",
            "batch": "2024",
            "current_year": "1",
            "current_semester": "1",
            "student_status": "Regular",
        }
        defaults.update(overrides)
        return Student(**defaults)


class AttendanceRecordFactory:
    @staticmethod
    def create(student, **overrides):
        from services.attendance_service.models import AttendanceRecord
        from services.attendance_service.models.enums import AttendanceStatus

        defaults = {
            "student_id": student.id,
            "admission_number": student.admission_number,
            "attendance_date": date(2026, 3, 12),
            "status": AttendanceStatus.PRESENT,
            "marked_by": 1,
        }
        defaults.update(overrides)
        return AttendanceRecord(**defaults)


# ---------------------------------------------------------------------------
# RBAC
# ---------------------------------------------------------------------------


class RbacUserFactory:
    @staticmethod
    def create(**overrides):
        from services.attendance_service.models import RbacUser

        defaults = {
            "name": "Test Principal",
            "email": _unique_email(),
            "role": "college_principal",
            "college_ids": [],
            "course_ids": [],
            "branch_ids": [],
            "all_courses": True,
            "all_branches": True,
            "is_active": True,
        }
        defaults.update(overrides)
        return RbacUser(**defaults)
