"""Recipient scope matching.

A scope grants a Principal or HOD access to colleges, courses and branches.
Matching is deliberately strict:

- an empty college list grants nothing (never "all colleges");
- ``all_courses`` grants every course, otherwise the course must be listed;
- HODs always need an explicit branch list; Principals may use
  ``all_branches``.

A group attribute that is UNSPECIFIED matches any non-empty list at that
level, so students with incomplete records still reach someone who can see
their college.
"""

from collections.abc import Iterable, Sequence
from typing import Optional

from libs.common.logging import get_logger
from services.attendance_service.domain import (
    UNSPECIFIED,
    AttendanceGroup,
    HierarchyValue,
    UserScope,
)
from services.attendance_service.exceptions import ScopeConfigurationError
from services.attendance_service.models.enums import ScopeRole

logger = get_logger(__name__)


def _listed(value: HierarchyValue, names: Sequence[str]) -> bool:
    if not names:
        return False
    return value is UNSPECIFIED or value in names


def scope_problem(scope: UserScope) -> Optional[str]:
    """Describe why a scope can never match anything, if it can't."""
    if not scope.college_names:
        return "scope has no colleges"
    if scope.role is ScopeRole.HOD and not scope.branch_names:
        return "HOD scope has no branches"
    return None


def matches_scope(group: AttendanceGroup, scope: UserScope) -> bool:
    if not _listed(group.college, scope.college_names):
        return False

    if not scope.all_courses and not _listed(group.course, scope.course_names):
        return False

    if scope.role is ScopeRole.HOD:
        # No all-branches shortcut for HODs
        return _listed(group.branch, scope.branch_names)

    if scope.role is ScopeRole.PRINCIPAL:
        return scope.all_branches or _listed(group.branch, scope.branch_names)

    return False


def filter_groups(
    groups: Iterable[AttendanceGroup], scope: UserScope
) -> list[AttendanceGroup]:
    return [group for group in groups if matches_scope(group, scope)]


def resolve_recipients(
    scopes: Iterable[UserScope], group: AttendanceGroup
) -> list[UserScope]:
    return [scope for scope in scopes if matches_scope(group, scope)]


def is_scope_ready(groups: Sequence[AttendanceGroup]) -> bool:
    """A scope is ready when it sees at least one group and all are fully marked."""
    return bool(groups) and all(group.is_fully_marked for group in groups)


class ScopeMatcher:
    """Scope matching that reports each misconfigured scope once."""

    def __init__(self):
        self._reported: set[str] = set()

    def check(self, scope: UserScope) -> bool:
        problem = scope_problem(scope)
        if problem is None:
            return True
        if scope.id not in self._reported:
            self._reported.add(scope.id)
            error = ScopeConfigurationError(f"{scope.describe()}: {problem}")
            logger.warning(f"{error}; it matches no groups")
        return False

    def filter_groups(
        self, groups: Iterable[AttendanceGroup], scope: UserScope
    ) -> list[AttendanceGroup]:
        if not self.check(scope):
            return []
        return filter_groups(groups, scope)

    def resolve_recipients(
        self, scopes: Iterable[UserScope], group: AttendanceGroup
    ) -> list[UserScope]:
        return [s for s in scopes if self.check(s) and matches_scope(group, s)]

    @property
    def misconfigured(self) -> set[str]:
        return set(self._reported)
