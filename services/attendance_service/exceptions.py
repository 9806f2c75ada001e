"""Error taxonomy for the attendance calendar and aggregation engine."""

from dataclasses import dataclass
from typing import Optional


class AttendanceEngineError(Exception):
    """Base class for every error raised by the attendance engine."""


class InvalidDateError(AttendanceEngineError, ValueError):
    """A date could not be parsed or is outside the supported range."""


class InvalidRangeError(AttendanceEngineError, ValueError):
    """A date range has its start after its end."""


class UpstreamHolidaySourceError(AttendanceEngineError):
    """The public holiday API failed (timeout, transport, status or parse).

    Raised by holiday sources only; the resolver always recovers from it.
    """


class PersistenceError(AttendanceEngineError):
    """A store adapter failed to read or write."""


class ScopeConfigurationError(AttendanceEngineError):
    """A recipient scope is misconfigured (e.g. an HOD without branches).

    Logged, never raised: the scope simply matches nothing.
    """


class DispatchError(AttendanceEngineError):
    """A report could not be handed to the notification transport."""


@dataclass(frozen=True)
class PartialDispatchFailure:
    """One failed send inside an otherwise completed day-end run."""

    recipient_email: str
    college_name: str
    message: str
    scope_id: Optional[str] = None

    def __str__(self) -> str:
        return f"{self.recipient_email} ({self.college_name}): {self.message}"
