from __future__ import annotations

from enum import Enum
from typing import Any, Type, TypeVar

from .exceptions import DataIntegrityError

E = TypeVar("E", bound=Enum)


class AttendanceStatus(str, Enum):
    """Attendance status persisted on each record."""

    PRESENT = "present"
    LATE = "late"
    ABSENT = "absent"
    REMOTE = "remote"
    INVALID = "invalid"


class LocationStatus(str, Enum):
    """Geographic classification of a clock event."""

    VALID = "valid"
    INVALID = "invalid"
    REMOTE = "remote"


class ApprovalStatus(str, Enum):
    """Administrative review state of a submission."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ClockState(str, Enum):
    NOT_STARTED = "not_started"
    CLOCKED_IN = "clocked_in"
    CLOCKED_OUT = "clocked_out"


class GeofenceType(str, Enum):
    CIRCLE = "circle"
    POLYGON = "polygon"


# Statuses an administrator may assign through a manual entry.
MANUAL_ENTRY_STATUSES = frozenset(
    {AttendanceStatus.PRESENT, AttendanceStatus.LATE, AttendanceStatus.ABSENT, AttendanceStatus.REMOTE}
)

APPROVAL_DECISIONS = frozenset({ApprovalStatus.APPROVED, ApprovalStatus.REJECTED})


def parse_stored_enum(enum_cls: Type[E], value: Any, *, field_name: str) -> E:
    """Convert a persisted value into ``enum_cls``.

    Stored data outside the enumeration is a data-integrity problem, never
    silently defaulted.
    """
    try:
        return enum_cls(value)
    except ValueError:
        raise DataIntegrityError(f"Unrecognized {field_name} value in storage: {value!r}") from None
