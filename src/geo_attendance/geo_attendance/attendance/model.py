from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

from ..common.validators import require_max_length, validate_photo_reference
from ..core.enums import ApprovalStatus, AttendanceStatus, ClockState, LocationStatus
from ..core.exceptions import ValidationError
from ..geofences.model import Coordinate


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one user's attendance for one calendar day."""

    attendance_id: Optional[int]
    user_id: int
    work_date: date
    clock_in_time: Optional[datetime] = None
    clock_out_time: Optional[datetime] = None
    clock_in_photo: Optional[str] = None
    clock_out_photo: Optional[str] = None
    clock_in_location: Optional[Coordinate] = None
    clock_out_location: Optional[Coordinate] = None
    status: AttendanceStatus = AttendanceStatus.PRESENT
    location_status: LocationStatus = LocationStatus.VALID
    approval_status: ApprovalStatus = ApprovalStatus.PENDING
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None
    approval_notes: Optional[str] = None
    working_hours: Optional[Decimal] = None
    overtime_hours: Decimal = Decimal("0")
    notes: Optional[str] = None
    is_manual_entry: bool = False
    manual_entry_reason: Optional[str] = None
    clock_in_geofence_id: Optional[int] = None
    is_active: bool = True
    deleted_at: Optional[datetime] = None
    version: int = 0

    @property
    def clock_state(self) -> ClockState:
        if self.clock_in_time is None:
            return ClockState.NOT_STARTED
        if self.clock_out_time is None:
            return ClockState.CLOCKED_IN
        return ClockState.CLOCKED_OUT

    def to_dict(self) -> dict:
        return {
            "attendance_id": self.attendance_id,
            "user_id": self.user_id,
            "date": self.work_date.isoformat(),
            "clock_in_time": self.clock_in_time.isoformat() if self.clock_in_time else None,
            "clock_out_time": self.clock_out_time.isoformat() if self.clock_out_time else None,
            "clock_in_location": self.clock_in_location.to_dict() if self.clock_in_location else None,
            "clock_out_location": self.clock_out_location.to_dict() if self.clock_out_location else None,
            "status": self.status.value,
            "location_status": self.location_status.value,
            "approval_status": self.approval_status.value,
            "approved_by": self.approved_by,
            "approved_at": self.approved_at.isoformat() if self.approved_at else None,
            "approval_notes": self.approval_notes,
            "working_hours": float(self.working_hours) if self.working_hours is not None else None,
            "overtime_hours": float(self.overtime_hours),
            "notes": self.notes,
            "is_manual_entry": self.is_manual_entry,
            "manual_entry_reason": self.manual_entry_reason,
            "has_clock_in_photo": bool(self.clock_in_photo),
            "has_clock_out_photo": bool(self.clock_out_photo),
        }


@dataclass(frozen=True)
class ClockEvent:
    """A validated clock-in or clock-out submission."""

    timestamp: datetime
    photo_reference: str
    coordinates: Optional[Coordinate] = None
    notes: Optional[str] = None

    @classmethod
    def from_input(
        cls,
        *,
        timestamp: datetime,
        photo_reference: Optional[str],
        latitude: Any = None,
        longitude: Any = None,
        notes: Optional[str] = None,
    ) -> "ClockEvent":
        if not isinstance(timestamp, datetime):
            raise ValidationError("Timestamp is required")
        return cls(
            timestamp=timestamp,
            photo_reference=validate_photo_reference(photo_reference),
            coordinates=Coordinate.from_optional(latitude, longitude),
            notes=require_max_length(notes, "Notes"),
        )


@dataclass(frozen=True)
class ClockResult:
    """Outcome of a clock transition as returned to the calling layer."""

    record: AttendanceRecord

    def to_dict(self) -> dict:
        out = {
            "status": self.record.status.value,
            "location_status": self.record.location_status.value,
            "approval_status": self.record.approval_status.value,
        }
        if self.record.clock_out_time is not None:
            out["working_hours"] = float(self.record.working_hours or 0)
            out["overtime_hours"] = float(self.record.overtime_hours)
        return out


@dataclass(frozen=True)
class AttendanceStatusView:
    """Read-model for "what is my state today"."""

    state: ClockState
    record: Optional[AttendanceRecord]

    @property
    def working_hours(self) -> Decimal:
        if self.record is None or self.record.working_hours is None:
            return Decimal("0")
        return self.record.working_hours
