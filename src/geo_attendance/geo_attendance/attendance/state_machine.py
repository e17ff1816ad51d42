from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional, Sequence

from ..common.datetime_utils import to_wall_clock
from ..common.validators import require_max_length, require_non_empty
from ..core.enums import APPROVAL_DECISIONS, MANUAL_ENTRY_STATUSES, ApprovalStatus, AttendanceStatus
from ..core.exceptions import (
    AlreadyClockedIn,
    AlreadyClockedOut,
    AttendanceNotFound,
    InvalidTimeOrder,
    NotClockedIn,
    NothingToApprove,
    ValidationError,
)
from ..geofences.engine import GeofenceEngine
from ..geofences.model import Geofence
from ..settings.model import AttendancePolicy
from .calculator.base import WorkingHoursCalculator
from .calculator.standard_calculator import StandardWorkingHoursCalculator
from .factory import AttendanceStrategyFactory
from .model import AttendanceRecord, ClockEvent
from .policy import effective_policy, local_time_for


class AttendanceStateMachine:
    """Pure attendance transitions.

    Every method takes the current record (or None) plus already-resolved
    policy and geofences, and returns a new record. Nothing here reads or
    writes storage; a raised error means no transition happened.

    Clock state runs not_started -> clocked_in -> clocked_out. Approval
    (pending / approved / rejected) is tracked independently of it.

    Timestamps are kept as naive wall-clock time in ``default_timezone``;
    aware inputs are converted on the way in.
    """

    def __init__(
        self,
        *,
        engine: GeofenceEngine | None = None,
        calculator: WorkingHoursCalculator | None = None,
        strategy_factory: AttendanceStrategyFactory | None = None,
        default_timezone: str | None = None,
    ):
        self._engine = engine or GeofenceEngine()
        self._calculator = calculator or StandardWorkingHoursCalculator()
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._default_timezone = default_timezone

    def normalize(self, moment: Optional[datetime]) -> Optional[datetime]:
        if moment is None:
            return None
        return to_wall_clock(moment, self._default_timezone)

    def work_date_for(self, moment: datetime) -> date:
        return self.normalize(moment).date()

    @staticmethod
    def _submission_approval(policy: AttendancePolicy, submitted_at: datetime) -> dict:
        if policy.approval_required:
            return {
                "approval_status": ApprovalStatus.PENDING,
                "approved_by": None,
                "approved_at": None,
                "approval_notes": None,
            }
        return {
            "approval_status": ApprovalStatus.APPROVED,
            "approved_by": None,
            "approved_at": submitted_at,
            "approval_notes": None,
        }

    def _hours_fields(
        self,
        clock_in: Optional[datetime],
        clock_out: Optional[datetime],
        standard_hours: Decimal,
    ) -> dict:
        if clock_in is None or clock_out is None:
            return {"working_hours": None, "overtime_hours": Decimal("0")}
        hours = self._calculator.compute(clock_in, clock_out, standard_hours)
        return {"working_hours": hours.working_hours, "overtime_hours": hours.overtime_hours}

    @staticmethod
    def _clock_in_geofence(record: AttendanceRecord, geofences: Sequence[Geofence]) -> Optional[Geofence]:
        if record.clock_in_geofence_id is None:
            return None
        for geofence in geofences:
            if geofence.geofence_id == record.clock_in_geofence_id:
                return geofence
        return None

    def clock_in(
        self,
        record: Optional[AttendanceRecord],
        *,
        user_id: int,
        event: ClockEvent,
        policy: AttendancePolicy,
        geofences: Sequence[Geofence],
    ) -> AttendanceRecord:
        if record is not None and record.clock_in_time is not None:
            raise AlreadyClockedIn("Already clocked in today")

        location = self._engine.classify_location(geofences, event.coordinates)
        day_policy = effective_policy(policy, location.geofence)
        local_time = local_time_for(event.timestamp, location.geofence, self._default_timezone)
        strategy = self._factory.for_clock_in(local_time=local_time, policy=day_policy)
        decision = strategy.decide_clock_in(local_time=local_time)
        timestamp = self.normalize(event.timestamp)

        base = record or AttendanceRecord(
            attendance_id=None,
            user_id=int(user_id),
            work_date=timestamp.date(),
        )
        # The day is now self-reported, no longer a manual entry.
        return replace(
            base,
            clock_in_time=timestamp,
            clock_in_photo=event.photo_reference,
            clock_in_location=event.coordinates,
            clock_in_geofence_id=location.geofence.geofence_id if location.geofence else None,
            status=decision.status,
            location_status=location.location_status,
            notes=event.notes or base.notes,
            is_manual_entry=False,
            manual_entry_reason=None,
            **self._submission_approval(policy, timestamp),
        )

    def clock_out(
        self,
        record: Optional[AttendanceRecord],
        *,
        event: ClockEvent,
        policy: AttendancePolicy,
        geofences: Sequence[Geofence] = (),
    ) -> AttendanceRecord:
        if record is None or record.clock_in_time is None:
            raise NotClockedIn("Must clock in before clocking out")
        if record.clock_out_time is not None:
            raise AlreadyClockedOut("Already clocked out today")
        timestamp = self.normalize(event.timestamp)
        clock_in = self.normalize(record.clock_in_time)
        if timestamp < clock_in:
            raise InvalidTimeOrder("Clock-out cannot be earlier than clock-in")

        day_policy = effective_policy(policy, self._clock_in_geofence(record, geofences))
        decision = self._factory.for_clock_out().decide_clock_out(current=record.status)

        return replace(
            record,
            clock_out_time=timestamp,
            clock_out_photo=event.photo_reference,
            clock_out_location=event.coordinates,
            status=decision.status,
            notes=event.notes or record.notes,
            **self._hours_fields(clock_in, timestamp, day_policy.working_hours_per_day),
            **self._submission_approval(policy, timestamp),
        )

    def manual_entry(
        self,
        record: Optional[AttendanceRecord],
        *,
        user_id: int,
        work_date: date,
        status: Any,
        reason: str,
        admin_id: int,
        entered_at: datetime,
        policy: AttendancePolicy,
        clock_in: Optional[datetime] = None,
        clock_out: Optional[datetime] = None,
    ) -> AttendanceRecord:
        """Administrator-entered attendance; no lateness or geofence evaluation."""
        reason = require_non_empty(reason, "Reason for manual entry")
        try:
            manual_status = AttendanceStatus(status)
        except ValueError:
            manual_status = None
        if manual_status not in MANUAL_ENTRY_STATUSES:
            raise ValidationError("Valid status is required")

        if record is None:
            record = AttendanceRecord(
                attendance_id=None,
                user_id=int(user_id),
                work_date=work_date,
                approval_status=ApprovalStatus.APPROVED,
                approved_by=int(admin_id),
                approved_at=self.normalize(entered_at),
            )

        new_in = self.normalize(clock_in or record.clock_in_time)
        new_out = self.normalize(clock_out or record.clock_out_time)
        self._check_order(new_in, new_out)

        return replace(
            record,
            clock_in_time=new_in,
            clock_out_time=new_out,
            status=manual_status,
            is_manual_entry=True,
            manual_entry_reason=reason,
            **self._hours_fields(new_in, new_out, policy.working_hours_per_day),
        )

    def admin_update(
        self,
        record: AttendanceRecord,
        *,
        policy: AttendancePolicy,
        geofences: Sequence[Geofence] = (),
        clock_in: Optional[datetime] = None,
        clock_out: Optional[datetime] = None,
        status: Any = None,
        notes: Optional[str] = None,
    ) -> AttendanceRecord:
        new_status = record.status
        if status is not None:
            try:
                new_status = AttendanceStatus(status)
            except ValueError:
                raise ValidationError("Valid status is required") from None

        new_in = self.normalize(clock_in or record.clock_in_time)
        new_out = self.normalize(clock_out or record.clock_out_time)
        self._check_order(new_in, new_out)

        day_policy = effective_policy(policy, self._clock_in_geofence(record, geofences))
        return replace(
            record,
            clock_in_time=new_in,
            clock_out_time=new_out,
            status=new_status,
            notes=record.notes if notes is None else require_max_length(notes, "Notes"),
            **self._hours_fields(new_in, new_out, day_policy.working_hours_per_day),
        )

    @staticmethod
    def _check_order(clock_in: Optional[datetime], clock_out: Optional[datetime]) -> None:
        if clock_out is None:
            return
        if clock_in is None:
            raise ValidationError("Clock-out requires a clock-in")
        if clock_out < clock_in:
            raise ValidationError("Clock-out cannot be earlier than clock-in")

    def decide_approval(
        self,
        record: AttendanceRecord,
        *,
        decision: Any,
        approver_id: int,
        decided_at: datetime,
        notes: Optional[str] = None,
    ) -> AttendanceRecord:
        """Approve or reject a submission.

        A decided record may be decided again; approver, notes and time are
        overwritten.
        """
        try:
            new_status = ApprovalStatus(decision)
        except ValueError:
            new_status = None
        if new_status not in APPROVAL_DECISIONS:
            raise ValidationError("Status must be approved or rejected")

        if record.clock_in_time is None and not record.is_manual_entry:
            raise NothingToApprove("Nothing has been submitted for this record")

        return replace(
            record,
            approval_status=new_status,
            approved_by=int(approver_id),
            approved_at=self.normalize(decided_at),
            approval_notes=require_max_length(notes, "Approval notes"),
        )

    def soft_delete(self, record: AttendanceRecord, *, deleted_at: datetime) -> AttendanceRecord:
        if not record.is_active:
            raise AttendanceNotFound("Attendance record not found")
        return replace(record, is_active=False, deleted_at=self.normalize(deleted_at))
