from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, time, timezone
from decimal import Decimal

import pytest

from geo_attendance.attendance.model import AttendanceRecord, ClockEvent
from geo_attendance.attendance.state_machine import AttendanceStateMachine
from geo_attendance.core.enums import ApprovalStatus, AttendanceStatus, ClockState, GeofenceType, LocationStatus
from geo_attendance.core.exceptions import (
    AlreadyClockedIn,
    AlreadyClockedOut,
    AttendanceNotFound,
    InvalidTimeOrder,
    NotClockedIn,
    NothingToApprove,
    ValidationError,
)
from geo_attendance.geofences.model import Coordinate, Geofence, GeofenceWorkingHours
from geo_attendance.settings.model import AttendancePolicy

DAY = date(2026, 3, 2)
PHOTO = "data:image/jpeg;base64,/9j/4AAQSkZJRgABAQ"
OFFICE = Geofence(
    geofence_id=1,
    name="Office",
    type=GeofenceType.CIRCLE,
    created_by=99,
    center=Coordinate(10.7769, 106.7009),
    radius_meters=100,
)
INSIDE = Coordinate(10.7772, 106.7010)
OUTSIDE = Coordinate(10.7900, 106.7200)


def at(hour: int, minute: int = 0, second: int = 0) -> datetime:
    return datetime.combine(DAY, time(hour, minute, second))


def event(moment: datetime, coordinates=None, notes=None) -> ClockEvent:
    return ClockEvent(timestamp=moment, photo_reference=PHOTO, coordinates=coordinates, notes=notes)


@pytest.fixture
def machine() -> AttendanceStateMachine:
    return AttendanceStateMachine()


def test_late_clock_in_inside_geofence(machine):
    record = machine.clock_in(
        None, user_id=5, event=event(at(9, 5), INSIDE), policy=AttendancePolicy(), geofences=[OFFICE]
    )

    assert record.attendance_id is None
    assert record.work_date == DAY
    assert record.status == AttendanceStatus.LATE
    assert record.location_status == LocationStatus.VALID
    assert record.approval_status == ApprovalStatus.PENDING
    assert record.clock_in_geofence_id == OFFICE.geofence_id
    assert record.clock_state == ClockState.CLOCKED_IN


def test_on_time_clock_in_outside_geofence_is_invalid_location(machine):
    record = machine.clock_in(
        None, user_id=5, event=event(at(8, 45), OUTSIDE), policy=AttendancePolicy(), geofences=[OFFICE]
    )

    assert record.status == AttendanceStatus.PRESENT
    assert record.location_status == LocationStatus.INVALID
    assert record.clock_in_geofence_id is None


def test_clock_in_without_gps_is_remote(machine):
    record = machine.clock_in(None, user_id=5, event=event(at(9)), policy=AttendancePolicy(), geofences=[OFFICE])
    assert record.location_status == LocationStatus.REMOTE
    assert record.status == AttendanceStatus.PRESENT


def test_clock_in_approved_immediately_when_approval_not_required(machine):
    record = machine.clock_in(
        None,
        user_id=5,
        event=event(at(8, 30)),
        policy=AttendancePolicy(approval_required=False),
        geofences=[],
    )
    assert record.approval_status == ApprovalStatus.APPROVED
    assert record.approved_at == at(8, 30)


def test_second_clock_in_is_rejected_without_mutation(machine):
    first = machine.clock_in(None, user_id=5, event=event(at(9, 5)), policy=AttendancePolicy(), geofences=[])

    with pytest.raises(AlreadyClockedIn):
        machine.clock_in(first, user_id=5, event=event(at(9, 30)), policy=AttendancePolicy(), geofences=[])

    assert first.clock_in_time == at(9, 5)


def test_clock_in_fills_existing_record_without_clock_in(machine):
    absent = AttendanceRecord(
        attendance_id=3,
        user_id=5,
        work_date=DAY,
        status=AttendanceStatus.ABSENT,
        is_manual_entry=True,
        manual_entry_reason="Marked absent by supervisor",
        notes="existing",
    )

    record = machine.clock_in(absent, user_id=5, event=event(at(8, 50)), policy=AttendancePolicy(), geofences=[])

    assert record.attendance_id == 3
    assert record.status == AttendanceStatus.PRESENT
    assert record.notes == "existing"
    assert record.is_manual_entry is False
    assert record.manual_entry_reason is None


def test_geofence_override_drives_lateness(machine):
    early_site = replace(OFFICE, working_hours=GeofenceWorkingHours(late_time=time(8, 0)))

    record = machine.clock_in(
        None, user_id=5, event=event(at(8, 30), INSIDE), policy=AttendancePolicy(), geofences=[early_site]
    )

    assert record.status == AttendanceStatus.LATE


def test_clock_out_computes_hours_and_resets_approval(machine):
    clocked_in = machine.clock_in(
        None, user_id=5, event=event(at(9, 5), INSIDE), policy=AttendancePolicy(), geofences=[OFFICE]
    )
    approved = machine.decide_approval(clocked_in, decision="approved", approver_id=99, decided_at=at(10))

    record = machine.clock_out(approved, event=event(at(18), INSIDE, notes="done"), policy=AttendancePolicy())

    assert record.working_hours == Decimal("8.92")
    assert record.overtime_hours == Decimal("0.92")
    assert record.approval_status == ApprovalStatus.PENDING
    assert record.approved_by is None
    assert record.status == AttendanceStatus.LATE
    assert record.notes == "done"
    assert record.clock_state == ClockState.CLOCKED_OUT


def test_clock_out_uses_clock_in_geofence_standard_hours(machine):
    long_site = replace(OFFICE, working_hours=GeofenceWorkingHours(hours_per_day=Decimal("10")))
    clocked_in = machine.clock_in(
        None, user_id=5, event=event(at(8), INSIDE), policy=AttendancePolicy(), geofences=[long_site]
    )

    record = machine.clock_out(clocked_in, event=event(at(18)), policy=AttendancePolicy(), geofences=[long_site])

    assert record.working_hours == Decimal("10")
    assert record.overtime_hours == Decimal("0")


def test_clock_out_preconditions(machine):
    with pytest.raises(NotClockedIn):
        machine.clock_out(None, event=event(at(18)), policy=AttendancePolicy())
    with pytest.raises(NotClockedIn):
        machine.clock_out(
            AttendanceRecord(attendance_id=1, user_id=5, work_date=DAY),
            event=event(at(18)),
            policy=AttendancePolicy(),
        )

    clocked_in = machine.clock_in(None, user_id=5, event=event(at(9)), policy=AttendancePolicy(), geofences=[])
    with pytest.raises(InvalidTimeOrder):
        machine.clock_out(clocked_in, event=event(at(8)), policy=AttendancePolicy())

    clocked_out = machine.clock_out(clocked_in, event=event(at(17)), policy=AttendancePolicy())
    with pytest.raises(AlreadyClockedOut):
        machine.clock_out(clocked_out, event=event(at(18)), policy=AttendancePolicy())


def test_approval_overwrites_previous_decision(machine):
    record = machine.clock_in(None, user_id=5, event=event(at(9)), policy=AttendancePolicy(), geofences=[])

    rejected = machine.decide_approval(
        record, decision="rejected", approver_id=1, decided_at=at(10), notes="blurry photo"
    )
    approved = machine.decide_approval(rejected, decision=ApprovalStatus.APPROVED, approver_id=2, decided_at=at(11))

    assert rejected.approval_status == ApprovalStatus.REJECTED
    assert rejected.approval_notes == "blurry photo"
    assert approved.approval_status == ApprovalStatus.APPROVED
    assert approved.approved_by == 2
    assert approved.approval_notes is None
    assert approved.approved_at == at(11)


def test_repeated_approval_only_refreshes_time_and_notes(machine):
    record = machine.clock_in(None, user_id=5, event=event(at(9)), policy=AttendancePolicy(), geofences=[])
    once = machine.decide_approval(record, decision="approved", approver_id=1, decided_at=at(10), notes="ok")
    twice = machine.decide_approval(once, decision="approved", approver_id=1, decided_at=at(12), notes="ok")

    assert replace(twice, approved_at=once.approved_at) == once


def test_approval_rejects_bad_decision_and_empty_record(machine):
    record = machine.clock_in(None, user_id=5, event=event(at(9)), policy=AttendancePolicy(), geofences=[])
    with pytest.raises(ValidationError):
        machine.decide_approval(record, decision="pending", approver_id=1, decided_at=at(10))
    with pytest.raises(NothingToApprove):
        machine.decide_approval(
            AttendanceRecord(attendance_id=1, user_id=5, work_date=DAY),
            decision="approved",
            approver_id=1,
            decided_at=at(10),
        )


def test_manual_entry_bypasses_evaluation_and_is_approved(machine):
    record = machine.manual_entry(
        None,
        user_id=5,
        work_date=DAY,
        status="present",
        reason="Phone battery died",
        admin_id=99,
        entered_at=at(20),
        policy=AttendancePolicy(),
        clock_in=at(10),
        clock_out=at(19),
    )

    assert record.status == AttendanceStatus.PRESENT
    assert record.is_manual_entry is True
    assert record.manual_entry_reason == "Phone battery died"
    assert record.approval_status == ApprovalStatus.APPROVED
    assert record.approved_by == 99
    assert record.working_hours == Decimal("9")
    assert record.overtime_hours == Decimal("1")


def test_manual_entry_keeps_existing_approval_state(machine):
    pending = machine.clock_in(None, user_id=5, event=event(at(9)), policy=AttendancePolicy(), geofences=[])

    record = machine.manual_entry(
        pending,
        user_id=5,
        work_date=DAY,
        status="remote",
        reason="Worked from client site",
        admin_id=99,
        entered_at=at(20),
        policy=AttendancePolicy(),
    )

    assert record.approval_status == ApprovalStatus.PENDING
    assert record.clock_in_time == at(9)
    assert record.status == AttendanceStatus.REMOTE


@pytest.mark.parametrize(
    "kwargs",
    [
        {"status": "present", "reason": "  "},
        {"status": "invalid", "reason": "x"},
        {"status": "present", "reason": "x", "clock_out": at(17)},
        {"status": "present", "reason": "x", "clock_in": at(17), "clock_out": at(9)},
    ],
)
def test_manual_entry_validation(machine, kwargs):
    with pytest.raises(ValidationError):
        machine.manual_entry(
            None, user_id=5, work_date=DAY, admin_id=1, entered_at=at(20), policy=AttendancePolicy(), **kwargs
        )


def test_admin_update_rederives_hours(machine):
    clocked_in = machine.clock_in(None, user_id=5, event=event(at(9)), policy=AttendancePolicy(), geofences=[])
    clocked_out = machine.clock_out(clocked_in, event=event(at(17)), policy=AttendancePolicy())

    record = machine.admin_update(clocked_out, policy=AttendancePolicy(), clock_out=at(18), notes="corrected")

    assert record.working_hours == Decimal("9")
    assert record.overtime_hours == Decimal("1")
    assert record.approval_status == clocked_out.approval_status
    assert record.notes == "corrected"

    assert machine.admin_update(record, policy=AttendancePolicy()).notes == "corrected"
    assert machine.admin_update(record, policy=AttendancePolicy(), notes="  ").notes is None


def test_soft_delete_marks_inactive_once(machine):
    record = AttendanceRecord(attendance_id=1, user_id=5, work_date=DAY)
    deleted = machine.soft_delete(record, deleted_at=at(20))

    assert deleted.is_active is False
    assert deleted.deleted_at == at(20)
    with pytest.raises(AttendanceNotFound):
        machine.soft_delete(deleted, deleted_at=at(21))


def test_aware_and_stored_naive_times_compare_in_the_default_zone():
    machine = AttendanceStateMachine(default_timezone="Asia/Ho_Chi_Minh")
    # as read back from a DATETIME column
    stored = AttendanceRecord(attendance_id=1, user_id=5, work_date=DAY, clock_in_time=at(9))

    record = machine.clock_out(
        stored,
        event=event(datetime(2026, 3, 2, 10, 0, tzinfo=timezone.utc)),
        policy=AttendancePolicy(),
    )

    assert record.clock_out_time == at(17)
    assert record.working_hours == Decimal("8")
    with pytest.raises(InvalidTimeOrder):
        machine.clock_out(stored, event=event(datetime(2026, 3, 2, 1, 0, tzinfo=timezone.utc)), policy=AttendancePolicy())
    with pytest.raises(ValidationError):
        machine.admin_update(stored, policy=AttendancePolicy(), clock_out=datetime(2026, 3, 2, 1, 0, tzinfo=timezone.utc))
