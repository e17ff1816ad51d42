from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Callable, Optional, Sequence

from ..common.datetime_utils import now_utc
from ..core.constants import DEFAULT_HISTORY_LIMIT, DEFAULT_PAGE_SIZE
from ..core.enums import AttendanceStatus, ClockState
from ..core.exceptions import AttendanceNotFound, ValidationError
from ..geofences.repository import GeofenceRepository
from ..settings.provider import SettingsProvider
from .model import AttendanceRecord, AttendanceStatusView, ClockEvent, ClockResult
from .repository import AttendanceRepository
from .state_machine import AttendanceStateMachine

logger = logging.getLogger(__name__)


class AttendanceService:
    """Runs attendance transitions against storage.

    Callers must serialize calls for the same (user, date), e.g. one
    transaction or row lock per request; the repository's uniqueness and
    version checks reject whichever concurrent writer loses.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        geofences: GeofenceRepository,
        settings: SettingsProvider,
        *,
        state_machine: AttendanceStateMachine | None = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._attendance = attendance
        self._geofences = geofences
        self._settings = settings
        self._machine = state_machine or AttendanceStateMachine()
        self._clock = clock or now_utc

    def _save(self, record: AttendanceRecord) -> AttendanceRecord:
        if record.attendance_id is None:
            return self._attendance.create(record)
        return self._attendance.update(record)

    def _require(self, attendance_id: int) -> AttendanceRecord:
        record = self._attendance.get_by_id(int(attendance_id))
        if not record:
            raise AttendanceNotFound("Attendance record not found")
        return record

    def clock_in(
        self,
        user_id: int,
        *,
        photo_reference: str,
        latitude: Any = None,
        longitude: Any = None,
        notes: Optional[str] = None,
        timestamp: datetime | None = None,
    ) -> ClockResult:
        event = ClockEvent.from_input(
            timestamp=timestamp or self._clock(),
            photo_reference=photo_reference,
            latitude=latitude,
            longitude=longitude,
            notes=notes,
        )
        work_date = self._machine.work_date_for(event.timestamp)
        existing = self._attendance.get_for_user_and_date(int(user_id), work_date)

        record = self._machine.clock_in(
            existing,
            user_id=int(user_id),
            event=event,
            policy=self._settings.snapshot(),
            geofences=self._geofences.list_active(),
        )
        saved = self._save(record)
        logger.info(
            "User %s clocked in on %s: status=%s location=%s approval=%s",
            user_id,
            work_date,
            saved.status.value,
            saved.location_status.value,
            saved.approval_status.value,
        )
        return ClockResult(saved)

    def clock_out(
        self,
        user_id: int,
        *,
        photo_reference: str,
        latitude: Any = None,
        longitude: Any = None,
        notes: Optional[str] = None,
        timestamp: datetime | None = None,
    ) -> ClockResult:
        event = ClockEvent.from_input(
            timestamp=timestamp or self._clock(),
            photo_reference=photo_reference,
            latitude=latitude,
            longitude=longitude,
            notes=notes,
        )
        work_date = self._machine.work_date_for(event.timestamp)
        existing = self._attendance.get_for_user_and_date(int(user_id), work_date)

        record = self._machine.clock_out(
            existing,
            event=event,
            policy=self._settings.snapshot(),
            geofences=self._geofences.list_active(),
        )
        saved = self._save(record)
        logger.info(
            "User %s clocked out on %s: working=%s overtime=%s",
            user_id,
            work_date,
            saved.working_hours,
            saved.overtime_hours,
        )
        return ClockResult(saved)

    def get_status(self, user_id: int, *, today: date | None = None) -> AttendanceStatusView:
        today = today or self._machine.work_date_for(self._clock())
        record = self._attendance.get_for_user_and_date(int(user_id), today)
        if record is None:
            return AttendanceStatusView(state=ClockState.NOT_STARTED, record=None)
        return AttendanceStatusView(state=record.clock_state, record=record)

    def get_history(self, user_id: int, *, limit: int = DEFAULT_HISTORY_LIMIT) -> Sequence[AttendanceRecord]:
        return self._attendance.get_recent_for_user(int(user_id), int(limit))

    def list_pending(self, *, limit: int = DEFAULT_PAGE_SIZE, offset: int = 0) -> Sequence[AttendanceRecord]:
        return self._attendance.list_pending(limit=int(limit), offset=int(offset))

    def list_records(
        self,
        *,
        user_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        status: Any = None,
        limit: int = DEFAULT_PAGE_SIZE,
        offset: int = 0,
    ) -> Sequence[AttendanceRecord]:
        """Administrator listing across users, newest day first."""
        status_filter = None
        if status:
            try:
                status_filter = AttendanceStatus(status)
            except ValueError:
                raise ValidationError("Valid status is required") from None
        if start_date and end_date and end_date < start_date:
            raise ValidationError("End date cannot be before start date")
        return self._attendance.search(
            user_id=int(user_id) if user_id is not None else None,
            start_date=start_date,
            end_date=end_date,
            status=status_filter,
            limit=int(limit),
            offset=int(offset),
        )

    def manual_entry(
        self,
        *,
        admin_id: int,
        user_id: int,
        work_date: date,
        status: Any,
        reason: str,
        clock_in: datetime | None = None,
        clock_out: datetime | None = None,
    ) -> AttendanceRecord:
        existing = self._attendance.get_for_user_and_date(int(user_id), work_date)
        record = self._machine.manual_entry(
            existing,
            user_id=int(user_id),
            work_date=work_date,
            status=status,
            reason=reason,
            admin_id=int(admin_id),
            entered_at=self._clock(),
            policy=self._settings.snapshot(),
            clock_in=clock_in,
            clock_out=clock_out,
        )
        saved = self._save(record)
        logger.info("Admin %s entered attendance for user %s on %s (%s)", admin_id, user_id, work_date, saved.status.value)
        return saved

    def update_record(
        self,
        *,
        attendance_id: int,
        clock_in: datetime | None = None,
        clock_out: datetime | None = None,
        status: Any = None,
        notes: Optional[str] = None,
    ) -> AttendanceRecord:
        record = self._require(attendance_id)
        updated = self._machine.admin_update(
            record,
            policy=self._settings.snapshot(),
            geofences=self._geofences.list_active(),
            clock_in=clock_in,
            clock_out=clock_out,
            status=status,
            notes=notes,
        )
        saved = self._save(updated)
        logger.info("Attendance %s updated by administrator", attendance_id)
        return saved

    def decide_approval(
        self,
        *,
        attendance_id: int,
        decision: Any,
        approver_id: int,
        notes: Optional[str] = None,
    ) -> AttendanceRecord:
        record = self._require(attendance_id)
        decided = self._machine.decide_approval(
            record,
            decision=decision,
            approver_id=int(approver_id),
            decided_at=self._clock(),
            notes=notes,
        )
        saved = self._save(decided)
        logger.info("Attendance %s %s by %s", attendance_id, saved.approval_status.value, approver_id)
        return saved

    def delete_record(self, *, attendance_id: int) -> None:
        record = self._require(attendance_id)
        self._save(self._machine.soft_delete(record, deleted_at=self._clock()))
        logger.info("Attendance %s soft-deleted", attendance_id)
