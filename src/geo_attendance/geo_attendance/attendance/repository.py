from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    """Persistence for attendance records.

    Implementations must keep at most one active record per (user, date):
    ``create`` raises DuplicateAttendance when another writer got there
    first, ``update`` raises StaleRecord when ``record.version`` no longer
    matches the stored row. Lookups only return active records.

    Timestamps arrive and are returned as naive wall-clock datetimes.
    """

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_recent_for_user(self, user_id: int, limit: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_pending(self, *, limit: int, offset: int = 0) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def search(
        self,
        *,
        user_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        status: Optional[AttendanceStatus] = None,
        limit: int,
        offset: int = 0,
    ) -> Sequence[AttendanceRecord]:
        """Administrator listing, newest day first; every filter is optional."""
        raise NotImplementedError

    def create(self, record: AttendanceRecord) -> AttendanceRecord:
        """Insert ``record`` and return it with its id and version assigned."""
        raise NotImplementedError

    def update(self, record: AttendanceRecord) -> AttendanceRecord:
        """Persist ``record`` and return it with its version bumped."""
        raise NotImplementedError
