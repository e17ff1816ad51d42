from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Optional, Sequence

import mysql.connector

from ..core.enums import ApprovalStatus, AttendanceStatus, LocationStatus, parse_stored_enum
from ..core.exceptions import DuplicateAttendance, StaleRecord
from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    DUPLICATE_ENTRY_ERRNO,
    coordinate_from_column,
    coordinate_to_column,
    db_cursor,
    decimal_or_none,
    fetchall,
    fetchone,
)
from .model import AttendanceRecord
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

_COLUMNS = """
    attendance_id, user_id, work_date, clock_in_time, clock_out_time,
    clock_in_photo, clock_out_photo, clock_in_location, clock_out_location,
    clock_in_geofence_id, status, location_status, approval_status,
    approved_by, approved_at, approval_notes, working_hours, overtime_hours,
    notes, is_manual_entry, manual_entry_reason, active_marker, deleted_at, version
"""


def _to_record(r: Dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        user_id=int(r["user_id"]),
        work_date=r["work_date"],
        clock_in_time=r.get("clock_in_time"),
        clock_out_time=r.get("clock_out_time"),
        clock_in_photo=r.get("clock_in_photo"),
        clock_out_photo=r.get("clock_out_photo"),
        clock_in_location=coordinate_from_column(r.get("clock_in_location")),
        clock_out_location=coordinate_from_column(r.get("clock_out_location")),
        clock_in_geofence_id=r.get("clock_in_geofence_id"),
        status=parse_stored_enum(AttendanceStatus, r["status"], field_name="status"),
        location_status=parse_stored_enum(LocationStatus, r["location_status"], field_name="location status"),
        approval_status=parse_stored_enum(ApprovalStatus, r["approval_status"], field_name="approval status"),
        approved_by=r.get("approved_by"),
        approved_at=r.get("approved_at"),
        approval_notes=r.get("approval_notes"),
        working_hours=decimal_or_none(r.get("working_hours")),
        overtime_hours=decimal_or_none(r.get("overtime_hours")) or Decimal("0"),
        notes=r.get("notes"),
        is_manual_entry=bool(r.get("is_manual_entry")),
        manual_entry_reason=r.get("manual_entry_reason"),
        is_active=r.get("active_marker") is not None,
        deleted_at=r.get("deleted_at"),
        version=int(r["version"]),
    )


def _to_params(record: AttendanceRecord) -> tuple:
    return (
        record.clock_in_time,
        record.clock_out_time,
        record.clock_in_photo,
        record.clock_out_photo,
        coordinate_to_column(record.clock_in_location),
        coordinate_to_column(record.clock_out_location),
        record.clock_in_geofence_id,
        record.status.value,
        record.location_status.value,
        record.approval_status.value,
        record.approved_by,
        record.approved_at,
        record.approval_notes,
        record.working_hours,
        record.overtime_hours,
        record.notes,
        int(record.is_manual_entry),
        record.manual_entry_reason,
        1 if record.is_active else None,
        record.deleted_at,
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE attendance_id=%s AND active_marker IS NOT NULL",
                (int(attendance_id),),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM attendance_records
                WHERE user_id=%s AND work_date=%s AND active_marker IS NOT NULL
                """,
                (int(user_id), work_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_recent_for_user(self, user_id: int, limit: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM attendance_records
                WHERE user_id=%s AND active_marker IS NOT NULL
                ORDER BY work_date DESC
                LIMIT %s
                """,
                (int(user_id), int(limit)),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_pending(self, *, limit: int, offset: int = 0) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM attendance_records
                WHERE approval_status='pending' AND active_marker IS NOT NULL
                ORDER BY created_at DESC
                LIMIT %s OFFSET %s
                """,
                (int(limit), int(offset)),
            )
            return [_to_record(r) for r in fetchall(cur)]

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
        where = ["active_marker IS NOT NULL"]
        params: list = []
        if user_id is not None:
            where.append("user_id=%s")
            params.append(int(user_id))
        if start_date is not None:
            where.append("work_date>=%s")
            params.append(start_date)
        if end_date is not None:
            where.append("work_date<=%s")
            params.append(end_date)
        if status is not None:
            where.append("status=%s")
            params.append(status.value)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM attendance_records
                WHERE {" AND ".join(where)}
                ORDER BY work_date DESC, clock_in_time DESC
                LIMIT %s OFFSET %s
                """,
                tuple(params) + (int(limit), int(offset)),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def create(self, record: AttendanceRecord) -> AttendanceRecord:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_records(
                        user_id, work_date,
                        clock_in_time, clock_out_time, clock_in_photo, clock_out_photo,
                        clock_in_location, clock_out_location, clock_in_geofence_id,
                        status, location_status, approval_status,
                        approved_by, approved_at, approval_notes,
                        working_hours, overtime_hours, notes,
                        is_manual_entry, manual_entry_reason, active_marker, deleted_at, version
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,1)
                    """,
                    (int(record.user_id), record.work_date) + _to_params(record),
                )
                new_id = int(cur.lastrowid)
        except mysql.connector.IntegrityError as exc:
            if exc.errno == DUPLICATE_ENTRY_ERRNO:
                logger.warning("Concurrent create for user %s on %s rejected", record.user_id, record.work_date)
                raise DuplicateAttendance("Attendance for this user and date already exists") from exc
            raise
        return replace(record, attendance_id=new_id, version=1)

    def update(self, record: AttendanceRecord) -> AttendanceRecord:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET clock_in_time=%s, clock_out_time=%s, clock_in_photo=%s, clock_out_photo=%s,
                    clock_in_location=%s, clock_out_location=%s, clock_in_geofence_id=%s,
                    status=%s, location_status=%s, approval_status=%s,
                    approved_by=%s, approved_at=%s, approval_notes=%s,
                    working_hours=%s, overtime_hours=%s, notes=%s,
                    is_manual_entry=%s, manual_entry_reason=%s, active_marker=%s, deleted_at=%s,
                    version=version+1
                WHERE attendance_id=%s AND version=%s
                """,
                _to_params(record) + (int(record.attendance_id), int(record.version)),
            )
            updated = cur.rowcount
        if updated != 1:
            logger.warning("Attendance %s changed concurrently (version %s)", record.attendance_id, record.version)
            raise StaleRecord("Attendance record was modified by another request")
        return replace(record, version=record.version + 1)
