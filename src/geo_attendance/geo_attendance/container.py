from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .attendance.state_machine import AttendanceStateMachine
from .database.connection import DBConfig, DatabaseConnection
from .geofences.engine import GeofenceEngine
from .geofences.mysql_geofence_repository import MySQLGeofenceRepository
from .geofences.service import GeofenceService
from .settings.mysql_setting_repository import MySQLSettingRepository
from .settings.provider import SettingsProvider
from .settings.service import SettingService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    attendance_repo: MySQLAttendanceRepository
    geofences_repo: MySQLGeofenceRepository
    settings_repo: MySQLSettingRepository

    settings_provider: SettingsProvider
    setting_service: SettingService
    geofence_service: GeofenceService
    attendance_service: AttendanceService


def build_container(*, db_config: dict, default_timezone: Optional[str] = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))

    attendance_repo = MySQLAttendanceRepository(conn)
    geofences_repo = MySQLGeofenceRepository(conn)
    settings_repo = MySQLSettingRepository(conn)

    engine = GeofenceEngine()
    settings_provider = SettingsProvider(settings_repo)
    setting_service = SettingService(settings_repo)
    geofence_service = GeofenceService(geofences_repo, engine=engine)
    attendance_service = AttendanceService(
        attendance_repo,
        geofences_repo,
        settings_provider,
        state_machine=AttendanceStateMachine(engine=engine, default_timezone=default_timezone or None),
    )

    return Container(
        conn=conn,
        attendance_repo=attendance_repo,
        geofences_repo=geofences_repo,
        settings_repo=settings_repo,
        settings_provider=settings_provider,
        setting_service=setting_service,
        geofence_service=geofence_service,
        attendance_service=attendance_service,
    )
