from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..core.constants import DEFAULT_GEOFENCE_COLOR
from ..core.enums import GeofenceType, parse_stored_enum
from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    coordinate_from_column,
    coordinate_to_column,
    db_cursor,
    dump_json,
    fetchall,
    fetchone,
    load_json,
)
from .model import Coordinate, Geofence, GeofenceWorkingHours
from .repository import GeofenceRepository

_COLUMNS = """
    geofence_id, name, description, type, center, radius_meters, vertices,
    is_active, created_by, color, timezone, working_hours
"""


def _to_geofence(r: Dict[str, Any]) -> Geofence:
    vertices = load_json(r.get("vertices")) or []
    return Geofence(
        geofence_id=int(r["geofence_id"]),
        name=r["name"],
        description=r.get("description"),
        type=parse_stored_enum(GeofenceType, r["type"], field_name="geofence type"),
        center=coordinate_from_column(r.get("center")),
        radius_meters=float(r["radius_meters"]) if r.get("radius_meters") is not None else None,
        vertices=tuple(Coordinate.from_mapping(v) for v in vertices),
        is_active=bool(r.get("is_active")),
        created_by=int(r["created_by"]),
        color=r.get("color") or DEFAULT_GEOFENCE_COLOR,
        timezone=r.get("timezone"),
        working_hours=GeofenceWorkingHours.from_mapping(load_json(r.get("working_hours"))),
    )


def _to_params(geofence: Geofence) -> tuple:
    return (
        geofence.name,
        geofence.description,
        geofence.type.value,
        coordinate_to_column(geofence.center),
        geofence.radius_meters,
        dump_json([v.to_dict() for v in geofence.vertices]) if geofence.vertices else None,
        geofence.color,
        geofence.timezone,
        dump_json(geofence.working_hours.to_dict()) if geofence.working_hours else None,
    )


class MySQLGeofenceRepository(GeofenceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, geofence_id: int) -> Optional[Geofence]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM geofences WHERE geofence_id=%s", (int(geofence_id),))
            r = fetchone(cur)
            return _to_geofence(r) if r else None

    def list_active(self) -> Sequence[Geofence]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM geofences WHERE is_active=1 ORDER BY geofence_id")
            return [_to_geofence(r) for r in fetchall(cur)]

    def list_all(self, *, is_active: Optional[bool] = None, limit: int, offset: int = 0) -> Sequence[Geofence]:
        sql = f"SELECT {_COLUMNS} FROM geofences"
        params: tuple = ()
        if is_active is not None:
            sql += " WHERE is_active=%s"
            params = (int(is_active),)
        sql += " ORDER BY created_at DESC, geofence_id DESC LIMIT %s OFFSET %s"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, params + (int(limit), int(offset)))
            return [_to_geofence(r) for r in fetchall(cur)]

    def create(self, geofence: Geofence) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO geofences(
                    name, description, type, center, radius_meters, vertices,
                    color, timezone, working_hours, is_active, created_by
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                _to_params(geofence) + (int(geofence.is_active), int(geofence.created_by)),
            )
            return int(cur.lastrowid)

    def update(self, geofence: Geofence) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE geofences
                SET name=%s, description=%s, type=%s, center=%s, radius_meters=%s, vertices=%s,
                    color=%s, timezone=%s, working_hours=%s
                WHERE geofence_id=%s
                """,
                _to_params(geofence) + (int(geofence.geofence_id),),
            )

    def set_active(self, geofence_id: int, is_active: bool) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE geofences SET is_active=%s WHERE geofence_id=%s",
                (int(is_active), int(geofence_id)),
            )

    def delete(self, geofence_id: int) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM geofences WHERE geofence_id=%s", (int(geofence_id),))
