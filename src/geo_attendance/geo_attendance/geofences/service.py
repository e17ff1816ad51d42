from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Optional, Sequence

from ..common.validators import coerce_float, require_max_length, require_non_empty
from ..core.constants import DEFAULT_GEOFENCE_COLOR, DEFAULT_PAGE_SIZE
from ..core.enums import GeofenceType
from ..core.exceptions import GeofenceNotFound, ValidationError
from .engine import GeofenceEngine
from .model import Coordinate, Geofence, GeofenceWorkingHours
from .repository import GeofenceRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeofenceTestResult:
    is_inside: bool
    distance_meters: Optional[int]

    def to_dict(self) -> dict:
        return {"is_inside": self.is_inside, "distance_meters": self.distance_meters}


class GeofenceService:
    """Administrative geofence operations (definition and location testing)."""

    def __init__(self, geofences: GeofenceRepository, *, engine: GeofenceEngine | None = None):
        self._geofences = geofences
        self._engine = engine or GeofenceEngine()

    def _require(self, geofence_id: int) -> Geofence:
        geofence = self._geofences.get_by_id(int(geofence_id))
        if not geofence:
            raise GeofenceNotFound("Geofence not found")
        return geofence

    @staticmethod
    def _vertices(coordinates: Optional[Sequence[dict]]) -> tuple:
        vertices = tuple(Coordinate.from_mapping(v) for v in (coordinates or ()))
        if any(v is None for v in vertices):
            raise ValidationError("Polygon coordinates must each have latitude and longitude")
        return vertices

    def test_location(self, *, geofence_id: int, latitude: Any, longitude: Any) -> GeofenceTestResult:
        point = Coordinate.from_optional(latitude, longitude)
        if point is None:
            raise ValidationError("Valid latitude and longitude are required")

        geofence = self._require(geofence_id)
        distance = self._engine.distance_from_reference(geofence, point.latitude, point.longitude)
        return GeofenceTestResult(
            is_inside=self._engine.is_inside(geofence, point.latitude, point.longitude),
            distance_meters=round(distance) if distance is not None else None,
        )

    def create_geofence(
        self,
        *,
        created_by: int,
        name: str,
        type: str,
        center: Optional[dict] = None,
        radius: Any = None,
        coordinates: Optional[Sequence[dict]] = None,
        description: Optional[str] = None,
        color: Optional[str] = None,
        timezone: Optional[str] = None,
        working_hours: Optional[dict] = None,
    ) -> int:
        try:
            geofence_type = GeofenceType(str(type).strip().lower())
        except ValueError:
            raise ValidationError("Type must be circle or polygon") from None

        geofence = Geofence(
            geofence_id=0,
            name=require_non_empty(name, "Name"),
            type=geofence_type,
            created_by=int(created_by),
            center=Coordinate.from_mapping(center),
            radius_meters=coerce_float(radius, "radius"),
            vertices=self._vertices(coordinates),
            description=require_max_length(description, "Description"),
            color=color or DEFAULT_GEOFENCE_COLOR,
            timezone=(timezone or "").strip() or None,
            working_hours=GeofenceWorkingHours.from_mapping(working_hours),
        )
        geofence_id = self._geofences.create(geofence)
        logger.info("Geofence %s (%s) created by admin %s", geofence_id, geofence_type.value, created_by)
        return geofence_id

    def get_geofence(self, geofence_id: int) -> Geofence:
        return self._require(geofence_id)

    def list_geofences(
        self,
        *,
        is_active: Optional[bool] = None,
        limit: int = DEFAULT_PAGE_SIZE,
        offset: int = 0,
    ) -> Sequence[Geofence]:
        return self._geofences.list_all(is_active=is_active, limit=int(limit), offset=int(offset))

    def update_geofence(
        self,
        *,
        geofence_id: int,
        name: Optional[str] = None,
        description: Optional[str] = None,
        center: Optional[dict] = None,
        radius: Any = None,
        coordinates: Optional[Sequence[dict]] = None,
        color: Optional[str] = None,
        timezone: Optional[str] = None,
        working_hours: Optional[dict] = None,
    ) -> Geofence:
        """Edit a geofence; fields left as None keep their current value.

        The shape type is fixed at creation. An empty description clears it.
        """
        current = self._require(geofence_id)

        changes: dict = {}
        if name:
            changes["name"] = name.strip()
        if description is not None:
            changes["description"] = require_max_length(description, "Description")
        if center:
            changes["center"] = Coordinate.from_mapping(center)
        if radius not in (None, ""):
            changes["radius_meters"] = coerce_float(radius, "radius")
        if coordinates:
            changes["vertices"] = self._vertices(coordinates)
        if color:
            changes["color"] = color
        if timezone and timezone.strip():
            changes["timezone"] = timezone.strip()
        if working_hours:
            changes["working_hours"] = GeofenceWorkingHours.from_mapping(working_hours)

        # replace() re-runs Geofence validation on the merged result
        updated = replace(current, **changes)
        self._geofences.update(updated)
        logger.info("Geofence %s updated (%s)", geofence_id, ", ".join(sorted(changes)) or "no changes")
        return updated

    def set_active(self, *, geofence_id: int, is_active: bool) -> None:
        self._require(geofence_id)
        self._geofences.set_active(int(geofence_id), bool(is_active))
        logger.info("Geofence %s %s", geofence_id, "activated" if is_active else "deactivated")

    def list_active(self) -> Sequence[Geofence]:
        return self._geofences.list_active()

    def delete_geofence(self, geofence_id: int) -> None:
        """Remove a geofence; attendance keeps its clock_in_geofence_id as history."""
        self._require(geofence_id)
        self._geofences.delete(int(geofence_id))
        logger.info("Geofence %s deleted", geofence_id)
