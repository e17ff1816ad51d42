from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from datetime import time
from decimal import Decimal, InvalidOperation
from typing import Any, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..common.validators import coerce_float, validate_coordinates
from ..core.constants import DEFAULT_GEOFENCE_COLOR
from ..core.enums import GeofenceType
from ..core.exceptions import ValidationError

_HEX_COLOR = re.compile(r"^#[0-9A-F]{6}$", re.IGNORECASE)


@dataclass(frozen=True)
class Coordinate:
    latitude: float
    longitude: float

    def __post_init__(self):
        validate_coordinates(self.latitude, self.longitude)

    @classmethod
    def from_optional(cls, latitude: Any, longitude: Any) -> Optional["Coordinate"]:
        """Build a coordinate from raw client input.

        Both values missing means "no GPS fix"; only one of them is malformed.
        """
        lat = coerce_float(latitude, "latitude")
        lon = coerce_float(longitude, "longitude")
        if lat is None and lon is None:
            return None
        if lat is None or lon is None:
            raise ValidationError("Latitude and longitude must be supplied together")
        return cls(latitude=lat, longitude=lon)

    @classmethod
    def from_mapping(cls, data: Optional[dict]) -> Optional["Coordinate"]:
        if not data:
            return None
        return cls.from_optional(data.get("latitude"), data.get("longitude"))

    def to_dict(self) -> dict:
        return {"latitude": self.latitude, "longitude": self.longitude}


@dataclass(frozen=True)
class GeofenceWorkingHours:
    """Per-location policy override."""

    late_time: Optional[time] = None
    hours_per_day: Optional[Decimal] = None

    @classmethod
    def from_mapping(cls, data: Optional[dict]) -> Optional["GeofenceWorkingHours"]:
        if not data:
            return None
        late_time = None
        raw_late = data.get("late_time")
        if raw_late:
            try:
                hour, minute = (int(part) for part in str(raw_late).split(":")[:2])
                late_time = time(hour, minute)
            except ValueError:
                raise ValidationError(f"Invalid late_time (HH:MM): {raw_late!r}") from None
        hours = None
        raw_hours = data.get("hours_per_day")
        if raw_hours not in (None, ""):
            try:
                hours = Decimal(str(raw_hours))
            except InvalidOperation:
                hours = None
            if hours is None or not hours.is_finite() or hours <= 0:
                raise ValidationError(f"Invalid hours_per_day: {raw_hours!r}")
        return cls(late_time=late_time, hours_per_day=hours)

    def to_dict(self) -> dict:
        return {
            "late_time": self.late_time.strftime("%H:%M") if self.late_time else None,
            "hours_per_day": str(self.hours_per_day) if self.hours_per_day is not None else None,
        }


@dataclass(frozen=True)
class Geofence:
    """Administrator-defined region used to validate attendance location."""

    geofence_id: int
    name: str
    type: GeofenceType
    created_by: int
    center: Optional[Coordinate] = None
    radius_meters: Optional[float] = None
    vertices: tuple[Coordinate, ...] = field(default_factory=tuple)
    is_active: bool = True
    description: Optional[str] = None
    color: str = DEFAULT_GEOFENCE_COLOR
    timezone: Optional[str] = None
    working_hours: Optional[GeofenceWorkingHours] = None

    def __post_init__(self):
        if not self.name or not (2 <= len(self.name.strip()) <= 100):
            raise ValidationError("Name must be between 2 and 100 characters")
        if self.type == GeofenceType.CIRCLE:
            radius = self.radius_meters
            if self.center is None or radius is None or not math.isfinite(radius) or radius <= 0:
                raise ValidationError("Circle geofence requires center and radius")
        elif self.type == GeofenceType.POLYGON:
            if len(self.vertices) < 3:
                raise ValidationError("Polygon geofence requires at least 3 coordinates")
        if not _HEX_COLOR.match(self.color or ""):
            raise ValidationError("Color must be a valid hex color")
        if self.timezone:
            try:
                ZoneInfo(self.timezone)
            except (ZoneInfoNotFoundError, ValueError):
                raise ValidationError(f"Unknown timezone: {self.timezone}") from None
