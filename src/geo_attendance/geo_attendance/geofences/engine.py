from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from ..core.constants import EARTH_RADIUS_METERS
from ..core.enums import GeofenceType, LocationStatus
from .model import Coordinate, Geofence


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two points given in decimal degrees, in meters."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    delta_lat = math.radians(lat2 - lat1)
    delta_lon = math.radians(lon2 - lon1)

    a = math.sin(delta_lat / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(delta_lon / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_METERS * c


def is_point_in_circle(center: Coordinate, radius_meters: float, latitude: float, longitude: float) -> bool:
    return haversine_distance(center.latitude, center.longitude, latitude, longitude) <= radius_meters


def is_point_in_polygon(vertices: Sequence[Coordinate], latitude: float, longitude: float) -> bool:
    """Even-odd ray casting with longitude as x and latitude as y.

    Points lying exactly on an edge or vertex get whatever the crossing test
    yields for them.
    """
    inside = False
    x, y = longitude, latitude
    j = len(vertices) - 1
    for i in range(len(vertices)):
        xi, yi = vertices[i].longitude, vertices[i].latitude
        xj, yj = vertices[j].longitude, vertices[j].latitude
        if (yi > y) != (yj > y) and x < (xj - xi) * (y - yi) / (yj - yi) + xi:
            inside = not inside
        j = i
    return inside


@dataclass(frozen=True)
class LocationEvaluation:
    location_status: LocationStatus
    geofence: Optional[Geofence] = None


class GeofenceEngine:
    """Answers containment and distance questions for a single geofence."""

    def is_inside(self, geofence: Geofence, latitude: float, longitude: float) -> bool:
        if not geofence.is_active:
            return False

        if geofence.type == GeofenceType.CIRCLE:
            if geofence.center is None or not geofence.radius_meters:
                return False
            return is_point_in_circle(geofence.center, float(geofence.radius_meters), latitude, longitude)
        if geofence.type == GeofenceType.POLYGON:
            return is_point_in_polygon(geofence.vertices, latitude, longitude)
        return False

    def distance_from_reference(self, geofence: Geofence, latitude: float, longitude: float) -> Optional[float]:
        """Meters from the geofence's reference point (its center), None if it has none."""
        if geofence.center is None:
            return None
        return haversine_distance(geofence.center.latitude, geofence.center.longitude, latitude, longitude)

    def classify_location(
        self,
        geofences: Iterable[Geofence],
        coordinate: Optional[Coordinate],
    ) -> LocationEvaluation:
        """Classify a clock event's coordinate against the configured geofences.

        No coordinate, or no active geofence to check against, is a remote
        submission. Otherwise the first active geofence containing the point
        makes it valid, and a point outside all of them is invalid.
        """
        if coordinate is None:
            return LocationEvaluation(LocationStatus.REMOTE)

        active = [g for g in geofences if g.is_active]
        if not active:
            return LocationEvaluation(LocationStatus.REMOTE)

        for geofence in active:
            if self.is_inside(geofence, coordinate.latitude, coordinate.longitude):
                return LocationEvaluation(LocationStatus.VALID, geofence)
        return LocationEvaluation(LocationStatus.INVALID)
