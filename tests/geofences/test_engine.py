from __future__ import annotations

import math

import pytest

from geo_attendance.core.enums import GeofenceType, LocationStatus
from geo_attendance.geofences.engine import GeofenceEngine, haversine_distance, is_point_in_polygon
from geo_attendance.geofences.model import Coordinate, Geofence

CENTER = Coordinate(10.7769, 106.7009)


def reference_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    # Independent haversine (asin form) used to check the engine.
    p1, p2 = math.radians(lat1), math.radians(lat2)
    dp = p2 - p1
    dl = math.radians(lon2 - lon1)
    h = math.sin(dp / 2) ** 2 + math.cos(p1) * math.cos(p2) * math.sin(dl / 2) ** 2
    return 2 * 6_371_000 * math.asin(math.sqrt(h))


def circle(radius: float = 100, *, is_active: bool = True, geofence_id: int = 1) -> Geofence:
    return Geofence(
        geofence_id=geofence_id,
        name="Head office",
        type=GeofenceType.CIRCLE,
        created_by=1,
        center=CENTER,
        radius_meters=radius,
        is_active=is_active,
    )


SQUARE = (
    Coordinate(0.0, 0.0),
    Coordinate(0.0, 1.0),
    Coordinate(1.0, 1.0),
    Coordinate(1.0, 0.0),
)


def polygon(vertices=SQUARE, *, is_active: bool = True) -> Geofence:
    return Geofence(
        geofence_id=2,
        name="Warehouse",
        type=GeofenceType.POLYGON,
        created_by=1,
        vertices=tuple(vertices),
        is_active=is_active,
    )


def test_haversine_one_degree_of_latitude():
    assert haversine_distance(0, 0, 1, 0) == pytest.approx(111_194.93, abs=0.5)


@pytest.mark.parametrize("radius", [1, 50, 100, 2500])
def test_center_is_always_inside(radius):
    engine = GeofenceEngine()
    assert engine.is_inside(circle(radius), CENTER.latitude, CENTER.longitude)
    assert engine.distance_from_reference(circle(radius), CENTER.latitude, CENTER.longitude) == 0


@pytest.mark.parametrize(
    "lat,lon",
    [
        (10.7789, 106.7009),
        (10.7769, 106.7030),
        (10.7750, 106.6990),
        (-10.7769, 106.7009),
        (10.7769, -73.9855),
    ],
)
def test_point_beyond_radius_is_never_inside(lat, lon):
    fence = circle(100)
    assert reference_distance(CENTER.latitude, CENTER.longitude, lat, lon) > 100
    assert GeofenceEngine().is_inside(fence, lat, lon) is False


def test_point_within_radius_is_inside():
    lat, lon = 10.7773, 106.7009
    assert reference_distance(CENTER.latitude, CENTER.longitude, lat, lon) < 100
    assert GeofenceEngine().is_inside(circle(100), lat, lon)


def test_distance_matches_reference_implementation():
    engine = GeofenceEngine()
    got = engine.distance_from_reference(circle(), 10.79, 106.72)
    assert got == pytest.approx(reference_distance(CENTER.latitude, CENTER.longitude, 10.79, 106.72), rel=1e-9)


def test_inactive_geofence_never_matches():
    engine = GeofenceEngine()
    assert engine.is_inside(circle(is_active=False), CENTER.latitude, CENTER.longitude) is False
    assert engine.is_inside(polygon(is_active=False), 0.5, 0.5) is False


@pytest.mark.parametrize("lat,lon", [(0.5, 0.5), (0.1, 0.9), (0.9, 0.2), (0.25, 0.75)])
def test_polygon_containment_is_rotation_invariant(lat, lon):
    for shift in range(len(SQUARE)):
        rotated = SQUARE[shift:] + SQUARE[:shift]
        assert is_point_in_polygon(rotated, lat, lon)


@pytest.mark.parametrize("lat,lon", [(1.5, 0.5), (-0.1, 0.5), (0.5, 2.0), (0.5, -0.0001)])
def test_polygon_outside_points(lat, lon):
    assert GeofenceEngine().is_inside(polygon(), lat, lon) is False


def test_concave_polygon_notch_is_outside():
    # U shape opening north: the notch between the arms is outside.
    u_shape = (
        Coordinate(0, 0),
        Coordinate(0, 3),
        Coordinate(3, 3),
        Coordinate(3, 2),
        Coordinate(1, 2),
        Coordinate(1, 1),
        Coordinate(3, 1),
        Coordinate(3, 0),
    )
    assert is_point_in_polygon(u_shape, 0.5, 1.5)
    assert not is_point_in_polygon(u_shape, 2.0, 1.5)
    assert is_point_in_polygon(u_shape, 2.0, 0.5)


def test_polygon_without_center_has_no_reference_distance():
    assert GeofenceEngine().distance_from_reference(polygon(), 0.5, 0.5) is None


def test_classify_without_coordinates_is_remote():
    evaluation = GeofenceEngine().classify_location([circle()], None)
    assert evaluation.location_status == LocationStatus.REMOTE
    assert evaluation.geofence is None


def test_classify_without_active_geofences_is_remote():
    evaluation = GeofenceEngine().classify_location([circle(is_active=False)], CENTER)
    assert evaluation.location_status == LocationStatus.REMOTE


def test_classify_inside_any_active_geofence_is_valid():
    fences = [polygon(), circle(geofence_id=7)]
    evaluation = GeofenceEngine().classify_location(fences, CENTER)
    assert evaluation.location_status == LocationStatus.VALID
    assert evaluation.geofence.geofence_id == 7


def test_classify_outside_all_geofences_is_invalid():
    evaluation = GeofenceEngine().classify_location([polygon(), circle()], Coordinate(45.0, 45.0))
    assert evaluation.location_status == LocationStatus.INVALID
    assert evaluation.geofence is None
