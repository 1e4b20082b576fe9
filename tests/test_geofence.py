"""Geofence test suite — haversine distance and office radius enforcement."""

from __future__ import annotations

import pytest

from worksync.common.exceptions import GeofenceViolation, LocationRequired
from worksync.policy.geofence import haversine_distance, validate_location
from worksync.policy.schemas import GeoPoint, OfficeLocation

OFFICE = OfficeLocation(latitude=19.0760, longitude=72.8777, radius=100)


# ═════════════════════════════════════════════════════════════════════
# 1. DISTANCE
# ═════════════════════════════════════════════════════════════════════


def test_distance_is_zero_for_same_point():
    assert haversine_distance(19.0760, 72.8777, 19.0760, 72.8777) == 0


def test_distance_is_symmetric():
    a = (19.0760, 72.8777)
    b = (28.6139, 77.2090)
    assert haversine_distance(*a, *b) == pytest.approx(haversine_distance(*b, *a))


def test_distance_grows_with_separation():
    distances = [
        haversine_distance(0.0, 0.0, 0.0, offset)
        for offset in (0.001, 0.01, 0.1, 1.0, 10.0)
    ]
    assert distances == sorted(distances)
    assert len(set(distances)) == len(distances)


def test_one_degree_of_latitude_is_about_111_km():
    assert haversine_distance(0.0, 0.0, 1.0, 0.0) == pytest.approx(111_195, rel=1e-3)


# ═════════════════════════════════════════════════════════════════════
# 2. VALIDATION
# ═════════════════════════════════════════════════════════════════════


def test_no_office_location_skips_check():
    assert validate_location(None, None) is None
    assert validate_location(OfficeLocation(), GeoPoint(latitude=0, longitude=0)) is None


def test_configured_office_requires_location():
    with pytest.raises(LocationRequired) as exc_info:
        validate_location(OFFICE, None)
    assert exc_info.value.status_code == 422


def test_location_inside_radius_returns_distance():
    # ~55 m north of the office
    distance = validate_location(OFFICE, GeoPoint(latitude=19.0765, longitude=72.8777))
    assert distance is not None
    assert 50 < distance < 60


def test_location_outside_radius_is_rejected_with_numbers():
    # ~222 m north of the office
    with pytest.raises(GeofenceViolation) as exc_info:
        validate_location(OFFICE, GeoPoint(latitude=19.0780, longitude=72.8777))

    exc = exc_info.value
    assert exc.status_code == 403
    assert 215 <= exc.distance_m <= 230
    assert exc.radius_m == 100
    assert f"{exc.distance_m}m away" in exc.detail
    assert "within 100m" in exc.detail


def test_custom_radius_is_honoured():
    wide = OfficeLocation(latitude=19.0760, longitude=72.8777, radius=500)
    assert validate_location(wide, GeoPoint(latitude=19.0780, longitude=72.8777)) < 500
