"""Office geofence: great-circle distance and radius check."""

from __future__ import annotations

import math
from typing import Optional

from worksync.common.constants import EARTH_RADIUS_METERS
from worksync.common.exceptions import GeofenceViolation, LocationRequired
from worksync.policy.schemas import GeoPoint, OfficeLocation


def haversine_distance(
    lat1: float,
    lon1: float,
    lat2: float,
    lon2: float,
) -> float:
    """Distance in metres between two lat/lng points."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_METERS * c


def validate_location(
    office: Optional[OfficeLocation],
    location: Optional[GeoPoint],
) -> Optional[float]:
    """Enforce the office radius when the policy configures one.

    Returns the distance in metres, or None when no geofence is configured.

    Raises:
        LocationRequired: geofence configured but *location* is missing.
        GeofenceViolation: *location* is farther than ``office.radius``.
    """
    if office is None or not office.is_configured:
        return None
    if location is None:
        raise LocationRequired()

    distance = haversine_distance(
        office.latitude, office.longitude,
        location.latitude, location.longitude,
    )
    if distance > office.radius:
        raise GeofenceViolation(distance, office.radius)
    return distance
