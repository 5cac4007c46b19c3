"""Distance and travel-time helpers for proximity search"""

import math

EARTH_RADIUS_KM = 6371.0
AVERAGE_SPEED_KMH = 30.0  # average city driving speed


def distance_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle (haversine) distance in kilometres. Inputs are not range-checked."""
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    d_lat = lat2_rad - lat1_rad
    d_lon = math.radians(lon2) - math.radians(lon1)

    a = math.sin(d_lat / 2) ** 2 + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(d_lon / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def estimated_travel_minutes(distance: float) -> int:
    """Travel time at a fixed average speed, always rounded up to the next minute"""
    return int(math.ceil(distance / AVERAGE_SPEED_KMH * 60))


def is_within_service_range(
    user_lat: float, user_lon: float, site_lat: float, site_lon: float, max_minutes: int
) -> bool:
    """True when the estimated drive from the site to the user fits in max_minutes"""
    travel = estimated_travel_minutes(distance_km(user_lat, user_lon, site_lat, site_lon))
    return travel <= max_minutes


def distance_text(distance: float) -> str:
    """Human readable distance, e.g. "850 m away" or "3.2 km away" """
    if distance < 1:
        return f"{distance * 1000:.0f} m away"
    return f"{distance:.1f} km away"


def bounding_box(lat: float, lon: float, radius_km: float) -> tuple[float, float, float, float]:
    """
    Coarse (min_lat, max_lat, min_lon, max_lon) box enclosing a radius.

    Used as an index-friendly SQL prefilter; the exact haversine check runs
    afterwards. Near the poles or across the antimeridian the longitude span
    covers the whole globe.
    """
    lat_delta = math.degrees(radius_km / EARTH_RADIUS_KM)
    min_lat = max(lat - lat_delta, -90.0)
    max_lat = min(lat + lat_delta, 90.0)

    cos_lat = math.cos(math.radians(lat))
    if max_lat >= 90.0 or min_lat <= -90.0 or cos_lat < 1e-6:
        return min_lat, max_lat, -180.0, 180.0

    lon_delta = math.degrees(radius_km / (EARTH_RADIUS_KM * cos_lat))
    if lon - lon_delta < -180.0 or lon + lon_delta > 180.0:
        # Crosses the antimeridian
        return min_lat, max_lat, -180.0, 180.0
    return min_lat, max_lat, lon - lon_delta, lon + lon_delta
