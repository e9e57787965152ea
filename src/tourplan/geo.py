"""
Geospatial utilities for itinerary routing.
"""

import math
from typing import Any, Tuple

Point = Tuple[float, float]

EARTH_RADIUS_KM = 6371.0


def haversine_km(origin: Point, destination: Point) -> float:
    """
    Compute great-circle distance between two (lat, lon) points in kilometers.
    """
    lat1, lon1 = origin
    lat2, lon2 = destination
    if lat1 == lat2 and lon1 == lon2:
        return 0.0
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    # Rounding can push a slightly above 1 for antipodal points.
    a = min(1.0, a)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def _is_number(value: Any) -> bool:
    # bool is an int subclass; True/False are never coordinates.
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_valid_coordinate(lat: Any, lon: Any) -> bool:
    """
    True when (lat, lon) are finite numbers inside geographic ranges.
    """
    if not (_is_number(lat) and _is_number(lon)):
        return False
    if not (math.isfinite(lat) and math.isfinite(lon)):
        return False
    return -90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0
