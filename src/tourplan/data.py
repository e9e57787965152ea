"""
Stop normalization, partitioning and demo itinerary generation.
"""

import logging
import math
import random
from typing import Any, Dict, List, Optional, Tuple

from tourplan.geo import Point, is_valid_coordinate

logger = logging.getLogger(__name__)

# Itinerary items cache coordinates as latitude/longitude; targets use lat/lon.
_LAT_KEYS = ("lat", "latitude")
_LON_KEYS = ("lon", "longitude")


class DuplicateStopIdError(ValueError):
    """Raised when the same stop id appears more than once in one call."""

    def __init__(self, stop_id: str):
        super().__init__(f"Duplicate stop id: {stop_id!r}")
        self.stop_id = stop_id


def _first_present(stop: Dict[str, Any], keys: Tuple[str, ...]) -> Any:
    for key in keys:
        if stop.get(key) is not None:
            return stop[key]
    return None


def normalize_stops(stops: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Return stops as {"id", "lat", "lon", "index"} dicts in input order.

    lat/lon are None unless the stop carries a valid coordinate. Raises
    DuplicateStopIdError on repeated ids and ValueError on a missing id.
    """
    normalized: List[Dict[str, Any]] = []
    seen: set[str] = set()
    for index, stop in enumerate(stops):
        stop_id = stop.get("id")
        if stop_id is None:
            raise ValueError(f"Stop at position {index} has no id")
        if stop_id in seen:
            raise DuplicateStopIdError(stop_id)
        seen.add(stop_id)

        lat = _first_present(stop, _LAT_KEYS)
        lon = _first_present(stop, _LON_KEYS)
        if not is_valid_coordinate(lat, lon):
            lat, lon = None, None
        normalized.append({"id": stop_id, "lat": lat, "lon": lon, "index": index})
    return normalized


def split_stops(stops: List[Dict[str, Any]]) -> Tuple[List[Tuple[str, Point]], List[str]]:
    """
    Partition stops into locatable (id, (lat, lon)) pairs and unlocated ids.

    Both partitions keep the input's relative order.
    """
    locatable: List[Tuple[str, Point]] = []
    unlocated: List[str] = []
    for stop in normalize_stops(stops):
        if stop["lat"] is None:
            unlocated.append(stop["id"])
        else:
            locatable.append((stop["id"], (float(stop["lat"]), float(stop["lon"]))))
    if unlocated:
        logger.debug("%d of %d stops have no usable coordinate", len(unlocated), len(stops))
    return locatable, unlocated


def generate_stops(
    seed: int,
    n: int = 10,
    center: Tuple[float, float] = (40.7128, -74.0060),
    radius_km: float = 15.0,
    missing_ratio: float = 0.1,
    title_prefix: str = "Stop",
) -> List[Dict[str, Any]]:
    """
    Generate n itinerary stops scattered within radius_km of center.

    Roughly missing_ratio of them carry no coordinates, like items whose
    underlying post was never geotagged. Output is reproducible per seed.
    """
    rng = random.Random(seed)
    earth_radius_km = 6371.0
    lat1 = math.radians(center[0])
    lon1 = math.radians(center[1])
    stops: List[Dict[str, Any]] = []
    for i in range(n):
        stop: Dict[str, Any] = {"id": f"S{i+1:03d}", "title": f"{title_prefix} {i+1}"}
        if rng.random() < missing_ratio:
            stop["lat"] = None
            stop["lon"] = None
            stops.append(stop)
            continue
        bearing = rng.uniform(0, 2 * math.pi)
        distance_km = rng.uniform(0, radius_km)
        ang_dist = distance_km / earth_radius_km
        lat2 = math.asin(math.sin(lat1) * math.cos(ang_dist) + math.cos(lat1) * math.sin(ang_dist) * math.cos(bearing))
        lon2 = lon1 + math.atan2(
            math.sin(bearing) * math.sin(ang_dist) * math.cos(lat1),
            math.cos(ang_dist) - math.sin(lat1) * math.sin(lat2),
        )
        lon_deg = (math.degrees(lon2) + 540.0) % 360.0 - 180.0
        stop["lat"] = round(math.degrees(lat2), 6)
        stop["lon"] = round(lon_deg, 6)
        stops.append(stop)
    return stops


def stops_by_id(stops: List[Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
    return {s["id"]: s for s in stops}


def coordinate_of(stop: Dict[str, Any]) -> Optional[Point]:
    """
    Valid (lat, lon) of a raw stop dict, or None.
    """
    lat = _first_present(stop, _LAT_KEYS)
    lon = _first_present(stop, _LON_KEYS)
    if not is_valid_coordinate(lat, lon):
        return None
    return (float(lat), float(lon))
