"""Geographic helpers: great-circle distance, stop location, display formatting."""

import math
from typing import Optional, Sequence

from roadtrip_routing.models import Coordinate

EARTH_RADIUS_M = 6_371_000.0

# Used only for the straight-line estimate shown when routing is unavailable.
ESTIMATE_SPEED_KMH = 60.0


def haversine_m(a: Coordinate, b: Coordinate) -> float:
    """Great-circle distance between two coordinates in meters."""
    lat1 = math.radians(a.lat)
    lat2 = math.radians(b.lat)
    dlat = lat2 - lat1
    dlon = math.radians(b.lon - a.lon)
    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    return 2 * EARTH_RADIUS_M * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def straight_line_estimate(a: Coordinate, b: Coordinate) -> tuple[float, float]:
    """Return (distance_m, duration_s) for a straight line at average driving speed."""
    distance_m = haversine_m(a, b)
    return distance_m, distance_m / (ESTIMATE_SPEED_KMH / 3.6)


def locate_stops(geometry: Sequence[Coordinate], stops: Sequence[Coordinate]) -> list[int]:
    """Find the geometry index closest to each stop, walking forward only.

    The first stop maps to index 0 and the last to the final index. Intermediate
    stops are searched between the previous match and the last index, so the
    result is non-decreasing and the path is never reordered.
    """
    if len(stops) < 2:
        raise ValueError("At least two stops are required")
    last = len(geometry) - 1
    indices = [0]
    cursor = 0
    for stop in stops[1:-1]:
        best = min(range(cursor, last + 1), key=lambda i: haversine_m(geometry[i], stop))
        indices.append(best)
        cursor = best
    indices.append(last)
    return indices


def format_duration(hours: Optional[float]) -> Optional[str]:
    if hours is None:
        return None
    if hours < 1:
        return f"{round(hours * 60)} minutes"
    whole = int(hours)
    minutes = round((hours - whole) * 60)
    if minutes == 60:
        whole, minutes = whole + 1, 0
    if minutes == 0:
        return f"{whole} hours"
    return f"{whole} hours {minutes} minutes"
