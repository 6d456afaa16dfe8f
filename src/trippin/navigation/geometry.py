"""Great-circle distance helpers. Coordinates are (longitude, latitude)."""

from __future__ import annotations

import math
from collections.abc import Sequence

from trippin.models.stop import Coordinates

EARTH_RADIUS_M = 6_371_000.0


def haversine_m(a: Coordinates, b: Coordinates) -> float:
    """Distance in meters between two (lon, lat) points."""
    lon1, lat1 = a
    lon2, lat2 = b
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    h = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1))
        * math.cos(math.radians(lat2))
        * math.sin(d_lon / 2) ** 2
    )
    return 2 * EARTH_RADIUS_M * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def closest_stop_index(location: Coordinates, stops: Sequence[Coordinates]) -> int:
    """Index of the stop nearest to `location`, or -1 when there are none."""
    closest = -1
    best = math.inf
    for index, coords in enumerate(stops):
        distance = haversine_m(location, coords)
        if distance < best:
            best = distance
            closest = index
    return closest


def format_distance(meters: float) -> str:
    """Human-readable distance: "120 m" below a kilometer, else "1.4 km"."""
    if meters < 1000:
        return f"{round(meters)} m"
    return f"{meters / 1000:.1f} km"
