"""Live navigation: geometry, location fixes and stop advancement."""

from trippin.navigation.geometry import (
    closest_stop_index,
    format_distance,
    haversine_m,
)
from trippin.navigation.location import (
    LocationFix,
    LocationProvider,
    ReplayLocationProvider,
)
from trippin.navigation.proximity import (
    DEFAULT_THRESHOLD_M,
    ProximityResolver,
    ProximityState,
)

__all__ = [
    "DEFAULT_THRESHOLD_M",
    "LocationFix",
    "LocationProvider",
    "ProximityResolver",
    "ProximityState",
    "ReplayLocationProvider",
    "closest_stop_index",
    "format_distance",
    "haversine_m",
]
