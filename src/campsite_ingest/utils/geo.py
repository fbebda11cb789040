"""Great-circle distance helpers for location-based matching."""

import math
from typing import Optional

EARTH_RADIUS_KM = 6371.0

# Distance at which proximity stops contributing to a match score
PROXIMITY_CUTOFF_KM = 1.0


def distance_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Haversine distance between two points in kilometers.

    Inputs are not validated; NaN propagates to the result. Use
    is_valid_coordinate() before relying on the value.
    """
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)

    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1))
        * math.cos(math.radians(lat2))
        * math.sin(d_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def is_valid_coordinate(latitude: Optional[float], longitude: Optional[float]) -> bool:
    """Check that both values are present, finite and within range."""
    if latitude is None or longitude is None:
        return False
    if math.isnan(latitude) or math.isnan(longitude):
        return False
    return -90.0 <= latitude <= 90.0 and -180.0 <= longitude <= 180.0


def proximity_score(distance: Optional[float]) -> Optional[float]:
    """Map a distance to a score in [0, 1] that decays with distance.

    Args:
        distance: Distance in km, or None when unknown

    Returns:
        1.0 at zero distance, 0.0 at PROXIMITY_CUTOFF_KM and beyond,
        or None when there is no usable distance
    """
    if distance is None or math.isnan(distance):
        return None
    if distance <= 0:
        return 1.0
    return max(0.0, 1.0 - distance / PROXIMITY_CUTOFF_KM)
