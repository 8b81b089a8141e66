"""Great-circle distance between coordinates.

Callers are expected to pass validated, finite geo data; out-of-range
values are not guarded.
"""

import math
from typing import Tuple

from login_sentinel.common.constants import DetectionConstants


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Distance in kilometers between two points given in decimal degrees."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    a = min(1.0, a)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return DetectionConstants.EARTH_RADIUS_KM * c


def distance_between(a: Tuple[float, float], b: Tuple[float, float]) -> float:
    """haversine_km for two (latitude, longitude) pairs."""
    return haversine_km(a[0], a[1], b[0], b[1])
