# lokalaku/utils/haversine.py
# Great-circle distance used as the ranking key for nearby vendors.

from math import radians, sin, cos, sqrt, asin
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from lokalaku.models.domain import Coordinate

# Earth's radius in kilometers
R = 6371.0

def haversine(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Calculate the great-circle distance between two points
    on the Earth (specified in decimal degrees) using the Haversine formula.

    Args:
        lat1: Latitude of point 1.
        lon1: Longitude of point 1.
        lat2: Latitude of point 2.
        lon2: Longitude of point 2.

    Returns:
        Distance between the two points in kilometers.
    """
    lat1, lon1, lat2, lon2 = map(radians, [lat1, lon1, lat2, lon2])

    # abs() keeps the result bit-for-bit symmetric in its arguments
    dlon = abs(lon2 - lon1)
    dlat = abs(lat2 - lat1)

    a = sin(dlat / 2)**2 + cos(lat1) * cos(lat2) * sin(dlon / 2)**2
    # Float rounding can push `a` a hair past 1 for antipodal points
    a = min(1.0, max(0.0, a))
    c = 2 * asin(sqrt(a))

    return R * c

def haversine_km(a: "Coordinate", b: "Coordinate") -> float:
    """Distance in kilometers between two validated coordinates."""
    return haversine(a.latitude, a.longitude, b.latitude, b.longitude)
