"""
Great-circle distance and a coarse ETA between a tractor and its destination.

The ETA assumes a constant average road speed; it is an estimate for tracking
screens, not a routing result.
"""

from decimal import ROUND_HALF_UP, Decimal
import math
from typing import Optional, Sequence, Tuple

from ..core.config import settings
from ..core.constants import EARTH_RADIUS_KM

Point = Tuple[float, float]


def distance_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Haversine distance in kilometres between two WGS84 points."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lng2 - lng1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(max(0.0, 1 - a)))
    return max(0.0, EARTH_RADIUS_KM * c)


def eta_minutes(distance: float, speed_kph: Optional[float] = None) -> int:
    """
    Minutes to cover ``distance`` km at ``speed_kph``.

    Zero for a non-positive distance, otherwise at least one minute. Halves
    round up.
    """
    if distance <= 0:
        return 0
    speed = speed_kph if speed_kph is not None else settings.dispatch_average_speed_kph
    minutes = Decimal(str(distance)) / Decimal(str(speed)) * 60
    return max(1, int(minutes.quantize(Decimal("1"), rounding=ROUND_HALF_UP)))


def route_distance_km(points: Sequence[Sequence[float]]) -> float:
    """Sum of haversine legs along a polyline of (lat, lng) points."""
    total = 0.0
    for (lat1, lng1), (lat2, lng2) in zip(points, points[1:]):
        total += distance_km(lat1, lng1, lat2, lng2)
    return total


def straight_route(origin: Point, destination: Point) -> list[list[float]]:
    """Two-point route used when no road geometry is available."""
    return [[origin[0], origin[1]], [destination[0], destination[1]]]
