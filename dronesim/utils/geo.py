import math
from typing import Tuple


def planar_delta(from_lat: float, from_lon: float, to_lat: float, to_lon: float) -> Tuple[float, float]:
    """(dy, dx) in degrees, latitude first."""
    return to_lat - from_lat, to_lon - from_lon


def planar_norm(dy: float, dx: float) -> float:
    return math.sqrt(dx * dx + dy * dy)


def squared_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    dy, dx = planar_delta(lat1, lon1, lat2, lon2)
    return dx * dx + dy * dy
