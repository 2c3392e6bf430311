import math
from typing import Iterator, Optional, Tuple

from .models import Coordinate, PathType, TargetPoint, TrajectoryCommand
from dronesim.utils.geo import squared_distance

SAMPLES_PER_SWEEP = 360

# (freq_outer, freq_inner, swap_controls) for the fixed curve families
_FIXED_FREQUENCIES = {
    PathType.FIGURE8: (1.0, 2.0, False),
    PathType.CLOCKWISE: (1.0, 1.0, False),
    PathType.COUNTER_CLOCKWISE: (1.0, -1.0, True),
}

CURVE_PATHS = frozenset({PathType.SINE, *_FIXED_FREQUENCIES})


def default_controls(start: Coordinate, end: Coordinate) -> Tuple[Coordinate, Coordinate]:
    """Control points 90 degrees off the chord, either side of its midpoint."""
    a = (end.lon - start.lon) / 2
    b = (end.lat - start.lat) / 2
    mx = start.lon + a
    my = start.lat + b
    left = Coordinate(lat=my + a / 2, lon=mx - b / 2)
    right = Coordinate(lat=my - a / 2, lon=mx + b / 2)
    return left, right


def curve_point(
    start: Coordinate,
    end: Coordinate,
    left: Coordinate,
    right: Coordinate,
    freq_outer: float,
    freq_inner: float,
    i: int,
) -> Tuple[float, float]:
    """Unfiltered (lat, lon) of sample ``i`` on the curve."""
    outer = math.sin(freq_outer * i * math.pi / 180.0)
    inner = math.cos(freq_inner * i * math.pi / 180.0)
    lon = start.lon + outer * (end.lon - start.lon) + inner * (left.lon - right.lon)
    lat = start.lat + outer * (end.lat - start.lat) + inner * (left.lat - right.lat)
    return lat, lon


def sample(
    start: Coordinate,
    end: Coordinate,
    left: Optional[Coordinate],
    right: Optional[Coordinate],
    freq_outer: float,
    freq_inner: float,
    step_threshold: float,
) -> Iterator[TargetPoint]:
    """
    One sweep over the curve, down-sampled so that consecutive targets are
    more than ``step_threshold`` apart. The last emitted point starts at the
    origin on every call.
    """
    if step_threshold <= 0:
        raise ValueError("step_threshold must be positive")

    if left is None or right is None:
        left, right = default_controls(start, end)

    threshold_sq = step_threshold * step_threshold
    last_lat, last_lon = 0.0, 0.0
    for i in range(1, SAMPLES_PER_SWEEP):
        lat, lon = curve_point(start, end, left, right, freq_outer, freq_inner, i)
        if squared_distance(last_lat, last_lon, lat, lon) > threshold_sq:
            yield TargetPoint(lat=lat, lon=lon, alt=start.alt, speed=step_threshold)
            last_lat, last_lon = lat, lon


def frequencies_for(command: TrajectoryCommand) -> Tuple[float, float, bool]:
    if command.path == PathType.SINE:
        outer, inner = command.frequencies
        return outer, inner, False
    try:
        return _FIXED_FREQUENCIES[command.path]
    except KeyError:
        raise ValueError(f"{command.path.value} is not a curve pattern") from None


def sweep(command: TrajectoryCommand, step_threshold: float) -> Iterator[TargetPoint]:
    """One full sampler invocation for a curve command."""
    outer, inner, swap = frequencies_for(command)
    left, right = command.left, command.right
    if left is None or right is None:
        left, right = default_controls(command.start, command.end)
    if swap:
        left, right = right, left
    return sample(command.start, command.end, left, right, outer, inner, step_threshold)
