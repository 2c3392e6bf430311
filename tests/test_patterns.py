import math

import pytest

from dronesim.drone.models import Coordinate, PathType, TrajectoryCommand
from dronesim.drone.patterns import (
    SAMPLES_PER_SWEEP,
    curve_point,
    default_controls,
    frequencies_for,
    sample,
    sweep,
)

START = Coordinate(lat=0.0, lon=0.0)
END = Coordinate(lat=0.0, lon=10.0)


def _command(path, **kwargs):
    return TrajectoryCommand(path=path, start=START, end=END, **kwargs)


def test_default_controls_sit_on_perpendicular_bisector():
    left, right = default_controls(START, END)
    assert (left.lat, left.lon) == (2.5, 5.0)
    assert (right.lat, right.lon) == (-2.5, 5.0)


def test_dense_curve_is_deterministic():
    left, right = default_controls(START, END)
    first = [curve_point(START, END, left, right, 1, 2, i) for i in range(1, SAMPLES_PER_SWEEP)]
    second = [curve_point(START, END, left, right, 1, 2, i) for i in range(1, SAMPLES_PER_SWEEP)]
    assert first == second
    assert len(first) == SAMPLES_PER_SWEEP - 1


def test_sample_restarts_on_every_call():
    assert list(sample(START, END, None, None, 1, 1, 0.5)) == list(sample(START, END, None, None, 1, 1, 0.5))


@pytest.mark.parametrize("threshold", [0.25, 1.0, 3.0])
def test_consecutive_samples_are_further_apart_than_threshold(threshold):
    points = list(sample(START, END, None, None, 1, 2, threshold))
    assert len(points) > 2
    for a, b in zip(points, points[1:]):
        assert math.hypot(a.lat - b.lat, a.lon - b.lon) > threshold
    assert all(p.speed == threshold for p in points)


def test_clockwise_sweep_traces_closed_ellipse():
    points = list(sweep(_command(PathType.CLOCKWISE), 1.0))

    # lon = 10 sin(i), lat = 5 cos(i) with the default control points
    for p in points:
        assert (p.lon / 10.0) ** 2 + (p.lat / 5.0) ** 2 == pytest.approx(1.0)
    assert min(p.lon for p in points) < -9.0
    assert max(p.lon for p in points) > 9.0
    assert min(p.lat for p in points) < -4.5
    assert max(p.lat for p in points) > 4.5

    first, last = points[0], points[-1]
    assert math.hypot(first.lat - last.lat, first.lon - last.lon) < 2.0


def test_counter_clockwise_runs_the_other_way():
    cw = list(sweep(_command(PathType.CLOCKWISE), 1.0))
    ccw = list(sweep(_command(PathType.COUNTER_CLOCKWISE), 1.0))
    assert cw[0].lat > 4.5
    assert ccw[0].lat < -4.5
    assert cw[0].lon == pytest.approx(ccw[0].lon)


def test_counter_clockwise_swaps_explicit_controls():
    left = Coordinate(lat=1.0, lon=5.0)
    right = Coordinate(lat=-1.0, lon=5.0)
    ccw = list(sweep(_command(PathType.COUNTER_CLOCKWISE, points=(left, right)), 0.1))
    expected = list(sample(START, END, right, left, 1, -1, 0.1))
    assert ccw == expected


def test_sample_rejects_non_positive_threshold():
    with pytest.raises(ValueError):
        list(sample(START, END, None, None, 1, 1, 0))


def test_frequency_families():
    assert frequencies_for(_command(PathType.FIGURE8)) == (1.0, 2.0, False)
    assert frequencies_for(_command(PathType.CLOCKWISE)) == (1.0, 1.0, False)
    assert frequencies_for(_command(PathType.COUNTER_CLOCKWISE)) == (1.0, -1.0, True)
    assert frequencies_for(_command(PathType.SINE, data=(3.0, 0.5))) == (3.0, 0.5, False)
    assert frequencies_for(_command(PathType.SINE)) == (0.0, 0.0, False)
    with pytest.raises(ValueError):
        frequencies_for(_command(PathType.PATROL))


def test_path_type_parsing():
    assert PathType.parse("Counter-Clockwise") is PathType.COUNTER_CLOCKWISE
    assert PathType.parse("figure8") is PathType.FIGURE8
    assert PathType.parse("zigzag") is PathType.UNRECOGNIZED
    assert PathType.parse("") is PathType.UNRECOGNIZED
