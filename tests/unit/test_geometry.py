"""Tests for the planar geometry helpers."""

from __future__ import annotations

import math

import pytest
from hypothesis import given
from hypothesis import strategies as st

from tacsim.utils.geometry import (
    Position,
    angle_difference,
    azimuth,
    centroid,
    clamp,
    degrees_to_mils,
    distance,
    interpolate_position,
    is_in_frontal_arc,
    is_in_range,
    mils_to_degrees,
    normalize_angle,
)

finite = st.floats(min_value=-1e6, max_value=1e6, allow_nan=False, allow_infinity=False)


def test_distance_is_euclidean_and_ignores_elevation():
    assert distance(Position(0, 0), Position(3, 4)) == 5.0
    assert distance(Position(0, 0, elevation=50), Position(3, 4, elevation=0)) == 5.0


@pytest.mark.parametrize(
    ("target", "expected"),
    [
        (Position(0, -10), 0.0),
        (Position(10, 0), 90.0),
        (Position(0, 10), 180.0),
        (Position(-10, 0), 270.0),
        (Position(10, -10), 45.0),
    ],
)
def test_azimuth_uses_compass_convention(target, expected):
    assert azimuth(Position(0, 0), target) == pytest.approx(expected)


def test_normalize_angle_wraps_into_half_open_range():
    assert normalize_angle(-90) == 270
    assert normalize_angle(360) == 0
    assert normalize_angle(725) == 5


def test_mils_conversion_uses_6400_per_circle():
    assert degrees_to_mils(360) == 6400
    assert degrees_to_mils(90) == 1600
    assert degrees_to_mils(0) == 0
    assert mils_to_degrees(3200) == 180
    assert mils_to_degrees(17.777777777777779) == pytest.approx(1.0)


@given(degrees=finite)
def test_mils_round_trip(degrees):
    assert mils_to_degrees(degrees_to_mils(degrees)) == pytest.approx(degrees, abs=1e-6)


def test_angle_difference_takes_shortest_rotation():
    assert angle_difference(350, 10) == 20
    assert angle_difference(10, 350) == -20
    assert angle_difference(0, 180) == 180


@given(a=finite, b=finite)
def test_angle_difference_is_bounded(a, b):
    diff = angle_difference(a, b)
    assert -180.0 < diff <= 180.0


def test_frontal_arc_boundaries():
    origin = Position(0, 0)
    east = Position(10, 0)
    assert is_in_frontal_arc(origin, 90.0, east)
    assert is_in_frontal_arc(origin, 0.0, east, arc_width=90.0)
    assert not is_in_frontal_arc(origin, 270.0, east)


def test_is_in_range_is_inclusive():
    assert is_in_range(Position(0, 0), Position(400, 0), 400)
    assert not is_in_range(Position(0, 0), Position(400.5, 0), 400)


def test_interpolate_position_handles_elevation():
    start = Position(0, 0, elevation=0)
    end = Position(10, 20, elevation=10)
    mid = interpolate_position(start, end, 0.5)
    assert (mid.x, mid.y, mid.elevation) == (5, 10, 5)

    flat = interpolate_position(Position(0, 0), end, 0.5)
    assert flat.elevation is None


def test_centroid_of_empty_iterable_is_none():
    assert centroid([]) is None
    center = centroid(p for p in [Position(0, 0), Position(10, 20)])
    assert center == Position(5, 10)


def test_clamp():
    assert clamp(-5, 0, 100) == 0
    assert clamp(150, 0, 100) == 100
    assert clamp(42.5, 0, 100) == 42.5


@given(x=finite, y=finite)
def test_distance_to_self_is_zero(x, y):
    assert distance(Position(x, y), Position(x, y)) == 0.0
    assert not math.isnan(azimuth(Position(x, y), Position(x, y)))
