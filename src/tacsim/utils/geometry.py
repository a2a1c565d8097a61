"""
Planar geometry helpers for the tactical map.

The battlefield is a flat plane in screen coordinates: ``x`` grows to the
east (right) and ``y`` grows to the south (down).  Bearings are compass
azimuths measured clockwise from north (up):

    0 = north (-y), 90 = east (+x), 180 = south (+y), 270 = west (-x)

Unit facings use the same convention, so a facing can be compared directly
with the bearing returned by :func:`azimuth`.

All functions are pure and never raise for finite input.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass


@dataclass(slots=True)
class Position:
    """Point on the battlefield plane, optionally with an elevation."""

    x: float
    y: float
    elevation: float | None = None


def distance(origin: Position, target: Position) -> float:
    """
    Euclidean distance between two positions, ignoring elevation.

    Example:
        >>> distance(Position(0, 0), Position(3, 4))
        5.0
    """
    return math.hypot(target.x - origin.x, target.y - origin.y)


def azimuth(origin: Position, target: Position) -> float:
    """
    Compass bearing from ``origin`` to ``target`` in degrees [0, 360).

    Example:
        >>> azimuth(Position(0, 0), Position(10, 0))
        90.0
        >>> azimuth(Position(0, 0), Position(0, -10))
        0.0
    """
    dx = target.x - origin.x
    dy = target.y - origin.y
    return normalize_angle(math.degrees(math.atan2(dx, -dy)))


def normalize_angle(angle: float) -> float:
    """Wrap an angle into the half-open range [0, 360)."""
    wrapped = angle % 360.0
    # -1e-20 % 360 rounds up to 360.0
    return 0.0 if wrapped >= 360.0 else wrapped


MILS_PER_CIRCLE = 6400.0


def degrees_to_mils(degrees: float) -> float:
    """
    Convert degrees to NATO mils (6400 per full circle).

    Example:
        >>> degrees_to_mils(90)
        1600.0
    """
    return degrees * MILS_PER_CIRCLE / 360.0


def mils_to_degrees(mils: float) -> float:
    """Convert NATO mils back to degrees."""
    return mils * 360.0 / MILS_PER_CIRCLE


def angle_difference(angle1: float, angle2: float) -> float:
    """
    Shortest signed rotation from ``angle1`` to ``angle2`` in (-180, 180].

    Example:
        >>> angle_difference(350, 10)
        20.0
        >>> angle_difference(10, 350)
        -20.0
    """
    diff = (angle2 - angle1) % 360.0
    if diff > 180.0:
        diff -= 360.0
    return diff


def is_in_frontal_arc(
    origin: Position,
    facing: float,
    target: Position,
    arc_width: float = 90.0,
) -> bool:
    """Return True when ``target`` lies within ``arc_width`` degrees of ``facing``."""
    return abs(angle_difference(facing, azimuth(origin, target))) <= arc_width


def is_in_range(origin: Position, target: Position, max_range: float) -> bool:
    """Return True when ``target`` is no farther than ``max_range``."""
    return distance(origin, target) <= max_range


def interpolate_position(origin: Position, target: Position, t: float) -> Position:
    """
    Linear interpolation between two positions.

    ``t`` = 0 yields ``origin`` and ``t`` = 1 yields ``target``.  Elevation is
    interpolated only when both endpoints carry one.
    """
    elevation = None
    if origin.elevation is not None and target.elevation is not None:
        elevation = origin.elevation + (target.elevation - origin.elevation) * t
    return Position(
        x=origin.x + (target.x - origin.x) * t,
        y=origin.y + (target.y - origin.y) * t,
        elevation=elevation,
    )


def centroid(positions: Iterable[Position]) -> Position | None:
    """Arithmetic mean of the positions, or None for an empty iterable."""
    xs: list[float] = []
    ys: list[float] = []
    for pos in positions:
        xs.append(pos.x)
        ys.append(pos.y)
    if not xs:
        return None
    return Position(x=sum(xs) / len(xs), y=sum(ys) / len(ys))


def clamp(value: float, lower: float, upper: float) -> float:
    """Clamp ``value`` into [lower, upper]."""
    return max(lower, min(upper, value))
