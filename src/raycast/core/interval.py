"""Closed real intervals for bounding ray parameters.

An Interval holds a lower and an upper bound. Intervals with
``lower > upper`` are empty; ``interval_empty()`` builds the canonical empty
interval (+inf, -inf) and ``interval_universe()`` the unbounded one
(-inf, +inf).

Intersection routines accept an Interval of acceptable t values and use
``interval_surrounds`` so that roots lying exactly on a bound are rejected.
"""

import taichi as ti

INFINITY = float("inf")


@ti.dataclass
class Interval:
    """A real range [lower, upper].

    Attributes:
        lower: The lower bound.
        upper: The upper bound.
    """

    lower: ti.f32
    upper: ti.f32


@ti.func
def make_interval(lower: ti.f32, upper: ti.f32) -> Interval:
    """Create an interval from its bounds."""
    return Interval(lower=lower, upper=upper)


@ti.func
def interval_empty() -> Interval:
    """Interval containing nothing (lower=+inf, upper=-inf)."""
    return Interval(lower=INFINITY, upper=-INFINITY)


@ti.func
def interval_universe() -> Interval:
    """Interval containing every real (lower=-inf, upper=+inf)."""
    return Interval(lower=-INFINITY, upper=INFINITY)


@ti.func
def interval_size(interval: Interval) -> ti.f32:
    """Width of the interval (negative when empty)."""
    return interval.upper - interval.lower


@ti.func
def interval_contains(interval: Interval, x: ti.f32) -> ti.i32:
    """Whether lower <= x <= upper (bounds included)."""
    return interval.lower <= x and x <= interval.upper


@ti.func
def interval_surrounds(interval: Interval, x: ti.f32) -> ti.i32:
    """Whether lower < x < upper (bounds excluded)."""
    return interval.lower < x and x < interval.upper


@ti.func
def interval_clamp(interval: Interval, x: ti.f32) -> ti.f32:
    """Project x onto [lower, upper]."""
    result = x
    if x < interval.lower:
        result = interval.lower
    if x > interval.upper:
        result = interval.upper
    return result
