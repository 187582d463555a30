"""Core rendering module.

Components:
    ray: Ray data structure and vector utilities
    interval: Real intervals bounding accepted ray parameters
    integrator: Ray coloring and the per-pixel render loop
    scanline: Frame-level renderer with row progress reporting

All per-ray work runs in Taichi functions on the CPU backend; the pixel loop
is serialized so rows are produced top to bottom.
"""

from .interval import (
    INFINITY,
    Interval,
    interval_clamp,
    interval_contains,
    interval_empty,
    interval_size,
    interval_surrounds,
    interval_universe,
    make_interval,
)
from .ray import (
    Ray,
    cross,
    dot,
    length,
    length_squared,
    make_ray,
    ray_at,
    unit_vector,
    vec3,
)

# Note: integrator and scanline are NOT imported here because they declare
# Taichi fields, which must be created after ti.init().
#
# For rendering, use:
#   from src.raycast.core.scanline import ScanlineRenderer

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "dot",
    "cross",
    "length",
    "length_squared",
    "unit_vector",
    "INFINITY",
    "Interval",
    "make_interval",
    "interval_empty",
    "interval_universe",
    "interval_size",
    "interval_contains",
    "interval_surrounds",
    "interval_clamp",
]
