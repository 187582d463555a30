"""Ray data structure and vector utilities.

This module provides the Ray dataclass and the vector helpers used by every
other device-side routine. Vector arithmetic (negation, component-wise
add/subtract/multiply, scalar multiply/divide) comes directly from
``taichi.math.vec3``; the helpers below cover the remaining operations.

The same ``vec3`` type is used for points, directions and RGB colors.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.raycast.core.ray import Ray, ray_at, vec3
    >>> @ti.kernel
    ... def point() -> vec3:
    ...     ray = Ray(origin=vec3(0.0, 0.0, 0.0), direction=vec3(0.0, 0.0, -1.0))
    ...     return ray_at(ray, 5.0)  # (0, 0, -5)
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). It is not required
            to be unit length, but it must not be the zero vector.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point along the ray at parameter t.

    No bounds checking is done on t.

    Args:
        ray: The ray to evaluate.
        t: The parameter value. Positive values are in front of the origin.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction."""
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    """Compute the dot product a . b."""
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    """Compute the cross product a x b."""
    return tm.cross(a, b)


@ti.func
def length_squared(v: vec3) -> ti.f32:
    """Compute the squared length of a vector.

    Cheaper than length() when only comparing magnitudes, as it avoids the
    square root.
    """
    return tm.dot(v, v)


@ti.func
def length(v: vec3) -> ti.f32:
    """Compute the Euclidean length (magnitude) of a vector."""
    return ti.sqrt(length_squared(v))


@ti.func
def unit_vector(v: vec3) -> vec3:
    """Scale a vector to unit length.

    The result is undefined for a zero-length vector; callers must pass a
    non-degenerate direction.

    Args:
        v: The input vector.

    Returns:
        A unit vector in the same direction as v.
    """
    return v / length(v)
