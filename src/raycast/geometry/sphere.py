"""Sphere primitive with ray-sphere intersection.

The ray-sphere intersection is found by solving

    |Q + t*d - C|^2 = r^2

for t, where Q is the ray origin, d the ray direction, C the center and r the
radius. With oc = C - Q this becomes the quadratic

    (d.d) t^2 - 2 (d.oc) t + (oc.oc - r^2) = 0

which, written with h = d.oc (minus half of the usual b coefficient), has
roots t = (h -/+ sqrt(h^2 - a*c)) / a.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.raycast.geometry.sphere import Sphere, hit_sphere, vec3
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, -1), radius=0.5)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from src.raycast.core.interval import Interval, interval_surrounds
from src.raycast.core.ray import Ray, dot, length_squared, ray_at, unit_vector

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (never negative).
    """

    center: vec3
    radius: ti.f32


@ti.dataclass
class HitRecord:
    """Record of a ray-object intersection.

    A record with hit == 0 means "no intersection"; the remaining fields are
    then meaningless.

    Attributes:
        hit: Whether the ray intersected the object (1 if hit, 0 if miss).
        t: The parameter value along the ray where intersection occurred.
        point: The 3D point where the ray intersected the surface.
        normal: The unit surface normal at the intersection point. Always
            points against the incoming ray.
        front_face: 1 if the ray approached from outside the surface, 0 if
            it hit the surface from inside.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32


@ti.func
def make_miss_record() -> HitRecord:
    """Create a HitRecord indicating no intersection."""
    return HitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
    )


@ti.func
def make_sphere(center: vec3, radius: ti.f32) -> Sphere:
    """Create a sphere, clamping a negative radius to zero."""
    return Sphere(center=center, radius=tm.max(radius, 0.0))


@ti.func
def set_face_normal(ray: Ray, outward_normal: vec3):
    """Orient an outward unit normal against the incoming ray.

    Args:
        ray: The incoming ray.
        outward_normal: The unit normal pointing out of the surface.

    Returns:
        A tuple (front_face, normal) where front_face is 1 when the ray
        approaches from outside, and normal is outward_normal or its negation
        so that it always opposes the ray direction.
    """
    front_face = 0
    normal = -outward_normal
    if dot(ray.direction, outward_normal) < 0.0:
        front_face = 1
        normal = outward_normal
    return front_face, normal


@ti.func
def hit_sphere(ray: Ray, sphere: Sphere, ray_t: Interval) -> HitRecord:
    """Find the nearest intersection of a ray with a sphere.

    Only roots strictly inside ray_t are accepted (both bounds excluded), so
    a ray starting exactly on the surface does not re-hit it at t == lower.

    A point sphere (radius 0) can only be hit by a ray through its center.
    It has no outward normal, so the reported normal is the reversed unit
    ray direction.

    Args:
        ray: The ray to test. Its direction must be non-zero.
        sphere: The sphere to test against.
        ray_t: The interval of acceptable t values.

    Returns:
        A HitRecord for the smallest acceptable root, or a miss record.
    """
    result = make_miss_record()

    oc = sphere.center - ray.origin
    a = length_squared(ray.direction)
    h = dot(ray.direction, oc)
    c = length_squared(oc) - sphere.radius * sphere.radius
    discriminant = h * h - a * c

    if discriminant >= 0.0:
        sqrt_d = ti.sqrt(discriminant)

        # Nearest root first, then the far one
        root = (h - sqrt_d) / a
        valid = interval_surrounds(ray_t, root)
        if not valid:
            root = (h + sqrt_d) / a
            valid = interval_surrounds(ray_t, root)

        if valid:
            point = ray_at(ray, root)
            outward_normal = -unit_vector(ray.direction)
            if sphere.radius > 0.0:
                outward_normal = (point - sphere.center) / sphere.radius
            front_face, normal = set_face_normal(ray, outward_normal)
            result = HitRecord(
                hit=1,
                t=root,
                point=point,
                normal=normal,
                front_face=front_face,
            )

    return result
