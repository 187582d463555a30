"""Geometry module for ray-intersectable primitives.

Components:
    sphere: Sphere primitive, hit records and ray-sphere intersection

Every primitive follows the same contract: given a ray and an Interval of
acceptable t values, return a HitRecord for the nearest intersection
strictly inside the interval, or a record with hit == 0.
"""

from .sphere import (
    HitRecord,
    Sphere,
    hit_sphere,
    make_miss_record,
    make_sphere,
    set_face_normal,
)

__all__ = [
    "Sphere",
    "HitRecord",
    "hit_sphere",
    "make_sphere",
    "make_miss_record",
    "set_face_normal",
]
