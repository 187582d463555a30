"""Scene-level ray intersection testing.

Spheres are stored once in an arena (structure-of-arrays Taichi fields) and
the scene itself is an ordered list of entries, each holding the arena index
of the sphere it refers to. Several entries may share one arena sphere, so
identical geometry is stored only once.

``intersect_scene`` walks the entries in order and narrows the accepted t
range to the closest hit found so far, so the result is the globally nearest
intersection regardless of entry order.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.raycast.scene.intersection import (
    ...     add_entry, add_sphere, clear_scene, intersect_scene
    ... )
    >>> clear_scene()
    >>> idx = add_sphere((0.0, 0.0, -1.0), 0.5)
    >>> add_entry(idx)
    >>> # Use intersect_scene within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from src.raycast.core.interval import Interval, make_interval
from src.raycast.core.ray import Ray
from src.raycast.geometry.sphere import HitRecord, Sphere, hit_sphere, make_miss_record

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Maximum number of distinct spheres in the arena
MAX_SPHERES = 1024

# Maximum number of scene entries (references into the arena)
MAX_ENTRIES = 4096

# Sphere arena: Structure of Arrays layout
sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())

# Scene entries: arena index per entry, in insertion order
entry_sphere_ids = ti.field(dtype=ti.i32, shape=MAX_ENTRIES)
num_entries = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Remove all entries and all arena spheres.

    Only the counts are reset; stale field data is overwritten when new
    spheres and entries are added.
    """
    num_spheres[None] = 0
    num_entries[None] = 0


def clear_entries() -> None:
    """Remove all scene entries, keeping the arena spheres."""
    num_entries[None] = 0


def add_sphere(center: tuple[float, float, float], radius: float) -> int:
    """Store a sphere in the arena.

    A negative radius is clamped to zero. The sphere is not part of the
    scene until an entry refers to it (see add_entry).

    Args:
        center: The center point of the sphere.
        radius: The radius of the sphere.

    Returns:
        The arena index of the stored sphere.

    Raises:
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    sphere_centers[idx] = [center[0], center[1], center[2]]
    sphere_radii[idx] = max(0.0, float(radius))
    num_spheres[None] = idx + 1
    return idx


def add_entry(sphere_index: int) -> int:
    """Append a scene entry referring to an arena sphere.

    Args:
        sphere_index: Arena index returned by add_sphere.

    Returns:
        The index of the new entry.

    Raises:
        ValueError: If sphere_index does not name a stored sphere.
        RuntimeError: If the maximum number of entries is exceeded.
    """
    if not 0 <= sphere_index < num_spheres[None]:
        raise ValueError(f"Invalid sphere index: {sphere_index}")
    idx = num_entries[None]
    if idx >= MAX_ENTRIES:
        raise RuntimeError(f"Maximum number of scene entries ({MAX_ENTRIES}) exceeded")
    entry_sphere_ids[idx] = sphere_index
    num_entries[None] = idx + 1
    return idx


def get_sphere_count() -> int:
    """Get the number of spheres stored in the arena."""
    return int(num_spheres[None])


def get_entry_count() -> int:
    """Get the number of entries in the scene."""
    return int(num_entries[None])


@ti.func
def get_entry_sphere(entry: ti.i32) -> Sphere:
    """Load the arena sphere referenced by a scene entry."""
    idx = entry_sphere_ids[entry]
    return Sphere(center=sphere_centers[idx], radius=sphere_radii[idx])


@ti.func
def intersect_scene(ray: Ray, ray_t: Interval) -> HitRecord:
    """Test a ray against every entry in the scene.

    Each entry is tested against (ray_t.lower, closest_so_far), where
    closest_so_far starts at ray_t.upper and shrinks with every hit.

    Args:
        ray: The ray to test.
        ray_t: The interval of acceptable t values.

    Returns:
        The HitRecord of the nearest intersection, or a miss record if no
        entry is hit inside ray_t.
    """
    closest_so_far = ray_t.upper
    result = make_miss_record()

    for k in range(num_entries[None]):
        sphere = get_entry_sphere(k)
        rec = hit_sphere(ray, sphere, make_interval(ray_t.lower, closest_so_far))
        if rec.hit == 1:
            closest_so_far = rec.t
            result = rec

    return result
