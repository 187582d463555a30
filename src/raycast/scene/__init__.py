"""Scene module for scene storage and ray-scene queries.

Components:
    intersection: Sphere arena, scene entries and closest-hit queries
    manager: Host-side scene manager with shared sphere references
    presets: Ready-made scenes

Scene data lives in Taichi fields, so import this package only after
ti.init() has been called.
"""

from .intersection import (
    MAX_ENTRIES,
    MAX_SPHERES,
    add_entry,
    add_sphere,
    clear_entries,
    clear_scene,
    get_entry_count,
    get_sphere_count,
    intersect_scene,
)
from .manager import SceneConfig, SceneManager, SphereInfo
from .presets import create_default_scene

__all__ = [
    # Intersection module
    "add_sphere",
    "add_entry",
    "clear_scene",
    "clear_entries",
    "get_sphere_count",
    "get_entry_count",
    "intersect_scene",
    "MAX_SPHERES",
    "MAX_ENTRIES",
    # Manager module
    "SceneManager",
    "SphereInfo",
    "SceneConfig",
    # Presets
    "create_default_scene",
]
