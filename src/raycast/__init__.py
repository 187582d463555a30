"""Taichi-based sphere raycaster.

This package renders a single frame by casting rays from a pinhole camera
through a virtual viewport into a scene of spheres, shading hits by their
surface normal and misses with a white-to-sky gradient.

Subpackages:
    core: Vector and ray utilities, intervals, the color function and pixel loop
    geometry: Sphere primitive and ray-sphere intersection
    scene: Sphere arena, scene entries and the host-side scene manager
    camera: Pinhole camera initialisation and ray generation
    preview: Image export (plain-text PPM, Pillow formats)
"""

__version__ = "0.1.0"
