"""Camera module for viewport setup and primary ray generation.

Components:
    pinhole: Pinhole camera at the origin looking down -z

Camera responsibilities:
    - Derive image height and viewport geometry from the configuration
    - Map pixel (i, j) plus a sub-pixel offset to a world-space ray
    - Draw per-row jitter offsets from an explicit random generator

Pixel coordinates:
    i in [0, image_width): left to right
    j in [0, image_height): top to bottom
"""

from .pinhole import (
    CameraGeometry,
    PinholeCamera,
    get_camera_center,
    get_camera_info,
    get_ray,
    initialize_camera,
    sample_offsets,
    setup_camera,
)

__all__ = [
    "PinholeCamera",
    "CameraGeometry",
    "initialize_camera",
    "setup_camera",
    "sample_offsets",
    "get_ray",
    "get_camera_center",
    "get_camera_info",
]
