"""Preview module for rendered output.

Components:
    export: Plain-text PPM writer and Pillow-based image export

Example:
    >>> from src.raycast.preview import save_ppm
    >>> save_ppm(renderer.get_image_numpy(), "output/image.ppm")
"""

from src.raycast.preview.export import (
    compute_rmse,
    image_to_uint8,
    save_png_from_array,
    save_ppm,
    write_ppm,
)

__all__ = [
    "image_to_uint8",
    "write_ppm",
    "save_ppm",
    "save_png_from_array",
    "compute_rmse",
]
