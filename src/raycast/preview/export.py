"""Image export utilities for rendered images.

Supported formats:
    - Plain-text PPM (P3), written directly
    - PNG and other raster formats via Pillow

Each channel is converted from [0, 1] to an integer in [0, 255] by
multiplying by 255.999 and truncating.

Example:
    >>> from src.raycast.preview.export import save_ppm
    >>> save_ppm(renderer.get_image_numpy(), "output/image.ppm")
"""

from __future__ import annotations

from pathlib import Path
from typing import TextIO

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

# Scale applied before truncating a [0, 1] channel to an integer
CHANNEL_SCALE = 255.999

# Maximum channel value written in the PPM header
MAX_CHANNEL_VALUE = 255


def image_to_uint8(image: npt.NDArray[np.floating]) -> npt.NDArray[np.uint8]:
    """Convert a float image in [0, 1] to 8-bit channels.

    Values are clipped to [0, 1], scaled by 255.999 and truncated (not
    rounded).

    Args:
        image: Image array of shape (H, W, 3).

    Returns:
        8-bit image array of shape (H, W, 3).
    """
    clipped = np.clip(image.astype(np.float64), 0.0, 1.0)
    return (CHANNEL_SCALE * clipped).astype(np.uint8)


def write_ppm(image: npt.NDArray[np.floating], stream: TextIO) -> None:
    """Write an image as plain-text PPM.

    The output is a three-line header (``P3``, ``<width> <height>``,
    ``255``) followed by one ``r g b`` line per pixel, row-major from the top
    row down.

    Args:
        image: Image array of shape (H, W, 3) with values in [0, 1].
        stream: Text stream to write to.

    Raises:
        ValueError: If the image does not have shape (H, W, 3).
    """
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Image must have shape (H, W, 3), got {image.shape}")

    height, width = image.shape[:2]
    pixels = image_to_uint8(image).reshape(-1, 3)

    stream.write(f"P3\n{width} {height}\n{MAX_CHANNEL_VALUE}\n")
    stream.writelines(f"{r} {g} {b}\n" for r, g, b in pixels.tolist())


def save_ppm(image: npt.NDArray[np.floating], filepath: str | Path) -> None:
    """Save an image as a plain-text PPM file.

    Parent directories are created as needed.

    Args:
        image: Image array of shape (H, W, 3) with values in [0, 1].
        filepath: Output file path.
    """
    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="ascii") as stream:
        write_ppm(image, stream)


def save_png_from_array(image: npt.NDArray[np.floating], filepath: str | Path) -> None:
    """Save a NumPy array as a PNG (or any format Pillow infers from the path).

    Args:
        image: Image array of shape (H, W, 3) with values in [0, 1].
        filepath: Output file path.
    """
    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)
    pil_image = PILImage.fromarray(image_to_uint8(image))
    pil_image.save(path)


def compute_rmse(
    image_a: npt.NDArray[np.floating],
    image_b: npt.NDArray[np.floating],
) -> float:
    """Compute root mean squared error between two images.

    Args:
        image_a: First image array.
        image_b: Second image array (must have same shape as image_a).

    Returns:
        RMSE value (lower is more similar).

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(
            f"Image shapes must match: {image_a.shape} vs {image_b.shape}"
        )

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
