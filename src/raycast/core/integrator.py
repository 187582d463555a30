"""Ray coloring and the per-pixel render loop.

Every primary ray is colored by ``ray_color``:

- on a hit in (0, +inf) the unit normal is mapped from [-1, 1] to [0, 1]
  per channel, 0.5 * (normal + 1)
- on a miss the background is a vertical blend from white at the bottom to
  sky blue (0.5, 0.7, 1.0) at the top, driven by the y component of the
  unit ray direction

The render target is a preallocated color buffer indexed [i, j] with column
i and row j (row 0 at the top). ``render_image`` renders rows strictly in
order, top to bottom, and pixels left to right inside each row.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.raycast.camera.pinhole import PinholeCamera, setup_camera
    >>> from src.raycast.core.integrator import render_image, setup_render_target
    >>> geometry = setup_camera(PinholeCamera(aspect_ratio=16.0 / 9.0, image_width=400))
    >>> setup_render_target(geometry.image_width, geometry.image_height, 1)
    >>> render_image()
"""

from collections.abc import Callable

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from src.raycast.camera.pinhole import get_ray, sample_offsets
from src.raycast.core.interval import INFINITY, interval_clamp, make_interval
from src.raycast.core.ray import Ray, unit_vector
from src.raycast.scene.intersection import intersect_scene

# Type alias for 3D vectors
vec3 = tm.vec3

# Type alias for row progress callback
# Callback receives (rows_done, total_rows)
RowCallback = Callable[[int, int], None]

# =============================================================================
# Rendering Constants
# =============================================================================

# Accepted t range for primary rays: everything in front of the camera
T_MIN = 0.0
T_MAX = INFINITY

# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())
_samples_per_pixel = ti.field(dtype=ti.i32, shape=())

# Final pixel colors, preallocated to max size
_color_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int, samples_per_pixel: int = 1) -> None:
    """Initialize the render target.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).
        samples_per_pixel: Samples averaged per pixel (at least 1).

    Raises:
        ValueError: If dimensions exceed maximum supported size.
    """
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _samples_per_pixel[None] = max(1, samples_per_pixel)
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the color buffer to black."""
    _color_buffer.fill(0.0)


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions as (width, height)."""
    return int(_image_width[None]), int(_image_height[None])


def get_samples_per_pixel() -> int:
    """Get the number of samples averaged per pixel."""
    return int(_samples_per_pixel[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


# =============================================================================
# Ray Coloring
# =============================================================================


@ti.func
def background_color(ray: Ray) -> vec3:
    """Blend white to sky blue by the height of the unit ray direction."""
    unit_direction = unit_vector(ray.direction)
    a = 0.5 * (unit_direction.y + 1.0)
    return (1.0 - a) * vec3(1.0, 1.0, 1.0) + a * vec3(0.5, 0.7, 1.0)


@ti.func
def ray_color(ray: Ray) -> vec3:
    """Compute the color seen along a ray.

    Args:
        ray: The ray to color.

    Returns:
        The normal-mapped color of the nearest hit, or the background.
    """
    color = vec3(0.0, 0.0, 0.0)
    rec = intersect_scene(ray, make_interval(T_MIN, T_MAX))
    if rec.hit == 1:
        color = 0.5 * (rec.normal + vec3(1.0, 1.0, 1.0))
    else:
        color = background_color(ray)
    return color


@ti.func
def _clamp_color(color: vec3) -> vec3:
    """Clamp each channel into [0, 1]."""
    intensity = make_interval(0.0, 1.0)
    return vec3(
        interval_clamp(intensity, color.x),
        interval_clamp(intensity, color.y),
        interval_clamp(intensity, color.z),
    )


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_row(j: ti.i32, width: ti.i32, samples: ti.i32, offsets: ti.types.ndarray()):
    """Render one row of pixels into the color buffer.

    Args:
        j: Row index (0 = top).
        width: Image width in pixels.
        samples: Samples per pixel, matching offsets.shape[1].
        offsets: Sub-pixel (u, v) offsets of shape (width, samples, 2).
    """
    scale = 1.0 / ti.cast(samples, ti.f32)
    ti.loop_config(serialize=True)
    for i in range(width):
        pixel_color = vec3(0.0, 0.0, 0.0)
        for s in range(samples):
            ray = get_ray(i, j, offsets[i, s, 0], offsets[i, s, 1])
            pixel_color += ray_color(ray)
        _color_buffer[i, j] = _clamp_color(scale * pixel_color)


@ti.kernel
def _render_single_pixel(pixel_i: ti.i32, pixel_j: ti.i32) -> vec3:
    """Color a single pixel-center ray (testing and debugging)."""
    return ray_color(get_ray(pixel_i, pixel_j, 0.0, 0.0))


# =============================================================================
# Public Rendering API
# =============================================================================


def render_row(j: int, offsets: npt.NDArray[np.float32]) -> None:
    """Render row j with the given sub-pixel offsets.

    Args:
        j: Row index (0 = top).
        offsets: Array of shape (width, samples, 2), see sample_offsets.

    Raises:
        RuntimeError: If render target has not been set up.
        ValueError: If offsets does not match the image width.
    """
    _check_render_target_initialized()

    width, _ = get_image_dimensions()
    if offsets.ndim != 3 or offsets.shape[0] != width or offsets.shape[2] != 2:
        raise ValueError(
            f"Offsets must have shape ({width}, samples, 2), got {offsets.shape}"
        )

    _render_row(j, width, offsets.shape[1], np.ascontiguousarray(offsets, dtype=np.float32))


def render_image(
    rng: np.random.Generator | None = None,
    callback: RowCallback | None = None,
) -> None:
    """Render every row of the image, top to bottom.

    Args:
        rng: Random generator for sub-pixel jitter. A fresh unseeded
            generator is used when omitted.
        callback: Optional callback called after each row with
            (rows_done, total_rows).

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    if rng is None:
        rng = np.random.default_rng()

    width, height = get_image_dimensions()
    samples = get_samples_per_pixel()

    for j in range(height):
        render_row(j, sample_offsets(rng, width, samples))
        if callback is not None:
            callback(j + 1, height)


def render_pixel(pixel_i: int, pixel_j: int) -> tuple[float, float, float]:
    """Color the center ray of pixel (pixel_i, pixel_j).

    Uses the camera set up by setup_camera. The render target is not
    touched.

    Returns:
        Tuple of (R, G, B) color values.
    """
    color = _render_single_pixel(pixel_i, pixel_j)
    return (float(color[0]), float(color[1]), float(color[2]))


def get_normalized_image_numpy() -> npt.NDArray[np.float32]:
    """Get the rendered image as a NumPy array.

    Returns:
        Array of shape (height, width, 3) with values in [0, 1], row 0 at
        the top.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()

    full_image = _color_buffer.to_numpy()

    # Active region, transposed from (width, height, 3) to (height, width, 3)
    image = np.transpose(full_image[:width, :height, :], (1, 0, 2))

    return np.clip(image, 0.0, 1.0).astype(np.float32)
