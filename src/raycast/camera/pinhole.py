"""Pinhole camera model for primary ray generation.

The camera sits at the origin and looks down the negative z axis with +y up.
Its viewport is a rectangle two world units high at focal length 1, split
into image_width x image_height square pixels:

- viewport_u spans the viewport left to right (+x)
- viewport_v spans it top to bottom (-y)
- pixel (0, 0) is the center of the upper-left pixel

Camera use has two phases. ``initialize_camera`` derives the viewport
geometry from the configuration (pure, computed with NumPy), and
``setup_camera`` uploads that geometry to Taichi fields so ``get_ray`` can be
called from kernels during the render pass.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.raycast.camera.pinhole import PinholeCamera, setup_camera, get_ray
    >>> camera = PinholeCamera(aspect_ratio=16.0 / 9.0, image_width=400)
    >>> geometry = setup_camera(camera)
    >>> geometry.image_height
    225
"""

from dataclasses import dataclass

import numpy as np
import numpy.typing as npt
import taichi as ti

from src.raycast.core.ray import Ray, make_ray, vec3

# Distance from the camera center to the viewport
FOCAL_LENGTH = 1.0

# Viewport height in world units
VIEWPORT_HEIGHT = 2.0

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class PinholeCamera:
    """Configuration for the pinhole camera.

    Attributes:
        aspect_ratio: Ideal ratio of image width over height.
        image_width: Rendered image width in pixels.
        samples_per_pixel: Number of rays averaged per pixel. With a single
            sample the ray goes through the pixel center; with more, every
            sample is jittered inside the pixel.
    """

    aspect_ratio: float = 1.0
    image_width: int = 100
    samples_per_pixel: int = 10


@dataclass(frozen=True)
class CameraGeometry:
    """Viewport geometry derived from a PinholeCamera.

    Attributes:
        image_width: Image width in pixels (at least 1).
        image_height: Image height in pixels (at least 1).
        samples_per_pixel: Samples per pixel (at least 1).
        pixel_samples_scale: Weight of each sample, 1 / samples_per_pixel.
        center: Camera center in world space.
        viewport_u: Vector across the viewport's horizontal edge.
        viewport_v: Vector down the viewport's vertical edge.
        pixel_delta_u: Offset from one pixel to the next to the right.
        pixel_delta_v: Offset from one pixel to the next row down.
        pixel00_loc: Center of the upper-left pixel.
    """

    image_width: int
    image_height: int
    samples_per_pixel: int
    pixel_samples_scale: float
    center: tuple[float, float, float]
    viewport_u: tuple[float, float, float]
    viewport_v: tuple[float, float, float]
    pixel_delta_u: tuple[float, float, float]
    pixel_delta_v: tuple[float, float, float]
    pixel00_loc: tuple[float, float, float]

    def pixel_center(self, i: int, j: int) -> tuple[float, float, float]:
        """World-space center of pixel (i, j), column i and row j."""
        p = (
            np.array(self.pixel00_loc)
            + i * np.array(self.pixel_delta_u)
            + j * np.array(self.pixel_delta_v)
        )
        return (float(p[0]), float(p[1]), float(p[2]))


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_center = ti.Vector.field(3, dtype=ti.f32, shape=())
_pixel00_loc = ti.Vector.field(3, dtype=ti.f32, shape=())
_pixel_delta_u = ti.Vector.field(3, dtype=ti.f32, shape=())
_pixel_delta_v = ti.Vector.field(3, dtype=ti.f32, shape=())


# =============================================================================
# Camera Setup (Python-side, called once before rendering)
# =============================================================================


def initialize_camera(camera: PinholeCamera) -> CameraGeometry:
    """Derive the viewport geometry from a camera configuration.

    The image height is image_width / aspect_ratio rounded down, and never
    less than one pixel. The viewport width uses the actual pixel ratio
    image_width / image_height rather than aspect_ratio, so pixels stay
    square.

    Args:
        camera: Camera configuration.

    Returns:
        The derived CameraGeometry.

    Raises:
        ValueError: If aspect_ratio is not positive.
    """
    if not camera.aspect_ratio > 0.0:
        raise ValueError(f"Aspect ratio must be positive, got {camera.aspect_ratio}")

    image_width = max(1, int(camera.image_width))
    image_height = max(1, int(image_width / camera.aspect_ratio))
    samples_per_pixel = max(1, int(camera.samples_per_pixel))

    viewport_width = VIEWPORT_HEIGHT * (image_width / image_height)
    center = np.zeros(3)

    viewport_u = np.array([viewport_width, 0.0, 0.0])
    viewport_v = np.array([0.0, -VIEWPORT_HEIGHT, 0.0])

    pixel_delta_u = viewport_u / image_width
    pixel_delta_v = viewport_v / image_height

    viewport_upper_left = (
        center - np.array([0.0, 0.0, FOCAL_LENGTH]) - viewport_u / 2.0 - viewport_v / 2.0
    )
    pixel00_loc = viewport_upper_left + 0.5 * (pixel_delta_u + pixel_delta_v)

    def as_tuple(v: npt.NDArray[np.float64]) -> tuple[float, float, float]:
        return (float(v[0]), float(v[1]), float(v[2]))

    return CameraGeometry(
        image_width=image_width,
        image_height=image_height,
        samples_per_pixel=samples_per_pixel,
        pixel_samples_scale=1.0 / samples_per_pixel,
        center=as_tuple(center),
        viewport_u=as_tuple(viewport_u),
        viewport_v=as_tuple(viewport_v),
        pixel_delta_u=as_tuple(pixel_delta_u),
        pixel_delta_v=as_tuple(pixel_delta_v),
        pixel00_loc=as_tuple(pixel00_loc),
    )


def setup_camera(camera: PinholeCamera) -> CameraGeometry:
    """Initialize camera state for rendering.

    Computes the geometry with initialize_camera and writes it to the Taichi
    fields read by get_ray. Must be called before rendering.

    Args:
        camera: Camera configuration.

    Returns:
        The derived CameraGeometry.
    """
    geometry = initialize_camera(camera)

    _camera_center[None] = list(geometry.center)
    _pixel00_loc[None] = list(geometry.pixel00_loc)
    _pixel_delta_u[None] = list(geometry.pixel_delta_u)
    _pixel_delta_v[None] = list(geometry.pixel_delta_v)

    return geometry


def sample_offsets(
    rng: np.random.Generator,
    width: int,
    samples_per_pixel: int,
) -> npt.NDArray[np.float32]:
    """Draw sub-pixel offsets for one row of pixels.

    Each offset is uniform in [-0.5, 0.5) along both pixel axes. A single
    sample per pixel is not jittered: its offset is zero, which puts the ray
    through the pixel center.

    Args:
        rng: Random generator to draw from.
        width: Number of pixels in the row.
        samples_per_pixel: Number of samples per pixel.

    Returns:
        Array of shape (width, samples_per_pixel, 2) with (u, v) offsets.
    """
    if samples_per_pixel <= 1:
        return np.zeros((width, 1, 2), dtype=np.float32)
    offsets = rng.uniform(-0.5, 0.5, size=(width, samples_per_pixel, 2))
    return offsets.astype(np.float32)


# =============================================================================
# Ray Generation (Taichi-compatible)
# =============================================================================


@ti.func
def get_ray(i: ti.i32, j: ti.i32, offset_u: ti.f32, offset_v: ti.f32) -> Ray:
    """Generate a ray from the camera center through a point in pixel (i, j).

    Args:
        i: Pixel column (0 = left).
        j: Pixel row (0 = top).
        offset_u: Horizontal offset from the pixel center, in pixels.
        offset_v: Vertical offset from the pixel center, in pixels (positive
            moves down).

    Returns:
        A Ray whose direction is the sample point minus the camera center
        (not normalized).
    """
    pixel_sample = (
        _pixel00_loc[None]
        + (ti.cast(i, ti.f32) + offset_u) * _pixel_delta_u[None]
        + (ti.cast(j, ti.f32) + offset_v) * _pixel_delta_v[None]
    )
    origin = _camera_center[None]
    return make_ray(origin, pixel_sample - origin)


@ti.func
def get_camera_center() -> vec3:
    """Get the camera center in world space."""
    return _camera_center[None]


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict[str, tuple[float, float, float]]:
    """Get the uploaded camera state for debugging.

    Returns:
        Dictionary with center, pixel00_loc, pixel_delta_u and pixel_delta_v.
    """

    def read(f: "ti.MatrixField") -> tuple[float, float, float]:
        v = f[None]
        return (float(v[0]), float(v[1]), float(v[2]))

    return {
        "center": read(_camera_center),
        "pixel00_loc": read(_pixel00_loc),
        "pixel_delta_u": read(_pixel_delta_u),
        "pixel_delta_v": read(_pixel_delta_v),
    }
