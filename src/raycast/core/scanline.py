"""Scanline renderer driving a full frame.

This module wraps the camera and integrator functions into one object:

- construction runs the initialize phase (camera geometry and render target)
- render() produces the whole frame, one row at a time, top to bottom
- progress is reported per row through a callback or a generator

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.raycast.camera.pinhole import PinholeCamera
    >>> from src.raycast.core.scanline import ScanlineRenderer
    >>> from src.raycast.scene.presets import create_default_scene
    >>>
    >>> scene, camera = create_default_scene()
    >>> renderer = ScanlineRenderer(camera)
    >>> renderer.render()
    >>> renderer.save_image("output/image.ppm")
"""

from collections.abc import Generator
from pathlib import Path

import numpy as np
import numpy.typing as npt

from src.raycast.camera.pinhole import (
    CameraGeometry,
    PinholeCamera,
    sample_offsets,
    setup_camera,
)
from src.raycast.core.integrator import (
    RowCallback,
    get_normalized_image_numpy,
    render_row,
    setup_render_target,
)


class ScanlineRenderer:
    """Renders one frame of the current scene through a pinhole camera.

    The scene is whatever the scene fields hold when render() is called;
    build it with SceneManager beforehand.

    Attributes:
        camera: The camera configuration.
        geometry: The viewport geometry derived from the camera.
    """

    def __init__(self, camera: PinholeCamera) -> None:
        """Initialize camera state and the render target.

        Args:
            camera: Camera configuration.

        Raises:
            ValueError: If the camera configuration is invalid or the image
                exceeds the maximum supported size.
        """
        self.camera = camera
        self.geometry: CameraGeometry = setup_camera(camera)
        setup_render_target(
            self.geometry.image_width,
            self.geometry.image_height,
            self.geometry.samples_per_pixel,
        )
        self._rows_done = 0

    @property
    def width(self) -> int:
        """Get the image width."""
        return self.geometry.image_width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self.geometry.image_height

    @property
    def rows_done(self) -> int:
        """Number of rows rendered by the last render pass."""
        return self._rows_done

    def render(
        self,
        rng: np.random.Generator | None = None,
        callback: RowCallback | None = None,
    ) -> None:
        """Render the whole image.

        Args:
            rng: Random generator for sub-pixel jitter. A fresh unseeded
                generator is used when omitted.
            callback: Optional callback called after each row with
                (rows_done, total_rows).
        """
        for rows_done, total in self.render_progressive(rng):
            if callback is not None:
                callback(rows_done, total)

    def render_progressive(
        self,
        rng: np.random.Generator | None = None,
    ) -> Generator[tuple[int, int], None, None]:
        """Render the image, yielding progress after each row.

        Args:
            rng: Random generator for sub-pixel jitter.

        Yields:
            Tuple of (rows_done, total_rows).
        """
        if rng is None:
            rng = np.random.default_rng()

        # Camera and render target fields are global; re-upload in case
        # another renderer was created since
        setup_camera(self.camera)
        setup_render_target(
            self.geometry.image_width,
            self.geometry.image_height,
            self.geometry.samples_per_pixel,
        )

        self._rows_done = 0
        for j in range(self.height):
            render_row(j, sample_offsets(rng, self.width, self.geometry.samples_per_pixel))
            self._rows_done = j + 1
            yield (self._rows_done, self.height)

    def get_image_numpy(self) -> npt.NDArray[np.float32]:
        """Get the rendered image as a (height, width, 3) array in [0, 1]."""
        return get_normalized_image_numpy()

    def get_image_uint8(self) -> npt.NDArray[np.uint8]:
        """Get the rendered image as 8-bit channels (255.999 scale, truncated)."""
        from src.raycast.preview.export import image_to_uint8

        return image_to_uint8(self.get_image_numpy())

    def save_image(self, filepath: str | Path) -> Path:
        """Save the rendered image.

        ``.ppm`` paths are written as plain-text PPM; any other extension is
        handed to Pillow.

        Args:
            filepath: Output file path.

        Returns:
            The path written.
        """
        from src.raycast.preview.export import save_png_from_array, save_ppm

        path = Path(filepath)
        image = self.get_image_numpy()
        if path.suffix.lower() == ".ppm":
            save_ppm(image, path)
        else:
            save_png_from_array(image, path)
        return path

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return (
            f"ScanlineRenderer(width={self.width}, height={self.height}, "
            f"samples_per_pixel={self.geometry.samples_per_pixel})"
        )
