"""Integration tests for the end-to-end rendering pipeline.

This module runs the render_spheres example from scene creation through the
final image file. Tests are kept fast (low resolution, few samples) while
still exercising the full pipeline.

Note: Imports are done inside test methods to avoid Taichi initialization issues.
The conftest.py fixture initializes Taichi before tests run.
"""

from __future__ import annotations

import importlib.util
import json
from pathlib import Path

import numpy as np
import pytest

EXAMPLES_DIR = Path(__file__).parent.parent / "examples"


@pytest.fixture(scope="module")
def render_spheres():
    """Load render_spheres from the examples directory."""
    spec = importlib.util.spec_from_file_location(
        "render_spheres_example", EXAMPLES_DIR / "render_spheres.py"
    )
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module.render_spheres


def _read_ppm(path: Path) -> tuple[int, int, np.ndarray]:
    lines = path.read_text(encoding="ascii").splitlines()
    assert lines[0] == "P3"
    assert lines[2] == "255"
    width, height = (int(v) for v in lines[1].split())
    pixels = np.array([[int(v) for v in line.split()] for line in lines[3:]], dtype=np.int64)
    return width, height, pixels.reshape(height, width, 3)


class TestRenderSpheres:
    """End-to-end tests of the sphere renderer."""

    def test_default_scene_to_ppm(self, render_spheres, tmp_path) -> None:
        """Test the default scene renders to a valid PPM."""
        output = render_spheres(
            width=64,
            num_samples=2,
            output_path=str(tmp_path / "out" / "image.ppm"),
            seed=1,
            quiet=True,
        )

        assert output.exists()
        width, height, pixels = _read_ppm(output)
        assert (width, height) == (64, 36)
        assert pixels.min() >= 0
        assert pixels.max() <= 255

        # Sky at the top, sphere in the middle, ground at the bottom
        top = pixels[0, 32]
        middle = pixels[18, 32]
        bottom = pixels[35, 32]
        assert top[2] == 255 and top[0] < top[1] < top[2]
        assert middle[2] > 240 and middle[0] == pytest.approx(128, abs=10)
        assert bottom[1] > 240 and bottom[0] < 200

    def test_scene_file(self, render_spheres, tmp_path) -> None:
        """Test a JSON scene file replaces the default scene."""
        scene_path = tmp_path / "empty.json"
        scene_path.write_text(json.dumps({"spheres": []}), encoding="utf-8")

        output = render_spheres(
            width=32,
            aspect_ratio=2.0,
            num_samples=1,
            scene_path=str(scene_path),
            output_path=str(tmp_path / "sky.ppm"),
            quiet=True,
        )

        _, height, pixels = _read_ppm(output)
        # Only sky: blue channel saturated everywhere, red grows toward the bottom
        assert np.all(pixels[:, :, 2] == 255)
        assert pixels[0, :, 0].mean() < pixels[height - 1, :, 0].mean()

    def test_bundled_scene_matches_default(self, render_spheres, tmp_path) -> None:
        """Test the bundled two-sphere file renders like the built-in scene."""
        default = render_spheres(
            width=40, num_samples=1, output_path=str(tmp_path / "a.ppm"), quiet=True
        )
        bundled = render_spheres(
            width=40,
            num_samples=1,
            scene_path=str(EXAMPLES_DIR / "two_spheres.json"),
            output_path=str(tmp_path / "b.ppm"),
            quiet=True,
        )

        assert default.read_text(encoding="ascii") == bundled.read_text(encoding="ascii")

    def test_png_output(self, render_spheres, tmp_path) -> None:
        """Test non-PPM extensions are written through Pillow."""
        from PIL import Image

        output = render_spheres(
            width=32, num_samples=1, output_path=str(tmp_path / "image.png"), quiet=True
        )
        with Image.open(output) as img:
            assert img.size == (32, 18)

    def test_progress_output(self, render_spheres, tmp_path, capsys) -> None:
        """Test progress is printed per scanline unless quiet."""
        render_spheres(width=16, num_samples=1, output_path=str(tmp_path / "p.ppm"))

        out = capsys.readouterr().out
        assert "Scanlines remaining: 0" in out
        assert "Done." in out
        assert "Saved to:" in out

    def test_bad_scene_file(self, render_spheres, tmp_path) -> None:
        """Test malformed sphere data raises ValueError."""
        scene_path = tmp_path / "bad.json"
        scene_path.write_text(
            json.dumps({"spheres": [{"center": [0, 0], "radius": 1}]}), encoding="utf-8"
        )

        with pytest.raises(ValueError):
            render_spheres(
                width=8, num_samples=1, scene_path=str(scene_path),
                output_path=str(tmp_path / "x.ppm"), quiet=True,
            )
