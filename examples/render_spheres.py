#!/usr/bin/env python3
"""Render a scene of spheres to an image file.

Spheres are shaded by their surface normal over a white-to-blue sky. Without
``--scene`` the default scene (a small sphere on a large ground sphere) is
rendered.

Usage:
    python -m examples.render_spheres [options]

Options:
    --width WIDTH           Image width in pixels (default: 400)
    --aspect-ratio RATIO    Image width over height (default: 16/9)
    --samples SAMPLES       Samples per pixel (default: 100)
    --scene SCENE           JSON scene file: {"spheres": [{"center": [x, y, z], "radius": r}]}
    --output OUTPUT         Output file path (default: output/image.ppm)
    --seed SEED             Seed for sub-pixel jitter
    --quiet                 Suppress progress output

Example:
    python -m examples.render_spheres --width 200 --samples 10 --output out.png
"""

from __future__ import annotations

import argparse
import json
import sys
import time
from pathlib import Path

import numpy as np
import taichi as ti


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a scene of spheres.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=400,
        help="Image width in pixels (default: 400)",
    )
    parser.add_argument(
        "--aspect-ratio",
        type=float,
        default=16.0 / 9.0,
        help="Image width over height (default: 16/9)",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=100,
        help="Samples per pixel (default: 100)",
    )
    parser.add_argument(
        "--scene",
        type=str,
        default=None,
        help="JSON scene file (default: built-in two-sphere scene)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="output/image.ppm",
        help="Output file path (default: output/image.ppm)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for sub-pixel jitter (default: unseeded)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args()


def render_spheres(
    width: int = 400,
    aspect_ratio: float = 16.0 / 9.0,
    num_samples: int = 100,
    scene_path: str | None = None,
    output_path: str = "output/image.ppm",
    seed: int | None = None,
    quiet: bool = False,
) -> Path:
    """Render a sphere scene and save it to a file.

    Args:
        width: Image width in pixels.
        aspect_ratio: Image width over height.
        num_samples: Samples per pixel.
        scene_path: Optional JSON scene file; the default scene otherwise.
        output_path: Output file path (.ppm for plain-text PPM).
        seed: Optional seed for sub-pixel jitter.
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from src.raycast.camera.pinhole import PinholeCamera
    from src.raycast.core.scanline import ScanlineRenderer
    from src.raycast.scene.manager import SceneManager
    from src.raycast.scene.presets import create_default_scene

    if scene_path is None:
        scene, _ = create_default_scene()
    else:
        scene = SceneManager()
        with open(scene_path, encoding="utf-8") as f:
            scene.from_dict(json.load(f))

    camera = PinholeCamera(
        aspect_ratio=aspect_ratio,
        image_width=width,
        samples_per_pixel=num_samples,
    )
    renderer = ScanlineRenderer(camera)

    if not quiet:
        print(
            f"Rendering {len(scene)} spheres at {renderer.width}x{renderer.height}, "
            f"{renderer.geometry.samples_per_pixel} samples per pixel..."
        )

    start_time = time.time()

    def progress_callback(rows_done: int, total_rows: int) -> None:
        if not quiet:
            print(
                f"\rScanlines remaining: {total_rows - rows_done} ",
                end="",
                flush=True,
            )

    renderer.render(rng=np.random.default_rng(seed), callback=progress_callback)

    if not quiet:
        print("\rDone.                   ")

    output_file = renderer.save_image(output_path)

    total_time = time.time() - start_time
    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {total_time:.2f}s")

    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()

    # Single-threaded CPU backend
    ti.init(arch=ti.cpu, cpu_max_num_threads=1)

    try:
        render_spheres(
            width=args.width,
            aspect_ratio=args.aspect_ratio,
            num_samples=args.samples,
            scene_path=args.scene,
            output_path=args.output,
            seed=args.seed,
            quiet=args.quiet,
        )
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
