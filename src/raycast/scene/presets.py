"""Ready-made scenes.

The default scene is a small sphere resting on a very large "ground" sphere,
viewed through a 16:9 camera 400 pixels wide.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.raycast.scene.presets import create_default_scene
    >>> scene, camera = create_default_scene()
    >>> len(scene)
    2
"""

from src.raycast.camera.pinhole import PinholeCamera
from src.raycast.scene.manager import SceneManager

DEFAULT_ASPECT_RATIO = 16.0 / 9.0
DEFAULT_IMAGE_WIDTH = 400
DEFAULT_SAMPLES_PER_PIXEL = 100


def create_default_scene(
    samples_per_pixel: int = DEFAULT_SAMPLES_PER_PIXEL,
) -> tuple[SceneManager, PinholeCamera]:
    """Create the two-sphere scene and its camera.

    Args:
        samples_per_pixel: Samples averaged per pixel.

    Returns:
        Tuple of (scene, camera).
    """
    scene = SceneManager()
    scene.add_sphere((0.0, 0.0, -1.0), 0.5)
    scene.add_sphere((0.0, -100.5, -1.0), 100.0)

    camera = PinholeCamera(
        aspect_ratio=DEFAULT_ASPECT_RATIO,
        image_width=DEFAULT_IMAGE_WIDTH,
        samples_per_pixel=samples_per_pixel,
    )
    return scene, camera
