"""Host-side scene manager.

The SceneManager keeps the Python view of the scene (an ordered list of
sphere references) and mirrors every change into the Taichi-side arena and
entry fields used by ``intersect_scene``.

Spheres are plain immutable values. The same SphereInfo object may be added
to the scene any number of times; it is stored once in the arena and each
addition becomes one more entry pointing at it.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.raycast.scene.manager import SceneManager, SphereInfo
    >>> scene = SceneManager()
    >>> ball = SphereInfo(center=(0.0, 0.0, -1.0), radius=0.5)
    >>> scene.add(ball)
    >>> scene.add_sphere((0.0, -100.5, -1.0), 100.0)
    >>> len(scene)
    2
"""

from dataclasses import dataclass, field
from typing import Any

from src.raycast.scene.intersection import (
    MAX_ENTRIES,
    MAX_SPHERES,
    add_entry,
    add_sphere,
    clear_scene,
)


@dataclass(frozen=True)
class SphereInfo:
    """A sphere definition.

    A negative radius is clamped to zero on construction.

    Attributes:
        center: The center of the sphere.
        radius: The radius of the sphere.
    """

    center: tuple[float, float, float]
    radius: float

    def __post_init__(self) -> None:
        center = tuple(float(c) for c in self.center)
        if len(center) != 3:
            raise ValueError(f"Sphere center must have 3 components, got {len(center)}")
        object.__setattr__(self, "center", center)
        object.__setattr__(self, "radius", max(0.0, float(self.radius)))


@dataclass
class SceneConfig:
    """Configuration for scene serialization.

    Attributes:
        spheres: List of sphere configurations, each a dict with "center"
            (three numbers) and "radius" keys.
    """

    spheres: list[dict[str, Any]] = field(default_factory=list)


class SceneManager:
    """Ordered collection of spheres that rays are tested against.

    Attributes:
        objects: The scene entries in insertion order. The same SphereInfo
            may appear more than once.

    Example:
        >>> scene = SceneManager()
        >>> ball = scene.add_sphere((0, 0, -1), 0.5)
        >>> scene.add(ball)  # second entry sharing the same geometry
        >>> scene.get_sphere_count(), scene.get_entry_count()
        (1, 2)
    """

    def __init__(self) -> None:
        """Initialize an empty scene."""
        self.objects: list[SphereInfo] = []
        self._arena: list[SphereInfo] = []
        self._arena_ids: dict[int, int] = {}
        self._clear_all()

    def _clear_all(self) -> None:
        """Clear all scene data including Taichi fields."""
        clear_scene()
        self.objects.clear()
        self._arena.clear()
        self._arena_ids.clear()

    def clear(self) -> None:
        """Remove every object from the scene."""
        self._clear_all()

    def __len__(self) -> int:
        return len(self.objects)

    def _arena_index(self, sphere: SphereInfo) -> int:
        # Keyed by id(); _arena holds a reference so ids stay unique
        idx = self._arena_ids.get(id(sphere))
        if idx is None:
            idx = add_sphere(sphere.center, sphere.radius)
            self._arena.append(sphere)
            self._arena_ids[id(sphere)] = idx
        return idx

    def add(self, sphere: SphereInfo) -> None:
        """Append a sphere to the scene.

        Adding an object that is already in the scene reuses its stored
        geometry.

        Args:
            sphere: The sphere to add.

        Raises:
            RuntimeError: If the sphere or entry capacity is exceeded.
        """
        add_entry(self._arena_index(sphere))
        self.objects.append(sphere)

    def add_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
    ) -> SphereInfo:
        """Create a sphere and append it to the scene.

        Args:
            center: The center of the sphere.
            radius: The radius of the sphere (negative values become 0).

        Returns:
            The new SphereInfo, which may be added again to share geometry.
        """
        sphere = SphereInfo(center=center, radius=radius)
        self.add(sphere)
        return sphere

    def get_sphere_count(self) -> int:
        """Get the number of distinct spheres stored for this scene."""
        return len(self._arena)

    def get_entry_count(self) -> int:
        """Get the number of entries in the scene."""
        return len(self.objects)

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Export the scene to a configuration object.

        Shared geometry is written out once per entry.
        """
        config = SceneConfig()
        for sphere in self.objects:
            config.spheres.append(
                {
                    "center": list(sphere.center),
                    "radius": sphere.radius,
                }
            )
        return config

    def from_config(self, config: SceneConfig) -> None:
        """Load a scene from a configuration object.

        Clears the current scene and loads the configuration.

        Args:
            config: The scene configuration to load.

        Raises:
            ValueError: If a sphere entry is malformed.
        """
        self.clear()

        for sphere_config in config.spheres:
            center_list = sphere_config.get("center", [0.0, 0.0, 0.0])
            if len(center_list) != 3:
                raise ValueError(f"Sphere center must have 3 components: {center_list}")
            center: tuple[float, float, float] = (
                center_list[0],
                center_list[1],
                center_list[2],
            )
            radius = sphere_config.get("radius", 1.0)
            self.add_sphere(center, radius)

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization)."""
        return {"spheres": self.to_config().spheres}

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load a scene from a dictionary with a 'spheres' key."""
        self.from_config(SceneConfig(spheres=data.get("spheres", [])))

    # =========================================================================
    # Capacity Information
    # =========================================================================

    @staticmethod
    def get_max_spheres() -> int:
        """Get the maximum number of distinct spheres supported."""
        return MAX_SPHERES

    @staticmethod
    def get_max_entries() -> int:
        """Get the maximum number of scene entries supported."""
        return MAX_ENTRIES
