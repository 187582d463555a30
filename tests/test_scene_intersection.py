"""Unit tests for scene-level intersection.

Tests cover:
- Sphere arena and entry storage
- Closest hit selection across entries
- Shared geometry referenced by several entries
- Agreement with the nearest individual sphere hit
"""

import numpy as np
import pytest
import taichi as ti


@pytest.fixture(scope="module")
def scene_query():
    """Build kernels testing a ray against the scene and single entries."""
    from src.raycast.core.interval import make_interval
    from src.raycast.core.ray import Ray, vec3
    from src.raycast.geometry.sphere import hit_sphere
    from src.raycast.scene.intersection import get_entry_sphere, intersect_scene

    hit = ti.field(dtype=ti.i32, shape=())
    t_val = ti.field(dtype=ti.f32, shape=())
    normal = ti.field(dtype=ti.math.vec3, shape=())

    @ti.kernel
    def query_scene(
        ox: ti.f32, oy: ti.f32, oz: ti.f32,
        dx: ti.f32, dy: ti.f32, dz: ti.f32,
        t_min: ti.f32, t_max: ti.f32,
    ):
        ray = Ray(origin=vec3(ox, oy, oz), direction=vec3(dx, dy, dz))
        rec = intersect_scene(ray, make_interval(t_min, t_max))
        hit[None] = rec.hit
        t_val[None] = rec.t
        normal[None] = rec.normal

    @ti.kernel
    def query_entry(
        entry: ti.i32,
        ox: ti.f32, oy: ti.f32, oz: ti.f32,
        dx: ti.f32, dy: ti.f32, dz: ti.f32,
        t_min: ti.f32, t_max: ti.f32,
    ):
        ray = Ray(origin=vec3(ox, oy, oz), direction=vec3(dx, dy, dz))
        rec = hit_sphere(ray, get_entry_sphere(entry), make_interval(t_min, t_max))
        hit[None] = rec.hit
        t_val[None] = rec.t
        normal[None] = rec.normal

    def run(origin, direction, entry=None, t_min=0.001, t_max=float("inf")):
        args = [float(a) for a in (*origin, *direction, t_min, t_max)]
        if entry is None:
            query_scene(*args)
        else:
            query_entry(entry, *args)
        n = normal[None]
        return int(hit[None]), float(t_val[None]), [float(n[0]), float(n[1]), float(n[2])]

    return run


class TestScenePrimitiveStorage:
    """Tests for arena and entry storage."""

    def test_add_sphere_returns_sequential_indices(self):
        """Test arena indices count up from zero."""
        from src.raycast.scene.intersection import add_sphere, get_sphere_count

        assert add_sphere((0.0, 0.0, -1.0), 0.5) == 0
        assert add_sphere((1.0, 0.0, -1.0), 0.5) == 1
        assert get_sphere_count() == 2

    def test_add_sphere_clamps_negative_radius(self):
        """Test the arena stores a negative radius as zero."""
        from src.raycast.scene.intersection import add_sphere, sphere_radii

        idx = add_sphere((0.0, 0.0, -1.0), -5.0)
        assert sphere_radii[idx] == 0.0

    def test_add_entry(self):
        """Test entries reference arena spheres."""
        from src.raycast.scene.intersection import (
            add_entry,
            add_sphere,
            entry_sphere_ids,
            get_entry_count,
        )

        idx = add_sphere((0.0, 0.0, -1.0), 0.5)
        assert add_entry(idx) == 0
        assert add_entry(idx) == 1
        assert get_entry_count() == 2
        assert entry_sphere_ids[0] == idx
        assert entry_sphere_ids[1] == idx

    def test_add_entry_rejects_unknown_sphere(self):
        """Test an entry must name a stored sphere."""
        from src.raycast.scene.intersection import add_entry, add_sphere

        with pytest.raises(ValueError, match="Invalid sphere index"):
            add_entry(0)

        add_sphere((0.0, 0.0, -1.0), 0.5)
        with pytest.raises(ValueError):
            add_entry(1)
        with pytest.raises(ValueError):
            add_entry(-1)

    def test_clear_scene(self):
        """Test clear_scene resets both counts."""
        from src.raycast.scene.intersection import (
            add_entry,
            add_sphere,
            clear_scene,
            get_entry_count,
            get_sphere_count,
        )

        add_entry(add_sphere((0.0, 0.0, -1.0), 0.5))
        clear_scene()
        assert get_sphere_count() == 0
        assert get_entry_count() == 0

    def test_clear_entries_keeps_arena(self):
        """Test clear_entries leaves stored spheres in place."""
        from src.raycast.scene.intersection import (
            add_entry,
            add_sphere,
            clear_entries,
            get_entry_count,
            get_sphere_count,
        )

        add_entry(add_sphere((0.0, 0.0, -1.0), 0.5))
        clear_entries()
        assert get_sphere_count() == 1
        assert get_entry_count() == 0


class TestSceneIntersection:
    """Tests for intersect_scene."""

    def test_empty_scene_misses(self, scene_query):
        """Test a scene with no entries never reports a hit."""
        hit, _, _ = scene_query((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert hit == 0

    def test_arena_sphere_without_entry_is_invisible(self, scene_query):
        """Test spheres only take part once an entry refers to them."""
        from src.raycast.scene.intersection import add_sphere

        add_sphere((0.0, 0.0, -2.0), 0.5)
        hit, _, _ = scene_query((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert hit == 0

    @pytest.mark.parametrize("near_first", [True, False])
    def test_closest_hit_regardless_of_order(self, scene_query, near_first):
        """Test the nearest sphere wins whichever entry comes first."""
        from src.raycast.scene.intersection import add_entry, add_sphere

        near = ((0.0, 0.0, -2.0), 0.5)
        far = ((0.0, 0.0, -5.0), 1.0)
        for center, radius in (near, far) if near_first else (far, near):
            add_entry(add_sphere(center, radius))

        hit, t, normal = scene_query((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert hit == 1
        assert t == pytest.approx(1.5, abs=1e-5)
        assert normal == pytest.approx([0.0, 0.0, 1.0], abs=1e-5)

    def test_interval_upper_bound_limits_hits(self, scene_query):
        """Test entries beyond t_max are ignored."""
        from src.raycast.scene.intersection import add_entry, add_sphere

        add_entry(add_sphere((0.0, 0.0, -5.0), 1.0))
        hit, _, _ = scene_query((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), t_max=3.0)
        assert hit == 0

    def test_nested_spheres(self, scene_query):
        """Test the inner sphere is hit first from inside the outer one."""
        from src.raycast.scene.intersection import add_entry, add_sphere

        add_entry(add_sphere((0.0, 0.0, 0.0), 10.0))
        add_entry(add_sphere((0.0, 0.0, -3.0), 1.0))

        hit, t, normal = scene_query((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert hit == 1
        assert t == pytest.approx(2.0, abs=1e-5)
        assert normal == pytest.approx([0.0, 0.0, 1.0], abs=1e-5)

    def test_shared_sphere_entries(self, scene_query):
        """Test two entries sharing one sphere behave like a single sphere."""
        from src.raycast.scene.intersection import add_entry, add_sphere, get_sphere_count

        idx = add_sphere((0.0, 0.0, -2.0), 0.5)
        add_entry(idx)
        add_entry(idx)
        assert get_sphere_count() == 1

        hit, t, _ = scene_query((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert hit == 1
        assert t == pytest.approx(1.5, abs=1e-5)

    def test_matches_nearest_individual_hit(self, scene_query):
        """Test the scene result equals the minimum-t hit over all entries."""
        from src.raycast.scene.intersection import add_entry, add_sphere, get_entry_count

        # Non-overlapping spheres spread in front of the origin
        rng = np.random.default_rng(5)
        for k in range(8):
            center = (float(k % 4) * 1.5 - 2.25, float(k // 4) * 1.5 - 0.75, -3.0 - k)
            add_entry(add_sphere(center, float(rng.uniform(0.3, 0.7))))

        hits = 0
        for _ in range(200):
            direction = (rng.uniform(-0.8, 0.8), rng.uniform(-0.4, 0.4), -1.0)
            scene_hit, scene_t, scene_normal = scene_query((0.0, 0.0, 0.0), direction)

            best_t = None
            best_normal = None
            for entry in range(get_entry_count()):
                hit, t, normal = scene_query((0.0, 0.0, 0.0), direction, entry=entry)
                if hit == 1 and (best_t is None or t < best_t):
                    best_t, best_normal = t, normal

            if best_t is None:
                assert scene_hit == 0
            else:
                hits += 1
                assert scene_hit == 1
                assert scene_t == pytest.approx(best_t, abs=1e-6)
                assert scene_normal == pytest.approx(best_normal, abs=1e-6)
        assert hits > 0
