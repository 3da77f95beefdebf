"""Tests for the random sphere field scene."""

import math

import pytest


class TestRandomSceneLayout:
    """Tests for the generated sphere layout."""

    def test_sphere_count_bounds(self):
        from src.pathtracer.scene.random_scene import create_random_scene

        scene, _ = create_random_scene(seed=0)

        # ground + at most 22 * 22 small spheres + 3 big spheres
        assert 4 < scene.get_sphere_count() <= 1 + 22 * 22 + 3
        assert scene.get_material_count() == scene.get_sphere_count()

    def test_ground_is_first(self):
        from src.pathtracer.scene.manager import MaterialType
        from src.pathtracer.scene.random_scene import create_random_scene

        scene, _ = create_random_scene(seed=1)
        ground = scene.spheres[0]

        assert ground.center == (0.0, -1000.0, 0.0)
        assert ground.radius == 1000.0
        assert scene.get_material_type_python(ground.material_id) == MaterialType.LAMBERTIAN
        assert scene.get_material_info(ground.material_id).params["albedo"] == (0.5, 0.5, 0.5)

    def test_big_spheres_are_last(self):
        from src.pathtracer.scene.manager import MaterialType
        from src.pathtracer.scene.random_scene import create_random_scene

        scene, _ = create_random_scene(seed=1)
        glass, diffuse, metal = scene.spheres[-3:]

        assert glass.center == (0.0, 1.0, 0.0)
        assert diffuse.center == (-4.0, 1.0, 0.0)
        assert metal.center == (4.0, 1.0, 0.0)
        assert all(s.radius == 1.0 for s in (glass, diffuse, metal))

        assert scene.get_material_type_python(glass.material_id) == MaterialType.DIELECTRIC
        assert scene.get_material_type_python(diffuse.material_id) == MaterialType.LAMBERTIAN
        assert scene.get_material_type_python(metal.material_id) == MaterialType.METAL
        assert scene.get_material_info(metal.material_id).params == {
            "albedo": (0.7, 0.6, 0.5),
            "fuzz": 0.0,
        }

    def test_small_spheres_on_grid_and_clear_of_metal_ball(self):
        from src.pathtracer.scene.random_scene import create_random_scene

        scene, _ = create_random_scene(seed=2)

        for sphere in scene.spheres[1:-3]:
            x, y, z = sphere.center
            assert sphere.radius == 0.2
            assert y == pytest.approx(0.2)
            assert -11.0 <= x < 11.0
            assert -11.0 <= z < 11.0
            assert math.dist((x, y, z), (4.0, 0.2, 0.0)) > 0.9

    def test_small_sphere_materials(self):
        """Test material mix and parameter ranges of the small spheres."""
        from src.pathtracer.scene.manager import MaterialType
        from src.pathtracer.scene.random_scene import create_random_scene

        scene, _ = create_random_scene(seed=3)
        small = scene.spheres[1:-3]
        infos = [scene.get_material_info(s.material_id) for s in small]

        diffuse = [i for i in infos if i.material_type == MaterialType.LAMBERTIAN]
        metal = [i for i in infos if i.material_type == MaterialType.METAL]
        glass = [i for i in infos if i.material_type == MaterialType.DIELECTRIC]

        assert 0.7 < len(diffuse) / len(infos) < 0.9
        assert len(metal) > 0
        assert len(glass) > 0

        for info in diffuse:
            assert all(0.0 <= c < 1.0 for c in info.params["albedo"])
        for info in metal:
            assert all(0.5 <= c < 1.0 for c in info.params["albedo"])
            assert 0.0 <= info.params["fuzz"] < 1.0
        for info in glass:
            assert info.params["ior"] == 1.5


class TestRandomSceneSeeding:
    """Tests for reproducibility."""

    def test_same_seed_same_layout(self):
        from src.pathtracer.scene.random_scene import create_random_scene

        first, _ = create_random_scene(seed=42)
        first_data = first.to_dict()
        second, _ = create_random_scene(seed=42)

        assert second.to_dict() == first_data

    def test_different_seed_different_layout(self):
        from src.pathtracer.scene.random_scene import create_random_scene

        first, _ = create_random_scene(seed=1)
        first_data = first.to_dict()
        second, _ = create_random_scene(seed=2)

        assert second.to_dict() != first_data


class TestRandomSceneCamera:
    def test_camera_preset(self):
        from src.pathtracer.scene.random_scene import create_random_scene

        _, camera = create_random_scene(seed=0)

        assert camera.lookfrom == (13.0, 2.0, 3.0)
        assert camera.lookat == (0.0, 0.0, 0.0)
        assert camera.vup == (0.0, 1.0, 0.0)
        assert camera.vfov == 20.0
        assert camera.aperture == 0.1
        assert camera.focus_dist == 10.0
        assert camera.aspect_ratio == pytest.approx(16.0 / 9.0)
        camera.validate()

    def test_custom_aspect_ratio(self):
        from src.pathtracer.scene.random_scene import create_random_scene_camera

        assert create_random_scene_camera(1.5).aspect_ratio == 1.5


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
