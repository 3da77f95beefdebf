"""Unit tests for the Dielectric material module.

Tests cover:
- Refraction direction (Snell's law) entering and leaving the material
- Total internal reflection
- Schlick reflectance and its use as a reflection probability
- Attenuation is always white
- Material registry operations and IOR validation
"""

import math

import pytest
import taichi as ti


def _scatter(ior, incident, normal, front_face, stream=0):
    from src.pathtracer.materials.dielectric import scatter_dielectric

    result_dir = ti.Vector.field(3, dtype=ti.f32, shape=())
    result_atten = ti.Vector.field(3, dtype=ti.f32, shape=())
    result_scatter = ti.field(dtype=ti.i32, shape=())

    @ti.kernel
    def test_kernel(eta: ti.f32, d: ti.math.vec3, n: ti.math.vec3, ff: ti.i32, s: ti.i32):
        direction, attenuation, did_scatter = scatter_dielectric(eta, d, n, ff, s)
        result_dir[None] = direction
        result_atten[None] = attenuation
        result_scatter[None] = did_scatter

    test_kernel(ior, ti.math.vec3(*incident), ti.math.vec3(*normal), front_face, stream)
    return (
        [result_dir[None][c] for c in range(3)],
        [result_atten[None][c] for c in range(3)],
        result_scatter[None],
    )


class TestRefraction:
    """Tests for the refracted branch."""

    def test_normal_incidence_passes_straight(self):
        """Test a head-on ray continues undeflected (reflectance is only 4%)."""
        from src.pathtracer.core.rng import seed_streams

        straight = 0
        for seed in range(20):
            seed_streams(seed)
            direction, attenuation, did_scatter = _scatter(
                1.5, (0.0, -1.0, 0.0), (0.0, 1.0, 0.0), 1
            )
            assert did_scatter == 1
            assert attenuation == pytest.approx([1.0, 1.0, 1.0])
            if direction == pytest.approx([0.0, -1.0, 0.0], abs=1e-5):
                straight += 1
            else:
                assert direction == pytest.approx([0.0, 1.0, 0.0], abs=1e-5)
        assert straight >= 15

    def test_unit_ior_never_bends(self):
        """Test ior 1 refracts without deflection whenever it refracts."""
        from src.pathtracer.materials.dielectric import scatter_dielectric

        max_dev = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            incident = ti.math.normalize(ti.math.vec3(0.3, -1.0, 0.2))
            normal = ti.math.vec3(0.0, 1.0, 0.0)
            for i in range(1000):
                direction, _, _ = scatter_dielectric(1.0, incident, normal, 1, i)
                # Reflections flip y; only check refracted samples
                if direction.y < 0.0:
                    ti.atomic_max(max_dev[None], ti.math.length(direction - incident))

        test_kernel()
        assert max_dev[None] < 1e-5

    def test_oblique_entry_obeys_snell(self):
        """Test refracted samples satisfy sin(theta_t) = sin(theta_i) / ior."""
        from src.pathtracer.materials.dielectric import scatter_dielectric

        sin_t = ti.field(dtype=ti.f32, shape=())
        refracted = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            incident = ti.math.normalize(ti.math.vec3(1.0, -1.0, 0.0))
            normal = ti.math.vec3(0.0, 1.0, 0.0)
            for i in range(200):
                direction, _, _ = scatter_dielectric(1.5, incident, normal, 1, i)
                if direction.y < 0.0:
                    refracted[None] += 1
                    sin_t[None] = direction.x / ti.math.length(direction)

        test_kernel()
        assert refracted[None] > 150
        assert sin_t[None] == pytest.approx(math.sin(math.pi / 4) / 1.5, abs=1e-5)


class TestTotalInternalReflection:
    """Tests for total internal reflection inside the material."""

    def test_tangent_ray_inside_reflects(self):
        """Test sin(theta) = 1 from inside always reflects exactly."""
        for stream in range(8):
            direction, _, did_scatter = _scatter(1.5, (1.0, 0.0, 0.0), (0.0, 1.0, 0.0), 0, stream)
            assert did_scatter == 1
            # reflect((1, 0, 0), (0, 1, 0)) == (1, 0, 0)
            assert direction == pytest.approx([1.0, 0.0, 0.0], abs=1e-6)

    def test_steep_ray_inside_reflects(self):
        """Test a ray beyond the critical angle mirrors about the normal."""
        incident = (1.0, -0.1, 0.0)
        length = math.sqrt(1.01)
        for stream in range(8):
            direction, _, _ = _scatter(1.5, incident, (0.0, 1.0, 0.0), 0, stream)
            assert direction == pytest.approx([1.0 / length, 0.1 / length, 0.0], abs=1e-5)

    def test_will_reflect(self):
        from src.pathtracer.materials.dielectric import will_reflect

        inside = ti.field(dtype=ti.i32, shape=())
        outside = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            incident = ti.math.vec3(1.0, -0.1, 0.0)
            normal = ti.math.vec3(0.0, 1.0, 0.0)
            inside[None] = will_reflect(1.5, incident, normal, 0)
            outside[None] = will_reflect(1.5, incident, normal, 1)

        test_kernel()
        assert inside[None] == 1
        assert outside[None] == 0


class TestFresnel:
    """Tests for Schlick reflectance."""

    def test_fresnel_reflectance_normal_incidence(self):
        from src.pathtracer.materials.dielectric import fresnel_reflectance

        result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = fresnel_reflectance(
                1.5, ti.math.vec3(0.0, -1.0, 0.0), ti.math.vec3(0.0, 1.0, 0.0), 1
            )

        test_kernel()
        # ((1 - 1/1.5) / (1 + 1/1.5))^2 = 0.04
        assert result[None] == pytest.approx(0.04, abs=1e-5)

    def test_reflection_frequency_matches_schlick(self):
        """Test the fraction of reflected samples tracks the Schlick value."""
        from src.pathtracer.materials.dielectric import scatter_dielectric

        n_samples = 20000
        reflected = ti.field(dtype=ti.i32, shape=())

        # cos(theta) = 0.2 entering glass
        cos_i = 0.2
        sin_i = math.sqrt(1.0 - cos_i * cos_i)

        @ti.kernel
        def test_kernel():
            incident = ti.math.vec3(sin_i, -cos_i, 0.0)
            normal = ti.math.vec3(0.0, 1.0, 0.0)
            for i in range(n_samples):
                direction, _, _ = scatter_dielectric(1.5, incident, normal, 1, i)
                if direction.y > 0.0:
                    reflected[None] += 1

        test_kernel()
        eta = 1.0 / 1.5
        r0 = ((1.0 - eta) / (1.0 + eta)) ** 2
        expected = r0 + (1.0 - r0) * (1.0 - cos_i) ** 5
        assert reflected[None] / n_samples == pytest.approx(expected, abs=0.02)


class TestDielectricRegistry:
    """Tests for the dielectric material registry."""

    def test_add_and_lookup(self):
        from src.pathtracer.materials.dielectric import (
            add_dielectric_material,
            get_dielectric_ior,
            get_dielectric_material_count,
        )

        add_dielectric_material()
        idx = add_dielectric_material(2.4)
        assert idx == 1
        assert get_dielectric_material_count() == 2

        result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel(i: ti.i32):
            result[None] = get_dielectric_ior(i)

        test_kernel(idx)
        assert result[None] == pytest.approx(2.4)

    def test_default_ior_is_glass(self):
        from src.pathtracer.materials.dielectric import add_dielectric_material, dielectric_iors

        idx = add_dielectric_material()
        assert dielectric_iors[idx] == pytest.approx(1.5)

    def test_ior_below_one_is_accepted(self):
        from src.pathtracer.materials.dielectric import add_dielectric_material

        assert add_dielectric_material(0.75) == 0

    @pytest.mark.parametrize("ior", [0.0, -1.5])
    def test_non_positive_ior_raises(self, ior):
        from src.pathtracer.materials.dielectric import add_dielectric_material

        with pytest.raises(ValueError, match="positive"):
            add_dielectric_material(ior)

    def test_scatter_by_id_attenuation_is_white(self):
        from src.pathtracer.materials.dielectric import (
            add_dielectric_material,
            scatter_dielectric_by_id,
        )

        idx = add_dielectric_material(1.5)
        attenuation = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel(i: ti.i32):
            _, a, _ = scatter_dielectric_by_id(
                i, ti.math.vec3(0.0, -1.0, 0.0), ti.math.vec3(0.0, 1.0, 0.0), 1, 0
            )
            attenuation[None] = a

        test_kernel(idx)
        assert [attenuation[None][c] for c in range(3)] == pytest.approx([1.0, 1.0, 1.0])

    def test_clear(self):
        from src.pathtracer.materials.dielectric import (
            add_dielectric_material,
            clear_dielectric_materials,
            get_dielectric_material_count,
        )

        add_dielectric_material(1.5)
        clear_dielectric_materials()
        assert get_dielectric_material_count() == 0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
