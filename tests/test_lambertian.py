"""Unit tests for the Lambertian material module.

Tests cover:
- Scattered directions lie on the normal's side
- Cosine-weighted distribution statistics
- Attenuation equals albedo, rays never absorbed
- Degenerate-direction fallback to the normal
- Material registry operations and validation
"""

import pytest
import taichi as ti


class TestScatterLambertian:
    """Tests for scatter_lambertian."""

    def test_attenuation_is_albedo_and_always_scatters(self):
        from src.pathtracer.materials.lambertian import scatter_lambertian

        result_atten = ti.Vector.field(3, dtype=ti.f32, shape=())
        min_scatter = ti.field(dtype=ti.i32, shape=())
        min_scatter[None] = 1

        @ti.kernel
        def test_kernel():
            albedo = ti.math.vec3(0.8, 0.3, 0.1)
            normal = ti.math.vec3(0.0, 1.0, 0.0)
            for i in range(500):
                _, attenuation, did_scatter = scatter_lambertian(albedo, normal, i)
                ti.atomic_min(min_scatter[None], did_scatter)
                if i == 0:
                    result_atten[None] = attenuation

        test_kernel()
        a = result_atten[None]
        assert abs(a[0] - 0.8) < 1e-6
        assert abs(a[1] - 0.3) < 1e-6
        assert abs(a[2] - 0.1) < 1e-6
        assert min_scatter[None] == 1

    def test_directions_in_upper_hemisphere(self):
        """Test normal + unit vector never points below the surface."""
        from src.pathtracer.materials.lambertian import scatter_lambertian

        min_dot = ti.field(dtype=ti.f32, shape=())
        min_dot[None] = 10.0

        @ti.kernel
        def test_kernel():
            albedo = ti.math.vec3(0.5, 0.5, 0.5)
            normal = ti.math.normalize(ti.math.vec3(0.3, 1.0, -0.2))
            for i in range(2000):
                direction, _, _ = scatter_lambertian(albedo, normal, i)
                ti.atomic_min(min_dot[None], ti.math.dot(direction, normal))

        test_kernel()
        assert min_dot[None] >= -1e-5

    def test_cosine_distribution(self):
        """Test E[cos(theta)] = 2/3 for a cosine-weighted hemisphere."""
        from src.pathtracer.materials.lambertian import scatter_lambertian

        n_samples = 20000
        total_cos = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            albedo = ti.math.vec3(0.5, 0.5, 0.5)
            normal = ti.math.vec3(0.0, 0.0, 1.0)
            for i in range(n_samples):
                direction, _, _ = scatter_lambertian(albedo, normal, i)
                total_cos[None] += ti.math.normalize(direction).z

        test_kernel()
        assert abs(total_cos[None] / n_samples - 2.0 / 3.0) < 0.02

    def test_direction_never_zero(self):
        """Test scattered directions always have usable length."""
        from src.pathtracer.materials.lambertian import scatter_lambertian

        min_len = ti.field(dtype=ti.f32, shape=())
        min_len[None] = 10.0

        @ti.kernel
        def test_kernel():
            albedo = ti.math.vec3(0.5, 0.5, 0.5)
            normal = ti.math.vec3(1.0, 0.0, 0.0)
            for i in range(5000):
                direction, _, _ = scatter_lambertian(albedo, normal, i)
                ti.atomic_min(min_len[None], ti.math.length(direction))

        test_kernel()
        assert min_len[None] > 1e-8


class TestLambertianRegistry:
    """Tests for the Lambertian material registry."""

    def test_add_and_count(self):
        from src.pathtracer.materials.lambertian import (
            add_lambertian_material,
            get_lambertian_material_count,
        )

        assert get_lambertian_material_count() == 0
        assert add_lambertian_material((0.1, 0.2, 0.3)) == 0
        assert add_lambertian_material((0.4, 0.5, 0.6)) == 1
        assert get_lambertian_material_count() == 2

    def test_clear(self):
        from src.pathtracer.materials.lambertian import (
            add_lambertian_material,
            clear_lambertian_materials,
            get_lambertian_material_count,
        )

        add_lambertian_material((0.5, 0.5, 0.5))
        clear_lambertian_materials()
        assert get_lambertian_material_count() == 0

    def test_albedo_lookup(self):
        from src.pathtracer.materials.lambertian import (
            add_lambertian_material,
            get_lambertian_albedo,
        )

        add_lambertian_material((0.1, 0.2, 0.3))
        idx = add_lambertian_material((0.7, 0.8, 0.9))

        result = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel(i: ti.i32):
            result[None] = get_lambertian_albedo(i)

        test_kernel(idx)
        assert [result[None][c] for c in range(3)] == pytest.approx([0.7, 0.8, 0.9])

    def test_scatter_by_id(self):
        from src.pathtracer.materials.lambertian import (
            add_lambertian_material,
            scatter_lambertian_by_id,
        )

        idx = add_lambertian_material((0.25, 0.5, 0.75))
        result = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel(i: ti.i32):
            _, attenuation, _ = scatter_lambertian_by_id(i, ti.math.vec3(0.0, 1.0, 0.0), 0)
            result[None] = attenuation

        test_kernel(idx)
        assert [result[None][c] for c in range(3)] == pytest.approx([0.25, 0.5, 0.75])

    @pytest.mark.parametrize("albedo", [(1.1, 0.5, 0.5), (0.5, -0.1, 0.5), (0.5, 0.5, 2.0)])
    def test_invalid_albedo_raises(self, albedo):
        from src.pathtracer.materials.lambertian import add_lambertian_material

        with pytest.raises(ValueError, match="outside"):
            add_lambertian_material(albedo)

    def test_capacity_overflow_raises(self):
        from src.pathtracer.materials.lambertian import (
            MAX_LAMBERTIAN_MATERIALS,
            add_lambertian_material,
            num_lambertian_materials,
        )

        num_lambertian_materials[None] = MAX_LAMBERTIAN_MATERIALS
        with pytest.raises(RuntimeError, match="Maximum number"):
            add_lambertian_material((0.5, 0.5, 0.5))


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
