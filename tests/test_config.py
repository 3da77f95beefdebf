"""Tests for RenderConfig.

Imports happen inside the tests: importing src.pathtracer.core declares Taichi
fields, which must wait for the session fixture to initialize Taichi.
"""

import pytest

# Mirrors MAX_IMAGE_WIDTH; parametrize arguments are built at collection time
MAX_WIDTH = 2048


class TestRenderConfig:
    def test_defaults(self):
        from src.pathtracer.core.config import RenderConfig

        config = RenderConfig(400, 225)

        assert config.samples_per_pixel == 100
        assert config.max_depth == 50
        assert config.rng_seed is None
        config.validate()

    def test_from_aspect_ratio_truncates_height(self):
        from src.pathtracer.core.config import RenderConfig

        config = RenderConfig.from_aspect_ratio(1920, 16.0 / 9.0, samples_per_pixel=500)

        assert config.image_height == 1080
        assert config.samples_per_pixel == 500

        assert RenderConfig.from_aspect_ratio(401, 16.0 / 9.0).image_height == 225

    def test_derived_properties(self):
        from src.pathtracer.core.config import RenderConfig

        config = RenderConfig(40, 20)

        assert config.aspect_ratio == pytest.approx(2.0)
        assert config.pixel_count == 800

    def test_max_dimensions_are_valid(self):
        from src.pathtracer.core.config import MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH, RenderConfig

        assert MAX_IMAGE_WIDTH == MAX_WIDTH
        RenderConfig(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT).validate()

    @pytest.mark.parametrize(
        "kwargs, message",
        [
            ({"image_width": 0, "image_height": 10}, "positive"),
            ({"image_width": 10, "image_height": -1}, "positive"),
            ({"image_width": MAX_WIDTH + 1, "image_height": 10}, "exceed"),
            ({"image_width": 10, "image_height": 10, "samples_per_pixel": 0}, "samples_per_pixel"),
            ({"image_width": 10, "image_height": 10, "max_depth": 0}, "max_depth"),
            ({"image_width": 10, "image_height": 10, "rng_seed": -3}, "rng_seed"),
        ],
    )
    def test_invalid_values_raise(self, kwargs, message):
        from src.pathtracer.core.config import RenderConfig

        with pytest.raises(ValueError, match=message):
            RenderConfig(**kwargs).validate()
