"""Render configuration."""

from dataclasses import dataclass
from typing import Any

# Maximum supported image dimensions (one RNG stream per pixel is preallocated)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048


@dataclass
class RenderConfig:
    """Parameters of a single render.

    Attributes:
        image_width: Image width in pixels.
        image_height: Image height in pixels.
        samples_per_pixel: Number of paths averaged per pixel.
        max_depth: Maximum bounces per path.
        rng_seed: Seed for the per-pixel RNG streams. None gives a different
            image on every render.
    """

    image_width: int
    image_height: int
    samples_per_pixel: int = 100
    max_depth: int = 50
    rng_seed: int | None = None

    @classmethod
    def from_aspect_ratio(cls, image_width: int, aspect_ratio: float, **kwargs: Any) -> "RenderConfig":
        """Create a config whose height follows from the width and aspect ratio."""
        return cls(image_width=image_width, image_height=int(image_width / aspect_ratio), **kwargs)

    @property
    def aspect_ratio(self) -> float:
        """Width divided by height."""
        return self.image_width / self.image_height

    @property
    def pixel_count(self) -> int:
        """Total number of pixels."""
        return self.image_width * self.image_height

    def validate(self) -> None:
        """Check the configuration.

        Raises:
            ValueError: If any parameter is out of range.
        """
        if self.image_width <= 0 or self.image_height <= 0:
            raise ValueError(
                f"Image dimensions must be positive, got {self.image_width}x{self.image_height}"
            )
        if self.image_width > MAX_IMAGE_WIDTH or self.image_height > MAX_IMAGE_HEIGHT:
            raise ValueError(
                f"Image dimensions ({self.image_width}x{self.image_height}) exceed maximum supported "
                f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
            )
        if self.samples_per_pixel < 1:
            raise ValueError(f"samples_per_pixel must be at least 1, got {self.samples_per_pixel}")
        if self.max_depth < 1:
            raise ValueError(f"max_depth must be at least 1, got {self.max_depth}")
        if self.rng_seed is not None and self.rng_seed < 0:
            raise ValueError(f"rng_seed must be non-negative, got {self.rng_seed}")
