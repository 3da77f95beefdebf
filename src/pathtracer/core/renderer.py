"""Render driver that turns a scene and camera into an image.

This module wraps the integrator kernels with the bookkeeping of a full
render:
- Configuration and camera validation up front
- RNG stream seeding, so a fixed seed gives a byte-identical image
- Band-at-a-time rendering (the kernel parallelises within a band)
- Delivery of every finished pixel to a sink and a progress observer

Sinks and observers are plain objects with ``put(x, y, r, g, b)`` and
``tick()`` methods; they are called from the host thread between bands, so
they need no locking.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.gpu)
    >>> from src.pathtracer.core.config import RenderConfig
    >>> from src.pathtracer.core.renderer import Renderer
    >>> from src.pathtracer.preview.export import ImageBuffer
    >>> from src.pathtracer.scene.random_scene import create_random_scene
    >>>
    >>> scene, camera = create_random_scene(seed=7)
    >>> config = RenderConfig(400, 225, samples_per_pixel=10, rng_seed=7)
    >>> renderer = Renderer(config, camera)
    >>> sink = ImageBuffer(400, 225)
    >>> image = renderer.render(scene, sink=sink)
    >>> sink.save_png("output.png")
"""

from collections.abc import Generator
from typing import Protocol

import numpy as np
import numpy.typing as npt

from src.pathtracer.camera.thin_lens import ThinLensCamera, setup_camera
from src.pathtracer.core.config import RenderConfig
from src.pathtracer.core.integrator import render_band
from src.pathtracer.core.rng import seed_streams
from src.pathtracer.scene.manager import SceneManager

# Rows rendered per kernel launch
DEFAULT_BAND_HEIGHT = 16


class PixelSink(Protocol):
    """Receives finished pixels. Row 0 is the top of the image."""

    def put(self, x: int, y: int, r: int, g: int, b: int) -> None: ...


class ProgressObserver(Protocol):
    """Notified once per finished pixel."""

    def tick(self) -> None: ...


class Renderer:
    """Renders scenes with a fixed configuration and camera.

    Attributes:
        config: The validated render configuration.
        camera: The validated camera.
    """

    def __init__(self, config: RenderConfig, camera: ThinLensCamera) -> None:
        """Initialize the renderer.

        Args:
            config: Image size, sampling and seeding parameters.
            camera: The camera to render through.

        Raises:
            ValueError: If the configuration or the camera is invalid.
        """
        config.validate()
        camera.validate()
        self.config = config
        self.camera = camera
        self._image: npt.NDArray[np.uint8] | None = None

    @property
    def width(self) -> int:
        """Get the image width."""
        return self.config.image_width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self.config.image_height

    @property
    def image(self) -> npt.NDArray[np.uint8] | None:
        """The image of the last completed render, or None."""
        return self._image

    def _prepare(self, world: SceneManager) -> None:
        world.activate()
        setup_camera(self.camera)
        seed_streams(self.config.rng_seed)

    def render_bands(
        self,
        world: SceneManager,
        band_height: int = DEFAULT_BAND_HEIGHT,
    ) -> Generator[tuple[int, npt.NDArray[np.uint8]], None, None]:
        """Render band by band, yielding each band as it finishes.

        Args:
            world: The scene to render.
            band_height: Rows per band.

        Yields:
            Tuple of (first_image_row, band) where band has shape
            (rows, width, 3) and dtype uint8.

        Raises:
            ValueError: If band_height is less than 1.
        """
        if band_height < 1:
            raise ValueError(f"band_height must be at least 1, got {band_height}")

        self._prepare(world)

        cfg = self.config
        for row_start in range(0, cfg.image_height, band_height):
            row_count = min(band_height, cfg.image_height - row_start)
            band = render_band(
                row_start,
                row_count,
                cfg.image_width,
                cfg.image_height,
                cfg.samples_per_pixel,
                cfg.max_depth,
            )
            yield row_start, band

    def render(
        self,
        world: SceneManager,
        sink: PixelSink | None = None,
        progress: ProgressObserver | None = None,
        band_height: int = DEFAULT_BAND_HEIGHT,
    ) -> npt.NDArray[np.uint8]:
        """Render the full image.

        Every pixel is pushed to ``sink.put`` (if given) and followed by one
        ``progress.tick()`` (if given), top row first. If the sink raises,
        the rest of the band is still ticked, the render stops, and the
        sink's exception is re-raised.

        Args:
            world: The scene to render.
            sink: Optional pixel sink.
            progress: Optional progress observer.
            band_height: Rows per kernel launch.

        Returns:
            NumPy array of shape (height, width, 3) with dtype uint8.
        """
        image = np.zeros((self.height, self.width, 3), dtype=np.uint8)
        sink_error: Exception | None = None

        for row_start, band in self.render_bands(world, band_height):
            image[row_start : row_start + band.shape[0]] = band

            for r in range(band.shape[0]):
                for x in range(self.width):
                    if sink is not None and sink_error is None:
                        pixel = band[r, x]
                        try:
                            sink.put(x, row_start + r, int(pixel[0]), int(pixel[1]), int(pixel[2]))
                        except Exception as exc:
                            sink_error = exc
                    if progress is not None:
                        progress.tick()

            if sink_error is not None:
                raise sink_error

        self._image = image
        return image

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        cfg = self.config
        return (
            f"Renderer(width={cfg.image_width}, height={cfg.image_height}, "
            f"samples={cfg.samples_per_pixel}, max_depth={cfg.max_depth})"
        )


def render_image(
    config: RenderConfig,
    camera: ThinLensCamera,
    world: SceneManager,
    sink: PixelSink | None = None,
    progress: ProgressObserver | None = None,
) -> npt.NDArray[np.uint8]:
    """Render a scene in one call.

    Returns:
        NumPy array of shape (height, width, 3) with dtype uint8.
    """
    return Renderer(config, camera).render(world, sink=sink, progress=progress)
