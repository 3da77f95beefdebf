"""Image export utilities for rendered images.

This module provides the default pixel sink, an in-memory 8-bit RGB buffer,
and functions for saving images to files and comparing them.

Supported formats:
    - PNG (8-bit sRGB via Pillow)

Example:
    >>> from src.pathtracer.preview.export import ImageBuffer
    >>> from src.pathtracer.core.renderer import Renderer
    >>>
    >>> sink = ImageBuffer(400, 225)
    >>> Renderer(config, camera).render(scene, sink=sink)
    >>> sink.save_png("output.png")
"""

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage


class ImageBuffer:
    """Row-major RGB byte buffer that collects pixels from a render.

    Row 0 is the top of the image. Pixels that are never written stay black.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
    """

    def __init__(self, width: int, height: int) -> None:
        """Initialize an all-black buffer.

        Raises:
            ValueError: If either dimension is not positive.
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
        self.width = width
        self.height = height
        self._pixels = np.zeros((height, width, 3), dtype=np.uint8)

    def put(self, x: int, y: int, r: int, g: int, b: int) -> None:
        """Store one pixel.

        Raises:
            IndexError: If (x, y) lies outside the image.
            ValueError: If a component is outside [0, 255].
        """
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"Pixel ({x}, {y}) outside {self.width}x{self.height} image")
        for component in (r, g, b):
            if not 0 <= component <= 255:
                raise ValueError(f"Color component {component} is outside [0, 255]")
        self._pixels[y, x] = (r, g, b)

    def get(self, x: int, y: int) -> tuple[int, int, int]:
        """Read back one pixel."""
        r, g, b = self._pixels[y, x]
        return (int(r), int(g), int(b))

    def to_numpy(self) -> npt.NDArray[np.uint8]:
        """Return a copy of the buffer with shape (height, width, 3)."""
        return self._pixels.copy()

    def save_png(self, filepath: str) -> None:
        """Save the buffer as an 8-bit RGB PNG."""
        save_png_from_array(self._pixels, filepath)


def save_png_from_array(image: npt.NDArray[np.uint8], filepath: str) -> None:
    """Save a NumPy array as a PNG file.

    Args:
        image: 8-bit image array of shape (H, W, 3), top row first.
        filepath: Output file path (should end in .png).

    Raises:
        ValueError: If the array is not an (H, W, 3) uint8 image.
    """
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an (H, W, 3) image, got shape {image.shape}")
    if image.dtype != np.uint8:
        raise ValueError(f"Expected a uint8 image, got {image.dtype}")

    pil_image = PILImage.fromarray(image)
    pil_image.save(filepath)


def load_png(filepath: str) -> npt.NDArray[np.uint8]:
    """Load a PNG as an (H, W, 3) uint8 array."""
    with PILImage.open(filepath) as pil_image:
        return np.asarray(pil_image.convert("RGB"), dtype=np.uint8)


def compute_rmse(
    image_a: npt.NDArray[np.generic],
    image_b: npt.NDArray[np.generic],
) -> float:
    """Compute root mean squared error between two images.

    Args:
        image_a: First image array.
        image_b: Second image array (must have same shape as image_a).

    Returns:
        RMSE value (lower is more similar).

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(
            f"Image shapes must match: {image_a.shape} vs {image_b.shape}"
        )

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
