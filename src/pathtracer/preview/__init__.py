"""Preview module for render output.

Components:
    export: In-memory pixel sink, PNG export and image comparison
    progress: Progress observers (tqdm bar, tick counter)

Example:
    >>> from src.pathtracer.preview import ImageBuffer, TqdmProgress
    >>>
    >>> sink = ImageBuffer(400, 225)
    >>> with TqdmProgress(total=400 * 225) as progress:
    ...     renderer.render(scene, sink=sink, progress=progress)
    >>> sink.save_png("output.png")
"""

from src.pathtracer.preview.export import (
    ImageBuffer,
    compute_rmse,
    load_png,
    save_png_from_array,
)
from src.pathtracer.preview.progress import CountingProgress, TqdmProgress

__all__ = [
    # Pixel sink and export
    "ImageBuffer",
    "save_png_from_array",
    "load_png",
    "compute_rmse",
    # Progress
    "TqdmProgress",
    "CountingProgress",
]
