"""Progress observers for long renders.

An observer is any object with a ``tick()`` method; the renderer calls it
once per finished pixel.
"""

from types import TracebackType

from tqdm import tqdm


class TqdmProgress:
    """Console progress bar over the pixels of a render.

    Example:
        >>> with TqdmProgress(total=config.pixel_count) as progress:
        ...     renderer.render(scene, progress=progress)
    """

    def __init__(self, total: int, description: str = "Rendering", disable: bool = False) -> None:
        self._bar = tqdm(total=total, desc=description, unit="px", disable=disable)
        self._count = 0

    @property
    def count(self) -> int:
        """Number of ticks so far."""
        return self._count

    def tick(self) -> None:
        # A disabled bar does not advance, so count separately
        self._count += 1
        self._bar.update(1)

    def close(self) -> None:
        self._bar.close()

    def __enter__(self) -> "TqdmProgress":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()


class CountingProgress:
    """Observer that only counts ticks."""

    def __init__(self) -> None:
        self.count = 0

    def tick(self) -> None:
        self.count += 1
