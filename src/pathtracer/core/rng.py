"""Per-stream random number generation for reproducible parallel sampling.

Taichi's built-in ``ti.random()`` keeps one generator per worker thread, so the
sequence a pixel sees depends on which thread happens to pick it up. To make a
seeded render byte-identical across runs, every pixel owns its own generator
state instead: a 32-bit xorshift word stored in a preallocated field and
indexed by a stream id (the renderer uses ``y * width + x``).

Seeding happens on the Python side with NumPy, so the state of stream ``k``
is a pure function of ``(seed, k)``.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.core.rng import seed_streams, random_f32
    >>> seed_streams(1234)
    >>> # Inside a Taichi kernel:
    >>> # xi = random_f32(stream)
"""

import numpy as np
import numpy.typing as npt
import taichi as ti

# One stream per pixel of the largest supported image (2048 x 2048)
MAX_STREAMS = 2048 * 2048

# 2^-24: maps the top 24 bits of a state word onto [0, 1)
_INV_2_24 = 1.0 / 16777216.0

_rng_states = ti.field(dtype=ti.u32, shape=MAX_STREAMS)


def seed_streams(seed: int | None = None) -> None:
    """Seed every RNG stream.

    Args:
        seed: Non-negative integer seed. ``None`` draws fresh OS entropy,
            giving a different image on every call.

    Raises:
        ValueError: If seed is negative.
    """
    if seed is not None and seed < 0:
        raise ValueError(f"RNG seed must be non-negative, got {seed}")

    rng = np.random.default_rng(seed)
    # Xorshift has a fixed point at zero, so states are drawn from [1, 2^32)
    states = rng.integers(1, 2**32, size=MAX_STREAMS, dtype=np.uint32)
    _rng_states.from_numpy(states)


def get_stream_states(count: int) -> npt.NDArray[np.uint32]:
    """Return a copy of the first ``count`` stream states (for inspection)."""
    return _rng_states.to_numpy()[:count]


@ti.func
def next_u32(stream: ti.i32) -> ti.u32:
    """Advance a stream by one xorshift32 step and return the new state."""
    x = _rng_states[stream]
    x ^= x << ti.cast(13, ti.u32)
    x ^= x >> ti.cast(17, ti.u32)
    x ^= x << ti.cast(5, ti.u32)
    _rng_states[stream] = x
    return x


@ti.func
def random_f32(stream: ti.i32) -> ti.f32:
    """Draw a uniform float in [0, 1) from the given stream."""
    bits = next_u32(stream) >> ti.cast(8, ti.u32)
    return ti.cast(bits, ti.f32) * _INV_2_24


@ti.func
def random_range(stream: ti.i32, lo: ti.f32, hi: ti.f32) -> ti.f32:
    """Draw a uniform float in [lo, hi) from the given stream."""
    return lo + (hi - lo) * random_f32(stream)
