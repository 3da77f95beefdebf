"""Path tracing integrator for Monte Carlo light transport.

This module implements the radiance estimate ``ray_color`` and the pixel
kernel. A path starts at the camera, bounces off surfaces according to their
material, and ends when it escapes to the sky, is absorbed, or runs out of
depth. The path carries a throughput that is multiplied by each bounce's
attenuation; an escaping path returns throughput * sky.

Key features:
    - Material dispatch (Lambertian, Metal, Dielectric)
    - Vertical white-to-blue sky gradient as the only light source
    - Per-pixel RNG streams so seeded renders are reproducible
    - Gamma-2 correction and 8-bit quantisation inside the kernel
    - Band-at-a-time rendering into a NumPy array

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.gpu)
    >>> from src.pathtracer.core.integrator import render_band
    >>> from src.pathtracer.core.rng import seed_streams
    >>> from src.pathtracer.scene.random_scene import create_random_scene
    >>> from src.pathtracer.camera.thin_lens import setup_camera
    >>>
    >>> scene, camera = create_random_scene(seed=7)
    >>> setup_camera(camera)
    >>> seed_streams(7)
    >>> band = render_band(0, 16, 400, 225, samples_per_pixel=10, max_depth=50)
"""

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from src.pathtracer.camera.thin_lens import get_ray
from src.pathtracer.core.ray import normalize
from src.pathtracer.core.rng import random_f32
from src.pathtracer.materials.dielectric import scatter_dielectric_by_id
from src.pathtracer.materials.lambertian import scatter_lambertian_by_id
from src.pathtracer.materials.metal import scatter_metal_by_id
from src.pathtracer.scene.intersection import intersect_scene
from src.pathtracer.scene.manager import (
    MaterialType,
    get_material_type,
    get_material_type_index,
)

# Type alias for 3D vectors
vec3 = tm.vec3
ivec3 = ti.types.vector(3, ti.i32)

# =============================================================================
# Rendering Constants
# =============================================================================

# t_min and t_max for ray intersection; t_min keeps bounces off their own surface
T_MIN = 1e-3
T_MAX = tm.inf

# Sky gradient endpoints
SKY_HORIZON = vec3(1.0, 1.0, 1.0)
SKY_ZENITH = vec3(0.5, 0.7, 1.0)

# Largest value kept before quantisation, so 256 * c never reaches 256
MAX_COMPONENT = 0.999


# =============================================================================
# Background
# =============================================================================


@ti.func
def sky_color(direction: vec3) -> vec3:
    """Blend from white at the bottom to light blue at the top.

    Args:
        direction: The ray direction (any non-zero length).

    Returns:
        (1 - t) * white + t * (0.5, 0.7, 1.0) with t = 0.5 * (y + 1) of the
        normalized direction.
    """
    t = 0.5 * (normalize(direction).y + 1.0)
    return (1.0 - t) * SKY_HORIZON + t * SKY_ZENITH


# =============================================================================
# Material Dispatch
# =============================================================================


@ti.func
def _scatter_material(
    material_id: ti.i32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
    stream: ti.i32,
):
    """Dispatch to the appropriate material scattering function.

    Args:
        material_id: The unified material ID.
        incident_direction: The incoming ray direction.
        normal: The surface normal (normalized, facing toward ray).
        front_face: 1 if hit front face, 0 if back face.
        stream: The RNG stream of the pixel being traced.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter). Unknown
        material IDs absorb the ray.
    """
    mat_type = get_material_type(material_id)
    type_index = get_material_type_index(material_id)

    scattered_direction = vec3(0.0, 0.0, 0.0)
    attenuation = vec3(0.0, 0.0, 0.0)
    did_scatter = 0

    if mat_type == int(MaterialType.LAMBERTIAN):
        scattered_direction, attenuation, did_scatter = scatter_lambertian_by_id(
            type_index, normal, stream
        )

    elif mat_type == int(MaterialType.METAL):
        scattered_direction, attenuation, did_scatter = scatter_metal_by_id(
            type_index, incident_direction, normal, stream
        )

    elif mat_type == int(MaterialType.DIELECTRIC):
        scattered_direction, attenuation, did_scatter = scatter_dielectric_by_id(
            type_index, incident_direction, normal, front_face, stream
        )

    return scattered_direction, attenuation, did_scatter


# =============================================================================
# Path Tracing Core
# =============================================================================


@ti.func
def ray_color(origin: vec3, direction: vec3, max_depth: ti.i32, stream: ti.i32) -> vec3:
    """Estimate the radiance arriving along a ray.

    Args:
        origin: The ray origin.
        direction: The ray direction (any non-zero length).
        max_depth: Maximum number of surface interactions. A path still
            bouncing after this many contributes black.
        stream: The RNG stream to draw from.

    Returns:
        The estimated radiance (RGB). Zero if the path is absorbed or the
        depth budget runs out.
    """
    color = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)

    # Active flag for path continuation (Taichi doesn't support break in ti.func loops)
    active = 1

    for _ in range(max_depth):
        if active == 1:
            hit_record = intersect_scene(origin, direction, T_MIN, T_MAX)

            if hit_record.hit == 0:
                color = throughput * sky_color(direction)
                active = 0
            else:
                scattered_direction, attenuation, did_scatter = _scatter_material(
                    hit_record.material_id,
                    direction,
                    hit_record.normal,
                    hit_record.front_face,
                    stream,
                )

                if did_scatter == 0:
                    active = 0
                else:
                    throughput *= attenuation
                    origin = hit_record.point
                    direction = scattered_direction

    return color


@ti.func
def _viewport_coord(index: ti.i32, extent: ti.i32, stream: ti.i32) -> ti.f32:
    # A single pixel spans no interval, so it looks through the viewport center
    coord = 0.5
    if extent > 1:
        coord = (ti.cast(index, ti.f32) + random_f32(stream)) / ti.cast(extent - 1, ti.f32)
    return coord


@ti.func
def _sanitize(color: vec3) -> vec3:
    # Clamp negative values (numerical errors)
    result = tm.max(color, vec3(0.0, 0.0, 0.0))

    for c in ti.static(range(3)):
        if tm.isnan(result[c]) or tm.isinf(result[c]):
            result[c] = 0.0
    return result


@ti.func
def render_pixel(
    x: ti.i32,
    y: ti.i32,
    width: ti.i32,
    height: ti.i32,
    samples_per_pixel: ti.i32,
    max_depth: ti.i32,
) -> vec3:
    """Average samples_per_pixel paths through pixel (x, y).

    Pixel (0, 0) is the bottom-left of the viewport. The pixel draws from
    RNG stream y * width + x.

    Returns:
        The mean radiance of the pixel before gamma correction.
    """
    stream = y * width + x
    accumulated = vec3(0.0, 0.0, 0.0)

    for _ in range(samples_per_pixel):
        s = _viewport_coord(x, width, stream)
        t = _viewport_coord(y, height, stream)
        ray = get_ray(s, t, stream)
        accumulated += _sanitize(ray_color(ray.origin, ray.direction, max_depth, stream))

    return accumulated / ti.cast(samples_per_pixel, ti.f32)


@ti.func
def quantize(color: vec3) -> ivec3:
    """Gamma-2 correct a linear color and map it to bytes in [0, 255]."""
    corrected = ti.sqrt(color)
    return ti.cast(256.0 * tm.clamp(corrected, 0.0, MAX_COMPONENT), ti.i32)


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_band_kernel(
    out: ti.types.ndarray(dtype=ti.i32, ndim=3),
    row_start: ti.i32,
    width: ti.i32,
    height: ti.i32,
    samples_per_pixel: ti.i32,
    max_depth: ti.i32,
):
    """Render image rows [row_start, row_start + out.shape[0]) into out.

    Image rows count from the top, so row r holds viewport line
    y = height - 1 - r.
    """
    for r, x in ti.ndrange(out.shape[0], width):
        y = height - 1 - (row_start + r)
        rgb = quantize(render_pixel(x, y, width, height, samples_per_pixel, max_depth))
        for c in ti.static(range(3)):
            out[r, x, c] = rgb[c]


@ti.kernel
def _trace_ray_kernel(origin: vec3, direction: vec3, max_depth: ti.i32, stream: ti.i32) -> vec3:
    return ray_color(origin, direction, max_depth, stream)


@ti.kernel
def _sky_color_kernel(direction: vec3) -> vec3:
    return sky_color(direction)


@ti.kernel
def _sample_pixel_kernel(
    x: ti.i32,
    y: ti.i32,
    width: ti.i32,
    height: ti.i32,
    samples_per_pixel: ti.i32,
    max_depth: ti.i32,
) -> ivec3:
    return quantize(render_pixel(x, y, width, height, samples_per_pixel, max_depth))


# =============================================================================
# Public Rendering API
# =============================================================================


def render_band(
    row_start: int,
    row_count: int,
    width: int,
    height: int,
    samples_per_pixel: int,
    max_depth: int,
) -> npt.NDArray[np.uint8]:
    """Render a horizontal band of image rows.

    The camera must be set up and the RNG streams seeded beforehand.

    Args:
        row_start: First image row (0 = top of the image).
        row_count: Number of rows to render.
        width: Image width in pixels.
        height: Image height in pixels.
        samples_per_pixel: Number of paths averaged per pixel.
        max_depth: Maximum bounces per path.

    Returns:
        NumPy uint8 array of shape (row_count, width, 3).
    """
    band = np.zeros((row_count, width, 3), dtype=np.int32)
    _render_band_kernel(band, row_start, width, height, samples_per_pixel, max_depth)
    return band.astype(np.uint8)


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    max_depth: int,
    stream: int = 0,
) -> tuple[float, float, float]:
    """Evaluate ray_color for a single ray from Python.

    Useful for testing; production rendering goes through render_band().

    Returns:
        Tuple of (R, G, B) radiance values.
    """
    color = _trace_ray_kernel(vec3(*origin), vec3(*direction), max_depth, stream)
    return (float(color[0]), float(color[1]), float(color[2]))


def get_sky_color(direction: tuple[float, float, float]) -> tuple[float, float, float]:
    """Evaluate the sky gradient for a direction from Python."""
    color = _sky_color_kernel(vec3(*direction))
    return (float(color[0]), float(color[1]), float(color[2]))


def sample_pixel(
    x: int,
    y: int,
    width: int,
    height: int,
    samples_per_pixel: int,
    max_depth: int,
) -> tuple[int, int, int]:
    """Render a single pixel to bytes.

    Args:
        x: Pixel column (0 = left).
        y: Viewport line (0 = bottom).
        width: Image width in pixels.
        height: Image height in pixels.
        samples_per_pixel: Number of paths averaged.
        max_depth: Maximum bounces per path.

    Returns:
        Tuple of (R, G, B) bytes.
    """
    rgb = _sample_pixel_kernel(x, y, width, height, samples_per_pixel, max_depth)
    return (int(rgb[0]), int(rgb[1]), int(rgb[2]))
