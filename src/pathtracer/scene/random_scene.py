"""The "final render" scene: a field of small random spheres.

This module provides a factory for the classic closing scene of the
"Ray Tracing in One Weekend" book, a standard stress test for sphere path
tracers.

The scene consists of:
- A huge grey Lambertian sphere acting as the ground plane
- A 22x22 grid of small (radius 0.2) spheres with jittered positions
  and randomly chosen materials: 80% diffuse, 15% metal, 5% glass
- Three large spheres side by side: glass, brown diffuse, and polished metal

All randomness comes from a NumPy generator, so a seed fixes the layout.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.gpu)
    >>> from src.pathtracer.scene.random_scene import create_random_scene
    >>> from src.pathtracer.camera.thin_lens import setup_camera
    >>>
    >>> scene, camera = create_random_scene(seed=42)
    >>> setup_camera(camera)
"""

import numpy as np

from src.pathtracer.camera.thin_lens import ThinLensCamera
from src.pathtracer.scene.manager import SceneManager

# =============================================================================
# Scene Constants
# =============================================================================

GROUND_CENTER = (0.0, -1000.0, 0.0)
GROUND_RADIUS = 1000.0
GROUND_ALBEDO = (0.5, 0.5, 0.5)

# Small spheres are placed on the grid a, b in [-GRID_EXTENT, GRID_EXTENT)
GRID_EXTENT = 11
SMALL_RADIUS = 0.2
JITTER = 0.9

# Small spheres closer than this to KEEP_CLEAR are skipped
KEEP_CLEAR = np.array([4.0, 0.2, 0.0])
KEEP_CLEAR_DISTANCE = 0.9

# Cumulative material probabilities for small spheres
DIFFUSE_PROBABILITY = 0.8
METAL_PROBABILITY = 0.95

GLASS_IOR = 1.5

BIG_RADIUS = 1.0
BIG_GLASS_CENTER = (0.0, 1.0, 0.0)
BIG_DIFFUSE_CENTER = (-4.0, 1.0, 0.0)
BIG_DIFFUSE_ALBEDO = (0.4, 0.2, 0.1)
BIG_METAL_CENTER = (4.0, 1.0, 0.0)
BIG_METAL_ALBEDO = (0.7, 0.6, 0.5)

# =============================================================================
# Camera Preset
# =============================================================================

ASPECT_RATIO = 16.0 / 9.0


def create_random_scene_camera(aspect_ratio: float = ASPECT_RATIO) -> ThinLensCamera:
    """Camera looking at the three big spheres from the front right."""
    return ThinLensCamera(
        lookfrom=(13.0, 2.0, 3.0),
        lookat=(0.0, 0.0, 0.0),
        vup=(0.0, 1.0, 0.0),
        vfov=20.0,
        aspect_ratio=aspect_ratio,
        aperture=0.1,
        focus_dist=10.0,
    )


# =============================================================================
# Scene Factory
# =============================================================================


def _add_small_spheres(scene: SceneManager, rng: np.random.Generator) -> None:
    for a in range(-GRID_EXTENT, GRID_EXTENT):
        for b in range(-GRID_EXTENT, GRID_EXTENT):
            choose_mat = rng.random()
            center = np.array([a + JITTER * rng.random(), SMALL_RADIUS, b + JITTER * rng.random()])

            if np.linalg.norm(center - KEEP_CLEAR) <= KEEP_CLEAR_DISTANCE:
                continue

            position = (float(center[0]), float(center[1]), float(center[2]))
            if choose_mat < DIFFUSE_PROBABILITY:
                albedo = rng.random(3)
                scene.add_lambertian_sphere(position, SMALL_RADIUS, tuple(albedo.tolist()))
            elif choose_mat < METAL_PROBABILITY:
                albedo = rng.uniform(0.5, 1.0, 3)
                fuzz = float(rng.uniform(0.0, 1.0))
                scene.add_metal_sphere(position, SMALL_RADIUS, tuple(albedo.tolist()), fuzz)
            else:
                scene.add_dielectric_sphere(position, SMALL_RADIUS, GLASS_IOR)


def create_random_scene(
    seed: int | None = None,
    aspect_ratio: float = ASPECT_RATIO,
) -> tuple[SceneManager, ThinLensCamera]:
    """Create the random sphere field with its standard camera.

    Args:
        seed: Seed for the layout generator. None gives a new layout on every
            call.
        aspect_ratio: Aspect ratio for the returned camera.

    Returns:
        A tuple of (SceneManager, ThinLensCamera). The ground sphere is
        always sphere 0 and the three big spheres are the last three.

    Example:
        >>> scene, camera = create_random_scene(seed=1)
        >>> scene.get_sphere_count() > 4
        True
    """
    rng = np.random.default_rng(seed)
    scene = SceneManager()

    scene.add_lambertian_sphere(GROUND_CENTER, GROUND_RADIUS, GROUND_ALBEDO)

    _add_small_spheres(scene, rng)

    scene.add_dielectric_sphere(BIG_GLASS_CENTER, BIG_RADIUS, GLASS_IOR)
    scene.add_lambertian_sphere(BIG_DIFFUSE_CENTER, BIG_RADIUS, BIG_DIFFUSE_ALBEDO)
    scene.add_metal_sphere(BIG_METAL_CENTER, BIG_RADIUS, BIG_METAL_ALBEDO, fuzz=0.0)

    return scene, create_random_scene_camera(aspect_ratio)
