"""Scene module for scene management and hit records.

Components:
    intersection: Sphere storage and closest-hit queries
    manager: Scene manager coordinating spheres and materials
    random_scene: The random sphere field with its camera preset

Scene data is organized for efficient GPU access:
    - Structure-of-Arrays layout for geometric data
    - Contiguous material ID arrays
"""

from .intersection import (
    MAX_SPHERES,
    SceneHitRecord,
    add_sphere,
    clear_scene,
    get_sphere_count,
    intersect_scene,
)
from .manager import (
    MAX_MATERIALS,
    Dielectric,
    Lambertian,
    MaterialInfo,
    MaterialType,
    Metal,
    SceneConfig,
    SceneManager,
    SphereInfo,
    get_material_type,
    get_material_type_index,
)
from .random_scene import create_random_scene, create_random_scene_camera

__all__ = [
    # Intersection module
    "SceneHitRecord",
    "add_sphere",
    "clear_scene",
    "get_sphere_count",
    "intersect_scene",
    "MAX_SPHERES",
    # Manager module
    "SceneManager",
    "MaterialType",
    "MaterialInfo",
    "SphereInfo",
    "SceneConfig",
    "Lambertian",
    "Metal",
    "Dielectric",
    "MAX_MATERIALS",
    "get_material_type",
    "get_material_type_index",
    # Random scene module
    "create_random_scene",
    "create_random_scene_camera",
]
