"""Scene module for scene storage and ray-scene queries.

Components:
    lights: Point lights and their Taichi field storage
    intersection: Sphere storage, nearest-hit and shadow queries
    manager: Host-side scene owner with JSON serialization
    showcase: The five-sphere, two-light showcase scene

Scene data is organized for kernel access:
    - Structure-of-Arrays layout for sphere geometry and surfaces
    - Insertion order preserved for deterministic tie-breaking
    - Linear scans only, no acceleration structure
"""

from .intersection import (
    MAX_SPHERES,
    SHADOW_BIAS,
    add_sphere,
    clear_scene,
    get_sphere_count,
    is_lit,
    nearest_hit,
    query_is_lit,
    query_nearest_hit,
    shadow_ray_direction,
)
from .lights import (
    MAX_LIGHTS,
    Light,
    LightOptions,
    add_light,
    clear_lights,
    get_light_count,
)
from .manager import SceneConfig, SceneManager, SphereInfo
from .showcase import SHOWCASE_HEIGHT, SHOWCASE_WIDTH, create_showcase_scene

__all__ = [
    # Intersection module
    "add_sphere",
    "clear_scene",
    "get_sphere_count",
    "nearest_hit",
    "is_lit",
    "shadow_ray_direction",
    "query_nearest_hit",
    "query_is_lit",
    "MAX_SPHERES",
    "SHADOW_BIAS",
    # Lights module
    "Light",
    "LightOptions",
    "add_light",
    "clear_lights",
    "get_light_count",
    "MAX_LIGHTS",
    # Manager module
    "SceneManager",
    "SceneConfig",
    "SphereInfo",
    # Showcase module
    "create_showcase_scene",
    "SHOWCASE_WIDTH",
    "SHOWCASE_HEIGHT",
]
