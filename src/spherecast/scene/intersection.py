"""Scene-level sphere storage, nearest-hit and shadow queries.

Spheres and their surface options live in Taichi fields in insertion order.
Every query is a linear scan over all spheres; there is no acceleration
structure.

The nearest-hit query serves both visible-surface determination and shadow
testing. A shadow ray is cast from the light toward the shading point,
nudged by SHADOW_BIAS toward the sphere center so the point does not fail to
see its own sphere through floating-point coincidence. The light counts when
the first sphere along that ray is the sphere being shaded.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.spherecast.materials.surface import Opaque, SurfaceOptions
    >>> from src.spherecast.scene.intersection import add_sphere, clear_scene
    >>> clear_scene()
    >>> options = SurfaceOptions(0.0, 1.0, 1.0, 1.0, Opaque((255, 0, 0)))
    >>> add_sphere((3.0, 0.0, 0.0), 1.0, options)
    0
    >>> # Use nearest_hit / is_lit within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from src.spherecast.geometry.sphere import Sphere, hit_sphere, is_valid_radius
from src.spherecast.materials.surface import SurfaceOptions

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Maximum number of spheres supported in the scene
MAX_SPHERES = 1024

# Fraction of the point-to-center vector added to shadow ray targets.
# A tuning value, not a physical quantity.
SHADOW_BIAS = 0.001

# Sphere geometry: Structure of Arrays layout
sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())

# Surface options per sphere (SurfaceKind tag plus payload and coefficients)
sphere_surface_kinds = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
sphere_colors = ti.Vector.field(3, dtype=ti.i32, shape=MAX_SPHERES)
sphere_ratios = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_specular = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_diffuse = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_ambient = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_shininess = ti.field(dtype=ti.f32, shape=MAX_SPHERES)


def clear_scene() -> None:
    """Remove all spheres from the scene.

    Resets the sphere count to zero. The field data is overwritten when new
    spheres are added.
    """
    num_spheres[None] = 0


def add_sphere(
    center: tuple[float, float, float],
    radius: float,
    options: SurfaceOptions,
) -> int:
    """Append a sphere to the scene.

    Args:
        center: The center of the sphere.
        radius: The radius of the sphere (strictly positive).
        options: The surface options attached to the sphere.

    Returns:
        The index of the added sphere.

    Raises:
        ValueError: If the radius is not strictly positive.
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    if not is_valid_radius(radius):
        raise ValueError(f"Sphere radius must be strictly positive, got {radius}")

    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")

    color = options.color
    sphere_centers[idx] = [center[0], center[1], center[2]]
    sphere_radii[idx] = radius
    sphere_surface_kinds[idx] = int(options.kind)
    sphere_colors[idx] = [color[0], color[1], color[2]]
    sphere_ratios[idx] = options.ratio
    sphere_specular[idx] = options.specular
    sphere_diffuse[idx] = options.diffuse
    sphere_ambient[idx] = options.ambient
    sphere_shininess[idx] = options.shininess
    num_spheres[None] = idx + 1
    return idx


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


@ti.func
def get_sphere(index: ti.i32) -> Sphere:
    """Get the geometry of the sphere at an index."""
    return Sphere(center=sphere_centers[index], radius=sphere_radii[index])


@ti.func
def nearest_hit(ray_origin: vec3, ray_direction: vec3):
    """Find the nearest sphere along a ray.

    Scans every sphere and keeps the smallest intersection distance. On an
    exact tie the sphere added first wins.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction of the ray (need not be normalized).

    Returns:
        A tuple of (index, t) where index is the nearest sphere (-1 if no
        sphere is hit) and t the distance along the normalized direction.
    """
    nearest_index = -1
    nearest_t = 0.0

    for i in range(num_spheres[None]):
        rec = hit_sphere(ray_origin, ray_direction, get_sphere(i))
        if rec.hit == 1:
            if nearest_index < 0 or rec.t < nearest_t:
                nearest_index = i
                nearest_t = rec.t

    return nearest_index, nearest_t


@ti.func
def shadow_ray_direction(light_position: vec3, point: vec3, center: vec3) -> vec3:
    """Direction of the shadow ray cast from a light toward a shading point.

    The target is moved by SHADOW_BIAS of the way from the point toward the
    center of its sphere, just inside the surface.
    """
    return point - light_position + (center - point) * SHADOW_BIAS


@ti.func
def is_lit(sphere_index: ti.i32, point: vec3, light_position: vec3) -> ti.i32:
    """Test whether a light reaches a point on a sphere.

    The shadow is binary: the light is blocked when the nearest sphere along
    the shadow ray is a different sphere. A point exactly on the visibility
    boundary of a light can resolve to the wrong sphere; this imprecision is
    accepted.

    Args:
        sphere_index: The index of the sphere being shaded.
        point: The shading point on that sphere.
        light_position: The position of the light.

    Returns:
        1 if the light contributes at the point, 0 if it is occluded.
    """
    direction = shadow_ray_direction(light_position, point, sphere_centers[sphere_index])
    occluder, _ = nearest_hit(light_position, direction)

    lit = 1
    if occluder >= 0 and occluder != sphere_index:
        lit = 0
    return lit


# =============================================================================
# Host Queries
# =============================================================================


@ti.kernel
def _query_nearest_hit(ray_origin: vec3, ray_direction: vec3) -> tm.vec2:
    index, t = nearest_hit(ray_origin, ray_direction)
    return tm.vec2(ti.cast(index, ti.f32), t)


@ti.kernel
def _query_is_lit(sphere_index: ti.i32, point: vec3, light_position: vec3) -> ti.i32:
    return is_lit(sphere_index, point, light_position)


def query_nearest_hit(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
) -> tuple[int, float] | None:
    """Find the nearest sphere along a ray from Python.

    Args:
        origin: The ray origin.
        direction: The ray direction (must not be the zero vector).

    Returns:
        A tuple of (sphere_index, distance), or None if no sphere is hit.
    """
    result = _query_nearest_hit(vec3(*origin), vec3(*direction))
    index = int(result[0])
    if index < 0:
        return None
    return index, float(result[1])


def query_is_lit(
    sphere_index: int,
    point: tuple[float, float, float],
    light_position: tuple[float, float, float],
) -> bool:
    """Test from Python whether a light reaches a point on a sphere."""
    return bool(_query_is_lit(sphere_index, vec3(*point), vec3(*light_position)))
