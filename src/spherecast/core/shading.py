"""Local illumination of a point on a sphere.

Every light contributes three terms to a scalar brightness:

    ambient   = light.ambient * surface.ambient            (always)
    diffuse   = light.diffuse * facing * surface.diffuse   (opaque, lit, facing > 0)
    specular  = light.specular * spec^shininess * surface.specular
                                                           (lit, spec > 0)

where, with p the shading point and c the sphere center,

    facing = normalize(p - light) . normalize(c - p)
    v_refl = 2 * facing * normalize(c - p) - normalize(p - light)
    spec   = normalize(v_refl) . normalize(direction)

Ambient light is never shadow tested. The specular highlight applies to every
surface variant and does not look at facing; diffuse only applies to opaque
surfaces.

Diffuse and specular terms are non-negative for non-negative coefficients.
A negative term is a logic error: it trips an assert in debug builds
(ti.init(debug=True)) and is otherwise clamped to zero and counted, so the
renderer can report it.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.spherecast.core.shading import local_brightness
    >>> # Inside a Taichi kernel:
    >>> # brightness = local_brightness(sphere_index, hit_point, ray_direction)
"""

import taichi as ti
import taichi.math as tm

from src.spherecast.materials.surface import SurfaceKind
from src.spherecast.scene.intersection import (
    is_lit,
    sphere_ambient,
    sphere_centers,
    sphere_diffuse,
    sphere_shininess,
    sphere_specular,
    sphere_surface_kinds,
)
from src.spherecast.scene.lights import (
    light_ambient,
    light_diffuse,
    light_positions,
    light_specular,
    num_lights,
)

# Type alias for 3D vectors
vec3 = tm.vec3

# Number of negative diffuse/specular terms clamped since the last reset
_negative_terms = ti.field(dtype=ti.i32, shape=())


def reset_shading_diagnostics() -> None:
    """Reset the negative-term counter."""
    _negative_terms[None] = 0


def get_negative_term_count() -> int:
    """Get the number of negative terms clamped since the last reset."""
    return int(_negative_terms[None])


@ti.func
def _non_negative(term: ti.f32) -> ti.f32:
    """Clamp a lighting term to zero, recording the violation."""
    assert term >= 0.0, "negative illumination term"
    result = term
    if term < 0.0:
        ti.atomic_add(_negative_terms[None], 1)
        result = 0.0
    return result


@ti.func
def local_brightness(sphere_index: ti.i32, point: vec3, direction: vec3) -> ti.f32:
    """Compute the brightness of a point on a sphere, summed over all lights.

    Args:
        sphere_index: The index of the sphere that was hit.
        point: The hit point on the sphere surface.
        direction: The direction of the ray that hit the point.

    Returns:
        The total brightness. 255 reproduces an opaque color unchanged.
    """
    center = sphere_centers[sphere_index]
    kind = sphere_surface_kinds[sphere_index]
    shininess = sphere_shininess[sphere_index]
    to_center = tm.normalize(center - point)
    view = tm.normalize(direction)

    brightness = 0.0
    for li in range(num_lights[None]):
        light_pos = light_positions[li]
        brightness += light_ambient[li] * sphere_ambient[sphere_index]

        if is_lit(sphere_index, point, light_pos) == 1:
            from_light = tm.normalize(point - light_pos)
            facing = tm.dot(from_light, to_center)

            if kind == int(SurfaceKind.OPAQUE) and facing > 0.0:
                diffuse = light_diffuse[li] * facing * sphere_diffuse[sphere_index]
                brightness += _non_negative(diffuse)

            v_refl = to_center * 2.0 * facing - from_light
            spec = tm.dot(tm.normalize(v_refl), view)
            if spec > 0.0:
                specular = light_specular[li] * ti.pow(spec, shininess) * sphere_specular[sphere_index]
                brightness += _non_negative(specular)

    return brightness


@ti.kernel
def _query_local_brightness(sphere_index: ti.i32, point: vec3, direction: vec3) -> ti.f32:
    return local_brightness(sphere_index, point, direction)


def query_local_brightness(
    sphere_index: int,
    point: tuple[float, float, float],
    direction: tuple[float, float, float],
) -> float:
    """Compute the brightness of a point on a sphere from Python.

    Args:
        sphere_index: The index of the sphere in the scene.
        point: A point on that sphere.
        direction: The viewing ray direction.

    Returns:
        The brightness summed over all lights.
    """
    return float(_query_local_brightness(sphere_index, vec3(*point), vec3(*direction)))
