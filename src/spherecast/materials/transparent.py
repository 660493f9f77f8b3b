"""Transparent sphere refraction.

A transparent sphere is modeled as a thin lens: a ray entering at a point on
the sphere leaves it again as a single continuation ray, rather than being
refracted twice through the near and far surfaces.

Given the entry point, the inward normal n and the normalized incoming
direction d:

    cos_i = n . d
    sin_i = sqrt(1 - cos_i^2)        (incidence assumed in [0, 90) degrees)
    sin_r = sin_i * ratio

If sin_r >= 1 the ray is totally internally reflected: the continuation
starts at the entry point and follows the mirror reflection of d about n.

Otherwise tan(2 r) is computed from sin_r and cos_r with the double-angle
identity. Its sign picks the side of the outgoing direction and of the exit
point, and its magnitude weights the tangential components:

    out_dir = neg_dir * sign + normalize(n - neg_dir * cos_i) * |tan2r|
    exit    = center + normalize(n * sign + normalize(d - n * cos_i) * |tan2r|) * radius

where neg_dir = 2 cos_i n - d. At normal incidence the tangential parts
vanish and the ray passes straight through the sphere unchanged.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.spherecast.materials.transparent import refract_through
    >>> # Use within a Taichi kernel:
    >>> # ok, ray = refract_through(kind, ratio, center, radius, entry, direction)
"""

import taichi as ti
import taichi.math as tm

from src.spherecast.core.ray import make_ray, normalize_or_zero, reflect
from src.spherecast.materials.surface import SurfaceKind

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def will_reflect(ratio: ti.f32, normal: vec3, direction: vec3) -> ti.i32:
    """Determine whether total internal reflection occurs.

    Args:
        ratio: The refractive index ratio of the sphere.
        normal: The inward unit normal at the entry point.
        direction: The incoming unit direction.

    Returns:
        1 if the ray cannot refract and is reflected instead, 0 otherwise.
    """
    cos_i = tm.dot(normal, direction)
    sin_i = ti.sqrt(tm.max(1.0 - cos_i * cos_i, 0.0))
    return 1 if sin_i * ratio >= 1.0 else 0


@ti.func
def refract_through(
    surface_kind: ti.i32,
    ratio: ti.f32,
    center: vec3,
    radius: ti.f32,
    entry_point: vec3,
    direction: vec3,
):
    """Compute the continuation ray of a ray entering a transparent sphere.

    Args:
        surface_kind: The SurfaceKind tag of the sphere.
        ratio: The refractive index ratio of the sphere.
        center: The center of the sphere.
        radius: The radius of the sphere.
        entry_point: The point where the ray meets the sphere surface.
        direction: The incoming ray direction (need not be normalized).

    Returns:
        A tuple of (ok, ray) where:
        - ok: 1 on success, 0 if the sphere is not transparent.
        - ray: The continuation ray. Only valid if ok == 1.
    """
    ok = 0
    out_origin = entry_point
    out_direction = vec3(0.0, 0.0, 0.0)

    if surface_kind == int(SurfaceKind.TRANSPARENT):
        ok = 1
        normal = tm.normalize(center - entry_point)
        d = tm.normalize(direction)
        cos_i = tm.dot(normal, d)
        sin_i = ti.sqrt(tm.max(1.0 - cos_i * cos_i, 0.0))
        sin_r = sin_i * ratio

        if will_reflect(ratio, normal, d) == 1:
            # Total internal reflection: reflect from the entry point
            out_direction = reflect(d, normal)
        else:
            cos_r = ti.sqrt(1.0 - sin_r * sin_r)
            tan_2r = (2.0 * sin_r * cos_r) / (cos_r * cos_r - sin_r * sin_r)
            side = ti.select(tan_2r < 0.0, -1.0, 1.0)
            weight = ti.abs(tan_2r)

            neg_dir = 2.0 * cos_i * normal - d
            to_normal = normal - neg_dir * cos_i
            out_direction = neg_dir * side + normalize_or_zero(to_normal) * weight

            tangential = d - normal * cos_i
            exit_dir = normal * side + normalize_or_zero(tangential) * weight
            out_origin = center + tm.normalize(exit_dir) * radius

    return ok, make_ray(out_origin, out_direction)

