"""Sphere primitive and ray-sphere intersection.

The intersection works on the projection of the sphere center onto the
normalized ray direction instead of solving the quadratic directly:

    offset = center - origin
    d      = normalize(direction)
    proj   = d . offset                 (distance to the closest approach)
    perp   = offset - d * proj          (center's offset from the ray line)
    h2     = perp . perp

A ray whose origin lies inside or on the sphere, or whose closest approach
is behind the origin, never reports a hit. Refracted rays rely on this to
leave the sphere they were spawned from without re-hitting it.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.spherecast.geometry.sphere import Sphere, hit_sphere
    >>> sphere = Sphere(center=ti.math.vec3(3, 0, 0), radius=1.0)
    >>> # Use hit_sphere within a Taichi kernel
"""

import math

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (strictly positive).
    """

    center: vec3
    radius: ti.f32


@ti.dataclass
class HitRecord:
    """Record of a ray-sphere intersection.

    Attributes:
        hit: Whether the ray intersected the sphere (1 if hit, 0 if miss).
        t: Distance along the normalized ray direction to the near
            intersection. Only valid if hit == 1.
        point: The near intersection point. Only valid if hit == 1.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3


@ti.func
def hit_sphere(ray_origin: vec3, ray_direction: vec3, sphere: Sphere) -> HitRecord:
    """Test a ray against a sphere.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction of the ray (need not be normalized).
        sphere: The sphere to test.

    Returns:
        A HitRecord for the near intersection. Check the hit field to
        determine whether an intersection occurred.
    """
    offset = sphere.center - ray_origin
    norm_dir = tm.normalize(ray_direction)
    proj = tm.dot(norm_dir, offset)
    perp = offset - norm_dir * proj
    h2 = tm.dot(perp, perp)
    r2 = sphere.radius * sphere.radius

    did_hit = 0
    hit_t = 0.0
    hit_point = vec3(0.0, 0.0, 0.0)

    # Origin inside/on the sphere, or sphere behind the origin: no hit
    if tm.dot(offset, offset) > r2 and proj > 0.0:
        if h2 <= r2:
            did_hit = 1
            hit_t = proj - ti.sqrt(r2 - h2)
            hit_point = ray_origin + norm_dir * hit_t

    return HitRecord(hit=did_hit, t=hit_t, point=hit_point)


@ti.func
def make_sphere(center: vec3, radius: ti.f32) -> Sphere:
    """Create a sphere from center and radius inside a Taichi kernel."""
    return Sphere(center=center, radius=radius)


def is_valid_radius(radius: float) -> bool:
    """Check whether a radius describes a constructible sphere.

    Args:
        radius: The candidate radius.

    Returns:
        True for finite, strictly positive radii.
    """
    return math.isfinite(radius) and radius > 0.0
