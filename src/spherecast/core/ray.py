"""Ray data structure and vector utilities for the sphere ray caster.

This module provides the Ray dataclass and the small set of vector helpers
the intersection, shading and transport code is written against. All
operations are Taichi functions and run inside kernels in single precision.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> origin = ti.math.vec3(-1.0, 0.0, 0.0)
    >>> direction = ti.math.vec3(1.0, 0.0, 0.0)
    >>> ray = Ray(origin=origin, direction=direction)
    >>> point = ray_at(ray, 2.0)  # Point 2 units along the normalized ray
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). It is not required
            to be normalized; consumers normalize it where they need to.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point at distance t along the ray.

    The direction is normalized first, so t is a true distance rather than
    a multiple of the direction vector.

    Args:
        ray: The ray to evaluate.
        t: The distance from the ray origin.

    Returns:
        The point ray.origin + t * normalize(ray.direction).
    """
    return ray.origin + t * tm.normalize(ray.direction)


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction.

    Args:
        origin: The starting point of the ray.
        direction: The direction vector.

    Returns:
        A new Ray instance.
    """
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def length(v: vec3) -> ti.f32:
    """Compute the Euclidean length of a vector."""
    return tm.length(v)


@ti.func
def length_squared(v: vec3) -> ti.f32:
    """Compute the squared length of a vector.

    Cheaper than length() when only comparing magnitudes.
    """
    return tm.dot(v, v)


@ti.func
def normalize(v: vec3) -> vec3:
    """Normalize a vector to unit length.

    Callers must not pass a zero vector; use normalize_or_zero() where a
    degenerate vector can legitimately occur.
    """
    return tm.normalize(v)


@ti.func
def normalize_or_zero(v: vec3) -> vec3:
    """Normalize a vector, mapping a zero-length vector to zero.

    Args:
        v: The input vector.

    Returns:
        A unit vector in the direction of v, or the zero vector when v has
        no length.
    """
    result = vec3(0.0, 0.0, 0.0)
    n = tm.length(v)
    if n > 0.0:
        result = v / n
    return result


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    """Compute the dot product of two vectors."""
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    """Compute the cross product of two vectors."""
    return tm.cross(a, b)


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect an incident vector about a normal.

    The result does not depend on which way the normal points, only on the
    line it spans. The normal should be unit length.

    Args:
        incident: The incoming direction vector.
        normal: The surface normal (normalized).

    Returns:
        The reflected direction vector, incident - 2 (incident . normal) normal.
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal
