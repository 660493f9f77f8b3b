"""Mirror surface reflection and its tuning constants.

A mirror sphere has no color of its own. The transport dispatcher follows
the reflected ray for a bounded number of bounces and colors the mirror with
whatever the chain resolves to, brightened by MIRROR_BRIGHTNESS_BONUS.

The miss colors below are tuning values: a reflection straight into empty
space shows FIRST_BOUNCE_MISS_COLOR, a longer chain that ends in empty space
shows CHAIN_MISS_COLOR, and a chain that runs out of bounces before it
resolves keeps UNRESOLVED_MIRROR_COLOR.
"""

import taichi as ti
import taichi.math as tm

from src.spherecast.core.ray import reflect

# Type aliases
vec3 = tm.vec3
ivec3 = tm.ivec3

# Maximum number of mirror-to-mirror bounce steps followed per mirror hit
MAX_MIRROR_BOUNCES = 4

# Added to the local brightness of mirror and transparent surfaces
MIRROR_BRIGHTNESS_BONUS = 255.0

# Host-side RGB tuples
FIRST_BOUNCE_MISS_RGB = (5, 5, 5)
CHAIN_MISS_RGB = (15, 15, 15)
UNRESOLVED_MIRROR_RGB = (10, 10, 10)

# Kernel-side colors
FIRST_BOUNCE_MISS_COLOR = ivec3(*FIRST_BOUNCE_MISS_RGB)
CHAIN_MISS_COLOR = ivec3(*CHAIN_MISS_RGB)
UNRESOLVED_MIRROR_COLOR = ivec3(*UNRESOLVED_MIRROR_RGB)


@ti.func
def reflect_off_sphere(direction: vec3, center: vec3, point: vec3) -> vec3:
    """Mirror-reflect a direction about the sphere normal at a surface point.

    Args:
        direction: The incoming direction (need not be normalized).
        center: The center of the mirror sphere.
        point: The point on the sphere surface where the ray hit.

    Returns:
        The reflected unit direction.
    """
    normal = tm.normalize(center - point)
    return reflect(tm.normalize(direction), normal)
