"""Core rendering module.

This module contains the fundamental building blocks of the ray caster:

Components:
    ray: Ray data structure and vector utilities
    shading: Local illumination (ambient, diffuse, specular) with shadow rays
    integrator: Light transport dispatch across opaque, mirror and
        transparent surfaces, plus the render target
    renderer: Row-batched render driver producing an ImageBuffer

All per-ray work runs in Taichi kernels; pixels are independent, so the
outermost pixel loop is parallelized without any shared mutable state.
"""

from .ray import (
    Ray,
    cross,
    dot,
    length,
    length_squared,
    make_ray,
    normalize,
    normalize_or_zero,
    ray_at,
    reflect,
    vec3,
)

# Note: shading, integrator and renderer are NOT imported here because they
# declare Taichi fields at import time and depend on the scene package.
# Import them directly once Taichi has been initialized, e.g.:
#   from src.spherecast.core.renderer import Renderer

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "length",
    "length_squared",
    "normalize",
    "normalize_or_zero",
    "dot",
    "cross",
    "reflect",
]
