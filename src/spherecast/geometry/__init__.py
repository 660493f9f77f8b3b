"""Geometry module for the sphere primitive.

Components:
    sphere: Sphere primitive with ray-sphere intersection

Intersection is brute force: the scene tests every sphere in insertion
order. The routine is a Taichi function (@ti.func) so it can be called from
the per-pixel kernels for both visibility and shadow rays.
"""

from .sphere import HitRecord, Sphere, hit_sphere, is_valid_radius, make_sphere

__all__ = [
    "Sphere",
    "HitRecord",
    "hit_sphere",
    "make_sphere",
    "is_valid_radius",
]
