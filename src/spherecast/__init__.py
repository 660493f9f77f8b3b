"""Taichi-based sphere ray caster.

This package renders still images of sphere scenes lit by point lights,
casting one ray per pixel from a fixed viewpoint:
- Ray-sphere intersection with a linear scan over the scene
- Binary shadow rays with a self-occlusion bias
- Phong-like ambient, diffuse and specular shading
- Bounded light transport across mirror and transparent spheres

Subpackages:
    core: Ray and vector utilities, shading, light transport, render loop
    geometry: Sphere primitive and its intersection routine
    materials: Opaque, mirror and transparent surface models
    scene: Scene storage, lights, scene manager and the showcase scene
    camera: Fixed-viewpoint camera ray generation
    preview: Image buffer, PPM/PNG export and on-screen preview
"""

__version__ = "0.1.0"
