"""Camera module for primary ray generation.

Components:
    pinhole: Fixed-origin pinhole camera with a rectangular image plane

Pixel coordinates are integers:
    x in [0, width): left to right across the image
    y in [0, height): top to bottom across the image

Ray generation runs inside Taichi kernels, one primary ray per pixel.
"""

from .pinhole import (
    PinholeCamera,
    get_camera_info,
    get_camera_origin,
    get_ray,
    pixel_direction,
    setup_camera,
)

__all__ = [
    "PinholeCamera",
    "setup_camera",
    "get_ray",
    "get_camera_origin",
    "get_camera_info",
    "pixel_direction",
]
