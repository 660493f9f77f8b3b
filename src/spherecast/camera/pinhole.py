"""Pinhole camera for primary ray generation.

All primary rays start at the camera origin. The ray for pixel (x, y) of a
W x H image points along

    forward + (x_range - 2 x_range x / W) * horizontal
            + (y_range - 2 y_range y / H) * vertical

so pixel (0, 0) looks toward +horizontal/+vertical and the image center looks
straight along forward. The directions are not normalized; the intersection
code normalizes them. The defaults reproduce a viewer at (-1, 0, 0) looking
along +X with a square view of half-extent 1.5 on a unit-distance plane.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.spherecast.camera.pinhole import PinholeCamera, setup_camera, get_ray
    >>>
    >>> setup_camera(PinholeCamera())
    >>>
    >>> @ti.kernel
    ... def render():
    ...     ray = get_ray(400, 400, 800, 800)  # Ray through image center
"""

from dataclasses import dataclass
from typing import Any

import numpy as np
import taichi as ti
import taichi.math as tm

from src.spherecast.core.ray import Ray, make_ray, vec3

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class PinholeCamera:
    """Configuration for the pinhole camera.

    Attributes:
        origin: Camera position in world space (x, y, z).
        forward: Offset from the origin to the center of the image plane.
        horizontal: Image plane axis that x pixel coordinates run against.
        vertical: Image plane axis that y pixel coordinates run against.
        x_range: Half-extent of the image plane along horizontal.
        y_range: Half-extent of the image plane along vertical.
    """

    origin: tuple[float, float, float] = (-1.0, 0.0, 0.0)
    forward: tuple[float, float, float] = (1.0, 0.0, 0.0)
    horizontal: tuple[float, float, float] = (0.0, 1.0, 0.0)
    vertical: tuple[float, float, float] = (0.0, 0.0, 1.0)
    x_range: float = 1.5
    y_range: float = 1.5

    def to_dict(self) -> dict[str, Any]:
        """Export the camera to a JSON-friendly dictionary."""
        return {
            "origin": list(self.origin),
            "forward": list(self.forward),
            "horizontal": list(self.horizontal),
            "vertical": list(self.vertical),
            "x_range": self.x_range,
            "y_range": self.y_range,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PinholeCamera":
        """Build a camera from a dictionary, using defaults for missing keys."""
        default = cls()

        def _vec(key: str, fallback: tuple[float, float, float]) -> tuple[float, float, float]:
            values = data.get(key, fallback)
            return (float(values[0]), float(values[1]), float(values[2]))

        return cls(
            origin=_vec("origin", default.origin),
            forward=_vec("forward", default.forward),
            horizontal=_vec("horizontal", default.horizontal),
            vertical=_vec("vertical", default.vertical),
            x_range=float(data.get("x_range", default.x_range)),
            y_range=float(data.get("y_range", default.y_range)),
        )


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_origin = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_forward = ti.Vector.field(3, dtype=ti.f32, shape=())

# Image plane axes pre-scaled by their half-extents
_camera_horizontal = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_vertical = ti.Vector.field(3, dtype=ti.f32, shape=())


# =============================================================================
# Camera Setup (Python-side, called once per camera configuration)
# =============================================================================


def setup_camera(camera: PinholeCamera) -> None:
    """Initialize camera state from configuration.

    Must be called before rendering.

    Args:
        camera: Camera configuration.

    Raises:
        ValueError: If the forward vector is zero.
    """
    forward = np.array(camera.forward, dtype=np.float32)
    if not np.any(forward):
        raise ValueError("Camera forward vector must not be zero")

    horizontal = np.array(camera.horizontal, dtype=np.float32) * camera.x_range
    vertical = np.array(camera.vertical, dtype=np.float32) * camera.y_range

    _camera_origin[None] = list(camera.origin)
    _camera_forward[None] = forward.tolist()
    _camera_horizontal[None] = horizontal.tolist()
    _camera_vertical[None] = vertical.tolist()


# =============================================================================
# Ray Generation
# =============================================================================


@ti.func
def get_ray(pixel_x: ti.i32, pixel_y: ti.i32, width: ti.i32, height: ti.i32) -> Ray:
    """Generate the primary ray for a pixel.

    Args:
        pixel_x: Pixel column (0 = left).
        pixel_y: Pixel row (0 = top).
        width: Image width in pixels.
        height: Image height in pixels.

    Returns:
        A Ray from the camera origin through the pixel. The direction is
        not normalized.
    """
    h = 1.0 - 2.0 * ti.cast(pixel_x, ti.f32) / ti.cast(width, ti.f32)
    v = 1.0 - 2.0 * ti.cast(pixel_y, ti.f32) / ti.cast(height, ti.f32)
    direction = _camera_forward[None] + h * _camera_horizontal[None] + v * _camera_vertical[None]
    return make_ray(_camera_origin[None], direction)


@ti.func
def get_camera_origin() -> vec3:
    """Get the camera origin in world space."""
    return _camera_origin[None]


@ti.kernel
def _pixel_direction(pixel_x: ti.i32, pixel_y: ti.i32, width: ti.i32, height: ti.i32) -> tm.vec3:
    return get_ray(pixel_x, pixel_y, width, height).direction


# =============================================================================
# Utility Functions
# =============================================================================


def pixel_direction(x: int, y: int, width: int, height: int) -> tuple[float, float, float]:
    """Get the primary ray direction for a pixel from Python.

    Useful for verifying camera setup.
    """
    d = _pixel_direction(x, y, width, height)
    return (float(d[0]), float(d[1]), float(d[2]))


def get_camera_info() -> dict[str, tuple[float, float, float]]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with origin, forward, and the scaled horizontal and
        vertical image plane axes.
    """
    origin_vec = _camera_origin[None]
    f_vec = _camera_forward[None]
    h_vec = _camera_horizontal[None]
    v_vec = _camera_vertical[None]

    return {
        "origin": (float(origin_vec[0]), float(origin_vec[1]), float(origin_vec[2])),
        "forward": (float(f_vec[0]), float(f_vec[1]), float(f_vec[2])),
        "horizontal": (float(h_vec[0]), float(h_vec[1]), float(h_vec[2])),
        "vertical": (float(v_vec[0]), float(v_vec[1]), float(v_vec[2])),
    }
