"""Point light sources.

A light is a position plus ambient, diffuse and specular intensities. Lights
are stored in Taichi fields in insertion order so the shading kernels can
loop over them.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.spherecast.scene.lights import Light, LightOptions, add_light
    >>> add_light(Light(position=(-0.6, 0.8, 1.3), options=LightOptions(70.0, 100.0, 5.0)))
    0
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import taichi as ti


@dataclass(frozen=True)
class LightOptions:
    """Intensities of a point light.

    Attributes:
        specular: Specular intensity.
        diffuse: Diffuse intensity.
        ambient: Ambient intensity, applied whether or not the light is
            occluded.
    """

    specular: float
    diffuse: float
    ambient: float


@dataclass(frozen=True)
class Light:
    """A point light.

    Attributes:
        position: The light position in world space.
        options: The light intensities.
    """

    position: tuple[float, float, float]
    options: LightOptions

    def to_dict(self) -> dict[str, Any]:
        """Export the light to a JSON-friendly dictionary."""
        return {
            "position": list(self.position),
            "specular": self.options.specular,
            "diffuse": self.options.diffuse,
            "ambient": self.options.ambient,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Light:
        """Build a light from a dictionary produced by to_dict()."""
        position_list = data.get("position", [0.0, 0.0, 0.0])
        return cls(
            position=(
                float(position_list[0]),
                float(position_list[1]),
                float(position_list[2]),
            ),
            options=LightOptions(
                specular=float(data.get("specular", 0.0)),
                diffuse=float(data.get("diffuse", 0.0)),
                ambient=float(data.get("ambient", 0.0)),
            ),
        )


# Maximum number of lights supported in the scene
MAX_LIGHTS = 64

# Light storage: Structure of Arrays layout
light_positions = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LIGHTS)
light_specular = ti.field(dtype=ti.f32, shape=MAX_LIGHTS)
light_diffuse = ti.field(dtype=ti.f32, shape=MAX_LIGHTS)
light_ambient = ti.field(dtype=ti.f32, shape=MAX_LIGHTS)
num_lights = ti.field(dtype=ti.i32, shape=())


def clear_lights() -> None:
    """Remove all lights.

    Resets the light count to zero; stale field data is overwritten by the
    next lights added.
    """
    num_lights[None] = 0


def add_light(light: Light) -> int:
    """Append a light to the scene.

    Args:
        light: The light to add.

    Returns:
        The index of the added light.

    Raises:
        RuntimeError: If the maximum number of lights is exceeded.
    """
    idx = num_lights[None]
    if idx >= MAX_LIGHTS:
        raise RuntimeError(f"Maximum number of lights ({MAX_LIGHTS}) exceeded")
    light_positions[idx] = [light.position[0], light.position[1], light.position[2]]
    light_specular[idx] = light.options.specular
    light_diffuse[idx] = light.options.diffuse
    light_ambient[idx] = light.options.ambient
    num_lights[None] = idx + 1
    return idx


def get_light_count() -> int:
    """Get the number of lights in the scene."""
    return int(num_lights[None])
