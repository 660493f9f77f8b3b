"""Scene manager for building and serializing sphere scenes.

The SceneManager is the host-side owner of a scene. It writes spheres and
lights to the Taichi fields the kernels read, keeps a Python-side record of
everything it added, and converts the scene to and from plain dictionaries
and JSON files.

Scenes are append-only: spheres and lights keep their insertion order, which
decides exact ties in the nearest-hit query. A scene is read-only while an
image is being rendered.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.spherecast.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> scene.add_opaque_sphere((1.0, 0.3, 0.5), 0.7, color=(77, 248, 255))
    0
    >>> scene.add_mirror_sphere((1.5, 0.0, -0.7), 0.5, specular=50.0)
    1
    >>> scene.add_light((-0.6, 0.8, 1.3), specular=70.0, diffuse=100.0, ambient=5.0)
    0
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from src.spherecast.camera.pinhole import PinholeCamera
from src.spherecast.geometry.sphere import is_valid_radius
from src.spherecast.materials.surface import (
    Mirror,
    Opaque,
    SurfaceOptions,
    Transparent,
)
from src.spherecast.scene.intersection import (
    MAX_SPHERES,
    add_sphere,
    clear_scene,
    get_sphere_count,
)
from src.spherecast.scene.lights import (
    MAX_LIGHTS,
    Light,
    LightOptions,
    add_light,
    clear_lights,
    get_light_count,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SphereInfo:
    """Information about a sphere in the scene.

    Attributes:
        center: The center of the sphere.
        radius: The radius of the sphere (strictly positive).
        options: The surface options of the sphere.
        sphere_index: The index in the sphere storage arrays, -1 until the
            sphere has been added to a scene.
    """

    center: tuple[float, float, float]
    radius: float
    options: SurfaceOptions
    sphere_index: int = -1

    @classmethod
    def create(
        cls,
        center: tuple[float, float, float],
        radius: float,
        options: SurfaceOptions,
    ) -> SphereInfo | None:
        """Construct a sphere, failing on a non-positive radius.

        Args:
            center: The center of the sphere.
            radius: The radius of the sphere.
            options: The surface options of the sphere.

        Returns:
            The sphere, or None if the radius is not strictly positive.
        """
        if not is_valid_radius(radius):
            return None
        return cls(
            center=(float(center[0]), float(center[1]), float(center[2])),
            radius=float(radius),
            options=options,
        )

    def to_dict(self) -> dict[str, Any]:
        """Export the sphere to a JSON-friendly dictionary."""
        return {
            "center": list(self.center),
            "radius": self.radius,
            **self.options.to_dict(),
        }


@dataclass
class SceneConfig:
    """Configuration for scene serialization.

    Attributes:
        spheres: List of sphere configurations.
        lights: List of light configurations.
        camera: Camera configuration (empty for the default camera).
    """

    spheres: list[dict[str, Any]] = field(default_factory=list)
    lights: list[dict[str, Any]] = field(default_factory=list)
    camera: dict[str, Any] = field(default_factory=dict)


class SceneManager:
    """Host-side owner of the spheres, lights and camera of a scene.

    Attributes:
        spheres: List of SphereInfo for all spheres in the scene.
        lights: List of Light for all lights in the scene.
        camera: The camera the scene is meant to be viewed from.

    Example:
        >>> scene = SceneManager()
        >>> scene.add_opaque_sphere((1, -0.5, 0.25), 0.5, color=(0, 255, 0))
        >>> scene.add_transparent_sphere((-0.1, 0.4, 0.2), 0.2, ratio=1.3)
        >>> scene.add_sphere((0, 0, 0), -1.0, SurfaceOptions(0, 1, 1, 1, Mirror())) is None
        True
    """

    def __init__(self) -> None:
        """Initialize an empty scene with the default camera."""
        self.spheres: list[SphereInfo] = []
        self.lights: list[Light] = []
        self.camera = PinholeCamera()
        self._clear_all()

    def _clear_all(self) -> None:
        """Clear all scene data including Taichi fields."""
        clear_scene()
        clear_lights()
        self.spheres.clear()
        self.lights.clear()

    def clear(self) -> None:
        """Clear the scene (spheres and lights).

        The camera is kept.
        """
        self._clear_all()

    # =========================================================================
    # Spheres
    # =========================================================================

    def add_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        options: SurfaceOptions,
    ) -> int | None:
        """Add a sphere to the scene.

        Args:
            center: The center of the sphere.
            radius: The radius of the sphere.
            options: The surface options of the sphere.

        Returns:
            The sphere index, or None if the radius is not strictly positive.

        Raises:
            RuntimeError: If the maximum number of spheres is exceeded.
        """
        info = SphereInfo.create(center, radius, options)
        if info is None:
            logger.warning("Skipping sphere at %s with invalid radius %r", center, radius)
            return None

        sphere_index = add_sphere(info.center, info.radius, info.options)
        self.spheres.append(
            SphereInfo(
                center=info.center,
                radius=info.radius,
                options=info.options,
                sphere_index=sphere_index,
            )
        )
        return sphere_index

    def add_opaque_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        color: tuple[int, int, int],
        specular: float = 0.0,
        diffuse: float = 1.0,
        ambient: float = 1.0,
        shininess: float = 1.0,
    ) -> int | None:
        """Add a sphere with an opaque colored surface.

        Returns:
            The sphere index, or None if the radius is not strictly positive.

        Raises:
            ValueError: If the color is not three integers in [0, 255].
        """
        options = SurfaceOptions(specular, diffuse, ambient, shininess, Opaque(color=color))
        return self.add_sphere(center, radius, options)

    def add_mirror_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        specular: float = 0.0,
        diffuse: float = 1.0,
        ambient: float = 0.0,
        shininess: float = 1.0,
    ) -> int | None:
        """Add a sphere with a mirror surface.

        Returns:
            The sphere index, or None if the radius is not strictly positive.
        """
        options = SurfaceOptions(specular, diffuse, ambient, shininess, Mirror())
        return self.add_sphere(center, radius, options)

    def add_transparent_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        ratio: float,
        specular: float = 0.0,
        diffuse: float = 1.0,
        ambient: float = 0.0,
        shininess: float = 1.0,
    ) -> int | None:
        """Add a sphere with a transparent refracting surface.

        Returns:
            The sphere index, or None if the radius is not strictly positive.
        """
        options = SurfaceOptions(specular, diffuse, ambient, shininess, Transparent(ratio=ratio))
        return self.add_sphere(center, radius, options)

    # =========================================================================
    # Lights
    # =========================================================================

    def add_light(
        self,
        position: tuple[float, float, float],
        specular: float,
        diffuse: float,
        ambient: float,
    ) -> int:
        """Add a point light to the scene.

        Args:
            position: The light position.
            specular: Specular intensity.
            diffuse: Diffuse intensity.
            ambient: Ambient intensity.

        Returns:
            The light index.

        Raises:
            RuntimeError: If the maximum number of lights is exceeded.
        """
        light = Light(
            position=(float(position[0]), float(position[1]), float(position[2])),
            options=LightOptions(specular=specular, diffuse=diffuse, ambient=ambient),
        )
        index = add_light(light)
        self.lights.append(light)
        return index

    # =========================================================================
    # Queries
    # =========================================================================

    def get_sphere_count(self) -> int:
        """Get the number of spheres in the scene."""
        return get_sphere_count()

    def get_light_count(self) -> int:
        """Get the number of lights in the scene."""
        return get_light_count()

    @staticmethod
    def get_max_spheres() -> int:
        """Get the maximum number of spheres supported."""
        return MAX_SPHERES

    @staticmethod
    def get_max_lights() -> int:
        """Get the maximum number of lights supported."""
        return MAX_LIGHTS

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Export the scene to a configuration object.

        Returns:
            A SceneConfig containing all spheres, lights and the camera.
        """
        return SceneConfig(
            spheres=[sphere.to_dict() for sphere in self.spheres],
            lights=[light.to_dict() for light in self.lights],
            camera=self.camera.to_dict(),
        )

    def from_config(self, config: SceneConfig) -> None:
        """Load a scene from a configuration object.

        Every entry is parsed before the current scene is cleared, so an
        invalid configuration leaves the current scene unchanged. Spheres with
        a non-positive radius are skipped.

        Args:
            config: The scene configuration to load.

        Raises:
            ValueError: If the configuration contains invalid data.
        """
        spheres = []
        for sphere_config in config.spheres:
            center_list = sphere_config.get("center", [0.0, 0.0, 0.0])
            center: tuple[float, float, float] = (
                float(center_list[0]),
                float(center_list[1]),
                float(center_list[2]),
            )
            radius = float(sphere_config.get("radius", 1.0))
            spheres.append((center, radius, SurfaceOptions.from_dict(sphere_config)))

        lights = [Light.from_dict(light_config) for light_config in config.lights]
        camera = PinholeCamera.from_dict(config.camera)

        valid_spheres = sum(1 for entry in spheres if SphereInfo.create(*entry) is not None)
        if valid_spheres > MAX_SPHERES:
            raise ValueError(f"Scene has {valid_spheres} spheres, at most {MAX_SPHERES} are supported")
        if len(lights) > MAX_LIGHTS:
            raise ValueError(f"Scene has {len(lights)} lights, at most {MAX_LIGHTS} are supported")

        self.clear()
        for center, radius, options in spheres:
            self.add_sphere(center, radius, options)
        for light in lights:
            self.add_light(
                light.position,
                specular=light.options.specular,
                diffuse=light.options.diffuse,
                ambient=light.options.ambient,
            )

        self.camera = camera

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization).

        Returns:
            A dictionary representation of the scene.
        """
        config = self.to_config()
        return {
            "spheres": config.spheres,
            "lights": config.lights,
            "camera": config.camera,
        }

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load a scene from a dictionary.

        Args:
            data: A dictionary with "spheres", "lights" and "camera" keys.

        Raises:
            ValueError: If the dictionary contains invalid data.
        """
        config = SceneConfig(
            spheres=list(data.get("spheres", [])),
            lights=list(data.get("lights", [])),
            camera=dict(data.get("camera", {})),
        )
        self.from_config(config)

    def save_json(self, filepath: str | Path) -> None:
        """Write the scene to a JSON file."""
        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)

    def load_json(self, filepath: str | Path) -> None:
        """Load the scene from a JSON file.

        Raises:
            ValueError: If the file is not valid JSON or contains invalid data.
        """
        with open(filepath, encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Scene file {filepath} must contain a JSON object")
        self.from_dict(data)
        logger.info(
            "Loaded %d sphere(s) and %d light(s) from %s",
            len(self.spheres),
            len(self.lights),
            filepath,
        )

    def __repr__(self) -> str:
        """Return a string representation of the scene."""
        return f"SceneManager(spheres={len(self.spheres)}, lights={len(self.lights)})"
