"""Showcase scene configuration.

The showcase scene exercises every surface variant:

- A large cyan opaque sphere and a smaller green opaque sphere
- Two mirror spheres below and behind them
- A small transparent sphere close to the camera
- Two point lights above and to the side of the camera

It is viewed by the default pinhole camera at (-1, 0, 0) looking along +X.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.spherecast.scene.showcase import create_showcase_scene
    >>> from src.spherecast.core.renderer import Renderer
    >>>
    >>> scene, camera = create_showcase_scene()
    >>> image = Renderer(800, 800, camera=camera).render()
"""

from src.spherecast.camera.pinhole import PinholeCamera
from src.spherecast.scene.manager import SceneManager

# Default output size of the showcase render
SHOWCASE_WIDTH = 800
SHOWCASE_HEIGHT = 800


def create_showcase_scene() -> tuple[SceneManager, PinholeCamera]:
    """Create the showcase scene.

    Clears any existing scene data first.

    Returns:
        A tuple of (scene_manager, camera).
    """
    scene = SceneManager()

    # Opaque spheres
    scene.add_opaque_sphere(
        center=(1.0, 0.3, 0.5),
        radius=0.7,
        color=(77, 248, 255),
        specular=1.3,
        diffuse=1.5,
        ambient=1.0,
        shininess=100.0,
    )
    scene.add_opaque_sphere(
        center=(1.0, -0.5, 0.25),
        radius=0.5,
        color=(0, 255, 0),
        specular=0.8,
        diffuse=1.5,
        ambient=1.0,
        shininess=2.0,
    )

    # Mirrors
    scene.add_mirror_sphere(
        center=(1.5, 0.0, -0.7),
        radius=0.5,
        specular=50.0,
        diffuse=1.0,
        ambient=0.0,
        shininess=100.0,
    )
    scene.add_mirror_sphere(
        center=(1.2, -1.7, -1.0),
        radius=0.8,
        specular=50.0,
        diffuse=1.0,
        ambient=0.0,
        shininess=100.0,
    )

    # Lens
    scene.add_transparent_sphere(
        center=(-0.1, 0.4, 0.2),
        radius=0.2,
        ratio=1.3,
        specular=50.0,
        diffuse=1.0,
        ambient=0.0,
        shininess=100.0,
    )

    scene.add_light((-0.6, 0.8, 1.3), specular=70.0, diffuse=100.0, ambient=5.0)
    scene.add_light((-1.0, -0.7, 1.0), specular=60.0, diffuse=70.0, ambient=5.0)

    camera = PinholeCamera()
    scene.camera = camera

    return scene, camera
