"""Pytest configuration for sphere ray caster tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    ti.init(arch=ti.cpu)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear scene data before and after each test.

    This ensures tests are isolated from each other.
    """
    # Import here so Taichi is initialized before fields are declared
    from src.spherecast.core.integrator import clear_render_target
    from src.spherecast.core.shading import reset_shading_diagnostics
    from src.spherecast.scene.intersection import clear_scene
    from src.spherecast.scene.lights import clear_lights

    def _clear_all():
        clear_scene()
        clear_lights()
        reset_shading_diagnostics()
        clear_render_target()

    _clear_all()
    yield
    _clear_all()


@pytest.fixture
def default_camera():
    """Set up the default pinhole camera and return it."""
    from src.spherecast.camera.pinhole import PinholeCamera, setup_camera

    camera = PinholeCamera()
    setup_camera(camera)
    return camera
