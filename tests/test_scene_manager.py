"""Unit tests for the SceneManager.

Tests cover:
- Sphere construction and radius validation
- Convenience methods (add_opaque_sphere, add_mirror_sphere, add_transparent_sphere)
- Light registration
- Scene serialization (to_config, from_config, JSON files)
- Scene clearing
- The showcase scene
"""

import json
from pathlib import Path

import pytest

EXAMPLE_SCENE = Path(__file__).resolve().parent.parent / "examples" / "scenes" / "two_lights.json"


@pytest.fixture
def fresh_scene():
    """Create a fresh SceneManager for each test."""
    from src.spherecast.scene.manager import SceneManager

    scene = SceneManager()
    yield scene
    scene.clear()


class TestSphereInfo:
    """Tests for sphere construction."""

    def test_create_valid(self):
        """Test a positive radius builds a sphere."""
        from src.spherecast.materials.surface import Mirror, SurfaceOptions
        from src.spherecast.scene.manager import SphereInfo

        info = SphereInfo.create((1, 2, 3), 0.5, SurfaceOptions(0.0, 1.0, 0.0, 1.0, Mirror()))

        assert info is not None
        assert info.center == (1.0, 2.0, 3.0)
        assert info.radius == 0.5
        assert info.sphere_index == -1

    @pytest.mark.parametrize("radius", [0.0, -1.0, float("nan")])
    def test_create_invalid_radius(self, radius):
        """Test construction fails for radii that are not strictly positive."""
        from src.spherecast.materials.surface import Mirror, SurfaceOptions
        from src.spherecast.scene.manager import SphereInfo

        assert SphereInfo.create((0, 0, 0), radius, SurfaceOptions(0.0, 1.0, 0.0, 1.0, Mirror())) is None


class TestSphereAddition:
    """Tests for adding spheres."""

    def test_add_opaque_sphere(self, fresh_scene):
        """Test adding an opaque sphere with default coefficients."""
        from src.spherecast.materials.surface import SurfaceKind

        idx = fresh_scene.add_opaque_sphere((1.0, 0.3, 0.5), 0.7, color=(77, 248, 255))

        assert idx == 0
        assert fresh_scene.get_sphere_count() == 1
        info = fresh_scene.spheres[0]
        assert info.sphere_index == 0
        assert info.options.kind == SurfaceKind.OPAQUE
        assert info.options.color == (77, 248, 255)
        assert (info.options.diffuse, info.options.ambient) == (1.0, 1.0)

    def test_add_mirror_sphere(self, fresh_scene):
        """Test mirror spheres default to no ambient term."""
        from src.spherecast.materials.surface import SurfaceKind

        fresh_scene.add_opaque_sphere((1.0, 0.0, 0.0), 0.5, color=(0, 0, 0))
        idx = fresh_scene.add_mirror_sphere((1.5, 0.0, -0.7), 0.5, specular=50.0)

        assert idx == 1
        options = fresh_scene.spheres[1].options
        assert options.kind == SurfaceKind.MIRROR
        assert options.specular == 50.0
        assert options.ambient == 0.0

    def test_add_transparent_sphere(self, fresh_scene):
        """Test transparent spheres carry their ratio into the fields."""
        from src.spherecast.scene.intersection import sphere_ratios

        idx = fresh_scene.add_transparent_sphere((-0.1, 0.4, 0.2), 0.2, ratio=1.3)

        assert fresh_scene.spheres[idx].options.ratio == pytest.approx(1.3)
        assert sphere_ratios[idx] == pytest.approx(1.3)

    @pytest.mark.parametrize("radius", [0.0, -0.5])
    def test_invalid_radius_is_skipped(self, fresh_scene, radius, caplog):
        """Test a non-positive radius adds nothing and logs a warning."""
        result = fresh_scene.add_opaque_sphere((0.0, 0.0, 0.0), radius, color=(1, 2, 3))

        assert result is None
        assert fresh_scene.get_sphere_count() == 0
        assert fresh_scene.spheres == []
        assert "invalid radius" in caplog.text

    def test_invalid_color_raises(self, fresh_scene):
        """Test an out-of-range color is rejected."""
        with pytest.raises(ValueError):
            fresh_scene.add_opaque_sphere((0.0, 0.0, 0.0), 1.0, color=(0, 0, 300))


class TestLights:
    """Tests for adding lights."""

    def test_add_light(self, fresh_scene):
        """Test lights are recorded in order."""
        assert fresh_scene.add_light((-0.6, 0.8, 1.3), specular=70.0, diffuse=100.0, ambient=5.0) == 0
        assert fresh_scene.add_light((-1.0, -0.7, 1.0), specular=60.0, diffuse=70.0, ambient=5.0) == 1

        assert fresh_scene.get_light_count() == 2
        assert fresh_scene.lights[1].position == (-1.0, -0.7, 1.0)
        assert fresh_scene.lights[1].options.diffuse == 70.0


class TestSceneClearing:
    """Tests for scene clearing."""

    def test_clear_scene(self, fresh_scene):
        """Test clearing removes spheres and lights but keeps the camera."""
        from src.spherecast.camera.pinhole import PinholeCamera

        camera = PinholeCamera(x_range=2.0)
        fresh_scene.camera = camera
        fresh_scene.add_opaque_sphere((1.0, 0.0, 0.0), 0.5, color=(255, 0, 0))
        fresh_scene.add_light((0.0, 0.0, 1.0), 1.0, 1.0, 1.0)

        fresh_scene.clear()

        assert fresh_scene.get_sphere_count() == 0
        assert fresh_scene.get_light_count() == 0
        assert fresh_scene.spheres == []
        assert fresh_scene.lights == []
        assert fresh_scene.camera is camera

    def test_new_manager_clears_fields(self):
        """Test constructing a manager starts from an empty scene."""
        from src.spherecast.scene.manager import SceneManager

        first = SceneManager()
        first.add_mirror_sphere((1.0, 0.0, 0.0), 0.5)

        second = SceneManager()

        assert second.get_sphere_count() == 0

    def test_capacity_methods(self):
        """Test the capacity accessors report the storage limits."""
        from src.spherecast.scene.intersection import MAX_SPHERES
        from src.spherecast.scene.lights import MAX_LIGHTS
        from src.spherecast.scene.manager import SceneManager

        assert SceneManager.get_max_spheres() == MAX_SPHERES
        assert SceneManager.get_max_lights() == MAX_LIGHTS


class TestSceneSerialization:
    """Tests for scene serialization."""

    def test_to_config(self, fresh_scene):
        """Test exporting scene to config."""
        fresh_scene.add_opaque_sphere((1.0, 0.3, 0.5), 0.7, color=(77, 248, 255))
        fresh_scene.add_transparent_sphere((-0.1, 0.4, 0.2), 0.2, ratio=1.3)
        fresh_scene.add_light((-0.6, 0.8, 1.3), specular=70.0, diffuse=100.0, ambient=5.0)

        config = fresh_scene.to_config()

        assert len(config.spheres) == 2
        assert config.spheres[0]["surface"] == {"type": "opaque", "color": [77, 248, 255]}
        assert config.spheres[1]["surface"]["type"] == "transparent"
        assert config.spheres[1]["radius"] == 0.2
        assert len(config.lights) == 1
        assert config.camera["origin"] == [-1.0, 0.0, 0.0]

    def test_from_config(self, fresh_scene):
        """Test loading scene from config, skipping invalid spheres."""
        from src.spherecast.materials.surface import SurfaceKind
        from src.spherecast.scene.manager import SceneConfig

        config = SceneConfig(
            spheres=[
                {"center": [1.0, 0.0, 0.0], "radius": 0.5, "surface": {"type": "mirror"}},
                {"center": [2.0, 0.0, 0.0], "radius": -1.0, "surface": {"type": "mirror"}},
                {
                    "center": [3.0, 0.0, 0.0],
                    "radius": 0.5,
                    "surface": {"type": "transparent", "ratio": 1.5},
                },
            ],
            lights=[{"position": [0.0, 1.0, 0.0], "specular": 1.0, "diffuse": 2.0, "ambient": 3.0}],
            camera={"x_range": 2.0},
        )

        fresh_scene.from_config(config)

        assert fresh_scene.get_sphere_count() == 2
        assert [s.options.kind for s in fresh_scene.spheres] == [
            SurfaceKind.MIRROR,
            SurfaceKind.TRANSPARENT,
        ]
        assert fresh_scene.get_light_count() == 1
        assert fresh_scene.camera.x_range == 2.0

    def test_from_config_replaces_existing(self, fresh_scene):
        """Test loading a config discards the previous scene."""
        from src.spherecast.scene.manager import SceneConfig

        fresh_scene.add_opaque_sphere((1.0, 0.0, 0.0), 0.5, color=(255, 0, 0))
        fresh_scene.from_config(SceneConfig())

        assert fresh_scene.get_sphere_count() == 0

    @pytest.mark.parametrize(
        "bad_config",
        [
            {"spheres": [{"center": [1.0, 0.0, 0.0], "radius": 0.5, "surface": {"type": "velvet"}}]},
            {"lights": [{"position": [0.0, "up", 0.0]}]},
            {"camera": {"x_range": "wide"}},
        ],
    )
    def test_bad_config_keeps_previous_scene(self, fresh_scene, bad_config):
        """Test a config that fails to parse leaves the loaded scene untouched."""
        from src.spherecast.camera.pinhole import PinholeCamera
        from src.spherecast.scene.manager import SceneConfig

        camera = PinholeCamera(x_range=2.0)
        fresh_scene.camera = camera
        fresh_scene.add_opaque_sphere((1.0, 0.0, 0.0), 0.5, color=(255, 0, 0))
        fresh_scene.add_light((0.0, 0.0, 1.0), 1.0, 1.0, 1.0)
        before = fresh_scene.to_dict()

        config = SceneConfig(
            spheres=[{"center": [2.0, 0.0, 0.0], "radius": 0.5, "surface": {"type": "mirror"}}]
            + bad_config.get("spheres", []),
            lights=[{"position": [0.0, 1.0, 0.0]}] + bad_config.get("lights", []),
            camera=bad_config.get("camera", {}),
        )

        with pytest.raises(ValueError):
            fresh_scene.from_config(config)

        assert fresh_scene.to_dict() == before
        assert fresh_scene.get_sphere_count() == 1
        assert fresh_scene.get_light_count() == 1
        assert fresh_scene.camera is camera

    def test_too_many_lights_keeps_previous_scene(self, fresh_scene):
        """Test a config over the light capacity is rejected before clearing."""
        from src.spherecast.scene.lights import MAX_LIGHTS
        from src.spherecast.scene.manager import SceneConfig

        fresh_scene.add_opaque_sphere((1.0, 0.0, 0.0), 0.5, color=(255, 0, 0))
        config = SceneConfig(lights=[{"position": [0.0, 0.0, float(k)]} for k in range(MAX_LIGHTS + 1)])

        with pytest.raises(ValueError, match="lights"):
            fresh_scene.from_config(config)

        assert fresh_scene.get_sphere_count() == 1
        assert fresh_scene.get_light_count() == 0

    def test_to_dict_from_dict(self, fresh_scene):
        """Test round-trip serialization via dict."""
        from src.spherecast.scene.manager import SceneManager

        fresh_scene.add_opaque_sphere((1.0, -0.5, 0.25), 0.5, color=(0, 255, 0), shininess=2.0)
        fresh_scene.add_mirror_sphere((1.2, -1.7, -1.0), 0.8, specular=50.0)
        fresh_scene.add_light((-1.0, -0.7, 1.0), specular=60.0, diffuse=70.0, ambient=5.0)
        data = fresh_scene.to_dict()

        other = SceneManager()
        other.from_dict(data)

        assert other.to_dict() == data
        assert [s.options for s in other.spheres] == [s.options for s in fresh_scene.spheres]

    def test_from_dict_invalid_surface_type(self, fresh_scene):
        """Test that an unknown surface type raises ValueError."""
        data = {"spheres": [{"center": [0, 0, 0], "radius": 1.0, "surface": {"type": "velvet"}}]}

        with pytest.raises(ValueError, match="Unknown surface type"):
            fresh_scene.from_dict(data)

    def test_json_round_trip(self, fresh_scene, tmp_path: Path):
        """Test saving and loading a JSON scene file."""
        from src.spherecast.scene.manager import SceneManager

        fresh_scene.add_transparent_sphere((0.4, 0.6, -0.3), 0.25, ratio=1.2)
        fresh_scene.add_light((-0.5, 1.0, 1.5), specular=70.0, diffuse=100.0, ambient=5.0)
        filepath = tmp_path / "scene.json"
        fresh_scene.save_json(filepath)

        loaded = SceneManager()
        loaded.load_json(filepath)

        assert loaded.to_dict() == fresh_scene.to_dict()

    def test_load_json_rejects_non_object(self, fresh_scene, tmp_path: Path):
        """Test a JSON file that is not an object is rejected."""
        filepath = tmp_path / "scene.json"
        filepath.write_text(json.dumps([1, 2, 3]), encoding="utf-8")

        with pytest.raises(ValueError, match="JSON object"):
            fresh_scene.load_json(filepath)

    def test_load_example_scene(self, fresh_scene):
        """Test the bundled example scene loads."""
        from src.spherecast.materials.surface import SurfaceKind

        fresh_scene.load_json(EXAMPLE_SCENE)

        assert fresh_scene.get_sphere_count() == 3
        assert fresh_scene.get_light_count() == 2
        assert fresh_scene.spheres[2].options.kind == SurfaceKind.TRANSPARENT
        assert fresh_scene.spheres[2].options.ratio == pytest.approx(1.2)


class TestShowcaseScene:
    """Tests for the showcase scene."""

    def test_contents(self):
        """Test the showcase scene holds five spheres and two lights."""
        from src.spherecast.materials.surface import SurfaceKind
        from src.spherecast.scene.showcase import create_showcase_scene

        scene, camera = create_showcase_scene()

        assert scene.get_sphere_count() == 5
        assert scene.get_light_count() == 2
        assert [s.options.kind for s in scene.spheres] == [
            SurfaceKind.OPAQUE,
            SurfaceKind.OPAQUE,
            SurfaceKind.MIRROR,
            SurfaceKind.MIRROR,
            SurfaceKind.TRANSPARENT,
        ]
        assert scene.camera is camera
        assert camera.origin == (-1.0, 0.0, 0.0)
