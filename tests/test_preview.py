"""Tests for the preview module (image buffer, export and display).

This module tests:
- ImageBuffer bounds checking, clamping and NumPy conversion
- PPM and PNG export
- Numbered output files
- Matplotlib preview figure
"""

from pathlib import Path

import numpy as np
import pytest
from PIL import Image as PILImage


class TestImageBuffer:
    """Test the host-side image buffer."""

    def test_new_buffer_is_black(self):
        """Test a new buffer starts black with the requested size."""
        from src.spherecast.preview.image import ImageBuffer

        buffer = ImageBuffer(4, 3)

        assert (buffer.width, buffer.height) == (4, 3)
        assert buffer.to_numpy().shape == (3, 4, 3)
        assert not buffer.to_numpy().any()

    @pytest.mark.parametrize("width, height", [(0, 1), (1, 0), (-3, 2)])
    def test_invalid_dimensions(self, width, height):
        """Test non-positive dimensions are rejected."""
        from src.spherecast.preview.image import ImageBuffer

        with pytest.raises(ValueError):
            ImageBuffer(width, height)

    def test_set_and_get_pixel(self):
        """Test a written pixel reads back unchanged."""
        from src.spherecast.preview.image import ImageBuffer

        buffer = ImageBuffer(4, 3)

        assert buffer.set_pixel(3, 2, (10, 20, 30)) is True
        assert buffer.get_pixel(3, 2) == (10, 20, 30)
        # Row-major storage: row 2, column 3
        assert tuple(buffer.to_numpy()[2, 3]) == (10, 20, 30)

    @pytest.mark.parametrize("x, y", [(-1, 0), (0, -1), (4, 0), (0, 3)])
    def test_set_pixel_out_of_range(self, x, y):
        """Test out-of-range writes are refused and change nothing."""
        from src.spherecast.preview.image import ImageBuffer

        buffer = ImageBuffer(4, 3)

        assert buffer.set_pixel(x, y, (255, 255, 255)) is False
        assert not buffer.to_numpy().any()

    def test_get_pixel_out_of_range(self):
        """Test out-of-range reads raise IndexError."""
        from src.spherecast.preview.image import ImageBuffer

        with pytest.raises(IndexError):
            ImageBuffer(2, 2).get_pixel(2, 0)

    def test_channels_are_clamped(self):
        """Test channel values are clamped to [0, 255]."""
        from src.spherecast.preview.image import ImageBuffer

        buffer = ImageBuffer(1, 1)
        buffer.set_pixel(0, 0, (300, -5, 128))

        assert buffer.get_pixel(0, 0) == (255, 0, 128)

    def test_fill(self):
        """Test fill sets every pixel."""
        from src.spherecast.preview.image import ImageBuffer

        buffer = ImageBuffer(3, 2)
        buffer.fill((10, 10, 10))

        assert (buffer.to_numpy() == 10).all()

    def test_to_numpy_returns_copy(self):
        """Test mutating the exported array leaves the buffer intact."""
        from src.spherecast.preview.image import ImageBuffer

        buffer = ImageBuffer(2, 2)
        array = buffer.to_numpy()
        array[:] = 255

        assert buffer.get_pixel(0, 0) == (0, 0, 0)

    def test_from_numpy(self):
        """Test building a buffer from an (H, W, 3) array."""
        from src.spherecast.preview.image import ImageBuffer

        array = np.zeros((2, 5, 3), dtype=np.int32)
        array[1, 4] = (400, 20, -1)

        buffer = ImageBuffer.from_numpy(array)

        assert (buffer.width, buffer.height) == (5, 2)
        assert buffer.get_pixel(4, 1) == (255, 20, 0)

    def test_from_numpy_shape_mismatch_raises(self):
        """Test arrays that are not (H, W, 3) are rejected."""
        from src.spherecast.preview.image import ImageBuffer

        with pytest.raises(ValueError):
            ImageBuffer.from_numpy(np.zeros((4, 4), dtype=np.uint8))
        with pytest.raises(ValueError):
            ImageBuffer.from_numpy(np.zeros((4, 4, 4), dtype=np.uint8))

    def test_equality(self):
        """Test buffers compare by pixel content."""
        from src.spherecast.preview.image import ImageBuffer

        a = ImageBuffer(2, 2)
        b = ImageBuffer(2, 2)
        assert a == b

        b.set_pixel(1, 1, (1, 0, 0))
        assert a != b


def _gradient_buffer():
    from src.spherecast.preview.image import ImageBuffer

    array = np.zeros((4, 6, 3), dtype=np.uint8)
    array[..., 0] = np.arange(6, dtype=np.uint8) * 40
    array[..., 1] = (np.arange(4, dtype=np.uint8) * 60)[:, None]
    array[..., 2] = 7
    return ImageBuffer.from_numpy(array)


class TestExport:
    """Test image export functionality."""

    def test_save_ppm_writes_binary_p6(self, tmp_path: Path):
        """Test PPM output is a binary P6 file with the right pixels."""
        from src.spherecast.preview.export import save_ppm

        buffer = _gradient_buffer()
        filepath = tmp_path / "out.ppm"
        save_ppm(buffer, filepath)

        assert filepath.read_bytes().startswith(b"P6")
        with PILImage.open(filepath) as img:
            assert img.size == (6, 4)
            assert np.array_equal(np.asarray(img), buffer.to_numpy())

    def test_save_png_creates_file(self, tmp_path: Path):
        """Test PNG output round-trips the pixels."""
        from src.spherecast.preview.export import save_png

        buffer = _gradient_buffer()
        filepath = tmp_path / "out.png"
        save_png(buffer, filepath)

        with PILImage.open(filepath) as img:
            assert img.mode == "RGB"
            assert np.array_equal(np.asarray(img), buffer.to_numpy())

    def test_next_free_path(self, tmp_path: Path):
        """Test the first unused number is chosen."""
        from src.spherecast.preview.export import next_free_path

        assert next_free_path(tmp_path) == tmp_path / "Picture0.ppm"

        (tmp_path / "Picture0.ppm").touch()
        (tmp_path / "Picture1.ppm").touch()
        (tmp_path / "Picture3.ppm").touch()

        assert next_free_path(tmp_path) == tmp_path / "Picture2.ppm"

    def test_save_numbered_ppm_never_overwrites(self, tmp_path: Path):
        """Test repeated saves land in consecutive files."""
        from src.spherecast.preview.export import save_numbered_ppm
        from src.spherecast.preview.image import ImageBuffer

        first = save_numbered_ppm(ImageBuffer(2, 2), tmp_path)
        second = save_numbered_ppm(_gradient_buffer(), tmp_path)

        assert first == tmp_path / "Picture0.ppm"
        assert second == tmp_path / "Picture1.ppm"
        with PILImage.open(first) as img:
            assert img.size == (2, 2)

    def test_save_numbered_ppm_custom_stem(self, tmp_path: Path):
        """Test the file name stem can be changed."""
        from src.spherecast.preview.export import save_numbered_ppm
        from src.spherecast.preview.image import ImageBuffer

        path = save_numbered_ppm(ImageBuffer(1, 1), tmp_path, stem="Frame")

        assert path.name == "Frame0.ppm"


class TestDisplay:
    """Test the Matplotlib preview."""

    def test_show_preview_builds_figure(self, monkeypatch):
        """Test the preview shows the pixels with a size title."""
        import matplotlib

        matplotlib.use("Agg")
        import matplotlib.pyplot as plt

        from src.spherecast.preview.display import show_preview

        shown = []
        monkeypatch.setattr(plt, "show", lambda block=True: shown.append(block))

        buffer = _gradient_buffer()
        show_preview(buffer, block=False)

        ax = plt.gcf().axes[0]
        assert shown == [False]
        assert ax.get_title() == "Render Preview - 6x4"
        assert np.array_equal(np.asarray(ax.images[0].get_array()), buffer.to_numpy())
        plt.close("all")

    def test_preview_exports(self):
        """Test that the preview package exports the expected names."""
        from src.spherecast import preview

        for name in ("ImageBuffer", "show_preview", "save_ppm", "save_png", "save_numbered_ppm"):
            assert hasattr(preview, name)
