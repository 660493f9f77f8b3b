"""Render driver producing finished images.

This module wraps the integrator's render target to provide:
- Row-batched rendering with progress callbacks
- A generator variant for iterative processing
- Conversion of the result to an ImageBuffer and saving it to disk
- Reporting of transport diagnostics through logging

Rendering is a single pass; every pixel is final once its row is rendered.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.spherecast.core.renderer import Renderer
    >>> from src.spherecast.scene.showcase import create_showcase_scene
    >>>
    >>> scene, camera = create_showcase_scene()
    >>> renderer = Renderer(800, 800, camera=camera)
    >>> image = renderer.render(batch_size=100)
    >>> renderer.save_image("Picture0.ppm")
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Generator
from pathlib import Path

import numpy as np
import numpy.typing as npt

from src.spherecast.camera.pinhole import PinholeCamera, setup_camera
from src.spherecast.core.integrator import (
    clear_render_target,
    get_image_numpy,
    get_invalid_pixel_count,
    render_rows,
    setup_render_target,
)
from src.spherecast.core.shading import get_negative_term_count, reset_shading_diagnostics
from src.spherecast.preview.export import save_png, save_ppm
from src.spherecast.preview.image import ImageBuffer

logger = logging.getLogger(__name__)

# Type alias for progress callback
# Callback receives (rows_done, rows_total)
ProgressCallback = Callable[[int, int], None]


class Renderer:
    """A renderer that casts one ray per pixel in batches of rows.

    The renderer delegates to the global integrator render target (a Taichi
    field), so only one image is rendered at a time.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
    """

    def __init__(self, width: int, height: int, camera: PinholeCamera | None = None) -> None:
        """Initialize the renderer.

        Args:
            width: Image width in pixels (max 2048).
            height: Image height in pixels (max 2048).
            camera: Camera to set up. When omitted, the camera currently set
                up is used.

        Raises:
            ValueError: If dimensions are invalid or the camera is degenerate.
        """
        self._width = width
        self._height = height
        self._rows_done = 0
        setup_render_target(width, height)
        if camera is not None:
            setup_camera(camera)

    @property
    def width(self) -> int:
        """Get the image width."""
        return self._width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self._height

    @property
    def rows_done(self) -> int:
        """Get the number of rows rendered since the last reset."""
        return self._rows_done

    @property
    def diagnostics(self) -> dict[str, int]:
        """Get the transport diagnostics of the current render.

        Returns:
            Dictionary with the number of invalid pixels and of clamped
            negative illumination terms.
        """
        return {
            "invalid_pixels": get_invalid_pixel_count(),
            "negative_terms": get_negative_term_count(),
        }

    def reset(self) -> None:
        """Clear the image and the diagnostics for a fresh render."""
        clear_render_target()
        reset_shading_diagnostics()
        self._rows_done = 0

    def render_progressive(
        self,
        batch_size: int | None = None,
    ) -> Generator[tuple[int, int], None, None]:
        """Render the image, yielding progress after each batch of rows.

        This is a generator-based alternative to render() with callbacks,
        useful for iterative processing or cancellation.

        Args:
            batch_size: Number of rows per batch. Defaults to the full image.

        Yields:
            Tuple of (rows_done, rows_total).

        Raises:
            ValueError: If batch_size is not positive.
        """
        if batch_size is None:
            batch_size = self._height
        if batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {batch_size}")

        self.reset()
        while self._rows_done < self._height:
            row_end = min(self._rows_done + batch_size, self._height)
            render_rows(self._rows_done, row_end)
            self._rows_done = row_end
            yield (self._rows_done, self._height)

        self._report_diagnostics()

    def render(
        self,
        batch_size: int | None = None,
        callback: ProgressCallback | None = None,
    ) -> ImageBuffer:
        """Render the whole image.

        Args:
            batch_size: Number of rows to render before each callback.
                Defaults to the full image in one batch.
            callback: Optional callback function called after each batch.
                Receives (rows_done, rows_total).

        Returns:
            The rendered image.

        Example:
            >>> def progress(done, total):
            ...     print(f"Progress: {done}/{total} rows")
            >>> image = renderer.render(batch_size=100, callback=progress)
        """
        for done, total in self.render_progressive(batch_size):
            if callback is not None:
                callback(done, total)
        return self.to_image_buffer()

    def _report_diagnostics(self) -> None:
        diagnostics = self.diagnostics
        if diagnostics["invalid_pixels"] > 0:
            logger.warning(
                "%d pixel(s) violated a transport invariant and were marked",
                diagnostics["invalid_pixels"],
            )
        if diagnostics["negative_terms"] > 0:
            logger.warning(
                "%d negative illumination term(s) were clamped to zero; "
                "check for negative surface or light coefficients",
                diagnostics["negative_terms"],
            )

    def get_image_numpy(self) -> npt.NDArray[np.uint8]:
        """Get the rendered image as a (height, width, 3) uint8 array."""
        return get_image_numpy()

    def to_image_buffer(self) -> ImageBuffer:
        """Copy the rendered image into an ImageBuffer."""
        return ImageBuffer.from_numpy(self.get_image_numpy())

    def save_image(self, filepath: str | Path) -> None:
        """Save the rendered image to a file.

        The format follows the suffix: .png writes PNG, anything else a
        binary PPM.

        Args:
            filepath: Output file path.
        """
        buffer = self.to_image_buffer()
        if Path(filepath).suffix.lower() == ".png":
            save_png(buffer, filepath)
        else:
            save_ppm(buffer, filepath)

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return (
            f"Renderer(width={self.width}, height={self.height}, "
            f"rows_done={self.rows_done})"
        )
