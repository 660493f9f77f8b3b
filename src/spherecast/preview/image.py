"""Host-side 8-bit RGB image buffer.

The buffer is a (height, width, 3) uint8 NumPy array addressed by pixel
column x and row y, with (0, 0) the top-left pixel.

Example:
    >>> from src.spherecast.preview.image import ImageBuffer
    >>> buffer = ImageBuffer(4, 2)
    >>> buffer.set_pixel(3, 1, (255, 0, 0))
    True
    >>> buffer.set_pixel(4, 1, (255, 0, 0))  # Out of range
    False
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np
import numpy.typing as npt


class ImageBuffer:
    """A fixed-size grid of 8-bit RGB pixels.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
    """

    def __init__(self, width: int, height: int) -> None:
        """Create a black image.

        Raises:
            ValueError: If either dimension is not positive.
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
        self._width = width
        self._height = height
        self._data = np.zeros((height, width, 3), dtype=np.uint8)

    @property
    def width(self) -> int:
        """Get the image width."""
        return self._width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self._height

    def contains(self, x: int, y: int) -> bool:
        """Check whether (x, y) addresses a pixel of this image."""
        return 0 <= x < self._width and 0 <= y < self._height

    def set_pixel(self, x: int, y: int, color: Sequence[int]) -> bool:
        """Write a pixel.

        Channel values are clamped to [0, 255].

        Args:
            x: Pixel column.
            y: Pixel row.
            color: (R, G, B) values.

        Returns:
            True if the pixel was written, False if (x, y) is out of range.
        """
        if not self.contains(x, y):
            return False
        self._data[y, x] = np.clip(np.asarray(color[:3], dtype=np.int64), 0, 255)
        return True

    def get_pixel(self, x: int, y: int) -> tuple[int, int, int]:
        """Read a pixel.

        Raises:
            IndexError: If (x, y) is out of range.
        """
        if not self.contains(x, y):
            raise IndexError(f"Pixel ({x}, {y}) outside {self._width}x{self._height} image")
        r, g, b = self._data[y, x]
        return int(r), int(g), int(b)

    def fill(self, color: Sequence[int]) -> None:
        """Set every pixel to one color."""
        self._data[:, :] = np.clip(np.asarray(color[:3], dtype=np.int64), 0, 255)

    def to_numpy(self) -> npt.NDArray[np.uint8]:
        """Get a copy of the pixels as a (height, width, 3) uint8 array."""
        return self._data.copy()

    @classmethod
    def from_numpy(cls, array: npt.NDArray[np.generic]) -> ImageBuffer:
        """Build a buffer from a (height, width, 3) array.

        Values are clamped to [0, 255] and converted to uint8.

        Raises:
            ValueError: If the array does not have shape (height, width, 3).
        """
        if array.ndim != 3 or array.shape[2] != 3:
            raise ValueError(f"Expected an array of shape (H, W, 3), got {array.shape}")
        height, width = array.shape[:2]
        buffer = cls(width, height)
        buffer._data[...] = np.clip(array, 0, 255).astype(np.uint8)
        return buffer

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ImageBuffer):
            return NotImplemented
        return bool(np.array_equal(self._data, other._data))

    def __repr__(self) -> str:
        """Return a string representation of the buffer."""
        return f"ImageBuffer(width={self._width}, height={self._height})"
