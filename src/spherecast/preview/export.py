"""Image export utilities for rendered images.

Supported formats:
    - PPM (binary P6 via Pillow)
    - PNG (8-bit RGB via Pillow)

Renders are usually written to the first unused numbered file,
Picture0.ppm, Picture1.ppm and so on, so repeated runs never overwrite an
earlier image.

Example:
    >>> from src.spherecast.preview.export import save_numbered_ppm
    >>> from src.spherecast.preview.image import ImageBuffer
    >>>
    >>> buffer = ImageBuffer(800, 800)
    >>> save_numbered_ppm(buffer, ".")
    PosixPath('Picture0.ppm')
"""

from __future__ import annotations

import logging
from pathlib import Path

from PIL import Image as PILImage

from src.spherecast.preview.image import ImageBuffer

logger = logging.getLogger(__name__)

# Stem and suffix of numbered output files
PICTURE_STEM = "Picture"
PICTURE_SUFFIX = ".ppm"


def to_pil_image(buffer: ImageBuffer) -> PILImage.Image:
    """Convert an image buffer to a Pillow RGB image."""
    return PILImage.fromarray(buffer.to_numpy())


def save_ppm(buffer: ImageBuffer, filepath: str | Path) -> None:
    """Save an image buffer as a binary (P6) PPM file.

    Args:
        buffer: The image to save.
        filepath: Output file path.
    """
    to_pil_image(buffer).save(filepath, format="PPM")


def save_png(buffer: ImageBuffer, filepath: str | Path) -> None:
    """Save an image buffer as an 8-bit PNG file.

    Args:
        buffer: The image to save.
        filepath: Output file path.
    """
    to_pil_image(buffer).save(filepath, format="PNG")


def next_free_path(
    directory: str | Path = ".",
    stem: str = PICTURE_STEM,
    suffix: str = PICTURE_SUFFIX,
) -> Path:
    """Find the first numbered file name not yet taken in a directory.

    Args:
        directory: Directory to search.
        stem: File name stem.
        suffix: File name suffix, including the dot.

    Returns:
        The path directory/{stem}{n}{suffix} for the smallest unused n.
    """
    base = Path(directory)
    n = 0
    while (base / f"{stem}{n}{suffix}").exists():
        n += 1
    return base / f"{stem}{n}{suffix}"


def save_numbered_ppm(
    buffer: ImageBuffer,
    directory: str | Path = ".",
    stem: str = PICTURE_STEM,
) -> Path:
    """Save an image buffer to the first free numbered PPM file.

    The file is claimed with exclusive creation, so a name taken between the
    search and the write is skipped rather than overwritten.

    Args:
        buffer: The image to save.
        directory: Output directory.
        stem: File name stem.

    Returns:
        The path the image was written to.
    """
    image = to_pil_image(buffer)
    candidate = next_free_path(directory, stem, PICTURE_SUFFIX)
    while True:
        try:
            with open(candidate, "xb") as f:
                image.save(f, format="PPM")
        except FileExistsError:
            candidate = next_free_path(directory, stem, PICTURE_SUFFIX)
            continue
        logger.info("Output stored in %s", candidate)
        return candidate
