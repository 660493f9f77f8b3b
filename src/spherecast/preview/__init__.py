"""Preview module for output and visualization.

Components:
    image: 8-bit RGB image buffer
    export: PPM/PNG export and numbered output files
    display: Matplotlib-based preview display

Example:
    >>> from src.spherecast.preview import save_numbered_ppm, show_preview
    >>> from src.spherecast.core.renderer import Renderer
    >>>
    >>> image = Renderer(800, 800).render()
    >>> save_numbered_ppm(image)
    >>> show_preview(image)
"""

from src.spherecast.preview.display import show_preview
from src.spherecast.preview.export import (
    next_free_path,
    save_numbered_ppm,
    save_png,
    save_ppm,
    to_pil_image,
)
from src.spherecast.preview.image import ImageBuffer

__all__ = [
    "ImageBuffer",
    # Display functions
    "show_preview",
    # Export functions
    "save_ppm",
    "save_png",
    "save_numbered_ppm",
    "next_free_path",
    "to_pil_image",
]
