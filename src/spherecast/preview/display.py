"""Matplotlib-based preview display for rendered images.

Example:
    >>> from src.spherecast.preview.display import show_preview
    >>> from src.spherecast.core.renderer import Renderer
    >>>
    >>> renderer = Renderer(800, 800)
    >>> show_preview(renderer.render())
"""

from __future__ import annotations

from src.spherecast.preview.image import ImageBuffer


def show_preview(
    buffer: ImageBuffer,
    *,
    title: str | None = None,
    figsize: tuple[float, float] = (8, 8),
    block: bool = True,
) -> None:
    """Display an image buffer as a Matplotlib figure.

    Pixels are shown as stored, without tone mapping or gamma correction.

    Args:
        buffer: The image to display.
        title: Custom title (default shows the image size).
        figsize: Figure size in inches (width, height).
        block: Whether to block execution until figure is closed.
    """
    import matplotlib.pyplot as plt

    fig, ax = plt.subplots(1, 1, figsize=figsize)

    ax.imshow(buffer.to_numpy(), interpolation="nearest")
    ax.axis("off")

    if title is None:
        title = f"Render Preview - {buffer.width}x{buffer.height}"
    ax.set_title(title)

    plt.tight_layout()
    plt.show(block=block)
