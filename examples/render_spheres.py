#!/usr/bin/env python3
"""Render a sphere scene to an image file.

Renders the built-in showcase scene, or a scene loaded from JSON, casting
one ray per pixel, and saves the result.

Usage:
    python -m examples.render_spheres [options]

Options:
    --width WIDTH       Image width in pixels (default: SHOWCASE_WIDTH)
    --height HEIGHT     Image height in pixels (default: SHOWCASE_HEIGHT)
    --output OUTPUT     Output file path, .ppm or .png
                        (default: first free PictureN.ppm)
    --scene SCENE       Scene JSON file (default: showcase scene)
    --batch-size SIZE   Rows per progress update (default: 50)
    --debug             Enable Taichi debug mode (kernel asserts)
    --cpu               Force the CPU backend
    --preview           Show the result in a Matplotlib window
    --quiet             Suppress progress output
    --verbose           Enable log output

Example:
    python -m examples.render_spheres --scene examples/scenes/two_lights.json --output out.png
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

import taichi as ti


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a sphere scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=None,
        help="Image width in pixels (default: SHOWCASE_WIDTH)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=None,
        help="Image height in pixels (default: SHOWCASE_HEIGHT)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Output file path, .ppm or .png (default: first free PictureN.ppm)",
    )
    parser.add_argument(
        "--scene",
        type=str,
        default=None,
        help="Scene JSON file (default: showcase scene)",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=50,
        help="Rows per progress update (default: 50)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable Taichi debug mode (kernel asserts)",
    )
    parser.add_argument(
        "--cpu",
        action="store_true",
        help="Force the CPU backend",
    )
    parser.add_argument(
        "--preview",
        action="store_true",
        help="Show the result in a Matplotlib window",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable log output",
    )
    return parser.parse_args()


def render_spheres(
    width: int | None = None,
    height: int | None = None,
    output_path: str | None = None,
    scene_path: str | None = None,
    batch_size: int = 50,
    preview: bool = False,
    quiet: bool = False,
) -> Path:
    """Render a sphere scene and save it to file.

    Args:
        width: Image width in pixels. Defaults to SHOWCASE_WIDTH.
        height: Image height in pixels. Defaults to SHOWCASE_HEIGHT.
        output_path: Output file path. When None, the image is written to
            the first free PictureN.ppm in the working directory.
        scene_path: Scene JSON file. When None, the showcase scene is used.
        batch_size: Number of rows to render between progress updates.
        preview: If True, show the result in a Matplotlib window.
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from src.spherecast.core.renderer import Renderer
    from src.spherecast.preview.display import show_preview
    from src.spherecast.preview.export import save_numbered_ppm
    from src.spherecast.scene.manager import SceneManager
    from src.spherecast.scene.showcase import SHOWCASE_HEIGHT, SHOWCASE_WIDTH, create_showcase_scene

    if width is None:
        width = SHOWCASE_WIDTH
    if height is None:
        height = SHOWCASE_HEIGHT

    if scene_path is None:
        if not quiet:
            print(f"Creating showcase scene ({width}x{height})...")
        scene, camera = create_showcase_scene()
    else:
        if not quiet:
            print(f"Loading scene from {scene_path} ({width}x{height})...")
        scene = SceneManager()
        scene.load_json(scene_path)
        camera = scene.camera

    renderer = Renderer(width, height, camera=camera)

    if not quiet:
        print(
            f"Rendering {scene.get_sphere_count()} sphere(s) "
            f"lit by {scene.get_light_count()} light(s)..."
        )

    start_time = time.time()

    def progress_callback(done: int, total: int) -> None:
        if not quiet:
            elapsed = time.time() - start_time
            progress_pct = (done / total) * 100 if total > 0 else 0
            rows_per_sec = done / elapsed if elapsed > 0 else 0
            print(
                f"\r  Progress: {done}/{total} rows "
                f"({progress_pct:.1f}%) - {rows_per_sec:.1f} rows/s",
                end="",
                flush=True,
            )

    image = renderer.render(batch_size=batch_size, callback=progress_callback)

    if not quiet:
        print()  # Newline after progress

    if output_path is None:
        output_file = save_numbered_ppm(image)
    else:
        output_file = Path(output_path)
        renderer.save_image(output_file)

    total_time = time.time() - start_time
    if not quiet:
        diagnostics = renderer.diagnostics
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {total_time:.2f}s")
        if diagnostics["invalid_pixels"] > 0:
            print(f"Invalid pixels: {diagnostics['invalid_pixels']}")

    if preview:
        show_preview(image)

    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    # Initialize Taichi
    # Use GPU if available, fall back to CPU
    if args.cpu:
        ti.init(arch=ti.cpu, debug=args.debug)
        if not args.quiet:
            print("Using CPU backend")
    else:
        try:
            ti.init(arch=ti.gpu, debug=args.debug)
            if not args.quiet:
                print("Using GPU backend")
        except Exception:
            ti.init(arch=ti.cpu, debug=args.debug)
            if not args.quiet:
                print("Using CPU backend")

    try:
        render_spheres(
            width=args.width,
            height=args.height,
            output_path=args.output,
            scene_path=args.scene,
            batch_size=args.batch_size,
            preview=args.preview,
            quiet=args.quiet,
        )
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
