"""Light transport dispatcher and render target.

This module resolves the color seen along a ray. The nearest sphere is shaded
locally and then dispatched on its surface variant:

    Opaque       - the base color scaled by the local brightness; terminal.
    Mirror       - a short chain of reflections is followed from the hit
                   point. The chain ends when it escapes (first-bounce or
                   chain miss color), when it reaches an opaque sphere (the
                   walk continues toward that sphere), or when the bounce
                   budget runs out (unresolved color). Transparent spheres
                   met on the way refract the chain without using budget,
                   up to MAX_TRANSPARENT_PASSES refractions per chain.
    Transparent  - the ray is refracted through the sphere and the walk
                   continues with the continuation ray.

Mirror and transparent levels contribute their local brightness plus
MIRROR_BRIGHTNESS_BONUS, applied to whatever color the deeper levels resolve
to. Taichi functions cannot recurse, so the nested calls are flattened into
a loop with an explicit stack of level brightnesses, unwound from the
innermost level outward once the walk terminates. The stack holds at most
MAX_TRACE_DEPTH levels; a walk that would go deeper ends as an unresolved
chain.

Key features:
    - Explicit status for every traced ray (hit, miss, invariant violation)
    - Bounded transport depth
    - Preallocated render target with a per-render invalid pixel counter

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.spherecast.core.integrator import color_along
    >>> from src.spherecast.scene.showcase import create_showcase_scene
    >>>
    >>> scene, camera = create_showcase_scene()
    >>> color_along((-1.0, 0.0, 0.0), (1.0, 0.3, 0.5))
"""

import taichi as ti
import taichi.math as tm

from src.spherecast.camera.pinhole import get_ray
from src.spherecast.core.shading import local_brightness
from src.spherecast.materials.mirror import (
    CHAIN_MISS_COLOR,
    FIRST_BOUNCE_MISS_COLOR,
    MAX_MIRROR_BOUNCES,
    MIRROR_BRIGHTNESS_BONUS,
    UNRESOLVED_MIRROR_COLOR,
    reflect_off_sphere,
)
from src.spherecast.materials.opaque import apply_brightness
from src.spherecast.materials.surface import SurfaceKind
from src.spherecast.materials.transparent import refract_through
from src.spherecast.scene.intersection import (
    nearest_hit,
    sphere_centers,
    sphere_colors,
    sphere_radii,
    sphere_ratios,
    sphere_surface_kinds,
)

# Type aliases
vec3 = tm.vec3
ivec3 = tm.ivec3

# =============================================================================
# Transport Constants
# =============================================================================

# Trace status codes
TRACE_HIT = 0
TRACE_MISS = 1
TRACE_INVALID = 2

# Maximum number of stacked mirror/transparent levels per camera ray
MAX_TRACE_DEPTH = 16

# Maximum number of refractions inside a single mirror chain
MAX_TRANSPARENT_PASSES = 8

# Color of pixels whose ray hits nothing
BACKGROUND_RGB = (10, 10, 10)

# Color of pixels whose ray violated a transport invariant
DIAGNOSTIC_RGB = (255, 0, 255)

BACKGROUND_COLOR = ivec3(*BACKGROUND_RGB)
DIAGNOSTIC_COLOR = ivec3(*DIAGNOSTIC_RGB)

# Mirror chain outcomes
_CHAIN_RESOLVED = 0
_CHAIN_CONTINUE = 1
_CHAIN_INVALID = 2

# How the ray being traced was produced
_FROM_CAMERA = 0
_FROM_TRANSPARENT = 1
_FROM_MIRROR = 2


class TransportInvariantError(RuntimeError):
    """Raised when a traced ray reaches a state the transport rules exclude."""


# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# Image dimensions (actual active size)
_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# 8-bit RGB pixels, indexed [x, y] with y = 0 the top row
_pixels = ti.Vector.field(3, dtype=ti.u8, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# Number of pixels that received the diagnostic color
_invalid_pixels = ti.field(dtype=ti.i32, shape=())

# Flag to track if render target is initialized
_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the render target.

    Sets the active image dimensions and clears the pixels and the invalid
    pixel counter. The buffer is preallocated to MAX_IMAGE_WIDTH x
    MAX_IMAGE_HEIGHT.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If dimensions are not positive or exceed the maximum
            supported size.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the pixels to zero and reset the invalid pixel counter."""
    _pixels.fill(0)
    _invalid_pixels[None] = 0


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions.

    Returns:
        Tuple of (width, height).
    """
    return int(_image_width[None]), int(_image_height[None])


def get_invalid_pixel_count() -> int:
    """Get the number of pixels colored as invariant violations."""
    return int(_invalid_pixels[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


# =============================================================================
# Transport
# =============================================================================


@ti.func
def _follow_mirror_chain(sphere_index: ti.i32, point: vec3, direction: vec3):
    """Follow the reflections leaving a mirror sphere.

    Args:
        sphere_index: The index of the mirror sphere that was hit.
        point: The hit point on the mirror.
        direction: The direction of the ray that hit the mirror.

    Returns:
        A tuple of (outcome, color, origin, direction) where:
        - outcome: _CHAIN_RESOLVED if color is final, _CHAIN_CONTINUE if the
          chain reached an opaque sphere and the walk must continue along
          (origin, direction), _CHAIN_INVALID on a failed refraction.
        - color: The resolved color. Only valid for _CHAIN_RESOLVED.
        - origin, direction: The ray toward the opaque sphere. Only valid
          for _CHAIN_CONTINUE.
    """
    outcome = _CHAIN_RESOLVED
    color = UNRESOLVED_MIRROR_COLOR
    cur_point = point
    cur_dir = reflect_off_sphere(direction, sphere_centers[sphere_index], point)

    bounces = 0
    passes = 0
    first_step = 1
    active = 1

    for _ in range(MAX_MIRROR_BOUNCES + MAX_TRANSPARENT_PASSES):
        if active == 1:
            next_index, t = nearest_hit(cur_point, cur_dir)

            if next_index < 0:
                if first_step == 1:
                    color = FIRST_BOUNCE_MISS_COLOR
                else:
                    color = CHAIN_MISS_COLOR
                active = 0
            else:
                kind = sphere_surface_kinds[next_index]
                hit_point = cur_point + tm.normalize(cur_dir) * t

                if kind == int(SurfaceKind.OPAQUE):
                    outcome = _CHAIN_CONTINUE
                    active = 0
                elif kind == int(SurfaceKind.MIRROR):
                    cur_dir = reflect_off_sphere(cur_dir, sphere_centers[next_index], hit_point)
                    cur_point = hit_point
                    bounces += 1
                    if bounces >= MAX_MIRROR_BOUNCES:
                        # Budget spent without resolving: keep the unresolved color
                        active = 0
                elif passes >= MAX_TRANSPARENT_PASSES:
                    # Pass cap reached: keep the unresolved color
                    active = 0
                else:
                    ok, ray = refract_through(
                        kind,
                        sphere_ratios[next_index],
                        sphere_centers[next_index],
                        sphere_radii[next_index],
                        hit_point,
                        cur_dir,
                    )
                    if ok == 0:
                        outcome = _CHAIN_INVALID
                        active = 0
                    else:
                        cur_point = ray.origin
                        cur_dir = ray.direction
                        passes += 1

            first_step = 0

    return outcome, color, cur_point, cur_dir


@ti.func
def trace_color(origin: vec3, direction: vec3):
    """Resolve the color seen along a ray.

    Args:
        origin: The starting point of the ray.
        direction: The direction of the ray (must not be the zero vector).

    Returns:
        A tuple of (status, color) where:
        - status: TRACE_HIT, TRACE_MISS if the ray hits no sphere, or
          TRACE_INVALID if a transport invariant was violated.
        - color: The 8-bit RGB color. Only valid if status == TRACE_HIT.
    """
    # Brightness of each stacked mirror/transparent level, outermost first
    levels = ti.Vector([0.0] * MAX_TRACE_DEPTH)
    depth = 0

    status = TRACE_HIT
    color = ivec3(0, 0, 0)
    cur_origin = origin
    cur_dir = direction
    source = _FROM_CAMERA
    active = 1

    # Each iteration either terminates the walk or stacks one level
    for _ in range(MAX_TRACE_DEPTH + 1):
        if active == 1:
            index, t = nearest_hit(cur_origin, cur_dir)

            if index < 0:
                if source == _FROM_CAMERA:
                    status = TRACE_MISS
                elif source == _FROM_TRANSPARENT:
                    color = CHAIN_MISS_COLOR
                else:
                    # A mirror chain only continues toward a sphere it has hit
                    status = TRACE_INVALID
                active = 0
            else:
                point = cur_origin + tm.normalize(cur_dir) * t
                brightness = local_brightness(index, point, cur_dir)
                kind = sphere_surface_kinds[index]

                if kind == int(SurfaceKind.OPAQUE):
                    color = apply_brightness(sphere_colors[index], brightness)
                    active = 0
                elif depth >= MAX_TRACE_DEPTH:
                    color = CHAIN_MISS_COLOR
                    active = 0
                else:
                    for k in ti.static(range(MAX_TRACE_DEPTH)):
                        if k == depth:
                            levels[k] = brightness + MIRROR_BRIGHTNESS_BONUS
                    depth += 1

                    if kind == int(SurfaceKind.MIRROR):
                        outcome, chain_color, next_origin, next_dir = _follow_mirror_chain(
                            index, point, cur_dir
                        )
                        if outcome == _CHAIN_RESOLVED:
                            color = chain_color
                            active = 0
                        elif outcome == _CHAIN_CONTINUE:
                            cur_origin = next_origin
                            cur_dir = next_dir
                            source = _FROM_MIRROR
                        else:
                            status = TRACE_INVALID
                            active = 0
                    else:
                        ok, ray = refract_through(
                            kind,
                            sphere_ratios[index],
                            sphere_centers[index],
                            sphere_radii[index],
                            point,
                            cur_dir,
                        )
                        if ok == 0:
                            status = TRACE_INVALID
                            active = 0
                        else:
                            cur_origin = ray.origin
                            cur_dir = ray.direction
                            source = _FROM_TRANSPARENT

    if status == TRACE_HIT:
        # Unwind: innermost level first
        for k in ti.static(range(MAX_TRACE_DEPTH)):
            level = MAX_TRACE_DEPTH - 1 - k
            if level < depth:
                color = apply_brightness(color, levels[level])

    return status, color


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.func
def _store_pixel(x: ti.i32, y: ti.i32, status: ti.i32, color: ivec3):
    """Write a traced color to the render target.

    Misses take the background color. Invariant violations take the
    diagnostic color and are counted in the invalid pixel counter.
    """
    out = color
    if status == TRACE_MISS:
        out = BACKGROUND_COLOR
    elif status == TRACE_INVALID:
        out = DIAGNOSTIC_COLOR
        ti.atomic_add(_invalid_pixels[None], 1)

    _pixels[x, y] = ti.cast(out, ti.u8)


@ti.kernel
def _render_rows(width: ti.i32, height: ti.i32, row_start: ti.i32, row_end: ti.i32):
    """Cast one ray per pixel for the rows [row_start, row_end)."""
    for x, y in ti.ndrange(width, (row_start, row_end)):
        ray = get_ray(x, y, width, height)
        status, color = trace_color(ray.origin, ray.direction)
        _store_pixel(x, y, status, color)


@ti.kernel
def _trace_single(origin: vec3, direction: vec3) -> tm.ivec4:
    status, color = trace_color(origin, direction)
    return tm.ivec4(status, color[0], color[1], color[2])


# =============================================================================
# Public Rendering API
# =============================================================================


def trace(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
) -> tuple[int, tuple[int, int, int]]:
    """Trace a single ray and return its raw status and color.

    Args:
        origin: The ray origin.
        direction: The ray direction (must not be the zero vector).

    Returns:
        Tuple of (status, (R, G, B)). The color is only meaningful for
        TRACE_HIT.
    """
    result = _trace_single(vec3(*origin), vec3(*direction))
    return int(result[0]), (int(result[1]), int(result[2]), int(result[3]))


def color_along(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
) -> tuple[int, int, int] | None:
    """Get the color seen along a ray.

    This is a Python-callable function for tests and tools. For whole images
    use render_rows(), which processes pixels in parallel.

    Args:
        origin: The ray origin.
        direction: The ray direction (must not be the zero vector).

    Returns:
        Tuple of (R, G, B), or None if the ray hits no sphere.

    Raises:
        TransportInvariantError: If the ray violated a transport invariant.
    """
    status, color = trace(origin, direction)
    if status == TRACE_MISS:
        return None
    if status == TRACE_INVALID:
        raise TransportInvariantError(
            f"Transport invariant violated for ray {origin} -> {direction}"
        )
    return color


def render_rows(row_start: int, row_end: int) -> None:
    """Render a band of rows into the render target.

    Rows outside the image are ignored.

    Args:
        row_start: First row to render (0 = top).
        row_end: One past the last row to render.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    row_start = max(row_start, 0)
    row_end = min(row_end, height)
    if row_start >= row_end:
        return

    _render_rows(width, height, row_start, row_end)


def render_image() -> None:
    """Render every row of the render target.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    _, height = get_image_dimensions()
    render_rows(0, height)


def get_image_numpy():
    """Get the rendered image as a NumPy array.

    The array shape is (height, width, 3) with dtype uint8; row 0 is the top
    of the image.

    Returns:
        NumPy array of shape (height, width, 3).

    Raises:
        RuntimeError: If render target has not been set up.
    """
    import numpy as np

    _check_render_target_initialized()

    width, height = get_image_dimensions()

    # Get raw image data (full buffer) and extract the active region
    full_image = _pixels.to_numpy()
    image = full_image[:width, :height, :]

    # Transpose from (width, height, 3) to (height, width, 3) for standard image format
    image = np.transpose(image, (1, 0, 2))

    return np.ascontiguousarray(image, dtype=np.uint8)
