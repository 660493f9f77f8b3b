"""Opaque surface color resolution.

An opaque surface is shaded directly: each channel of the base color is
scaled by the accumulated brightness and quantized back to 8 bits,

    channel_out = clamp(floor(channel * brightness / 255), 0, 255)

Mirror and transparent surfaces reuse the same scale-and-clamp on the color
they resolve through reflection or refraction.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.spherecast.materials.opaque import apply_brightness
    >>> # Inside a Taichi kernel:
    >>> # rgb = apply_brightness(ti.math.ivec3(255, 0, 0), 100.0)  # (100, 0, 0)
"""

import taichi as ti
import taichi.math as tm

# Type alias for 8-bit RGB colors held in 32-bit integer vectors
ivec3 = tm.ivec3

# Brightness at which a color is reproduced unchanged
FULL_BRIGHTNESS = 255.0


@ti.func
def apply_brightness(color: ivec3, brightness: ti.f32) -> ivec3:
    """Scale an 8-bit color by a brightness and clamp it to [0, 255].

    Args:
        color: The color to scale, channels in [0, 255].
        brightness: The accumulated brightness. 255 keeps the color as is.

    Returns:
        The scaled color, floored and clamped per channel.
    """
    scaled = ti.floor(ti.cast(color, ti.f32) * brightness / FULL_BRIGHTNESS)
    return ti.cast(tm.clamp(scaled, 0.0, 255.0), ti.i32)
