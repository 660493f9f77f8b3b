"""Materials module for the closed set of sphere surfaces.

Components:
    surface: SurfaceKind tags, the Opaque/Mirror/Transparent variants and
        SurfaceOptions (reflectance coefficients plus variant)
    opaque: Brightness scaling and 8-bit clamping of colors
    mirror: Mirror reflection about the sphere normal and the mirror
        bounce constants
    transparent: Thin-lens refraction with total internal reflection

The per-ray routines are Taichi functions; the surface variants themselves
are host-side dataclasses that the scene encodes into Taichi fields.
"""

from .mirror import (
    CHAIN_MISS_COLOR,
    CHAIN_MISS_RGB,
    FIRST_BOUNCE_MISS_COLOR,
    FIRST_BOUNCE_MISS_RGB,
    MAX_MIRROR_BOUNCES,
    MIRROR_BRIGHTNESS_BONUS,
    UNRESOLVED_MIRROR_COLOR,
    UNRESOLVED_MIRROR_RGB,
    reflect_off_sphere,
)
from .opaque import FULL_BRIGHTNESS, apply_brightness
from .surface import (
    Mirror,
    Opaque,
    SurfaceKind,
    SurfaceOptions,
    SurfaceVariant,
    Transparent,
    surface_kind_of,
)
from .transparent import refract_through, will_reflect

__all__ = [
    # Surface model
    "SurfaceKind",
    "SurfaceOptions",
    "SurfaceVariant",
    "Opaque",
    "Mirror",
    "Transparent",
    "surface_kind_of",
    # Opaque
    "apply_brightness",
    "FULL_BRIGHTNESS",
    # Mirror
    "reflect_off_sphere",
    "MAX_MIRROR_BOUNCES",
    "MIRROR_BRIGHTNESS_BONUS",
    "FIRST_BOUNCE_MISS_RGB",
    "CHAIN_MISS_RGB",
    "UNRESOLVED_MIRROR_RGB",
    "FIRST_BOUNCE_MISS_COLOR",
    "CHAIN_MISS_COLOR",
    "UNRESOLVED_MIRROR_COLOR",
    # Transparent
    "refract_through",
    "will_reflect",
]
