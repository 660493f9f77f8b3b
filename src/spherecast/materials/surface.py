"""Surface model shared by every sphere.

A sphere's surface is one of a closed set of variants:

    Opaque(color)       - shaded directly with its base color
    Mirror()            - ideal mirror, color comes from what it reflects
    Transparent(ratio)  - thin-lens refraction with a refractive index ratio

Inside Taichi kernels the variant is encoded as a SurfaceKind tag plus the
payload fields, stored per sphere by the scene. On the host the variants are
frozen dataclasses and SurfaceOptions bundles them with the Phong-style
reflectance coefficients.

Example:
    >>> from src.spherecast.materials.surface import Opaque, SurfaceOptions
    >>> options = SurfaceOptions(
    ...     specular=1.3, diffuse=1.5, ambient=1.0, shininess=100.0,
    ...     surface=Opaque(color=(77, 248, 255)),
    ... )
    >>> options.kind
    <SurfaceKind.OPAQUE: 0>
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Union


class SurfaceKind(IntEnum):
    """Tag of the surface variant, used for dispatch inside kernels."""

    OPAQUE = 0
    MIRROR = 1
    TRANSPARENT = 2


@dataclass(frozen=True)
class Opaque:
    """Opaque colored surface.

    Attributes:
        color: Base color as 8-bit (R, G, B), each channel in [0, 255].
    """

    color: tuple[int, int, int]

    def __post_init__(self) -> None:
        if len(self.color) != 3:
            raise ValueError(f"Opaque color must have 3 channels, got {self.color!r}")
        for channel in self.color:
            if int(channel) != channel or not 0 <= channel <= 255:
                raise ValueError(
                    f"Opaque color channel {channel!r} is not an integer in [0, 255]"
                )


@dataclass(frozen=True)
class Mirror:
    """Ideal mirror surface."""


@dataclass(frozen=True)
class Transparent:
    """Transparent refracting surface.

    Attributes:
        ratio: Refractive index ratio applied to the sine of the incidence
            angle (sin_refracted = sin_incident * ratio).
    """

    ratio: float


SurfaceVariant = Union[Opaque, Mirror, Transparent]


def surface_kind_of(surface: SurfaceVariant) -> SurfaceKind:
    """Get the kernel-side tag for a surface variant.

    Raises:
        TypeError: If surface is not one of Opaque, Mirror or Transparent.
    """
    if isinstance(surface, Opaque):
        return SurfaceKind.OPAQUE
    if isinstance(surface, Mirror):
        return SurfaceKind.MIRROR
    if isinstance(surface, Transparent):
        return SurfaceKind.TRANSPARENT
    raise TypeError(f"Unknown surface variant: {surface!r}")


@dataclass(frozen=True)
class SurfaceOptions:
    """Reflectance coefficients and surface variant of a sphere.

    The coefficients are non-negative by convention but this is not
    enforced. Negative shading terms are caught while rendering.

    Attributes:
        specular: Specular reflectance coefficient.
        diffuse: Diffuse reflectance coefficient (only used by Opaque).
        ambient: Ambient reflectance coefficient.
        shininess: Specular exponent, larger for tighter highlights.
        surface: The surface variant.
    """

    specular: float
    diffuse: float
    ambient: float
    shininess: float
    surface: SurfaceVariant

    def __post_init__(self) -> None:
        # Fail early on anything that is not a known variant
        surface_kind_of(self.surface)

    @property
    def kind(self) -> SurfaceKind:
        """The SurfaceKind tag of this surface."""
        return surface_kind_of(self.surface)

    @property
    def color(self) -> tuple[int, int, int]:
        """The base color, (0, 0, 0) for non-opaque surfaces."""
        if isinstance(self.surface, Opaque):
            return self.surface.color
        return (0, 0, 0)

    @property
    def ratio(self) -> float:
        """The refractive index ratio, 0.0 for non-transparent surfaces."""
        if isinstance(self.surface, Transparent):
            return self.surface.ratio
        return 0.0

    def to_dict(self) -> dict[str, Any]:
        """Export the options to a JSON-friendly dictionary."""
        surface: dict[str, Any] = {"type": self.kind.name.lower()}
        if isinstance(self.surface, Opaque):
            surface["color"] = list(self.surface.color)
        elif isinstance(self.surface, Transparent):
            surface["ratio"] = self.surface.ratio
        return {
            "specular": self.specular,
            "diffuse": self.diffuse,
            "ambient": self.ambient,
            "shininess": self.shininess,
            "surface": surface,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SurfaceOptions:
        """Build options from a dictionary produced by to_dict().

        Raises:
            ValueError: If the surface type is unknown or its payload invalid.
        """
        surface_data = data.get("surface", {"type": "opaque"})
        surface_type = str(surface_data.get("type", "")).lower()
        surface: SurfaceVariant
        if surface_type == "opaque":
            color_list = surface_data.get("color", [255, 255, 255])
            surface = Opaque(color=(color_list[0], color_list[1], color_list[2]))
        elif surface_type == "mirror":
            surface = Mirror()
        elif surface_type == "transparent":
            surface = Transparent(ratio=float(surface_data.get("ratio", 1.0)))
        else:
            raise ValueError(f"Unknown surface type: {surface_type}")

        return cls(
            specular=float(data.get("specular", 0.0)),
            diffuse=float(data.get("diffuse", 1.0)),
            ambient=float(data.get("ambient", 1.0)),
            shininess=float(data.get("shininess", 1.0)),
            surface=surface,
        )
