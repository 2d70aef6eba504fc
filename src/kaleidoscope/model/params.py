"""
Drawing Parameters
==================
Closed enumerations and the user-adjustable brush/scene parameters.

Every value here is changeable at any time from the control panel and takes
effect on the next frame. Numeric values are clamped to their slider ranges,
enumerations are closed sets.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Tuple, Union
import logging

from matplotlib.colors import to_rgb

from kaleidoscope.config import (
    COLOR_PALETTE, DEFAULT_SCALE, DEFAULT_THICKNESS,
    SCALE_MAX, SCALE_MIN, THICKNESS_MAX, THICKNESS_MIN,
)

logger = logging.getLogger(__name__)

RGB = Tuple[float, float, float]
ColorLike = Union[str, Tuple[float, float, float]]


class SymmetryMode(StrEnum):
    NONE = "none"
    FOUR_FOLD = "4fold"
    SIX_FOLD = "6fold"
    EIGHT_FOLD = "8fold"
    MANDALA = "mandala"


class MaterialType(StrEnum):
    STANDARD = "standard"
    METALLIC = "metallic"
    GLASS = "glass"
    EMISSIVE = "emissive"


class StrokeStyle(StrEnum):
    SOLID = "solid"
    DOTTED = "dotted"
    DASHED = "dashed"
    SPIRAL = "spiral"


# Labels shown in the control panel
SYMMETRY_LABELS: dict[SymmetryMode, str] = {
    SymmetryMode.NONE: "None",
    SymmetryMode.FOUR_FOLD: "4-Fold",
    SymmetryMode.SIX_FOLD: "6-Fold",
    SymmetryMode.EIGHT_FOLD: "8-Fold",
    SymmetryMode.MANDALA: "Mandala",
}


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def normalize_color(color: ColorLike) -> RGB:
    """Convert any matplotlib colour spec ('#ff6d6d', 'white', (r, g, b)) to floats in [0, 1]."""
    r, g, b = to_rgb(color)
    return float(r), float(g), float(b)


@dataclass
class DrawingParams:
    """
    Current brush and scene settings.
    Logic:
    1. Geometry inputs (symmetry, material, thickness, style, color) invalidate
       the assembled draw list -> see `signature()`.
    2. Scale is a pure group transform and never triggers a rebuild.
    """
    symmetry: SymmetryMode = SymmetryMode.SIX_FOLD
    material: MaterialType = MaterialType.STANDARD
    thickness: float = DEFAULT_THICKNESS
    style: StrokeStyle = StrokeStyle.SOLID
    color: RGB = field(default_factory=lambda: normalize_color(COLOR_PALETTE[0]))
    scale: float = DEFAULT_SCALE

    def set_symmetry(self, mode: Union[SymmetryMode, str]) -> None:
        self.symmetry = SymmetryMode(mode)

    def set_material(self, material: Union[MaterialType, str]) -> None:
        self.material = MaterialType(material)

    def set_style(self, style: Union[StrokeStyle, str]) -> None:
        self.style = StrokeStyle(style)

    def set_thickness(self, value: float) -> None:
        self.thickness = clamp(float(value), THICKNESS_MIN, THICKNESS_MAX)

    def set_scale(self, value: float) -> None:
        self.scale = clamp(float(value), SCALE_MIN, SCALE_MAX)

    def set_color(self, color: ColorLike) -> None:
        self.color = normalize_color(color)

    def signature(self) -> tuple:
        """Inputs that require the draw list to be rebuilt."""
        return self.symmetry, self.material, self.thickness, self.style, self.color
