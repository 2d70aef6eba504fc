"""
Material Library
================
Maps a material tag to the shading parameters handed to the renderer.

The mapping is pure: no state, no side effects. It is called once per mesh
per frame, so every record is a frozen dataclass built from a fixed table.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict

from kaleidoscope.model.params import MaterialType, RGB

GLASS_OPACITY: float = 0.3
GLASS_IOR: float = 1.5
EMISSIVE_INTENSITY: float = 0.8

BLACK: RGB = (0.0, 0.0, 0.0)


@dataclass(frozen=True)
class ShadingParams:
    """PBR-style shading parameters for one mesh."""
    roughness: float
    metalness: float
    opacity: float = 1.0
    transparent: bool = False
    transmission: float = 0.0
    ior: float = 1.0
    emissive: RGB = BLACK
    emissive_intensity: float = 0.0


# Base records; opacity/emission are filled in by `shading_for`
MATERIAL_LIBRARY: Dict[MaterialType, ShadingParams] = {
    MaterialType.STANDARD: ShadingParams(roughness=0.5, metalness=0.3),
    MaterialType.METALLIC: ShadingParams(roughness=0.1, metalness=0.9),
    MaterialType.GLASS: ShadingParams(
        roughness=0.05,
        metalness=0.0,
        opacity=GLASS_OPACITY,
        transparent=True,
        transmission=0.95,
        ior=GLASS_IOR,
    ),
    MaterialType.EMISSIVE: ShadingParams(
        roughness=0.4,
        metalness=0.1,
        emissive_intensity=EMISSIVE_INTENSITY,
    ),
}


def shading_for(material: MaterialType, color: RGB, opacity: float = 1.0) -> ShadingParams:
    """
    Resolve the shading parameters of a mesh.

    Args:
        material: The material tag of the stroke.
        color: Base colour of the stroke (doubles as glow colour for emissive).
        opacity: Opacity of the mirror copy (1.0 for the primary copy).

    Returns:
        A ShadingParams record. Glass keeps its own opacity regardless of the
        mirror-copy opacity.
    """
    base = MATERIAL_LIBRARY[MaterialType(material)]

    if material == MaterialType.GLASS:
        return base
    if material == MaterialType.EMISSIVE:
        return replace(base, opacity=opacity, transparent=opacity < 1.0, emissive=color)
    return replace(base, opacity=opacity, transparent=opacity < 1.0)
