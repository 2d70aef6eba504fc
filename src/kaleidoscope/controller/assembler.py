"""
Render Assembler
================
Combines the registry, the symmetry transformer, the curve builder and the
material library into the ordered per-frame draw list.

The draw list is only reassembled when one of its inputs changed (registry
revision, drawing flag, symmetry/material/thickness/style/color). Mesh
building is the expensive part, so the mirror copies of every committed stroke
are cached per stroke id and symmetry mode: a committed stroke carries its own
brush snapshot, so only the in-progress stroke is re-swept while drawing.
Rotation and scale are applied to the whole group as a transform and never
trigger a rebuild.
"""
from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Dict, Optional, Tuple

from kaleidoscope.config import GROUP_ROTATION_SPEED, MIRROR_OPACITY
from kaleidoscope.controller.curve_builder import TubeMesh, build_tube
from kaleidoscope.controller.symmetry import mirror_points
from kaleidoscope.model.materials import ShadingParams, shading_for
from kaleidoscope.model.params import DrawingParams, MaterialType, SymmetryMode, RGB
from kaleidoscope.model.registry import CURRENT_STROKE_ID, RenderableStroke, StrokeRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class DrawItem:
    """One mirror copy of one stroke, ready to render."""
    key: str
    mesh: TubeMesh
    color: RGB
    material: MaterialType
    opacity: float
    shading: ShadingParams


@dataclass(frozen=True)
class GroupTransform:
    """Transform applied to the whole kaleidoscope group."""
    rotation_y: float = 0.0
    scale: float = 1.0


@dataclass(frozen=True, eq=False)
class Frame:
    items: Tuple[DrawItem, ...]
    transform: GroupTransform


class RenderAssembler:
    def __init__(self, registry: StrokeRegistry) -> None:
        self.registry = registry
        self.rotation_y: float = 0.0
        self.build_count: int = 0
        self.mesh_build_count: int = 0

        self._cache_key: Optional[tuple] = None
        self._items: Tuple[DrawItem, ...] = ()
        self._stroke_items: Dict[str, Tuple[SymmetryMode, Tuple[DrawItem, ...]]] = {}

    def assemble(self, is_drawing: bool, params: DrawingParams) -> Tuple[DrawItem, ...]:
        """Return the draw list, rebuilding it only if an input changed."""
        key = (self.registry.revision, is_drawing, params.signature())
        if key == self._cache_key:
            return self._items

        items: list[DrawItem] = []
        live_ids: set[str] = set()
        for stroke in self.registry.renderable(is_drawing, params):
            if stroke.key == CURRENT_STROKE_ID:
                items.extend(self._build_items(stroke, params.symmetry))
                continue

            live_ids.add(stroke.key)
            cached = self._stroke_items.get(stroke.key)
            if cached is None or cached[0] != params.symmetry:
                cached = (params.symmetry, self._build_items(stroke, params.symmetry))
                self._stroke_items[stroke.key] = cached
            items.extend(cached[1])

        # Erased or cleared strokes
        for stroke_id in self._stroke_items.keys() - live_ids:
            del self._stroke_items[stroke_id]

        self._items = tuple(items)
        self._cache_key = key
        self.build_count += 1
        logger.debug(f"Assembled {len(self._items)} draw item(s) (build #{self.build_count}).")
        return self._items

    def advance(self, dt: float, params: DrawingParams) -> GroupTransform:
        """
        Spin the group slowly about Y and apply the scale. Without symmetry the
        group is shown unrotated.
        """
        if params.symmetry == SymmetryMode.NONE:
            self.rotation_y = 0.0
        else:
            self.rotation_y += GROUP_ROTATION_SPEED * dt
        return GroupTransform(rotation_y=self.rotation_y, scale=params.scale)

    def frame(self, dt: float, is_drawing: bool, params: DrawingParams) -> Frame:
        return Frame(
            items=self.assemble(is_drawing, params),
            transform=self.advance(dt, params),
        )

    def _build_items(self, stroke: RenderableStroke, symmetry: SymmetryMode) -> Tuple[DrawItem, ...]:
        """Sweep one tube per mirror copy of `stroke`, skipping degenerate copies."""
        items: list[DrawItem] = []
        for i, pts in enumerate(mirror_points(stroke.points, symmetry)):
            mesh = build_tube(pts, stroke.thickness, stroke.style)
            if mesh is None:
                continue
            self.mesh_build_count += 1
            opacity = 1.0 if i == 0 else MIRROR_OPACITY
            items.append(DrawItem(
                key=f"{stroke.key}-{i}",
                mesh=mesh,
                color=stroke.color,
                material=stroke.material,
                opacity=opacity,
                shading=shading_for(stroke.material, stroke.color, opacity),
            ))
        return tuple(items)
