"""
Stroke Registry
===============
Holds the committed strokes and the single in-progress stroke.

Why is this file needed?
------------------------
1. Ownership: It is the only place where strokes are added or removed
   (append, commit, clear, erase).
2. Invalidation: Every effective mutation bumps `revision`, so downstream
   mesh building can tell whether anything changed since the last frame.
3. Memoization: The combined "what to render this frame" list is rebuilt only
   when the revision, the drawing flag or the brush parameters changed.
"""
from __future__ import annotations

from dataclasses import dataclass
import itertools
import logging
import time
from typing import Optional, Tuple

from kaleidoscope.model.geometry_primitives import Point
from kaleidoscope.model.params import DrawingParams, MaterialType, StrokeStyle, RGB
from kaleidoscope.model.stroke import InProgressStroke, Stroke

logger = logging.getLogger(__name__)

CURRENT_STROKE_ID = "current"


@dataclass(frozen=True)
class RenderableStroke:
    """A read-only view of a stroke as it should be drawn this frame."""
    key: str
    points: Tuple[Point, ...]
    color: RGB
    material: MaterialType
    thickness: float
    style: StrokeStyle

    @staticmethod
    def from_stroke(stroke: Stroke) -> RenderableStroke:
        return RenderableStroke(
            key=stroke.id,
            points=stroke.points,
            color=stroke.color,
            material=stroke.material,
            thickness=stroke.thickness,
            style=stroke.style,
        )


class StrokeRegistry:
    """Committed strokes plus the in-progress stroke."""

    def __init__(self) -> None:
        self._strokes: Tuple[Stroke, ...] = ()
        self._in_progress: InProgressStroke = InProgressStroke()
        self._revision: int = 0
        self._id_counter = itertools.count(1)

        self._renderable_key: Optional[tuple] = None
        self._renderable: Tuple[RenderableStroke, ...] = ()

    # ------------------------------------------------------------------------------
    # Read-only access
    # ------------------------------------------------------------------------------

    @property
    def strokes(self) -> Tuple[Stroke, ...]:
        return self._strokes

    @property
    def in_progress(self) -> InProgressStroke:
        return self._in_progress

    @property
    def revision(self) -> int:
        return self._revision

    def __len__(self) -> int:
        return len(self._strokes)

    def renderable(self, is_drawing: bool, params: DrawingParams) -> Tuple[RenderableStroke, ...]:
        """
        All strokes to render this frame: the committed ones plus the
        in-progress stroke (tagged "current") while drawing with >= 2 points.
        """
        key = (self._revision, is_drawing, params.signature())
        if key == self._renderable_key:
            return self._renderable

        combined = [RenderableStroke.from_stroke(s) for s in self._strokes]
        if is_drawing and len(self._in_progress) > 1:
            combined.append(RenderableStroke(
                key=CURRENT_STROKE_ID,
                points=self._in_progress.points,
                color=params.color,
                material=params.material,
                thickness=params.thickness,
                style=params.style,
            ))

        self._renderable = tuple(combined)
        self._renderable_key = key
        return self._renderable

    # ------------------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------------------

    def begin(self, point: Point) -> None:
        """Start a new in-progress stroke, abandoning any previous one."""
        self._in_progress = InProgressStroke(points=(point,))
        self._touch()

    def append_point(self, point: Point) -> bool:
        """Append a point to the in-progress stroke. Returns True if it grew."""
        updated = self._in_progress.with_point(point)
        if updated is self._in_progress:
            return False
        self._in_progress = updated
        self._touch()
        return True

    def commit(self, params: DrawingParams) -> Optional[Stroke]:
        """
        Move the in-progress stroke into the committed list, snapshotting the
        current brush parameters. Strokes with fewer than 2 points are dropped.
        """
        points = self._in_progress.points
        self._in_progress = InProgressStroke()
        self._touch()

        if len(points) < 2:
            logger.debug(f"Discarding stroke with {len(points)} point(s).")
            return None

        stroke = Stroke(
            id=self._next_id(),
            points=points,
            color=params.color,
            material=params.material,
            thickness=params.thickness,
            style=params.style,
        )
        self._strokes = self._strokes + (stroke,)
        logger.info(f"Committed {stroke.id} ({len(points)} points, {stroke.style}, {stroke.material}).")
        return stroke

    def abandon(self) -> None:
        """Drop the in-progress stroke without committing it."""
        if len(self._in_progress) == 0:
            return
        self._in_progress = InProgressStroke()
        self._touch()

    def clear(self) -> None:
        self._strokes = ()
        self._in_progress = InProgressStroke()
        self._touch()
        logger.info("Cleared all strokes.")

    def erase_near(self, point: Point, tolerance: float) -> list[Stroke]:
        """
        Remove every committed stroke with at least one point closer than
        `tolerance` to `point`. Whole strokes are removed, never parts.
        """
        removed = [s for s in self._strokes if s.min_distance_to(point) < tolerance]
        if not removed:
            return []

        removed_ids = {s.id for s in removed}
        self._strokes = tuple(s for s in self._strokes if s.id not in removed_ids)
        self._touch()
        logger.info(f"Erased {len(removed)} stroke(s) near ({point.x:g}, {point.y:g}, {point.z:g}).")
        return removed

    # ------------------------------------------------------------------------------
    # Internal methods
    # ------------------------------------------------------------------------------

    def _touch(self) -> None:
        self._revision += 1

    def _next_id(self) -> str:
        return f"stroke-{time.time_ns() // 1_000_000}-{next(self._id_counter)}"
