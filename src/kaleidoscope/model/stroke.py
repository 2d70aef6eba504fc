"""
Stroke Data Structures
======================
A stroke is one continuous user-drawn path: ordered points plus the brush
attributes that were active when it was committed.

Classes:
    InProgressStroke: The path currently being drawn (points only).
    Stroke: A committed, immutable stroke.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple, TYPE_CHECKING

import numpy as np

from kaleidoscope.config import POINT_EPSILON
from kaleidoscope.model.geometry_primitives import Point, points_to_array
from kaleidoscope.model.params import MaterialType, StrokeStyle, RGB

if TYPE_CHECKING:
    import numpy.typing as npt


@dataclass(frozen=True)
class InProgressStroke:
    """
    Points of the stroke currently being drawn.
    Replaced wholesale on every append, never mutated in place.
    """
    points: Tuple[Point, ...] = ()

    def __len__(self) -> int:
        return len(self.points)

    @property
    def last(self) -> Point | None:
        return self.points[-1] if self.points else None

    def with_point(self, point: Point, min_distance_sq: float = POINT_EPSILON) -> InProgressStroke:
        """
        Return a new stroke with `point` appended.

        If the cursor did not move far enough from the last recorded point,
        the same instance is returned so dense sampling cannot produce
        degenerate curve segments.
        """
        last = self.last
        if last is not None and last.distance_sq_to(point) <= min_distance_sq:
            return self
        return InProgressStroke(points=self.points + (point,))


@dataclass(frozen=True)
class Stroke:
    """A committed stroke. Its point list never changes after creation."""
    id: str
    points: Tuple[Point, ...]
    color: RGB
    material: MaterialType
    thickness: float
    style: StrokeStyle

    def to_array(self) -> npt.NDArray[np.float64]:
        return points_to_array(self.points)

    def min_distance_to(self, point: Point) -> float:
        """Smallest distance between `point` and any point of this stroke."""
        diff = self.to_array() - point.to_array()
        return float(np.min(np.linalg.norm(diff, axis=1)))
