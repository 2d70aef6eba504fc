"""
Input Session (Data Model)
==========================
Transient pointer state shared between the viewport and the per-frame update.

Why is this file needed?
------------------------
The "current point", the temporary drawing plane and the drawing flag change
on every pointer event. Keeping them as explicit fields of one object that is
passed by reference into the frame update avoids free-floating mutable cells
scattered across widgets.
"""
from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Optional

from kaleidoscope.model.geometry_primitives import Plane, Point

logger = logging.getLogger(__name__)


@dataclass
class InputSession:
    """Pointer state of the running session."""
    is_drawing: bool = False
    eraser_mode: bool = False
    current_point: Optional[Point] = None
    draw_plane: Optional[Plane] = None

    def active_plane(self) -> Plane:
        """The temporary drawing plane while a stroke is open, otherwise the ground."""
        return self.draw_plane if self.draw_plane is not None else Plane.ground()

    def reset(self) -> None:
        """Forget everything about the current gesture."""
        self.is_drawing = False
        self.current_point = None
        self.draw_plane = None
        logger.debug("Input session has been reset.")
