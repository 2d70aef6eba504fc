"""
Drawing Controller
==================
Applies pointer events and parameter changes to the core, and runs one
simulation step per display frame.

Why is this file needed?
------------------------
1. Atomicity: Input events are applied synchronously between frames, so no
   frame can observe a half-appended stroke.
2. Wiring: It is the single object the view talks to. The view only supplies
   world-space points (already ray-cast and snapped) and reads back frames.
"""
from __future__ import annotations

import logging
from typing import Optional, Tuple

from kaleidoscope.config import ERASE_TOLERANCE
from kaleidoscope.controller.assembler import Frame, RenderAssembler
from kaleidoscope.controller.particles import ParticleBuffer, ParticleSystem
from kaleidoscope.model.geometry_primitives import Plane, Point, Vector
from kaleidoscope.model.params import DrawingParams
from kaleidoscope.model.registry import StrokeRegistry
from kaleidoscope.model.state import InputSession

logger = logging.getLogger(__name__)


class DrawingController:
    def __init__(
        self,
        params: Optional[DrawingParams] = None,
        particles: Optional[ParticleSystem] = None,
    ) -> None:
        self.params: DrawingParams = params if params is not None else DrawingParams()
        self.session: InputSession = InputSession()
        self.registry: StrokeRegistry = StrokeRegistry()
        self.assembler: RenderAssembler = RenderAssembler(self.registry)
        self.particles: ParticleSystem = particles if particles is not None else ParticleSystem()

    # ------------------------------------------------------------------------------
    # Pointer events
    # ------------------------------------------------------------------------------

    def pointer_down(self, point: Optional[Point], view_direction: Optional[Vector] = None) -> None:
        """
        Primary button pressed.

        In eraser mode the strokes near the point are removed. Otherwise a new
        stroke starts and a temporary drawing plane facing the camera is laid
        through the start point.
        """
        if point is None:
            return

        self.session.current_point = point

        if self.session.eraser_mode:
            self.registry.erase_near(point, ERASE_TOLERANCE)
            return

        if view_direction is not None:
            self.session.draw_plane = Plane.from_normal_and_point(view_direction, point)

        self.registry.begin(point)
        self.session.is_drawing = True

    def pointer_move(self, point: Optional[Point], button_held: bool) -> None:
        """Pointer moved; appends to the open stroke while the button is held."""
        if point is None:
            return

        self.session.current_point = point

        if not self.session.is_drawing or not button_held or self.session.eraser_mode:
            return
        self.registry.append_point(point)

    def pointer_up(self) -> None:
        """Primary button released: commit the open stroke."""
        if not self.session.is_drawing or self.session.eraser_mode:
            return

        self.session.is_drawing = False
        self.registry.commit(self.params)
        self.session.draw_plane = None

    def pointer_cancel(self) -> None:
        """Pointer left the canvas mid-stroke: abandon it wholesale."""
        if self.session.is_drawing:
            logger.info("Stroke abandoned.")
        self.registry.abandon()
        self.session.reset()

    # ------------------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------------------

    def clear_all(self) -> None:
        self.registry.clear()
        self.session.is_drawing = False
        self.session.draw_plane = None

    def set_eraser_mode(self, enabled: bool) -> None:
        if enabled and self.session.is_drawing:
            self.pointer_cancel()
        self.session.eraser_mode = enabled
        logger.info(f"Tool mode: {'erase' if enabled else 'draw'}.")

    # ------------------------------------------------------------------------------
    # Frame update
    # ------------------------------------------------------------------------------

    def step(self, dt: float) -> Tuple[Frame, ParticleBuffer]:
        """One render/simulation step."""
        frame = self.assembler.frame(dt, self.session.is_drawing, self.params)
        particles = self.particles.step(
            dt,
            self.session.is_drawing,
            self.session.current_point,
            self.params.color,
        )
        return frame, particles
