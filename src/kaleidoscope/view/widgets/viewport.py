"""
3D Viewport Widget (PyVista Wrapper)
====================================
Renders the per-frame draw list and particle buffer, and turns pointer
events into world-space rays.

The left mouse button is reserved for drawing: an event filter consumes it
before VTK sees it, so the camera interaction stays on the other buttons
(and on Alt + left-drag).
"""
from __future__ import annotations

import math
from typing import Dict, Optional, Tuple

import logging
import numpy as np

from PySide6.QtWidgets import QWidget, QVBoxLayout
from PySide6.QtCore import QEvent, QObject, QPointF, Qt, Signal

from pyvistaqt import QtInteractor
import pyvista as pv

from kaleidoscope.config import BACKGROUND_COLOR, GRID_STEP, GROUND_SIZE
from kaleidoscope.controller.assembler import DrawItem, Frame
from kaleidoscope.controller.particles import ParticleBuffer
from kaleidoscope.model.geometry_primitives import Plane, Point, Vector
from kaleidoscope.model.params import MaterialType

logger = logging.getLogger(__name__)


def particle_cloud(particles: ParticleBuffer) -> pv.PolyData:
    """Point cloud carrying the faded colours ("rgb") and splat radii ("sizes")."""
    cloud = pv.PolyData(particles.positions)
    cloud.point_data["rgb"] = np.clip(particles.colors, 0.0, 1.0)
    cloud.point_data["sizes"] = particles.sizes
    return cloud


class KaleidoscopeViewport(QWidget):
    # Qt widget coordinates of the pointer
    pointer_pressed = Signal(QPointF)
    pointer_moved = Signal(QPointF, bool)
    pointer_released = Signal()
    pointer_left = Signal()

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)

        self.layout_box: QVBoxLayout = QVBoxLayout(self)
        self.layout_box.setContentsMargins(0, 0, 0, 0)

        self.plotter: QtInteractor = QtInteractor(self)
        self.layout_box.addWidget(self.plotter)

        self._init_plotter()

        # --- Actors state ---
        # DrawItem key -> (item, actor); an actor is kept while its item object is unchanged
        self._stroke_actors: Dict[str, Tuple[DrawItem, pv.Actor]] = {}
        self._particle_actor: Optional[pv.Actor] = None

        # --- Data cache ---
        # The draw list object only changes when it was rebuilt
        self._last_items: Optional[Tuple[DrawItem, ...]] = None

        self._left_down: bool = False
        self.plotter.installEventFilter(self)
        self.plotter.setMouseTracking(True)

    # ------------------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------------------

    def view_direction(self) -> Vector:
        """Unit vector the camera is looking along."""
        return Vector.from_sequence(self.plotter.camera.direction).normalize()

    def world_point(self, pos: QPointF, plane: Plane) -> Optional[Point]:
        """
        Cast a ray from the camera through the widget position and intersect it
        with `plane`. The hit is snapped to the world grid.

        Returns:
            The snapped point, or None if the ray misses the plane.
        """
        try:
            origin, direction = self._pick_ray(pos)
        except Exception as e:
            logger.warning(f"Could not compute pick ray: {e}")
            return None

        hit = plane.intersect_ray(origin, direction)
        if hit is None:
            return None
        return Point.snapped(hit.x, hit.y, hit.z, GRID_STEP)

    def set_cursor_mode(self, drawing: bool, eraser: bool) -> None:
        if drawing:
            self.plotter.setCursor(Qt.CrossCursor)
        elif eraser:
            self.plotter.setCursor(Qt.ForbiddenCursor)
        else:
            self.plotter.unsetCursor()

    def render_frame(self, frame: Frame, particles: ParticleBuffer) -> None:
        """Push one frame to the screen."""
        if frame.items is not self._last_items:
            self._sync_stroke_actors(frame.items)
            self._last_items = frame.items

        orientation = (0.0, math.degrees(frame.transform.rotation_y), 0.0)
        scale = (frame.transform.scale,) * 3
        for _, actor in self._stroke_actors.values():
            actor.orientation = orientation
            actor.scale = scale

        self._update_particles(particles)
        self.plotter.render()

    # ------------------------------------------------------------------------------
    # Qt events
    # ------------------------------------------------------------------------------

    def eventFilter(self, obj: QObject, event: QEvent) -> bool:
        if obj is not self.plotter:
            return False

        etype = event.type()
        if etype == QEvent.MouseButtonPress and event.button() == Qt.LeftButton:
            if event.modifiers() & Qt.AltModifier:
                return False
            self._left_down = True
            self.pointer_pressed.emit(event.position())
            return True

        if etype == QEvent.MouseMove:
            self.pointer_moved.emit(event.position(), self._left_down)
            return self._left_down

        if etype == QEvent.MouseButtonRelease and event.button() == Qt.LeftButton and self._left_down:
            self._left_down = False
            # The implicit grab delivers a release outside the canvas instead of a Leave
            if self.plotter.rect().contains(event.position().toPoint()):
                self.pointer_released.emit()
            else:
                self.pointer_left.emit()
            return True

        if etype == QEvent.Leave and self._left_down:
            self._left_down = False
            self.pointer_left.emit()

        return False

    def closeEvent(self, event) -> None:
        self.plotter.close()
        super().closeEvent(event)

    # ------------------------------------------------------------------------------
    # Internal methods
    # ------------------------------------------------------------------------------

    def _init_plotter(self) -> None:
        self.plotter.set_background(BACKGROUND_COLOR)
        self.plotter.camera_position = [(0.0, 2.0, 8.0), (0.0, 0.0, 0.0), (0.0, 1.0, 0.0)]
        self.plotter.camera.view_angle = 45.0

        cells = int(round(GROUND_SIZE / GRID_STEP))
        ground = pv.Plane(
            center=(0.0, 0.0, 0.0),
            direction=(0.0, 1.0, 0.0),
            i_size=GROUND_SIZE,
            j_size=GROUND_SIZE,
            i_resolution=cells,
            j_resolution=cells,
        )
        self.plotter.add_mesh(
            ground,
            style="wireframe",
            color="#444444",
            line_width=1.0,
            pickable=False,
            reset_camera=False,
        )
        self.plotter.add_light(pv.Light(position=(5.0, 5.0, 5.0), intensity=1.0))

    def _pick_ray(self, pos: QPointF) -> Tuple[Point, Vector]:
        """World-space ray through a widget position (Qt y-down -> VTK y-up)."""
        ratio = self.plotter.devicePixelRatioF()
        x = pos.x() * ratio
        y = (self.plotter.height() - pos.y()) * ratio

        renderer = self.plotter.renderer
        world = []
        for depth in (0.0, 1.0):
            renderer.SetDisplayPoint(x, y, depth)
            renderer.DisplayToWorld()
            wx, wy, wz, w = renderer.GetWorldPoint()
            world.append(np.array([wx, wy, wz]) / (w if w != 0.0 else 1.0))

        near, far = world
        origin = Point(*near)
        direction = Vector.from_sequence(far - near).normalize()
        return origin, direction

    def _sync_stroke_actors(self, items: Tuple[DrawItem, ...]) -> None:
        """Add actors for new draw items and drop the ones whose item went away."""
        live = {item.key: item for item in items}
        removed = 0
        for key, (item, actor) in list(self._stroke_actors.items()):
            if live.get(key) is not item:
                self.plotter.remove_actor(actor, render=False)
                del self._stroke_actors[key]
                removed += 1

        added = 0
        for item in items:
            if item.key in self._stroke_actors:
                continue
            shading = item.shading
            actor = self.plotter.add_mesh(
                item.mesh.to_polydata(),
                color=item.color,
                opacity=shading.opacity,
                smooth_shading=True,
                pbr=True,
                metallic=shading.metalness,
                roughness=shading.roughness,
                pickable=False,
                reset_camera=False,
                render=False,
            )
            if item.material == MaterialType.EMISSIVE:
                actor.prop.ambient = shading.emissive_intensity
                actor.prop.ambient_color = shading.emissive
            self._stroke_actors[item.key] = (item, actor)
            added += 1

        if added or removed:
            logger.debug(f"Stroke actors: +{added} -{removed} ({len(self._stroke_actors)} total).")

    def _update_particles(self, particles: ParticleBuffer) -> None:
        if len(particles) == 0:
            if self._particle_actor is not None:
                self.plotter.remove_actor(self._particle_actor, render=False)
                self._particle_actor = None
            return

        self._particle_actor = self.plotter.add_mesh(
            particle_cloud(particles),
            scalars="rgb",
            rgb=True,
            style="points_gaussian",
            emissive=True,
            name="particles",
            pickable=False,
            reset_camera=False,
            render=False,
        )
        # Splat radius follows the faded particle size
        self._particle_actor.mapper.scale_array = "sizes"
