"""
Main Application Window
=======================
The primary GUI container: control panel on the left, 3D viewport on the
right, and the frame timer that drives the simulation.

Why is this file needed?
------------------------
1. Layout: It organizes the high-level visual structure of the application.
2. Routing: It forwards panel signals and pointer events to the
   DrawingController, and pushes every frame to the viewport.
"""
import logging
import time
from typing import Optional

from PySide6.QtWidgets import QMainWindow, QSplitter
from PySide6.QtCore import Qt, QPointF, QTimer

from kaleidoscope.app.application import VISIBLE_APP_NAME
from kaleidoscope.config import FRAME_INTERVAL_MS
from kaleidoscope.controller.drawing import DrawingController
from kaleidoscope.view.panels.controls import ControlPanel
from kaleidoscope.view.widgets.viewport import KaleidoscopeViewport

logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    def __init__(self, controller: Optional[DrawingController] = None) -> None:
        super().__init__()
        self.controller: DrawingController = controller if controller is not None else DrawingController()

        self.setWindowTitle(VISIBLE_APP_NAME)
        self.resize(1400, 900)

        # --- SPLITTER (CONTENT AREA) ---
        splitter = QSplitter(Qt.Horizontal)
        self.setCentralWidget(splitter)

        self.controls = ControlPanel(self.controller.params)
        splitter.addWidget(self.controls)

        self.viewport = KaleidoscopeViewport()
        splitter.addWidget(self.viewport)

        # 1 part sidebar : 4 parts 3D view
        splitter.setSizes([280, 1120])

        self._connect_signals()

        # --- FRAME LOOP ---
        self._last_tick: float = time.perf_counter()
        self._timer = QTimer(self)
        self._timer.setInterval(FRAME_INTERVAL_MS)
        self._timer.timeout.connect(self.on_frame)
        self._timer.start()

    def _connect_signals(self) -> None:
        params = self.controller.params

        # 1. Panel -> parameters (take effect on the next frame)
        self.controls.symmetry_changed.connect(params.set_symmetry)
        self.controls.material_changed.connect(params.set_material)
        self.controls.style_changed.connect(params.set_style)
        self.controls.thickness_changed.connect(params.set_thickness)
        self.controls.scale_changed.connect(params.set_scale)
        self.controls.color_changed.connect(params.set_color)

        # 2. Commands
        self.controls.eraser_toggled.connect(self.on_eraser_toggled)
        self.controls.clear_requested.connect(self.on_clear)

        # 3. Pointer
        self.viewport.pointer_pressed.connect(self.on_pointer_pressed)
        self.viewport.pointer_moved.connect(self.on_pointer_moved)
        self.viewport.pointer_released.connect(self.on_pointer_released)
        self.viewport.pointer_left.connect(self.on_pointer_left)

    # --- SLOTS ---

    def on_pointer_pressed(self, pos: QPointF) -> None:
        session = self.controller.session
        point = self.viewport.world_point(pos, session.active_plane())
        self.controller.pointer_down(point, self.viewport.view_direction())
        self._update_cursor()

    def on_pointer_moved(self, pos: QPointF, button_held: bool) -> None:
        session = self.controller.session
        point = self.viewport.world_point(pos, session.active_plane())
        self.controller.pointer_move(point, button_held)

    def on_pointer_released(self) -> None:
        self.controller.pointer_up()
        self._update_cursor()

    def on_pointer_left(self) -> None:
        self.controller.pointer_cancel()
        self._update_cursor()

    def on_eraser_toggled(self, enabled: bool) -> None:
        self.controller.set_eraser_mode(enabled)
        self._update_cursor()

    def on_clear(self) -> None:
        self.controller.clear_all()
        self._update_cursor()

    def on_frame(self) -> None:
        now = time.perf_counter()
        dt = now - self._last_tick
        self._last_tick = now

        frame, particles = self.controller.step(dt)
        self.viewport.render_frame(frame, particles)

        self.statusBar().showMessage(
            f"Strokes: {len(self.controller.registry)}   "
            f"Meshes: {len(frame.items)}   "
            f"Particles: {len(particles)}"
        )

    # --- HELPER METHODS ---

    def _update_cursor(self) -> None:
        session = self.controller.session
        self.viewport.set_cursor_mode(session.is_drawing, session.eraser_mode)

    def closeEvent(self, event) -> None:
        self._timer.stop()
        logger.info("Main window closed.")
        super().closeEvent(event)
