"""
Control Panel
=============
Brush and scene settings. Every widget emits a signal; the main window
forwards the values to the DrawingController.
"""
from typing import Optional

from PySide6.QtCore import Signal, Qt
from PySide6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QGroupBox, QFormLayout, QComboBox,
    QSlider, QLabel, QPushButton, QButtonGroup, QGridLayout
)

from kaleidoscope.config import (
    COLOR_PALETTE, DEFAULT_SCALE, DEFAULT_THICKNESS,
    SCALE_MAX, SCALE_MIN, SCALE_STEP, THICKNESS_MAX, THICKNESS_MIN, THICKNESS_STEP,
)
from kaleidoscope.model.params import (
    DrawingParams, MaterialType, StrokeStyle, SymmetryMode, SYMMETRY_LABELS,
)


class ControlPanel(QWidget):
    eraser_toggled = Signal(bool)
    symmetry_changed = Signal(str)
    material_changed = Signal(str)
    style_changed = Signal(str)
    thickness_changed = Signal(float)
    scale_changed = Signal(float)
    color_changed = Signal(str)
    clear_requested = Signal()

    def __init__(self, params: DrawingParams, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)

        layout = QVBoxLayout(self)

        title = QLabel("<b>Kaleidoscope</b><br>"
                       "<i>Left-drag</i> to draw tubes<br>"
                       "<i>Alt + left-drag</i> to rotate camera<br>"
                       "<i>Wheel</i> to zoom")
        title.setWordWrap(True)
        layout.addWidget(title)

        layout.addWidget(self._build_tool_group())
        layout.addWidget(self._build_brush_group(params))
        layout.addWidget(self._build_palette_group())

        self.btn_clear = QPushButton("Clear")
        self.btn_clear.clicked.connect(self.clear_requested.emit)
        layout.addWidget(self.btn_clear)

        layout.addStretch()

    # --- GROUPS ---

    def _build_tool_group(self) -> QGroupBox:
        group = QGroupBox("Tool")
        row = QHBoxLayout(group)

        self.btn_draw = QPushButton("Draw")
        self.btn_erase = QPushButton("Erase")
        for btn in (self.btn_draw, self.btn_erase):
            btn.setCheckable(True)
            row.addWidget(btn)
        self.btn_draw.setChecked(True)

        self._tool_buttons = QButtonGroup(self)
        self._tool_buttons.setExclusive(True)
        self._tool_buttons.addButton(self.btn_draw)
        self._tool_buttons.addButton(self.btn_erase)

        self.btn_erase.toggled.connect(self.eraser_toggled.emit)
        return group

    def _build_brush_group(self, params: DrawingParams) -> QGroupBox:
        group = QGroupBox("Brush")
        form = QFormLayout(group)

        self.combo_symmetry = QComboBox()
        for mode in SymmetryMode:
            self.combo_symmetry.addItem(SYMMETRY_LABELS[mode], mode.value)
        self.combo_symmetry.setCurrentIndex(self.combo_symmetry.findData(params.symmetry.value))
        self.combo_symmetry.currentIndexChanged.connect(
            lambda _: self.symmetry_changed.emit(self.combo_symmetry.currentData())
        )
        form.addRow("Symmetry:", self.combo_symmetry)

        self.combo_material = QComboBox()
        for material in MaterialType:
            self.combo_material.addItem(material.value.capitalize(), material.value)
        self.combo_material.setCurrentIndex(self.combo_material.findData(params.material.value))
        self.combo_material.currentIndexChanged.connect(
            lambda _: self.material_changed.emit(self.combo_material.currentData())
        )
        form.addRow("Material:", self.combo_material)

        self.combo_style = QComboBox()
        for style in StrokeStyle:
            self.combo_style.addItem(style.value.capitalize(), style.value)
        self.combo_style.setCurrentIndex(self.combo_style.findData(params.style.value))
        self.combo_style.currentIndexChanged.connect(
            lambda _: self.style_changed.emit(self.combo_style.currentData())
        )
        form.addRow("Style:", self.combo_style)

        # Sliders work in integer steps
        self.slider_thickness, self.lbl_thickness = self._make_slider(
            THICKNESS_MIN, THICKNESS_MAX, THICKNESS_STEP, DEFAULT_THICKNESS, "{:.2f}", self.thickness_changed
        )
        form.addRow("Thickness:", self._slider_row(self.slider_thickness, self.lbl_thickness))

        self.slider_scale, self.lbl_scale = self._make_slider(
            SCALE_MIN, SCALE_MAX, SCALE_STEP, DEFAULT_SCALE, "{:.1f}", self.scale_changed
        )
        form.addRow("Scale:", self._slider_row(self.slider_scale, self.lbl_scale))

        return group

    def _build_palette_group(self) -> QGroupBox:
        group = QGroupBox("Colour")
        grid = QGridLayout(group)

        self._color_buttons = QButtonGroup(self)
        self._color_buttons.setExclusive(True)

        for i, color in enumerate(COLOR_PALETTE):
            btn = QPushButton()
            btn.setCheckable(True)
            btn.setFixedSize(28, 28)
            btn.setStyleSheet(
                f"QPushButton {{ background-color: {color}; border: 1px solid #333; border-radius: 14px; }}"
                f"QPushButton:checked {{ border: 3px solid white; }}"
            )
            btn.clicked.connect(lambda _=False, c=color: self.color_changed.emit(c))
            self._color_buttons.addButton(btn)
            grid.addWidget(btn, i // 4, i % 4)
            if i == 0:
                btn.setChecked(True)

        return group

    # --- HELPERS ---

    @staticmethod
    def _slider_row(slider: QSlider, label: QLabel) -> QWidget:
        row = QWidget()
        lay = QHBoxLayout(row)
        lay.setContentsMargins(0, 0, 0, 0)
        lay.addWidget(slider)
        lay.addWidget(label)
        return row

    def _make_slider(
        self,
        lo: float,
        hi: float,
        step: float,
        value: float,
        fmt: str,
        signal: Signal,
    ) -> tuple[QSlider, QLabel]:
        slider = QSlider(Qt.Horizontal)
        slider.setRange(round(lo / step), round(hi / step))
        slider.setValue(round(value / step))

        label = QLabel(fmt.format(value))
        label.setMinimumWidth(36)

        def on_change(ticks: int) -> None:
            v = ticks * step
            label.setText(fmt.format(v))
            signal.emit(v)

        slider.valueChanged.connect(on_change)
        return slider, label
