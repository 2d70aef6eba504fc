"""
Kaleidoscope Tubes - freehand 3D strokes mirrored into rotationally
symmetric tube patterns, with a particle trail while drawing.

Layers:
- model: points, strokes, drawing parameters, materials (pure data)
- controller: curve building, symmetry, assembly, particles (Qt-free)
- view / app: PySide6 window and PyVista viewport
"""

__version__ = '0.1.0'
