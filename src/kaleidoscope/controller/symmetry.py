"""
Symmetry Transformer
====================
Expands one stroke into its rotational mirror copies.

Each copy is the stroke rotated about the vertical (Y) axis by one angle of
the symmetry mode, then displaced vertically by a small wave depending on the
angle and the point's original X coordinate. Pure rotation alone produces flat,
coplanar mirrors; the wave makes the copies read as distinct 3D reflections.
The angle-zero copy is never displaced, so it is identical to the input.
"""
from __future__ import annotations

import math
from typing import Dict, Sequence, Tuple, Union, TYPE_CHECKING

import numpy as np

from kaleidoscope.config import MANDALA_WAVE_AMPLITUDE, WAVE_AMPLITUDE
from kaleidoscope.model.geometry_primitives import Point, points_to_array
from kaleidoscope.model.params import SymmetryMode

if TYPE_CHECKING:
    import numpy.typing as npt


def _angles(n: int) -> Tuple[float, ...]:
    return tuple(2.0 * math.pi * k / n for k in range(n))


SYMMETRY_ANGLES: Dict[SymmetryMode, Tuple[float, ...]] = {
    SymmetryMode.NONE: (0.0,),
    SymmetryMode.FOUR_FOLD: _angles(4),
    SymmetryMode.SIX_FOLD: _angles(6),
    SymmetryMode.EIGHT_FOLD: _angles(8),
    SymmetryMode.MANDALA: _angles(12),
}


def copies_for(mode: SymmetryMode) -> int:
    """Number of mirror copies generated per stroke."""
    return len(SYMMETRY_ANGLES[SymmetryMode(mode)])


def rotate_y(points: npt.NDArray[np.float64], angle: float) -> npt.NDArray[np.float64]:
    """Rotate (N, 3) points about the Y axis (right-handed)."""
    if angle == 0.0:
        return np.array(points, dtype=np.float64)

    cos_a = math.cos(angle)
    sin_a = math.sin(angle)
    x, y, z = points[:, 0], points[:, 1], points[:, 2]
    return np.column_stack([x * cos_a + z * sin_a, y, -x * sin_a + z * cos_a])


def wave_offset(angle: float, x: npt.NDArray[np.float64], mode: SymmetryMode) -> npt.NDArray[np.float64]:
    """
    Vertical displacement of a mirror copy.

    Mandala copies use the tripled angle and a larger amplitude, every other
    mode uses the doubled angle. The angle-zero copy gets no displacement.
    """
    if angle == 0.0:
        return np.zeros_like(x)
    if mode == SymmetryMode.MANDALA:
        return np.sin(3.0 * angle + x) * MANDALA_WAVE_AMPLITUDE
    return np.sin(2.0 * angle + x) * WAVE_AMPLITUDE


def mirror_points(
    points: Union[Sequence[Point], npt.NDArray[np.float64]],
    mode: SymmetryMode,
) -> list[npt.NDArray[np.float64]]:
    """
    Produce one transformed point sequence per angle of `mode`, in angle order.

    Returns:
        List of (N, 3) arrays. Index 0 is the primary copy.
    """
    if isinstance(points, np.ndarray):
        pts = np.asarray(points, dtype=np.float64).reshape(-1, 3)
    else:
        pts = points_to_array(points)

    mode = SymmetryMode(mode)
    copies = []
    for angle in SYMMETRY_ANGLES[mode]:
        rotated = rotate_y(pts, angle)
        rotated[:, 1] += wave_offset(angle, pts[:, 0], mode)
        copies.append(rotated)
    return copies
