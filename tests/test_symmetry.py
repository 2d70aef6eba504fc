import math

import numpy as np
import pytest

from kaleidoscope.config import MANDALA_WAVE_AMPLITUDE, WAVE_AMPLITUDE
from kaleidoscope.controller.symmetry import (
    SYMMETRY_ANGLES, copies_for, mirror_points, rotate_y, wave_offset,
)
from kaleidoscope.model.geometry_primitives import Point
from kaleidoscope.model.params import SymmetryMode

STROKE = np.array([
    [1.0, 0.0, 0.0],
    [1.5, 0.5, 0.5],
    [2.0, 1.0, -0.5],
])


@pytest.mark.parametrize("mode, expected", [
    (SymmetryMode.NONE, 1),
    (SymmetryMode.FOUR_FOLD, 4),
    (SymmetryMode.SIX_FOLD, 6),
    (SymmetryMode.EIGHT_FOLD, 8),
    (SymmetryMode.MANDALA, 12),
])
def test_copy_count_matches_mode(mode, expected):
    assert copies_for(mode) == expected
    assert len(mirror_points(STROKE, mode)) == expected


@pytest.mark.parametrize("mode", list(SymmetryMode))
def test_angles_are_ordered_in_full_turn(mode):
    angles = SYMMETRY_ANGLES[mode]
    assert angles[0] == 0.0
    assert all(0.0 <= a < 2.0 * math.pi for a in angles)
    assert list(angles) == sorted(angles)


@pytest.mark.parametrize("mode", list(SymmetryMode))
def test_primary_copy_is_identical_to_input(mode):
    primary = mirror_points(STROKE, mode)[0]
    assert np.array_equal(primary, STROKE)


def test_point_objects_are_accepted():
    pts = [Point(1.0, 0.0, 0.0), Point(2.0, 0.0, 0.0)]
    copies = mirror_points(pts, SymmetryMode.FOUR_FOLD)
    assert np.array_equal(copies[0], [[1.0, 0.0, 0.0], [2.0, 0.0, 0.0]])


def test_rotation_is_about_the_vertical_axis():
    out = rotate_y(np.array([[1.0, 2.0, 0.0]]), math.pi / 2)
    assert np.allclose(out, [[0.0, 2.0, -1.0]])


def test_copies_keep_horizontal_radius():
    radius = np.hypot(STROKE[:, 0], STROKE[:, 2])
    for copy in mirror_points(STROKE, SymmetryMode.EIGHT_FOLD):
        assert np.allclose(np.hypot(copy[:, 0], copy[:, 2]), radius)


def test_four_fold_second_copy_has_doubled_angle_wave():
    copy = mirror_points(np.array([[1.0, 0.0, 0.0]]), SymmetryMode.FOUR_FOLD)[1]
    angle = math.pi / 2
    assert np.allclose(copy[0, [0, 2]], [0.0, -1.0])
    assert np.isclose(copy[0, 1], math.sin(2.0 * angle + 1.0) * WAVE_AMPLITUDE)


def test_mandala_uses_tripled_angle_wave():
    copy = mirror_points(np.array([[1.0, 0.0, 0.0]]), SymmetryMode.MANDALA)[1]
    angle = math.pi / 6
    assert np.isclose(copy[0, 1], math.sin(3.0 * angle + 1.0) * MANDALA_WAVE_AMPLITUDE)


def test_wave_uses_original_horizontal_coordinate():
    x = np.array([0.0, 1.0, 2.0])
    offset = wave_offset(math.pi / 3, x, SymmetryMode.SIX_FOLD)
    assert np.allclose(offset, np.sin(2.0 * math.pi / 3 + x) * WAVE_AMPLITUDE)


def test_angle_zero_has_no_wave():
    x = np.array([0.3, -4.0])
    for mode in SymmetryMode:
        assert np.array_equal(wave_offset(0.0, x, mode), np.zeros(2))


def test_mirroring_does_not_modify_input():
    pts = STROKE.copy()
    mirror_points(pts, SymmetryMode.MANDALA)
    assert np.array_equal(pts, STROKE)
