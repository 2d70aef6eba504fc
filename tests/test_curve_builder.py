import numpy as np
import pytest

from kaleidoscope.config import RADIAL_SEGMENTS, SPIRAL_AMPLITUDE, TUBULAR_SEGMENTS
from kaleidoscope.controller.curve_builder import (
    DENSE_SAMPLES_PER_SEGMENT,
    build_tube,
    catmull_rom,
    clean_duplicate_points,
    filter_points,
    parallel_transport_frames,
    tube_indices,
)
from kaleidoscope.controller.tube_kernels import perpendicular
from kaleidoscope.model.geometry_primitives import Point
from kaleidoscope.model.params import StrokeStyle


def _line(n: int) -> np.ndarray:
    return np.column_stack([np.arange(n, dtype=float), np.zeros(n), np.zeros(n)])


def _arc(n: int, radius: float = 2.0) -> np.ndarray:
    t = np.linspace(0.0, np.pi, n)
    return np.column_stack([radius * np.cos(t), np.zeros(n), radius * np.sin(t)])


# --- Style filtering ---

def test_solid_keeps_every_point():
    pts = _line(7)
    out = filter_points(pts, StrokeStyle.SOLID)
    assert np.array_equal(out, pts)
    assert out is not pts


def test_dotted_nine_points_keeps_six():
    pts = _line(9)
    out = filter_points(pts, StrokeStyle.DOTTED)
    assert len(out) == 6
    assert np.array_equal(out[:, 0], [0, 2, 3, 5, 6, 8])


def test_dashed_alternates_runs_of_five():
    pts = _line(12)
    out = filter_points(pts, StrokeStyle.DASHED)
    assert np.array_equal(out[:, 0], [0, 1, 2, 3, 4, 10, 11])


def test_spiral_offsets_laterally_without_removing():
    pts = _line(10)
    out = filter_points(pts, StrokeStyle.SPIRAL)
    assert out.shape == pts.shape

    offset = out - pts
    assert np.allclose(np.linalg.norm(offset, axis=1), SPIRAL_AMPLITUDE)
    # nothing along the stroke direction (+x)
    assert np.allclose(offset[:, 0], 0.0)


def test_spiral_offset_follows_stroke_direction():
    t = np.linspace(0.0, 1.0, 8)
    pts = np.column_stack([t, t, np.zeros_like(t)])
    offset = filter_points(pts, StrokeStyle.SPIRAL) - pts
    direction = np.array([1.0, 1.0, 0.0]) / np.sqrt(2.0)
    assert np.allclose(offset @ direction, 0.0)
    assert np.allclose(np.linalg.norm(offset, axis=1), SPIRAL_AMPLITUDE)


def test_spiral_on_vertical_stroke_is_finite():
    pts = np.column_stack([np.zeros(5), np.arange(5.0), np.zeros(5)])
    offset = filter_points(pts, StrokeStyle.SPIRAL) - pts
    assert np.allclose(offset[:, 1], 0.0)
    assert np.allclose(np.linalg.norm(offset, axis=1), SPIRAL_AMPLITUDE)


def test_filter_accepts_point_objects():
    pts = [Point(0.0, 0.0, 0.0), Point(1.0, 0.0, 0.0), Point(2.0, 0.0, 0.0)]
    out = filter_points(pts, StrokeStyle.DOTTED)
    assert np.array_equal(out[:, 0], [0.0, 2.0])


def test_clean_duplicate_points_removes_consecutive_repeats():
    pts = np.array([[0, 0, 0], [0, 0, 0], [1, 0, 0], [1, 0, 0], [0, 0, 0]], dtype=float)
    out = clean_duplicate_points(pts)
    assert np.array_equal(out[:, 0], [0.0, 1.0, 0.0])


# --- Degenerate input ---

def test_dotted_two_points_gives_no_mesh():
    assert build_tube(_line(2), 0.15, StrokeStyle.DOTTED) is None


def test_single_point_gives_no_mesh():
    assert build_tube(_line(1), 0.15, StrokeStyle.SOLID) is None


def test_collapsed_points_give_no_mesh():
    pts = np.zeros((4, 3))
    assert build_tube(pts, 0.15, StrokeStyle.SOLID) is None


# --- Spline ---

def test_spline_interpolates_every_control_point():
    pts = np.array([
        [0.0, 0.0, 0.0],
        [1.0, 0.5, 0.0],
        [2.0, 0.0, 1.0],
        [2.5, -1.0, 1.5],
        [4.0, 0.0, 0.0],
    ])
    curve = catmull_rom(pts)
    assert len(curve) == (len(pts) - 1) * DENSE_SAMPLES_PER_SEGMENT + 1
    for k, p in enumerate(pts):
        assert np.allclose(curve[k * DENSE_SAMPLES_PER_SEGMENT], p)


def test_spline_of_collinear_points_stays_on_the_line():
    curve = catmull_rom(_line(4))
    assert np.allclose(curve[:, 1:], 0.0)
    assert np.all(np.diff(curve[:, 0]) > 0.0)


def test_spline_needs_two_points():
    with pytest.raises(ValueError):
        catmull_rom(_line(1))


# --- Frames ---

def test_frames_are_orthonormal():
    tangents, normals, binormals = parallel_transport_frames(catmull_rom(_arc(6)))
    for a, b in ((tangents, normals), (tangents, binormals), (normals, binormals)):
        assert np.allclose(np.einsum("ij,ij->i", a, b), 0.0, atol=1e-9)
    for v in (tangents, normals, binormals):
        assert np.allclose(np.linalg.norm(v, axis=1), 1.0)


def test_frames_do_not_twist_along_straight_line():
    _, normals, _ = parallel_transport_frames(_line(20))
    assert np.allclose(normals, normals[0])


def test_perpendicular_uses_smallest_component():
    n = perpendicular(np.array([0.0, 0.0, 1.0]))
    assert np.allclose(n, [0.0, 1.0, 0.0])
    assert np.isclose(np.linalg.norm(perpendicular(np.array([0.6, 0.8, 0.0]))), 1.0)


# --- Tube mesh ---

def test_tube_topology_is_fixed():
    mesh = build_tube(_arc(5), 0.2)
    assert mesh is not None
    assert mesh.n_vertices == (TUBULAR_SEGMENTS + 1) * RADIAL_SEGMENTS
    assert mesh.n_triangles == TUBULAR_SEGMENTS * RADIAL_SEGMENTS * 2
    assert mesh.indices.min() == 0
    assert mesh.indices.max() == mesh.n_vertices - 1


def test_tessellation_independent_of_point_count():
    few = build_tube(_arc(3), 0.2)
    many = build_tube(_arc(40), 0.2)
    assert few.n_vertices == many.n_vertices
    assert few.n_triangles == many.n_triangles


def test_tube_rings_have_the_stroke_thickness():
    thickness = 0.35
    mesh = build_tube(_arc(6), thickness)
    rings = mesh.vertices.reshape(TUBULAR_SEGMENTS + 1, RADIAL_SEGMENTS, 3)
    dist = np.linalg.norm(rings - mesh.centerline[:, None, :], axis=2)
    assert np.allclose(dist, thickness)
    assert np.allclose(np.linalg.norm(mesh.normals, axis=1), 1.0)


def test_tube_starts_and_ends_at_the_stroke_ends():
    pts = _arc(6)
    mesh = build_tube(pts, 0.1)
    assert np.allclose(mesh.centerline[0], pts[0])
    assert np.allclose(mesh.centerline[-1], pts[-1])


def test_stroke_that_doubles_back_builds_finite_mesh():
    pts = np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 0.0, 0.0]])
    mesh = build_tube(pts, 0.1)
    assert mesh is not None
    assert np.all(np.isfinite(mesh.vertices))


def test_tube_mesh_is_read_only():
    mesh = build_tube(_line(3), 0.1)
    with pytest.raises(ValueError):
        mesh.vertices[0, 0] = 10.0


def test_tube_indices_wrap_around_the_ring():
    tris = tube_indices(n_rings=2, radial_segments=4)
    assert tris.shape == (8, 3)
    # last quad closes the ring back to vertex 0 / 4
    assert {0, 4}.issubset(set(tris[-2:].ravel()))


def test_to_polydata():
    mesh = build_tube(_arc(4), 0.1)
    pd = mesh.to_polydata()
    assert pd.n_points == mesh.n_vertices
    assert pd.n_cells == mesh.n_triangles
    assert "Normals" in pd.point_data
