"""
Curve Builder
=============
Turns an ordered sequence of stroke points into a tube-shaped surface mesh.

Pipeline:
    1. Style filter (solid / dotted / dashed / spiral).
    2. Remove consecutive duplicates (spline stability).
    3. Centripetal Catmull-Rom spline through every surviving point.
    4. Re-sample the spline uniformly by arc length (fixed tessellation).
    5. Sweep a circular cross-section along it using parallel-transport frames.

Fewer than 2 usable points is not an error: `build_tube` returns None and the
stroke simply contributes no mesh for that frame.
"""
from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Optional, Sequence, Union, TYPE_CHECKING

import numpy as np
import pyvista as pv

from kaleidoscope.config import (
    RADIAL_SEGMENTS, SPIRAL_AMPLITUDE, SPIRAL_FREQUENCY, TUBULAR_SEGMENTS,
)
from kaleidoscope.controller.tube_kernels import transport_frames
from kaleidoscope.model.geometry_primitives import Point, points_to_array
from kaleidoscope.model.params import StrokeStyle

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)

PointsLike = Union[Sequence[Point], "npt.NDArray[np.float64]"]

DOTTED_PERIOD = 3
DASH_LENGTH = 5
DENSE_SAMPLES_PER_SEGMENT = 16


@dataclass(frozen=True, eq=False)
class TubeMesh:
    """
    Triangle mesh of a swept tube. Arrays are read-only once built.

    Attributes:
        vertices: (N, 3) vertex positions.
        normals: (N, 3) unit vertex normals.
        indices: (M, 3) triangle vertex indices.
        centerline: (tubular_segments + 1, 3) spline samples.
    """
    vertices: npt.NDArray[np.float64]
    normals: npt.NDArray[np.float64]
    indices: npt.NDArray[np.int32]
    centerline: npt.NDArray[np.float64]
    radius: float

    @property
    def n_vertices(self) -> int:
        return int(self.vertices.shape[0])

    @property
    def n_triangles(self) -> int:
        return int(self.indices.shape[0])

    def to_polydata(self) -> pv.PolyData:
        """Convert to a PyVista surface with point normals."""
        faces = np.hstack([
            np.full((self.n_triangles, 1), 3, dtype=np.int64),
            self.indices.astype(np.int64),
        ]).ravel()
        pd = pv.PolyData(np.array(self.vertices), faces)
        pd.point_data["Normals"] = np.array(self.normals)
        return pd


# -------------------------------------------------------------------------------
# Point filtering
# -------------------------------------------------------------------------------

def _as_array(points: PointsLike) -> npt.NDArray[np.float64]:
    if isinstance(points, np.ndarray):
        return np.asarray(points, dtype=np.float64).reshape(-1, 3)
    return points_to_array(points)


def filter_points(points: PointsLike, style: StrokeStyle) -> npt.NDArray[np.float64]:
    """
    Apply the brush style to the point sequence.

    - solid: unchanged.
    - dotted: keep 2 of every 3 points (drops indices 1, 4, 7, ...).
    - dashed: alternate kept/dropped runs of 5 points.
    - spiral: sinusoidal offset per point index in the plane perpendicular to
      the local stroke direction, nothing removed.
    """
    pts = _as_array(points)
    idx = np.arange(len(pts))

    if style == StrokeStyle.SOLID:
        return pts.copy()
    if style == StrokeStyle.DOTTED:
        return pts[idx % DOTTED_PERIOD != 1]
    if style == StrokeStyle.DASHED:
        return pts[(idx // DASH_LENGTH) % 2 == 0]
    if style == StrokeStyle.SPIRAL:
        side, lift = _lateral_axes(pts)
        phase = (idx * SPIRAL_FREQUENCY)[:, None]
        offset = (np.sin(phase) * side + np.cos(phase) * lift) * SPIRAL_AMPLITUDE
        return pts + offset
    raise ValueError(f"Unknown stroke style: {style!r}")


def _lateral_axes(pts: npt.NDArray[np.float64]) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
    """
    Two unit axes per point spanning the plane perpendicular to the local
    stroke direction: `side` is horizontal where possible, `lift` completes
    the right-handed frame.
    """
    n = len(pts)
    direction = np.zeros((n, 3))
    if n > 1:
        direction = np.gradient(pts, axis=0)
    length = np.linalg.norm(direction, axis=1)
    direction[length < 1e-12] = (1.0, 0.0, 0.0)
    direction /= np.linalg.norm(direction, axis=1)[:, None]

    side = np.cross(direction, (0.0, 1.0, 0.0))
    vertical = np.linalg.norm(side, axis=1) < 1e-9
    side[vertical] = np.cross(direction[vertical], (1.0, 0.0, 0.0))
    side /= np.linalg.norm(side, axis=1)[:, None]

    lift = np.cross(side, direction)
    return side, lift


def clean_duplicate_points(points: npt.NDArray[np.float64], tol: float = 1e-9) -> npt.NDArray[np.float64]:
    """
    Removes consecutive points that are too close to each other.
    Coincident control points make the spline parameterization degenerate.
    """
    if len(points) < 2:
        return points

    dist = np.linalg.norm(np.diff(points, axis=0), axis=1)

    # Keep the first point, and any point that is far enough from the previous one
    mask = np.concatenate(([True], dist > tol))
    return points[mask]


# -------------------------------------------------------------------------------
# Spline
# -------------------------------------------------------------------------------

def catmull_rom(
    points: npt.NDArray[np.float64],
    samples_per_segment: int = DENSE_SAMPLES_PER_SEGMENT,
) -> npt.NDArray[np.float64]:
    """
    Evaluate a centripetal Catmull-Rom spline through all control points.

    The end tangents are defined by reflecting the second/second-to-last point
    across the first/last one. Control point `k` is returned exactly at index
    `k * samples_per_segment`.

    Args:
        points: (N, 3) control points, N >= 2, no consecutive duplicates.
        samples_per_segment: Number of samples between two control points.

    Returns:
        ((N - 1) * samples_per_segment + 1, 3) array of curve points.
    """
    pts = np.asarray(points, dtype=np.float64)
    if len(pts) < 2:
        raise ValueError(f"Need at least 2 control points, got {len(pts)}.")

    ctrl = np.vstack([2.0 * pts[0] - pts[1], pts, 2.0 * pts[-1] - pts[-2]])
    p0, p1, p2, p3 = ctrl[:-3], ctrl[1:-2], ctrl[2:-1], ctrl[3:]

    # Centripetal knot intervals: |d| ** 0.5
    dt0 = np.linalg.norm(p1 - p0, axis=1) ** 0.5
    dt1 = np.linalg.norm(p2 - p1, axis=1) ** 0.5
    dt2 = np.linalg.norm(p3 - p2, axis=1) ** 0.5

    dt1 = np.where(dt1 < 1e-4, 1.0, dt1)
    dt0 = np.where(dt0 < 1e-4, dt1, dt0)
    dt2 = np.where(dt2 < 1e-4, dt1, dt2)

    dt0, dt1, dt2 = dt0[:, None], dt1[:, None], dt2[:, None]

    # Tangents at p1 and p2, rescaled to the [0, 1] segment parameter
    t1 = ((p1 - p0) / dt0 - (p2 - p0) / (dt0 + dt1) + (p2 - p1) / dt1) * dt1
    t2 = ((p2 - p1) / dt1 - (p3 - p1) / (dt1 + dt2) + (p3 - p2) / dt2) * dt1

    c0 = p1
    c1 = t1
    c2 = -3.0 * p1 + 3.0 * p2 - 2.0 * t1 - t2
    c3 = 2.0 * p1 - 2.0 * p2 + t1 + t2

    u = np.linspace(0.0, 1.0, samples_per_segment, endpoint=False)[None, :, None]
    curve = (
        c0[:, None, :]
        + c1[:, None, :] * u
        + c2[:, None, :] * u**2
        + c3[:, None, :] * u**3
    )

    return np.vstack([curve.reshape(-1, 3), pts[-1]])


def resample_by_arc_length(polyline: npt.NDArray[np.float64], n_points: int) -> npt.NDArray[np.float64]:
    """Re-sample a polyline into `n_points` points evenly spaced along its length."""
    polyline = clean_duplicate_points(polyline)
    seg = np.linalg.norm(np.diff(polyline, axis=0), axis=1)
    s = np.concatenate(([0.0], np.cumsum(seg)))
    target = np.linspace(0.0, s[-1], n_points)
    return np.column_stack([np.interp(target, s, polyline[:, d]) for d in range(3)])


# -------------------------------------------------------------------------------
# Tube sweep
# -------------------------------------------------------------------------------

def parallel_transport_frames(
    centerline: npt.NDArray[np.float64],
) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64], npt.NDArray[np.float64]]:
    """
    Compute twist-minimizing (tangent, normal, binormal) frames along a curve.
    """
    n = len(centerline)
    tangents = np.gradient(centerline, axis=0)
    lengths = np.linalg.norm(tangents, axis=1)

    # A path that doubles back on itself can cancel the central difference
    for i in np.flatnonzero(lengths < 1e-12):
        forward = centerline[min(i + 1, n - 1)] - centerline[i]
        if np.linalg.norm(forward) < 1e-12:
            forward = centerline[i] - centerline[max(i - 1, 0)]
        tangents[i] = forward
        lengths[i] = np.linalg.norm(forward)

    tangents /= lengths[:, None]

    normals = np.empty_like(tangents)
    binormals = np.empty_like(tangents)
    transport_frames(tangents, normals, binormals)

    return tangents, normals, binormals


def tube_indices(n_rings: int, radial_segments: int) -> npt.NDArray[np.int32]:
    """Triangle indices connecting `n_rings` rings of `radial_segments` vertices."""
    i, j = np.meshgrid(np.arange(n_rings - 1), np.arange(radial_segments), indexing="ij")
    i = i.ravel()
    j = j.ravel()
    j_next = (j + 1) % radial_segments

    a = i * radial_segments + j
    b = (i + 1) * radial_segments + j
    c = (i + 1) * radial_segments + j_next
    d = i * radial_segments + j_next

    tris = np.stack([np.column_stack([a, b, d]), np.column_stack([b, c, d])], axis=1)
    return tris.reshape(-1, 3).astype(np.int32)


def sweep_tube(
    centerline: npt.NDArray[np.float64],
    radius: float,
    radial_segments: int = RADIAL_SEGMENTS,
) -> TubeMesh:
    """Sweep a circle of `radius` along `centerline`."""
    _, normals, binormals = parallel_transport_frames(centerline)

    theta = np.linspace(0.0, 2.0 * np.pi, radial_segments, endpoint=False)
    cos_t = np.cos(theta)[None, :, None]
    sin_t = np.sin(theta)[None, :, None]

    # (rings, radial, 3)
    ring_normals = cos_t * normals[:, None, :] + sin_t * binormals[:, None, :]
    vertices = centerline[:, None, :] + radius * ring_normals

    vertices = vertices.reshape(-1, 3)
    vertex_normals = ring_normals.reshape(-1, 3)
    indices = tube_indices(len(centerline), radial_segments)
    centerline = np.array(centerline)

    for arr in (vertices, vertex_normals, indices, centerline):
        arr.flags.writeable = False

    return TubeMesh(
        vertices=vertices,
        normals=vertex_normals,
        indices=indices,
        centerline=centerline,
        radius=radius,
    )


def build_tube(
    points: PointsLike,
    thickness: float,
    style: StrokeStyle = StrokeStyle.SOLID,
    *,
    tubular_segments: int = TUBULAR_SEGMENTS,
    radial_segments: int = RADIAL_SEGMENTS,
) -> Optional[TubeMesh]:
    """
    Build the tube mesh of a stroke.

    Args:
        points: Ordered stroke points (Point objects or an (N, 3) array).
        thickness: Tube radius.
        style: Brush style applied to the points before spline fitting.

    Returns:
        The TubeMesh, or None if fewer than 2 distinct points survive filtering.
    """
    filtered = clean_duplicate_points(filter_points(points, style))
    if len(filtered) < 2:
        logger.debug(f"Skipping tube: {len(filtered)} usable point(s) after '{style}' filtering.")
        return None

    dense = catmull_rom(filtered)
    centerline = resample_by_arc_length(dense, tubular_segments + 1)
    return sweep_tube(centerline, thickness, radial_segments)
