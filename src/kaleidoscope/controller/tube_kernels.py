# tube_kernels.py
from __future__ import annotations

import math

import numpy as np
import numpy.typing as npt
import numba as nb

# ---- JIT'd frame propagation (runs once per swept tube) ----

@nb.njit(cache=True, fastmath=True)
def perpendicular(t: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    """Unit vector perpendicular to the unit vector `t`, built from its smallest component axis."""
    axis = 0
    smallest = abs(t[0])
    if abs(t[1]) < smallest:
        axis = 1
        smallest = abs(t[1])
    if abs(t[2]) < smallest:
        axis = 2

    # t x e_axis
    out = np.empty(3)
    if axis == 0:
        out[0], out[1], out[2] = 0.0, t[2], -t[1]
    elif axis == 1:
        out[0], out[1], out[2] = -t[2], 0.0, t[0]
    else:
        out[0], out[1], out[2] = t[1], -t[0], 0.0

    norm = math.sqrt(out[0] * out[0] + out[1] * out[1] + out[2] * out[2])
    for k in range(3):
        out[k] /= norm
    return out


@nb.njit(cache=True, fastmath=True)
def transport_frames(
    tangents: npt.NDArray[np.float64],
    normals: npt.NDArray[np.float64],
    binormals: npt.NDArray[np.float64],
) -> None:
    """
    Fill `normals` and `binormals` with twist-minimizing frames along the
    unit `tangents` (all arrays (N, 3)).

    Each normal is the previous one rotated by the angle between consecutive
    tangents (Rodrigues), then re-orthogonalized against the new tangent. A
    normal that collapses is replaced by an arbitrary perpendicular.
    """
    n = tangents.shape[0]

    normals[0, :] = perpendicular(tangents[0])

    for i in range(n):
        if i > 0:
            px, py, pz = tangents[i - 1, 0], tangents[i - 1, 1], tangents[i - 1, 2]
            cx, cy, cz = tangents[i, 0], tangents[i, 1], tangents[i, 2]
            vx, vy, vz = normals[i - 1, 0], normals[i - 1, 1], normals[i - 1, 2]

            ax = py * cz - pz * cy
            ay = pz * cx - px * cz
            az = px * cy - py * cx
            rot_len = math.sqrt(ax * ax + ay * ay + az * az)

            if rot_len > 1e-12:
                ax /= rot_len
                ay /= rot_len
                az /= rot_len
                cos_a = min(1.0, max(-1.0, px * cx + py * cy + pz * cz))
                sin_a = math.sqrt(1.0 - cos_a * cos_a)

                kdv = ax * vx + ay * vy + az * vz
                kx = ay * vz - az * vy
                ky = az * vx - ax * vz
                kz = ax * vy - ay * vx
                vx, vy, vz = (
                    vx * cos_a + kx * sin_a + ax * kdv * (1.0 - cos_a),
                    vy * cos_a + ky * sin_a + ay * kdv * (1.0 - cos_a),
                    vz * cos_a + kz * sin_a + az * kdv * (1.0 - cos_a),
                )

            # Re-orthogonalize against drift
            d = vx * cx + vy * cy + vz * cz
            vx -= d * cx
            vy -= d * cy
            vz -= d * cz
            length = math.sqrt(vx * vx + vy * vy + vz * vz)
            if length > 1e-9:
                normals[i, 0] = vx / length
                normals[i, 1] = vy / length
                normals[i, 2] = vz / length
            else:
                normals[i, :] = perpendicular(tangents[i])

        tx, ty, tz = tangents[i, 0], tangents[i, 1], tangents[i, 2]
        nx, ny, nz = normals[i, 0], normals[i, 1], normals[i, 2]
        binormals[i, 0] = ty * nz - tz * ny
        binormals[i, 1] = tz * nx - tx * nz
        binormals[i, 2] = tx * ny - ty * nx
