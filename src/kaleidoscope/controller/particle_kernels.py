# particle_kernels.py
from __future__ import annotations

import numpy as np
import numpy.typing as npt
import numba as nb

# ---- JIT'd particle integration (runs once per frame over the whole pool) ----

@nb.njit(cache=True, fastmath=True)
def integrate_particles(
    pos: npt.NDArray[np.float64],
    vel: npt.NDArray[np.float64],
    life: npt.NDArray[np.float64],
    max_life: npt.NDArray[np.float64],
    size: npt.NDArray[np.float64],
    count: int,
    dt: float,
    gravity: float,
    drag: float,
) -> int:
    """
    Advance the first `count` particles by `dt` and drop the expired ones.

    Per particle: position += velocity * dt, gravity on the y velocity,
    multiplicative drag, life -= dt. A particle whose life reaches <= 0 is
    overwritten by the last live particle (unordered removal).

    Returns:
        The new live count.
    """
    i = 0
    while i < count:
        for k in range(3):
            pos[i, k] += vel[i, k] * dt
        vel[i, 1] -= gravity * dt
        for k in range(3):
            vel[i, k] *= drag
        life[i] -= dt

        if life[i] <= 0.0:
            last = count - 1
            if i != last:
                for k in range(3):
                    pos[i, k] = pos[last, k]
                    vel[i, k] = vel[last, k]
                life[i] = life[last]
                max_life[i] = max_life[last]
                size[i] = size[last]
            count -= 1
            # The particle moved into slot i has not been integrated yet
            continue
        i += 1
    return count


@nb.njit(cache=True, fastmath=True)
def fade_factors(life: npt.NDArray[np.float64], max_life: npt.NDArray[np.float64], count: int) -> npt.NDArray[np.float64]:
    """Linear fade alpha = life / max_life for the live particles, clamped to [0, 1]."""
    alpha = np.empty(count)
    for i in range(count):
        a = life[i] / max_life[i]
        if a < 0.0:
            a = 0.0
        elif a > 1.0:
            a = 1.0
        alpha[i] = a
    return alpha
