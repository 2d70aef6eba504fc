"""
Particle Emitter / Integrator
=============================
Short-lived sparkle trail spawned at the pointer while the user draws.

The pool is a fixed-capacity struct-of-arrays. Once it is full, new spawns are
dropped; the oldest particles are never evicted. Life only decreases and a
dead particle is never resurrected (its slot is reused by a new spawn).
"""
from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Optional, TYPE_CHECKING

import numpy as np

from kaleidoscope.config import (
    MAX_PARTICLES, PARTICLE_DRAG, PARTICLE_GRAVITY, PARTICLE_JITTER, PARTICLES_PER_FRAME,
)
from kaleidoscope.controller.particle_kernels import fade_factors, integrate_particles
from kaleidoscope.model.geometry_primitives import Point
from kaleidoscope.model.params import RGB

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)


def particle_alpha(life: float, max_life: float) -> float:
    """Linear fade: 1 at birth, exactly 0 once the life is spent."""
    if max_life <= 0.0:
        return 0.0
    return min(1.0, max(0.0, life / max_life))


@dataclass(frozen=True, eq=False)
class ParticleBuffer:
    """Per-frame point-sprite data, drawn with additive blending."""
    positions: npt.NDArray[np.float64]  # (N, 3)
    colors: npt.NDArray[np.float64]  # (N, 3) color * alpha
    sizes: npt.NDArray[np.float64]  # (N,) size * alpha

    def __len__(self) -> int:
        return int(self.positions.shape[0])


class ParticleSystem:
    """Fixed-capacity particle pool with per-frame spawning and integration."""

    def __init__(
        self,
        capacity: int = MAX_PARTICLES,
        rng: Optional[np.random.Generator] = None,
        spawn_count: int = PARTICLES_PER_FRAME,
    ) -> None:
        self.capacity = capacity
        self.spawn_count = spawn_count
        self.gravity = PARTICLE_GRAVITY
        self.drag = PARTICLE_DRAG
        self._rng = rng if rng is not None else np.random.default_rng()

        self.positions = np.zeros((capacity, 3))
        self.velocities = np.zeros((capacity, 3))
        self.life = np.zeros(capacity)
        self.max_life = np.ones(capacity)
        self.sizes = np.zeros(capacity)
        self._count = 0

    @property
    def count(self) -> int:
        return self._count

    def clear(self) -> None:
        self._count = 0

    def spawn(self, point: Point) -> int:
        """
        Spawn up to `spawn_count` particles around `point`.

        Returns:
            The number of particles actually admitted (0 once the pool is full).
        """
        n = min(self.spawn_count, self.capacity - self._count)
        if n <= 0:
            return 0

        rng = self._rng
        sl = slice(self._count, self._count + n)

        jitter = (rng.random((n, 3)) - 0.5) * (2.0 * PARTICLE_JITTER)
        self.positions[sl] = point.to_array() + jitter

        # Upward-biased initial velocity
        self.velocities[sl, 0] = (rng.random(n) - 0.5) * 0.02
        self.velocities[sl, 1] = rng.random(n) * 0.03 + 0.01
        self.velocities[sl, 2] = (rng.random(n) - 0.5) * 0.02

        max_life = 1.0 + rng.random(n) * 2.0
        self.max_life[sl] = max_life
        self.life[sl] = max_life
        self.sizes[sl] = rng.random(n) * 0.1 + 0.05

        self._count += n
        return n

    def integrate(self, dt: float) -> None:
        """Advance every live particle and drop the expired ones."""
        if self._count == 0:
            return
        self._count = integrate_particles(
            self.positions, self.velocities, self.life, self.max_life, self.sizes,
            self._count, float(dt), self.gravity, self.drag,
        )

    def buffer(self, color: RGB) -> ParticleBuffer:
        """Faded render data for the live particles."""
        n = self._count
        alpha = fade_factors(self.life, self.max_life, n)
        return ParticleBuffer(
            positions=self.positions[:n].copy(),
            colors=np.asarray(color, dtype=np.float64)[None, :] * alpha[:, None],
            sizes=self.sizes[:n] * alpha,
        )

    def step(self, dt: float, is_drawing: bool, point: Optional[Point], color: RGB) -> ParticleBuffer:
        """
        One simulation step: spawn (while drawing at a known point), integrate,
        remove expired particles, and emit the render buffer.
        """
        if is_drawing and point is not None:
            self.spawn(point)
        self.integrate(dt)
        return self.buffer(color)
