"""
Geometric Primitives for stroke recording and pointer picking.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Sequence, TYPE_CHECKING
import math
import numpy as np

from kaleidoscope.config import GRID_STEP

if TYPE_CHECKING:
    import numpy.typing as npt


def snap(value: float, step: float = GRID_STEP) -> float:
    """Round a coordinate to the nearest multiple of `step`."""
    return round(value / step) * step


@dataclass(frozen=True)
class Vector:
    """
    A vector in 3D space representing direction and magnitude.
    """
    x: float
    y: float
    z: float = 0.0

    def __add__(self, other: Vector) -> Vector:
        return Vector(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: Vector) -> Vector:
        return Vector(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, scalar: float) -> Vector:
        return Vector(self.x * scalar, self.y * scalar, self.z * scalar)

    @property
    def magnitude(self) -> float:
        return math.sqrt(self.x**2 + self.y**2 + self.z**2)

    def normalize(self) -> Vector:
        mag = self.magnitude
        if mag == 0.0: return Vector(0.0, 0.0, 0.0)
        return self * (1.0 / mag)

    def dot(self, other: Vector) -> float:
        return self.x * other.x + self.y * other.y + self.z * other.z

    def to_array(self) -> npt.NDArray[np.float64]:
        return np.array([self.x, self.y, self.z])

    @staticmethod
    def from_sequence(values: Sequence[float]) -> Vector:
        return Vector(float(values[0]), float(values[1]), float(values[2]))


@dataclass(frozen=True)
class Point:
    """A recorded stroke point in world space. Immutable once created."""
    x: float
    y: float
    z: float = 0.0

    @staticmethod
    def snapped(x: float, y: float, z: float, step: float = GRID_STEP) -> Point:
        """Create a point snapped to the world grid."""
        return Point(snap(x, step), snap(y, step), snap(z, step))

    def __add__(self, other: Vector) -> Point:
        # Point + Vector = Point (Translation)
        if isinstance(other, Vector):
            return Point(self.x + other.x, self.y + other.y, self.z + other.z)
        raise TypeError("Can only add a Vector to a Point.")

    def __sub__(self, other: Point) -> Vector:
        # Point - Point = Vector (Direction)
        if isinstance(other, Point):
            return Vector(self.x - other.x, self.y - other.y, self.z - other.z)
        raise TypeError("Can only subtract a Point from a Point.")

    def distance_sq_to(self, other: Point) -> float:
        return (self.x - other.x) ** 2 + (self.y - other.y) ** 2 + (self.z - other.z) ** 2

    def distance_to(self, other: Point) -> float:
        return math.sqrt(self.distance_sq_to(other))

    def to_array(self) -> npt.NDArray[np.float64]:
        return np.array([self.x, self.y, self.z])


def points_to_array(points: Sequence[Point]) -> npt.NDArray[np.float64]:
    """Stack points into an (N, 3) array."""
    if not points:
        return np.empty((0, 3), dtype=np.float64)
    return np.array([[p.x, p.y, p.z] for p in points], dtype=np.float64)


@dataclass(frozen=True)
class Plane:
    """
    An infinite plane given by a normal and a coplanar point.
    Pointer rays are intersected with it to produce world-space points.
    """
    normal: Vector
    origin: Point

    @staticmethod
    def from_normal_and_point(normal: Vector, point: Point) -> Plane:
        return Plane(normal=normal.normalize(), origin=point)

    @staticmethod
    def ground() -> Plane:
        """The y-up ground plane through the world origin."""
        return Plane(normal=Vector(0.0, 1.0, 0.0), origin=Point(0.0, 0.0, 0.0))

    def intersect_ray(
        self,
        origin: Point,
        direction: Vector,
        *,
        eps: float = 1e-9
    ) -> Optional[Point]:
        """
        Intersect the ray P(t) = origin + t * direction (t >= 0) with the plane.

        Returns:
            The intersection point, or None if the ray is parallel to the plane
            or the plane lies behind the ray origin.
        """
        denom = self.normal.dot(direction)
        if abs(denom) < eps:
            return None

        t = self.normal.dot(self.origin - origin) / denom
        if t < 0.0:
            return None

        return origin + direction * t
