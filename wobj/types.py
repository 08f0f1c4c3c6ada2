# wobj/types.py
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple, TypeAlias

import numpy as np

Scalar: TypeAlias = float

Matrix4: TypeAlias = np.ndarray  # (4, 4) float64, row-major

UV = Tuple[float, float]


@dataclass(frozen=True, slots=True)
class Vector3:
    x: Scalar
    y: Scalar
    z: Scalar

    @staticmethod
    def zero() -> Vector3:
        return Vector3(0.0, 0.0, 0.0)

    @staticmethod
    def one() -> Vector3:
        return Vector3(1.0, 1.0, 1.0)

    def __iter__(self) -> Iterator[Scalar]:
        yield self.x
        yield self.y
        yield self.z

    def __add__(self, other: Vector3) -> Vector3:
        return Vector3(
            self.x + other.x,
            self.y + other.y,
            self.z + other.z,
        )

    def __mul__(self, scalar: float) -> Vector3:
        return Vector3(
            self.x * scalar,
            self.y * scalar,
            self.z * scalar,
        )

    def length(self) -> Scalar:
        return math.hypot(self.x, self.y, self.z)


@dataclass(frozen=True, slots=True)
class Quaternion:
    x: Scalar
    y: Scalar
    z: Scalar
    w: Scalar

    def __iter__(self) -> Iterator[Scalar]:
        yield self.x
        yield self.y
        yield self.z
        yield self.w

    @staticmethod
    def identity() -> Quaternion:
        return Quaternion(0.0, 0.0, 0.0, 1.0)

    @staticmethod
    def from_axis_angle(axis: Vector3, angle: float) -> Quaternion:
        """Rotation of `angle` radians about a (not necessarily unit) axis."""
        length = axis.length()
        if length == 0.0:
            return Quaternion.identity()
        s = math.sin(angle * 0.5) / length
        return Quaternion(axis.x * s, axis.y * s, axis.z * s, math.cos(angle * 0.5))

    def dot(self, other: Quaternion) -> Scalar:
        return (
            self.x * other.x
            + self.y * other.y
            + self.z * other.z
            + self.w * other.w
        )

    def __neg__(self) -> Quaternion:
        return Quaternion(-self.x, -self.y, -self.z, -self.w)

    def __add__(self, other: Quaternion) -> Quaternion:
        return Quaternion(
            self.x + other.x,
            self.y + other.y,
            self.z + other.z,
            self.w + other.w,
        )

    def __mul__(self, scalar: float) -> Quaternion:
        return Quaternion(
            self.x * scalar,
            self.y * scalar,
            self.z * scalar,
            self.w * scalar,
        )


@dataclass
class BoundingBox3D:
    """Axis-aligned box; starts empty and grows with `include`."""

    min: Optional[Vector3] = None
    max: Optional[Vector3] = None

    @property
    def is_empty(self) -> bool:
        return self.min is None or self.max is None

    def include(self, point: Vector3) -> None:
        if self.min is None or self.max is None:
            self.min = point
            self.max = point
            return
        self.min = Vector3(
            min(self.min.x, point.x),
            min(self.min.y, point.y),
            min(self.min.z, point.z),
        )
        self.max = Vector3(
            max(self.max.x, point.x),
            max(self.max.y, point.y),
            max(self.max.z, point.z),
        )

    def corners(self) -> Tuple[Vector3, Vector3]:
        # An empty box has no extent; it is reported as a point at the origin.
        if self.min is None or self.max is None:
            return Vector3.zero(), Vector3.zero()
        return self.min, self.max
