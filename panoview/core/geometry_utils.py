"""Geometry utility functions for vector operations."""
from __future__ import annotations

import math
from typing import Tuple

Vector2 = Tuple[float, float]
Vector3 = Tuple[float, float, float]


def add(vector1: Vector3, vector2: Vector3) -> Vector3:
    """Component-wise sum of two 3D vectors."""
    return (
        vector1[0] + vector2[0],
        vector1[1] + vector2[1],
        vector1[2] + vector2[2],
    )


def subtract(vector1: Vector3, vector2: Vector3) -> Vector3:
    """Component-wise difference ``vector1 - vector2``."""
    return (
        vector1[0] - vector2[0],
        vector1[1] - vector2[1],
        vector1[2] - vector2[2],
    )


def scale(vector: Vector3, factor: float) -> Vector3:
    """Multiply a 3D vector by a scalar."""
    return (vector[0] * factor, vector[1] * factor, vector[2] * factor)


def calculate_norm_squared(vector: Vector3) -> float:
    return vector[0] ** 2 + vector[1] ** 2 + vector[2] ** 2


def calculate_norm(vector: Vector3) -> float:
    """
    Calculate the norm of a vector.

    :param vector: Vector (x, y, z)
    :return: Magnitude of the vector
    """
    return math.sqrt(calculate_norm_squared(vector))


def normalize_vector(vector: Vector3) -> Vector3:
    """
    Normalize a 3D vector.

    :param vector: Vector (x, y, z)
    :return: Normalized vector (x, y, z)
    :raises ZeroDivisionError: if the vector has zero length
    """
    norm = calculate_norm(vector)
    if norm == 0:
        raise ZeroDivisionError("Cannot normalize a zero-length vector.")
    return tuple(v / norm for v in vector)


def dot_product(vector1: Vector3, vector2: Vector3) -> float:
    """
    Calculate the dot product of two 3D vectors.

    :param vector1: Vector (x, y, z)
    :param vector2: Vector (x, y, z)
    :return: Dot product of the two vectors
    """
    return sum(v1 * v2 for v1, v2 in zip(vector1, vector2))


def cross_product(vector1: Vector3, vector2: Vector3) -> Vector3:
    """
    Calculate the cross product of two 3D vectors.

    :param vector1: First vector (x, y, z)
    :param vector2: Second vector (x, y, z)
    :return: Cross product vector (x, y, z)
    """
    return (
        vector1[1] * vector2[2] - vector1[2] * vector2[1],
        vector1[2] * vector2[0] - vector1[0] * vector2[2],
        vector1[0] * vector2[1] - vector1[1] * vector2[0],
    )


def signed_angle(vector1: Vector2, vector2: Vector2) -> float:
    """
    Counter-clockwise angle from ``vector1`` to ``vector2`` in (-pi, pi].

    Two zero vectors give 0.
    """
    cross = vector1[0] * vector2[1] - vector1[1] * vector2[0]
    dot = vector1[0] * vector2[0] + vector1[1] * vector2[1]
    angle = math.atan2(cross, dot)
    if angle == -math.pi:
        return math.pi
    return angle


def solve_real_quadratic(a: float, b: float, c: float) -> tuple[float, float] | None:
    """
    Solve ``a*t^2 + b*t + c = 0`` for real t.

    :return: (smaller root, larger root), or None if there is no real root
        or the equation is degenerate (a == 0).
    """
    if a == 0:
        return None
    discriminant = b * b - 4 * a * c
    if discriminant < 0:
        return None
    root = math.sqrt(discriminant)
    # Numerically stable form: avoid subtracting nearly equal numbers.
    q = -0.5 * (b + math.copysign(root, b))
    if q == 0:
        return 0.0, 0.0
    t1 = q / a
    t2 = c / q
    return (t1, t2) if t1 <= t2 else (t2, t1)


def clamp(value: float, lower: float, upper: float) -> float:
    """Clamp ``value`` to [lower, upper]."""
    return max(lower, min(upper, value))
