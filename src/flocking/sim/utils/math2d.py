from __future__ import annotations

import math
from typing import Iterable

from pygame.math import Vector2

TWO_PI = 2.0 * math.pi


class DegenerateVectorError(ValueError):
    """Raised when a zero-length vector is normalized or rescaled."""


def divide(vector: Vector2, scalar: float) -> Vector2:
    if scalar == 0:
        raise ZeroDivisionError("cannot divide a vector by zero")
    return vector / scalar


def norm(vector: Vector2) -> float:
    return math.hypot(vector.x, vector.y)


def normalized(vector: Vector2) -> Vector2:
    magnitude = norm(vector)
    if magnitude == 0.0:
        raise DegenerateVectorError("cannot normalize a zero-length vector")
    return Vector2(vector.x / magnitude, vector.y / magnitude)


def scalar_product(a: Vector2, b: Vector2) -> float:
    return a.x * b.x + a.y * b.y


def scale_to(vector: Vector2, length: float) -> Vector2:
    """Rescale ``vector`` in place to ``length`` keeping its direction."""
    magnitude = norm(vector)
    if magnitude == 0.0:
        raise DegenerateVectorError("cannot rescale a zero-length vector")
    factor = length / magnitude
    vector.update(vector.x * factor, vector.y * factor)
    return vector


def heading(vector: Vector2) -> float:
    return math.atan2(vector.y, vector.x)


def wrap_angle(angle: float) -> float:
    """Map ``angle`` into ``[0, 2*pi)``."""
    wrapped = math.fmod(angle, TWO_PI)
    if wrapped < 0.0:
        wrapped += TWO_PI
    if wrapped >= TWO_PI:
        wrapped = 0.0
    return wrapped


def signed_angle(angle: float) -> float:
    """Map ``angle`` into ``(-pi, pi]``."""
    wrapped = wrap_angle(angle)
    if wrapped > math.pi:
        wrapped -= TWO_PI
    return wrapped


def centroid(points: Iterable[Vector2]) -> Vector2:
    total = Vector2()
    count = 0
    for point in points:
        total += point
        count += 1
    return divide(total, count)
