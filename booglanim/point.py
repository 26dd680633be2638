"""
2D point arithmetic used by things, limbs and task primitives.

Points are immutable; every operation returns a new Point.
"""

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class Point:
    x: float
    y: float

    def __add__(self, other: "Point") -> "Point":
        return add(self, other)

    def __sub__(self, other: "Point") -> "Point":
        return sub(self, other)

    def __mul__(self, s: float) -> "Point":
        return scale(s, self)

    __rmul__ = __mul__


def pt(x: float, y: float) -> Point:
    return Point(x, y)


def add(a: Point, b: Point) -> Point:
    return Point(a.x + b.x, a.y + b.y)


def sub(a: Point, b: Point) -> Point:
    return Point(a.x - b.x, a.y - b.y)


def scale(s: float, a: Point) -> Point:
    return Point(a.x * s, a.y * s)


def dist(a: Point, b: Point) -> float:
    return math.hypot(a.x - b.x, a.y - b.y)


def lerp(start: Point, end: Point, t: float) -> Point:
    """Point a fraction t of the way from start to end."""
    return add(start, scale(t, sub(end, start)))


def mid(a: Point, b: Point) -> Point:
    return lerp(a, b, 0.5)


__all__ = ["Point", "pt", "add", "sub", "scale", "dist", "lerp", "mid"]
