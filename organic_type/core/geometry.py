# ═══════════════════════════════════════════════════════════════════════════════
# PART 0: PLANE GEOMETRY
# Design: G1 (Layout Geometry) | Implementation: I2 (Numerics)
# ═══════════════════════════════════════════════════════════════════════════════

"""
G1: "Everything on the canvas is a point or a heading. Keep them as small
immutable values so a node's position can be shared without copying."

I2: "All helpers are total: bad input gives a neutral value, never a raise."
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Optional

import numpy as np


@dataclass(frozen=True)
class Point:
    """A position on the canvas."""
    x: float
    y: float

    def as_dict(self) -> dict:
        return {"x": self.x, "y": self.y}


@dataclass(frozen=True)
class Direction:
    """A heading vector (unit length after normalisation, zero allowed)."""
    dx: float
    dy: float

    @property
    def magnitude(self) -> float:
        return math.hypot(self.dx, self.dy)

    @property
    def angle(self) -> float:
        return math.atan2(self.dy, self.dx)

    @classmethod
    def from_angle(cls, angle: float) -> "Direction":
        return cls(math.cos(angle), math.sin(angle))

    def as_dict(self) -> dict:
        return {"dx": self.dx, "dy": self.dy}


ZERO = Direction(0.0, 0.0)
EAST = Direction(1.0, 0.0)


def is_number(value: Any) -> bool:
    """True for finite real numbers (bools excluded)."""
    if isinstance(value, bool):
        return False
    if not isinstance(value, (int, float, np.integer, np.floating)):
        return False
    return math.isfinite(value)


def is_point(value: Any) -> bool:
    """True if value has finite numeric x and y attributes."""
    if value is None:
        return False
    return is_number(getattr(value, "x", None)) and is_number(getattr(value, "y", None))


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def distance(a: Optional[Point], b: Optional[Point]) -> float:
    """Euclidean distance; infinity if either point is invalid."""
    if not is_point(a) or not is_point(b):
        return math.inf
    return math.hypot(a.x - b.x, a.y - b.y)


def normalize(d: Optional[Direction]) -> Direction:
    """Unit vector along d, or the zero vector when d has no length."""
    if d is None or not is_number(d.dx) or not is_number(d.dy):
        return ZERO
    mag = math.hypot(d.dx, d.dy)
    if mag == 0:
        return ZERO
    return Direction(d.dx / mag, d.dy / mag)


def direction_between(origin: Point, target: Point) -> Direction:
    """Unit vector from origin towards target (zero if coincident or invalid)."""
    if not is_point(origin) or not is_point(target):
        return ZERO
    return normalize(Direction(target.x - origin.x, target.y - origin.y))


def dot(a: Direction, b: Direction) -> float:
    if a is None or b is None:
        return 0.0
    return a.dx * b.dx + a.dy * b.dy


def round_half_up(value: float) -> int:
    """Round half up (towards +inf), unlike Python's banker's rounding."""
    return int(math.floor(value + 0.5))
