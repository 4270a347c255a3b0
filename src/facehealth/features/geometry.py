from __future__ import annotations

import math
from typing import NamedTuple, Sequence, Tuple

import numpy as np


class Point(NamedTuple):
    x: float
    y: float


def as_array(points: Sequence[Point]) -> np.ndarray:
    """(N, 2) float64 view of a point sequence."""
    return np.asarray(points, dtype=np.float64).reshape(-1, 2)


def distance(a: Point, b: Point) -> float:
    return math.hypot(float(b.x) - float(a.x), float(b.y) - float(a.y))


def centroid(points: Sequence[Point]) -> Point:
    """Mean of a non-empty point sequence (callers reject empty input)."""
    mean = as_array(points).mean(axis=0)
    return Point(float(mean[0]), float(mean[1]))


def extent(points: Sequence[Point], axis: int) -> Tuple[float, float]:
    """(min, max) projection along axis 0 (x) or 1 (y)."""
    coords = as_array(points)[:, axis]
    return float(coords.min()), float(coords.max())


def clamp(value: float, lo: float = 0.0, hi: float = 1.0) -> float:
    return min(max(value, lo), hi)


def rescale(value: float, lower: float, upper: float) -> float:
    """Map [lower, upper] onto [0, 1] and clamp."""
    return clamp((value - lower) / (upper - lower))


def rescale_inverted(value: float, lower: float, upper: float) -> float:
    """Map [upper, lower] onto [0, 1]: smaller values score higher."""
    return clamp((upper - value) / (upper - lower))


def is_finite(*values: float) -> bool:
    return all(math.isfinite(v) for v in values)
