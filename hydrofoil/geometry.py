"""
Planar polygon utilities.

Closed polygons are ``(N, 2)`` arrays without a repeated closing point,
ordered counter-clockwise. Everything here is numpy-only so the section
math can run (and be tested) without the CAD kernel.
"""

from functools import reduce
from typing import Tuple

import numpy as np


def signed_area(points: np.ndarray) -> float:
    """Shoelace area. Positive for counter-clockwise order."""
    x, y = points[:, 0], points[:, 1]
    return float(0.5 * np.sum(x * np.roll(y, -1) - np.roll(x, -1) * y))


def ensure_ccw(points: np.ndarray) -> np.ndarray:
    return points if signed_area(points) >= 0 else points[::-1].copy()


def point_extremes(points: np.ndarray) -> Tuple[float, float, float, float]:
    """(min_x, max_x, min_y, max_y) in a single pass over the points."""
    first = (points[0][0], points[0][0], points[0][1], points[0][1])
    return reduce(
        lambda acc, p: (min(acc[0], p[0]), max(acc[1], p[0]), min(acc[2], p[1]), max(acc[3], p[1])),
        points[1:],
        first,
    )


def max_x_points(points: np.ndarray, tol: float = 1e-9) -> np.ndarray:
    """All points sharing the maximum x; ties are kept, not broken."""
    def step(acc, p):
        best_x, kept = acc
        if p[0] > best_x + tol:
            return p[0], [p]
        if abs(p[0] - best_x) <= tol:
            return best_x, kept + [p]
        return acc

    _, kept = reduce(step, points[1:], (points[0][0], [points[0]]))
    return np.array(kept)


def rotate_about(points: np.ndarray, pivot: Tuple[float, float], pitch_deg: float) -> np.ndarray:
    """
    Pitch a section about ``pivot``.

    Positive ``pitch_deg`` raises the leading edge (nose up) for sections
    whose leading edge lies at lower x than the pivot.
    """
    theta = np.radians(pitch_deg)
    cos_t, sin_t = np.cos(theta), np.sin(theta)
    dx = points[:, 0] - pivot[0]
    dy = points[:, 1] - pivot[1]
    x_rot = dx * cos_t + dy * sin_t + pivot[0]
    y_rot = -dx * sin_t + dy * cos_t + pivot[1]
    return np.column_stack([x_rot, y_rot])


def resample_closed(points: np.ndarray, n_points: int) -> np.ndarray:
    """Resample a closed polygon to ``n_points`` evenly spaced by arc length."""
    loop = np.vstack([points, points[:1]])
    seg = np.sqrt(np.sum(np.diff(loop, axis=0) ** 2, axis=1))
    s = np.concatenate([[0.0], np.cumsum(seg)])
    if s[-1] <= 0:
        return np.repeat(points[:1], n_points, axis=0)
    t = np.linspace(0.0, s[-1], n_points, endpoint=False)
    return np.column_stack([np.interp(t, s, loop[:, 0]), np.interp(t, s, loop[:, 1])])


def start_at_trailing_edge(points: np.ndarray) -> np.ndarray:
    """
    Rotate the vertex order so the polygon starts at its trailing edge.

    An open (blunt) trailing edge has several maximum-x vertices; the
    uppermost one is the start, so the loop runs over the top surface first.
    """
    tied = max_x_points(points)
    upper = tied[np.argmax(tied[:, 1])]
    start = int(np.flatnonzero(np.all(points == upper, axis=1))[0])
    return np.roll(points, -start, axis=0)

