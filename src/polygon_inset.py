"""
Inward offset of CCW polygons, used to derive a box's inner wall outline.

Polygons are plain lists of (x, y) tuples, CCW, implicitly closed.
"""
from typing import List, Sequence, Tuple

import numpy as np

Vec2 = Tuple[float, float]

PARALLEL_EPS = 1e-6


def offset_inward(points: Sequence[Vec2], thickness: float) -> List[Vec2]:
    """Move every edge of a CCW polygon inward by *thickness*.

    Each output vertex is the intersection of the two offset edges meeting
    at the corresponding input vertex, so the vertex count and winding are
    preserved. Near-parallel edges fall back to a plain normal offset.
    No self-intersection handling is done for thin or concave regions.
    """
    n = len(points)
    if n == 0:
        return []

    pts = np.asarray(points, dtype=float)
    inner: List[Vec2] = []
    for i in range(n):
        prev = pts[(i - 1) % n]
        curr = pts[i]
        nxt = pts[(i + 1) % n]

        d1 = _unit(curr - prev)
        d2 = _unit(nxt - curr)
        # Left-hand normals point inward for CCW winding
        n1 = np.array([-d1[1], d1[0]])
        n2 = np.array([-d2[1], d2[0]])

        p1 = prev + n1 * thickness
        p2 = curr + n2 * thickness
        diff = p2 - p1
        cross = d1[0] * d2[1] - d1[1] * d2[0]

        if abs(cross) > PARALLEL_EPS:
            s = (diff[0] * d2[1] - diff[1] * d2[0]) / cross
            pt = p1 + d1 * s
        else:
            pt = curr + n1 * thickness
        inner.append((float(pt[0]), float(pt[1])))

    return inner


def signed_area(points: Sequence[Vec2]) -> float:
    """Shoelace area; positive for CCW winding."""
    if len(points) < 3:
        return 0.0
    pts = np.asarray(points, dtype=float)
    x, y = pts[:, 0], pts[:, 1]
    return 0.5 * float(np.dot(x, np.roll(y, -1)) - np.dot(np.roll(x, -1), y))


def is_ccw(points: Sequence[Vec2]) -> bool:
    return signed_area(points) > 0.0


def translate(points: Sequence[Vec2], dx: float, dy: float) -> List[Vec2]:
    return [(float(x + dx), float(y + dy)) for x, y in points]


def _unit(v: np.ndarray) -> np.ndarray:
    length = np.linalg.norm(v)
    if length < 1e-12:
        return np.zeros(2)
    return v / length
