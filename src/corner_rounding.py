"""
Corner rounding for box outlines.

Every vertex is replaced by a quadratic Bezier arc that starts and ends on
the adjacent edges and uses the original vertex as its control point.

Radius policy (outer and inner outlines are rounded with the same
``reference_radius``, the configured corner radius):

- convex corners use ``base_radius``;
- concave corners of the outer outline (``base_radius == reference_radius``)
  use ``reference_radius - wall_thickness``;
- concave corners of the inner outline use ``reference_radius``.

The outer concave corner then sits one wall thickness inside the inner
concave corner, so the wall keeps a constant rounded thickness through
convex/concave transitions.
"""
import logging
import math
from typing import List, Sequence, Tuple

import numpy as np

logger = logging.getLogger(__name__)

Vec2 = Tuple[float, float]

DUPLICATE_EPS = 1e-9


def corner_radius_for(
    is_convex: bool,
    base_radius: float,
    reference_radius: float,
    wall_thickness: float,
) -> float:
    """Effective radius of one corner under the convex/concave policy."""
    if is_convex:
        return base_radius
    if math.isclose(base_radius, reference_radius):
        return reference_radius - wall_thickness
    return reference_radius


def round_corners(
    points: Sequence[Vec2],
    base_radius: float,
    segments_per_corner: int,
    reference_radius: float,
    wall_thickness: float,
) -> List[Vec2]:
    """Round every corner of a CCW polygon.

    Args:
        points: CCW polygon, implicitly closed.
        base_radius: Radius for convex corners.
        segments_per_corner: Points sampled along each corner arc, endpoints
            included. Values below 2 are raised to 2.
        reference_radius: The configured (outer) corner radius.
        wall_thickness: Wall thickness, used for outer concave corners.

    Returns:
        Densified polygon with about ``len(points) * max(segments_per_corner, 2)``
        points. The input is returned unchanged when ``base_radius <= 0`` or
        it has fewer than 3 points.
    """
    n = len(points)
    if base_radius <= 0 or n < 3:
        return list(points)

    samples = max(int(segments_per_corner), 2)
    t = np.linspace(0.0, 1.0, samples)[:, None]
    pts = np.asarray(points, dtype=float)

    out: List[Vec2] = []
    for i in range(n):
        prev = pts[(i - 1) % n]
        curr = pts[i]
        nxt = pts[(i + 1) % n]

        v_in = curr - prev
        v_out = nxt - curr
        len_in = float(np.linalg.norm(v_in))
        len_out = float(np.linalg.norm(v_out))
        if len_in < 1e-12 or len_out < 1e-12:
            out.append((float(curr[0]), float(curr[1])))
            continue

        d_prev = v_in / len_in
        d_next = v_out / len_out
        cross = d_prev[0] * d_next[1] - d_prev[1] * d_next[0]

        r = corner_radius_for(cross >= 0, base_radius, reference_radius, wall_thickness)
        limit = 0.5 * min(len_in, len_out)
        if r > limit:
            logger.debug("Corner radius %.3f clamped to %.3f at vertex %d", r, limit, i)
        r = min(max(r, 0.0), limit)

        p_a = curr - d_prev * r
        p_b = curr + d_next * r
        arc = (1 - t) ** 2 * p_a + 2 * (1 - t) * t * curr + t ** 2 * p_b
        out.extend((float(x), float(y)) for x, y in arc)

    return _dedupe(out)


def _dedupe(points: List[Vec2]) -> List[Vec2]:
    """Drop consecutive (and wrap-around) duplicate points."""
    result: List[Vec2] = []
    for p in points:
        if result and _same(result[-1], p):
            continue
        result.append(p)
    while len(result) > 1 and _same(result[0], result[-1]):
        result.pop()
    return result


def _same(a: Vec2, b: Vec2) -> bool:
    return abs(a[0] - b[0]) < DUPLICATE_EPS and abs(a[1] - b[1]) < DUPLICATE_EPS
