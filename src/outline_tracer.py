"""
Boundary tracing for orthogonal cell regions.

The region's boundary is collected as unit edges in grid-index space, where
every coordinate is an integer, so stitching compares points exactly. The
loop is scaled to world units through the cumulative axes only at the end.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import numpy as np

from grid_model import Cell, Grid, build_cumulative_axes, grid_shape

logger = logging.getLogger(__name__)

Vec2 = Tuple[float, float]
IndexPoint = Tuple[int, int]
Segment = Tuple[IndexPoint, IndexPoint]


@dataclass
class TraceResult:
    """Outline of one region.

    ``truncated`` is set when stitching stopped before every boundary edge
    was used or before the loop closed (regions with holes, or regions that
    are not simply connected). ``points`` then holds the partial loop.
    """
    points: List[Vec2] = field(default_factory=list)
    closed: bool = False
    truncated: bool = False
    unused_segments: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.points

    @property
    def is_usable(self) -> bool:
        """True when the outline can be fed to the offset/rounding stages."""
        return self.closed and not self.truncated and len(self.points) >= 3


def trace_outline(
    grid: Grid,
    group_id: int,
    cum_w: Optional[np.ndarray] = None,
    cum_d: Optional[np.ndarray] = None,
) -> TraceResult:
    """Trace the CCW boundary of every cell whose group equals *group_id*.

    Args:
        grid: Rectangular cell grid.
        group_id: Group to outline.
        cum_w, cum_d: Cumulative axes; built from the grid when omitted.

    Returns:
        TraceResult in world coordinates. Empty when no cell matches.
    """
    rows, cols = grid_shape(grid)
    if rows == 0 or cols == 0:
        return TraceResult()

    if cum_w is None or cum_d is None:
        cum_w, cum_d = build_cumulative_axes(grid)

    segments = _boundary_segments(grid, group_id, rows, cols)
    if not segments:
        return TraceResult()

    loop, closed, unused = _stitch(segments)
    truncated = unused > 0 or not closed
    if truncated:
        logger.warning(
            "Outline of group %d truncated: %d boundary edges unused, closed=%s",
            group_id, unused, closed,
        )

    loop = _drop_collinear(loop, cyclic=closed)
    points = [(float(cum_w[x]), float(cum_d[z])) for x, z in loop]
    return TraceResult(
        points=points,
        closed=closed,
        truncated=truncated,
        unused_segments=unused,
    )


def trace_cell(cell: Cell) -> TraceResult:
    """Outline of a single standalone cell with its corner at the origin."""
    return trace_outline([[Cell(group=0, width=cell.width, depth=cell.depth)]], 0)


# ─── Internal helpers ────────────────────────────────────────────────────────

def _boundary_segments(
    grid: Grid,
    group_id: int,
    rows: int,
    cols: int,
) -> List[Segment]:
    """Unit edges separating the group from other groups or the grid border.

    Each cell contributes its sides in CCW order (x right, z up), so the
    edges chain head-to-tail around the region.
    """
    segs: List[Segment] = []
    for z in range(rows):
        for x in range(cols):
            if grid[z][x].group != group_id:
                continue
            if z == 0 or grid[z - 1][x].group != group_id:
                segs.append(((x, z), (x + 1, z)))
            if x == cols - 1 or grid[z][x + 1].group != group_id:
                segs.append(((x + 1, z), (x + 1, z + 1)))
            if z == rows - 1 or grid[z + 1][x].group != group_id:
                segs.append(((x + 1, z + 1), (x, z + 1)))
            if x == 0 or grid[z][x - 1].group != group_id:
                segs.append(((x, z + 1), (x, z)))
    return segs


def _stitch(segments: List[Segment]) -> Tuple[List[IndexPoint], bool, int]:
    """Chain segments into a loop starting from the first one.

    Returns:
        (loop_points, closed, unused_segment_count). The closing duplicate
        point is dropped when the loop closes.
    """
    by_start: Dict[IndexPoint, List[IndexPoint]] = {}
    for a, b in segments[1:]:
        by_start.setdefault(a, []).append(b)

    first_a, first_b = segments[0]
    loop: List[IndexPoint] = [first_a, first_b]
    remaining = len(segments) - 1

    while remaining:
        ends = by_start.get(loop[-1])
        if not ends:
            break
        loop.append(ends.pop(0))
        remaining -= 1

    closed = len(loop) > 1 and loop[0] == loop[-1]
    if closed:
        loop.pop()
    return loop, closed, remaining


def _drop_collinear(points: List[IndexPoint], cyclic: bool) -> List[IndexPoint]:
    """Remove vertices lying on a straight run between their neighbours."""
    n = len(points)
    if n < 3:
        return points

    kept = []
    for i in range(n):
        if not cyclic and (i == 0 or i == n - 1):
            kept.append(points[i])
            continue
        px, pz = points[(i - 1) % n]
        cx, cz = points[i]
        nx, nz = points[(i + 1) % n]
        cross = (cx - px) * (nz - cz) - (cz - pz) * (nx - cx)
        if cross != 0:
            kept.append(points[i])
    return kept
