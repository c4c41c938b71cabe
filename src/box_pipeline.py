"""Grid -> rounded outlines -> wall/floor solids for every box of a layout."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from box_config import BoxParameters
from box_layout import BoxLayoutEngine, CombinedBoxInfo
from box_mesh import BoxMetadata, BoxSolid, build_floor_solid, build_wall_solid
from box_validation import (
    BoxViolation,
    check_box_dimensions,
    check_normalization,
    has_errors,
)
from corner_rounding import round_corners
from grid_model import (
    Grid,
    build_cumulative_axes,
    cells_for_group,
    grid_shape,
    group_ids,
    validate_grid,
)
from outline_tracer import Vec2, trace_cell, trace_outline
from polygon_inset import offset_inward, translate

logger = logging.getLogger(__name__)


@dataclass
class BoxSetResult:
    boxes: List[BoxSolid] = field(default_factory=list)
    violations: List[BoxViolation] = field(default_factory=list)
    truncated_groups: List[int] = field(default_factory=list)
    skipped_indices: List[int] = field(default_factory=list)
    params: Optional[BoxParameters] = None

    @property
    def errors(self) -> List[BoxViolation]:
        return [v for v in self.violations if v.severity == "error"]

    @property
    def warnings(self) -> List[BoxViolation]:
        return [v for v in self.violations if v.severity == "warning"]


@dataclass
class UniqueBoxGroup:
    """Boxes sharing a footprint (width/depth swap ignored) and height."""
    width: float
    depth: float
    height: float
    is_combined: bool
    indices: List[int] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.indices)


def rounded_outlines(
    raw_outer: Sequence[Vec2],
    params: BoxParameters,
) -> Tuple[List[Vec2], List[Vec2]]:
    """Outer and inner rounded outlines for one raw region outline."""
    raw_inner = offset_inward(raw_outer, params.wall_thickness)
    radius = params.corner_radius
    outer = round_corners(
        raw_outer, radius, params.segments_per_corner, radius, params.wall_thickness,
    )
    inner = round_corners(
        raw_inner,
        params.inner_corner_radius,
        params.segments_per_corner,
        radius,
        params.wall_thickness,
    )
    return outer, inner


def build_region(
    raw_outer: Sequence[Vec2],
    params: BoxParameters,
    metadata: BoxMetadata,
) -> Tuple[Optional[BoxSolid], List[BoxViolation]]:
    """Validate, round and extrude one region.

    Returns:
        (box, violations). ``box`` is None when any violation is an error.
    """
    violations = check_box_dimensions(
        metadata.width, metadata.depth, params, index=metadata.index,
    )
    if has_errors(violations):
        return None, violations

    outer, inner = rounded_outlines(raw_outer, params)
    try:
        wall = build_wall_solid(outer, inner, params.wall_height, params.up_axis)
        floor = None
        if params.has_bottom:
            floor = build_floor_solid(outer, params.floor_thickness, params.up_axis)
    except ValueError as exc:
        violations.append(
            BoxViolation(
                rule_name="degenerate_outline",
                severity="error",
                message=f"Box {metadata.index} could not be extruded: {exc}",
                index=metadata.index,
            )
        )
        return None, violations

    return BoxSolid(metadata=metadata, outer=outer, inner=inner, wall=wall, floor=floor), violations


def build_boxes(
    grid: Grid,
    params: BoxParameters,
    groups: Optional[Dict[int, CombinedBoxInfo]] = None,
) -> BoxSetResult:
    """Build every visible box of a grid.

    Cells with a positive group id are traced together as one merged box;
    group-0 cells each become a standalone box. Invisible regions are
    skipped, and invalid regions are reported and skipped while the rest
    are still built.

    Args:
        grid: Rectangular cell grid.
        params: Shared box parameters; the corner radius is clamped to what
            the smallest cell can hold.
        groups: Optional merge records keyed by group id, used for the
            primary index and direction in the metadata.
    """
    validate_grid(grid)
    rows, cols = grid_shape(grid)
    if rows == 0 or cols == 0:
        return BoxSetResult(params=params)

    groups = groups or {}
    cum_w, cum_d = build_cumulative_axes(grid)
    smallest_w = min(cell.width for cell in grid[0])
    smallest_d = min(row[0].depth for row in grid)
    requested = params
    params = params.normalized(smallest_w, smallest_d)

    result = BoxSetResult(params=params)
    result.violations.extend(check_normalization(requested, params))

    for gid in group_ids(grid):
        cells = cells_for_group(grid, gid)
        indices = [z * cols + x for z, x in cells]
        if not all(grid[z][x].visible for z, x in cells):
            logger.debug("Group %d hidden, skipping", gid)
            result.skipped_indices.extend(indices)
            continue

        trace = trace_outline(grid, gid, cum_w, cum_d)
        info = groups.get(gid)
        primary = info.primary_index if info is not None else min(indices)
        if not trace.is_usable:
            result.truncated_groups.append(gid)
            result.skipped_indices.extend(indices)
            result.violations.append(
                BoxViolation(
                    rule_name="outline_truncated",
                    severity="error",
                    message=(
                        f"Group {gid} outline could not be closed "
                        f"({trace.unused_segments} boundary edges unused)"
                    ),
                    value=float(trace.unused_segments),
                    index=primary,
                )
            )
            continue

        xs = [p[0] for p in trace.points]
        ys = [p[1] for p in trace.points]
        metadata = BoxMetadata(
            index=primary,
            width=max(xs) - min(xs),
            depth=max(ys) - min(ys),
            height=params.wall_height,
            is_combined=True,
            combined_indices=sorted(indices),
            direction=info.direction if info is not None else None,
            cells=cells,
        )
        _collect(result, build_region(trace.points, params, metadata), indices)

    for z in range(rows):
        for x in range(cols):
            cell = grid[z][x]
            if cell.group != 0:
                continue
            index = z * cols + x
            if not cell.visible:
                result.skipped_indices.append(index)
                continue
            raw = translate(trace_cell(cell).points, float(cum_w[x]), float(cum_d[z]))
            metadata = BoxMetadata(
                index=index,
                width=cell.width,
                depth=cell.depth,
                height=params.wall_height,
                cells=[(z, x)],
            )
            _collect(result, build_region(raw, params, metadata), [index])

    result.boxes.sort(key=lambda b: b.metadata.index)
    result.skipped_indices.sort()
    logger.info(
        "Built %d boxes (%d cells skipped, %d errors, %d warnings)",
        len(result.boxes), len(result.skipped_indices),
        len(result.errors), len(result.warnings),
    )
    return result


def build_boxes_from_layout(engine: BoxLayoutEngine, params: BoxParameters) -> BoxSetResult:
    """Build the boxes of an engine's current layout, merges and visibility."""
    return build_boxes(engine.to_grid(), params, engine.group_table())


def unique_box_groups(boxes: Sequence[BoxSolid], decimals: int = 2) -> List[UniqueBoxGroup]:
    """Group boxes that would print identically.

    Width and depth are compared sorted, so a 50 x 100 box matches a
    100 x 50 one. Merged and standalone boxes never share a group.
    """
    groups: Dict[Tuple, UniqueBoxGroup] = {}
    for box in boxes:
        meta = box.metadata
        w, d = sorted((round(meta.width, decimals), round(meta.depth, decimals)))
        h = round(meta.height, decimals)
        key = (meta.is_combined, w, d, h)
        if key not in groups:
            groups[key] = UniqueBoxGroup(width=w, depth=d, height=h, is_combined=meta.is_combined)
        groups[key].indices.append(meta.index)
    return list(groups.values())


def _collect(
    result: BoxSetResult,
    built: Tuple[Optional[BoxSolid], List[BoxViolation]],
    indices: List[int],
) -> None:
    box, violations = built
    result.violations.extend(violations)
    if box is None:
        logger.warning("Skipping box %s: %s", indices[0], "; ".join(
            v.message for v in violations if v.severity == "error"
        ))
        result.skipped_indices.extend(indices)
        return
    result.boxes.append(box)
