"""
Cell grid for box layouts.

A grid is a row-major list of rows (indexed ``grid[z][x]``). Column widths
are read from row 0 and row depths from column 0; the cumulative axes built
from them map grid-index coordinates to world coordinates.
"""
from dataclasses import dataclass, replace
from typing import List, Sequence, Tuple

import numpy as np


@dataclass(frozen=True)
class Cell:
    """A single grid cell.

    ``group == 0`` marks a standalone box; cells sharing a positive group id
    are traced together as one merged region.
    """
    group: int = 0
    width: float = 1.0
    depth: float = 1.0
    visible: bool = True


Grid = List[List[Cell]]


def grid_shape(grid: Grid) -> Tuple[int, int]:
    """Return (rows, cols). An empty grid is (0, 0)."""
    if not grid or not grid[0]:
        return (0, 0)
    return (len(grid), len(grid[0]))


def validate_grid(grid: Grid) -> None:
    """Raise ValueError if the grid is ragged or has non-positive sizes."""
    rows, cols = grid_shape(grid)
    for z, row in enumerate(grid):
        if len(row) != cols:
            raise ValueError(
                f"Grid row {z} has {len(row)} cells, expected {cols}"
            )
        for x, cell in enumerate(row):
            if cell.width <= 0 or cell.depth <= 0:
                raise ValueError(
                    f"Cell ({z}, {x}) has non-positive size "
                    f"{cell.width}x{cell.depth}"
                )
            if cell.group < 0:
                raise ValueError(f"Cell ({z}, {x}) has negative group {cell.group}")


def build_cumulative_axes(grid: Grid) -> Tuple[np.ndarray, np.ndarray]:
    """Prefix sums of column widths and row depths.

    Returns:
        (cum_w, cum_d) with ``cum_w[0] == cum_d[0] == 0`` and lengths
        ``cols + 1`` / ``rows + 1``. Empty arrays for an empty grid.
    """
    rows, cols = grid_shape(grid)
    if rows == 0 or cols == 0:
        return np.zeros(0), np.zeros(0)

    widths = np.array([c.width for c in grid[0]], dtype=float)
    depths = np.array([row[0].depth for row in grid], dtype=float)
    cum_w = np.concatenate([[0.0], np.cumsum(widths)])
    cum_d = np.concatenate([[0.0], np.cumsum(depths)])
    return cum_w, cum_d


def generate_grid(total_width: float, total_depth: float) -> Grid:
    """Unit-cell grid covering floor(total_width) x floor(total_depth)."""
    cols = int(np.floor(total_width))
    rows = int(np.floor(total_depth))
    return [[Cell() for _ in range(cols)] for _ in range(rows)]


def resize_grid(grid: Grid, cols: int, rows: int) -> Grid:
    """Resize keeping cells that still fit; new slots get fresh unit cells."""
    old_rows, old_cols = grid_shape(grid)
    return [
        [
            grid[z][x] if z < old_rows and x < old_cols else Cell()
            for x in range(cols)
        ]
        for z in range(rows)
    ]


def grid_from_sizes(widths: Sequence[float], depths: Sequence[float]) -> Grid:
    """Grid whose column x has width ``widths[x]`` and row z depth ``depths[z]``."""
    return [
        [Cell(group=0, width=float(w), depth=float(d)) for w in widths]
        for d in depths
    ]


def set_group(grid: Grid, cells: Sequence[Tuple[int, int]], group: int) -> Grid:
    """Return a copy of *grid* with the (z, x) cells assigned to *group*."""
    targets = set(cells)
    return [
        [
            replace(cell, group=group) if (z, x) in targets else cell
            for x, cell in enumerate(row)
        ]
        for z, row in enumerate(grid)
    ]


def group_ids(grid: Grid) -> List[int]:
    """Sorted positive group ids present in the grid."""
    return sorted({cell.group for row in grid for cell in row if cell.group > 0})


def cells_for_group(grid: Grid, group: int) -> List[Tuple[int, int]]:
    """(z, x) positions of every cell in *group*, row-major."""
    return [
        (z, x)
        for z, row in enumerate(grid)
        for x, cell in enumerate(row)
        if cell.group == group
    ]
