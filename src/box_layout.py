"""
Box layout and merge engine.

Splits a total footprint into columns and rows of boxes bounded by a maximum
box size, and merges runs of adjacent boxes along one row (a width merge)
or one column (a depth merge) into a single combined box.

Box indices are row-major: ``index = row * cols + col``.
"""
import logging
import math
from dataclasses import dataclass, field, replace
from typing import Dict, FrozenSet, List, Optional, Sequence, Set, Tuple

import numpy as np

from box_config import LayoutConfig
from grid_model import Cell, Grid

logger = logging.getLogger(__name__)

COUNT_EPS = 1e-9


@dataclass(frozen=True)
class BoxLayout:
    """Column widths and row depths of a box grid."""

    widths: Tuple[float, ...]
    depths: Tuple[float, ...]

    @property
    def cols(self) -> int:
        return len(self.widths)

    @property
    def rows(self) -> int:
        return len(self.depths)

    @property
    def count(self) -> int:
        return self.cols * self.rows

    @property
    def total_width(self) -> float:
        return float(sum(self.widths))

    @property
    def total_depth(self) -> float:
        return float(sum(self.depths))

    @property
    def x_offsets(self) -> List[float]:
        """Start offset of every column."""
        return [float(v) for v in np.concatenate([[0.0], np.cumsum(self.widths)[:-1]])]

    @property
    def z_offsets(self) -> List[float]:
        """Start offset of every row."""
        return [float(v) for v in np.concatenate([[0.0], np.cumsum(self.depths)[:-1]])]

    def index(self, row: int, col: int) -> int:
        return row * self.cols + col

    def position(self, index: int) -> Tuple[int, int]:
        """(row, col) of a box index."""
        return divmod(index, self.cols)

    def contains(self, index: int) -> bool:
        return 0 <= index < self.count

    def box_size(self, index: int) -> Tuple[float, float]:
        row, col = self.position(index)
        return (self.widths[col], self.depths[row])

    def to_grid(self) -> Grid:
        """One ungrouped cell per box."""
        return [
            [Cell(group=0, width=w, depth=d) for w in self.widths]
            for d in self.depths
        ]

    def centered_positions(self) -> List[Tuple[float, float]]:
        """Centre of every box (row-major) with the footprint centred on the origin."""
        half_w = self.total_width / 2
        half_d = self.total_depth / 2
        centres = []
        for z0, d in zip(self.z_offsets, self.depths):
            for x0, w in zip(self.x_offsets, self.widths):
                centres.append((x0 + w / 2 - half_w, z0 + d / 2 - half_d))
        return centres


@dataclass(frozen=True)
class CombinedBoxInfo:
    """A merged run of boxes.

    The primary is the leftmost (width merge) or topmost (depth merge) box.
    ``width``/``depth`` are the merged box's nominal size.
    """
    primary_index: int
    secondary_indices: Tuple[int, ...]
    direction: str  # "width" | "depth"
    width: float = 0.0
    depth: float = 0.0

    @property
    def all_indices(self) -> Tuple[int, ...]:
        return (self.primary_index,) + self.secondary_indices


# ─── Axis partitioning ───────────────────────────────────────────────────────


def split_axis(total: float, max_size: float, min_size: float = 0.0) -> List[float]:
    """Split one axis into segments no longer than *max_size*.

    The axis gets ``ceil(total / max_size)`` segments: all full-size except
    the last, which takes the remainder. When that remainder is shorter than
    *min_size* it is redistributed instead: two boxes split the axis evenly
    (or as ``min_size`` + rest), more boxes share the remainder equally.

    Raises:
        ValueError: if *total* or *max_size* is not positive.
    """
    if total <= 0:
        raise ValueError(f"Axis length must be positive, got {total}")
    if max_size <= 0:
        raise ValueError(f"Maximum box size must be positive, got {max_size}")
    min_size = min(max(min_size, 0.0), max_size)

    count = max(1, math.ceil(total / max_size - COUNT_EPS))
    if count == 1:
        return [float(total)]

    full = [float(max_size)] * (count - 1)
    remainder = float(total - max_size * (count - 1))
    if remainder >= min_size:
        return full + [remainder]

    if count == 2:
        if total / 2 >= min_size:
            return [total / 2, total / 2]
        return [min_size, total - min_size]

    extra = remainder / len(full)
    return [size + extra for size in full]


def partition(
    total_width: float,
    total_depth: float,
    max_box_width: float,
    max_box_depth: float,
    min_box_width: float = 0.0,
    min_box_depth: float = 0.0,
) -> BoxLayout:
    """Partition a footprint into a grid of boxes."""
    return BoxLayout(
        widths=tuple(split_axis(total_width, max_box_width, min_box_width)),
        depths=tuple(split_axis(total_depth, max_box_depth, min_box_depth)),
    )


def layout_from_config(config: LayoutConfig) -> BoxLayout:
    """Layout for a config; a single box when multiple boxes are disabled."""
    config = config.normalized()
    if not config.use_multiple_boxes:
        return BoxLayout(widths=(config.total_width,), depths=(config.total_depth,))
    return partition(
        config.total_width,
        config.total_depth,
        config.max_box_width,
        config.max_box_depth,
        config.min_box_width,
        config.min_box_depth,
    )


# ─── Merge validation ────────────────────────────────────────────────────────


def merge_direction(indices: Sequence[int], layout: BoxLayout) -> Optional[str]:
    """"width" or "depth" when *indices* form one contiguous straight run.

    Returns None for fewer than two boxes, out-of-range indices, mixed rows
    and columns, or gaps.
    """
    unique = sorted(set(indices))
    if len(unique) < 2 or not all(layout.contains(i) for i in unique):
        return None

    positions = [layout.position(i) for i in unique]
    rows = {r for r, _ in positions}
    cols = {c for _, c in positions}

    if len(rows) == 1:
        direction, varying = "width", sorted(c for _, c in positions)
    elif len(cols) == 1:
        direction, varying = "depth", sorted(r for r, _ in positions)
    else:
        return None

    for prev, curr in zip(varying, varying[1:]):
        if curr != prev + 1:
            return None
    return direction


def can_merge(indices: Sequence[int], layout: BoxLayout) -> bool:
    """True when the boxes share a row or column and are adjacent."""
    return merge_direction(indices, layout) is not None


def merge(indices: Sequence[int], layout: BoxLayout) -> Optional[CombinedBoxInfo]:
    """Describe the merged box for *indices*, or None if they cannot merge."""
    direction = merge_direction(indices, layout)
    if direction is None:
        logger.warning("Rejected merge of boxes %s", sorted(set(indices)))
        return None

    unique = sorted(set(indices))
    primary = unique[0]
    primary_w, primary_d = layout.box_size(primary)
    if direction == "width":
        width = sum(layout.box_size(i)[0] for i in unique)
        depth = primary_d
    else:
        width = primary_w
        depth = sum(layout.box_size(i)[1] for i in unique)

    return CombinedBoxInfo(
        primary_index=primary,
        secondary_indices=tuple(unique[1:]),
        direction=direction,
        width=float(width),
        depth=float(depth),
    )


def find_connected_groups(indices: Sequence[int], cols: int) -> List[List[int]]:
    """Split a selection into 4-connected components (first-seen order)."""
    remaining = list(dict.fromkeys(indices))
    members = set(remaining)
    visited: Set[int] = set()
    groups: List[List[int]] = []

    for start in remaining:
        if start in visited:
            continue
        group = []
        stack = [start]
        visited.add(start)
        while stack:
            current = stack.pop()
            group.append(current)
            row, col = divmod(current, cols)
            neighbours = [current - cols, current + cols]
            if col > 0:
                neighbours.append(current - 1)
            if col < cols - 1:
                neighbours.append(current + 1)
            for nb in neighbours:
                if nb in members and nb not in visited:
                    visited.add(nb)
                    stack.append(nb)
        groups.append(sorted(group))
    return groups


# ─── Stateful engine ─────────────────────────────────────────────────────────


class BoxLayoutEngine:
    """Owns a layout plus its combined-box table, selection and hidden boxes.

    Every mutation replaces the combined-box table in one assignment. Any
    change to the footprint or box-size constraints rebuilds the layout and
    drops all merges, the selection and hidden boxes, since box indices
    change meaning.
    """

    def __init__(self, config: Optional[LayoutConfig] = None):
        self._config = (config or LayoutConfig()).normalized()
        self._layout = layout_from_config(self._config)
        self._combined: Dict[int, CombinedBoxInfo] = {}
        self._hidden: FrozenSet[int] = frozenset()
        self._selected: Tuple[int, ...] = ()

    @property
    def config(self) -> LayoutConfig:
        return self._config

    @property
    def layout(self) -> BoxLayout:
        return self._layout

    @property
    def combined_boxes(self) -> Dict[int, CombinedBoxInfo]:
        """Combined boxes keyed by primary index (a copy)."""
        return dict(self._combined)

    @property
    def hidden(self) -> FrozenSet[int]:
        return self._hidden

    @property
    def selected(self) -> List[int]:
        """Selected box indices in selection order."""
        return list(self._selected)

    # Layout changes

    def set_dimensions(
        self,
        total_width: Optional[float] = None,
        total_depth: Optional[float] = None,
    ) -> BoxLayout:
        changes = {}
        if total_width is not None:
            changes["total_width"] = total_width
        if total_depth is not None:
            changes["total_depth"] = total_depth
        return self._reconfigure(replace(self._config, **changes))

    def set_constraints(self, **changes) -> BoxLayout:
        """Update min/max box sizes or ``use_multiple_boxes``."""
        allowed = {
            "min_box_width", "max_box_width", "min_box_depth", "max_box_depth",
            "use_multiple_boxes",
        }
        unknown = set(changes) - allowed
        if unknown:
            raise ValueError(f"Unknown layout constraints: {sorted(unknown)}")
        return self._reconfigure(replace(self._config, **changes))

    def _reconfigure(self, config: LayoutConfig) -> BoxLayout:
        """Swap in a new config and layout; state is untouched if either fails."""
        config = config.normalized()
        if config == self._config:
            return self._layout
        layout = layout_from_config(config)

        self._config = config
        self._layout = layout
        if self._combined or self._hidden:
            logger.info(
                "Layout changed; dropping %d merges and %d hidden boxes",
                len(self._combined), len(self._hidden),
            )
        self._combined = {}
        self._hidden = frozenset()
        self._selected = ()
        return self._layout

    # Selection

    def toggle_selection(self, index: int, multi: bool = False) -> List[int]:
        """Select *index*; with *multi* add or remove it from the selection."""
        if not self._layout.contains(index):
            raise ValueError(f"Box index {index} outside layout of {self._layout.count}")
        if not multi:
            self._selected = (index,)
        elif index in self._selected:
            self._selected = tuple(i for i in self._selected if i != index)
        else:
            self._selected = self._selected + (index,)
        return self.selected

    def clear_selection(self) -> None:
        self._selected = ()

    def can_merge_selected(self) -> bool:
        return self.can_merge(self._selected)

    def merge_selected(self) -> Optional[CombinedBoxInfo]:
        """Merge the selection; the merged box's primary stays selected."""
        info = self.merge(self._selected)
        if info is not None:
            self._selected = (info.primary_index,)
        return info

    # Merging

    def can_merge(self, indices: Sequence[int]) -> bool:
        return can_merge(indices, self._layout)

    def merge(self, indices: Sequence[int]) -> Optional[CombinedBoxInfo]:
        """Merge *indices* into one box, replacing merges that overlap them."""
        info = merge(indices, self._layout)
        if info is None:
            return None

        affected = set(info.all_indices)
        table = {
            primary: existing
            for primary, existing in self._combined.items()
            if not affected.intersection(existing.all_indices)
        }
        dropped = len(self._combined) - len(table)
        table[info.primary_index] = info
        self._combined = table

        logger.info(
            "Merged boxes %s along %s (%d earlier merges replaced)",
            list(info.all_indices), info.direction, dropped,
        )
        return info

    def split(self, index: int) -> Optional[CombinedBoxInfo]:
        """Undo the merge containing *index*; returns the removed record."""
        primary = self.owner_of(index)
        if primary is None:
            return None
        table = dict(self._combined)
        removed = table.pop(primary)
        self._combined = table
        logger.info("Split combined box %s", list(removed.all_indices))
        return removed

    def reset_merges(self) -> None:
        self._combined = {}

    def owner_of(self, index: int) -> Optional[int]:
        """Primary index of the merge containing *index*, if any."""
        for primary, info in self._combined.items():
            if index in info.all_indices:
                return primary
        return None

    def is_primary(self, index: int) -> bool:
        return index in self._combined

    def is_combined(self, index: int) -> bool:
        return self.owner_of(index) is not None

    def combined_indices(self, index: int) -> List[int]:
        """All indices merged with *index* (just ``[index]`` when standalone)."""
        primary = self.owner_of(index)
        if primary is None:
            return [index]
        return list(self._combined[primary].all_indices)

    # Visibility

    def is_visible(self, index: int) -> bool:
        return index not in self._hidden

    def toggle_visibility(self, index: int) -> bool:
        """Hide or show a box; merged boxes toggle as a whole.

        Returns the new visibility of *index*.
        """
        members = self.combined_indices(index)
        primary = members[0]
        if primary in self._hidden:
            self._hidden = self._hidden.difference(members)
            return True
        self._hidden = self._hidden.union(members)
        return False

    def toggle_selected_visibility(self) -> bool:
        """Hide every selected box if any is visible, else show them all.

        Returns the new visibility of the selection.
        """
        members = set()
        for index in self._selected:
            members.update(self.combined_indices(index))
        if not members:
            return True
        if any(i not in self._hidden for i in members):
            self._hidden = self._hidden.union(members)
            return False
        self._hidden = self._hidden.difference(members)
        return True

    # Grid export

    def group_table(self) -> Dict[int, CombinedBoxInfo]:
        """Grid group id (1-based, ordered by primary index) for every merge."""
        return {
            gid: self._combined[primary]
            for gid, primary in enumerate(sorted(self._combined), start=1)
        }

    def to_grid(self) -> Grid:
        """Cells of the layout carrying merge group ids and visibility."""
        owner_group: Dict[int, int] = {}
        for gid, info in self.group_table().items():
            for idx in info.all_indices:
                owner_group[idx] = gid

        layout = self._layout
        return [
            [
                Cell(
                    group=owner_group.get(layout.index(row, col), 0),
                    width=w,
                    depth=d,
                    visible=layout.index(row, col) not in self._hidden,
                )
                for col, w in enumerate(layout.widths)
            ]
            for row, d in enumerate(layout.depths)
        ]
