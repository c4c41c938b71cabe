"""Tests for box_layout module."""
import pytest

from box_config import LayoutConfig
from box_layout import (
    BoxLayout,
    BoxLayoutEngine,
    can_merge,
    find_connected_groups,
    merge,
    partition,
    split_axis,
)


class TestSplitAxis:
    """Test one-axis partitioning."""

    def test_full_boxes_plus_remainder(self):
        assert split_axis(250, 100) == [100, 100, 50]

    def test_exact_multiple(self):
        assert split_axis(200, 100) == [100, 100]
        assert split_axis(100, 100) == [100]

    def test_small_total_is_single_box(self):
        assert split_axis(40, 100) == [40]

    def test_short_remainder_two_boxes_split_evenly(self):
        assert split_axis(105, 100, min_size=10) == pytest.approx([52.5, 52.5])

    def test_short_remainder_two_boxes_below_min(self):
        assert split_axis(15, 10, min_size=8) == pytest.approx([8, 7])

    def test_short_remainder_spread_over_full_boxes(self):
        sizes = split_axis(205, 100, min_size=10)
        assert sizes == pytest.approx([102.5, 102.5])

    def test_remainder_at_minimum_kept(self):
        assert split_axis(210, 100, min_size=10) == pytest.approx([100, 100, 10])

    @pytest.mark.parametrize("total,max_size", [(0, 100), (-5, 100), (100, 0)])
    def test_invalid_inputs_raise(self, total, max_size):
        with pytest.raises(ValueError):
            split_axis(total, max_size)


class TestPartition:
    """Test footprint partitioning into a BoxLayout."""

    def test_250_by_100(self):
        layout = partition(250, 100, 100, 100)
        assert layout.widths == (100, 100, 50)
        assert layout.depths == (100,)
        assert layout.count == 3

    def test_offsets_and_positions(self):
        layout = BoxLayout(widths=(100, 100, 50), depths=(40, 60))
        assert layout.x_offsets == [0.0, 100.0, 200.0]
        assert layout.z_offsets == [0.0, 40.0]
        assert layout.position(4) == (1, 1)
        assert layout.index(1, 2) == 5
        assert layout.box_size(5) == (50, 60)

    def test_centered_positions(self):
        layout = partition(250, 100, 100, 100)
        centres = layout.centered_positions()
        assert centres[0] == pytest.approx((-75.0, 0.0))
        assert centres[2] == pytest.approx((100.0, 0.0))

    def test_to_grid_matches_sizes(self):
        grid = partition(250, 100, 100, 100).to_grid()
        assert [c.width for c in grid[0]] == [100, 100, 50]
        assert all(c.group == 0 for c in grid[0])


class TestMergeRules:
    """Test merge validation and merged box sizes."""

    def setup_method(self):
        self.layout = BoxLayout(widths=(50, 50), depths=(50, 50))

    def test_horizontal_pair_mergeable(self):
        assert can_merge([0, 1], self.layout)

    def test_vertical_pair_mergeable(self):
        assert can_merge([0, 2], self.layout)

    def test_diagonal_rejected(self):
        assert not can_merge([0, 3], self.layout)

    def test_fewer_than_two_rejected(self):
        assert not can_merge([1], self.layout)
        assert not can_merge([], self.layout)
        assert not can_merge([1, 1], self.layout)

    def test_gap_rejected(self):
        layout = partition(250, 100, 100, 100)
        assert not can_merge([0, 2], layout)
        assert can_merge([0, 1, 2], layout)

    def test_out_of_range_rejected(self):
        assert not can_merge([3, 4], self.layout)

    def test_row_wrap_pair_rejected(self):
        assert not can_merge([1, 2], self.layout)
        three_cols = BoxLayout(widths=(50, 50, 50), depths=(50, 50))
        assert not can_merge([2, 3], three_cols)
        assert can_merge([3, 4], three_cols)

    def test_width_merge_sizes(self):
        layout = partition(250, 100, 100, 100)
        info = merge([2, 1], layout)
        assert info.primary_index == 1
        assert info.secondary_indices == (2,)
        assert info.direction == "width"
        assert info.width == pytest.approx(150)
        assert info.depth == pytest.approx(100)

    def test_depth_merge_sizes(self):
        info = merge([0, 2], self.layout)
        assert info.direction == "depth"
        assert (info.width, info.depth) == (50, 100)

    def test_invalid_merge_returns_none(self):
        assert merge([0, 3], self.layout) is None


class TestConnectedGroups:
    """Test 4-connected component grouping of selections."""

    def test_groups(self):
        assert find_connected_groups([0, 1, 3, 8], cols=3) == [[0, 1, 3], [8]]

    def test_row_wrap_is_not_adjacent(self):
        assert find_connected_groups([2, 3], cols=3) == [[2], [3]]

    def test_empty(self):
        assert find_connected_groups([], cols=3) == []


class TestLayoutEngine:
    """Test the stateful layout/merge engine."""

    def test_initial_layout(self, engine_250x100):
        assert engine_250x100.layout.widths == (100, 100, 50)
        assert engine_250x100.combined_boxes == {}

    def test_merge_records_primary(self, engine_250x100):
        info = engine_250x100.merge([1, 2])
        assert info is not None
        assert engine_250x100.is_primary(1)
        assert engine_250x100.is_combined(2)
        assert engine_250x100.owner_of(2) == 1
        assert engine_250x100.combined_indices(2) == [1, 2]
        assert engine_250x100.combined_indices(0) == [0]

    def test_rejected_merge_leaves_state(self, engine_2x2):
        engine_2x2.merge([0, 1])
        assert engine_2x2.merge([0, 3]) is None
        assert list(engine_2x2.combined_boxes) == [0]

    def test_overlapping_merge_replaces_earlier(self, engine_2x2):
        engine_2x2.merge([0, 1])
        engine_2x2.merge([2, 3])
        engine_2x2.merge([1, 3])
        combined = engine_2x2.combined_boxes
        assert list(combined) == [1]
        assert combined[1].direction == "depth"
        assert not engine_2x2.is_combined(0)

    def test_split(self, engine_2x2):
        engine_2x2.merge([0, 2])
        removed = engine_2x2.split(2)
        assert removed.primary_index == 0
        assert engine_2x2.combined_boxes == {}
        assert engine_2x2.split(2) is None

    def test_toggle_visibility_whole_group(self, engine_2x2):
        engine_2x2.merge([0, 1])
        assert engine_2x2.toggle_visibility(1) is False
        assert engine_2x2.hidden == frozenset({0, 1})
        assert engine_2x2.toggle_visibility(0) is True
        assert engine_2x2.hidden == frozenset()

    def test_dimension_change_drops_merges(self, engine_250x100):
        engine_250x100.merge([0, 1])
        engine_250x100.toggle_visibility(2)
        layout = engine_250x100.set_dimensions(total_width=300)
        assert layout.widths == (100, 100, 100)
        assert engine_250x100.combined_boxes == {}
        assert engine_250x100.hidden == frozenset()

    def test_single_box_mode(self, engine_250x100):
        layout = engine_250x100.set_constraints(use_multiple_boxes=False)
        assert layout.count == 1
        assert layout.box_size(0) == (250, 100)

    def test_unknown_constraint_rejected(self, engine_250x100):
        with pytest.raises(ValueError, match="Unknown"):
            engine_250x100.set_constraints(wall_thickness=3)

    def test_to_grid_carries_groups_and_visibility(self, engine_2x2):
        engine_2x2.merge([2, 3])
        engine_2x2.merge([0, 1])
        engine_2x2.toggle_visibility(2)
        grid = engine_2x2.to_grid()
        assert [c.group for c in grid[0]] == [1, 1]
        assert [c.group for c in grid[1]] == [2, 2]
        assert not grid[1][0].visible and not grid[1][1].visible
        assert grid[0][0].visible

    def test_config_normalized(self):
        engine = BoxLayoutEngine(LayoutConfig(total_width=50, total_depth=50))
        assert engine.config.max_box_width == 50
        assert engine.layout.count == 1

    def test_invalid_dimensions_leave_engine_unchanged(self, engine_250x100):
        engine_250x100.merge([0, 1])
        config = engine_250x100.config
        with pytest.raises(ValueError):
            engine_250x100.set_dimensions(total_width=0)
        assert engine_250x100.config == config
        assert engine_250x100.layout.widths == (100, 100, 50)
        assert list(engine_250x100.combined_boxes) == [0]

    def test_unchanged_dimensions_keep_merges(self, engine_250x100):
        engine_250x100.merge([0, 1])
        engine_250x100.toggle_visibility(2)
        engine_250x100.toggle_selection(2)
        engine_250x100.set_dimensions(total_width=250, total_depth=100)
        assert list(engine_250x100.combined_boxes) == [0]
        assert engine_250x100.hidden == frozenset({2})
        assert engine_250x100.selected == [2]


class TestSelection:
    """Test selection-driven merging and visibility."""

    def test_single_select_replaces(self, engine_2x2):
        engine_2x2.toggle_selection(0)
        assert engine_2x2.toggle_selection(3) == [3]

    def test_multi_select_adds_and_removes(self, engine_2x2):
        engine_2x2.toggle_selection(0)
        engine_2x2.toggle_selection(2, multi=True)
        assert engine_2x2.selected == [0, 2]
        assert engine_2x2.toggle_selection(0, multi=True) == [2]

    def test_out_of_range_selection_rejected(self, engine_2x2):
        with pytest.raises(ValueError):
            engine_2x2.toggle_selection(4)

    def test_merge_selected_keeps_primary_selected(self, engine_2x2):
        engine_2x2.toggle_selection(2)
        engine_2x2.toggle_selection(0, multi=True)
        assert engine_2x2.can_merge_selected()
        info = engine_2x2.merge_selected()
        assert info.primary_index == 0
        assert info.direction == "depth"
        assert engine_2x2.selected == [0]

    def test_invalid_selection_not_merged(self, engine_2x2):
        engine_2x2.toggle_selection(0)
        engine_2x2.toggle_selection(3, multi=True)
        assert engine_2x2.merge_selected() is None
        assert engine_2x2.selected == [0, 3]

    def test_selected_visibility_hides_then_shows(self, engine_2x2):
        engine_2x2.toggle_visibility(1)
        engine_2x2.toggle_selection(0)
        engine_2x2.toggle_selection(1, multi=True)
        assert engine_2x2.toggle_selected_visibility() is False
        assert engine_2x2.hidden == frozenset({0, 1})
        assert engine_2x2.toggle_selected_visibility() is True
        assert engine_2x2.hidden == frozenset()

    def test_layout_change_clears_selection(self, engine_2x2):
        engine_2x2.toggle_selection(1)
        engine_2x2.set_constraints(max_box_width=100)
        assert engine_2x2.selected == []
