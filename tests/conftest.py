"""
Shared test fixtures for box generation tests.
"""
import sys
from pathlib import Path

import pytest

# Add src/ to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from box_config import BoxParameters, LayoutConfig
from box_layout import BoxLayoutEngine
from grid_model import Cell


@pytest.fixture
def unit_grid_2x2():
    """A 2x2 grid of ungrouped unit cells."""
    return [[Cell() for _ in range(2)] for _ in range(2)]


@pytest.fixture
def l_shape_grid():
    """2x2 grid of 10mm cells with group 1 covering an L (all but top-right).

    Row 0 is z=0. Cells (0,0), (1,0), (1,1) are grouped; (0,1) stands alone.
    """
    return [
        [Cell(group=1, width=10, depth=10), Cell(group=0, width=10, depth=10)],
        [Cell(group=1, width=10, depth=10), Cell(group=1, width=10, depth=10)],
    ]


@pytest.fixture
def box_params():
    """Standard box parameters for tests."""
    return BoxParameters(
        wall_thickness=2.0,
        corner_radius=5.0,
        wall_height=30.0,
        has_bottom=True,
        segments_per_corner=5,
    )


@pytest.fixture
def engine_250x100():
    """Engine with three boxes in one row: 100, 100, 50."""
    return BoxLayoutEngine(LayoutConfig(
        total_width=250,
        total_depth=100,
        min_box_width=10,
        max_box_width=100,
        min_box_depth=10,
        max_box_depth=100,
    ))


@pytest.fixture
def engine_2x2():
    """Engine with a 2x2 grid of 50mm boxes."""
    return BoxLayoutEngine(LayoutConfig(
        total_width=100,
        total_depth=100,
        min_box_width=10,
        max_box_width=50,
        min_box_depth=10,
        max_box_depth=50,
    ))
