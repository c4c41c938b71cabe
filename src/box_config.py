"""
Parameter sets for box generation.

Values are plain millimetres. Defaults match the drawer-insert generator's
initial state: a 150 x 150 footprint split into boxes of at most 100 mm.
"""
import logging
from dataclasses import dataclass, replace

logger = logging.getLogger(__name__)

UP_AXES = ("z", "y")


@dataclass(frozen=True)
class BoxParameters:
    """Geometry parameters shared by every box of a layout."""

    wall_thickness: float = 2.0
    corner_radius: float = 5.0
    wall_height: float = 30.0
    has_bottom: bool = True
    segments_per_corner: int = 5
    up_axis: str = "z"  # "z" for printing, "y" for Y-up renderers

    def __post_init__(self):
        if self.up_axis not in UP_AXES:
            raise ValueError(f"up_axis must be one of {UP_AXES}, got {self.up_axis!r}")

    @property
    def floor_thickness(self) -> float:
        return self.wall_thickness

    @property
    def inner_corner_radius(self) -> float:
        return self.corner_radius - self.wall_thickness

    def normalized(self, smallest_width: float, smallest_depth: float) -> "BoxParameters":
        """Clamp the corner radius to what the smallest box can hold and make
        sure the walls clear the floor when one is generated."""
        radius = self.corner_radius
        limit = max_corner_radius(smallest_width, smallest_depth, self.wall_thickness)
        if radius > limit:
            logger.warning(
                "Corner radius %.2f exceeds feasible %.2f; clamping", radius, limit,
            )
            radius = limit
        radius = max(radius, 0.0)

        height = self.wall_height
        if self.has_bottom and height <= self.wall_thickness:
            height = self.wall_thickness + 1.0

        if radius == self.corner_radius and height == self.wall_height:
            return self
        return replace(self, corner_radius=radius, wall_height=height)


@dataclass(frozen=True)
class LayoutConfig:
    """Footprint and per-box size constraints."""

    total_width: float = 150.0
    total_depth: float = 150.0
    min_box_width: float = 10.0
    max_box_width: float = 100.0
    min_box_depth: float = 10.0
    max_box_depth: float = 100.0
    use_multiple_boxes: bool = True

    def normalized(self) -> "LayoutConfig":
        """Keep ``min <= max <= total`` on both axes."""
        max_w = min(max(self.min_box_width, self.max_box_width), self.total_width)
        max_d = min(max(self.min_box_depth, self.max_box_depth), self.total_depth)
        min_w = min(max(self.min_box_width, 0.0), max_w)
        min_d = min(max(self.min_box_depth, 0.0), max_d)
        return replace(
            self,
            min_box_width=min_w,
            max_box_width=max_w,
            min_box_depth=min_d,
            max_box_depth=max_d,
        )


def max_corner_radius(width: float, depth: float, wall_thickness: float) -> float:
    """Largest corner radius a width x depth box with the given walls can hold.

    Returns 0 when the walls alone do not fit.
    """
    if width <= 0 or depth <= 0 or wall_thickness < 0:
        return 0.0
    if width <= 2 * wall_thickness or depth <= 2 * wall_thickness:
        return 0.0
    return max(0.0, min((width - 2 * wall_thickness) / 2, (depth - 2 * wall_thickness) / 2))
