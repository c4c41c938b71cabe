"""
Dimension checks run before a box is traced or extruded.

Problems are reported as BoxViolation records instead of exceptions so that
one bad box is skipped while the rest of the layout is still built.
"""
import logging
from dataclasses import dataclass
from typing import List, Optional

from box_config import BoxParameters, max_corner_radius

logger = logging.getLogger(__name__)


@dataclass
class BoxViolation:
    """A single geometry rule violation."""

    rule_name: str
    severity: str  # "error" or "warning"
    message: str
    value: float = 0.0
    limit: float = 0.0
    index: Optional[int] = None


def check_box_dimensions(
    width: float,
    depth: float,
    params: BoxParameters,
    index: Optional[int] = None,
) -> List[BoxViolation]:
    """Validate one box against the shared parameters.

    Args:
        width: Nominal box width (X).
        depth: Nominal box depth (Y).
        params: Wall, radius and height settings.
        index: Layout index, copied into each violation.

    Returns:
        List of violations (empty = box can be built). Any "error" means the
        box must be skipped.
    """
    violations: List[BoxViolation] = []
    violations.extend(_check_positive(width, depth, params, index))
    if any(v.severity == "error" for v in violations):
        return violations

    violations.extend(_check_wall_fits(width, depth, params, index))
    violations.extend(_check_corner_radius(width, depth, params, index))
    violations.extend(_check_floor(params, index))
    return violations


def has_errors(violations: List[BoxViolation]) -> bool:
    return any(v.severity == "error" for v in violations)


def check_normalization(
    requested: BoxParameters,
    applied: BoxParameters,
) -> List[BoxViolation]:
    """Warnings for every value ``BoxParameters.normalized`` had to adjust."""
    violations: List[BoxViolation] = []
    if applied.corner_radius < requested.corner_radius:
        violations.append(
            BoxViolation(
                rule_name="corner_radius",
                severity="warning",
                message=(
                    f"Corner radius {requested.corner_radius:.2f}mm exceeds "
                    f"feasible {applied.corner_radius:.2f}mm and was clamped"
                ),
                value=requested.corner_radius,
                limit=applied.corner_radius,
            )
        )
    if applied.wall_height > requested.wall_height:
        violations.append(
            BoxViolation(
                rule_name="floor_height",
                severity="warning",
                message=(
                    f"Wall height {requested.wall_height:.2f}mm does not clear the "
                    f"{requested.wall_thickness:.2f}mm floor; raised to "
                    f"{applied.wall_height:.2f}mm"
                ),
                value=requested.wall_height,
                limit=requested.wall_thickness,
            )
        )
    return violations


# ─── Individual checks ───────────────────────────────────────────────────────


def _check_positive(
    width: float, depth: float, params: BoxParameters, index: Optional[int],
) -> List[BoxViolation]:
    """Sizes, height and thickness must be positive; radius non-negative."""
    violations = []
    for name, value in (
        ("width", width),
        ("depth", depth),
        ("wall_height", params.wall_height),
        ("wall_thickness", params.wall_thickness),
    ):
        if value <= 0:
            violations.append(
                BoxViolation(
                    rule_name=f"non_positive_{name}",
                    severity="error",
                    message=f"Box {name} must be positive, got {value:g}",
                    value=value,
                    limit=0.0,
                    index=index,
                )
            )
    if params.corner_radius < 0:
        violations.append(
            BoxViolation(
                rule_name="negative_corner_radius",
                severity="error",
                message=f"Corner radius must not be negative, got {params.corner_radius:g}",
                value=params.corner_radius,
                limit=0.0,
                index=index,
            )
        )
    return violations


def _check_wall_fits(
    width: float, depth: float, params: BoxParameters, index: Optional[int],
) -> List[BoxViolation]:
    """Two walls must leave an interior on both axes."""
    violations = []
    walls = 2 * params.wall_thickness
    for axis, size in (("width", width), ("depth", depth)):
        if walls >= size:
            violations.append(
                BoxViolation(
                    rule_name=f"wall_thickness_{axis}",
                    severity="error",
                    message=(
                        f"Two walls ({walls:.2f}mm) do not fit in box {axis} "
                        f"{size:.2f}mm"
                    ),
                    value=walls,
                    limit=size,
                    index=index,
                )
            )
    return violations


def _check_corner_radius(
    width: float, depth: float, params: BoxParameters, index: Optional[int],
) -> List[BoxViolation]:
    """Radius must fit inside the walls of this box."""
    limit = max_corner_radius(width, depth, params.wall_thickness)
    if params.corner_radius > limit + 1e-9:
        return [
            BoxViolation(
                rule_name="corner_radius",
                severity="warning",
                message=(
                    f"Corner radius {params.corner_radius:.2f}mm exceeds "
                    f"feasible {limit:.2f}mm and will be clamped"
                ),
                value=params.corner_radius,
                limit=limit,
                index=index,
            )
        ]
    return []


def _check_floor(params: BoxParameters, index: Optional[int]) -> List[BoxViolation]:
    """Walls must rise above the floor slab."""
    if params.has_bottom and params.wall_height <= params.wall_thickness:
        return [
            BoxViolation(
                rule_name="floor_height",
                severity="warning",
                message=(
                    f"Wall height {params.wall_height:.2f}mm does not clear the "
                    f"{params.wall_thickness:.2f}mm floor"
                ),
                value=params.wall_height,
                limit=params.wall_thickness,
                index=index,
            )
        ]
    return []
