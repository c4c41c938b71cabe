"""
Extrusion of rounded box outlines into printable solids.

The wall solid is the outer outline with the inner outline as a hole; the
floor is the outer outline alone. Solids are built Z-up (the printing
frame) and can be rotated into a Y-up frame for renderers.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

import numpy as np
import trimesh
from shapely.geometry import Polygon
from shapely.geometry.polygon import orient

logger = logging.getLogger(__name__)

Vec2 = Tuple[float, float]


@dataclass
class BoxMetadata:
    """Identity and nominal size of one generated box.

    ``index`` is the layout index (the primary index for merged boxes).
    ``cells`` lists the (z, x) grid cells the box covers.
    """
    index: int
    width: float
    depth: float
    height: float
    is_combined: bool = False
    combined_indices: List[int] = field(default_factory=list)
    direction: Optional[str] = None  # "width" | "depth" for merged boxes
    cells: List[Tuple[int, int]] = field(default_factory=list)


@dataclass
class BoxSolid:
    """Rounded outlines and extruded solids of one box."""
    metadata: BoxMetadata
    outer: List[Vec2]
    inner: List[Vec2]
    wall: trimesh.Trimesh
    floor: Optional[trimesh.Trimesh] = None

    def meshes(self) -> List[trimesh.Trimesh]:
        return [m for m in (self.wall, self.floor) if m is not None]

    def combined_mesh(self) -> trimesh.Trimesh:
        """Wall and floor concatenated into one mesh."""
        return trimesh.util.concatenate(self.meshes())


def outline_polygon(
    outer: Sequence[Vec2],
    inner: Optional[Sequence[Vec2]] = None,
) -> Polygon:
    """Shapely polygon with CCW shell (and CW hole when *inner* is given).

    Raises:
        ValueError: if an outline has fewer than 3 points or the result is
            not a valid polygon.
    """
    if len(outer) < 3:
        raise ValueError(f"Outer outline needs at least 3 points, got {len(outer)}")
    holes = []
    if inner is not None:
        if len(inner) < 3:
            raise ValueError(f"Inner outline needs at least 3 points, got {len(inner)}")
        holes.append(list(inner))

    polygon = orient(Polygon(list(outer), holes=holes), sign=1.0)
    if not polygon.is_valid or polygon.area <= 0:
        raise ValueError("Outline does not form a valid polygon")
    return polygon


def build_wall_solid(
    outer: Sequence[Vec2],
    inner: Sequence[Vec2],
    wall_height: float,
    up_axis: str = "z",
) -> trimesh.Trimesh:
    """Extrude the ring between *outer* and *inner* to *wall_height*."""
    if wall_height <= 0:
        raise ValueError(f"Wall height must be positive, got {wall_height}")
    polygon = outline_polygon(outer, inner)
    mesh = trimesh.creation.extrude_polygon(polygon, height=wall_height)
    return _to_up_axis(mesh, wall_height, up_axis)


def build_floor_solid(
    outer: Sequence[Vec2],
    thickness: float,
    up_axis: str = "z",
) -> trimesh.Trimesh:
    """Extrude the full outer outline to *thickness*."""
    if thickness <= 0:
        raise ValueError(f"Floor thickness must be positive, got {thickness}")
    polygon = outline_polygon(outer)
    mesh = trimesh.creation.extrude_polygon(polygon, height=thickness)
    return _to_up_axis(mesh, thickness, up_axis)


# ─── Internal helpers ────────────────────────────────────────────────────────

def _to_up_axis(mesh: trimesh.Trimesh, height: float, up_axis: str) -> trimesh.Trimesh:
    """Rotate a Z-extruded mesh so the extrusion spans [0, height] on *up_axis*.

    For Y-up the outline's second coordinate becomes world Z.
    """
    if up_axis == "z":
        return mesh
    if up_axis != "y":
        raise ValueError(f"Unsupported up axis: {up_axis!r}")

    rotation = trimesh.transformations.rotation_matrix(np.pi / 2, [1.0, 0.0, 0.0])
    mesh.apply_transform(rotation)
    mesh.apply_translation([0.0, height, 0.0])
    return mesh
