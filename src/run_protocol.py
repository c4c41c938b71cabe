"""Run folders for box generation: manifest, summary and a ``latest`` pointer.

Each run lands in ``<runs_root>/<UTC stamp>_<slug>/`` and holds a
``manifest.json`` (config, layout, merges, per-box metadata, violations)
and a human-readable ``summary.md``. No mesh files are written here.
"""

from __future__ import annotations

import json
import os
import re
import shutil
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List

from box_layout import BoxLayoutEngine
from box_pipeline import BoxSetResult, unique_box_groups

MAX_SUMMARY_VIOLATIONS = 12


@dataclass
class RunPaths:
    run_id: str
    run_dir: Path
    manifest_path: Path
    summary_path: Path


def slugify(value: str) -> str:
    value = re.sub(r"[^a-z0-9]+", "-", value.strip().lower())
    return value.strip("-") or "boxes"


def create_run_id(name: str, now: datetime | None = None) -> str:
    stamp = (now or datetime.now(timezone.utc)).strftime("%Y%m%d_%H%M%S")
    return f"{stamp}_{slugify(name)}"


def prepare_run_dir(runs_root: str, name: str) -> RunPaths:
    run_id = create_run_id(name)
    run_dir = Path(runs_root) / run_id
    run_dir.mkdir(parents=True, exist_ok=True)
    return RunPaths(
        run_id=run_id,
        run_dir=run_dir,
        manifest_path=run_dir / "manifest.json",
        summary_path=run_dir / "summary.md",
    )


def box_manifest(
    run_id: str,
    name: str,
    elapsed_s: float,
    engine: BoxLayoutEngine,
    result: BoxSetResult,
) -> Dict[str, Any]:
    """JSON-ready record of one generation run."""
    return {
        "run_id": run_id,
        "name": name,
        "created_utc": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
        "elapsed_s": round(elapsed_s, 3),
        "config": {
            "layout": asdict(engine.config),
            "box": asdict(result.params) if result.params is not None else None,
        },
        "layout": {
            "widths": list(engine.layout.widths),
            "depths": list(engine.layout.depths),
        },
        "combined": [asdict(info) for info in engine.combined_boxes.values()],
        "hidden": sorted(engine.hidden),
        "boxes": [
            {
                **asdict(box.metadata),
                "outer_points": len(box.outer),
                "inner_points": len(box.inner),
                "wall_faces": int(len(box.wall.faces)),
                "floor_faces": int(len(box.floor.faces)) if box.floor is not None else 0,
            }
            for box in result.boxes
        ],
        "truncated_groups": list(result.truncated_groups),
        "skipped_indices": list(result.skipped_indices),
        "violations": [asdict(v) for v in result.violations],
    }


def run_summary(
    run_id: str,
    elapsed_s: float,
    engine: BoxLayoutEngine,
    result: BoxSetResult,
) -> str:
    layout = engine.layout
    params = result.params
    lines: List[str] = [
        f"# Run {run_id}",
        "",
        f"- Duration: {elapsed_s:.2f}s",
        f"- Grid: {layout.cols} x {layout.rows}",
        f"- Footprint: {layout.total_width:g} x {layout.total_depth:g} mm",
    ]
    if params is not None:
        lines.append(
            f"- Wall: {params.wall_thickness:g} mm, radius {params.corner_radius:g} mm, "
            f"height {params.wall_height:g} mm"
        )
    lines += [
        f"- Boxes built: {len(result.boxes)}",
        f"- Merged boxes: {sum(1 for b in result.boxes if b.metadata.is_combined)}",
        f"- Skipped cells: {len(result.skipped_indices)}",
        f"- Violations: {len(result.errors)} errors, {len(result.warnings)} warnings",
        "",
        "## Unique boxes",
    ]
    for group in unique_box_groups(result.boxes):
        kind = "merged" if group.is_combined else "box"
        lines.append(
            f"- {kind} {group.width:g} x {group.depth:g} x {group.height:g} mm"
            f" (qty {group.count})"
        )
    if result.violations:
        lines += ["", "## Violations"]
        for v in result.violations[:MAX_SUMMARY_VIOLATIONS]:
            lines.append(f"- [{v.severity}] {v.rule_name} (box {v.index}): {v.message}")
    return "\n".join(lines) + "\n"


def write_json(path: Path, payload: Dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2)


def write_text(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        f.write(content)


def update_latest_pointer(runs_root: str, run_dir: Path) -> None:
    """Point ``<runs_root>/latest`` at *run_dir* (a marker folder without symlinks)."""
    latest = Path(runs_root) / "latest"
    if latest.is_symlink() or latest.is_file():
        latest.unlink()
    elif latest.exists():
        shutil.rmtree(latest)

    try:
        latest.symlink_to(os.path.relpath(run_dir, runs_root))
    except OSError:
        latest.mkdir(parents=True, exist_ok=True)
        (latest / "latest_run.txt").write_text(run_dir.name, encoding="utf-8")
