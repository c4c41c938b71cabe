#!/usr/bin/env python3
"""Generate a drawer-insert box grid and record its boxes in a run folder."""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from box_config import BoxParameters, LayoutConfig
from box_layout import BoxLayoutEngine
from box_pipeline import build_boxes_from_layout
from run_protocol import (
    box_manifest,
    prepare_run_dir,
    run_summary,
    update_latest_pointer,
    write_json,
    write_text,
)

logger = logging.getLogger("generate_boxes")


def build_parser() -> argparse.ArgumentParser:
    defaults_layout = LayoutConfig()
    defaults_box = BoxParameters()
    parser = argparse.ArgumentParser(
        description="Split a drawer footprint into rounded, printable boxes"
    )
    parser.add_argument("--name", default="boxes", help="Run name")
    parser.add_argument("--runs-dir", default="runs", help="Runs output root")
    parser.add_argument("--width", type=float, default=defaults_layout.total_width,
                        help="Total footprint width (mm)")
    parser.add_argument("--depth", type=float, default=defaults_layout.total_depth,
                        help="Total footprint depth (mm)")
    parser.add_argument("--min-box-width", type=float, default=defaults_layout.min_box_width)
    parser.add_argument("--max-box-width", type=float, default=defaults_layout.max_box_width)
    parser.add_argument("--min-box-depth", type=float, default=defaults_layout.min_box_depth)
    parser.add_argument("--max-box-depth", type=float, default=defaults_layout.max_box_depth)
    parser.add_argument("--single-box", action="store_true",
                        help="One box covering the whole footprint")
    parser.add_argument("--height", type=float, default=defaults_box.wall_height,
                        help="Wall height (mm)")
    parser.add_argument("--wall-thickness", type=float, default=defaults_box.wall_thickness)
    parser.add_argument("--corner-radius", type=float, default=defaults_box.corner_radius)
    parser.add_argument("--no-bottom", action="store_true", help="Open-bottom boxes")
    parser.add_argument(
        "--merge",
        action="append",
        default=[],
        metavar="I,J[,K...]",
        help="Comma-separated box indices to merge (repeatable)",
    )
    parser.add_argument(
        "--hide", type=int, action="append", default=[], help="Box index to hide"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logs"
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    started = time.perf_counter()
    layout_config = LayoutConfig(
        total_width=args.width,
        total_depth=args.depth,
        min_box_width=args.min_box_width,
        max_box_width=args.max_box_width,
        min_box_depth=args.min_box_depth,
        max_box_depth=args.max_box_depth,
        use_multiple_boxes=not args.single_box,
    )
    params = BoxParameters(
        wall_thickness=args.wall_thickness,
        corner_radius=args.corner_radius,
        wall_height=args.height,
        has_bottom=not args.no_bottom,
    )

    engine = BoxLayoutEngine(layout_config)
    for selection in args.merge:
        try:
            indices = [int(part) for part in selection.split(",") if part.strip()]
        except ValueError:
            parser.error(f"--merge expects comma-separated integers, got {selection!r}")
        if engine.merge(indices) is None:
            logger.warning("Boxes %s cannot be merged; ignoring", indices)
    for index in args.hide:
        if engine.is_visible(index):
            engine.toggle_visibility(index)

    result = build_boxes_from_layout(engine, params)
    elapsed = time.perf_counter() - started

    run_paths = prepare_run_dir(args.runs_dir, args.name)
    write_text(
        run_paths.summary_path,
        run_summary(run_paths.run_id, elapsed, engine, result),
    )
    manifest = box_manifest(run_paths.run_id, args.name, elapsed, engine, result)
    manifest["artifacts"] = {"summary": str(run_paths.summary_path)}
    write_json(run_paths.manifest_path, manifest)
    update_latest_pointer(args.runs_dir, run_paths.run_dir)

    print(f"Run ID: {run_paths.run_id}")
    print(f"Run dir: {run_paths.run_dir}")
    print(f"Boxes: {len(result.boxes)}")
    print(f"Violations: {len(result.errors)} errors, {len(result.warnings)} warnings")
    print(f"Manifest: {run_paths.manifest_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
