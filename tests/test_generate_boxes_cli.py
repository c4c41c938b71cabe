from __future__ import annotations

import json
import subprocess
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parent.parent


def _run(tmp_path: Path, *extra: str) -> subprocess.CompletedProcess:
    cmd = [
        sys.executable,
        str(REPO_ROOT / "scripts" / "generate_boxes.py"),
        "--name",
        "drawer insert",
        "--runs-dir",
        str(tmp_path),
        *extra,
    ]
    return subprocess.run(cmd, capture_output=True, text=True)


def _single_run_dir(tmp_path: Path) -> Path:
    run_dirs = sorted(
        [path for path in tmp_path.iterdir() if path.is_dir() and path.name != "latest"]
    )
    assert len(run_dirs) == 1
    return run_dirs[0]


def test_generate_boxes_cli_writes_manifest_and_summary(tmp_path: Path):
    proc = _run(tmp_path, "--width", "250", "--depth", "100", "--merge", "1,2")
    assert proc.returncode == 0, proc.stderr
    assert "Run ID:" in proc.stdout
    assert "Boxes: 2" in proc.stdout

    run_dir = _single_run_dir(tmp_path)
    assert run_dir.name.endswith("drawer-insert")

    manifest = json.loads((run_dir / "manifest.json").read_text(encoding="utf-8"))
    assert manifest["layout"]["widths"] == [100.0, 100.0, 50.0]
    assert len(manifest["combined"]) == 1
    assert manifest["combined"][0]["direction"] == "width"
    boxes = manifest["boxes"]
    assert [b["index"] for b in boxes] == [0, 1]
    assert boxes[1]["is_combined"] is True
    assert boxes[0]["wall_faces"] > 0
    assert boxes[0]["floor_faces"] > 0

    summary = (run_dir / "summary.md").read_text(encoding="utf-8")
    assert "## Unique boxes" in summary
    assert "merged 100 x 150" in summary


def test_generate_boxes_cli_hide_and_open_bottom(tmp_path: Path):
    proc = _run(tmp_path, "--width", "200", "--depth", "100", "--hide", "0", "--no-bottom")
    assert proc.returncode == 0, proc.stderr

    manifest = json.loads((_single_run_dir(tmp_path) / "manifest.json").read_text(encoding="utf-8"))
    assert manifest["hidden"] == [0]
    assert [b["index"] for b in manifest["boxes"]] == [1]
    assert manifest["boxes"][0]["floor_faces"] == 0


def test_generate_boxes_cli_rejects_bad_merge_indices(tmp_path: Path):
    proc = _run(tmp_path, "--merge", "a,b")
    assert proc.returncode != 0
    assert "--merge" in proc.stderr
