from __future__ import annotations

import subprocess
import sys
from pathlib import Path

import pytest

SCRIPT = Path(__file__).resolve().parents[2] / "scripts" / "render_frame.py"


def test_render_frame_writes_png(tmp_path: Path) -> None:
    output = tmp_path / "frame.png"
    result = subprocess.run(
        [sys.executable, str(SCRIPT), "--output", str(output), "--ticks", "5", "--seed", "4"],
        check=True,
        capture_output=True,
        text=True,
    )

    assert "Rendered tick 5" in result.stdout
    assert output.read_bytes().startswith(b"\x89PNG\r\n\x1a\n")


def test_render_frame_refuses_to_overwrite(tmp_path: Path) -> None:
    output = tmp_path / "frame.png"
    output.write_bytes(b"keep")

    with pytest.raises(subprocess.CalledProcessError):
        subprocess.run(
            [sys.executable, str(SCRIPT), "--output", str(output), "--ticks", "1"],
            check=True,
            capture_output=True,
            text=True,
        )
    assert output.read_bytes() == b"keep"
