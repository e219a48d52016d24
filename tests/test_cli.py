"""Smoke tests for the Typer CLI."""

from __future__ import annotations

from pathlib import Path

import numpy as np
from PIL import Image
from typer.testing import CliRunner

from tile_mosaic.cli import app

from .conftest import QUADRANTS

runner = CliRunner()


def test_create(source_image: Path, tiles_dir: Path, tmp_path: Path) -> None:
    out = tmp_path / "mosaic.png"
    result = runner.invoke(app, [
        "create", str(source_image), str(tiles_dir), str(out),
        "--width", "2", "--height", "2", "--tile-size", "10",
    ])

    assert result.exit_code == 0, result.output
    with Image.open(out) as img:
        pixels = np.array(img.convert("RGB"))
    assert pixels.shape == (20, 20, 3)
    assert tuple(pixels[15, 15]) == QUADRANTS[1][1]


def test_create_zoom(source_image: Path, tiles_dir: Path, tmp_path: Path) -> None:
    out = tmp_path / "frames" / "zoom.png"
    result = runner.invoke(app, [
        "create", str(source_image), str(tiles_dir), str(out),
        "--width", "2", "--height", "2", "--tile-size", "4",
        "--zoom", "--zoom-steps", "1", "--max-iterations", "1",
    ])

    assert result.exit_code == 0, result.output
    assert sorted(p.name for p in out.parent.iterdir()) == ["zoom_0001.png", "zoom_0002.png"]


def test_missing_tiles_dir(source_image: Path, tmp_path: Path) -> None:
    result = runner.invoke(app, [
        "create", str(source_image), str(tmp_path / "nope"), str(tmp_path / "o.png"),
    ])
    assert result.exit_code == 1


def test_empty_tiles_dir(source_image: Path, tmp_path: Path) -> None:
    (tmp_path / "empty").mkdir()
    result = runner.invoke(app, [
        "create", str(source_image), str(tmp_path / "empty"), str(tmp_path / "o.png"),
    ])
    assert result.exit_code == 1
    assert not (tmp_path / "o.png").exists()


def test_invalid_zoom_factor(source_image: Path, tiles_dir: Path, tmp_path: Path) -> None:
    result = runner.invoke(app, [
        "create", str(source_image), str(tiles_dir), str(tmp_path / "o.png"),
        "--zoom", "--zoom-factor", "1.5",
    ])
    assert result.exit_code == 1


def test_video_without_frames(tmp_path: Path) -> None:
    (tmp_path / "empty").mkdir()
    result = runner.invoke(app, ["video", str(tmp_path / "empty"), "24"])
    assert result.exit_code == 1
