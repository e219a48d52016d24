"""Shared fixtures: tiny solid-colour tiles and a four-quadrant source."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from tile_mosaic.config import MosaicConfig

RED = (255, 0, 0)
GREEN = (0, 255, 0)
BLUE = (0, 0, 255)
YELLOW = (255, 255, 0)
QUADRANTS = [[RED, GREEN], [BLUE, YELLOW]]


def write_solid(path: Path, color: tuple[int, int, int], size: int = 16) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    arr = np.zeros((size, size, 3), dtype=np.uint8)
    arr[:, :] = color
    Image.fromarray(arr).save(path)
    return path


def write_quadrants(path: Path, size: int = 20) -> Path:
    half = size // 2
    arr = np.zeros((size, size, 3), dtype=np.uint8)
    arr[:half, :half] = RED
    arr[:half, half:] = GREEN
    arr[half:, :half] = BLUE
    arr[half:, half:] = YELLOW
    Image.fromarray(arr).save(path)
    return path


@pytest.fixture
def tiles_dir(tmp_path: Path) -> Path:
    """Four solid tiles, one of them in a nested folder."""
    d = tmp_path / "tiles"
    write_solid(d / "red.png", RED)
    write_solid(d / "green.png", GREEN)
    write_solid(d / "blue.png", BLUE)
    write_solid(d / "nested" / "yellow.png", YELLOW)
    return d


@pytest.fixture
def source_image(tmp_path: Path) -> Path:
    return write_quadrants(tmp_path / "source.png")


@pytest.fixture
def cfg() -> MosaicConfig:
    """2x2 grid of 10 px tiles with no real waiting."""
    return MosaicConfig(
        grid_width=2,
        grid_height=2,
        tile_size=10,
        retry_delay=0.0,
        iteration_pause=0.0,
    )


@pytest.fixture
def sleeps() -> list[float]:
    """Delays requested from a stand-in sleep; pass ``sleeps.append``."""
    return []
