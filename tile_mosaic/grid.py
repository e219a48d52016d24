"""Grid sizing and per-cell target colours."""

from __future__ import annotations

import math

import numpy as np
from PIL import Image

from tile_mosaic.config import DEFAULT_GRID_WIDTH
from tile_mosaic.image_io import resize_to_array


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves upwards (2.5 -> 3)."""
    return int(math.floor(value + 0.5))


def compute_grid_size(
    image_width: int,
    image_height: int,
    tile_size: int,
    grid_width: int | None = None,
    grid_height: int | None = None,
    output_width: int | None = None,
    output_height: int | None = None,
) -> tuple[int, int]:
    """Compute the (cols, rows) of the mosaic grid.

    Explicit tile counts win over pixel targets. Without a height, the
    source aspect ratio is applied to the grid width. Each side is at
    least one cell.
    """
    if grid_width is not None:
        cols = grid_width
    elif output_width is not None:
        cols = round_half_up(output_width / tile_size)
    else:
        cols = DEFAULT_GRID_WIDTH
    cols = max(1, cols)

    if grid_height is not None:
        rows = grid_height
    elif output_height is not None:
        rows = round_half_up(output_height / tile_size)
    else:
        rows = round_half_up(cols * image_height / image_width)
    return cols, max(1, rows)


def extract_target_colors(img: Image.Image, cols: int, rows: int) -> np.ndarray:
    """Box-downsample *img* so each pixel is one cell's mean colour.

    Returns:
        (rows, cols, 3) uint8 array.
    """
    return resize_to_array(img.convert("RGB"), cols, rows, Image.BOX)
