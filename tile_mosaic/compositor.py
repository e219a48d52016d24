"""Render a tile assignment into a full-resolution RGB frame."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

import numpy as np

from tile_mosaic.errors import TileDecodeError
from tile_mosaic.matcher import TileAssignment, find_best
from tile_mosaic.tile_index import TileCorpus, decode_with_retry

logger = logging.getLogger(__name__)


def _replace_failed_cell(
    assignment: TileAssignment,
    corpus: TileCorpus,
    x: int,
    y: int,
) -> str:
    """Re-match one cell against the tiles that are still usable."""
    target = assignment.colors[y, x]
    replacement = find_best(target, corpus.candidates())
    logger.warning(
        "Cell (%d, %d): substituting %s for %s",
        x, y, replacement.path, assignment.grid[y][x],
    )
    assignment.grid[y][x] = replacement.path
    return replacement.path


def render_assignment(
    assignment: TileAssignment,
    corpus: TileCorpus,
    tile_size: int,
    retries: int = 2,
    retry_delay: float = 1.0,
    progress_every: int = 10,
    sleep: Callable[[float], None] = time.sleep,
) -> np.ndarray:
    """Paint every cell with its tile resized to ``tile_size x tile_size``.

    A tile that fails to decode is added to the corrupted set and the cell
    is re-matched from its stored target colour; the assignment is updated
    in place so later renders of it skip the broken tile.

    Returns:
        (rows * tile_size, cols * tile_size, 3) uint8 array.

    Raises:
        NoTilesError: a cell failed and no usable tile is left.
    """
    rows, cols = assignment.rows, assignment.cols
    frame = np.zeros((rows * tile_size, cols * tile_size, 3), dtype=np.uint8)
    pixels: dict[str, np.ndarray] = {}

    logger.info(
        "Compositing %dx%d mosaic at %d px tiles (%dx%d px) ...",
        cols, rows, tile_size, cols * tile_size, rows * tile_size,
    )
    t0 = time.perf_counter()

    for y in range(rows):
        for x in range(cols):
            path = assignment.grid[y][x]
            tile = pixels.get(path)
            while tile is None:
                if corpus.is_corrupted(path):
                    path = _replace_failed_cell(assignment, corpus, x, y)
                    tile = pixels.get(path)
                    continue
                try:
                    tile = decode_with_retry(path, tile_size, retries, retry_delay, sleep)
                except TileDecodeError as exc:
                    logger.warning("Tile failed while compositing: %s", exc)
                    corpus.mark_corrupted(path)
                    continue
                pixels[path] = tile

            top, left = y * tile_size, x * tile_size
            frame[top:top + tile_size, left:left + tile_size] = tile

        logger.debug("Row %d of %d", y + 1, rows)
        if (y + 1) % progress_every == 0 or y == rows - 1:
            logger.info("Progress: %d%%", round((y + 1) / rows * 100))

    logger.info("Frame composited  (%.1f s)", time.perf_counter() - t0)
    return frame
