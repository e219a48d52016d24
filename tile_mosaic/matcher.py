"""Nearest-colour tile assignment."""

from __future__ import annotations

import logging
import time
from collections.abc import Iterator, Sequence
from dataclasses import dataclass

import numpy as np

from tile_mosaic.color_utils import Color, compute_cost_matrix, distance_squared
from tile_mosaic.errors import NoTilesError
from tile_mosaic.tile_index import TileCorpus, TileRecord

logger = logging.getLogger(__name__)


@dataclass
class TileAssignment:
    """Tile path chosen for every cell, row-major.

    ``colors`` keeps the (rows, cols, 3) target colours the grid was matched
    against, so a cell can be re-matched if its tile fails at render time.
    """

    grid: list[list[str]]
    colors: np.ndarray

    @property
    def rows(self) -> int:
        return len(self.grid)

    @property
    def cols(self) -> int:
        return len(self.grid[0]) if self.grid else 0

    def __iter__(self) -> Iterator[str]:
        for row in self.grid:
            yield from row


def find_best(target: Color, candidates: Sequence[TileRecord]) -> TileRecord:
    """Linear scan for the closest tile; the earliest candidate wins ties.

    Raises:
        NoTilesError: *candidates* is empty.
    """
    if not candidates:
        msg = "no valid tiles available"
        raise NoTilesError(msg)

    best = candidates[0]
    best_distance = distance_squared(target, best.color)
    for candidate in candidates[1:]:
        d = distance_squared(target, candidate.color)
        if d < best_distance:
            best_distance = d
            best = candidate
    return best


def assign_tiles(
    colors: np.ndarray,
    corpus: TileCorpus,
    allow_reuse: bool = True,
    chunk_size: int = 512,
) -> TileAssignment:
    """Match every cell colour to a tile, scanning cells row-major.

    Gives the same answer as calling :func:`find_best` per cell. With
    ``allow_reuse=False`` tiles already placed are skipped; once every tile
    has been placed the whole corpus is eligible again, so duplicates
    reappear instead of the run failing.

    Args:
        colors:      (rows, cols, 3) uint8 target colours.
        corpus:      Tile corpus; corrupted paths are never chosen.
        allow_reuse: Reuse policy.
        chunk_size:  Cells per cost-matrix batch.

    Raises:
        NoTilesError: the corpus has no usable tile.
    """
    candidates = corpus.candidates()
    if not candidates:
        msg = "no valid tiles available"
        raise NoTilesError(msg)

    rows, cols = colors.shape[:2]
    palette = np.array([c.color for c in candidates], dtype=np.uint8)
    flat = colors.reshape(-1, 3)

    logger.info(
        "Matching %dx%d cells against %d tiles (reuse=%s) ...",
        cols, rows, len(candidates), allow_reuse,
    )
    t0 = time.perf_counter()

    chosen = np.empty(len(flat), dtype=np.intp)
    used = np.zeros(len(candidates), dtype=bool)
    exhausted_at: int | None = None

    for start in range(0, len(flat), chunk_size):
        cost = compute_cost_matrix(flat[start:start + chunk_size], palette)
        if allow_reuse:
            chosen[start:start + len(cost)] = np.argmin(cost, axis=1)
            continue
        for offset, row in enumerate(cost):
            if used.all():
                if exhausted_at is None:
                    exhausted_at = start + offset
                idx = int(np.argmin(row))
            else:
                idx = int(np.argmin(np.where(used, np.inf, row)))
            used[idx] = True
            chosen[start + offset] = idx

    if exhausted_at is not None:
        logger.debug(
            "All %d tiles used by cell %d; reusing tiles for the rest",
            len(candidates), exhausted_at,
        )
    logger.info("Assignment ready  (%.1f s)", time.perf_counter() - t0)

    grid = [
        [candidates[i].path for i in row]
        for row in chosen.reshape(rows, cols)
    ]
    return TileAssignment(grid=grid, colors=np.asarray(colors, dtype=np.uint8))
