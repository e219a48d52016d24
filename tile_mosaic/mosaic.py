"""One mosaic request: index tiles, plan the grid, match, render, save."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

import numpy as np

from tile_mosaic.compositor import render_assignment
from tile_mosaic.config import MosaicConfig
from tile_mosaic.grid import compute_grid_size, extract_target_colors
from tile_mosaic.image_io import load_rgb, save_png
from tile_mosaic.matcher import TileAssignment, assign_tiles
from tile_mosaic.tile_index import TileCorpus, build_corpus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MosaicResult:
    """Summary of a finished mosaic."""

    width: int
    height: int
    cells_used: int
    corpus_size: int
    corrupted_count: int


class MosaicGenerator:
    """Builds mosaics from one tiles directory.

    The generator owns a single :class:`TileCorpus`. Consecutive requests
    reuse it, so colours computed once are not computed again and tiles that
    broke stay excluded for the life of the generator.
    """

    def __init__(
        self,
        tiles_dir: str | Path,
        cfg: MosaicConfig | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.tiles_dir = Path(tiles_dir)
        self.cfg = cfg or MosaicConfig()
        self.corpus: TileCorpus | None = None
        self._sleep = sleep

    def load_corpus(self) -> TileCorpus:
        self.corpus = build_corpus(self.tiles_dir, self.cfg, self.corpus, self._sleep)
        return self.corpus

    def plan(self, source_path: str | Path) -> TileAssignment:
        """Compute the tile assignment for *source_path*."""
        corpus = self.load_corpus()

        logger.info("Analyzing input image colors ...")
        img = load_rgb(source_path)
        cfg = self.cfg
        cols, rows = compute_grid_size(
            img.width, img.height, cfg.tile_size,
            grid_width=cfg.grid_width,
            grid_height=cfg.grid_height,
            output_width=cfg.output_width,
            output_height=cfg.output_height,
        )
        colors = extract_target_colors(img, cols, rows)
        return assign_tiles(colors, corpus, allow_reuse=cfg.allow_reuse)

    def render(self, assignment: TileAssignment, tile_size: int) -> np.ndarray:
        if self.corpus is None:
            self.load_corpus()
        return render_assignment(
            assignment,
            self.corpus,
            tile_size,
            retries=self.cfg.decode_retries,
            retry_delay=self.cfg.retry_delay,
            progress_every=self.cfg.progress_every,
            sleep=self._sleep,
        )

    def summarize(self, frame: np.ndarray, assignment: TileAssignment) -> MosaicResult:
        corpus = self.corpus or TileCorpus()
        h, w = frame.shape[:2]
        return MosaicResult(
            width=w,
            height=h,
            cells_used=assignment.rows * assignment.cols,
            corpus_size=len(corpus.candidates()),
            corrupted_count=len(corpus.corrupted),
        )

    def generate(
        self,
        source_path: str | Path,
        output_path: str | Path,
    ) -> tuple[MosaicResult, TileAssignment]:
        """Write the mosaic of *source_path* to *output_path* as PNG."""
        t0 = time.perf_counter()
        assignment = self.plan(source_path)
        frame = self.render(assignment, self.cfg.tile_size)
        save_png(frame, output_path)

        result = self.summarize(frame, assignment)
        logger.info(
            "Mosaic saved to %s in %.0f s (%dx%d px, %d cells)",
            output_path, time.perf_counter() - t0,
            result.width, result.height, result.cells_used,
        )
        return result, assignment


def generate_mosaic(
    source_path: str | Path,
    tiles_dir: str | Path,
    output_path: str | Path,
    cfg: MosaicConfig | None = None,
) -> MosaicResult:
    """Convenience wrapper for a single mosaic."""
    result, _ = MosaicGenerator(tiles_dir, cfg).generate(source_path, output_path)
    return result
