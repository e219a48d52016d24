"""Infinite-zoom frame sequences.

One iteration renders a base mosaic, then re-renders the same tile
assignment ``zoom_steps`` times with growing tiles, each center-cropped back
to the base frame size. The last zoomed frame is the source of the next
iteration, which computes a fresh assignment from those pixels.
"""

from __future__ import annotations

import enum
import logging
import time
from collections.abc import Callable
from pathlib import Path

import numpy as np

from tile_mosaic.config import MosaicConfig
from tile_mosaic.grid import round_half_up
from tile_mosaic.image_io import crop_array, save_png
from tile_mosaic.mosaic import MosaicGenerator

logger = logging.getLogger(__name__)


class ZoomState(enum.Enum):
    START_ITERATION = "start_iteration"
    RENDER_BASE = "render_base"
    RENDER_ZOOM = "render_zoom"
    STOP = "stop"


def zoom_tile_size(base_tile_size: int, zoom_factor: float, step: int) -> int:
    """Tile size at 1-indexed zoom *step*: ``base * (1 / zoom_factor) ** step``."""
    return round_half_up(base_tile_size * (1 / zoom_factor) ** step)


def center_crop_box(
    full_width: int,
    full_height: int,
    target_width: int,
    target_height: int,
) -> tuple[int, int, int, int]:
    """``(left, top, right, bottom)`` of a centered crop kept inside the frame."""
    width = min(target_width, full_width)
    height = min(target_height, full_height)
    left = min(max(round_half_up((full_width - target_width) / 2), 0), full_width - width)
    top = min(max(round_half_up((full_height - target_height) / 2), 0), full_height - height)
    return left, top, left + width, top + height


def frame_path(output_path: str | Path, index: int, digits: int = 4) -> Path:
    """``out.png`` -> ``out_0007.png`` for frame 7."""
    output_path = Path(output_path)
    return output_path.with_name(f"{output_path.stem}_{index:0{digits}d}{output_path.suffix}")


class ZoomSequence:
    """Drives the iteration / zoom-step state machine.

    Frames are numbered by one counter shared by every iteration, starting
    at 1. Any exception stops the whole sequence.
    """

    def __init__(
        self,
        source_path: str | Path,
        tiles_dir: str | Path,
        output_path: str | Path,
        cfg: MosaicConfig | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.cfg = cfg or MosaicConfig()
        self.source_path = Path(source_path)
        self.output_path = Path(output_path)
        self.generator = MosaicGenerator(tiles_dir, self.cfg, sleep=sleep)
        self.frame_count = 0
        self.frames: list[Path] = []
        self._sleep = sleep

    @property
    def iterations_done(self) -> int:
        return self.frame_count // (self.cfg.zoom_steps + 1)

    def _write_frame(self, frame: np.ndarray) -> Path:
        self.frame_count += 1
        path = frame_path(self.output_path, self.frame_count, self.cfg.frame_digits)
        save_png(frame, path)
        self.frames.append(path)
        logger.info("Frame %d written to %s", self.frame_count, path)
        return path

    def _should_stop(self) -> bool:
        limit = self.cfg.max_iterations
        return limit is not None and self.iterations_done >= limit

    def run(self) -> int:
        """Render frames until ``max_iterations`` is reached. Returns the frame count."""
        cfg = self.cfg
        state = ZoomState.START_ITERATION
        source = self.source_path
        assignment = None
        target_size = (0, 0)
        step = 0

        while state is not ZoomState.STOP:
            if state is ZoomState.START_ITERATION:
                logger.info(
                    "Iteration %d from %s", self.iterations_done + 1, source,
                )
                assignment = self.generator.plan(source)
                state = ZoomState.RENDER_BASE

            elif state is ZoomState.RENDER_BASE:
                base = self.generator.render(assignment, cfg.tile_size)
                target_size = (base.shape[1], base.shape[0])
                source = self._write_frame(base)
                step = 0
                state = ZoomState.RENDER_ZOOM

            elif state is ZoomState.RENDER_ZOOM:
                if step < cfg.zoom_steps:
                    step += 1
                    tile_size = zoom_tile_size(cfg.tile_size, cfg.zoom_factor, step)
                    logger.info("Zoom step %d/%d at %d px tiles", step, cfg.zoom_steps, tile_size)
                    full = self.generator.render(assignment, tile_size)
                    box = center_crop_box(full.shape[1], full.shape[0], *target_size)
                    source = self._write_frame(crop_array(full, box))
                    continue

                assignment = None
                if self._should_stop():
                    state = ZoomState.STOP
                else:
                    self._sleep(cfg.iteration_pause)
                    state = ZoomState.START_ITERATION

        logger.info(
            "Zoom sequence finished: %d frames in %d iterations",
            self.frame_count, self.iterations_done,
        )
        return self.frame_count
