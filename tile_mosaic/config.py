"""Centralised configuration via a frozen dataclass."""

from __future__ import annotations

from dataclasses import dataclass, field

from tile_mosaic.errors import ConfigError

DEFAULT_GRID_WIDTH = 120
DEFAULT_TILE_SIZE = 64


@dataclass(frozen=True)
class MosaicConfig:
    """All tuneable parameters for a mosaic or zoom run.

    Attributes:
        grid_width:      Tiles per row (wins over ``output_width``).
        grid_height:     Tiles per column (wins over ``output_height``).
        output_width:    Target output width in pixels, divided by tile size.
        output_height:   Target output height in pixels, divided by tile size.
        tile_size:       Edge of each rendered tile; also the colour analysis size.
        allow_reuse:     Let one tile fill many cells. ``False`` is best-effort.
        cache_name:      Colour cache file written inside the tiles directory.
        known_bad_paths: Tiles skipped outright, as if already corrupted.
        decode_retries:  Extra attempts for transient decode failures.
        retry_delay:     Seconds to wait between decode attempts.
        progress_every:  Log compositing progress every n rows.
        zoom_factor:     Per-step camera shrink fraction, strictly in (0, 1).
        zoom_steps:      Zoom frames rendered per iteration.
        max_iterations:  Stop after this many iterations (None = forever).
        iteration_pause: Seconds to sleep between zoom iterations.
        frame_digits:    Minimum zero padding of frame numbers.
    """

    # Grid
    grid_width: int | None = None
    grid_height: int | None = None
    output_width: int | None = None
    output_height: int | None = None
    tile_size: int = DEFAULT_TILE_SIZE

    # Matching
    allow_reuse: bool = True

    # Tile index
    cache_name: str = "tiles.csv"
    known_bad_paths: frozenset[str] = field(default_factory=frozenset)
    decode_retries: int = 2
    retry_delay: float = 1.0

    # Output
    progress_every: int = 10

    # Zoom sequence
    zoom_factor: float = 0.9
    zoom_steps: int = 10
    max_iterations: int | None = None
    iteration_pause: float = 1.0
    frame_digits: int = 4

    SUPPORTED_EXTENSIONS: frozenset[str] = frozenset(
        {".jpg", ".jpeg", ".png", ".gif", ".bmp", ".webp"}
    )

    def __post_init__(self) -> None:
        for name in ("grid_width", "grid_height", "output_width", "output_height"):
            value = getattr(self, name)
            if value is not None and value < 1:
                msg = f"{name} must be a positive integer, got {value}"
                raise ConfigError(msg)
        if self.tile_size < 1:
            msg = f"tile_size must be a positive integer, got {self.tile_size}"
            raise ConfigError(msg)
        if not 0.0 < self.zoom_factor < 1.0:
            msg = f"zoom_factor must lie strictly between 0 and 1, got {self.zoom_factor}"
            raise ConfigError(msg)
        if self.zoom_steps < 0:
            msg = f"zoom_steps cannot be negative, got {self.zoom_steps}"
            raise ConfigError(msg)
        if self.max_iterations is not None and self.max_iterations < 1:
            msg = f"max_iterations must be at least 1, got {self.max_iterations}"
            raise ConfigError(msg)
        if self.decode_retries < 0:
            msg = f"decode_retries cannot be negative, got {self.decode_retries}"
            raise ConfigError(msg)
        if self.retry_delay < 0 or self.iteration_pause < 0:
            msg = "retry_delay and iteration_pause cannot be negative"
            raise ConfigError(msg)
        if self.progress_every < 1 or self.frame_digits < 1:
            msg = "progress_every and frame_digits must be at least 1"
            raise ConfigError(msg)
        # Accept any iterable of paths at the boundary, store a frozenset.
        object.__setattr__(
            self, "known_bad_paths", frozenset(str(p) for p in self.known_bad_paths),
        )
