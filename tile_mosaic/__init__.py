"""
Tile Mosaic
===========

Rebuild a photograph out of a folder of smaller images. Every grid cell
gets the tile whose average colour is nearest in RGB.

- **Tile index** with a persistent CSV colour cache
- **Best-effort no-reuse** matching
- **Infinite zoom** sequences that re-mosaic their own last frame
"""

__version__ = "1.0.0"

from tile_mosaic.color_utils import distance_squared
from tile_mosaic.compositor import render_assignment
from tile_mosaic.config import MosaicConfig
from tile_mosaic.errors import (
    ConfigError,
    MosaicError,
    NoTilesError,
    TileDecodeError,
    VideoError,
)
from tile_mosaic.grid import compute_grid_size, extract_target_colors
from tile_mosaic.matcher import TileAssignment, assign_tiles, find_best
from tile_mosaic.mosaic import MosaicGenerator, MosaicResult, generate_mosaic
from tile_mosaic.tile_index import (
    TileCorpus,
    TileRecord,
    build_corpus,
    load_cache,
    save_cache,
)
from tile_mosaic.zoom import ZoomSequence

__all__ = [
    "ConfigError",
    "MosaicConfig",
    "MosaicError",
    "MosaicGenerator",
    "MosaicResult",
    "NoTilesError",
    "TileAssignment",
    "TileCorpus",
    "TileDecodeError",
    "TileRecord",
    "VideoError",
    "ZoomSequence",
    "assign_tiles",
    "build_corpus",
    "compute_grid_size",
    "distance_squared",
    "extract_target_colors",
    "find_best",
    "generate_mosaic",
    "load_cache",
    "render_assignment",
    "save_cache",
]
