"""Tile colour index: average colours, the CSV cache and the corrupted set.

A :class:`TileCorpus` is the only state that survives between operations.
It doubles as the in-process memo of computed colours and as the record of
paths that failed to decode, so several independent runs can hold several
independent corpora.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path

import numpy as np

from tile_mosaic.config import MosaicConfig
from tile_mosaic.errors import NoTilesError, TileDecodeError
from tile_mosaic.image_io import load_tile
from tile_mosaic.scanner import scan_directory

logger = logging.getLogger(__name__)

CACHE_HEADER = "path,r,g,b"
LOG_EVERY = 50


@dataclass(frozen=True)
class TileRecord:
    """Average colour of one tile image."""

    path: str
    r: int
    g: int
    b: int

    @property
    def color(self) -> tuple[int, int, int]:
        return (self.r, self.g, self.b)


@dataclass
class TileCorpus:
    """Ordered tile records plus the set of paths known to be broken."""

    records: list[TileRecord] = field(default_factory=list)
    corrupted: set[str] = field(default_factory=set)
    _lookup: dict[str, TileRecord] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        records, self.records = self.records, []
        for record in records:
            self.add(record)

    def __len__(self) -> int:
        return len(self.records)

    def __contains__(self, path: object) -> bool:
        return str(path) in self._lookup

    def __iter__(self) -> Iterator[TileRecord]:
        return iter(self.records)

    def get(self, path: str | Path) -> TileRecord | None:
        return self._lookup.get(str(path))

    def add(self, record: TileRecord) -> bool:
        """Add *record* unless its path is known or corrupted."""
        if record.path in self._lookup or record.path in self.corrupted:
            return False
        self.records.append(record)
        self._lookup[record.path] = record
        return True

    def is_corrupted(self, path: str | Path) -> bool:
        return str(path) in self.corrupted

    def mark_corrupted(self, path: str | Path) -> None:
        self.corrupted.add(str(path))

    def candidates(self) -> list[TileRecord]:
        """Records eligible for matching, in corpus order."""
        if not self.corrupted:
            return list(self.records)
        return [r for r in self.records if r.path not in self.corrupted]


# -- Cache file --------------------------------------------------------


def load_cache(path: str | Path) -> TileCorpus | None:
    """Read a cache file written by :func:`save_cache`.

    A missing, unreadable or empty file means "no cache" and returns
    ``None``. The first line is always taken as the header and skipped,
    whatever it says. Rows that do not carry four fields with integer
    channels are dropped.
    """
    try:
        text = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return None

    lines = text.strip().splitlines()
    if not lines:
        return None

    corpus = TileCorpus()
    for line in lines[1:]:
        # Split from the right so commas inside the path survive.
        fields = [f.strip() for f in line.rsplit(",", 3)]
        if len(fields) != 4 or not all(fields):
            continue
        tile_path, r, g, b = fields
        try:
            record = TileRecord(tile_path, int(r), int(g), int(b))
        except ValueError:
            continue
        corpus.add(record)
    return corpus


def save_cache(corpus: TileCorpus, path: str | Path) -> None:
    """Rewrite the cache with every usable record. Write errors propagate."""
    lines = [CACHE_HEADER]
    lines.extend(f"{t.path},{t.r},{t.g},{t.b}" for t in corpus.candidates())
    Path(path).write_text("\n".join(lines), encoding="utf-8")
    logger.info("Tile cache saved to %s", path)


# -- Colour analysis ---------------------------------------------------


def average_color(pixels: np.ndarray) -> tuple[int, int, int]:
    """Per-channel mean of an (H, W, 3) array, rounded half up."""
    mean = pixels.reshape(-1, 3).astype(np.float64).mean(axis=0)
    r, g, b = (int(v) for v in np.floor(mean + 0.5))
    return r, g, b


def decode_with_retry(
    path: str | Path,
    size: int,
    retries: int = 2,
    retry_delay: float = 1.0,
    sleep: Callable[[float], None] = time.sleep,
) -> np.ndarray:
    """:func:`load_tile` with a fixed backoff for transient failures.

    Raises:
        TileDecodeError: permanent failure, or transient retries exhausted.
    """
    attempt = 0
    while True:
        try:
            return load_tile(path, size)
        except TileDecodeError as exc:
            if not exc.transient or attempt >= retries:
                raise
            attempt += 1
            logger.warning(
                "Transient error on %s (%s), retry %d/%d in %.1f s",
                path, exc.reason, attempt, retries, retry_delay,
            )
            sleep(retry_delay)


def compute_color(
    path: str | Path,
    corpus: TileCorpus,
    tile_size: int,
    retries: int = 2,
    retry_delay: float = 1.0,
    sleep: Callable[[float], None] = time.sleep,
) -> TileRecord | None:
    """Average colour of one tile, memoised through *corpus*.

    A failure marks the path corrupted and returns ``None``; the path is
    never decoded again for the lifetime of *corpus*.
    """
    key = str(path)
    cached = corpus.get(key)
    if cached is not None:
        return cached
    if corpus.is_corrupted(key):
        return None

    try:
        pixels = decode_with_retry(key, tile_size, retries, retry_delay, sleep)
    except TileDecodeError as exc:
        logger.warning("Skipping tile %s: %s", key, exc.reason)
        corpus.mark_corrupted(key)
        return None

    record = TileRecord(key, *average_color(pixels))
    corpus.add(record)
    return record


# -- Corpus building ---------------------------------------------------


def reconcile(
    corpus: TileCorpus,
    paths: Iterable[str | Path],
    cache_path: str | Path,
    tile_size: int,
    retries: int = 2,
    retry_delay: float = 1.0,
    sleep: Callable[[float], None] = time.sleep,
) -> TileCorpus:
    """Analyse the paths the corpus has not seen and refresh the cache.

    The cache is rewritten only when at least one new path was processed,
    even if every one of them turned out to be corrupted.
    """
    new_paths = [
        str(p) for p in paths
        if str(p) not in corpus and not corpus.is_corrupted(p)
    ]
    if not new_paths:
        logger.info("No new tiles to process")
        return corpus

    logger.info("Processing %d new tile images ...", len(new_paths))
    for processed, tile_path in enumerate(new_paths, 1):
        compute_color(tile_path, corpus, tile_size, retries, retry_delay, sleep)
        if processed % LOG_EVERY == 0:
            logger.info("Processed %d/%d new tiles", processed, len(new_paths))

    save_cache(corpus, cache_path)
    return corpus


def build_corpus(
    tiles_dir: str | Path,
    cfg: MosaicConfig,
    corpus: TileCorpus | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> TileCorpus:
    """Load, update and validate the corpus for *tiles_dir*.

    Args:
        tiles_dir: Directory scanned recursively for tile images.
        cfg:       Run configuration (tile size, cache name, retry policy).
        corpus:    Corpus from an earlier request in this process, whose
                   memo and corrupted set are carried over.
        sleep:     Backoff function, replaceable in tests.

    Raises:
        NoTilesError: no images and no cache, or nothing usable afterwards.
    """
    tiles_dir = Path(tiles_dir)
    cache_path = tiles_dir / cfg.cache_name

    if corpus is None:
        logger.info("Checking for tile cache ...")
        corpus = load_cache(cache_path)
        if corpus is not None:
            logger.info("Loaded %d tiles from cache", len(corpus))
    had_cache = corpus is not None
    if corpus is None:
        corpus = TileCorpus()
    corpus.corrupted.update(cfg.known_bad_paths)

    logger.info("Scanning for tile images in %s ...", tiles_dir)
    scan = scan_directory(tiles_dir, cfg.SUPPORTED_EXTENSIONS)
    if not scan.paths and not had_cache:
        msg = f"No image files found in {tiles_dir}"
        raise NoTilesError(msg)

    reconcile(
        corpus, scan.paths, cache_path, cfg.tile_size,
        cfg.decode_retries, cfg.retry_delay, sleep,
    )

    usable = len(corpus.candidates())
    if usable == 0:
        msg = "No valid tile images could be processed"
        raise NoTilesError(msg)
    logger.info("%d usable tiles (%d corrupted)", usable, len(corpus.corrupted))
    return corpus
