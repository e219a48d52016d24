"""Recursive discovery of candidate tile images."""

from __future__ import annotations

import logging
import stat
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass
class ScanResult:
    """Image paths found under a root, plus directories that could not be read."""

    paths: list[Path] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def _warn(msg: str, warnings: list[str] | None) -> None:
    logger.warning(msg)
    if warnings is not None:
        warnings.append(msg)


def iter_image_files(
    root: str | Path,
    extensions: Iterable[str],
    warnings: list[str] | None = None,
) -> Iterator[Path]:
    """Lazily yield files under *root* whose suffix is in *extensions*.

    Traversal is depth-first without recursion: entries of a directory are
    visited in name order, descending into a subdirectory as soon as it is
    reached. A directory that cannot be listed, or whose entries cannot be
    inspected, is abandoned; its message is logged and appended to
    *warnings* when given.
    """
    suffixes = {ext.lower() for ext in extensions}
    stack: list[tuple[Path, Iterator[Path]]] = []

    def descend(directory: Path) -> None:
        try:
            stack.append((directory, iter(sorted(directory.iterdir()))))
        except OSError as exc:
            _warn(f"Could not read directory {directory}: {exc}", warnings)

    descend(Path(root))
    while stack:
        current, entries = stack[-1]
        entry = next(entries, None)
        if entry is None:
            stack.pop()
            continue
        try:
            is_dir = stat.S_ISDIR(entry.stat().st_mode)
        except FileNotFoundError:
            # Dangling symlink.
            continue
        except OSError as exc:
            stack.pop()
            _warn(f"Could not read directory {current}: {exc}", warnings)
            continue

        if is_dir:
            descend(entry)
        elif entry.suffix.lower() in suffixes:
            yield entry


def scan_directory(root: str | Path, extensions: Iterable[str]) -> ScanResult:
    result = ScanResult()
    result.paths.extend(iter_image_files(root, extensions, result.warnings))
    return result
