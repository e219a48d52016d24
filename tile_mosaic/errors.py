"""Exception hierarchy shared by every stage of the pipeline."""

from __future__ import annotations


class MosaicError(Exception):
    """Base class for errors that abort a mosaic run."""


class ConfigError(MosaicError, ValueError):
    """An option value was rejected when building a :class:`MosaicConfig`."""


class NoTilesError(MosaicError):
    """No usable tile is left to match against."""


class TileDecodeError(MosaicError):
    """A tile image could not be decoded or resized.

    ``transient`` is decided once, at the codec boundary, so callers can
    retry on the kind of failure instead of on its message.
    """

    def __init__(self, path: str, reason: str, *, transient: bool = False) -> None:
        super().__init__(f"Could not decode tile {path}: {reason}")
        self.path = path
        self.reason = reason
        self.transient = transient


class VideoError(MosaicError):
    """Frame-to-video assembly failed."""
