"""Image loading, resizing and lossless saving."""

from __future__ import annotations

from pathlib import Path

import numpy as np
from PIL import Image

from tile_mosaic.errors import TileDecodeError

# Pillow reports cut-off files through the message text only.
TRANSIENT_MARKERS = ("truncated", "premature end")


def is_transient(exc: BaseException) -> bool:
    """Whether a decode failure looks like a partially written file."""
    text = str(exc).lower()
    return isinstance(exc, OSError) and any(m in text for m in TRANSIENT_MARKERS)


def load_rgb(path: str | Path) -> Image.Image:
    """Open an image and force it into 3-channel RGB.

    Errors propagate unchanged: a broken *source* image is fatal.
    """
    with Image.open(path) as img:
        return img.convert("RGB")


def resize_to_array(
    img: Image.Image,
    width: int,
    height: int,
    resample: int = Image.LANCZOS,
) -> np.ndarray:
    """Resize to exactly ``width x height``.

    Returns:
        (height, width, 3) uint8 array.
    """
    if img.size != (width, height):
        img = img.resize((width, height), resample)
    return np.array(img, dtype=np.uint8)


def load_tile(path: str | Path, size: int) -> np.ndarray:
    """Decode a tile and resize it to a ``size x size`` RGB array.

    Raises:
        TileDecodeError: with ``transient`` set for truncation-style errors.
    """
    try:
        img = load_rgb(path)
        return resize_to_array(img, size, size)
    except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as exc:
        raise TileDecodeError(str(path), str(exc), transient=is_transient(exc)) from exc


def save_png(array: np.ndarray, path: str | Path) -> Path:
    """Encode an (H, W, 3) array losslessly as PNG, whatever the suffix."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.fromarray(array.astype(np.uint8)).save(path, format="PNG")
    return path


def crop_array(array: np.ndarray, box: tuple[int, int, int, int]) -> np.ndarray:
    """Crop an (H, W, 3) array to ``(left, top, right, bottom)``."""
    left, top, right, bottom = box
    return np.ascontiguousarray(array[top:bottom, left:right])
