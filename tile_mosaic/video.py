"""Assemble numbered frames into an H.264 video with an external ffmpeg."""

from __future__ import annotations

import logging
import shutil
import subprocess
import tempfile
import time
from pathlib import Path

from tile_mosaic.errors import VideoError

logger = logging.getLogger(__name__)

FRAME_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".bmp", ".tiff", ".gif"})
SEQUENCE_PATTERN = "frame_%06d.png"


def collect_frames(directory: str | Path) -> list[Path]:
    """Image files directly inside *directory*, sorted by name."""
    directory = Path(directory)
    return sorted(
        f for f in directory.iterdir()
        if f.is_file() and f.suffix.lower() in FRAME_EXTENSIONS
    )


def build_ffmpeg_command(
    pattern: str | Path,
    fps: float,
    output: str | Path,
    ffmpeg: str = "ffmpeg",
) -> list[str]:
    return [
        ffmpeg, "-y",
        "-framerate", f"{fps:g}",
        "-i", str(pattern),
        "-c:v", "libx264",
        "-pix_fmt", "yuv420p",
        str(output),
    ]


def assemble_video(
    directory: str | Path,
    fps: float,
    output: str | Path,
    ffmpeg: str = "ffmpeg",
) -> Path:
    """Encode every frame in *directory*, in name order, into *output*.

    Frames are copied to a temporary directory under sequential names so
    gaps or mixed naming in the source directory do not matter.

    Raises:
        VideoError: no frames, a non-positive fps, or ffmpeg failing.
    """
    directory = Path(directory)
    output = Path(output)
    if fps <= 0:
        msg = f"fps must be positive, got {fps}"
        raise VideoError(msg)
    if not directory.is_dir():
        msg = f"{directory} is not a directory"
        raise VideoError(msg)

    frames = collect_frames(directory)
    if not frames:
        msg = f"No image files found in {directory}"
        raise VideoError(msg)
    logger.info("Found %d frames in %s", len(frames), directory)

    with tempfile.TemporaryDirectory(prefix="tile_mosaic_frames_") as tmp:
        tmp_dir = Path(tmp)
        for index, frame in enumerate(frames, 1):
            shutil.copyfile(frame, tmp_dir / (SEQUENCE_PATTERN % index))

        cmd = build_ffmpeg_command(tmp_dir / SEQUENCE_PATTERN, fps, output.absolute(), ffmpeg)
        logger.info("Running: %s", " ".join(cmd))
        t0 = time.perf_counter()
        try:
            subprocess.run(cmd, check=True, capture_output=True, text=True)
        except FileNotFoundError as exc:
            msg = f"'{ffmpeg}' not found; install ffmpeg and make sure it is on PATH"
            raise VideoError(msg) from exc
        except subprocess.CalledProcessError as exc:
            stderr = (exc.stderr or "")[-500:]
            msg = f"ffmpeg exited with status {exc.returncode}: {stderr}"
            raise VideoError(msg) from exc

    logger.info("Video written to %s  (%.1f s)", output, time.perf_counter() - t0)
    return output
