"""Rich command-line interface powered by Typer."""

from __future__ import annotations

import logging
import time
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel

from tile_mosaic.config import MosaicConfig
from tile_mosaic.errors import MosaicError
from tile_mosaic.mosaic import MosaicGenerator
from tile_mosaic.video import assemble_video
from tile_mosaic.zoom import ZoomSequence

app = typer.Typer(
    name="tile-mosaic",
    help="Build photomosaics and infinite-zoom frame sequences from a folder of tiles.",
    add_completion=False,
    rich_markup_mode="rich",
)
console = Console()
err_console = Console(stderr=True)


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False, markup=False)],
    )


def _fail(message: str) -> typer.Exit:
    err_console.print(f"[bold red]Error:[/bold red] {message}")
    return typer.Exit(1)


# Defaults come from MosaicConfig - single source of truth
_DEFAULTS = MosaicConfig()


# -- create command ----------------------------------------------------

@app.command()
def create(
    input_image: Path = typer.Argument(..., help="Source photograph"),
    tiles_dir: Path = typer.Argument(..., help="Folder of tile images (searched recursively)"),
    output: Path = typer.Argument(..., help="Output PNG (frame numbers are added in zoom mode)"),
    grid_width: int | None = typer.Option(
        None, "--width", "-w", help="Tiles per row (default 120)",
    ),
    grid_height: int | None = typer.Option(
        None, "--height", help="Tiles per column (default: from aspect ratio)",
    ),
    output_width: int | None = typer.Option(
        None, "--output-width", help="Target output width in pixels",
    ),
    output_height: int | None = typer.Option(
        None, "--output-height", help="Target output height in pixels",
    ),
    tile_size: int = typer.Option(
        _DEFAULTS.tile_size, "--tile-size", "-t", help="Tile edge in pixels",
    ),
    allow_reuse: bool = typer.Option(
        _DEFAULTS.allow_reuse, "--reuse/--no-reuse",
        help="Allow a tile in several cells (--no-reuse is best-effort)",
    ),
    zoom: bool = typer.Option(False, "--zoom/--no-zoom", help="Render an infinite-zoom sequence"),
    zoom_factor: float = typer.Option(
        _DEFAULTS.zoom_factor, "--zoom-factor", help="Per-step shrink fraction in (0, 1)",
    ),
    zoom_steps: int = typer.Option(
        _DEFAULTS.zoom_steps, "--zoom-steps", help="Zoom frames per iteration",
    ),
    max_iterations: int | None = typer.Option(
        None, "--max-iterations", help="Stop after n iterations (default: run forever)",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Build a mosaic of INPUT_IMAGE from TILES_DIR and write it to OUTPUT."""
    _setup_logging(verbose)

    if not input_image.is_file():
        raise _fail(f"Input image {input_image} does not exist")
    if not tiles_dir.is_dir():
        raise _fail(f"Tiles directory {tiles_dir} does not exist")

    try:
        cfg = MosaicConfig(
            grid_width=grid_width,
            grid_height=grid_height,
            output_width=output_width,
            output_height=output_height,
            tile_size=tile_size,
            allow_reuse=allow_reuse,
            zoom_factor=zoom_factor,
            zoom_steps=zoom_steps,
            max_iterations=max_iterations,
        )
    except MosaicError as exc:
        raise _fail(str(exc)) from exc

    t0 = time.perf_counter()
    try:
        if zoom:
            console.print(Panel.fit(
                f"[bold]INFINITE ZOOM[/bold]\n"
                f"Tile size: {cfg.tile_size}  |  Zoom factor: {cfg.zoom_factor}\n"
                f"Steps: {cfg.zoom_steps}  |  Iterations: {cfg.max_iterations or 'unbounded'}",
                border_style="cyan",
            ))
            frames = ZoomSequence(input_image, tiles_dir, output, cfg).run()
            summary = f"{frames} frames next to [bold]{output}[/bold]"
        else:
            result, _ = MosaicGenerator(tiles_dir, cfg).generate(input_image, output)
            summary = (
                f"Saved to [bold]{output}[/bold]\n"
                f"{result.width}x{result.height} px  |  {result.cells_used} cells\n"
                f"{result.corpus_size} tiles  |  {result.corrupted_count} corrupted"
            )
    except KeyboardInterrupt as exc:
        raise _fail("Interrupted") from exc
    except (MosaicError, OSError) as exc:
        raise _fail(str(exc)) from exc

    console.print(Panel.fit(
        f"[bold green]DONE[/bold green] in {time.perf_counter() - t0:.1f}s\n{summary}",
        border_style="green",
    ))


# -- video command -----------------------------------------------------

@app.command()
def video(
    frames_dir: Path = typer.Argument(..., help="Folder of numbered frames"),
    fps: float = typer.Argument(..., help="Frames per second"),
    output: Path = typer.Option(Path("output.mp4"), "--output", "-o", help="Video file"),
    ffmpeg: str = typer.Option("ffmpeg", "--ffmpeg", help="ffmpeg executable"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Encode the frames in FRAMES_DIR into an MP4."""
    _setup_logging(verbose)
    try:
        path = assemble_video(frames_dir, fps, output, ffmpeg=ffmpeg)
    except (MosaicError, OSError) as exc:
        raise _fail(str(exc)) from exc

    size_mb = path.stat().st_size / 1024 / 1024 if path.exists() else 0.0
    console.print(f"[green]✓[/green] Video saved to {path}  [dim]{size_mb:.2f} MB[/dim]")


if __name__ == "__main__":
    app()
