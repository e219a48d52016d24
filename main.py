#!/usr/bin/env python3
"""
main.py — Quick-start entry point.

    python main.py create photo.jpg ./tiles mosaic.png --width 150 --tile-size 24
    python main.py create photo.jpg ./tiles frames/zoom.png --zoom --max-iterations 3
    python main.py video frames/ 30 -o zoom.mp4

Or, once installed, the ``tile-mosaic`` command.
"""

from tile_mosaic.cli import app

if __name__ == "__main__":
    app()
