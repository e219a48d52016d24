"""Tests for the infinite-zoom sequence controller."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from tile_mosaic.config import MosaicConfig
from tile_mosaic.errors import NoTilesError
from tile_mosaic.mosaic import MosaicGenerator
from tile_mosaic.zoom import ZoomSequence, center_crop_box, frame_path, zoom_tile_size


class TestZoomMath:
    def test_tile_growth(self) -> None:
        assert zoom_tile_size(40, 0.9, 1) == 44
        assert zoom_tile_size(40, 0.9, 2) == 49

    def test_growth_is_monotonic(self) -> None:
        sizes = [zoom_tile_size(10, 0.8, k) for k in range(0, 8)]
        assert sizes[0] == 10
        assert sizes == sorted(sizes)

    def test_center_crop(self) -> None:
        assert center_crop_box(49, 49, 40, 40) == (5, 5, 45, 45)
        assert center_crop_box(44, 30, 40, 20) == (2, 5, 42, 25)

    def test_crop_never_leaves_frame(self) -> None:
        assert center_crop_box(10, 10, 20, 4) == (0, 3, 10, 7)

    def test_frame_path(self, tmp_path: Path) -> None:
        assert frame_path(tmp_path / "zoom.png", 1) == tmp_path / "zoom_0001.png"
        assert frame_path("out/zoom.png", 12345).name == "zoom_12345.png"
        assert frame_path("zoom.png", 7, digits=6).name == "zoom_000007.png"


class TestZoomSequence:
    def _cfg(self, **overrides) -> MosaicConfig:
        params = dict(
            grid_width=2,
            grid_height=2,
            tile_size=4,
            zoom_factor=0.8,
            zoom_steps=4,
            max_iterations=2,
            retry_delay=0.0,
            iteration_pause=0.5,
        )
        params.update(overrides)
        return MosaicConfig(**params)

    def test_frames_numbered_across_iterations(
        self, source_image: Path, tiles_dir: Path, tmp_path: Path, sleeps: list[float],
    ) -> None:
        out = tmp_path / "frames" / "zoom.png"
        seq = ZoomSequence(source_image, tiles_dir, out, self._cfg(), sleep=sleeps.append)

        assert seq.run() == 10
        names = [p.name for p in seq.frames]
        assert names[0] == "zoom_0001.png"
        assert names[4] == "zoom_0005.png"
        assert names[5] == "zoom_0006.png"
        assert sorted(p.name for p in out.parent.iterdir()) == names
        assert seq.iterations_done == 2
        # One pause between the two iterations, none after the last.
        assert sleeps == [0.5]

    def test_frames_keep_base_size(
        self, source_image: Path, tiles_dir: Path, tmp_path: Path, sleeps: list[float],
    ) -> None:
        seq = ZoomSequence(
            source_image, tiles_dir, tmp_path / "z.png",
            self._cfg(max_iterations=1), sleep=sleeps.append,
        )
        seq.run()
        for path in seq.frames:
            with Image.open(path) as img:
                assert img.size == (8, 8)

    def test_zoomed_frame_is_center_crop(
        self, source_image: Path, tiles_dir: Path, tmp_path: Path, sleeps: list[float],
    ) -> None:
        cfg = self._cfg(max_iterations=1, zoom_steps=1, zoom_factor=0.5)
        seq = ZoomSequence(source_image, tiles_dir, tmp_path / "z.png", cfg, sleep=sleeps.append)
        seq.run()

        gen = MosaicGenerator(tiles_dir, cfg)
        full = gen.render(gen.plan(source_image), 8)
        with Image.open(seq.frames[1]) as img:
            zoomed = np.array(img.convert("RGB"))
        np.testing.assert_array_equal(zoomed, full[4:12, 4:12])

    def test_next_iteration_uses_last_frame(
        self,
        source_image: Path,
        tiles_dir: Path,
        tmp_path: Path,
        sleeps: list[float],
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        sources: list[Path] = []
        original = MosaicGenerator.plan

        def plan(self, source):
            sources.append(Path(source))
            return original(self, source)

        monkeypatch.setattr(MosaicGenerator, "plan", plan)
        out = tmp_path / "z.png"
        ZoomSequence(source_image, tiles_dir, out, self._cfg(zoom_steps=2), sleep=sleeps.append).run()

        assert sources == [source_image, tmp_path / "z_0003.png"]

    def test_no_zoom_steps(
        self, source_image: Path, tiles_dir: Path, tmp_path: Path, sleeps: list[float],
    ) -> None:
        cfg = self._cfg(zoom_steps=0, max_iterations=3)
        seq = ZoomSequence(source_image, tiles_dir, tmp_path / "z.png", cfg, sleep=sleeps.append)
        assert seq.run() == 3

    def test_error_aborts_sequence(
        self,
        source_image: Path,
        tiles_dir: Path,
        tmp_path: Path,
        sleeps: list[float],
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        calls: list[int] = []
        original = MosaicGenerator.render

        def render(self, assignment, tile_size):
            calls.append(tile_size)
            if len(calls) == 3:
                raise NoTilesError("no valid tiles available")
            return original(self, assignment, tile_size)

        monkeypatch.setattr(MosaicGenerator, "render", render)
        seq = ZoomSequence(source_image, tiles_dir, tmp_path / "z.png", self._cfg(), sleep=sleeps.append)

        with pytest.raises(NoTilesError):
            seq.run()
        assert seq.frame_count == 2
        assert sleeps == []
