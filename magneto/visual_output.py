"""Image and movie output of spin lattices during a simulation."""

from __future__ import annotations

import abc
import logging
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence, Union

from PIL import Image

from magneto.lattice import get_dimensions_of_lattice

_log = logging.getLogger(__name__)

FFMPEG = "ffmpeg"

PathLike = Union[str, Path]
Grid = Sequence[Sequence[int]]


@dataclass
class ImageMode:
    """Where images go, the movie frame rate and the snapshot interval."""

    path: Path
    fps: int = 30
    intervals: int = 1

    def __post_init__(self) -> None:
        self.path = Path(self.path)


def _to_255(value: int) -> int:
    """Map a spin in {-1, 1} to 0 or 255."""
    return ((value + 1) // 2 * 255) & 0xFF


def _add_grid_to_buffer(buffer: list[list[int]], grid: Grid) -> None:
    for buf_row, grid_row in zip(buffer, grid):
        buf_row[:len(grid_row)] = [b + _to_255(v) for b, v in zip(buf_row, grid_row)]


def _png_buffer_from_lattice(grid: Grid) -> list[list[int]]:
    return [[_to_255(v) for v in row] for row in grid]


def write_png(grid_buffer: Grid, path: PathLike) -> None:
    """Write a lattice of values in [0,255] as a greyscale PNG."""
    lx, ly = get_dimensions_of_lattice(grid_buffer)
    data = bytes(v & 0xFF for row in grid_buffer for v in row)
    Image.frombytes("L", (lx, ly), data).save(path, format="PNG")


def get_rounded_string(number: float) -> str:
    """Render a number with three decimals."""
    return f"{number:.3f}"


def get_png_directory_name(temp_string: str) -> str:
    return f"temp_png_{temp_string}"


def get_movie_filename(base_name: PathLike, temp_string: str) -> Path:
    """Turn ``movie.mp4`` into ``movie_2.266.mp4``; the directory is dropped."""
    base_name = Path(base_name)
    return Path(f"{base_name.stem}_{temp_string}{base_name.suffix}")


def get_image_filename_pattern(base_name: PathLike, temp_string: str) -> str:
    """Turn ``image.png`` into the pattern ``image_2.266_{}.png``."""
    base_name = Path(base_name)
    return f"{base_name.stem}_{temp_string}_{{}}{base_name.suffix}"


def _run_ffmpeg(args: list[str]) -> None:
    try:
        subprocess.run([FFMPEG, *args], check=False)
    except OSError as exc:
        _log.error("Couldn't start %s: %s", FFMPEG, exc)


class VisualOutput(abc.ABC):
    """Receives lattice snapshots during a run."""

    @abc.abstractmethod
    def snapshot(self, grid: Grid, last_frame: bool = False) -> None:
        """Record one state of the lattice."""

    @abc.abstractmethod
    def end_actions(self) -> None:
        """Finish the output once the run is over."""


class TemporalAverageLattice:
    """Sums spin lattices mapped to [0,255] so they can be averaged over time."""

    def __init__(self, lx: int, ly: int) -> None:
        self._buffer = [[0] * lx for _ in range(ly)]
        self._recorded_frames = 0

    def add(self, grid: Grid) -> None:
        """Add a lattice of +-1 spins."""
        _add_grid_to_buffer(self._buffer, grid)
        self._recorded_frames += 1

    def get_average(self) -> list[list[int]]:
        """Return the average in [0,255]; the stored sum is replaced by it."""
        if self._recorded_frames == 0:
            raise ValueError("no frames recorded")
        frames = self._recorded_frames
        self._buffer = [[v // frames for v in row] for row in self._buffer]
        return [row[:] for row in self._buffer]

    def clear(self) -> None:
        self._buffer = [[0] * len(row) for row in self._buffer]
        self._recorded_frames = 0


class MovieWriter(VisualOutput):
    """Writes blended frames to a temporary directory and joins them into a movie."""

    def __init__(
        self,
        lx: int,
        ly: int,
        image_mode: ImageMode,
        temp_string: str,
        blend_frames: int = 1,
    ) -> None:
        if blend_frames < 1:
            raise ValueError(f"blend_frames must be at least 1, got {blend_frames}")
        self._framecount = 0
        self._blend_frames = blend_frames
        self._png_counter = 0
        self.fps = image_mode.fps
        self.temp_directory = Path(get_png_directory_name(temp_string))
        self.output_filename = get_movie_filename(image_mode.path, temp_string)
        self._buffer = TemporalAverageLattice(lx, ly)
        self._clear_png_directory()
        self.temp_directory.mkdir(parents=True, exist_ok=True)

    def snapshot(self, grid: Grid, last_frame: bool = False) -> None:
        self._buffer.add(grid)
        self._framecount += 1
        if self._framecount == self._blend_frames:
            filename = self.temp_directory / f"image_{self._png_counter}.png"
            write_png(self._buffer.get_average(), filename)
            self._framecount = 0
            self._png_counter += 1
            self._buffer.clear()

    def end_actions(self) -> None:
        self.make_movie()

    def make_movie(self) -> None:
        """Run ffmpeg over the written frames, then remove them."""
        _log.info("Starting ffmpeg to write movie %s.", self.output_filename)
        _run_ffmpeg([
            "-y", "-hide_banner", "-loglevel", "panic",
            "-framerate", str(self.fps),
            "-i", str(self.temp_directory / "image_%d.png"),
            "-c:v", "libx264",
            str(self.output_filename),
        ])
        _log.info("Done writing movie %s.", self.output_filename)
        self._clear_png_directory()

    def _clear_png_directory(self) -> None:
        if self.temp_directory.exists():
            shutil.rmtree(self.temp_directory)


class IntervalWriter(VisualOutput):
    """Writes every n-th snapshot as its own image."""

    def __init__(self, lx: int, ly: int, image_mode: ImageMode, temp_string: str) -> None:
        if image_mode.intervals < 1:
            raise ValueError(f"intervals must be at least 1, got {image_mode.intervals}")
        self._framecount = 0
        self._frame_intervals = image_mode.intervals
        self.filename_pattern = get_image_filename_pattern(image_mode.path, temp_string)

    def snapshot(self, grid: Grid, last_frame: bool = False) -> None:
        self._framecount += 1
        if self._framecount % self._frame_intervals == 0:
            filename = self.filename_pattern.format(self._framecount)
            write_png(_png_buffer_from_lattice(grid), filename)

    def end_actions(self) -> None:
        pass


class EndImageWriter(VisualOutput):
    """Writes only the final lattice as an image."""

    def __init__(self, lx: int, ly: int, image_mode: ImageMode, temp_string: str) -> None:
        self.output_filename = get_movie_filename(image_mode.path, temp_string)

    def snapshot(self, grid: Grid, last_frame: bool = False) -> None:
        if not last_frame:
            return
        write_png(_png_buffer_from_lattice(grid), self.output_filename)

    def end_actions(self) -> None:
        pass


class NullImageWriter(VisualOutput):
    """Discards all snapshots."""

    def __init__(self, lx: int, ly: int, image_mode: ImageMode, temp_string: str) -> None:
        pass

    def snapshot(self, grid: Grid, last_frame: bool = False) -> None:
        pass

    def end_actions(self) -> None:
        pass