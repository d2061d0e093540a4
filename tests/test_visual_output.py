import subprocess
from pathlib import Path
from unittest import mock

import pytest
from PIL import Image

from magneto.visual_output import (
    EndImageWriter,
    ImageMode,
    IntervalWriter,
    MovieWriter,
    NullImageWriter,
    TemporalAverageLattice,
    get_image_filename_pattern,
    get_movie_filename,
    get_png_directory_name,
    get_rounded_string,
    write_png,
)

GRID = [[1, -1, 1], [-1, -1, 1]]
GRID_255 = [[255, 0, 255], [0, 0, 255]]


def _read_png(path):
    with Image.open(path) as img:
        data = list(img.tobytes())
        width, height = img.size
    return [data[row * width:(row + 1) * width] for row in range(height)]


def _single_frame_average(grid):
    lattice = TemporalAverageLattice(len(grid[0]), len(grid))
    lattice.add(grid)
    return lattice.get_average()


def test_rounded_string_has_three_decimals():
    assert get_rounded_string(2.2661) == "2.266"
    assert get_rounded_string(2.0) == "2.000"


def test_png_directory_name():
    assert get_png_directory_name("2.266") == "temp_png_2.266"


def test_movie_filename_carries_temperature():
    assert get_movie_filename(Path("out") / "movie.mp4", "2.266") == Path("movie_2.266.mp4")


def test_image_filename_pattern():
    pattern = get_image_filename_pattern(Path("image.png"), "2.266")
    assert pattern == "image_2.266_{}.png"
    assert pattern.format(10) == "image_2.266_10.png"


def test_write_png_round_trip(tmp_path):
    path = tmp_path / "grid.png"
    buffer = [[0, 17, 255], [128, 64, 3]]
    write_png(buffer, path)
    assert _read_png(path) == buffer


def test_average_of_identical_frames_equals_frame():
    lattice = TemporalAverageLattice(3, 2)
    lattice.add(GRID)
    lattice.add(GRID)
    lattice.add(GRID)
    assert lattice.get_average() == GRID_255


def test_average_stays_in_byte_range():
    lattice = TemporalAverageLattice(3, 2)
    lattice.add(GRID)
    lattice.add([[-v for v in row] for row in GRID])
    average = lattice.get_average()
    assert all(0 <= v <= 255 for row in average for v in row)
    assert len(set(v for row in average for v in row)) == 1


def test_clear_resets_buffer_and_frames():
    lattice = TemporalAverageLattice(3, 2)
    lattice.add([[1, 1, 1], [1, 1, 1]])
    lattice.clear()
    with pytest.raises(ValueError):
        lattice.get_average()
    lattice.add(GRID)
    assert lattice.get_average() == GRID_255


def test_average_without_frames_is_an_error():
    with pytest.raises(ValueError):
        TemporalAverageLattice(2, 2).get_average()


def test_interval_writer_writes_every_nth_frame(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    pattern = get_image_filename_pattern(Path("snap.png"), "2.266")
    assert pattern == "snap_2.266_{}.png"
    writer = IntervalWriter(3, 2, ImageMode(Path("snap.png"), intervals=2), "2.266")
    for _ in range(5):
        writer.snapshot(GRID)
    writer.end_actions()
    written = sorted(p.name for p in tmp_path.iterdir())
    assert written == [pattern.format(2), pattern.format(4)]
    assert _read_png(tmp_path / pattern.format(4)) == _single_frame_average(GRID)
    assert _single_frame_average(GRID) == GRID_255


def test_interval_writer_rejects_zero_interval():
    with pytest.raises(ValueError):
        IntervalWriter(3, 2, ImageMode(Path("snap.png"), intervals=0), "1.000")


def test_end_image_writer_writes_only_last_frame(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    target = get_movie_filename(Path("end.png"), "2.266")
    assert target == Path("end_2.266.png")
    writer = EndImageWriter(3, 2, ImageMode(Path("end.png")), "2.266")
    writer.snapshot(GRID)
    assert sorted(p.name for p in tmp_path.iterdir()) == []
    writer.snapshot(GRID, last_frame=True)
    assert sorted(p.name for p in tmp_path.iterdir()) == [target.name]
    assert _read_png(tmp_path / target) == _single_frame_average(GRID)


def test_null_writer_writes_nothing(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    writer = NullImageWriter(3, 2, ImageMode(Path("x.png")), "2.266")
    assert writer.snapshot(GRID, last_frame=True) is None
    assert writer.end_actions() is None
    assert sorted(p.name for p in tmp_path.iterdir()) == []


def test_movie_writer_clears_existing_directory(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    directory = get_png_directory_name("2.266")
    assert directory == "temp_png_2.266"
    stale = tmp_path / directory
    stale.mkdir()
    (stale / "old.png").write_bytes(b"old")
    MovieWriter(3, 2, ImageMode(Path("movie.mp4")), "2.266")
    assert sorted(p.name for p in tmp_path.iterdir()) == [directory]
    assert sorted(p.name for p in stale.iterdir()) == []


def test_movie_writer_blends_frames_and_runs_ffmpeg(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    directory = get_png_directory_name("2.266")
    movie = get_movie_filename(Path("movie.mp4"), "2.266")
    assert movie == Path("movie_2.266.mp4")
    writer = MovieWriter(3, 2, ImageMode(Path("movie.mp4"), fps=12), "2.266", blend_frames=2)
    for _ in range(4):
        writer.snapshot(GRID)
    frames = tmp_path / directory
    assert sorted(p.name for p in frames.iterdir()) == ["image_0.png", "image_1.png"]

    blended = TemporalAverageLattice(3, 2)
    blended.add(GRID)
    blended.add(GRID)
    assert _read_png(frames / "image_1.png") == blended.get_average()

    completed = subprocess.CompletedProcess([], 0)
    with mock.patch("magneto.visual_output.subprocess.run", return_value=completed) as run:
        writer.end_actions()
    cmd = run.call_args.args[0]
    assert cmd[cmd.index("-framerate") + 1] == "12"
    assert cmd[-1] == str(movie)
    assert sorted(p.name for p in tmp_path.iterdir()) == []


def test_movie_writer_rejects_zero_blend_frames(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(ValueError):
        MovieWriter(3, 2, ImageMode(Path("movie.mp4")), "2.266", blend_frames=0)