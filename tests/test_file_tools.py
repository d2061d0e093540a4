import shutil
import subprocess
from unittest import mock

import pytest
from PIL import Image

from magneto.file_tools import (
    FileResizer,
    get_file_contents,
    get_lattice_temps_from_png_file,
    get_resized_data,
    get_spin_state_from_png,
    write_string_to_file,
)


def _save(path, mode, size, data):
    Image.frombytes(mode, size, bytes(data)).save(path)


def _fake_ffmpeg(cmd, **kwargs):
    source = cmd[cmd.index("-i") + 1]
    shutil.copyfile(source, cmd[-1])
    return subprocess.CompletedProcess(cmd, 0)


def test_file_contents_are_read_relative_to_cwd(tmp_path, monkeypatch):
    (tmp_path / "job.json").write_text("{\"L\": 64}", encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    assert get_file_contents("job.json") == "{\"L\": 64}"


def test_missing_file_gives_none(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert get_file_contents("missing.json") is None


def test_write_string_round_trip(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    write_string_to_file(tmp_path / "out.txt", "T=2.266 M=0.5\n")
    assert get_file_contents("out.txt") == "T=2.266 M=0.5\n"


def test_write_into_missing_directory_is_logged(tmp_path, caplog):
    target = tmp_path / "nope" / "out.txt"
    write_string_to_file(target, "data")
    assert not target.exists()
    assert "Couldn't open file" in caplog.text


def test_temps_from_grey_png(tmp_path):
    path = tmp_path / "temps.png"
    _save(path, "L", (2, 1), [0, 128])
    temps = get_lattice_temps_from_png_file(path, 1.0, 3.0)
    assert len(temps) == 1 and len(temps[0]) == 2
    assert temps[0][0] == pytest.approx(1.0)
    assert temps[0][1] == pytest.approx(2.0)


def test_temps_from_rgba_png_average_channels(tmp_path):
    path = tmp_path / "temps.png"
    _save(path, "RGBA", (1, 2), [100, 100, 100, 100, 0, 0, 0, 0])
    temps = get_lattice_temps_from_png_file(path, 0.0, 256.0)
    assert temps == [[pytest.approx(100.0)], [pytest.approx(0.0)]]


def test_temps_are_within_range(tmp_path):
    path = tmp_path / "temps.png"
    _save(path, "L", (3, 2), [0, 50, 100, 150, 200, 255])
    temps = get_lattice_temps_from_png_file(path, 1.5, 3.5)
    assert all(1.5 <= t < 3.5 for row in temps for t in row)
    flat = [t for row in temps for t in row]
    assert flat == sorted(flat)


def test_temps_missing_image_gives_none(tmp_path):
    assert get_lattice_temps_from_png_file(tmp_path / "none.png", 1.0, 2.0) is None


def test_spin_state_from_grey_png(tmp_path):
    path = tmp_path / "spins.png"
    _save(path, "L", (3, 2), [255, 0, 200, 0, 255, 255])
    assert get_spin_state_from_png(path) == [[1, -1, -1], [-1, 1, 1]]


def test_spin_state_from_rgba_png(tmp_path):
    path = tmp_path / "spins.png"
    _save(path, "RGBA", (2, 1), [255, 255, 255, 255, 255, 255, 255, 0])
    assert get_spin_state_from_png(path) == [[1, -1]]


def test_spin_state_rejects_rgb(tmp_path):
    path = tmp_path / "spins.png"
    _save(path, "RGB", (1, 1), [255, 255, 255])
    with pytest.raises(ValueError):
        get_spin_state_from_png(path)


def test_spin_state_missing_image_gives_none(tmp_path, caplog):
    assert get_spin_state_from_png(tmp_path / "none.png") is None
    assert "Couldn't open image" in caplog.text


def test_resized_image_path_keeps_directory():
    original = FileResizer.resized_image_path("images/start.png")
    assert original.parent.name == "images"
    assert original.name == "start_resized.png"


def test_file_resizer_runs_ffmpeg_and_cleans_up(tmp_path):
    src = tmp_path / "img.png"
    _save(src, "L", (2, 2), [0, 255, 255, 0])
    with mock.patch("magneto.file_tools.subprocess.run", side_effect=_fake_ffmpeg) as run:
        with FileResizer(src, 4, 5) as resizer:
            assert resizer.temp_file == tmp_path / "img_resized.png"
            assert resizer.temp_file.exists()
        cmd = run.call_args.args[0]
    assert "scale=4:5" in cmd
    assert cmd[-1] == str(tmp_path / "img_resized.png")
    assert not (tmp_path / "img_resized.png").exists()


def test_get_resized_data_applies_function(tmp_path):
    src = tmp_path / "img.png"
    _save(src, "L", (2, 2), [0, 255, 255, 0])
    with mock.patch("magneto.file_tools.subprocess.run", side_effect=_fake_ffmpeg):
        spins = get_resized_data(src, 2, 2, get_spin_state_from_png)
    assert spins == get_spin_state_from_png(src)
    assert not (tmp_path / "img_resized.png").exists()


def test_resizer_without_ffmpeg_logs_failed_removal(tmp_path, caplog):
    src = tmp_path / "img.png"
    with mock.patch("magneto.file_tools.subprocess.run", side_effect=FileNotFoundError("ffmpeg")):
        resizer = FileResizer(src, 2, 2)
    resizer.close()
    assert "Couldn't remove temporary file" in caplog.text