"""Reading and writing text files and lattice images, and resizing images with ffmpeg."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Callable, Iterator, Optional, TypeVar, Union

from PIL import Image

_log = logging.getLogger(__name__)

FFMPEG = "ffmpeg"

PathLike = Union[str, Path]
T = TypeVar("T")

_NATIVE_MODES = ("L", "LA", "RGB", "RGBA")
_SIXTEEN_BIT_MODES = ("I", "I;16", "I;16B", "I;16L")


def get_file_contents(path: PathLike) -> Optional[str]:
    """Return the text of a file relative to the working directory, or None if unreadable."""
    complete_path = Path.cwd() / path
    try:
        return complete_path.read_text(encoding="utf-8")
    except OSError:
        return None


def write_string_to_file(path: PathLike, content: str) -> None:
    """Write ``content`` to ``path``; failure is logged, not raised."""
    try:
        with open(path, "w", encoding="utf-8") as file:
            file.write(content)
    except OSError:
        _log.error("Couldn't open file %s for writing result.", path)


def _native(img: Image.Image) -> Image.Image:
    """Bring an image into 8-bit grey, grey+alpha, RGB or RGBA form."""
    if img.mode in _NATIVE_MODES:
        return img
    if img.mode == "1":
        return img.convert("L")
    if img.mode in _SIXTEEN_BIT_MODES:
        return img.convert("I").point(lambda v: v * (1 / 256)).convert("L")
    has_alpha = "A" in img.getbands() or "transparency" in img.info
    return img.convert("RGBA" if has_alpha else "RGB")


def _read_pixels(path: PathLike) -> Optional[tuple[int, int, int, bytes]]:
    """Return width, height, channels per pixel and the raw bytes, or None."""
    try:
        with Image.open(path) as img:
            native = _native(img)
            return native.width, native.height, len(native.getbands()), native.tobytes()
    except OSError:
        _log.error("Couldn't open image %s", path)
        return None


def _pixel_rows(width: int, height: int, bpp: int, data: bytes) -> Iterator[list[bytes]]:
    row_len = width * bpp
    for start in range(0, height * row_len, row_len):
        row = data[start:start + row_len]
        yield [row[k:k + bpp] for k in range(0, row_len, bpp)]


def _pm1_from_255(value: int) -> int:
    """Map [0,255] to -1 or 1: only full white becomes 1."""
    return value // 255 * 2 - 1


def get_lattice_temps_from_png_file(
    path: PathLike, temp_min: float, temp_max: float
) -> Optional[list[list[float]]]:
    """Map the brightness of each pixel linearly onto [temp_min, temp_max)."""
    pixels = _read_pixels(path)
    if pixels is None:
        return None
    width, height, bpp, data = pixels
    temp_factor = temp_max - temp_min
    return [
        [temp_min + (sum(pixel) // bpp) / 256 * temp_factor for pixel in row]
        for row in _pixel_rows(width, height, bpp, data)
    ]


def get_spin_state_from_png(path: PathLike) -> Optional[list[list[int]]]:
    """Read a grey or RGBA image as a lattice of +1 (white) and -1 spins."""
    pixels = _read_pixels(path)
    if pixels is None:
        return None
    width, height, bpp, data = pixels
    if bpp not in (1, 4):
        raise ValueError(f"spin images need 1 or 4 channels per pixel, got {bpp}")
    return [
        [_pm1_from_255(sum(pixel) // bpp) for pixel in row]
        for row in _pixel_rows(width, height, bpp, data)
    ]


class FileResizer:
    """Writes a resized copy of an image next to it and removes it on close."""

    def __init__(self, path: PathLike, new_x: int, new_y: int) -> None:
        path = Path(path)
        self._temp_path = self.resized_image_path(path)
        self._closed = False
        cmd = [
            FFMPEG, "-y", "-hide_banner", "-loglevel", "panic",
            "-i", str(path),
            "-vf", f"scale={new_x}:{new_y}",
            str(self._temp_path),
        ]
        try:
            subprocess.run(cmd, check=False)
        except OSError as exc:
            _log.error("Couldn't start %s: %s", FFMPEG, exc)

    @property
    def temp_file(self) -> Path:
        return self._temp_path

    def __enter__(self) -> "FileResizer":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        """Remove the resized file; a failure is logged."""
        if self._closed:
            return
        self._closed = True
        try:
            self._temp_path.unlink()
        except OSError:
            _log.error("Couldn't remove temporary file %s.", self._temp_path)

    @staticmethod
    def resized_image_path(original_path: PathLike) -> Path:
        """Turn ``dir/image.png`` into ``dir/image_resized.png``."""
        original_path = Path(original_path)
        return original_path.with_name(f"{original_path.stem}_resized{original_path.suffix}")


def get_resized_data(path: PathLike, lx: int, ly: int, f: Callable[[Path], T]) -> T:
    """Resize the image at ``path`` to ``lx`` by ``ly`` and apply ``f`` to the resized file."""
    with FileResizer(path, lx, ly) as resizer:
        return f(resizer.temp_file)