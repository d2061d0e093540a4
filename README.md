# magneto

Support code for a 2D Ising-model simulation:

- reading spin states and temperature maps from images, and writing text results,
- writing lattice snapshots as PNG images or as a movie while a simulation runs,
- a small logging toolkit with pattern-based message formatting,
- printf-style string formatting.

## Installation

```
pip install .
```

Tests need the `test` extra:

```
pip install ".[test]"
pytest
```

`MovieWriter` and `FileResizer` start the `ffmpeg` program, which must be
installed separately and be on the `PATH`. If it cannot be started, the
failure is logged and nothing is raised.

## Lattices

A lattice is a list of rows. Spin lattices hold `-1` / `+1` values.

```python
from magneto.lattice import get_dimensions_of_lattice

lx, ly = get_dimensions_of_lattice([[1, -1, 1], [-1, 1, -1]])  # (3, 2)
```

An empty lattice raises `ValueError`.

## Reading and writing files (`magneto.file_tools`)

```python
from magneto.file_tools import (
    get_file_contents,
    write_string_to_file,
    get_spin_state_from_png,
    get_lattice_temps_from_png_file,
    get_resized_data,
)

write_string_to_file("result.txt", "energy: -1.23\n")   # an open failure is logged
text = get_file_contents("result.txt")                  # None if the file cannot be read

spins = get_spin_state_from_png("start.png")            # None if the image cannot be read
temps = get_lattice_temps_from_png_file("temps.png", 1.0, 3.5)

# Scale an image to 64x64 with ffmpeg, read it, then remove the temporary copy.
spins = get_resized_data("start.png", 64, 64, get_spin_state_from_png)
```

- `get_spin_state_from_png` reads greyscale or RGBA images; each pixel's
  channels are averaged, and only full white becomes `+1`, everything else
  `-1`. Images with another channel count (RGB, grey with alpha) raise
  `ValueError`.
- `get_lattice_temps_from_png_file` maps each pixel's average brightness `v`
  to `temp_min + v / 256 * (temp_max - temp_min)`.
- `get_file_contents` resolves the path against the working directory.
- `FileResizer(path, x, y)` writes `<stem>_resized<suffix>` next to the image
  and removes it on `close()` or when leaving a `with` block; its
  `temp_file` property gives that path.

These functions report problems through the standard `logging` module
(logger `magneto.file_tools`).

## Visual output (`magneto.visual_output`)

Every writer has `snapshot(grid, last_frame=False)` and `end_actions()`.

```python
from magneto.visual_output import ImageMode, IntervalWriter, get_rounded_string

grid = [[1, -1] * 32 for _ in range(64)]
mode = ImageMode(path="image.png", intervals=10, fps=30)
writer = IntervalWriter(64, 64, mode, get_rounded_string(2.269))
for step in range(100):
    writer.snapshot(grid)   # writes image_2.269_10.png, image_2.269_20.png, ...
writer.end_actions()
```

- `IntervalWriter` writes every `intervals`-th snapshot as its own PNG.
- `EndImageWriter` writes only the snapshot taken with `last_frame=True`,
  to `<stem>_<temp><suffix>`.
- `MovieWriter(lx, ly, mode, temp_string, blend_frames=1)` averages every
  `blend_frames` snapshots (via `TemporalAverageLattice`) into a PNG in the
  directory `temp_png_<temp_string>`; `end_actions()` joins them with ffmpeg
  into `<stem>_<temp><suffix>` at `mode.fps` and removes the directory.
- `NullImageWriter` does nothing.

Output file names keep only the file name of `mode.path`, so files land in
the working directory. Helpers `write_png`, `get_rounded_string`,
`get_png_directory_name`, `get_movie_filename` and
`get_image_filename_pattern` are public as well.

## Logging (`magneto.log`)

```python
from magneto.log.logger import stdout_logger
from magneto.log.flags import Level

log = stdout_logger("magneto")
log.set_pattern("[%H:%M:%S] [%l] %v")
log.info("starting run")
log.set_level(Level.WARN)
```

- `Logger` dispatches messages to its sinks; `null_logger`, `stdout_logger`
  and `stderr_logger` build ready-made ones. It supports `flush_on(level)`,
  `set_error_handler(handler)`, `clone(name)` and a backtrace:
  `enable_backtrace(n)` keeps the last `n` messages of any level and
  `dump_backtrace()` writes them out.
- `magneto.log.sinks` has `NullSink`, `StreamSink` and `AnsiColorSink`
  (with `ColorMode.ALWAYS`, `AUTOMATIC` or `NEVER`).
- `magneto.log.pattern.PatternFormatter` understands the usual `%` flags
  (`%Y`, `%m`, `%d`, `%H`, `%M`, `%S`, `%e`, `%f`, `%F`, `%l`, `%L`, `%n`,
  `%v`, `%t`, `%P`, `%z`, `%^`/`%$` colour ranges, elapsed time `%u` `%i`
  `%o` `%O`, `%+` for the default layout, and more), with padding such as
  `%8l`, `%-8l` or `%=10n` (at most 64). Unknown flags are printed as written.
- `magneto.log.circular_q.CircularQueue` is the bounded queue behind the
  backtrace.

Messages are plain strings; the logger does no argument formatting of its own.

## printf-style formatting (`magneto.fmt.printf`)

```python
from magneto.fmt.printf import sprintf

sprintf("%05.2f|%-4d|%s", 3.14159, 42, "ok")   # '03.14|42  |ok'
sprintf("%2$s %1$s", "world", "hello")         # 'hello world'
```

`fprintf(stream, fmt, *args)` and `printf(fmt, *args)` write the result and
return its length. Flags, `*` width and precision, positional `n$`
arguments and the C length modifiers (`hh`, `h`, `l`, `ll`, `j`, `z`, `t`)
are supported; malformed formats raise `FormatError`.

## What this package does not do

It does not contain the Ising simulation itself: there is no lattice
update, no job configuration and no command to start a run. It provides the
input, output and logging pieces such a simulation uses.