"""Destinations that formatted log messages are written to."""

from __future__ import annotations

import abc
import enum
import os
import threading
from typing import Optional, TextIO

from magneto.log.flags import Formatter, Level, LogMessage
from magneto.log.pattern import PatternFormatter

RESET = "\033[m"
BOLD = "\033[1m"
WHITE = "\033[37m"
CYAN = "\033[36m"
GREEN = "\033[32m"
YELLOW = "\033[33m"
RED = "\033[31m"
ON_RED = "\033[41m"

YELLOW_BOLD = YELLOW + BOLD
RED_BOLD = RED + BOLD
BOLD_ON_RED = BOLD + ON_RED

_COLOR_TERMS = (
    "ansi",
    "color",
    "console",
    "cygwin",
    "gnome",
    "konsole",
    "kterm",
    "linux",
    "msys",
    "putty",
    "rxvt",
    "screen",
    "vt100",
    "xterm",
)


def _is_color_terminal() -> bool:
    if os.environ.get("COLORTERM"):
        return True
    term = os.environ.get("TERM", "")
    return any(name in term for name in _COLOR_TERMS)


def _in_terminal(stream: TextIO) -> bool:
    isatty = getattr(stream, "isatty", None)
    return bool(isatty()) if callable(isatty) else False


class Sink(abc.ABC):
    """Base of all sinks: holds a formatter and a minimum level, serialises writes."""

    def __init__(self, formatter: Optional[Formatter] = None) -> None:
        self._lock = threading.Lock()
        self.formatter: Formatter = formatter if formatter is not None else PatternFormatter()
        self.level = Level.TRACE

    def should_log(self, level: Level) -> bool:
        return level >= self.level

    def log(self, msg: LogMessage) -> None:
        with self._lock:
            self._sink_it(msg)

    def flush(self) -> None:
        with self._lock:
            self._flush()

    def set_pattern(self, pattern: str) -> None:
        self.set_formatter(PatternFormatter(pattern))

    def set_formatter(self, formatter: Formatter) -> None:
        with self._lock:
            self.formatter = formatter

    @abc.abstractmethod
    def _sink_it(self, msg: LogMessage) -> None:
        """Write one message; called with the lock held."""

    def _flush(self) -> None:
        """Flush pending output; called with the lock held."""


class NullSink(Sink):
    """Discards every message."""

    def _sink_it(self, msg: LogMessage) -> None:
        pass


class StreamSink(Sink):
    """Writes each formatted message to a text stream and flushes it."""

    def __init__(self, stream: TextIO) -> None:
        super().__init__()
        self.stream = stream

    def _sink_it(self, msg: LogMessage) -> None:
        self.stream.write(self.formatter.format(msg))

    def log(self, msg: LogMessage) -> None:
        with self._lock:
            self._sink_it(msg)
            self.stream.flush()

    def flush(self) -> None:
        with self._lock:
            self.stream.flush()


class ColorMode(enum.Enum):
    """When to emit ANSI colour codes."""

    ALWAYS = "always"
    AUTOMATIC = "automatic"
    NEVER = "never"


class AnsiColorSink(StreamSink):
    """Stream sink that colours the marked range of each message by level."""

    def __init__(self, stream: TextIO, mode: ColorMode = ColorMode.AUTOMATIC) -> None:
        super().__init__(stream)
        self._should_do_colors = False
        self.set_color_mode(mode)
        self._colors: dict[Level, str] = {
            Level.TRACE: WHITE,
            Level.DEBUG: CYAN,
            Level.INFO: GREEN,
            Level.WARN: YELLOW_BOLD,
            Level.ERR: RED_BOLD,
            Level.CRITICAL: BOLD_ON_RED,
            Level.OFF: RESET,
        }

    def set_color(self, level: Level, color: str) -> None:
        with self._lock:
            self._colors[level] = color

    def _sink_it(self, msg: LogMessage) -> None:
        formatted = self.formatter.format(msg)
        start, end = msg.color_range_start, msg.color_range_end
        if self._should_do_colors and end > start:
            self.stream.write(formatted[:start])
            self.stream.write(self._colors[msg.level])
            self.stream.write(formatted[start:end])
            self.stream.write(RESET)
            self.stream.write(formatted[end:])
        else:
            self.stream.write(formatted)

    def log(self, msg: LogMessage) -> None:
        with self._lock:
            self._sink_it(msg)
            self.stream.flush()

    def flush(self) -> None:
        with self._lock:
            self.stream.flush()

    def should_color(self) -> bool:
        return self._should_do_colors

    def set_color_mode(self, mode: ColorMode) -> None:
        if mode is ColorMode.ALWAYS:
            self._should_do_colors = True
        elif mode is ColorMode.AUTOMATIC:
            self._should_do_colors = _in_terminal(self.stream) and _is_color_terminal()
        else:
            self._should_do_colors = False