"""Compile log patterns such as ``[%H:%M:%S] %v`` into formatters."""

from __future__ import annotations

import enum
import io
import os
import time
from typing import Optional

from magneto.log import fmt_helper
from magneto.log.flags import (
    FieldFormatter,
    FlagFormatter,
    Formatter,
    LogMessage,
    PaddingInfo,
    PadSide,
    field_for_flag,
    pad_field,
)

MAX_PAD_WIDTH = 64
DEFAULT_PATTERN = "%+"
_DIGITS = "0123456789"


class CharFormatter(FlagFormatter):
    """Writes a single fixed character."""

    def __init__(self, ch: str) -> None:
        super().__init__()
        self._ch = ch

    def format(self, msg: LogMessage, tm_time: time.struct_time, dest: io.StringIO) -> None:
        dest.write(self._ch)


class AggregateFormatter(FlagFormatter):
    """Writes literal text collected from the pattern."""

    def __init__(self) -> None:
        super().__init__()
        self._parts: list[str] = []

    def add_ch(self, ch: str) -> None:
        self._parts.append(ch)

    def format(self, msg: LogMessage, tm_time: time.struct_time, dest: io.StringIO) -> None:
        dest.write("".join(self._parts))


class ColorStartFormatter(FlagFormatter):
    """Marks where the coloured part of the message begins."""

    def format(self, msg: LogMessage, tm_time: time.struct_time, dest: io.StringIO) -> None:
        msg.color_range_start = dest.tell()


class ColorStopFormatter(FlagFormatter):
    """Marks where the coloured part of the message ends."""

    def format(self, msg: LogMessage, tm_time: time.struct_time, dest: io.StringIO) -> None:
        msg.color_range_end = dest.tell()


class ElapsedFormatter(FlagFormatter):
    """Writes the time since the previous message in the given units."""

    def __init__(self, padinfo: Optional[PaddingInfo], units_per_second: int) -> None:
        super().__init__(padinfo)
        if units_per_second <= 0:
            raise ValueError("units_per_second must be positive")
        self._units_per_second = units_per_second
        self._last_message_ns = time.time_ns()

    def format(self, msg: LogMessage, tm_time: time.struct_time, dest: io.StringIO) -> None:
        delta_ns = max(msg.time_ns - self._last_message_ns, 0)
        delta_units = delta_ns * self._units_per_second // fmt_helper.NS_PER_SECOND
        self._last_message_ns = msg.time_ns
        dest.write(pad_field(fmt_helper.pad6(delta_units), self.padinfo))


class FullFormatter(FlagFormatter):
    """Default layout: ``[%Y-%m-%d %H:%M:%S.%e] [%n] [%l] [file:line] %v``."""

    def __init__(self, padinfo: Optional[PaddingInfo] = None) -> None:
        super().__init__(padinfo)
        self._cache_secs: Optional[int] = None
        self._cached_datetime = ""

    def format(self, msg: LogMessage, tm_time: time.struct_time, dest: io.StringIO) -> None:
        secs = msg.time_ns // fmt_helper.NS_PER_SECOND
        if self._cache_secs != secs or not self._cached_datetime:
            pad2 = fmt_helper.pad2
            self._cached_datetime = (
                f"[{tm_time.tm_year}-{pad2(tm_time.tm_mon)}-{pad2(tm_time.tm_mday)} "
                f"{pad2(tm_time.tm_hour)}:{pad2(tm_time.tm_min)}:{pad2(tm_time.tm_sec)}."
            )
            self._cache_secs = secs
        dest.write(self._cached_datetime)
        dest.write(fmt_helper.pad3(fmt_helper.time_fraction(msg.time_ns, 1_000)))
        dest.write("] ")

        if msg.logger_name:
            dest.write(f"[{msg.logger_name}] ")

        dest.write("[")
        msg.color_range_start = dest.tell()
        dest.write(str(msg.level))
        msg.color_range_end = dest.tell()
        dest.write("] ")

        if not msg.source.is_empty():
            filename = msg.source.filename.rpartition(os.sep)[2]
            dest.write(f"[{filename}:{msg.source.line}] ")

        dest.write(msg.payload)


class PatternTimeType(enum.Enum):
    """Whether timestamps are rendered in local time or UTC."""

    LOCAL = "local"
    UTC = "utc"


_ELAPSED_UNITS = {
    "u": fmt_helper.NS_PER_SECOND,
    "i": 1_000_000,
    "o": 1_000,
    "O": 1,
}


def make_flag_formatter(flag: str, padinfo: Optional[PaddingInfo] = None) -> FlagFormatter:
    """Return the formatter for one pattern flag; unknown flags print as written."""
    padinfo = padinfo if padinfo is not None else PaddingInfo()
    if flag == "+":
        return FullFormatter(padinfo)
    if flag == "^":
        return ColorStartFormatter(padinfo)
    if flag == "$":
        return ColorStopFormatter(padinfo)
    if flag == "%":
        return CharFormatter("%")
    if flag in _ELAPSED_UNITS:
        return ElapsedFormatter(padinfo, _ELAPSED_UNITS[flag])
    field = field_for_flag(flag)
    if field is not None:
        return FieldFormatter(field, padinfo)
    unknown = AggregateFormatter()
    unknown.add_ch("%")
    unknown.add_ch(flag)
    return unknown


def parse_padspec(pattern: str, pos: int) -> tuple[PaddingInfo, int]:
    """Read a padding spec such as ``-8`` starting at ``pos``.

    Returns the padding and the position just past the spec.
    """
    end = len(pattern)
    if pos >= end:
        return PaddingInfo(), pos

    side = PadSide.LEFT
    if pattern[pos] == "-":
        side = PadSide.RIGHT
        pos += 1
    elif pattern[pos] == "=":
        side = PadSide.CENTER
        pos += 1

    start = pos
    while pos < end and pattern[pos] in _DIGITS:
        pos += 1
    if pos == start:
        return PaddingInfo(0, side), pos
    width = int(pattern[start:pos])
    return PaddingInfo(min(width, MAX_PAD_WIDTH), side), pos


def _compile(pattern: str) -> list[FlagFormatter]:
    formatters: list[FlagFormatter] = []
    user_chars: Optional[AggregateFormatter] = None
    end = len(pattern)
    pos = 0
    while pos < end:
        ch = pattern[pos]
        if ch == "%":
            if user_chars is not None:
                formatters.append(user_chars)
                user_chars = None
            padding, pos = parse_padspec(pattern, pos + 1)
            if pos >= end:
                break
            formatters.append(make_flag_formatter(pattern[pos], padding))
        else:
            if user_chars is None:
                user_chars = AggregateFormatter()
            user_chars.add_ch(ch)
        pos += 1
    if user_chars is not None:
        formatters.append(user_chars)
    return formatters


class PatternFormatter(Formatter):
    """Formats messages according to a pattern of literal text and ``%`` flags."""

    def __init__(
        self,
        pattern: Optional[str] = None,
        time_type: PatternTimeType = PatternTimeType.LOCAL,
        eol: str = os.linesep,
    ) -> None:
        self._pattern = pattern if pattern is not None else DEFAULT_PATTERN
        self._time_type = time_type
        self._eol = eol
        self._last_log_secs: Optional[int] = None
        self._cached_tm: time.struct_time = time.gmtime(0)
        self._formatters = _compile(self._pattern)

    @property
    def pattern(self) -> str:
        return self._pattern

    @property
    def time_type(self) -> PatternTimeType:
        return self._time_type

    @property
    def eol(self) -> str:
        return self._eol

    def _time_of(self, secs: int) -> time.struct_time:
        if self._time_type is PatternTimeType.LOCAL:
            return time.localtime(secs)
        return time.gmtime(secs)

    def format(self, msg: LogMessage) -> str:
        secs = msg.time_ns // fmt_helper.NS_PER_SECOND
        if secs != self._last_log_secs:
            self._cached_tm = self._time_of(secs)
            self._last_log_secs = secs
        dest = io.StringIO()
        for formatter in self._formatters:
            formatter.format(msg, self._cached_tm, dest)
        dest.write(self._eol)
        return dest.getvalue()

    def clone(self) -> "PatternFormatter":
        return PatternFormatter(self._pattern, self._time_type, self._eol)