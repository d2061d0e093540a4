"""Log message model, padding rules and the formatters for single pattern flags."""

from __future__ import annotations

import abc
import enum
import io
import os
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

from magneto.log import fmt_helper

MAX_PAD_WIDTH = 64


class Level(enum.IntEnum):
    """Severity of a log message, ordered from least to most severe."""

    TRACE = 0
    DEBUG = 1
    INFO = 2
    WARN = 3
    ERR = 4
    CRITICAL = 5
    OFF = 6

    def short_name(self) -> str:
        """One-letter name of the level."""
        return _SHORT_LEVEL_NAMES[self]

    def __str__(self) -> str:
        return _LEVEL_NAMES[self]


_LEVEL_NAMES = {
    Level.TRACE: "trace",
    Level.DEBUG: "debug",
    Level.INFO: "info",
    Level.WARN: "warning",
    Level.ERR: "error",
    Level.CRITICAL: "critical",
    Level.OFF: "off",
}

_SHORT_LEVEL_NAMES = {
    Level.TRACE: "T",
    Level.DEBUG: "D",
    Level.INFO: "I",
    Level.WARN: "W",
    Level.ERR: "E",
    Level.CRITICAL: "C",
    Level.OFF: "O",
}


@dataclass(frozen=True)
class SourceLoc:
    """Location in source code that produced a log message."""

    filename: str = ""
    line: int = 0
    funcname: str = ""

    def is_empty(self) -> bool:
        return self.line == 0


@dataclass
class LogMessage:
    """A single log record; the colour range is filled in while formatting."""

    logger_name: str
    level: Level
    payload: str
    time_ns: int = field(default_factory=time.time_ns)
    thread_id: int = field(default_factory=threading.get_ident)
    source: SourceLoc = field(default_factory=SourceLoc)
    color_range_start: int = 0
    color_range_end: int = 0


class PadSide(enum.Enum):
    """Where padding spaces go: LEFT right-aligns the text."""

    LEFT = "left"
    RIGHT = "right"
    CENTER = "center"


@dataclass(frozen=True)
class PaddingInfo:
    """Requested field width and alignment for one flag."""

    width: int = 0
    side: PadSide = PadSide.LEFT

    def enabled(self) -> bool:
        return self.width != 0


def _pad(text: str, size: int, padinfo: PaddingInfo) -> str:
    if padinfo.width <= size:
        return text
    total = padinfo.width - size
    if total > MAX_PAD_WIDTH:
        raise ValueError(f"padding of {total} exceeds the maximum of {MAX_PAD_WIDTH}")
    if padinfo.side is PadSide.LEFT:
        return " " * total + text
    if padinfo.side is PadSide.CENTER:
        half = total // 2
        return " " * half + text + " " * (half + total % 2)
    return text + " " * total


def pad_field(text: str, padinfo: PaddingInfo) -> str:
    """Pad ``text`` with spaces according to ``padinfo``."""
    return _pad(text, len(text), padinfo)


class Formatter(abc.ABC):
    """Turns a whole log message into its text form."""

    @abc.abstractmethod
    def format(self, msg: LogMessage) -> str:
        """Return the formatted message."""

    @abc.abstractmethod
    def clone(self) -> "Formatter":
        """Return an independent copy of this formatter."""


class FlagFormatter(abc.ABC):
    """Writes the part of a message that one pattern element stands for."""

    def __init__(self, padinfo: Optional[PaddingInfo] = None) -> None:
        self.padinfo = padinfo if padinfo is not None else PaddingInfo()

    @abc.abstractmethod
    def format(self, msg: LogMessage, tm_time: time.struct_time, dest: io.StringIO) -> None:
        """Append this element's text to ``dest``."""


@dataclass(frozen=True)
class _Field:
    render: Callable[[LogMessage, time.struct_time], Optional[str]]
    size: Optional[int] = None


class FieldFormatter(FlagFormatter):
    """Flag formatter that renders a field and pads it."""

    def __init__(self, field: _Field, padinfo: Optional[PaddingInfo] = None) -> None:
        super().__init__(padinfo)
        self._field = field

    def format(self, msg: LogMessage, tm_time: time.struct_time, dest: io.StringIO) -> None:
        text = self._field.render(msg, tm_time)
        if text is None:
            return
        size = self._field.size if self._field.size is not None else len(text)
        dest.write(_pad(text, size, self.padinfo))


_DAYS = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")
_FULL_DAYS = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")
_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sept", "Oct", "Nov", "Dec")
_FULL_MONTHS = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)


def _weekday(tm: time.struct_time) -> int:
    # struct_time counts weekdays from Monday; the name tables start on Sunday.
    return (tm.tm_wday + 1) % 7


def _ampm(tm: time.struct_time) -> str:
    return "PM" if tm.tm_hour >= 12 else "AM"


def _to12h(tm: time.struct_time) -> int:
    return tm.tm_hour - 12 if tm.tm_hour > 12 else tm.tm_hour


def _hms(hour: int, tm: time.struct_time) -> str:
    return f"{fmt_helper.pad2(hour)}:{fmt_helper.pad2(tm.tm_min)}:{fmt_helper.pad2(tm.tm_sec)}"


def _datetime(msg: LogMessage, tm: time.struct_time) -> str:
    return (
        f"{_DAYS[_weekday(tm)]} {_MONTHS[tm.tm_mon - 1]} {tm.tm_mday} "
        f"{_hms(tm.tm_hour, tm)} {tm.tm_year}"
    )


def _short_date(msg: LogMessage, tm: time.struct_time) -> str:
    return (
        f"{fmt_helper.pad2(tm.tm_mon)}/{fmt_helper.pad2(tm.tm_mday)}/"
        f"{fmt_helper.pad2(tm.tm_year % 100)}"
    )


def _utc_offset(msg: LogMessage, tm: time.struct_time) -> str:
    offset_seconds = getattr(tm, "tm_gmtoff", None) or 0
    total_minutes = int(offset_seconds / 60)
    sign = "-" if total_minutes < 0 else "+"
    total_minutes = abs(total_minutes)
    return f"{sign}{fmt_helper.pad2(total_minutes // 60)}:{fmt_helper.pad2(total_minutes % 60)}"


def _epoch_seconds(msg: LogMessage, tm: time.struct_time) -> str:
    seconds = abs(msg.time_ns) // fmt_helper.NS_PER_SECOND
    return str(seconds if msg.time_ns >= 0 else -seconds)


def _source_location(msg: LogMessage, tm: time.struct_time) -> Optional[str]:
    if msg.source.is_empty():
        return None
    return f"{msg.source.filename}:{msg.source.line}"


def _source_filename(msg: LogMessage, tm: time.struct_time) -> Optional[str]:
    if msg.source.is_empty():
        return None
    return msg.source.filename


def _short_filename(msg: LogMessage, tm: time.struct_time) -> Optional[str]:
    if msg.source.is_empty():
        return None
    return msg.source.filename.rpartition(os.sep)[2]


def _source_line(msg: LogMessage, tm: time.struct_time) -> Optional[str]:
    if msg.source.is_empty():
        return None
    return str(msg.source.line)


def _source_funcname(msg: LogMessage, tm: time.struct_time) -> Optional[str]:
    if msg.source.is_empty():
        return None
    return msg.source.funcname


_FIELDS: dict[str, _Field] = {
    "n": _Field(lambda msg, tm: msg.logger_name),
    "l": _Field(lambda msg, tm: str(msg.level)),
    "L": _Field(lambda msg, tm: msg.level.short_name()),
    "t": _Field(lambda msg, tm: str(msg.thread_id)),
    "v": _Field(lambda msg, tm: msg.payload),
    "a": _Field(lambda msg, tm: _DAYS[_weekday(tm)]),
    "A": _Field(lambda msg, tm: _FULL_DAYS[_weekday(tm)]),
    "b": _Field(lambda msg, tm: _MONTHS[tm.tm_mon - 1]),
    "h": _Field(lambda msg, tm: _MONTHS[tm.tm_mon - 1]),
    "B": _Field(lambda msg, tm: _FULL_MONTHS[tm.tm_mon - 1]),
    "c": _Field(_datetime, 24),
    "C": _Field(lambda msg, tm: fmt_helper.pad2(tm.tm_year % 100), 2),
    "Y": _Field(lambda msg, tm: str(tm.tm_year), 4),
    "D": _Field(_short_date, 10),
    "x": _Field(_short_date, 10),
    "m": _Field(lambda msg, tm: fmt_helper.pad2(tm.tm_mon), 2),
    "d": _Field(lambda msg, tm: fmt_helper.pad2(tm.tm_mday), 2),
    "H": _Field(lambda msg, tm: fmt_helper.pad2(tm.tm_hour), 2),
    "I": _Field(lambda msg, tm: fmt_helper.pad2(_to12h(tm)), 2),
    "M": _Field(lambda msg, tm: fmt_helper.pad2(tm.tm_min), 2),
    "S": _Field(lambda msg, tm: fmt_helper.pad2(tm.tm_sec), 2),
    "e": _Field(lambda msg, tm: fmt_helper.pad3(fmt_helper.time_fraction(msg.time_ns, 1_000)), 3),
    "f": _Field(lambda msg, tm: fmt_helper.pad6(fmt_helper.time_fraction(msg.time_ns, 1_000_000)), 6),
    "F": _Field(
        lambda msg, tm: fmt_helper.pad9(fmt_helper.time_fraction(msg.time_ns, fmt_helper.NS_PER_SECOND)),
        9,
    ),
    "E": _Field(_epoch_seconds, 10),
    "p": _Field(lambda msg, tm: _ampm(tm), 2),
    "r": _Field(lambda msg, tm: f"{_hms(_to12h(tm), tm)} {_ampm(tm)}", 11),
    "R": _Field(lambda msg, tm: f"{fmt_helper.pad2(tm.tm_hour)}:{fmt_helper.pad2(tm.tm_min)}", 5),
    "T": _Field(lambda msg, tm: _hms(tm.tm_hour, tm), 8),
    "X": _Field(lambda msg, tm: _hms(tm.tm_hour, tm), 8),
    "z": _Field(_utc_offset, 6),
    "P": _Field(lambda msg, tm: str(os.getpid())),
    "@": _Field(_source_location),
    "s": _Field(_short_filename),
    "g": _Field(_source_filename),
    "#": _Field(_source_line),
    "!": _Field(_source_funcname),
}


def field_for_flag(flag: str) -> Optional[_Field]:
    """Return the field a pattern flag renders, or None if it is not a field flag."""
    return _FIELDS.get(flag)