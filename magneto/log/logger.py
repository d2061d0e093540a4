"""Named logger that dispatches messages to a set of sinks."""

from __future__ import annotations

import sys
import threading
import time
from typing import Callable, Iterable, Optional

from magneto.log.circular_q import CircularQueue
from magneto.log.flags import Formatter, Level, LogMessage
from magneto.log.pattern import PatternFormatter, PatternTimeType
from magneto.log.sinks import NullSink, Sink, StreamSink

ErrorHandler = Callable[[str], None]

_BACKTRACE_START = "****************** Backtrace Start ******************"
_BACKTRACE_END = "****************** Backtrace End ********************"

_err_lock = threading.Lock()
_err_counter = 0
_last_err_report: Optional[float] = None


def _report_error(logger_name: str, message: str) -> None:
    """Print a sink error to stderr, at most once per second."""
    global _err_counter, _last_err_report
    with _err_lock:
        now = time.monotonic()
        _err_counter += 1
        if _last_err_report is not None and now - _last_err_report < 1.0:
            return
        _last_err_report = now
        stamp = time.strftime("%Y-%m-%d %H:%M:%S", time.localtime())
        sys.stderr.write(
            f"[*** LOG ERROR #{_err_counter:04d} ***] [{stamp}] [{logger_name}] {{{message}}}\n"
        )


class Logger:
    """Filters messages by level and hands them to its sinks."""

    def __init__(self, name: str, sinks: Optional[Iterable[Sink]] = None) -> None:
        self._name = name
        self.sinks: list[Sink] = list(sinks) if sinks is not None else []
        self._level = Level.INFO
        self._flush_level = Level.OFF
        self._err_handler: Optional[ErrorHandler] = None
        self._tracer: Optional[CircularQueue[LogMessage]] = None
        self._tracer_lock = threading.Lock()

    @property
    def name(self) -> str:
        return self._name

    def should_log(self, level: Level) -> bool:
        return level >= self._level

    def set_level(self, level: Level) -> None:
        self._level = level

    def level(self) -> Level:
        return self._level

    def set_formatter(self, formatter: Formatter) -> None:
        """Give every sink its own copy of ``formatter``; the last sink gets the original."""
        for index, sink in enumerate(self.sinks):
            is_last = index == len(self.sinks) - 1
            sink.set_formatter(formatter if is_last else formatter.clone())

    def set_pattern(self, pattern: str, time_type: PatternTimeType = PatternTimeType.LOCAL) -> None:
        self.set_formatter(PatternFormatter(pattern, time_type))

    def enable_backtrace(self, n_messages: int) -> None:
        """Keep the last ``n_messages`` messages, whatever their level, for dumping later."""
        with self._tracer_lock:
            self._tracer = CircularQueue(n_messages)

    def disable_backtrace(self) -> None:
        with self._tracer_lock:
            self._tracer = None

    def dump_backtrace(self) -> None:
        """Send the stored backtrace messages to the sinks and empty the store."""
        with self._tracer_lock:
            if self._tracer is None:
                return
            stored = []
            while not self._tracer.empty():
                stored.append(self._tracer.pop_front())
        self._sink_it(LogMessage(self._name, Level.INFO, _BACKTRACE_START))
        for msg in stored:
            self._sink_it(msg)
        self._sink_it(LogMessage(self._name, Level.INFO, _BACKTRACE_END))

    def flush(self) -> None:
        for sink in self.sinks:
            try:
                sink.flush()
            except Exception as exc:  # noqa: BLE001 - sink errors go to the error handler
                self._handle_error(str(exc))

    def flush_on(self, level: Level) -> None:
        self._flush_level = level

    def flush_level(self) -> Level:
        return self._flush_level

    def set_error_handler(self, handler: Optional[ErrorHandler]) -> None:
        self._err_handler = handler

    def clone(self, logger_name: str) -> "Logger":
        """Return a logger with the same sinks and settings under a new name."""
        cloned = Logger(logger_name, self.sinks)
        cloned._level = self._level
        cloned._flush_level = self._flush_level
        cloned._err_handler = self._err_handler
        with self._tracer_lock:
            if self._tracer is not None:
                tracer: CircularQueue[LogMessage] = CircularQueue(self._tracer.max_items)
                for msg in self._tracer:
                    tracer.push_back(msg)
                cloned._tracer = tracer
        return cloned

    def log(self, level: Level, payload: str) -> None:
        log_enabled = self.should_log(level)
        tracing = self._tracer is not None
        if not log_enabled and not tracing:
            return
        msg = LogMessage(self._name, level, payload)
        if log_enabled:
            self._sink_it(msg)
        if tracing:
            with self._tracer_lock:
                if self._tracer is not None:
                    self._tracer.push_back(msg)

    def info(self, payload: str) -> None:
        self.log(Level.INFO, payload)

    def error(self, payload: str) -> None:
        self.log(Level.ERR, payload)

    def _sink_it(self, msg: LogMessage) -> None:
        for sink in self.sinks:
            if sink.should_log(msg.level):
                try:
                    sink.log(msg)
                except Exception as exc:  # noqa: BLE001 - sink errors go to the error handler
                    self._handle_error(str(exc))
        if msg.level >= self._flush_level and msg.level != Level.OFF:
            self.flush()

    def _handle_error(self, message: str) -> None:
        if self._err_handler is not None:
            self._err_handler(message)
        else:
            _report_error(self._name, message)


def null_logger(name: str) -> Logger:
    """Logger that discards everything and is switched off."""
    logger = Logger(name, [NullSink()])
    logger.set_level(Level.OFF)
    return logger


def stdout_logger(name: str) -> Logger:
    """Logger writing to standard output."""
    return Logger(name, [StreamSink(sys.stdout)])


def stderr_logger(name: str) -> Logger:
    """Logger writing to standard error."""
    return Logger(name, [StreamSink(sys.stderr)])