"""Loggers, sinks, a bounded backtrace queue and pattern-based log message formatting."""