"""Small helpers that render and zero-pad integers for log formatting."""

from __future__ import annotations

NS_PER_SECOND = 1_000_000_000


def count_digits(n: int) -> int:
    """Return the number of decimal digits of a non-negative integer."""
    if n < 0:
        raise ValueError(f"count_digits expects a non-negative integer, got {n}")
    return len(str(n))


def pad2(n: int) -> str:
    """Render ``n`` with at least two digits; larger values are rendered whole."""
    if n > 99:
        return str(n)
    if n >= 0:
        return f"{n:02d}"
    return f"{n:02}"


def pad_uint(n: int, width: int) -> str:
    """Render a non-negative integer left-padded with zeros to ``width``."""
    if n < 0:
        raise ValueError(f"pad_uint expects a non-negative integer, got {n}")
    digits = count_digits(n)
    if width > digits:
        return "0" * (width - digits) + str(n)
    return str(n)


def pad3(n: int) -> str:
    """Zero-pad to three digits."""
    return pad_uint(n, 3)


def pad6(n: int) -> str:
    """Zero-pad to six digits."""
    return pad_uint(n, 6)


def pad9(n: int) -> str:
    """Zero-pad to nine digits."""
    return pad_uint(n, 9)


def _trunc_div(a: int, b: int) -> int:
    quotient = abs(a) // b
    return quotient if a >= 0 else -quotient


def time_fraction(time_ns: int, units_per_second: int) -> int:
    """Return the sub-second part of ``time_ns`` counted in the given units.

    ``units_per_second`` is 1000 for milliseconds, 1_000_000 for
    microseconds and 1_000_000_000 for nanoseconds.
    """
    if units_per_second <= 0:
        raise ValueError("units_per_second must be positive")
    total_units = _trunc_div(time_ns * units_per_second, NS_PER_SECOND)
    whole_seconds = _trunc_div(time_ns, NS_PER_SECOND)
    return total_units - whole_seconds * units_per_second