"""printf-style formatting with positional arguments and C length modifiers."""

from __future__ import annotations

import math
import sys
from dataclasses import dataclass
from typing import Any, Optional, Sequence, TextIO

INT_MAX = 2**31 - 1

_INT32_MIN = -(2**31)
_INT32_END = 2**31
_INT64_MIN = -(2**63)
_UINT64_END = 2**64

# Bit widths of the integer types selected by length modifiers.
_LENGTH_BITS = {"hh": 8, "h": 16, "l": 64, "ll": 64, "j": 64, "z": 64, "t": 64}

_INT_TYPES = {"d": "d", "x": "x", "X": "X", "o": "o", "b": "b", "B": "b"}
_ALT_PREFIXES = {"x": "0x", "X": "0X", "b": "0b", "B": "0B"}
_FLOAT_TYPES = "fFeEgGaA"
_HEX_FRACTION_DIGITS = 13


class FormatError(ValueError):
    """Raised for a malformed format string or an argument that does not fit it."""


@dataclass
class _Spec:
    left: bool = False
    sign: str = ""
    zero: bool = False
    alt: bool = False
    width: int = 0
    precision: Optional[int] = None
    type: str = ""


def _is_digit(ch: str) -> bool:
    return len(ch) == 1 and "0" <= ch <= "9"


def _is_integral(value: Any) -> bool:
    return isinstance(value, int)


def _is_arithmetic(value: Any) -> bool:
    return isinstance(value, (int, float))


def _native_bits(value: int) -> int:
    if _INT32_MIN <= value < _INT32_END:
        return 32
    if _INT64_MIN <= value < _UINT64_END:
        return 64
    raise FormatError("number is too big")


def _wrap(value: int, bits: int, signed: bool) -> int:
    value &= (1 << bits) - 1
    if signed and value >= 1 << (bits - 1):
        value -= 1 << bits
    return value


def _convert(arg: Any, target_bits: Optional[int], type_char: str) -> Any:
    """Cast an integer argument the way the length modifier and type ask for."""
    if isinstance(arg, bool):
        return arg if type_char == "s" else int(arg)
    if not isinstance(arg, int):
        return arg
    native = _native_bits(arg)
    is_signed = type_char in ("d", "i")
    target = native if target_bits is None else target_bits
    if target <= 32:
        return _wrap(arg, target, is_signed)
    if is_signed:
        return _wrap(arg, 64, True)
    return _wrap(arg, native, False)


def _pad(prefix: str, body: str, width: int, left: bool, zero: bool) -> str:
    length = len(prefix) + len(body)
    if width <= length:
        return prefix + body
    fill = width - length
    if left:
        return prefix + body + " " * fill
    if zero:
        return prefix + "0" * fill + body
    return " " * fill + prefix + body


def _pad_text(text: str, spec: _Spec) -> str:
    return _pad("", text, spec.width, spec.left, False)


def _format_int(value: int, spec: _Spec) -> str:
    t = spec.type
    if t not in _INT_TYPES:
        raise FormatError("invalid type specifier")
    sign = "-" if value < 0 else spec.sign
    magnitude = abs(value)
    digits = format(magnitude, _INT_TYPES[t])
    prefix = _ALT_PREFIXES.get(t, "") if spec.alt else ""
    if spec.precision is not None:
        digits = "" if spec.precision == 0 and magnitude == 0 else digits.zfill(spec.precision)
    if spec.alt and t == "o" and not digits.startswith("0"):
        digits = "0" + digits
    zero = spec.zero and spec.precision is None
    return _pad(sign + prefix, digits, spec.width, spec.left, zero)


def _hex_float(magnitude: float, precision: Optional[int], alt: bool) -> str:
    mantissa, exponent = magnitude.hex()[2:].split("p")
    lead, fraction = mantissa.split(".")
    fraction = fraction.ljust(_HEX_FRACTION_DIGITS, "0")
    lead_value = int(lead, 16)
    if precision is None:
        digits = fraction.rstrip("0")
    elif precision < _HEX_FRACTION_DIGITS:
        shift = 4 * (_HEX_FRACTION_DIGITS - precision)
        total = (lead_value << (4 * _HEX_FRACTION_DIGITS)) | int(fraction, 16)
        quotient, remainder = divmod(total, 1 << shift)
        half = 1 << (shift - 1)
        if remainder > half or (remainder == half and quotient & 1):
            quotient += 1
        kept_bits = 4 * precision
        lead_value = quotient >> kept_bits
        fraction_value = quotient & ((1 << kept_bits) - 1)
        digits = f"{fraction_value:0{precision}x}" if precision else ""
    else:
        digits = fraction + "0" * (precision - _HEX_FRACTION_DIGITS)
    point = "." if digits or alt else ""
    return f"{lead_value:x}{point}{digits}p{int(exponent):+d}"


def _format_float(value: float, spec: _Spec) -> str:
    t = spec.type
    if t not in _FLOAT_TYPES:
        raise FormatError("invalid type specifier")
    sign = "-" if math.copysign(1.0, value) < 0 else spec.sign
    magnitude = abs(value)
    finite = math.isfinite(value)
    prefix = ""
    if not finite:
        body = "nan" if math.isnan(value) else "inf"
        if t.isupper():
            body = body.upper()
    elif t in "aA":
        prefix = "0x"
        body = _hex_float(magnitude, spec.precision, spec.alt)
        if t == "A":
            prefix, body = prefix.upper(), body.upper()
    else:
        precision = 6 if spec.precision is None else spec.precision
        body = format(magnitude, f"{'#' if spec.alt else ''}.{precision}{t}")
    zero = spec.zero and finite
    return _pad(sign + prefix, body, spec.width, spec.left, zero)


def _format_string(text: str, spec: _Spec) -> str:
    if spec.precision is not None:
        text = text[: spec.precision]
    return _pad_text(text, spec)


def _render(arg: Any, spec: _Spec) -> str:
    t = spec.type
    if arg is None:
        return _pad_text("(nil)" if t == "p" else "(null)", spec)
    if t == "p":
        address = arg if _is_integral(arg) and not isinstance(arg, bool) else id(arg)
        return _pad("0x", f"{address:x}", spec.width, spec.left, False)
    if isinstance(arg, bool):
        if t == "s":
            return _format_string("true" if arg else "false", spec)
        arg = int(arg)
    if isinstance(arg, int):
        return _format_int(arg, spec)
    if isinstance(arg, float):
        return _format_float(arg, spec)
    if isinstance(arg, str):
        if t == "s":
            return _format_string(arg, spec)
        if t == "c" and len(arg) == 1:
            return _pad_text(arg, spec)
        raise FormatError("invalid type specifier")
    if t == "s":
        return _format_string(str(arg), spec)
    raise FormatError("invalid type specifier")


class _Printf:
    """One pass over a format string with its arguments."""

    def __init__(self, format_str: str, args: Sequence[Any]) -> None:
        self._fmt = format_str
        self._args = args
        self._pos = 0
        self._next_arg = 0
        self._mode: Optional[str] = None

    def _peek(self) -> str:
        return self._fmt[self._pos] if self._pos < len(self._fmt) else ""

    def _parse_int(self) -> int:
        start = self._pos
        while _is_digit(self._peek()):
            self._pos += 1
        value = int(self._fmt[start:self._pos])
        if value > INT_MAX:
            raise FormatError("number is too big")
        return value

    def _get_arg(self, index: Optional[int] = None) -> Any:
        if index is None:
            if self._mode == "manual":
                raise FormatError("cannot switch from manual to automatic argument indexing")
            self._mode = "auto"
            position = self._next_arg
            self._next_arg += 1
        else:
            if self._mode == "auto":
                raise FormatError("cannot switch from automatic to manual argument indexing")
            self._mode = "manual"
            position = index - 1
        if not 0 <= position < len(self._args):
            raise FormatError("argument index out of range")
        return self._args[position]

    def _parse_flags(self, spec: _Spec) -> None:
        while True:
            ch = self._peek()
            if ch == "-":
                spec.left = True
            elif ch == "+":
                spec.sign = "+"
            elif ch == "0":
                spec.zero = True
            elif ch == " ":
                if spec.sign != "+":
                    spec.sign = " "
            elif ch == "#":
                spec.alt = True
            else:
                return
            self._pos += 1

    def _star_width(self, spec: _Spec) -> int:
        value = self._get_arg()
        if not _is_integral(value):
            raise FormatError("width is not integer")
        width = int(value)
        if width < 0:
            spec.left = True
            width = -width
        if width > INT_MAX:
            raise FormatError("number is too big")
        return width

    def _star_precision(self) -> int:
        value = self._get_arg()
        if not _is_integral(value):
            raise FormatError("precision is not integer")
        precision = int(value)
        if not -INT_MAX - 1 <= precision <= INT_MAX:
            raise FormatError("number is too big")
        return max(precision, 0)

    def _parse_header(self, spec: _Spec) -> Optional[int]:
        arg_index: Optional[int] = None
        first = self._peek()
        if _is_digit(first):
            value = self._parse_int()
            if self._peek() == "$":
                self._pos += 1
                arg_index = value
            else:
                if first == "0":
                    spec.zero = True
                if value != 0:
                    spec.width = value
                    return arg_index
        self._parse_flags(spec)
        ch = self._peek()
        if _is_digit(ch):
            spec.width = self._parse_int()
        elif ch == "*":
            self._pos += 1
            spec.width = self._star_width(spec)
        return arg_index

    def _parse_length(self) -> tuple[bool, Optional[int]]:
        ch = self._peek()
        if ch in ("h", "l"):
            self._pos += 1
            if self._peek() == ch:
                self._pos += 1
                return True, _LENGTH_BITS[ch * 2]
            return True, _LENGTH_BITS[ch]
        if ch in ("j", "z", "t"):
            self._pos += 1
            return True, _LENGTH_BITS[ch]
        if ch == "L":
            self._pos += 1
            return False, None
        return True, None

    def _conversion(self) -> str:
        spec = _Spec()
        arg_index = self._parse_header(spec)

        if self._peek() == ".":
            self._pos += 1
            ch = self._peek()
            if _is_digit(ch):
                spec.precision = self._parse_int()
            elif ch == "*":
                self._pos += 1
                spec.precision = self._star_precision()
            else:
                spec.precision = 0

        arg = self._get_arg(arg_index)
        if spec.alt and _is_integral(arg) and arg == 0:
            spec.alt = False
        if spec.zero and not _is_arithmetic(arg):
            spec.zero = False

        convert, bits = self._parse_length()
        if self._pos >= len(self._fmt):
            raise FormatError("invalid format string")
        spec.type = self._fmt[self._pos]
        self._pos += 1
        if convert:
            arg = _convert(arg, bits, spec.type)

        if _is_integral(arg) and not isinstance(arg, bool):
            if spec.type in ("i", "u"):
                spec.type = "d"
            elif spec.type == "c":
                if not 0 <= arg <= sys.maxunicode:
                    raise FormatError("character code out of range")
                arg = chr(arg)
        return _render(arg, spec)

    def run(self) -> str:
        out: list[str] = []
        end = len(self._fmt)
        while self._pos < end:
            ch = self._fmt[self._pos]
            self._pos += 1
            if ch != "%":
                out.append(ch)
                continue
            if self._peek() == "%":
                out.append("%")
                self._pos += 1
                continue
            if self._pos >= end:
                raise FormatError("invalid format string")
            out.append(self._conversion())
        return "".join(out)


def sprintf(format_str: str, *args: Any) -> str:
    """Format ``args`` according to a printf-style ``format_str`` and return the text."""
    return _Printf(format_str, args).run()


def fprintf(stream: TextIO, format_str: str, *args: Any) -> int:
    """Write the formatted text to ``stream`` and return the number of characters."""
    text = sprintf(format_str, *args)
    stream.write(text)
    return len(text)


def printf(format_str: str, *args: Any) -> int:
    """Write the formatted text to standard output and return the number of characters."""
    return fprintf(sys.stdout, format_str, *args)