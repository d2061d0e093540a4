import io

import pytest

from magneto.fmt.printf import FormatError, fprintf, printf, sprintf


def test_documented_examples():
    assert sprintf("The answer is %d", 42) == "The answer is 42"
    assert sprintf("Elapsed time: %.2f seconds", 1.23) == "Elapsed time: 1.23 seconds"
    assert sprintf("Don't %s!", "panic") == "Don't panic!"


@pytest.mark.parametrize(
    "fmt, value",
    [
        ("%d", 42),
        ("%5d", -7),
        ("%-5d|", 3),
        ("%05d", -42),
        ("%+d", 3),
        ("% d", 3),
        ("%x", 255),
        ("%#X", 255),
        ("%.3d", 7),
        ("%8.3f", 3.14159),
        ("%e", 12345.678),
        ("%G", 0.00001234),
        ("%#g", 1.0),
        ("%s", "text"),
        ("%.2s", "abcdef"),
        ("%10s", "ab"),
        ("%-10s|", "ab"),
        ("%c", 65),
        ("%i", -5),
        ("%o", 8),
        ("%u", 7),
        ("%d%%", 5),
    ],
)
def test_matches_c_style_formatting(fmt, value):
    assert sprintf(fmt, value) == fmt % value


def test_unsigned_conversion_of_negative_int():
    assert sprintf("%u", -42) == "4294967254"
    assert int(sprintf("%x", -1), 16) == 2**32 - 1


def test_long_long_stays_signed():
    assert sprintf("%lld", -42) == str(-42)


@pytest.mark.parametrize("n", [257, -129, 300, 5])
def test_hh_truncates_to_signed_char(n):
    value = int(sprintf("%hhd", n))
    assert -128 <= value < 128
    assert (value - n) % 256 == 0


@pytest.mark.parametrize("n", [70000, -1, 12])
def test_h_unsigned_truncates_to_short(n):
    assert int(sprintf("%hu", n)) == n % 2**16


def test_positional_arguments():
    assert sprintf("%2$s %1$s", "a", "b") == "b a"


def test_mixing_manual_and_automatic_indexing_fails():
    with pytest.raises(FormatError, match="cannot switch"):
        sprintf("%1$s %s", "a", "b")
    with pytest.raises(FormatError, match="cannot switch"):
        sprintf("%s %1$s", "a", "b")


def test_star_width_and_precision():
    assert sprintf("%*d", 5, 42) == "%5d" % 42
    assert sprintf("%*d|", -5, 42) == "%-5d|" % 42
    assert sprintf("%.*f", 2, 3.14159) == "%.2f" % 3.14159


def test_star_arguments_must_be_integers():
    with pytest.raises(FormatError, match="width is not integer"):
        sprintf("%*d", "a", 1)
    with pytest.raises(FormatError, match="precision is not integer"):
        sprintf("%.*f", 1.5, 2.0)


def test_missing_argument():
    with pytest.raises(FormatError, match="argument index out of range"):
        sprintf("%d %d", 1)


def test_incomplete_conversion():
    with pytest.raises(FormatError, match="invalid format string"):
        sprintf("abc %")
    with pytest.raises(FormatError, match="invalid format string"):
        sprintf("%5", 1)


def test_width_too_big():
    with pytest.raises(FormatError, match="number is too big"):
        sprintf("%99999999999d", 1)


def test_null_arguments():
    assert sprintf("%s", None) == "(null)"
    assert sprintf("%p", None) == "(nil)"


def test_bool_arguments():
    assert sprintf("%s", True) == "true"
    assert sprintf("%d", True) == "%d" % True


@pytest.mark.parametrize("x", [1.0, 0.1, -2.5, 0.0, 1e-310, 123456.789])
def test_hex_float_round_trip(x):
    text = sprintf("%a", x)
    assert float.fromhex(text) == x
    assert sprintf("%A", x) == text.upper()


def test_hex_float_precision_rounds_close():
    assert abs(float.fromhex(sprintf("%.2a", 0.1)) - 0.1) < 2**-8


def test_alt_flag_dropped_for_zero():
    assert sprintf("%#x", 0) == sprintf("%x", 0)


def test_zero_flag_ignored_for_strings():
    assert sprintf("%05s", "ab") == sprintf("%5s", "ab")


def test_type_mismatch_raises():
    with pytest.raises(FormatError, match="invalid type specifier"):
        sprintf("%d", "x")
    with pytest.raises(FormatError, match="invalid type specifier"):
        sprintf("%f", 3)


def test_fprintf_writes_and_counts():
    stream = io.StringIO()
    count = fprintf(stream, "Don't %s!", "panic")
    assert stream.getvalue() == "Don't panic!"
    assert count == len(stream.getvalue())


def test_printf_writes_to_stdout(capsys):
    count = printf("The answer is %d\n", 42)
    out = capsys.readouterr().out
    assert out == "The answer is 42\n"
    assert count == len(out)