import math

import pytest

from gostutil.bignum.decimal import Decimal, max_decimal, new_max_or_min_dec
from gostutil.bignum.words import (
    DecimalBadNumber,
    DecimalError,
    DecimalOverflow,
    DecimalTruncated,
    RoundMode,
    word_buffer_length,
)


def _parse(text):
    try:
        return Decimal.from_string(text), None
    except DecimalError as exc:
        return exc.result, type(exc)


def _shift(dec, n):
    try:
        return dec.shift(n), None
    except DecimalError as exc:
        return exc.result, type(exc)


NINES81 = "9" * 81

FROM_STRING_CASES = [
    ("12345", "12345", None),
    ("12345.", "12345", None),
    ("123.45.", "123.45", DecimalTruncated),
    ("-123.45.", "-123.45", DecimalTruncated),
    (".00012345000098765", "0.00012345000098765", None),
    (".12345000098765", "0.12345000098765", None),
    ("-.000000012345000098765", "-0.000000012345000098765", None),
    ("1234500009876.5", "1234500009876.5", None),
    ("123E5", "12300000", None),
    ("123E-2", "1.23", None),
    ("1e1073741823", NINES81, DecimalOverflow),
    ("-1e1073741823", "-" + NINES81, DecimalOverflow),
    ("1e18446744073709551620", "0", DecimalBadNumber),
    ("1e", "1", DecimalTruncated),
    ("1e001", "10", None),
    ("1e00", "1", None),
    ("1eabc", "1", DecimalTruncated),
    ("1e 1dddd ", "10", DecimalTruncated),
    ("1e - 1", "1", DecimalTruncated),
    ("1e -1", "0.1", None),
    ("0." + "0" * 89, "0." + "0" * 72, DecimalTruncated),
    ("1asf", "1", DecimalTruncated),
    ("1.1.1.1.1", "1.1", DecimalTruncated),
    ("1  1", "1", DecimalTruncated),
    ("1  ", "1", None),
]


@pytest.mark.parametrize("text,expected,error", FROM_STRING_CASES)
def test_from_string(text, expected, error):
    dec, err = _parse(text)
    assert err is error
    assert dec.to_string() == expected


@pytest.mark.parametrize(
    "text,expected,error",
    [
        ("123450000098765", "98765", DecimalOverflow),
        ("123450.000098765", "123450", DecimalTruncated),
    ],
)
def test_from_string_short_buffer(text, expected, error):
    with word_buffer_length(1):
        dec, err = _parse(text)
        assert err is error
        assert dec.to_string() == expected


@pytest.mark.parametrize("text", ["", "   ", "abc", "-", "."])
def test_from_string_bad_number(text):
    with pytest.raises(DecimalBadNumber) as info:
        Decimal.from_string(text)
    assert info.value.result.to_string() == "0"


SHIFT_CASES = [
    ("123.123", 1, "1231.23", None),
    ("123457189.123123456789000", 1, "1234571891.23123456789", None),
    ("123457189.123123456789000", 8, "12345718912312345.6789", None),
    ("123457189.123123456789000", 9, "123457189123123456.789", None),
    ("123457189.123123456789000", 10, "1234571891231234567.89", None),
    ("123457189.123123456789000", 17, "12345718912312345678900000", None),
    ("123457189.123123456789000", 18, "123457189123123456789000000", None),
    ("123457189.123123456789000", 19, "1234571891231234567890000000", None),
    ("123457189.123123456789000", 26, "12345718912312345678900000000000000", None),
    ("123457189.123123456789000", 27, "123457189123123456789000000000000000", None),
    ("123457189.123123456789000", 28, "1234571891231234567890000000000000000", None),
    ("000000000000000000000000123457189.123123456789000", 26, "12345718912312345678900000000000000", None),
    ("00000000123457189.123123456789000", 27, "123457189123123456789000000000000000", None),
    ("00000000000000000123457189.123123456789000", 28, "1234571891231234567890000000000000000", None),
    ("123", 1, "1230", None),
    ("123", 10, "1230000000000", None),
    (".123", 1, "1.23", None),
    (".123", 10, "1230000000", None),
    (".123", 14, "12300000000000", None),
    ("000.000", 1000, "0", None),
    ("000.", 1000, "0", None),
    (".000", 1000, "0", None),
    ("1", 1000, "1", DecimalOverflow),
    ("123.123", -1, "12.3123", None),
    ("123987654321.123456789000", -1, "12398765432.1123456789", None),
    ("123987654321.123456789000", -2, "1239876543.21123456789", None),
    ("123987654321.123456789000", -3, "123987654.321123456789", None),
    ("123987654321.123456789000", -8, "1239.87654321123456789", None),
    ("123987654321.123456789000", -9, "123.987654321123456789", None),
    ("123987654321.123456789000", -10, "12.3987654321123456789", None),
    ("123987654321.123456789000", -11, "1.23987654321123456789", None),
    ("123987654321.123456789000", -12, "0.123987654321123456789", None),
    ("123987654321.123456789000", -13, "0.0123987654321123456789", None),
    ("123987654321.123456789000", -14, "0.00123987654321123456789", None),
    ("00000087654321.123456789000", -14, "0.00000087654321123456789", None),
]


@pytest.mark.parametrize("text,n,expected,error", SHIFT_CASES)
def test_shift(text, n, expected, error):
    dec = Decimal.from_string(text)
    result, err = _shift(dec, n)
    assert err is error
    assert result.to_string() == expected


SHIFT_SHORT_CASES = [
    ("123.123", -2, "1.23123", None),
    ("123.123", -3, "0.123123", None),
    ("123.123", -6, "0.000123123", None),
    ("123.123", -7, "0.0000123123", None),
    ("123.123", -15, "0.000000000000123123", None),
    ("123.123", -16, "0.000000000000012312", DecimalTruncated),
    ("123.123", -17, "0.000000000000001231", DecimalTruncated),
    ("123.123", -18, "0.000000000000000123", DecimalTruncated),
    ("123.123", -19, "0.000000000000000012", DecimalTruncated),
    ("123.123", -20, "0.000000000000000001", DecimalTruncated),
    ("123.123", -21, "0", DecimalTruncated),
    (".000000000123", -1, "0.0000000000123", None),
    (".000000000123", -6, "0.000000000000000123", None),
    (".000000000123", -7, "0.000000000000000012", DecimalTruncated),
    (".000000000123", -8, "0.000000000000000001", DecimalTruncated),
    (".000000000123", -9, "0", DecimalTruncated),
    (".000000000123", 1, "0.00000000123", None),
    (".000000000123", 8, "0.0123", None),
    (".000000000123", 9, "0.123", None),
    (".000000000123", 10, "1.23", None),
    (".000000000123", 17, "12300000", None),
    (".000000000123", 18, "123000000", None),
    (".000000000123", 19, "1230000000", None),
    (".000000000123", 20, "12300000000", None),
    (".000000000123", 21, "123000000000", None),
    (".000000000123", 22, "1230000000000", None),
    (".000000000123", 23, "12300000000000", None),
    (".000000000123", 24, "123000000000000", None),
    (".000000000123", 26, "12300000000000000", None),
    (".000000000123", 27, "123000000000000000", None),
    (".000000000123", 28, "0.000000000123", DecimalOverflow),
    ("123456789.987654321", -1, "12345678.998765432", DecimalTruncated),
    ("123456789.987654321", -2, "1234567.899876543", DecimalTruncated),
    ("123456789.987654321", -8, "1.234567900", DecimalTruncated),
    ("123456789.987654321", -9, "0.123456789987654321", None),
    ("123456789.987654321", -10, "0.012345678998765432", DecimalTruncated),
    ("123456789.987654321", -17, "0.000000001234567900", DecimalTruncated),
    ("123456789.987654321", -18, "0.000000000123456790", DecimalTruncated),
    ("123456789.987654321", -19, "0.000000000012345679", DecimalTruncated),
    ("123456789.987654321", -26, "0.000000000000000001", DecimalTruncated),
    ("123456789.987654321", -27, "0", DecimalTruncated),
    ("123456789.987654321", 1, "1234567900", DecimalTruncated),
    ("123456789.987654321", 2, "12345678999", DecimalTruncated),
    ("123456789.987654321", 4, "1234567899877", DecimalTruncated),
    ("123456789.987654321", 8, "12345678998765432", DecimalTruncated),
    ("123456789.987654321", 9, "123456789987654321", None),
    ("123456789.987654321", 10, "123456789.987654321", DecimalOverflow),
    ("123456789.987654321", 0, "123456789.987654321", None),
]


@pytest.mark.parametrize("text,n,expected,error", SHIFT_SHORT_CASES)
def test_shift_short_buffer(text, n, expected, error):
    with word_buffer_length(2):
        dec = Decimal.from_string(text)
        result, err = _shift(dec, n)
        assert err is error
        assert result.to_string() == expected


def test_shift_leaves_original_untouched():
    dec = Decimal.from_string("123.123")
    shifted = dec.shift(2)
    assert shifted.to_string() == "12312.3"
    assert dec.to_string() == "123.123"


ROUND_INPUTS = [
    ("123456789.987654321", 1),
    ("15.1", 0),
    ("15.5", 0),
    ("15.9", 0),
    ("-15.1", 0),
    ("-15.5", 0),
    ("-15.9", 0),
    ("15.1", 1),
    ("-15.1", 1),
    ("15.17", 1),
    ("15.4", -1),
    ("-15.4", -1),
    ("5.4", -1),
    (".999", 0),
    ("999999999", -9),
]

HALF_EVEN_OUT = ["123456790.0", "15", "16", "16", "-15", "-16", "-16", "15.1",
                 "-15.1", "15.2", "20", "-20", "10", "1", "1000000000"]
TRUNCATE_OUT = ["123456789.9", "15", "15", "15", "-15", "-15", "-15", "15.1",
                "-15.1", "15.1", "10", "-10", "0", "0", "0"]
CEILING_OUT = ["123456790.0", "16", "16", "16", "-16", "-16", "-16", "15.1",
               "-15.1", "15.2", "20", "-20", "10", "1", "1000000000"]


@pytest.mark.parametrize(
    "mode,outputs",
    [
        (RoundMode.HALF_EVEN, HALF_EVEN_OUT),
        (RoundMode.TRUNCATE, TRUNCATE_OUT),
        (RoundMode.CEILING, CEILING_OUT),
    ],
)
def test_round(mode, outputs):
    for (text, scale), expected in zip(ROUND_INPUTS, outputs):
        dec = Decimal.from_string(text)
        assert dec.round(scale, mode).to_string() == expected, (text, scale)


def test_round_sets_result_frac_for_str():
    rounded = Decimal.from_string("1.25").round(1)
    assert rounded.result_frac == 1
    assert str(rounded) == "1.3"


@pytest.mark.parametrize(
    "text,expected",
    [("123.123", "123.123"), ("123.1230", "123.1230"), ("00123.123", "123.123")],
)
def test_to_string(text, expected):
    assert Decimal.from_string(text).to_string() == expected


@pytest.mark.parametrize(
    "value,expected",
    [
        (12345.0, "12345"),
        (123.45, "123.45"),
        (-123.45, "-123.45"),
        (0.00012345000098765, "0.00012345000098765"),
        (1234500009876.5, "1234500009876.5"),
    ],
)
def test_from_float(value, expected):
    assert Decimal.from_float(value).to_string() == expected


@pytest.mark.parametrize("value", [math.nan, math.inf, -math.inf])
def test_from_float_non_finite(value):
    with pytest.raises(DecimalBadNumber):
        Decimal.from_float(value)


TO_FLOAT_CASES = [
    ("12345", "12345"),
    ("123.45", "123.45"),
    ("-123.45", "-123.45"),
    ("0.00012345000098765", "0.00012345000098765"),
    ("1234500009876.5", "1234500009876.5"),
    ("1e39", "1e39"),
    ("1e-39", "1e-39"),
    ("1e00", "1"),
    ("1e001", "10"),
    ("-9223372036854775807", "-9223372036854775807"),
    ("-9223372036854775808", "-9223372036854775808"),
    ("18446744073709551615", "18446744073709551615"),
    ("123456789.987654321", "123456789.987654321"),
    ("1", "1"),
    ("+1", "1"),
    ("1e23", "1e+23"),
    ("1E23", "1e+23"),
    ("100000000000000000000000", "1e+23"),
    ("123456700", "1.234567e+08"),
    ("99999999999999974834176", "9.999999999999997e+22"),
    ("100000000000000000000001", "1.0000000000000001e+23"),
    ("100000000000000008388608", "1.0000000000000001e+23"),
    ("100000000000000016777215", "1.0000000000000001e+23"),
    ("100000000000000016777216", "1.0000000000000003e+23"),
    ("-1", "-1"),
    ("-0.1", "-0.1"),
    ("-0", "-0"),
    ("1e-20", "1e-20"),
    ("625e-3", "0.625"),
    ("0", "0"),
    ("22.222222222222222", "22.22222222222222"),
    ("1.00000000000000011102230246251565404236316680908203125", "1"),
    ("1.00000000000000011102230246251565404236316680908203124", "1"),
    ("1.00000000000000011102230246251565404236316680908203126", "1.0000000000000002"),
    ("1.00000000000000033306690738754696212708950042724609375", "1.0000000000000004"),
    ("1090544144181609348671888949248", "1.0905441441816093e+30"),
    ("1090544144181609348835077142190", "1.0905441441816094e+30"),
]


@pytest.mark.parametrize("text,expected", TO_FLOAT_CASES)
def test_to_float(text, expected):
    assert Decimal.from_string(text).to_float() == float(expected)


MAX_CASES = [
    (1, 1, "0.9"),
    (1, 0, "9"),
    (2, 1, "9.9"),
    (4, 2, "99.99"),
    (6, 3, "999.999"),
    (8, 4, "9999.9999"),
    (10, 5, "99999.99999"),
    (12, 6, "999999.999999"),
    (14, 7, "9999999.9999999"),
    (16, 8, "99999999.99999999"),
    (18, 9, "999999999.999999999"),
    (20, 10, "9999999999.9999999999"),
    (20, 20, "0.99999999999999999999"),
    (20, 0, "99999999999999999999"),
    (40, 20, "99999999999999999999.99999999999999999999"),
]


@pytest.mark.parametrize("prec,frac,expected", MAX_CASES)
def test_max_decimal(prec, frac, expected):
    assert max_decimal(prec, frac).to_string() == expected


@pytest.mark.parametrize(
    "negative,prec,frac,expected",
    [
        (True, 2, 1, "-9.9"),
        (False, 1, 1, "0.9"),
        (True, 1, 0, "-9"),
        (False, 0, 0, "0"),
        (False, 4, 2, "99.99"),
    ],
)
def test_new_max_or_min_dec(negative, prec, frac, expected):
    assert str(new_max_or_min_dec(negative, prec, frac)) == expected


def test_str_rounds_to_result_frac():
    dec = Decimal.from_string("123.456")
    assert str(dec) == "123.456"
    dec.result_frac = 1
    assert str(dec) == "123.5"
    assert dec.to_string() == "123.456"


def test_json_round_trip_and_format():
    dec = Decimal.from_string("1.5")
    text = dec.to_json()
    assert text == (
        '{"DigitsInt":1,"DigitsFrac":1,"ResultFrac":1,"Negative":false,'
        '"WordBuf":[1,500000000,0,0,0,0,0,0,0]}'
    )
    restored = Decimal.from_json(text)
    assert restored == dec
    assert restored.to_string() == "1.5"
    assert restored.java_class_name() == "java.math.BigDecimal"


def test_json_negative_round_trip():
    dec = Decimal.from_string("-98765.4321")
    assert Decimal.from_json(dec.to_json()).to_string() == "-98765.4321"


def test_from_json_rejects_non_object():
    with pytest.raises(ValueError):
        Decimal.from_json("[1, 2]")


def test_copy_is_independent():
    dec = Decimal.from_string("42.5")
    clone = dec.copy()
    clone.word_buf[0] = 7
    assert dec.to_string() == "42.5"
    assert clone.to_string() == "7.5"


def test_from_int_gives_decimal():
    dec = Decimal.from_int(-12345)
    assert dec.to_string() == "-12345"
    assert dec.shift(2).to_string() == "-1234500"