import pytest

from gostutil.bignum.codec import (
    decimal_bin_size,
    decimal_peak,
    from_bin,
    to_bin,
    to_hash_key,
)
from gostutil.bignum.decimal import Decimal
from gostutil.bignum.words import (
    DecimalBadNumber,
    DecimalError,
    DecimalOverflow,
    DecimalTruncated,
)


def _to_bin(dec, precision, frac):
    try:
        return to_bin(dec, precision, frac), None
    except DecimalError as exc:
        return exc.result, type(exc)


BIN_CASES = [
    ("-10.55", 4, 2, "-10.55", None),
    ("0.0123456789012345678912345", 30, 25, "0.0123456789012345678912345", None),
    ("12345", 5, 0, "12345", None),
    ("12345", 10, 3, "12345.000", None),
    ("123.45", 10, 3, "123.450", None),
    ("-123.45", 20, 10, "-123.4500000000", None),
    (".00012345000098765", 15, 14, "0.00012345000098", DecimalTruncated),
    (".00012345000098765", 22, 20, "0.00012345000098765000", None),
    (".12345000098765", 30, 20, "0.12345000098765000000", None),
    ("-.000000012345000098765", 30, 20, "-0.00000001234500009876", DecimalTruncated),
    ("1234500009876.5", 30, 5, "1234500009876.50000", None),
    ("111111111.11", 10, 2, "11111111.11", DecimalOverflow),
    ("000000000.01", 7, 3, "0.010", None),
    ("123.4", 10, 2, "123.40", None),
    ("1000", 3, 0, "0", DecimalOverflow),
    ("0.1", 1, 1, "0.1", None),
    ("0.100", 1, 1, "0.1", DecimalTruncated),
    ("0.1000", 1, 1, "0.1", DecimalTruncated),
    ("0.10000", 1, 1, "0.1", DecimalTruncated),
    ("0.100000", 1, 1, "0.1", DecimalTruncated),
    ("0.1000000", 1, 1, "0.1", DecimalTruncated),
    ("0.10", 1, 1, "0.1", DecimalTruncated),
    (
        "0000000000000000000000000000000000000000000.000000000000123000000000000000",
        15, 15, "0.000000000000123", DecimalTruncated,
    ),
    ("00000000000000000000000000000.00000000000012300", 15, 15, "0.000000000000123", DecimalTruncated),
    (
        "0000000000000000000000000000000000000000000.0000000000001234000000000000000",
        16, 16, "0.0000000000001234", DecimalTruncated,
    ),
    ("00000000000000000000000000000.000000000000123400", 16, 16, "0.0000000000001234", DecimalTruncated),
    ("0.1", 2, 2, "0.10", None),
    ("0.10", 3, 3, "0.100", None),
    ("0.1", 3, 1, "0.1", None),
    ("0.0000000000001234", 32, 17, "0.00000000000012340", None),
    ("0.0000000000001234", 20, 20, "0.00000000000012340000", None),
]


@pytest.mark.parametrize("text,precision,frac,expected,error", BIN_CASES)
def test_to_bin_from_bin(text, precision, frac, expected, error):
    dec = Decimal.from_string(text)
    buf, err = _to_bin(dec, precision, frac)
    assert err is error
    assert len(buf) == decimal_bin_size(precision, frac)
    assert from_bin(buf, precision, frac).to_string() == expected


@pytest.mark.parametrize("precision,frac", [(82, 1), (-1, 1), (10, 31), (10, -1)])
def test_to_bin_bad_sizes(precision, frac):
    with pytest.raises(DecimalBadNumber):
        to_bin(Decimal.from_int(1), precision, frac)


def test_to_bin_documented_layout():
    dec = Decimal.from_string("1234567890.1234")
    assert to_bin(dec, 14, 4) == bytes.fromhex("810DFB38D204D2")
    neg = Decimal.from_string("-1234567890.1234")
    assert to_bin(neg, 14, 4) == bytes.fromhex("7EF204C72DFB2D")


def test_from_bin_negative_layout():
    assert from_bin(bytes.fromhex("7EF204C72DFB2D"), 14, 4).to_string() == "-1234567890.1234"


def test_bin_ordering_matches_values():
    values = ["-123.45", "-1", "0", "0.5", "1", "99.99"]
    encoded = [to_bin(Decimal.from_string(v), 10, 2) for v in values]
    assert encoded == sorted(encoded)


def test_from_bin_empty():
    with pytest.raises(DecimalBadNumber):
        from_bin(b"", 5, 0)


def test_from_bin_invalid_word():
    with pytest.raises(DecimalBadNumber):
        from_bin(b"\xff\xff\xff\xff", 9, 0)


def test_decimal_bin_size_values():
    assert decimal_bin_size(14, 4) == 7
    assert decimal_bin_size(9, 0) == 4
    assert decimal_bin_size(1, 1) == 1
    with pytest.raises(DecimalBadNumber):
        decimal_bin_size(1, 2)


def test_decimal_peak():
    assert decimal_peak(bytes([14, 4, 0])) == 9
    with pytest.raises(DecimalBadNumber):
        decimal_peak(b"\x01\x00")


HASH_GROUPS = [
    ["1.1", "1.1000", "1.1000000", "1.10000000000", "01.1", "0001.1", "001.1000000"],
    ["-1.1", "-1.1000", "-1.1000000", "-1.10000000000", "-01.1", "-0001.1", "-001.1000000"],
    [".1", "0.1", "0.10", "000000.1", ".10000", "0000.10000", "000000000000000000.1"],
    ["0", "0000", ".0", ".00000", "00000.00000", "-0", "-0000", "-.0", "-.00000", "-00000.00000"],
    [".123456789123456789", ".1234567891234567890", ".12345678912345678900",
     ".123456789123456789000", ".1234567891234567890000", "0.123456789123456789",
     ".1234567891234567890000000000", "0000000.123456789123456789000"],
    ["12345", "012345", "0012345", "0000012345", "0000000012345", "00000000000012345",
     "12345.", "12345.00", "12345.000000000", "000012345.0000"],
    ["123E5", "12300000", "00123E5", "000000123E5", "12300000.00000000"],
    ["123E-2", "1.23", "00000001.23", "1.2300000000000000", "000000001.23000000000000"],
]


@pytest.mark.parametrize("numbers", HASH_GROUPS)
def test_hash_keys_equal(numbers):
    keys = [to_hash_key(Decimal.from_string(n)) for n in numbers]
    assert all(key == keys[0] for key in keys)


BIN_GROUPS = [
    (HASH_GROUPS[0], ["1.1", "0001.1", "01.1"]),
    (HASH_GROUPS[1], ["-1.1", "-0001.1", "-01.1"]),
    ([".1", "0.1", "000000.1", ".10000", "0000.10000", "000000000000000000.1"],
     [".1", "0.1", "000000.1", "00.1"]),
    (HASH_GROUPS[3], ["0", "0000", "00", "-0", "-00", "-000000"]),
    (HASH_GROUPS[4], [".123456789123456789", "0.123456789123456789",
                      "0000.123456789123456789", "0000000.123456789123456789"]),
    (HASH_GROUPS[5], ["12345", "012345", "000012345", "000000000000012345"]),
    (HASH_GROUPS[6], ["12300000", "123E5", "00123E5", "0000000000123E5"]),
    (HASH_GROUPS[7], ["123E-2", "1.23", "000001.23", "0000000000001.23"]),
]


@pytest.mark.parametrize("hash_numbers,bin_numbers", BIN_GROUPS)
def test_hash_key_matches_bin(hash_numbers, bin_numbers):
    keys = [to_hash_key(Decimal.from_string(n))[:-1] for n in hash_numbers]
    for n in bin_numbers:
        dec = Decimal.from_string(n)
        prec, frac = dec.precision_and_frac()
        keys.append(to_bin(dec, prec, frac))
    assert all(key == keys[0] for key in keys)


def test_hash_key_differs_for_different_values():
    assert to_hash_key(Decimal.from_string("1.1")) != to_hash_key(Decimal.from_string("1.2"))
    assert to_hash_key(Decimal.from_string("1.23"))[-1] == 2