"""Memory-comparable binary encoding of decimals and hash keys built on it.

The encoding depends only on the requested precision and fraction digits:

* every full group of nine integer or fraction digits takes four bytes;
* a partial group at either end takes just enough bytes for its digits;
* a negative number has every byte inverted;
* the top bit of the first byte is flipped, so that byte strings of the same
  precision and fraction compare like the numbers they encode.
"""

from __future__ import annotations

from typing import Optional, Type

from gostutil.bignum.decimal import Decimal
from gostutil.bignum.layout import DecimalLayout
from gostutil.bignum.words import (
    DIG2BYTES,
    DIGITS_PER_WORD,
    MAX_DECIMAL_SCALE,
    MAX_WORD_BUF_LEN,
    POWERS10,
    WORD_MAX,
    WORD_SIZE,
    DecimalBadNumber,
    DecimalError,
    DecimalOverflow,
    DecimalTruncated,
    fix_word_count,
)

_MAX_BIN_SIZE = 40


def _quo(a: int, b: int) -> int:
    """Integer division truncated towards zero."""
    q = abs(a) // abs(b)
    return q if (a < 0) == (b < 0) else -q


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - (1 << 32) if value & 0x80000000 else value


def _read_word(buf: bytes, idx: int, size: int) -> int:
    return int.from_bytes(buf[idx : idx + size], "big", signed=True)


def _write_word(buf: bytearray, idx: int, word: int, size: int) -> None:
    buf[idx : idx + size] = (word & ((1 << (8 * size)) - 1)).to_bytes(size, "big")


def decimal_bin_size(precision: int, frac: int) -> int:
    """Number of bytes the binary form of ``precision``/``frac`` takes."""
    digits_int = precision - frac
    words_int = _quo(digits_int, DIGITS_PER_WORD)
    words_frac = _quo(frac, DIGITS_PER_WORD)
    x_int = digits_int - words_int * DIGITS_PER_WORD
    x_frac = frac - words_frac * DIGITS_PER_WORD
    if not (0 <= x_int < len(DIG2BYTES) and 0 <= x_frac < len(DIG2BYTES)):
        raise DecimalBadNumber()
    return (
        words_int * WORD_SIZE
        + DIG2BYTES[x_int]
        + words_frac * WORD_SIZE
        + DIG2BYTES[x_frac]
    )


def to_bin(dec: DecimalLayout, precision: int, frac: int) -> bytes:
    """Encode ``dec`` with ``precision`` digits, ``frac`` of them fractional.

    Raises :class:`DecimalBadNumber` for impossible sizes, and
    :class:`DecimalOverflow` or :class:`DecimalTruncated` with the encoded
    bytes in ``result`` when the value does not fit exactly.
    """
    if (
        precision > DIGITS_PER_WORD * MAX_WORD_BUF_LEN
        or precision < 0
        or frac > MAX_DECIMAL_SCALE
        or frac < 0
        or frac > precision
    ):
        raise DecimalBadNumber(result=b"")
    wb = dec.word_buf
    err: Optional[Type[DecimalError]] = None
    mask = -1 if dec.negative else 0
    digits_int = precision - frac
    words_int = digits_int // DIGITS_PER_WORD
    leading = digits_int - words_int * DIGITS_PER_WORD
    words_frac = frac // DIGITS_PER_WORD
    trailing = frac - words_frac * DIGITS_PER_WORD

    words_frac_from = dec.digits_frac // DIGITS_PER_WORD
    trailing_from = dec.digits_frac - words_frac_from * DIGITS_PER_WORD
    int_size = words_int * WORD_SIZE + DIG2BYTES[leading]
    frac_size = words_frac * WORD_SIZE + DIG2BYTES[trailing]
    frac_size_from = words_frac_from * WORD_SIZE + DIG2BYTES[trailing_from]
    total_size = int_size + frac_size
    if total_size == 0:
        raise DecimalBadNumber(result=b"")
    out = bytearray(total_size)
    idx = 0

    word_idx, digits_int_from = dec.remove_leading_zeros()
    if digits_int_from + frac_size_from == 0:
        mask = 0
        digits_int = 1

    words_int_from = digits_int_from // DIGITS_PER_WORD
    leading_from = digits_int_from - words_int_from * DIGITS_PER_WORD
    int_size_from = words_int_from * WORD_SIZE + DIG2BYTES[leading_from]

    if digits_int < digits_int_from:
        word_idx += words_int_from - words_int
        if leading_from > 0:
            word_idx += 1
        if leading > 0:
            word_idx -= 1
        words_int_from = words_int
        leading_from = leading
        err = DecimalOverflow
    else:
        while int_size > int_size_from:
            int_size -= 1
            out[idx] = mask & 0xFF
            idx += 1

    if frac_size < frac_size_from or (
        frac_size == frac_size_from
        and (trailing <= trailing_from or words_frac <= words_frac_from)
    ):
        if (
            frac_size < frac_size_from
            or (frac_size == frac_size_from and trailing < trailing_from)
            or (frac_size == frac_size_from and words_frac < words_frac_from)
        ):
            err = DecimalTruncated
        words_frac_from = words_frac
        trailing_from = trailing
    elif frac_size > frac_size_from and trailing_from > 0:
        if words_frac == words_frac_from:
            trailing_from = trailing
            frac_size = frac_size_from
        else:
            words_frac_from += 1
            trailing_from = 0

    if leading_from > 0:
        size = DIG2BYTES[leading_from]
        x = (wb[word_idx] % POWERS10[leading_from]) ^ mask
        word_idx += 1
        _write_word(out, idx, x, size)
        idx += size

    stop = word_idx + words_int_from + words_frac_from
    while word_idx < stop:
        _write_word(out, idx, wb[word_idx] ^ mask, WORD_SIZE)
        word_idx += 1
        idx += WORD_SIZE

    if trailing_from > 0:
        size = DIG2BYTES[trailing_from]
        lim = DIGITS_PER_WORD if words_frac_from < words_frac else trailing
        while trailing_from < lim and DIG2BYTES[trailing_from] == size:
            trailing_from += 1
        x = (wb[word_idx] // POWERS10[DIGITS_PER_WORD - trailing_from]) ^ mask
        _write_word(out, idx, x, size)
        idx += size

    while frac_size > frac_size_from and idx < total_size:
        frac_size -= 1
        out[idx] = mask & 0xFF
        idx += 1

    out[0] ^= 0x80
    result = bytes(out)
    if err is not None:
        raise err(result=result)
    return result


def from_bin(data: bytes, precision: int, frac: int) -> Decimal:
    """Decode a decimal written by :func:`to_bin` with the same sizes.

    Raises :class:`DecimalBadNumber` for malformed input, and
    :class:`DecimalOverflow` or :class:`DecimalTruncated` with the decoded
    value in ``result`` when it does not fit the word buffer.
    """
    if not data:
        raise DecimalBadNumber(result=Decimal())
    digits_int = precision - frac
    words_int = _quo(digits_int, DIGITS_PER_WORD)
    leading = digits_int - words_int * DIGITS_PER_WORD
    words_frac = _quo(frac, DIGITS_PER_WORD)
    trailing = frac - words_frac * DIGITS_PER_WORD
    words_int_to = words_int + (1 if leading > 0 else 0)
    words_frac_to = words_frac + (1 if trailing > 0 else 0)

    mask = 0 if data[0] & 0x80 else -1
    bin_size = decimal_bin_size(precision, frac)
    if bin_size < 0 or bin_size > _MAX_BIN_SIZE:
        raise DecimalBadNumber(result=Decimal())
    buf = bytearray(data[:bin_size]).ljust(bin_size, b"\0")
    buf[0] ^= 0x80
    idx = 0

    old_words_int_to = words_int_to
    words_int_to, words_frac_to, err = fix_word_count(words_int_to, words_frac_to)
    if err is not None:
        if words_int_to < old_words_int_to:
            idx += DIG2BYTES[leading] + (words_int - words_int_to) * WORD_SIZE
        else:
            trailing = 0
            words_frac = words_frac_to

    dec = Decimal()
    wb = dec.word_buf
    dec.negative = mask != 0
    dec.digits_int = words_int * DIGITS_PER_WORD + leading
    dec.digits_frac = words_frac * DIGITS_PER_WORD + trailing

    word_idx = 0
    if leading > 0:
        size = DIG2BYTES[leading]
        value = _read_word(buf, idx, size) ^ mask
        idx += size
        wb[word_idx] = value
        if value < 0 or value >= POWERS10[leading + 1]:
            raise DecimalBadNumber(result=Decimal())
        if word_idx > 0 or value != 0:
            word_idx += 1
        else:
            dec.digits_int -= leading

    stop = idx + words_int * WORD_SIZE
    while idx < stop:
        value = _read_word(buf, idx, WORD_SIZE) ^ mask
        wb[word_idx] = value
        if value < 0 or value > WORD_MAX:
            raise DecimalBadNumber(result=Decimal())
        if word_idx > 0 or value != 0:
            word_idx += 1
        else:
            dec.digits_int -= DIGITS_PER_WORD
        idx += WORD_SIZE

    stop = idx + words_frac * WORD_SIZE
    while idx < stop:
        value = _read_word(buf, idx, WORD_SIZE) ^ mask
        wb[word_idx] = value
        if value < 0 or value > WORD_MAX:
            raise DecimalBadNumber(result=Decimal())
        word_idx += 1
        idx += WORD_SIZE

    if trailing > 0:
        size = DIG2BYTES[trailing]
        x = _read_word(buf, idx, size)
        value = _to_int32((x ^ mask) * POWERS10[DIGITS_PER_WORD - trailing])
        wb[word_idx] = value
        if value < 0 or value > WORD_MAX:
            raise DecimalBadNumber(result=Decimal())

    if dec.digits_int == 0 and dec.digits_frac == 0:
        dec = Decimal()
    dec.result_frac = frac
    if err is not None:
        raise err(result=dec)
    return dec


def to_hash_key(dec: DecimalLayout) -> bytes:
    """A key that is equal for decimals that compare equal.

    Leading and trailing zeros are dropped before encoding, and the number of
    fraction digits is appended as the last byte.
    """
    _, digits_int = dec.remove_leading_zeros()
    _, digits_frac = dec.remove_trailing_zeros()
    prec = digits_int + digits_frac or 1
    try:
        buf = to_bin(dec, prec, digits_frac)
    except DecimalTruncated as exc:
        # Dropping trailing zeros shortens the fraction; that loses nothing.
        buf = exc.result
    except DecimalError as exc:
        raise type(exc)(result=exc.result + bytes([digits_frac])) from exc
    return buf + bytes([digits_frac])


def decimal_peak(data: bytes) -> int:
    """Length of an encoded decimal prefixed by its precision and frac bytes."""
    if len(data) < 3:
        raise DecimalBadNumber()
    return decimal_bin_size(data[0], data[1]) + 2