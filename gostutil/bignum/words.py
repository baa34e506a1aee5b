"""Word-level building blocks and errors for the fixed-point decimal type."""

from __future__ import annotations

import enum
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional, Tuple, Type

DIGITS_PER_WORD = 9
MAX_WORD_BUF_LEN = 9
WORD_SIZE = 4
WORD_BASE = 10**9
WORD_MAX = WORD_BASE - 1
DIG_MASK = 10**8
NOT_FIXED_DEC = 31
DIV_FRAC_INCR = 4
MAX_DECIMAL_SCALE = 30
POWERS10 = tuple(10**i for i in range(10))
DIG2BYTES = (0, 1, 1, 2, 2, 3, 3, 4, 4, 4)
FRAC_MAX = tuple(WORD_BASE - 10 ** (DIGITS_PER_WORD - k) for k in range(1, 9))


class DecimalError(ArithmeticError):
    """Base error of decimal operations; ``result`` holds a best-effort value."""

    message = "Decimal Error"

    def __init__(self, message: Optional[str] = None, *, result=None):
        super().__init__(message or self.message)
        self.result = result


class DecimalBadNumber(DecimalError, ValueError):
    """The input is not a valid number."""

    message = "Bad Number"


class DecimalOverflow(DecimalError):
    """The value does not fit."""

    message = "Data Overflow"


class DecimalTruncated(DecimalError):
    """The value was truncated to fit."""

    message = "Data Truncated"


class DecimalDivisionByZero(DecimalError, ZeroDivisionError):
    """Division or modulus by zero."""

    message = "Division by 0"


class RoundMode(enum.IntEnum):
    """Rounding modes; the value is the digit threshold used when rounding."""

    CEILING = 0
    HALF_EVEN = 5
    TRUNCATE = 10


_word_buf_len: ContextVar[int] = ContextVar("word_buf_len", default=MAX_WORD_BUF_LEN)


def current_word_buffer_length() -> int:
    """Number of words a decimal may use in the current context."""
    return _word_buf_len.get()


@contextmanager
def word_buffer_length(n: int) -> Iterator[int]:
    """Temporarily limit the number of words a decimal may use."""
    if not 1 <= n <= MAX_WORD_BUF_LEN:
        raise ValueError(f"word buffer length must be in 1..{MAX_WORD_BUF_LEN}, got {n}")
    token = _word_buf_len.set(n)
    try:
        yield n
    finally:
        _word_buf_len.reset(token)


def _trunc_div(a: int, b: int) -> int:
    q = abs(a) // abs(b)
    return q if (a < 0) == (b < 0) else -q


def digits_to_words(digits: int) -> int:
    """Number of words needed to hold ``digits`` decimal digits."""
    return _trunc_div(digits + DIGITS_PER_WORD - 1, DIGITS_PER_WORD)


def add_words(a: int, b: int, carry: int) -> Tuple[int, int]:
    """Add two words and a carry; return the word sum and the new carry."""
    total = a + b + carry
    if total >= WORD_BASE:
        return total - WORD_BASE, 1
    return total, 0


def add_words2(a: int, b: int, carry: int) -> Tuple[int, int]:
    """Like :func:`add_words`, for a carry that may exceed one."""
    total = a + b + carry
    if total >= WORD_BASE:
        carry = 1
        total -= WORD_BASE
    else:
        carry = 0
    if total >= WORD_BASE:
        total -= WORD_BASE
        carry += 1
    return total, carry


def sub_words(a: int, b: int, carry: int) -> Tuple[int, int]:
    """Subtract ``b`` and a borrow from ``a``; return the word and new borrow."""
    diff = a - b - carry
    if diff < 0:
        return diff + WORD_BASE, 1
    return diff, 0


def sub_words2(a: int, b: int, carry: int) -> Tuple[int, int]:
    """Like :func:`sub_words`; the new borrow may be two."""
    diff = a - b - carry
    if diff < 0:
        carry = 1
        diff += WORD_BASE
    else:
        carry = 0
    if diff < 0:
        diff += WORD_BASE
        carry += 1
    return diff, carry


def fix_word_count(
    words_int: int, words_frac: int
) -> Tuple[int, int, Optional[Type[DecimalError]]]:
    """Fit word counts into the buffer; the third item is the error kind, if any."""
    limit = current_word_buffer_length()
    if words_int + words_frac > limit:
        if words_int > limit:
            return limit, 0, DecimalOverflow
        return words_int, limit - words_int, DecimalTruncated
    return words_int, words_frac, None


def count_leading_zeroes(i: int, word: int) -> int:
    """Leading zeroes of ``word`` when viewed as having ``i + 1`` digits."""
    leading = 0
    while i >= 0 and word < POWERS10[i]:
        i -= 1
        leading += 1
    return leading


def count_trailing_zeroes(i: int, word: int) -> int:
    """Trailing zeroes of ``word`` counted from power ``10**i`` upwards."""
    trailing = 0
    while i < len(POWERS10) and word % POWERS10[i] == 0:
        i += 1
        trailing += 1
    return trailing