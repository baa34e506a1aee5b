"""Word-buffer layout of the fixed-point decimal and its basic conversions."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Tuple

from gostutil.bignum.words import (
    DIGITS_PER_WORD,
    MAX_WORD_BUF_LEN,
    WORD_BASE,
    DecimalOverflow,
    DecimalTruncated,
    count_leading_zeroes,
    count_trailing_zeroes,
    digits_to_words,
)

_MAX_INT64 = 2**63 - 1
_MIN_INT64 = -(2**63)
_MAX_UINT64 = 2**64 - 1
# The lowest partial value that can still take another word without leaving
# the signed 64-bit range (division truncated towards zero).
_MIN_INT64_DIV_BASE = -(2**63 // WORD_BASE)
_MAX_UINT64_DIV_BASE = _MAX_UINT64 // WORD_BASE


def _word_digits(word: int) -> str:
    return f"{word % WORD_BASE:0{DIGITS_PER_WORD}d}"


@dataclass
class DecimalLayout:
    """A decimal number stored as base-10**9 words.

    ``digits_int`` and ``digits_frac`` count the decimal digits before and
    after the point; ``word_buf`` holds the integer words followed by the
    fraction words, most significant first.
    """

    digits_int: int = 0
    digits_frac: int = 0
    result_frac: int = 0
    negative: bool = False
    word_buf: List[int] = field(default_factory=lambda: [0] * MAX_WORD_BUF_LEN)

    def __post_init__(self) -> None:
        words = list(self.word_buf)
        if len(words) > MAX_WORD_BUF_LEN:
            raise ValueError(
                f"a decimal holds at most {MAX_WORD_BUF_LEN} words, got {len(words)}"
            )
        words.extend([0] * (MAX_WORD_BUF_LEN - len(words)))
        self.word_buf = words

    def copy(self) -> "DecimalLayout":
        """Return an independent copy."""
        return DecimalLayout(
            digits_int=self.digits_int,
            digits_frac=self.digits_frac,
            result_frac=self.result_frac,
            negative=self.negative,
            word_buf=list(self.word_buf),
        )

    def remove_leading_zeros(self) -> Tuple[int, int]:
        """Return the index of the first significant word and the integer digits left."""
        digits_int = self.digits_int
        word_idx = 0
        if digits_int <= 0:
            return word_idx, 0
        step = (digits_int - 1) % DIGITS_PER_WORD + 1
        while digits_int > 0 and self.word_buf[word_idx] == 0:
            digits_int -= step
            step = DIGITS_PER_WORD
            word_idx += 1
        if digits_int > 0:
            digits_int -= count_leading_zeroes(
                (digits_int - 1) % DIGITS_PER_WORD, self.word_buf[word_idx]
            )
        else:
            digits_int = 0
        return word_idx, digits_int

    def remove_trailing_zeros(self) -> Tuple[int, int]:
        """Return the end index of the significant words and the fraction digits left."""
        digits_frac = self.digits_frac
        last_word_idx = digits_to_words(self.digits_int) + digits_to_words(digits_frac)
        if digits_frac <= 0:
            return last_word_idx, 0
        step = (digits_frac - 1) % DIGITS_PER_WORD + 1
        while digits_frac > 0 and self.word_buf[last_word_idx - 1] == 0:
            digits_frac -= step
            step = DIGITS_PER_WORD
            last_word_idx -= 1
        if digits_frac > 0:
            digits_frac -= count_trailing_zeroes(
                DIGITS_PER_WORD - (digits_frac - 1) % DIGITS_PER_WORD,
                self.word_buf[last_word_idx - 1],
            )
        else:
            digits_frac = 0
        return last_word_idx, digits_frac

    def digit_bounds(self) -> Tuple[int, int]:
        """Return the digit index of the first non-zero digit and one past the last."""
        buf_len = digits_to_words(self.digits_int) + digits_to_words(self.digits_frac)
        buf_beg = 0
        while buf_beg < buf_len and self.word_buf[buf_beg] == 0:
            buf_beg += 1
        if buf_beg >= buf_len:
            return 0, 0

        if buf_beg == 0 and self.digits_int > 0:
            i = (self.digits_int - 1) % DIGITS_PER_WORD
            start = DIGITS_PER_WORD - i - 1
        else:
            i = DIGITS_PER_WORD - 1
            start = buf_beg * DIGITS_PER_WORD
        start += count_leading_zeroes(i, self.word_buf[buf_beg])

        buf_end = buf_len - 1
        while buf_end > buf_beg and self.word_buf[buf_end] == 0:
            buf_end -= 1
        if buf_end == buf_len - 1 and self.digits_frac > 0:
            i = (self.digits_frac - 1) % DIGITS_PER_WORD + 1
            end = buf_end * DIGITS_PER_WORD + i
            i = DIGITS_PER_WORD - i + 1
        else:
            end = (buf_end + 1) * DIGITS_PER_WORD
            i = 1
        end -= count_trailing_zeroes(i, self.word_buf[buf_end])
        return start, end

    def to_string(self) -> str:
        """Printable form without rounding; leading integer zeros are dropped."""
        digits_frac = self.digits_frac
        word_start, digits_int = self.remove_leading_zeros()
        if digits_int + digits_frac == 0:
            digits_int, word_start = 1, 0

        int_words = digits_to_words(digits_int)
        if digits_int > 0:
            chunk = "".join(
                _word_digits(w)
                for w in self.word_buf[word_start : word_start + int_words]
            )
            int_part = chunk[-digits_int:]
        else:
            int_part = "0"

        parts = ["-" if self.negative else "", int_part]
        if digits_frac > 0:
            frac_start = word_start + int_words
            chunk = "".join(
                _word_digits(w)
                for w in self.word_buf[
                    frac_start : frac_start + digits_to_words(digits_frac)
                ]
            )
            parts.append("." + chunk[:digits_frac].ljust(digits_frac, "0"))
        return "".join(parts)

    def is_zero(self) -> bool:
        """Return whether every word is zero."""
        return not any(self.word_buf)

    def precision_and_frac(self) -> Tuple[int, int]:
        """Return the significant precision and the fraction digit count."""
        frac = self.digits_frac
        _, digits_int = self.remove_leading_zeros()
        precision = digits_int + frac
        return (precision or 1), frac

    @classmethod
    def from_int(cls, value: int) -> "DecimalLayout":
        """Build a layout from a signed 64-bit integer."""
        if not _MIN_INT64 <= value <= _MAX_INT64:
            raise OverflowError(f"{value} does not fit in a signed 64-bit integer")
        layout = cls._from_magnitude(abs(value))
        layout.negative = value < 0
        return layout

    @classmethod
    def from_uint(cls, value: int) -> "DecimalLayout":
        """Build a layout from an unsigned 64-bit integer."""
        if not 0 <= value <= _MAX_UINT64:
            raise OverflowError(f"{value} does not fit in an unsigned 64-bit integer")
        return cls._from_magnitude(value)

    @classmethod
    def _from_magnitude(cls, value: int) -> "DecimalLayout":
        words: List[int] = []
        x = value
        while True:
            x, word = divmod(x, WORD_BASE)
            words.append(word)
            if x == 0:
                break
        words.reverse()
        return cls(digits_int=len(words) * DIGITS_PER_WORD, word_buf=words)

    def _frac_words_clean(self, word_idx: int) -> bool:
        remaining = self.digits_frac
        while remaining > 0 and word_idx < len(self.word_buf):
            if self.word_buf[word_idx] != 0:
                return False
            word_idx += 1
            remaining -= DIGITS_PER_WORD
        return True

    def to_int(self) -> int:
        """Return the integer part as a signed 64-bit value.

        Raises :class:`DecimalOverflow` (result clamped to the int64 range) or
        :class:`DecimalTruncated` (result is the integer part) as needed.
        """
        x = 0
        word_idx = 0
        remaining = self.digits_int
        while remaining > 0:
            y = x
            # Accumulate the negated value: the negative range is one larger.
            x = x * WORD_BASE - self.word_buf[word_idx]
            word_idx += 1
            if y < _MIN_INT64_DIV_BASE or x < _MIN_INT64:
                raise DecimalOverflow(
                    result=_MIN_INT64 if self.negative else _MAX_INT64
                )
            remaining -= DIGITS_PER_WORD
        if not self.negative and x == _MIN_INT64:
            raise DecimalOverflow(result=_MAX_INT64)
        if not self.negative:
            x = -x
        if not self._frac_words_clean(word_idx):
            raise DecimalTruncated(result=x)
        return x

    def to_uint(self) -> int:
        """Return the integer part as an unsigned 64-bit value.

        Raises :class:`DecimalOverflow` for negative or too large values and
        :class:`DecimalTruncated` when a fraction is dropped.
        """
        if self.negative:
            raise DecimalOverflow(result=0)
        x = 0
        word_idx = 0
        remaining = self.digits_int
        while remaining > 0:
            y = x
            x = x * WORD_BASE + self.word_buf[word_idx]
            word_idx += 1
            if y > _MAX_UINT64_DIV_BASE or x > _MAX_UINT64:
                raise DecimalOverflow(result=_MAX_UINT64)
            remaining -= DIGITS_PER_WORD
        if not self._frac_words_clean(word_idx):
            raise DecimalTruncated(result=x)
        return x