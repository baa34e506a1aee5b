"""The fixed-point decimal type: parsing, shifting, rounding and conversions."""

from __future__ import annotations

import json
import logging
import math
from decimal import Decimal as _StdDecimal
from typing import Optional, Type, Union

from gostutil.bignum.helper import str_to_int
from gostutil.bignum.layout import DecimalLayout
from gostutil.bignum.words import (
    DIG_MASK,
    DIGITS_PER_WORD,
    FRAC_MAX,
    MAX_WORD_BUF_LEN,
    POWERS10,
    WORD_BASE,
    WORD_MAX,
    DecimalBadNumber,
    DecimalError,
    DecimalOverflow,
    DecimalTruncated,
    RoundMode,
    add_words,
    current_word_buffer_length,
    digits_to_words,
    fix_word_count,
)

_log = logging.getLogger(__name__)

_MAX_EXPONENT = (2**31 - 1) // 2
_MIN_EXPONENT = -(2**31) // 2
_POW10_OFF = 81
_POW10_TABLE = tuple(float(f"1e{n}") for n in range(-_POW10_OFF, _POW10_OFF + 1))

_ErrorKind = Optional[Type[DecimalError]]


def _quo(a: int, b: int) -> int:
    """Integer division truncated towards zero."""
    q = abs(a) // abs(b)
    return q if (a < 0) == (b < 0) else -q


def _is_digit(ch: str) -> bool:
    return "0" <= ch <= "9"


def _round_half_away(x: float) -> float:
    if math.isinf(x) or math.isnan(x):
        return x
    t = float(math.trunc(x))
    if abs(x - t) >= 0.5:
        t += math.copysign(1.0, x)
    return math.copysign(t, x) if t == 0.0 else t


def _format_shortest(value: float) -> str:
    """Shortest round-trip text of ``value`` in %g style."""
    sign, digits, exponent = _StdDecimal(repr(value)).normalize().as_tuple()
    text = "".join(str(d) for d in digits)
    prefix = "-" if sign else ""
    if text == "0":
        return prefix + "0"
    nd = len(text)
    dp = nd + exponent
    exp = dp - 1
    if exp < -4 or exp >= 6:
        mantissa = text[0] + ("." + text[1:] if nd > 1 else "")
        return f"{prefix}{mantissa}e{'-' if exp < 0 else '+'}{abs(exp):02d}"
    if dp <= 0:
        return f"{prefix}0.{'0' * -dp}{text}"
    if dp >= nd:
        return prefix + text + "0" * (dp - nd)
    return f"{prefix}{text[:dp]}.{text[dp:]}"


class Decimal(DecimalLayout):
    """A signed fixed-point decimal of up to 81 digits."""

    def copy(self) -> "Decimal":
        """Return an independent copy."""
        return type(self)(
            digits_int=self.digits_int,
            digits_frac=self.digits_frac,
            result_frac=self.result_frac,
            negative=self.negative,
            word_buf=list(self.word_buf),
        )

    def java_class_name(self) -> str:
        """Name of the matching Java class."""
        return "java.math.BigDecimal"

    def _set_zero(self) -> None:
        self.digits_int = 0
        self.digits_frac = 0
        self.result_frac = 0
        self.negative = False
        self.word_buf = [0] * MAX_WORD_BUF_LEN

    def _fill_max(self, precision: int, frac: int) -> None:
        digits_int = precision - frac
        self.negative = False
        self.digits_int = digits_int
        idx = 0
        if digits_int > 0:
            first = digits_int % DIGITS_PER_WORD
            if first > 0:
                self.word_buf[idx] = POWERS10[first] - 1
                idx += 1
            for _ in range(digits_int // DIGITS_PER_WORD):
                self.word_buf[idx] = WORD_MAX
                idx += 1
        self.digits_frac = frac
        if frac > 0:
            last = frac % DIGITS_PER_WORD
            for _ in range(frac // DIGITS_PER_WORD):
                self.word_buf[idx] = WORD_MAX
                idx += 1
            if last > 0:
                self.word_buf[idx] = FRAC_MAX[last - 1]

    # ------------------------------------------------------------------ parsing

    @classmethod
    def from_string(cls, text: str) -> "Decimal":
        """Parse a decimal; on a problem the error's ``result`` holds the value read."""
        dec = cls()
        error = dec._parse(text)
        if error is not None:
            raise error(result=dec)
        return dec

    @classmethod
    def from_float(cls, value: float) -> "Decimal":
        """Build a decimal from the shortest text form of ``value``."""
        if not math.isfinite(value):
            raise DecimalBadNumber(result=cls())
        return cls.from_string(_format_shortest(value))

    def _parse(self, text: str) -> _ErrorKind:
        limit = current_word_buffer_length()
        s = text.lstrip(" \t")
        if not s:
            self._set_zero()
            return DecimalBadNumber
        if s[0] == "-":
            self.negative = True
            s = s[1:]
        elif s[0] == "+":
            s = s[1:]
        n = len(s)
        str_idx = 0
        while str_idx < n and _is_digit(s[str_idx]):
            str_idx += 1
        digits_int = str_idx
        if str_idx < n and s[str_idx] == ".":
            end_idx = str_idx + 1
            while end_idx < n and _is_digit(s[end_idx]):
                end_idx += 1
            digits_frac = end_idx - str_idx - 1
        else:
            digits_frac = 0
            end_idx = str_idx
        if digits_int + digits_frac == 0:
            self._set_zero()
            return DecimalBadNumber

        words_int, words_frac, err = fix_word_count(
            digits_to_words(digits_int), digits_to_words(digits_frac)
        )
        if err is not None:
            digits_frac = words_frac * DIGITS_PER_WORD
            if err is DecimalOverflow:
                digits_int = words_int * DIGITS_PER_WORD
        self.digits_int = digits_int
        self.digits_frac = digits_frac

        int_text = s[str_idx - digits_int : str_idx].rjust(
            words_int * DIGITS_PER_WORD, "0"
        )
        for k in range(words_int):
            chunk = int_text[k * DIGITS_PER_WORD : (k + 1) * DIGITS_PER_WORD]
            self.word_buf[k] = int(chunk)
        frac_words = digits_to_words(digits_frac)
        frac_text = s[str_idx + 1 : str_idx + 1 + digits_frac].ljust(
            frac_words * DIGITS_PER_WORD, "0"
        )
        for k in range(frac_words):
            chunk = frac_text[k * DIGITS_PER_WORD : (k + 1) * DIGITS_PER_WORD]
            self.word_buf[words_int + k] = int(chunk)

        if end_idx < n:
            if s[end_idx] in "eE":
                try:
                    exponent = str_to_int(s[end_idx + 1 :])
                except DecimalError as exc:
                    exponent = exc.result
                    err = type(exc)
                    if err is not DecimalTruncated:
                        self._set_zero()
                if exponent > _MAX_EXPONENT:
                    negative = self.negative
                    self._fill_max(limit * DIGITS_PER_WORD, 0)
                    self.negative = negative
                    err = DecimalOverflow
                if exponent < _MIN_EXPONENT and err is not DecimalOverflow:
                    self._set_zero()
                    err = DecimalTruncated
                if err is not DecimalOverflow:
                    shift_err = self._shift_inplace(exponent)
                    if shift_err is not None:
                        if shift_err is DecimalOverflow:
                            negative = self.negative
                            self._fill_max(limit * DIGITS_PER_WORD, 0)
                            self.negative = negative
                        err = shift_err
            elif s[end_idx:].strip():
                err = DecimalTruncated

        if not any(self.word_buf[:limit]):
            self.negative = False
        self.result_frac = self.digits_frac
        return err

    # ------------------------------------------------------------------ shifting

    def shift(self, shift: int) -> "Decimal":
        """Return this value multiplied by ``10**shift``, rounding if needed.

        Raises :class:`DecimalOverflow` (value untouched) or
        :class:`DecimalTruncated` (value rounded) with the result attached.
        """
        result = self.copy()
        err = result._shift_inplace(shift)
        if err is not None:
            raise err(result=result)
        return result

    def _shift_inplace(self, shift: int) -> _ErrorKind:
        if shift == 0:
            return None
        limit = current_word_buffer_length()
        wb = self.word_buf
        err: _ErrorKind = None
        point = digits_to_words(self.digits_int) * DIGITS_PER_WORD
        new_point = point + shift
        digit_begin, digit_end = self.digit_bounds()
        if digit_begin == digit_end:
            self._set_zero()
            return None

        digits_int = max(new_point - digit_begin, 0)
        digits_frac = max(digit_end - new_point, 0)
        words_int = digits_to_words(digits_int)
        words_frac = digits_to_words(digits_frac)
        new_len = words_int + words_frac
        if new_len > limit:
            lack = new_len - limit
            if words_frac < lack:
                return DecimalOverflow
            err = DecimalTruncated
            words_frac -= lack
            diff = digits_frac - words_frac * DIGITS_PER_WORD
            err1 = self._round_into(self, digit_end - point - diff, RoundMode.HALF_EVEN)
            if err1 is not None:
                return err1
            wb = self.word_buf
            digit_end -= diff
            digits_frac = words_frac * DIGITS_PER_WORD
            if digit_end <= digit_begin:
                self._set_zero()
                return DecimalTruncated

        if shift % DIGITS_PER_WORD != 0:
            if shift > 0:
                l_shift = shift % DIGITS_PER_WORD
                r_shift = DIGITS_PER_WORD - l_shift
                do_left = l_shift <= digit_begin
            else:
                r_shift = (-shift) % DIGITS_PER_WORD
                l_shift = DIGITS_PER_WORD - r_shift
                do_left = (DIGITS_PER_WORD * limit - digit_end) < r_shift
            if do_left:
                self._mini_left_shift(l_shift, digit_begin, digit_end)
                mini_shift = -l_shift
            else:
                self._mini_right_shift(r_shift, digit_begin, digit_end)
                mini_shift = r_shift
            new_point += mini_shift
            if shift + mini_shift == 0 and (new_point - digits_int) < DIGITS_PER_WORD:
                self.digits_int = digits_int
                self.digits_frac = digits_frac
                return err
            digit_begin += mini_shift
            digit_end += mini_shift

        new_front = new_point - digits_int
        if new_front >= DIGITS_PER_WORD or new_front < 0:
            if new_front > 0:
                word_shift = new_front // DIGITS_PER_WORD
                to = digit_begin // DIGITS_PER_WORD - word_shift
                barrier = (digit_end - 1) // DIGITS_PER_WORD - word_shift
                while to <= barrier:
                    wb[to] = wb[to + word_shift]
                    to += 1
                barrier += word_shift
                while to <= barrier:
                    wb[to] = 0
                    to += 1
                word_shift = -word_shift
            else:
                word_shift = (1 - new_front) // DIGITS_PER_WORD
                to = (digit_end - 1) // DIGITS_PER_WORD + word_shift
                barrier = digit_begin // DIGITS_PER_WORD + word_shift
                while to >= barrier:
                    wb[to] = wb[to - word_shift]
                    to -= 1
                barrier -= word_shift
                while to >= barrier:
                    wb[to] = 0
                    to -= 1
            digit_shift = word_shift * DIGITS_PER_WORD
            digit_begin += digit_shift
            digit_end += digit_shift
            new_point += digit_shift

        idx_begin = digit_begin // DIGITS_PER_WORD
        idx_end = (digit_end - 1) // DIGITS_PER_WORD
        idx_point = _quo(new_point - 1, DIGITS_PER_WORD) if new_point != 0 else 0
        if idx_point > idx_end:
            while idx_point > idx_end:
                wb[idx_point] = 0
                idx_point -= 1
        else:
            while idx_point < idx_begin:
                wb[idx_point] = 0
                idx_point += 1
        self.digits_int = digits_int
        self.digits_frac = digits_frac
        return err

    def _mini_left_shift(self, shift: int, beg: int, end: int) -> None:
        wb = self.word_buf
        buf_from = beg // DIGITS_PER_WORD
        buf_end = (end - 1) // DIGITS_PER_WORD
        c_shift = DIGITS_PER_WORD - shift
        if beg % DIGITS_PER_WORD < shift:
            wb[buf_from - 1] = wb[buf_from] // POWERS10[c_shift]
        while buf_from < buf_end:
            wb[buf_from] = (wb[buf_from] % POWERS10[c_shift]) * POWERS10[shift] + wb[
                buf_from + 1
            ] // POWERS10[c_shift]
            buf_from += 1
        wb[buf_from] = (wb[buf_from] % POWERS10[c_shift]) * POWERS10[shift]

    def _mini_right_shift(self, shift: int, beg: int, end: int) -> None:
        wb = self.word_buf
        buf_from = (end - 1) // DIGITS_PER_WORD
        buf_end = beg // DIGITS_PER_WORD
        c_shift = DIGITS_PER_WORD - shift
        if DIGITS_PER_WORD - ((end - 1) % DIGITS_PER_WORD + 1) < shift:
            wb[buf_from + 1] = (wb[buf_from] % POWERS10[shift]) * POWERS10[c_shift]
        while buf_from > buf_end:
            wb[buf_from] = wb[buf_from] // POWERS10[shift] + (
                wb[buf_from - 1] % POWERS10[shift]
            ) * POWERS10[c_shift]
            buf_from -= 1
        wb[buf_from] = wb[buf_from] // POWERS10[shift]

    # ------------------------------------------------------------------ rounding

    def round(self, frac: int, mode: RoundMode = RoundMode.HALF_EVEN) -> "Decimal":
        """Return this value rounded to ``frac`` fraction digits (may be negative).

        Raises :class:`DecimalTruncated` or :class:`DecimalOverflow` with the
        best-effort result attached.
        """
        result = type(self)()
        err = self._round_into(result, frac, RoundMode(mode))
        if err is not None:
            raise err(result=result)
        return result

    def _round_into(self, to: "Decimal", frac: int, mode: RoundMode) -> _ErrorKind:
        d = self
        limit = current_word_buffer_length()
        words_frac_to = _quo(frac + 1, DIGITS_PER_WORD)
        if frac > 0:
            words_frac_to = digits_to_words(frac)
        words_frac = digits_to_words(d.digits_frac)
        words_int = digits_to_words(d.digits_int)
        round_digit = int(mode)
        err: _ErrorKind = None

        if words_int + words_frac_to > limit:
            words_frac_to = limit - words_int
            frac = words_frac_to * DIGITS_PER_WORD
            err = DecimalTruncated
        if d.digits_int + frac < 0:
            to._set_zero()
            return None
        if to is not d:
            to.word_buf = list(d.word_buf)
            to.negative = d.negative
            to.digits_int = min(words_int, limit) * DIGITS_PER_WORD
        wb = to.word_buf
        src = d.word_buf
        if words_frac_to > words_frac:
            idx = words_int + words_frac
            while words_frac_to > words_frac:
                words_frac_to -= 1
                wb[idx] = 0
                idx += 1
            to.digits_frac = frac
            to.result_frac = frac
            return err
        if frac >= d.digits_frac:
            to.digits_frac = frac
            to.result_frac = frac
            return err

        to_idx = words_int + words_frac_to - 1
        if frac == words_frac_to * DIGITS_PER_WORD:
            do_inc = False
            if mode == RoundMode.CEILING:
                idx = to_idx + (words_frac - words_frac_to)
                while idx > to_idx:
                    if src[idx] != 0:
                        do_inc = True
                        break
                    idx -= 1
            elif mode == RoundMode.HALF_EVEN:
                do_inc = src[to_idx + 1] // DIG_MASK >= 5
            if do_inc:
                if to_idx >= 0:
                    wb[to_idx] += 1
                else:
                    to_idx += 1
                    wb[to_idx] = WORD_BASE
            elif words_int + words_frac_to == 0:
                to._set_zero()
                return None
        else:
            pos = words_frac_to * DIGITS_PER_WORD - frac - 1
            shifted = wb[to_idx] // POWERS10[pos]
            dig_after = shifted % 10
            if dig_after > round_digit or (round_digit == 5 and dig_after == 5):
                shifted += 10
            wb[to_idx] = POWERS10[pos] * (shifted - dig_after)

        if words_frac_to < words_frac:
            idx = words_int + words_frac_to
            if frac == 0 and words_int == 0:
                idx = 1
            while idx < limit:
                wb[idx] = 0
                idx += 1

        if wb[to_idx] >= WORD_BASE:
            carry = 1
            wb[to_idx] -= WORD_BASE
            while carry == 1 and to_idx > 0:
                to_idx -= 1
                wb[to_idx], carry = add_words(wb[to_idx], 0, carry)
            if carry > 0:
                if words_int + words_frac_to >= limit:
                    words_frac_to -= 1
                    frac = words_frac_to * DIGITS_PER_WORD
                    err = DecimalTruncated
                to_idx = words_int + max(words_frac_to, 0)
                while to_idx > 0:
                    if to_idx < limit:
                        wb[to_idx] = wb[to_idx - 1]
                    else:
                        err = DecimalOverflow
                    to_idx -= 1
                wb[to_idx] = 1
                if to.digits_int < DIGITS_PER_WORD * limit:
                    to.digits_int += 1
                else:
                    err = DecimalOverflow
        else:
            while wb[to_idx] == 0:
                if to_idx == 0:
                    stop = words_frac_to + 1
                    to.digits_int = 1
                    to.digits_frac = max(frac, 0)
                    to.negative = False
                    while to_idx < stop:
                        wb[to_idx] = 0
                        to_idx += 1
                    to.result_frac = to.digits_frac
                    return None
                to_idx -= 1

        first_dig = to.digits_int % DIGITS_PER_WORD
        if first_dig > 0 and wb[to_idx] >= POWERS10[first_dig]:
            to.digits_int += 1
        frac = max(frac, 0)
        to.digits_frac = frac
        to.result_frac = frac
        return err

    # ------------------------------------------------------------------ output

    def __str__(self) -> str:
        tmp = self.copy()
        err = tmp._round_into(tmp, tmp.result_frac, RoundMode.HALF_EVEN)
        if err is not None:
            _log.warning("decimal string = error{%s}", err.message)
        return tmp.to_string()

    def to_float(self) -> float:
        """Convert to a float, rounded to ``result_frac`` places for short values."""
        digits_int = self.digits_int
        digits_frac = self.digits_frac
        if digits_int + digits_frac > 12:
            value = float(str(self))
            if math.isinf(value):
                raise DecimalOverflow(result=value)
            return value
        words_int = _quo(digits_int - 1, DIGITS_PER_WORD) + 1
        f = 0.0
        word_idx = 0
        for _ in range(0, digits_int, DIGITS_PER_WORD):
            x = self.word_buf[word_idx]
            word_idx += 1
            f += float(x) * _POW10_TABLE[(words_int - word_idx) * DIGITS_PER_WORD + _POW10_OFF]
        frac_start = word_idx
        for _ in range(0, digits_frac, DIGITS_PER_WORD):
            x = self.word_buf[word_idx]
            word_idx += 1
            f += float(x) * _POW10_TABLE[
                -DIGITS_PER_WORD * (word_idx - frac_start) + _POW10_OFF
            ]
        unit = _POW10_TABLE[self.result_frac + _POW10_OFF]
        f = _round_half_away(f * unit) / unit
        return -f if self.negative else f

    def to_json(self) -> str:
        """Lossless JSON form of the internal representation."""
        return json.dumps(
            {
                "DigitsInt": self.digits_int,
                "DigitsFrac": self.digits_frac,
                "ResultFrac": self.result_frac,
                "Negative": self.negative,
                "WordBuf": list(self.word_buf[:MAX_WORD_BUF_LEN]),
            },
            separators=(",", ":"),
        )

    @classmethod
    def from_json(cls, data: Union[str, bytes]) -> "Decimal":
        """Restore a decimal written by :meth:`to_json`."""
        raw = json.loads(data)
        if raw is None:
            return cls()
        if not isinstance(raw, dict):
            raise ValueError("a decimal must be a JSON object")
        words = raw.get("WordBuf") or []
        if not isinstance(words, list) or not all(
            isinstance(w, int) and not isinstance(w, bool) for w in words
        ):
            raise ValueError("WordBuf must be a list of integers")
        words = list(words[:MAX_WORD_BUF_LEN])
        return cls(
            digits_int=int(raw.get("DigitsInt", 0)),
            digits_frac=int(raw.get("DigitsFrac", 0)),
            result_frac=int(raw.get("ResultFrac", 0)),
            negative=bool(raw.get("Negative", False)),
            word_buf=words,
        )


def max_decimal(precision: int, frac: int) -> Decimal:
    """The largest decimal with ``precision`` digits, ``frac`` of them fractional."""
    dec = Decimal()
    dec._fill_max(precision, frac)
    dec.result_frac = frac
    return dec


def new_max_or_min_dec(negative: bool, prec: int, frac: int) -> Decimal:
    """The largest (or, if ``negative``, smallest) value for ``prec`` and ``frac``."""
    chars = ["9"] * (prec + 2)
    chars[0] = "-" if negative else "+"
    chars[1 + prec - frac] = "."
    try:
        return Decimal.from_string("".join(chars))
    except DecimalError as exc:
        _log.warning("newMaxOrMinDec client = error{%s}", exc)
        return exc.result