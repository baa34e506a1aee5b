"""Arithmetic and comparison on fixed-point decimals.

Every operation returns a new :class:`Decimal`. When the exact result does
not fit, the matching :class:`DecimalError` subclass is raised with the
best-effort result in its ``result`` attribute.
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple, Type

from gostutil.bignum.decimal import Decimal
from gostutil.bignum.words import (
    DIGITS_PER_WORD,
    WORD_BASE,
    WORD_MAX,
    DecimalDivisionByZero,
    DecimalError,
    DecimalOverflow,
    DecimalTruncated,
    add_words,
    add_words2,
    count_leading_zeroes,
    current_word_buffer_length,
    digits_to_words,
    fix_word_count,
    sub_words,
    sub_words2,
)

_log = logging.getLogger(__name__)

DIV_FRAC_INCR = 4
NOT_FIXED_DEC = 31
_MAX_RESULT_FRAC = 30

_ErrorKind = Optional[Type[DecimalError]]


def _quo(a: int, b: int) -> int:
    """Integer division truncated towards zero."""
    q = abs(a) // abs(b)
    return q if (a < 0) == (b < 0) else -q


def _int8(value: int) -> int:
    """Wrap ``value`` into the signed 8-bit range."""
    value &= 0xFF
    return value - 0x100 if value & 0x80 else value


def _set_zero_with_frac(dec: Decimal, frac: int) -> None:
    dec._set_zero()
    dec.digits_frac = frac
    dec.result_frac = frac


def _finish(result: Decimal, err: _ErrorKind) -> Decimal:
    if err is not None:
        raise err(result=result)
    return result


def decimal_neg(dec: Decimal) -> Decimal:
    """Return ``dec`` with its sign reversed; zero stays non-negative."""
    result = dec.copy()
    if dec.is_zero():
        return result
    result.negative = not dec.negative
    return result


def compare(a: Decimal, b: Decimal) -> int:
    """Return -1, 0 or 1 as ``a`` is less than, equal to or greater than ``b``."""
    if a.negative == b.negative:
        cmp, _ = _do_sub(a, b, None)
        return cmp
    return -1 if a.negative else 1


def decimal_add(a: Decimal, b: Decimal) -> Decimal:
    """Return ``a + b``."""
    to = Decimal()
    to.result_frac = max(a.result_frac, b.result_frac)
    if a.negative == b.negative:
        err = _do_add(a, b, to)
    else:
        _, err = _do_sub(a, b, to)
    return _finish(to, err)


def decimal_sub(a: Decimal, b: Decimal) -> Decimal:
    """Return ``a - b``."""
    to = Decimal()
    to.result_frac = max(a.result_frac, b.result_frac)
    if a.negative == b.negative:
        _, err = _do_sub(a, b, to)
    else:
        err = _do_add(a, b, to)
    return _finish(to, err)


def _do_sub(a: Decimal, b: Decimal, to: Optional[Decimal]) -> Tuple[int, _ErrorKind]:
    wi1 = digits_to_words(a.digits_int)
    wf1 = digits_to_words(a.digits_frac)
    wi2 = digits_to_words(b.digits_int)
    wf2 = digits_to_words(b.digits_frac)
    wft = max(wf1, wf2)
    w1, w2 = a.word_buf, b.word_buf

    start1, stop1, idx1 = 0, wi1, 0
    start2, stop2, idx2 = 0, wi2, 0
    if w1[idx1] == 0:
        while idx1 < stop1 and w1[idx1] == 0:
            idx1 += 1
        start1 = idx1
        wi1 = stop1 - idx1
    if w2[idx2] == 0:
        while idx2 < stop2 and w2[idx2] == 0:
            idx2 += 1
        start2 = idx2
        wi2 = stop2 - idx2

    carry = 0
    if wi2 > wi1:
        carry = 1
    elif wi2 == wi1:
        end1 = stop1 + wf1 - 1
        end2 = stop2 + wf2 - 1
        while idx1 <= end1 and w1[end1] == 0:
            end1 -= 1
        while idx2 <= end2 and w2[end2] == 0:
            end2 -= 1
        wf1 = end1 - stop1 + 1
        wf2 = end2 - stop2 + 1
        while idx1 <= end1 and idx2 <= end2 and w1[idx1] == w2[idx2]:
            idx1 += 1
            idx2 += 1
        if idx1 <= end1:
            carry = 1 if idx2 <= end2 and w2[idx2] > w1[idx1] else 0
        elif idx2 <= end2:
            carry = 1
        else:
            if to is not None:
                _set_zero_with_frac(to, to.result_frac)
            return 0, None

    if to is None:
        return (1 if (carry > 0) == a.negative else -1), None

    to.negative = a.negative
    if carry > 0:
        a, b = b, a
        w1, w2 = w2, w1
        start1, start2 = start2, start1
        wi1, wi2 = wi2, wi1
        wf1, wf2 = wf2, wf1
        to.negative = not to.negative

    wi1, wft, err = fix_word_count(wi1, wft)
    idx_to = wi1 + wft
    to.digits_frac = max(a.digits_frac, b.digits_frac)
    to.digits_int = wi1 * DIGITS_PER_WORD
    if err is not None:
        to.digits_frac = min(to.digits_frac, wft * DIGITS_PER_WORD)
        wf1 = min(wf1, wft)
        wf2 = min(wf2, wft)
        wi2 = min(wi2, wi1)
    out = to.word_buf
    carry = 0

    if wf1 > wf2:
        idx1 = start1 + wi1 + wf1
        stop1 = start1 + wi1 + wf2
        idx2 = start2 + wi2 + wf2
        while wft > wf1:
            wft -= 1
            idx_to -= 1
            out[idx_to] = 0
        while idx1 > stop1:
            idx_to -= 1
            idx1 -= 1
            out[idx_to] = w1[idx1]
    else:
        idx1 = start1 + wi1 + wf1
        idx2 = start2 + wi2 + wf2
        stop2 = start2 + wi2 + wf1
        while wft > wf2:
            wft -= 1
            idx_to -= 1
            out[idx_to] = 0
        while idx2 > stop2:
            idx_to -= 1
            idx2 -= 1
            out[idx_to], carry = sub_words(0, w2[idx2], carry)

    while idx2 > start2:
        idx_to -= 1
        idx1 -= 1
        idx2 -= 1
        out[idx_to], carry = sub_words(w1[idx1], w2[idx2], carry)

    while carry > 0 and idx1 > start1:
        idx_to -= 1
        idx1 -= 1
        out[idx_to], carry = sub_words(w1[idx1], 0, carry)
    while idx1 > start1:
        idx_to -= 1
        idx1 -= 1
        out[idx_to] = w1[idx1]
    while idx_to > 0:
        idx_to -= 1
        out[idx_to] = 0
    return 0, err


def _do_add(a: Decimal, b: Decimal, to: Decimal) -> _ErrorKind:
    wi1 = digits_to_words(a.digits_int)
    wf1 = digits_to_words(a.digits_frac)
    wi2 = digits_to_words(b.digits_int)
    wf2 = digits_to_words(b.digits_frac)
    wit = max(wi1, wi2)
    wft = max(wf1, wf2)
    out = to.word_buf

    if wi1 > wi2:
        x = a.word_buf[0]
    elif wi2 > wi1:
        x = b.word_buf[0]
    else:
        x = a.word_buf[0] + b.word_buf[0]
    if x > WORD_MAX - 1:
        wit += 1
        out[0] = 0

    wit, wft, err = fix_word_count(wit, wft)
    if err is DecimalOverflow:
        to._fill_max(current_word_buffer_length() * DIGITS_PER_WORD, 0)
        return err
    idx_to = wit + wft
    to.negative = a.negative
    to.digits_int = wit * DIGITS_PER_WORD
    to.digits_frac = max(a.digits_frac, b.digits_frac)
    if err is not None:
        to.digits_frac = min(to.digits_frac, wft * DIGITS_PER_WORD)
        wf1 = min(wf1, wft)
        wf2 = min(wf2, wft)
        wi1 = min(wi1, wit)
        wi2 = min(wi2, wit)

    dec1, dec2 = a.word_buf, b.word_buf
    if wf1 > wf2:
        idx1 = wi1 + wf1
        stop = wi1 + wf2
        idx2 = wi2 + wf2
        stop2 = wi1 - wi2 if wi1 > wi2 else 0
    else:
        idx1 = wi2 + wf2
        stop = wi2 + wf1
        idx2 = wi1 + wf1
        stop2 = wi2 - wi1 if wi2 > wi1 else 0
        dec1, dec2 = b.word_buf, a.word_buf
    while idx1 > stop:
        idx_to -= 1
        idx1 -= 1
        out[idx_to] = dec1[idx1]

    carry = 0
    while idx1 > stop2:
        idx1 -= 1
        idx2 -= 1
        idx_to -= 1
        out[idx_to], carry = add_words(dec1[idx1], dec2[idx2], carry)

    if wi1 > wi2:
        idx1 = wi1 - wi2
        dec1 = a.word_buf
    else:
        idx1 = wi2 - wi1
        dec1 = b.word_buf
    while idx1 > 0:
        idx_to -= 1
        idx1 -= 1
        out[idx_to], carry = add_words(dec1[idx1], 0, carry)
    if carry > 0:
        idx_to -= 1
        out[idx_to] = 1
    return err


def decimal_mul(a: Decimal, b: Decimal) -> Decimal:
    """Return ``a * b``."""
    to = Decimal()
    wi1 = digits_to_words(a.digits_int)
    wf1 = digits_to_words(a.digits_frac)
    wi2 = digits_to_words(b.digits_int)
    wf2 = digits_to_words(b.digits_frac)
    wit = digits_to_words(a.digits_int + b.digits_int)
    wft = wf1 + wf2
    idx1, idx2 = wi1, wi2
    tmp1, tmp2 = wit, wft

    to.result_frac = min(_int8(a.result_frac + b.result_frac), _MAX_RESULT_FRAC)
    wit, wft, err = fix_word_count(wit, wft)
    to.negative = a.negative != b.negative
    to.digits_frac = min(_int8(a.digits_frac + b.digits_frac), NOT_FIXED_DEC)
    to.digits_int = wit * DIGITS_PER_WORD
    if err is DecimalOverflow:
        raise DecimalOverflow(result=to)
    if err is not None:
        to.digits_frac = min(to.digits_frac, wft * DIGITS_PER_WORD)
        to.digits_int = min(to.digits_int, wit * DIGITS_PER_WORD)
        if tmp1 > wit:
            tmp1 -= wit
            tmp2 = tmp1 >> 1
            wi2 -= tmp1 - tmp2
            wf1 = 0
            wf2 = 0
        else:
            tmp2 -= wft
            tmp1 = tmp2 >> 1
            if wf1 <= wf2:
                wf1 -= tmp1
                wf2 -= tmp2 - tmp1
            else:
                wf2 -= tmp1
                wf1 -= tmp2 - tmp1

    start_to = wit + wft - 1
    start2 = idx2 + wf2 - 1
    stop1 = idx1 - wi1
    stop2 = idx2 - wi2
    out = to.word_buf
    for k in range(len(out)):
        out[k] = 0
    w1, w2 = a.word_buf, b.word_buf

    idx1 += wf1 - 1
    while idx1 >= stop1:
        carry = 0
        idx_to = start_to
        idx2 = start2
        while idx2 >= stop2:
            p = w1[idx1] * w2[idx2]
            hi = p // WORD_BASE
            lo = p - hi * WORD_BASE
            out[idx_to], carry = add_words2(out[idx_to], lo, carry)
            carry += hi
            idx2 -= 1
            idx_to -= 1
        if carry > 0:
            if idx_to < 0:
                raise DecimalOverflow(result=to)
            out[idx_to], carry = add_words2(out[idx_to], 0, carry)
        idx_to -= 1
        while carry > 0:
            if idx_to < 0:
                raise DecimalOverflow(result=to)
            out[idx_to], carry = add_words(out[idx_to], 0, carry)
            idx_to -= 1
        start_to -= 1
        idx1 -= 1

    if to.negative:
        end = wit + wft
        idx = 0
        while out[idx] == 0:
            idx += 1
            if idx == end:
                _set_zero_with_frac(to, to.result_frac)
                out = to.word_buf
                break

    idx_to = 0
    d_to_move = wit + digits_to_words(to.digits_frac)
    while out[idx_to] == 0 and to.digits_int > DIGITS_PER_WORD:
        idx_to += 1
        to.digits_int -= DIGITS_PER_WORD
        d_to_move -= 1
    if idx_to > 0:
        cur = 0
        while d_to_move > 0:
            out[cur] = out[idx_to]
            cur += 1
            idx_to += 1
            d_to_move -= 1
    return _finish(to, err)


def decimal_div(a: Decimal, b: Decimal, frac_incr: int = DIV_FRAC_INCR) -> Decimal:
    """Return ``a / b`` with ``frac_incr`` more fraction digits than ``a``.

    Raises :class:`DecimalDivisionByZero` when ``b`` is zero.
    """
    to = Decimal()
    to.result_frac = min(_int8(a.result_frac + _int8(frac_incr)), _MAX_RESULT_FRAC)
    err = _do_div_mod(a, b, to, False, frac_incr)
    return _finish(to, err)


def decimal_mod(a: Decimal, b: Decimal) -> Decimal:
    """Return ``a mod b``: same sign as ``a``, ``a - k*b`` for an integer ``k``.

    Raises :class:`DecimalDivisionByZero` when ``b`` is zero.
    """
    to = Decimal()
    to.result_frac = max(a.result_frac, b.result_frac)
    err = _do_div_mod(a, b, to, True, 0)
    return _finish(to, err)


def _do_div_mod(
    a: Decimal, b: Decimal, to: Decimal, is_mod: bool, frac_incr: int
) -> _ErrorKind:
    limit = current_word_buffer_length()
    w1, w2 = a.word_buf, b.word_buf
    frac1 = digits_to_words(a.digits_frac) * DIGITS_PER_WORD
    prec1 = a.digits_int + frac1
    frac2 = digits_to_words(b.digits_frac) * DIGITS_PER_WORD
    prec2 = b.digits_int + frac2

    i = _quo(prec2 - 1, 1) % DIGITS_PER_WORD + 1 if prec2 > 0 else 0
    idx2 = 0
    while prec2 > 0 and w2[idx2] == 0:
        prec2 -= i
        i = DIGITS_PER_WORD
        idx2 += 1
    if prec2 <= 0:
        raise DecimalDivisionByZero()

    prec2 -= count_leading_zeroes((prec2 - 1) % DIGITS_PER_WORD, w2[idx2])
    i = (prec1 - 1) % DIGITS_PER_WORD + 1 if prec1 > 0 else 0
    idx1 = 0
    while prec1 > 0 and w1[idx1] == 0:
        prec1 -= i
        i = DIGITS_PER_WORD
        idx1 += 1
    if prec1 <= 0:
        _set_zero_with_frac(to, to.result_frac)
        return None
    prec1 -= count_leading_zeroes((prec1 - 1) % DIGITS_PER_WORD, w1[idx1])

    frac_incr -= frac1 - a.digits_frac + frac2 - b.digits_frac
    frac_incr = max(frac_incr, 0)

    digits_int_to = (prec1 - frac1) - (prec2 - frac2)
    if w1[idx1] >= w2[idx2]:
        digits_int_to += 1
    if digits_int_to < 0:
        digits_int_to = _quo(digits_int_to, DIGITS_PER_WORD)
        words_int_to = 0
    else:
        words_int_to = digits_to_words(digits_int_to)

    words_frac_to = 0
    err: _ErrorKind = None
    if is_mod:
        to.negative = a.negative
        to.digits_frac = max(a.digits_frac, b.digits_frac)
    else:
        words_frac_to = digits_to_words(frac1 + frac2 + frac_incr)
        words_int_to, words_frac_to, err = fix_word_count(words_int_to, words_frac_to)
        to.negative = a.negative != b.negative
        to.digits_int = words_int_to * DIGITS_PER_WORD
        to.digits_frac = words_frac_to * DIGITS_PER_WORD

    out = to.word_buf
    idx_to = 0
    stop_to = words_int_to + words_frac_to
    if not is_mod:
        while digits_int_to < 0 and idx_to < limit:
            out[idx_to] = 0
            idx_to += 1
            digits_int_to += 1

    i = digits_to_words(prec1)
    len1 = max(i + digits_to_words(2 * frac2 + frac_incr + 1) + 1, 3)
    tmp1 = [0] * len1
    chunk = w1[idx1 : idx1 + i]
    tmp1[: len(chunk)] = chunk

    start1 = 0
    start2 = idx2
    stop2 = idx2 + digits_to_words(prec2) - 1
    while w2[stop2] == 0 and stop2 >= start2:
        stop2 -= 1
    len2 = stop2 - start2
    stop2 += 1

    norm_factor = WORD_BASE // (w2[start2] + 1)
    norm2 = norm_factor * w2[start2]
    if len2 > 0:
        norm2 += norm_factor * w2[start2 + 1] // WORD_BASE
    dcarry = 0
    if tmp1[start1] < w2[start2]:
        dcarry = tmp1[start1]
        start1 += 1

    guess = 0
    while idx_to < stop_to:
        if dcarry == 0 and tmp1[start1] < w2[start2]:
            guess = 0
        else:
            x = tmp1[start1] + dcarry * WORD_BASE
            y = tmp1[start1 + 1]
            guess = (norm_factor * x + norm_factor * y // WORD_BASE) // norm2
            if guess >= WORD_BASE:
                guess = WORD_BASE - 1
            if len2 > 0:
                for _ in range(2):
                    if w2[start2 + 1] * guess > (x - guess * w2[start2]) * WORD_BASE + y:
                        guess -= 1

            idx2 = stop2
            idx1 = start1 + len2
            carry = 0
            while idx2 > start2:
                idx2 -= 1
                x = guess * w2[idx2]
                hi = x // WORD_BASE
                lo = x - hi * WORD_BASE
                tmp1[idx1], carry = sub_words2(tmp1[idx1], lo, carry)
                carry += hi
                idx1 -= 1
            carry = 1 if dcarry < carry else 0

            if carry > 0:
                guess -= 1
                idx2 = stop2
                idx1 = start1 + len2
                carry = 0
                while idx2 > start2:
                    idx2 -= 1
                    tmp1[idx1], carry = add_words(tmp1[idx1], w2[idx2], carry)
                    idx1 -= 1
        if not is_mod:
            out[idx_to] = guess
        dcarry = tmp1[start1]
        start1 += 1
        idx_to += 1

    if is_mod:
        if dcarry != 0:
            start1 -= 1
            tmp1[start1] = dcarry
        idx_to = 0
        digits_int_to = prec1 - frac1 - start1 * DIGITS_PER_WORD
        if digits_int_to < 0:
            words_int_to = _quo(digits_int_to, DIGITS_PER_WORD)
        else:
            words_int_to = digits_to_words(digits_int_to)
        words_frac_to = digits_to_words(to.digits_frac)
        err = None
        if words_int_to == 0 and words_frac_to == 0:
            to._set_zero()
            return None
        if words_int_to <= 0:
            if -words_int_to >= limit:
                to._set_zero()
                return DecimalTruncated
            stop1 = start1 + words_int_to + words_frac_to
            words_frac_to += words_int_to
            to.digits_int = 0
            while words_int_to < 0:
                out[idx_to] = 0
                idx_to += 1
                words_int_to += 1
        else:
            if words_int_to > limit:
                to.digits_int = DIGITS_PER_WORD * limit
                to.digits_frac = 0
                return DecimalOverflow
            stop1 = start1 + words_int_to + words_frac_to
            to.digits_int = min(words_int_to * DIGITS_PER_WORD, b.digits_int)
        if words_int_to + words_frac_to > limit:
            stop1 -= words_int_to + words_frac_to - limit
            words_frac_to = limit - words_int_to
            to.digits_frac = words_frac_to * DIGITS_PER_WORD
            err = DecimalTruncated
        while start1 < stop1:
            out[idx_to] = tmp1[start1]
            idx_to += 1
            start1 += 1

    idx_to, digits_int_to = to.remove_leading_zeros()
    to.digits_int = digits_int_to
    if idx_to != 0:
        tail = out[idx_to:]
        out[: len(tail)] = tail

    if to.is_zero():
        to.negative = False
    return err