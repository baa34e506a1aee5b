"""Float rounding helpers and best-effort integer parsing."""

from __future__ import annotations

import math

from gostutil.bignum.words import DecimalBadNumber, DecimalTruncated

_POW10_TAB = tuple(float(f"1e{i}") for i in range(32))
_POW10_POS32 = tuple(float(f"1e{32 * i}") for i in range(10))
_POW10_NEG32 = tuple(float(f"1e-{32 * i}") for i in range(11))

_MAX_UINT64 = 2**64 - 1
_UINT_CUTOFF = _MAX_UINT64 // 10 + 1
_INT_CUTOFF = 2**63
_MAX_INT64 = 2**63 - 1
_MIN_INT64 = -(2**63)
_DIGITS = frozenset("0123456789")


def _pow10(n: int) -> float:
    if 0 <= n <= 308:
        return _POW10_POS32[n // 32] * _POW10_TAB[n % 32]
    if -323 <= n <= 0:
        k = -n
        return _POW10_NEG32[k // 32] / _POW10_TAB[k % 32]
    return math.inf if n > 0 else 0.0


def _trunc(x: float) -> float:
    if math.isinf(x) or math.isnan(x):
        return x
    return math.copysign(float(math.trunc(x)), x)


def _div(a: float, b: float) -> float:
    if b == 0.0:
        if a == 0.0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    return a / b


def round_float(f: float) -> float:
    """Round to the nearest integer, halves away from zero."""
    if abs(f) < 0.5:
        return 0.0
    return _trunc(f + math.copysign(0.5, f))


def round_places(f: float, dec: int) -> float:
    """Round ``f`` to ``dec`` decimal places; ``dec`` may be negative."""
    shift = _pow10(dec)
    tmp = f * shift
    if math.isinf(tmp):
        return f
    return _div(round_float(tmp), shift)


def truncate_places(f: float, dec: int) -> float:
    """Truncate ``f`` to ``dec`` decimal places; ``dec`` may be negative."""
    shift = _pow10(dec)
    tmp = f * shift
    if math.isinf(tmp):
        return f
    return _div(_trunc(tmp), shift)


def get_max_float(flen: int, decimal: int) -> float:
    """Largest float with ``flen`` digits of which ``decimal`` are fractional."""
    return _pow10(flen - decimal) - _pow10(-decimal)


def truncate_float(f: float, flen: int, decimal: int) -> float:
    """Round ``f`` to ``decimal`` places and clamp it to the allowed range."""
    if math.isnan(f):
        return 0.0
    max_f = get_max_float(flen, decimal)
    if not math.isinf(f):
        f = round_places(f, decimal)
    if f > max_f:
        return max_f
    if f < -max_f:
        return -max_f
    return f


def str_to_int(text: str) -> int:
    """Parse a signed 64-bit integer on a best-effort basis.

    On a problem the error raised carries the best-effort value in ``result``.
    """
    text = text.strip()
    if not text:
        raise DecimalTruncated(result=0)
    negative = False
    start = 0
    if text[0] == "-":
        negative = True
        start = 1
    elif text[0] == "+":
        start = 1

    error = None
    has_num = False
    r = 0
    for ch in text[start:]:
        if ch not in _DIGITS:
            error = DecimalTruncated
            break
        has_num = True
        if r >= _UINT_CUTOFF:
            r = 0
            error = DecimalBadNumber
            break
        r1 = r * 10 + (ord(ch) - ord("0"))
        if r1 > _MAX_UINT64:
            r = 0
            error = DecimalBadNumber
            break
        r = r1
    if not has_num:
        error = DecimalTruncated

    if not negative and r >= _INT_CUTOFF:
        raise DecimalBadNumber(result=_MAX_INT64)
    if negative and r > _INT_CUTOFF:
        raise DecimalBadNumber(result=_MIN_INT64)

    value = -r if negative else r
    if error is not None:
        raise error(result=value)
    return value