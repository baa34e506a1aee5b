"""Small integer and floating-point helpers with fixed-width semantics."""

from __future__ import annotations

import math
import struct


def _to_signed(n: int, bits: int) -> int:
    """Wrap ``n`` into a two's-complement signed integer of ``bits`` width."""
    modulus = 1 << bits
    n &= modulus - 1
    if n >= modulus >> 1:
        n -= modulus
    return n


def _abs_fixed(n: int, bits: int) -> int:
    # The most negative value has no positive counterpart and wraps to itself.
    return _to_signed(abs(_to_signed(n, bits)), bits)


def abs_int64(n: int) -> int:
    """Absolute value of a 64-bit signed integer."""
    return _abs_fixed(n, 64)


def abs_int32(n: int) -> int:
    """Absolute value of a 32-bit signed integer."""
    return _abs_fixed(n, 32)


def abs_int16(n: int) -> int:
    """Absolute value of a 16-bit signed integer."""
    return _abs_fixed(n, 16)


def abs_int8(n: int) -> int:
    """Absolute value of an 8-bit signed integer."""
    return _abs_fixed(n, 8)


def _f32(x: float) -> float:
    """Round a float to single precision."""
    try:
        return struct.unpack("f", struct.pack("f", x))[0]
    except OverflowError:
        return math.copysign(math.inf, x)


def delta_compare_float64(expected: float, actual: float, delta: float) -> bool:
    """Return whether ``|expected - actual| <= delta``."""
    if expected > actual:
        return expected - actual <= delta
    return actual - expected <= delta


def delta_compare_float32(expected: float, actual: float, delta: float) -> bool:
    """Like :func:`delta_compare_float64`, computed in single precision."""
    expected, actual, delta = _f32(expected), _f32(actual), _f32(delta)
    if expected > actual:
        return _f32(expected - actual) <= delta
    return _f32(actual - expected) <= delta