"""Arbitrary-precision integer with sign/magnitude word conversions."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

_DECIMAL_RE = re.compile(r"[+-]?[0-9]+")
_WORD_MASK = 0xFFFFFFFF
_BASE_DIGITS = {
    2: frozenset("01_"),
    8: frozenset("01234567_"),
    10: frozenset("0123456789_"),
    16: frozenset("0123456789abcdefABCDEF_"),
}


def _parse_base0(text: str) -> Optional[int]:
    """Parse an integer whose base is chosen by a 0x/0o/0b/0 prefix."""
    negative = False
    body = text
    if body[:1] in ("+", "-"):
        negative = body[0] == "-"
        body = body[1:]
    if not body:
        return None
    base, digits = 10, body
    if len(body) >= 2 and body[0] == "0":
        prefix = body[1].lower()
        if prefix == "x":
            base, digits = 16, body[2:]
        elif prefix == "b":
            base, digits = 2, body[2:]
        elif prefix == "o":
            base, digits = 8, body[2:]
        else:
            base, digits = 8, body[1:]
    if not digits or not set(digits) <= _BASE_DIGITS[base]:
        return None
    try:
        value = int(digits, base)
    except ValueError:
        return None
    return -value if negative else value


@dataclass
class Integer:
    """An integer value plus the sign/magnitude fields used by serializers."""

    value: int = 0
    signum: int = 0
    mag: List[int] = field(default_factory=list)
    first_nonzero_int_num: int = 0
    lowest_set_bit: int = 0
    bit_length: int = 0
    bit_count: int = 0

    def java_class_name(self) -> str:
        """Name of the matching Java class."""
        return "java.math.BigInteger"

    def from_string(self, text: str) -> None:
        """Set the value from a base-10 number; raise ValueError otherwise."""
        if not _DECIMAL_RE.fullmatch(text):
            raise ValueError(f"'{text}' is not a 10-based number")
        self.value = int(text)

    def from_sign_and_mag(self, signum: int, mag: List[int]) -> None:
        """Set the value from a sign and big-endian unsigned 32-bit words.

        A zero sign with no words leaves the value unchanged.
        """
        if signum == 0 and not mag:
            return
        value = 0
        for word in mag:
            value = (value << 32) | (word & _WORD_MASK)
        self.value = -value if signum == -1 else value

    def get_sign_and_mag(self) -> Tuple[int, List[int]]:
        """Return the sign and the big-endian 32-bit words of the magnitude."""
        signum = (self.value > 0) - (self.value < 0)
        magnitude = abs(self.value)
        words: List[int] = []
        while magnitude:
            words.append(magnitude & _WORD_MASK)
            magnitude >>= 32
        words.reverse()
        return signum, words

    def to_json(self) -> str:
        """JSON text of the value: a bare number."""
        return str(self.value)

    def from_json(self, text: str) -> None:
        """Set the value from JSON text; ``null`` leaves it unchanged."""
        if text == "null":
            return
        value = _parse_base0(text)
        if value is None:
            raise ValueError(f"cannot unmarshal {text!r} into an Integer")
        self.value = value

    def __str__(self) -> str:
        return str(self.value)