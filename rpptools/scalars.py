"""Conversions between the small scalar types: 16-bit integers and doubles."""

from __future__ import annotations

import math
import struct

from rpptools.arith import wrap32

_MASK16 = 0xFFFF
_MASK32 = 0xFFFFFFFF


def to_ushort(value: int) -> int:
    """Low 16 bits of ``value`` as an unsigned number."""
    return int(value) & _MASK16


def ushort_to_short(value: int) -> int:
    """Low 16 bits of ``value`` read as a signed number."""
    unsigned = to_ushort(value)
    return unsigned - 0x10000 if unsigned & 0x8000 else unsigned


def double_to_int(value: float) -> int:
    """Round to the nearest integer the way ``%.0f`` does, as a 32-bit int."""
    if not math.isfinite(value):
        raise ValueError(f"cannot convert {value!r} to an integer")
    return wrap32(int(f"{value:.0f}"))


def double_to_float(value: float) -> float:
    """Round a double to single precision; too large values become infinite."""
    try:
        return struct.unpack("<f", struct.pack("<f", value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


def int_to_double(value: int) -> float:
    """A 32-bit integer as a double."""
    return float(wrap32(value))


def double_bits(value: float) -> tuple[int, int]:
    """The (low, high) 32-bit words of a double's IEEE 754 representation."""
    low, high = struct.unpack("<II", struct.pack("<d", value))
    return low, high


def double_from_bits(low: int, high: int) -> float:
    """The double whose IEEE 754 words are ``low`` and ``high``."""
    return struct.unpack("<d", struct.pack("<II", low & _MASK32, high & _MASK32))[0]