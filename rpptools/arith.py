"""Fixed-width integer arithmetic with two's-complement wrap-around.

Division truncates toward zero and remainders take the dividend's sign;
shift counts use their low five bits, as the x86 shift instructions do.
"""

from __future__ import annotations

_MASK32 = 0xFFFFFFFF
_MASK64 = 0xFFFFFFFFFFFFFFFF


def wrap32(value: int) -> int:
    """Value as a signed 32-bit integer."""
    value &= _MASK32
    return value - (1 << 32) if value & 0x80000000 else value


def wrap_u32(value: int) -> int:
    """Value as an unsigned 32-bit integer."""
    return value & _MASK32


def wrap64(value: int) -> int:
    """Value as a signed 64-bit integer."""
    value &= _MASK64
    return value - (1 << 64) if value >> 63 else value


def _trunc_div(a: int, b: int) -> int:
    if b == 0:
        raise ZeroDivisionError("integer division by zero")
    quotient = abs(a) // abs(b)
    return quotient if (a < 0) == (b < 0) else -quotient


def _trunc_mod(a: int, b: int) -> int:
    return a - b * _trunc_div(a, b)


def add32(a: int, b: int) -> int:
    return wrap32(a + b)


def sub32(a: int, b: int) -> int:
    return wrap32(a - b)


def mul32(a: int, b: int) -> int:
    return wrap32(wrap32(a) * wrap32(b))


def div32(a: int, b: int) -> int:
    return wrap32(_trunc_div(wrap32(a), wrap32(b)))


def mod32(a: int, b: int) -> int:
    return wrap32(_trunc_mod(wrap32(a), wrap32(b)))


def neg32(a: int) -> int:
    return wrap32(-a)


def add64(a: int, b: int) -> int:
    return wrap64(a + b)


def sub64(a: int, b: int) -> int:
    return wrap64(a - b)


def mul64(a: int, b: int) -> int:
    return wrap64(wrap64(a) * wrap64(b))


def div64(a: int, b: int) -> int:
    return wrap64(_trunc_div(wrap64(a), wrap64(b)))


def mod64(a: int, b: int) -> int:
    return wrap64(_trunc_mod(wrap64(a), wrap64(b)))


def shl32(a: int, b: int) -> int:
    """Unsigned left shift."""
    return wrap_u32(wrap_u32(a) << (b & 31))


def shr32(a: int, b: int) -> int:
    """Unsigned (logical) right shift."""
    return wrap_u32(a) >> (b & 31)


def sar32(a: int, b: int) -> int:
    """Signed (arithmetic) right shift."""
    return wrap32(a) >> (b & 31)


def logical_and(a: int, b: int) -> int:
    """1 when both operands are non-zero, else 0."""
    return int(a != 0 and b != 0)


def logical_or(a: int, b: int) -> int:
    """1 when either operand is non-zero, else 0."""
    return int(a != 0 or b != 0)