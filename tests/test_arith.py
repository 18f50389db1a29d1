import pytest

from rpptools import arith

INT_MAX = 0x7FFFFFFF
UINT_MAX = 4294967295
INT64_MAX = (1 << 63) - 1

SAMPLES = [0, 1, -1, 7, -7, 123456, -98765, INT_MAX, -INT_MAX - 1]


def test_wrap32_range_and_identity():
    assert arith.wrap32(INT_MAX) == INT_MAX
    assert arith.wrap32(UINT_MAX) < 0
    for value in [UINT_MAX, 1 << 40, -(1 << 40) + 3, INT_MAX + 5]:
        wrapped = arith.wrap32(value)
        assert -(1 << 31) <= wrapped <= INT_MAX
        assert (wrapped - value) % (1 << 32) == 0


def test_wrap_u32_of_minus_one():
    assert arith.wrap_u32(-1) == UINT_MAX


def test_wrap64_range():
    assert arith.wrap64(INT64_MAX) == INT64_MAX
    assert arith.wrap64(INT64_MAX + 1) < 0


def test_add_overflow_wraps_to_negative():
    assert arith.add32(INT_MAX, 1) == -INT_MAX - 1
    assert arith.add64(INT64_MAX, 1) == -INT64_MAX - 1


@pytest.mark.parametrize("a", SAMPLES)
@pytest.mark.parametrize("b", SAMPLES)
def test_add_sub_round_trip(a, b):
    assert arith.sub32(arith.add32(a, b), b) == a
    assert arith.sub64(arith.add64(a, b), b) == a


@pytest.mark.parametrize("a", SAMPLES)
def test_negation(a):
    assert arith.add32(a, arith.neg32(a)) == 0
    assert arith.neg32(arith.neg32(a)) == a


def test_division_truncates_toward_zero():
    assert arith.div32(-7, 2) == -3
    assert arith.mod32(-7, 2) == -1
    assert arith.div64(7, -2) == arith.div32(7, -2)


@pytest.mark.parametrize("a", [7, -7, 100, -100, INT_MAX])
@pytest.mark.parametrize("b", [2, -2, 3, -3, 10])
def test_div_mod_identity(a, b):
    q32, r32 = arith.div32(a, b), arith.mod32(a, b)
    assert arith.add32(arith.mul32(q32, b), r32) == a
    assert abs(r32) < abs(b)
    assert r32 == 0 or (r32 < 0) == (a < 0)
    q64, r64 = arith.div64(a, b), arith.mod64(a, b)
    assert q64 * b + r64 == a


@pytest.mark.parametrize("func", [arith.div32, arith.mod32, arith.div64, arith.mod64])
def test_division_by_zero(func):
    with pytest.raises(ZeroDivisionError):
        func(5, 0)


def test_shifts():
    assert arith.shl32(-1, 0) == UINT_MAX
    assert arith.shr32(arith.shl32(5, 3), 3) == 5
    assert arith.shr32(-1, 0) == UINT_MAX
    assert arith.sar32(-8, 1) == -4
    assert arith.sar32(-1, 31) == arith.wrap32(UINT_MAX)
    assert arith.shl32(1, 32) == 1


def test_logical_operators():
    assert arith.logical_and(2, 3) == 1
    assert arith.logical_and(2, 0) == 0
    assert arith.logical_or(0, 0) == 0
    assert arith.logical_or(0, -5) == 1