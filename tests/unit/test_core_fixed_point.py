import pytest

from launchcurve.core.constants import ONE_Q64, U64_MAX, U128_MAX, U256_MAX
from launchcurve.core.exc import CurveDomainError, MathOverflowError
from launchcurve.core.fixed_point import (
    Rounding,
    ceil_div,
    floor_div,
    div_rounding,
    to_u64,
    to_u128,
    to_u256,
    mul_div,
    mul_shr,
    shl_div,
    mul_div_u64,
    sqrt_u256,
    pow_q64,
)


# -----------------------------
# Integer rounding helpers
# -----------------------------

def test_ceil_and_floor_div():
    print("[div] 7/2 -> ceil 4, floor 3; 0/5 -> 0; exact 8/2 -> 4 both ways")
    assert ceil_div(7, 2) == 4
    assert floor_div(7, 2) == 3
    assert ceil_div(0, 5) == 0
    assert ceil_div(8, 2) == floor_div(8, 2) == 4
    assert div_rounding(7, 2, Rounding.UP) == 4
    assert div_rounding(7, 2, Rounding.DOWN) == 3


@pytest.mark.parametrize(
    "call,name",
    [
        (lambda: ceil_div(-1, 2), "ceil_div(-1, 2)"),
        (lambda: ceil_div(1, 0), "ceil_div(1, 0)"),
        (lambda: floor_div(1, -3), "floor_div(1, -3)"),
        (lambda: mul_div(1, 1, 0, Rounding.DOWN), "mul_div(.., 0)"),
        (lambda: mul_div(-1, 1, 1, Rounding.DOWN), "mul_div(-1, ..)"),
        (lambda: shl_div(1, 0, 64, Rounding.UP), "shl_div(.., 0)"),
        (lambda: pow_q64(ONE_Q64, -1), "pow_q64(.., -1)"),
    ],
)
def test_degenerate_inputs_rejected(call, name):
    print(f"[degenerate] {name} -> expect CurveDomainError")
    with pytest.raises(CurveDomainError):
        call()


# -----------------------------
# Checked narrowing
# -----------------------------

@pytest.mark.parametrize(
    "fn,limit,bits",
    [
        (to_u64, U64_MAX, 64),
        (to_u128, U128_MAX, 128),
        (to_u256, U256_MAX, 256),
    ],
)
def test_narrowing_is_checked(fn, limit, bits):
    print(f"[narrow-u{bits}] max passes, max+1 and -1 raise")
    assert fn(limit) == limit
    assert fn(0) == 0
    with pytest.raises(MathOverflowError) as ei:
        fn(limit + 1, "narrow_check")
    assert ei.value.bits == bits
    assert ei.value.context == "narrow_check"
    with pytest.raises(MathOverflowError):
        fn(-1)


# -----------------------------
# Multiply / divide / shift
# -----------------------------

def test_mul_div_rounding_direction():
    print("[mul_div] 10*10/3 -> up 34, down 33")
    assert mul_div(10, 10, 3, Rounding.UP) == 34
    assert mul_div(10, 10, 3, Rounding.DOWN) == 33
    assert mul_div(6, 5, 3, Rounding.UP) == mul_div(6, 5, 3, Rounding.DOWN) == 10


def test_mul_div_keeps_wide_intermediate():
    # product needs ~192 bits; no truncation before the division
    x = U128_MAX
    y = ONE_Q64
    assert mul_div(x, y, ONE_Q64, Rounding.DOWN) == U128_MAX


def test_mul_div_overflow_on_u256_product():
    print("[mul_div] 2^200 * 2^100 does not fit u256 -> MathOverflowError")
    with pytest.raises(MathOverflowError):
        mul_div(1 << 200, 1 << 100, 1, Rounding.DOWN)


def test_mul_shr_rounds_up_on_dropped_bits():
    assert mul_shr(3, 1, 1, Rounding.DOWN) == 1
    assert mul_shr(3, 1, 1, Rounding.UP) == 2
    assert mul_shr(4, 1, 1, Rounding.UP) == 2
    assert mul_shr(1, 1, 128, Rounding.UP) == 1
    assert mul_shr(1, 1, 128, Rounding.DOWN) == 0


def test_shl_div():
    assert shl_div(1, 3, 2, Rounding.UP) == 2
    assert shl_div(1, 3, 2, Rounding.DOWN) == 1
    assert shl_div(1, 1, 64, Rounding.DOWN) == ONE_Q64


def test_mul_div_u64_narrows():
    assert mul_div_u64(U64_MAX, 1, 1, Rounding.DOWN) == U64_MAX
    with pytest.raises(MathOverflowError):
        mul_div_u64(U64_MAX, 2, 1, Rounding.DOWN, "fee")


# -----------------------------
# Roots and powers
# -----------------------------

def test_sqrt_u256_floor():
    assert sqrt_u256(0) == 0
    assert sqrt_u256(10) == 3
    assert sqrt_u256(16) == 4
    assert sqrt_u256(U256_MAX) == (1 << 128) - 1
    with pytest.raises(MathOverflowError):
        sqrt_u256(U256_MAX + 1)


def test_pow_q64_exact_cases():
    half = ONE_Q64 // 2
    print("[pow_q64] 1^5 = 1, x^0 = 1, (1/2)^2 = 1/4")
    assert pow_q64(ONE_Q64, 5) == ONE_Q64
    assert pow_q64(12345, 0) == ONE_Q64
    assert pow_q64(half, 1) == half
    assert pow_q64(half, 2) == ONE_Q64 // 4
    assert pow_q64(half, 10) == ONE_Q64 >> 10


def test_pow_q64_decays_monotonically_below_one():
    base = ONE_Q64 - ONE_Q64 // 10
    values = [pow_q64(base, n) for n in range(0, 12)]
    print("[pow_q64] 0.9^n:", [v / ONE_Q64 for v in values[:4]], "...")
    assert all(b < a for a, b in zip(values, values[1:]))
