"""
Fixed-point primitives: wide-integer multiply/divide with explicit rounding.

- Python ints are arbitrary precision; every helper here computes the exact
  wide intermediate and narrows only at the end.
- Rounding direction is always passed explicitly (`Rounding.UP` / `Rounding.DOWN`).
  Up rounds toward the protocol (trader pays more / receives less).
- Narrowing to U64/U128 is checked: overflow raises MathOverflowError, never wraps.
"""

from __future__ import annotations

from enum import Enum
from math import isqrt

from .constants import ONE_Q64, RESOLUTION, U64_MAX, U128_MAX, U256_MAX
from .exc import MathOverflowError, CurveDomainError

# Debug printing control
DEBUG_FIXED_POINT = False

def _dbg(msg: str) -> None:
    if DEBUG_FIXED_POINT:
        print(msg)


class Rounding(Enum):
    UP = "up"
    DOWN = "down"


# ----------------------------
# Integer rounding helpers (centralised)
# ----------------------------

def ceil_div(a: int, b: int) -> int:
    if a < 0 or b <= 0:
        raise CurveDomainError("ceil_div expects a>=0 and b>0")
    return 0 if a == 0 else -(-a // b)


def floor_div(a: int, b: int) -> int:
    if a < 0 or b <= 0:
        raise CurveDomainError("floor_div expects a>=0 and b>0")
    return a // b


def div_rounding(a: int, b: int, rounding: Rounding) -> int:
    return ceil_div(a, b) if rounding is Rounding.UP else floor_div(a, b)


# ----------------------------
# Checked narrowing
# ----------------------------

def to_u64(value: int, context: str = "") -> int:
    """Narrow to u64; negative or oversized values are hard failures."""
    if value < 0 or value > U64_MAX:
        raise MathOverflowError(value, 64, context=context or None)
    return value


def to_u128(value: int, context: str = "") -> int:
    if value < 0 or value > U128_MAX:
        raise MathOverflowError(value, 128, context=context or None)
    return value


def to_u256(value: int, context: str = "") -> int:
    if value < 0 or value > U256_MAX:
        raise MathOverflowError(value, 256, context=context or None)
    return value


# ----------------------------
# Multiply / divide / shift
# ----------------------------

def mul_div(x: int, y: int, denominator: int, rounding: Rounding) -> int:
    """Return x * y / denominator rounded as requested (no intermediate truncation)."""
    if denominator <= 0:
        raise CurveDomainError("mul_div expects a positive denominator")
    if x < 0 or y < 0:
        raise CurveDomainError("mul_div expects non-negative operands")
    prod = to_u256(x * y, "mul_div")
    return div_rounding(prod, denominator, rounding)


def mul_shr(x: int, y: int, offset: int, rounding: Rounding) -> int:
    """Return (x * y) >> offset, rounding up when any shifted-out bit is set."""
    if x < 0 or y < 0:
        raise CurveDomainError("mul_shr expects non-negative operands")
    prod = to_u256(x * y, "mul_shr")
    q = prod >> offset
    if rounding is Rounding.UP and prod & ((1 << offset) - 1):
        q += 1
    return q


def shl_div(x: int, y: int, offset: int, rounding: Rounding) -> int:
    """Return (x << offset) / y."""
    if y <= 0:
        raise CurveDomainError("shl_div expects a positive divisor")
    return div_rounding(to_u256(x << offset, "shl_div"), y, rounding)


def mul_div_u64(x: int, y: int, denominator: int, rounding: Rounding, context: str = "") -> int:
    return to_u64(mul_div(x, y, denominator, rounding), context or "mul_div_u64")


# ----------------------------
# Roots and powers
# ----------------------------

def sqrt_u256(x: int) -> int:
    """Floor integer square root of a u256 value."""
    return isqrt(to_u256(x, "sqrt_u256"))


def pow_q64(base: int, exp: int) -> int:
    """Raise a Q64.64 value to a non-negative integer power.

    Square-and-multiply, flooring each product back to Q64.64. For bases
    below one the result decays monotonically in `exp`.
    """
    if exp < 0:
        raise CurveDomainError("pow_q64 expects a non-negative exponent")
    if base < 0:
        raise CurveDomainError("pow_q64 expects a non-negative base")
    result = ONE_Q64
    squared = base
    n = exp
    while n:
        if n & 1:
            result = to_u128((result * squared) >> RESOLUTION, "pow_q64")
        n >>= 1
        if n:
            squared = to_u128((squared * squared) >> RESOLUTION, "pow_q64")
    _dbg(f"pow_q64: base={base}, exp={exp} -> {result}")
    return result


__all__ = [
    "Rounding",
    "ceil_div",
    "floor_div",
    "div_rounding",
    "to_u64",
    "to_u128",
    "to_u256",
    "mul_div",
    "mul_shr",
    "shl_div",
    "mul_div_u64",
    "sqrt_u256",
    "pow_q64",
]
