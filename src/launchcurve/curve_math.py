"""
Curve math kernel: token deltas and price moves across one liquidity segment.

For liquidity L active over sqrt prices (l, u] (Q64.64):
  Δbase  = L * (u - l) / (u * l)
  Δquote = L * (u - l) >> 128

Rounding is explicit at each call site: amounts the trader pays round up,
amounts the trader receives round down. The `_256` variants return the
unchecked wide value (used for capacity comparisons); the plain variants
narrow to u64 and raise MathOverflowError when the result does not fit.
"""

from __future__ import annotations

from typing import Iterator, Sequence, Tuple

from .core.constants import RESOLUTION
from .core.datatypes import CurvePoint
from .core.exc import CurveDomainError
from .core.fixed_point import Rounding, mul_div, mul_shr, ceil_div, to_u64, to_u128

# Debug printing control
DEBUG_CURVE = False

def _dbg(msg: str) -> None:
    if DEBUG_CURVE:
        print(f"[CURVE] {msg}")


def _check_bounds(lower: int, upper: int) -> None:
    if lower <= 0:
        raise CurveDomainError(f"lower sqrt price must be > 0, got {lower}")
    if lower > upper:
        raise CurveDomainError(f"bounds out of order: lower={lower} > upper={upper}")


# ---------------------------------------------------------------------------
# Token deltas
# ---------------------------------------------------------------------------

def get_delta_amount_base_unsigned_256(lower: int, upper: int, liquidity: int, rounding: Rounding) -> int:
    _check_bounds(lower, upper)
    if liquidity == 0 or lower == upper:
        return 0
    return mul_div(liquidity, upper - lower, lower * upper, rounding)


def get_delta_amount_base_unsigned(lower: int, upper: int, liquidity: int, rounding: Rounding) -> int:
    """Base amount moved across (lower, upper] at `liquidity`, narrowed to u64."""
    return to_u64(
        get_delta_amount_base_unsigned_256(lower, upper, liquidity, rounding),
        "get_delta_amount_base_unsigned",
    )


def get_delta_amount_quote_unsigned_256(lower: int, upper: int, liquidity: int, rounding: Rounding) -> int:
    _check_bounds(lower, upper)
    if liquidity == 0 or lower == upper:
        return 0
    return mul_shr(liquidity, upper - lower, RESOLUTION * 2, rounding)


def get_delta_amount_quote_unsigned(lower: int, upper: int, liquidity: int, rounding: Rounding) -> int:
    """Quote amount moved across (lower, upper] at `liquidity`, narrowed to u64."""
    return to_u64(
        get_delta_amount_quote_unsigned_256(lower, upper, liquidity, rounding),
        "get_delta_amount_quote_unsigned",
    )


# ---------------------------------------------------------------------------
# Next price
# ---------------------------------------------------------------------------

def _check_price_and_liquidity(sqrt_price: int, liquidity: int) -> None:
    if sqrt_price <= 0:
        raise CurveDomainError("sqrt_price must be > 0")
    if liquidity <= 0:
        raise CurveDomainError("liquidity must be > 0 to move the price")


def get_next_sqrt_price_from_input(sqrt_price: int, liquidity: int, amount_in: int, base_for_quote: bool) -> int:
    """Price after adding `amount_in` to the pool.

    Base input pushes the price down and rounds the new price up; quote input
    pushes it up and rounds down. Either way the pool never gives away more
    than the input pays for.
    """
    _check_price_and_liquidity(sqrt_price, liquidity)
    if amount_in == 0:
        return sqrt_price
    if base_for_quote:
        # L * √P / (L + Δx * √P)
        product = amount_in * sqrt_price
        return to_u128(
            mul_div(liquidity, sqrt_price, liquidity + product, Rounding.UP),
            "get_next_sqrt_price_from_input",
        )
    # √P + Δy / L
    quotient = (amount_in << (RESOLUTION * 2)) // liquidity
    return to_u128(sqrt_price + quotient, "get_next_sqrt_price_from_input")


def get_next_sqrt_price_from_output(sqrt_price: int, liquidity: int, amount_out: int, base_for_quote: bool) -> int:
    """Price after removing `amount_out` from the pool.

    `base_for_quote=True` means quote leaves the pool (price falls);
    otherwise base leaves the pool (price rises). Both round against the trader.
    """
    _check_price_and_liquidity(sqrt_price, liquidity)
    if amount_out == 0:
        return sqrt_price
    if base_for_quote:
        quotient = ceil_div(amount_out << (RESOLUTION * 2), liquidity)
        if quotient >= sqrt_price:
            raise CurveDomainError("quote output exceeds segment liquidity")
        return sqrt_price - quotient
    product = amount_out * sqrt_price
    if product >= liquidity:
        raise CurveDomainError("base output exceeds segment liquidity")
    return to_u128(
        mul_div(liquidity, sqrt_price, liquidity - product, Rounding.UP),
        "get_next_sqrt_price_from_output",
    )


# ---------------------------------------------------------------------------
# Inverse sizing (construction only)
# ---------------------------------------------------------------------------

def get_initial_liquidity_from_delta_base(base_amount: int, lower: int, upper: int) -> int:
    """Liquidity that moves exactly `base_amount` across (lower, upper] (floored)."""
    _check_bounds(lower, upper)
    if lower == upper:
        raise CurveDomainError("cannot size liquidity over an empty interval")
    return to_u128(base_amount * lower * upper // (upper - lower), "get_initial_liquidity_from_delta_base")


def get_initial_liquidity_from_delta_quote(quote_amount: int, lower: int, upper: int) -> int:
    """Liquidity that moves exactly `quote_amount` across (lower, upper] (floored)."""
    _check_bounds(lower, upper)
    if lower == upper:
        raise CurveDomainError("cannot size liquidity over an empty interval")
    return to_u128((quote_amount << (RESOLUTION * 2)) // (upper - lower), "get_initial_liquidity_from_delta_quote")


# ---------------------------------------------------------------------------
# Segment iteration
# ---------------------------------------------------------------------------

def iter_segments(sqrt_start_price: int, curve: Sequence[CurvePoint]) -> Iterator[Tuple[int, int, int]]:
    """Yield (lower, upper, liquidity) for each curve point, lowest first."""
    lower = sqrt_start_price
    for point in curve:
        yield lower, point.sqrt_price, point.liquidity
        lower = point.sqrt_price


__all__ = [
    "get_delta_amount_base_unsigned",
    "get_delta_amount_base_unsigned_256",
    "get_delta_amount_quote_unsigned",
    "get_delta_amount_quote_unsigned_256",
    "get_next_sqrt_price_from_input",
    "get_next_sqrt_price_from_output",
    "get_initial_liquidity_from_delta_base",
    "get_initial_liquidity_from_delta_quote",
    "iter_segments",
]
