"""
Decimal bridges between human prices/amounts and the integer domain.

Core arithmetic uses integers. Decimal is used where a launch is described in
human terms (market caps, token amounts, prices) and for display.
"""

from decimal import Decimal, getcontext, ROUND_FLOOR
from typing import Union

from .constants import FEE_DENOMINATOR, BASIS_POINT_MAX, RESOLUTION
from .exc import CurveDomainError

# Debug printing control (formatting layer)
DEBUG_FMT = False

def _dbg(msg: str) -> None:
    if DEBUG_FMT:
        print(msg)


# ---------------------------------------------------------------------------
# Global Decimal precision
# ---------------------------------------------------------------------------

#: Default global precision (significant digits). Construction math multiplies
#: Q64 prices by 2^128 scaled thresholds, so this must comfortably exceed 60 digits.
DEFAULT_DECIMAL_PRECISION: int = 80
getcontext().prec = DEFAULT_DECIMAL_PRECISION

Number = Union[int, float, str, Decimal]

TWO_POW_64: Decimal = Decimal(2) ** RESOLUTION
TWO_POW_128: Decimal = Decimal(2) ** (2 * RESOLUTION)


def to_decimal(x: Number) -> Decimal:
    """Convert to Decimal; floats go through their shortest repr, not binary expansion."""
    if isinstance(x, Decimal):
        return x
    if isinstance(x, float):
        return Decimal(repr(x))
    return Decimal(x)


def fmt_dec(x: Decimal, places: int = 18) -> str:
    """Format a Decimal in scientific notation with fixed fractional digits."""
    return format(x, f".{places}E")


# ---------------------------------------------------------------------------
# Integer bridges
# ---------------------------------------------------------------------------

def from_decimal_to_int(x: Number) -> int:
    """Floor a non-negative Decimal to an integer."""
    d = to_decimal(x)
    if d < 0:
        raise CurveDomainError("negative value cannot be bridged to the integer domain")
    return int(d.to_integral_value(rounding=ROUND_FLOOR))


def to_lamports(amount: Number, decimals: int) -> int:
    """Human token amount -> smallest units (floor)."""
    return from_decimal_to_int(to_decimal(amount) * (Decimal(10) ** decimals))


def bps_to_fee_numerator(bps: int) -> int:
    return bps * FEE_DENOMINATOR // BASIS_POINT_MAX


def fee_numerator_to_bps(numerator: int) -> int:
    return numerator * BASIS_POINT_MAX // FEE_DENOMINATOR


# ---------------------------------------------------------------------------
# Price bridges
# ---------------------------------------------------------------------------

def get_sqrt_price_from_price(price: Number, base_decimal: int, quote_decimal: int) -> int:
    """Human price (quote per base) -> Q64.64 sqrt price, floored.

    price = (sqrt_price / 2^64)^2 * 10^(base_decimal - quote_decimal)
    """
    p = to_decimal(price)
    if p <= 0:
        raise CurveDomainError("price must be > 0")
    adjusted = p / (Decimal(10) ** (base_decimal - quote_decimal))
    sqrt_q64 = adjusted.sqrt() * TWO_POW_64
    out = from_decimal_to_int(sqrt_q64)
    _dbg(f"get_sqrt_price_from_price: price={p} -> sqrt_price={out}")
    return out


def get_price_from_sqrt_price(sqrt_price: int, base_decimal: int, quote_decimal: int) -> Decimal:
    """Q64.64 sqrt price -> human price (quote per base)."""
    s = Decimal(sqrt_price)
    lamport_price = s * s / TWO_POW_128
    return lamport_price * (Decimal(10) ** (base_decimal - quote_decimal))


def get_sqrt_price_from_market_cap(
    market_cap: Number, total_supply: Number, base_decimal: int, quote_decimal: int
) -> int:
    supply = to_decimal(total_supply)
    if supply <= 0:
        raise CurveDomainError("total supply must be > 0")
    return get_sqrt_price_from_price(to_decimal(market_cap) / supply, base_decimal, quote_decimal)


__all__ = [
    "DEFAULT_DECIMAL_PRECISION",
    "TWO_POW_64",
    "TWO_POW_128",
    "Number",
    "to_decimal",
    "fmt_dec",
    "from_decimal_to_int",
    "to_lamports",
    "bps_to_fee_numerator",
    "fee_numerator_to_bps",
    "get_sqrt_price_from_price",
    "get_price_from_sqrt_price",
    "get_sqrt_price_from_market_cap",
]
