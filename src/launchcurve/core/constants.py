"""
Launch Curve Core Constants (integer domain)
============================================

Only protocol-aligned integer constants live here. Decimal-based price
bridges live in `fmt.py`.
"""

# NOTE: Sqrt prices are Q64.64 values; liquidity carries the same 2^64 scale.

# ---------------------------------------------------------------------------
# Integer widths and fixed-point scale
# ---------------------------------------------------------------------------

#: Fixed-point resolution for sqrt prices (Q64.64).
RESOLUTION: int = 64
ONE_Q64: int = 1 << RESOLUTION

U64_MAX: int = (1 << 64) - 1
U128_MAX: int = (1 << 128) - 1
U256_MAX: int = (1 << 256) - 1

# ---------------------------------------------------------------------------
# Sqrt price range
# ---------------------------------------------------------------------------

MIN_SQRT_PRICE: int = 4295048016
MAX_SQRT_PRICE: int = 79226673521066979257578248091

#: Maximum number of (sqrt_price, liquidity) points on a curve.
MAX_CURVE_POINT: int = 16

# ---------------------------------------------------------------------------
# Fees
# ---------------------------------------------------------------------------

#: Fee numerators are expressed over this denominator (1e9 == 100%).
FEE_DENOMINATOR: int = 1_000_000_000
BASIS_POINT_MAX: int = 10_000

MIN_FEE_BPS: int = 25
MAX_FEE_BPS: int = 9_900
MIN_FEE_NUMERATOR: int = 2_500_000       # 0.25%
MAX_FEE_NUMERATOR: int = 990_000_000     # 99%

#: Share of the trading fee routed to the protocol, then to a referrer.
PROTOCOL_FEE_PERCENT: int = 20
HOST_FEE_PERCENT: int = 20

#: Ceiling on the volatility surcharge, as a percentage of the base fee.
MAX_DYNAMIC_FEE_PERCENT: int = 20

MAX_RATE_LIMITER_DURATION_IN_SECONDS: int = 43_200
MAX_RATE_LIMITER_DURATION_IN_SLOTS: int = 108_000

# Volatility (dynamic) fee defaults
DYNAMIC_FEE_FILTER_PERIOD_DEFAULT: int = 10
DYNAMIC_FEE_DECAY_PERIOD_DEFAULT: int = 120
DYNAMIC_FEE_REDUCTION_FACTOR_DEFAULT: int = 5_000
DYNAMIC_FEE_SCALING_FACTOR: int = 100_000_000_000
DYNAMIC_FEE_ROUNDING_OFFSET: int = 99_999_999_999
BIN_STEP_BPS_DEFAULT: int = 1
#: bin_step / BASIS_POINT_MAX in Q64.
BIN_STEP_BPS_U128_DEFAULT: int = 1_844_674_407_370_955
MAX_PRICE_CHANGE_BPS_DEFAULT: int = 1_500

# ---------------------------------------------------------------------------
# Migration and supply
# ---------------------------------------------------------------------------

#: Extra base supply reserved above the swap amount (percent).
SWAP_BUFFER_PERCENTAGE: int = 25
MAX_MIGRATION_FEE_PERCENTAGE: int = 99
MAX_CREATOR_MIGRATION_FEE_PERCENTAGE: int = 100

MIN_MIGRATED_POOL_FEE_BPS: int = 10
MAX_MIGRATED_POOL_FEE_BPS: int = 1_000

MIN_TOKEN_BASE_DECIMAL: int = 6
MAX_TOKEN_BASE_DECIMAL: int = 9
MAX_TOKEN_QUOTE_DECIMAL: int = 18


# ---------------------------------------------------------------------------
# Metadata
# ---------------------------------------------------------------------------

__all__ = [
    "RESOLUTION",
    "ONE_Q64",
    "U64_MAX",
    "U128_MAX",
    "U256_MAX",
    "MIN_SQRT_PRICE",
    "MAX_SQRT_PRICE",
    "MAX_CURVE_POINT",
    "FEE_DENOMINATOR",
    "BASIS_POINT_MAX",
    "MIN_FEE_BPS",
    "MAX_FEE_BPS",
    "MIN_FEE_NUMERATOR",
    "MAX_FEE_NUMERATOR",
    "PROTOCOL_FEE_PERCENT",
    "HOST_FEE_PERCENT",
    "MAX_DYNAMIC_FEE_PERCENT",
    "MAX_RATE_LIMITER_DURATION_IN_SECONDS",
    "MAX_RATE_LIMITER_DURATION_IN_SLOTS",
    "DYNAMIC_FEE_FILTER_PERIOD_DEFAULT",
    "DYNAMIC_FEE_DECAY_PERIOD_DEFAULT",
    "DYNAMIC_FEE_REDUCTION_FACTOR_DEFAULT",
    "DYNAMIC_FEE_SCALING_FACTOR",
    "DYNAMIC_FEE_ROUNDING_OFFSET",
    "BIN_STEP_BPS_DEFAULT",
    "BIN_STEP_BPS_U128_DEFAULT",
    "MAX_PRICE_CHANGE_BPS_DEFAULT",
    "SWAP_BUFFER_PERCENTAGE",
    "MAX_MIGRATION_FEE_PERCENTAGE",
    "MAX_CREATOR_MIGRATION_FEE_PERCENTAGE",
    "MIN_MIGRATED_POOL_FEE_BPS",
    "MAX_MIGRATED_POOL_FEE_BPS",
    "MIN_TOKEN_BASE_DECIMAL",
    "MAX_TOKEN_BASE_DECIMAL",
    "MAX_TOKEN_QUOTE_DECIMAL",
]
