"""
Launch Curve Core
=================

Unified exports for the integer-domain primitives used by the curve kernel,
fee engine, quote engine and curve builders.
All arithmetic is exact integer math with explicit rounding direction.
Decimal helpers exist only to bridge human prices and amounts.
"""

# NOTE:
#   The `core` package has no dependencies on the rest of launchcurve. Sqrt
#   prices are Q64.64 ints, liquidity is a u128 int, token amounts are u64 ints.

# Integer-domain constants
from .constants import (
    RESOLUTION,
    ONE_Q64,
    U64_MAX,
    U128_MAX,
    U256_MAX,
    MIN_SQRT_PRICE,
    MAX_SQRT_PRICE,
    MAX_CURVE_POINT,
    FEE_DENOMINATOR,
    BASIS_POINT_MAX,
    MIN_FEE_NUMERATOR,
    MAX_FEE_NUMERATOR,
    MAX_FEE_BPS,
)

# Fixed-point primitives
from .fixed_point import (
    Rounding,
    ceil_div,
    floor_div,
    mul_div,
    mul_shr,
    shl_div,
    to_u64,
    to_u128,
    sqrt_u256,
    pow_q64,
)

# Decimal bridges
from .fmt import (
    DEFAULT_DECIMAL_PRECISION,
    fmt_dec,
    to_decimal,
    from_decimal_to_int,
    to_lamports,
    bps_to_fee_numerator,
    fee_numerator_to_bps,
    get_sqrt_price_from_price,
    get_price_from_sqrt_price,
    get_sqrt_price_from_market_cap,
)

# Core datatypes
from .datatypes import (
    TradeDirection,
    SwapMode,
    CollectFeeMode,
    ActivationType,
    MigrationOption,
    MigrationFeeOption,
    BaseFeeMode,
    CurvePoint,
    FeeScheduler,
    RateLimiter,
    BaseFee,
    DynamicFeeConfig,
    VolatilityTracker,
    FeeMode,
    FeeBreakdown,
    FeeOnAmountResult,
    LockedVesting,
    MigrationFee,
    MigratedPoolFee,
    SwapAmount,
    QuoteResult,
)

# Core exceptions
from .exc import (
    MathOverflowError,
    CurveDomainError,
    InvalidConfigurationError,
    InsufficientLiquidityError,
    PrecisionReconciliationError,
    PoolPausedError,
)

__all__ = [
    # constants
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
    "MIN_FEE_NUMERATOR",
    "MAX_FEE_NUMERATOR",
    "MAX_FEE_BPS",
    # fixed point
    "Rounding",
    "ceil_div",
    "floor_div",
    "mul_div",
    "mul_shr",
    "shl_div",
    "to_u64",
    "to_u128",
    "sqrt_u256",
    "pow_q64",
    # fmt
    "DEFAULT_DECIMAL_PRECISION",
    "fmt_dec",
    "to_decimal",
    "from_decimal_to_int",
    "to_lamports",
    "bps_to_fee_numerator",
    "fee_numerator_to_bps",
    "get_sqrt_price_from_price",
    "get_price_from_sqrt_price",
    "get_sqrt_price_from_market_cap",
    # datatypes
    "TradeDirection",
    "SwapMode",
    "CollectFeeMode",
    "ActivationType",
    "MigrationOption",
    "MigrationFeeOption",
    "BaseFeeMode",
    "CurvePoint",
    "FeeScheduler",
    "RateLimiter",
    "BaseFee",
    "DynamicFeeConfig",
    "VolatilityTracker",
    "FeeMode",
    "FeeBreakdown",
    "FeeOnAmountResult",
    "LockedVesting",
    "MigrationFee",
    "MigratedPoolFee",
    "SwapAmount",
    "QuoteResult",
    # exceptions
    "MathOverflowError",
    "CurveDomainError",
    "InvalidConfigurationError",
    "InsufficientLiquidityError",
    "PrecisionReconciliationError",
    "PoolPausedError",
]
