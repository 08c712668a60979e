# Top-level API for launchcurve (integer-domain).
"""
Top-level API for launchcurve (integer-domain).

This module exposes the stable interface of the bonding-curve launch core:
  - CurveConfiguration / PoolState: the read-only snapshots every call works on
  - swap_quote*: exact-in, exact-out and partial-fill quotes
  - build_curve*: launch economics -> validated CurveConfiguration

All on-curve arithmetic is integer-domain with explicit rounding. Decimal is
only used to bridge human prices, market caps and token amounts.
"""

# NOTE:
#   Lower-level pieces (curve_math kernel, fee engine helpers, supply helpers)
#   stay importable from their modules; only the common surface is re-exported.

from __future__ import annotations


# Snapshots
from .config import CurveConfiguration, PoolState

# Quote engine
from .quote import (
    swap_quote,
    swap_quote_exact_in,
    swap_quote_exact_out,
    swap_quote_partial_fill,
    get_minimum_amount_out,
    get_maximum_amount_in,
)

# Fee engine
from .fees import (
    PoolFees,
    FeeSchedulerParams,
    RateLimiterParams,
    BaseFeeParams,
    get_fee_mode,
    split_fee,
)

# Curve construction
from .build_curve import (
    LaunchParams,
    LockedVestingParams,
    BuildCurveParams,
    BuildCurveWithMarketCapParams,
    BuildCurveWithTwoSegmentsParams,
    BuildCurveWithMidPriceParams,
    BuildCurveWithLiquidityWeightsParams,
    build_curve,
    build_curve_with_market_cap,
    build_curve_with_two_segments,
    build_curve_with_mid_price,
    build_curve_with_liquidity_weights,
    get_curve_progress,
)

# Core data types and errors
from .core import (
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
    DynamicFeeConfig,
    VolatilityTracker,
    LockedVesting,
    MigrationFee,
    MigratedPoolFee,
    QuoteResult,
    MathOverflowError,
    CurveDomainError,
    InvalidConfigurationError,
    InsufficientLiquidityError,
    PrecisionReconciliationError,
    PoolPausedError,
)

__all__ = [
    # snapshots
    "CurveConfiguration",
    "PoolState",
    # quotes
    "swap_quote",
    "swap_quote_exact_in",
    "swap_quote_exact_out",
    "swap_quote_partial_fill",
    "get_minimum_amount_out",
    "get_maximum_amount_in",
    # fees
    "PoolFees",
    "FeeSchedulerParams",
    "RateLimiterParams",
    "BaseFeeParams",
    "get_fee_mode",
    "split_fee",
    # construction
    "LaunchParams",
    "LockedVestingParams",
    "BuildCurveParams",
    "BuildCurveWithMarketCapParams",
    "BuildCurveWithTwoSegmentsParams",
    "BuildCurveWithMidPriceParams",
    "BuildCurveWithLiquidityWeightsParams",
    "build_curve",
    "build_curve_with_market_cap",
    "build_curve_with_two_segments",
    "build_curve_with_mid_price",
    "build_curve_with_liquidity_weights",
    "get_curve_progress",
    # core data types
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
    "DynamicFeeConfig",
    "VolatilityTracker",
    "LockedVesting",
    "MigrationFee",
    "MigratedPoolFee",
    "QuoteResult",
    # errors
    "MathOverflowError",
    "CurveDomainError",
    "InvalidConfigurationError",
    "InsufficientLiquidityError",
    "PrecisionReconciliationError",
    "PoolPausedError",
]
