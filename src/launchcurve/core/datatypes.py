"""
Core datatypes for curve quoting and construction (integer domain).

All value types are immutable so a Curve Configuration or Pool State snapshot
can be shared freely between concurrent quotes.

Notes:
- Sqrt prices are Q64.64 integers; liquidity carries the matching 2^64 scale.
- Fee numerators are over FEE_DENOMINATOR (1e9).
- The base fee is a sum type: `BaseFee = Union[FeeScheduler, RateLimiter]`.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Optional, Union

from .constants import (
    U64_MAX,
    U128_MAX,
    FEE_DENOMINATOR,
    BASIS_POINT_MAX,
)
from .exc import InvalidConfigurationError


def _check_u64(name: str, v: int) -> None:
    if not isinstance(v, int) or v < 0 or v > U64_MAX:
        raise InvalidConfigurationError(f"{name} must be an integer in [0, U64_MAX], got {v!r}")


def _check_u128(name: str, v: int) -> None:
    if not isinstance(v, int) or v < 0 or v > U128_MAX:
        raise InvalidConfigurationError(f"{name} must be an integer in [0, U128_MAX], got {v!r}")


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class TradeDirection(Enum):
    BASE_TO_QUOTE = "base_to_quote"
    QUOTE_TO_BASE = "quote_to_base"


class SwapMode(IntEnum):
    EXACT_IN = 0
    PARTIAL_FILL = 1
    EXACT_OUT = 2


class CollectFeeMode(IntEnum):
    QUOTE_TOKEN = 0
    OUTPUT_TOKEN = 1


class ActivationType(IntEnum):
    SLOT = 0
    TIMESTAMP = 1


class MigrationOption(IntEnum):
    MET_DAMM = 0
    MET_DAMM_V2 = 1
    NO_MIGRATION = 2


class MigrationFeeOption(IntEnum):
    FIXED_BPS_25 = 0
    FIXED_BPS_30 = 1
    FIXED_BPS_100 = 2
    FIXED_BPS_200 = 3
    FIXED_BPS_400 = 4
    FIXED_BPS_600 = 5
    CUSTOMIZABLE = 6


class BaseFeeMode(IntEnum):
    FEE_SCHEDULER_LINEAR = 0
    FEE_SCHEDULER_EXPONENTIAL = 1
    RATE_LIMITER = 2


# ---------------------------------------------------------------------------
# Curve
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CurvePoint:
    """One curve segment: liquidity over (previous upper, sqrt_price].

    Fields:
    - sqrt_price: upper bound of the segment (Q64.64).
    - liquidity: u128 liquidity active inside the segment.
    """

    sqrt_price: int
    liquidity: int

    def __post_init__(self):
        _check_u128("sqrt_price", self.sqrt_price)
        _check_u128("liquidity", self.liquidity)


# ---------------------------------------------------------------------------
# Fees
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FeeScheduler:
    """Time-decaying base fee (linear or exponential).

    Fields:
    - cliff_fee_numerator: fee numerator before the first period elapses.
    - number_of_period: number of decay steps.
    - period_frequency: points (slots/seconds) per step; 0 keeps the cliff fee.
    - reduction_factor: numerator decrement per step (linear) or bps decay rate (exponential).
    - mode: FEE_SCHEDULER_LINEAR or FEE_SCHEDULER_EXPONENTIAL.
    """

    cliff_fee_numerator: int
    number_of_period: int
    period_frequency: int
    reduction_factor: int
    mode: BaseFeeMode = BaseFeeMode.FEE_SCHEDULER_LINEAR

    def __post_init__(self):
        if self.mode not in (BaseFeeMode.FEE_SCHEDULER_LINEAR, BaseFeeMode.FEE_SCHEDULER_EXPONENTIAL):
            raise InvalidConfigurationError(f"FeeScheduler mode must be a scheduler mode, got {self.mode!r}")
        _check_u64("cliff_fee_numerator", self.cliff_fee_numerator)
        _check_u64("number_of_period", self.number_of_period)
        _check_u64("period_frequency", self.period_frequency)
        _check_u64("reduction_factor", self.reduction_factor)
        if self.mode == BaseFeeMode.FEE_SCHEDULER_EXPONENTIAL and self.reduction_factor > BASIS_POINT_MAX:
            raise InvalidConfigurationError("exponential reduction_factor must be <= BASIS_POINT_MAX")


@dataclass(frozen=True)
class RateLimiter:
    """Size-dependent base fee applied to QuoteToBase trades after activation.

    Fields:
    - cliff_fee_numerator: fee numerator for trades up to `reference_amount`.
    - fee_increment_bps: numerator step (in bps) for each further `reference_amount`.
    - max_limiter_duration: points after activation during which the limiter applies.
    - reference_amount: quote-token amount per step (smallest units).
    """

    cliff_fee_numerator: int
    fee_increment_bps: int
    max_limiter_duration: int
    reference_amount: int

    def __post_init__(self):
        _check_u64("cliff_fee_numerator", self.cliff_fee_numerator)
        _check_u64("fee_increment_bps", self.fee_increment_bps)
        _check_u64("max_limiter_duration", self.max_limiter_duration)
        _check_u64("reference_amount", self.reference_amount)

    @property
    def mode(self) -> BaseFeeMode:
        return BaseFeeMode.RATE_LIMITER

    @property
    def fee_increment_numerator(self) -> int:
        return self.fee_increment_bps * FEE_DENOMINATOR // BASIS_POINT_MAX

    def is_zero_rate_limiter(self) -> bool:
        return self.reference_amount == 0 and self.max_limiter_duration == 0 and self.fee_increment_bps == 0


BaseFee = Union[FeeScheduler, RateLimiter]


@dataclass(frozen=True)
class DynamicFeeConfig:
    """Volatility surcharge parameters."""

    bin_step: int
    bin_step_u128: int
    filter_period: int
    decay_period: int
    reduction_factor: int
    max_volatility_accumulator: int
    variable_fee_control: int

    def __post_init__(self):
        if self.bin_step <= 0 or self.bin_step_u128 <= 0:
            raise InvalidConfigurationError("bin_step and bin_step_u128 must be > 0")
        if self.filter_period >= self.decay_period:
            raise InvalidConfigurationError("filter_period must be < decay_period")
        if self.reduction_factor > BASIS_POINT_MAX:
            raise InvalidConfigurationError("reduction_factor must be <= BASIS_POINT_MAX")
        _check_u64("max_volatility_accumulator", self.max_volatility_accumulator)
        _check_u64("variable_fee_control", self.variable_fee_control)


@dataclass(frozen=True)
class VolatilityTracker:
    """Rolling volatility state stored on the pool (read-only snapshot here)."""

    last_update_timestamp: int = 0
    sqrt_price_reference: int = 0
    volatility_accumulator: int = 0
    volatility_reference: int = 0


@dataclass(frozen=True)
class FeeMode:
    """Where fees are charged for one trade: on input or output, and in which token."""

    fees_on_input: bool
    fees_on_base_token: bool


@dataclass(frozen=True)
class FeeBreakdown:
    """Split of a collected fee. The three shares always sum to the collected fee."""

    trading_fee: int
    protocol_fee: int
    referral_fee: int
    fees_on_base_token: bool = False

    @property
    def total(self) -> int:
        return self.trading_fee + self.protocol_fee + self.referral_fee


@dataclass(frozen=True)
class FeeOnAmountResult:
    """Amount left after fees plus the fee split."""

    amount: int
    trading_fee: int
    protocol_fee: int
    referral_fee: int


# ---------------------------------------------------------------------------
# Launch economics
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class LockedVesting:
    """Vesting schedule in smallest base units.

    total = cliff_unlock_amount + amount_per_period * number_of_period
    """

    amount_per_period: int = 0
    cliff_duration_from_migration_time: int = 0
    frequency: int = 0
    number_of_period: int = 0
    cliff_unlock_amount: int = 0

    def __post_init__(self):
        _check_u64("amount_per_period", self.amount_per_period)
        _check_u64("cliff_duration_from_migration_time", self.cliff_duration_from_migration_time)
        _check_u64("frequency", self.frequency)
        _check_u64("number_of_period", self.number_of_period)
        _check_u64("cliff_unlock_amount", self.cliff_unlock_amount)

    def total_amount(self) -> int:
        return self.cliff_unlock_amount + self.amount_per_period * self.number_of_period

    def is_empty(self) -> bool:
        return self.total_amount() == 0


@dataclass(frozen=True)
class MigrationFee:
    """Quote-side fee taken from the threshold at migration (percent)."""

    fee_percentage: int = 0
    creator_fee_percentage: int = 0


@dataclass(frozen=True)
class MigratedPoolFee:
    """Fee settings of the post-migration pool (customizable on DAMM v2 only)."""

    collect_fee_mode: int = 0
    dynamic_fee: int = 0
    pool_fee_bps: int = 0

    def is_default(self) -> bool:
        return self.collect_fee_mode == 0 and self.dynamic_fee == 0 and self.pool_fee_bps == 0


# ---------------------------------------------------------------------------
# Quote outputs
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SwapAmount:
    """Result of walking the curve with a fee-exclusive amount."""

    output_amount: int
    next_sqrt_price: int
    amount_left: int = 0


@dataclass(frozen=True)
class QuoteResult:
    """Projected outcome of one trade.

    Fields:
    - included_fee_input_amount: input the trader actually pays (consumed amount for partial fill).
    - excluded_fee_input_amount: input that reaches the curve after input-side fees.
    - amount_left: unfilled input (non-zero only for partial fill).
    - output_amount: output the trader receives after output-side fees.
    - next_sqrt_price: pool price after the trade.
    - trading_fee / protocol_fee / referral_fee: fee split.
    - minimum_amount_out / maximum_amount_in: slippage bounds (reported, never enforced).
    """

    included_fee_input_amount: int
    excluded_fee_input_amount: int
    amount_left: int
    output_amount: int
    next_sqrt_price: int
    trading_fee: int
    protocol_fee: int
    referral_fee: int
    minimum_amount_out: Optional[int] = None
    maximum_amount_in: Optional[int] = None

    @property
    def total_fee(self) -> int:
        return self.trading_fee + self.protocol_fee + self.referral_fee

    @property
    def amount_requested(self) -> int:
        return self.included_fee_input_amount + self.amount_left


__all__ = [
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
]
