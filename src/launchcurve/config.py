"""
Curve Configuration and Pool State snapshots.

A CurveConfiguration is created once per launch and validated on
construction: any invariant violation raises InvalidConfigurationError, so a
bad launch is rejected instead of silently mispricing trades later. A
PoolState is the caller's read-only snapshot of runtime state; nothing in
this package mutates it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple

from .core.constants import (
    MIN_SQRT_PRICE,
    MAX_SQRT_PRICE,
    MAX_CURVE_POINT,
    MAX_RATE_LIMITER_DURATION_IN_SECONDS,
    MAX_RATE_LIMITER_DURATION_IN_SLOTS,
    MAX_MIGRATION_FEE_PERCENTAGE,
    MAX_CREATOR_MIGRATION_FEE_PERCENTAGE,
    MIN_MIGRATED_POOL_FEE_BPS,
    MAX_MIGRATED_POOL_FEE_BPS,
    MIN_TOKEN_BASE_DECIMAL,
    MAX_TOKEN_BASE_DECIMAL,
    MAX_TOKEN_QUOTE_DECIMAL,
    U64_MAX,
)
from .core.datatypes import (
    ActivationType,
    BaseFee,
    CollectFeeMode,
    CurvePoint,
    DynamicFeeConfig,
    LockedVesting,
    MigratedPoolFee,
    MigrationFee,
    MigrationFeeOption,
    MigrationOption,
    RateLimiter,
    VolatilityTracker,
)
from .core.exc import InvalidConfigurationError
from .fees import PoolFees, get_rate_limiter_max_index

# Debug printing control
DEBUG_CONFIG = False

def _dbg(msg: str) -> None:
    if DEBUG_CONFIG:
        print(msg)


def _percent(name: str, v: int, hi: int = 100) -> None:
    if not isinstance(v, int) or v < 0 or v > hi:
        raise InvalidConfigurationError(f"{name} must be an integer in [0, {hi}], got {v!r}")


# ---------------------------------------------------------------------------
# Curve validation
# ---------------------------------------------------------------------------

def validate_curve(sqrt_start_price: int, curve: Sequence[CurvePoint]) -> None:
    """Curve shape invariants: non-empty, at most MAX_CURVE_POINT, strictly increasing in range."""
    if not curve:
        raise InvalidConfigurationError("curve must contain at least one point")
    if len(curve) > MAX_CURVE_POINT:
        raise InvalidConfigurationError(f"curve has {len(curve)} points; at most {MAX_CURVE_POINT} allowed")
    if sqrt_start_price < MIN_SQRT_PRICE or sqrt_start_price >= MAX_SQRT_PRICE:
        raise InvalidConfigurationError(f"sqrt_start_price {sqrt_start_price} outside [MIN_SQRT_PRICE, MAX_SQRT_PRICE)")
    previous = sqrt_start_price
    for i, point in enumerate(curve):
        if point.sqrt_price <= previous:
            raise InvalidConfigurationError(
                f"curve[{i}].sqrt_price={point.sqrt_price} must be > previous bound {previous}"
            )
        if point.sqrt_price > MAX_SQRT_PRICE:
            raise InvalidConfigurationError(f"curve[{i}].sqrt_price exceeds MAX_SQRT_PRICE")
        if point.liquidity == 0:
            raise InvalidConfigurationError(f"curve[{i}].liquidity must be > 0")
        previous = point.sqrt_price


def validate_migrated_pool_fee(
    migration_option: MigrationOption,
    migration_fee_option: MigrationFeeOption,
    migrated_pool_fee: MigratedPoolFee,
) -> None:
    """Customizable post-migration fees only exist on DAMM v2.

    Non-default values on any other combination are rejected rather than
    dropped, so a caller never believes a fee was configured when it was not.
    """
    customizable = migration_fee_option == MigrationFeeOption.CUSTOMIZABLE
    if customizable and migration_option != MigrationOption.MET_DAMM_V2:
        raise InvalidConfigurationError("Customizable migration fee option requires MET_DAMM_V2")
    if customizable:
        if not MIN_MIGRATED_POOL_FEE_BPS <= migrated_pool_fee.pool_fee_bps <= MAX_MIGRATED_POOL_FEE_BPS:
            raise InvalidConfigurationError(
                f"migrated pool fee must be within [{MIN_MIGRATED_POOL_FEE_BPS}, {MAX_MIGRATED_POOL_FEE_BPS}] bps"
            )
        if migrated_pool_fee.collect_fee_mode not in (0, 1):
            raise InvalidConfigurationError("migrated pool collect_fee_mode must be 0 or 1")
        if migrated_pool_fee.dynamic_fee not in (0, 1):
            raise InvalidConfigurationError("migrated pool dynamic_fee must be 0 or 1")
    elif not migrated_pool_fee.is_default():
        raise InvalidConfigurationError(
            "migrated pool fee can only be customized with MET_DAMM_V2 and the Customizable fee option"
        )


def _validate_rate_limiter(limiter: RateLimiter, activation_type: ActivationType, collect_fee_mode: CollectFeeMode) -> None:
    if limiter.is_zero_rate_limiter():
        return
    if collect_fee_mode != CollectFeeMode.QUOTE_TOKEN:
        raise InvalidConfigurationError("rate limiter requires fees collected in the quote token")
    if limiter.reference_amount == 0 or limiter.max_limiter_duration == 0 or limiter.fee_increment_bps == 0:
        raise InvalidConfigurationError("rate limiter fields must all be > 0")
    if get_rate_limiter_max_index(limiter) < 1:
        raise InvalidConfigurationError("rate limiter fee increment is too large for the cliff fee")
    max_duration = (
        MAX_RATE_LIMITER_DURATION_IN_SLOTS
        if activation_type == ActivationType.SLOT
        else MAX_RATE_LIMITER_DURATION_IN_SECONDS
    )
    if limiter.max_limiter_duration > max_duration:
        raise InvalidConfigurationError(f"rate limiter duration exceeds {max_duration}")


# ---------------------------------------------------------------------------
# Curve Configuration
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CurveConfiguration:
    """Immutable launch configuration read by every quote.

    Fields:
    - sqrt_start_price / curve: the piecewise liquidity curve; segment i spans
      (curve[i-1].sqrt_price, curve[i].sqrt_price], and segment 0 spans
      (sqrt_start_price, curve[0].sqrt_price].
    - base_fee / dynamic_fee: fee parameters (see fees.PoolFees).
    - collect_fee_mode: fees in quote token or in output token.
    - migration_quote_threshold: quote reserve (smallest units) that completes the curve.
    - migration_sqrt_price: price at which the threshold is reached; partial
      fills buying base stop here. None means the end of the curve.
    - locked_vesting / leftover / total_supply: base supply accounting.
    - *_lp_percentage: LP split after migration (sum to 100 unless NO_MIGRATION).
    - no_migration_*_surplus_percentage: surplus split (sum to 100 for NO_MIGRATION).
    """

    sqrt_start_price: int
    curve: Tuple[CurvePoint, ...]
    base_fee: BaseFee
    dynamic_fee: Optional[DynamicFeeConfig] = None
    collect_fee_mode: CollectFeeMode = CollectFeeMode.QUOTE_TOKEN
    activation_type: ActivationType = ActivationType.SLOT
    migration_option: MigrationOption = MigrationOption.MET_DAMM_V2
    token_base_decimal: int = 6
    token_quote_decimal: int = 9
    migration_quote_threshold: int = 0
    migration_sqrt_price: Optional[int] = None
    migration_fee_option: MigrationFeeOption = MigrationFeeOption.FIXED_BPS_25
    migration_fee: MigrationFee = field(default_factory=MigrationFee)
    migrated_pool_fee: MigratedPoolFee = field(default_factory=MigratedPoolFee)
    locked_vesting: LockedVesting = field(default_factory=LockedVesting)
    leftover: int = 0
    total_supply: int = 0
    partner_lp_percentage: int = 0
    creator_lp_percentage: int = 0
    partner_locked_lp_percentage: int = 50
    creator_locked_lp_percentage: int = 50
    creator_trading_fee_percentage: int = 0
    no_migration_partner_surplus_percentage: int = 0
    no_migration_creator_surplus_percentage: int = 0
    no_migration_protocol_surplus_percentage: int = 0

    def __post_init__(self):
        # accept any sequence but store a tuple so the snapshot stays immutable
        object.__setattr__(self, "curve", tuple(self.curve))
        validate_curve(self.sqrt_start_price, self.curve)

        # raises on out-of-range cliff numerators
        fees = self.pool_fees
        if isinstance(fees.base_fee, RateLimiter):
            _validate_rate_limiter(fees.base_fee, self.activation_type, self.collect_fee_mode)

        if not MIN_TOKEN_BASE_DECIMAL <= self.token_base_decimal <= MAX_TOKEN_BASE_DECIMAL:
            raise InvalidConfigurationError(
                f"token_base_decimal must be within [{MIN_TOKEN_BASE_DECIMAL}, {MAX_TOKEN_BASE_DECIMAL}]"
            )
        if not 0 <= self.token_quote_decimal <= MAX_TOKEN_QUOTE_DECIMAL:
            raise InvalidConfigurationError(f"token_quote_decimal must be within [0, {MAX_TOKEN_QUOTE_DECIMAL}]")

        if self.migration_quote_threshold < 0 or self.migration_quote_threshold > U64_MAX:
            raise InvalidConfigurationError("migration_quote_threshold must fit in u64")
        if self.migration_sqrt_price is not None and not (
            self.sqrt_start_price < self.migration_sqrt_price <= self.curve[-1].sqrt_price
        ):
            raise InvalidConfigurationError("migration_sqrt_price must lie within (sqrt_start_price, last curve price]")
        if self.leftover < 0 or self.total_supply < 0 or self.total_supply > U64_MAX:
            raise InvalidConfigurationError("leftover and total_supply must be non-negative u64 values")

        _percent("migration_fee.fee_percentage", self.migration_fee.fee_percentage, MAX_MIGRATION_FEE_PERCENTAGE)
        _percent(
            "migration_fee.creator_fee_percentage",
            self.migration_fee.creator_fee_percentage,
            MAX_CREATOR_MIGRATION_FEE_PERCENTAGE,
        )
        _percent("creator_trading_fee_percentage", self.creator_trading_fee_percentage)
        validate_migrated_pool_fee(self.migration_option, self.migration_fee_option, self.migrated_pool_fee)

        if self.migration_option == MigrationOption.NO_MIGRATION:
            surplus = (
                self.no_migration_partner_surplus_percentage,
                self.no_migration_creator_surplus_percentage,
                self.no_migration_protocol_surplus_percentage,
            )
            for name, v in zip(("partner", "creator", "protocol"), surplus):
                _percent(f"no_migration_{name}_surplus_percentage", v)
            if sum(surplus) != 100:
                raise InvalidConfigurationError(f"no-migration surplus percentages must sum to 100, got {sum(surplus)}")
        else:
            lp = (
                self.partner_lp_percentage,
                self.creator_lp_percentage,
                self.partner_locked_lp_percentage,
                self.creator_locked_lp_percentage,
            )
            for name, v in zip(("partner_lp", "creator_lp", "partner_locked_lp", "creator_locked_lp"), lp):
                _percent(f"{name}_percentage", v)
            if sum(lp) != 100:
                raise InvalidConfigurationError(f"LP percentages must sum to 100, got {sum(lp)}")

        _dbg(f"CurveConfiguration: start={self.sqrt_start_price}, points={len(self.curve)}, "
             f"threshold={self.migration_quote_threshold}")

    @property
    def pool_fees(self) -> PoolFees:
        return PoolFees(self.base_fee, self.dynamic_fee)

    @property
    def max_sqrt_price(self) -> int:
        return self.curve[-1].sqrt_price


# ---------------------------------------------------------------------------
# Pool State
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PoolState:
    """Per-launch runtime snapshot supplied by the settlement layer."""

    sqrt_price: int
    base_reserve: int = 0
    quote_reserve: int = 0
    activation_point: int = 0
    is_paused: bool = False
    volatility_tracker: VolatilityTracker = field(default_factory=VolatilityTracker)

    def __post_init__(self):
        if self.sqrt_price <= 0:
            raise InvalidConfigurationError("pool sqrt_price must be > 0")
        if self.base_reserve < 0 or self.quote_reserve < 0:
            raise InvalidConfigurationError("pool reserves must be >= 0")

    @classmethod
    def at_launch(cls, config: CurveConfiguration, *, base_reserve: int = 0, activation_point: int = 0) -> "PoolState":
        """Fresh pool sitting at the configuration's start price."""
        return cls(
            sqrt_price=config.sqrt_start_price,
            base_reserve=base_reserve,
            quote_reserve=0,
            activation_point=activation_point,
        )


__all__ = [
    "validate_curve",
    "validate_migrated_pool_fee",
    "CurveConfiguration",
    "PoolState",
]
