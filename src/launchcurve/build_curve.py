"""
Curve construction: launch economics -> validated CurveConfiguration.

Builders (increasing complexity):
  - build_curve: one segment solved in closed form, plus a final segment up to
    MAX_SQRT_PRICE absorbing any remaining supply.
  - build_curve_with_market_cap: derives the migration percentage and
    threshold from two market caps, then delegates to build_curve.
  - build_curve_with_two_segments / build_curve_with_mid_price: a 2x2 linear
    system for two liquidities over (start, mid, migration).
  - build_curve_with_liquidity_weights: 16 geometric price steps, one scalar
    liquidity scaled per segment by its weight.

Every builder ends with a supply reconciliation pass: the supply reconstructed
from the curve may exceed the declared total only by strictly less than the
leftover, otherwise PrecisionReconciliationError.

Human inputs (token amounts, market caps, thresholds) are Decimal; everything
that reaches the curve is an integer in smallest units.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from math import isqrt
from typing import List, Optional, Sequence, Tuple

from .config import CurveConfiguration, PoolState, validate_migrated_pool_fee
from .core.constants import (
    MIN_SQRT_PRICE,
    MAX_SQRT_PRICE,
    MAX_CURVE_POINT,
    RESOLUTION,
    SWAP_BUFFER_PERCENTAGE,
    U64_MAX,
)
from .core.datatypes import (
    ActivationType,
    BaseFee,
    CollectFeeMode,
    CurvePoint,
    LockedVesting,
    MigratedPoolFee,
    MigrationFee,
    MigrationFeeOption,
    MigrationOption,
)
from .core.exc import (
    CurveDomainError,
    InvalidConfigurationError,
    MathOverflowError,
    PrecisionReconciliationError,
)
from .core.fixed_point import Rounding
from .core.fmt import (
    TWO_POW_128,
    Number,
    from_decimal_to_int,
    get_sqrt_price_from_market_cap,
    get_sqrt_price_from_price,
    to_decimal,
    to_lamports,
)
from .curve_math import (
    get_delta_amount_base_unsigned,
    get_delta_amount_quote_unsigned,
    get_initial_liquidity_from_delta_base,
    get_initial_liquidity_from_delta_quote,
    get_next_sqrt_price_from_input,
    iter_segments,
)
from .fees import BaseFeeParams, get_base_fee_params, get_dynamic_fee_params

# Debug printing control
DEBUG_BUILD = False

def _dbg(msg: str) -> None:
    if DEBUG_BUILD:
        print(f"[BUILD] {msg}")


# ---------------------------------------------------------------------------
# Parameters
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class LockedVestingParams:
    """Vesting schedule in human base-token units."""

    total_locked_vesting_amount: Number = 0
    number_of_vesting_period: int = 0
    cliff_unlock_amount: Number = 0
    total_vesting_duration: int = 0
    cliff_duration_from_migration_time: int = 0


@dataclass(frozen=True)
class LaunchParams:
    """Launch settings shared by every builder.

    Amounts (`total_token_supply`, `leftover`) are human base-token units.
    """

    total_token_supply: Number
    base_fee_params: BaseFeeParams
    migration_option: MigrationOption = MigrationOption.MET_DAMM_V2
    token_base_decimal: int = 6
    token_quote_decimal: int = 9
    locked_vesting_param: LockedVestingParams = field(default_factory=LockedVestingParams)
    leftover: Number = 0
    dynamic_fee_enabled: bool = False
    activation_type: ActivationType = ActivationType.SLOT
    collect_fee_mode: CollectFeeMode = CollectFeeMode.QUOTE_TOKEN
    migration_fee_option: MigrationFeeOption = MigrationFeeOption.FIXED_BPS_25
    migration_fee: MigrationFee = field(default_factory=MigrationFee)
    migrated_pool_fee: Optional[MigratedPoolFee] = None
    partner_lp_percentage: int = 0
    creator_lp_percentage: int = 0
    partner_locked_lp_percentage: int = 50
    creator_locked_lp_percentage: int = 50
    creator_trading_fee_percentage: int = 0
    no_migration_partner_surplus_percentage: int = 0
    no_migration_creator_surplus_percentage: int = 0
    no_migration_protocol_surplus_percentage: int = 0


@dataclass(frozen=True)
class BuildCurveParams:
    launch: LaunchParams
    percentage_supply_on_migration: Number
    migration_quote_threshold: Number       # human quote units


@dataclass(frozen=True)
class BuildCurveWithMarketCapParams:
    launch: LaunchParams
    initial_market_cap: Number
    migration_market_cap: Number


@dataclass(frozen=True)
class BuildCurveWithTwoSegmentsParams:
    launch: LaunchParams
    initial_market_cap: Number
    migration_market_cap: Number
    percentage_supply_on_migration: Number


@dataclass(frozen=True)
class BuildCurveWithMidPriceParams:
    launch: LaunchParams
    initial_market_cap: Number
    migration_market_cap: Number
    mid_price: Number
    percentage_supply_on_migration: Number


@dataclass(frozen=True)
class BuildCurveWithLiquidityWeightsParams:
    launch: LaunchParams
    initial_market_cap: Number
    migration_market_cap: Number
    liquidity_weights: Tuple[Number, ...]


@dataclass(frozen=True)
class CurveBreakdown:
    """Quote allocated to each segment up to the migration threshold."""

    segment_amounts: Tuple[int, ...]
    final_sqrt_price: int
    total_amount: int


@dataclass(frozen=True)
class Tokenomics:
    bonding_curve_supply: int
    migration_supply: int
    leftover_supply: int
    locked_vesting_supply: int


# ---------------------------------------------------------------------------
# Vesting and supply helpers
# ---------------------------------------------------------------------------

def get_locked_vesting_params(
    total_locked_vesting_amount: Number,
    number_of_vesting_period: int,
    cliff_unlock_amount: Number,
    total_vesting_duration: int,
    cliff_duration_from_migration_time: int,
    token_base_decimal: int,
) -> LockedVesting:
    """Human vesting inputs -> LockedVesting in smallest units.

    total = cliff_unlock + amount_per_period * number_of_period; the per-period
    amount is floored to whole tokens and the remainder is folded into the cliff.
    """
    total = to_decimal(total_locked_vesting_amount)
    cliff = to_decimal(cliff_unlock_amount)
    if total == 0:
        return LockedVesting()

    if total == cliff:
        # a vesting schedule needs at least one period: unlock one token there
        return LockedVesting(
            amount_per_period=to_lamports(1, token_base_decimal),
            cliff_duration_from_migration_time=cliff_duration_from_migration_time,
            frequency=1,
            number_of_period=1,
            cliff_unlock_amount=to_lamports(total - 1, token_base_decimal),
        )

    if number_of_vesting_period <= 0:
        raise InvalidConfigurationError("Total periods must be greater than zero")
    if total_vesting_duration <= 0:
        raise InvalidConfigurationError("numberOfPeriod and totalVestingDuration must both be greater than zero")
    if cliff > total:
        raise InvalidConfigurationError("Cliff unlock amount cannot be greater than total locked vesting amount")

    rounded_per_period = from_decimal_to_int((total - cliff) / number_of_vesting_period)
    remainder = total - (cliff + rounded_per_period * number_of_vesting_period)
    adjusted_cliff = cliff + remainder

    return LockedVesting(
        amount_per_period=to_lamports(rounded_per_period, token_base_decimal),
        cliff_duration_from_migration_time=cliff_duration_from_migration_time,
        frequency=total_vesting_duration // number_of_vesting_period,
        number_of_period=number_of_vesting_period,
        cliff_unlock_amount=to_lamports(adjusted_cliff, token_base_decimal),
    )


def get_total_vesting_amount(locked_vesting: LockedVesting) -> int:
    return locked_vesting.total_amount()


def get_total_token_supply(swap_base_amount: int, migration_base_threshold: int, locked_vesting: LockedVesting) -> int:
    """Swap + migration + vesting, checked against u64."""
    total = swap_base_amount + migration_base_threshold + locked_vesting.total_amount()
    if total < 0 or total > U64_MAX:
        raise MathOverflowError(total, 64, context="get_total_token_supply")
    return total


def get_base_token_for_swap(sqrt_start_price: int, sqrt_migration_price: int, curve: Sequence[CurvePoint]) -> int:
    """Base sold along the curve from the start price up to the migration price (rounded up)."""
    total = 0
    for lower, upper, liquidity in iter_segments(sqrt_start_price, curve):
        if upper > sqrt_migration_price:
            total += get_delta_amount_base_unsigned(lower, sqrt_migration_price, liquidity, Rounding.UP)
            break
        total += get_delta_amount_base_unsigned(lower, upper, liquidity, Rounding.UP)
    return total


def get_swap_amount_with_buffer(swap_base_amount: int, sqrt_start_price: int, curve: Sequence[CurvePoint]) -> int:
    """Swap supply plus SWAP_BUFFER_PERCENTAGE, bounded by what the curve can sell up to MAX_SQRT_PRICE."""
    with_buffer = swap_base_amount + swap_base_amount * SWAP_BUFFER_PERCENTAGE // 100
    max_on_curve = get_base_token_for_swap(sqrt_start_price, MAX_SQRT_PRICE, curve)
    return min(with_buffer, max_on_curve)


# ---------------------------------------------------------------------------
# Migration helpers
# ---------------------------------------------------------------------------

def get_migration_quote_amount_from_migration_quote_threshold(
    migration_quote_threshold: Number, migration_fee_percent: Number
) -> Decimal:
    """Quote deposited into the migrated pool: threshold * (100 - fee%) / 100."""
    return to_decimal(migration_quote_threshold) * (100 - to_decimal(migration_fee_percent)) / 100


def get_migration_quote_threshold_from_migration_quote_amount(
    migration_quote_amount: Number, migration_fee_percent: Number
) -> Decimal:
    fee = to_decimal(migration_fee_percent)
    if fee >= 100:
        raise InvalidConfigurationError("migration fee percentage must be < 100")
    return to_decimal(migration_quote_amount) * 100 / (100 - fee)


def get_migration_quote_amount(migration_market_cap: Number, percentage_supply_on_migration: Number) -> Decimal:
    return to_decimal(migration_market_cap) * to_decimal(percentage_supply_on_migration) / 100


def get_migration_base_token(
    migration_quote_amount: int, sqrt_migration_price: int, migration_option: MigrationOption
) -> int:
    """Base deposited next to `migration_quote_amount` at the migration price.

    DAMM v1 pairs at the spot price (ceil(quote * 2^128 / p^2)). DAMM v2 and
    no-migration launches pair with full-range liquidity sized from the quote side.
    """
    if migration_option == MigrationOption.MET_DAMM:
        price = sqrt_migration_price * sqrt_migration_price
        quote = migration_quote_amount << (RESOLUTION * 2)
        div, mod = divmod(quote, price)
        return div + 1 if mod else div
    if migration_option in (MigrationOption.MET_DAMM_V2, MigrationOption.NO_MIGRATION):
        liquidity = get_initial_liquidity_from_delta_quote(migration_quote_amount, MIN_SQRT_PRICE, sqrt_migration_price)
        return get_delta_amount_base_unsigned(sqrt_migration_price, MAX_SQRT_PRICE, liquidity, Rounding.UP)
    raise InvalidConfigurationError(f"Invalid migration option: {migration_option!r}")


def get_migrated_pool_fee_params(
    migration_option: MigrationOption,
    migration_fee_option: MigrationFeeOption,
    migrated_pool_fee: Optional[MigratedPoolFee] = None,
) -> MigratedPoolFee:
    """Post-migration pool fee; non-default values outside DAMM v2 + Customizable are rejected."""
    fee = migrated_pool_fee if migrated_pool_fee is not None else MigratedPoolFee()
    validate_migrated_pool_fee(migration_option, migration_fee_option, fee)
    return fee


def get_migration_threshold_price(
    migration_threshold: int, sqrt_start_price: int, curve: Sequence[CurvePoint]
) -> int:
    """Price reached after buying `migration_threshold` quote from the start price."""
    if not curve:
        raise InvalidConfigurationError("Curve is empty")
    next_sqrt_price = sqrt_start_price
    amount_left = migration_threshold
    for _, upper, liquidity in iter_segments(sqrt_start_price, curve):
        max_amount = get_delta_amount_quote_unsigned(next_sqrt_price, upper, liquidity, Rounding.UP)
        if max_amount > amount_left:
            next_sqrt_price = get_next_sqrt_price_from_input(next_sqrt_price, liquidity, amount_left, False)
            amount_left = 0
            break
        amount_left -= max_amount
        next_sqrt_price = upper
    if amount_left:
        raise InvalidConfigurationError(
            f"Not enough liquidity, migrationThreshold: {migration_threshold} amountLeft: {amount_left}"
        )
    return next_sqrt_price


def get_curve_breakdown(
    migration_quote_threshold: int, sqrt_start_price: int, curve: Sequence[CurvePoint]
) -> CurveBreakdown:
    """Split the migration threshold into the quote each segment absorbs."""
    if not curve:
        raise InvalidConfigurationError("Curve is empty")
    amounts: List[int] = []
    remaining = migration_quote_threshold
    final_sqrt_price = sqrt_start_price
    for lower, upper, liquidity in iter_segments(sqrt_start_price, curve):
        if remaining == 0:
            amounts.append(0)
            continue
        max_segment = get_delta_amount_quote_unsigned(lower, upper, liquidity, Rounding.UP)
        if max_segment >= remaining:
            amounts.append(remaining)
            final_sqrt_price = get_next_sqrt_price_from_input(lower, liquidity, remaining, False)
            remaining = 0
        else:
            amounts.append(max_segment)
            remaining -= max_segment
            final_sqrt_price = upper
    if remaining:
        allocated = migration_quote_threshold - remaining
        raise InvalidConfigurationError(
            f"Not enough liquidity in curve. Total allocated: {allocated}, "
            f"Required: {migration_quote_threshold}, Shortfall: {remaining}"
        )
    return CurveBreakdown(
        segment_amounts=tuple(amounts),
        final_sqrt_price=final_sqrt_price,
        total_amount=migration_quote_threshold,
    )


def get_total_supply_from_curve(
    migration_quote_threshold: int,
    sqrt_start_price: int,
    curve: Sequence[CurvePoint],
    locked_vesting: LockedVesting,
    migration_option: MigrationOption,
    leftover: int,
    migration_fee_percent: Number,
) -> int:
    """Minimum base supply the curve needs: buffered swap + migration + vesting + leftover."""
    sqrt_migration_price = get_migration_threshold_price(migration_quote_threshold, sqrt_start_price, curve)
    swap_base_amount = get_base_token_for_swap(sqrt_start_price, sqrt_migration_price, curve)
    swap_base_amount_buffer = get_swap_amount_with_buffer(swap_base_amount, sqrt_start_price, curve)
    migration_quote_amount = from_decimal_to_int(
        get_migration_quote_amount_from_migration_quote_threshold(migration_quote_threshold, migration_fee_percent)
    )
    migration_base_amount = get_migration_base_token(migration_quote_amount, sqrt_migration_price, migration_option)
    total = swap_base_amount_buffer + migration_base_amount + locked_vesting.total_amount() + leftover
    _dbg(f"total_supply_from_curve: swap_buffer={swap_base_amount_buffer}, migration={migration_base_amount}, "
         f"vesting={locked_vesting.total_amount()}, leftover={leftover} -> {total}")
    return total


def verify_total_supply(total_dynamic_supply: int, total_supply: int, leftover: int) -> None:
    """Reconstructed supply may exceed the declared total only by less than the leftover."""
    if total_dynamic_supply > total_supply:
        delta = total_dynamic_supply - total_supply
        if delta >= leftover:
            raise PrecisionReconciliationError(total_dynamic_supply, total_supply, leftover)
        _dbg(f"precision loss {delta} absorbed by leftover {leftover}")


def get_percentage_supply_on_migration(
    initial_market_cap: Number,
    migration_market_cap: Number,
    locked_vesting: LockedVesting,
    total_leftover: int,
    total_token_supply: int,
) -> Decimal:
    """x = sqrt(r) * (100 - vesting% - leftover%) / (1 + sqrt(r)), r = initial_mc / migration_mc"""
    sqrt_ratio = (to_decimal(initial_market_cap) / to_decimal(migration_market_cap)).sqrt()
    supply = Decimal(total_token_supply)
    vesting_percentage = Decimal(locked_vesting.total_amount()) * 100 / supply
    leftover_percentage = Decimal(total_leftover) * 100 / supply
    numerator = 100 * sqrt_ratio - (vesting_percentage + leftover_percentage) * sqrt_ratio
    return numerator / (1 + sqrt_ratio)


def get_tokenomics(
    initial_market_cap: Number,
    migration_market_cap: Number,
    total_locked_vesting_amount: int,
    total_leftover: int,
    total_token_supply: int,
) -> Tokenomics:
    """Split total supply (smallest units) between curve, migration, leftover and vesting."""
    percentage = get_percentage_supply_on_migration(
        initial_market_cap,
        migration_market_cap,
        LockedVesting(cliff_unlock_amount=total_locked_vesting_amount),
        total_leftover,
        total_token_supply,
    )
    migration_supply = from_decimal_to_int(percentage * total_token_supply / 100)
    return Tokenomics(
        bonding_curve_supply=total_token_supply - migration_supply - total_leftover - total_locked_vesting_amount,
        migration_supply=migration_supply,
        leftover_supply=total_leftover,
        locked_vesting_supply=total_locked_vesting_amount,
    )


# ---------------------------------------------------------------------------
# Pool-side views
# ---------------------------------------------------------------------------

def get_quote_reserve_from_next_sqrt_price(next_sqrt_price: int, config: CurveConfiguration) -> int:
    """Quote the pool holds once the price has moved from the start to `next_sqrt_price`."""
    total = 0
    for lower, upper, liquidity in iter_segments(config.sqrt_start_price, config.curve):
        if next_sqrt_price > lower:
            total += get_delta_amount_quote_unsigned(lower, min(next_sqrt_price, upper), liquidity, Rounding.UP)
    return total


def get_curve_progress(pool: PoolState, config: CurveConfiguration) -> Decimal:
    """quote_reserve / migration_quote_threshold, clamped to [0, 1]."""
    if config.migration_quote_threshold == 0:
        raise CurveDomainError("migration quote threshold is zero; progress is undefined")
    progress = Decimal(pool.quote_reserve) / Decimal(config.migration_quote_threshold)
    return min(max(progress, Decimal(0)), Decimal(1))


# ---------------------------------------------------------------------------
# Segment solvers
# ---------------------------------------------------------------------------

def get_liquidity(base_amount: int, quote_amount: int, min_sqrt_price: int, max_sqrt_price: int) -> int:
    """Largest liquidity over (min, max] that needs neither more base nor more quote than given."""
    from_base = get_initial_liquidity_from_delta_base(base_amount, min_sqrt_price, max_sqrt_price)
    from_quote = get_initial_liquidity_from_delta_quote(quote_amount, min_sqrt_price, max_sqrt_price)
    return min(from_base, from_quote)


def get_first_curve(
    migration_sqrt_price: int,
    migration_base_amount: int,
    swap_amount: int,
    migration_quote_threshold: int,
    migration_fee_percent: Number,
) -> Tuple[int, List[CurvePoint]]:
    """Single segment (start, migration] selling `swap_amount` for the threshold.

    swap  = L * (Pmax - Pmin) / (Pmax * Pmin)
    quote = L * (Pmax - Pmin)
    quote * (1 - fee) / migration_base = Pmax^2
    => Pmin = Pmax * migration_base / (swap * (1 - fee))
    """
    denominator = Decimal(swap_amount) * (100 - to_decimal(migration_fee_percent)) / 100
    if denominator <= 0:
        raise InvalidConfigurationError("swap amount must be positive to size the first curve")
    sqrt_start_price = from_decimal_to_int(Decimal(migration_sqrt_price) * Decimal(migration_base_amount) / denominator)
    if not MIN_SQRT_PRICE <= sqrt_start_price < migration_sqrt_price:
        raise InvalidConfigurationError(
            f"solved start price {sqrt_start_price} must lie in [MIN_SQRT_PRICE, migration price {migration_sqrt_price})"
        )
    liquidity = get_liquidity(swap_amount, migration_quote_threshold, sqrt_start_price, migration_sqrt_price)
    _dbg(f"first_curve: start={sqrt_start_price}, migration={migration_sqrt_price}, liquidity={liquidity}")
    return sqrt_start_price, [CurvePoint(migration_sqrt_price, liquidity)]


def get_two_curve(
    migration_sqrt_price: int,
    mid_sqrt_price: int,
    initial_sqrt_price: int,
    swap_amount: int,
    migration_quote_threshold: int,
) -> Optional[Tuple[int, List[CurvePoint]]]:
    """Solve l0 over (p0, p1] and l1 over (p1, p2] for the swap amount and threshold.

    l0 * (1/p0 - 1/p1) + l1 * (1/p1 - 1/p2) = swap
    l0 * (p1 - p0)     + l1 * (p2 - p1)     = threshold * 2^128

    Returns None when the system is infeasible (a non-positive liquidity).
    """
    if not initial_sqrt_price < mid_sqrt_price < migration_sqrt_price:
        return None
    p0 = Decimal(initial_sqrt_price)
    p1 = Decimal(mid_sqrt_price)
    p2 = Decimal(migration_sqrt_price)

    a1 = 1 / p0 - 1 / p1
    b1 = 1 / p1 - 1 / p2
    c1 = Decimal(swap_amount)
    a2 = p1 - p0
    b2 = p2 - p1
    c2 = Decimal(migration_quote_threshold) * TWO_POW_128

    det = a1 * b2 - a2 * b1
    if det == 0:
        return None
    l0 = (c1 * b2 - c2 * b1) / det
    l1 = (c1 * a2 - c2 * a1) / (b1 * a2 - b2 * a1)
    if l0 < 0 or l1 < 0:
        _dbg(f"two_curve: mid={mid_sqrt_price} infeasible (l0={l0:.6E}, l1={l1:.6E})")
        return None

    liquidity_0 = from_decimal_to_int(l0)
    liquidity_1 = from_decimal_to_int(l1)
    if liquidity_0 == 0 or liquidity_1 == 0:
        return None
    return initial_sqrt_price, [
        CurvePoint(mid_sqrt_price, liquidity_0),
        CurvePoint(migration_sqrt_price, liquidity_1),
    ]


def get_mid_sqrt_price_candidates(initial_sqrt_price: int, migration_sqrt_price: int) -> List[int]:
    """Candidate mids, tried in order: (p0^3 p2)^1/4, (p0 p2^3)^1/4, sqrt(p0 p2)."""
    p0 = initial_sqrt_price
    p2 = migration_sqrt_price
    return [
        isqrt(isqrt(p0 ** 3 * p2)),
        isqrt(isqrt(p0 * p2 ** 3)),
        isqrt(p0 * p2),
    ]


def solve_two_segment_curve(
    migration_sqrt_price: int,
    initial_sqrt_price: int,
    swap_amount: int,
    migration_quote_threshold: int,
) -> Tuple[int, List[CurvePoint]]:
    """First feasible `get_two_curve` over the candidate mids."""
    for mid in get_mid_sqrt_price_candidates(initial_sqrt_price, migration_sqrt_price):
        result = get_two_curve(migration_sqrt_price, mid, initial_sqrt_price, swap_amount, migration_quote_threshold)
        if result is not None:
            _dbg(f"two_segment: selected mid={mid}")
            return result
    raise InvalidConfigurationError("no candidate mid price yields non-negative liquidities")


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------

def _locked_vesting(launch: LaunchParams) -> LockedVesting:
    p = launch.locked_vesting_param
    return get_locked_vesting_params(
        p.total_locked_vesting_amount,
        p.number_of_vesting_period,
        p.cliff_unlock_amount,
        p.total_vesting_duration,
        p.cliff_duration_from_migration_time,
        launch.token_base_decimal,
    )


def _check_market_caps(initial_market_cap: Number, migration_market_cap: Number) -> None:
    initial = to_decimal(initial_market_cap)
    if initial <= 0:
        raise InvalidConfigurationError("initial market cap must be > 0")
    if to_decimal(migration_market_cap) <= initial:
        raise InvalidConfigurationError("migration market cap must be greater than initial market cap")


def _finalize(
    launch: LaunchParams,
    base_fee: BaseFee,
    locked_vesting: LockedVesting,
    migrated_pool_fee: MigratedPoolFee,
    sqrt_start_price: int,
    curve: Sequence[CurvePoint],
    migration_quote_threshold: int,
    total_supply: int,
    leftover: int,
) -> CurveConfiguration:
    if len(curve) > MAX_CURVE_POINT:
        raise InvalidConfigurationError(f"curve has {len(curve)} points; at most {MAX_CURVE_POINT} allowed")
    fee_percent = launch.migration_fee.fee_percentage
    total_dynamic_supply = get_total_supply_from_curve(
        migration_quote_threshold,
        sqrt_start_price,
        curve,
        locked_vesting,
        launch.migration_option,
        leftover,
        fee_percent,
    )
    verify_total_supply(total_dynamic_supply, total_supply, leftover)

    dynamic_fee = None
    if launch.dynamic_fee_enabled:
        dynamic_fee = get_dynamic_fee_params(launch.base_fee_params.dynamic_fee_reference_bps())

    return CurveConfiguration(
        sqrt_start_price=sqrt_start_price,
        curve=tuple(curve),
        base_fee=base_fee,
        dynamic_fee=dynamic_fee,
        collect_fee_mode=launch.collect_fee_mode,
        activation_type=launch.activation_type,
        migration_option=launch.migration_option,
        token_base_decimal=launch.token_base_decimal,
        token_quote_decimal=launch.token_quote_decimal,
        migration_quote_threshold=migration_quote_threshold,
        migration_sqrt_price=get_migration_threshold_price(migration_quote_threshold, sqrt_start_price, curve),
        migration_fee_option=launch.migration_fee_option,
        migration_fee=launch.migration_fee,
        migrated_pool_fee=migrated_pool_fee,
        locked_vesting=locked_vesting,
        leftover=leftover,
        total_supply=total_supply,
        partner_lp_percentage=launch.partner_lp_percentage,
        creator_lp_percentage=launch.creator_lp_percentage,
        partner_locked_lp_percentage=launch.partner_locked_lp_percentage,
        creator_locked_lp_percentage=launch.creator_locked_lp_percentage,
        creator_trading_fee_percentage=launch.creator_trading_fee_percentage,
        no_migration_partner_surplus_percentage=launch.no_migration_partner_surplus_percentage,
        no_migration_creator_surplus_percentage=launch.no_migration_creator_surplus_percentage,
        no_migration_protocol_surplus_percentage=launch.no_migration_protocol_surplus_percentage,
    )


def _launch_setup(launch: LaunchParams) -> Tuple[BaseFee, LockedVesting, MigratedPoolFee, int, int]:
    base_fee = get_base_fee_params(launch.base_fee_params, launch.token_quote_decimal, launch.activation_type)
    locked_vesting = _locked_vesting(launch)
    migrated_pool_fee = get_migrated_pool_fee_params(
        launch.migration_option, launch.migration_fee_option, launch.migrated_pool_fee
    )
    total_supply = to_lamports(launch.total_token_supply, launch.token_base_decimal)
    leftover = to_lamports(launch.leftover, launch.token_base_decimal)
    return base_fee, locked_vesting, migrated_pool_fee, total_supply, leftover


def build_curve(params: BuildCurveParams) -> CurveConfiguration:
    """Single constant-product segment from a migration percentage and quote threshold."""
    launch = params.launch
    bd, qd = launch.token_base_decimal, launch.token_quote_decimal
    base_fee, locked_vesting, migrated_pool_fee, total_supply, leftover = _launch_setup(launch)
    fee_percent = launch.migration_fee.fee_percentage

    migration_base_supply = (
        to_decimal(launch.total_token_supply) * to_decimal(params.percentage_supply_on_migration) / 100
    )
    if migration_base_supply <= 0:
        raise InvalidConfigurationError("percentage_supply_on_migration must be > 0")
    migration_quote_amount = get_migration_quote_amount_from_migration_quote_threshold(
        params.migration_quote_threshold, fee_percent
    )
    migration_price = migration_quote_amount / migration_base_supply
    migration_quote_threshold = to_lamports(params.migration_quote_threshold, qd)

    migrate_sqrt_price = get_sqrt_price_from_price(migration_price, bd, qd)
    migration_quote_amount_lamports = from_decimal_to_int(migration_quote_amount * Decimal(10) ** qd)
    migration_base_amount = get_migration_base_token(
        migration_quote_amount_lamports, migrate_sqrt_price, launch.migration_option
    )

    swap_amount = total_supply - migration_base_amount - locked_vesting.total_amount() - leftover
    if swap_amount <= 0:
        raise InvalidConfigurationError(
            f"no supply left for the curve: total={total_supply}, migration={migration_base_amount}, "
            f"vesting={locked_vesting.total_amount()}, leftover={leftover}"
        )

    sqrt_start_price, curve = get_first_curve(
        migrate_sqrt_price, migration_base_amount, swap_amount, migration_quote_threshold, fee_percent
    )

    total_dynamic_supply = get_total_supply_from_curve(
        migration_quote_threshold,
        sqrt_start_price,
        curve,
        locked_vesting,
        launch.migration_option,
        leftover,
        fee_percent,
    )
    remaining_amount = total_supply - total_dynamic_supply
    if remaining_amount > 0:
        last_liquidity = get_initial_liquidity_from_delta_base(remaining_amount, migrate_sqrt_price, MAX_SQRT_PRICE)
        if last_liquidity > 0:
            curve.append(CurvePoint(MAX_SQRT_PRICE, last_liquidity))
    _dbg(f"build_curve: remaining={remaining_amount}, points={len(curve)}")

    return _finalize(
        launch,
        base_fee,
        locked_vesting,
        migrated_pool_fee,
        sqrt_start_price,
        curve,
        migration_quote_threshold,
        total_supply,
        leftover,
    )


def build_curve_with_market_cap(params: BuildCurveWithMarketCapParams) -> CurveConfiguration:
    """Single segment sized from initial and migration market caps."""
    launch = params.launch
    _check_market_caps(params.initial_market_cap, params.migration_market_cap)
    locked_vesting = _locked_vesting(launch)
    total_leftover = to_lamports(launch.leftover, launch.token_base_decimal)
    total_supply = to_lamports(launch.total_token_supply, launch.token_base_decimal)

    percentage_supply_on_migration = get_percentage_supply_on_migration(
        params.initial_market_cap,
        params.migration_market_cap,
        locked_vesting,
        total_leftover,
        total_supply,
    )
    migration_quote_amount = get_migration_quote_amount(params.migration_market_cap, percentage_supply_on_migration)
    migration_quote_threshold = get_migration_quote_threshold_from_migration_quote_amount(
        migration_quote_amount, launch.migration_fee.fee_percentage
    )
    _dbg(f"market_cap: percentage={percentage_supply_on_migration:.6f}, threshold={migration_quote_threshold:.6f}")
    return build_curve(
        BuildCurveParams(
            launch=launch,
            percentage_supply_on_migration=percentage_supply_on_migration,
            migration_quote_threshold=migration_quote_threshold,
        )
    )


def _two_segment_inputs(
    launch: LaunchParams,
    migration_market_cap: Number,
    percentage_supply_on_migration: Number,
    total_supply: int,
    locked_vesting: LockedVesting,
    leftover: int,
) -> Tuple[int, int, int]:
    """(migration sqrt price, swap amount, threshold in smallest units) for the two-segment builders."""
    bd, qd = launch.token_base_decimal, launch.token_quote_decimal
    migration_base_supply = from_decimal_to_int(
        to_decimal(launch.total_token_supply) * to_decimal(percentage_supply_on_migration) / 100
    )
    if migration_base_supply <= 0:
        raise InvalidConfigurationError("percentage_supply_on_migration must be > 0")
    migration_quote_amount = get_migration_quote_amount(migration_market_cap, percentage_supply_on_migration)
    migration_quote_threshold = get_migration_quote_threshold_from_migration_quote_amount(
        migration_quote_amount, launch.migration_fee.fee_percentage
    )
    migration_price = migration_quote_amount / migration_base_supply

    threshold_lamports = from_decimal_to_int(migration_quote_threshold * Decimal(10) ** qd)
    quote_amount_lamports = from_decimal_to_int(migration_quote_amount * Decimal(10) ** qd)
    migrate_sqrt_price = get_sqrt_price_from_price(migration_price, bd, qd)
    migration_base_amount = get_migration_base_token(quote_amount_lamports, migrate_sqrt_price, launch.migration_option)

    swap_amount = total_supply - migration_base_amount - locked_vesting.total_amount() - leftover
    if swap_amount <= 0:
        raise InvalidConfigurationError("no supply left for the curve after migration, vesting and leftover")
    return migrate_sqrt_price, swap_amount, threshold_lamports


def build_curve_with_two_segments(params: BuildCurveWithTwoSegmentsParams) -> CurveConfiguration:
    """Two segments; the mid price is the first feasible analytic candidate."""
    launch = params.launch
    _check_market_caps(params.initial_market_cap, params.migration_market_cap)
    base_fee, locked_vesting, migrated_pool_fee, total_supply, leftover = _launch_setup(launch)

    migrate_sqrt_price, swap_amount, threshold = _two_segment_inputs(
        launch,
        params.migration_market_cap,
        params.percentage_supply_on_migration,
        total_supply,
        locked_vesting,
        leftover,
    )
    initial_sqrt_price = get_sqrt_price_from_market_cap(
        params.initial_market_cap, launch.total_token_supply, launch.token_base_decimal, launch.token_quote_decimal
    )
    sqrt_start_price, curve = solve_two_segment_curve(migrate_sqrt_price, initial_sqrt_price, swap_amount, threshold)
    return _finalize(
        launch,
        base_fee,
        locked_vesting,
        migrated_pool_fee,
        sqrt_start_price,
        curve,
        threshold,
        total_supply,
        leftover,
    )


def build_curve_with_mid_price(params: BuildCurveWithMidPriceParams) -> CurveConfiguration:
    """Two segments split at an explicit human mid price."""
    launch = params.launch
    _check_market_caps(params.initial_market_cap, params.migration_market_cap)
    base_fee, locked_vesting, migrated_pool_fee, total_supply, leftover = _launch_setup(launch)

    migrate_sqrt_price, swap_amount, threshold = _two_segment_inputs(
        launch,
        params.migration_market_cap,
        params.percentage_supply_on_migration,
        total_supply,
        locked_vesting,
        leftover,
    )
    initial_sqrt_price = get_sqrt_price_from_market_cap(
        params.initial_market_cap, launch.total_token_supply, launch.token_base_decimal, launch.token_quote_decimal
    )
    mid_sqrt_price = get_sqrt_price_from_price(params.mid_price, launch.token_base_decimal, launch.token_quote_decimal)
    result = get_two_curve(migrate_sqrt_price, mid_sqrt_price, initial_sqrt_price, swap_amount, threshold)
    if result is None:
        raise InvalidConfigurationError(
            f"mid price {params.mid_price} yields a negative liquidity or lies outside (initial, migration)"
        )
    sqrt_start_price, curve = result
    return _finalize(
        launch,
        base_fee,
        locked_vesting,
        migrated_pool_fee,
        sqrt_start_price,
        curve,
        threshold,
        total_supply,
        leftover,
    )


def build_curve_with_liquidity_weights(params: BuildCurveWithLiquidityWeightsParams) -> CurveConfiguration:
    """Sixteen geometric price steps between the two market caps, liquidity scaled by weight.

    With l_i = l * k_i, supply conservation reads
      l * sum(k_i * ((p_i - p_{i-1}) / (p_i p_{i-1}) + (p_i - p_{i-1}) (1 - fee) / Pmax^2))
        = total - vesting - leftover
    """
    launch = params.launch
    weights = [to_decimal(w) for w in params.liquidity_weights]
    if len(weights) != MAX_CURVE_POINT:
        raise InvalidConfigurationError(f"exactly {MAX_CURVE_POINT} liquidity weights are required, got {len(weights)}")
    if any(w <= 0 for w in weights):
        raise InvalidConfigurationError("liquidity weights must all be > 0")
    _check_market_caps(params.initial_market_cap, params.migration_market_cap)
    bd, qd = launch.token_base_decimal, launch.token_quote_decimal
    base_fee, locked_vesting, migrated_pool_fee, total_supply, leftover = _launch_setup(launch)

    p_min = get_sqrt_price_from_market_cap(params.initial_market_cap, launch.total_token_supply, bd, qd)
    p_max = get_sqrt_price_from_market_cap(params.migration_market_cap, launch.total_token_supply, bd, qd)

    q = (Decimal(p_max) / Decimal(p_min)) ** (Decimal(1) / MAX_CURVE_POINT)
    sqrt_prices = []
    current = p_min
    for _ in range(MAX_CURVE_POINT + 1):
        sqrt_prices.append(current)
        current = from_decimal_to_int(q * current)

    total_swap_and_migration_amount = total_supply - locked_vesting.total_amount() - leftover
    if total_swap_and_migration_amount <= 0:
        raise InvalidConfigurationError("no supply left for the curve after vesting and leftover")

    fee_factor = (100 - to_decimal(launch.migration_fee.fee_percentage)) / 100
    p_max_d = Decimal(p_max)
    sum_factor = Decimal(0)
    for i in range(1, MAX_CURVE_POINT + 1):
        pi = Decimal(sqrt_prices[i])
        pi_minus = Decimal(sqrt_prices[i - 1])
        w1 = (pi - pi_minus) / (pi * pi_minus)
        w2 = (pi - pi_minus) * fee_factor / (p_max_d * p_max_d)
        sum_factor += weights[i - 1] * (w1 + w2)
    l1 = Decimal(total_swap_and_migration_amount) / sum_factor

    curve = []
    for i, k in enumerate(weights):
        sqrt_price = sqrt_prices[i + 1] if i < MAX_CURVE_POINT - 1 else p_max
        curve.append(CurvePoint(sqrt_price, from_decimal_to_int(l1 * k)))

    swap_base_amount = get_base_token_for_swap(p_min, p_max, curve)
    swap_base_amount_buffer = get_swap_amount_with_buffer(swap_base_amount, p_min, curve)
    migration_amount = total_swap_and_migration_amount - swap_base_amount_buffer
    migration_quote_amount = (migration_amount * p_max * p_max) >> (RESOLUTION * 2)
    migration_quote_threshold = from_decimal_to_int(
        get_migration_quote_threshold_from_migration_quote_amount(
            migration_quote_amount, launch.migration_fee.fee_percentage
        )
    )
    _dbg(f"liquidity_weights: p_min={p_min}, p_max={p_max}, l1={l1:.6E}, threshold={migration_quote_threshold}")

    return _finalize(
        launch,
        base_fee,
        locked_vesting,
        migrated_pool_fee,
        p_min,
        curve,
        migration_quote_threshold,
        total_supply,
        leftover,
    )


__all__ = [
    "LockedVestingParams",
    "LaunchParams",
    "BuildCurveParams",
    "BuildCurveWithMarketCapParams",
    "BuildCurveWithTwoSegmentsParams",
    "BuildCurveWithMidPriceParams",
    "BuildCurveWithLiquidityWeightsParams",
    "CurveBreakdown",
    "Tokenomics",
    "get_locked_vesting_params",
    "get_total_vesting_amount",
    "get_total_token_supply",
    "get_base_token_for_swap",
    "get_swap_amount_with_buffer",
    "get_migration_quote_amount_from_migration_quote_threshold",
    "get_migration_quote_threshold_from_migration_quote_amount",
    "get_migration_quote_amount",
    "get_migration_base_token",
    "get_migrated_pool_fee_params",
    "get_migration_threshold_price",
    "get_curve_breakdown",
    "get_total_supply_from_curve",
    "verify_total_supply",
    "get_percentage_supply_on_migration",
    "get_tokenomics",
    "get_quote_reserve_from_next_sqrt_price",
    "get_curve_progress",
    "get_liquidity",
    "get_first_curve",
    "get_two_curve",
    "get_mid_sqrt_price_candidates",
    "solve_two_segment_curve",
    "build_curve",
    "build_curve_with_market_cap",
    "build_curve_with_two_segments",
    "build_curve_with_mid_price",
    "build_curve_with_liquidity_weights",
]
