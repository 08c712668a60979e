"""
Fee engine: base fee (scheduler / rate limiter), volatility surcharge, fee split.

All numerators are over FEE_DENOMINATOR (1e9). Fee amounts round up (the
protocol never under-charges); the protocol/referral split rounds down.

Base fee variants are dispatched on type:
  - FeeScheduler (linear or exponential decay from a cliff numerator)
  - RateLimiter (numerator grows with trade size inside a post-activation window)

The dynamic fee is additive to the base numerator and capped at
MAX_DYNAMIC_FEE_PERCENT of it; the sum is capped at MAX_FEE_NUMERATOR.
An active rate limiter charges its stepwise fee amount directly
(`PoolFees.get_trading_fee`), with the surcharge capped against that amount.

Parameter builders (`get_fee_scheduler_params`, `get_rate_limiter_params`,
`get_dynamic_fee_params`, ...) turn human launch inputs into validated
parameter objects; bad inputs raise InvalidConfigurationError here, never
at quote time.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal, ROUND_FLOOR
from typing import Optional, Tuple

from .core.constants import (
    ONE_Q64,
    RESOLUTION,
    FEE_DENOMINATOR,
    BASIS_POINT_MAX,
    MIN_FEE_NUMERATOR,
    MAX_FEE_NUMERATOR,
    MAX_FEE_BPS,
    PROTOCOL_FEE_PERCENT,
    HOST_FEE_PERCENT,
    MAX_DYNAMIC_FEE_PERCENT,
    MAX_RATE_LIMITER_DURATION_IN_SECONDS,
    MAX_RATE_LIMITER_DURATION_IN_SLOTS,
    DYNAMIC_FEE_FILTER_PERIOD_DEFAULT,
    DYNAMIC_FEE_DECAY_PERIOD_DEFAULT,
    DYNAMIC_FEE_REDUCTION_FACTOR_DEFAULT,
    DYNAMIC_FEE_SCALING_FACTOR,
    DYNAMIC_FEE_ROUNDING_OFFSET,
    BIN_STEP_BPS_DEFAULT,
    BIN_STEP_BPS_U128_DEFAULT,
    MAX_PRICE_CHANGE_BPS_DEFAULT,
)
from .core.datatypes import (
    ActivationType,
    BaseFee,
    BaseFeeMode,
    CollectFeeMode,
    DynamicFeeConfig,
    FeeBreakdown,
    FeeMode,
    FeeOnAmountResult,
    FeeScheduler,
    RateLimiter,
    TradeDirection,
    VolatilityTracker,
)
from .core.exc import InvalidConfigurationError, CurveDomainError
from .core.fixed_point import (
    Rounding,
    ceil_div,
    mul_div,
    mul_div_u64,
    pow_q64,
    shl_div,
    to_u64,
)
from .core.fmt import Number, to_decimal, to_lamports, bps_to_fee_numerator, TWO_POW_64

# Debug printing control
DEBUG_FEES = False

def _dbg(msg: str) -> None:
    if DEBUG_FEES:
        print(f"[FEES] {msg}")


# ---------------------------------------------------------------------------
# Fee mode
# ---------------------------------------------------------------------------

def get_fee_mode(collect_fee_mode: CollectFeeMode, direction: TradeDirection) -> FeeMode:
    """Where a trade pays its fee.

    QuoteToken mode always charges in quote: on the input when buying base,
    on the output when selling base. OutputToken mode always charges the output.
    """
    quote_to_base = direction is TradeDirection.QUOTE_TO_BASE
    if collect_fee_mode == CollectFeeMode.QUOTE_TOKEN:
        return FeeMode(fees_on_input=quote_to_base, fees_on_base_token=False)
    if collect_fee_mode == CollectFeeMode.OUTPUT_TOKEN:
        return FeeMode(fees_on_input=False, fees_on_base_token=quote_to_base)
    raise InvalidConfigurationError(f"unknown collect fee mode: {collect_fee_mode!r}")


# ---------------------------------------------------------------------------
# Base fee: scheduler
# ---------------------------------------------------------------------------

def get_fee_scheduler_numerator(scheduler: FeeScheduler, current_point: int, activation_point: int) -> int:
    if scheduler.period_frequency == 0:
        return scheduler.cliff_fee_numerator
    # Trades before activation (pre-launch vault) get the fully decayed fee.
    if current_point < activation_point:
        period = scheduler.number_of_period
    else:
        period = min((current_point - activation_point) // scheduler.period_frequency, scheduler.number_of_period)

    if scheduler.mode == BaseFeeMode.FEE_SCHEDULER_LINEAR:
        return max(0, scheduler.cliff_fee_numerator - period * scheduler.reduction_factor)

    base = ONE_Q64 - shl_div(scheduler.reduction_factor, BASIS_POINT_MAX, RESOLUTION, Rounding.DOWN)
    decay = pow_q64(base, period)
    return to_u64((scheduler.cliff_fee_numerator * decay) >> RESOLUTION, "fee scheduler")


# ---------------------------------------------------------------------------
# Base fee: rate limiter
# ---------------------------------------------------------------------------

def is_rate_limiter_applied(
    limiter: RateLimiter, current_point: int, activation_point: int, direction: TradeDirection
) -> bool:
    if limiter.is_zero_rate_limiter():
        return False
    if direction is TradeDirection.BASE_TO_QUOTE:
        return False
    if current_point < activation_point:
        return False
    return current_point <= activation_point + limiter.max_limiter_duration


def check_rate_limiter_applied(
    base_fee_mode: BaseFeeMode,
    swap_base_for_quote: bool,
    current_point: int,
    activation_point: int,
    max_limiter_duration: int,
) -> bool:
    """Flag-level variant of `is_rate_limiter_applied` for callers holding raw fields."""
    return (
        base_fee_mode == BaseFeeMode.RATE_LIMITER
        and not swap_base_for_quote
        and activation_point <= current_point <= activation_point + max_limiter_duration
    )


def get_rate_limiter_max_index(limiter: RateLimiter) -> int:
    increment = limiter.fee_increment_numerator
    if increment == 0:
        raise InvalidConfigurationError("rate limiter fee increment must be > 0")
    return (MAX_FEE_NUMERATOR - limiter.cliff_fee_numerator) // increment


def _rate_limiter_weighted_total(limiter: RateLimiter, input_amount: int) -> int:
    # sum over the input of the numerator each unit pays; continuous and
    # non-decreasing in input_amount
    c = limiter.cliff_fee_numerator
    x0 = limiter.reference_amount
    if input_amount <= x0:
        return input_amount * c

    i = limiter.fee_increment_numerator
    max_index = get_rate_limiter_max_index(limiter)
    a, b = divmod(input_amount - x0, x0)

    if a < max_index:
        numerator_1 = c + c * a + i * a * (a + 1) // 2
        numerator_2 = c + i * (a + 1)
        return x0 * numerator_1 + b * numerator_2
    numerator_1 = c + c * max_index + i * max_index * (max_index + 1) // 2
    left_amount = (a - max_index) * x0 + b
    return x0 * numerator_1 + left_amount * MAX_FEE_NUMERATOR


def get_rate_limiter_fee(limiter: RateLimiter, input_amount: int) -> int:
    """Stepwise base fee for a fee-inclusive `input_amount` under an active limiter.

    The first `reference_amount` pays the cliff numerator c; the k-th further
    `reference_amount` pays c + k*i, until the step reaches MAX_FEE_NUMERATOR.
    The fee is the weighted sum rounded up once, so it never decreases as the
    amount grows.
    """
    fee = ceil_div(_rate_limiter_weighted_total(limiter, input_amount), FEE_DENOMINATOR)
    _dbg(f"rate_limiter: amount={input_amount}, fee={fee}")
    return fee


def get_rate_limiter_numerator(limiter: RateLimiter, input_amount: int) -> int:
    """Average numerator of `get_rate_limiter_fee`, for reporting only.

    Fees under an active limiter are charged from `get_rate_limiter_fee`
    directly; re-applying this rounded average would round twice.
    """
    if input_amount <= limiter.reference_amount:
        return limiter.cliff_fee_numerator
    numerator = ceil_div(get_rate_limiter_fee(limiter, input_amount) * FEE_DENOMINATOR, input_amount)
    return min(numerator, MAX_FEE_NUMERATOR)


# ---------------------------------------------------------------------------
# Base fee dispatch
# ---------------------------------------------------------------------------

def base_fee_numerator(
    params: BaseFee,
    current_point: int,
    activation_point: int,
    direction: TradeDirection,
    amount: int = 0,
) -> int:
    """Base fee numerator for one trade.

    `amount` is the fee-inclusive input amount; it only matters for an
    active rate limiter.
    """
    if isinstance(params, FeeScheduler):
        return get_fee_scheduler_numerator(params, current_point, activation_point)
    if isinstance(params, RateLimiter):
        if is_rate_limiter_applied(params, current_point, activation_point, direction):
            return get_rate_limiter_numerator(params, amount)
        return params.cliff_fee_numerator
    raise InvalidConfigurationError(f"unsupported base fee variant: {type(params).__name__}")


# ---------------------------------------------------------------------------
# Dynamic (volatility) fee
# ---------------------------------------------------------------------------

def get_variable_fee(dynamic_fee: Optional[DynamicFeeConfig], volatility_accumulator: int) -> int:
    """Uncapped surcharge numerator: ceil((va * bin_step)^2 * vfc / 1e11)."""
    if dynamic_fee is None:
        return 0
    square_vfa_bin = (volatility_accumulator * dynamic_fee.bin_step) ** 2
    v_fee = square_vfa_bin * dynamic_fee.variable_fee_control
    return (v_fee + DYNAMIC_FEE_ROUNDING_OFFSET) // DYNAMIC_FEE_SCALING_FACTOR


def get_delta_bin_id(bin_step_u128: int, sqrt_price_a: int, sqrt_price_b: int) -> int:
    upper, lower = (sqrt_price_a, sqrt_price_b) if sqrt_price_a > sqrt_price_b else (sqrt_price_b, sqrt_price_a)
    if lower == 0:
        raise CurveDomainError("sqrt price reference must be > 0")
    price_ratio = shl_div(upper, lower, RESOLUTION, Rounding.DOWN)
    return (price_ratio - ONE_Q64) // bin_step_u128 * 2


def update_references(
    tracker: VolatilityTracker, dynamic_fee: DynamicFeeConfig, sqrt_price: int, current_timestamp: int
) -> VolatilityTracker:
    """Refresh the reference price/volatility once the filter period has passed.

    Inside the decay window the reference volatility decays by
    `reduction_factor`; past it the reference resets to zero.
    """
    elapsed = current_timestamp - tracker.last_update_timestamp
    if elapsed < dynamic_fee.filter_period:
        return tracker
    if elapsed < dynamic_fee.decay_period:
        volatility_reference = tracker.volatility_accumulator * dynamic_fee.reduction_factor // BASIS_POINT_MAX
    else:
        volatility_reference = 0
    return replace(tracker, sqrt_price_reference=sqrt_price, volatility_reference=volatility_reference)


def update_volatility_accumulator(
    tracker: VolatilityTracker, dynamic_fee: DynamicFeeConfig, sqrt_price: int, current_timestamp: int
) -> VolatilityTracker:
    delta_bin_id = get_delta_bin_id(dynamic_fee.bin_step_u128, sqrt_price, tracker.sqrt_price_reference)
    accumulator = tracker.volatility_reference + delta_bin_id * BASIS_POINT_MAX
    return replace(
        tracker,
        volatility_accumulator=min(accumulator, dynamic_fee.max_volatility_accumulator),
        last_update_timestamp=current_timestamp,
    )


# ---------------------------------------------------------------------------
# Fee split
# ---------------------------------------------------------------------------

def split_fee(total_fee: int, fee_mode: FeeMode, has_referral: bool) -> FeeBreakdown:
    """Split a collected fee into trading/protocol/referral shares.

    The protocol takes PROTOCOL_FEE_PERCENT; a referrer (if present) takes
    HOST_FEE_PERCENT of the remaining trading share. Shares sum to `total_fee`.
    """
    protocol_fee = total_fee * PROTOCOL_FEE_PERCENT // 100
    trading_fee = total_fee - protocol_fee
    referral_fee = trading_fee * HOST_FEE_PERCENT // 100 if has_referral else 0
    trading_fee -= referral_fee
    return FeeBreakdown(
        trading_fee=trading_fee,
        protocol_fee=protocol_fee,
        referral_fee=referral_fee,
        fees_on_base_token=fee_mode.fees_on_base_token,
    )


# ---------------------------------------------------------------------------
# Pool fees (base + dynamic)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PoolFees:
    """Base fee plus optional volatility surcharge, as stored on a curve configuration."""

    base_fee: BaseFee
    dynamic_fee: Optional[DynamicFeeConfig] = None

    def __post_init__(self):
        cliff = self.base_fee.cliff_fee_numerator
        if cliff < MIN_FEE_NUMERATOR or cliff > MAX_FEE_NUMERATOR:
            raise InvalidConfigurationError(
                f"cliff fee numerator {cliff} outside [{MIN_FEE_NUMERATOR}, {MAX_FEE_NUMERATOR}]"
            )

    def is_rate_limited(self, current_point: int, activation_point: int, direction: TradeDirection) -> bool:
        return isinstance(self.base_fee, RateLimiter) and is_rate_limiter_applied(
            self.base_fee, current_point, activation_point, direction
        )

    def get_total_trading_fee_numerator(
        self,
        current_point: int,
        activation_point: int,
        direction: TradeDirection,
        amount: int = 0,
        volatility_accumulator: int = 0,
    ) -> int:
        base = base_fee_numerator(self.base_fee, current_point, activation_point, direction, amount)
        variable = get_variable_fee(self.dynamic_fee, volatility_accumulator)
        variable = min(variable, base * MAX_DYNAMIC_FEE_PERCENT // 100)
        return min(base + variable, MAX_FEE_NUMERATOR)

    def get_trading_fee(
        self,
        amount: int,
        current_point: int,
        activation_point: int,
        direction: TradeDirection,
        volatility_accumulator: int = 0,
    ) -> int:
        """Total fee on a fee-inclusive `amount`, rounded up.

        Under an active rate limiter the stepwise fee is charged directly and
        the volatility surcharge is capped at MAX_DYNAMIC_FEE_PERCENT of it;
        otherwise a single numerator applies to the whole amount.
        """
        if not self.is_rate_limited(current_point, activation_point, direction):
            numerator = self.get_total_trading_fee_numerator(
                current_point, activation_point, direction, amount, volatility_accumulator
            )
            return mul_div_u64(amount, numerator, FEE_DENOMINATOR, Rounding.UP, "get_trading_fee")

        base_fee = get_rate_limiter_fee(self.base_fee, amount)
        variable = get_variable_fee(self.dynamic_fee, volatility_accumulator)
        surcharge = min(
            mul_div(amount, variable, FEE_DENOMINATOR, Rounding.UP),
            base_fee * MAX_DYNAMIC_FEE_PERCENT // 100,
        )
        cap = mul_div(amount, MAX_FEE_NUMERATOR, FEE_DENOMINATOR, Rounding.UP)
        return to_u64(min(base_fee + surcharge, cap), "get_trading_fee")

    def get_fee_on_amount(
        self,
        amount: int,
        fee_mode: FeeMode,
        has_referral: bool,
        current_point: int,
        activation_point: int,
        direction: TradeDirection,
        volatility_accumulator: int = 0,
    ) -> FeeOnAmountResult:
        """Take the fee out of a fee-inclusive `amount`."""
        fee = self.get_trading_fee(amount, current_point, activation_point, direction, volatility_accumulator)
        split = split_fee(fee, fee_mode, has_referral)
        return FeeOnAmountResult(
            amount=amount - fee,
            trading_fee=split.trading_fee,
            protocol_fee=split.protocol_fee,
            referral_fee=split.referral_fee,
        )

    def get_included_fee_amount(
        self,
        excluded_amount: int,
        current_point: int,
        activation_point: int,
        direction: TradeDirection,
        volatility_accumulator: int = 0,
    ) -> Tuple[int, int]:
        """Smallest fee-inclusive amount that leaves `excluded_amount` after fees.

        Returns (included_amount, fee). With a size-independent numerator this is
        closed form; under an active rate limiter the fee depends on the
        included amount, so it is found by bisection over `get_trading_fee`.
        The result x satisfies net(x) >= excluded_amount > net(x - 1).
        """
        if excluded_amount == 0:
            return 0, 0
        if not self.is_rate_limited(current_point, activation_point, direction):
            numerator = self.get_total_trading_fee_numerator(
                current_point, activation_point, direction, 0, volatility_accumulator
            )
            included = get_included_fee_amount(numerator, excluded_amount)
            return included, included - excluded_amount

        def net(x: int) -> int:
            return x - self.get_trading_fee(x, current_point, activation_point, direction, volatility_accumulator)

        lo = excluded_amount
        hi = get_included_fee_amount(MAX_FEE_NUMERATOR, excluded_amount) + 1
        while lo < hi:
            mid = (lo + hi) // 2
            if net(mid) >= excluded_amount:
                hi = mid
            else:
                lo = mid + 1
        included = to_u64(lo, "get_included_fee_amount")
        _dbg(f"included_fee_amount (rate limited): excluded={excluded_amount} -> included={included}")
        return included, included - excluded_amount


def get_included_fee_amount(trade_fee_numerator: int, excluded_amount: int) -> int:
    """ceil(excluded * D / (D - numerator)) for a size-independent numerator."""
    if trade_fee_numerator >= FEE_DENOMINATOR:
        raise InvalidConfigurationError("fee numerator must be < FEE_DENOMINATOR")
    return mul_div_u64(
        excluded_amount, FEE_DENOMINATOR, FEE_DENOMINATOR - trade_fee_numerator, Rounding.UP, "get_included_fee_amount"
    )


# ---------------------------------------------------------------------------
# Parameter builders (launch inputs -> validated fee parameters)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FeeSchedulerParams:
    starting_fee_bps: int
    ending_fee_bps: int
    number_of_period: int
    total_duration: int


@dataclass(frozen=True)
class RateLimiterParams:
    base_fee_bps: int
    fee_increment_bps: int
    reference_amount: Number        # human quote-token units
    max_limiter_duration: int


@dataclass(frozen=True)
class BaseFeeParams:
    """Launch-level base fee choice: a mode plus the payload that mode requires."""

    base_fee_mode: BaseFeeMode
    fee_scheduler_param: Optional[FeeSchedulerParams] = None
    rate_limiter_param: Optional[RateLimiterParams] = None

    def dynamic_fee_reference_bps(self) -> int:
        """Base fee (bps) the dynamic fee is sized against."""
        if self.base_fee_mode == BaseFeeMode.RATE_LIMITER:
            if self.rate_limiter_param is None:
                raise InvalidConfigurationError("Rate limiter parameters are required for RateLimiter mode")
            return self.rate_limiter_param.base_fee_bps
        if self.fee_scheduler_param is None:
            raise InvalidConfigurationError("Fee scheduler parameters are required for FeeScheduler mode")
        return self.fee_scheduler_param.ending_fee_bps


def get_fee_scheduler_params(
    starting_base_fee_bps: int,
    ending_base_fee_bps: int,
    base_fee_mode: BaseFeeMode,
    number_of_period: int,
    total_duration: int,
) -> FeeScheduler:
    if starting_base_fee_bps == ending_base_fee_bps:
        if number_of_period != 0 or total_duration != 0:
            raise InvalidConfigurationError("numberOfPeriod and totalDuration must both be zero")
        return FeeScheduler(
            cliff_fee_numerator=bps_to_fee_numerator(starting_base_fee_bps),
            number_of_period=0,
            period_frequency=0,
            reduction_factor=0,
            mode=BaseFeeMode.FEE_SCHEDULER_LINEAR,
        )

    if number_of_period <= 0:
        raise InvalidConfigurationError("Total periods must be greater than zero")
    if starting_base_fee_bps > MAX_FEE_BPS:
        raise InvalidConfigurationError(
            f"startingBaseFeeBps ({starting_base_fee_bps} bps) exceeds maximum allowed value of {MAX_FEE_BPS} bps"
        )
    if ending_base_fee_bps > starting_base_fee_bps:
        raise InvalidConfigurationError("endingBaseFeeBps must be less than or equal to startingBaseFeeBps")
    if total_duration <= 0:
        raise InvalidConfigurationError("numberOfPeriod and totalDuration must both be greater than zero")
    if base_fee_mode not in (BaseFeeMode.FEE_SCHEDULER_LINEAR, BaseFeeMode.FEE_SCHEDULER_EXPONENTIAL):
        raise InvalidConfigurationError(f"not a scheduler mode: {base_fee_mode!r}")

    max_numerator = bps_to_fee_numerator(starting_base_fee_bps)
    min_numerator = bps_to_fee_numerator(ending_base_fee_bps)
    period_frequency = total_duration // number_of_period

    if base_fee_mode == BaseFeeMode.FEE_SCHEDULER_LINEAR:
        reduction_factor = (max_numerator - min_numerator) // number_of_period
    elif min_numerator == 0:
        reduction_factor = BASIS_POINT_MAX
    else:
        ratio = Decimal(min_numerator) / Decimal(max_numerator)
        decay_base = (ratio.ln() / Decimal(number_of_period)).exp()
        reduction_factor = int((BASIS_POINT_MAX * (1 - decay_base)).to_integral_value(rounding=ROUND_FLOOR))

    _dbg(f"fee_scheduler: cliff={max_numerator}, periods={number_of_period}, "
         f"freq={period_frequency}, reduction={reduction_factor}, mode={BaseFeeMode(base_fee_mode).name}")
    return FeeScheduler(
        cliff_fee_numerator=max_numerator,
        number_of_period=number_of_period,
        period_frequency=period_frequency,
        reduction_factor=reduction_factor,
        mode=base_fee_mode,
    )


def calculate_fee_scheduler_ending_base_fee_bps(
    cliff_fee_numerator: int,
    number_of_period: int,
    period_frequency: int,
    reduction_factor: int,
    base_fee_mode: BaseFeeMode,
) -> Decimal:
    """Fee (bps) reached once every period has elapsed."""
    cliff = Decimal(cliff_fee_numerator)
    if number_of_period == 0 or period_frequency == 0:
        return cliff / FEE_DENOMINATOR * BASIS_POINT_MAX
    if base_fee_mode == BaseFeeMode.FEE_SCHEDULER_LINEAR:
        numerator = cliff - number_of_period * reduction_factor
    else:
        decay_rate = 1 - Decimal(reduction_factor) / BASIS_POINT_MAX
        numerator = cliff * decay_rate ** number_of_period
    return max(Decimal(0), numerator / FEE_DENOMINATOR * BASIS_POINT_MAX)


def get_rate_limiter_params(
    base_fee_bps: int,
    fee_increment_bps: int,
    reference_amount: Number,
    max_limiter_duration: int,
    token_quote_decimal: int,
    activation_type: ActivationType,
) -> RateLimiter:
    cliff_fee_numerator = bps_to_fee_numerator(base_fee_bps)
    fee_increment_numerator = bps_to_fee_numerator(fee_increment_bps)

    if base_fee_bps <= 0 or fee_increment_bps <= 0 or to_decimal(reference_amount) <= 0 or max_limiter_duration <= 0:
        raise InvalidConfigurationError("All rate limiter parameters must be greater than zero")
    if base_fee_bps > MAX_FEE_BPS:
        raise InvalidConfigurationError(
            f"Base fee ({base_fee_bps} bps) exceeds maximum allowed value of {MAX_FEE_BPS} bps"
        )
    if fee_increment_bps > MAX_FEE_BPS:
        raise InvalidConfigurationError(
            f"Fee increment ({fee_increment_bps} bps) exceeds maximum allowed value of {MAX_FEE_BPS} bps"
        )
    if fee_increment_numerator >= FEE_DENOMINATOR:
        raise InvalidConfigurationError("Fee increment numerator must be less than FEE_DENOMINATOR")
    if (MAX_FEE_NUMERATOR - cliff_fee_numerator) // fee_increment_numerator < 1:
        raise InvalidConfigurationError("Fee increment is too large for the given base fee")
    if cliff_fee_numerator < MIN_FEE_NUMERATOR or cliff_fee_numerator > MAX_FEE_NUMERATOR:
        raise InvalidConfigurationError("Base fee must be between 0.25% and 99%")

    max_duration = (
        MAX_RATE_LIMITER_DURATION_IN_SLOTS
        if activation_type == ActivationType.SLOT
        else MAX_RATE_LIMITER_DURATION_IN_SECONDS
    )
    if max_limiter_duration > max_duration:
        raise InvalidConfigurationError(f"Max duration exceeds maximum allowed value of {max_duration}")

    return RateLimiter(
        cliff_fee_numerator=cliff_fee_numerator,
        fee_increment_bps=fee_increment_bps,
        max_limiter_duration=max_limiter_duration,
        reference_amount=to_lamports(reference_amount, token_quote_decimal),
    )


def get_base_fee_params(
    base_fee_params: BaseFeeParams, token_quote_decimal: int, activation_type: ActivationType
) -> BaseFee:
    if base_fee_params.base_fee_mode == BaseFeeMode.RATE_LIMITER:
        p = base_fee_params.rate_limiter_param
        if p is None:
            raise InvalidConfigurationError("Rate limiter parameters are required for RateLimiter mode")
        return get_rate_limiter_params(
            p.base_fee_bps,
            p.fee_increment_bps,
            p.reference_amount,
            p.max_limiter_duration,
            token_quote_decimal,
            activation_type,
        )
    s = base_fee_params.fee_scheduler_param
    if s is None:
        raise InvalidConfigurationError("Fee scheduler parameters are required for FeeScheduler mode")
    return get_fee_scheduler_params(
        s.starting_fee_bps,
        s.ending_fee_bps,
        base_fee_params.base_fee_mode,
        s.number_of_period,
        s.total_duration,
    )


def get_dynamic_fee_params(
    base_fee_bps: int, max_price_change_bps: int = MAX_PRICE_CHANGE_BPS_DEFAULT
) -> DynamicFeeConfig:
    """Size the volatility surcharge so it tops out at 20% of the base fee.

    The maximum volatility accumulator corresponds to a `max_price_change_bps`
    move; `variable_fee_control` is chosen so the surcharge at that accumulator
    equals MAX_DYNAMIC_FEE_PERCENT of the base numerator.
    """
    if max_price_change_bps > MAX_PRICE_CHANGE_BPS_DEFAULT:
        raise InvalidConfigurationError(
            f"maxPriceChangeBps ({max_price_change_bps} bps) must be less than or equal to "
            f"{MAX_PRICE_CHANGE_BPS_DEFAULT}"
        )
    if max_price_change_bps <= 0:
        raise InvalidConfigurationError("maxPriceChangeBps must be greater than zero")

    price_ratio = Decimal(max_price_change_bps) / BASIS_POINT_MAX + 1
    sqrt_price_ratio_q64 = int((price_ratio.sqrt() * TWO_POW_64).to_integral_value(rounding=ROUND_FLOOR))
    delta_bin_id = (sqrt_price_ratio_q64 - ONE_Q64) // BIN_STEP_BPS_U128_DEFAULT * 2
    max_volatility_accumulator = delta_bin_id * BASIS_POINT_MAX
    square_vfa_bin = (max_volatility_accumulator * BIN_STEP_BPS_DEFAULT) ** 2

    base_numerator = bps_to_fee_numerator(base_fee_bps)
    max_dynamic_numerator = base_numerator * MAX_DYNAMIC_FEE_PERCENT // 100
    v_fee = max_dynamic_numerator * DYNAMIC_FEE_SCALING_FACTOR - DYNAMIC_FEE_ROUNDING_OFFSET
    variable_fee_control = max(0, v_fee) // square_vfa_bin

    return DynamicFeeConfig(
        bin_step=BIN_STEP_BPS_DEFAULT,
        bin_step_u128=BIN_STEP_BPS_U128_DEFAULT,
        filter_period=DYNAMIC_FEE_FILTER_PERIOD_DEFAULT,
        decay_period=DYNAMIC_FEE_DECAY_PERIOD_DEFAULT,
        reduction_factor=DYNAMIC_FEE_REDUCTION_FACTOR_DEFAULT,
        max_volatility_accumulator=max_volatility_accumulator,
        variable_fee_control=variable_fee_control,
    )


__all__ = [
    "get_fee_mode",
    "get_fee_scheduler_numerator",
    "is_rate_limiter_applied",
    "check_rate_limiter_applied",
    "get_rate_limiter_max_index",
    "get_rate_limiter_fee",
    "get_rate_limiter_numerator",
    "base_fee_numerator",
    "get_variable_fee",
    "get_delta_bin_id",
    "update_references",
    "update_volatility_accumulator",
    "split_fee",
    "PoolFees",
    "get_included_fee_amount",
    "FeeSchedulerParams",
    "RateLimiterParams",
    "BaseFeeParams",
    "get_fee_scheduler_params",
    "calculate_fee_scheduler_ending_base_fee_bps",
    "get_rate_limiter_params",
    "get_base_fee_params",
    "get_dynamic_fee_params",
]
