"""Quote engine: walk the curve from the pool price and apply the fee engine.

Three query shapes share one set of segment walks:
- exact-in: spend a fixed input, fail if the curve runs out first;
- exact-out: buy a fixed output, fail if the curve runs out first;
- partial-fill: like exact-in, but stop at the price bound and report what is left.

QuoteToBase walks segments forward (price rising), BaseToQuote walks them
backward (price falling) down to `sqrt_start_price`. Input-side amounts round
up and output-side amounts round down on every leg.

Fee ordering follows `collect_fee_mode` through `get_fee_mode`: input-side
fees are taken before the walk, output-side fees after it. Slippage bounds are
reported on the result, never enforced.
"""
from __future__ import annotations

from typing import List, Optional, Tuple

from .config import CurveConfiguration, PoolState
from .core.constants import BASIS_POINT_MAX
from .core.datatypes import (
    FeeMode,
    QuoteResult,
    SwapAmount,
    SwapMode,
    TradeDirection,
)
from .core.exc import InsufficientLiquidityError, PoolPausedError
from .core.fixed_point import Rounding, mul_div, to_u64
from .curve_math import (
    get_delta_amount_base_unsigned,
    get_delta_amount_base_unsigned_256,
    get_delta_amount_quote_unsigned,
    get_delta_amount_quote_unsigned_256,
    get_next_sqrt_price_from_input,
    get_next_sqrt_price_from_output,
    iter_segments,
)
from .fees import get_fee_mode, split_fee

# Debug printing control
DEBUG_QUOTE = False

def _dbg(msg: str) -> None:
    if DEBUG_QUOTE:
        print(f"[QUOTE] {msg}")


Segment = Tuple[int, int, int]


def _segments(config: CurveConfiguration) -> List[Segment]:
    return list(iter_segments(config.sqrt_start_price, config.curve))


def _check_pool(pool: PoolState) -> None:
    if pool.is_paused:
        raise PoolPausedError("pool is paused; quoting is disabled")


def _check_slippage(slippage_bps: int) -> None:
    if slippage_bps < 0 or slippage_bps > BASIS_POINT_MAX:
        raise ValueError(f"slippage_bps must be within [0, {BASIS_POINT_MAX}], got {slippage_bps}")


# ---------------------------------------------------------------------------
# Slippage bounds
# ---------------------------------------------------------------------------

def get_minimum_amount_out(amount: int, slippage_bps: int) -> int:
    """floor(amount * (10000 - slippage_bps) / 10000)"""
    _check_slippage(slippage_bps)
    return mul_div(amount, BASIS_POINT_MAX - slippage_bps, BASIS_POINT_MAX, Rounding.DOWN)


def get_maximum_amount_in(amount: int, slippage_bps: int) -> int:
    """ceil(amount * (10000 + slippage_bps) / 10000)"""
    _check_slippage(slippage_bps)
    return mul_div(amount, BASIS_POINT_MAX + slippage_bps, BASIS_POINT_MAX, Rounding.UP)


# ---------------------------------------------------------------------------
# Curve walks (fee-exclusive amounts)
# ---------------------------------------------------------------------------

def get_swap_amount_from_quote_to_base(
    config: CurveConfiguration,
    sqrt_price: int,
    amount_in: int,
    stop_sqrt_price: Optional[int] = None,
) -> SwapAmount:
    """Spend quote walking the curve forward; return base out and the new price.

    The walk never passes `stop_sqrt_price` (default: the end of the curve).
    Unspent quote is reported in `amount_left`.
    """
    stop = config.max_sqrt_price if stop_sqrt_price is None else min(stop_sqrt_price, config.max_sqrt_price)
    current = sqrt_price
    amount_left = amount_in
    total_out = 0

    for lower, upper, liquidity in _segments(config):
        if amount_left == 0 or current >= stop:
            break
        if upper <= current:
            continue
        reference = min(upper, stop)
        max_in = get_delta_amount_quote_unsigned_256(current, reference, liquidity, Rounding.UP)
        if amount_left < max_in:
            next_price = get_next_sqrt_price_from_input(current, liquidity, amount_left, False)
            out = get_delta_amount_base_unsigned(current, next_price, liquidity, Rounding.DOWN)
            _dbg(f"q2b partial leg ({lower}, {upper}]: in={amount_left}, out={out}, next={next_price}")
            total_out += out
            current = next_price
            amount_left = 0
        else:
            out = get_delta_amount_base_unsigned(current, reference, liquidity, Rounding.DOWN)
            _dbg(f"q2b full leg ({lower}, {upper}]: in={max_in}, out={out}")
            total_out += out
            current = reference
            amount_left -= max_in

    return SwapAmount(
        output_amount=to_u64(total_out, "get_swap_amount_from_quote_to_base"),
        next_sqrt_price=current,
        amount_left=amount_left,
    )


def get_swap_amount_from_base_to_quote(config: CurveConfiguration, sqrt_price: int, amount_in: int) -> SwapAmount:
    """Sell base walking the curve backward, never below `sqrt_start_price`."""
    current = sqrt_price
    amount_left = amount_in
    total_out = 0

    for lower, upper, liquidity in reversed(_segments(config)):
        if amount_left == 0:
            break
        if lower >= current:
            continue
        top = min(upper, current)
        max_in = get_delta_amount_base_unsigned_256(lower, top, liquidity, Rounding.UP)
        if amount_left < max_in:
            next_price = get_next_sqrt_price_from_input(top, liquidity, amount_left, True)
            out = get_delta_amount_quote_unsigned(next_price, top, liquidity, Rounding.DOWN)
            _dbg(f"b2q partial leg ({lower}, {upper}]: in={amount_left}, out={out}, next={next_price}")
            total_out += out
            current = next_price
            amount_left = 0
        else:
            out = get_delta_amount_quote_unsigned(lower, top, liquidity, Rounding.DOWN)
            _dbg(f"b2q full leg ({lower}, {upper}]: in={max_in}, out={out}")
            total_out += out
            current = lower
            amount_left -= max_in

    return SwapAmount(
        output_amount=to_u64(total_out, "get_swap_amount_from_base_to_quote"),
        next_sqrt_price=current,
        amount_left=amount_left,
    )


def get_in_amount_from_quote_to_base(config: CurveConfiguration, sqrt_price: int, amount_out: int) -> SwapAmount:
    """Quote needed to buy `amount_out` base walking forward.

    The returned `output_amount` field holds the required input; `amount_left`
    is the base the curve could not supply.
    """
    current = sqrt_price
    amount_left = amount_out
    total_in = 0

    for lower, upper, liquidity in _segments(config):
        if amount_left == 0:
            break
        if upper <= current:
            continue
        max_out = get_delta_amount_base_unsigned_256(current, upper, liquidity, Rounding.DOWN)
        if amount_left < max_out:
            next_price = get_next_sqrt_price_from_output(current, liquidity, amount_left, False)
            total_in += get_delta_amount_quote_unsigned(current, next_price, liquidity, Rounding.UP)
            current = next_price
            amount_left = 0
        else:
            total_in += get_delta_amount_quote_unsigned(current, upper, liquidity, Rounding.UP)
            current = upper
            amount_left -= max_out
        _dbg(f"q2b exact-out leg ({lower}, {upper}]: total_in={total_in}, left={amount_left}")

    return SwapAmount(
        output_amount=to_u64(total_in, "get_in_amount_from_quote_to_base"),
        next_sqrt_price=current,
        amount_left=amount_left,
    )


def get_in_amount_from_base_to_quote(config: CurveConfiguration, sqrt_price: int, amount_out: int) -> SwapAmount:
    """Base needed to receive `amount_out` quote walking backward.

    Same field convention as `get_in_amount_from_quote_to_base`.
    """
    current = sqrt_price
    amount_left = amount_out
    total_in = 0

    for lower, upper, liquidity in reversed(_segments(config)):
        if amount_left == 0:
            break
        if lower >= current:
            continue
        top = min(upper, current)
        max_out = get_delta_amount_quote_unsigned_256(lower, top, liquidity, Rounding.DOWN)
        if amount_left < max_out:
            next_price = get_next_sqrt_price_from_output(top, liquidity, amount_left, True)
            total_in += get_delta_amount_base_unsigned(next_price, top, liquidity, Rounding.UP)
            current = next_price
            amount_left = 0
        else:
            total_in += get_delta_amount_base_unsigned(lower, top, liquidity, Rounding.UP)
            current = lower
            amount_left -= max_out
        _dbg(f"b2q exact-out leg ({lower}, {upper}]: total_in={total_in}, left={amount_left}")

    return SwapAmount(
        output_amount=to_u64(total_in, "get_in_amount_from_base_to_quote"),
        next_sqrt_price=current,
        amount_left=amount_left,
    )


def _walk_in(
    config: CurveConfiguration,
    sqrt_price: int,
    direction: TradeDirection,
    amount_in: int,
    stop_sqrt_price: Optional[int] = None,
) -> SwapAmount:
    if direction == TradeDirection.QUOTE_TO_BASE:
        return get_swap_amount_from_quote_to_base(config, sqrt_price, amount_in, stop_sqrt_price)
    return get_swap_amount_from_base_to_quote(config, sqrt_price, amount_in)


def _walk_out(config: CurveConfiguration, sqrt_price: int, direction: TradeDirection, amount_out: int) -> SwapAmount:
    if direction == TradeDirection.QUOTE_TO_BASE:
        return get_in_amount_from_quote_to_base(config, sqrt_price, amount_out)
    return get_in_amount_from_base_to_quote(config, sqrt_price, amount_out)


# ---------------------------------------------------------------------------
# Quotes
# ---------------------------------------------------------------------------

def _take_input_fee(
    pool: PoolState,
    config: CurveConfiguration,
    direction: TradeDirection,
    fee_mode: FeeMode,
    amount_in: int,
    has_referral: bool,
    current_point: int,
):
    if not fee_mode.fees_on_input:
        return amount_in, (0, 0, 0)
    r = config.pool_fees.get_fee_on_amount(
        amount_in,
        fee_mode,
        has_referral,
        current_point,
        pool.activation_point,
        direction,
        pool.volatility_tracker.volatility_accumulator,
    )
    return r.amount, (r.trading_fee, r.protocol_fee, r.referral_fee)


def swap_quote_exact_in(
    pool: PoolState,
    config: CurveConfiguration,
    direction: TradeDirection,
    amount_in: int,
    slippage_bps: int = 0,
    has_referral: bool = False,
    current_point: int = 0,
) -> QuoteResult:
    """Quote spending exactly `amount_in` (fee-inclusive).

    Parameters
    ----------
    pool : PoolState
        Snapshot providing the current price, activation point and volatility.
    config : CurveConfiguration
        Curve and fee parameters.
    direction : TradeDirection
        QUOTE_TO_BASE buys base, BASE_TO_QUOTE sells it.
    amount_in : int
        Input in smallest units, fees included.
    slippage_bps : int
        Tolerance used to derive `minimum_amount_out`.
    has_referral : bool
        Whether a referrer takes a share of the trading fee.
    current_point : int
        Slot or timestamp used by the base fee schedule.

    Raises
    ------
    InsufficientLiquidityError
        When the curve ends before the input is spent.
    """
    _check_pool(pool)
    _check_slippage(slippage_bps)
    fee_mode = get_fee_mode(config.collect_fee_mode, direction)
    actual_in, fees = _take_input_fee(pool, config, direction, fee_mode, amount_in, has_referral, current_point)

    swap = _walk_in(config, pool.sqrt_price, direction, actual_in)
    if swap.amount_left > 0:
        raise InsufficientLiquidityError(
            actual_in,
            actual_in - swap.amount_left,
            amount_left=swap.amount_left,
            next_sqrt_price=swap.next_sqrt_price,
            fee=amount_in - actual_in,
        )

    output = swap.output_amount
    if not fee_mode.fees_on_input:
        r = config.pool_fees.get_fee_on_amount(
            output,
            fee_mode,
            has_referral,
            current_point,
            pool.activation_point,
            direction,
            pool.volatility_tracker.volatility_accumulator,
        )
        output = r.amount
        fees = (r.trading_fee, r.protocol_fee, r.referral_fee)

    _dbg(f"exact_in {direction.name}: in={amount_in}, curve_in={actual_in}, out={output}, next={swap.next_sqrt_price}")
    return QuoteResult(
        included_fee_input_amount=amount_in,
        excluded_fee_input_amount=actual_in,
        amount_left=0,
        output_amount=output,
        next_sqrt_price=swap.next_sqrt_price,
        trading_fee=fees[0],
        protocol_fee=fees[1],
        referral_fee=fees[2],
        minimum_amount_out=get_minimum_amount_out(output, slippage_bps),
    )


def swap_quote_partial_fill(
    pool: PoolState,
    config: CurveConfiguration,
    direction: TradeDirection,
    amount_in: int,
    slippage_bps: int = 0,
    has_referral: bool = False,
    current_point: int = 0,
) -> QuoteResult:
    """Like exact-in, but stop at the price bound instead of failing.

    Buying base stops at `migration_sqrt_price` (or the end of the curve);
    selling base stops at `sqrt_start_price`. The unconsumed input is reported
    in `amount_left`; input-side fees are charged on the consumed part only.
    """
    _check_pool(pool)
    _check_slippage(slippage_bps)
    fee_mode = get_fee_mode(config.collect_fee_mode, direction)
    fees_obj = config.pool_fees
    va = pool.volatility_tracker.volatility_accumulator
    actual_in, fees = _take_input_fee(pool, config, direction, fee_mode, amount_in, has_referral, current_point)

    swap = _walk_in(config, pool.sqrt_price, direction, actual_in, config.migration_sqrt_price)

    included_in = amount_in
    excluded_in = actual_in
    if swap.amount_left > 0:
        excluded_in = actual_in - swap.amount_left
        if fee_mode.fees_on_input:
            included_in, _ = fees_obj.get_included_fee_amount(
                excluded_in, current_point, pool.activation_point, direction, va
            )
            included_in = min(included_in, amount_in)
            split = split_fee(included_in - excluded_in, fee_mode, has_referral)
            fees = (split.trading_fee, split.protocol_fee, split.referral_fee)
        else:
            included_in = excluded_in
        _dbg(f"partial_fill {direction.name}: consumed={included_in} of {amount_in}")

    output = swap.output_amount
    if not fee_mode.fees_on_input:
        r = fees_obj.get_fee_on_amount(
            output, fee_mode, has_referral, current_point, pool.activation_point, direction, va
        )
        output = r.amount
        fees = (r.trading_fee, r.protocol_fee, r.referral_fee)

    return QuoteResult(
        included_fee_input_amount=included_in,
        excluded_fee_input_amount=excluded_in,
        amount_left=amount_in - included_in,
        output_amount=output,
        next_sqrt_price=swap.next_sqrt_price,
        trading_fee=fees[0],
        protocol_fee=fees[1],
        referral_fee=fees[2],
        minimum_amount_out=get_minimum_amount_out(output, slippage_bps),
    )


def swap_quote_exact_out(
    pool: PoolState,
    config: CurveConfiguration,
    direction: TradeDirection,
    amount_out: int,
    slippage_bps: int = 0,
    has_referral: bool = False,
    current_point: int = 0,
) -> QuoteResult:
    """Quote receiving exactly `amount_out` (after output-side fees).

    Output-side fees gross the target up before the walk; input-side fees
    gross the required input up after it. `maximum_amount_in` is reported
    from the fee-inclusive input.
    """
    _check_pool(pool)
    _check_slippage(slippage_bps)
    fee_mode = get_fee_mode(config.collect_fee_mode, direction)
    fees_obj = config.pool_fees
    va = pool.volatility_tracker.volatility_accumulator
    fees = (0, 0, 0)

    if fee_mode.fees_on_input:
        gross_out = amount_out
    else:
        gross_out, fee = fees_obj.get_included_fee_amount(
            amount_out, current_point, pool.activation_point, direction, va
        )
        split = split_fee(fee, fee_mode, has_referral)
        fees = (split.trading_fee, split.protocol_fee, split.referral_fee)

    swap = _walk_out(config, pool.sqrt_price, direction, gross_out)
    if swap.amount_left > 0:
        raise InsufficientLiquidityError(
            gross_out,
            gross_out - swap.amount_left,
            amount_left=swap.amount_left,
            next_sqrt_price=swap.next_sqrt_price,
            fee=gross_out - amount_out,
        )

    excluded_in = swap.output_amount
    included_in = excluded_in
    if fee_mode.fees_on_input:
        included_in, fee = fees_obj.get_included_fee_amount(
            excluded_in, current_point, pool.activation_point, direction, va
        )
        split = split_fee(fee, fee_mode, has_referral)
        fees = (split.trading_fee, split.protocol_fee, split.referral_fee)

    _dbg(f"exact_out {direction.name}: out={amount_out}, gross_out={gross_out}, in={included_in}")
    return QuoteResult(
        included_fee_input_amount=included_in,
        excluded_fee_input_amount=excluded_in,
        amount_left=0,
        output_amount=amount_out,
        next_sqrt_price=swap.next_sqrt_price,
        trading_fee=fees[0],
        protocol_fee=fees[1],
        referral_fee=fees[2],
        maximum_amount_in=get_maximum_amount_in(included_in, slippage_bps),
    )


def swap_quote(
    pool: PoolState,
    config: CurveConfiguration,
    direction: TradeDirection,
    swap_mode: SwapMode,
    *,
    amount_in: Optional[int] = None,
    amount_out: Optional[int] = None,
    slippage_bps: int = 0,
    has_referral: bool = False,
    current_point: int = 0,
) -> QuoteResult:
    """Dispatch on `swap_mode`; exact-out takes `amount_out`, the others `amount_in`."""
    if swap_mode == SwapMode.EXACT_OUT:
        if amount_out is None or amount_in is not None:
            raise ValueError("EXACT_OUT quotes take amount_out only")
        return swap_quote_exact_out(pool, config, direction, amount_out, slippage_bps, has_referral, current_point)
    if amount_in is None or amount_out is not None:
        raise ValueError(f"{SwapMode(swap_mode).name} quotes take amount_in only")
    if swap_mode == SwapMode.PARTIAL_FILL:
        return swap_quote_partial_fill(pool, config, direction, amount_in, slippage_bps, has_referral, current_point)
    return swap_quote_exact_in(pool, config, direction, amount_in, slippage_bps, has_referral, current_point)


__all__ = [
    "get_minimum_amount_out",
    "get_maximum_amount_in",
    "get_swap_amount_from_quote_to_base",
    "get_swap_amount_from_base_to_quote",
    "get_in_amount_from_quote_to_base",
    "get_in_amount_from_base_to_quote",
    "swap_quote_exact_in",
    "swap_quote_exact_out",
    "swap_quote_partial_fill",
    "swap_quote",
]
