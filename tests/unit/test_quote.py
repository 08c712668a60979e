import pytest
from dataclasses import replace

from launchcurve import PoolState
from launchcurve.core import (
    ONE_Q64,
    CurvePoint,
    SwapMode,
    TradeDirection,
    VolatilityTracker,
)
from launchcurve.core.exc import InsufficientLiquidityError, PoolPausedError
from launchcurve.core.fixed_point import Rounding
from launchcurve.curve_math import (
    get_delta_amount_base_unsigned,
    get_next_sqrt_price_from_input,
)
from launchcurve.fees import get_dynamic_fee_params, get_included_fee_amount, split_fee, get_fee_mode
from launchcurve.quote import (
    get_minimum_amount_out,
    get_maximum_amount_in,
    get_swap_amount_from_quote_to_base,
    get_swap_amount_from_base_to_quote,
    get_in_amount_from_quote_to_base,
    get_in_amount_from_base_to_quote,
    swap_quote,
    swap_quote_exact_in,
    swap_quote_exact_out,
    swap_quote_partial_fill,
)

from conftest import make_config

X = ONE_Q64
L = 10**12 * X
Q2B = TradeDirection.QUOTE_TO_BASE
B2Q = TradeDirection.BASE_TO_QUOTE


def _show(tag, q):
    print(f"[{tag}] in={q.included_fee_input_amount} (curve {q.excluded_fee_input_amount}), left={q.amount_left}, "
          f"out={q.output_amount}, next={q.next_sqrt_price}, fees=({q.trading_fee}, {q.protocol_fee}, {q.referral_fee})")


# -----------------------------
# Slippage bounds
# -----------------------------

def test_slippage_bounds():
    assert get_minimum_amount_out(1_000, 100) == 990
    assert get_maximum_amount_in(1_000, 100) == 1_010
    assert get_minimum_amount_out(1, 1) == 0
    assert get_maximum_amount_in(1, 1) == 2
    assert get_minimum_amount_out(1_000, 0) == get_maximum_amount_in(1_000, 0) == 1_000
    with pytest.raises(ValueError):
        get_minimum_amount_out(1_000, 10_001)
    with pytest.raises(ValueError):
        get_maximum_amount_in(1_000, -1)


# -----------------------------
# Curve walks
# -----------------------------

def test_walk_full_segment_both_ways(single_segment_config):
    up = get_swap_amount_from_quote_to_base(single_segment_config, X, 10**12)
    down = get_swap_amount_from_base_to_quote(single_segment_config, 2 * X, 5 * 10**11)
    print(f"[walk] up={up}, down={down}")
    assert (up.output_amount, up.next_sqrt_price, up.amount_left) == (5 * 10**11, 2 * X, 0)
    assert (down.output_amount, down.next_sqrt_price, down.amount_left) == (10**12, X, 0)


def test_walk_stops_at_bound(single_segment_config):
    up = get_swap_amount_from_quote_to_base(single_segment_config, X, 10**12, stop_sqrt_price=X + X // 2)
    assert up.next_sqrt_price == X + X // 2
    assert up.amount_left == 10**12 - 5 * 10**11
    down = get_swap_amount_from_base_to_quote(single_segment_config, X, 10)
    assert (down.output_amount, down.next_sqrt_price, down.amount_left) == (0, X, 10)


def test_walk_partial_leg_matches_kernel(single_segment_config):
    amount = 123_456_789
    up = get_swap_amount_from_quote_to_base(single_segment_config, X, amount)
    nxt = get_next_sqrt_price_from_input(X, L, amount, False)
    assert up.next_sqrt_price == nxt
    assert up.output_amount == get_delta_amount_base_unsigned(X, nxt, L, Rounding.DOWN)


def test_walk_crosses_segments(multi_segment_config):
    cfg = multi_segment_config
    full = get_swap_amount_from_quote_to_base(cfg, X, 10**15)
    print(f"[walk-multi] full={full}")
    assert full.next_sqrt_price == 2 * X
    assert full.amount_left > 0
    back = get_swap_amount_from_base_to_quote(cfg, 2 * X, 10**15)
    assert back.next_sqrt_price == X
    assert back.amount_left > 0
    # starting mid-curve skips the segments already passed
    mid = get_swap_amount_from_quote_to_base(cfg, X + X // 2, 10**15)
    assert mid.output_amount < full.output_amount


def test_in_amount_walks(single_segment_config):
    need_quote = get_in_amount_from_quote_to_base(single_segment_config, X, 5 * 10**11)
    need_base = get_in_amount_from_base_to_quote(single_segment_config, 2 * X, 10**12)
    assert (need_quote.output_amount, need_quote.next_sqrt_price, need_quote.amount_left) == (10**12, 2 * X, 0)
    assert (need_base.output_amount, need_base.next_sqrt_price, need_base.amount_left) == (5 * 10**11, X, 0)
    short = get_in_amount_from_quote_to_base(single_segment_config, X, 6 * 10**11)
    assert short.amount_left == 10**11


# -----------------------------
# Exact in
# -----------------------------

def test_exact_in_sell_full_segment_fee_on_output(single_segment_config):
    pool = PoolState(sqrt_price=2 * X)
    q = swap_quote_exact_in(pool, single_segment_config, B2Q, 5 * 10**11)
    _show("exact-in b2q", q)
    assert q.next_sqrt_price == X
    assert q.output_amount == 10**12 - 2_500_000_000
    assert (q.trading_fee, q.protocol_fee, q.referral_fee) == (2_000_000_000, 500_000_000, 0)
    assert q.excluded_fee_input_amount == q.included_fee_input_amount == 5 * 10**11


def test_exact_in_buy_full_segment_output_token_mode(output_fee_config):
    pool = PoolState.at_launch(output_fee_config)
    q = swap_quote_exact_in(pool, output_fee_config, Q2B, 10**12)
    _show("exact-in q2b base-fee", q)
    assert q.next_sqrt_price == 2 * X
    assert q.output_amount == 5 * 10**11 - 1_250_000_000
    assert q.total_fee == 1_250_000_000


def test_exact_in_buy_fee_on_input(single_segment_config, launch_pool):
    q = swap_quote_exact_in(launch_pool, single_segment_config, Q2B, 100_000_000, slippage_bps=50)
    _show("exact-in q2b", q)
    assert q.total_fee == 250_000
    assert q.excluded_fee_input_amount == 99_750_000
    nxt = get_next_sqrt_price_from_input(X, L, 99_750_000, False)
    assert q.next_sqrt_price == nxt
    assert q.output_amount == get_delta_amount_base_unsigned(X, nxt, L, Rounding.DOWN)
    assert q.minimum_amount_out == q.output_amount * 9_950 // 10_000
    assert q.maximum_amount_in is None


def test_exact_in_referral_share(single_segment_config, launch_pool):
    q = swap_quote_exact_in(launch_pool, single_segment_config, Q2B, 10**9, has_referral=True)
    assert q.total_fee == 2_500_000
    assert q.protocol_fee == 500_000
    assert q.referral_fee == 400_000
    assert q.trading_fee == 1_600_000


def test_exact_in_beyond_curve_raises(single_segment_config, launch_pool):
    with pytest.raises(InsufficientLiquidityError) as ei:
        swap_quote_exact_in(launch_pool, single_segment_config, Q2B, 2 * 10**12)
    print(f"[exact-in] overflow: {ei.value}")
    assert ei.value.next_sqrt_price == 2 * X
    # amounts are reported after the 0.25% input fee
    assert ei.value.fee == 5_000_000_000
    assert ei.value.requested == 2 * 10**12 - 5_000_000_000
    assert ei.value.filled == 10**12
    assert ei.value.amount_left == ei.value.requested - ei.value.filled
    with pytest.raises(InsufficientLiquidityError):
        swap_quote_exact_in(launch_pool, single_segment_config, B2Q, 1)


def test_paused_pool_refuses_quotes(single_segment_config):
    paused = PoolState(sqrt_price=X, is_paused=True)
    with pytest.raises(PoolPausedError):
        swap_quote_exact_in(paused, single_segment_config, Q2B, 1_000)
    with pytest.raises(PoolPausedError):
        swap_quote_exact_out(paused, single_segment_config, Q2B, 1_000)
    with pytest.raises(PoolPausedError):
        swap_quote_partial_fill(paused, single_segment_config, Q2B, 1_000)


def test_zero_amount_is_a_no_op(single_segment_config, launch_pool):
    q = swap_quote_exact_in(launch_pool, single_segment_config, Q2B, 0)
    assert (q.output_amount, q.next_sqrt_price, q.total_fee) == (0, X, 0)


def test_dynamic_fee_raises_cost(single_segment_config, launch_pool):
    cfg = replace(single_segment_config, dynamic_fee=get_dynamic_fee_params(25))
    calm = swap_quote_exact_in(launch_pool, cfg, Q2B, 10**9)
    volatile_pool = replace(launch_pool, volatility_tracker=VolatilityTracker(volatility_accumulator=10**9))
    volatile = swap_quote_exact_in(volatile_pool, cfg, Q2B, 10**9)
    print(f"[dynamic] calm fee={calm.total_fee}, volatile fee={volatile.total_fee}")
    assert calm.total_fee == 2_500_000
    assert volatile.total_fee == 3_000_000
    assert volatile.output_amount < calm.output_amount


# -----------------------------
# Partial fill
# -----------------------------

def test_partial_fill_buy_stops_at_curve_end(single_segment_config, launch_pool):
    q = swap_quote_partial_fill(launch_pool, single_segment_config, Q2B, 2 * 10**12)
    _show("partial q2b", q)
    included = get_included_fee_amount(2_500_000, 10**12)
    assert q.next_sqrt_price == 2 * X
    assert q.output_amount == 5 * 10**11
    assert q.excluded_fee_input_amount == 10**12
    assert q.included_fee_input_amount == included
    assert q.amount_left == 2 * 10**12 - included
    assert q.amount_requested == 2 * 10**12
    split = split_fee(included - 10**12, get_fee_mode(single_segment_config.collect_fee_mode, Q2B), False)
    assert (q.trading_fee, q.protocol_fee, q.referral_fee) == (split.trading_fee, split.protocol_fee, 0)


def test_partial_fill_buy_stops_at_migration_price(single_segment_config, launch_pool):
    cfg = replace(single_segment_config, migration_sqrt_price=X + X // 2)
    q = swap_quote_partial_fill(launch_pool, cfg, Q2B, 2 * 10**12)
    assert q.next_sqrt_price == X + X // 2
    assert q.excluded_fee_input_amount == 5 * 10**11
    assert q.amount_left > 0


def test_partial_fill_sell_stops_at_start(single_segment_config):
    pool = PoolState(sqrt_price=2 * X)
    q = swap_quote_partial_fill(pool, single_segment_config, B2Q, 10**12)
    _show("partial b2q", q)
    assert q.next_sqrt_price == X
    assert q.included_fee_input_amount == 5 * 10**11
    assert q.amount_left == 5 * 10**11
    assert q.output_amount == 10**12 - 2_500_000_000


def test_partial_fill_within_curve_matches_exact_in(single_segment_config, launch_pool):
    a = swap_quote_partial_fill(launch_pool, single_segment_config, Q2B, 10**9)
    b = swap_quote_exact_in(launch_pool, single_segment_config, Q2B, 10**9)
    assert a == b


# -----------------------------
# Exact out
# -----------------------------

def test_exact_out_buy_whole_segment(single_segment_config, launch_pool):
    q = swap_quote_exact_out(launch_pool, single_segment_config, Q2B, 5 * 10**11, slippage_bps=100)
    _show("exact-out q2b", q)
    included = get_included_fee_amount(2_500_000, 10**12)
    assert q.next_sqrt_price == 2 * X
    assert q.excluded_fee_input_amount == 10**12
    assert q.included_fee_input_amount == included
    assert q.total_fee == included - 10**12
    assert q.maximum_amount_in == get_maximum_amount_in(included, 100)
    assert q.minimum_amount_out is None


def test_exact_out_sell_grosses_up_output(single_segment_config):
    pool = PoolState(sqrt_price=2 * X)
    target = 997_500_000_000
    q = swap_quote_exact_out(pool, single_segment_config, B2Q, target)
    _show("exact-out b2q", q)
    assert q.output_amount == target
    assert q.total_fee == 2_500_000_000
    assert q.included_fee_input_amount == 5 * 10**11
    assert q.next_sqrt_price == X


def test_exact_out_beyond_curve_raises(single_segment_config, launch_pool):
    with pytest.raises(InsufficientLiquidityError) as ei:
        swap_quote_exact_out(launch_pool, single_segment_config, Q2B, 5 * 10**11 + 1)
    assert ei.value.amount_left == 1
    assert (ei.value.requested, ei.value.filled, ei.value.fee) == (5 * 10**11 + 1, 5 * 10**11, 0)


def test_exact_out_beyond_curve_reports_grossed_up_output(single_segment_config):
    top = PoolState(sqrt_price=2 * X)
    with pytest.raises(InsufficientLiquidityError) as ei:
        swap_quote_exact_out(top, single_segment_config, B2Q, 10**12)
    gross = get_included_fee_amount(2_500_000, 10**12)
    print(f"[exact-out] overflow: {ei.value}")
    assert ei.value.requested == gross
    assert ei.value.filled == 10**12
    assert ei.value.fee == gross - 10**12
    assert ei.value.amount_left == gross - 10**12


# -----------------------------
# Dispatch
# -----------------------------

def test_swap_quote_dispatch(single_segment_config, launch_pool):
    cfg = single_segment_config
    assert swap_quote(launch_pool, cfg, Q2B, SwapMode.EXACT_IN, amount_in=10**6) == swap_quote_exact_in(
        launch_pool, cfg, Q2B, 10**6
    )
    assert swap_quote(launch_pool, cfg, Q2B, SwapMode.PARTIAL_FILL, amount_in=10**6) == swap_quote_partial_fill(
        launch_pool, cfg, Q2B, 10**6
    )
    assert swap_quote(launch_pool, cfg, Q2B, SwapMode.EXACT_OUT, amount_out=10**6) == swap_quote_exact_out(
        launch_pool, cfg, Q2B, 10**6
    )
    with pytest.raises(ValueError):
        swap_quote(launch_pool, cfg, Q2B, SwapMode.EXACT_OUT, amount_in=10**6)
    with pytest.raises(ValueError):
        swap_quote(launch_pool, cfg, Q2B, SwapMode.EXACT_IN, amount_out=10**6)
    with pytest.raises(ValueError):
        swap_quote(launch_pool, cfg, Q2B, SwapMode.EXACT_IN, amount_in=10**6, slippage_bps=20_000)
