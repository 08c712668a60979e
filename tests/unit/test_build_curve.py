import pytest
from decimal import Decimal

from launchcurve import PoolState
from launchcurve.build_curve import (
    LaunchParams,
    LockedVestingParams,
    BuildCurveParams,
    BuildCurveWithMarketCapParams,
    BuildCurveWithTwoSegmentsParams,
    BuildCurveWithMidPriceParams,
    BuildCurveWithLiquidityWeightsParams,
    get_locked_vesting_params,
    get_total_vesting_amount,
    get_total_token_supply,
    get_base_token_for_swap,
    get_swap_amount_with_buffer,
    get_migration_quote_amount_from_migration_quote_threshold,
    get_migration_quote_threshold_from_migration_quote_amount,
    get_migration_base_token,
    get_migrated_pool_fee_params,
    get_migration_threshold_price,
    get_curve_breakdown,
    verify_total_supply,
    get_percentage_supply_on_migration,
    get_tokenomics,
    get_quote_reserve_from_next_sqrt_price,
    get_curve_progress,
    get_first_curve,
    get_two_curve,
    get_mid_sqrt_price_candidates,
    solve_two_segment_curve,
    build_curve,
    build_curve_with_market_cap,
    build_curve_with_two_segments,
    build_curve_with_mid_price,
    build_curve_with_liquidity_weights,
)
from launchcurve.core import (
    ONE_Q64,
    U64_MAX,
    MAX_SQRT_PRICE,
    BaseFeeMode,
    CurvePoint,
    LockedVesting,
    MigratedPoolFee,
    MigrationFeeOption,
    MigrationOption,
)
from launchcurve.core.exc import (
    CurveDomainError,
    InvalidConfigurationError,
    MathOverflowError,
    PrecisionReconciliationError,
)
from launchcurve.core.fmt import get_sqrt_price_from_market_cap, get_sqrt_price_from_price
from launchcurve.fees import BaseFeeParams, FeeSchedulerParams
from launchcurve.quote import get_swap_amount_from_quote_to_base

from conftest import make_config

X = ONE_Q64
FLAT_1PCT = BaseFeeParams(BaseFeeMode.FEE_SCHEDULER_LINEAR, fee_scheduler_param=FeeSchedulerParams(100, 100, 0, 0))


def _launch(**kwargs) -> LaunchParams:
    base = dict(total_token_supply=1_000_000_000, base_fee_params=FLAT_1PCT, leftover=1_000)
    base.update(kwargs)
    return LaunchParams(**base)


def _show(tag, cfg):
    print(f"[{tag}] start={cfg.sqrt_start_price}, migration={cfg.migration_sqrt_price}, "
          f"threshold={cfg.migration_quote_threshold}, points={[(p.sqrt_price, p.liquidity) for p in cfg.curve]}")


# -----------------------------
# Vesting and supply helpers
# -----------------------------

def test_locked_vesting_even_split():
    v = get_locked_vesting_params(1_000, 10, 100, 1_000, 5, 6)
    assert v == LockedVesting(
        amount_per_period=90_000_000,
        cliff_duration_from_migration_time=5,
        frequency=100,
        number_of_period=10,
        cliff_unlock_amount=100_000_000,
    )


def test_locked_vesting_remainder_goes_to_cliff():
    v = get_locked_vesting_params(1_000, 7, 0, 700, 0, 6)
    print(f"[vesting] 1000 over 7 periods -> {v}")
    assert v.amount_per_period == 142_000_000
    assert v.cliff_unlock_amount == 6_000_000
    assert v.total_amount() == 1_000_000_000
    assert get_total_vesting_amount(v) == v.total_amount()


def test_locked_vesting_all_cliff_keeps_one_period():
    v = get_locked_vesting_params(500, 0, 500, 0, 0, 6)
    assert (v.number_of_period, v.amount_per_period, v.frequency) == (1, 1_000_000, 1)
    assert v.total_amount() == 500_000_000
    assert get_locked_vesting_params(0, 0, 0, 0, 0, 6).is_empty()


@pytest.mark.parametrize(
    "args,name",
    [
        ((1_000, 0, 100, 1_000, 0, 6), "zero periods"),
        ((1_000, 10, 100, 0, 0, 6), "zero duration"),
        ((1_000, 10, 2_000, 1_000, 0, 6), "cliff above total"),
    ],
)
def test_locked_vesting_rejected(args, name):
    print(f"[vesting] {name} -> expect InvalidConfigurationError")
    with pytest.raises(InvalidConfigurationError):
        get_locked_vesting_params(*args)


def test_total_token_supply_checked():
    assert get_total_token_supply(10, 20, LockedVesting(cliff_unlock_amount=5)) == 35
    with pytest.raises(MathOverflowError):
        get_total_token_supply(U64_MAX, 1, LockedVesting())


def test_migration_quote_conversions():
    assert get_migration_quote_amount_from_migration_quote_threshold(100, 10) == Decimal(90)
    assert get_migration_quote_threshold_from_migration_quote_amount(90, 10) == Decimal(100)
    with pytest.raises(InvalidConfigurationError):
        get_migration_quote_threshold_from_migration_quote_amount(90, 100)


def test_migration_base_token_per_option():
    damm = get_migration_base_token(10**12, X, MigrationOption.MET_DAMM)
    damm_v2 = get_migration_base_token(10**12, X, MigrationOption.MET_DAMM_V2)
    print(f"[migration-base] at price 1: damm={damm}, damm_v2={damm_v2}")
    assert damm == 10**12
    assert abs(damm_v2 - 10**12) < 10**4
    assert get_migration_base_token(10**12, X, MigrationOption.NO_MIGRATION) == damm_v2
    with pytest.raises(InvalidConfigurationError):
        get_migration_base_token(10**12, X, 7)


def test_migrated_pool_fee_params():
    assert get_migrated_pool_fee_params(MigrationOption.MET_DAMM_V2, MigrationFeeOption.FIXED_BPS_25).is_default()
    custom = MigratedPoolFee(collect_fee_mode=0, dynamic_fee=1, pool_fee_bps=250)
    assert get_migrated_pool_fee_params(
        MigrationOption.MET_DAMM_V2, MigrationFeeOption.CUSTOMIZABLE, custom
    ) == custom
    with pytest.raises(InvalidConfigurationError):
        get_migrated_pool_fee_params(MigrationOption.MET_DAMM, MigrationFeeOption.FIXED_BPS_25, custom)


def test_swap_base_and_buffer(single_segment_config):
    curve = single_segment_config.curve
    assert get_base_token_for_swap(X, 2 * X, curve) == 5 * 10**11
    assert get_base_token_for_swap(X, X + X // 2, curve) == 333_333_333_334
    assert get_swap_amount_with_buffer(1_000, X, curve) == 1_250
    assert get_swap_amount_with_buffer(5 * 10**11, X, curve) == 5 * 10**11


def test_verify_total_supply():
    verify_total_supply(100, 100, 0)
    verify_total_supply(99, 100, 0)
    verify_total_supply(105, 100, 10)
    with pytest.raises(PrecisionReconciliationError) as ei:
        verify_total_supply(110, 100, 10)
    assert ei.value.reconstructed_supply == 110


def test_percentage_and_tokenomics():
    pct = get_percentage_supply_on_migration(5_000, 500_000, LockedVesting(), 0, 10**15)
    print(f"[tokenomics] percentage on migration = {pct:.12f}")
    assert abs(pct - Decimal(100) / Decimal(11)) < Decimal("1e-30")
    t = get_tokenomics(5_000, 500_000, 0, 0, 10**15)
    assert t.migration_supply == 90_909_090_909_090
    assert t.bonding_curve_supply + t.migration_supply + t.leftover_supply + t.locked_vesting_supply == 10**15


# -----------------------------
# Pool-side views
# -----------------------------

def test_quote_reserve_and_progress(single_segment_config):
    cfg = single_segment_config
    assert get_quote_reserve_from_next_sqrt_price(X, cfg) == 0
    assert get_quote_reserve_from_next_sqrt_price(X + X // 2, cfg) == 5 * 10**11
    assert get_quote_reserve_from_next_sqrt_price(2 * X, cfg) == 10**12
    assert get_curve_progress(PoolState(sqrt_price=X, quote_reserve=5 * 10**11), cfg) == Decimal("0.5")
    assert get_curve_progress(PoolState(sqrt_price=X, quote_reserve=3 * 10**12), cfg) == Decimal(1)
    with pytest.raises(CurveDomainError):
        get_curve_progress(PoolState(sqrt_price=X), make_config(list(cfg.curve), threshold=0))


def test_migration_threshold_price_and_breakdown(multi_segment_config):
    cfg = multi_segment_config
    # segment quote capacities: 0.25e12, 0.5e12, 2e12
    assert get_migration_threshold_price(750_000_000_000, X, cfg.curve) == X + X // 2
    b = get_curve_breakdown(10**12, X, cfg.curve)
    print(f"[breakdown] {b}")
    assert b.segment_amounts == (250_000_000_000, 500_000_000_000, 250_000_000_000)
    assert b.total_amount == 10**12
    assert X + X // 2 < b.final_sqrt_price < 2 * X
    with pytest.raises(InvalidConfigurationError):
        get_migration_threshold_price(10**13, X, cfg.curve)
    with pytest.raises(InvalidConfigurationError):
        get_curve_breakdown(10**13, X, cfg.curve)


# -----------------------------
# Segment solvers
# -----------------------------

def test_first_curve_closed_form():
    start, curve = get_first_curve(2 * X, 5 * 10**11, 10**12, 2 * 10**12, 0)
    print(f"[first-curve] start={start}, curve={curve}")
    assert start == X
    assert curve == [CurvePoint(2 * X, 2 * 10**12 * X)]


@pytest.mark.parametrize(
    "args,name",
    [
        ((2 * X, 1, 10**30, 10**12, 0), "start below MIN_SQRT_PRICE"),
        ((2 * X, 10**12, 10**11, 10**12, 0), "start above migration price"),
        ((2 * X, 10**12, 0, 10**12, 0), "no swap supply"),
    ],
)
def test_first_curve_rejected(args, name):
    print(f"[first-curve] {name} -> expect InvalidConfigurationError")
    with pytest.raises(InvalidConfigurationError):
        get_first_curve(*args)


def test_mid_candidates_and_fall_through():
    p0, p2 = X, 4 * X
    mids = get_mid_sqrt_price_candidates(p0, p2)
    print(f"[two-curve] candidates={[m / X for m in mids]}")
    assert mids[0] * mids[0] <= 2 * X * X < (mids[0] + 1) ** 2
    assert mids[2] == 2 * X
    # closest-to-start mid needs a negative l0 here; the next candidate works
    assert get_two_curve(p2, mids[0], p0, 10**12, 7 * 10**12) is None
    start, curve = solve_two_segment_curve(p2, p0, 10**12, 7 * 10**12)
    assert start == p0
    assert curve[0].sqrt_price == mids[1]
    assert curve[1].sqrt_price == p2
    price = get_migration_threshold_price(7 * 10**12, start, curve)
    assert 4 * X - 10**8 < price <= 4 * X


def test_two_curve_rejects_out_of_order_mid():
    assert get_two_curve(4 * X, X, X, 10**12, 7 * 10**12) is None
    assert get_two_curve(4 * X, 5 * X, X, 10**12, 7 * 10**12) is None
    with pytest.raises(InvalidConfigurationError):
        solve_two_segment_curve(4 * X, X, 10**12, 10**20)


# -----------------------------
# Builders
# -----------------------------

def test_build_curve_single_segment():
    cfg = build_curve(BuildCurveParams(_launch(), 20, 100))
    _show("build_curve", cfg)
    migrate = get_sqrt_price_from_price(Decimal("0.0000005"), 6, 9)
    assert cfg.curve[0].sqrt_price == migrate
    assert cfg.migration_sqrt_price == migrate
    assert cfg.migration_quote_threshold == 100 * 10**9
    assert cfg.total_supply == 10**15 and cfg.leftover == 10**9
    assert 0.24 < cfg.sqrt_start_price / migrate < 0.26
    assert len(cfg.curve) in (1, 2)
    if len(cfg.curve) == 2:
        assert cfg.curve[1].sqrt_price == MAX_SQRT_PRICE
    walk = get_swap_amount_from_quote_to_base(cfg, cfg.sqrt_start_price, cfg.migration_quote_threshold)
    assert walk.next_sqrt_price == migrate
    assert walk.amount_left == 0


@pytest.mark.parametrize("option", [MigrationOption.MET_DAMM, MigrationOption.MET_DAMM_V2])
def test_build_curve_migration_options(option):
    cfg = build_curve(BuildCurveParams(_launch(migration_option=option), 20, 100))
    assert cfg.migration_option == option
    assert cfg.migration_sqrt_price == cfg.curve[0].sqrt_price


def test_build_curve_no_migration_with_vesting_and_dynamic_fee():
    launch = _launch(
        migration_option=MigrationOption.NO_MIGRATION,
        no_migration_partner_surplus_percentage=50,
        no_migration_creator_surplus_percentage=30,
        no_migration_protocol_surplus_percentage=20,
        locked_vesting_param=LockedVestingParams(10_000_000, 10, 0, 1_000, 0),
        dynamic_fee_enabled=True,
    )
    cfg = build_curve(BuildCurveParams(launch, 20, 100))
    _show("build_curve no-migration", cfg)
    assert cfg.locked_vesting.total_amount() == 10**13
    assert cfg.dynamic_fee is not None
    assert cfg.base_fee.cliff_fee_numerator == 10_000_000


def test_build_curve_rejects_empty_migration_share():
    with pytest.raises(InvalidConfigurationError):
        build_curve(BuildCurveParams(_launch(), 0, 100))


def test_build_curve_with_market_cap():
    cfg = build_curve_with_market_cap(BuildCurveWithMarketCapParams(_launch(), 5_000, 500_000))
    _show("market_cap", cfg)
    expected_start = get_sqrt_price_from_market_cap(5_000, 1_000_000_000, 6, 9)
    expected_migration = get_sqrt_price_from_market_cap(500_000, 1_000_000_000, 6, 9)
    assert abs(cfg.sqrt_start_price - expected_start) * 10**6 < expected_start
    assert abs(cfg.curve[0].sqrt_price - expected_migration) * 10**6 < expected_migration
    with pytest.raises(InvalidConfigurationError):
        build_curve_with_market_cap(BuildCurveWithMarketCapParams(_launch(), 5_000, 5_000))


def test_build_curve_with_two_segments():
    cfg = build_curve_with_two_segments(BuildCurveWithTwoSegmentsParams(_launch(), 5_000, 500_000, 10))
    _show("two_segments", cfg)
    start = get_sqrt_price_from_market_cap(5_000, 1_000_000_000, 6, 9)
    migrate = get_sqrt_price_from_price(Decimal("0.0005"), 6, 9)
    assert cfg.sqrt_start_price == start
    assert len(cfg.curve) == 2
    assert cfg.curve[1].sqrt_price == migrate
    assert cfg.curve[0].sqrt_price == get_mid_sqrt_price_candidates(start, migrate)[0]
    assert cfg.migration_quote_threshold == 50_000 * 10**9
    assert cfg.migration_sqrt_price <= migrate


def test_build_curve_with_mid_price():
    params = BuildCurveWithMidPriceParams(_launch(), 5_000, 500_000, Decimal("0.00002"), 10)
    cfg = build_curve_with_mid_price(params)
    _show("mid_price", cfg)
    assert cfg.curve[0].sqrt_price == get_sqrt_price_from_price(Decimal("0.00002"), 6, 9)
    for bad in (Decimal("0.0000051"), Decimal("0.001")):
        with pytest.raises(InvalidConfigurationError):
            build_curve_with_mid_price(BuildCurveWithMidPriceParams(_launch(), 5_000, 500_000, bad, 10))


def test_build_curve_with_equal_liquidity_weights():
    params = BuildCurveWithLiquidityWeightsParams(_launch(), 5_000, 500_000, tuple([1] * 16))
    cfg = build_curve_with_liquidity_weights(params)
    _show("liquidity_weights", cfg)
    p_min = get_sqrt_price_from_market_cap(5_000, 1_000_000_000, 6, 9)
    p_max = get_sqrt_price_from_market_cap(500_000, 1_000_000_000, 6, 9)
    assert cfg.sqrt_start_price == p_min
    assert len(cfg.curve) == 16
    assert cfg.curve[-1].sqrt_price == p_max
    assert len({p.liquidity for p in cfg.curve}) == 1
    assert cfg.migration_quote_threshold > 0
    assert cfg.migration_sqrt_price <= p_max


def test_build_curve_with_rising_liquidity_weights():
    weights = tuple(Decimal(i) for i in range(1, 17))
    cfg = build_curve_with_liquidity_weights(BuildCurveWithLiquidityWeightsParams(_launch(), 5_000, 500_000, weights))
    liqs = [p.liquidity for p in cfg.curve]
    assert all(b > a for a, b in zip(liqs, liqs[1:]))


@pytest.mark.parametrize(
    "weights,name",
    [
        (tuple([1] * 15), "fifteen weights"),
        (tuple([1] * 15 + [0]), "zero weight"),
    ],
)
def test_liquidity_weights_rejected(weights, name):
    print(f"[liquidity_weights] {name} -> expect InvalidConfigurationError")
    with pytest.raises(InvalidConfigurationError):
        build_curve_with_liquidity_weights(BuildCurveWithLiquidityWeightsParams(_launch(), 5_000, 500_000, weights))
