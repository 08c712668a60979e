from __future__ import annotations

import pytest

from launchcurve import CurveConfiguration, PoolState
from launchcurve.core import (
    ONE_Q64,
    CollectFeeMode,
    CurvePoint,
    FeeScheduler,
    RateLimiter,
)


# -----------------------------
# Test helpers (pure functions)
# -----------------------------

X = ONE_Q64

#: 1% flat base fee; 0.25% is the protocol minimum.
FLAT_FEE = FeeScheduler(cliff_fee_numerator=10_000_000, number_of_period=0, period_frequency=0, reduction_factor=0)
MIN_FLAT_FEE = FeeScheduler(cliff_fee_numerator=2_500_000, number_of_period=0, period_frequency=0, reduction_factor=0)


def make_config(
    curve,
    *,
    start: int = X,
    base_fee=MIN_FLAT_FEE,
    collect_fee_mode: CollectFeeMode = CollectFeeMode.QUOTE_TOKEN,
    threshold: int = 10**12,
    **kwargs,
) -> CurveConfiguration:
    return CurveConfiguration(
        sqrt_start_price=start,
        curve=curve,
        base_fee=base_fee,
        collect_fee_mode=collect_fee_mode,
        migration_quote_threshold=threshold,
        **kwargs,
    )


# -----------------------------
# Pytest fixtures
# -----------------------------

@pytest.fixture()
def single_segment_config() -> CurveConfiguration:
    # (X, 2X] at L = 1e12 * X: exactly 1e12 quote buys exactly 5e11 base
    return make_config([CurvePoint(2 * X, 10**12 * X)])


@pytest.fixture()
def output_fee_config() -> CurveConfiguration:
    return make_config([CurvePoint(2 * X, 10**12 * X)], collect_fee_mode=CollectFeeMode.OUTPUT_TOKEN)


@pytest.fixture()
def near_parity_config() -> CurveConfiguration:
    # price within [1, 1.27): one base unit is worth about one quote unit
    return make_config([CurvePoint(X + X // 8, 10**12 * X)], threshold=10**11)


@pytest.fixture()
def multi_segment_config() -> CurveConfiguration:
    return make_config(
        [
            CurvePoint(X + X // 4, 10**12 * X),
            CurvePoint(X + X // 2, 2 * 10**12 * X),
            CurvePoint(2 * X, 4 * 10**12 * X),
        ],
        base_fee=FLAT_FEE,
    )


@pytest.fixture()
def rate_limited_config() -> CurveConfiguration:
    # 1% up to 1_000 quote tokens, +0.1% for each further 1_000, for 1_000 slots
    limiter = RateLimiter(
        cliff_fee_numerator=10_000_000,
        fee_increment_bps=10,
        max_limiter_duration=1_000,
        reference_amount=1_000_000_000,
    )
    return make_config([CurvePoint(2 * X, 10**15 * X)], base_fee=limiter, threshold=10**15)


@pytest.fixture()
def launch_pool(single_segment_config) -> PoolState:
    return PoolState.at_launch(single_segment_config)
