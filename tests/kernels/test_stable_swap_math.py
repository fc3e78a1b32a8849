from __future__ import annotations

import pytest
import hypothesis.strategies as st
from hypothesis import assume, given, settings

from dynamic_amm_quote.errors import InvariantConvergenceNotReached, InvariantDecreasedError, MathOverflowError
from dynamic_amm_quote.kernels.python.stable_swap_math import (
    compute_d,
    compute_out_amount_without_slippage,
    compute_y,
    estimate_mint_amount,
    estimate_withdraw_one_amount,
    normalized_trade_fee,
)


def test_compute_d_empty_pool_is_zero() -> None:
    assert compute_d(100, 0, 0) == 0


def test_compute_d_balanced_pool_equals_sum() -> None:
    assert compute_d(100, 1_000_000, 1_000_000) == 2_000_000
    assert compute_d(1, 7, 7) == 14


def test_compute_d_is_below_sum_when_imbalanced() -> None:
    d = compute_d(100, 1_000_000, 3_000_000)
    assert d < 4_000_000
    # Constant-product D (2*sqrt(xy)) is the lower bound.
    assert d > 2 * 1_732_050


def test_compute_d_one_sided_pool_is_rejected() -> None:
    with pytest.raises(MathOverflowError):
        compute_d(100, 0, 5)


def test_compute_d_rejects_zero_amp_and_bools() -> None:
    with pytest.raises(ValueError):
        compute_d(0, 1, 1)
    with pytest.raises(TypeError):
        compute_d(True, 1, 1)


def test_compute_y_recovers_balanced_reserve_exactly() -> None:
    # Ann = 200 divides x, so the real root is exactly x.
    assert compute_y(100, 1_000_000, 2_000_000) == 1_000_000


def test_compute_y_rejects_zero_x() -> None:
    with pytest.raises(MathOverflowError):
        compute_y(100, 0, 10)


def test_compute_y_warns_instead_of_raising_when_iteration_cap_is_hit() -> None:
    with pytest.warns(InvariantConvergenceNotReached):
        y = compute_y(1, 1, 10**30)
    assert y > 0


@settings(max_examples=200, deadline=None)
@given(
    amp=st.integers(min_value=1, max_value=2_000),
    k=st.integers(min_value=1, max_value=10**6),
)
def test_compute_y_round_trip_on_balanced_pools(amp: int, k: int) -> None:
    x = 2 * amp * k
    assert compute_y(amp, x, compute_d(amp, x, x)) == x


@settings(max_examples=200, deadline=None)
@given(
    amp=st.integers(min_value=10, max_value=2_000),
    x=st.integers(min_value=10**3, max_value=10**15),
    ratio_bps=st.integers(min_value=3_334, max_value=30_000),
)
def test_compute_y_round_trip_is_tight(amp: int, x: int, ratio_bps: int) -> None:
    y = x * ratio_bps // 10_000
    assume(y > 0)
    d = compute_d(amp, x, y)
    # Both solvers stop once an iterate moves by at most one unit, and D/Ann is floored.
    assert abs(compute_y(amp, x, d) - y) <= 3


def test_normalized_trade_fee_uses_two_floor_steps() -> None:
    # adjusted numerator = 10 * 2 // 4 = 5
    assert normalized_trade_fee(1_000_000, trade_fee_numerator=10, trade_fee_denominator=100_000) == 50
    # 3 * 2 // 4 = 1
    assert normalized_trade_fee(1_000_000, trade_fee_numerator=3, trade_fee_denominator=100_000) == 10


def test_estimate_mint_amount_balanced_deposit_has_no_fee() -> None:
    est = estimate_mint_amount(
        amp=100,
        trade_fee_numerator=10,
        trade_fee_denominator=100_000,
        lp_total_supply=2_000_000_000,
        reserve_a=1_000_000_000,
        reserve_b=1_000_000_000,
        deposit_a=1_000_000,
        deposit_b=1_000_000,
    )
    assert est.mint_amount == 2_000_000
    assert est.fees == 0


def test_estimate_mint_amount_one_sided_deposit_pays_fee() -> None:
    est = estimate_mint_amount(
        amp=100,
        trade_fee_numerator=10,
        trade_fee_denominator=100_000,
        lp_total_supply=2_000_000_000,
        reserve_a=1_000_000_000,
        reserve_b=1_000_000_000,
        deposit_a=10_000_000,
        deposit_b=0,
    )
    assert 0 < est.mint_amount < est.mint_amount_before_fees <= 10_000_000
    assert est.fees == est.mint_amount_before_fees - est.mint_amount


def test_estimate_mint_amount_zero_deposit() -> None:
    est = estimate_mint_amount(
        amp=100,
        trade_fee_numerator=10,
        trade_fee_denominator=100_000,
        lp_total_supply=1,
        reserve_a=1,
        reserve_b=1,
        deposit_a=0,
        deposit_b=0,
    )
    assert est.mint_amount == 0


def test_invariant_decreased_error_is_a_math_error() -> None:
    assert issubclass(InvariantDecreasedError, MathOverflowError)


def test_estimate_withdraw_one_amount_is_below_proportional_share() -> None:
    est = estimate_withdraw_one_amount(
        amp=100,
        trade_fee_numerator=10,
        trade_fee_denominator=100_000,
        lp_total_supply=2_000_000_000,
        base_reserve=1_000_000_000,
        quote_reserve=1_000_000_000,
        pool_token_amount=10_000_000,
    )
    assert 9_900_000 < est.withdraw_amount_before_fees < 10_000_000
    assert est.swap_fee >= 0


def test_estimate_withdraw_one_amount_rejects_oversized_burn() -> None:
    with pytest.raises(ValueError):
        estimate_withdraw_one_amount(
            amp=100,
            trade_fee_numerator=10,
            trade_fee_denominator=100_000,
            lp_total_supply=10,
            base_reserve=100,
            quote_reserve=100,
            pool_token_amount=11,
        )


def test_out_amount_without_slippage_is_linear_on_balanced_pool() -> None:
    d = compute_d(100, 1_000_000, 1_000_000)
    out = compute_out_amount_without_slippage(
        amp=100,
        source_amount=5_000,
        swap_source_amount=1_000_000,
        swap_destination_amount=1_000_000,
        invariant_d=d,
    )
    assert out == 5_000
