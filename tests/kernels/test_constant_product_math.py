from __future__ import annotations

import pytest
import hypothesis.strategies as st
from hypothesis import given, settings

from dynamic_amm_quote.errors import AmountTooSmallError
from dynamic_amm_quote.kernels.python.constant_product_math import (
    ceil_div,
    compute_d,
    source_amount_for_destination,
    swap_without_fees,
)


def test_ceil_div_exact_division_keeps_divisor() -> None:
    res = ceil_div(10, 5)
    assert (res.quotient, res.divisor) == (2, 5)


def test_ceil_div_refines_divisor_on_remainder() -> None:
    res = ceil_div(10, 3)
    assert (res.quotient, res.divisor) == (4, 3)


def test_ceil_div_truncation_to_zero_is_rejected() -> None:
    with pytest.raises(AmountTooSmallError):
        ceil_div(1, 2)


@settings(max_examples=300, deadline=None)
@given(a=st.integers(min_value=0, max_value=10**30), b=st.integers(min_value=1, max_value=10**30))
def test_ceil_div_covers_numerator(a: int, b: int) -> None:
    if a // b == 0:
        with pytest.raises(AmountTooSmallError):
            ceil_div(a, b)
        return
    res = ceil_div(a, b)
    assert a <= res.quotient * res.divisor
    assert res.quotient == -(-a // b)


def test_swap_without_fees_rounds_against_the_trader() -> None:
    res = swap_without_fees(source_amount=45, swap_source_amount=10, swap_destination_amount=10)
    # ceil(100 / 55) == 2
    assert res.destination_amount_swapped == 8
    assert res.new_swap_source_amount * res.new_swap_destination_amount >= 100


def test_swap_without_fees_zero_output_is_rejected() -> None:
    with pytest.raises(AmountTooSmallError):
        swap_without_fees(source_amount=1, swap_source_amount=1_000_000, swap_destination_amount=10)


def test_source_amount_for_destination_small_example() -> None:
    assert source_amount_for_destination(destination_amount=8, swap_source_amount=10, swap_destination_amount=10) == 40


def test_source_amount_for_destination_cannot_drain_pool() -> None:
    with pytest.raises(AmountTooSmallError):
        source_amount_for_destination(destination_amount=10, swap_source_amount=10, swap_destination_amount=10)


@settings(max_examples=300, deadline=None)
@given(
    x=st.integers(min_value=1_000, max_value=10**12),
    y=st.integers(min_value=1_000, max_value=10**12),
    data=st.data(),
)
def test_exact_out_input_always_buys_the_output(x: int, y: int, data: st.DataObject) -> None:
    out = data.draw(st.integers(min_value=1, max_value=y - 1))
    amount_in = source_amount_for_destination(destination_amount=out, swap_source_amount=x, swap_destination_amount=y)
    res = swap_without_fees(source_amount=amount_in, swap_source_amount=x, swap_destination_amount=y)
    assert res.destination_amount_swapped >= out


def test_compute_d_is_integer_sqrt() -> None:
    n = (1 << 70) + 12345
    assert compute_d(n, n) == n
    assert compute_d(4_000_000, 9_000_000) == 6_000_000
