"""
Price impact as an exact fraction.

    impact = (spot_out - actual_out) / spot_out

`spot_out` extrapolates the curve's zero-size marginal rate to the full input.
The estimator never raises: a zero spot output or an actual output at or
above it yields 0.
"""

from __future__ import annotations

from fractions import Fraction

from .curve import Curve, TradeDirection, compute_spot_out_amount


def price_impact(spot_out_amount: int, actual_out_amount: int) -> Fraction:
    if spot_out_amount <= 0 or actual_out_amount >= spot_out_amount:
        return Fraction(0)
    return Fraction(spot_out_amount - actual_out_amount, spot_out_amount)


def compute_price_impact(
    curve: Curve,
    *,
    source_amount: int,
    swap_source_amount: int,
    swap_destination_amount: int,
    trade_direction: TradeDirection,
    actual_out_amount: int,
) -> Fraction:
    spot = compute_spot_out_amount(
        curve, source_amount, swap_source_amount, swap_destination_amount, trade_direction
    )
    return price_impact(spot, actual_out_amount)
