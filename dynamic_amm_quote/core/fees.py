"""
Pool trading fees and slippage bounds (integer-only, floor rounding).

Fees are taken from the input before it reaches the curve:
    trade_fee = amount * trade_num // trade_den
    owner_fee = amount * owner_num // owner_den
    net_in    = amount - trade_fee - owner_fee
"""

from __future__ import annotations

from dataclasses import dataclass

from .constants import (
    BPS_DENOMINATOR,
    CONSTANT_PRODUCT_ALLOWED_TRADE_FEE_BPS,
    CONSTANT_PRODUCT_OWNER_TRADE_FEE_NUMERATOR,
    CONSTANT_PRODUCT_TRADE_FEE_NUMERATOR,
    FEE_DENOMINATOR,
    STABLE_SWAP_ALLOWED_TRADE_FEE_BPS,
    STABLE_SWAP_OWNER_TRADE_FEE_NUMERATOR,
    STABLE_SWAP_TRADE_FEE_NUMERATOR,
)


@dataclass(frozen=True)
class PoolFees:
    trade_fee_numerator: int
    trade_fee_denominator: int
    owner_trade_fee_numerator: int
    owner_trade_fee_denominator: int

    def __post_init__(self) -> None:
        for name, v in (
            ("trade_fee_numerator", self.trade_fee_numerator),
            ("trade_fee_denominator", self.trade_fee_denominator),
            ("owner_trade_fee_numerator", self.owner_trade_fee_numerator),
            ("owner_trade_fee_denominator", self.owner_trade_fee_denominator),
        ):
            if not isinstance(v, int) or isinstance(v, bool):
                raise TypeError(f"{name} must be an int")
            if v < 0:
                raise ValueError(f"{name} must be non-negative: {v}")
        for num_name, num, den_name, den in (
            ("trade_fee_numerator", self.trade_fee_numerator, "trade_fee_denominator", self.trade_fee_denominator),
            (
                "owner_trade_fee_numerator",
                self.owner_trade_fee_numerator,
                "owner_trade_fee_denominator",
                self.owner_trade_fee_denominator,
            ),
        ):
            if den <= 0:
                raise ValueError(f"{den_name} must be positive: {den}")
            if num > den:
                raise ValueError(f"{num_name} must not exceed {den_name}: {num} > {den}")

    def trading_fee(self, amount: int) -> int:
        return (amount * self.trade_fee_numerator) // self.trade_fee_denominator

    def owner_trading_fee(self, amount: int) -> int:
        return (amount * self.owner_trade_fee_numerator) // self.owner_trade_fee_denominator


@dataclass(frozen=True)
class FeeBreakdown:
    trade_fee: int
    owner_fee: int
    net_amount: int

    @property
    def total_fee(self) -> int:
        return self.trade_fee + self.owner_fee


def apply_trading_fees(fees: PoolFees, amount: int) -> FeeBreakdown:
    """Split `amount` into trade fee, owner fee and the remainder that reaches the curve."""
    if not isinstance(amount, int) or isinstance(amount, bool):
        raise TypeError("amount must be an int")
    if amount < 0:
        raise ValueError(f"amount must be non-negative: {amount}")
    trade_fee = fees.trading_fee(amount)
    owner_fee = fees.owner_trading_fee(amount)
    return FeeBreakdown(trade_fee=trade_fee, owner_fee=owner_fee, net_amount=amount - trade_fee - owner_fee)


def default_constant_product_fees() -> PoolFees:
    return PoolFees(
        trade_fee_numerator=CONSTANT_PRODUCT_TRADE_FEE_NUMERATOR,
        trade_fee_denominator=FEE_DENOMINATOR,
        owner_trade_fee_numerator=CONSTANT_PRODUCT_OWNER_TRADE_FEE_NUMERATOR,
        owner_trade_fee_denominator=FEE_DENOMINATOR,
    )


def default_stable_swap_fees() -> PoolFees:
    return PoolFees(
        trade_fee_numerator=STABLE_SWAP_TRADE_FEE_NUMERATOR,
        trade_fee_denominator=FEE_DENOMINATOR,
        owner_trade_fee_numerator=STABLE_SWAP_OWNER_TRADE_FEE_NUMERATOR,
        owner_trade_fee_denominator=FEE_DENOMINATOR,
    )


def fees_from_trade_fee_bps(trade_fee_bps: int, *, stable: bool) -> PoolFees:
    """
    Permissionless pool fees for an allowed trade-fee tier.

    The owner fee keeps the curve type default.
    """
    allowed = STABLE_SWAP_ALLOWED_TRADE_FEE_BPS if stable else CONSTANT_PRODUCT_ALLOWED_TRADE_FEE_BPS
    if trade_fee_bps not in allowed:
        raise ValueError(f"trade_fee_bps must be one of {allowed}: {trade_fee_bps}")
    trade_fee_numerator = trade_fee_bps * FEE_DENOMINATOR // BPS_DENOMINATOR
    return PoolFees(
        trade_fee_numerator=trade_fee_numerator,
        trade_fee_denominator=FEE_DENOMINATOR,
        owner_trade_fee_numerator=(
            STABLE_SWAP_OWNER_TRADE_FEE_NUMERATOR if stable else CONSTANT_PRODUCT_OWNER_TRADE_FEE_NUMERATOR
        ),
        owner_trade_fee_denominator=FEE_DENOMINATOR,
    )


def _require_bps(slippage_bps: int) -> None:
    if not isinstance(slippage_bps, int) or isinstance(slippage_bps, bool):
        raise TypeError("slippage_bps must be an int")
    if not (0 <= slippage_bps <= BPS_DENOMINATOR):
        raise ValueError(f"slippage_bps must be in [0, {BPS_DENOMINATOR}]: {slippage_bps}")


def get_min_amount_with_slippage(amount: int, slippage_bps: int) -> int:
    _require_bps(slippage_bps)
    return (amount * (BPS_DENOMINATOR - slippage_bps)) // BPS_DENOMINATOR


def get_max_amount_with_slippage(amount: int, slippage_bps: int) -> int:
    _require_bps(slippage_bps)
    return (amount * (BPS_DENOMINATOR + slippage_bps)) // BPS_DENOMINATOR
