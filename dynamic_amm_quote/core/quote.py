"""
Quote calculator: curve + vault share conversion + fees.

Every entry point takes a `PoolSnapshot`, refreshes the stable curve's depeg
cache against `snapshot.current_time`, and returns a frozen quote. Nothing
here performs I/O or mutates the snapshot.

Swap order of operations (matches the program):
1. trade fee and owner fee are taken from the raw input (floor);
2. the net input is deposited into the source vault and read back through the
   pool's vault LP (precision loss);
3. the curve prices the vault-adjusted input against the pool's token amounts;
4. the output is withdrawn from the destination vault and read back.
"""

from __future__ import annotations

from dataclasses import dataclass
from fractions import Fraction
from typing import Optional

from ..errors import AmountTooSmallError, InsufficientLiquidityError, PoolDisabledError
from ..state.amounts import checked_u64
from .constants import (
    BALANCED_DEPOSIT_BUFFER_DENOMINATOR,
    BALANCED_DEPOSIT_BUFFER_NUMERATOR,
    VIRTUAL_PRICE_PRECISION,
)
from .curve import StableSwapCurve, TradeDirection
from .fees import apply_trading_fees, get_max_amount_with_slippage, get_min_amount_with_slippage
from .price_impact import compute_price_impact
from .snapshot import PoolSnapshot
from .vault import compute_actual_deposit_amount, get_amount_by_share, get_share_by_amount, get_unmint_amount


@dataclass(frozen=True)
class SwapQuote:
    swap_in_amount: int
    swap_out_amount: int
    min_swap_out_amount: int
    fee: int
    price_impact: Fraction


@dataclass(frozen=True)
class DepositQuote:
    pool_token_amount_out: int
    min_pool_token_amount_out: int
    token_a_in_amount: int
    token_b_in_amount: int


@dataclass(frozen=True)
class WithdrawQuote:
    pool_token_amount_in: int
    token_a_out_amount: int
    token_b_out_amount: int
    min_token_a_out_amount: int
    min_token_b_out_amount: int


@dataclass(frozen=True)
class PoolInfo:
    token_a_amount: int
    token_b_amount: int
    virtual_price: Fraction
    virtual_price_raw: int


@dataclass(frozen=True)
class _Side:
    """One side of the pool as seen from the vault it lives in."""

    pool_amount: int
    pool_vault_lp: int
    vault_lp_supply: int
    withdrawable: int
    reserve: int


def _side_a(snapshot: PoolSnapshot) -> _Side:
    return _Side(
        pool_amount=snapshot.token_a_amount(),
        pool_vault_lp=snapshot.pool_vault_a_lp,
        vault_lp_supply=snapshot.vault_a_lp_supply,
        withdrawable=snapshot.vault_a_withdrawable(),
        reserve=snapshot.vault_a_reserve,
    )


def _side_b(snapshot: PoolSnapshot) -> _Side:
    return _Side(
        pool_amount=snapshot.token_b_amount(),
        pool_vault_lp=snapshot.pool_vault_b_lp,
        vault_lp_supply=snapshot.vault_b_lp_supply,
        withdrawable=snapshot.vault_b_withdrawable(),
        reserve=snapshot.vault_b_reserve,
    )


def _max_out(side: _Side) -> int:
    return min(side.pool_amount, side.reserve)


def compute_pool_info(snapshot: PoolSnapshot) -> PoolInfo:
    """Token amounts held by the pool and its virtual price (D per LP token)."""
    snapshot = snapshot.with_fresh_curve()
    token_a_amount = snapshot.token_a_amount()
    token_b_amount = snapshot.token_b_amount()
    d = snapshot.curve.compute_d(token_a_amount, token_b_amount)
    if snapshot.pool_lp_supply == 0:
        return PoolInfo(token_a_amount, token_b_amount, Fraction(0), 0)
    scaled = (d * VIRTUAL_PRICE_PRECISION) // snapshot.pool_lp_supply
    return PoolInfo(
        token_a_amount=token_a_amount,
        token_b_amount=token_b_amount,
        virtual_price=Fraction(scaled, VIRTUAL_PRICE_PRECISION),
        virtual_price_raw=(d << 64) // snapshot.pool_lp_supply,
    )


def get_max_swap_out_amount(snapshot: PoolSnapshot, out_mint: str) -> int:
    """Largest output payable in `out_mint`: the pool's share capped by the vault's idle reserve."""
    direction = snapshot.direction_for_input(out_mint)
    side = _side_a(snapshot) if direction is TradeDirection.A_TO_B else _side_b(snapshot)
    return _max_out(side)


def get_max_swap_in_amount(snapshot: PoolSnapshot, in_mint: str) -> int:
    """
    Estimate of the largest input in `in_mint` the pool can absorb.

    Prices the maximum output of the other token back through the curve, then
    removes fees from the result.
    """
    snapshot = snapshot.with_fresh_curve()
    direction = snapshot.direction_for_input(in_mint)
    a, b = _side_a(snapshot), _side_b(snapshot)
    source, destination = (a, b) if direction is TradeDirection.A_TO_B else (b, a)

    max_out = _max_out(destination)
    if max_out == destination.pool_amount:
        max_out -= 1
    if max_out <= 0:
        return 0

    max_in = snapshot.curve.compute_in_amount(max_out, source.pool_amount, destination.pool_amount, direction)
    fees = apply_trading_fees(snapshot.fees, max_in)
    return fees.net_amount


def get_swap_quote(snapshot: PoolSnapshot, in_mint: str, in_amount: int, slippage_bps: int) -> SwapQuote:
    if not snapshot.enabled:
        raise PoolDisabledError("pool is disabled")
    if not snapshot.is_activated():
        raise PoolDisabledError(
            f"swap is disabled until {snapshot.activation_type.value} {snapshot.activation_point}"
            f" (now {snapshot.current_point()})"
        )
    direction = snapshot.direction_for_input(in_mint)
    if in_amount <= 0:
        raise AmountTooSmallError(f"in_amount must be positive: {in_amount}")
    snapshot = snapshot.with_fresh_curve()

    a, b = _side_a(snapshot), _side_b(snapshot)
    source, destination = (a, b) if direction is TradeDirection.A_TO_B else (b, a)

    fees = apply_trading_fees(snapshot.fees, in_amount)
    actual_in = compute_actual_deposit_amount(
        fees.net_amount,
        source.pool_amount,
        source.pool_vault_lp,
        source.vault_lp_supply,
        source.withdrawable,
    )
    if actual_in <= 0:
        raise AmountTooSmallError("input is lost to vault rounding")

    out_amount = snapshot.curve.compute_out_amount(
        actual_in, source.pool_amount, destination.pool_amount, direction
    )
    impact = compute_price_impact(
        snapshot.curve,
        source_amount=actual_in,
        swap_source_amount=source.pool_amount,
        swap_destination_amount=destination.pool_amount,
        trade_direction=direction,
        actual_out_amount=out_amount,
    )

    destination_vault_lp = get_unmint_amount(out_amount, destination.withdrawable, destination.vault_lp_supply)
    actual_out = get_amount_by_share(destination_vault_lp, destination.withdrawable, destination.vault_lp_supply)
    if actual_out <= 0:
        raise AmountTooSmallError("output is lost to vault rounding")

    max_out = _max_out(destination)
    if actual_out >= max_out:
        raise InsufficientLiquidityError(f"out amount {actual_out} exceeds available {max_out}")

    return SwapQuote(
        swap_in_amount=in_amount,
        swap_out_amount=actual_out,
        min_swap_out_amount=get_min_amount_with_slippage(actual_out, slippage_bps),
        fee=fees.total_fee,
        price_impact=impact,
    )


def _buffered(amount: int) -> int:
    return (amount * BALANCED_DEPOSIT_BUFFER_NUMERATOR) // BALANCED_DEPOSIT_BUFFER_DENOMINATOR


def get_deposit_quote(
    snapshot: PoolSnapshot,
    token_a_in_amount: int,
    token_b_in_amount: int,
    balanced: bool,
    slippage_bps: int,
) -> DepositQuote:
    """
    Pool LP minted for a deposit.

    - bootstrap (no pool LP yet): LP out is the curve invariant of the inputs;
    - single-side balanced (one input zero, `balanced`): LP out is the share the
      non-zero side represents, buffered to 99.8%, and the other side's input
      is derived from it;
    - otherwise an imbalance deposit priced on vault-adjusted amounts.
    """
    if token_a_in_amount < 0 or token_b_in_amount < 0:
        raise ValueError("deposit amounts must be non-negative")
    if token_a_in_amount == 0 and token_b_in_amount == 0:
        raise ValueError("at least one deposit amount must be positive")
    if balanced and token_a_in_amount > 0 and token_b_in_amount > 0:
        raise ValueError("balanced deposit requires exactly one non-zero input")
    snapshot = snapshot.with_fresh_curve()
    curve = snapshot.curve

    if snapshot.pool_lp_supply == 0:
        pool_token_out = checked_u64(curve.compute_d(token_a_in_amount, token_b_in_amount), what="pool token amount")
        return DepositQuote(
            pool_token_amount_out=pool_token_out,
            min_pool_token_amount_out=get_min_amount_with_slippage(pool_token_out, slippage_bps),
            token_a_in_amount=token_a_in_amount,
            token_b_in_amount=token_b_in_amount,
        )

    a, b = _side_a(snapshot), _side_b(snapshot)

    if balanced:
        if token_a_in_amount > 0:
            pool_token_out = get_share_by_amount(token_a_in_amount, a.pool_amount, snapshot.pool_lp_supply)
        else:
            pool_token_out = get_share_by_amount(token_b_in_amount, b.pool_amount, snapshot.pool_lp_supply)
        if pool_token_out == 0:
            raise AmountTooSmallError("deposit is too small to mint pool LP")

        if isinstance(curve, StableSwapCurve):
            if token_a_in_amount > 0:
                token_b_in_amount = (token_a_in_amount * b.pool_amount) // a.pool_amount
            else:
                token_a_in_amount = (token_b_in_amount * a.pool_amount) // b.pool_amount
            pool_token_out = _buffered(pool_token_out)
            return DepositQuote(
                pool_token_amount_out=pool_token_out,
                min_pool_token_amount_out=get_min_amount_with_slippage(pool_token_out, slippage_bps),
                token_a_in_amount=token_a_in_amount,
                token_b_in_amount=token_b_in_amount,
            )

        actual_a = _actual_in_for_pool_tokens(snapshot, a, pool_token_out)
        actual_b = _actual_in_for_pool_tokens(snapshot, b, pool_token_out)
        buffered = _buffered(pool_token_out)
        return DepositQuote(
            pool_token_amount_out=buffered,
            min_pool_token_amount_out=buffered,
            token_a_in_amount=get_max_amount_with_slippage(actual_a, slippage_bps),
            token_b_in_amount=get_max_amount_with_slippage(actual_b, slippage_bps),
        )

    pool_token_out = _imbalance_mint(snapshot, a, b, token_a_in_amount, token_b_in_amount)
    return DepositQuote(
        pool_token_amount_out=pool_token_out,
        min_pool_token_amount_out=get_min_amount_with_slippage(pool_token_out, slippage_bps),
        token_a_in_amount=token_a_in_amount,
        token_b_in_amount=token_b_in_amount,
    )


def _actual_in_for_pool_tokens(snapshot: PoolSnapshot, side: _Side, pool_token_amount: int) -> int:
    """Tokens one side must supply so the pool's vault LP grows by its share of `pool_token_amount`."""
    vault_lp_minted = get_share_by_amount(
        pool_token_amount, snapshot.pool_lp_supply, side.pool_vault_lp, round_up=True
    )
    return get_amount_by_share(vault_lp_minted, side.withdrawable, side.vault_lp_supply, round_up=True)


def _imbalance_mint(snapshot: PoolSnapshot, a: _Side, b: _Side, deposit_a: int, deposit_b: int) -> int:
    actual_a = compute_actual_deposit_amount(
        deposit_a, a.pool_amount, a.pool_vault_lp, a.vault_lp_supply, a.withdrawable
    )
    actual_b = compute_actual_deposit_amount(
        deposit_b, b.pool_amount, b.pool_vault_lp, b.vault_lp_supply, b.withdrawable
    )
    return snapshot.curve.compute_imbalance_deposit(
        actual_a,
        actual_b,
        a.pool_amount,
        b.pool_amount,
        snapshot.pool_lp_supply,
        snapshot.fees,
    )


def get_withdraw_quote(
    snapshot: PoolSnapshot,
    lp_amount: int,
    slippage_bps: int,
    token_mint: Optional[str] = None,
) -> WithdrawQuote:
    """
    Tokens released for burning `lp_amount` pool LP.

    Without `token_mint` the withdrawal is balanced; with it, everything is taken
    in that token (stable pools only).
    """
    if lp_amount <= 0:
        raise ValueError(f"lp_amount must be positive: {lp_amount}")
    if lp_amount > snapshot.pool_lp_supply:
        raise ValueError(f"lp_amount {lp_amount} exceeds pool LP supply {snapshot.pool_lp_supply}")
    snapshot = snapshot.with_fresh_curve()
    a, b = _side_a(snapshot), _side_b(snapshot)

    if token_mint is None:
        outs = []
        for side in (a, b):
            vault_lp_burn = get_share_by_amount(lp_amount, snapshot.pool_lp_supply, side.pool_vault_lp)
            outs.append(get_amount_by_share(vault_lp_burn, side.withdrawable, side.vault_lp_supply))
        token_a_out, token_b_out = outs
        return WithdrawQuote(
            pool_token_amount_in=lp_amount,
            token_a_out_amount=token_a_out,
            token_b_out_amount=token_b_out,
            min_token_a_out_amount=get_min_amount_with_slippage(token_a_out, slippage_bps),
            min_token_b_out_amount=get_min_amount_with_slippage(token_b_out, slippage_bps),
        )

    withdrawing_a = snapshot.direction_for_input(token_mint) is TradeDirection.A_TO_B
    direction = TradeDirection.B_TO_A if withdrawing_a else TradeDirection.A_TO_B
    out_amount = snapshot.curve.compute_withdraw_one(
        lp_amount,
        snapshot.pool_lp_supply,
        a.pool_amount,
        b.pool_amount,
        snapshot.fees,
        direction,
    )
    side = a if withdrawing_a else b
    vault_lp_burn = get_unmint_amount(out_amount, side.withdrawable, side.vault_lp_supply)
    real_out = get_amount_by_share(vault_lp_burn, side.withdrawable, side.vault_lp_supply)
    min_out = get_min_amount_with_slippage(real_out, slippage_bps)
    return WithdrawQuote(
        pool_token_amount_in=lp_amount,
        token_a_out_amount=real_out if withdrawing_a else 0,
        token_b_out_amount=0 if withdrawing_a else real_out,
        min_token_a_out_amount=min_out if withdrawing_a else 0,
        min_token_b_out_amount=0 if withdrawing_a else min_out,
    )
