"""
Stable-swap invariant kernel (two-coin, curve.fi style).

Semantics follow the on-chain saber/meteora stable-swap math:
- Newton iteration capped at `MAX_ITERS`, stopping once successive iterates
  differ by at most 1.
- All divisions floor (operands are non-negative).
- Hitting the cap is *not* an error: the last iterate is returned so quotes
  stay bit-identical with the program. A warning is emitted instead.

Inputs are expected to be already upscaled (token multiplier / depeg price);
the curve layer owns scaling.
"""

from __future__ import annotations

import warnings
from dataclasses import dataclass

from ...errors import InvariantConvergenceNotReached, InvariantDecreasedError, MathOverflowError


N_COINS = 2
MAX_ITERS = 20


def _require_int(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")


def _require_non_negative(name: str, value: int) -> None:
    _require_int(name, value)
    if value < 0:
        raise ValueError(f"{name} must be non-negative")


def compute_d(amp: int, amount_a: int, amount_b: int) -> int:
    """
    Compute the stable-swap invariant D for balances (a, b).

        Ann = amp * n
        S = a + b
        dP = D^3 / (n^n * a * b)          (two floor steps)
        D' = D * (Ann*S + dP*n) / (D*(Ann-1) + dP*(n+1))
    """
    _require_non_negative("amp", amp)
    _require_non_negative("amount_a", amount_a)
    _require_non_negative("amount_b", amount_b)
    if amp == 0:
        raise ValueError("amp must be positive")

    ann = amp * N_COINS
    s = amount_a + amount_b
    if s == 0:
        return 0
    if amount_a == 0 or amount_b == 0:
        raise MathOverflowError("compute_d requires both balances to be positive")

    d_prev = 0
    d = s
    iterations = 0
    while abs(d - d_prev) > 1 and iterations < MAX_ITERS:
        d_prev = d
        d_p = d
        d_p = (d_p * d) // (amount_a * N_COINS)
        d_p = (d_p * d) // (amount_b * N_COINS)

        numerator = d * (ann * s + d_p * N_COINS)
        denominator = d * (ann - 1) + d_p * (N_COINS + 1)
        d = numerator // denominator
        iterations += 1

    if abs(d - d_prev) > 1:
        warnings.warn(
            InvariantConvergenceNotReached(f"compute_d did not converge in {MAX_ITERS} iterations"),
            stacklevel=2,
        )
    return d


def compute_y(amp: int, x: int, d: int) -> int:
    """
    Compute the balance y paired with x on the curve of invariant D.

        b = x + D/Ann - D
        c = D^3 / (n^2 * x * Ann)
        y' = (y^2 + c) / (n*y + b)
    """
    _require_non_negative("amp", amp)
    _require_non_negative("x", x)
    _require_non_negative("d", d)
    if amp == 0:
        raise ValueError("amp must be positive")
    if x == 0:
        raise MathOverflowError("compute_y requires a positive x")

    ann = amp * N_COINS
    b = x + d // ann - d
    c = (d * d * d) // (N_COINS * (N_COINS * (x * ann)))

    y_prev = 0
    y = d
    iterations = 0
    while iterations < MAX_ITERS and abs(y - y_prev) > 1:
        y_prev = y
        denominator = N_COINS * y + b
        if denominator <= 0:
            raise MathOverflowError("compute_y denominator is non-positive")
        y = (y * y + c) // denominator
        iterations += 1

    if abs(y - y_prev) > 1:
        warnings.warn(
            InvariantConvergenceNotReached(f"compute_y did not converge in {MAX_ITERS} iterations"),
            stacklevel=2,
        )
    return y


def normalized_trade_fee(amount: int, *, trade_fee_numerator: int, trade_fee_denominator: int) -> int:
    """
    Trade fee charged on imbalance for symmetric/asymmetric deposits and withdraws.

    The numerator is adjusted by n / (4 * (n - 1)) first (floor), then applied
    to `amount` (floor), matching the program's two-step integer rounding.
    """
    _require_non_negative("amount", amount)
    if trade_fee_denominator <= 0:
        raise ValueError("trade_fee_denominator must be positive")
    adjusted_numerator = (trade_fee_numerator * N_COINS) // ((N_COINS - 1) * 4)
    return (amount * adjusted_numerator) // trade_fee_denominator


@dataclass(frozen=True)
class MintEstimate:
    mint_amount: int
    mint_amount_before_fees: int
    fees: int


@dataclass(frozen=True)
class WithdrawOneEstimate:
    withdraw_amount_before_fees: int
    swap_fee: int


def estimate_mint_amount(
    *,
    amp: int,
    trade_fee_numerator: int,
    trade_fee_denominator: int,
    lp_total_supply: int,
    reserve_a: int,
    reserve_b: int,
    deposit_a: int,
    deposit_b: int,
) -> MintEstimate:
    """
    Pool tokens minted for an (imbalanced) deposit.

    d0 = D(reserves), d1 = D(reserves + deposit). Each new balance is charged a
    normalized trade fee on its distance from the ideal (d1/d0-scaled) balance,
    giving d2. Minted = supply * (d2 - d0) / d0.
    """
    for name, v in (
        ("lp_total_supply", lp_total_supply),
        ("reserve_a", reserve_a),
        ("reserve_b", reserve_b),
        ("deposit_a", deposit_a),
        ("deposit_b", deposit_b),
    ):
        _require_non_negative(name, v)

    if deposit_a == 0 and deposit_b == 0:
        return MintEstimate(mint_amount=0, mint_amount_before_fees=0, fees=0)

    d0 = compute_d(amp, reserve_a, reserve_b)
    if d0 == 0:
        raise MathOverflowError("cannot estimate mint against an empty pool")
    new_balances = (reserve_a + deposit_a, reserve_b + deposit_b)
    d1 = compute_d(amp, new_balances[0], new_balances[1])
    if d1 < d0:
        raise InvariantDecreasedError("new D cannot be less than previous D")

    adjusted = []
    for old_balance, new_balance in zip((reserve_a, reserve_b), new_balances):
        ideal_balance = (d1 * old_balance) // d0
        difference = abs(ideal_balance - new_balance)
        fee = normalized_trade_fee(
            difference,
            trade_fee_numerator=trade_fee_numerator,
            trade_fee_denominator=trade_fee_denominator,
        )
        adjusted.append(new_balance - fee)
    d2 = compute_d(amp, adjusted[0], adjusted[1])

    mint_amount = (lp_total_supply * (d2 - d0)) // d0
    mint_amount_before_fees = (lp_total_supply * (d1 - d0)) // d0
    return MintEstimate(
        mint_amount=mint_amount,
        mint_amount_before_fees=mint_amount_before_fees,
        fees=mint_amount_before_fees - mint_amount,
    )


def estimate_withdraw_one_amount(
    *,
    amp: int,
    trade_fee_numerator: int,
    trade_fee_denominator: int,
    lp_total_supply: int,
    base_reserve: int,
    quote_reserve: int,
    pool_token_amount: int,
) -> WithdrawOneEstimate:
    """
    Amount of the base token released by burning `pool_token_amount`, all in base.

    `base_reserve` is the side being withdrawn. The returned amount already
    reflects the imbalance trade fee but not any withdraw fee.
    """
    for name, v in (
        ("lp_total_supply", lp_total_supply),
        ("base_reserve", base_reserve),
        ("quote_reserve", quote_reserve),
        ("pool_token_amount", pool_token_amount),
    ):
        _require_non_negative(name, v)

    if pool_token_amount == 0:
        return WithdrawOneEstimate(withdraw_amount_before_fees=0, swap_fee=0)
    if lp_total_supply == 0 or pool_token_amount > lp_total_supply:
        raise ValueError("pool_token_amount must be within lp_total_supply")

    d_0 = compute_d(amp, base_reserve, quote_reserve)
    d_1 = d_0 - (pool_token_amount * d_0) // lp_total_supply

    new_y = compute_y(amp, quote_reserve, d_1)

    expected_base_amount = (base_reserve * d_1) // d_0 - new_y
    expected_quote_amount = quote_reserve - (quote_reserve * d_1) // d_0
    if expected_base_amount < 0 or expected_quote_amount < 0:
        raise MathOverflowError("withdraw-one produced a negative expected amount")

    fee_kwargs = dict(trade_fee_numerator=trade_fee_numerator, trade_fee_denominator=trade_fee_denominator)
    new_base_amount = base_reserve - normalized_trade_fee(expected_base_amount, **fee_kwargs)
    new_quote_amount = quote_reserve - normalized_trade_fee(expected_quote_amount, **fee_kwargs)

    dy = new_base_amount - compute_y(amp, new_quote_amount, d_1)
    dy_0 = base_reserve - new_y
    if dy < 0:
        raise MathOverflowError("withdraw-one amount is negative")

    return WithdrawOneEstimate(withdraw_amount_before_fees=dy, swap_fee=dy_0 - dy)


def compute_out_amount_without_slippage(
    *,
    amp: int,
    source_amount: int,
    swap_source_amount: int,
    swap_destination_amount: int,
    invariant_d: int,
) -> int:
    """
    Output at the zero-size marginal rate of the curve (no slippage).

    Derived from dy/dx of the two-coin invariant at the current balances.
    Returns 0 when the marginal rate is undefined so callers never divide by it.
    """
    a = amp * 16
    b = a
    c = invariant_d * 4 - invariant_d * amp * 16

    numerator = (2 * a * swap_source_amount + b * swap_destination_amount + c) * swap_destination_amount
    denominator = (a * swap_source_amount + 2 * b * swap_destination_amount + c) * swap_source_amount
    if denominator <= 0 or numerator <= 0:
        return 0
    return (source_amount * numerator) // denominator
