"""
Vault share converter.

Pools do not hold tokens directly: they hold vault LP shares, and each vault
releases newly reported profit linearly over time. Everything here is floor
division unless `round_up` is requested.

    locked_profit(t) = last_updated_locked_profit * (1 - (t - last_report) * degradation / DENOM)
    unlocked(t)      = total_amount - locked_profit(t)
"""

from __future__ import annotations

from dataclasses import dataclass

from ..errors import MathOverflowError
from ..state.amounts import Amount, Timestamp
from .constants import LOCKED_PROFIT_DEGRADATION_DENOMINATOR


def _require_non_negative_int(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")
    if value < 0:
        raise ValueError(f"{name} must be non-negative: {value}")


@dataclass(frozen=True)
class LockedProfitTracker:
    last_updated_locked_profit: int
    last_report: int
    locked_profit_degradation: int

    def __post_init__(self) -> None:
        _require_non_negative_int("last_updated_locked_profit", self.last_updated_locked_profit)
        _require_non_negative_int("last_report", self.last_report)
        _require_non_negative_int("locked_profit_degradation", self.locked_profit_degradation)

    def locked_profit(self, now: Timestamp) -> Amount:
        duration = now - self.last_report
        if duration < 0:
            raise MathOverflowError(f"current time {now} is before last report {self.last_report}")
        ratio = duration * self.locked_profit_degradation
        if ratio > LOCKED_PROFIT_DEGRADATION_DENOMINATOR:
            return 0
        return (
            self.last_updated_locked_profit * (LOCKED_PROFIT_DEGRADATION_DENOMINATOR - ratio)
        ) // LOCKED_PROFIT_DEGRADATION_DENOMINATOR


@dataclass(frozen=True)
class VaultState:
    total_amount: int
    locked_profit_tracker: LockedProfitTracker

    def __post_init__(self) -> None:
        _require_non_negative_int("total_amount", self.total_amount)
        if not isinstance(self.locked_profit_tracker, LockedProfitTracker):
            raise TypeError("locked_profit_tracker must be a LockedProfitTracker")

    def locked_profit(self, now: Timestamp) -> Amount:
        return self.locked_profit_tracker.locked_profit(now)

    def unlocked_amount(self, now: Timestamp) -> Amount:
        """Withdrawable amount at `now`; never exceeds `total_amount`."""
        unlocked = self.total_amount - self.locked_profit(now)
        if unlocked < 0:
            raise MathOverflowError("locked profit exceeds vault total amount")
        return unlocked

    def get_amount_by_share(self, now: Timestamp, share: Amount, total_supply: Amount) -> Amount:
        return get_amount_by_share(share, self.unlocked_amount(now), total_supply)

    def get_unmint_amount(self, now: Timestamp, out_token: Amount, total_supply: Amount) -> Amount:
        """Vault LP that must be burnt to release `out_token`."""
        return get_unmint_amount(out_token, self.unlocked_amount(now), total_supply)


def _div(numerator: int, denominator: int, *, round_up: bool) -> int:
    if denominator == 0:
        raise MathOverflowError("division by zero")
    if round_up:
        return -((-numerator) // denominator)
    return numerator // denominator


def get_amount_by_share(share: int, total_amount: int, total_supply: int, *, round_up: bool = False) -> int:
    """Token amount represented by `share` vault LP."""
    _require_non_negative_int("share", share)
    _require_non_negative_int("total_amount", total_amount)
    _require_non_negative_int("total_supply", total_supply)
    return _div(share * total_amount, total_supply, round_up=round_up)


def get_share_by_amount(amount: int, total_amount: int, total_supply: int, *, round_up: bool = False) -> int:
    """Vault LP share worth `amount` tokens; 0 when the vault holds nothing."""
    _require_non_negative_int("amount", amount)
    _require_non_negative_int("total_amount", total_amount)
    _require_non_negative_int("total_supply", total_supply)
    if total_amount == 0:
        return 0
    return _div(amount * total_supply, total_amount, round_up=round_up)


def get_unmint_amount(out_token: int, unlocked_amount: int, total_supply: int) -> int:
    _require_non_negative_int("out_token", out_token)
    return _div(out_token * total_supply, unlocked_amount, round_up=False)


def compute_actual_deposit_amount(
    deposit_amount: int,
    before_amount: int,
    vault_lp_balance: int,
    vault_lp_supply: int,
    vault_total_amount: int,
) -> int:
    """
    Amount the pool actually gains when `deposit_amount` goes through the vault.

    The vault mints `deposit * supply // total` shares; the pool then reads its
    balance back through the grown supply/total, losing up to a unit to rounding.
    """
    _require_non_negative_int("deposit_amount", deposit_amount)
    if deposit_amount == 0:
        return 0
    if vault_total_amount == 0:
        raise MathOverflowError("vault total amount is zero")

    vault_lp_minted = (deposit_amount * vault_lp_supply) // vault_total_amount
    vault_lp_supply += vault_lp_minted
    vault_total_amount += deposit_amount
    vault_lp_balance += vault_lp_minted

    after_amount = _div(vault_lp_balance * vault_total_amount, vault_lp_supply, round_up=False)
    return after_amount - before_amount
