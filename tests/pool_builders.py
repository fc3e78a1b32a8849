"""Snapshot builders shared by the core and integration tests."""

from __future__ import annotations

from typing import Mapping, Optional

from dynamic_amm_quote.core.curve import ConstantProductCurve, Curve, StableSwapCurve, TokenMultiplier
from dynamic_amm_quote.core.depeg import DepegState, DepegType, no_depeg
from dynamic_amm_quote.core.fees import PoolFees, default_constant_product_fees
from dynamic_amm_quote.core.snapshot import PoolSnapshot
from dynamic_amm_quote.core.vault import LockedProfitTracker, VaultState

MINT_A = "mintA111"
MINT_B = "mintB222"


def no_fees() -> PoolFees:
    return PoolFees(
        trade_fee_numerator=0,
        trade_fee_denominator=100_000,
        owner_trade_fee_numerator=0,
        owner_trade_fee_denominator=100_000,
    )


def plain_vault(total: int) -> VaultState:
    return VaultState(
        total_amount=total,
        locked_profit_tracker=LockedProfitTracker(
            last_updated_locked_profit=0, last_report=0, locked_profit_degradation=0
        ),
    )


def stable_curve(amp: int = 100, depeg: Optional[DepegState] = None) -> StableSwapCurve:
    return StableSwapCurve(
        amp=amp,
        token_multiplier=TokenMultiplier(token_a_multiplier=1, token_b_multiplier=1, precision_factor=6),
        depeg=depeg if depeg is not None else no_depeg(),
    )


def snapshot(
    reserve_a: int,
    reserve_b: int,
    *,
    curve: Optional[Curve] = None,
    fees: Optional[PoolFees] = None,
    pool_lp_supply: Optional[int] = None,
    enabled: bool = True,
    vault_a_reserve: Optional[int] = None,
    vault_b_reserve: Optional[int] = None,
    current_time: int = 1_700_000_000,
    depeg_sources: Optional[Mapping[DepegType, bytes]] = None,
) -> PoolSnapshot:
    """
    Pool that owns every vault LP of two 1:1 vaults (one vault LP per token).

    With that layout the pool's token amounts equal `reserve_a` / `reserve_b`
    and vault deposit/withdraw read-backs are lossless.
    """
    return PoolSnapshot(
        token_a_mint=MINT_A,
        token_b_mint=MINT_B,
        curve=curve if curve is not None else ConstantProductCurve(),
        fees=fees if fees is not None else default_constant_product_fees(),
        enabled=enabled,
        vault_a=plain_vault(reserve_a),
        vault_b=plain_vault(reserve_b),
        pool_vault_a_lp=reserve_a,
        pool_vault_b_lp=reserve_b,
        vault_a_lp_supply=reserve_a,
        vault_b_lp_supply=reserve_b,
        vault_a_reserve=reserve_a if vault_a_reserve is None else vault_a_reserve,
        vault_b_reserve=reserve_b if vault_b_reserve is None else vault_b_reserve,
        pool_lp_supply=reserve_a if pool_lp_supply is None else pool_lp_supply,
        current_time=current_time,
        depeg_sources=dict(depeg_sources or {}),
    )


def marinade_state(msol_price: int, *, size: int = 600) -> bytes:
    data = bytearray(size)
    data[512:520] = msol_price.to_bytes(8, "little")
    return bytes(data)


def lido_state(st_sol_supply: int, sol_balance: int, *, size: int = 128) -> bytes:
    data = bytearray(size)
    data[73:81] = st_sol_supply.to_bytes(8, "little")
    data[81:89] = sol_balance.to_bytes(8, "little")
    return bytes(data)


def pool_document(reserve_a: int = 1_000_000_000, reserve_b: int = 1_000_000_000, **overrides) -> dict:
    """Snapshot document in the on-disk format read by `load_snapshot`."""
    doc = {
        "token_a_mint": MINT_A,
        "token_b_mint": MINT_B,
        "current_time": 1_700_000_000,
        "pool_lp_supply": reserve_a,
        "curve": {"type": "constant_product"},
        "vault_a": {"total_amount": reserve_a, "lp_supply": reserve_a, "reserve": reserve_a, "pool_lp": reserve_a},
        "vault_b": {"total_amount": reserve_b, "lp_supply": reserve_b, "reserve": reserve_b, "pool_lp": reserve_b},
    }
    doc.update(overrides)
    return doc
