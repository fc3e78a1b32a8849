from __future__ import annotations

from dataclasses import replace

import pytest

from dynamic_amm_quote.core.curve import TradeDirection
from dynamic_amm_quote.core.depeg import DepegState, DepegType
from dynamic_amm_quote.core.snapshot import ActivationType
from dynamic_amm_quote.core.vault import LockedProfitTracker, VaultState
from dynamic_amm_quote.errors import InvalidMintError, UnsupportedOperationError
from tests.pool_builders import MINT_A, MINT_B, marinade_state, snapshot, stable_curve


def test_direction_for_input() -> None:
    snap = snapshot(1_000, 1_000)
    assert snap.direction_for_input(MINT_A) is TradeDirection.A_TO_B
    assert snap.direction_for_input(MINT_B) is TradeDirection.B_TO_A
    with pytest.raises(InvalidMintError):
        snap.direction_for_input("unknown")


def test_snapshot_rejects_identical_or_empty_mints() -> None:
    snap = snapshot(1_000, 1_000)
    with pytest.raises(ValueError, match="differ"):
        replace(snap, token_b_mint=MINT_A)
    with pytest.raises(ValueError, match="non-empty"):
        replace(snap, token_a_mint="")


def test_snapshot_rejects_pool_lp_above_vault_supply() -> None:
    snap = snapshot(1_000, 1_000)
    with pytest.raises(ValueError, match="pool_vault_a_lp"):
        replace(snap, pool_vault_a_lp=1_001)


def test_snapshot_checks_u64_fields() -> None:
    snap = snapshot(1_000, 1_000)
    with pytest.raises(TypeError):
        replace(snap, pool_lp_supply=True)
    with pytest.raises(ValueError, match="u64"):
        replace(snap, current_time=1 << 64)


def test_snapshot_rejects_unknown_curve() -> None:
    with pytest.raises(UnsupportedOperationError):
        replace(snapshot(1_000, 1_000), curve="constant_product")


def test_token_amount_is_pool_share_of_unlocked_vault() -> None:
    # Vault holds 1_000 tokens behind 500 LP; the pool owns 250 LP, so half.
    vault = VaultState(
        total_amount=1_000,
        locked_profit_tracker=LockedProfitTracker(
            last_updated_locked_profit=200, last_report=0, locked_profit_degradation=0
        ),
    )
    snap = replace(
        snapshot(1_000, 1_000, current_time=10),
        vault_a=vault,
        pool_vault_a_lp=250,
        vault_a_lp_supply=500,
    )
    # 200 of the 1_000 is still locked.
    assert snap.vault_a_withdrawable() == 800
    assert snap.token_a_amount() == 400
    assert snap.token_b_amount() == 1_000


def test_with_fresh_curve_passes_through_constant_product() -> None:
    snap = snapshot(1_000, 1_000)
    assert snap.depeg_source() is None
    assert snap.with_fresh_curve() is snap


def test_with_fresh_curve_refreshes_stale_depeg() -> None:
    depeg = DepegState(base_virtual_price=1_000_000, base_cache_updated=0, depeg_type=DepegType.MARINADE)
    source = marinade_state(3 << 31)
    snap = snapshot(
        1_000,
        1_000,
        curve=stable_curve(depeg=depeg),
        current_time=5_000,
        depeg_sources={DepegType.MARINADE: source, DepegType.LIDO: b"\x00"},
    )
    assert snap.depeg_source() == source

    fresh = snap.with_fresh_curve()
    assert fresh is not snap
    assert fresh.curve.depeg.base_virtual_price == 1_500_000
    assert fresh.curve.depeg.base_cache_updated == 5_000
    assert fresh.with_fresh_curve() is fresh


def test_current_point_follows_activation_type() -> None:
    snap = replace(snapshot(1_000, 1_000, current_time=1_000), current_slot=77, activation_point=500)
    assert snap.activation_type is ActivationType.TIMESTAMP
    assert snap.current_point() == 1_000
    assert snap.is_activated()

    by_slot = replace(snap, activation_type=ActivationType.SLOT)
    assert by_slot.current_point() == 77
    assert not by_slot.is_activated()


def test_activation_fields_are_validated() -> None:
    snap = snapshot(1_000, 1_000)
    with pytest.raises(TypeError, match="activation_type"):
        replace(snap, activation_type="slot")
    with pytest.raises(ValueError, match="activation_point"):
        replace(snap, activation_point=-1)
    with pytest.raises(ValueError, match="unknown activation type"):
        ActivationType.parse("epoch")
