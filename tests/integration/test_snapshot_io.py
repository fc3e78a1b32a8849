from __future__ import annotations

import logging
from pathlib import Path

import pytest
import yaml

from dynamic_amm_quote.core.curve import ConstantProductCurve, StableSwapCurve, TokenMultiplier
from dynamic_amm_quote.core.depeg import DepegType
from dynamic_amm_quote.core.fees import default_constant_product_fees, default_stable_swap_fees
from dynamic_amm_quote.core.snapshot import ActivationType
from dynamic_amm_quote.integration.snapshot_io import load_snapshot, snapshot_from_dict
from tests.pool_builders import MINT_A, marinade_state, pool_document


def test_constant_product_document_uses_default_fees() -> None:
    snap = snapshot_from_dict(pool_document())
    assert isinstance(snap.curve, ConstantProductCurve)
    assert snap.fees == default_constant_product_fees()
    assert snap.enabled is True
    assert snap.token_a_amount() == 1_000_000_000
    assert snap.vault_a.locked_profit_tracker.locked_profit_degradation == 0


def test_stable_document_with_decimals_and_depeg() -> None:
    doc = pool_document(
        curve={
            "type": "stable_swap",
            "amp": 200,
            "decimals": [6, 9],
            "depeg": {"depeg_type": "marinade", "base_virtual_price": 1_050_000, "base_cache_updated": 7},
        },
        depeg_sources={"marinade": "0x" + marinade_state(1 << 32).hex()},
    )
    snap = snapshot_from_dict(doc)
    assert isinstance(snap.curve, StableSwapCurve)
    assert snap.curve.amp == 200
    assert snap.curve.token_multiplier == TokenMultiplier(1_000, 1, 9)
    assert snap.curve.depeg.depeg_type is DepegType.MARINADE
    assert snap.curve.depeg.base_virtual_price == 1_050_000
    assert snap.fees == default_stable_swap_fees()
    assert snap.depeg_source() == marinade_state(1 << 32)


def test_explicit_token_multiplier_and_fees() -> None:
    doc = pool_document(
        curve={
            "type": "stable_swap",
            "amp": 50,
            "token_multiplier": {"token_a_multiplier": 1, "token_b_multiplier": 1, "precision_factor": 6},
        },
        fees={
            "trade_fee_numerator": 4,
            "trade_fee_denominator": 10_000,
            "owner_trade_fee_numerator": 1,
            "owner_trade_fee_denominator": 10_000,
        },
    )
    snap = snapshot_from_dict(doc)
    assert snap.curve.token_multiplier.precision_factor == 6
    assert snap.fees.trade_fee_numerator == 4


def test_locked_profit_tracker_is_read() -> None:
    doc = pool_document()
    doc["vault_a"] = dict(
        doc["vault_a"],
        locked_profit_tracker={"last_updated_locked_profit": 100, "last_report": 1_700_000_000, "locked_profit_degradation": 0},
    )
    snap = snapshot_from_dict(doc)
    assert snap.vault_a_withdrawable() == 1_000_000_000 - 100


@pytest.mark.parametrize(
    "overrides,exc,match",
    [
        ({"curve": {"type": "curve_of_the_week"}}, ValueError, "unsupported curve"),
        ({"curve": {"type": "stable_swap", "amp": 10}}, ValueError, "decimals"),
        ({"pool_lp_supply": "10"}, TypeError, "pool_lp_supply"),
        ({"current_time": -1}, ValueError, "current_time"),
        ({"enabled": "yes"}, TypeError, "enabled"),
        ({"depeg_sources": {"lido": "zz"}}, ValueError, "hex"),
        ({"depeg_sources": {"spl_stake": 12}}, TypeError, "hex string"),
        ({"vault_b": None}, TypeError, "vault_b"),
        ({"token_b_mint": MINT_A}, ValueError, "differ"),
        ({"activation_type": "epoch"}, ValueError, "activation type"),
        ({"activation_point": 1.5}, TypeError, "activation_point"),
    ],
)
def test_bad_documents_are_rejected(overrides: dict, exc: type, match: str) -> None:
    with pytest.raises(exc, match=match):
        snapshot_from_dict(pool_document(**overrides))


def test_activation_fields_default_open_and_parse_slot() -> None:
    snap = snapshot_from_dict(pool_document())
    assert snap.activation_type is ActivationType.TIMESTAMP
    assert (snap.activation_point, snap.current_slot) == (0, 0)

    slotted = snapshot_from_dict(
        pool_document(activation_type="SLOT", activation_point=300_000_000, current_slot=299_999_999)
    )
    assert slotted.activation_type is ActivationType.SLOT
    assert slotted.current_point() == 299_999_999
    assert not slotted.is_activated()

def test_missing_required_field() -> None:
    doc = pool_document()
    del doc["pool_lp_supply"]
    with pytest.raises(ValueError, match="pool_lp_supply is required"):
        snapshot_from_dict(doc)


def test_load_snapshot_reads_yaml(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    path = tmp_path / "pool.yaml"
    path.write_text(yaml.safe_dump(pool_document(disabled_note="ignored", enabled=False)), encoding="utf-8")

    with caplog.at_level(logging.DEBUG, logger="dynamic_amm_quote.integration.snapshot_io"):
        snap = load_snapshot(path)

    assert snap.enabled is False
    assert snap.pool_lp_supply == 1_000_000_000
    assert "loaded snapshot" in caplog.text


def test_load_snapshot_requires_mapping(tmp_path: Path) -> None:
    path = tmp_path / "pool.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(TypeError, match="mapping"):
        load_snapshot(path)
