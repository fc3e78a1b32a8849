"""
Snapshot loading for the shell.

A snapshot document is YAML (JSON is accepted too, being a YAML subset):

    token_a_mint: <str>
    token_b_mint: <str>
    enabled: true
    current_time: <unix seconds>
    current_slot: <slot>                 # optional, default 0
    activation_type: timestamp | slot    # optional, default timestamp
    activation_point: <int>              # optional, default 0 (swaps open)
    pool_lp_supply: <int>
    curve:
      type: constant_product | stable_swap
      amp: <int>                         # stable_swap only
      decimals: [<a>, <b>]               # or token_multiplier: {...}
      depeg: {depeg_type: marinade, base_virtual_price: <int>, base_cache_updated: <int>}
    fees: {trade_fee_numerator: ..., ...}  # optional, defaults per curve type
    vault_a: {total_amount, lp_supply, reserve, pool_lp, locked_profit_tracker: {...}}
    vault_b: {...}
    depeg_sources: {marinade: "<hex account data>"}
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Tuple

import yaml

from ..core.curve import ConstantProductCurve, Curve, StableSwapCurve, TokenMultiplier, compute_token_multiplier
from ..core.depeg import DepegState, DepegType, no_depeg
from ..core.fees import PoolFees, default_constant_product_fees, default_stable_swap_fees
from ..core.snapshot import ActivationType, PoolSnapshot
from ..core.vault import LockedProfitTracker, VaultState

logger = logging.getLogger(__name__)


def _require_mapping(value: Any, *, name: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise TypeError(f"{name} must be a mapping")
    return value


def _require_int(value: Any, *, name: str) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")
    if value < 0:
        raise ValueError(f"{name} must be non-negative")
    return int(value)


def _int_field(obj: Mapping[str, Any], key: str, *, where: str, default: Any = None) -> int:
    if key not in obj:
        if default is None:
            raise ValueError(f"{where}.{key} is required")
        return default
    return _require_int(obj[key], name=f"{where}.{key}")


def _parse_depeg(obj: Any) -> DepegState:
    if obj is None:
        return no_depeg()
    obj = _require_mapping(obj, name="curve.depeg")
    return DepegState(
        base_virtual_price=_int_field(obj, "base_virtual_price", where="curve.depeg", default=0),
        base_cache_updated=_int_field(obj, "base_cache_updated", where="curve.depeg", default=0),
        depeg_type=DepegType.parse(obj.get("depeg_type", "none")),
    )


def _parse_token_multiplier(obj: Mapping[str, Any]) -> TokenMultiplier:
    if "token_multiplier" in obj:
        tm = _require_mapping(obj["token_multiplier"], name="curve.token_multiplier")
        return TokenMultiplier(
            token_a_multiplier=_int_field(tm, "token_a_multiplier", where="curve.token_multiplier"),
            token_b_multiplier=_int_field(tm, "token_b_multiplier", where="curve.token_multiplier"),
            precision_factor=_int_field(tm, "precision_factor", where="curve.token_multiplier"),
        )
    decimals = obj.get("decimals")
    if not isinstance(decimals, (list, tuple)) or len(decimals) != 2:
        raise ValueError("stable_swap curve needs token_multiplier or decimals: [a, b]")
    return compute_token_multiplier(
        _require_int(decimals[0], name="curve.decimals[0]"),
        _require_int(decimals[1], name="curve.decimals[1]"),
    )


def _parse_curve(obj: Any) -> Curve:
    obj = _require_mapping(obj, name="curve")
    curve_type = str(obj.get("type", "")).strip().lower()
    if curve_type == "constant_product":
        return ConstantProductCurve()
    if curve_type == "stable_swap":
        return StableSwapCurve(
            amp=_int_field(obj, "amp", where="curve"),
            token_multiplier=_parse_token_multiplier(obj),
            depeg=_parse_depeg(obj.get("depeg")),
            last_amp_updated_timestamp=_int_field(obj, "last_amp_updated_timestamp", where="curve", default=0),
        )
    raise ValueError(f"unsupported curve type: {curve_type!r}")


def _parse_fees(obj: Any, curve: Curve) -> PoolFees:
    if obj is None:
        if isinstance(curve, StableSwapCurve):
            return default_stable_swap_fees()
        return default_constant_product_fees()
    obj = _require_mapping(obj, name="fees")
    return PoolFees(
        trade_fee_numerator=_int_field(obj, "trade_fee_numerator", where="fees"),
        trade_fee_denominator=_int_field(obj, "trade_fee_denominator", where="fees"),
        owner_trade_fee_numerator=_int_field(obj, "owner_trade_fee_numerator", where="fees"),
        owner_trade_fee_denominator=_int_field(obj, "owner_trade_fee_denominator", where="fees"),
    )


def _parse_vault(obj: Any, *, name: str) -> Tuple[VaultState, Dict[str, int]]:
    obj = _require_mapping(obj, name=name)
    tracker = _require_mapping(obj.get("locked_profit_tracker", {}), name=f"{name}.locked_profit_tracker")
    where = f"{name}.locked_profit_tracker"
    vault = VaultState(
        total_amount=_int_field(obj, "total_amount", where=name),
        locked_profit_tracker=LockedProfitTracker(
            last_updated_locked_profit=_int_field(tracker, "last_updated_locked_profit", where=where, default=0),
            last_report=_int_field(tracker, "last_report", where=where, default=0),
            locked_profit_degradation=_int_field(tracker, "locked_profit_degradation", where=where, default=0),
        ),
    )
    accounts = {
        "lp_supply": _int_field(obj, "lp_supply", where=name),
        "reserve": _int_field(obj, "reserve", where=name),
        "pool_lp": _int_field(obj, "pool_lp", where=name),
    }
    return vault, accounts


def _parse_depeg_sources(obj: Any) -> Dict[DepegType, bytes]:
    if obj is None:
        return {}
    obj = _require_mapping(obj, name="depeg_sources")
    out: Dict[DepegType, bytes] = {}
    for key, value in obj.items():
        if not isinstance(value, str):
            raise TypeError(f"depeg_sources.{key} must be a hex string")
        try:
            out[DepegType.parse(key)] = bytes.fromhex(value.strip().removeprefix("0x"))
        except ValueError as e:
            raise ValueError(f"depeg_sources.{key} is not valid hex") from e
    return out


def snapshot_from_dict(obj: Mapping[str, Any]) -> PoolSnapshot:
    obj = _require_mapping(obj, name="snapshot")
    curve = _parse_curve(obj.get("curve"))
    vault_a, accounts_a = _parse_vault(obj.get("vault_a"), name="vault_a")
    vault_b, accounts_b = _parse_vault(obj.get("vault_b"), name="vault_b")
    enabled = obj.get("enabled", True)
    if not isinstance(enabled, bool):
        raise TypeError("enabled must be a bool")
    return PoolSnapshot(
        token_a_mint=str(obj.get("token_a_mint", "")),
        token_b_mint=str(obj.get("token_b_mint", "")),
        curve=curve,
        fees=_parse_fees(obj.get("fees"), curve),
        enabled=enabled,
        vault_a=vault_a,
        vault_b=vault_b,
        pool_vault_a_lp=accounts_a["pool_lp"],
        pool_vault_b_lp=accounts_b["pool_lp"],
        vault_a_lp_supply=accounts_a["lp_supply"],
        vault_b_lp_supply=accounts_b["lp_supply"],
        vault_a_reserve=accounts_a["reserve"],
        vault_b_reserve=accounts_b["reserve"],
        pool_lp_supply=_int_field(obj, "pool_lp_supply", where="snapshot"),
        current_time=_int_field(obj, "current_time", where="snapshot"),
        depeg_sources=_parse_depeg_sources(obj.get("depeg_sources")),
        activation_type=ActivationType.parse(obj.get("activation_type", "timestamp")),
        activation_point=_int_field(obj, "activation_point", where="snapshot", default=0),
        current_slot=_int_field(obj, "current_slot", where="snapshot", default=0),
    )


def load_snapshot(path: Path | str) -> PoolSnapshot:
    path = Path(path)
    obj = yaml.safe_load(path.read_text(encoding="utf-8"))
    if not isinstance(obj, Mapping):
        raise TypeError(f"snapshot document must be a mapping: {path}")
    snapshot = snapshot_from_dict(obj)
    logger.debug(
        "loaded snapshot %s curve=%s lp_supply=%d time=%d",
        path,
        type(snapshot.curve).__name__,
        snapshot.pool_lp_supply,
        snapshot.current_time,
    )
    return snapshot
