"""
Pool snapshot: the decoded on-chain state a quote is computed against.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field, replace
from typing import Mapping, Optional

from ..errors import InvalidMintError
from ..state.amounts import require_u64
from .curve import Curve, StableSwapCurve, TradeDirection, refresh_curve, require_curve
from .depeg import DepegType
from .fees import PoolFees
from .vault import VaultState, get_amount_by_share


class ActivationType(enum.Enum):
    """Clock the pool's activation point is measured on."""

    SLOT = "slot"
    TIMESTAMP = "timestamp"

    @classmethod
    def parse(cls, value: str) -> "ActivationType":
        key = str(value).strip().lower()
        for member in cls:
            if member.value == key:
                return member
        raise ValueError(f"unknown activation type: {value!r}")


@dataclass(frozen=True)
class PoolSnapshot:
    token_a_mint: str
    token_b_mint: str
    curve: Curve
    fees: PoolFees
    enabled: bool
    vault_a: VaultState
    vault_b: VaultState
    pool_vault_a_lp: int
    pool_vault_b_lp: int
    vault_a_lp_supply: int
    vault_b_lp_supply: int
    vault_a_reserve: int
    vault_b_reserve: int
    pool_lp_supply: int
    current_time: int
    depeg_sources: Mapping[DepegType, bytes] = field(default_factory=dict)
    activation_type: ActivationType = ActivationType.TIMESTAMP
    activation_point: int = 0
    current_slot: int = 0

    def __post_init__(self) -> None:
        if not self.token_a_mint or not self.token_b_mint:
            raise ValueError("token mints must be non-empty")
        if self.token_a_mint == self.token_b_mint:
            raise ValueError("token_a_mint and token_b_mint must differ")
        require_curve(self.curve)
        if not isinstance(self.fees, PoolFees):
            raise TypeError("fees must be PoolFees")
        for name in (
            "pool_vault_a_lp",
            "pool_vault_b_lp",
            "vault_a_lp_supply",
            "vault_b_lp_supply",
            "vault_a_reserve",
            "vault_b_reserve",
            "pool_lp_supply",
            "current_time",
            "activation_point",
            "current_slot",
        ):
            require_u64(getattr(self, name), name=name)
        if not isinstance(self.activation_type, ActivationType):
            raise TypeError("activation_type must be an ActivationType")
        if self.pool_vault_a_lp > self.vault_a_lp_supply:
            raise ValueError("pool_vault_a_lp exceeds vault_a_lp_supply")
        if self.pool_vault_b_lp > self.vault_b_lp_supply:
            raise ValueError("pool_vault_b_lp exceeds vault_b_lp_supply")

    def current_point(self) -> int:
        """`current_slot` or `current_time`, whichever clock `activation_type` names."""
        if self.activation_type is ActivationType.SLOT:
            return self.current_slot
        return self.current_time

    def is_activated(self) -> bool:
        return self.current_point() >= self.activation_point

    def direction_for_input(self, in_mint: str) -> TradeDirection:
        if in_mint == self.token_a_mint:
            return TradeDirection.A_TO_B
        if in_mint == self.token_b_mint:
            return TradeDirection.B_TO_A
        raise InvalidMintError(f"mint {in_mint} does not belong to the pool")

    def vault_a_withdrawable(self) -> int:
        return self.vault_a.unlocked_amount(self.current_time)

    def vault_b_withdrawable(self) -> int:
        return self.vault_b.unlocked_amount(self.current_time)

    def token_a_amount(self) -> int:
        """Token A the pool owns through its vault A LP."""
        return get_amount_by_share(self.pool_vault_a_lp, self.vault_a_withdrawable(), self.vault_a_lp_supply)

    def token_b_amount(self) -> int:
        return get_amount_by_share(self.pool_vault_b_lp, self.vault_b_withdrawable(), self.vault_b_lp_supply)

    def depeg_source(self) -> Optional[bytes]:
        if isinstance(self.curve, StableSwapCurve):
            return self.depeg_sources.get(self.curve.depeg.depeg_type)
        return None

    def with_fresh_curve(self) -> "PoolSnapshot":
        """Snapshot whose curve has a depeg cache valid at `current_time`."""
        curve = refresh_curve(self.curve, self.current_time, self.depeg_source())
        if curve is self.curve:
            return self
        return replace(self, curve=curve)
