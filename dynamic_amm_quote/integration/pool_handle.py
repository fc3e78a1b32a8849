"""
Long-lived pool handle.

The only state that survives between snapshots is the stable curve's depeg
cache: a refreshed virtual price stays valid for `BASE_CACHE_EXPIRES` seconds
and is reused for later snapshots instead of the (older) cache they carry.
Refreshes are idempotent, so concurrent callers racing on `refresh_depeg`
need no locking: the last write wins.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

from ..core.curve import StableSwapCurve
from ..core.depeg import DepegState
from ..core.quote import (
    DepositQuote,
    PoolInfo,
    SwapQuote,
    WithdrawQuote,
    compute_pool_info,
    get_deposit_quote,
    get_max_swap_in_amount,
    get_max_swap_out_amount,
    get_swap_quote,
    get_withdraw_quote,
)
from ..core.snapshot import PoolSnapshot
from .settings import QuoteSettings

logger = logging.getLogger(__name__)


class PoolHandle:
    def __init__(self, snapshot: PoolSnapshot, *, settings: Optional[QuoteSettings] = None) -> None:
        self._settings = settings or QuoteSettings()
        self._snapshot = snapshot

    @property
    def snapshot(self) -> PoolSnapshot:
        return self._snapshot

    @property
    def depeg(self) -> Optional[DepegState]:
        curve = self._snapshot.curve
        return curve.depeg if isinstance(curve, StableSwapCurve) else None

    def update(self, snapshot: PoolSnapshot) -> None:
        """Swap in a new snapshot, keeping a newer cached virtual price if the handle has one."""
        cached = self.depeg
        curve = snapshot.curve
        if (
            cached is not None
            and isinstance(curve, StableSwapCurve)
            and cached.depeg_type is curve.depeg.depeg_type
            and cached.base_cache_updated > curve.depeg.base_cache_updated
        ):
            snapshot = replace(snapshot, curve=replace(curve, depeg=cached))
            logger.debug("kept cached depeg price updated=%d", cached.base_cache_updated)
        self._snapshot = snapshot

    def refresh_depeg(self) -> Optional[DepegState]:
        before = self.depeg
        self._snapshot = self._snapshot.with_fresh_curve()
        after = self.depeg
        if after is not before:
            logger.debug(
                "depeg cache refreshed at %d: %d -> %d",
                self._snapshot.current_time,
                before.base_virtual_price if before is not None else 0,
                after.base_virtual_price if after is not None else 0,
            )
        return after

    def _slippage(self, slippage_bps: Optional[int]) -> int:
        return self._settings.default_slippage_bps if slippage_bps is None else slippage_bps

    def pool_info(self) -> PoolInfo:
        self.refresh_depeg()
        return compute_pool_info(self._snapshot)

    def swap_quote(self, in_mint: str, in_amount: int, slippage_bps: Optional[int] = None) -> SwapQuote:
        self.refresh_depeg()
        return get_swap_quote(self._snapshot, in_mint, in_amount, self._slippage(slippage_bps))

    def deposit_quote(
        self,
        token_a_in_amount: int,
        token_b_in_amount: int,
        *,
        balanced: bool,
        slippage_bps: Optional[int] = None,
    ) -> DepositQuote:
        self.refresh_depeg()
        return get_deposit_quote(
            self._snapshot, token_a_in_amount, token_b_in_amount, balanced, self._slippage(slippage_bps)
        )

    def withdraw_quote(
        self,
        lp_amount: int,
        *,
        token_mint: Optional[str] = None,
        slippage_bps: Optional[int] = None,
    ) -> WithdrawQuote:
        self.refresh_depeg()
        return get_withdraw_quote(self._snapshot, lp_amount, self._slippage(slippage_bps), token_mint)

    def max_swap_in_amount(self, in_mint: str) -> int:
        self.refresh_depeg()
        return get_max_swap_in_amount(self._snapshot, in_mint)

    def max_swap_out_amount(self, out_mint: str) -> int:
        return get_max_swap_out_amount(self._snapshot, out_mint)
