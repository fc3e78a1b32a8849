"""
Curve variants and dispatch.

A pool's curve is one of a closed set:
- `ConstantProductCurve`: x*y=k with token-swap ceiling rounding.
- `StableSwapCurve`: two-coin stable-swap invariant over upscaled balances.
  Token A is scaled by its decimal multiplier (and `DEPEG_PRECISION` for depeg
  pools); token B by its multiplier (and the cached base virtual price).

Curves are frozen per snapshot. A stable curve whose depeg cache is stale must
be refreshed with `refresh_curve` before use; the quote calculator does that.
The module-level functions dispatch over the union and reject anything else
with `UnsupportedOperationError`.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, replace
from typing import Optional, Tuple, Union

from ..errors import AmountTooSmallError, MissingDepegAccountError, UnsupportedOperationError
from ..kernels.python import constant_product_math as cp_math
from ..kernels.python import stable_swap_math as ss_math
from .constants import DEPEG_PRECISION, MAX_AMP
from .depeg import DepegState, no_depeg
from .fees import PoolFees


class TradeDirection(enum.Enum):
    A_TO_B = "a_to_b"
    B_TO_A = "b_to_a"


@dataclass(frozen=True)
class TokenMultiplier:
    token_a_multiplier: int
    token_b_multiplier: int
    precision_factor: int

    def __post_init__(self) -> None:
        for name, v in (
            ("token_a_multiplier", self.token_a_multiplier),
            ("token_b_multiplier", self.token_b_multiplier),
            ("precision_factor", self.precision_factor),
        ):
            if not isinstance(v, int) or isinstance(v, bool):
                raise TypeError(f"{name} must be an int")
        if self.token_a_multiplier <= 0 or self.token_b_multiplier <= 0:
            raise ValueError("token multipliers must be positive")
        if self.precision_factor < 0:
            raise ValueError(f"precision_factor must be non-negative: {self.precision_factor}")


def compute_token_multiplier(decimals_a: int, decimals_b: int) -> TokenMultiplier:
    """Multipliers that bring both tokens to the larger of the two decimals."""
    if decimals_a < 0 or decimals_b < 0:
        raise ValueError("decimals must be non-negative")
    precision_factor = max(decimals_a, decimals_b)
    return TokenMultiplier(
        token_a_multiplier=10 ** (precision_factor - decimals_a),
        token_b_multiplier=10 ** (precision_factor - decimals_b),
        precision_factor=precision_factor,
    )


@dataclass(frozen=True)
class ConstantProductCurve:
    def compute_out_amount(
        self,
        source_amount: int,
        swap_source_amount: int,
        swap_destination_amount: int,
        trade_direction: TradeDirection,
    ) -> int:
        return cp_math.swap_without_fees(
            source_amount=source_amount,
            swap_source_amount=swap_source_amount,
            swap_destination_amount=swap_destination_amount,
        ).destination_amount_swapped

    def compute_in_amount(
        self,
        destination_amount: int,
        swap_source_amount: int,
        swap_destination_amount: int,
        trade_direction: TradeDirection,
    ) -> int:
        return cp_math.source_amount_for_destination(
            destination_amount=destination_amount,
            swap_source_amount=swap_source_amount,
            swap_destination_amount=swap_destination_amount,
        )

    def compute_spot_out_amount(
        self,
        source_amount: int,
        swap_source_amount: int,
        swap_destination_amount: int,
        trade_direction: TradeDirection,
    ) -> int:
        if swap_source_amount == 0:
            return 0
        return (source_amount * swap_destination_amount) // swap_source_amount

    def compute_d(self, token_a_amount: int, token_b_amount: int) -> int:
        return cp_math.compute_d(token_a_amount, token_b_amount)

    def compute_imbalance_deposit(
        self,
        deposit_a_amount: int,
        deposit_b_amount: int,
        swap_token_a_amount: int,
        swap_token_b_amount: int,
        lp_supply: int,
        fees: PoolFees,
    ) -> int:
        raise UnsupportedOperationError("constant product pools do not support imbalance deposits")

    def compute_withdraw_one(
        self,
        lp_amount: int,
        lp_supply: int,
        swap_token_a_amount: int,
        swap_token_b_amount: int,
        fees: PoolFees,
        trade_direction: TradeDirection,
    ) -> int:
        raise UnsupportedOperationError("constant product pools do not support single-side withdraws")


@dataclass(frozen=True)
class StableSwapCurve:
    """
    Two-coin stable-swap curve at a fixed `amp`.

    Amp ramping is not modelled; `last_amp_updated_timestamp` is carried from
    the snapshot unchanged and never read by the math.
    """

    amp: int
    token_multiplier: TokenMultiplier
    depeg: DepegState = no_depeg()
    last_amp_updated_timestamp: int = 0

    def __post_init__(self) -> None:
        if not isinstance(self.amp, int) or isinstance(self.amp, bool):
            raise TypeError("amp must be an int")
        if not (1 <= self.amp <= MAX_AMP):
            raise ValueError(f"amp must be in [1, {MAX_AMP}]: {self.amp}")
        if not isinstance(self.token_multiplier, TokenMultiplier):
            raise TypeError("token_multiplier must be a TokenMultiplier")
        if not isinstance(self.depeg, DepegState):
            raise TypeError("depeg must be a DepegState")

    def refresh(self, now: int, source_bytes: Optional[bytes]) -> "StableSwapCurve":
        depeg = self.depeg.refresh(now, source_bytes)
        if depeg is self.depeg:
            return self
        return replace(self, depeg=depeg)

    def _base_virtual_price(self) -> int:
        if self.depeg.base_virtual_price == 0:
            raise MissingDepegAccountError(
                f"{self.depeg.depeg_type.name} pool has no cached base virtual price"
            )
        return self.depeg.base_virtual_price

    def _scale_a(self) -> int:
        factor = self.token_multiplier.token_a_multiplier
        if self.depeg.is_depeg_pool:
            factor *= DEPEG_PRECISION
        return factor

    def _scale_b(self) -> int:
        factor = self.token_multiplier.token_b_multiplier
        if self.depeg.is_depeg_pool:
            factor *= self._base_virtual_price()
        return factor

    def upscale_token_a(self, amount: int) -> int:
        return amount * self._scale_a()

    def upscale_token_b(self, amount: int) -> int:
        return amount * self._scale_b()

    def downscale_token_a(self, amount: int) -> int:
        amount //= self.token_multiplier.token_a_multiplier
        if self.depeg.is_depeg_pool:
            amount //= DEPEG_PRECISION
        return amount

    def downscale_token_b(self, amount: int) -> int:
        amount //= self.token_multiplier.token_b_multiplier
        if self.depeg.is_depeg_pool:
            amount //= self._base_virtual_price()
        return amount

    def _upscale_pair(self, source: int, destination: int, trade_direction: TradeDirection) -> Tuple[int, int]:
        if trade_direction is TradeDirection.A_TO_B:
            return self.upscale_token_a(source), self.upscale_token_b(destination)
        return self.upscale_token_b(source), self.upscale_token_a(destination)

    def _downscale_destination(self, amount: int, trade_direction: TradeDirection) -> int:
        if trade_direction is TradeDirection.A_TO_B:
            return self.downscale_token_b(amount)
        return self.downscale_token_a(amount)

    def _downscale_source(self, amount: int, trade_direction: TradeDirection) -> int:
        if trade_direction is TradeDirection.A_TO_B:
            return self.downscale_token_a(amount)
        return self.downscale_token_b(amount)

    def compute_out_amount(
        self,
        source_amount: int,
        swap_source_amount: int,
        swap_destination_amount: int,
        trade_direction: TradeDirection,
    ) -> int:
        up_source, up_destination = self._upscale_pair(swap_source_amount, swap_destination_amount, trade_direction)
        up_amount = self.upscale_token_a(source_amount) if trade_direction is TradeDirection.A_TO_B else (
            self.upscale_token_b(source_amount)
        )
        d = ss_math.compute_d(self.amp, up_source, up_destination)
        new_destination = ss_math.compute_y(self.amp, up_source + up_amount, d)
        out_amount = self._downscale_destination(up_destination - new_destination - 1, trade_direction)
        if out_amount <= 0:
            raise AmountTooSmallError("swap result in zero")
        return out_amount

    def compute_in_amount(
        self,
        destination_amount: int,
        swap_source_amount: int,
        swap_destination_amount: int,
        trade_direction: TradeDirection,
    ) -> int:
        up_source, up_destination = self._upscale_pair(swap_source_amount, swap_destination_amount, trade_direction)
        up_out = self.upscale_token_b(destination_amount) if trade_direction is TradeDirection.A_TO_B else (
            self.upscale_token_a(destination_amount)
        )
        if up_out >= up_destination:
            raise AmountTooSmallError("cannot drain full destination reserve")
        d = ss_math.compute_d(self.amp, up_source, up_destination)
        new_source = ss_math.compute_y(self.amp, up_destination - up_out, d)
        in_amount = self._downscale_source(new_source - up_source, trade_direction)
        if in_amount <= 0:
            raise AmountTooSmallError("swap result in zero")
        return in_amount

    def compute_spot_out_amount(
        self,
        source_amount: int,
        swap_source_amount: int,
        swap_destination_amount: int,
        trade_direction: TradeDirection,
    ) -> int:
        up_source, up_destination = self._upscale_pair(swap_source_amount, swap_destination_amount, trade_direction)
        if up_source == 0 or up_destination == 0:
            return 0
        up_amount = self.upscale_token_a(source_amount) if trade_direction is TradeDirection.A_TO_B else (
            self.upscale_token_b(source_amount)
        )
        d = ss_math.compute_d(self.amp, up_source, up_destination)
        spot = ss_math.compute_out_amount_without_slippage(
            amp=self.amp,
            source_amount=up_amount,
            swap_source_amount=up_source,
            swap_destination_amount=up_destination,
            invariant_d=d,
        )
        return self._downscale_destination(spot, trade_direction)

    def compute_d(self, token_a_amount: int, token_b_amount: int) -> int:
        d = ss_math.compute_d(self.amp, self.upscale_token_a(token_a_amount), self.upscale_token_b(token_b_amount))
        if self.depeg.is_depeg_pool:
            return d // DEPEG_PRECISION
        return d

    def compute_imbalance_deposit(
        self,
        deposit_a_amount: int,
        deposit_b_amount: int,
        swap_token_a_amount: int,
        swap_token_b_amount: int,
        lp_supply: int,
        fees: PoolFees,
    ) -> int:
        estimate = ss_math.estimate_mint_amount(
            amp=self.amp,
            trade_fee_numerator=fees.trade_fee_numerator,
            trade_fee_denominator=fees.trade_fee_denominator,
            lp_total_supply=lp_supply,
            reserve_a=self.upscale_token_a(swap_token_a_amount),
            reserve_b=self.upscale_token_b(swap_token_b_amount),
            deposit_a=self.upscale_token_a(deposit_a_amount),
            deposit_b=self.upscale_token_b(deposit_b_amount),
        )
        return estimate.mint_amount

    def compute_withdraw_one(
        self,
        lp_amount: int,
        lp_supply: int,
        swap_token_a_amount: int,
        swap_token_b_amount: int,
        fees: PoolFees,
        trade_direction: TradeDirection,
    ) -> int:
        """
        Amount of a single token released for `lp_amount`, before withdraw fees.

        B_TO_A withdraws token A; A_TO_B withdraws token B.
        """
        reserve_a = self.upscale_token_a(swap_token_a_amount)
        reserve_b = self.upscale_token_b(swap_token_b_amount)
        if trade_direction is TradeDirection.B_TO_A:
            base_reserve, quote_reserve = reserve_a, reserve_b
        else:
            base_reserve, quote_reserve = reserve_b, reserve_a
        estimate = ss_math.estimate_withdraw_one_amount(
            amp=self.amp,
            trade_fee_numerator=fees.trade_fee_numerator,
            trade_fee_denominator=fees.trade_fee_denominator,
            lp_total_supply=lp_supply,
            base_reserve=base_reserve,
            quote_reserve=quote_reserve,
            pool_token_amount=lp_amount,
        )
        if trade_direction is TradeDirection.B_TO_A:
            return self.downscale_token_a(estimate.withdraw_amount_before_fees)
        return self.downscale_token_b(estimate.withdraw_amount_before_fees)


Curve = Union[ConstantProductCurve, StableSwapCurve]

CURVE_TYPES = (ConstantProductCurve, StableSwapCurve)


def require_curve(curve: object) -> Curve:
    if not isinstance(curve, CURVE_TYPES):
        raise UnsupportedOperationError(f"unsupported curve: {type(curve).__name__}")
    return curve


def refresh_curve(curve: Curve, now: int, source_bytes: Optional[bytes]) -> Curve:
    """Return the curve with a fresh depeg cache (constant product curves pass through)."""
    require_curve(curve)
    if isinstance(curve, StableSwapCurve):
        return curve.refresh(now, source_bytes)
    return curve


def compute_out_amount(
    curve: Curve,
    source_amount: int,
    swap_source_amount: int,
    swap_destination_amount: int,
    trade_direction: TradeDirection,
) -> int:
    return require_curve(curve).compute_out_amount(
        source_amount, swap_source_amount, swap_destination_amount, trade_direction
    )


def compute_in_amount(
    curve: Curve,
    destination_amount: int,
    swap_source_amount: int,
    swap_destination_amount: int,
    trade_direction: TradeDirection,
) -> int:
    return require_curve(curve).compute_in_amount(
        destination_amount, swap_source_amount, swap_destination_amount, trade_direction
    )


def compute_spot_out_amount(
    curve: Curve,
    source_amount: int,
    swap_source_amount: int,
    swap_destination_amount: int,
    trade_direction: TradeDirection,
) -> int:
    return require_curve(curve).compute_spot_out_amount(
        source_amount, swap_source_amount, swap_destination_amount, trade_direction
    )


def compute_d(curve: Curve, token_a_amount: int, token_b_amount: int) -> int:
    return require_curve(curve).compute_d(token_a_amount, token_b_amount)


def compute_imbalance_deposit(
    curve: Curve,
    deposit_a_amount: int,
    deposit_b_amount: int,
    swap_token_a_amount: int,
    swap_token_b_amount: int,
    lp_supply: int,
    fees: PoolFees,
) -> int:
    return require_curve(curve).compute_imbalance_deposit(
        deposit_a_amount, deposit_b_amount, swap_token_a_amount, swap_token_b_amount, lp_supply, fees
    )


def compute_withdraw_one(
    curve: Curve,
    lp_amount: int,
    lp_supply: int,
    swap_token_a_amount: int,
    swap_token_b_amount: int,
    fees: PoolFees,
    trade_direction: TradeDirection,
) -> int:
    return require_curve(curve).compute_withdraw_one(
        lp_amount, lp_supply, swap_token_a_amount, swap_token_b_amount, fees, trade_direction
    )
