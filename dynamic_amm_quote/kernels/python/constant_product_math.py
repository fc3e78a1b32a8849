"""
Constant-product swap kernel (spl-token-swap semantics).

- The post-swap destination balance is `ceil(k / (x + dx))`, computed with the
  two-step ceiling division of the token-swap program: the divisor is refined
  so the pool invariant can never decrease.
- Fees are not applied here; the quote layer removes them before calling in.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from ...errors import AmountTooSmallError


def _require_int(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")


@dataclass(frozen=True)
class CeilDivResult:
    quotient: int
    divisor: int


@dataclass(frozen=True)
class SwapWithoutFeesResult:
    source_amount_swapped: int
    destination_amount_swapped: int
    new_swap_source_amount: int
    new_swap_destination_amount: int


def ceil_div(numerator: int, divisor: int) -> CeilDivResult:
    """
    Ceiling division returning `(quotient, refined_divisor)`.

    A quotient that truncates to zero is rejected rather than rounded up to 1.
    When there is a remainder the quotient is bumped and the divisor is
    recomputed as `ceil(numerator / quotient)`, so `numerator <= q * divisor`.
    """
    _require_int("numerator", numerator)
    _require_int("divisor", divisor)
    if numerator < 0:
        raise ValueError("numerator must be non-negative")
    if divisor <= 0:
        raise ValueError("divisor must be positive")

    quotient = numerator // divisor
    if quotient == 0:
        raise AmountTooSmallError("ceil_div result in zero")

    remainder = numerator % divisor
    if remainder > 0:
        quotient += 1
        divisor = numerator // quotient
        remainder = numerator % quotient
        if remainder > 0:
            divisor += 1

    return CeilDivResult(quotient=quotient, divisor=divisor)


def swap_without_fees(
    *,
    source_amount: int,
    swap_source_amount: int,
    swap_destination_amount: int,
) -> SwapWithoutFeesResult:
    """Exact-in swap on x*y=k, rounding in favour of the pool."""
    for name, v in (
        ("source_amount", source_amount),
        ("swap_source_amount", swap_source_amount),
        ("swap_destination_amount", swap_destination_amount),
    ):
        _require_int(name, v)
        if v < 0:
            raise ValueError(f"{name} must be non-negative")
    if swap_source_amount + source_amount == 0:
        raise AmountTooSmallError("cannot swap against an empty source reserve")

    invariant = swap_source_amount * swap_destination_amount
    res = ceil_div(invariant, swap_source_amount + source_amount)
    new_swap_destination_amount = res.quotient

    destination_amount_swapped = swap_destination_amount - new_swap_destination_amount
    if destination_amount_swapped <= 0:
        raise AmountTooSmallError("swap result in zero")

    return SwapWithoutFeesResult(
        source_amount_swapped=source_amount,
        destination_amount_swapped=destination_amount_swapped,
        new_swap_source_amount=swap_source_amount + source_amount,
        new_swap_destination_amount=new_swap_destination_amount,
    )


def source_amount_for_destination(
    *,
    destination_amount: int,
    swap_source_amount: int,
    swap_destination_amount: int,
) -> int:
    """Inverse of `swap_without_fees`: input needed to take `destination_amount` out."""
    for name, v in (
        ("destination_amount", destination_amount),
        ("swap_source_amount", swap_source_amount),
        ("swap_destination_amount", swap_destination_amount),
    ):
        _require_int(name, v)
        if v < 0:
            raise ValueError(f"{name} must be non-negative")
    if destination_amount >= swap_destination_amount:
        raise AmountTooSmallError("cannot drain full destination reserve")

    invariant = swap_source_amount * swap_destination_amount
    res = ceil_div(invariant, swap_destination_amount - destination_amount)
    source_amount = res.quotient - swap_source_amount
    if source_amount <= 0:
        raise AmountTooSmallError("swap result in zero")
    return source_amount


def compute_d(token_a_amount: int, token_b_amount: int) -> int:
    """Constant-product analogue of the invariant: floor(sqrt(a * b))."""
    _require_int("token_a_amount", token_a_amount)
    _require_int("token_b_amount", token_b_amount)
    if token_a_amount < 0 or token_b_amount < 0:
        raise ValueError("amounts must be non-negative")
    return math.isqrt(token_a_amount * token_b_amount)
