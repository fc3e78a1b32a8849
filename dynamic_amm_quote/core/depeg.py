"""
Depeg virtual-price cache for stable pools paired with a liquid-staking token.

The functional core is `DepegState.refresh(now, source_bytes)`: it either
returns `self` (fresh, or not a depeg pool) or a new state priced from the
staking program's account buffer. The shell decides where buffers come from
and where the refreshed state is kept.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, replace
from typing import Optional

from ..errors import MissingDepegAccountError, UnsupportedBasePoolError
from .constants import (
    BASE_CACHE_EXPIRES,
    DEPEG_PRECISION,
    LIDO_ST_SOL_BALANCE_OFFSET,
    LIDO_ST_SOL_SUPPLY_OFFSET,
    MARINADE_MSOL_PRICE_OFFSET,
    MARINADE_PRICE_DENOMINATOR,
)

logger = logging.getLogger(__name__)


class DepegType(enum.Enum):
    NONE = "none"
    MARINADE = "marinade"
    LIDO = "lido"
    SPL_STAKE = "spl_stake"

    @classmethod
    def parse(cls, value: str) -> "DepegType":
        key = str(value).strip().lower()
        for member in cls:
            if member.value == key or member.name.lower() == key:
                return member
        raise ValueError(f"unknown depeg type: {value!r}")


def _read_u64_le(data: bytes, offset: int, *, what: str) -> int:
    end = offset + 8
    if len(data) < end:
        raise MissingDepegAccountError(f"{what}: account data too short ({len(data)} < {end})")
    return int.from_bytes(data[offset:end], "little")


def marinade_virtual_price(data: Optional[bytes]) -> int:
    """Virtual price from Marinade state: msol_price is 32.32 fixed point."""
    if data is None:
        raise MissingDepegAccountError("marinade state account is missing")
    msol_price = _read_u64_le(data, MARINADE_MSOL_PRICE_OFFSET, what="marinade msol_price")
    return (msol_price * DEPEG_PRECISION) // MARINADE_PRICE_DENOMINATOR


def lido_virtual_price(data: Optional[bytes]) -> int:
    """Virtual price from Lido state: stSOL backing balance per stSOL."""
    if data is None:
        raise MissingDepegAccountError("lido state account is missing")
    st_sol_supply = _read_u64_le(data, LIDO_ST_SOL_SUPPLY_OFFSET, what="lido st_sol_supply")
    sol_balance = _read_u64_le(data, LIDO_ST_SOL_BALANCE_OFFSET, what="lido sol_balance")
    if st_sol_supply == 0:
        raise MissingDepegAccountError("lido st_sol_supply is zero")
    return (sol_balance * DEPEG_PRECISION) // st_sol_supply


def virtual_price_from_source(depeg_type: DepegType, data: Optional[bytes]) -> int:
    if depeg_type is DepegType.MARINADE:
        return marinade_virtual_price(data)
    if depeg_type is DepegType.LIDO:
        return lido_virtual_price(data)
    raise UnsupportedBasePoolError(f"cannot derive virtual price for depeg type {depeg_type.name}")


@dataclass(frozen=True)
class DepegState:
    base_virtual_price: int
    base_cache_updated: int
    depeg_type: DepegType

    def __post_init__(self) -> None:
        for name, v in (
            ("base_virtual_price", self.base_virtual_price),
            ("base_cache_updated", self.base_cache_updated),
        ):
            if not isinstance(v, int) or isinstance(v, bool):
                raise TypeError(f"{name} must be an int")
            if v < 0:
                raise ValueError(f"{name} must be non-negative: {v}")
        if not isinstance(self.depeg_type, DepegType):
            raise TypeError("depeg_type must be a DepegType")

    @property
    def is_depeg_pool(self) -> bool:
        return self.depeg_type is not DepegType.NONE

    def is_fresh(self, now: int) -> bool:
        """Non-depeg pools are always fresh; otherwise the cache lives BASE_CACHE_EXPIRES seconds."""
        if not self.is_depeg_pool:
            return True
        return now <= self.base_cache_updated + BASE_CACHE_EXPIRES

    def refresh(self, now: int, source_bytes: Optional[bytes]) -> "DepegState":
        if self.is_fresh(now):
            return self
        price = virtual_price_from_source(self.depeg_type, source_bytes)
        logger.debug(
            "depeg cache refreshed type=%s price=%d->%d updated=%d->%d",
            self.depeg_type.name,
            self.base_virtual_price,
            price,
            self.base_cache_updated,
            now,
        )
        return replace(self, base_virtual_price=price, base_cache_updated=now)


def no_depeg() -> DepegState:
    return DepegState(base_virtual_price=0, base_cache_updated=0, depeg_type=DepegType.NONE)
