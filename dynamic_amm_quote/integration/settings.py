"""
Process settings read from the environment.

Values are clamped rather than rejected so a bad variable never prevents a
quote from being produced.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from ..core.constants import BPS_DENOMINATOR


DEFAULT_SLIPPAGE_BPS = 100
DEFAULT_LOG_LEVEL = "WARNING"


def _env_int(name: str, default: int, *, lo: int, hi: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return int(default)
    try:
        v = int(raw.strip())
    except ValueError:
        return int(default)
    if v < lo:
        return int(lo)
    if v > hi:
        return int(hi)
    return int(v)


def _env_str(name: str, default: str) -> str:
    raw = os.environ.get(name)
    if raw is None:
        return default
    v = raw.strip()
    return v if v else default


@dataclass(frozen=True)
class QuoteSettings:
    default_slippage_bps: int = DEFAULT_SLIPPAGE_BPS
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls) -> "QuoteSettings":
        level = _env_str("DYNAMIC_AMM_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()
        if not isinstance(logging.getLevelName(level), int):
            level = DEFAULT_LOG_LEVEL
        return cls(
            default_slippage_bps=_env_int(
                "DYNAMIC_AMM_DEFAULT_SLIPPAGE_BPS", DEFAULT_SLIPPAGE_BPS, lo=0, hi=BPS_DENOMINATOR
            ),
            log_level=level,
        )

    def configure_logging(self) -> None:
        logging.basicConfig(
            level=self.log_level,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
