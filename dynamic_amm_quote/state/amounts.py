"""
Integer amount helpers.

On-chain balances are u64; intermediates are unbounded Python ints, so the
only range checks needed are at the snapshot boundary and on values the
protocol would store back into a u64.
"""

from typing import Any

from ..errors import MathOverflowError


# Type aliases
Amount = int  # Non-negative integer (u64 on chain, arbitrary precision here)
Timestamp = int  # Unix seconds

U64_MAX = (1 << 64) - 1


def require_int(value: Any, *, name: str) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")
    return value


def require_u64(value: Any, *, name: str) -> int:
    """Validate a snapshot field that the chain stores as u64."""
    require_int(value, name=name)
    if value < 0:
        raise ValueError(f"{name} must be non-negative: {value}")
    if value > U64_MAX:
        raise ValueError(f"{name} exceeds u64: {value}")
    return value


def checked_u64(value: int, *, what: str) -> int:
    """Mirror a checked u64 conversion: negative or oversized results are math errors."""
    if value < 0 or value > U64_MAX:
        raise MathOverflowError(f"{what} out of u64 range: {value}")
    return value
