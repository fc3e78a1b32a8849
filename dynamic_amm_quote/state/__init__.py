"""
Snapshot value types and integer range helpers.
"""

from .amounts import Amount, Timestamp, U64_MAX, checked_u64, require_int, require_u64

__all__ = [
    "Amount",
    "Timestamp",
    "U64_MAX",
    "checked_u64",
    "require_int",
    "require_u64",
]
