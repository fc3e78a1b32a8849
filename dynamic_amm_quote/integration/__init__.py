"""
Imperative shell around the quote core.

Modules:
- `settings`: environment-driven settings and logging setup
- `snapshot_io`: YAML/JSON snapshot loading
- `pool_handle`: long-lived handle owning the depeg cache
"""

from .pool_handle import PoolHandle
from .settings import QuoteSettings
from .snapshot_io import load_snapshot, snapshot_from_dict

__all__ = ["PoolHandle", "QuoteSettings", "load_snapshot", "snapshot_from_dict"]
