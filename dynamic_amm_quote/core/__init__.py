"""
Core quote algorithms.
"""

from .curve import (
    ConstantProductCurve,
    Curve,
    StableSwapCurve,
    TokenMultiplier,
    TradeDirection,
    compute_token_multiplier,
    refresh_curve,
)
from .depeg import DepegState, DepegType
from .fees import PoolFees, get_max_amount_with_slippage, get_min_amount_with_slippage
from .price_impact import price_impact
from .quote import (
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
from .snapshot import ActivationType, PoolSnapshot
from .vault import LockedProfitTracker, VaultState, get_amount_by_share, get_share_by_amount

__all__ = [
    "ConstantProductCurve",
    "Curve",
    "StableSwapCurve",
    "TokenMultiplier",
    "TradeDirection",
    "compute_token_multiplier",
    "refresh_curve",
    "DepegState",
    "DepegType",
    "PoolFees",
    "get_max_amount_with_slippage",
    "get_min_amount_with_slippage",
    "price_impact",
    "DepositQuote",
    "PoolInfo",
    "SwapQuote",
    "WithdrawQuote",
    "compute_pool_info",
    "get_deposit_quote",
    "get_max_swap_in_amount",
    "get_max_swap_out_amount",
    "get_swap_quote",
    "get_withdraw_quote",
    "ActivationType",
    "PoolSnapshot",
    "LockedProfitTracker",
    "VaultState",
    "get_amount_by_share",
    "get_share_by_amount",
]
