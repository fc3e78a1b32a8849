"""
Protocol constants mirrored from the dynamic AMM program.
"""

# Depeg virtual prices are stored with 6 decimals.
DEPEG_PRECISION = 1_000_000
BASE_CACHE_EXPIRES = 60 * 10

# Marinade msol_price is a 32.32 fixed-point value.
MARINADE_PRICE_DENOMINATOR = 1 << 32
MARINADE_MSOL_PRICE_OFFSET = 512

LIDO_ST_SOL_SUPPLY_OFFSET = 73
LIDO_ST_SOL_BALANCE_OFFSET = 81

# Pool virtual price (D per LP token) precision.
VIRTUAL_PRICE_PRECISION = 100_000_000

LOCKED_PROFIT_DEGRADATION_DENOMINATOR = 1_000_000_000_000

FEE_DENOMINATOR = 100_000
BPS_DENOMINATOR = 10_000

CONSTANT_PRODUCT_TRADE_FEE_NUMERATOR = 250
CONSTANT_PRODUCT_OWNER_TRADE_FEE_NUMERATOR = 50
STABLE_SWAP_TRADE_FEE_NUMERATOR = 10
STABLE_SWAP_OWNER_TRADE_FEE_NUMERATOR = 5

CONSTANT_PRODUCT_ALLOWED_TRADE_FEE_BPS = (25, 100, 400, 600)
STABLE_SWAP_ALLOWED_TRADE_FEE_BPS = (1, 4, 10, 100)

MAX_AMP = 10_000

# Single-side balanced deposits are quoted against 99.8% of the requested amount.
BALANCED_DEPOSIT_BUFFER_NUMERATOR = 998
BALANCED_DEPOSIT_BUFFER_DENOMINATOR = 1_000
