"""
Off-chain quote engine for the dynamic AMM.

- `dynamic_amm_quote.kernels.python` holds the integer-only curve math.
- `dynamic_amm_quote.core` composes it into curves, vault share conversion and
  swap/deposit/withdraw quotes.
- `dynamic_amm_quote.integration` is the shell: settings, snapshot loading and
  the long-lived `PoolHandle`.
"""

__version__ = "0.1.0"
