"""Exception types for the quote engine.

Errors surface synchronously to the immediate caller; nothing in this package
retries. Convergence of the Newton solvers is reported as a warning, never as
an error.
"""

from __future__ import annotations


class QuoteError(Exception):
    """Base class for every quote-engine failure."""


class AmountTooSmallError(QuoteError, ArithmeticError):
    """Raised when a division truncates to zero or a swap produces nothing."""


class MathOverflowError(QuoteError, ArithmeticError):
    """Raised when an intermediate leaves the on-chain integer domain."""


class InvariantDecreasedError(MathOverflowError):
    """Raised when a deposit would shrink the stable-swap invariant."""


class UnsupportedOperationError(QuoteError):
    """Raised when a curve variant rejects the requested liquidity shape."""


class DepegError(QuoteError):
    """Base class for depeg cache refresh failures."""


class MissingDepegAccountError(DepegError):
    """Raised when the external staking state buffer is absent or unparsable."""


class UnsupportedBasePoolError(DepegError):
    """Raised for a depeg type whose virtual price cannot be derived."""


class InvalidMintError(QuoteError, ValueError):
    """Raised when a mint does not belong to the pool."""


class PoolDisabledError(QuoteError):
    """Raised when quoting a swap against a disabled pool."""


class InsufficientLiquidityError(QuoteError):
    """Raised when the quoted output exceeds what the vault can pay out."""


class InvariantConvergenceNotReached(RuntimeWarning):
    """Newton iteration hit its cap; the last iterate was used."""
