"""
Core exception types for launchcurve.core.

These are dependency-free and may be imported by all modules.
"""

__all__ = [
    "MathOverflowError",
    "CurveDomainError",
    "InvalidConfigurationError",
    "InsufficientLiquidityError",
    "PrecisionReconciliationError",
    "PoolPausedError",
]


class MathOverflowError(Exception):
    """Raised when an arithmetic step would exceed its representable range.

    Attributes
    ----------
    value : int
        The out-of-range intermediate (or final) value.
    bits : int
        Width of the target representation (64, 128 or 256).
    """

    def __init__(self, value, bits, *, context=None):
        where = f" in {context}" if context else ""
        super().__init__(f"Math overflow{where}: value needs more than {bits} bits")
        self.value = value
        self.bits = bits
        self.context = context


class CurveDomainError(Exception):
    """Raised when kernel inputs are degenerate (equal bounds, zero liquidity, zero price)."""
    pass


class InvalidConfigurationError(Exception):
    """Raised when launch or curve parameters violate a documented invariant."""
    pass


class InsufficientLiquidityError(Exception):
    """Raised when the remaining curve cannot satisfy an exact-in/exact-out request.

    All amounts are on the curve side of the fee: `requested == filled + amount_left`.

    Attributes
    ----------
    requested : int
        Amount presented to the curve (input after input-side fees for exact-in,
        output grossed up for output-side fees for exact-out).
    filled : int
        The portion of `requested` the curve could absorb before its price bound.
    amount_left : int | None
        Unconsumed remainder at the point the walk stopped.
    next_sqrt_price : int | None
        Price at which the walk stopped (curve bound).
    fee : int
        Fee separating `requested` from the caller's amount.
    """

    def __init__(self, requested, filled, *, amount_left=None, next_sqrt_price=None, fee=0):
        super().__init__(
            f"Requested amount={requested} exceeds curve liquidity (filled={filled}, fee={fee})"
        )
        self.requested = requested
        self.filled = filled
        self.amount_left = amount_left
        self.next_sqrt_price = next_sqrt_price
        self.fee = fee


class PrecisionReconciliationError(Exception):
    """Raised when a built curve does not conserve total supply within the leftover tolerance."""

    def __init__(self, reconstructed_supply, total_supply, leftover):
        super().__init__(
            f"Reconstructed supply={reconstructed_supply} exceeds total supply={total_supply} "
            f"by at least leftover={leftover}"
        )
        self.reconstructed_supply = reconstructed_supply
        self.total_supply = total_supply
        self.leftover = leftover


class PoolPausedError(Exception):
    """Raised when quoting against a paused pool snapshot."""
    pass
