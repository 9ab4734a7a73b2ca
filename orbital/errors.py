"""Orbital pool error classes.

Every failure raised by the pool core belongs to one category, exposed as the
``category`` class attribute so callers can report a structured reason:

- ``input_validation``: bad index, wrong vector length, zero amount, zero radius.
  Rejected before any state is touched.
- ``geometry_infeasible``: the trade or deposit is impossible at the current state.
- ``invariant_violation``: a post-operation sphere/boundary check failed.
- ``slippage``: output below the caller's minimum.
- ``exhaustion``: the swap needed more segments than allowed.
- ``ledger``: the token ledger refused a transfer.
"""

from typing import ClassVar


class OrbitalError(Exception):
    """Base error for orbital pool operations."""

    category: ClassVar[str] = "internal"

    @property
    def reason(self) -> str:
        """Short machine-readable reason (the error class name)."""
        return type(self).__name__


# =============================================================================
# Input validation
# =============================================================================


class InputValidationError(OrbitalError):
    """Request rejected before touching any state."""

    category = "input_validation"


class InvalidTokenIndex(InputValidationError):
    """Token index outside [0, token_count) or input equals output."""

    pass


class InvalidAmountsLength(InputValidationError):
    """Amount vector length does not match the pool's token count."""

    pass


class ZeroAmount(InputValidationError):
    """Amount must be strictly positive."""

    pass


class ZeroRadius(InputValidationError):
    """Tick radius must be strictly positive."""

    pass


class InvalidBoundary(InputValidationError):
    """Tick boundary parameter must be non-negative."""

    pass


class UnknownTick(InputValidationError):
    """No tick with the given id."""

    pass


class InsufficientShares(InputValidationError):
    """Owner holds fewer shares than requested."""

    pass


class ZeroShares(InputValidationError):
    """Deposit would mint zero shares."""

    pass


class ZeroReserve(InputValidationError):
    """Proportional deposit into a tick with an empty reserve."""

    pass


# =============================================================================
# Geometry infeasible
# =============================================================================


class GeometryInfeasible(OrbitalError):
    """Trade or deposit is mathematically impossible at the current state."""

    category = "geometry_infeasible"


class NegativeDiscriminant(GeometryInfeasible):
    """Sphere closed form has a negative radicand (trade too large)."""

    pass


class NonPositiveOutput(GeometryInfeasible):
    """Sphere closed form yields no output for the given input."""

    pass


class InsufficientReserves(GeometryInfeasible):
    """Solved output reserve would be negative."""

    pass


class Unbracketed(GeometryInfeasible):
    """Torus invariant has the same sign at both bisection endpoints."""

    pass


class NoCrossoverRoot(GeometryInfeasible):
    """Crossover quadratic has a negative discriminant."""

    pass


class NoPositiveCrossover(GeometryInfeasible):
    """Crossover quadratic has no positive root."""

    pass


class OutsideTick(GeometryInfeasible):
    """Deposit lies beyond the tick's boundary plane."""

    pass


class NoInteriorLiquidity(GeometryInfeasible):
    """Every active tick is pinned; no interior liquidity can absorb the trade."""

    pass


class NoActiveLiquidity(GeometryInfeasible):
    """The pool has no tick with shares."""

    pass


class InvalidTrade(GeometryInfeasible):
    """Solved output reserve is not strictly below its pre-trade value."""

    pass


# =============================================================================
# Invariant violation
# =============================================================================


class InvariantViolation(OrbitalError):
    """Post-operation consistency check failed; the operation is discarded."""

    category = "invariant_violation"


class SphereInvariantViolated(InvariantViolation):
    """|sum((r - x_i)^2) - r^2| exceeded the tolerance."""

    pass


class BoundaryExceeded(InvariantViolation):
    """dot(x, v) exceeded k beyond the tolerance."""

    pass


class PinnedOffBoundary(InvariantViolation):
    """Pinned tick does not rest on its boundary plane."""

    pass


class NegativeReserve(InvariantViolation):
    """A tick reserve became negative."""

    pass


# =============================================================================
# Slippage / exhaustion / ledger
# =============================================================================


class SlippageExceeded(OrbitalError):
    """Output amount is below the caller's minimum."""

    category = "slippage"


class SegmentsExhausted(OrbitalError):
    """Swap could not complete within the segment budget."""

    category = "exhaustion"


class TooManySegments(SegmentsExhausted):
    """Router hit MAX_SEGMENTS with input remaining."""

    pass


class LedgerError(OrbitalError):
    """Token ledger refused a transfer."""

    category = "ledger"


class InsufficientBalance(LedgerError):
    """Owner's ledger balance is below the debit amount."""

    pass
