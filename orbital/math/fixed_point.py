"""18-decimal fixed-point arithmetic for the orbital pool.

All values are Python integers scaled by 10^18 (``ONE``). Multiplication and
division truncate toward zero, matching on-chain integer semantics; this
rounding mode sets the tolerance budget used by every invariant check.

Vector helpers operate on plain lists of fixed-point integers.
"""

from __future__ import annotations

from collections.abc import Sequence
from decimal import ROUND_HALF_UP, Decimal

from orbital.constants import NTH_ROOT_ITERATIONS, ONE, SQRT_MAX_ITERATIONS
from orbital.errors import OrbitalError

__all__ = [
    # Errors
    "FixedPointError",
    "DivisionByZero",
    "LengthMismatch",
    "NegativeSqrt",
    # Scalar operations
    "div_trunc",
    "mul",
    "div",
    "mul_div",
    "sqrt",
    "nth_root",
    "geometric_mean",
    "safe_sub",
    # Vector operations
    "dot_product",
    "sum_squares",
    "norm",
    # Geometry helpers
    "sqrt_n",
    "inv_sqrt_n",
    # Conversions
    "to_decimal",
    "from_decimal",
]


# =============================================================================
# Error classes
# =============================================================================


class FixedPointError(OrbitalError, ArithmeticError):
    """Base error for fixed-point arithmetic."""

    category = "arithmetic"


class DivisionByZero(FixedPointError):
    """Division by zero."""

    pass


class LengthMismatch(FixedPointError):
    """Vector operands have different lengths."""

    pass


class NegativeSqrt(FixedPointError):
    """Square root of a negative value."""

    pass


# =============================================================================
# Scalar operations
# =============================================================================


def div_trunc(a: int, b: int) -> int:
    """Integer division with truncation toward zero.

    Python's // operator rounds toward negative infinity; on-chain integer
    division truncates toward zero. The two differ for operands of opposite
    sign, which occur in the signed intermediate terms of the solvers.
    """
    if b == 0:
        raise DivisionByZero(f"Division by zero: {a} / 0")
    if (a >= 0) == (b >= 0):
        return a // b
    return -(abs(a) // abs(b))


def mul(a: int, b: int) -> int:
    """Multiply two fixed-point values: (a * b) / ONE, truncated."""
    return div_trunc(a * b, ONE)


def div(a: int, b: int) -> int:
    """Divide two fixed-point values: (a * ONE) / b, truncated.

    Raises:
        DivisionByZero: If b is zero
    """
    if b == 0:
        raise DivisionByZero(f"Fixed-point division by zero: {a} / 0")
    return div_trunc(a * ONE, b)


def mul_div(a: int, b: int, c: int) -> int:
    """Compute a * b / c with a single truncation."""
    if c == 0:
        raise DivisionByZero(f"Division by zero: {a} * {b} / 0")
    return div_trunc(a * b, c)


def sqrt(x: int) -> int:
    """Fixed-point square root using Newton's method.

    Seeded at (x + ONE) / 2, which is never below the root, so the iterates
    decrease monotonically; iteration stops as soon as an iterate fails to
    decrease or after SQRT_MAX_ITERATIONS steps.

    Args:
        x: Non-negative fixed-point value

    Returns:
        sqrt(x) as a fixed-point value (0 for x == 0)

    Raises:
        NegativeSqrt: If x is negative
    """
    if x < 0:
        raise NegativeSqrt(f"Square root of negative value {x}")
    if x == 0:
        return 0

    z = (x + ONE) // 2
    for _ in range(SQRT_MAX_ITERATIONS):
        y = (z + div(x, z)) // 2
        if y >= z:
            break
        z = y
    return z


def _pow(x: int, exponent: int) -> int:
    result = ONE
    for _ in range(exponent):
        result = mul(result, x)
    return result


def nth_root(x: int, n: int, seed: int) -> int:
    """Fixed-point n-th root by Newton iteration.

    Runs exactly NTH_ROOT_ITERATIONS steps of
    y <- ((n - 1) * y + x / y^(n-1)) / n starting from ``seed``.
    """
    if n <= 0:
        raise ValueError(f"Root degree must be positive, got {n}")
    if x <= 0 or seed <= 0:
        return 0
    if n == 1:
        return x

    y = seed
    for _ in range(NTH_ROOT_ITERATIONS):
        denominator = _pow(y, n - 1)
        if denominator == 0:
            return 0
        y = ((n - 1) * y + div(x, denominator)) // n
        if y == 0:
            return 0
    return y


def geometric_mean(values: Sequence[int]) -> int:
    """Geometric mean of fixed-point values, seeded at the arithmetic mean."""
    if not values:
        return 0
    product = ONE
    for value in values:
        product = mul(product, value)
    return nth_root(product, len(values), sum(values) // len(values))


def safe_sub(a: int, b: int) -> int:
    """Return max(0, a - b)."""
    return a - b if a > b else 0


# =============================================================================
# Vector operations
# =============================================================================


def _check_lengths(a: Sequence[int], b: Sequence[int]) -> None:
    if len(a) != len(b):
        raise LengthMismatch(f"Vector length mismatch: {len(a)} != {len(b)}")


def dot_product(a: Sequence[int], b: Sequence[int]) -> int:
    """Fixed-point dot product of two equal-length vectors."""
    _check_lengths(a, b)
    return sum(mul(x, y) for x, y in zip(a, b, strict=True))


def sum_squares(a: Sequence[int]) -> int:
    """Sum of squared components."""
    return sum(mul(x, x) for x in a)


def norm(a: Sequence[int]) -> int:
    """Euclidean norm."""
    return sqrt(sum_squares(a))


# =============================================================================
# Geometry helpers
# =============================================================================


def sqrt_n(n: int) -> int:
    """sqrt(n) as a fixed-point value."""
    return sqrt(n * ONE)


def inv_sqrt_n(n: int) -> int:
    """1 / sqrt(n): each component of the uniform unit vector v."""
    return div(ONE, sqrt_n(n))


# =============================================================================
# Conversions
# =============================================================================


def to_decimal(x: int) -> Decimal:
    """Convert a fixed-point value to Decimal for display."""
    return Decimal(x) / Decimal(ONE)


def from_decimal(d: Decimal | str) -> int:
    """Convert a decimal to fixed-point, rounding half up.

    Raises:
        ValueError: If the value is negative
    """
    value = Decimal(d)
    if value < 0:
        raise ValueError(f"from_decimal requires non-negative input, got {value}")
    return int((value * ONE).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
