"""Mathematical utilities for the orbital pool.

This package provides the fixed-point primitives every invariant is
expressed in:
- scalar mul/div/sqrt with truncation toward zero
- vector helpers (dot product, sum of squares, norm)
"""

from orbital.math.fixed_point import (
    DivisionByZero,
    FixedPointError,
    LengthMismatch,
    NegativeSqrt,
    div,
    dot_product,
    from_decimal,
    geometric_mean,
    inv_sqrt_n,
    mul,
    mul_div,
    norm,
    nth_root,
    safe_sub,
    sqrt,
    sqrt_n,
    sum_squares,
    to_decimal,
)

__all__ = [
    "FixedPointError",
    "DivisionByZero",
    "LengthMismatch",
    "NegativeSqrt",
    "mul",
    "div",
    "mul_div",
    "sqrt",
    "nth_root",
    "geometric_mean",
    "safe_sub",
    "dot_product",
    "sum_squares",
    "norm",
    "sqrt_n",
    "inv_sqrt_n",
    "to_decimal",
    "from_decimal",
]
