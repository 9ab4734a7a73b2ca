"""Invariant solvers for the consolidated curve.

Three solvers, all pure functions of a ``ConsolidatedState``:

- ``solve_sphere``: closed form for the output reserve when no tick is pinned.
- ``solve_torus``: bisection on the torus invariant when pinned ticks exist.
- ``solve_crossover``: closed form for the exact input that brings the
  interior projection to a given normalized boundary ratio.

Trades move ``amount_in`` into token ``in_idx`` and withdraw from token
``out_idx``; solvers return the new aggregate reserve of ``out_idx``.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from orbital.constants import EPSILON, TORUS_MAX_ITERATIONS
from orbital.consolidation import ConsolidatedState, orth_norm_from_sums
from orbital.errors import (
    InsufficientReserves,
    NegativeDiscriminant,
    NoCrossoverRoot,
    NonPositiveOutput,
    NoPositiveCrossover,
    Unbracketed,
)
from orbital.math.fixed_point import div, div_trunc, mul, safe_sub, sqrt, sqrt_n

logger = structlog.get_logger()


@dataclass(frozen=True)
class CrossoverSolution:
    """Sub-trade landing exactly on a crossing ratio."""

    amount_in: int
    new_x_out: int


def solve_sphere(r: int, x_in: int, x_out: int, amount_in: int) -> int:
    """Closed-form output reserve on a pure sphere of radius ``r``.

    From sum((r - x_i)^2) = r^2 with only x_in and x_out changing:

        x_out' = r - sqrt((r - x_out)^2 + 2*(r - x_in)*a - a^2)

    Raises:
        NegativeDiscriminant: If the radicand is negative (trade too large)
        NonPositiveOutput: If the trade yields no output
        InsufficientReserves: If the output reserve would go negative
    """
    d_out = r - x_out
    d_in = r - x_in
    radicand = mul(d_out, d_out) + 2 * mul(d_in, amount_in) - mul(amount_in, amount_in)
    if radicand < 0:
        raise NegativeDiscriminant(f"Sphere radicand {radicand} < 0 for amount_in {amount_in}")

    new_x_out = r - sqrt(radicand)
    if new_x_out >= x_out:
        raise NonPositiveOutput(f"Sphere solve gives no output: {new_x_out} >= {x_out}")
    if new_x_out < 0:
        raise InsufficientReserves(f"Sphere solve drains reserve below zero: {new_x_out}")
    return new_x_out


def torus_error(state: ConsolidatedState, total: int, sum_squares: int) -> int:
    """Torus invariant residual f for a candidate aggregate (sum(x), sum(x^2)).

    f = (sum(x)/sqrt(n) - k_bound - r_int*sqrt(n))^2 + (|orth(x)| - s_bound)^2 - r_int^2
    """
    root_n = sqrt_n(state.token_count)
    parallel = div(total, root_n) - state.k_bound_total - mul(state.r_int, root_n)
    orth = orth_norm_from_sums(total, sum_squares, state.token_count) - state.s_bound_total
    return mul(parallel, parallel) + mul(orth, orth) - mul(state.r_int, state.r_int)


def solve_torus(
    state: ConsolidatedState,
    in_idx: int,
    out_idx: int,
    amount_in: int,
    epsilon: int = EPSILON,
) -> int:
    """Solve the torus invariant for the new output reserve by bisection.

    Brackets the root between 0 and the pre-trade output reserve, stops as
    soon as |f| < epsilon or after TORUS_MAX_ITERATIONS halvings. When the
    cap is hit, returns the endpoint on the pool's side of the curve (f <= 0).

    Raises:
        Unbracketed: If f has the same sign at both endpoints
    """
    x_in = state.x_total[in_idx]
    x_out = state.x_total[out_idx]
    new_x_in = x_in + amount_in

    base_total = state.sum_total + amount_in
    base_squares = state.sum_squares_total - mul(x_in, x_in) + mul(new_x_in, new_x_in)

    def f(candidate: int) -> int:
        total = base_total - (x_out - candidate)
        squares = base_squares - mul(x_out, x_out) + mul(candidate, candidate)
        return torus_error(state, total, squares)

    lo, hi = 0, x_out
    f_lo, f_hi = f(lo), f(hi)
    if abs(f_hi) < epsilon:
        return hi
    if abs(f_lo) < epsilon:
        return lo
    if (f_lo > 0) == (f_hi > 0):
        raise Unbracketed(f"Torus residual has the same sign at both ends: f(0)={f_lo}, f({x_out})={f_hi}")

    for iteration in range(TORUS_MAX_ITERATIONS):
        mid = (lo + hi) // 2
        f_mid = f(mid)
        if abs(f_mid) < epsilon:
            logger.debug("torus_converged", iterations=iteration + 1, residual=f_mid)
            return mid
        if (f_mid > 0) == (f_lo > 0):
            lo, f_lo = mid, f_mid
        else:
            hi, f_hi = mid, f_mid

    logger.debug("torus_iteration_cap", lo=lo, hi=hi, f_lo=f_lo, f_hi=f_hi)
    return hi if f_hi <= 0 else lo


def solve_crossover(
    state: ConsolidatedState,
    in_idx: int,
    out_idx: int,
    k_cross_norm: int,
) -> CrossoverSolution:
    """Exact sub-trade that moves alpha_int / r_int to ``k_cross_norm``.

    The target ratio fixes sum(x) and, through the torus invariant, the
    orthogonal norm and hence sum(x^2). With x_in += d and x_out -= e,
    e = d - dS where dS is the required change in sum(x), so d solves

        2d^2 + 2(x_in - x_out - dS)d + (Q - Q_t + 2*x_out*dS + dS^2) = 0

    and the smallest positive root is taken.

    Raises:
        NoCrossoverRoot: If the discriminant is negative
        NoPositiveCrossover: If no positive root gives a positive output
        InsufficientReserves: If the output reserve would go negative
    """
    n = state.token_count
    root_n = sqrt_n(n)

    alpha_int_target = mul(k_cross_norm, state.r_int)
    target_total = mul(alpha_int_target + state.k_bound_total, root_n)

    parallel_offset = alpha_int_target - mul(state.r_int, root_n)
    w_int = sqrt(safe_sub(mul(state.r_int, state.r_int), mul(parallel_offset, parallel_offset)))
    # Interior orthogonal component keeps its current orientation relative to u
    if state.orth_norm < state.s_bound_total:
        target_orth = state.s_bound_total - w_int
    else:
        target_orth = state.s_bound_total + w_int
    target_squares = mul(target_orth, target_orth) + mul(target_total, target_total) // n

    x_in = state.x_total[in_idx]
    x_out = state.x_total[out_idx]
    delta_sum = target_total - state.sum_total

    b = 2 * (x_in - x_out - delta_sum)
    c = state.sum_squares_total - target_squares + 2 * mul(x_out, delta_sum) + mul(delta_sum, delta_sum)
    discriminant = mul(b, b) - 8 * c
    if discriminant < 0:
        raise NoCrossoverRoot(f"Crossover discriminant {discriminant} < 0 for ratio {k_cross_norm}")

    root = sqrt(discriminant)
    candidates = [d for d in (div_trunc(-b - root, 4), div_trunc(-b + root, 4)) if d > 0]
    if not candidates:
        raise NoPositiveCrossover(f"No positive crossover input for ratio {k_cross_norm}")

    amount_in = min(candidates)
    amount_out = amount_in - delta_sum
    if amount_out <= 0:
        raise NoPositiveCrossover(f"Crossover at ratio {k_cross_norm} yields no output ({amount_out})")
    new_x_out = x_out - amount_out
    if new_x_out < 0:
        raise InsufficientReserves(f"Crossover drains reserve below zero: {new_x_out}")

    logger.debug(
        "crossover_solved",
        k_cross_norm=k_cross_norm,
        amount_in=amount_in,
        amount_out=amount_out,
    )
    return CrossoverSolution(amount_in=amount_in, new_x_out=new_x_out)


__all__ = [
    "CrossoverSolution",
    "solve_sphere",
    "torus_error",
    "solve_torus",
    "solve_crossover",
]
