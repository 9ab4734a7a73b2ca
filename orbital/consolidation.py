"""Consolidation engine: many ticks viewed as one tradable curve.

Interior ticks are parallel (their reserve vectors are scaled copies of one
another), so together they behave like a single sphere of radius
r_int = sum(r). Pinned ticks sit on their boundary planes at
x = k*v + s*u and contribute a fixed parallel offset k and a fixed
orthogonal offset s. The aggregate therefore satisfies the torus invariant

    (sum(x)/sqrt(n) - k_bound - r_int*sqrt(n))^2 + (|orth(x)| - s_bound)^2 = r_int^2

which reduces to the plain sphere when no tick is pinned.

``ConsolidatedState`` is pure derived data, computed fresh for every swap
segment and never stored.
"""

from __future__ import annotations

from dataclasses import dataclass

from orbital.math.fixed_point import div, mul, safe_sub, sqrt, sqrt_n
from orbital.ticks.geometry import orthogonal_radius
from orbital.ticks.store import TickStore


@dataclass(frozen=True)
class ConsolidatedState:
    """Aggregate view of every active tick.

    Attributes:
        token_count: Number of tokens (n)
        interior_ids: Active ticks not pinned to a boundary
        boundary_ids: Active ticks with k > 0 that are pinned
        r_int: Sum of interior radii
        k_bound_total: Sum of k over pinned ticks
        s_bound_total: Sum of orthogonal radii s over pinned ticks
        k_min_interior_norm: Smallest k/r among interior ticks with k > 0
        cross_interior_id: Tick achieving k_min_interior_norm
        k_max_boundary_norm: Largest k/r among pinned ticks
        cross_boundary_id: Tick achieving k_max_boundary_norm
        x_total: Summed reserve vector
        sum_total: sum(x_total)
        sum_squares_total: sum of squared reserves (fixed-point)
    """

    token_count: int
    interior_ids: tuple[int, ...]
    boundary_ids: tuple[int, ...]
    r_int: int
    k_bound_total: int
    s_bound_total: int
    k_min_interior_norm: int | None
    cross_interior_id: int | None
    k_max_boundary_norm: int | None
    cross_boundary_id: int | None
    x_total: tuple[int, ...]
    sum_total: int
    sum_squares_total: int

    @property
    def has_boundary(self) -> bool:
        """True when at least one tick is pinned (torus case)."""
        return len(self.boundary_ids) > 0

    @property
    def alpha_total(self) -> int:
        """Projection of the aggregate reserves onto v."""
        return div(self.sum_total, sqrt_n(self.token_count))

    @property
    def orth_norm(self) -> int:
        """Norm of the aggregate reserves' component orthogonal to v."""
        return orth_norm_from_sums(self.sum_total, self.sum_squares_total, self.token_count)

    def interior_norm(self, total: int) -> int:
        """Normalized interior projection alpha_int / r_int for a given sum(x)."""
        alpha_int = div(total, sqrt_n(self.token_count)) - self.k_bound_total
        return div(alpha_int, self.r_int)

    @property
    def alpha_int_norm(self) -> int:
        """Current normalized interior projection."""
        return div(self.alpha_total - self.k_bound_total, self.r_int)


def orth_norm_from_sums(total: int, sum_squares: int, token_count: int) -> int:
    """|orth(x)| = sqrt(sum(x^2) - sum(x)^2 / n), without materializing x."""
    return sqrt(safe_sub(sum_squares, mul(total, total) // token_count))


def aggregate(store: TickStore) -> ConsolidatedState:
    """Consolidate every tick with shares into one aggregate state.

    Single read-only pass for the sums and extremal ratios, then a second
    pass assigning ids to the interior/boundary groups.
    """
    n = store.token_count
    x_total = [0] * n
    r_int = 0
    k_bound_total = 0
    s_bound_total = 0
    k_min_interior_norm: int | None = None
    cross_interior_id: int | None = None
    k_max_boundary_norm: int | None = None
    cross_boundary_id: int | None = None

    for tick in store.active_ticks():
        for i, reserve in enumerate(tick.reserves):
            x_total[i] += reserve

        if tick.has_boundary and tick.pinned:
            k_bound_total += tick.k
            s_bound_total += orthogonal_radius(tick.r, tick.k, n)
            ratio = tick.k_norm
            if k_max_boundary_norm is None or ratio > k_max_boundary_norm:
                k_max_boundary_norm = ratio
                cross_boundary_id = tick.tick_id
        else:
            r_int += tick.r
            if tick.has_boundary:
                ratio = tick.k_norm
                if k_min_interior_norm is None or ratio < k_min_interior_norm:
                    k_min_interior_norm = ratio
                    cross_interior_id = tick.tick_id

    interior_ids = tuple(
        tick.tick_id for tick in store.active_ticks() if not (tick.has_boundary and tick.pinned)
    )
    boundary_ids = tuple(tick.tick_id for tick in store.active_ticks() if tick.has_boundary and tick.pinned)

    return ConsolidatedState(
        token_count=n,
        interior_ids=interior_ids,
        boundary_ids=boundary_ids,
        r_int=r_int,
        k_bound_total=k_bound_total,
        s_bound_total=s_bound_total,
        k_min_interior_norm=k_min_interior_norm,
        cross_interior_id=cross_interior_id,
        k_max_boundary_norm=k_max_boundary_norm,
        cross_boundary_id=cross_boundary_id,
        x_total=tuple(x_total),
        sum_total=sum(x_total),
        sum_squares_total=sum(mul(x, x) for x in x_total),
    )


__all__ = ["ConsolidatedState", "aggregate", "orth_norm_from_sums"]
