"""Per-tick sphere geometry and invariant checks.

A tick with radius r and reserves x lives on the sphere

    sum((r - x_i)^2) = r^2

centered at (r, ..., r). A tick with k > 0 is additionally bounded by the
plane dot(x, v) <= k, where v = (1/sqrt(n), ..., 1/sqrt(n)).
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from orbital.errors import BoundaryExceeded, NegativeReserve, PinnedOffBoundary, SphereInvariantViolated
from orbital.math.fixed_point import div, mul, safe_sub, sqrt, sqrt_n

if TYPE_CHECKING:
    from orbital.config import PoolConfig
    from orbital.ticks.store import Tick


def sphere_error(r: int, reserves: Sequence[int]) -> int:
    """Signed residual sum((r - x_i)^2) - r^2."""
    return sum(mul(r - x, r - x) for x in reserves) - mul(r, r)


def boundary_projection(reserves: Sequence[int]) -> int:
    """Projection dot(x, v) of a reserve vector onto the uniform direction."""
    return div(sum(reserves), sqrt_n(len(reserves)))


def orthogonal_radius(r: int, k: int, token_count: int) -> int:
    """Radius s = sqrt(r^2 - (k - r*sqrt(n))^2) of a tick's boundary circle."""
    offset = k - mul(r, sqrt_n(token_count))
    return sqrt(safe_sub(mul(r, r), mul(offset, offset)))


def satisfies_sphere(tick: Tick, epsilon: int) -> bool:
    """True when the tick's sphere residual is within ``epsilon``."""
    if tick.total_shares == 0:
        return True
    return abs(sphere_error(tick.r, tick.reserves)) < epsilon


def rests_on_boundary(tick: Tick, tolerance: int) -> bool:
    """True when a boundary-carrying tick sits on its plane dot(x, v) == k."""
    if tick.k == 0 or tick.total_shares == 0:
        return False
    return abs(boundary_projection(tick.reserves) - tick.k) <= tolerance


def verify_tick(tick: Tick, config: PoolConfig) -> None:
    """Re-validate a tick after it was mutated.

    Checks non-negative reserves, the sphere invariant, the boundary
    inequality (k > 0) and, for pinned ticks, the boundary equality.

    Raises:
        NegativeReserve: If any reserve is negative
        SphereInvariantViolated: If the sphere residual exceeds epsilon
        BoundaryExceeded: If dot(x, v) > k + epsilon
        PinnedOffBoundary: If a pinned tick left its boundary plane
    """
    if tick.total_shares == 0:
        return

    if any(x < 0 for x in tick.reserves):
        raise NegativeReserve(f"Tick {tick.tick_id} has negative reserves: {tick.reserves}")

    error = sphere_error(tick.r, tick.reserves)
    if abs(error) >= config.epsilon:
        raise SphereInvariantViolated(f"Tick {tick.tick_id} sphere residual {error} exceeds {config.epsilon}")

    if tick.k > 0:
        projection = boundary_projection(tick.reserves)
        if projection > tick.k + config.epsilon:
            raise BoundaryExceeded(f"Tick {tick.tick_id} projection {projection} exceeds boundary {tick.k}")
        if tick.pinned and abs(projection - tick.k) > config.boundary_tolerance:
            raise PinnedOffBoundary(
                f"Pinned tick {tick.tick_id} projection {projection} is off boundary {tick.k}"
            )


__all__ = [
    "sphere_error",
    "boundary_projection",
    "orthogonal_radius",
    "satisfies_sphere",
    "rests_on_boundary",
    "verify_tick",
]
