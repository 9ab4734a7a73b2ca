"""Deconsolidation: split a new aggregate reserve vector back onto ticks.

The aggregate is decomposed into its projection on v and its orthogonal
direction u. Pinned ticks are placed at k*v + s*u; the remainder is the
consolidated interior vector, which interior ticks share in proportion to
their radii. Every tick is re-verified after placement.
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from orbital.config import PoolConfig
from orbital.consolidation import ConsolidatedState
from orbital.math.fixed_point import div, mul, mul_div, norm, sqrt_n
from orbital.ticks.geometry import orthogonal_radius, verify_tick
from orbital.ticks.store import TickStore

logger = structlog.get_logger()


def orthogonal_unit(x_total: Sequence[int]) -> tuple[list[int], int]:
    """Unit direction u of the component of ``x_total`` orthogonal to v.

    Returns:
        (u, |orth(x)|); u is the zero vector when the reserves are all equal
    """
    n = len(x_total)
    average = sum(x_total) // n
    orth = [x - average for x in x_total]
    orth_norm = norm(orth)
    if orth_norm == 0:
        return [0] * n, 0
    return [div(w, orth_norm) for w in orth], orth_norm


def deconsolidate(
    store: TickStore,
    state: ConsolidatedState,
    new_x_total: Sequence[int],
    config: PoolConfig,
) -> None:
    """Write the tick reserves implied by ``new_x_total``.

    ``state`` is the consolidated view the trade was solved against; its
    interior/boundary partition decides how each tick is placed.

    Raises:
        InvariantViolation: If any tick fails its own checks after placement
    """
    n = store.token_count
    root_n = sqrt_n(n)
    unit, orth_norm = orthogonal_unit(new_x_total)

    for tick_id in state.boundary_ids:
        tick = store.get(tick_id)
        s = orthogonal_radius(tick.r, tick.k, n)
        parallel = div(tick.k, root_n)
        tick.reserves = [parallel + mul(s, u) for u in unit]
        verify_tick(tick, config)

    if not state.interior_ids:
        return

    alpha_int = div(sum(new_x_total), root_n) - state.k_bound_total
    w_int = orth_norm - state.s_bound_total
    parallel = div(alpha_int, root_n)
    x_int = [parallel + mul(w_int, u) for u in unit]

    for tick_id in state.interior_ids:
        tick = store.get(tick_id)
        tick.reserves = [mul_div(x, tick.r, state.r_int) for x in x_int]
        verify_tick(tick, config)

    logger.debug(
        "deconsolidated",
        interior=len(state.interior_ids),
        boundary=len(state.boundary_ids),
        alpha_int=alpha_int,
        w_int=w_int,
    )


__all__ = ["orthogonal_unit", "deconsolidate"]
