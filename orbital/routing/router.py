"""Segmented swap router.

Routes one swap through the consolidated curve, splitting it wherever a
tick would start or stop resting on its boundary plane:

1. Re-aggregate the ticks (``aggregate``).
2. Solve the full remaining input (sphere or torus).
3. Predict the post-trade normalized interior projection.
4. If it passes a tick's k/r ratio, solve the crossover sub-trade instead.
5. Apply the chosen segment (``deconsolidate``), flip the crossing tick's
   pinned flag, and loop until the input is consumed.

Every decision is made on the solved candidate before anything is written;
the store passed in is mutated segment by segment, so callers route against
a working copy and discard it if any segment fails.
"""

from __future__ import annotations

import structlog

from orbital.config import DEFAULT_POOL_CONFIG, PoolConfig
from orbital.consolidation import ConsolidatedState, aggregate
from orbital.deconsolidation import deconsolidate
from orbital.errors import (
    GeometryInfeasible,
    InvalidTrade,
    NoActiveLiquidity,
    NoInteriorLiquidity,
    TooManySegments,
)
from orbital.invariant import solve_crossover, solve_sphere, solve_torus
from orbital.math.fixed_point import div
from orbital.routing.types import CrossingKind, RouteResult, Segment, SegmentResult
from orbital.ticks.geometry import verify_tick
from orbital.ticks.store import TickStore

logger = structlog.get_logger()


class SegmentedSwapRouter:
    """Routes swaps through the tick arena segment by segment.

    Args:
        config: Pool configuration (tolerances and segment cap)
    """

    def __init__(self, config: PoolConfig = DEFAULT_POOL_CONFIG) -> None:
        self.config = config

    def route(self, store: TickStore, in_idx: int, amount_in: int, out_idx: int) -> RouteResult:
        """Consume ``amount_in`` of token ``in_idx`` for token ``out_idx``.

        Args:
            store: Tick arena to trade against (mutated in place)
            in_idx: Index of the token paid into the pool
            amount_in: Input amount after fees
            out_idx: Index of the token withdrawn from the pool

        Returns:
            RouteResult with the total output and per-segment detail

        Raises:
            TooManySegments: If input remains after max_segments segments
            GeometryInfeasible: If a segment cannot be solved
            InvariantViolation: If a tick fails its checks after a segment
        """
        result = RouteResult(in_idx=in_idx, out_idx=out_idx, amount_in=amount_in, amount_out=0)
        remaining = amount_in

        for _ in range(self.config.max_segments):
            state = aggregate(store)
            if state.r_int == 0:
                if not state.boundary_ids:
                    raise NoActiveLiquidity("Pool has no active ticks")
                raise NoInteriorLiquidity(f"All active ticks are pinned: {list(state.boundary_ids)}")

            segment = self.next_segment(state, in_idx, out_idx, remaining)
            applied = self._apply(store, state, in_idx, out_idx, segment)
            result.segments.append(applied)
            result.amount_out += applied.amount_out
            remaining -= segment.amount_in

            if remaining == 0:
                logger.debug(
                    "route_complete",
                    amount_in=amount_in,
                    amount_out=result.amount_out,
                    segments=len(result.segments),
                )
                return result

        raise TooManySegments(
            f"Swap of {amount_in} still has {remaining} unconsumed after {self.config.max_segments} segments"
        )

    def next_segment(
        self,
        state: ConsolidatedState,
        in_idx: int,
        out_idx: int,
        remaining: int,
    ) -> Segment:
        """Decide the next segment without touching any tick.

        Raises:
            InvalidTrade: If the solved output reserve does not decrease
            GeometryInfeasible: If neither the full trade nor a crossing is solvable
        """
        x_out = state.x_total[out_idx]
        try:
            new_x_out = self._solve(state, in_idx, out_idx, remaining)
        except GeometryInfeasible:
            # The full trade may only be infeasible past a boundary crossing
            segment = self._earliest_crossing(state, in_idx, out_idx, remaining)
            if segment is None:
                raise
            return segment

        if new_x_out >= x_out:
            raise InvalidTrade(f"Output reserve {new_x_out} is not below pre-trade reserve {x_out}")

        predicted_total = state.sum_total + remaining - (x_out - new_x_out)
        crossing = self._detect_crossing(state, state.interior_norm(predicted_total))
        if crossing is None:
            return Segment(amount_in=remaining, new_x_out=new_x_out)

        kind, tick_id, k_cross = crossing
        if abs(state.alpha_int_norm - k_cross) <= self._flip_tolerance(state, kind):
            # Already on the crossing ratio: flip without consuming input
            return Segment(amount_in=0, new_x_out=x_out, crossing=kind, tick_id=tick_id)

        solution = solve_crossover(state, in_idx, out_idx, k_cross)
        if solution.amount_in >= remaining:
            return Segment(amount_in=remaining, new_x_out=new_x_out)
        return Segment(
            amount_in=solution.amount_in,
            new_x_out=solution.new_x_out,
            crossing=kind,
            tick_id=tick_id,
        )

    def _solve(self, state: ConsolidatedState, in_idx: int, out_idx: int, amount_in: int) -> int:
        if state.has_boundary:
            return solve_torus(state, in_idx, out_idx, amount_in, self.config.epsilon)
        return solve_sphere(state.r_int, state.x_total[in_idx], state.x_total[out_idx], amount_in)

    def _flip_tolerance(self, state: ConsolidatedState, kind: CrossingKind) -> int:
        """Largest normalized gap a tick may be flipped across without trading.

        An outward flip pins the tick where it stands, so its raw distance to
        the plane (gap * r, with r <= r_int) must stay inside half the boundary
        tolerance. Unpinning has no equality to keep.
        """
        if kind is CrossingKind.INWARD:
            return self.config.crossing_tolerance
        return min(self.config.crossing_tolerance, div(self.config.boundary_tolerance // 2, state.r_int))

    def _detect_crossing(
        self, state: ConsolidatedState, predicted_norm: int
    ) -> tuple[CrossingKind, int, int] | None:
        tolerance = self.config.crossing_tolerance
        if (
            state.cross_interior_id is not None
            and state.k_min_interior_norm is not None
            and predicted_norm > state.k_min_interior_norm + tolerance
        ):
            return CrossingKind.OUTWARD, state.cross_interior_id, state.k_min_interior_norm
        if (
            state.cross_boundary_id is not None
            and state.k_max_boundary_norm is not None
            and predicted_norm < state.k_max_boundary_norm - tolerance
        ):
            return CrossingKind.INWARD, state.cross_boundary_id, state.k_max_boundary_norm
        return None

    def _earliest_crossing(
        self,
        state: ConsolidatedState,
        in_idx: int,
        out_idx: int,
        remaining: int,
    ) -> Segment | None:
        candidates: list[tuple[CrossingKind, int, int]] = []
        if state.cross_interior_id is not None and state.k_min_interior_norm is not None:
            candidates.append((CrossingKind.OUTWARD, state.cross_interior_id, state.k_min_interior_norm))
        if state.cross_boundary_id is not None and state.k_max_boundary_norm is not None:
            candidates.append((CrossingKind.INWARD, state.cross_boundary_id, state.k_max_boundary_norm))

        solved: list[Segment] = []
        for kind, tick_id, k_cross in candidates:
            try:
                solution = solve_crossover(state, in_idx, out_idx, k_cross)
            except GeometryInfeasible:
                continue
            if 0 < solution.amount_in < remaining:
                solved.append(
                    Segment(
                        amount_in=solution.amount_in,
                        new_x_out=solution.new_x_out,
                        crossing=kind,
                        tick_id=tick_id,
                    )
                )

        if not solved:
            return None
        return min(solved, key=lambda segment: segment.amount_in)

    def _apply(
        self,
        store: TickStore,
        state: ConsolidatedState,
        in_idx: int,
        out_idx: int,
        segment: Segment,
    ) -> SegmentResult:
        x_out = state.x_total[out_idx]
        if segment.amount_in > 0:
            new_x_total = list(state.x_total)
            new_x_total[in_idx] += segment.amount_in
            new_x_total[out_idx] = segment.new_x_out
            deconsolidate(store, state, new_x_total, self.config)

        if segment.crossing is not None and segment.tick_id is not None:
            tick = store.get(segment.tick_id)
            tick.pinned = segment.crossing is CrossingKind.OUTWARD
            verify_tick(tick, self.config)
            logger.info(
                "tick_pin_flipped",
                tick_id=tick.tick_id,
                crossing=segment.crossing.value,
                pinned=tick.pinned,
                amount_in=segment.amount_in,
            )

        return SegmentResult(
            amount_in=segment.amount_in,
            amount_out=x_out - segment.new_x_out,
            torus=state.has_boundary,
            crossing=segment.crossing,
            flipped_tick=segment.tick_id if segment.crossing is not None else None,
        )


__all__ = ["SegmentedSwapRouter"]
