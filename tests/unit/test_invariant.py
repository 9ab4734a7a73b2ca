"""Tests for the sphere, torus and crossover solvers."""

import pytest

from orbital.consolidation import aggregate
from orbital.constants import CROSSING_TOLERANCE, ONE
from orbital.errors import GeometryInfeasible, NegativeDiscriminant, NonPositiveOutput, Unbracketed
from orbital.invariant import solve_crossover, solve_sphere, solve_torus, torus_error
from orbital.math import mul
from tests.helpers import DEPOSIT, SWAP_AMOUNT, boundary_pool


@pytest.fixture
def single_state(single_tick_pool):
    pool, _ = single_tick_pool
    return aggregate(pool.ticks)


class TestSolveSphere:
    """Tests for the closed-form sphere solve."""

    def test_small_trade(self, single_state):
        """100 in returns a little less than 100 out at the equal-price point."""
        new_x_out = solve_sphere(single_state.r_int, DEPOSIT, DEPOSIT, SWAP_AMOUNT)
        amount_out = DEPOSIT - new_x_out
        assert 99 * ONE < amount_out < SWAP_AMOUNT

    def test_larger_trade_worse_rate(self, single_state):
        """Price impact grows with size."""
        r = single_state.r_int
        small = DEPOSIT - solve_sphere(r, DEPOSIT, DEPOSIT, SWAP_AMOUNT)
        large = DEPOSIT - solve_sphere(r, DEPOSIT, DEPOSIT, 10 * SWAP_AMOUNT)
        assert large < 10 * small

    def test_result_on_sphere(self, single_state):
        """The solved point satisfies the sphere invariant."""
        r = single_state.r_int
        new_x_out = solve_sphere(r, DEPOSIT, DEPOSIT, SWAP_AMOUNT)
        reserves = [DEPOSIT + SWAP_AMOUNT, new_x_out, DEPOSIT]
        residual = sum(mul(r - x, r - x) for x in reserves) - mul(r, r)
        assert abs(residual) < 10**15

    def test_oversized_trade(self, single_state):
        """A trade beyond the sphere's reach has no real solution."""
        with pytest.raises(NegativeDiscriminant):
            solve_sphere(single_state.r_int, DEPOSIT, DEPOSIT, 40_000 * ONE)

    def test_zero_trade(self, single_state):
        """No input gives no output."""
        with pytest.raises(NonPositiveOutput):
            solve_sphere(single_state.r_int, DEPOSIT, DEPOSIT, 0)


class TestSolveTorus:
    """Tests for the torus bisection."""

    def test_reduces_to_sphere(self, single_state):
        """Without pinned ticks the torus solve matches the sphere closed form."""
        torus = solve_torus(single_state, 0, 1, SWAP_AMOUNT)
        sphere = solve_sphere(single_state.r_int, DEPOSIT, DEPOSIT, SWAP_AMOUNT)
        assert abs(torus - sphere) < 10**12

    def test_residual_small_at_solution(self, single_state):
        """The returned reserve zeroes the torus residual."""
        new_x_out = solve_torus(single_state, 0, 1, SWAP_AMOUNT)
        new_x_in = DEPOSIT + SWAP_AMOUNT
        total = single_state.sum_total + SWAP_AMOUNT - (DEPOSIT - new_x_out)
        squares = mul(new_x_in, new_x_in) + mul(new_x_out, new_x_out) + mul(DEPOSIT, DEPOSIT)
        assert abs(torus_error(single_state, total, squares)) < 10**15

    def test_current_point_on_torus(self, single_state):
        """The pre-trade aggregate lies on its own curve."""
        residual = torus_error(single_state, single_state.sum_total, single_state.sum_squares_total)
        assert abs(residual) < 10**15

    def test_unbracketed(self, single_state):
        """A trade too large for the curve cannot be bracketed."""
        with pytest.raises(Unbracketed):
            solve_torus(single_state, 0, 1, 100_000 * ONE)


class TestSolveCrossover:
    """Tests for the crossover sub-trade."""

    def test_lands_on_boundary_ratio(self):
        """The sub-trade moves alpha_int / r_int exactly to the crossing ratio."""
        pool, _, bounded = boundary_pool()
        state = aggregate(pool.ticks)
        k_cross = state.k_min_interior_norm
        assert state.cross_interior_id == bounded

        solution = solve_crossover(state, 0, 1, k_cross)
        amount_out = state.x_total[1] - solution.new_x_out
        new_total = state.sum_total + solution.amount_in - amount_out

        assert 14_000 * ONE < solution.amount_in < 15_600 * ONE
        assert 0 < amount_out < solution.amount_in
        assert abs(state.interior_norm(new_total) - k_cross) <= CROSSING_TOLERANCE

    def test_crossover_point_on_sphere(self):
        """With no pinned ticks the crossover point stays on the aggregate sphere."""
        pool, _, _ = boundary_pool()
        state = aggregate(pool.ticks)
        solution = solve_crossover(state, 0, 1, state.k_min_interior_norm)

        r = state.r_int
        reserves = [state.x_total[0] + solution.amount_in, solution.new_x_out, state.x_total[2]]
        residual = sum(mul(r - x, r - x) for x in reserves) - mul(r, r)
        assert abs(residual) < 10**15

    def test_unreachable_ratio(self):
        """A ratio beyond the sphere has no crossover."""
        pool, _, _ = boundary_pool()
        state = aggregate(pool.ticks)
        with pytest.raises(GeometryInfeasible):
            solve_crossover(state, 0, 1, 3 * ONE)
