"""Tests for the liquidity manager."""

import pytest

from orbital.constants import ONE
from orbital.errors import (
    InsufficientShares,
    InvalidAmountsLength,
    OutsideTick,
    SphereInvariantViolated,
    ZeroAmount,
    ZeroShares,
)
from orbital.liquidity import LiquidityManager
from orbital.math import div, inv_sqrt_n, mul, sqrt_n
from orbital.ticks import rests_on_boundary, verify_tick
from tests.helpers import DEPOSIT, LP, LP2


@pytest.fixture
def manager(config):
    return LiquidityManager(config)


@pytest.fixture
def filled(store, manager):
    """Store with tick 0 holding an equal-price deposit from LP."""
    tick_id = store.create_tick(DEPOSIT, 0)
    manager.add_liquidity(store, tick_id, [DEPOSIT] * 3, LP)
    return store, tick_id


class TestFirstDeposit:
    """Tests for the deposit that defines a tick's radius."""

    def test_equal_deposit(self, store, manager):
        """Shares are the geometric mean and reserves equal the deposit."""
        tick_id = store.create_tick(DEPOSIT, 0)
        result = manager.add_liquidity(store, tick_id, [DEPOSIT] * 3, LP)

        tick = store.get(tick_id)
        assert result.shares == DEPOSIT
        assert result.amounts == [DEPOSIT] * 3
        assert tick.reserves == [DEPOSIT] * 3
        assert tick.total_shares == DEPOSIT
        assert tick.shares == {LP: DEPOSIT}
        assert tick.r == div(DEPOSIT, ONE - inv_sqrt_n(3))
        assert not tick.pinned

    def test_boundary_rescaled_with_radius(self, store, manager):
        """k keeps its ratio to r when the radius is recomputed."""
        tick_id = store.create_tick(DEPOSIT, 8_000 * ONE)
        manager.add_liquidity(store, tick_id, [DEPOSIT] * 3, LP)

        tick = store.get(tick_id)
        assert abs(tick.k_norm - 8 * ONE // 10) <= 10
        assert not tick.pinned

    def test_deposit_on_boundary_is_pinned(self, store, manager, config):
        """A deposit landing exactly on the plane starts pinned."""
        tick_id = store.create_tick(DEPOSIT, mul(DEPOSIT, sqrt_n(3) - ONE))
        manager.add_liquidity(store, tick_id, [DEPOSIT] * 3, LP)

        tick = store.get(tick_id)
        assert tick.pinned
        assert rests_on_boundary(tick, config.boundary_tolerance)

    def test_deposit_outside_tick(self, store, manager):
        """A deposit beyond the boundary plane is rejected."""
        tick_id = store.create_tick(DEPOSIT, 5_000 * ONE)
        with pytest.raises(OutsideTick):
            manager.add_liquidity(store, tick_id, [DEPOSIT] * 3, LP)

    def test_skewed_first_deposit_rejected(self, store, manager):
        """Only equal-price first deposits lie on the recomputed sphere."""
        tick_id = store.create_tick(DEPOSIT, 0)
        with pytest.raises(SphereInvariantViolated):
            manager.add_liquidity(store, tick_id, [DEPOSIT, DEPOSIT // 2, DEPOSIT], LP)

    def test_zero_amount_rejected(self, store, manager):
        """Every token is needed on a first deposit."""
        tick_id = store.create_tick(DEPOSIT, 0)
        with pytest.raises(ZeroAmount):
            manager.add_liquidity(store, tick_id, [DEPOSIT, 0, DEPOSIT], LP)

    def test_negative_amount_rejected(self, store, manager):
        """Negative amounts are rejected."""
        tick_id = store.create_tick(DEPOSIT, 0)
        with pytest.raises(ZeroAmount):
            manager.add_liquidity(store, tick_id, [DEPOSIT, -1, DEPOSIT], LP)

    def test_wrong_length_rejected(self, store, manager):
        """Amount vector must match the token count."""
        tick_id = store.create_tick(DEPOSIT, 0)
        with pytest.raises(InvalidAmountsLength):
            manager.add_liquidity(store, tick_id, [DEPOSIT] * 2, LP)


class TestProportionalDeposit:
    """Tests for deposits into a tick that already holds liquidity."""

    def test_proportional_shares(self, filled, manager):
        """A 10% deposit mints 10% of the outstanding shares."""
        store, tick_id = filled
        old_r = store.get(tick_id).r
        result = manager.add_liquidity(store, tick_id, [DEPOSIT // 10] * 3, LP2)

        tick = store.get(tick_id)
        assert result.shares == DEPOSIT // 10
        assert tick.reserves == [11_000 * ONE] * 3
        assert tick.r == mul(old_r, ONE + ONE // 10)
        assert tick.shares == {LP: DEPOSIT, LP2: DEPOSIT // 10}

    def test_excess_ignored(self, filled, manager):
        """Only the proportional requirement is pulled from an oversupplied token."""
        store, tick_id = filled
        result = manager.add_liquidity(store, tick_id, [1_000 * ONE, 2_000 * ONE, 1_000 * ONE], LP2)

        assert result.amounts == [1_000 * ONE] * 3
        assert store.get(tick_id).reserves == [11_000 * ONE] * 3

    def test_zero_in_one_token_mints_nothing(self, filled, manager):
        """A missing token makes the minimum ratio zero."""
        store, tick_id = filled
        with pytest.raises(ZeroShares):
            manager.add_liquidity(store, tick_id, [0, ONE, ONE], LP2)

    def test_dust_deposit_mints_nothing(self, filled, manager):
        """Deposits below one raw unit of ratio are rejected."""
        store, tick_id = filled
        with pytest.raises(ZeroShares):
            manager.add_liquidity(store, tick_id, [1, 1, 1], LP2)


class TestRemoveLiquidity:
    """Tests for withdrawals."""

    def test_round_trip(self, filled, manager):
        """Burning every share returns the original deposit."""
        store, tick_id = filled
        old_r = store.get(tick_id).r
        result = manager.remove_liquidity(store, tick_id, DEPOSIT, LP)

        tick = store.get(tick_id)
        assert result.amounts == [DEPOSIT] * 3
        assert tick.reserves == [0, 0, 0]
        assert tick.total_shares == 0
        assert tick.shares == {}
        assert tick.r == old_r

    def test_partial(self, filled, manager):
        """Burning a quarter returns a quarter of each reserve."""
        store, tick_id = filled
        result = manager.remove_liquidity(store, tick_id, DEPOSIT // 4, LP)

        tick = store.get(tick_id)
        assert result.amounts == [DEPOSIT // 4] * 3
        assert tick.reserves == [DEPOSIT * 3 // 4] * 3
        assert tick.shares[LP] == DEPOSIT * 3 // 4

    def test_redeposit_after_full_withdrawal(self, filled, manager):
        """An emptied tick accepts a new first deposit."""
        store, tick_id = filled
        manager.remove_liquidity(store, tick_id, DEPOSIT, LP)
        result = manager.add_liquidity(store, tick_id, [DEPOSIT] * 3, LP2)

        assert result.shares == DEPOSIT
        assert store.get(tick_id).shares == {LP2: DEPOSIT}

    def test_insufficient_shares(self, filled, manager):
        """Owners cannot burn more than they hold."""
        store, tick_id = filled
        with pytest.raises(InsufficientShares):
            manager.remove_liquidity(store, tick_id, ONE, LP2)

    def test_zero_shares(self, filled, manager):
        """Burning zero shares is rejected."""
        store, tick_id = filled
        with pytest.raises(ZeroAmount):
            manager.remove_liquidity(store, tick_id, 0, LP)

    def test_share_conservation(self, filled, manager):
        """Owner shares always sum to the tick total."""
        store, tick_id = filled
        manager.add_liquidity(store, tick_id, [DEPOSIT // 3] * 3, LP2)
        manager.remove_liquidity(store, tick_id, DEPOSIT // 7, LP)
        manager.remove_liquidity(store, tick_id, ONE, LP2)

        tick = store.get(tick_id)
        assert sum(tick.shares.values()) == tick.total_shares


@pytest.fixture
def pinned(store, manager):
    """Store with tick 0 deposited exactly on its boundary plane."""
    tick_id = store.create_tick(DEPOSIT, mul(DEPOSIT, sqrt_n(3) - ONE))
    manager.add_liquidity(store, tick_id, [DEPOSIT] * 3, LP)
    assert store.get(tick_id).pinned
    return store, tick_id


class TestPinnedTickLiquidity:
    """Liquidity changes on a tick resting on its boundary."""

    def test_proportional_deposit_stays_on_boundary(self, pinned, manager, config):
        """Scaling r, k and reserves together keeps dot(x, v) == k."""
        store, tick_id = pinned
        manager.add_liquidity(store, tick_id, [DEPOSIT // 2] * 3, LP2)

        tick = store.get(tick_id)
        assert tick.pinned
        assert rests_on_boundary(tick, config.boundary_tolerance)
        verify_tick(tick, config)

    def test_partial_removal_stays_on_boundary(self, pinned, manager, config):
        """A partial withdrawal shrinks the tick without leaving the plane."""
        store, tick_id = pinned
        manager.remove_liquidity(store, tick_id, DEPOSIT // 3, LP)

        tick = store.get(tick_id)
        assert tick.pinned
        assert rests_on_boundary(tick, config.boundary_tolerance)
        verify_tick(tick, config)
