"""Tests for per-tick sphere geometry and invariant checks."""

import pytest

from orbital.config import PoolConfig
from orbital.constants import EPSILON, ONE
from orbital.errors import BoundaryExceeded, NegativeReserve, PinnedOffBoundary, SphereInvariantViolated
from orbital.math import mul, sqrt_n
from orbital.ticks import (
    Tick,
    boundary_projection,
    orthogonal_radius,
    rests_on_boundary,
    satisfies_sphere,
    sphere_error,
    verify_tick,
)


def make_tick(reserves, r=5 * ONE, k=0, pinned=False, total_shares=ONE):
    """Tick on the 2-token sphere of radius 5 by default ((5-2)^2 + (5-1)^2 = 25)."""
    return Tick(tick_id=0, r=r, k=k, reserves=list(reserves), pinned=pinned, total_shares=total_shares)


ON_SPHERE = [2 * ONE, ONE]


class TestSphereError:
    """Tests for the sphere residual."""

    def test_exact_point(self):
        """A 3-4-5 point has zero residual."""
        assert sphere_error(5 * ONE, ON_SPHERE) == 0

    def test_signed_residual(self):
        """Points inside the sphere have a negative residual."""
        assert sphere_error(5 * ONE, [5 * ONE, 5 * ONE]) == -25 * ONE

    def test_satisfies_sphere(self):
        """satisfies_sphere applies the tolerance."""
        assert satisfies_sphere(make_tick(ON_SPHERE), EPSILON)
        assert not satisfies_sphere(make_tick([3 * ONE, ONE]), EPSILON)

    def test_inactive_tick_always_satisfies(self):
        """Ticks without shares are not checked."""
        assert satisfies_sphere(make_tick([0, 0], total_shares=0), EPSILON)


class TestBoundaryGeometry:
    """Tests for boundary projection and orthogonal radius."""

    def test_projection_equal_reserves(self):
        """dot(x, v) for x = (1, 1, 1) is sqrt(3)."""
        assert abs(boundary_projection([ONE, ONE, ONE]) - sqrt_n(3)) <= 10

    def test_orthogonal_radius_at_center_plane(self):
        """A plane through the sphere center cuts a circle of radius r."""
        r = 10 * ONE
        assert orthogonal_radius(r, mul(r, sqrt_n(3)), 3) == r

    def test_orthogonal_radius_outside_sphere(self):
        """A plane missing the sphere gives radius 0."""
        assert orthogonal_radius(10 * ONE, 0, 3) == 0

    def test_rests_on_boundary(self):
        """A tick whose k equals its projection rests on the boundary."""
        k = boundary_projection(ON_SPHERE)
        assert rests_on_boundary(make_tick(ON_SPHERE, k=k), 10**12)
        assert not rests_on_boundary(make_tick(ON_SPHERE, k=k + ONE), 10**12)

    def test_no_boundary_never_rests(self):
        """k = 0 ticks never rest on a boundary."""
        assert not rests_on_boundary(make_tick(ON_SPHERE), 10**12)


class TestVerifyTick:
    """Tests for post-mutation tick verification."""

    @pytest.fixture
    def config(self):
        return PoolConfig(token_count=2)

    def test_valid_interior_tick(self, config):
        """A tick on its sphere with no boundary passes."""
        verify_tick(make_tick(ON_SPHERE), config)

    def test_negative_reserve(self, config):
        """Negative reserves are rejected first."""
        with pytest.raises(NegativeReserve):
            verify_tick(make_tick([-1, ONE]), config)

    def test_off_sphere(self, config):
        """Points off the sphere are rejected."""
        with pytest.raises(SphereInvariantViolated):
            verify_tick(make_tick([3 * ONE, ONE]), config)

    def test_boundary_exceeded(self, config):
        """Projection beyond k is rejected."""
        with pytest.raises(BoundaryExceeded):
            verify_tick(make_tick(ON_SPHERE, k=ONE), config)

    def test_pinned_off_boundary(self, config):
        """Pinned ticks must sit on their plane."""
        with pytest.raises(PinnedOffBoundary):
            verify_tick(make_tick(ON_SPHERE, k=3 * ONE, pinned=True), config)

    def test_pinned_on_boundary(self, config):
        """A pinned tick exactly on its plane passes."""
        k = boundary_projection(ON_SPHERE)
        verify_tick(make_tick(ON_SPHERE, k=k, pinned=True), config)

    def test_inactive_tick_skipped(self, config):
        """Ticks without shares are not verified."""
        verify_tick(make_tick([-1, 99 * ONE], total_shares=0), config)
