"""Pytest configuration and fixtures."""

import pytest

from orbital.config import PoolConfig
from orbital.pool import OrbitalPool
from orbital.ticks.store import TickStore
from tests.helpers import add_equal_tick, funded_pool


@pytest.fixture
def config() -> PoolConfig:
    """Default 3-token, zero-fee configuration."""
    return PoolConfig()


@pytest.fixture
def store() -> TickStore:
    """Empty 3-token tick arena."""
    return TickStore(3)


@pytest.fixture
def pool() -> OrbitalPool:
    """Pool with funded LP and trader accounts but no ticks."""
    return funded_pool()


@pytest.fixture
def single_tick_pool(pool: OrbitalPool) -> tuple[OrbitalPool, int]:
    """Pool holding one interior tick with an equal-price 10000/10000/10000 deposit."""
    return pool, add_equal_tick(pool)
