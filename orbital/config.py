"""Pool configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass

from orbital.constants import (
    BOUNDARY_TOLERANCE,
    CROSSING_TOLERANCE,
    DEFAULT_TOKEN_COUNT,
    EPSILON,
    MAX_SEGMENTS,
    ONE,
)
from orbital.math.fixed_point import from_decimal


@dataclass(frozen=True)
class PoolConfig:
    """Centralized configuration for one orbital pool.

    Holding every tolerance in one place keeps the checks in the liquidity
    manager, router and deconsolidation step consistent, and makes it easy to
    test with different settings.

    Attributes:
        token_count: Number of tokens traded by the pool (n)
        fee: Flat proportional swap fee, fixed-point (0.003 * ONE = 0.3%)
        epsilon: Sphere invariant tolerance
        boundary_tolerance: Tolerance on dot(x, v) == k for pinned ticks
        crossing_tolerance: Tolerance on normalized projections when detecting crossings
        max_segments: Maximum segments a single swap may be split into
    """

    token_count: int = DEFAULT_TOKEN_COUNT
    fee: int = 0
    epsilon: int = EPSILON
    boundary_tolerance: int = BOUNDARY_TOLERANCE
    crossing_tolerance: int = CROSSING_TOLERANCE
    max_segments: int = MAX_SEGMENTS

    def __post_init__(self) -> None:
        if self.token_count < 2:
            raise ValueError(f"token_count must be at least 2, got {self.token_count}")
        if not 0 <= self.fee < ONE:
            raise ValueError(f"fee must be in [0, 1), got {self.fee}")
        if self.max_segments < 1:
            raise ValueError(f"max_segments must be positive, got {self.max_segments}")

    @classmethod
    def from_env(cls) -> PoolConfig:
        """Build a config from environment variables.

        - ORBITAL_TOKEN_COUNT: number of tokens (default: 3)
        - ORBITAL_FEE: swap fee as a decimal fraction, e.g. "0.003" (default: 0)
        - ORBITAL_MAX_SEGMENTS: segment cap per swap (default: 64)
        """
        return cls(
            token_count=int(os.environ.get("ORBITAL_TOKEN_COUNT", str(DEFAULT_TOKEN_COUNT))),
            fee=from_decimal(os.environ.get("ORBITAL_FEE", "0")),
            max_segments=int(os.environ.get("ORBITAL_MAX_SEGMENTS", str(MAX_SEGMENTS))),
        )


# Default configuration instance
DEFAULT_POOL_CONFIG = PoolConfig()
