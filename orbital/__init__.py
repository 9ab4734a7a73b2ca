"""Orbital AMM - n-token sphere/torus tick pool."""

from orbital.config import DEFAULT_POOL_CONFIG, PoolConfig
from orbital.pool import OrbitalPool, get_default_pool

__version__ = "0.1.0"
__all__ = ["OrbitalPool", "PoolConfig", "DEFAULT_POOL_CONFIG", "get_default_pool", "__version__"]
