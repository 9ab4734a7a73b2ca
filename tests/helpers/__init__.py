"""Test helpers module for shared test utilities.

- constants: Account names and common amounts
- factories: Pool and tick factory functions
"""

from tests.helpers.constants import (
    BOUNDARY_K,
    BOUNDARY_SWAP,
    DEPOSIT,
    FUNDING,
    LP,
    LP2,
    SWAP_AMOUNT,
    TRADER,
)
from tests.helpers.factories import add_equal_tick, boundary_pool, fund, funded_pool

__all__ = [
    # Constants
    "LP",
    "LP2",
    "TRADER",
    "FUNDING",
    "DEPOSIT",
    "SWAP_AMOUNT",
    "BOUNDARY_K",
    "BOUNDARY_SWAP",
    # Factories
    "fund",
    "funded_pool",
    "add_equal_tick",
    "boundary_pool",
]
