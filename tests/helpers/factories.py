"""Factory functions for building pools in tests.

Usage:
    from tests.helpers import funded_pool, add_equal_tick

    pool = funded_pool()
    tick_id = add_equal_tick(pool)
"""

from orbital.config import PoolConfig
from orbital.ledger import InMemoryLedger
from orbital.pool import OrbitalPool
from tests.helpers.constants import BOUNDARY_K, DEPOSIT, FUNDING, LP, LP2, TRADER


def fund(pool: OrbitalPool, owner: str, amount: int = FUNDING) -> None:
    """Mint ``amount`` of every token to ``owner``."""
    for ledger in pool.ledgers:
        assert isinstance(ledger, InMemoryLedger)
        ledger.mint(owner, amount)


def funded_pool(config: PoolConfig | None = None) -> OrbitalPool:
    """Create a pool whose standard accounts hold FUNDING of every token.

    Args:
        config: Pool configuration (default: 3 tokens, no fee)
    """
    pool = OrbitalPool(config or PoolConfig())
    for owner in (LP, LP2, TRADER):
        fund(pool, owner)
    return pool


def add_equal_tick(
    pool: OrbitalPool,
    amount: int = DEPOSIT,
    k: int = 0,
    owner: str = LP,
) -> int:
    """Create a tick and fill it with an equal-price deposit.

    The tick is created with r = ``amount``; the first deposit recomputes r
    (and rescales k) so the deposit sits at the equal-price point.

    Returns:
        The new tick id
    """
    tick_id = pool.create_tick(amount, k)
    pool.add_liquidity(tick_id, [amount] * pool.token_count, owner)
    return tick_id


def boundary_pool() -> tuple[OrbitalPool, int, int]:
    """Funded pool with one interior tick and one bounded tick (k/r = 0.8).

    Returns:
        (pool, interior_tick_id, bounded_tick_id)
    """
    pool = funded_pool()
    interior = add_equal_tick(pool)
    bounded = add_equal_tick(pool, k=BOUNDARY_K)
    return pool, interior, bounded
