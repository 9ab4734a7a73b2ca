"""Liquidity manager: deposits into and withdrawals from a single tick.

Every operation mutates only the target tick and re-verifies its own
invariants before returning. Callers run these operations against a working
copy of the tick store so a failed check discards every touched field.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import structlog

from orbital.config import DEFAULT_POOL_CONFIG, PoolConfig
from orbital.constants import ONE
from orbital.errors import (
    InsufficientShares,
    InvalidAmountsLength,
    OutsideTick,
    ZeroAmount,
    ZeroReserve,
    ZeroShares,
)
from orbital.math.fixed_point import div, geometric_mean, inv_sqrt_n, mul, mul_div
from orbital.ticks.geometry import boundary_projection, verify_tick
from orbital.ticks.store import Tick, TickStore

logger = structlog.get_logger()


@dataclass
class DepositResult:
    """Outcome of a deposit.

    ``amounts`` is what must actually be pulled from the depositor; for a
    proportional deposit it can be less than what was offered.
    """

    tick_id: int
    shares: int
    amounts: list[int]


@dataclass
class WithdrawalResult:
    """Outcome of a withdrawal: shares burned and per-token amounts returned."""

    tick_id: int
    shares: int
    amounts: list[int]


class LiquidityManager:
    """Create/add/remove operations on individual ticks.

    Args:
        config: Pool configuration (token count and tolerances)
    """

    def __init__(self, config: PoolConfig = DEFAULT_POOL_CONFIG) -> None:
        self.config = config

    def add_liquidity(
        self,
        store: TickStore,
        tick_id: int,
        amounts: Sequence[int],
        owner: str,
    ) -> DepositResult:
        """Deposit into a tick and mint shares to ``owner``.

        The first deposit defines the tick's radius; later deposits scale the
        whole tick by (1 + min_i(amounts[i] / reserves[i])).

        Raises:
            InvalidAmountsLength: If len(amounts) != token_count
            ZeroAmount: If any amount is negative, or zero on a first deposit
            ZeroReserve: If a proportional deposit meets an empty reserve
            ZeroShares: If the deposit would mint no shares
            OutsideTick: If a first deposit lies beyond the tick's boundary
            InvariantViolation: If the tick fails its post-deposit checks
        """
        if len(amounts) != store.token_count:
            raise InvalidAmountsLength(f"Expected {store.token_count} amounts, got {len(amounts)}")
        if any(amount < 0 for amount in amounts):
            raise ZeroAmount(f"Deposit amounts must be non-negative: {list(amounts)}")

        tick = store.get(tick_id)
        if tick.total_shares == 0:
            result = self._first_deposit(tick, amounts, owner)
        else:
            result = self._proportional_deposit(tick, amounts, owner)

        verify_tick(tick, self.config)
        logger.info(
            "liquidity_added",
            tick_id=tick_id,
            owner=owner,
            shares=result.shares,
            total_shares=tick.total_shares,
            r=tick.r,
            k=tick.k,
            pinned=tick.pinned,
        )
        return result

    def _first_deposit(self, tick: Tick, amounts: Sequence[int], owner: str) -> DepositResult:
        if any(amount == 0 for amount in amounts):
            raise ZeroAmount(f"First deposit needs every token, got {list(amounts)}")

        # Geometric mean keeps share value independent of the deposit's skew
        shares = geometric_mean(amounts)
        if shares == 0:
            raise ZeroShares(f"First deposit {list(amounts)} mints no shares")

        n = len(amounts)
        # Radius for which the deposit sits at the equal-price point
        new_r = div(sum(amounts) // n, ONE - inv_sqrt_n(n))
        if tick.k > 0:
            tick.k = mul_div(tick.k, new_r, tick.r)
        tick.r = new_r
        tick.reserves = list(amounts)

        if tick.k > 0:
            projection = boundary_projection(tick.reserves)
            if projection > tick.k + self.config.epsilon:
                raise OutsideTick(f"Deposit projection {projection} lies beyond boundary {tick.k}")
            tick.pinned = abs(projection - tick.k) <= self.config.boundary_tolerance
        else:
            tick.pinned = False

        tick.total_shares = shares
        tick.shares[owner] = tick.shares.get(owner, 0) + shares
        return DepositResult(tick_id=tick.tick_id, shares=shares, amounts=list(amounts))

    def _proportional_deposit(self, tick: Tick, amounts: Sequence[int], owner: str) -> DepositResult:
        if any(reserve == 0 for reserve in tick.reserves):
            raise ZeroReserve(f"Tick {tick.tick_id} has an empty reserve: {tick.reserves}")

        min_ratio = min(div(amount, reserve) for amount, reserve in zip(amounts, tick.reserves, strict=True))
        shares = mul(tick.total_shares, min_ratio)
        if min_ratio == 0 or shares == 0:
            raise ZeroShares(f"Deposit {list(amounts)} into tick {tick.tick_id} mints no shares")

        # Only the proportional requirement is pulled; any excess is left with the depositor
        scale = ONE + min_ratio
        new_reserves = [mul(reserve, scale) for reserve in tick.reserves]
        pulled = [new - old for new, old in zip(new_reserves, tick.reserves, strict=True)]

        tick.reserves = new_reserves
        tick.r = mul(tick.r, scale)
        tick.k = mul(tick.k, scale)
        tick.total_shares += shares
        tick.shares[owner] = tick.shares.get(owner, 0) + shares
        return DepositResult(tick_id=tick.tick_id, shares=shares, amounts=pulled)

    def remove_liquidity(
        self,
        store: TickStore,
        tick_id: int,
        shares: int,
        owner: str,
    ) -> WithdrawalResult:
        """Burn ``shares`` held by ``owner`` and return the withdrawn amounts.

        Reserves, r and k shrink by (1 - shares / total_shares). Burning every
        share empties the reserves but keeps r and k, so the tick's shape
        survives for a later first deposit.

        Raises:
            ZeroAmount: If shares <= 0
            InsufficientShares: If owner holds fewer than ``shares``
            InvariantViolation: If the tick fails its post-withdrawal checks
        """
        if shares <= 0:
            raise ZeroAmount(f"Shares to remove must be positive, got {shares}")

        tick = store.get(tick_id)
        held = tick.shares.get(owner, 0)
        if shares > held:
            raise InsufficientShares(f"Owner {owner} holds {held} shares of tick {tick_id}, requested {shares}")

        if shares == tick.total_shares:
            withdrawn = list(tick.reserves)
            tick.reserves = [0] * len(tick.reserves)
            tick.pinned = False
        else:
            factor = ONE - div(shares, tick.total_shares)
            new_reserves = [mul(reserve, factor) for reserve in tick.reserves]
            withdrawn = [old - new for old, new in zip(tick.reserves, new_reserves, strict=True)]
            tick.reserves = new_reserves
            tick.r = mul(tick.r, factor)
            tick.k = mul(tick.k, factor)

        tick.total_shares -= shares
        if held == shares:
            del tick.shares[owner]
        else:
            tick.shares[owner] = held - shares

        verify_tick(tick, self.config)
        logger.info(
            "liquidity_removed",
            tick_id=tick_id,
            owner=owner,
            shares=shares,
            total_shares=tick.total_shares,
            amounts=withdrawn,
        )
        return WithdrawalResult(tick_id=tick_id, shares=shares, amounts=withdrawn)


__all__ = ["DepositResult", "WithdrawalResult", "LiquidityManager"]
