"""Orbital pool facade.

Owns the tick arena, one token ledger per token and the collected fees, and
exposes the public pool operations. Every mutating operation follows the
same sequence:

1. Validate the request (nothing touched yet).
2. Run the liquidity manager or router against ``TickStore.copy()``.
3. Debit the caller's ledgers.
4. Swap the working copy in as the live arena.
5. Credit the payouts.

A failure in steps 1-3 leaves the pool exactly as it was.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import structlog

from orbital.config import DEFAULT_POOL_CONFIG, PoolConfig
from orbital.errors import (
    InvalidTokenIndex,
    LedgerError,
    NoActiveLiquidity,
    SlippageExceeded,
    ZeroAmount,
)
from orbital.ledger import InMemoryLedger, TokenLedger
from orbital.liquidity import DepositResult, LiquidityManager, WithdrawalResult
from orbital.math.fixed_point import div, mul
from orbital.routing import RouteResult, SegmentedSwapRouter
from orbital.ticks.geometry import rests_on_boundary, satisfies_sphere
from orbital.ticks.store import GlobalState, TickStore

logger = structlog.get_logger()


@dataclass(frozen=True)
class TickInfo:
    """Read-only snapshot of one tick."""

    tick_id: int
    r: int
    k: int
    reserves: tuple[int, ...]
    pinned: bool
    on_boundary: bool
    total_shares: int
    shares: dict[str, int]


class OrbitalPool:
    """An n-token orbital AMM pool.

    Args:
        config: Pool configuration
        ledgers: One ledger per token; defaults to empty in-memory ledgers
    """

    def __init__(
        self,
        config: PoolConfig = DEFAULT_POOL_CONFIG,
        ledgers: Sequence[TokenLedger] | None = None,
    ) -> None:
        if ledgers is None:
            ledgers = [InMemoryLedger() for _ in range(config.token_count)]
        if len(ledgers) != config.token_count:
            raise ValueError(f"Expected {config.token_count} ledgers, got {len(ledgers)}")

        self.config = config
        self.ticks = TickStore(config.token_count)
        self.ledgers: list[TokenLedger] = list(ledgers)
        self.collected_fees: list[int] = [0] * config.token_count
        self._liquidity = LiquidityManager(config)
        self._router = SegmentedSwapRouter(config)

    @property
    def token_count(self) -> int:
        return self.config.token_count

    # =========================================================================
    # Liquidity
    # =========================================================================

    def create_tick(self, r: int, k: int) -> int:
        """Allocate an empty tick with radius ``r`` and boundary ``k``."""
        return self.ticks.create_tick(r, k)

    def add_liquidity(self, tick_id: int, amounts: Sequence[int], owner: str) -> DepositResult:
        """Deposit into a tick, pulling the required amounts from ``owner``.

        Returns:
            DepositResult with the minted shares and the amounts actually pulled
        """
        working = self.ticks.copy()
        result = self._liquidity.add_liquidity(working, tick_id, amounts, owner)
        self._debit_all(owner, result.amounts)
        self.ticks = working
        return result

    def remove_liquidity(self, tick_id: int, shares: int, owner: str) -> WithdrawalResult:
        """Burn ``owner``'s shares and pay the withdrawn reserves out to them."""
        working = self.ticks.copy()
        result = self._liquidity.remove_liquidity(working, tick_id, shares, owner)
        self.ticks = working
        for token, amount in enumerate(result.amounts):
            if amount > 0:
                self.ledgers[token].credit(owner, amount)
        return result

    # =========================================================================
    # Swaps
    # =========================================================================

    def quote(self, in_idx: int, amount_in: int, out_idx: int) -> RouteResult:
        """Route a swap on a throwaway copy of the arena.

        The returned RouteResult reports the post-fee input that reached the
        curve; nothing in the pool or its ledgers changes.
        """
        self._check_pair(in_idx, out_idx)
        net_in, _ = self._split_fee(amount_in)
        return self._router.route(self.ticks.copy(), in_idx, net_in, out_idx)

    def swap(
        self,
        in_idx: int,
        amount_in: int,
        out_idx: int,
        min_amount_out: int,
        trader: str,
    ) -> int:
        """Swap ``amount_in`` of token ``in_idx`` for token ``out_idx``.

        Raises:
            InvalidTokenIndex: If an index is out of range or in_idx == out_idx
            ZeroAmount: If amount_in is not positive, or nothing is left after the fee
            SlippageExceeded: If the output is below ``min_amount_out``
            GeometryInfeasible: If the trade cannot be solved
            SegmentsExhausted: If the swap needs more than max_segments segments
            LedgerError: If the trader cannot pay ``amount_in``
        """
        self._check_pair(in_idx, out_idx)
        net_in, fee = self._split_fee(amount_in)

        working = self.ticks.copy()
        route = self._router.route(working, in_idx, net_in, out_idx)
        if route.amount_out < min_amount_out:
            raise SlippageExceeded(f"Output {route.amount_out} is below minimum {min_amount_out}")

        self.ledgers[in_idx].debit(trader, amount_in)
        self.ticks = working
        self.collected_fees[in_idx] += fee
        self.ledgers[out_idx].credit(trader, route.amount_out)

        logger.info(
            "swap_executed",
            trader=trader,
            in_idx=in_idx,
            out_idx=out_idx,
            amount_in=amount_in,
            fee=fee,
            amount_out=route.amount_out,
            segments=len(route.segments),
            flipped_ticks=route.flipped_ticks,
        )
        return route.amount_out

    # =========================================================================
    # Views
    # =========================================================================

    def get_tick_info(self, tick_id: int) -> TickInfo:
        tick = self.ticks.get(tick_id)
        return TickInfo(
            tick_id=tick.tick_id,
            r=tick.r,
            k=tick.k,
            reserves=tuple(tick.reserves),
            pinned=tick.pinned,
            on_boundary=rests_on_boundary(tick, self.config.boundary_tolerance),
            total_shares=tick.total_shares,
            shares=dict(tick.shares),
        )

    def get_global_state(self) -> GlobalState:
        return self.ticks.global_state()

    def check_invariant(self, tick_id: int) -> bool:
        """True when the tick satisfies its sphere invariant within epsilon."""
        return satisfies_sphere(self.ticks.get(tick_id), self.config.epsilon)

    def is_on_boundary(self, tick_id: int) -> bool:
        return rests_on_boundary(self.ticks.get(tick_id), self.config.boundary_tolerance)

    def is_pinned(self, tick_id: int) -> bool:
        return self.ticks.get(tick_id).pinned

    def get_price(self, a: int, b: int) -> int:
        """Marginal price of token ``a`` in units of token ``b``.

        Read off the largest active tick's own sphere: (r - x_a) / (r - x_b).

        Raises:
            InvalidTokenIndex: If either index is out of range
            NoActiveLiquidity: If no tick holds liquidity
        """
        self._check_index(a)
        self._check_index(b)
        largest = max(self.ticks.active_ticks(), key=lambda tick: tick.r, default=None)
        if largest is None:
            raise NoActiveLiquidity("No active tick to price against")
        return div(largest.r - largest.reserves[a], largest.r - largest.reserves[b])

    # =========================================================================
    # Helpers
    # =========================================================================

    def _check_index(self, idx: int) -> None:
        if not 0 <= idx < self.token_count:
            raise InvalidTokenIndex(f"Token index {idx} outside [0, {self.token_count})")

    def _check_pair(self, in_idx: int, out_idx: int) -> None:
        self._check_index(in_idx)
        self._check_index(out_idx)
        if in_idx == out_idx:
            raise InvalidTokenIndex(f"Input and output token are both {in_idx}")

    def _split_fee(self, amount_in: int) -> tuple[int, int]:
        if amount_in <= 0:
            raise ZeroAmount(f"Swap amount must be positive, got {amount_in}")
        fee = mul(amount_in, self.config.fee)
        net_in = amount_in - fee
        if net_in <= 0:
            raise ZeroAmount(f"Nothing left of {amount_in} after a fee of {fee}")
        return net_in, fee

    def _debit_all(self, owner: str, amounts: Sequence[int]) -> None:
        """Debit every token or none: refund earlier debits if one fails."""
        debited: list[tuple[int, int]] = []
        try:
            for token, amount in enumerate(amounts):
                if amount > 0:
                    self.ledgers[token].debit(owner, amount)
                    debited.append((token, amount))
        except LedgerError:
            for token, amount in debited:
                self.ledgers[token].credit(owner, amount)
            logger.warning("deposit_debit_failed", owner=owner, refunded=len(debited))
            raise


def _create_default_pool() -> OrbitalPool:
    config = PoolConfig.from_env()
    logger.info("default_pool_created", token_count=config.token_count, fee=config.fee)
    return OrbitalPool(config)


default_pool = _create_default_pool()


def get_default_pool() -> OrbitalPool:
    """Process-wide pool configured from the environment at import time."""
    return default_pool


__all__ = ["TickInfo", "OrbitalPool", "get_default_pool"]
