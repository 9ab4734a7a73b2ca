"""Tick records and the tick arena.

Ticks live in a growable list addressed by integer id. Ids are allocated
monotonically and never reused; a tick is never deleted, only reduced to
zero shares.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

import structlog

from orbital.errors import InvalidBoundary, UnknownTick, ZeroRadius
from orbital.math.fixed_point import div, mul

logger = structlog.get_logger()


@dataclass
class Tick:
    """One liquidity position on the sphere.

    Attributes:
        tick_id: Position in the arena
        r: Radius (fixed-point, > 0)
        k: Boundary parameter; 0 means interior-only
        reserves: Per-token balances, one entry per pool token
        pinned: True while the tick rests exactly on its boundary plane
        total_shares: Outstanding shares
        shares: Owner -> share amount
    """

    tick_id: int
    r: int
    k: int
    reserves: list[int]
    pinned: bool = False
    total_shares: int = 0
    shares: dict[str, int] = field(default_factory=dict)

    @property
    def is_active(self) -> bool:
        """Tick holds liquidity (has outstanding shares)."""
        return self.total_shares > 0

    @property
    def has_boundary(self) -> bool:
        """Tick carries a boundary constraint (k > 0)."""
        return self.k > 0

    @property
    def k_norm(self) -> int:
        """Normalized boundary ratio k / r."""
        return div(self.k, self.r)

    def copy(self) -> Tick:
        """Independent copy (reserves and share ledger are not shared)."""
        return Tick(
            tick_id=self.tick_id,
            r=self.r,
            k=self.k,
            reserves=list(self.reserves),
            pinned=self.pinned,
            total_shares=self.total_shares,
            shares=dict(self.shares),
        )


@dataclass(frozen=True)
class GlobalState:
    """Pool-wide totals derived from the active ticks.

    Never stored: recomputed from scratch every time it is requested.
    """

    total_reserves: tuple[int, ...]
    total_r: int
    total_r_squared: int
    active_ticks: int
    tick_count: int


class TickStore:
    """Arena of ticks for one pool.

    Args:
        token_count: Number of tokens (length of every reserve vector)
        ticks: Initial ticks (used by copy())
    """

    def __init__(self, token_count: int, ticks: list[Tick] | None = None) -> None:
        if token_count < 2:
            raise ValueError(f"A pool needs at least 2 tokens, got {token_count}")
        self.token_count = token_count
        self._ticks: list[Tick] = ticks if ticks is not None else []

    def __len__(self) -> int:
        return len(self._ticks)

    def __iter__(self) -> Iterator[Tick]:
        return iter(self._ticks)

    def create_tick(self, r: int, k: int) -> int:
        """Allocate a new empty tick and return its id.

        Raises:
            ZeroRadius: If r <= 0
            InvalidBoundary: If k < 0
        """
        if r <= 0:
            raise ZeroRadius(f"Tick radius must be positive, got {r}")
        if k < 0:
            raise InvalidBoundary(f"Tick boundary must be non-negative, got {k}")

        tick_id = len(self._ticks)
        self._ticks.append(Tick(tick_id=tick_id, r=r, k=k, reserves=[0] * self.token_count))
        logger.debug("tick_created", tick_id=tick_id, r=r, k=k)
        return tick_id

    def get(self, tick_id: int) -> Tick:
        """Look up a tick by id.

        Raises:
            UnknownTick: If the id was never allocated
        """
        if tick_id < 0 or tick_id >= len(self._ticks):
            raise UnknownTick(f"Unknown tick {tick_id}")
        return self._ticks[tick_id]

    def active_ticks(self) -> Iterator[Tick]:
        """Ticks with outstanding shares, in id order."""
        return (tick for tick in self._ticks if tick.is_active)

    def copy(self) -> TickStore:
        """Working copy for all-or-nothing operations."""
        return TickStore(self.token_count, [tick.copy() for tick in self._ticks])

    def global_state(self) -> GlobalState:
        """Recompute pool totals from the active ticks."""
        totals = [0] * self.token_count
        total_r = 0
        total_r_squared = 0
        active = 0
        for tick in self.active_ticks():
            for i, reserve in enumerate(tick.reserves):
                totals[i] += reserve
            total_r += tick.r
            total_r_squared += mul(tick.r, tick.r)
            active += 1
        return GlobalState(
            total_reserves=tuple(totals),
            total_r=total_r,
            total_r_squared=total_r_squared,
            active_ticks=active,
            tick_count=len(self._ticks),
        )


__all__ = ["Tick", "GlobalState", "TickStore"]
