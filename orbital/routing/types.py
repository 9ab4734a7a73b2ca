"""Type definitions for the routing module."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class CrossingKind(str, Enum):
    """Direction in which a segment crosses a tick boundary."""

    OUTWARD = "outward"  # interior tick becomes pinned
    INWARD = "inward"  # pinned tick returns to the interior


@dataclass(frozen=True)
class Segment:
    """A solved but not yet applied sub-trade.

    ``crossing`` and ``tick_id`` are set when the segment ends exactly on a
    tick boundary and the tick's pinned flag must flip afterwards.
    """

    amount_in: int
    new_x_out: int
    crossing: CrossingKind | None = None
    tick_id: int | None = None


@dataclass
class SegmentResult:
    """Result of one applied segment of a swap."""

    amount_in: int
    amount_out: int
    torus: bool  # solved against the torus (pinned ticks present)
    crossing: CrossingKind | None = None
    flipped_tick: int | None = None


@dataclass
class RouteResult:
    """Result of routing a whole swap through the pool."""

    in_idx: int
    out_idx: int
    amount_in: int
    amount_out: int
    segments: list[SegmentResult] = field(default_factory=list)

    @property
    def flipped_ticks(self) -> list[int]:
        """Ticks whose pinned flag changed, in order."""
        return [s.flipped_tick for s in self.segments if s.flipped_tick is not None]


__all__ = ["CrossingKind", "Segment", "SegmentResult", "RouteResult"]
