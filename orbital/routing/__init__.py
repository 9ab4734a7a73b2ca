"""Swap routing through the consolidated curve.

Module structure:
- router.py: SegmentedSwapRouter, splits swaps at tick boundary crossings
- types.py: Segment, SegmentResult and RouteResult dataclasses
"""

from orbital.routing.router import SegmentedSwapRouter
from orbital.routing.types import CrossingKind, RouteResult, Segment, SegmentResult

__all__ = [
    "CrossingKind",
    "RouteResult",
    "Segment",
    "SegmentResult",
    "SegmentedSwapRouter",
]
