"""Tick storage and per-tick geometry."""

from orbital.ticks.geometry import (
    boundary_projection,
    orthogonal_radius,
    rests_on_boundary,
    satisfies_sphere,
    sphere_error,
    verify_tick,
)
from orbital.ticks.store import GlobalState, Tick, TickStore

__all__ = [
    "Tick",
    "GlobalState",
    "TickStore",
    "sphere_error",
    "boundary_projection",
    "orthogonal_radius",
    "satisfies_sphere",
    "rests_on_boundary",
    "verify_tick",
]
