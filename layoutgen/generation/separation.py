"""Separation phase: step the physics world until every room is asleep."""
from __future__ import annotations

from typing import Optional

from .errors import SettleTimeoutError

DEFAULT_TIMESTEP = 1.0 / 60.0


def advance(state, physics, dt: float = DEFAULT_TIMESTEP) -> None:
    """Advance the simulation one fixed step and sync room positions from it."""
    physics.step(dt)
    for room in state.rooms:
        room.position = physics.position(room.body)
        room.sleeping = bool(physics.is_sleeping(room.body))


def all_settled(state, physics) -> bool:
    """True only when every room is sleeping at the same time."""
    return all(physics.is_sleeping(room.body) for room in state.rooms)


def moving_count(state, physics) -> int:
    return sum(1 for room in state.rooms if not physics.is_sleeping(room.body))


def check_ceiling(state, physics, settle_ticks: int, max_settle_ticks: Optional[int]) -> None:
    """Raise SettleTimeoutError once ``settle_ticks`` exceeds the ceiling."""
    if max_settle_ticks is None or settle_ticks <= max_settle_ticks:
        return
    raise SettleTimeoutError(settle_ticks, moving_count(state, physics))


__all__ = ["advance", "all_settled", "moving_count", "check_ceiling", "DEFAULT_TIMESTEP"]
