"""Physics collaborator used by the separation phase.

The pipeline only needs four capabilities (add a box, step, read a position,
read the sleep flag), captured by ``PhysicsWorld``. ``PymunkWorld`` backs it
with a Chipmunk space; tests substitute deterministic fakes.
"""
from __future__ import annotations

from typing import Any, Protocol, Tuple

import pymunk


class PhysicsWorld(Protocol):
    def add_box(self, position: Tuple[float, float], width: float, height: float,
                elasticity: float = 1.0, friction: float = 0.0) -> Any: ...

    def step(self, dt: float) -> None: ...

    def position(self, body: Any) -> Tuple[float, float]: ...

    def is_sleeping(self, body: Any) -> bool: ...


class PymunkWorld:
    """Zero-gravity Chipmunk space of non-rotating unit-mass boxes."""

    def __init__(self, sleep_time_threshold: float = 3.0, idle_speed_threshold: float = 0.5):
        self.space = pymunk.Space()
        self.space.gravity = (0.0, 0.0)
        self.space.sleep_time_threshold = sleep_time_threshold
        self.space.idle_speed_threshold = idle_speed_threshold

    @classmethod
    def from_config(cls, config) -> "PymunkWorld":
        return cls(config.sleep_time_threshold, config.idle_speed_threshold)

    def add_box(self, position, width, height, elasticity=1.0, friction=0.0):
        # Infinite moment keeps the boxes axis-aligned.
        body = pymunk.Body(1.0, float("inf"))
        body.position = position
        shape = pymunk.Poly.create_box(body, (width, height))
        shape.elasticity = elasticity
        shape.friction = friction
        self.space.add(body, shape)
        return body

    def step(self, dt: float) -> None:
        self.space.step(dt)

    def position(self, body) -> Tuple[float, float]:
        p = body.position
        return (p.x, p.y)

    def is_sleeping(self, body) -> bool:
        return body.is_sleeping


__all__ = ["PhysicsWorld", "PymunkWorld"]
