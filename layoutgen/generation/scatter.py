"""Scatter phase: random room placement inside a disc, snapped to the grid."""
from __future__ import annotations

import math
import random
from typing import Tuple

from .rooms import Point, Room, new_room


def roundm(n: float, m: float) -> float:
    """Round ``n`` up to the next multiple of ``m``."""
    return math.floor((n + m - 1.0) / m) * m


def sample_point_in_disc(
    radius: float,
    rng: random.Random | None = None,
    grid: int = 4,
    offset: Tuple[float, float] = (300.0, 300.0),
) -> Point:
    """Uniform point in a disc of ``radius`` around the origin, then offset.

    The radial fraction folds the sum of two uniform draws (u <= 1 -> u,
    else 2 - u), which keeps the triangular distribution the layouts are tuned for.
    """
    rng = rng or random
    t = 2.0 * math.pi * rng.random()
    u = rng.random() + rng.random()
    r = 2.0 - u if u > 1.0 else u
    ox, oy = offset
    return (
        roundm(radius * r * math.cos(t), grid) + ox,
        roundm(radius * r * math.sin(t), grid) + oy,
    )


def sample_room_size(rng: random.Random | None = None, min_size: int = 8, max_size: int = 35, grid: int = 4) -> Tuple[float, float]:
    rng = rng or random
    w = roundm(float(rng.randint(min_size, max_size)), grid) * 2.0
    h = roundm(float(rng.randint(min_size, max_size)), grid) * 2.0
    return w, h


def scatter_room(state, config, rng: random.Random, physics) -> Room:
    """Sample one room and append it to ``state.rooms``."""
    pos = sample_point_in_disc(config.disc_radius, rng, config.grid, config.world_offset)
    w, h = sample_room_size(rng, config.min_room_size, config.max_room_size, config.grid)
    return new_room(state, pos, w, h, physics, padding=config.shape_padding)


def scatter_complete(state, config) -> bool:
    return len(state.rooms) > config.room_threshold


__all__ = ["roundm", "sample_point_in_disc", "sample_room_size", "scatter_room", "scatter_complete"]
