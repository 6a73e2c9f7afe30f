import os
import random
from dataclasses import dataclass, fields, replace
from typing import Optional, Tuple

_FALSY = {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class GenerationConfig:
    seed: Optional[int] = None
    room_threshold: int = 50
    disc_radius: float = 100.0
    world_offset: Tuple[float, float] = (300.0, 300.0)
    grid: int = 4
    min_room_size: int = 8
    max_room_size: int = 35
    min_area: float = 3500.0
    timestep: float = 1.0 / 60.0
    sleep_time_threshold: float = 3.0
    idle_speed_threshold: float = 0.5
    shape_padding: float = 0.5
    max_settle_ticks: Optional[int] = 36_000
    interactive: bool = False
    incremental_selection: bool = True
    strict_triangulation: bool = False
    enable_metrics: bool = True

    def with_seed(self) -> "GenerationConfig":
        """Return a copy with a concrete seed (0 is a valid deterministic seed)."""
        if self.seed is not None:
            return self
        return replace(self, seed=random.randint(1, 1_000_000))

    @classmethod
    def from_env(cls, environ=None, **overrides) -> "GenerationConfig":
        """Build a config from LAYOUT_* environment variables, then apply overrides.

        Overrides whose value is None are ignored so CLI/HTTP callers can pass
        every optional flag straight through.
        """
        env = os.environ if environ is None else environ
        values = {}
        for env_key, (attr, conv) in _ENV_MAP.items():
            raw = env.get(env_key)
            if raw is None:
                continue
            values[attr] = conv(raw)
        known = {f.name for f in fields(cls)}
        for attr, val in overrides.items():
            if attr not in known:
                raise TypeError(f"unknown generation option: {attr}")
            if val is not None:
                values[attr] = val
        return cls(**values)


def _as_bool(raw: str) -> bool:
    return raw.strip().lower() not in _FALSY


def _as_ceiling(raw: str) -> Optional[int]:
    val = int(raw)
    return val if val > 0 else None


_ENV_MAP = {
    "LAYOUT_SEED": ("seed", int),
    "LAYOUT_ROOM_THRESHOLD": ("room_threshold", int),
    "LAYOUT_DISC_RADIUS": ("disc_radius", float),
    "LAYOUT_MIN_ROOM_SIZE": ("min_room_size", int),
    "LAYOUT_MAX_ROOM_SIZE": ("max_room_size", int),
    "LAYOUT_MIN_AREA": ("min_area", float),
    "LAYOUT_SLEEP_TIME": ("sleep_time_threshold", float),
    "LAYOUT_MAX_SETTLE_TICKS": ("max_settle_ticks", _as_ceiling),
    "LAYOUT_INTERACTIVE": ("interactive", _as_bool),
    "LAYOUT_STRICT_TRIANGULATION": ("strict_triangulation", _as_bool),
    "LAYOUT_ENABLE_METRICS": ("enable_metrics", _as_bool),
}


__all__ = ["GenerationConfig"]
