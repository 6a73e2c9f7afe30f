"""Generation state and the phase state machine."""
from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .graph import SpanningEdge
from .rooms import Room
from .scatter import roundm
from .triangulation import Triangulation, triangulation_edges


class Phase(str, Enum):
    SCATTERING = "scattering"
    AWAIT_CONFIRM_1 = "await_confirm_1"
    SETTLING = "settling"
    SELECTING = "selecting"
    AWAIT_CONFIRM_2 = "await_confirm_2"
    TRIANGULATING = "triangulating"
    AWAIT_CONFIRM_3 = "await_confirm_3"
    BUILDING_GRAPH = "building_graph"
    DONE = "done"

    @property
    def awaiting(self) -> bool:
        return self in AWAIT_PHASES


PHASE_ORDER: Tuple[Phase, ...] = tuple(Phase)
AWAIT_PHASES = frozenset({Phase.AWAIT_CONFIRM_1, Phase.AWAIT_CONFIRM_2, Phase.AWAIT_CONFIRM_3})


def next_phase(phase: Phase, interactive: bool = False) -> Phase:
    """The single forward transition; confirmation gates vanish when not interactive."""
    if phase is Phase.DONE:
        return Phase.DONE
    idx = PHASE_ORDER.index(phase) + 1
    while not interactive and PHASE_ORDER[idx] in AWAIT_PHASES:
        idx += 1
    return PHASE_ORDER[idx]


@dataclass
class GenerationState:
    seed: Optional[int] = None
    rooms: List[Room] = field(default_factory=list)
    selected_rooms: Optional[Tuple[Room, ...]] = None
    triangulation: Optional[Triangulation] = None
    spanning_tree: Optional[List[SpanningEdge]] = None
    phase: Phase = Phase.SCATTERING
    tick: int = 0
    phase_ticks: Dict[str, int] = field(default_factory=dict)
    metrics: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        self._ids = itertools.count(1)

    def next_room_id(self) -> int:
        return next(self._ids)

    @property
    def done(self) -> bool:
        return self.phase is Phase.DONE

    def room_by_id(self, room_id: int) -> Optional[Room]:
        for room in self.rooms:
            if room.id == room_id:
                return room
        return None


def _room_status(room: Room) -> str:
    if room.selected:
        return "selected"
    return "sleeping" if room.sleeping else "moving"


def room_to_dict(room: Room, grid: int = 4) -> Dict[str, Any]:
    (x1, y1), (x2, y2) = room.bounding_box
    x, y = room.position
    return {
        "id": room.id,
        "position": [x, y],
        "display_position": [roundm(x, grid), roundm(y, grid)],
        "width": room.width,
        "height": room.height,
        "bounding_box": [x1, y1, x2, y2],
        "area": room.area,
        "selected": room.selected,
        "sleeping": room.sleeping,
        "status": _room_status(room),
    }


def snapshot(state: GenerationState, grid: int = 4) -> Dict[str, Any]:
    """JSON-serialisable, read-only view of the state for presentation."""
    tri_edges = None
    if state.triangulation is not None and state.selected_rooms is not None:
        sel = state.selected_rooms
        tri_edges = [[sel[i].id, sel[j].id] for i, j in triangulation_edges(state.triangulation)]
    tree = None
    if state.spanning_tree is not None:
        tree = [[e.a, e.b, e.weight] for e in state.spanning_tree]
    return {
        "seed": state.seed,
        "phase": state.phase.value,
        "awaiting_confirmation": state.phase.awaiting,
        "done": state.done,
        "tick": state.tick,
        "phase_ticks": dict(state.phase_ticks),
        "rooms": [room_to_dict(r, grid) for r in state.rooms],
        "selected_room_ids": None if state.selected_rooms is None else [r.id for r in state.selected_rooms],
        "triangulation": None if state.triangulation is None else {
            "triangles": state.triangulation.triangle_count,
            "failed": state.triangulation.failed,
            "edges": tri_edges,
        },
        "spanning_tree": tree,
        "metrics": dict(state.metrics),
    }


__all__ = ["Phase", "PHASE_ORDER", "AWAIT_PHASES", "next_phase", "GenerationState", "snapshot", "room_to_dict"]
