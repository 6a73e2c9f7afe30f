from typing import Iterable, List, Optional

from .rooms import Room

DEFAULT_MIN_AREA = 3500.0


def select_one(rooms: Iterable[Room], min_area: float = DEFAULT_MIN_AREA) -> Optional[Room]:
    """Mark the first unselected room larger than ``min_area``.

    Returns the newly selected room, or None once a full pass finds nothing,
    which is the signal that selection is complete.
    """
    for room in rooms:
        if room.selected:
            continue
        if room.area > min_area:
            room.selected = True
            return room
    return None


def select_all(rooms: Iterable[Room], min_area: float = DEFAULT_MIN_AREA) -> List[Room]:
    """Batch form of select_one; returns the rooms it newly marked, in order."""
    picked = []
    for room in rooms:
        if not room.selected and room.area > min_area:
            room.selected = True
            picked.append(room)
    return picked


def selected_subsequence(rooms: Iterable[Room]) -> List[Room]:
    return [r for r in rooms if r.selected]


__all__ = ["select_one", "select_all", "selected_subsequence", "DEFAULT_MIN_AREA"]
