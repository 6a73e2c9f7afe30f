from dataclasses import dataclass, field
from typing import Any, Tuple

Point = Tuple[float, float]

# Rooms bounce apart but never drag on each other.
ROOM_ELASTICITY = 1.0
ROOM_FRICTION = 0.0


@dataclass(eq=False)
class Room:
    id: int
    width: float
    height: float
    position: Point
    selected: bool = False
    sleeping: bool = False
    body: Any = field(default=None, repr=False)

    @property
    def half_extents(self) -> Point:
        return (self.width / 2.0, self.height / 2.0)

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def center(self) -> Point:
        return center(self)

    @property
    def bounding_box(self) -> Tuple[Point, Point]:
        return bounding_box(self)


def bounding_box(room: Room) -> Tuple[Point, Point]:
    """Return ((min_x, min_y), (max_x, max_y)) from the current position."""
    x, y = room.position
    hw, hh = room.half_extents
    return (x - hw, y - hh), (x + hw, y + hh)


def center(room: Room) -> Point:
    (x1, y1), (x2, y2) = bounding_box(room)
    return ((x1 + x2) / 2.0, (y1 + y2) / 2.0)


def distance_sq(a: Point, b: Point) -> float:
    dx = a[0] - b[0]
    dy = a[1] - b[1]
    return dx * dx + dy * dy


def new_room(state, position: Point, width: float, height: float, physics, padding: float = 0.5) -> Room:
    """Create a room with a fresh id and register its body with the physics world.

    The physics box is `padding` units larger on each axis than the room so that
    rooms which merely touch are still pushed apart. The room is appended to
    ``state.rooms``.
    """
    body = physics.add_box(
        position,
        width + padding,
        height + padding,
        elasticity=ROOM_ELASTICITY,
        friction=ROOM_FRICTION,
    )
    room = Room(
        id=state.next_room_id(),
        width=float(width),
        height=float(height),
        position=(float(position[0]), float(position[1])),
        body=body,
    )
    state.rooms.append(room)
    return room


__all__ = ["Room", "Point", "new_room", "bounding_box", "center", "distance_sq"]
