"""Triangulation adapter.

Selected room centers go in, a half-edge triangulation comes out:

* ``triangles``: flat list of point indices, three per triangle (CCW).
* ``half_edges``: for each slot ``i`` the opposite slot in the neighbouring
  triangle, or ``-1`` when the edge lies on the hull.

Slot ``i`` is the directed edge ``triangles[i] -> triangles[next_half_edge(i)]``.
Edges are read back with the ``i > half_edges[i]`` rule: an interior edge is
emitted from the higher of its two slots, a hull edge from its only slot.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Protocol, Sequence, Tuple

import numpy as np
from scipy.spatial import Delaunay, QhullError

from ..logging_utils import get_logger
from .errors import TriangulationError
from .rooms import Point, Room

HULL = -1

log = get_logger("layoutgen.triangulation")


@dataclass(frozen=True)
class Triangulation:
    points: Tuple[Point, ...] = ()
    triangles: Tuple[int, ...] = ()
    half_edges: Tuple[int, ...] = ()
    failed: bool = field(default=False, compare=False)

    @property
    def triangle_count(self) -> int:
        return len(self.triangles) // 3

    def is_empty(self) -> bool:
        return not self.triangles


class Triangulator(Protocol):
    def triangulate(self, points: Sequence[Point]) -> Triangulation: ...


def next_half_edge(e: int) -> int:
    return e - 2 if e % 3 == 2 else e + 1


def triangulation_edges(t: Triangulation) -> Iterator[Tuple[int, int]]:
    """Yield each undirected edge once as a pair of point indices."""
    ts = t.triangles
    for i, h in enumerate(t.half_edges):
        if i > h:
            yield ts[i], ts[next_half_edge(i)]


def hull_edges(t: Triangulation) -> List[Tuple[int, int]]:
    ts = t.triangles
    return [(ts[i], ts[next_half_edge(i)]) for i, h in enumerate(t.half_edges) if h == HULL]


def link_half_edges(triangles: Sequence[int]) -> List[int]:
    """Pair every directed slot with its reverse slot, HULL when there is none."""
    slots: Dict[Tuple[int, int], int] = {}
    for i in range(len(triangles)):
        slots[(triangles[i], triangles[next_half_edge(i)])] = i
    out = []
    for i in range(len(triangles)):
        out.append(slots.get((triangles[next_half_edge(i)], triangles[i]), HULL))
    return out


class ScipyTriangulator:
    """Delaunay triangulation via Qhull, re-expressed as half-edges."""

    def triangulate(self, points: Sequence[Point]) -> Triangulation:
        pts = tuple((float(x), float(y)) for x, y in points)
        try:
            tri = Delaunay(np.asarray(pts, dtype=float))
        except (QhullError, ValueError) as exc:
            raise TriangulationError(str(exc).splitlines()[0] if str(exc) else repr(exc)) from exc
        triangles: List[int] = []
        for a, b, c in tri.simplices.tolist():
            (ax, ay), (bx, by), (cx, cy) = pts[a], pts[b], pts[c]
            cross = (bx - ax) * (cy - ay) - (by - ay) * (cx - ax)
            if cross == 0:
                continue
            if cross < 0:
                b, c = c, b
            triangles.extend((a, b, c))
        return Triangulation(pts, tuple(triangles), tuple(link_half_edges(triangles)))


def room_points(rooms: Sequence[Room]) -> List[Point]:
    return [room.center for room in rooms]


def triangulate_rooms(rooms: Sequence[Room], triangulator: Triangulator, strict: bool = False) -> Triangulation:
    """Triangulate the centers of ``rooms`` (in order).

    Fewer than three rooms never reach the service. A service failure is
    re-raised when ``strict``; otherwise it degrades to an empty triangulation.
    """
    points = room_points(rooms)
    if len(points) < 3:
        return Triangulation(points=tuple(points))
    try:
        return triangulator.triangulate(points)
    except TriangulationError as exc:
        if strict:
            raise
        log.warn(event="triangulation_failed", points=len(points), error=str(exc))
        return Triangulation(points=tuple(points), failed=True)


__all__ = [
    "HULL",
    "Triangulation",
    "Triangulator",
    "ScipyTriangulator",
    "next_half_edge",
    "triangulation_edges",
    "hull_edges",
    "link_half_edges",
    "room_points",
    "triangulate_rooms",
]
