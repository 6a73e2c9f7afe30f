"""Corridor graph: triangulation edges weighted by squared center distance,
reduced to a minimum spanning tree with Prim's algorithm."""
from __future__ import annotations

from typing import Hashable, Iterator, List, NamedTuple, Protocol, Sequence, Tuple

import networkx as nx

from .rooms import Room, distance_sq
from .triangulation import Triangulation, triangulation_edges


class SpanningEdge(NamedTuple):
    a: int
    b: int
    weight: float


class GraphMST(Protocol):
    def add_node(self, node: Hashable) -> None: ...

    def add_edge(self, a: Hashable, b: Hashable, weight: float) -> None: ...

    def minimum_spanning_edges(self) -> Iterator[Tuple[Hashable, Hashable, float]]: ...


class NetworkxMST:
    def __init__(self):
        self.graph = nx.Graph()

    def add_node(self, node):
        self.graph.add_node(node)

    def add_edge(self, a, b, weight):
        self.graph.add_edge(a, b, weight=weight)

    def minimum_spanning_edges(self):
        for a, b, data in nx.minimum_spanning_edges(self.graph, algorithm="prim", weight="weight", data=True):
            yield a, b, data["weight"]


def build_graph(rooms: Sequence[Room], triangulation: Triangulation, mst: GraphMST) -> GraphMST:
    """Load room ids as nodes and triangulation edges as weighted edges.

    ``rooms`` must be the same ordered sequence that was triangulated, since
    triangulation indices refer to positions in it.
    """
    for room in rooms:
        mst.add_node(room.id)
    for i, j in triangulation_edges(triangulation):
        p, q = rooms[i], rooms[j]
        mst.add_edge(p.id, q.id, distance_sq(p.center, q.center))
    return mst


def spanning_tree(rooms: Sequence[Room], triangulation: Triangulation, mst: GraphMST | None = None) -> List[SpanningEdge]:
    mst = build_graph(rooms, triangulation, mst if mst is not None else NetworkxMST())
    edges = []
    for a, b, w in mst.minimum_spanning_edges():
        if a > b:
            a, b = b, a
        edges.append(SpanningEdge(a, b, w))
    edges.sort()
    return edges


def total_weight(edges: Sequence[SpanningEdge]) -> float:
    return sum(e.weight for e in edges)


__all__ = ["SpanningEdge", "GraphMST", "NetworkxMST", "build_graph", "spanning_tree", "total_weight"]
