from layoutgen.generation.graph import NetworkxMST, SpanningEdge, build_graph, spanning_tree, total_weight
from layoutgen.generation.rooms import distance_sq
from layoutgen.generation.triangulation import ScipyTriangulator, Triangulation, link_half_edges
from tests.layout_test_utils import make_room


def _triangulation(rooms, triangles):
    return Triangulation(tuple(r.center for r in rooms), tuple(triangles), tuple(link_half_edges(triangles)))


def test_square_tree_drops_the_diagonal():
    rooms = [
        make_room(1, (0.0, 0.0)),
        make_room(2, (100.0, 0.0)),
        make_room(3, (100.0, 100.0)),
        make_room(4, (0.0, 100.0)),
    ]
    tri = _triangulation(rooms, (0, 1, 2, 0, 2, 3))
    mst = build_graph(rooms, tri, NetworkxMST())
    assert mst.graph.number_of_nodes() == 4
    assert mst.graph.number_of_edges() == 5
    tree = spanning_tree(rooms, tri)
    assert len(tree) == 3
    assert SpanningEdge(1, 3, 20000.0) not in tree
    assert total_weight(tree) == 30000.0


def test_triangle_tree_excludes_longest_edge():
    rooms = [make_room(1, (0.0, 0.0)), make_room(2, (100.0, 0.0)), make_room(3, (50.0, 100.0))]
    tri = ScipyTriangulator().triangulate([r.center for r in rooms])
    tree = spanning_tree(rooms, tri)
    assert len(tree) == 2
    assert SpanningEdge(1, 2, 10000.0) in tree
    assert total_weight(tree) == 22500.0
    for edge in tree:
        assert edge.a < edge.b


def test_weights_are_squared_center_distances():
    rooms = [make_room(5, (10.0, 20.0)), make_room(9, (40.0, 60.0)), make_room(2, (90.0, 0.0))]
    tri = ScipyTriangulator().triangulate([r.center for r in rooms])
    by_id = {r.id: r for r in rooms}
    for edge in spanning_tree(rooms, tri):
        assert edge.weight == distance_sq(by_id[edge.a].center, by_id[edge.b].center)


def test_empty_triangulation_gives_empty_tree():
    assert spanning_tree([], Triangulation()) == []
    rooms = [make_room(1, (0.0, 0.0)), make_room(2, (30.0, 0.0))]
    assert spanning_tree(rooms, Triangulation(points=tuple(r.center for r in rooms))) == []


def test_square_with_both_diagonals_keeps_only_sides():
    rooms = [
        make_room(1, (0.0, 0.0)),
        make_room(2, (100.0, 0.0)),
        make_room(3, (100.0, 100.0)),
        make_room(4, (0.0, 100.0)),
    ]
    mst = NetworkxMST()
    for room in rooms:
        mst.add_node(room.id)
    for i, p in enumerate(rooms):
        for q in rooms[i + 1:]:
            mst.add_edge(p.id, q.id, distance_sq(p.center, q.center))
    assert mst.graph.number_of_edges() == 6
    tree = sorted(tuple(sorted((a, b))) + (w,) for a, b, w in mst.minimum_spanning_edges())
    pairs = {(a, b) for a, b, _ in tree}
    assert len(tree) == 3
    assert (1, 3) not in pairs
    assert (2, 4) not in pairs
    assert sum(w for _, _, w in tree) == 30000.0
