import pytest

from meshgraph.entities import (
    ArcKey,
    ArityNonUniform,
    ByIndex,
    TopologyConflict,
    TopologyMalformed,
    TopologyNotFound,
    VertexKey,
)
from meshgraph.face_ops import FaceInsertCache, insert_face
from meshgraph.mutation import Mutation
from meshgraph.views import ArcView, EdgeView, FaceView, VertexView


def build(positions, polygons):
    mutation = Mutation()
    keys = [mutation.insert_vertex(p) for p in positions]
    for polygon in polygons:
        cache = FaceInsertCache.from_storage(mutation, [keys[i] for i in polygon])
        insert_face(mutation, cache)
    return mutation.commit(), keys


def triangle():
    return build([(0, 0), (1, 0), (1, 1)], [(0, 1, 2)])


def quad():
    return build([(0, 0), (1, 0), (1, 1), (0, 1)], [(0, 1, 2, 3)])


def grid():
    return build(
        [[0, 0], [1, 0], [2, 0], [0, 1], [1, 1], [2, 1], [0, 2], [1, 2], [2, 2]],
        [
            (0, 3, 4),
            (4, 1, 0),
            (1, 4, 2),
            (2, 4, 5),
            (4, 3, 6),
            (6, 7, 4),
            (4, 7, 8),
            (8, 5, 4),
        ],
    )


def only_face(core):
    (key,) = core.faces.keys()
    return FaceView(core, key)


def test_missing_key_raises():
    core, _ = triangle()
    with pytest.raises(TopologyNotFound):
        VertexView(core, VertexKey(1000))


def test_views_compare_by_key():
    core, keys = triangle()
    assert VertexView(core, keys[0]) == VertexView(core, keys[0])
    assert hash(VertexView(core, keys[0])) == hash(VertexView(core, keys[0]))
    assert VertexView(core, keys[0]) != VertexView(core, keys[1])


def test_triangle_vertex_circulation():
    core, keys = triangle()
    vertex = VertexView(core, keys[0])
    incoming = list(vertex.incoming_arcs())
    assert all(arc.key.destination() == keys[0] for arc in incoming)
    assert all(arc.key.source() == keys[0] for arc in vertex.outgoing_arcs())
    assert {v.key for v in vertex.adjacent_vertices()} == {keys[1], keys[2]}
    assert vertex.valence() == len(incoming)
    assert vertex.outgoing_arc().source_vertex() == vertex


def test_vertex_adjacent_faces_skip_boundary():
    core, keys = triangle()
    faces = list(VertexView(core, keys[0]).adjacent_faces())
    assert faces == [only_face(core)]


def test_face_ring_follows_perimeter():
    core, keys = triangle()
    face = only_face(core)
    assert face.arity() == len(keys)
    assert [v.key for v in face.adjacent_vertices()] == keys
    assert all(arc.face() == face for arc in face.adjacent_arcs())
    assert face.arc().key == ArcKey(keys[0], keys[1])


def test_arc_navigation_round_trips():
    core, keys = triangle()
    arc = ArcView(core, ArcKey(keys[0], keys[1]))
    assert arc.opposite_arc().opposite_arc() == arc
    assert arc.next_arc().previous_arc() == arc
    assert arc.previous_arc().next_arc() == arc
    assert arc.destination_vertex().key == keys[1]
    assert arc.edge().arc() in (arc, arc.opposite_arc())


def test_boundary_arcs_and_edges():
    core, keys = triangle()
    arc = ArcView(core, ArcKey(keys[0], keys[1]))
    assert not arc.is_boundary_arc()
    assert arc.opposite_arc().is_boundary_arc()
    assert arc.opposite_arc().face() is None
    assert all(EdgeView(core, key).is_boundary_edge() for key in core.edges.keys())


def test_shared_edge_is_not_boundary():
    core, keys = build(
        [(-1, 0), (0, -1), (0, 1), (1, 0)], [(0, 1, 2), (2, 1, 3)]
    )
    inner = [EdgeView(core, k) for k in core.edges.keys() if not EdgeView(core, k).is_boundary_edge()]
    assert len(inner) == 1
    assert set(inner[0].arc().key) == {keys[1], keys[2]}


def test_center_vertex_circulators_read_and_write():
    weight = 123_456_789
    core, keys = grid()
    center = next(
        VertexView(core, k) for k in keys if VertexView(core, k).valence() == 8
    )
    assert center.key == keys[4]
    for face in center.adjacent_faces():
        face.data = weight
    faces = list(center.adjacent_faces())
    assert len(faces) == 8
    assert all(face.data == weight for face in faces)


def test_traversals_reach_connected_vertices():
    core, keys = grid()
    start = VertexView(core, keys[0])
    assert {v.key for v in start.traverse_by_breadth()} == set(keys)
    assert {v.key for v in start.traverse_by_depth()} == set(keys)
    assert len(list(start.traverse_by_depth())) == len(keys)


def test_traversal_stops_at_disjoint_subgraph():
    core, keys = build(
        [(-2, 0), (-1, 1), (-1, 0), (0, 0), (1, 1), (1, 0)], [(0, 1, 2), (3, 4, 5)]
    )
    reached = {v.key for v in VertexView(core, keys[0]).traverse_by_breadth()}
    assert reached == set(keys[:3])


def test_face_split_by_index():
    core, keys = quad()
    arc = only_face(core).split(ByIndex(0), ByIndex(2))
    assert arc.key == ArcKey(keys[0], keys[2])
    assert len(core.faces) == 2
    assert arc.face().arity() == 3
    assert arc.opposite_arc().face().arity() == 3
    assert arc.face() != arc.opposite_arc().face()


def test_face_split_adjacent_vertices_fails_and_rolls_back():
    core, keys = quad()
    edges = len(core.edges)
    with pytest.raises(TopologyMalformed):
        only_face(core).split(keys[0], keys[1])
    assert len(core.faces) == 1
    assert len(core.edges) == edges


def test_face_poke():
    core, keys = quad()
    face = only_face(core)
    face.data = "w"
    apex = face.poke_with(lambda: "apex")
    assert apex.data == "apex"
    assert apex.valence() == len(keys)
    assert len(core.faces) == len(keys)
    faces = [FaceView(core, k) for k in core.faces.keys()]
    assert all(f.arity() == 3 and f.data == "w" for f in faces)


def test_face_extrude():
    core, keys = quad()
    extruded = only_face(core).extrude_with(lambda p: (p[0], p[1], 1))
    assert extruded.arity() == len(keys)
    assert len(core.vertices) == 2 * len(keys)
    assert len(core.faces) == 1 + len(keys)
    assert all(v.data[2] == 1 for v in extruded.adjacent_vertices())
    assert all(v.data in [(0, 0), (1, 0), (1, 1), (0, 1)] for v in (VertexView(core, k) for k in keys))


def test_arc_split_with():
    core, keys = triangle()
    middle = ArcView(core, ArcKey(keys[0], keys[1])).split_with(lambda: "mid")
    assert middle.data == "mid"
    assert middle.valence() == 2
    assert ArcKey(keys[0], keys[1]) not in core.arcs
    assert only_face(core).arity() == len(keys) + 1


def test_arc_extrude_boundary():
    core, keys = triangle()
    arc = ArcView(core, ArcKey(keys[1], keys[0]))
    extruded = arc.extrude_with(lambda data: data)
    assert len(core.faces) == 2
    assert extruded.face().arity() == 4
    assert extruded.opposite_arc().is_boundary_arc()
    assert not arc.is_boundary_arc()


def test_arc_extrude_interior_conflicts():
    core, keys = triangle()
    with pytest.raises(TopologyConflict):
        ArcView(core, ArcKey(keys[0], keys[1])).extrude_with(lambda data: data)
    assert len(core.faces) == 1


def test_face_bridge_forms_tube():
    core, keys = build(
        [(0, 0, 0), (1, 0, 0), (0, 1, 0), (0, 0, 1), (1, 0, 1), (0, 1, 1)],
        [(0, 1, 2), (3, 5, 4)],
    )
    first, second = (FaceView(core, k) for k in core.faces.keys())
    first.bridge(second)
    assert len(core.faces) == 3
    assert all(FaceView(core, k).arity() == 4 for k in core.faces.keys())
    assert len(core.edges) == 9


def test_face_bridge_requires_equal_arity():
    core, _ = build(
        [(0, 0), (1, 0), (1, 1), (5, 0), (6, 0), (6, 1), (5, 1)],
        [(0, 1, 2), (3, 4, 5, 6)],
    )
    first, second = (FaceView(core, k) for k in core.faces.keys())
    with pytest.raises(ArityNonUniform):
        first.bridge(second.key)
    assert len(core.faces) == 2