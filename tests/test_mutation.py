import pytest

from meshgraph.entities import (
    ArcKey,
    Core,
    Face,
    FaceKey,
    TopologyMalformed,
    TopologyNotFound,
    VertexKey,
)
from meshgraph.mutation import (
    FaceRemoveCache,
    Mutation,
    get_or_insert_edge,
    remove_face,
)


def _default():
    return (None, (None, None))


def _triangle():
    mutation = Mutation()
    a, b, c = (mutation.insert_vertex(p) for p in [(0, 0), (1, 0), (0, 1)])
    arcs = []
    for u, v in [(a, b), (b, c), (c, a)]:
        _, (uv, _) = get_or_insert_edge(mutation, (u, v), _default)
        arcs.append(uv)
    abc = mutation.core.faces.insert(Face(arc=arcs[0]))
    for ab, bc in zip(arcs, arcs[1:] + arcs[:1]):
        mutation.connect_adjacent_arcs(ab, bc)
        mutation.connect_arc_to_face(ab, abc)
    ba, ac, cb = ArcKey(b, a), ArcKey(a, c), ArcKey(c, b)
    mutation.connect_adjacent_arcs(ba, ac)
    mutation.connect_adjacent_arcs(ac, cb)
    mutation.connect_adjacent_arcs(cb, ba)
    return mutation, (a, b, c), arcs, abc


def test_insert_vertex_keys_are_distinct_and_hold_data():
    mutation = Mutation()
    a = mutation.insert_vertex("x")
    b = mutation.insert_vertex("y")
    assert a != b
    assert mutation.core.vertices.get(a).data == "x"
    assert mutation.core.vertices.get(b).arc is None


def test_get_or_insert_edge_inserts_composite_edge():
    mutation = Mutation()
    a = mutation.insert_vertex(None)
    b = mutation.insert_vertex(None)
    edge, (ab, ba) = get_or_insert_edge(mutation, (a, b), lambda: ("e", ("ab", "ba")))
    assert ab == ArcKey(a, b)
    assert ba == ab.opposite()
    assert len(mutation.core.arcs) == 2
    assert len(mutation.core.edges) == 1
    assert mutation.core.edges.get(edge).data == "e"
    assert mutation.core.arcs.get(ab).data == "ab"
    assert mutation.core.arcs.get(ba).edge == edge
    assert mutation.core.vertices.get(a).arc == ab
    assert mutation.core.vertices.get(b).arc == ba


def test_get_or_insert_edge_reuses_existing_edge():
    mutation = Mutation()
    a = mutation.insert_vertex(None)
    b = mutation.insert_vertex(None)
    first = get_or_insert_edge(mutation, (a, b), _default)
    second = get_or_insert_edge(mutation, (b, a), _default)
    assert second[0] == first[0]
    assert second[1] == (first[1][1], first[1][0])
    assert len(mutation.core.edges) == 1
    assert len(mutation.core.arcs) == 2


def test_get_or_insert_edge_rejects_half_assigned_arcs():
    mutation = Mutation()
    a = mutation.insert_vertex(None)
    b = mutation.insert_vertex(None)
    get_or_insert_edge(mutation, (a, b), _default)
    mutation.core.arcs.get(ArcKey(b, a)).edge = None
    with pytest.raises(TopologyMalformed):
        get_or_insert_edge(mutation, (a, b), _default)


def test_connect_and_disconnect_adjacent_arcs():
    mutation, _, arcs, _ = _triangle()
    ab, bc, _ = arcs
    assert mutation.disconnect_next_arc(ab) == bc
    assert mutation.core.arcs.get(ab).next is None
    assert mutation.core.arcs.get(bc).previous is None
    mutation.connect_adjacent_arcs(ab, bc)
    assert mutation.disconnect_previous_arc(bc) == ab
    assert mutation.core.arcs.get(ab).next is None


def test_missing_entities_raise_not_found():
    mutation = Mutation()
    missing = ArcKey(VertexKey(0), VertexKey(1))
    with pytest.raises(TopologyNotFound):
        mutation.connect_adjacent_arcs(missing, missing.opposite())
    with pytest.raises(TopologyNotFound):
        mutation.connect_outgoing_arc(VertexKey(7), missing)
    with pytest.raises(TopologyNotFound):
        mutation.connect_face_to_arc(missing, FaceKey(0))


def test_disconnect_next_arc_to_missing_arc_is_malformed():
    mutation = Mutation()
    a = mutation.insert_vertex(None)
    b = mutation.insert_vertex(None)
    _, (ab, _) = get_or_insert_edge(mutation, (a, b), _default)
    mutation.core.arcs.get(ab).next = ArcKey(b, VertexKey(99))
    with pytest.raises(TopologyMalformed):
        mutation.disconnect_next_arc(ab)


def test_disconnect_outgoing_arc_returns_leading_arc():
    mutation = Mutation()
    a = mutation.insert_vertex(None)
    b = mutation.insert_vertex(None)
    _, (ab, _) = get_or_insert_edge(mutation, (a, b), _default)
    assert mutation.disconnect_outgoing_arc(a) == ab
    assert mutation.core.vertices.get(a).arc is None


def test_commit_consistent_triangle():
    mutation, vertices, arcs, abc = _triangle()
    core = mutation.commit()
    assert len(core.vertices) == len(vertices)
    assert len(core.arcs) == 2 * len(arcs)
    assert core.faces.get(abc).arc == arcs[0]


def test_commit_empty_mutation():
    core = Mutation().commit()
    assert len(core.vertices) == 0


def test_commit_rejects_disconnected_arcs():
    mutation = Mutation()
    a = mutation.insert_vertex(None)
    b = mutation.insert_vertex(None)
    get_or_insert_edge(mutation, (a, b), _default)
    with pytest.raises(TopologyMalformed):
        mutation.commit()


def test_commit_rejects_isolated_vertex():
    mutation = Mutation()
    mutation.insert_vertex(None)
    with pytest.raises(TopologyMalformed):
        mutation.commit()


def test_face_remove_cache_collects_ring():
    mutation, _, arcs, abc = _triangle()
    cache = FaceRemoveCache.from_face(mutation.core, abc)
    assert cache.abc == abc
    assert cache.arcs == arcs
    assert FaceRemoveCache.from_face(mutation, abc).arcs == arcs


def test_face_remove_cache_missing_face():
    with pytest.raises(TopologyNotFound):
        FaceRemoveCache.from_face(Core(), FaceKey(3))


def test_remove_face_disconnects_arcs():
    mutation, _, arcs, abc = _triangle()
    cache = FaceRemoveCache.from_face(mutation.core, abc)
    face = remove_face(mutation, cache)
    assert face.arc == arcs[0]
    assert abc not in mutation.core.faces
    assert all(mutation.core.arcs.get(ab).face is None for ab in arcs)
    assert mutation.commit() is mutation.core


def test_remove_face_twice_raises():
    mutation, _, _, abc = _triangle()
    cache = FaceRemoveCache.from_face(mutation.core, abc)
    remove_face(mutation, cache)
    with pytest.raises(TopologyNotFound):
        remove_face(mutation, cache)