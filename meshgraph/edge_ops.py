"""Edge-level mutations: removal, splitting at a new vertex and arc extrusion."""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Any, Callable, Optional, Tuple, Union

from meshgraph.entities import (
    Arc,
    ArcKey,
    Core,
    EdgeKey,
    TopologyConflict,
    TopologyMalformed,
    TopologyNotFound,
    VertexKey,
)
from meshgraph.face_ops import ArcBridgeCache, bridge_arcs
from meshgraph.mutation import (
    CompositeEdge,
    FaceRemoveCache,
    Mutation,
    get_or_insert_edge,
    remove_face,
)


def _storage(source: Union[Core, Mutation]) -> Core:
    return source.core if isinstance(source, Mutation) else source


def _arc(core: Core, ab: ArcKey) -> Arc:
    arc = core.arcs.get(ab)
    if arc is None:
        raise TopologyNotFound()
    return arc


@dataclass
class ArcRemoveCache:
    """An arc to remove, its neighbours and the face it bounds, if any.

    ``xa`` and ``bx`` are ``None`` where the neighbour is the opposite arc,
    which is the case for an edge with no other adjacent arcs.
    """

    ab: ArcKey
    xa: Optional[ArcKey]
    bx: Optional[ArcKey]
    cache: Optional[FaceRemoveCache]

    @classmethod
    def from_arc(cls, core: Union[Core, Mutation], ab: ArcKey) -> "ArcRemoveCache":
        storage = _storage(core)
        arc = _arc(storage, ab)
        ba = ab.opposite()
        if ba not in storage.arcs or arc.previous is None or arc.next is None:
            raise TopologyMalformed()
        xa = arc.previous
        bx = arc.next
        cache = FaceRemoveCache.from_face(storage, arc.face) if arc.face is not None else None
        return cls(
            ab=ab,
            xa=xa if xa != ba else None,
            bx=bx if bx != ba else None,
            cache=cache,
        )


@dataclass
class EdgeRemoveCache:
    """A composite edge to remove: its vertices, edge and both arcs."""

    a: VertexKey
    b: VertexKey
    ab_ba: EdgeKey
    arc: ArcRemoveCache
    opposite: ArcRemoveCache

    @classmethod
    def from_arc(cls, core: Union[Core, Mutation], ab: ArcKey) -> "EdgeRemoveCache":
        storage = _storage(core)
        arc = _arc(storage, ab)
        a, b = ab
        if a not in storage.vertices or b not in storage.vertices:
            raise TopologyMalformed()
        if arc.edge is None or arc.edge not in storage.edges:
            raise TopologyMalformed()
        return cls(
            a=a,
            b=b,
            ab_ba=arc.edge,
            arc=ArcRemoveCache.from_arc(storage, ab),
            opposite=ArcRemoveCache.from_arc(storage, ab.opposite()),
        )


@dataclass
class EdgeSplitCache:
    """A composite edge to split at a new vertex."""

    a: VertexKey
    b: VertexKey
    ab: ArcKey
    ba: ArcKey
    ab_ba: EdgeKey

    @classmethod
    def from_arc(cls, core: Union[Core, Mutation], ab: ArcKey) -> "EdgeSplitCache":
        storage = _storage(core)
        arc = _arc(storage, ab)
        ba = ab.opposite()
        if ba not in storage.arcs:
            raise TopologyMalformed()
        a, b = ab
        if a not in storage.vertices or b not in storage.vertices:
            raise TopologyMalformed()
        if arc.edge is None or arc.edge not in storage.edges:
            raise TopologyNotFound()
        return cls(a=a, b=b, ab=ab, ba=ba, ab_ba=arc.edge)


@dataclass
class ArcExtrudeCache:
    """A boundary arc to extrude."""

    ab: ArcKey

    @classmethod
    def from_arc(cls, core: Union[Core, Mutation], ab: ArcKey) -> "ArcExtrudeCache":
        arc = _arc(_storage(core), ab)
        if arc.face is not None:
            raise TopologyConflict()
        return cls(ab=ab)


def _remove_arc(mutation: Mutation, cache: ArcRemoveCache) -> Arc:
    if cache.cache is not None:
        remove_face(mutation, cache.cache)
    arc = mutation.core.arcs.remove(cache.ab)
    if arc is None:
        raise TopologyNotFound()
    return arc


def remove_edge(mutation: Mutation, cache: EdgeRemoveCache) -> CompositeEdge:
    """Remove a composite edge and any faces it bounds.

    Returns the removed edge and its two arcs. Vertices left without arcs are
    not removed.
    """
    arc, opposite = cache.arc, cache.opposite
    # Connect each vertex to a remaining outgoing arc.
    if opposite.bx is not None:
        mutation.connect_outgoing_arc(cache.a, opposite.bx)
    if arc.bx is not None:
        mutation.connect_outgoing_arc(cache.b, arc.bx)
    # Connect previous and next arcs across the removed edge.
    if arc.xa is not None and opposite.bx is not None:
        mutation.connect_adjacent_arcs(arc.xa, opposite.bx)
    if opposite.xa is not None and arc.bx is not None:
        mutation.connect_adjacent_arcs(opposite.xa, arc.bx)
    edge = mutation.core.edges.remove(cache.ab_ba)
    if edge is None:
        raise TopologyNotFound()
    return edge, (_remove_arc(mutation, arc), _remove_arc(mutation, opposite))


def _detach_arc(mutation: Mutation, ab: ArcKey) -> Arc:
    xa = mutation.disconnect_previous_arc(ab)
    bx = mutation.disconnect_next_arc(ab)
    arc = mutation.core.arcs.remove(ab)
    if arc is None:
        raise TopologyNotFound()
    # Keep the connectivity that was cleared while the arc was still present.
    arc.previous = xa
    arc.next = bx
    return arc


def _split_at_vertex(
    mutation: Mutation,
    a: VertexKey,
    b: VertexKey,
    m: VertexKey,
    ab: ArcKey,
    edge_data: Any,
) -> Tuple[ArcKey, ArcKey]:
    arc = _detach_arc(mutation, ab)

    def factory() -> Tuple[Any, Tuple[Any, Any]]:
        return (
            copy.deepcopy(edge_data),
            (copy.deepcopy(arc.data), copy.deepcopy(arc.data)),
        )

    _, (am, _) = get_or_insert_edge(mutation, (a, m), factory)
    _, (mb, _) = get_or_insert_edge(mutation, (m, b), factory)
    mutation.connect_adjacent_arcs(am, mb)
    if arc.previous is not None:
        mutation.connect_adjacent_arcs(arc.previous, am)
    if arc.next is not None:
        mutation.connect_adjacent_arcs(mb, arc.next)
    # The face may refer to the removed arc.
    if arc.face is not None:
        mutation.connect_face_to_arc(am, arc.face)
        mutation.connect_arc_to_face(am, arc.face)
        mutation.connect_arc_to_face(mb, arc.face)
    return am, mb


def split_edge(mutation: Mutation, cache: EdgeSplitCache, f: Callable[[], Any]) -> VertexKey:
    """Split a composite edge at a new vertex with data ``f()``; return its key."""
    m = mutation.insert_vertex(f())
    edge = mutation.core.edges.remove(cache.ab_ba)
    if edge is None:
        raise TopologyMalformed()
    _split_at_vertex(mutation, cache.a, cache.b, m, cache.ab, copy.deepcopy(edge.data))
    _split_at_vertex(mutation, cache.b, cache.a, m, cache.ba, edge.data)
    return m


def extrude_arc(mutation: Mutation, cache: ArcExtrudeCache, f: Callable[[Any], Any]) -> ArcKey:
    """Extrude a boundary arc into a quadrilateral; return the extruded arc."""
    a, b = cache.ab
    source = mutation.core.vertices.get(b)
    target = mutation.core.vertices.get(a)
    if source is None or target is None:
        raise TopologyNotFound()
    c_data, d_data = f(source.data), f(target.data)
    c = mutation.insert_vertex(c_data)
    d = mutation.insert_vertex(d_data)
    _, (cd, _) = get_or_insert_edge(mutation, (c, d), lambda: (None, (None, None)))
    bridge = ArcBridgeCache.from_storage(mutation, cache.ab, cd)
    bridge_arcs(mutation, bridge)
    return cd