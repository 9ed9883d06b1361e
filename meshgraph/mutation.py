"""Low-level mutation of graph storage: vertices, arcs, edges and face removal."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Tuple, Union

from meshgraph.entities import (
    Arc,
    ArcKey,
    Core,
    Edge,
    EdgeKey,
    Face,
    FaceKey,
    TopologyMalformed,
    TopologyNotFound,
    Vertex,
    VertexKey,
)

CompositeEdgeKey = Tuple[EdgeKey, Tuple[ArcKey, ArcKey]]
CompositeEdge = Tuple[Edge, Tuple[Arc, Arc]]
CompositeEdgeData = Tuple[Any, Tuple[Any, Any]]


class Mutation:
    """Mutable access to the storage of a graph that is checked on commit.

    The mutation operates on the given core in place; callers that need to
    discard a failed mutation should hand it a copy.
    """

    def __init__(self, core: Optional[Core] = None) -> None:
        self.core = core if core is not None else Core()

    def _vertex(self, a: VertexKey) -> Vertex:
        vertex = self.core.vertices.get(a)
        if vertex is None:
            raise TopologyNotFound()
        return vertex

    def _arc(self, ab: ArcKey) -> Arc:
        arc = self.core.arcs.get(ab)
        if arc is None:
            raise TopologyNotFound()
        return arc

    def _face(self, abc: FaceKey) -> Face:
        face = self.core.faces.get(abc)
        if face is None:
            raise TopologyNotFound()
        return face

    def insert_vertex(self, data: Any) -> VertexKey:
        """Insert a vertex with no leading arc and return its key."""
        return self.core.vertices.insert(Vertex(data=data))

    def connect_outgoing_arc(self, a: VertexKey, ab: ArcKey) -> None:
        self._vertex(a).arc = ab

    def disconnect_outgoing_arc(self, a: VertexKey) -> Optional[ArcKey]:
        vertex = self._vertex(a)
        previous, vertex.arc = vertex.arc, None
        return previous

    def connect_adjacent_arcs(self, ab: ArcKey, bc: ArcKey) -> None:
        self._arc(ab).next = bc
        self._arc(bc).previous = ab

    def disconnect_next_arc(self, ab: ArcKey) -> Optional[ArcKey]:
        arc = self._arc(ab)
        bx, arc.next = arc.next, None
        if bx is not None:
            following = self.core.arcs.get(bx)
            if following is None:
                raise TopologyMalformed()
            following.previous = None
        return bx

    def disconnect_previous_arc(self, ab: ArcKey) -> Optional[ArcKey]:
        arc = self._arc(ab)
        xa, arc.previous = arc.previous, None
        if xa is not None:
            preceding = self.core.arcs.get(xa)
            if preceding is None:
                raise TopologyMalformed()
            preceding.next = None
        return xa

    def connect_arc_to_edge(self, ab: ArcKey, ab_ba: EdgeKey) -> None:
        self._arc(ab).edge = ab_ba

    def connect_arc_to_face(self, ab: ArcKey, abc: FaceKey) -> None:
        self._arc(ab).face = abc

    def disconnect_arc_from_face(self, ab: ArcKey) -> Optional[FaceKey]:
        arc = self._arc(ab)
        face, arc.face = arc.face, None
        return face

    def connect_face_to_arc(self, ab: ArcKey, abc: FaceKey) -> None:
        self._face(abc).arc = ab

    def commit(self) -> Core:
        """Check consistency and return the mutated core.

        Every arc must have next and previous arcs and an edge, and every
        vertex must have a leading arc.
        """
        for _, arc in self.core.arcs.items():
            if arc.next is None or arc.previous is None or arc.edge is None:
                raise TopologyMalformed()
        for _, vertex in self.core.vertices.items():
            if vertex.arc is None:
                raise TopologyMalformed()
        return self.core


def _core_of(source: Union[Core, Mutation]) -> Core:
    return source.core if isinstance(source, Mutation) else source


@dataclass
class FaceRemoveCache:
    """Face and its interior arcs, gathered before removing the face."""

    abc: FaceKey
    arcs: list = field(default_factory=list)

    @classmethod
    def from_face(cls, core: Union[Core, Mutation], abc: FaceKey) -> "FaceRemoveCache":
        storage = _core_of(core)
        face = storage.faces.get(abc)
        if face is None:
            raise TopologyNotFound()
        arcs = []
        seen = set()
        ab: Optional[ArcKey] = face.arc
        while ab is not None and ab not in seen:
            arc = storage.arcs.get(ab)
            if arc is None:
                raise TopologyMalformed()
            seen.add(ab)
            arcs.append(ab)
            ab = arc.next
        if ab != face.arc:
            raise TopologyMalformed()
        return cls(abc=abc, arcs=arcs)


def get_or_insert_edge(
    mutation: Mutation,
    endpoints: Tuple[VertexKey, VertexKey],
    factory: Callable[[], CompositeEdgeData],
) -> CompositeEdgeKey:
    """Get the composite edge between two vertices, inserting it if missing.

    ``factory`` returns ``(edge_data, (ab_data, ba_data))``.
    """
    edge_data, (ab_data, ba_data) = factory()

    def get_or_insert_arc(a: VertexKey, b: VertexKey, data: Any):
        ab = ArcKey(a, b)
        arc = mutation.core.arcs.get(ab)
        if arc is not None:
            return arc.edge, ab
        mutation.core.arcs.insert_with_key(ab, Arc(data=data))
        try:
            mutation.connect_outgoing_arc(a, ab)
        except TopologyNotFound:
            pass
        return None, ab

    a, b = endpoints
    e1, ab = get_or_insert_arc(a, b, ab_data)
    e2, ba = get_or_insert_arc(b, a, ba_data)
    if e1 is not None and e2 is not None and e1 == e2:
        return e1, (ab, ba)
    if e1 is None and e2 is None:
        ab_ba = mutation.core.edges.insert(Edge(arc=ab, data=edge_data))
        mutation.connect_arc_to_edge(ab, ab_ba)
        mutation.connect_arc_to_edge(ba, ab_ba)
        return ab_ba, (ab, ba)
    # Arcs must never be assigned to edges independently of their opposites.
    raise TopologyMalformed()


def remove_face(mutation: Mutation, cache: FaceRemoveCache) -> Face:
    """Disconnect the interior arcs of a face and remove the face."""
    for ab in cache.arcs:
        mutation.disconnect_arc_from_face(ab)
    face = mutation.core.faces.remove(cache.abc)
    if face is None:
        raise TopologyNotFound()
    return face