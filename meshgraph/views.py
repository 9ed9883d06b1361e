"""Views binding a graph's storage to a key, with traversal and mutation."""

from __future__ import annotations

from collections import deque
from typing import Any, Callable, Iterator, Optional, TypeVar, Union

from meshgraph.edge_ops import (
    ArcExtrudeCache,
    EdgeSplitCache,
    extrude_arc,
    split_edge,
)
from meshgraph.entities import (
    ArcKey,
    Core,
    EdgeKey,
    FaceKey,
    TopologyMalformed,
    TopologyNotFound,
    VertexKey,
)
from meshgraph.face_ops import (
    ArcBridgeCache,
    FaceBridgeCache,
    FaceExtrudeCache,
    FacePokeCache,
    FaceSplitCache,
    bridge_arcs,
    bridge_faces,
    extrude_face,
    poke_face,
    split_face,
)
from meshgraph.mutation import FaceRemoveCache, Mutation

T = TypeVar("T")

_CONSISTENCY = "internal error: graph consistency violated"


def _core(target: Any) -> Core:
    return target if isinstance(target, Core) else target.core


def _apply(target: Any, operation: Callable[[Mutation], T]) -> T:
    """Run a mutation on a copy of the storage and install it if it commits."""
    core = _core(target)
    mutation = Mutation(core.copy())
    result = operation(mutation)
    committed = mutation.commit()
    core.vertices = committed.vertices
    core.arcs = committed.arcs
    core.edges = committed.edges
    core.faces = committed.faces
    return result


class _View:
    """A key bound to the storage of a graph (or a bare core)."""

    _storage_name = ""

    def __init__(self, graph: Any, key: Any) -> None:
        self._graph = graph
        self._key = key
        if self._entity() is None:
            raise TopologyNotFound()

    @property
    def key(self) -> Any:
        return self._key

    @property
    def graph(self) -> Any:
        return self._graph

    @property
    def _core(self) -> Core:
        return _core(self._graph)

    def _entity(self) -> Any:
        return getattr(self._core, self._storage_name).get(self._key)

    def _require(self) -> Any:
        entity = self._entity()
        if entity is None:
            raise TopologyNotFound()
        return entity

    @property
    def data(self) -> Any:
        """User data of the entity."""
        return self._require().data

    @data.setter
    def data(self, value: Any) -> None:
        self._require().data = value

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._key == other._key and self._core is other._core

    def __hash__(self) -> int:
        return hash((type(self), self._key))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._key!r})"


class VertexView(_View):
    """View of a vertex."""

    _storage_name = "vertices"

    def outgoing_arc(self) -> "ArcView":
        """The leading arc of the vertex."""
        arc = self._require().arc
        if arc is None:
            raise TopologyMalformed(_CONSISTENCY)
        return ArcView(self._graph, arc)

    def incoming_arcs(self) -> Iterator["ArcView"]:
        """Arcs directed toward the vertex, starting from its leading arc."""
        core = self._core
        outgoing = self._require().arc
        seen = set()
        while outgoing is not None and outgoing not in seen:
            seen.add(outgoing)
            incoming = outgoing.opposite()
            arc = core.arcs.get(incoming)
            if arc is None:
                return
            yield ArcView(self._graph, incoming)
            outgoing = arc.next

    def outgoing_arcs(self) -> Iterator["ArcView"]:
        """Arcs directed away from the vertex."""
        for arc in self.incoming_arcs():
            yield arc.opposite_arc()

    def adjacent_vertices(self) -> Iterator["VertexView"]:
        for arc in self.incoming_arcs():
            yield VertexView(self._graph, arc.key.source())

    def adjacent_faces(self) -> Iterator["FaceView"]:
        """Faces of the incoming arcs; boundary arcs are skipped."""
        core = self._core
        for arc in self.incoming_arcs():
            face = core.arcs.get(arc.key).face
            if face is not None:
                yield FaceView(self._graph, face)

    def valence(self) -> int:
        """Number of vertices connected to this one by arcs."""
        return sum(1 for _ in self.adjacent_vertices())

    def traverse_by_breadth(self) -> Iterator["VertexView"]:
        """Every vertex reachable from this one, nearest first."""
        visited = {self._key}
        queue = deque([self._key])
        while queue:
            key = queue.popleft()
            vertex = VertexView(self._graph, key)
            yield vertex
            for adjacent in vertex.adjacent_vertices():
                if adjacent.key not in visited:
                    visited.add(adjacent.key)
                    queue.append(adjacent.key)

    def traverse_by_depth(self) -> Iterator["VertexView"]:
        """Every vertex reachable from this one, depth first."""
        visited = set()
        stack = [self._key]
        while stack:
            key = stack.pop()
            if key in visited:
                continue
            visited.add(key)
            vertex = VertexView(self._graph, key)
            yield vertex
            stack.extend(
                adjacent.key
                for adjacent in vertex.adjacent_vertices()
                if adjacent.key not in visited
            )


class ArcView(_View):
    """View of an arc."""

    _storage_name = "arcs"

    def _neighbour(self, key: Optional[ArcKey]) -> "ArcView":
        if key is None or key not in self._core.arcs:
            raise TopologyMalformed(_CONSISTENCY)
        return ArcView(self._graph, key)

    def opposite_arc(self) -> "ArcView":
        return self._neighbour(self._key.opposite())

    def next_arc(self) -> "ArcView":
        return self._neighbour(self._require().next)

    def previous_arc(self) -> "ArcView":
        return self._neighbour(self._require().previous)

    def source_vertex(self) -> VertexView:
        return VertexView(self._graph, self._key.source())

    def destination_vertex(self) -> VertexView:
        return VertexView(self._graph, self._key.destination())

    def edge(self) -> "EdgeView":
        edge = self._require().edge
        if edge is None:
            raise TopologyMalformed(_CONSISTENCY)
        return EdgeView(self._graph, edge)

    def face(self) -> Optional["FaceView"]:
        """The face of the arc, or ``None`` for a boundary arc."""
        face = self._require().face
        return FaceView(self._graph, face) if face is not None else None

    def is_boundary_arc(self) -> bool:
        return self._require().face is None

    def split_with(self, f: Callable[[], Any]) -> VertexView:
        """Split the composite edge at a new vertex with data ``f()``."""
        cache = EdgeSplitCache.from_arc(self._core, self._key)
        key = _apply(self._graph, lambda mutation: split_edge(mutation, cache, f))
        return VertexView(self._graph, key)

    def extrude_with(self, f: Callable[[Any], Any]) -> "ArcView":
        """Extrude a boundary arc into a quadrilateral; return the extruded arc."""
        cache = ArcExtrudeCache.from_arc(self._core, self._key)
        key = _apply(self._graph, lambda mutation: extrude_arc(mutation, cache, f))
        return ArcView(self._graph, key)

    def bridge(self, destination: Union[ArcKey, "ArcView"]) -> "FaceView":
        """Insert the quadrilateral joining this arc and ``destination``."""
        if isinstance(destination, ArcView):
            destination = destination.key
        cache = ArcBridgeCache.from_storage(self._core, self._key, destination)
        key = _apply(self._graph, lambda mutation: bridge_arcs(mutation, cache))
        return FaceView(self._graph, key)


class EdgeView(_View):
    """View of an edge."""

    _storage_name = "edges"

    def arc(self) -> ArcView:
        return ArcView(self._graph, self._require().arc)

    def is_boundary_edge(self) -> bool:
        """True if either arc of the edge is a boundary arc."""
        arc = self.arc()
        return arc.is_boundary_arc() or arc.opposite_arc().is_boundary_arc()


class FaceView(_View):
    """View of a face."""

    _storage_name = "faces"

    def arc(self) -> ArcView:
        return ArcView(self._graph, self._require().arc)

    def _ring(self) -> list:
        return FaceRemoveCache.from_face(self._core, self._key).arcs

    def arity(self) -> int:
        return len(self._ring())

    def adjacent_arcs(self) -> Iterator[ArcView]:
        """Arcs of the face's ring, starting from its leading arc."""
        for key in self._ring():
            yield ArcView(self._graph, key)

    def adjacent_vertices(self) -> Iterator[VertexView]:
        for key in self._ring():
            yield VertexView(self._graph, key.source())

    def split(self, source: Any, destination: Any) -> ArcView:
        """Split the face between two of its vertices, given by key or index.

        Returns the arc from ``source`` to ``destination``.
        """
        cache = FaceSplitCache.from_face(self._core, self._key, source, destination)
        key = _apply(self._graph, lambda mutation: split_face(mutation, cache))
        return ArcView(self._graph, key)

    def poke_with(self, f: Callable[[], Any]) -> VertexView:
        """Replace the face with a fan of triangles around a new vertex."""
        cache = FacePokeCache.from_face(self._core, self._key)
        key = _apply(self._graph, lambda mutation: poke_face(mutation, cache, f))
        return VertexView(self._graph, key)

    def extrude_with(self, f: Callable[[Any], Any]) -> "FaceView":
        """Extrude the face, mapping vertex data with ``f``; return the new face."""
        cache = FaceExtrudeCache.from_face(self._core, self._key)
        key = _apply(self._graph, lambda mutation: extrude_face(mutation, cache, f))
        return FaceView(self._graph, key)

    def bridge(self, destination: Union[FaceKey, "FaceView"]) -> None:
        """Remove this face and ``destination`` and join their arcs."""
        if isinstance(destination, FaceView):
            destination = destination.key
        cache = FaceBridgeCache.from_face(self._core, self._key, destination)
        _apply(self._graph, lambda mutation: bridge_faces(mutation, cache))


__all__ = ["VertexView", "ArcView", "EdgeView", "FaceView", "VertexKey", "EdgeKey"]