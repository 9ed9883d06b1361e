"""Half-edge graph representation of polygonal meshes."""

from __future__ import annotations

from typing import Any, Iterable, Iterator, List, Optional, Sequence, Tuple, Union

from meshgraph.entities import (
    ArcKey,
    ArityConflict,
    ArityNonPolygonal,
    ByIndex,
    Core,
    EdgeKey,
    FaceKey,
    GraphError,
    TopologyConflict,
    TopologyNotFound,
    VertexKey,
)
from meshgraph.face_ops import FaceInsertCache, insert_face
from meshgraph.mutation import Mutation
from meshgraph.views import ArcView, EdgeView, FaceView, VertexView


class MeshGraph:
    """Half-edge graph of a polygonal mesh made of vertices, arcs, edges and faces.

    Entities may carry arbitrary data. Views returned by the accessors bind a
    key to the graph and expose traversals and topological mutations.
    """

    def __init__(self, core: Optional[Core] = None) -> None:
        self.core = core if core is not None else Core()

    def __repr__(self) -> str:
        return (
            f"MeshGraph(vertices={self.vertex_count()}, arcs={self.arc_count()}, "
            f"edges={self.edge_count()}, faces={self.face_count()})"
        )

    def vertex_count(self) -> int:
        return len(self.core.vertices)

    def arc_count(self) -> int:
        return len(self.core.arcs)

    def edge_count(self) -> int:
        return len(self.core.edges)

    def face_count(self) -> int:
        return len(self.core.faces)

    def _bind(self, view_type: type, key: Any) -> Any:
        try:
            return view_type(self, key)
        except TopologyNotFound:
            return None

    def vertex(self, key: VertexKey) -> Optional[VertexView]:
        """View of the vertex with the given key, or ``None``."""
        return self._bind(VertexView, key)

    def arc(self, key: ArcKey) -> Optional[ArcView]:
        """View of the arc with the given key, or ``None``."""
        return self._bind(ArcView, key)

    def edge(self, key: EdgeKey) -> Optional[EdgeView]:
        """View of the edge with the given key, or ``None``."""
        return self._bind(EdgeView, key)

    def face(self, key: FaceKey) -> Optional[FaceView]:
        """View of the face with the given key, or ``None``."""
        return self._bind(FaceView, key)

    def vertices(self) -> Iterator[VertexView]:
        return (VertexView(self, key) for key in self.core.vertices.keys())

    def arcs(self) -> Iterator[ArcView]:
        return (ArcView(self, key) for key in self.core.arcs.keys())

    def edges(self) -> Iterator[EdgeView]:
        return (EdgeView(self, key) for key in self.core.edges.keys())

    def faces(self) -> Iterator[FaceView]:
        return (FaceView(self, key) for key in self.core.faces.keys())

    def triangulate(self) -> None:
        """Tessellate every face into triangles by repeated splitting.

        Splits that would intersect another face are retried at the next
        offset; if no offset works the conflict is raised.
        """
        for key in self.core.faces.keys():
            face = self.face(key)
            if face is None:
                continue
            offset = 0
            while face.arity() > 3:
                arity = face.arity()
                try:
                    arc = face.split(ByIndex(offset % arity), ByIndex((offset + 2) % arity))
                except TopologyConflict:
                    offset += 1
                    if offset >= arity:
                        raise
                    continue
                face = arc.face()
                if face is None:
                    raise TopologyConflict()
                offset = 0

    def disjoint_subgraph_vertices(self) -> List[VertexView]:
        """One arbitrary vertex from each disjoint sub-graph."""
        seen: set = set()
        vertices = []
        for key in self.core.vertices.keys():
            if key in seen:
                continue
            vertex = VertexView(self, key)
            vertices.append(vertex)
            seen.update(reached.key for reached in vertex.traverse_by_depth())
        return vertices

    def arity(self) -> Union[int, Tuple[int, int]]:
        """Arity of the faces: an int if uniform, else ``(min, max)``.

        An empty graph has arity 0.
        """
        arities = {face.arity() for face in self.faces()}
        if not arities:
            return 0
        if len(arities) == 1:
            return next(iter(arities))
        return min(arities), max(arities)

    def into_polygons(self) -> List[List[Any]]:
        """The vertex data of each face, in the order of its ring."""
        return [
            [vertex.data for vertex in face.adjacent_vertices()] for face in self.faces()
        ]

    @classmethod
    def _build(cls, vertices: Iterable[Any], faces: Iterable[Sequence[int]]) -> "MeshGraph":
        mutation = Mutation(Core())
        keys = [mutation.insert_vertex(data) for data in vertices]
        for face in faces:
            perimeter = []
            for index in face:
                if index < 0 or index >= len(keys):
                    raise TopologyNotFound()
                perimeter.append(keys[index])
            insert_face(mutation, FaceInsertCache.from_storage(mutation, perimeter))
        return cls(mutation.commit())

    @classmethod
    def from_raw_buffers(
        cls, indices: Iterable[Sequence[int]], vertices: Iterable[Any]
    ) -> "MeshGraph":
        """Build a graph from polygons of vertex indices and a vertex buffer."""
        return cls._build(vertices, (list(face) for face in indices))

    @classmethod
    def from_raw_buffers_with_arity(
        cls, indices: Iterable[int], vertices: Iterable[Any], arity: int
    ) -> "MeshGraph":
        """Build a graph from a flat index buffer of faces of constant arity."""
        if arity < 3:
            raise ArityNonPolygonal()
        flat = list(indices)
        faces = [flat[start:start + arity] for start in range(0, len(flat), arity)]
        for face in faces:
            if len(face) != arity:
                # Index buffer length is not a multiple of the arity.
                raise ArityConflict(arity, len(face))
        return cls._build(vertices, faces)

    @classmethod
    def from_polygons(cls, polygons: Iterable[Sequence[Any]]) -> "MeshGraph":
        """Build a graph from polygons of vertex data, merging equal vertices.

        If the polygons cannot form a graph, an empty graph is returned.
        """
        index: dict = {}
        vertices: List[Any] = []
        faces: List[List[int]] = []
        for polygon in polygons:
            face = []
            for data in polygon:
                if data not in index:
                    index[data] = len(vertices)
                    vertices.append(data)
                face.append(index[data])
            faces.append(face)
        try:
            return cls._build(vertices, faces)
        except GraphError:
            return cls()

    @classmethod
    def from_polygon(cls, polygon: Sequence[Any]) -> "MeshGraph":
        """Build a graph with a single face from a polygon of vertex data."""
        polygon = list(polygon)
        arity = len(polygon)
        return cls.from_raw_buffers_with_arity(range(arity), polygon, arity)