"""Face-level mutations: insertion, splitting, poking, extrusion and bridging."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Iterator, List, Sequence, Tuple, Union

from meshgraph.entities import (
    ArcKey,
    ArityNonUniform,
    Core,
    Face,
    FaceKey,
    TopologyConflict,
    TopologyMalformed,
    TopologyNotFound,
    VertexKey,
    to_selector,
)
from meshgraph.mutation import (
    FaceRemoveCache,
    Mutation,
    get_or_insert_edge,
    remove_face,
)


def _storage(source: Union[Core, Mutation]) -> Core:
    return source.core if isinstance(source, Mutation) else source


def _cyclic_pairs(items: Sequence) -> Iterator[Tuple[Any, Any]]:
    """Consecutive pairs of a sequence, closing the loop at the end."""
    return zip(items, list(items[1:]) + list(items[:1]))


def _reachable_incoming_arcs(core: Core, a: VertexKey) -> Iterator[ArcKey]:
    """Circulate the incoming arcs of a vertex, tolerating incomplete topology."""
    vertex = core.vertices.get(a)
    outgoing = vertex.arc if vertex is not None else None
    seen = set()
    while outgoing is not None and outgoing not in seen:
        seen.add(outgoing)
        incoming = outgoing.opposite()
        arc = core.arcs.get(incoming)
        if arc is None:
            return
        yield incoming
        outgoing = arc.next


def _reachable_outgoing_arcs(core: Core, a: VertexKey) -> List[ArcKey]:
    return [
        ab.opposite()
        for ab in _reachable_incoming_arcs(core, a)
        if ab.opposite() in core.arcs
    ]


def _is_boundary(core: Core, ab: ArcKey) -> bool:
    arc = core.arcs.get(ab)
    return arc is not None and arc.face is None


def _face_vertices(core: Core, abc: FaceKey) -> List[VertexKey]:
    return [ab.source() for ab in FaceRemoveCache.from_face(core, abc).arcs]


@dataclass
class FaceInsertCache:
    """Validated perimeter of a face to insert and the connectivity around it."""

    perimeter: List[VertexKey]
    incoming: Dict[VertexKey, List[ArcKey]] = field(default_factory=dict)
    outgoing: Dict[VertexKey, List[ArcKey]] = field(default_factory=dict)

    @classmethod
    def from_storage(
        cls, core: Union[Core, Mutation], perimeter: Iterable[VertexKey]
    ) -> "FaceInsertCache":
        storage = _storage(core)
        perimeter = list(perimeter)
        members = set(perimeter)
        if len(members) != len(perimeter):
            raise TopologyMalformed()
        if any(key not in storage.vertices for key in perimeter):
            raise TopologyNotFound()
        arcs = [storage.arcs.get(ArcKey(a, b)) for a, b in _cyclic_pairs(perimeter)]
        for previous, following in _cyclic_pairs(arcs):
            if previous is None:
                continue
            if previous.face is not None:
                # A face already occupies an interior arc.
                raise TopologyConflict()
            # If BC is missing but AB continues into some BX, then X must not
            # lie on the perimeter, or BX would bisect the new face.
            if following is None and previous.next is not None:
                if previous.next in storage.arcs and previous.next.destination() in members:
                    raise TopologyConflict()
        incoming = {key: list(_reachable_incoming_arcs(storage, key)) for key in perimeter}
        outgoing = {key: _reachable_outgoing_arcs(storage, key) for key in perimeter}
        return cls(perimeter=perimeter, incoming=incoming, outgoing=outgoing)


def _resolve_vertex(selector: Any, vertices: List[VertexKey]) -> VertexKey:
    def by_index(index: int) -> VertexKey:
        if index >= len(vertices):
            raise TopologyNotFound()
        return vertices[index]

    key = to_selector(selector).key_or_else(by_index)
    if key not in vertices:
        raise TopologyNotFound()
    return key


@dataclass
class FaceSplitCache:
    """Face to remove and the perimeters of the two faces replacing it."""

    cache: FaceRemoveCache
    left: List[VertexKey]
    right: List[VertexKey]

    @classmethod
    def from_face(
        cls, core: Union[Core, Mutation], abc: FaceKey, source: Any, destination: Any
    ) -> "FaceSplitCache":
        storage = _storage(core)
        cache = FaceRemoveCache.from_face(storage, abc)
        vertices = [ab.source() for ab in cache.arcs]
        source = _resolve_vertex(source, vertices)
        destination = _resolve_vertex(destination, vertices)
        distance = abs(vertices.index(source) - vertices.index(destination))
        if min(distance, len(vertices) - distance) <= 1:
            raise TopologyMalformed()
        start = vertices.index(source)
        rotated = vertices[start:] + vertices[:start]
        middle = rotated.index(destination)
        left = rotated[: middle + 1]
        right = rotated[middle:] + [source]

        def is_intersecting(perimeter: List[VertexKey]) -> bool:
            for a, b in _cyclic_pairs(perimeter):
                arc = storage.arcs.get(ArcKey(a, b))
                if arc is not None and arc.face is not None and arc.face != abc:
                    return True
            return False

        if is_intersecting(left) or is_intersecting(right):
            raise TopologyConflict()
        return cls(cache=cache, left=left, right=right)


@dataclass
class FacePokeCache:
    """Perimeter of a face to be replaced by a fan around a new vertex."""

    vertices: List[VertexKey]
    cache: FaceRemoveCache

    @classmethod
    def from_face(cls, core: Union[Core, Mutation], abc: FaceKey) -> "FacePokeCache":
        cache = FaceRemoveCache.from_face(_storage(core), abc)
        return cls(vertices=[ab.source() for ab in cache.arcs], cache=cache)


@dataclass
class FaceBridgeCache:
    """Arcs of two faces of equal arity to be joined by quadrilaterals."""

    source: List[ArcKey]
    destination: List[ArcKey]
    caches: Tuple[FaceRemoveCache, FaceRemoveCache]

    @classmethod
    def from_face(
        cls, core: Union[Core, Mutation], abc: FaceKey, destination: FaceKey
    ) -> "FaceBridgeCache":
        storage = _storage(core)
        if destination not in storage.faces:
            raise TopologyNotFound()
        caches = (
            FaceRemoveCache.from_face(storage, abc),
            FaceRemoveCache.from_face(storage, destination),
        )
        if len(caches[0].arcs) != len(caches[1].arcs):
            raise ArityNonUniform()
        return cls(
            source=list(caches[0].arcs),
            destination=list(caches[1].arcs),
            caches=caches,
        )


@dataclass
class FaceExtrudeCache:
    """Perimeter of a face to be extruded."""

    sources: List[VertexKey]
    cache: FaceRemoveCache

    @classmethod
    def from_face(cls, core: Union[Core, Mutation], abc: FaceKey) -> "FaceExtrudeCache":
        cache = FaceRemoveCache.from_face(_storage(core), abc)
        return cls(sources=[ab.source() for ab in cache.arcs], cache=cache)


@dataclass
class ArcBridgeCache:
    """Vertices of the quadrilateral joining two boundary arcs."""

    a: VertexKey
    b: VertexKey
    c: VertexKey
    d: VertexKey

    @classmethod
    def from_storage(
        cls, core: Union[Core, Mutation], source: ArcKey, destination: ArcKey
    ) -> "ArcBridgeCache":
        storage = _storage(core)
        if source not in storage.arcs or destination not in storage.arcs:
            raise TopologyNotFound()
        a, b = source
        c, d = destination
        if any(key not in storage.vertices for key in (a, b, c, d)):
            raise TopologyMalformed()
        for x, y in _cyclic_pairs([a, b, c, d]):
            arc = storage.arcs.get(ArcKey(x, y))
            if arc is not None and arc.face is not None:
                raise TopologyConflict()
        return cls(a=a, b=b, c=c, d=d)


def _connect_face_exterior(mutation: Mutation, arcs: List[ArcKey], cache: FaceInsertCache) -> None:
    core = mutation.core
    for ab in arcs:
        a, b = ab
        ba = ab.opposite()
        if ba not in core.arcs:
            raise TopologyMalformed()
        if not _is_boundary(core, ba):
            continue
        # The next arc of BA is a boundary arc leaving A or, failing that, the
        # opposite of the face arc preceding AB; the previous arc is similar.
        ax = next((key for key in cache.outgoing[a] if _is_boundary(core, key)), None)
        if ax is None:
            previous = core.arcs.get(ab).previous
            if previous is not None and previous in core.arcs and previous.opposite() in core.arcs:
                ax = previous.opposite()
        xb = next((key for key in cache.incoming[b] if _is_boundary(core, key)), None)
        if xb is None:
            following = core.arcs.get(ab).next
            if following is not None and following in core.arcs and following.opposite() in core.arcs:
                xb = following.opposite()
        if ax is not None and xb is not None:
            mutation.connect_adjacent_arcs(ba, ax)
            mutation.connect_adjacent_arcs(xb, ba)


def insert_face(mutation: Mutation, cache: FaceInsertCache, data: Any = None) -> FaceKey:
    """Insert a face over the cached perimeter and return its key."""
    arcs = [
        get_or_insert_edge(mutation, (a, b), lambda: (None, (None, None)))[1][0]
        for a, b in _cyclic_pairs(cache.perimeter)
    ]
    face = mutation.core.faces.insert(Face(arc=arcs[0], data=data))
    for ab, bc in _cyclic_pairs(arcs):
        mutation.connect_adjacent_arcs(ab, bc)
        mutation.connect_arc_to_face(ab, face)
    _connect_face_exterior(mutation, arcs, cache)
    return face


def split_face(mutation: Mutation, cache: FaceSplitCache) -> ArcKey:
    """Split a face in two and return the arc joining the split vertices."""
    remove_face(mutation, cache.cache)
    ab = ArcKey(cache.left[0], cache.right[0])
    left = FaceInsertCache.from_storage(mutation, cache.left)
    right = FaceInsertCache.from_storage(mutation, cache.right)
    insert_face(mutation, left)
    insert_face(mutation, right)
    return ab


def poke_face(mutation: Mutation, cache: FacePokeCache, f: Callable[[], Any]) -> VertexKey:
    """Replace a face with a fan of triangles around a new vertex."""
    face = remove_face(mutation, cache.cache)
    c = mutation.insert_vertex(f())
    for a, b in _cyclic_pairs(cache.vertices):
        insert = FaceInsertCache.from_storage(mutation, [a, b, c])
        insert_face(mutation, insert, face.data)
    return c


def bridge_arcs(mutation: Mutation, cache: ArcBridgeCache) -> FaceKey:
    """Insert the quadrilateral joining two boundary arcs."""
    insert = FaceInsertCache.from_storage(mutation, [cache.a, cache.b, cache.c, cache.d])
    return insert_face(mutation, insert)


def bridge_faces(mutation: Mutation, cache: FaceBridgeCache) -> None:
    """Remove two faces and join their arcs with quadrilaterals."""
    remove_face(mutation, cache.caches[0])
    remove_face(mutation, cache.caches[1])
    for ab, cd in zip(cache.source, reversed(cache.destination)):
        bridge_arcs(mutation, ArcBridgeCache.from_storage(mutation, ab, cd))


def extrude_face(
    mutation: Mutation, cache: FaceExtrudeCache, f: Callable[[Any], Any]
) -> FaceKey:
    """Extrude a face, returning the key of the extruded face."""
    remove_face(mutation, cache.cache)
    vertices = [mutation.core.vertices.get(a) for a in cache.sources]
    if any(vertex is None for vertex in vertices):
        raise TopologyNotFound()
    destinations = [mutation.insert_vertex(f(vertex.data)) for vertex in vertices]
    extrusion = insert_face(mutation, FaceInsertCache.from_storage(mutation, destinations))
    for (a, c), (b, d) in _cyclic_pairs(list(zip(cache.sources, destinations))):
        insert_face(mutation, FaceInsertCache.from_storage(mutation, [a, b, d, c]))
    return extrusion