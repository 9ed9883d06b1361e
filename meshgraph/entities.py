"""Errors, selectors, keys, entities and storage of a half-edge mesh graph."""

from __future__ import annotations

import copy
import itertools
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Iterator, Optional, TypeVar, Union

K = TypeVar("K")
E = TypeVar("E")


class GraphError(Exception):
    """Base class of errors concerning mesh graphs."""

    message = "graph operation failed"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message if message is not None else self.message)


class TopologyNotFound(GraphError):
    message = "required topology not found"


class TopologyConflict(GraphError):
    message = "conflicting topology found"


class TopologyMalformed(GraphError):
    message = "topology malformed"


class TopologyUnreachable(GraphError):
    message = "topology unreachable"


class ArityNonPolygonal(GraphError):
    message = "arity is non-polygonal"


class ArityConflict(GraphError):
    """The arity of a structure is not compatible with an operation."""

    def __init__(self, expected: int, actual: int) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"conflicting arity; expected {expected}, but got {actual}")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ArityConflict):
            return NotImplemented
        return (self.expected, self.actual) == (other.expected, other.actual)

    def __hash__(self) -> int:
        return hash((type(self), self.expected, self.actual))


class ArityNonUniform(GraphError):
    message = "arity is non-uniform"


class GeometryError(GraphError):
    message = "geometric operation failed"


class EncodingIncompatible(GraphError):
    message = "encoding operation failed"


@dataclass(frozen=True, order=True)
class VertexKey:
    """Opaque key of a vertex."""

    value: int


@dataclass(frozen=True, order=True)
class EdgeKey:
    """Opaque key of an edge."""

    value: int


@dataclass(frozen=True, order=True)
class FaceKey:
    """Opaque key of a face."""

    value: int


@dataclass(frozen=True, order=True)
class ArcKey:
    """Key of a directed arc, formed from its source and destination vertices."""

    a: VertexKey
    b: VertexKey

    def opposite(self) -> "ArcKey":
        """Key of the arc pointing the other way."""
        return ArcKey(self.b, self.a)

    def source(self) -> VertexKey:
        return self.a

    def destination(self) -> VertexKey:
        return self.b

    def __iter__(self) -> Iterator[VertexKey]:
        yield self.a
        yield self.b


_KEY_TYPES = (VertexKey, ArcKey, EdgeKey, FaceKey)


@dataclass(frozen=True)
class ByKey(Generic[K]):
    """Selects an entity by its key."""

    key: K

    def key_or_else(self, f: Callable[[int], K]) -> K:
        """Return the key; ``f`` is not called."""
        return self.key

    def index_or_else(self, f: Callable[[K], int]) -> int:
        """Resolve the key into an index with ``f``."""
        return f(self.key)


@dataclass(frozen=True)
class ByIndex:
    """Selects an entity by an index relative to another entity."""

    index: int

    def __post_init__(self) -> None:
        if self.index < 0:
            raise ValueError("selector index must not be negative")

    def key_or_else(self, f: Callable[[int], Any]) -> Any:
        """Resolve the index into a key with ``f``."""
        return f(self.index)

    def index_or_else(self, f: Callable[[Any], int]) -> int:
        """Return the index; ``f`` is not called."""
        return self.index


Selector = Union[ByKey, ByIndex]


def to_selector(value: Any) -> Selector:
    """Coerce a key, an index or a selector into a selector."""
    if isinstance(value, (ByKey, ByIndex)):
        return value
    if isinstance(value, _KEY_TYPES):
        return ByKey(value)
    if isinstance(value, int) and not isinstance(value, bool):
        return ByIndex(value)
    raise TypeError(f"cannot select an entity with {value!r}")


@dataclass
class Vertex:
    """Vertex entity; ``arc`` is its leading (outgoing) arc."""

    data: Any = None
    arc: Optional[ArcKey] = None


@dataclass
class Arc:
    """Arc (half-edge) entity."""

    data: Any = None
    next: Optional[ArcKey] = None
    previous: Optional[ArcKey] = None
    edge: Optional[EdgeKey] = None
    face: Optional[FaceKey] = None


@dataclass
class Edge:
    """Edge entity joining an arc and its opposite."""

    arc: ArcKey
    data: Any = None


@dataclass
class Face:
    """Face entity; ``arc`` is its leading arc."""

    arc: ArcKey
    data: Any = None


class Storage(Generic[K, E]):
    """Insertion-ordered entity storage with optional incremental keys."""

    def __init__(self, key_type: Optional[Callable[[int], K]] = None) -> None:
        self._entities: dict = {}
        self._key_type = key_type
        self._counter = itertools.count()

    def insert(self, entity: E) -> K:
        """Insert an entity under a fresh key and return the key."""
        if self._key_type is None:
            raise TypeError("this storage requires explicit keys")
        key = self._key_type(next(self._counter))
        self._entities[key] = entity
        return key

    def insert_with_key(self, key: K, entity: E) -> Optional[E]:
        """Insert an entity under ``key``, returning any entity it replaced."""
        previous = self._entities.get(key)
        self._entities[key] = entity
        return previous

    def get(self, key: K) -> Optional[E]:
        return self._entities.get(key)

    def remove(self, key: K) -> Optional[E]:
        return self._entities.pop(key, None)

    def keys(self) -> list:
        return list(self._entities)

    def items(self) -> list:
        return list(self._entities.items())

    def __len__(self) -> int:
        return len(self._entities)

    def __contains__(self, key: object) -> bool:
        return key in self._entities

    def __iter__(self) -> Iterator[K]:
        return iter(list(self._entities))


@dataclass
class Core:
    """Raw topological storage of a graph."""

    vertices: Storage = field(default_factory=lambda: Storage(VertexKey))
    arcs: Storage = field(default_factory=Storage)
    edges: Storage = field(default_factory=lambda: Storage(EdgeKey))
    faces: Storage = field(default_factory=lambda: Storage(FaceKey))

    def copy(self) -> "Core":
        """Return an independent deep copy of the storage."""
        return copy.deepcopy(self)