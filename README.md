# meshgraph

A half-edge graph for polygonal meshes.

`meshgraph` represents a mesh with four kinds of entity:

- **vertices**, which can hold any data, for example a position tuple;
- **arcs**, the directed half-edges, with keys made of their source and destination vertex keys;
- **edges**, each joining an arc and its opposite arc;
- **faces**, each bounded by a closed ring of arcs.

The arcs are linked to their next and previous arcs. This lets you walk from any entity to its neighbours. You can also change the topology: split, poke, extrude and bridge faces, and split, extrude and bridge arcs.

The package has no dependencies outside the standard library.

## Building a graph

```python
from meshgraph.graph import MeshGraph

# Two triangles that share an edge.
graph = MeshGraph.from_raw_buffers(
    [(0, 1, 2), (2, 1, 3)],
    [(-1.0, 0.0), (0.0, -1.0), (0.0, 1.0), (1.0, 0.0)],
)
print(graph.vertex_count(), graph.arc_count(), graph.edge_count(), graph.face_count())
# 4 10 5 2
```

To use a flat index buffer with a constant arity:

```python
quad = MeshGraph.from_raw_buffers_with_arity(
    [0, 1, 2, 3],
    [(0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 1.0)],
    4,
)
```

- An arity below 3 raises `ArityNonPolygonal`.
- An index buffer whose length is not a multiple of the arity raises `ArityConflict`.
- An index outside the vertex buffer raises `TopologyNotFound`.
- A face that would put a third face on an edge raises `TopologyConflict`.

`MeshGraph.from_polygons` builds a graph from polygons whose items are vertex data. Equal (hashable) values are merged into one vertex. If the polygons cannot form a graph, it returns an empty graph. `MeshGraph.from_polygon` builds a single-face graph from one polygon.

## Walking the graph

`vertices()`, `arcs()`, `edges()` and `faces()` yield views. `vertex(key)`, `arc(key)`, `edge(key)` and `face(key)` return a view, or `None` when the key is not in the graph. Every view has a `key`, and the entity's data is available through its `data` attribute, which you can read and assign.

```python
for vertex in graph.vertices():
    print(vertex.key, vertex.data, vertex.valence(),
          [face.arity() for face in vertex.adjacent_faces()])

edge = next(e for e in graph.edges() if not e.is_boundary_edge())
arc = edge.arc()
print(arc.source_vertex(), arc.destination_vertex(), arc.face())
```

Methods on each view:

- **Vertex views:** `outgoing_arc`, `incoming_arcs`, `outgoing_arcs`, `adjacent_vertices`, `adjacent_faces`, `valence`, `traverse_by_breadth` and `traverse_by_depth`.
- **Arc views:** `opposite_arc`, `next_arc`, `previous_arc`, `source_vertex`, `destination_vertex`, `edge`, `face` (which is `None` for a boundary arc) and `is_boundary_arc`.
- **Edge views:** `arc` and `is_boundary_edge`.
- **Face views:** `arc`, `arity`, `adjacent_arcs` and `adjacent_vertices`.

`MeshGraph.disjoint_subgraph_vertices()` returns one vertex from each part of the graph that is not connected to the rest.

## Changing the graph

```python
from meshgraph.entities import ByIndex

square = MeshGraph.from_polygon([(0, 0), (1, 0), (1, 1), (0, 1)])
face = next(square.faces())
arc = face.split(ByIndex(0), ByIndex(2))   # plain ints and vertex keys work too
print(square.face_count(), square.arity())   # 2 3

pentagon = MeshGraph.from_polygon([(0, 0), (2, 0), (3, 1), (1, 2), (-1, 1)])
pentagon.triangulate()
print(pentagon.arity())                     # 3
```

Mutating operations on face views:

- `split(source, destination)` returns the arc from `source` to `destination`.
- `poke_with(f)` replaces the face with a fan of triangles around a new vertex whose data is `f()`.
- `extrude_with(f)` creates a copy of the face with vertex data mapped by `f` and returns the new face.
- `bridge(destination)` removes two faces of equal arity and joins their arcs with quadrilaterals.

Mutating operations on arc views:

- `split_with(f)` splits the edge at a new vertex whose data is `f()`.
- `extrude_with(f)` extrudes a boundary arc into a quadrilateral and returns the extruded arc.
- `bridge(destination)` inserts the quadrilateral that joins two boundary arcs.

Each of these operations works on a copy of the storage. It installs the result only if the result passes the consistency check, so an operation that fails raises a `GraphError` subclass and leaves the graph unchanged. `MeshGraph.triangulate` splits faces one at a time. If it fails, the faces it has already split stay split.

`MeshGraph.arity()` returns an int when all faces have the same arity. Otherwise it returns `(min, max)`, and for an empty graph it returns `0`. `MeshGraph.into_polygons()` returns the vertex data of each face, in ring order.

## Errors

All errors derive from `meshgraph.entities.GraphError`:

- `TopologyNotFound`
- `TopologyConflict`
- `TopologyMalformed`
- `TopologyUnreachable`
- `ArityNonPolygonal`
- `ArityConflict`, which carries `expected` and `actual`
- `ArityNonUniform`
- `GeometryError`
- `EncodingIncompatible`

## Lower-level modules

You can use the storage layer directly for your own operations:

- `meshgraph.entities` provides the keys, entities, `Storage` and `Core`.
- `meshgraph.mutation` provides `Mutation` with its connect and disconnect primitives, `commit` (the consistency check), `get_or_insert_edge` and `remove_face`.
- `meshgraph.face_ops` and `meshgraph.edge_ops` provide the cache classes that validate an operation, together with the functions that carry it out, including `remove_edge`.

## What it does not do

Vertex data is opaque to the graph. The package has no geometry of its own: no normals, centroids, midpoints, bounding boxes or smoothing. It has no paths or shortest-path search, no vertex removal through views, and no mesh primitives such as cubes or spheres. It does not read or write any mesh file format.