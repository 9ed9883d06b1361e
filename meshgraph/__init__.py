"""Half-edge graph of polygonal meshes: entities, mutations, views and MeshGraph."""

__version__ = "0.1.0"
__all__ = ["entities", "mutation", "face_ops", "edge_ops", "views", "graph"]