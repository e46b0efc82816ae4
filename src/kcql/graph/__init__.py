"""KCQL Graph module - pattern and result graph value types."""

from kcql.graph.model import Edge, Graph, Node, node_id

__all__ = [
    "Edge",
    "Graph",
    "Node",
    "node_id",
]
