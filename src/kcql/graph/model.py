# -*- encoding: utf-8 -*-
"""
KCQL Graph model - Node/Edge/Graph value types.

The same types describe a parsed pattern (nodes are bindings of a kind,
edges are declared relationships) and, once a query has run, the shape
of its result: kinds resolved, and edges touching bindings with no
matching resources dropped.

Node identity is ``{kind}/{name}``; adding a node whose id is already
present collapses it into the existing one.
"""

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional


def node_id(kind: str, name: str) -> str:
    """Build the graph identity of a node."""
    return f"{kind}/{name}"


@dataclass
class Node:
    """
    A node in a pattern or result graph.

    Attributes:
        kind: Resource kind as written, or the canonical kind once resolved
        name: Binding name (patterns) or resource name
        properties: Ordered field-path -> literal mapping, used as a filter
            by MATCH and as the document payload by CREATE
    """
    kind: str
    name: str
    properties: dict[str, Any] = field(default_factory=dict)

    @property
    def id(self) -> str:
        return node_id(self.kind, self.name)

    def to_dict(self) -> dict:
        result = {"id": self.id, "kind": self.kind, "name": self.name}
        if self.properties:
            result["properties"] = dict(self.properties)
        return result


@dataclass(frozen=True)
class Edge:
    """
    A directed relationship between two nodes of the same graph.

    Attributes:
        source: Id of the source node
        target: Id of the target node
        edge_type: Relationship label, e.g. "OWNS"
    """
    source: str
    target: str
    edge_type: str

    def to_dict(self) -> dict:
        return {"from": self.source, "to": self.target, "type": self.edge_type}


@dataclass
class Graph:
    """
    Ordered nodes and edges.

    Invariants:
        - node ids are unique
        - every edge endpoint is the id of a node in the graph
    """
    nodes: list[Node] = field(default_factory=list)
    edges: list[Edge] = field(default_factory=list)

    def get(self, nid: str) -> Optional[Node]:
        """Return the node with the given id, or None."""
        for node in self.nodes:
            if node.id == nid:
                return node
        return None

    def node_for(self, name: str) -> Optional[Node]:
        """Return the first node carrying a binding/resource name."""
        for node in self.nodes:
            if node.name == name:
                return node
        return None

    def add_node(self, node: Node) -> Node:
        """
        Add a node, collapsing it into an existing node with the same id.

        Properties of a collapsed duplicate are merged into the kept node.

        Returns:
            The node now stored in the graph
        """
        existing = self.get(node.id)
        if existing is not None:
            existing.properties.update(node.properties)
            return existing
        self.nodes.append(node)
        return node

    def add_edge(self, edge: Edge) -> None:
        """
        Add an edge between two nodes already in the graph.

        Identical edges are stored once.

        Raises:
            ValueError: If either endpoint is not a node of this graph
        """
        for endpoint in (edge.source, edge.target):
            if self.get(endpoint) is None:
                raise ValueError(f"Edge endpoint {endpoint!r} is not a node of the graph")
        if edge not in self.edges:
            self.edges.append(edge)

    def with_kinds(self, kinds: Mapping[str, str]) -> "Graph":
        """
        Copy the graph with node kinds replaced by name.

        Used to turn a pattern (kinds as the user wrote them) into a
        result shape keyed by canonical kinds.

        Args:
            kinds: Mapping of node name -> replacement kind
        """
        renamed: dict[str, str] = {}
        graph = Graph()
        for node in self.nodes:
            copy = Node(
                kind=kinds.get(node.name, node.kind),
                name=node.name,
                properties=dict(node.properties),
            )
            renamed[node.id] = graph.add_node(copy).id
        for edge in self.edges:
            graph.add_edge(Edge(renamed[edge.source], renamed[edge.target], edge.edge_type))
        return graph

    def sanitize(self, data: Mapping[str, list]) -> "Graph":
        """
        Shape the graph against query results.

        Nodes are kept regardless of results; edges survive only when both
        endpoints have at least one document in ``data`` (keyed by node
        name).
        """
        populated = {node.id for node in self.nodes if data.get(node.name)}
        return Graph(
            nodes=[Node(n.kind, n.name, dict(n.properties)) for n in self.nodes],
            edges=[
                edge for edge in self.edges
                if edge.source in populated and edge.target in populated
            ],
        )

    def to_dict(self) -> dict:
        return {
            "nodes": [node.to_dict() for node in self.nodes],
            "edges": [edge.to_dict() for edge in self.edges],
        }
