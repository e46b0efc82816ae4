# -*- encoding: utf-8 -*-
"""
KCQL Graphviz DOT Exporter.

Renders a result graph as DOT text, one statement per edge and one per
node that no edge touches.

Example Output:
    graph {
    	rankdir = LR;

    "*Deployment* d" -> "*ReplicaSet* rs" [label=":OWNS"];
    "*Pod* p";
    }

Usage:
    from kcql.export import export_dot

    print(export_dot(result.graph))
"""

from kcql.graph import Graph, Node


def _label(node: Node) -> str:
    text = f"*{node.kind}* {node.name}"
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'


def export_dot(graph: Graph, direction: str = "LR") -> str:
    """
    Generate DOT text from a Graph.

    Args:
        graph: Graph to render, usually QueryResult.graph
        direction: Graphviz rankdir - "LR", "TB", "RL" or "BT"

    Returns:
        DOT document as string
    """
    lines = ["graph {", f"\trankdir = {direction};", ""]

    connected: set[str] = set()
    for edge in graph.edges:
        source = graph.get(edge.source)
        target = graph.get(edge.target)
        lines.append(f'{_label(source)} -> {_label(target)} [label=":{edge.edge_type}"];')
        connected.update((edge.source, edge.target))

    for node in graph.nodes:
        if node.id not in connected:
            lines.append(f"{_label(node)};")

    lines.append("}")
    return "\n".join(lines)
