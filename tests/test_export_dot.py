"""
Tests for KCQL Graphviz DOT export.
"""

from kcql.export import export_dot
from kcql.graph import Edge, Graph, Node


class TestExportDot:
    """Tests for export_dot()."""

    def test_empty_graph(self):
        assert export_dot(Graph()) == "graph {\n\trankdir = LR;\n\n}"

    def test_edges_then_isolated_nodes(self):
        graph = Graph()
        graph.add_node(Node("Service", "s"))
        graph.add_node(Node("Pod", "p"))
        graph.add_node(Node("Node", "n"))
        graph.add_edge(Edge("Service/s", "Pod/p", "EXPOSES"))

        lines = export_dot(graph).splitlines()

        assert lines[3] == '"*Service* s" -> "*Pod* p" [label=":EXPOSES"];'
        assert lines[4] == '"*Node* n";'
        assert lines[-1] == "}"
        assert len(lines) == 6

    def test_direction(self):
        assert "\trankdir = TB;" in export_dot(Graph(), direction="TB")

    def test_quotes_escaped(self):
        graph = Graph()
        graph.add_node(Node('Odd"Kind', "x"))
        assert '"*Odd\\"Kind* x";' in export_dot(graph)
