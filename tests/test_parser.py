"""
Tests for KCQL Parser.

Tests the Lark-based parser for KCQL query strings.
"""

import pytest

from kcql.exceptions import LexError, QueryParseError
from kcql.graph import Edge
from kcql.parser import KCQLParser, parse
from kcql.parser.ast import (
    Comparator,
    KCQLQuery,
    StatementType,
)


class TestKCQLParser:
    """Tests for KCQLParser class."""

    @pytest.fixture
    def parser(self):
        """Create a parser instance."""
        return KCQLParser()

    # --- MATCH tests ---

    def test_parse_simple_match(self, parser):
        """Test parsing a simple MATCH query."""
        result = parser.parse("MATCH (d:Deployment)")

        assert isinstance(result, KCQLQuery)
        assert result.statement == StatementType.MATCH
        assert result.bindings == ["d"]
        node = result.node("d")
        assert node.kind == "Deployment"
        assert node.id == "Deployment/d"
        assert result.where is None
        assert result.return_clause is None
        assert not result.is_mutation

    def test_parse_node_properties(self, parser):
        """Property blocks keep their order and literal types."""
        result = parser.parse(
            'MATCH (d:Deployment {name: "web", spec.replicas: 2, ready: true, ratio: 0.5})'
        )
        assert result.node("d").properties == {
            "name": "web",
            "spec.replicas": 2,
            "ready": True,
            "ratio": 0.5,
        }
        assert list(result.node("d").properties) == ["name", "spec.replicas", "ready", "ratio"]

    def test_parse_edge(self, parser):
        """Test MATCH with an edge pattern."""
        result = parser.parse("MATCH (d:Deployment)-[:OWNS]->(rs:ReplicaSet)")

        assert result.bindings == ["d", "rs"]
        assert result.graph.edges == [Edge("Deployment/d", "ReplicaSet/rs", "OWNS")]

    def test_parse_chain_and_shared_bindings(self, parser):
        """Comma-separated patterns share bindings."""
        result = parser.parse(
            "MATCH (d:Deployment)-[:OWNS]->(rs:ReplicaSet), (rs:ReplicaSet)-[:OWNS]->(p:Pod)"
        )

        assert result.bindings == ["d", "rs", "p"]
        assert [(e.source, e.target) for e in result.graph.edges] == [
            ("Deployment/d", "ReplicaSet/rs"),
            ("ReplicaSet/rs", "Pod/p"),
        ]

    def test_duplicate_nodes_collapse(self, parser):
        """A binding declared twice is one node with merged properties."""
        result = parser.parse(
            'MATCH (d:Deployment {name: "web"}), (d:Deployment {namespace: "prod"})'
        )

        assert len(result.graph.nodes) == 1
        assert result.node("d").properties == {"name": "web", "namespace": "prod"}

    def test_conflicting_kinds(self, parser):
        with pytest.raises(QueryParseError, match="declared as both"):
            parser.parse("MATCH (x:Pod), (x:Service)")

    def test_parse_where_and_return(self, parser):
        """Test MATCH with WHERE and RETURN clauses."""
        result = parser.parse(
            'MATCH (d:Deployment) WHERE d.spec.replicas > 1, d.metadata.name != "api" '
            "RETURN d.metadata.name, d.spec.replicas"
        )

        conditions = result.where.conditions
        assert len(conditions) == 2
        assert conditions[0].field.binding == "d"
        assert conditions[0].field.segments == ["spec", "replicas"]
        assert conditions[0].comparator == Comparator.GT
        assert conditions[0].value == 1
        assert conditions[1].comparator == Comparator.NE
        assert conditions[1].value == "api"

        assert [item.expression for item in result.return_clause.items] == [
            "d.metadata.name",
            "d.spec.replicas",
        ]
        assert result.return_clause.bindings == ["d"]

    def test_return_whole_binding(self, parser):
        result = parser.parse("MATCH (d:Deployment) RETURN d")
        assert result.return_clause.items[0].field.whole_document

    def test_trailing_semicolon(self, parser):
        result = parser.parse("MATCH (p:Pod) RETURN p.metadata.name;")
        assert result.statement == StatementType.MATCH

    def test_keywords_case_insensitive(self, parser):
        result = parser.parse("match (p:Pod) return p.metadata.name")
        assert result.return_clause is not None

    def test_unknown_binding_in_return(self, parser):
        with pytest.raises(QueryParseError, match="Unknown binding 'x'"):
            parser.parse("MATCH (d:Deployment) RETURN x.metadata.name")

    def test_unknown_binding_in_where(self, parser):
        with pytest.raises(QueryParseError, match="Unknown binding"):
            parser.parse('MATCH (d:Deployment) WHERE p.status.phase = "Running"')

    def test_malformed_path(self, parser):
        with pytest.raises(QueryParseError):
            parser.parse("MATCH (d:Deployment) RETURN d..name")

    # --- Mutation tests ---

    def test_parse_create(self, parser):
        result = parser.parse('CREATE (d:Deployment {name: "new", spec.replicas: 3})')

        assert result.statement == StatementType.CREATE
        assert result.is_mutation
        assert result.node("d").properties == {"name": "new", "spec.replicas": 3}

    def test_create_with_relationship(self, parser):
        result = parser.parse("CREATE (d:Deployment)-[:OWNS]->(rs:ReplicaSet)")

        assert result.bindings == ["d", "rs"]
        assert len(result.graph.edges) == 1

    def test_parse_set(self, parser):
        result = parser.parse(
            'SET (d:Deployment {name: "web"}) {d.spec.replicas: 5, d.metadata.labels.tier: "gold"}'
        )

        assert result.statement == StatementType.SET
        assert [(a.field.binding, a.field.segments, a.value) for a in result.assignments] == [
            ("d", ["spec", "replicas"], 5),
            ("d", ["metadata", "labels", "tier"], "gold"),
        ]

    def test_set_requires_known_binding(self, parser):
        with pytest.raises(QueryParseError, match="Unknown binding"):
            parser.parse('SET (d:Deployment {name: "web"}) {x.spec.replicas: 5}')

    def test_set_rejects_whole_binding(self, parser):
        with pytest.raises(QueryParseError, match="whole binding"):
            parser.parse("SET (d:Deployment) {d: 5}")

    def test_set_requires_assignments(self, parser):
        with pytest.raises(QueryParseError, match="at least one"):
            parser.parse("SET (d:Deployment) {}")

    def test_parse_delete(self, parser):
        result = parser.parse('DELETE (p:Pod {name: "web-abc-1"})')

        assert result.statement == StatementType.DELETE
        assert result.node("p").properties == {"name": "web-abc-1"}


class TestParseErrors:
    """Tests for syntax and lexical errors."""

    @pytest.fixture
    def parser(self):
        return KCQLParser()

    def test_unexpected_end(self, parser):
        with pytest.raises(QueryParseError, match="Unexpected end of input") as exc:
            parser.parse("MATCH (d:Deployment")

        assert "RPAR" in exc.value.expected
        assert exc.value.line == 1

    def test_unexpected_token(self, parser):
        with pytest.raises(QueryParseError) as exc:
            parser.parse("MATCH d:Deployment)")

        assert "IDENT 'd'" in str(exc.value)
        assert (exc.value.line, exc.value.column) == (1, 7)
        assert "LPAR" in exc.value.expected

    def test_illegal_character(self, parser):
        with pytest.raises(LexError) as exc:
            parser.parse("MATCH (p:Pod) @")

        assert (exc.value.line, exc.value.column) == (1, 15)
        assert exc.value.text == "@"
        assert "Illegal character '@'" in str(exc.value)

    def test_unterminated_string(self, parser):
        with pytest.raises(LexError, match="Unterminated string literal"):
            parser.parse('MATCH (p:Pod {name: "web)')

    def test_non_ascii_digit(self, parser):
        with pytest.raises(LexError) as exc:
            parser.parse("MATCH (d:Deployment {spec.replicas: ²})")

        assert exc.value.text == "²"
        assert exc.value.column == 37

    def test_lex_error_is_parse_error(self):
        assert issubclass(LexError, QueryParseError)

    def test_error_to_dict(self, parser):
        with pytest.raises(QueryParseError) as exc:
            parser.parse("MATCH (d:Deployment")

        d = exc.value.to_dict()
        assert d["error"] == "QueryParseError"
        assert d["line"] == 1
        assert "RPAR" in d["expected"]


class TestConvenienceFunction:
    """Tests for the parse() convenience function."""

    def test_parse_function(self):
        result = parse("MATCH (p:Pod)")
        assert isinstance(result, KCQLQuery)
        assert result.bindings == ["p"]
