"""
KCQL Parser - Lark-based parser for Kubernetes Cypher Query Language.

Tokens come from the hand-written KCQL lexer (see kcql.parser.lexer);
Lark's LALR parser checks them against the grammar and a Transformer
folds the parse tree into statement tuples, which are then assembled
into a KCQLQuery with its pattern graph.
"""

import logging
from typing import Iterator, Optional

from lark import Lark, Transformer, Token as LarkToken
from lark.exceptions import UnexpectedInput, UnexpectedToken
from lark.lexer import Lexer as LarkLexer

from kcql.exceptions import LexError, QueryParseError
from kcql.graph import Edge, Graph, Node
from kcql.parser.grammar import get_grammar
from kcql.parser.lexer import Lexer, TokenType
from kcql.parser.ast import (
    Assignment,
    Comparator,
    Condition,
    FieldRef,
    KCQLQuery,
    ReturnClause,
    ReturnItem,
    StatementType,
    WhereClause,
)
from kcql.paths import parse_path

logger = logging.getLogger(__name__)


# Lexer token type -> grammar terminal name
_TERMINALS = {
    TokenType.MATCH: "_MATCH",
    TokenType.WHERE: "_WHERE",
    TokenType.RETURN: "_RETURN",
    TokenType.CREATE: "_CREATE",
    TokenType.SET: "_SET",
    TokenType.DELETE: "_DELETE",
    TokenType.LPAR: "_LPAR",
    TokenType.RPAR: "_RPAR",
    TokenType.LBRACE: "_LBRACE",
    TokenType.RBRACE: "_RBRACE",
    TokenType.LSQB: "_LSQB",
    TokenType.RSQB: "_RSQB",
    TokenType.COLON: "_COLON",
    TokenType.COMMA: "_COMMA",
    TokenType.DASH: "_DASH",
    TokenType.ARROW: "_ARROW",
    TokenType.SEMICOLON: "_SEMICOLON",
    TokenType.EQ: "COMPARATOR",
    TokenType.NE: "COMPARATOR",
    TokenType.LT: "COMPARATOR",
    TokenType.GT: "COMPARATOR",
    TokenType.LE: "COMPARATOR",
    TokenType.GE: "COMPARATOR",
}


class KCQLTokenStream(LarkLexer):
    """
    Lark lexer adapter over the KCQL lexer.

    Stops at EOF (Lark appends its own end marker) and turns ILLEGAL
    tokens into a LexError carrying their position.
    """

    def __init__(self, lexer_conf):
        pass

    def lex(self, data: str) -> Iterator[LarkToken]:
        for token in Lexer(data):
            if token.type is TokenType.EOF:
                return
            if token.type is TokenType.ILLEGAL:
                raise LexError(token.text, token.line, token.column)
            yield LarkToken(
                _TERMINALS.get(token.type, token.type.value),
                token.text,
                token.pos,
                token.line,
                token.column,
            )


class KCQLTransformer(Transformer):
    """
    Lark Transformer that converts the parse tree to statement tuples.

    Each statement becomes (type, patterns, where, returns, properties);
    field paths stay raw strings until KCQLParser validates them.
    """

    # --- Values ---

    def value(self, items):
        token = items[0]
        if token.type == "INT":
            return int(token)
        if token.type == "FLOAT":
            return float(token)
        if token.type == "BOOLEAN":
            return str(token).lower() == "true"
        return str(token)

    # --- Properties ---

    def property(self, items):
        return (str(items[0]), items[1])

    def properties(self, items):
        return list(items)

    # --- Patterns ---

    def node(self, items):
        binding = str(items[0])
        kind = str(items[1])
        props = items[2] if len(items) > 2 else []
        return Node(kind=kind, name=binding, properties=dict(props))

    def edge(self, items):
        return str(items[0])

    def pattern(self, items):
        return list(items)

    def patterns(self, items):
        return list(items)

    # --- Clauses ---

    def condition(self, items):
        return (str(items[0]), Comparator(str(items[1])), items[2])

    def where_clause(self, items):
        return ("where", list(items))

    def return_clause(self, items):
        return ("return", [str(item) for item in items])

    # --- Statements ---

    def match_query(self, items):
        patterns = items[0]
        where = None
        returns = None
        for item in items[1:]:
            if item[0] == "where":
                where = item[1]
            elif item[0] == "return":
                returns = item[1]
        return (StatementType.MATCH, patterns, where, returns, None)

    def create_query(self, items):
        return (StatementType.CREATE, items[0], None, None, None)

    def set_query(self, items):
        return (StatementType.SET, items[0], None, None, items[1])

    def delete_query(self, items):
        return (StatementType.DELETE, items[0], None, None, None)

    def start(self, items):
        return items[0]


class KCQLParser:
    """
    KCQL Parser using Lark.

    Parses KCQL query strings into KCQLQuery AST nodes. The first error
    aborts the parse.

    Example:
        parser = KCQLParser()
        query = parser.parse('MATCH (d:Deployment {name: "web"}) RETURN d.metadata.name')
    """

    def __init__(self):
        self._parser = Lark(
            get_grammar(),
            parser='lalr',
            lexer=KCQLTokenStream,
            transformer=KCQLTransformer(),
        )

    def parse(self, query_string: str) -> KCQLQuery:
        """
        Parse a KCQL query string into an AST.

        Args:
            query_string: The KCQL query to parse

        Returns:
            KCQLQuery AST node

        Raises:
            LexError: If the query contains an illegal character
            QueryParseError: If the query is not valid KCQL
        """
        logger.debug("Parsing query: %s", query_string)
        try:
            parsed = self._parser.parse(query_string)
        except UnexpectedToken as e:
            raise self._unexpected_token(e) from e
        except UnexpectedInput as e:
            raise QueryParseError(
                "Unexpected input",
                line=_position(getattr(e, "line", None)),
                column=_position(getattr(e, "column", None)),
            ) from e

        return self._build(parsed, query_string)

    def _unexpected_token(self, error: UnexpectedToken) -> QueryParseError:
        token = error.token
        expected = [name.lstrip("_") for name in error.expected]
        if token.type == "$END":
            message = "Unexpected end of input"
        else:
            message = f"Unexpected {token.type.lstrip('_')} {str(token)!r}"
        return QueryParseError(
            message,
            line=_position(getattr(token, "line", None)),
            column=_position(getattr(token, "column", None)),
            expected=expected,
        )

    def _build(self, parsed: tuple, text: str) -> KCQLQuery:
        statement, patterns, where, returns, properties = parsed

        query = KCQLQuery(statement=statement, graph=self._build_graph(patterns), text=text)
        bindings = set(query.bindings)

        if where:
            query.where = WhereClause(conditions=[
                Condition(field=self._field(path, bindings), comparator=comparator, value=value)
                for path, comparator, value in where
            ])

        if returns:
            query.return_clause = ReturnClause(items=[
                ReturnItem(field=self._field(path, bindings)) for path in returns
            ])

        if statement == StatementType.SET:
            if not properties:
                raise QueryParseError("SET requires at least one assignment")
            for path, value in properties:
                ref = self._field(path, bindings)
                if ref.whole_document:
                    raise QueryParseError(f"Cannot assign to whole binding {ref.binding!r}")
                query.assignments.append(Assignment(field=ref, value=value))

        return query

    def _build_graph(self, patterns: list) -> Graph:
        graph = Graph()
        kinds: dict[str, str] = {}

        for chain in patterns:
            previous: Optional[Node] = None
            edge_type: Optional[str] = None
            for item in chain:
                if isinstance(item, str):
                    edge_type = item
                    continue

                declared = kinds.get(item.name)
                if declared is not None and declared != item.kind:
                    raise QueryParseError(
                        f"Binding {item.name!r} declared as both {declared} and {item.kind}"
                    )
                kinds[item.name] = item.kind

                for key in item.properties:
                    try:
                        parse_path(key)
                    except ValueError as e:
                        raise QueryParseError(str(e)) from e

                node = graph.add_node(item)
                if previous is not None and edge_type is not None:
                    graph.add_edge(Edge(previous.id, node.id, edge_type))
                previous = node
                edge_type = None

        return graph

    def _field(self, expression: str, bindings: set) -> FieldRef:
        try:
            ref = FieldRef.parse(expression)
        except ValueError as e:
            raise QueryParseError(str(e)) from e
        if ref.binding not in bindings:
            raise QueryParseError(f"Unknown binding {ref.binding!r} in {expression!r}")
        return ref


def _position(value) -> Optional[int]:
    return value if isinstance(value, int) and value > 0 else None


def parse(query_string: str) -> KCQLQuery:
    """
    Convenience function to parse a KCQL query.

    Creates a parser instance and parses the query string.
    For repeated parsing, use KCQLParser directly for better performance.

    Args:
        query_string: The KCQL query to parse

    Returns:
        KCQLQuery AST node
    """
    parser = KCQLParser()
    return parser.parse(query_string)
