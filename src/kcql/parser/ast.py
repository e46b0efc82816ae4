"""
KCQL AST - Abstract Syntax Tree nodes for KCQL queries.

These dataclasses represent the parsed structure of KCQL statements.
The pattern itself is carried as a graph (see kcql.graph); the clause
payload (WHERE conditions, RETURN items, SET assignments) refers back
to pattern nodes through their binding names.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

from kcql.graph import Graph, Node
from kcql.paths import Segment, parse_path


class StatementType(str, Enum):
    """Top-level statement kinds."""
    MATCH = "match"
    CREATE = "create"
    SET = "set"
    DELETE = "delete"


class Comparator(Enum):
    """Comparison operators for WHERE conditions."""
    EQ = "="
    NE = "!="
    LT = "<"
    GT = ">"
    LE = "<="
    GE = ">="


Literal = Union[str, int, float, bool]


@dataclass
class FieldRef:
    """
    A field path rooted at a binding.

    Represents: binding.path.to.field

    ``segments`` is empty when the reference names the whole document.
    """
    binding: str
    segments: list[Segment] = field(default_factory=list)
    expression: str = ""

    @classmethod
    def parse(cls, expression: str) -> "FieldRef":
        """
        Split a path literal into its binding and field segments.

        Raises:
            ValueError: If the literal is not a well-formed path or does
                not start with a binding name
        """
        segments = parse_path(expression)
        head = segments[0]
        if not isinstance(head, str):
            raise ValueError(f"Field path {expression!r} must start with a binding")
        return cls(binding=head, segments=segments[1:], expression=expression)

    @property
    def whole_document(self) -> bool:
        return not self.segments


@dataclass
class Condition:
    """
    A single condition in a WHERE clause.

    Represents: binding.field comparator value
    """
    field: FieldRef
    comparator: Comparator
    value: Literal


@dataclass
class WhereClause:
    """
    WHERE clause containing one or more conditions.

    Conditions are combined with AND.
    """
    conditions: list[Condition] = field(default_factory=list)


@dataclass
class ReturnItem:
    """A single field path in a RETURN clause."""
    field: FieldRef

    @property
    def expression(self) -> str:
        return self.field.expression


@dataclass
class ReturnClause:
    """RETURN clause listing the projections to report."""
    items: list[ReturnItem] = field(default_factory=list)

    @property
    def bindings(self) -> list[str]:
        """Bindings named by the clause, in first-mention order."""
        seen: list[str] = []
        for item in self.items:
            if item.field.binding not in seen:
                seen.append(item.field.binding)
        return seen


@dataclass
class Assignment:
    """
    A property assignment of a SET statement.

    Represents: binding.field: value
    """
    field: FieldRef
    value: Literal


@dataclass
class KCQLQuery:
    """
    Complete KCQL query AST.

    This is the root node of the AST, containing:
    - The statement type (MATCH, CREATE, SET or DELETE)
    - The pattern graph (nodes keyed by kind/binding, edges in order)
    - Optional WHERE and RETURN clauses (MATCH only)
    - Assignments (SET only)
    """
    statement: StatementType
    graph: Graph = field(default_factory=Graph)
    where: Optional[WhereClause] = None
    return_clause: Optional[ReturnClause] = None
    assignments: list[Assignment] = field(default_factory=list)
    text: str = ""

    @property
    def bindings(self) -> list[str]:
        """Binding names declared by the pattern, in order."""
        return [node.name for node in self.graph.nodes]

    def node(self, binding: str) -> Optional[Node]:
        """Return the pattern node declared under a binding."""
        return self.graph.node_for(binding)

    @property
    def is_mutation(self) -> bool:
        return self.statement != StatementType.MATCH
