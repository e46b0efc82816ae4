"""
KCQL - Kubernetes Cypher Query Language

A declarative, graph-pattern query language for reading and mutating the
resources of a Kubernetes cluster.

Components:
- KCQL: Main query interface
- kcql.gateway: Cluster API access (in-memory, or kubernetes via kcql.gateway.kube)
- kcql.relationships: Edge-type rules linking resource kinds
- kcql.export: Graphviz DOT rendering of result graphs

Usage:
    from kcql import KCQL

    kcql = KCQL(gateway)

    result = kcql.query(
        'MATCH (s:Service)-[:EXPOSES]->(p:Pod) WHERE p.status.phase = "Running" '
        'RETURN s.metadata.name, p.metadata.name'
    )
    for binding in result:
        print(binding, result[binding])
"""

from kcql.api.kcql import KCQL
from kcql.executor import QueryResult
from kcql.exceptions import (
    KCQLError,
    QueryParseError,
    LexError,
    ResolutionError,
    SelectorError,
    APIError,
    MarshalError,
    QueryExecutionError,
)
from kcql.parser.ast import KCQLQuery, StatementType
from kcql.session import Session
from kcql.settings import KCQLSettings

__all__ = [
    # Main API
    "KCQL",
    "QueryResult",
    "Session",
    "KCQLSettings",
    # AST types
    "KCQLQuery",
    "StatementType",
    # Errors
    "KCQLError",
    "QueryParseError",
    "LexError",
    "ResolutionError",
    "SelectorError",
    "APIError",
    "MarshalError",
    "QueryExecutionError",
]

__version__ = "0.1.0"
