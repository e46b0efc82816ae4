"""KCQL API module - High-level interface for KCQL queries."""

from kcql.api.kcql import KCQL
from kcql.executor import QueryResult

__all__ = [
    "KCQL",
    "QueryResult",
]
