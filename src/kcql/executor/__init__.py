"""KCQL Executor module - request dispatch and query execution."""

from kcql.executor.dispatcher import ApiRequest, RequestDispatcher
from kcql.executor.executor import QueryExecutor, QueryResult

__all__ = [
    "ApiRequest",
    "QueryExecutor",
    "QueryResult",
    "RequestDispatcher",
]
