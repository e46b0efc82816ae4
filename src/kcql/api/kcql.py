"""
KCQL - Kubernetes Cypher Query Language main API.

This module provides the high-level interface for running KCQL queries
against a cluster through an API gateway.

Usage:
    from kcql import KCQL
    from kcql.gateway.kube import KubeGateway

    kcql = KCQL(KubeGateway(api_client))

    result = kcql.query(
        'MATCH (d:Deployment {name: "web"})-[:OWNS]->(rs:ReplicaSet) '
        'RETURN d.metadata.name, rs.status.readyReplicas'
    )
    print(kcql.to_json(result))
    print(kcql.to_dot(result))
"""

import json
import logging
from typing import Optional

from hio.help import Deck

from kcql.exceptions import KCQLError, MarshalError
from kcql.executor import QueryExecutor, QueryResult
from kcql.export import export_dot
from kcql.gateway import ApiGateway
from kcql.parser import KCQLParser, KCQLQuery
from kcql.session import Session
from kcql.settings import KCQLSettings
from kcql.translator import ExecutionPlan

logger = logging.getLogger(__name__)


class KCQL:
    """
    KCQL query interface.

    NOT a Doer - uses Deck pattern for integration with existing Doers.

    Usage:
        # Initialize
        kcql = KCQL(gateway, session=Session(namespace="prod"))

        # Synchronous query
        result = kcql.query("MATCH (p:Pod) RETURN p.metadata.name")

        # For queued queries, use Deck integration
        kcql.queries.push(("query_id", query_string))
        kcql.process_queries()
        query_id, result, error = kcql.results.pull()
    """

    def __init__(
        self,
        gateway: ApiGateway,
        session: Optional[Session] = None,
        settings: Optional[KCQLSettings] = None,
    ):
        """
        Initialize KCQL with a gateway.

        Args:
            gateway: Cluster API gateway
            session: Runtime session; built from settings when omitted
            settings: Settings for the session; read from the environment
                when neither is given
        """
        self._session = session or Session.from_settings(settings)
        self._executor = QueryExecutor(gateway, self._session)
        self._parser = KCQLParser()

        # Deck for queued query integration with existing Doist
        self.queries = Deck()  # Input: (query_id, query_string)
        self.results = Deck()  # Output: (query_id, QueryResult | None, KCQLError | None)

    @property
    def session(self) -> Session:
        return self._session

    @property
    def executor(self) -> QueryExecutor:
        """Direct access to the executor for advanced use."""
        return self._executor

    def query(self, kcql_string: str) -> QueryResult:
        """
        Execute a KCQL query.

        This is the main entry point for KCQL queries.

        Args:
            kcql_string: The KCQL query string

        Returns:
            QueryResult with data per binding and the result graph

        Raises:
            QueryParseError: If the query is not valid KCQL
            ResolutionError: If a kind cannot be resolved
            SelectorError: If a property cannot become a selector
            APIError: If a cluster API call fails
            QueryExecutionError: For other execution failures
        """
        ast = self.parse(kcql_string)
        return self._executor.execute(ast)

    def parse(self, kcql_string: str) -> KCQLQuery:
        """
        Parse a KCQL query without executing.

        Useful for validation or inspection.
        """
        return self._parser.parse(kcql_string)

    def plan(self, ast: KCQLQuery) -> ExecutionPlan:
        """
        Create an execution plan from a parsed AST.

        Resolves kinds (through discovery on a cache miss) but issues no
        other API calls.
        """
        return self._executor.plan(ast)

    def process_queries(self) -> int:
        """
        Run every queued query, pushing one result entry per query.

        KCQL errors are reported in the entry rather than raised.

        Returns:
            Number of queries processed
        """
        count = 0
        while self.queries:
            query_id, kcql_string = self.queries.pull()
            try:
                self.results.push((query_id, self.query(kcql_string), None))
            except KCQLError as e:
                logger.info("Queued query %s failed: %s", query_id, e)
                self.results.push((query_id, None, e))
            count += 1
        return count

    # --- Session ---

    def set_namespace(self, namespace: str) -> None:
        """Set the default namespace; "" queries all namespaces."""
        self._session.set_namespace(namespace)

    def set_debug(self, enabled: bool) -> None:
        self._session.set_debug(enabled)

    # --- Kind cache diagnostics ---

    def dump_cache(self) -> dict[str, str]:
        """Resolved kinds as identifier -> "group/version/resource"."""
        return self._executor.resolver.dump()

    def clear_cache(self) -> None:
        self._executor.resolver.clear()

    def warm_cache(self) -> int:
        """Fill the kind cache from one discovery call."""
        return self._executor.resolver.warm()

    # --- Output ---

    def to_json(self, result: QueryResult, indent: Optional[int] = 2) -> str:
        """
        Serialize a query result to JSON.

        Raises:
            MarshalError: If the result holds values JSON cannot encode
        """
        try:
            return json.dumps(result.to_dict(), indent=indent)
        except (TypeError, ValueError) as e:
            raise MarshalError(f"Cannot serialize query result: {e}") from e

    def to_dot(self, result: QueryResult) -> str:
        """Render the result graph as Graphviz DOT text."""
        return export_dot(result.graph)

    def close(self) -> None:
        """Stop the executor's worker pool."""
        self._executor.close()

    def __enter__(self) -> "KCQL":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
