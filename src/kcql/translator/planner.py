"""
KCQL Query Planner - Translates AST to cluster API calls.

Every pattern node becomes one step: a LIST call scoped by namespace and
narrowed by selectors built from the node's properties, or a CREATE call
carrying a document synthesized from them.

Property Map:
    name                    -> field selector metadata.name
    namespace               -> namespace scope of the call
    metadata.labels.<key>   -> label selector <key>
    other.dotted.path       -> field selector on that path
    bare key                -> label selector <key>
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional

from kcql import selectors
from kcql.discovery import ResourceCoordinate
from kcql.exceptions import QueryExecutionError, SelectorError
from kcql.graph import Node
from kcql.parser.ast import (
    Assignment,
    Condition,
    KCQLQuery,
    ReturnItem,
    StatementType,
)
from kcql.paths import parse_path, set_path


class Operation(Enum):
    """Cluster API operations a step or request can perform."""
    DISCOVER = "discover"
    LIST = "list"
    CREATE = "create"
    PATCH = "patch"
    DELETE = "delete"


@dataclass(frozen=True)
class Join:
    """A pattern edge between two bindings, narrowed after fetching."""
    source: str
    target: str
    edge_type: str


@dataclass
class PlanStep:
    """
    A single step in the execution plan.

    Each step maps to exactly one gateway call for one pattern node.
    """
    binding: str
    coordinate: ResourceCoordinate
    operation: Operation = Operation.LIST
    namespace: Optional[str] = None
    field_selector: str = ""
    label_selector: str = ""
    body: Optional[dict] = None

    @property
    def kind(self) -> str:
        return self.coordinate.kind


@dataclass
class ExecutionPlan:
    """
    Complete execution plan for a KCQL query.

    Steps run in pattern order; the clause payload is carried along for
    the executor to apply once documents are fetched.
    """
    statement: StatementType
    steps: list[PlanStep] = field(default_factory=list)
    joins: list[Join] = field(default_factory=list)
    conditions: list[Condition] = field(default_factory=list)
    return_items: list[ReturnItem] = field(default_factory=list)
    assignments: list[Assignment] = field(default_factory=list)

    def add_step(self, step: PlanStep) -> int:
        """Add a step and return its index."""
        step_idx = len(self.steps)
        self.steps.append(step)
        return step_idx

    def step_for(self, binding: str) -> Optional[PlanStep]:
        for step in self.steps:
            if step.binding == binding:
                return step
        return None

    @property
    def kinds(self) -> dict[str, str]:
        """Binding -> canonical kind."""
        return {step.binding: step.kind for step in self.steps}


Resolve = Callable[[str], ResourceCoordinate]


class QueryPlanner:
    """
    Translates KCQL AST to execution plans.

    Example:
        planner = QueryPlanner(resolver.resolve, namespace="default")
        plan = planner.plan(query)
    """

    def __init__(self, resolve: Resolve, namespace: str = "default"):
        """
        Args:
            resolve: Kind identifier -> ResourceCoordinate
            namespace: Default namespace scope; "" means all namespaces
        """
        self._resolve = resolve
        self.namespace = namespace

    def plan(self, query: KCQLQuery) -> ExecutionPlan:
        """
        Create an execution plan for a KCQL query.

        Kinds are resolved in pattern order; the first failure aborts.

        Raises:
            ResolutionError: If a node kind cannot be resolved
            SelectorError: If a node property cannot become a selector
            QueryExecutionError: If a CREATE property cannot be placed
        """
        plan = ExecutionPlan(
            statement=query.statement,
            joins=[
                Join(
                    source=query.graph.get(edge.source).name,
                    target=query.graph.get(edge.target).name,
                    edge_type=edge.edge_type,
                )
                for edge in query.graph.edges
            ],
            assignments=list(query.assignments),
        )
        if query.where:
            plan.conditions = list(query.where.conditions)
        if query.return_clause:
            plan.return_items = list(query.return_clause.items)

        coordinates = [self._resolve(node.kind) for node in query.graph.nodes]

        for node, coordinate in zip(query.graph.nodes, coordinates):
            if query.statement == StatementType.CREATE:
                plan.add_step(self._plan_create(node, coordinate))
            else:
                plan.add_step(self._plan_list(node, coordinate))

        return plan

    def _scope(self, coordinate: ResourceCoordinate, override: Optional[str] = None) -> Optional[str]:
        if not coordinate.namespaced:
            return None
        namespace = self.namespace if override is None else override
        return namespace or None

    def _plan_list(self, node: Node, coordinate: ResourceCoordinate) -> PlanStep:
        field_terms: list[str] = []
        label_terms: list[str] = []
        namespace: Optional[str] = None

        for key, value in node.properties.items():
            bare = _bare_key(key)
            segments = parse_path(key)
            if bare == "namespace":
                if not isinstance(value, str):
                    raise SelectorError("Namespace must be a string", key=key, value=value)
                namespace = value
            elif bare == "name":
                field_terms.append(selectors.field_term("metadata.name", value))
            elif bare is not None:
                label_terms.append(selectors.label_term(bare, value))
            elif len(segments) == 3 and segments[:2] == ["metadata", "labels"] and isinstance(segments[2], str):
                label_terms.append(selectors.label_term(segments[2], value))
            elif not all(isinstance(seg, str) for seg in segments):
                raise SelectorError(
                    f"Field selector {key!r} cannot use indexes or wildcards",
                    key=key,
                    value=value,
                )
            else:
                field_terms.append(selectors.field_term(".".join(segments), value))

        return PlanStep(
            binding=node.name,
            coordinate=coordinate,
            operation=Operation.LIST,
            namespace=self._scope(coordinate, namespace),
            field_selector=selectors.join(field_terms),
            label_selector=selectors.join(label_terms),
        )

    def _plan_create(self, node: Node, coordinate: ResourceCoordinate) -> PlanStep:
        override = None
        for key, value in node.properties.items():
            if _bare_key(key) == "namespace":
                override = value
        if override is not None and not isinstance(override, str):
            raise QueryExecutionError(f"Namespace of {node.name!r} must be a string")
        namespace = self._scope(coordinate, override)
        return PlanStep(
            binding=node.name,
            coordinate=coordinate,
            operation=Operation.CREATE,
            namespace=namespace,
            body=build_document(coordinate, node, namespace),
        )


def build_document(
    coordinate: ResourceCoordinate,
    node: Node,
    namespace: Optional[str] = None,
) -> dict:
    """
    Synthesize a resource document from a CREATE pattern node.

    ``name`` and ``namespace`` go to metadata, bare keys become labels and
    dotted keys are placed as nested fields. The name defaults to the
    binding.

    Raises:
        QueryExecutionError: If a property path cannot be assigned
    """
    metadata: dict[str, Any] = {"name": node.name}
    if namespace:
        metadata["namespace"] = namespace
    document: dict[str, Any] = {
        "apiVersion": coordinate.api_version,
        "kind": coordinate.kind,
        "metadata": metadata,
    }

    for key, value in node.properties.items():
        bare = _bare_key(key)
        if bare in ("name", "namespace"):
            metadata[bare] = value
        elif bare is not None:
            metadata.setdefault("labels", {})[bare] = selectors.format_value(value)
        else:
            try:
                set_path(document, key, value)
            except ValueError as e:
                raise QueryExecutionError(f"Cannot set {key!r} on {node.name!r}: {e}") from e

    return document


def _bare_key(key: str) -> Optional[str]:
    """The key of a single-segment property path, quotes removed."""
    segments = parse_path(key)
    if len(segments) == 1 and isinstance(segments[0], str):
        return segments[0]
    return None


def plan_query(query: KCQLQuery, resolve: Resolve, namespace: str = "default") -> ExecutionPlan:
    """
    Convenience function to create an execution plan.

    Args:
        query: Parsed KCQL query AST
        resolve: Kind identifier -> ResourceCoordinate
        namespace: Default namespace scope; "" means all namespaces

    Returns:
        ExecutionPlan with one step per pattern node
    """
    planner = QueryPlanner(resolve, namespace)
    return planner.plan(query)
