# -*- encoding: utf-8 -*-
"""
KCQL Query executor - runs execution plans against the cluster API.

Execution order for MATCH / SET / DELETE:
    1. resolve every node kind (through the session kind cache)
    2. build selectors from node properties
    3. LIST every node, fanned out through the dispatcher
    4. apply WHERE conditions to the fetched documents
    5. narrow bindings across pattern edges until nothing changes
    6. shape the result graph
    7. project RETURN paths (MATCH), or patch / delete (SET / DELETE)

CREATE synthesizes one document per node and creates them in order.
The first error aborts the query; mutations already applied stay
applied.
"""

import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Iterator, Optional

from kcql.discovery import KindResolver
from kcql.exceptions import QueryExecutionError
from kcql.executor.dispatcher import ApiRequest, RequestDispatcher
from kcql.gateway import ApiGateway
from kcql.graph import Graph
from kcql.parser.ast import Comparator, Condition, KCQLQuery, StatementType
from kcql.paths import MISSING, extract, merge, project, set_path
from kcql.relationships import RelationshipRule
from kcql.session import Session
from kcql.translator import ExecutionPlan, Join, Operation, PlanStep, QueryPlanner

logger = logging.getLogger(__name__)


@dataclass
class QueryResult:
    """
    Result of a KCQL query execution.

    Attributes:
        data: Binding -> documents (or projections), in pattern order
        graph: Pattern graph with resolved kinds, edges to empty bindings dropped
        metadata: Statement type, namespace and per-binding counts
    """
    data: dict[str, list] = field(default_factory=dict)
    graph: Graph = field(default_factory=Graph)
    metadata: dict = field(default_factory=dict)

    def __iter__(self) -> Iterator[str]:
        return iter(self.data)

    def __len__(self) -> int:
        return sum(len(docs) for docs in self.data.values())

    def __bool__(self) -> bool:
        return len(self) > 0

    def __getitem__(self, binding: str) -> list:
        return self.data[binding]

    def first(self, binding: str) -> Optional[Any]:
        """First document of a binding, or None if it is empty."""
        docs = self.data.get(binding) or []
        return docs[0] if docs else None

    def to_dict(self) -> dict:
        return {
            "data": self.data,
            "graph": self.graph.to_dict(),
            "metadata": self.metadata,
        }


class QueryExecutor:
    """
    Executes parsed KCQL queries.

    Usage:
        executor = QueryExecutor(gateway, Session(namespace="default"))
        result = executor.execute(parse("MATCH (p:Pod) RETURN p.metadata.name"))
        executor.close()
    """

    def __init__(
        self,
        gateway: ApiGateway,
        session: Optional[Session] = None,
        dispatcher: Optional[RequestDispatcher] = None,
    ):
        self.session = session or Session()
        self.dispatcher = dispatcher or RequestDispatcher(gateway, self.session.concurrency)
        self.resolver = KindResolver(self._discover, self.session.cache)

    def _discover(self):
        return self.dispatcher.call(ApiRequest(Operation.DISCOVER))

    def plan(self, query: KCQLQuery) -> ExecutionPlan:
        """Plan a query against the session namespace and kind cache."""
        return QueryPlanner(self.resolver.resolve, self.session.namespace).plan(query)

    def execute(self, query: KCQLQuery) -> QueryResult:
        """
        Execute a query.

        Raises:
            ResolutionError: If a node kind cannot be resolved
            SelectorError: If a node property cannot become a selector
            APIError: If a gateway call fails
            QueryExecutionError: If an edge has no relationship rule or a
                mutation path cannot be applied
        """
        plan = self.plan(query)
        logger.debug("Executing %s with %d steps", plan.statement.value, len(plan.steps))

        if plan.statement == StatementType.CREATE:
            data = self._create(plan)
        else:
            rules = self._rules(plan)
            patches = self._patches(plan) if plan.statement == StatementType.SET else {}

            data = self._fetch(plan)
            data = self._filter(plan.conditions, data)
            data = self._narrow(rules, data)

            if plan.statement == StatementType.SET:
                data = self._patch(plan, patches, data)
            elif plan.statement == StatementType.DELETE:
                self._delete(plan, data)

        graph = query.graph.with_kinds(plan.kinds).sanitize(data)

        if plan.statement == StatementType.MATCH and plan.return_items:
            data = self._project(plan, data)

        metadata = {
            "statement": plan.statement.value,
            "namespace": self.session.namespace,
            "counts": {binding: len(docs) for binding, docs in data.items()},
        }
        return QueryResult(data=data, graph=graph, metadata=metadata)

    def close(self) -> None:
        self.dispatcher.close()

    # --- Fetching ---

    def _fetch(self, plan: ExecutionPlan) -> dict[str, list]:
        requests = [
            ApiRequest(
                Operation.LIST,
                coordinate=step.coordinate,
                namespace=step.namespace,
                field_selector=step.field_selector,
                label_selector=step.label_selector,
                binding=step.binding,
            )
            for step in plan.steps
        ]
        results = self.dispatcher.call_all(requests)
        data = {step.binding: list(docs) for step, docs in zip(plan.steps, results)}
        for binding, docs in data.items():
            logger.debug("Fetched %d documents for %s", len(docs), binding)
        return data

    # --- Filtering ---

    def _filter(self, conditions: list[Condition], data: dict[str, list]) -> dict[str, list]:
        for condition in conditions:
            binding = condition.field.binding
            data[binding] = [doc for doc in data[binding] if _holds(doc, condition)]
        return data

    # --- Relationships ---

    def _rules(self, plan: ExecutionPlan) -> list[tuple[Join, RelationshipRule]]:
        rules = []
        kinds = plan.kinds
        for join in plan.joins:
            rule = self.session.relationships.find(kinds[join.source], kinds[join.target], join.edge_type)
            if rule is None:
                raise QueryExecutionError(
                    f"No relationship rule for {kinds[join.source]} -[:{join.edge_type}]-> "
                    f"{kinds[join.target]}"
                )
            rules.append((join, rule))
        return rules

    def _narrow(self, rules: list[tuple[Join, RelationshipRule]], data: dict[str, list]) -> dict[str, list]:
        changed = bool(rules)
        rounds = 0
        while changed:
            changed = False
            rounds += 1
            for join, rule in rules:
                left = data[join.source]
                right = data[join.target]
                kept_left = [a for a in left if any(rule.links(a, b) for b in right)]
                kept_right = [b for b in right if any(rule.links(a, b) for a in kept_left)]
                if len(kept_left) != len(left) or len(kept_right) != len(right):
                    changed = True
                data[join.source] = kept_left
                data[join.target] = kept_right
        if rules:
            logger.debug("Relationships narrowed in %d rounds", rounds)
        return data

    # --- Projection ---

    def _project(self, plan: ExecutionPlan, data: dict[str, list]) -> dict[str, list]:
        report: dict[str, list] = {}
        for item in plan.return_items:
            report.setdefault(item.field.binding, [])

        for binding in report:
            items = [item for item in plan.return_items if item.field.binding == binding]
            if any(item.field.whole_document for item in items):
                report[binding] = copy.deepcopy(data[binding])
                continue

            for doc in data[binding]:
                shaped: Any = MISSING
                for item in items:
                    part = project(doc, item.field.segments)
                    if part is MISSING:
                        continue
                    shaped = part if shaped is MISSING else merge(shaped, part)
                report[binding].append({} if shaped is MISSING else shaped)
        return report

    # --- Mutations ---

    def _create(self, plan: ExecutionPlan) -> dict[str, list]:
        created: dict[str, list] = {}
        for step in plan.steps:
            doc = self.dispatcher.call(ApiRequest(
                Operation.CREATE,
                coordinate=step.coordinate,
                namespace=step.namespace,
                body=step.body,
                binding=step.binding,
            ))
            logger.info("Created %s %s", step.kind, _name(doc))
            created[step.binding] = [doc]
        return created

    def _patches(self, plan: ExecutionPlan) -> dict[str, dict]:
        patches: dict[str, dict] = {}
        for assignment in plan.assignments:
            ref = assignment.field
            try:
                set_path(patches.setdefault(ref.binding, {}), ref.segments, assignment.value)
            except ValueError as e:
                raise QueryExecutionError(f"Cannot set {ref.expression!r}: {e}") from e
        return patches

    def _patch(self, plan: ExecutionPlan, patches: dict[str, dict], data: dict[str, list]) -> dict[str, list]:
        for step in plan.steps:
            patch = patches.get(step.binding)
            if patch is None:
                continue
            patched = []
            for doc in data[step.binding]:
                patched.append(self.dispatcher.call(ApiRequest(
                    Operation.PATCH,
                    coordinate=step.coordinate,
                    namespace=_namespace(step, doc),
                    name=_name(doc),
                    body=patch,
                    binding=step.binding,
                )))
                logger.info("Patched %s %s", step.kind, _name(doc))
            data[step.binding] = patched
        return data

    def _delete(self, plan: ExecutionPlan, data: dict[str, list]) -> None:
        for step in plan.steps:
            for doc in data[step.binding]:
                self.dispatcher.call(ApiRequest(
                    Operation.DELETE,
                    coordinate=step.coordinate,
                    namespace=_namespace(step, doc),
                    name=_name(doc),
                    binding=step.binding,
                ))
                logger.info("Deleted %s %s", step.kind, _name(doc))


def _name(doc: Any) -> str:
    found = extract(doc, "metadata.name")
    return found[0] if found else ""


def _namespace(step: PlanStep, doc: Any) -> Optional[str]:
    if not step.coordinate.namespaced:
        return None
    found = extract(doc, "metadata.namespace")
    return found[0] if found else step.namespace


def _holds(doc: Any, condition: Condition) -> bool:
    values = extract(doc, condition.field.segments)
    if condition.comparator == Comparator.NE:
        return not any(_equal(value, condition.value) for value in values)
    return any(_compare(value, condition.comparator, condition.value) for value in values)


def _equal(actual: Any, expected: Any) -> bool:
    if isinstance(actual, bool) or isinstance(expected, bool):
        return isinstance(actual, bool) and isinstance(expected, bool) and actual == expected
    return actual == expected


def _compare(actual: Any, comparator: Comparator, expected: Any) -> bool:
    """Compare values based on comparator."""
    if comparator == Comparator.EQ:
        return _equal(actual, expected)
    if not _orderable(actual, expected):
        return False
    if comparator == Comparator.LT:
        return actual < expected
    elif comparator == Comparator.GT:
        return actual > expected
    elif comparator == Comparator.LE:
        return actual <= expected
    elif comparator == Comparator.GE:
        return actual >= expected
    return False


def _orderable(actual: Any, expected: Any) -> bool:
    if isinstance(actual, bool) or isinstance(expected, bool):
        return False
    numbers = (int, float)
    if isinstance(actual, numbers) and isinstance(expected, numbers):
        return True
    return isinstance(actual, str) and isinstance(expected, str)
