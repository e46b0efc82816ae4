"""KCQL Translator module - Maps AST to cluster API calls."""

from kcql.translator.planner import (
    ExecutionPlan,
    Join,
    Operation,
    PlanStep,
    QueryPlanner,
    build_document,
    plan_query,
)

__all__ = [
    "ExecutionPlan",
    "Join",
    "Operation",
    "PlanStep",
    "QueryPlanner",
    "build_document",
    "plan_query",
]
