"""KCQL Relationships module - edge-type linkage rules between kinds."""

from kcql.relationships.defaults import DEFAULT_RELATIONSHIPS
from kcql.relationships.registry import RelationshipRegistry
from kcql.relationships.rules import Comparison, MatchCriterion, RelationshipRule

__all__ = [
    "Comparison",
    "DEFAULT_RELATIONSHIPS",
    "MatchCriterion",
    "RelationshipRegistry",
    "RelationshipRule",
]
