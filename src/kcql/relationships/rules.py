# -*- encoding: utf-8 -*-
"""
KCQL Relationship rules - how two resource kinds link across an edge.

A rule says which fields of a document of one kind must agree with
which fields of a document of the other kind for an edge type to hold,
e.g. a ReplicaSet is OWNED by a Deployment when some
``metadata.ownerReferences[].uid`` of the ReplicaSet equals the
Deployment's ``metadata.uid``.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from kcql.paths import extract


class Comparison(str, Enum):
    """How the values found at the two fields are compared."""
    EXACT = "exact"                  # some value at field_a equals some value at field_b
    CONTAINS_ALL = "contains_all"    # mapping at field_a is a subset of mapping at field_b


@dataclass(frozen=True)
class MatchCriterion:
    """
    One field agreement between the two sides of a rule.

    Attributes:
        field_a: Field path on the kind_a document
        field_b: Field path on the kind_b document
        comparison: Comparison applied to the values found
    """
    field_a: str
    field_b: str
    comparison: Comparison = Comparison.EXACT

    def holds(self, doc_a: Any, doc_b: Any) -> bool:
        values_a = extract(doc_a, self.field_a)
        values_b = extract(doc_b, self.field_b)

        if self.comparison == Comparison.CONTAINS_ALL:
            return any(
                _is_subset(a, b)
                for a in values_a if isinstance(a, dict) and a
                for b in values_b if isinstance(b, dict)
            )

        return any(a == b for a in values_a for b in values_b if a is not None)


def _is_subset(a: dict, b: dict) -> bool:
    return all(key in b and b[key] == value for key, value in a.items())


@dataclass(frozen=True)
class RelationshipRule:
    """
    Linkage rule for an edge type between two kinds.

    All criteria must hold for two documents to be linked.

    Attributes:
        edge_type: Relationship label as used in patterns (e.g. "OWNS")
        kind_a: Kind of the first side
        kind_b: Kind of the second side
        criteria: Field agreements, all required
        same_namespace: Require both documents to share a namespace
        flipped: Sides are swapped relative to the configured rule; criteria
            still read field_a from the configured kind_a document
    """
    edge_type: str
    kind_a: str
    kind_b: str
    criteria: tuple[MatchCriterion, ...] = field(default_factory=tuple)
    same_namespace: bool = True
    flipped: bool = False

    def applies_to(self, kind_a: str, kind_b: str, edge_type: str) -> bool:
        return (
            self.edge_type.lower() == edge_type.lower()
            and self.kind_a.lower() == kind_a.lower()
            and self.kind_b.lower() == kind_b.lower()
        )

    def reversed(self) -> "RelationshipRule":
        """The same rule with its two sides swapped."""
        return RelationshipRule(
            edge_type=self.edge_type,
            kind_a=self.kind_b,
            kind_b=self.kind_a,
            criteria=self.criteria,
            same_namespace=self.same_namespace,
            flipped=not self.flipped,
        )

    def links(self, doc_a: Any, doc_b: Any) -> bool:
        """Check whether a kind_a document and a kind_b document are linked."""
        if self.flipped:
            doc_a, doc_b = doc_b, doc_a
        if self.same_namespace and _namespace(doc_a) != _namespace(doc_b):
            return False
        return all(c.holds(doc_a, doc_b) for c in self.criteria)

    @classmethod
    def from_dict(cls, data: dict) -> "RelationshipRule":
        """
        Build a rule from its configuration form.

        Example:
            {"type": "OWNS", "kindA": "Deployment", "kindB": "ReplicaSet",
             "sameNamespace": true,
             "matchCriteria": [{"fieldA": "metadata.uid",
                                "fieldB": "metadata.ownerReferences[].uid",
                                "comparison": "exact"}]}

        Raises:
            ValueError: If a required key is missing or a comparison is unknown
        """
        try:
            criteria = tuple(
                MatchCriterion(
                    field_a=c["fieldA"],
                    field_b=c["fieldB"],
                    comparison=Comparison(c.get("comparison", "exact")),
                )
                for c in data["matchCriteria"]
            )
            return cls(
                edge_type=data["type"],
                kind_a=data["kindA"],
                kind_b=data["kindB"],
                criteria=criteria,
                same_namespace=data.get("sameNamespace", True),
            )
        except KeyError as e:
            raise ValueError(f"Relationship rule is missing {e.args[0]!r}") from e

    def to_dict(self) -> dict:
        if self.flipped:
            return self.reversed().to_dict()
        return {
            "type": self.edge_type,
            "kindA": self.kind_a,
            "kindB": self.kind_b,
            "sameNamespace": self.same_namespace,
            "matchCriteria": [
                {"fieldA": c.field_a, "fieldB": c.field_b, "comparison": c.comparison.value}
                for c in self.criteria
            ],
        }


def _namespace(document: Any) -> str:
    found = extract(document, "metadata.namespace")
    return found[0] if found else ""
