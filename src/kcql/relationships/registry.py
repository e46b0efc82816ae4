# -*- encoding: utf-8 -*-
"""
KCQL Relationship registry - edge-type rules by kind pair.

Usage:
    from kcql.relationships import RelationshipRegistry

    registry = RelationshipRegistry.default()
    registry.load_file("relationships.json")

    rule = registry.find("ReplicaSet", "Deployment", "OWNS")
    rule.links(replicaset_doc, deployment_doc)
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterator, Optional

from kcql.relationships.defaults import DEFAULT_RELATIONSHIPS
from kcql.relationships.rules import RelationshipRule

logger = logging.getLogger(__name__)


class RelationshipRegistry:
    """
    Registry of relationship rules.

    Rules are looked up by the unordered pair of kinds plus the edge
    type, all case-insensitively. The returned rule is oriented so that
    its kind_a is the first kind asked for.
    """

    def __init__(self, rules: Optional[list[RelationshipRule]] = None):
        self._rules: list[RelationshipRule] = []
        for rule in rules or []:
            self.register(rule)

    @classmethod
    def default(cls) -> RelationshipRegistry:
        """Registry holding the built-in rule set."""
        registry = cls()
        registry.load(DEFAULT_RELATIONSHIPS)
        return registry

    @classmethod
    def from_file(cls, path: str | Path, include_defaults: bool = True) -> RelationshipRegistry:
        registry = cls.default() if include_defaults else cls()
        registry.load_file(path)
        return registry

    def register(self, rule: RelationshipRule) -> None:
        """
        Add a rule, replacing any rule for the same kinds and edge type.
        """
        self._rules = [
            existing for existing in self._rules
            if not (
                existing.applies_to(rule.kind_a, rule.kind_b, rule.edge_type)
                or existing.applies_to(rule.kind_b, rule.kind_a, rule.edge_type)
            )
        ]
        self._rules.append(rule)

    def load(self, data: dict) -> int:
        """
        Register every rule of a ``{"relationships": [...]}`` document.

        Returns:
            Number of rules loaded

        Raises:
            ValueError: If the document or one of its rules is malformed
        """
        entries = data.get("relationships") if isinstance(data, dict) else None
        if not isinstance(entries, list):
            raise ValueError("Relationship document must hold a 'relationships' list")
        for entry in entries:
            self.register(RelationshipRule.from_dict(entry))
        return len(entries)

    def load_file(self, path: str | Path) -> int:
        """
        Load rules from a JSON file.

        Raises:
            OSError: If the file cannot be read
            ValueError: If the file is not a valid relationships document
        """
        path = Path(path).expanduser()
        try:
            count = self.load(json.loads(path.read_text()))
        except (OSError, ValueError) as e:
            logger.error("Failed to load relationship rules from %s: %s", path, e)
            raise
        logger.debug("Loaded %d relationship rules from %s", count, path)
        return count

    def find(self, kind_a: str, kind_b: str, edge_type: str) -> Optional[RelationshipRule]:
        """
        Find the rule linking two kinds across an edge type.

        Args:
            kind_a: Kind of the edge's source node
            kind_b: Kind of the edge's target node
            edge_type: Relationship label

        Returns:
            Rule oriented from kind_a to kind_b, or None if not configured
        """
        for rule in self._rules:
            if rule.applies_to(kind_a, kind_b, edge_type):
                return rule
            if rule.applies_to(kind_b, kind_a, edge_type):
                return rule.reversed()
        return None

    def edge_types(self) -> list[str]:
        """Distinct edge types known to the registry."""
        seen: list[str] = []
        for rule in self._rules:
            if rule.edge_type not in seen:
                seen.append(rule.edge_type)
        return seen

    def to_dict(self) -> dict:
        return {"relationships": [rule.to_dict() for rule in self._rules]}

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self) -> Iterator[RelationshipRule]:
        return iter(self._rules)
