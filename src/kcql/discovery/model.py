# -*- encoding: utf-8 -*-
"""
KCQL Discovery model - resource coordinates and catalog entries.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ResourceCoordinate:
    """
    The fully qualified address of a resource collection.

    Attributes:
        group: API group, empty for the core group
        version: API version within the group (e.g. "v1")
        resource: Plural resource name (e.g. "deployments")
        kind: Canonical Kind (e.g. "Deployment")
        namespaced: Whether instances live in a namespace
    """
    group: str
    version: str
    resource: str
    kind: str = ""
    namespaced: bool = True

    @property
    def group_version(self) -> str:
        return f"{self.group}/{self.version}" if self.group else self.version

    @property
    def api_version(self) -> str:
        """Value of a document's ``apiVersion`` field."""
        return self.group_version

    def __str__(self) -> str:
        return f"{self.group}/{self.version}/{self.resource}"


@dataclass
class APIResource:
    """
    One entry of the discovery catalog.

    Attributes:
        name: Plural resource name
        kind: Kind of the resource
        group_version: "group/version", or just "version" for the core group
        short_names: Abbreviations accepted in place of the name
        namespaced: Whether instances live in a namespace
    """
    name: str
    kind: str
    group_version: str
    short_names: list[str] = field(default_factory=list)
    namespaced: bool = True

    @property
    def identifiers(self) -> list[str]:
        """Names this resource answers to, in match order."""
        return [self.name, self.kind, *self.short_names]

    def matches(self, identifier: str) -> bool:
        """Case-insensitive match against plural name, kind and short names."""
        wanted = identifier.lower()
        return any(name.lower() == wanted for name in self.identifiers)

    def coordinate(self) -> ResourceCoordinate:
        group, _, version = self.group_version.rpartition("/")
        return ResourceCoordinate(
            group=group,
            version=version,
            resource=self.name,
            kind=self.kind,
            namespaced=self.namespaced,
        )
