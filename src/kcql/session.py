# -*- encoding: utf-8 -*-
"""
KCQL Session - per-executor runtime state.

A session carries the namespace scope, the debug toggle, the gateway
concurrency, the resolved-kind cache and the relationship rules. It is
owned by one executor and passed by reference.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from kcql.discovery import KindCache
from kcql.relationships import RelationshipRegistry
from kcql.settings import KCQLSettings

logger = logging.getLogger(__name__)

ROOT_LOGGER = "kcql"


@dataclass
class Session:
    """
    Runtime state shared by the planner and executor.

    Attributes:
        namespace: Default namespace scope; "" means all namespaces
        debug: Debug logging for the kcql package
        concurrency: Gateway calls allowed in flight at once
        cache: Resolved resource kinds
        relationships: Edge-type linkage rules
    """
    namespace: str = "default"
    debug: bool = False
    concurrency: int = 1
    cache: KindCache = field(default_factory=KindCache)
    relationships: RelationshipRegistry = field(default_factory=RelationshipRegistry.default)

    def __post_init__(self):
        if self.concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        if self.debug:
            self.set_debug(True)

    @classmethod
    def from_settings(cls, settings: Optional[KCQLSettings] = None) -> "Session":
        """
        Build a session from settings, reading the environment if none given.

        Raises:
            OSError: If the relationships file cannot be read
            ValueError: If the relationships file is malformed
        """
        settings = settings or KCQLSettings()
        if settings.relationships_file:
            relationships = RelationshipRegistry.from_file(settings.relationships_file)
        else:
            relationships = RelationshipRegistry.default()
        return cls(
            namespace=settings.namespace,
            debug=settings.debug,
            concurrency=settings.concurrency,
            relationships=relationships,
        )

    @property
    def all_namespaces(self) -> bool:
        return not self.namespace

    def set_namespace(self, namespace: str) -> None:
        self.namespace = namespace
        logger.debug("Namespace set to %r", namespace or "<all>")

    def set_debug(self, enabled: bool) -> None:
        """Switch the kcql logger between DEBUG and INFO."""
        self.debug = enabled
        logging.getLogger(ROOT_LOGGER).setLevel(logging.DEBUG if enabled else logging.INFO)
