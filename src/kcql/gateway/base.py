# -*- encoding: utf-8 -*-
"""
KCQL API gateway - the contract between the query engine and a cluster.

Implementations translate these calls to a real API server (see
kcql.gateway.kube) or serve them from memory (kcql.gateway.memory).
Every failure must surface as kcql.exceptions.APIError.
"""

from abc import ABC, abstractmethod
from typing import Optional

from kcql.discovery import APIResource, ResourceCoordinate


class ApiGateway(ABC):
    """
    Abstract cluster API interface.

    A namespace of None means cluster-wide: all namespaces for listing,
    and no namespace for cluster-scoped resources.
    """

    @abstractmethod
    def discover(self) -> list[APIResource]:
        """Return the server's preferred resource catalog."""
        ...

    @abstractmethod
    def list(
        self,
        coordinate: ResourceCoordinate,
        namespace: Optional[str],
        field_selector: str = "",
        label_selector: str = "",
    ) -> list[dict]:
        """
        List resource documents.

        Args:
            coordinate: Resource collection to list
            namespace: Namespace scope, None for all namespaces
            field_selector: Comma-joined field selector terms
            label_selector: Comma-joined label selector terms

        Returns:
            Matching documents
        """
        ...

    @abstractmethod
    def create(self, coordinate: ResourceCoordinate, namespace: Optional[str], body: dict) -> dict:
        """Create a resource and return the stored document."""
        ...

    @abstractmethod
    def patch(
        self,
        coordinate: ResourceCoordinate,
        namespace: Optional[str],
        name: str,
        body: dict,
    ) -> dict:
        """Apply a JSON merge patch and return the updated document."""
        ...

    @abstractmethod
    def delete(self, coordinate: ResourceCoordinate, namespace: Optional[str], name: str) -> dict:
        """Delete a resource and return the server's response."""
        ...
