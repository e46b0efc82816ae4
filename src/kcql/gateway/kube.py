# -*- encoding: utf-8 -*-
"""
KubeGateway - Thin wrapper over the official kubernetes dynamic client.

All methods delegate to kubernetes.dynamic.DynamicClient:
    - discover() -> client.resources.search()
    - list()     -> resource.get(namespace, field_selector, label_selector)
    - create()   -> resource.create(body, namespace)
    - patch()    -> resource.patch(body, name, namespace) as a merge patch
    - delete()   -> resource.delete(name, namespace)

Client errors are re-raised as APIError with the original chained.
Loading kubeconfig or in-cluster credentials is left to the caller.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from kubernetes import dynamic
from kubernetes.client.exceptions import ApiException
from kubernetes.dynamic.exceptions import ResourceNotFoundError
from kubernetes.dynamic.resource import ResourceList
from urllib3.exceptions import HTTPError

from kcql.discovery import APIResource, ResourceCoordinate
from kcql.exceptions import APIError
from kcql.gateway.base import ApiGateway

logger = logging.getLogger(__name__)

MERGE_PATCH = "application/merge-patch+json"


@contextmanager
def _api_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except ApiException as e:
        raise APIError(e.reason or str(e), operation=operation, status=e.status) from e
    except ResourceNotFoundError as e:
        raise APIError(str(e), operation=operation, status=404) from e
    except (HTTPError, OSError) as e:
        raise APIError(str(e), operation=operation) from e


class KubeGateway(ApiGateway):
    """
    ApiGateway backed by a live API server.

    Usage:
        from kubernetes import config
        api_client = config.new_client_from_config()
        gateway = KubeGateway(api_client)
    """

    def __init__(self, api_client: Any):
        """
        Args:
            api_client: A configured kubernetes.client.ApiClient
        """
        with _api_errors("discover"):
            self._client = dynamic.DynamicClient(api_client)

    @property
    def client(self) -> dynamic.DynamicClient:
        """Direct access to the underlying DynamicClient."""
        return self._client

    def discover(self) -> list[APIResource]:
        catalog = []
        with _api_errors("discover"):
            for resource in self._client.resources.search():
                if isinstance(resource, ResourceList) or "/" in resource.name:
                    continue
                if not getattr(resource, "preferred", True):
                    continue
                catalog.append(APIResource(
                    name=resource.name,
                    kind=resource.kind,
                    group_version=resource.group_version,
                    short_names=list(resource.short_names or []),
                    namespaced=bool(resource.namespaced),
                ))
        logger.debug("Discovered %d resources", len(catalog))
        return catalog

    def _resource(self, coordinate: ResourceCoordinate):
        return self._client.resources.get(
            api_version=coordinate.group_version,
            name=coordinate.resource,
        )

    def list(self, coordinate, namespace, field_selector="", label_selector=""):
        kwargs: dict[str, Any] = {}
        if coordinate.namespaced and namespace is not None:
            kwargs["namespace"] = namespace
        if field_selector:
            kwargs["field_selector"] = field_selector
        if label_selector:
            kwargs["label_selector"] = label_selector

        with _api_errors("list"):
            response = self._resource(coordinate).get(**kwargs)
        return response.to_dict().get("items") or []

    def create(self, coordinate, namespace, body):
        with _api_errors("create"):
            response = self._resource(coordinate).create(
                body=body,
                namespace=self._scope(coordinate, namespace),
            )
        return response.to_dict()

    def patch(self, coordinate, namespace, name, body):
        with _api_errors("patch"):
            response = self._resource(coordinate).patch(
                body=body,
                name=name,
                namespace=self._scope(coordinate, namespace),
                content_type=MERGE_PATCH,
            )
        return response.to_dict()

    def delete(self, coordinate, namespace, name):
        with _api_errors("delete"):
            response = self._resource(coordinate).delete(
                name=name,
                namespace=self._scope(coordinate, namespace),
            )
        return response.to_dict()

    @staticmethod
    def _scope(coordinate: ResourceCoordinate, namespace: Optional[str]) -> Optional[str]:
        return namespace if coordinate.namespaced else None
