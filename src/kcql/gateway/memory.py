# -*- encoding: utf-8 -*-
"""
KCQL in-memory gateway - a cluster stand-in for tests and dry runs.

Serves a fixed discovery catalog and keeps documents per resource
collection. Selectors are evaluated the way the API server does for the
terms KCQL produces. Every call is recorded, and the number of calls in
flight at once is tracked so callers can check concurrency limits.

Example:
    gateway = InMemoryGateway.with_defaults()
    gateway.seed("Deployment", {"metadata": {"name": "web", "namespace": "default"}})
    gateway.list(coord, "default", field_selector="metadata.name=web")
"""

from __future__ import annotations

import copy
import logging
import threading
import time
import uuid
from typing import Any, Iterable, Optional

from kcql import selectors
from kcql.discovery import APIResource, ResourceCoordinate
from kcql.exceptions import APIError
from kcql.gateway.base import ApiGateway
from kcql.paths import extract

logger = logging.getLogger(__name__)


DEFAULT_CATALOG = [
    APIResource("pods", "Pod", "v1", ["po"]),
    APIResource("services", "Service", "v1", ["svc"]),
    APIResource("configmaps", "ConfigMap", "v1", ["cm"]),
    APIResource("secrets", "Secret", "v1"),
    APIResource("namespaces", "Namespace", "v1", ["ns"], namespaced=False),
    APIResource("nodes", "Node", "v1", ["no"], namespaced=False),
    APIResource("persistentvolumeclaims", "PersistentVolumeClaim", "v1", ["pvc"]),
    APIResource("persistentvolumes", "PersistentVolume", "v1", ["pv"], namespaced=False),
    APIResource("deployments", "Deployment", "apps/v1", ["deploy"]),
    APIResource("replicasets", "ReplicaSet", "apps/v1", ["rs"]),
    APIResource("statefulsets", "StatefulSet", "apps/v1", ["sts"]),
    APIResource("daemonsets", "DaemonSet", "apps/v1", ["ds"]),
    APIResource("jobs", "Job", "batch/v1"),
    APIResource("cronjobs", "CronJob", "batch/v1", ["cj"]),
    APIResource("ingresses", "Ingress", "networking.k8s.io/v1", ["ing"]),
    APIResource("horizontalpodautoscalers", "HorizontalPodAutoscaler", "autoscaling/v2", ["hpa"]),
]


class InMemoryGateway(ApiGateway):
    """
    ApiGateway over in-process dictionaries.

    Attributes:
        catalog: Discovery catalog, in match order
        calls: (operation, resource) of every call, in order
        max_in_flight: Highest number of calls observed running at once
        latency: Seconds each call sleeps, to make overlap observable
    """

    def __init__(self, catalog: Optional[Iterable[APIResource]] = None, latency: float = 0.0):
        self.catalog: list[APIResource] = list(catalog or [])
        self.latency = latency
        self.calls: list[tuple[str, str]] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self._store: dict[tuple[str, str], list[dict]] = {}
        self._failures: dict[str, APIError] = {}
        self._lock = threading.Lock()

    @classmethod
    def with_defaults(cls, latency: float = 0.0) -> "InMemoryGateway":
        """Gateway serving the built-in catalog of common kinds."""
        return cls(copy.deepcopy(DEFAULT_CATALOG), latency=latency)

    # --- Seeding and inspection ---

    def coordinate(self, identifier: str) -> ResourceCoordinate:
        for resource in self.catalog:
            if resource.matches(identifier):
                return resource.coordinate()
        raise KeyError(identifier)

    def seed(self, kind: str, *documents: dict) -> list[dict]:
        """
        Store documents under a kind, filling in uid and apiVersion/kind.

        Returns:
            The stored documents
        """
        coord = self.coordinate(kind)
        stored = [self._stamp(coord, copy.deepcopy(doc)) for doc in documents]
        with self._lock:
            self._store.setdefault(self._key(coord), []).extend(stored)
        return stored

    def documents(self, kind: str) -> list[dict]:
        """Snapshot of every stored document of a kind."""
        coord = self.coordinate(kind)
        with self._lock:
            return copy.deepcopy(self._store.get(self._key(coord), []))

    def fail(self, operation: str, error: APIError) -> None:
        """Make every later call of an operation raise a copy of ``error``."""
        self._failures[operation] = error

    def operations(self) -> list[str]:
        return [operation for operation, _ in self.calls]

    # --- ApiGateway ---

    def discover(self) -> list[APIResource]:
        self._enter("discover", "")
        try:
            return copy.deepcopy(self.catalog)
        finally:
            self._leave()

    def list(self, coordinate, namespace, field_selector="", label_selector=""):
        self._enter("list", coordinate.resource)
        try:
            fields = selectors.parse_selector(field_selector)
            labels = selectors.parse_selector(label_selector)
            with self._lock:
                items = list(self._store.get(self._key(coordinate), []))
            return [
                copy.deepcopy(doc) for doc in items
                if self._in_scope(coordinate, namespace, doc)
                and all(_field_matches(doc, key, op, value) for key, op, value in fields)
                and all(_label_matches(doc, key, op, value) for key, op, value in labels)
            ]
        finally:
            self._leave()

    def create(self, coordinate, namespace, body):
        self._enter("create", coordinate.resource)
        try:
            doc = copy.deepcopy(body)
            metadata = doc.setdefault("metadata", {})
            if coordinate.namespaced:
                metadata.setdefault("namespace", namespace or "default")
            name = metadata.get("name")
            if not name:
                raise APIError("Resource name may not be empty", operation="create", status=422)
            with self._lock:
                items = self._store.setdefault(self._key(coordinate), [])
                if self._find(items, metadata.get("namespace"), name) is not None:
                    raise APIError(
                        f'{coordinate.resource} "{name}" already exists',
                        operation="create",
                        status=409,
                    )
                stored = self._stamp(coordinate, doc)
                items.append(stored)
            logger.debug("Created %s %s", coordinate.kind, name)
            return copy.deepcopy(stored)
        finally:
            self._leave()

    def patch(self, coordinate, namespace, name, body):
        self._enter("patch", coordinate.resource)
        try:
            with self._lock:
                items = self._store.get(self._key(coordinate), [])
                doc = self._find(items, namespace if coordinate.namespaced else None, name)
                if doc is None:
                    raise _not_found(coordinate, name, "patch")
                patched = _merge_patch(doc, body)
                items[items.index(doc)] = patched
            return copy.deepcopy(patched)
        finally:
            self._leave()

    def delete(self, coordinate, namespace, name):
        self._enter("delete", coordinate.resource)
        try:
            with self._lock:
                items = self._store.get(self._key(coordinate), [])
                doc = self._find(items, namespace if coordinate.namespaced else None, name)
                if doc is None:
                    raise _not_found(coordinate, name, "delete")
                items.remove(doc)
            logger.debug("Deleted %s %s", coordinate.kind, name)
            return copy.deepcopy(doc)
        finally:
            self._leave()

    # --- Helpers ---

    def _enter(self, operation: str, resource: str) -> None:
        with self._lock:
            self.calls.append((operation, resource))
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.latency:
                time.sleep(self.latency)
            error = self._failures.get(operation)
            if error is not None:
                raise copy.copy(error)
        except BaseException:
            self._leave()
            raise

    def _leave(self) -> None:
        with self._lock:
            self.in_flight -= 1

    @staticmethod
    def _key(coordinate: ResourceCoordinate) -> tuple[str, str]:
        return (coordinate.group_version, coordinate.resource)

    @staticmethod
    def _stamp(coordinate: ResourceCoordinate, doc: dict) -> dict:
        doc.setdefault("apiVersion", coordinate.api_version)
        doc.setdefault("kind", coordinate.kind)
        metadata = doc.setdefault("metadata", {})
        metadata.setdefault("uid", str(uuid.uuid4()))
        return doc

    @staticmethod
    def _find(items: list[dict], namespace: Optional[str], name: str) -> Optional[dict]:
        for doc in items:
            metadata = doc.get("metadata", {})
            if metadata.get("name") != name:
                continue
            if namespace is None or metadata.get("namespace", "") == namespace:
                return doc
        return None

    @staticmethod
    def _in_scope(coordinate: ResourceCoordinate, namespace: Optional[str], doc: dict) -> bool:
        if not coordinate.namespaced or namespace is None:
            return True
        return doc.get("metadata", {}).get("namespace", "") == namespace


def _not_found(coordinate: ResourceCoordinate, name: str, operation: str) -> APIError:
    return APIError(f'{coordinate.resource} "{name}" not found', operation=operation, status=404)


def _field_matches(doc: dict, key: str, op: str, value: str) -> bool:
    found = [selectors.format_value(v) for v in extract(doc, key) if _is_scalar(v)]
    if op == "!=":
        return value not in found
    return value in found


def _label_matches(doc: dict, key: str, op: str, value: str) -> bool:
    labels = doc.get("metadata", {}).get("labels") or {}
    if op == "!=":
        return labels.get(key) != value
    return key in labels and labels[key] == value


def _is_scalar(value: Any) -> bool:
    return isinstance(value, (str, int, float, bool))


def _merge_patch(target: Any, patch: Any) -> Any:
    """Apply an RFC 7386 JSON merge patch, returning a new document."""
    if not isinstance(patch, dict):
        return copy.deepcopy(patch)
    result = copy.deepcopy(target) if isinstance(target, dict) else {}
    for key, value in patch.items():
        if value is None:
            result.pop(key, None)
        else:
            result[key] = _merge_patch(result.get(key), value)
    return result
