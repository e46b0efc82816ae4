"""
Tests for the kubernetes-backed gateway.

The dynamic client is replaced with mocks; no API server is contacted.
"""

from types import SimpleNamespace
from unittest.mock import MagicMock, Mock

import pytest

pytest.importorskip("kubernetes")

from kubernetes.client.exceptions import ApiException  # noqa: E402
from kubernetes.dynamic.exceptions import ResourceNotFoundError  # noqa: E402
from kubernetes.dynamic.resource import ResourceList  # noqa: E402

from kcql.discovery import ResourceCoordinate  # noqa: E402
from kcql.exceptions import APIError  # noqa: E402
from kcql.gateway import kube  # noqa: E402
from kcql.gateway.kube import MERGE_PATCH, KubeGateway  # noqa: E402

DEPLOYMENTS = ResourceCoordinate("apps", "v1", "deployments", "Deployment", True)
NODES = ResourceCoordinate("", "v1", "nodes", "Node", False)


def api_resource(name, kind, group_version, short_names=None, namespaced=True, preferred=True):
    return SimpleNamespace(
        name=name,
        kind=kind,
        group_version=group_version,
        short_names=short_names,
        namespaced=namespaced,
        preferred=preferred,
    )


@pytest.fixture
def client(monkeypatch):
    client = MagicMock()
    monkeypatch.setattr(kube.dynamic, "DynamicClient", Mock(return_value=client))
    return client


@pytest.fixture
def resource(client):
    resource = MagicMock()
    client.resources.get.return_value = resource
    return resource


@pytest.fixture
def gateway(client):
    return KubeGateway(Mock())


class TestDiscover:
    """Tests for KubeGateway.discover()."""

    def test_catalog(self, gateway, client):
        client.resources.search.return_value = [
            api_resource("pods", "Pod", "v1", ["po"]),
            api_resource("pods/log", "Pod", "v1"),
            Mock(spec=ResourceList),
            api_resource("deployments", "Deployment", "apps/v1", ["deploy"]),
            api_resource("deployments", "Deployment", "extensions/v1beta1", preferred=False),
            api_resource("nodes", "Node", "v1", None, namespaced=False),
        ]

        catalog = gateway.discover()

        assert [(r.name, r.group_version) for r in catalog] == [
            ("pods", "v1"),
            ("deployments", "apps/v1"),
            ("nodes", "v1"),
        ]
        assert catalog[0].short_names == ["po"]
        assert catalog[2].short_names == []
        assert catalog[2].namespaced is False

    def test_discovery_failure(self, gateway, client):
        client.resources.search.side_effect = ApiException(status=503, reason="Service Unavailable")

        with pytest.raises(APIError) as exc:
            gateway.discover()

        assert exc.value.operation == "discover"
        assert exc.value.status == 503
        assert isinstance(exc.value.__cause__, ApiException)


class TestCalls:
    """Tests for list/create/patch/delete delegation."""

    def test_list(self, gateway, client, resource):
        resource.get.return_value.to_dict.return_value = {"items": [{"metadata": {"name": "web"}}]}

        docs = gateway.list(DEPLOYMENTS, "default", "metadata.name=web", "app=web")

        assert docs == [{"metadata": {"name": "web"}}]
        client.resources.get.assert_called_with(api_version="apps/v1", name="deployments")
        resource.get.assert_called_once_with(
            namespace="default",
            field_selector="metadata.name=web",
            label_selector="app=web",
        )

    def test_list_all_namespaces(self, gateway, resource):
        resource.get.return_value.to_dict.return_value = {"items": None}

        assert gateway.list(DEPLOYMENTS, None) == []
        resource.get.assert_called_once_with()

    def test_list_cluster_scoped(self, gateway, client, resource):
        resource.get.return_value.to_dict.return_value = {"items": []}

        gateway.list(NODES, "default")

        client.resources.get.assert_called_with(api_version="v1", name="nodes")
        resource.get.assert_called_once_with()

    def test_create(self, gateway, resource):
        body = {"metadata": {"name": "web"}}
        resource.create.return_value.to_dict.return_value = {"metadata": {"name": "web", "uid": "u"}}

        created = gateway.create(DEPLOYMENTS, "default", body)

        assert created["metadata"]["uid"] == "u"
        resource.create.assert_called_once_with(body=body, namespace="default")

    def test_patch_is_merge_patch(self, gateway, resource):
        resource.patch.return_value.to_dict.return_value = {"spec": {"replicas": 3}}

        gateway.patch(DEPLOYMENTS, "default", "web", {"spec": {"replicas": 3}})

        resource.patch.assert_called_once_with(
            body={"spec": {"replicas": 3}},
            name="web",
            namespace="default",
            content_type=MERGE_PATCH,
        )

    def test_delete_cluster_scoped(self, gateway, resource):
        resource.delete.return_value.to_dict.return_value = {"status": "Success"}

        gateway.delete(NODES, "default", "node-1")

        resource.delete.assert_called_once_with(name="node-1", namespace=None)


class TestErrors:
    """Tests for client error wrapping."""

    def test_api_exception(self, gateway, resource):
        resource.delete.side_effect = ApiException(status=404, reason="Not Found")

        with pytest.raises(APIError) as exc:
            gateway.delete(DEPLOYMENTS, "default", "gone")

        assert exc.value.status == 404
        assert exc.value.operation == "delete"
        assert "Not Found" in str(exc.value)

    def test_unknown_resource(self, gateway, client):
        client.resources.get.side_effect = ResourceNotFoundError("No matches found")

        with pytest.raises(APIError) as exc:
            gateway.list(DEPLOYMENTS, "default")

        assert exc.value.status == 404
        assert isinstance(exc.value.__cause__, ResourceNotFoundError)

    def test_connection_error(self, gateway, resource):
        resource.get.side_effect = ConnectionRefusedError("refused")

        with pytest.raises(APIError, match="refused") as exc:
            gateway.list(DEPLOYMENTS, "default")

        assert exc.value.status is None
