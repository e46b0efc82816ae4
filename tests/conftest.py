"""
Shared fixtures: a small in-memory cluster.

    default/web (Deployment) -> web-abc (ReplicaSet) -> web-abc-1, web-abc-2 (Pods)
    default/api (Deployment, no ReplicaSet)
    default/web-svc (Service selecting app=web)
    prod/web (Deployment)
    node-1 (Node, cluster-scoped)
"""

import pytest

from kcql.gateway import InMemoryGateway
from kcql.session import Session


def deployment(name, namespace="default", uid=None, app=None, replicas=1):
    app = app or name
    return {
        "metadata": {
            "name": name,
            "namespace": namespace,
            "uid": uid or f"uid-{namespace}-{name}",
            "labels": {"app": app},
        },
        "spec": {
            "replicas": replicas,
            "template": {"metadata": {"labels": {"app": app}}},
        },
    }


def replicaset(name, owner_uid, namespace="default", uid=None):
    return {
        "metadata": {
            "name": name,
            "namespace": namespace,
            "uid": uid or f"uid-{namespace}-{name}",
            "ownerReferences": [{"kind": "Deployment", "uid": owner_uid}],
        },
    }


def pod(name, owner_uid, namespace="default", app="web", phase="Running", node="node-1"):
    return {
        "metadata": {
            "name": name,
            "namespace": namespace,
            "uid": f"uid-{namespace}-{name}",
            "labels": {"app": app},
            "ownerReferences": [{"kind": "ReplicaSet", "uid": owner_uid}],
        },
        "spec": {
            "nodeName": node,
            "containers": [
                {"name": "main", "image": f"{app}:1.0"},
                {"name": "sidecar", "image": "proxy:2.0"},
            ],
        },
        "status": {"phase": phase},
    }


@pytest.fixture
def gateway():
    """In-memory gateway seeded with a small cluster."""
    gw = InMemoryGateway.with_defaults()
    gw.seed(
        "Deployment",
        deployment("web", uid="uid-web", replicas=2),
        deployment("api", uid="uid-api"),
        deployment("web", namespace="prod", uid="uid-prod-web"),
    )
    gw.seed("ReplicaSet", replicaset("web-abc", "uid-web", uid="uid-rs"))
    gw.seed(
        "Pod",
        pod("web-abc-1", "uid-rs"),
        pod("web-abc-2", "uid-rs", phase="Pending"),
    )
    gw.seed("Service", {
        "metadata": {"name": "web-svc", "namespace": "default"},
        "spec": {"selector": {"app": "web"}},
    })
    gw.seed("Node", {"metadata": {"name": "node-1"}})
    return gw


@pytest.fixture
def session():
    return Session(namespace="default")
