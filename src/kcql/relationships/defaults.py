# -*- encoding: utf-8 -*-
"""
KCQL default relationship rules.

Same shape as a relationships JSON file, so user files and the built-in
set go through one loader.
"""

_OWNER_UID = [{
    "fieldA": "metadata.uid",
    "fieldB": "metadata.ownerReferences[].uid",
    "comparison": "exact",
}]


def _owns(owner: str, owned: str) -> dict:
    return {"type": "OWNS", "kindA": owner, "kindB": owned, "matchCriteria": _OWNER_UID}


def _mounts(kind: str, field: str) -> dict:
    return {
        "type": "MOUNTS",
        "kindA": "Pod",
        "kindB": kind,
        "matchCriteria": [{"fieldA": field, "fieldB": "metadata.name", "comparison": "exact"}],
    }


DEFAULT_RELATIONSHIPS = {
    "relationships": [
        _owns("Deployment", "ReplicaSet"),
        _owns("ReplicaSet", "Pod"),
        _owns("StatefulSet", "Pod"),
        _owns("DaemonSet", "Pod"),
        _owns("Job", "Pod"),
        _owns("CronJob", "Job"),
        {
            "type": "EXPOSES",
            "kindA": "Service",
            "kindB": "Pod",
            "matchCriteria": [{
                "fieldA": "spec.selector",
                "fieldB": "metadata.labels",
                "comparison": "contains_all",
            }],
        },
        {
            "type": "EXPOSES",
            "kindA": "Service",
            "kindB": "Deployment",
            "matchCriteria": [{
                "fieldA": "spec.selector",
                "fieldB": "spec.template.metadata.labels",
                "comparison": "contains_all",
            }],
        },
        {
            "type": "ROUTES",
            "kindA": "Ingress",
            "kindB": "Service",
            "matchCriteria": [{
                "fieldA": "spec.rules[].http.paths[].backend.service.name",
                "fieldB": "metadata.name",
                "comparison": "exact",
            }],
        },
        _mounts("ConfigMap", "spec.volumes[].configMap.name"),
        _mounts("Secret", "spec.volumes[].secret.secretName"),
        _mounts("PersistentVolumeClaim", "spec.volumes[].persistentVolumeClaim.claimName"),
        {
            "type": "BINDS",
            "kindA": "PersistentVolumeClaim",
            "kindB": "PersistentVolume",
            "sameNamespace": False,
            "matchCriteria": [{
                "fieldA": "spec.volumeName",
                "fieldB": "metadata.name",
                "comparison": "exact",
            }],
        },
        {
            "type": "SCHEDULES",
            "kindA": "Pod",
            "kindB": "Node",
            "sameNamespace": False,
            "matchCriteria": [{
                "fieldA": "spec.nodeName",
                "fieldB": "metadata.name",
                "comparison": "exact",
            }],
        },
        {
            "type": "SCALES",
            "kindA": "HorizontalPodAutoscaler",
            "kindB": "Deployment",
            "matchCriteria": [{
                "fieldA": "spec.scaleTargetRef.name",
                "fieldB": "metadata.name",
                "comparison": "exact",
            }],
        },
    ]
}
