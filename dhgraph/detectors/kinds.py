"""Well-known resource types and pod-template locations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple

from dhgraph.models.resources import ResourceKey


class GVK(NamedTuple):
    group: str
    version: str
    kind: str

    def key(self, namespace: str, name: str) -> ResourceKey:
        return ResourceKey(self.group, self.version, self.kind, namespace, name)


SERVICE = GVK("", "v1", "Service")
SECRET = GVK("", "v1", "Secret")
CONFIG_MAP = GVK("", "v1", "ConfigMap")
SERVICE_ACCOUNT = GVK("", "v1", "ServiceAccount")
PERSISTENT_VOLUME_CLAIM = GVK("", "v1", "PersistentVolumeClaim")
STORAGE_CLASS = GVK("storage.k8s.io", "v1", "StorageClass")
INGRESS_CLASS = GVK("networking.k8s.io", "v1", "IngressClass")
ROLE = GVK("rbac.authorization.k8s.io", "v1", "Role")
CLUSTER_ROLE = GVK("rbac.authorization.k8s.io", "v1", "ClusterRole")
ISSUER = GVK("cert-manager.io", "v1", "Issuer")
CLUSTER_ISSUER = GVK("cert-manager.io", "v1", "ClusterIssuer")

WORKLOAD_KINDS = frozenset({"Deployment", "StatefulSet", "DaemonSet", "Job", "CronJob", "Pod"})

# Kinds a Service selector can route to
SELECTABLE_KINDS = frozenset({"Pod", "Deployment", "StatefulSet", "DaemonSet", "ReplicaSet"})


@dataclass(frozen=True)
class PodSpecLocation:
    """Where the pod spec lives inside a workload manifest.

    ``path`` is the key sequence for nested lookups, ``prefix`` the dotted
    form used in relationship field paths.
    """

    path: tuple[str, ...]

    @property
    def prefix(self) -> str:
        return ".".join(self.path)

    def field(self, suffix: str) -> str:
        return f"{self.prefix}.{suffix}"


_POD = PodSpecLocation(("spec",))
_CRONJOB = PodSpecLocation(("spec", "jobTemplate", "spec", "template", "spec"))
_TEMPLATED = PodSpecLocation(("spec", "template", "spec"))


def pod_spec_location(kind: str) -> PodSpecLocation | None:
    """Return the pod spec location for a workload kind, None for anything else."""
    if kind not in WORKLOAD_KINDS:
        return None
    if kind == "Pod":
        return _POD
    if kind == "CronJob":
        return _CRONJOB
    return _TEMPLATED
