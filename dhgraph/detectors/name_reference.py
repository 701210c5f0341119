"""Name reference detector.

Finds spec fields that hold another resource's name directly:

==========================  ==================================  =====================
Source                      Field                               Target
==========================  ==================================  =====================
Ingress                     rules[].http.paths[].backend        Service
Ingress                     tls[].secretName                    Secret
Ingress                     ingressClassName                    IngressClass
StatefulSet                 serviceName                         Service
RoleBinding / CRB           roleRef, subjects[]                 Role, ClusterRole, SA
PersistentVolumeClaim       storageClassName                    StorageClass
Workloads                   serviceAccountName                  ServiceAccount
Workloads                   imagePullSecrets[].name             Secret
==========================  ==================================  =====================
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping

from dhgraph.detectors.base import Detector
from dhgraph.detectors.kinds import (
    CLUSTER_ROLE,
    INGRESS_CLASS,
    ROLE,
    SECRET,
    SERVICE,
    SERVICE_ACCOUNT,
    STORAGE_CLASS,
    pod_spec_location,
)
from dhgraph.fields import iter_maps, nested_name
from dhgraph.graph.models import Relationship, RelationType
from dhgraph.models.resources import Resource, ResourceKey

_ROLE_REF_KINDS = {"Role": ROLE, "ClusterRole": CLUSTER_ROLE}


class NameReferenceDetector(Detector):
    """Detects direct by-name references between resources."""

    name = "name_reference"
    priority = 90

    def candidates(self, resource: Resource, catalog: Mapping[ResourceKey, Resource]) -> Iterator[Relationship]:
        kind = resource.kind
        if kind == "Ingress":
            yield from self._ingress(resource)
        elif kind == "StatefulSet":
            yield from self._statefulset_service(resource)
        elif kind in ("RoleBinding", "ClusterRoleBinding"):
            yield from self._binding(resource)
        elif kind == "PersistentVolumeClaim":
            yield from self._storage_class(resource)

        yield from self._service_account(resource)
        yield from self._image_pull_secrets(resource)

    def _ingress(self, resource: Resource) -> Iterator[Relationship]:
        namespace = resource.namespace
        for rule in iter_maps(resource.obj, "spec", "rules"):
            for path in iter_maps(rule, "http", "paths"):
                service_name = nested_name(path, "backend", "service", "name")
                if service_name is None:
                    continue
                yield self.edge(
                    resource,
                    SERVICE.key(namespace, service_name),
                    RelationType.NAME_REFERENCE,
                    "spec.rules[].http.paths[].backend.service.name",
                    service_name=service_name,
                )

        default_backend = nested_name(resource.obj, "spec", "defaultBackend", "service", "name")
        if default_backend is not None:
            yield self.edge(
                resource,
                SERVICE.key(namespace, default_backend),
                RelationType.NAME_REFERENCE,
                "spec.defaultBackend.service.name",
                service_name=default_backend,
            )

        for tls in iter_maps(resource.obj, "spec", "tls"):
            secret_name = nested_name(tls, "secretName")
            if secret_name is None:
                continue
            yield self.edge(
                resource,
                SECRET.key(namespace, secret_name),
                RelationType.NAME_REFERENCE,
                "spec.tls[].secretName",
                secret_name=secret_name,
            )

        class_name = nested_name(resource.obj, "spec", "ingressClassName")
        if class_name is not None:
            yield self.edge(
                resource,
                INGRESS_CLASS.key("", class_name),
                RelationType.INGRESS_CLASS,
                "spec.ingressClassName",
                ingress_class_name=class_name,
            )

    def _statefulset_service(self, resource: Resource) -> Iterator[Relationship]:
        service_name = nested_name(resource.obj, "spec", "serviceName")
        if service_name is None:
            return
        yield self.edge(
            resource,
            SERVICE.key(resource.namespace, service_name),
            RelationType.NAME_REFERENCE,
            "spec.serviceName",
            service_name=service_name,
        )

    def _binding(self, resource: Resource) -> Iterator[Relationship]:
        namespace = resource.namespace

        role_kind = nested_name(resource.obj, "roleRef", "kind")
        role_name = nested_name(resource.obj, "roleRef", "name")
        gvk = _ROLE_REF_KINDS.get(role_kind or "")
        if gvk is not None and role_name is not None:
            role_namespace = "" if gvk is CLUSTER_ROLE else namespace
            yield self.edge(
                resource,
                gvk.key(role_namespace, role_name),
                RelationType.ROLE_BINDING,
                "roleRef",
                role_kind=gvk.kind,
                role_name=role_name,
            )

        for subject in iter_maps(resource.obj, "subjects"):
            if nested_name(subject, "kind") != "ServiceAccount":
                continue
            subject_name = nested_name(subject, "name")
            if subject_name is None:
                continue
            subject_namespace = nested_name(subject, "namespace") or namespace
            yield self.edge(
                resource,
                SERVICE_ACCOUNT.key(subject_namespace, subject_name),
                RelationType.ROLE_BINDING,
                "subjects[]",
                subject_kind="ServiceAccount",
                subject_name=subject_name,
            )

    def _storage_class(self, resource: Resource) -> Iterator[Relationship]:
        class_name = nested_name(resource.obj, "spec", "storageClassName")
        if class_name is None:
            return
        yield self.edge(
            resource,
            STORAGE_CLASS.key("", class_name),
            RelationType.STORAGE_CLASS,
            "spec.storageClassName",
            storage_class_name=class_name,
        )

    def _service_account(self, resource: Resource) -> Iterator[Relationship]:
        location = pod_spec_location(resource.kind)
        if location is None:
            return
        sa_name = nested_name(resource.obj, *location.path, "serviceAccountName")
        if sa_name is None:
            return
        yield self.edge(
            resource,
            SERVICE_ACCOUNT.key(resource.namespace, sa_name),
            RelationType.SERVICE_ACCOUNT,
            location.field("serviceAccountName"),
            service_account_name=sa_name,
        )

    def _image_pull_secrets(self, resource: Resource) -> Iterator[Relationship]:
        location = pod_spec_location(resource.kind)
        if location is None:
            return
        for entry in iter_maps(resource.obj, *location.path, "imagePullSecrets"):
            secret_name = nested_name(entry, "name")
            if secret_name is None:
                continue
            yield self.edge(
                resource,
                SECRET.key(resource.namespace, secret_name),
                RelationType.IMAGE_PULL_SECRET,
                location.field("imagePullSecrets[].name"),
                secret_name=secret_name,
            )
