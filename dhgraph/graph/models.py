"""Data structures for the resource relationship graph."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum

from dhgraph.models.resources import Resource, ResourceKey


class RelationType(StrEnum):
    """Types of relationships between Kubernetes resources."""

    LABEL_SELECTOR = "label_selector"
    SERVICE_MONITOR = "service_monitor"
    NAME_REFERENCE = "name_reference"
    VOLUME_MOUNT = "volume_mount"
    PVC = "pvc"
    ENV_FROM = "env_from"
    ENV_VALUE_FROM = "env_value_from"
    ROLE_BINDING = "role_binding"
    SERVICE_ACCOUNT = "service_account"
    IMAGE_PULL_SECRET = "image_pull_secret"
    STORAGE_CLASS = "storage_class"
    INGRESS_CLASS = "ingress_class"
    ANNOTATION = "annotation"
    DECKHOUSE = "deckhouse"
    CUSTOM_DEPENDENCY = "custom_dependency"
    SAME_VENDOR_DOMAIN = "same_vendor_domain"


@dataclass(frozen=True)
class Relationship:
    """A typed, directed edge between two resources.

    ``source_field`` is the path of the field that produced the edge, e.g.
    ``spec.tls[].secretName``. ``details`` is excluded from hashing so that
    relationships can be collected into sets.
    """

    source: ResourceKey
    target: ResourceKey
    type: RelationType
    source_field: str
    details: Mapping[str, str] = field(default_factory=dict, hash=False)


@dataclass(frozen=True)
class ResourceGroup:
    """Resources emitted together under one service name."""

    name: str
    namespace: str
    resources: tuple[Resource, ...] = ()

    @property
    def keys(self) -> list[ResourceKey]:
        return [r.key for r in self.resources]
