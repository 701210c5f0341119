"""Resource identity and the parsed-manifest wrapper handed to the engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from dhgraph.fields import nested_map, nested_str, nested_str_map


class Source(StrEnum):
    """Where a resource was extracted from."""

    CLUSTER = "cluster"
    FILE = "file"
    GITOPS = "gitops"


@dataclass(frozen=True, order=True)
class ResourceKey:
    """Unique identity of a resource.

    Equality is exact across all five fields: ``v1`` with an empty group and
    ``core/v1`` are different keys, and no defaulting is ever applied.
    Namespace is empty for cluster-scoped kinds.
    """

    group: str
    version: str
    kind: str
    namespace: str
    name: str

    @classmethod
    def from_manifest(cls, obj: dict[str, Any]) -> ResourceKey:
        """Build a key from ``apiVersion``, ``kind`` and ``metadata``."""
        api_version = nested_str(obj, "apiVersion") or ""
        group, _, version = api_version.rpartition("/")
        return cls(
            group=group,
            version=version,
            kind=nested_str(obj, "kind") or "",
            namespace=nested_str(obj, "metadata", "namespace") or "",
            name=nested_str(obj, "metadata", "name") or "",
        )

    @property
    def api_version(self) -> str:
        return f"{self.group}/{self.version}" if self.group else self.version

    @property
    def cluster_scoped(self) -> bool:
        return not self.namespace

    def __str__(self) -> str:
        if not self.namespace:
            return f"{self.kind}/{self.name}"
        return f"{self.kind}/{self.namespace}/{self.name}"


@dataclass(frozen=True)
class Resource:
    """One parsed manifest as produced by the normalization stage.

    Owned by the catalog for the duration of an analysis run. Detectors only
    ever read from it.
    """

    key: ResourceKey
    obj: dict[str, Any] = field(compare=False, repr=False)
    source: Source = Source.FILE
    source_path: str = ""
    service_name: str = ""  # assigned upstream; empty when unknown

    @classmethod
    def from_manifest(
        cls,
        obj: dict[str, Any],
        source: Source = Source.FILE,
        source_path: str = "",
        service_name: str = "",
    ) -> Resource:
        return cls(
            key=ResourceKey.from_manifest(obj),
            obj=obj,
            source=source,
            source_path=source_path,
            service_name=service_name,
        )

    @property
    def kind(self) -> str:
        return self.key.kind

    @property
    def namespace(self) -> str:
        return self.key.namespace

    @property
    def name(self) -> str:
        return self.key.name

    @property
    def labels(self) -> dict[str, str]:
        return nested_str_map(self.obj, "metadata", "labels") or {}

    @property
    def annotations(self) -> dict[str, Any]:
        """Raw annotation map; values are not type-checked here."""
        return dict(nested_map(self.obj, "metadata", "annotations") or {})
