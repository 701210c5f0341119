"""The relationship graph produced by one analysis run.

Lifecycle: created empty, resources added once each, relationships appended
as detectors emit them, groups attached by the grouping pass, then frozen.
After ``freeze()`` every mutator raises GraphFrozenError; the query API is
what the chart emitter consumes.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterator

from dhgraph.errors import GraphFrozenError
from dhgraph.graph.models import Relationship, RelationType, ResourceGroup
from dhgraph.models.resources import Resource, ResourceKey


class RelationshipGraph:
    """Resource nodes plus directed, typed relationship edges.

    The graph may contain cycles and duplicate edges (two detectors inferring
    the same link); neither is rejected here.
    """

    def __init__(self) -> None:
        self._resources: dict[ResourceKey, Resource] = {}
        self._relationships: list[Relationship] = []
        self._groups: list[ResourceGroup] = []
        self._service_of: dict[ResourceKey, str] = {}
        self._frozen = False

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def add_resource(self, resource: Resource) -> None:
        self._check_mutable()
        self._resources[resource.key] = resource

    def add_relationship(self, relationship: Relationship) -> None:
        self._check_mutable()
        self._relationships.append(relationship)

    def add_group(self, group: ResourceGroup) -> None:
        self._check_mutable()
        self._groups.append(group)
        for resource in group.resources:
            self._service_of[resource.key] = group.name

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def _check_mutable(self) -> None:
        if self._frozen:
            raise GraphFrozenError("relationship graph is frozen; analysis already completed")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def resources(self) -> dict[ResourceKey, Resource]:
        """Snapshot of the resource nodes keyed by identity."""
        return dict(self._resources)

    @property
    def relationships(self) -> list[Relationship]:
        return list(self._relationships)

    @property
    def groups(self) -> list[ResourceGroup]:
        return list(self._groups)

    def __contains__(self, key: object) -> bool:
        return key in self._resources

    def __len__(self) -> int:
        return len(self._resources)

    def __iter__(self) -> Iterator[Resource]:
        return iter(self._resources.values())

    def get(self, key: ResourceKey) -> Resource | None:
        return self._resources.get(key)

    def resources_by_kind(self, kind: str) -> list[Resource]:
        return [r for k, r in self._resources.items() if k.kind == kind]

    def relationships_from(self, key: ResourceKey) -> list[Relationship]:
        return [rel for rel in self._relationships if rel.source == key]

    def relationships_to(self, key: ResourceKey) -> list[Relationship]:
        return [rel for rel in self._relationships if rel.target == key]

    def relationships_of_type(self, rel_type: RelationType) -> list[Relationship]:
        return [rel for rel in self._relationships if rel.type == rel_type]

    def relationships_by_type(self) -> dict[RelationType, list[Relationship]]:
        """Group relationships by type, preserving emission order within each type."""
        by_type: dict[RelationType, list[Relationship]] = defaultdict(list)
        for rel in self._relationships:
            by_type[rel.type].append(rel)
        return dict(by_type)

    def service_of(self, key: ResourceKey) -> str | None:
        """Name of the group *key* was placed in, or None before grouping."""
        return self._service_of.get(key)

    def group(self, name: str) -> ResourceGroup | None:
        for group in self._groups:
            if group.name == name:
                return group
        return None
