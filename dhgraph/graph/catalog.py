"""Read-only snapshot of every resource under analysis."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType

import structlog

from dhgraph.models.resources import Resource, ResourceKey

_log = structlog.get_logger(component="graph.catalog")


class ResourceCatalog(Mapping[ResourceKey, Resource]):
    """Immutable mapping from ResourceKey to Resource.

    Built once per analysis run and shared by reference with every detector
    call. Iteration follows input order; when two inputs share a key the
    later one replaces the earlier one in place.
    """

    __slots__ = ("_items",)

    def __init__(self, resources: Iterable[Resource] = ()) -> None:
        items: dict[ResourceKey, Resource] = {}
        for resource in resources:
            if resource.key in items:
                _log.debug("duplicate_resource_key", key=str(resource.key), source_path=resource.source_path)
            items[resource.key] = resource
        self._items = MappingProxyType(items)

    def __getitem__(self, key: ResourceKey) -> Resource:
        return self._items[key]

    def __iter__(self) -> Iterator[ResourceKey]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"ResourceCatalog({len(self._items)} resources)"
