"""Service grouping over a populated relationship graph.

Three passes, in node order:

1. resources carrying an upstream ``service_name`` join that group;
2. remaining resources join the group of the first already-grouped
   neighbour, looking at outgoing relationships before incoming ones;
3. anything still ungrouped becomes its own group, named after the
   resource's ``metadata.name``.

Groups are attached to the graph; resources themselves are never modified.
"""

from __future__ import annotations

from dhgraph.graph.dependency_graph import RelationshipGraph
from dhgraph.graph.models import ResourceGroup
from dhgraph.models.resources import Resource, ResourceKey


def _related_service(key: ResourceKey, graph: RelationshipGraph, assigned: dict[ResourceKey, str]) -> str | None:
    for rel in graph.relationships_from(key):
        if rel.target in assigned:
            return assigned[rel.target]
    for rel in graph.relationships_to(key):
        if rel.source in assigned:
            return assigned[rel.source]
    return None


def group_resources(graph: RelationshipGraph) -> list[ResourceGroup]:
    """Partition the graph's resources into service groups and attach them."""
    members: dict[str, list[Resource]] = {}
    assigned: dict[ResourceKey, str] = {}

    def join(name: str, resource: Resource) -> None:
        members.setdefault(name, []).append(resource)
        assigned[resource.key] = name

    resources = list(graph)

    for resource in resources:
        if resource.service_name:
            join(resource.service_name, resource)

    for resource in resources:
        if resource.key in assigned:
            continue
        related = _related_service(resource.key, graph, assigned)
        if related is not None:
            join(related, resource)

    for resource in resources:
        if resource.key not in assigned:
            join(resource.name, resource)

    # group namespace is taken from the first member
    groups = [
        ResourceGroup(name=name, namespace=group_members[0].namespace, resources=tuple(group_members))
        for name, group_members in members.items()
    ]
    for group in groups:
        graph.add_group(group)
    return groups
