"""Vendor domain detector.

Treats every resource whose API group is the vendor domain, or a DNS
sub-domain of it, as related to every other such resource. This is a coarse
all-to-all grouping (n * (n - 1) edges for n matching resources) that keeps
vendor custom resources together when no field-level reference links them.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping

from dhgraph.detectors.base import Detector
from dhgraph.graph.models import Relationship, RelationType
from dhgraph.models.resources import Resource, ResourceKey

DEFAULT_VENDOR_DOMAIN = "deckhouse.io"


def in_domain(group: str, domain: str) -> bool:
    """True if *group* equals *domain* or is a sub-domain of it."""
    return group == domain or group.endswith("." + domain)


class DomainGroupDetector(Detector):
    """Links all resources served from one vendor API domain."""

    name = "domain_group"
    priority = 80

    def __init__(self, domain: str = DEFAULT_VENDOR_DOMAIN) -> None:
        self.domain = domain

    def candidates(self, resource: Resource, catalog: Mapping[ResourceKey, Resource]) -> Iterator[Relationship]:
        if not in_domain(resource.key.group, self.domain):
            return
        for key in catalog:
            if key != resource.key and in_domain(key.group, self.domain):
                yield self.edge(
                    resource,
                    key,
                    RelationType.SAME_VENDOR_DOMAIN,
                    "apiVersion",
                    domain=self.domain,
                    group=key.group,
                )
