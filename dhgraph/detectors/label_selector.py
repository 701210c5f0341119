"""Label selector detector.

Links resources that select a *set* of others by label equality:

- Service ``spec.selector`` -> Pods and pod-template owning workloads in the
  same namespace (``label_selector``);
- ServiceMonitor ``spec.selector.matchLabels`` -> Services in the same
  namespace (``service_monitor``).

An empty or absent selector selects nothing; it is never "match all".
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping

from dhgraph.detectors.base import Detector
from dhgraph.detectors.kinds import SELECTABLE_KINDS
from dhgraph.fields import nested_str_map
from dhgraph.graph.models import Relationship, RelationType
from dhgraph.models.resources import Resource, ResourceKey


def selector_matches(selector: Mapping[str, str], labels: Mapping[str, str]) -> bool:
    """Equality-based selector match: every selector pair must be present in *labels*.

    An empty selector matches nothing.
    """
    if not selector:
        return False
    return all(labels.get(k) == v for k, v in selector.items())


def format_selector(selector: Mapping[str, str]) -> str:
    """Render a selector as ``k1=v1,k2=v2`` with keys sorted."""
    return ",".join(f"{k}={selector[k]}" for k in sorted(selector))


def pod_labels(resource: Resource) -> dict[str, str]:
    """Labels a Service selector is compared against for *resource*."""
    if resource.kind == "Pod":
        return resource.labels
    return nested_str_map(resource.obj, "spec", "template", "metadata", "labels") or {}


class LabelSelectorDetector(Detector):
    """Detects Service -> workload and ServiceMonitor -> Service selection."""

    name = "label_selector"
    priority = 100

    def candidates(self, resource: Resource, catalog: Mapping[ResourceKey, Resource]) -> Iterator[Relationship]:
        if resource.kind == "Service":
            yield from self._service_to_workloads(resource, catalog)
        elif resource.kind == "ServiceMonitor":
            yield from self._service_monitor_to_services(resource, catalog)

    def _service_to_workloads(
        self, resource: Resource, catalog: Mapping[ResourceKey, Resource]
    ) -> Iterator[Relationship]:
        selector = nested_str_map(resource.obj, "spec", "selector")
        if not selector:
            return
        rendered = format_selector(selector)
        for key, candidate in catalog.items():
            if key.namespace != resource.namespace or key.kind not in SELECTABLE_KINDS:
                continue
            if selector_matches(selector, pod_labels(candidate)):
                yield self.edge(resource, key, RelationType.LABEL_SELECTOR, "spec.selector", selector=rendered)

    def _service_monitor_to_services(
        self, resource: Resource, catalog: Mapping[ResourceKey, Resource]
    ) -> Iterator[Relationship]:
        match_labels = nested_str_map(resource.obj, "spec", "selector", "matchLabels")
        if not match_labels:
            return
        rendered = format_selector(match_labels)
        for key, candidate in catalog.items():
            if key.kind != "Service" or key.namespace != resource.namespace:
                continue
            if selector_matches(match_labels, candidate.labels):
                yield self.edge(
                    resource,
                    key,
                    RelationType.SERVICE_MONITOR,
                    "spec.selector.matchLabels",
                    selector=rendered,
                )
