"""Annotation detector.

Applies heuristic rules to ``metadata.annotations`` of any resource kind.
Each annotation key is claimed by at most one rule family; the first family
whose matcher accepts the key handles it. Empty or non-string values are
treated as absent.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass

from dhgraph.detectors.base import Detector
from dhgraph.detectors.kinds import CLUSTER_ISSUER, ISSUER
from dhgraph.graph.models import Relationship, RelationType
from dhgraph.models.resources import Resource, ResourceKey

CLUSTER_ISSUER_ANNOTATION = "cert-manager.io/cluster-issuer"
ISSUER_ANNOTATION = "cert-manager.io/issuer"
DEPENDS_ON_ANNOTATION = "dhg.deckhouse.io/depends-on"
NGINX_PREFIX = "nginx.ingress.kubernetes.io/"
DECKHOUSE_PREFIX = "deckhouse.io/"
PROMETHEUS_PREFIX = "prometheus.io/"

_Handler = Callable[[Resource, str, str, Mapping[ResourceKey, Resource]], Iterator[Relationship]]


@dataclass(frozen=True)
class _RuleFamily:
    name: str
    matches: Callable[[str], bool]
    handler: _Handler


def _field(key: str) -> str:
    return f"metadata.annotations[{key}]"


def _cluster_issuer(
    resource: Resource, key: str, value: str, catalog: Mapping[ResourceKey, Resource]
) -> Iterator[Relationship]:
    yield Detector.edge(
        resource,
        CLUSTER_ISSUER.key("", value),
        RelationType.ANNOTATION,
        _field(key),
        annotation=key,
        cluster_issuer=value,
    )


def _issuer(
    resource: Resource, key: str, value: str, catalog: Mapping[ResourceKey, Resource]
) -> Iterator[Relationship]:
    yield Detector.edge(
        resource,
        ISSUER.key(resource.namespace, value),
        RelationType.ANNOTATION,
        _field(key),
        annotation=key,
        issuer=value,
    )


def _depends_on(
    resource: Resource, key: str, value: str, catalog: Mapping[ResourceKey, Resource]
) -> Iterator[Relationship]:
    # Every same-named resource in this namespace or cluster scope is a target
    for target in catalog:
        if target.name == value and target.namespace in (resource.namespace, ""):
            yield Detector.edge(
                resource,
                target,
                RelationType.CUSTOM_DEPENDENCY,
                _field(key),
                depends_on=value,
            )


def _nginx_controller(
    resource: Resource, key: str, value: str, catalog: Mapping[ResourceKey, Resource]
) -> Iterator[Relationship]:
    # Matched on kind alone: any IngressNginxController anywhere will do
    target = next((k for k in catalog if k.kind == "IngressNginxController"), None)
    if target is not None:
        yield Detector.edge(
            resource,
            target,
            RelationType.DECKHOUSE,
            _field(key),
            annotation=key,
            annotation_value=value,
        )


def _is_dex_annotation(key: str) -> bool:
    return key.startswith(DECKHOUSE_PREFIX) and ("auth" in key or "dex" in key)


def _dex_authenticator(
    resource: Resource, key: str, value: str, catalog: Mapping[ResourceKey, Resource]
) -> Iterator[Relationship]:
    target = next(
        (k for k in catalog if k.kind == "DexAuthenticator" and k.namespace == resource.namespace),
        None,
    )
    if target is not None:
        yield Detector.edge(
            resource,
            target,
            RelationType.DECKHOUSE,
            _field(key),
            annotation=key,
            annotation_value=value,
        )


def _no_edges(
    resource: Resource, key: str, value: str, catalog: Mapping[ResourceKey, Resource]
) -> Iterator[Relationship]:
    # Scrape hints are recognized so they are not claimed by another family
    return iter(())


RULE_FAMILIES: tuple[_RuleFamily, ...] = (
    _RuleFamily("cert_manager_cluster_issuer", lambda k: k == CLUSTER_ISSUER_ANNOTATION, _cluster_issuer),
    _RuleFamily("cert_manager_issuer", lambda k: k == ISSUER_ANNOTATION, _issuer),
    _RuleFamily("custom_dependency", lambda k: k == DEPENDS_ON_ANNOTATION, _depends_on),
    _RuleFamily("nginx_ingress", lambda k: k.startswith(NGINX_PREFIX), _nginx_controller),
    _RuleFamily("deckhouse_auth", _is_dex_annotation, _dex_authenticator),
    _RuleFamily("prometheus", lambda k: k.startswith(PROMETHEUS_PREFIX), _no_edges),
)


def rule_family_for(key: str) -> str | None:
    """Name of the rule family that claims annotation *key*, if any."""
    for family in RULE_FAMILIES:
        if family.matches(key):
            return family.name
    return None


class AnnotationDetector(Detector):
    """Detects cert-manager, ingress-nginx, Dex and explicit dependency annotations."""

    name = "annotation"
    priority = 70

    def candidates(self, resource: Resource, catalog: Mapping[ResourceKey, Resource]) -> Iterator[Relationship]:
        for key, value in resource.annotations.items():
            if not isinstance(key, str) or not isinstance(value, str) or not value:
                continue
            for family in RULE_FAMILIES:
                if family.matches(key):
                    yield from family.handler(resource, key, value, catalog)
                    break
