"""Tests for DetectorRegistry, Analyzer and service grouping."""

from __future__ import annotations

import threading
from collections.abc import Iterator, Mapping

import pytest

from dhgraph.analyzer import Analyzer, build_analyzer
from dhgraph.detectors import (
    AnnotationDetector,
    Detector,
    DetectorRegistry,
    DomainGroupDetector,
    LabelSelectorDetector,
    NameReferenceDetector,
    VolumeMountDetector,
    default_detectors,
)
from dhgraph.errors import AnalysisCancelledError, AnalysisError, GraphFrozenError
from dhgraph.graph.models import Relationship, RelationType
from dhgraph.models.config import AnalyzerConfig, DHGraphConfig
from dhgraph.models.resources import Resource, ResourceKey
from tests.factories import make_resource, make_workload

# ---------------------------------------------------------------------------
# Test detectors
# ---------------------------------------------------------------------------


class _LinkAllDetector(Detector):
    """Links every resource to every other resource of the same kind."""

    name = "link_all"
    priority = 10

    def candidates(self, resource: Resource, catalog: Mapping[ResourceKey, Resource]) -> Iterator[Relationship]:
        for key in catalog:
            if key.kind == resource.kind:
                yield self.edge(resource, key, RelationType.CUSTOM_DEPENDENCY, "test")


class _DanglingDetector(Detector):
    """Proposes targets that do not exist and self-loops; all must be filtered."""

    name = "dangling"
    priority = 5

    def candidates(self, resource: Resource, catalog: Mapping[ResourceKey, Resource]) -> Iterator[Relationship]:
        yield self.edge(resource, ResourceKey("", "v1", "Secret", "nowhere", "ghost"), RelationType.ANNOTATION, "x")
        yield self.edge(resource, resource.key, RelationType.ANNOTATION, "x")


class _ExplodingDetector(Detector):
    name = "exploding"
    priority = 50

    def candidates(self, resource: Resource, catalog: Mapping[ResourceKey, Resource]) -> Iterator[Relationship]:
        raise RuntimeError("boom")


class _StringTypedDetector(Detector):
    """Host detector that types its edges with plain strings."""

    name = "string_typed"
    priority = 40

    def candidates(self, resource: Resource, catalog: Mapping[ResourceKey, Resource]) -> Iterator[Relationship]:
        for key in catalog:
            yield Relationship(resource.key, key, "host_defined", "spec")  # type: ignore[arg-type]


class _LazyFailingDetector(Detector):
    """Returns a generator that fails part-way through iteration."""

    name = "lazy_failing"
    priority = 45

    def detect(self, resource: Resource, catalog: Mapping[ResourceKey, Resource]) -> list[Relationship]:
        return self.candidates(resource, catalog)  # type: ignore[return-value]

    def candidates(self, resource: Resource, catalog: Mapping[ResourceKey, Resource]) -> Iterator[Relationship]:
        for key in catalog:
            if key != resource.key:
                yield self.edge(resource, key, RelationType.ANNOTATION, "x")
        raise RuntimeError("boom")


def _named(name: str, priority: int) -> Detector:
    cls = type(f"D_{name}", (_LinkAllDetector,), {"name": name, "priority": priority})
    return cls()


# =====================================================================
# Registry
# =====================================================================


class TestDetectorRegistry:
    def test_sorted_by_descending_priority(self) -> None:
        registry = DetectorRegistry([AnnotationDetector(), LabelSelectorDetector(), NameReferenceDetector()])
        assert registry.names == ["label_selector", "name_reference", "annotation"]

    def test_equal_priorities_keep_registration_order(self) -> None:
        registry = DetectorRegistry([_named("b", 1), _named("a", 1), _named("c", 2)])
        assert registry.names == ["c", "b", "a"]

    def test_idempotent_registration(self) -> None:
        registry = DetectorRegistry()
        assert registry.register(VolumeMountDetector()) is True
        assert registry.register(VolumeMountDetector()) is False
        assert len(registry) == 1
        assert "volume_mount" in registry
        assert isinstance(registry.get("volume_mount"), VolumeMountDetector)
        assert registry.get("missing") is None

    def test_default_detectors(self) -> None:
        names = [d.name for d in default_detectors()]
        assert names == ["label_selector", "name_reference", "volume_mount", "annotation"]

    def test_default_detectors_with_domain_group(self) -> None:
        detectors = default_detectors(AnalyzerConfig(domain_group_enabled=True, vendor_domain="example.com"))
        domain = [d for d in detectors if isinstance(d, DomainGroupDetector)]
        assert len(domain) == 1
        assert domain[0].domain == "example.com"

    def test_disabled_detectors(self) -> None:
        detectors = default_detectors(AnalyzerConfig(disabled_detectors=frozenset({"annotation", "volume_mount"})))
        assert [d.name for d in detectors] == ["label_selector", "name_reference"]


# =====================================================================
# Analyzer
# =====================================================================


class TestAnalyzer:
    def test_execution_order_follows_priority(self) -> None:
        analyzer = Analyzer([AnnotationDetector(), VolumeMountDetector(), LabelSelectorDetector()])
        analyzer.register_detector(NameReferenceDetector())
        analyzer.register_detector(DomainGroupDetector())
        assert [d.name for d in analyzer.detectors] == [
            "label_selector",
            "name_reference",
            "volume_mount",
            "domain_group",
            "annotation",
        ]

    def test_empty_input(self) -> None:
        graph = Analyzer(default_detectors()).analyze([])
        assert len(graph) == 0
        assert graph.relationships == []
        assert graph.frozen

    def test_no_detectors(self) -> None:
        res = [make_resource("ConfigMap", "a"), make_resource("ConfigMap", "b")]
        graph = Analyzer().analyze(res)
        assert len(graph) == 2
        assert graph.relationships == []

    def test_relationships_follow_input_then_priority_order(self) -> None:
        svc = make_resource("Service", "web", spec={"selector": {"app": "web"}})
        dep = make_workload(
            "Deployment",
            "web",
            template_labels={"app": "web"},
            pod_spec={"serviceAccountName": "web", "containers": []},
            annotations={"dhg.deckhouse.io/depends-on": "web"},
        )
        sa = make_resource("ServiceAccount", "web")
        graph = build_analyzer().analyze([svc, dep, sa])

        assert [(r.source.kind, r.type) for r in graph.relationships] == [
            ("Service", RelationType.LABEL_SELECTOR),
            ("Deployment", RelationType.SERVICE_ACCOUNT),
            ("Deployment", RelationType.CUSTOM_DEPENDENCY),
            ("Deployment", RelationType.CUSTOM_DEPENDENCY),
        ]

    def test_filters_dangling_and_self_edges(self) -> None:
        graph = Analyzer([_DanglingDetector()]).analyze([make_resource("ConfigMap", "a")])
        assert graph.relationships == []

    def test_failing_detector_does_not_abort(self) -> None:
        a = make_resource("ConfigMap", "a")
        b = make_resource("ConfigMap", "b")
        graph = Analyzer([_ExplodingDetector(), _LinkAllDetector()]).analyze([a, b])
        assert {(r.source, r.target) for r in graph.relationships} == {(a.key, b.key), (b.key, a.key)}

    def test_plain_string_edge_type_is_counted(self) -> None:
        a = make_resource("ConfigMap", "a")
        b = make_resource("ConfigMap", "b")
        graph = Analyzer([_StringTypedDetector(), _LinkAllDetector()]).analyze([a, b])
        assert [r.type for r in graph.relationships].count("host_defined") == 2
        assert len(graph.relationships_of_type(RelationType.CUSTOM_DEPENDENCY)) == 2

    def test_detector_failing_mid_iteration_is_isolated(self) -> None:
        a = make_resource("ConfigMap", "a")
        b = make_resource("ConfigMap", "b")
        graph = Analyzer([_LazyFailingDetector(), _LinkAllDetector()]).analyze([a, b])
        assert graph.relationships_of_type(RelationType.ANNOTATION) == []
        assert len(graph.relationships_of_type(RelationType.CUSTOM_DEPENDENCY)) == 2

    def test_no_cross_detector_dedup(self) -> None:
        a = make_resource("ConfigMap", "a")
        b = make_resource("ConfigMap", "b")
        graph = Analyzer([_LinkAllDetector(), _named("link_all_again", 1)]).analyze([a, b])
        assert len(graph.relationships) == 4

    def test_non_iterable_input(self) -> None:
        with pytest.raises(AnalysisError, match="not iterable"):
            Analyzer().analyze(42)  # type: ignore[arg-type]

    def test_non_resource_item(self) -> None:
        with pytest.raises(AnalysisError, match="item 1 is dict"):
            Analyzer().analyze([make_resource("ConfigMap", "a"), {"kind": "ConfigMap"}])  # type: ignore[list-item]

    def test_cancellation(self) -> None:
        cancel = threading.Event()
        cancel.set()
        with pytest.raises(AnalysisCancelledError) as excinfo:
            Analyzer(default_detectors()).analyze([make_resource("ConfigMap", "a")], cancel=cancel)
        assert excinfo.value.processed == 0
        assert excinfo.value.total == 1

    def test_generator_input(self) -> None:
        graph = Analyzer().analyze(make_resource("ConfigMap", n) for n in ("a", "b"))
        assert len(graph) == 2

    def test_graph_frozen_after_analysis(self) -> None:
        graph = Analyzer().analyze([make_resource("ConfigMap", "a")])
        with pytest.raises(GraphFrozenError):
            graph.add_resource(make_resource("ConfigMap", "b"))

    def test_build_analyzer_accepts_full_config(self) -> None:
        config = DHGraphConfig(analyzer=AnalyzerConfig(domain_group_enabled=True))
        assert "domain_group" in [d.name for d in build_analyzer(config).detectors]

    def test_grouping_can_be_disabled(self) -> None:
        graph = Analyzer(group_services=False).analyze([make_resource("ConfigMap", "a")])
        assert graph.groups == []


# =====================================================================
# Grouping
# =====================================================================


class TestServiceGrouping:
    def test_upstream_service_name_wins(self) -> None:
        dep = make_workload("Deployment", "web-v2", template_labels={"app": "web"}, service_name="web")
        graph = build_analyzer().analyze([dep])
        assert graph.service_of(dep.key) == "web"
        assert [g.name for g in graph.groups] == ["web"]

    def test_related_resources_join_group(self) -> None:
        dep = make_workload(
            "Deployment",
            "api-server",
            template_labels={"app": "api"},
            pod_spec={"containers": [{"name": "api", "envFrom": [{"configMapRef": {"name": "api-env"}}]}]},
            service_name="api",
        )
        svc = make_resource("Service", "api-svc", spec={"selector": {"app": "api"}})
        cm = make_resource("ConfigMap", "api-env")
        graph = build_analyzer().analyze([svc, cm, dep])

        # svc -> dep is outgoing, cm <- dep is incoming
        assert graph.service_of(svc.key) == "api"
        assert graph.service_of(cm.key) == "api"
        group = graph.group("api")
        assert group is not None
        assert set(group.keys) == {dep.key, svc.key, cm.key}

    def test_standalone_groups_named_after_resource(self) -> None:
        a = make_resource("ConfigMap", "settings")
        b = make_resource("Secret", "settings")
        c = make_resource("Secret", "other")
        graph = build_analyzer().analyze([a, b, c])
        assert [g.name for g in graph.groups] == ["settings", "other"]
        assert len(graph.group("settings").resources) == 2  # type: ignore[union-attr]

    def test_every_resource_grouped_once(self) -> None:
        res = [
            make_resource("Service", "web", spec={"selector": {"app": "web"}}),
            make_workload("Deployment", "web", template_labels={"app": "web"}),
            make_resource("ConfigMap", "unrelated"),
        ]
        graph = build_analyzer().analyze(res)
        grouped = [k for g in graph.groups for k in g.keys]
        assert sorted(grouped) == sorted(r.key for r in res)

    def test_groups_cannot_be_changed_after_analysis(self) -> None:
        a = make_resource("ConfigMap", "a")
        graph = build_analyzer().analyze([a])
        group = graph.group("a")
        assert group is not None
        assert group.resources == (a,)
        with pytest.raises(AttributeError):
            group.resources.append(make_resource("ConfigMap", "b"))  # type: ignore[attr-defined]
        assert graph.group("a").keys == [a.key]  # type: ignore[union-attr]
