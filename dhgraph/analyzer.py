"""Relationship graph builder.

Drives every input resource through every registered detector:

    resources -> ResourceCatalog (built once)
              -> for each resource, in input order
                   for each detector, in priority order
                     append emitted relationships
              -> service grouping -> frozen RelationshipGraph

A detector that raises is logged and skipped for that resource; it never
aborts the run. Only an unusable input list raises (AnalysisError), in which
case no partial graph is returned.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Iterable

import structlog

from dhgraph.detectors import Detector, DetectorRegistry, default_detectors
from dhgraph.errors import AnalysisCancelledError, AnalysisError
from dhgraph.graph.catalog import ResourceCatalog
from dhgraph.graph.dependency_graph import RelationshipGraph
from dhgraph.graph.models import Relationship
from dhgraph.grouping import group_resources
from dhgraph.models.config import AnalyzerConfig, DHGraphConfig
from dhgraph.models.resources import Resource
from dhgraph.observability.metrics import (
    analysis_duration_seconds,
    detector_errors_total,
    relationships_detected_total,
    resources_analyzed_total,
)

_log = structlog.get_logger(component="analyzer")


class Analyzer:
    """Builds a RelationshipGraph from processed resources.

    The analyzer holds no per-run state, so ``analyze`` may be called
    repeatedly; identical input yields the same set of relationships.
    """

    def __init__(self, detectors: Iterable[Detector] = (), group_services: bool = True) -> None:
        self._registry = DetectorRegistry(detectors)
        self._group_services = group_services

    def register_detector(self, detector: Detector) -> bool:
        """Add *detector* to the active set. Re-registering a name is a no-op."""
        return self._registry.register(detector)

    @property
    def detectors(self) -> list[Detector]:
        """Registered detectors in execution (descending priority) order."""
        return list(self._registry)

    def analyze(
        self,
        resources: Iterable[Resource],
        cancel: threading.Event | None = None,
    ) -> RelationshipGraph:
        """Detect relationships among *resources* and return the frozen graph.

        Raises:
            AnalysisError: *resources* is not iterable or holds a non-Resource.
            AnalysisCancelledError: *cancel* was set before the run finished.
        """
        t_start = time.monotonic()
        items = _materialize(resources)

        catalog = ResourceCatalog(items)
        graph = RelationshipGraph()
        for resource in items:
            graph.add_resource(resource)

        _log.info(
            "analysis_started",
            resources=len(items),
            detectors=self._registry.names,
        )

        for index, resource in enumerate(items):
            if cancel is not None and cancel.is_set():
                _log.info("analysis_cancelled", processed=index, total=len(items))
                raise AnalysisCancelledError(index, len(items))
            for detector in self._registry:
                for rel in self._run_detector(detector, resource, catalog):
                    graph.add_relationship(rel)
            resources_analyzed_total.inc()

        if self._group_services:
            group_resources(graph)
        graph.freeze()

        duration = time.monotonic() - t_start
        analysis_duration_seconds.observe(duration)
        _log.info(
            "analysis_complete",
            resources=len(graph),
            relationships=len(graph.relationships),
            groups=len(graph.groups),
            duration_ms=round(duration * 1000.0, 3),
        )
        return graph

    def _run_detector(self, detector: Detector, resource: Resource, catalog: ResourceCatalog) -> list[Relationship]:
        try:
            relationships = list(detector.detect(resource, catalog))
            for rel in relationships:
                relationships_detected_total.labels(detector=detector.name, type=str(rel.type)).inc()
        except Exception:
            detector_errors_total.labels(detector=detector.name).inc()
            _log.warning(
                "detector_failed",
                detector=detector.name,
                resource=str(resource.key),
                source_path=resource.source_path,
                exc_info=True,
            )
            return []
        return relationships


def _materialize(resources: Iterable[Resource]) -> list[Resource]:
    try:
        items = list(resources)
    except TypeError as exc:
        raise AnalysisError(f"resource list is not iterable: {exc}") from exc
    for index, item in enumerate(items):
        if not isinstance(item, Resource):
            raise AnalysisError(f"item {index} is {type(item).__name__}, expected Resource")
    return items


def build_analyzer(config: DHGraphConfig | AnalyzerConfig | None = None) -> Analyzer:
    """Return an analyzer with the default detectors for *config* registered."""
    if isinstance(config, DHGraphConfig):
        config = config.analyzer
    return Analyzer(default_detectors(config))
