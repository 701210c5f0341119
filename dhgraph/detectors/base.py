"""Detector base class and the priority-ordered registry.

A detector infers relationships from one resource against the catalog of
every resource under analysis. Concrete detectors only describe candidate
edges; ``Detector.detect`` is the single place where candidates whose target
is missing from the catalog, or that point back at the source, are dropped.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator, Mapping
from typing import ClassVar

import structlog

from dhgraph.graph.models import Relationship, RelationType
from dhgraph.models.resources import Resource, ResourceKey

_log = structlog.get_logger(component="detectors.base")


class Detector(ABC):
    """One relationship-inference strategy.

    Subclasses set ``name`` and ``priority`` and implement ``candidates``.
    Implementations must be pure functions of ``(resource, catalog)`` and
    must never raise on malformed manifests: a field that is absent or of the
    wrong shape is simply not a reference.
    """

    name: ClassVar[str]
    priority: ClassVar[int]  # higher runs earlier; affects ordering only

    def detect(self, resource: Resource, catalog: Mapping[ResourceKey, Resource]) -> list[Relationship]:
        """Return every candidate edge whose target resolves in *catalog*."""
        return [
            rel
            for rel in self.candidates(resource, catalog)
            if rel.target in catalog and rel.target != rel.source
        ]

    @abstractmethod
    def candidates(self, resource: Resource, catalog: Mapping[ResourceKey, Resource]) -> Iterator[Relationship]:
        """Yield candidate edges; existence filtering happens in ``detect``."""

    @staticmethod
    def edge(
        resource: Resource,
        target: ResourceKey,
        rel_type: RelationType,
        source_field: str,
        **details: str,
    ) -> Relationship:
        return Relationship(
            source=resource.key,
            target=target,
            type=rel_type,
            source_field=source_field,
            details=details,
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, priority={self.priority})"


class DetectorRegistry:
    """Active detector set ordered by descending priority.

    Registration is idempotent on ``name``: registering a second detector
    with a name already present is a no-op. Detectors of equal priority keep
    their registration order.
    """

    def __init__(self, detectors: Iterable[Detector] = ()) -> None:
        self._detectors: list[Detector] = []
        for detector in detectors:
            self.register(detector)

    def register(self, detector: Detector) -> bool:
        """Add *detector*; return False if its name was already registered."""
        if detector.name in self.names:
            _log.debug("detector_already_registered", detector=detector.name)
            return False
        self._detectors.append(detector)
        # list.sort is stable, so equal priorities stay in registration order
        self._detectors.sort(key=lambda d: d.priority, reverse=True)
        _log.debug("detector_registered", detector=detector.name, priority=detector.priority)
        return True

    @property
    def names(self) -> list[str]:
        return [d.name for d in self._detectors]

    def get(self, name: str) -> Detector | None:
        for detector in self._detectors:
            if detector.name == name:
                return detector
        return None

    def __iter__(self) -> Iterator[Detector]:
        return iter(list(self._detectors))

    def __len__(self) -> int:
        return len(self._detectors)

    def __contains__(self, name: object) -> bool:
        return name in self.names
