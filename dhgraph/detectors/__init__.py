"""Relationship detectors.

Submodules:
    base            -- Detector ABC and the priority-ordered DetectorRegistry.
    label_selector  -- Service/ServiceMonitor selection by labels (priority 100).
    name_reference  -- Direct by-name references (priority 90).
    volume_mount    -- Volume, envFrom and valueFrom references (priority 80).
    domain_group    -- All-to-all links inside a vendor API domain (priority 80, opt-in).
    annotation      -- cert-manager, ingress-nginx, Dex and depends-on annotations (priority 70).
"""

from __future__ import annotations

from dhgraph.detectors.annotation import AnnotationDetector
from dhgraph.detectors.base import Detector, DetectorRegistry
from dhgraph.detectors.domain_group import DomainGroupDetector
from dhgraph.detectors.label_selector import LabelSelectorDetector
from dhgraph.detectors.name_reference import NameReferenceDetector
from dhgraph.detectors.volume_mount import VolumeMountDetector
from dhgraph.models.config import AnalyzerConfig


def default_detectors(config: AnalyzerConfig | None = None) -> list[Detector]:
    """Instantiate the detector set selected by *config*."""
    config = config or AnalyzerConfig()
    detectors: list[Detector] = [
        LabelSelectorDetector(),
        NameReferenceDetector(),
        VolumeMountDetector(),
        AnnotationDetector(),
    ]
    if config.domain_group_enabled:
        detectors.append(DomainGroupDetector(config.vendor_domain))
    return [d for d in detectors if d.name not in config.disabled_detectors]


__all__ = [
    "AnnotationDetector",
    "Detector",
    "DetectorRegistry",
    "DomainGroupDetector",
    "LabelSelectorDetector",
    "NameReferenceDetector",
    "VolumeMountDetector",
    "default_detectors",
]
