"""Prometheus metrics for the relationship engine.

All collectors register on the default registry at import time; hosts that
expose ``/metrics`` pick them up without extra wiring.
"""

from __future__ import annotations

from prometheus_client import Counter, Histogram

relationships_detected_total = Counter(
    "dhgraph_relationships_detected_total",
    "Relationships emitted by detectors",
    ["detector", "type"],
)

detector_errors_total = Counter(
    "dhgraph_detector_errors_total",
    "Detector invocations that raised and were skipped",
    ["detector"],
)

resources_analyzed_total = Counter(
    "dhgraph_resources_analyzed_total",
    "Resources driven through the detector set",
)

analysis_duration_seconds = Histogram(
    "dhgraph_analysis_duration_seconds",
    "Wall time of one analyze() call",
    buckets=(0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0),
)
