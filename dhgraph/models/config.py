"""Configuration data structures."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class AnalyzerConfig:
    """Relationship analyzer configuration."""

    domain_group_enabled: bool = False
    vendor_domain: str = "deckhouse.io"
    disabled_detectors: frozenset[str] = frozenset()


@dataclass
class LogConfig:
    """Logging configuration."""

    level: str = "info"


@dataclass
class DHGraphConfig:
    """Top-level dhgraph configuration."""

    analyzer: AnalyzerConfig = field(default_factory=AnalyzerConfig)
    log: LogConfig = field(default_factory=LogConfig)
