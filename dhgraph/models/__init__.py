"""Core data structures for dhgraph."""

from dhgraph.models.config import AnalyzerConfig, DHGraphConfig, LogConfig
from dhgraph.models.resources import Resource, ResourceKey, Source

__all__ = [
    "AnalyzerConfig",
    "DHGraphConfig",
    "LogConfig",
    "Resource",
    "ResourceKey",
    "Source",
]
