"""dhgraph: relationship detection and dependency graphs for Kubernetes manifests."""

from dhgraph.analyzer import Analyzer, build_analyzer
from dhgraph.errors import AnalysisCancelledError, AnalysisError, DHGraphError, GraphFrozenError
from dhgraph.graph import Relationship, RelationshipGraph, RelationType, ResourceCatalog, ResourceGroup
from dhgraph.models.resources import Resource, ResourceKey, Source

__version__ = "0.1.0"

__all__ = [
    "AnalysisCancelledError",
    "AnalysisError",
    "Analyzer",
    "DHGraphError",
    "GraphFrozenError",
    "RelationType",
    "Relationship",
    "RelationshipGraph",
    "Resource",
    "ResourceCatalog",
    "ResourceGroup",
    "ResourceKey",
    "Source",
    "build_analyzer",
]
