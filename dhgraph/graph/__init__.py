"""Resource relationship graph.

Provides the read-only catalog handed to detectors and the graph built from
the relationships they infer (label selectors, name references, volume and
environment references, annotations, vendor API groups).
"""

from dhgraph.graph.catalog import ResourceCatalog
from dhgraph.graph.dependency_graph import RelationshipGraph
from dhgraph.graph.models import Relationship, RelationType, ResourceGroup

__all__ = [
    "RelationType",
    "Relationship",
    "RelationshipGraph",
    "ResourceCatalog",
    "ResourceGroup",
]
