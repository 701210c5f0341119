"""Exception hierarchy for dhgraph."""

from __future__ import annotations


class DHGraphError(Exception):
    """Base class for every error raised by dhgraph."""


class AnalysisError(DHGraphError):
    """Raised when the resource list handed to the analyzer cannot be processed.

    The run is aborted and no partial graph is returned.
    """


class AnalysisCancelledError(AnalysisError):
    """Raised when an analysis run is abandoned through its cancel event."""

    def __init__(self, processed: int, total: int) -> None:
        super().__init__(f"analysis cancelled after {processed} of {total} resources")
        self.processed = processed
        self.total = total


class GraphFrozenError(DHGraphError):
    """Raised on any attempt to modify a graph after analysis completed."""
