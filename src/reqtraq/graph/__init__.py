"""Graph module - Core requirement graph data structures.

Exports:
- RequirementLevel: The four levels of the graph
- RequirementStatus: Completion status of a node
- SourceLocation: Portable file location reference
- ReqNode: A requirement or code file node
- ReqGraph: The graph container (ingest, resolve, query)
- GraphPhase: Lifecycle marker of a ReqGraph
- ErrorKind, TraceError: Structured defects
- GraphPhaseError: Raised on out-of-order graph operations
- FilterType, build_filter, matches: Node filtering

Note: use reqtraq.graph.factory.build_graph() to build a graph from a repository.
"""

from reqtraq.graph.builder import GraphPhase, ReqGraph
from reqtraq.graph.errors import ErrorKind, GraphPhaseError, TraceError
from reqtraq.graph.node import (
    REQ_TYPE_TO_LEVEL,
    ReqNode,
    RequirementLevel,
    RequirementStatus,
    SourceLocation,
)
from reqtraq.graph.query import FilterType, build_filter, matches

__all__ = [
    "REQ_TYPE_TO_LEVEL",
    "RequirementLevel",
    "RequirementStatus",
    "SourceLocation",
    "ReqNode",
    "ReqGraph",
    "GraphPhase",
    "ErrorKind",
    "TraceError",
    "GraphPhaseError",
    "FilterType",
    "build_filter",
    "matches",
]
