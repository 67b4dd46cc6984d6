"""
reqtraq - Requirement traceability graph validation

reqtraq links system, high-level and low-level requirements from
specification documents with the source files that implement them,
computes how complete each requirement is, and reports every structural
defect: missing or deleted parents, dangling requirements, duplicate IDs
and incomplete metadata.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("reqtraq")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"  # Not installed
__license__ = "MIT"

from reqtraq.graph import (
    ErrorKind,
    GraphPhaseError,
    ReqGraph,
    ReqNode,
    RequirementLevel,
    RequirementStatus,
    TraceError,
)
from reqtraq.parsers import CodeRecord, RequirementRecord

__all__ = [
    "__version__",
    "CodeRecord",
    "ErrorKind",
    "GraphPhaseError",
    "ReqGraph",
    "ReqNode",
    "RequirementLevel",
    "RequirementRecord",
    "RequirementStatus",
    "TraceError",
]
