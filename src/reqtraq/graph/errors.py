"""Structured defects reported while building and validating the graph.

Every phase (ingestion, linking, attribute and cross-reference checks)
returns a list of TraceError values rather than raising. Rendering to
text happens at the boundary via str(error).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ErrorKind(Enum):
    """Kinds of defect detected in the requirement graph."""

    DUPLICATE_IDENTIFIER = "duplicate_identifier"
    MISSING_PARENT = "missing_parent"
    UNRESOLVED_PARENT = "unresolved_parent"
    SUPERSEDED_PARENT_REFERENCE = "superseded_parent_reference"
    PARENT_LEVEL_VIOLATION = "parent_level_violation"
    UNRESOLVED_CROSS_REFERENCE = "unresolved_cross_reference"
    SUPERSEDED_CROSS_REFERENCE = "superseded_cross_reference"
    SCHEMA_ATTRIBUTE_MISSING = "schema_attribute_missing"
    SCHEMA_ATTRIBUTE_INVALID = "schema_attribute_invalid"
    MALFORMED_SOURCE_PATH = "malformed_source_path"
    MALFORMED_RECORD = "malformed_record"


class GraphPhaseError(RuntimeError):
    """Raised when a graph operation is called in the wrong phase."""


@dataclass(frozen=True)
class TraceError:
    """A single defect found in the requirement graph.

    Attributes:
        kind: What went wrong.
        node_id: ID (or code path) of the node the defect belongs to.
        path: File the defect was found in.
        line: 1-based line number, for defects found in raw text.
        related_id: The other identifier involved (parent, reference).
        detail: Extra context (prior location, expected pattern, ...).
        value: The offending attribute value, for schema defects.
        is_code: True if the offending node is a CODE node.
    """

    kind: ErrorKind
    node_id: str = ""
    path: str = ""
    line: int | None = None
    related_id: str = ""
    detail: str = ""
    value: str = ""
    is_code: bool = False

    @property
    def location(self) -> str:
        """Return file:line location string."""
        if self.path and self.line:
            return f"{self.path}:{self.line}"
        return self.path

    def __str__(self) -> str:
        kind = self.kind
        if kind == ErrorKind.DUPLICATE_IDENTIFIER:
            return (
                f"Requirement {self.node_id} in {self.path} "
                f"already defined in {self.detail}"
            )
        if kind == ErrorKind.MISSING_PARENT:
            return f"Requirement {self.node_id} in file {self.path} has no parents."
        if kind in (
            ErrorKind.UNRESOLVED_PARENT,
            ErrorKind.SUPERSEDED_PARENT_REFERENCE,
            ErrorKind.PARENT_LEVEL_VIOLATION,
        ):
            reason = {
                ErrorKind.UNRESOLVED_PARENT: "does not exist",
                ErrorKind.SUPERSEDED_PARENT_REFERENCE: "is deleted",
                ErrorKind.PARENT_LEVEL_VIOLATION: f"is not above {self.detail}",
            }[kind]
            if self.is_code:
                return f"Invalid reference in file {self.path}: {self.related_id} {reason}."
            return f"Invalid parent of requirement {self.node_id}: {self.related_id} {reason}."
        if kind == ErrorKind.UNRESOLVED_CROSS_REFERENCE:
            return (
                f"Invalid reference to inexistent requirement {self.related_id} "
                f"in {self.location}"
            )
        if kind == ErrorKind.SUPERSEDED_CROSS_REFERENCE:
            return (
                f"Invalid reference to deleted requirement {self.related_id} "
                f"in {self.location}"
            )
        if kind == ErrorKind.SCHEMA_ATTRIBUTE_MISSING:
            return f"Requirement '{self.node_id}' is missing attribute '{self.related_id}'."
        if kind == ErrorKind.SCHEMA_ATTRIBUTE_INVALID:
            return (
                f"Requirement '{self.node_id}' has invalid value '{self.value}' "
                f"in attribute '{self.related_id}'. Expected {self.detail}."
            )
        if kind == ErrorKind.MALFORMED_SOURCE_PATH:
            return f"Malformed code file path {self.path}: not inside {self.detail}"
        return f"Malformed requirement {self.node_id} in {self.location}: {self.detail}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serialisable dict."""
        return {
            "kind": self.kind.value,
            "node_id": self.node_id,
            "path": self.path,
            "line": self.line,
            "related_id": self.related_id,
            "detail": self.detail,
            "value": self.value,
            "message": str(self),
        }
