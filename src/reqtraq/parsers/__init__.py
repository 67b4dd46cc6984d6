"""Parsers - Record suppliers for the requirement graph.

The graph never reads files itself. Parsers turn specification documents
and source files into plain records that the graph ingests.

Exports:
- REQ_ID_PATTERN: Shape of a requirement identifier
- RequirementRecord: One requirement block read from a document
- CodeRecord: Requirement references found in one source file
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

# REQ-<release>-<project>-<type>-<number>, e.g. REQ-0-DDLN-SWH-001
REQ_ID_PATTERN = re.compile(r"REQ-\d+-[A-Za-z0-9_]+-(?P<type>[A-Z]{3})-\d+")

# A parent declaration line: **Parents**: REQ-...
PARENTS_LINE_PATTERN = re.compile(r"\bParents(?:\*\*)?:\s*REQ-")

# The header line declaring a deleted requirement: ## REQ-...: DELETED ...
DELETED_LINE_PATTERN = re.compile(r"^#+\s*REQ-\S+:\s*DELETED")


@dataclass
class RequirementRecord:
    """A raw requirement as read from a specification document.

    Attributes:
        id: Requirement ID (e.g., "REQ-0-DDLN-SWH-001").
        parents: Declared parent IDs, in declaration order.
        attributes: Upper-case attribute name -> value. The TEXT attribute
            holds the title line followed by the body.
        position: Ordinal of the record within its file.
        path: Document path relative to the repository root.
        line: 1-based line of the record header.
    """

    id: str
    parents: list[str] = field(default_factory=list)
    attributes: dict[str, str] = field(default_factory=dict)
    position: int = 0
    path: str = ""
    line: int | None = None

    @property
    def req_type(self) -> str:
        """Type tag embedded in the ID ("SYS", "SWH", ...), or "" if malformed."""
        match = REQ_ID_PATTERN.fullmatch(self.id)
        return match.group("type") if match else ""


@dataclass
class CodeRecord:
    """Requirement references extracted from one source file.

    Attributes:
        path: File path relative to the repository root.
        file_hash: Git blob hash of the file content.
        req_ids: Referenced requirement IDs, in file order.
    """

    path: str
    file_hash: str
    req_ids: list[str] = field(default_factory=list)
