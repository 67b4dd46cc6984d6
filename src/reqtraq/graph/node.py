"""ReqNode - Node representation for the requirement traceability graph.

This module provides the core data structures of the graph:
- RequirementLevel: The four levels of the graph (system, high, low, code)
- RequirementStatus: Completion status computed by status propagation
- SourceLocation: Portable file location reference
- ReqNode: A requirement or code file with its resolved links
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from pathlib import Path
from typing import Iterator


class RequirementLevel(IntEnum):
    """Levels of the requirement graph, highest first.

    A parent always sits at a strictly lower value than its children,
    so comparing levels orders them from SYSTEM down to CODE.
    """

    SYSTEM = 0
    HIGH = 1
    LOW = 2
    CODE = 3


# Maps the requirement type embedded in an ID (REQ-0-DDLN-SWH-001) to its level
REQ_TYPE_TO_LEVEL: dict[str, RequirementLevel] = {
    "SYS": RequirementLevel.SYSTEM,
    "SWH": RequirementLevel.HIGH,
    "HWH": RequirementLevel.HIGH,
    "SWL": RequirementLevel.LOW,
    "HWL": RequirementLevel.LOW,
}


def level_for_type(req_type: str) -> RequirementLevel:
    """Return the level for a requirement type tag.

    Raises:
        ValueError: If the type tag is not in REQ_TYPE_TO_LEVEL.
    """
    try:
        return REQ_TYPE_TO_LEVEL[req_type]
    except KeyError:
        raise ValueError(f"Invalid requirement type {req_type!r}") from None


class RequirementStatus(Enum):
    """Completion status of a node."""

    NOT_STARTED = "NOT STARTED"  # no children, unless code level
    STARTED = "STARTED"  # has children but some are incomplete
    COMPLETED = "COMPLETED"  # the whole subgraph down to code is complete

    def __str__(self) -> str:
        return self.value


@dataclass
class SourceLocation:
    """Portable reference to a location in a file.

    Paths are stored relative to the repository root, enabling
    consistent references across different working directories.
    """

    path: str  # Relative to repo root
    line: int | None = None  # 1-based line number, if known

    def absolute(self, repo_root: Path) -> Path:
        """Resolve to absolute path."""
        return repo_root / self.path

    def __str__(self) -> str:
        if self.line:
            return f"{self.path}:{self.line}"
        return self.path


@dataclass(eq=False)
class ReqNode:
    """A node in the requirement graph.

    Requirement nodes are keyed by their declared ID. Code files have no
    ID of their own and use their repository-relative path instead.

    Attributes:
        id: Unique key (requirement ID, or path for code files).
        level: Position in the SYSTEM > HIGH > LOW > CODE hierarchy.
        source: Where this node is defined.
        position: Stable ordinal used for deterministic listings.
        parent_ids: Parent IDs as declared, in declaration order.
        body: Title line followed by the descriptive text.
        attributes: Declared metadata, keyed by upper-case name.
        file_hash: Git blob hash of a code file's content.
        reached: True once a status pass has visited this node.
        covered: True when some CODE node lies below this node.
        status: Completion status, set by status propagation.
    """

    id: str
    level: RequirementLevel
    source: SourceLocation
    position: int = 0
    parent_ids: list[str] = field(default_factory=list)
    body: str = ""
    attributes: dict[str, str] = field(default_factory=dict)
    file_hash: str | None = None
    reached: bool = False
    covered: bool = False
    status: RequirementStatus = RequirementStatus.NOT_STARTED

    # Resolved links, populated by ReqGraph.resolve()
    _parents: list[ReqNode] = field(default_factory=list, repr=False)
    _children: list[ReqNode] = field(default_factory=list, repr=False)

    @property
    def path(self) -> str:
        return self.source.path

    @property
    def title(self) -> str:
        """First line of the body."""
        return self.body.split("\n", 1)[0].strip()

    @property
    def body_without_title(self) -> str:
        """Everything after the title line (empty for single-line bodies)."""
        parts = self.body.split("\n", 1)
        return parts[1] if len(parts) == 2 else ""

    @property
    def is_deleted(self) -> bool:
        """True if the requirement has been superseded (title starts with DELETED)."""
        return self.title.startswith("DELETED")

    @property
    def is_code(self) -> bool:
        return self.level == RequirementLevel.CODE

    # Iterator access
    def iter_parents(self) -> Iterator[ReqNode]:
        """Iterate over resolved parents, sorted by position once linked."""
        yield from self._parents

    def iter_children(self) -> Iterator[ReqNode]:
        """Iterate over resolved children, sorted by position once linked."""
        yield from self._children

    @property
    def parents(self) -> list[ReqNode]:
        return list(self._parents)

    @property
    def children(self) -> list[ReqNode]:
        return list(self._children)

    def parent_count(self) -> int:
        return len(self._parents)

    def child_count(self) -> int:
        return len(self._children)

    def has_parent(self, node: ReqNode) -> bool:
        return node in self._parents

    def has_child(self, node: ReqNode) -> bool:
        return node in self._children

    def add_child(self, child: ReqNode) -> None:
        """Link child below this node, in both directions."""
        self._children.append(child)
        child._parents.append(self)

    def sort_parents(self) -> None:
        """Sort parents by position (ties broken by id)."""
        self._parents.sort(key=position_key)

    def sort_children(self) -> None:
        """Sort children by position (ties broken by id)."""
        self._children.sort(key=position_key)

    def ancestors(self) -> Iterator[ReqNode]:
        """Iterate up through all ancestor paths (BFS), each ancestor once."""
        visited: set[str] = set()
        queue: deque[ReqNode] = deque(self._parents)
        while queue:
            node = queue.popleft()
            if node.id not in visited:
                visited.add(node.id)
                yield node
                queue.extend(node._parents)

    def descendants(self) -> Iterator[ReqNode]:
        """Iterate down through all descendants (BFS), each descendant once."""
        visited: set[str] = set()
        queue: deque[ReqNode] = deque(self._children)
        while queue:
            node = queue.popleft()
            if node.id not in visited:
                visited.add(node.id)
                yield node
                queue.extend(node._children)

    def __str__(self) -> str:
        return f"{self.id}: {self.title}" if self.body else self.id

    def __repr__(self) -> str:
        return f"ReqNode(id={self.id!r}, level={self.level.name}, position={self.position})"


def position_key(node: ReqNode) -> tuple[int, str]:
    """Sort key used for every externally observable ordering."""
    return (node.position, node.id)
