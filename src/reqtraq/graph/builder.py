"""Graph Builder - Constructs the requirement graph from parsed records.

ReqGraph owns every node of a run. It is filled once by the ingestion
methods, linked once by resolve(), annotated once by status propagation,
and then only read. The current phase is tracked on the graph itself so
that out-of-order calls fail loudly instead of producing a half-built
graph.

Usage:
    graph = ReqGraph()
    for record in records:
        error = graph.add_requirement(record)
    graph.add_code_refs("src/main.c", file_hash, ["REQ-0-DDLN-SWL-001"])
    errors = graph.resolve()
"""

from __future__ import annotations

from collections import deque
from collections.abc import Mapping
from enum import Enum
from typing import Any, Iterator

import structlog

from reqtraq.graph.errors import ErrorKind, GraphPhaseError, TraceError
from reqtraq.graph.node import (
    ReqNode,
    RequirementLevel,
    SourceLocation,
    level_for_type,
    position_key,
)
from reqtraq.graph.query import ReqFilter, matches
from reqtraq.graph.status import propagate_status
from reqtraq.parsers import RequirementRecord

logger = structlog.get_logger(__name__)


class GraphPhase(Enum):
    """Lifecycle of a ReqGraph within one run."""

    INGESTING = "ingesting"
    LINKED = "linked"
    PROPAGATED = "propagated"
    FAILED = "failed"  # linking reported errors; status is meaningless


class ReqGraph:
    """Container for the complete requirement graph.

    Nodes are keyed by requirement ID, or by repository-relative path for
    code files. Every listing handed out by the graph is sorted by node
    position so that output never depends on insertion order.
    """

    def __init__(self) -> None:
        self._index: dict[str, ReqNode] = {}
        self._phase = GraphPhase.INGESTING

    @property
    def phase(self) -> GraphPhase:
        return self._phase

    @property
    def is_linked(self) -> bool:
        """True once resolve() succeeded without errors."""
        return self._phase in (GraphPhase.LINKED, GraphPhase.PROPAGATED)

    def _require_phase(self, *phases: GraphPhase, operation: str) -> None:
        if self._phase not in phases:
            allowed = ", ".join(p.value for p in phases)
            raise GraphPhaseError(
                f"{operation} requires the graph to be {allowed}, "
                f"but it is {self._phase.value}"
            )

    # ─────────────────────────────────────────────────────────────────────────
    # Ingestion
    # ─────────────────────────────────────────────────────────────────────────

    def add_requirement(self, record: RequirementRecord) -> TraceError | None:
        """Add a requirement node from a parsed document record.

        The TEXT attribute (title plus body) is moved out of the attribute
        map into the node body.

        Args:
            record: The parsed requirement.

        Returns:
            A DUPLICATE_IDENTIFIER error if the ID is already defined,
            otherwise None.

        Raises:
            ValueError: If the ID carries an unknown requirement type.
        """
        self._require_phase(GraphPhase.INGESTING, operation="add_requirement")

        existing = self._index.get(record.id)
        if existing is not None:
            logger.debug(
                "duplicate_requirement",
                req_id=record.id,
                path=record.path,
                previous_path=existing.path,
            )
            return TraceError(
                kind=ErrorKind.DUPLICATE_IDENTIFIER,
                node_id=record.id,
                path=record.path,
                line=record.line,
                detail=existing.path,
            )

        level = level_for_type(record.req_type)
        attributes = dict(record.attributes)
        body = attributes.pop("TEXT", "")

        self._index[record.id] = ReqNode(
            id=record.id,
            level=level,
            source=SourceLocation(path=record.path, line=record.line),
            position=record.position,
            parent_ids=list(record.parents),
            body=body,
            attributes=attributes,
        )
        logger.debug("requirement_added", req_id=record.id, level=level.name, path=record.path)
        return None

    def add_code_refs(self, path: str, file_hash: str, req_ids: list[str]) -> None:
        """Add a code file node referencing the given requirements.

        Code files are keyed by path and one node exists per scanned file,
        so there is no duplicate check. Files without references are not
        part of the graph at all.

        Args:
            path: File path relative to the repository root.
            file_hash: Git blob hash of the file content.
            req_ids: Requirement IDs referenced by the file.
        """
        self._require_phase(GraphPhase.INGESTING, operation="add_code_refs")
        if not req_ids:
            return

        self._index[path] = ReqNode(
            id=path,
            level=RequirementLevel.CODE,
            source=SourceLocation(path=path),
            parent_ids=list(req_ids),
            file_hash=file_hash,
        )
        logger.debug("code_refs_added", path=path, references=len(req_ids))

    # ─────────────────────────────────────────────────────────────────────────
    # Linking
    # ─────────────────────────────────────────────────────────────────────────

    def resolve(self) -> list[TraceError]:
        """Link every node to its declared parents and compute status.

        All defects are collected before returning. If there are any, the
        graph is left in the FAILED phase and status propagation is
        skipped, since status over a partial graph means nothing.

        Returns:
            Every linking defect found, in node order.

        Raises:
            GraphPhaseError: If called more than once.
        """
        self._require_phase(GraphPhase.INGESTING, operation="resolve")

        errors: list[TraceError] = []
        for node in sorted(self._index.values(), key=_link_order):
            errors.extend(self._link_node(node))

        if errors:
            self._phase = GraphPhase.FAILED
            logger.info("graph_link_failed", nodes=len(self._index), errors=len(errors))
            return errors

        # Parents are never CODE, so their positions are final here
        for node in self._index.values():
            node.sort_parents()
        for node in self._index.values():
            if node.is_code:
                node.position = node._parents[0].position
        for node in self._index.values():
            node.sort_children()

        self._phase = GraphPhase.LINKED
        logger.info("graph_linked", nodes=len(self._index))

        self.propagate()
        return errors

    def _link_node(self, node: ReqNode) -> list[TraceError]:
        """Resolve one node's declared parents, returning any defects."""
        errors: list[TraceError] = []

        if not node.parent_ids and node.level != RequirementLevel.SYSTEM:
            errors.append(
                TraceError(
                    kind=ErrorKind.MISSING_PARENT,
                    node_id=node.id,
                    path=node.path,
                    is_code=node.is_code,
                )
            )

        for parent_id in node.parent_ids:
            parent = self._index.get(parent_id)
            kind: ErrorKind | None = None
            detail = ""
            if parent is None:
                kind = ErrorKind.UNRESOLVED_PARENT
            elif parent.is_deleted and not node.is_deleted:
                kind = ErrorKind.SUPERSEDED_PARENT_REFERENCE
            elif parent.level >= node.level:
                kind = ErrorKind.PARENT_LEVEL_VIOLATION
                detail = f"{node.level.name} level"

            if kind is not None:
                errors.append(
                    TraceError(
                        kind=kind,
                        node_id=node.id,
                        path=node.path,
                        related_id=parent_id,
                        detail=detail,
                        is_code=node.is_code,
                    )
                )
                continue

            parent.add_child(node)

        return errors

    # ─────────────────────────────────────────────────────────────────────────
    # Status propagation
    # ─────────────────────────────────────────────────────────────────────────

    def propagate(self) -> None:
        """Compute status and reachability for every node.

        Runs automatically at the end of a successful resolve(). Calling it
        again recomputes the same values.

        Raises:
            GraphPhaseError: If the graph has not been linked cleanly.
        """
        self._require_phase(GraphPhase.LINKED, GraphPhase.PROPAGATED, operation="propagate")
        propagate_status(self)
        self._phase = GraphPhase.PROPAGATED
        logger.info(
            "status_propagated",
            nodes=len(self._index),
            dangling=sum(1 for n in self._index.values() if not n.covered),
        )

    # ─────────────────────────────────────────────────────────────────────────
    # Access
    # ─────────────────────────────────────────────────────────────────────────

    def find_by_id(self, node_id: str) -> ReqNode | None:
        """Find node by ID (or by path, for code files)."""
        return self._index.get(node_id)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._index

    def __len__(self) -> int:
        return len(self._index)

    def node_count(self) -> int:
        return len(self._index)

    def all_nodes(self) -> Iterator[ReqNode]:
        """Iterate all nodes in position order."""
        yield from sorted(self._index.values(), key=position_key)

    def nodes_by_level(self, level: RequirementLevel) -> list[ReqNode]:
        """Return every node of a level, sorted by position."""
        return sorted(
            (n for n in self._index.values() if n.level == level),
            key=position_key,
        )

    def system_nodes(self) -> list[ReqNode]:
        return self.nodes_by_level(RequirementLevel.SYSTEM)

    def code_nodes(self) -> list[ReqNode]:
        return self.nodes_by_level(RequirementLevel.CODE)

    def dangling_nodes(self) -> list[ReqNode]:
        """Return nodes with no CODE node below them, sorted by position.

        Raises:
            GraphPhaseError: If status has not been propagated.
        """
        self._require_phase(GraphPhase.PROPAGATED, operation="dangling_nodes")
        return sorted(
            (n for n in self._index.values() if not n.covered),
            key=position_key,
        )

    def filter_nodes(
        self,
        req_filter: ReqFilter,
        changeset: Mapping[str, Any] | None = None,
        level: RequirementLevel | None = None,
    ) -> list[ReqNode]:
        """Return nodes matching a filter (and changeset), sorted by position."""
        nodes = self._index.values() if level is None else self.nodes_by_level(level)
        return sorted(
            (n for n in nodes if matches(n, req_filter, changeset)),
            key=position_key,
        )

    def iter_breadth_first(self) -> Iterator[ReqNode]:
        """Iterate specification nodes breadth-first from the SYSTEM level.

        Each node is visited once, after at least one of its parents, which
        is the order an issue tracker needs to create parent tasks before
        their children. CODE nodes are skipped.
        """
        queue: deque[ReqNode] = deque(self.system_nodes())
        enqueued: set[str] = {n.id for n in queue}
        while queue:
            node = queue.popleft()
            if node.is_code:
                continue
            yield node
            for child in node.iter_children():
                if child.id not in enqueued:
                    enqueued.add(child.id)
                    queue.append(child)


def _link_order(node: ReqNode) -> tuple[str, int, str]:
    return (node.path, node.position, node.id)
