"""Cross-reference validation - Check IDs mentioned in document text.

Free text may mention requirement IDs that are never modelled as parent
links, so this check rescans the raw document lines instead of the graph
edges. Every mentioned ID must exist, and must not be deleted unless the
line is a parent declaration (already checked by the linker) or the
deleted requirement's own header.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from reqtraq.graph.errors import ErrorKind, GraphPhaseError, TraceError
from reqtraq.parsers import DELETED_LINE_PATTERN, PARENTS_LINE_PATTERN, REQ_ID_PATTERN

if TYPE_CHECKING:
    from reqtraq.graph.builder import ReqGraph

logger = structlog.get_logger(__name__)


def iter_document_files(document_root: Path, extensions: Iterable[str]) -> list[Path]:
    """Return document files under document_root, sorted by path."""
    suffixes = {ext.lower() for ext in extensions}
    return sorted(
        p for p in document_root.rglob("*") if p.is_file() and p.suffix.lower() in suffixes
    )


def check_line(graph: ReqGraph, line: str, path: str, line_no: int) -> list[TraceError]:
    """Check every requirement ID mentioned on a single line."""
    errors: list[TraceError] = []
    allow_deleted = bool(PARENTS_LINE_PATTERN.search(line) or DELETED_LINE_PATTERN.search(line))

    for match in REQ_ID_PATTERN.finditer(line):
        req_id = match.group(0)
        node = graph.find_by_id(req_id)
        if node is None:
            kind = ErrorKind.UNRESOLVED_CROSS_REFERENCE
        elif node.is_deleted and not allow_deleted:
            kind = ErrorKind.SUPERSEDED_CROSS_REFERENCE
        else:
            continue
        errors.append(TraceError(kind=kind, path=path, line=line_no, related_id=req_id))
    return errors


def check_cross_references(
    graph: ReqGraph,
    document_root: Path,
    extensions: Iterable[str] = (".md",),
    repo_root: Path | None = None,
) -> list[TraceError]:
    """Rescan document text for references to missing or deleted requirements.

    Args:
        graph: A linked requirement graph.
        document_root: Directory holding the specification documents.
        extensions: Document file suffixes to scan.
        repo_root: If given, error paths are reported relative to it.

    Returns:
        One error per offending reference, in file and line order.

    Raises:
        GraphPhaseError: If the graph has not been linked cleanly.
        OSError: If a document cannot be read.
    """
    if not graph.is_linked:
        raise GraphPhaseError("check_cross_references requires a linked graph")

    errors: list[TraceError] = []
    for file_path in iter_document_files(document_root, extensions):
        display = _display_path(file_path, repo_root)
        text = file_path.read_text(encoding="utf-8")
        for line_no, line in enumerate(text.splitlines(), start=1):
            errors.extend(check_line(graph, line, display, line_no))
        logger.debug("document_references_checked", path=display)
    return errors


def _display_path(file_path: Path, repo_root: Path | None) -> str:
    if repo_root is not None:
        try:
            return file_path.relative_to(repo_root).as_posix()
        except ValueError:
            pass
    return str(file_path)
