"""Graph Factory - Build a ReqGraph from a repository.

This module provides the single entry point for commands to obtain a
resolved requirement graph. It walks the specification documents and the
source tree, feeds their records to the graph, and links it.
"""

from __future__ import annotations

from pathlib import Path

import structlog

from reqtraq.config import ConfigLoader
from reqtraq.graph.builder import ReqGraph
from reqtraq.graph.errors import ErrorKind, TraceError
from reqtraq.parsers.code import CodeParser
from reqtraq.parsers.requirement import RequirementParser
from reqtraq.utilities.git import relative_path_to_repo
from reqtraq.validation.references import iter_document_files

logger = structlog.get_logger(__name__)


def get_certdoc_dir(config: ConfigLoader, repo_root: Path) -> Path:
    """Return the directory holding the specification documents."""
    return repo_root / config.get("directories.certdocs", "certdocs")


def get_code_dir(config: ConfigLoader, repo_root: Path) -> Path:
    """Return the directory scanned for code references."""
    return repo_root / config.get("directories.code", ".")


def ingest_documents(
    graph: ReqGraph, config: ConfigLoader, repo_root: Path
) -> list[TraceError]:
    """Parse every specification document and add its requirements to the graph."""
    errors: list[TraceError] = []
    certdoc_dir = get_certdoc_dir(config, repo_root)
    if not certdoc_dir.is_dir():
        logger.warning("certdoc_dir_missing", path=str(certdoc_dir))
        return errors

    parser = RequirementParser()
    extensions = config.get("documents.extensions", [".md"])
    for file_path in iter_document_files(certdoc_dir, extensions):
        relative = relative_path_to_repo(file_path, repo_root) or str(file_path)
        records, parse_errors = parser.parse_file(file_path, relative)
        errors.extend(parse_errors)
        for record in records:
            error = graph.add_requirement(record)
            if error is not None:
                errors.append(error)
        logger.debug("document_ingested", path=relative, requirements=len(records))
    return errors


def ingest_code(graph: ReqGraph, config: ConfigLoader, repo_root: Path) -> list[TraceError]:
    """Scan the source tree and add a code node per file with references."""
    errors: list[TraceError] = []
    code_dir = get_code_dir(config, repo_root)
    if not code_dir.is_dir():
        logger.warning("code_dir_missing", path=str(code_dir))
        return errors

    parser = CodeParser(config.get("code.extensions", []))
    for file_path in parser.iter_files(code_dir):
        relative = relative_path_to_repo(file_path, repo_root)
        if relative is None:
            errors.append(
                TraceError(
                    kind=ErrorKind.MALFORMED_SOURCE_PATH,
                    path=str(file_path),
                    detail=str(repo_root),
                    is_code=True,
                )
            )
            continue
        record = parser.parse_file(file_path, relative)
        if record is not None:
            graph.add_code_refs(record.path, record.file_hash, record.req_ids)
    return errors


def build_graph(config: ConfigLoader, repo_root: Path) -> tuple[ReqGraph, list[TraceError]]:
    """Build and resolve the requirement graph of a repository.

    Errors from every phase are collected. Linking runs even when
    ingestion reported errors, so that one run shows every defect; status
    is only computed when linking itself is clean.

    Args:
        config: Loaded configuration.
        repo_root: Repository root; all node paths are relative to it.

    Returns:
        (graph, errors). Check graph.is_linked before reading status.

    Raises:
        OSError: If a source file cannot be read.
    """
    graph = ReqGraph()
    errors = ingest_documents(graph, config, repo_root)
    errors.extend(ingest_code(graph, config, repo_root))
    errors.extend(graph.resolve())
    logger.info(
        "graph_built",
        repo_root=str(repo_root),
        nodes=graph.node_count(),
        errors=len(errors),
    )
    return graph, errors
