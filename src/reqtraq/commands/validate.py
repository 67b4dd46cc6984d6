"""
reqtraq.commands.validate - Validate requirements command.

Builds the requirement graph and reports every structural, attribute and
cross-reference defect.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from reqtraq.config import ConfigLoader, find_config_file, get_attribute_schema, load_config
from reqtraq.graph.builder import ReqGraph
from reqtraq.graph.errors import TraceError
from reqtraq.graph.factory import build_graph, get_certdoc_dir
from reqtraq.utilities.git import get_repo_root
from reqtraq.validation import check_attributes, check_cross_references


def run(args: argparse.Namespace) -> int:
    """
    Run the validate command.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code (0 for success, 1 for validation errors)
    """
    config = load_configuration(args)
    if config is None:
        return 1
    repo_root = get_repo_path(args)

    certdoc_dir = get_certdoc_dir(config, repo_root)
    if not args.quiet and not args.json:
        print(f"Validating requirements in: {certdoc_dir}")

    graph, errors = build_graph(config, repo_root)
    errors.extend(run_validators(graph, config, repo_root, args))

    if args.json:
        print(json.dumps([e.to_dict() for e in errors], indent=2))
        return 1 if errors else 0

    if not args.quiet:
        print(f"Found {graph.node_count()} requirements and code files")
        if graph.is_linked:
            print_dangling(graph)

    if errors:
        print(file=sys.stderr)
        for error in errors:
            print(error, file=sys.stderr)

    if not args.quiet:
        print("─" * 60)
        if errors:
            print(f"❌ {len(errors)} errors")
        else:
            print("✓ All requirements valid")

    return 1 if errors else 0


def print_dangling(graph: ReqGraph) -> None:
    """List requirements with no code file below them.

    Dangling requirements are reported as warnings; they do not change the
    exit code.
    """
    dangling = graph.dangling_nodes()
    if not dangling:
        return
    print(f"⚠ {len(dangling)} requirements not implemented by any code file:")
    for node in dangling:
        print(f"  {node.id}: {node.title}")


def run_validators(
    graph: ReqGraph,
    config: ConfigLoader,
    repo_root: Path,
    args: argparse.Namespace,
) -> List[TraceError]:
    """Run the attribute and cross-reference checks enabled by args."""
    errors: List[TraceError] = []
    if not args.skip_attributes:
        errors.extend(check_attributes(graph, get_attribute_schema(config)))

    # Cross references are only meaningful once the graph links cleanly
    certdoc_dir = get_certdoc_dir(config, repo_root)
    if not args.skip_references and graph.is_linked and certdoc_dir.is_dir():
        errors.extend(
            check_cross_references(
                graph,
                certdoc_dir,
                config.get("documents.extensions", [".md"]),
                repo_root=repo_root,
            )
        )
    return errors


def load_configuration(args: argparse.Namespace) -> Optional[ConfigLoader]:
    """Load configuration from file or use defaults."""
    if args.config:
        config_path = args.config
    else:
        config_path = find_config_file(args.repo or Path.cwd())

    if config_path and config_path.exists():
        try:
            return load_config(config_path)
        except Exception as e:
            print(f"Error loading config: {e}", file=sys.stderr)
            return None
    return load_config(None)


def get_repo_path(args: argparse.Namespace) -> Path:
    """Return the repository root: --repo, else the git root, else the cwd."""
    if args.repo:
        return args.repo.resolve()
    return get_repo_root() or Path.cwd()
