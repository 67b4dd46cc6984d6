"""
reqtraq.commands.list_cmd - List requirements with their status.

Prints nodes in position order, optionally restricted to one level, to
nodes matching ID/title/body patterns, or to dangling requirements.
"""

import argparse
import re
import sys

from reqtraq.commands.validate import get_repo_path, load_configuration
from reqtraq.graph.factory import build_graph
from reqtraq.graph.node import ReqNode, RequirementLevel
from reqtraq.graph.query import build_filter, matches


def run(args: argparse.Namespace) -> int:
    """
    Run the list command.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code (0 for success, 1 if the graph could not be resolved)
    """
    try:
        req_filter = build_filter(args.id, args.title, args.body)
    except re.error as e:
        print(f"Error: invalid filter pattern: {e}", file=sys.stderr)
        return 1

    config = load_configuration(args)
    if config is None:
        return 1
    repo_root = get_repo_path(args)

    graph, errors = build_graph(config, repo_root)
    if not graph.is_linked:
        print("Requirement graph could not be resolved:", file=sys.stderr)
        for error in errors:
            print(f"\t{error}", file=sys.stderr)
        return 1

    if args.dangling:
        nodes = [n for n in graph.dangling_nodes() if matches(n, req_filter)]
    else:
        level = RequirementLevel[args.level] if args.level else None
        nodes = graph.filter_nodes(req_filter, level=level)

    for node in nodes:
        print(format_node(node))

    if not args.quiet:
        print(f"\n{len(nodes)} nodes", file=sys.stderr)
    return 0


def format_node(node: ReqNode) -> str:
    """Render one listing line: ID, level, status, title."""
    title = node.title if not node.is_code else f"({node.file_hash or ''})"
    return f"{node.id}\t{node.level.name}\t{node.status}\t{title}"
