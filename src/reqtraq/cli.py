"""
reqtraq.cli - Command-line interface.

Main entry point for the reqtraq CLI tool.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from reqtraq import __version__
from reqtraq.commands import list_cmd, validate
from reqtraq.graph.node import RequirementLevel
from reqtraq.utilities.log import configure_logging, level_for_verbosity


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="reqtraq",
        description="Requirement traceability graph validation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  reqtraq validate                  # Report every defect in the graph
  reqtraq validate -j               # Same, as JSON
  reqtraq list --level HIGH         # High-level requirements with status
  reqtraq list --title '^DELETED'   # Deleted requirements
  reqtraq list --dangling           # Requirements with no code below them

Configuration is read from .reqtraq.toml in the current directory or
any parent up to the repository root.
        """,
    )

    # Global options
    parser.add_argument(
        "--version",
        action="version",
        version=f"reqtraq {__version__}",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to configuration file",
        metavar="PATH",
    )
    parser.add_argument(
        "--repo",
        type=Path,
        help="Repository root (default: git root of the current directory)",
        metavar="PATH",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Verbose output",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Suppress non-error output",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # validate command
    validate_parser = subparsers.add_parser(
        "validate",
        help="Validate requirement links, attributes and references",
    )
    validate_parser.add_argument(
        "-j",
        "--json",
        action="store_true",
        help="Output errors as JSON",
    )
    validate_parser.add_argument(
        "--skip-attributes",
        action="store_true",
        help="Do not check attributes against the configured schema",
    )
    validate_parser.add_argument(
        "--skip-references",
        action="store_true",
        help="Do not rescan documents for references to missing or deleted requirements",
    )

    # list command
    list_parser = subparsers.add_parser(
        "list",
        help="List requirements with their completion status",
    )
    list_parser.add_argument(
        "--level",
        choices=[level.name for level in RequirementLevel],
        help="Only list nodes of this level",
    )
    list_parser.add_argument("--id", help="Regex the requirement ID must match", metavar="RE")
    list_parser.add_argument("--title", help="Regex the title must match", metavar="RE")
    list_parser.add_argument("--body", help="Regex the body must match", metavar="RE")
    list_parser.add_argument(
        "--dangling",
        action="store_true",
        help="Only list requirements with no code file below them",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    configure_logging(level_for_verbosity(args.verbose, args.quiet))

    # Handle no command
    if not args.command:
        parser.print_help()
        return 0

    try:
        if args.command == "validate":
            return validate.run(args)
        elif args.command == "list":
            return list_cmd.run(args)
        else:
            parser.print_help()
            return 1

    except KeyboardInterrupt:
        print("\nOperation cancelled.", file=sys.stderr)
        return 130
    except Exception as e:
        if args.verbose:
            raise
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
