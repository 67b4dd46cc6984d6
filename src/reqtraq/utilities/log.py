"""structlog configuration for the reqtraq command line.

Library modules only call structlog.get_logger(__name__); the CLI decides
how much of it is shown. Log output goes to stderr so it never mixes with
report output on stdout.
"""

from __future__ import annotations

import logging
import sys

import structlog


def level_for_verbosity(verbose: bool = False, quiet: bool = False) -> int:
    """Map the CLI verbosity flags to a logging level."""
    if quiet:
        return logging.ERROR
    if verbose:
        return logging.DEBUG
    return logging.WARNING


def configure_logging(level: int = logging.WARNING) -> None:
    """Configure structlog to render human-readable events on stderr.

    Args:
        level: Minimum level (a `logging` constant) of events to emit.
    """
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )
