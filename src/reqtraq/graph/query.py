"""Filtering of requirement nodes for reports and synchronisation.

A filter maps each field kind to a regular expression. A node matches
when every expression finds a match in its field (AND logic), and, if a
changeset is given, when its ID is one of the changeset keys.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from enum import Enum
from typing import Any

from reqtraq.graph.node import ReqNode


class FilterType(Enum):
    """Node fields a filter can match against."""

    ID = "id"
    TITLE = "title"
    BODY = "body"


ReqFilter = Mapping[FilterType, "re.Pattern[str]"]


def build_filter(
    id_pattern: str | None = None,
    title_pattern: str | None = None,
    body_pattern: str | None = None,
) -> dict[FilterType, re.Pattern[str]]:
    """Compile the given patterns into a filter, skipping empty ones.

    Raises:
        re.error: If a pattern does not compile.
    """
    patterns = {
        FilterType.ID: id_pattern,
        FilterType.TITLE: title_pattern,
        FilterType.BODY: body_pattern,
    }
    return {kind: re.compile(p) for kind, p in patterns.items() if p}


def _get_field_text(node: ReqNode, field: FilterType) -> str:
    """Extract text for a single field from a node."""
    if field == FilterType.ID:
        return node.id
    if field == FilterType.TITLE:
        return node.title
    return node.body


def matches(
    node: ReqNode,
    req_filter: ReqFilter,
    changeset: Mapping[str, Any] | None = None,
) -> bool:
    """Check if a node matches every filter pattern and the changeset.

    Args:
        node: The node to test.
        req_filter: Field -> compiled pattern; an empty filter matches all.
        changeset: Optional mapping keyed by requirement ID. When given,
            only nodes whose ID is a key match.

    Returns:
        True if the node passes all checks.
    """
    for field, pattern in req_filter.items():
        if not pattern.search(_get_field_text(node, field)):
            return False
    if changeset is None:
        return True
    return node.id in changeset
