"""Attribute validation - Check requirement metadata against a schema.

The schema is an ordered list of rules, each naming an attribute that
every requirement must declare and, optionally, a pattern its value must
match. It is read from the [[attributes]] tables of the configuration:

    [[attributes]]
    name = "Rationale"

    [[attributes]]
    name = "Verification"
    value = "^(Demonstration|Unit Test|Review|Analysis)$"
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from reqtraq.graph.errors import ErrorKind, TraceError
from reqtraq.graph.node import ReqNode, RequirementLevel

if TYPE_CHECKING:
    from reqtraq.graph.builder import ReqGraph

# SYSTEM requirements have no parents to declare
PARENTS_ATTRIBUTE = "PARENTS"


@dataclass
class AttributeRule:
    """A required attribute and the optional pattern its value must match.

    Attributes:
        name: Attribute name; matched case-insensitively.
        value: Regular expression the value must match (re.search), if any.
    """

    name: str
    value: str | None = None
    _pattern: re.Pattern[str] | None = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        # Compile once per rule rather than once per requirement
        self._pattern = re.compile(self.value) if self.value else None

    @property
    def key(self) -> str:
        return self.name.upper()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AttributeRule":
        """Create an AttributeRule from an [[attributes]] table.

        Raises:
            ValueError: If the table has no name.
            re.error: If the value pattern does not compile.
        """
        name = data.get("name")
        if not name:
            raise ValueError(f"Attribute rule without a name: {data!r}")
        value = data.get("value")
        return cls(name=str(name), value=str(value) if value else None)

    def check(self, node: ReqNode) -> TraceError | None:
        """Check one node against this rule."""
        key = self.key
        if key not in node.attributes:
            if node.level == RequirementLevel.SYSTEM and key == PARENTS_ATTRIBUTE:
                return None
            return TraceError(
                kind=ErrorKind.SCHEMA_ATTRIBUTE_MISSING,
                node_id=node.id,
                path=node.path,
                line=node.source.line,
                related_id=self.name,
            )

        value = node.attributes[key]
        if self._pattern is not None and not self._pattern.search(value):
            return TraceError(
                kind=ErrorKind.SCHEMA_ATTRIBUTE_INVALID,
                node_id=node.id,
                path=node.path,
                line=node.source.line,
                related_id=key,
                detail=self.value or "",
                value=value,
            )
        return None


def parse_schema(data: list[dict[str, Any]]) -> list[AttributeRule]:
    """Build the attribute schema from a list of rule tables, keeping order."""
    return [AttributeRule.from_dict(item) for item in data]


def check_attributes(graph: ReqGraph, schema: list[AttributeRule]) -> list[TraceError]:
    """Validate the attributes of every requirement node against a schema.

    CODE nodes carry no attributes and are skipped.

    Args:
        graph: The requirement graph.
        schema: Ordered attribute rules.

    Returns:
        One error per missing or invalid attribute, in node order.
    """
    errors: list[TraceError] = []
    for node in graph.all_nodes():
        if node.is_code:
            continue
        for rule in schema:
            error = rule.check(node)
            if error is not None:
                errors.append(error)
    return errors
