"""Status propagation over a linked requirement graph.

Two traversals annotate every node:

- resolve_down: post-order completion rollup from each SYSTEM node,
  marking every visited node reached.
- resolve_up: marking from each CODE node to all ancestors. Nodes it
  visits are reached and covered; a node left uncovered is dangling.

Both recurse without a cycle guard. The linker only accepts parents at a
strictly higher level than their child, so every path is at most four
nodes long and the graph cannot contain a cycle.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from reqtraq.graph.node import ReqNode, RequirementLevel, RequirementStatus

if TYPE_CHECKING:
    from reqtraq.graph.builder import ReqGraph


def resolve_down(node: ReqNode) -> RequirementStatus:
    """Compute and store the completion status of node and its subgraph.

    A CODE node is always complete. Any other node without children has not
    been started. Otherwise the node is complete only if every child is.
    Nodes shared by several parents are simply evaluated again; the result
    depends on the child set alone.
    """
    node.reached = True
    if node.level == RequirementLevel.CODE:
        node.status = RequirementStatus.COMPLETED
    elif node.child_count() == 0:
        node.status = RequirementStatus.NOT_STARTED
    else:
        # Evaluate every child so that the whole subgraph gets a status
        child_statuses = [resolve_down(child) for child in node.iter_children()]
        if all(s == RequirementStatus.COMPLETED for s in child_statuses):
            node.status = RequirementStatus.COMPLETED
        else:
            node.status = RequirementStatus.STARTED
    return node.status


def resolve_up(node: ReqNode) -> None:
    """Mark node and all of its ancestors as reached and covered by code."""
    if node.covered:
        # Ancestors were marked when this node was first covered
        return
    node.reached = True
    node.covered = True
    for parent in node.iter_parents():
        resolve_up(parent)


def propagate_status(graph: ReqGraph) -> None:
    """Recompute status, reached and covered flags for every node of a linked graph.

    Flags are reset first, so running this twice gives identical results.
    Callers go through ReqGraph.propagate(), which checks the graph phase.
    """
    for node in graph.all_nodes():
        node.reached = False
        node.covered = False
        node.status = RequirementStatus.NOT_STARTED

    for node in graph.system_nodes():
        resolve_down(node)

    for node in graph.code_nodes():
        resolve_up(node)
