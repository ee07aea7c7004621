"""Structural invariant checks for node trees.

The tree operations keep these invariants on their own; the checker exists
for tests and for grammars that want to verify a tree after heavy
post-processing in ``modify_tree``.
"""

from collections import Counter
from typing import List

from robust_string_parser.shared.errors import MalformedTreeOperation

from .node import Node, NodeKind


class TreeInvariantError(MalformedTreeOperation):
    """Raised by ``assert_tree_valid`` when a tree breaks its invariants."""

    def __init__(self, violations: List[str]):
        super().__init__(
            f"Tree invariants violated: {'; '.join(violations)}",
            details={"violations": list(violations)},
        )
        self.violations = violations


def check_tree_invariants(root: Node) -> List[str]:
    """Return a description of every invariant violation below ``root``.

    An empty list means the tree is consistent.
    """
    violations: List[str] = []
    seen_ids: Counter = Counter([root.id])

    for node in root.iter_descendants():
        seen_ids[node.id] += 1
        if node.kind == NodeKind.ROOT:
            violations.append(f"root node {node.id} appears as a child")
        if node.destroyed:
            violations.append(f"destroyed node {node.id} is still attached")

        parent = node.parent
        if parent is None:
            violations.append(f"node {node.id} is listed as a child but has no parent")
            continue
        occurrences = sum(1 for child in parent.children if child is node)
        if occurrences != 1:
            violations.append(
                f"node {node.id} appears {occurrences} times under parent {parent.id}"
            )

    for node in [root, *root.iter_descendants()]:
        for child in node.children:
            if child.parent is not node:
                violations.append(
                    f"child {child.id} of node {node.id} records another parent"
                )

    for node_id, count in seen_ids.items():
        if count > 1:
            violations.append(f"node id {node_id} occurs {count} times")

    return violations


def assert_tree_valid(root: Node) -> None:
    """Raise ``TreeInvariantError`` if ``check_tree_invariants`` finds anything."""
    violations = check_tree_invariants(root)
    if violations:
        raise TreeInvariantError(violations)
