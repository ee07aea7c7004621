"""Node tree for the string parsing engine.

Key Components:
    Node: Base tree element with ordered children and a parent back-reference
    RootNode: Sentinel top node of a parse; never a child
    TextNode: Literal text leaf with grammar-owned flags
    check_tree_invariants: Consistency checker for parent/child links and ids
"""

from .node import (
    CUSTOM_KIND_MIN,
    Node,
    NodeKind,
    RootNode,
)
from .text import TextNode
from .validation import (
    TreeInvariantError,
    assert_tree_valid,
    check_tree_invariants,
)

__all__ = [
    "CUSTOM_KIND_MIN",
    "Node",
    "NodeKind",
    "RootNode",
    "TextNode",
    "TreeInvariantError",
    "assert_tree_valid",
    "check_tree_invariants",
]
