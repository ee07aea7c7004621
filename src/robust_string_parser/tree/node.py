"""Node tree used by the string parsing engine.

Every node owns an ordered list of children and keeps a plain back-reference
to its parent. The list is private: all structural edits go through the
methods below, which validate their preconditions before mutating anything so
that a failed edit never leaves the tree half-changed.

Invariants maintained by the operations:

- a node with a parent appears exactly once in that parent's children
- a RootNode never appears in any children list
- node ids are unique for the lifetime of the process
"""

import itertools
from enum import IntEnum
from typing import Any, Iterator, List, Optional, Tuple, Union

from robust_string_parser.shared.errors import MalformedTreeOperation

CUSTOM_KIND_MIN = 32

# itertools.count.__next__ is atomic under the GIL
_node_ids = itertools.count()


class NodeKind(IntEnum):
    """Kind codes reserved by the core. Grammar kinds start at CUSTOM_KIND_MIN."""

    UNKNOWN = 0
    ROOT = 1
    TEXT = 2


class Node:
    """Base tree element.

    Grammars subclass this and set ``kind`` to a code >= ``CUSTOM_KIND_MIN``.
    They may override ``matches``, ``_describe`` and ``_teardown``.
    """

    kind: int = NodeKind.UNKNOWN
    _core_kind = False

    def __init__(self, occurred_at: Optional[int] = None) -> None:
        kind = int(self.kind)
        if not self._core_kind and type(self) is not Node and kind < CUSTOM_KIND_MIN:
            raise ValueError(
                f"Node kind {kind} is reserved; custom kinds must be >= {CUSTOM_KIND_MIN}"
            )
        self._id = next(_node_ids)
        self._parent: Optional["Node"] = None
        self._children: List["Node"] = []
        self._destroyed = False
        if occurred_at is not None and occurred_at < 0:
            occurred_at = None
        self.occurred_at = occurred_at

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={self._id} kind={int(self.kind)}>"

    @property
    def id(self) -> int:
        return self._id

    @property
    def parent(self) -> Optional["Node"]:
        return self._parent

    @property
    def children(self) -> Tuple["Node", ...]:
        """Snapshot of the children in document order."""
        return tuple(self._children)

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    @property
    def depth(self) -> int:
        """Number of ancestors above this node (root = 0)."""
        depth = 0
        ancestor = self._parent
        while ancestor is not None:
            depth += 1
            ancestor = ancestor._parent
        return depth

    # Structural edits

    def append_child(self, node: "Node") -> "Node":
        """Append ``node`` as the last child, moving it from its old parent."""
        self._check_insertable(node)
        self._detach(node)
        self._children.append(node)
        node._parent = self
        return node

    def prepend_child(self, node: "Node") -> "Node":
        """Insert ``node`` as the first child, moving it from its old parent."""
        self._check_insertable(node)
        self._detach(node)
        self._children.insert(0, node)
        node._parent = self
        return node

    def insert_before(self, node: "Node", reference: "Node") -> "Node":
        """Insert ``node`` directly before the child ``reference``."""
        self._check_reference(node, reference)
        self._detach(node)
        # detaching may have shifted the reference when both share this parent
        self._children.insert(self._require_index(reference), node)
        node._parent = self
        return node

    def insert_after(self, node: "Node", reference: "Node") -> "Node":
        """Insert ``node`` directly after the child ``reference``."""
        self._check_reference(node, reference)
        self._detach(node)
        self._children.insert(self._require_index(reference) + 1, node)
        node._parent = self
        return node

    def remove_child(self, child: Union["Node", int], destroy: bool = False) -> "Node":
        """Detach a child given by node or index.

        Args:
            child: The child node (matched by identity) or its index
            destroy: Destroy the detached subtree afterwards

        Returns:
            The detached node

        Raises:
            MalformedTreeOperation: Index out of range, node not a child, or the
                child's recorded parent is not this node
        """
        if isinstance(child, Node):
            index = self._require_index(child)
        elif isinstance(child, int) and not isinstance(child, bool):
            index = child
        else:
            raise TypeError("Child must be a Node instance or an index")

        if not 0 <= index < len(self._children):
            raise MalformedTreeOperation(
                f"Child index {index} out of range",
                details={"parent_id": self._id, "child_count": len(self._children)},
            )

        target = self._children[index]
        if target._parent is not self:
            raise MalformedTreeOperation(
                f"Node {target._id} does not record {self._id} as its parent",
                details={"parent_id": self._id, "child_id": target._id},
            )

        del self._children[index]
        target._parent = None

        if destroy:
            target.destroy()
        return target

    def destroy(self) -> None:
        """Destroy this node and its whole subtree.

        A node that still has a parent is removed by that parent, which then
        destroys it. A parentless node destroys its children first, always
        taking index 0, and finally runs its own teardown hook. The walk uses
        an explicit stack, so tree depth is not bounded by the recursion limit.
        """
        if self._parent is not None:
            self._parent.remove_child(self, destroy=True)
            return

        pending: List[Node] = [self]
        while pending:
            node = pending[-1]
            if node._children:
                pending.append(node.remove_child(0))
                continue
            pending.pop()
            node._teardown()
            node._destroyed = True

    def append_to_last_text_child(
        self, text: str, occurred_at: Optional[int] = None
    ) -> None:
        """Append text to the trailing text child, creating one if needed."""
        if not text:
            return

        from .text import TextNode

        last = self.last_child()
        if isinstance(last, TextNode):
            last.append_text(text)
        else:
            self.append_child(TextNode(text, occurred_at))

    # Navigation and queries

    def first_child(self) -> Optional["Node"]:
        return self._children[0] if self._children else None

    def last_child(self) -> Optional["Node"]:
        return self._children[-1] if self._children else None

    def equals(self, other: Any) -> bool:
        """Identity comparison by node id, regardless of content."""
        return isinstance(other, Node) and other._id == self._id

    def matches(self, criterion: str, value: Any) -> bool:
        """Grammar-defined predicate used by the subtree queries."""
        return False

    def find_matching(self, criterion: str, value: Any) -> List["Node"]:
        """Return all descendants matching the criterion in preorder."""
        return [
            node for node in self.iter_descendants() if node.matches(criterion, value)
        ]

    def count_matching(self, criterion: str, value: Any) -> int:
        """Count descendants matching the criterion."""
        return sum(1 for node in self.iter_descendants() if node.matches(criterion, value))

    def iter_descendants(self) -> Iterator["Node"]:
        """Yield all descendants in preorder."""
        pending = list(reversed(self._children))
        while pending:
            node = pending.pop()
            yield node
            pending.extend(reversed(node._children))

    def dump(self, indent: str = " ", line_separator: str = "\n", level: int = 0) -> str:
        """Render the subtree as one debug line per node."""
        lines = []
        pending = [(self, level)]
        while pending:
            node, node_level = pending.pop()
            lines.append(f"{indent * node_level}{node._id}: {node._describe()}{line_separator}")
            pending.extend((child, node_level + 1) for child in reversed(node._children))
        return "".join(lines)

    # Hooks for subclasses

    def _describe(self) -> str:
        return str(int(self.kind))

    def _teardown(self) -> None:
        """Release node-specific resources once all children are gone."""

    # Internal helpers

    def _find_index(self, child: "Node") -> Optional[int]:
        for index, candidate in enumerate(self._children):
            if candidate._id == child._id:
                return index
        return None

    def _require_index(self, child: "Node") -> int:
        index = self._find_index(child)
        if index is None:
            raise MalformedTreeOperation(
                f"Node {child._id} is not a child of node {self._id}",
                details={"parent_id": self._id, "child_id": child._id},
            )
        return index

    def _check_insertable(self, node: "Node") -> None:
        if not isinstance(node, Node):
            raise TypeError("Child must be a Node instance")
        if node.kind == NodeKind.ROOT:
            raise MalformedTreeOperation(
                "Root nodes cannot be children of other nodes",
                details={"node_id": node._id},
            )
        if node._destroyed:
            raise MalformedTreeOperation(
                f"Node {node._id} has been destroyed", details={"node_id": node._id}
            )
        ancestor: Optional[Node] = self
        while ancestor is not None:
            if ancestor is node:
                raise MalformedTreeOperation(
                    f"Node {node._id} cannot become a descendant of itself",
                    details={"node_id": node._id, "parent_id": self._id},
                )
            ancestor = ancestor._parent

    def _check_reference(self, node: "Node", reference: "Node") -> None:
        self._check_insertable(node)
        if not isinstance(reference, Node):
            raise TypeError("Reference must be a Node instance")
        if reference is node:
            raise MalformedTreeOperation("A node cannot be inserted relative to itself")
        self._require_index(reference)

    @staticmethod
    def _detach(node: "Node") -> None:
        if node._parent is not None:
            node._parent.remove_child(node)


class RootNode(Node):
    """Sentinel top of a parse tree. It may own children but never be one."""

    kind = NodeKind.ROOT
    _core_kind = True

    def __init__(self) -> None:
        super().__init__(occurred_at=None)

    def _describe(self) -> str:
        return "root"
