"""Append-only node storage."""

from __future__ import annotations

import operator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ._errors import InvalidIdError
from ._node import BinaryNode, Node, NodeId

if TYPE_CHECKING:
    from collections.abc import Iterator


@dataclass(slots=True)
class Arena:
    """An append-only, indexable store of expression nodes.

    Nodes reference their children by ``NodeId``, the index at which the
    child was inserted. Entries are never removed or reordered, so an id
    stays valid for the lifetime of the arena.

    Because a binary node can only be inserted once both of its children
    are present, every child id is smaller than its parent's id and the
    stored structure is always acyclic. Ascending id order is therefore a
    topological order (children before parents).

    Attributes:
        _nodes: Nodes in insertion order.

    """

    _nodes: list[Node] = field(default_factory=list, init=False, repr=False)

    def insert(self, node: Node) -> NodeId:
        """Append a node and return its id.

        Args:
            node: The node to append. Its children must already be in the arena.

        Returns:
            The id of the new node.

        Raises:
            TypeError: If ``node`` is not one of the node kinds.
            InvalidIdError: If a child id does not refer to an existing node.

        """
        if not isinstance(node, Node):
            msg = f"Expected an expression node, got {type(node).__name__}"
            raise TypeError(msg)

        if isinstance(node, BinaryNode):
            for child in (node.left, node.right):
                self._check(child)

        node_id = NodeId(len(self._nodes))
        self._nodes.append(node)
        return node_id

    def get(self, node_id: NodeId) -> Node:
        """Get the node with the given id.

        Raises:
            InvalidIdError: If ``node_id`` is out of bounds.

        """
        return self._nodes[self._check(node_id)]

    def children(self, node_id: NodeId) -> tuple[NodeId, ...]:
        """Get the direct children of a node (empty for leaves)."""
        node = self.get(node_id)
        if isinstance(node, BinaryNode):
            return (node.left, node.right)
        return ()

    def items(self) -> Iterator[tuple[NodeId, Node]]:
        """Iterate over ``(id, node)`` pairs in insertion order."""
        for index, node in enumerate(self._nodes):
            yield NodeId(index), node

    def _check(self, node_id: object) -> int:
        """Return ``node_id`` as a list index, or raise if it is not a valid id."""
        # bool is an int subclass but never a meaningful id
        if isinstance(node_id, bool):
            raise InvalidIdError(node_id, len(self._nodes))
        try:
            index = operator.index(node_id)
        except TypeError:
            raise InvalidIdError(node_id, len(self._nodes)) from None
        if not 0 <= index < len(self._nodes):
            raise InvalidIdError(node_id, len(self._nodes))
        return index

    def __len__(self) -> int:
        """Return the number of nodes in the arena."""
        return len(self._nodes)

    def __contains__(self, node_id: object) -> bool:
        """Check if an id refers to a node of this arena."""
        try:
            self._check(node_id)
        except InvalidIdError:
            return False
        return True

    def __iter__(self) -> Iterator[Node]:
        """Iterate over the nodes in insertion order."""
        return iter(self._nodes)
