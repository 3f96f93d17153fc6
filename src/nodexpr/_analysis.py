"""Structural queries over the nodes reachable from a given node.

None of these recurse: reachability uses an explicit stack, and the
per-node quantities (depth, tree size) are computed in ascending id order,
which is a topological order because children are always inserted before
their parents.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ._node import NodeKind, Variable

if TYPE_CHECKING:
    from ._arena import Arena
    from ._node import NodeId


@dataclass(frozen=True, slots=True)
class ExpressionStats:
    """Summary of the subtree rooted at one node.

    Attributes:
        node_count: Number of distinct nodes reachable from the root (root included).
        tree_size: Number of nodes once shared subexpressions are expanded into a tree.
        depth: Number of nodes on the longest root-to-leaf path.
        shared_nodes: Reachable nodes referenced by more than one reachable parent slot.
        kind_counts: Number of distinct reachable nodes per kind.
        required_bindings: Minimum length of a binding vector able to evaluate the subtree.

    """

    node_count: int
    tree_size: int
    depth: int
    shared_nodes: int
    kind_counts: dict[NodeKind, int] = field(default_factory=dict)
    required_bindings: int = 0


def reachable(arena: Arena, node_id: NodeId) -> frozenset[NodeId]:
    """Get all nodes reachable from ``node_id``, including itself.

    Raises:
        InvalidIdError: If ``node_id`` is not in the arena.

    """
    visited: set[NodeId] = set()
    stack = [node_id]
    while stack:
        current = stack.pop()
        if current not in visited:
            visited.add(current)
            stack.extend(arena.children(current))
    return frozenset(visited)


def depth(arena: Arena, node_id: NodeId) -> int:
    """Get the number of nodes on the longest path from ``node_id`` to a leaf."""
    depths: dict[NodeId, int] = {}
    for current in sorted(reachable(arena, node_id)):
        children = arena.children(current)
        depths[current] = 1 + max((depths[child] for child in children), default=0)
    return depths[node_id]


def variable_indices(arena: Arena, node_id: NodeId) -> frozenset[int]:
    """Get the indices of all variables reachable from ``node_id``."""
    indices: set[int] = set()
    for current in reachable(arena, node_id):
        node = arena.get(current)
        if isinstance(node, Variable):
            indices.add(node.index)
    return frozenset(indices)


def required_bindings(arena: Arena, node_id: NodeId) -> int:
    """Get the minimum binding vector length needed to evaluate ``node_id``."""
    return max((index + 1 for index in variable_indices(arena, node_id)), default=0)


def describe(arena: Arena, node_id: NodeId) -> ExpressionStats:
    """Compute the statistics of the subtree rooted at ``node_id``.

    Example:
        >>> from nodexpr import Expression
        >>> expr = Expression()
        >>> total = expr.add(expr.constant(5.0), expr.variable(0))
        >>> product = expr.mul(total, expr.variable(1))
        >>> stats = describe(expr.arena, product)
        >>> stats.depth, stats.required_bindings
        (3, 2)

    """
    nodes = sorted(reachable(arena, node_id))

    depths: dict[NodeId, int] = {}
    sizes: dict[NodeId, int] = {}
    references: Counter[NodeId] = Counter()
    kinds: Counter[NodeKind] = Counter()
    max_index = -1

    for current in nodes:
        node = arena.get(current)
        kinds[node.kind] += 1
        if isinstance(node, Variable):
            max_index = max(max_index, node.index)

        children = arena.children(current)
        references.update(children)
        depths[current] = 1 + max((depths[child] for child in children), default=0)
        sizes[current] = 1 + sum(sizes[child] for child in children)

    return ExpressionStats(
        node_count=len(nodes),
        tree_size=sizes[node_id],
        depth=depths[node_id],
        shared_nodes=sum(1 for count in references.values() if count > 1),
        kind_counts=dict(kinds),
        required_bindings=max_index + 1,
    )
