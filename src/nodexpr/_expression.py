"""Expression: an arena of nodes plus an optional root."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ._arena import Arena
from ._errors import InvalidIdError
from ._evaluate import Precision, evaluate_node
from ._format import format_node
from ._node import Add, Constant, Div, Exp, Mul, Node, NodeId, Sub, Variable

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence


@dataclass(slots=True)
class Expression:
    """An expression tree built bottom-up in an arena.

    Children must be inserted before the nodes that reference them; every
    insertion returns the id of the new node, which is then used to build
    its parents.

    The root is a convenience only. Formatting and evaluation accept any id
    of the expression, and when no id is given they use ``root``, which is
    the node pinned with ``set_root`` or, if none was pinned, the most
    recently inserted node.

    Example:
        >>> expr = Expression()
        >>> total = expr.add(expr.constant(5.0), expr.variable(0))
        >>> product = expr.mul(total, expr.variable(1))
        >>> expr.format(product)
        '((5 + Var(0)) * Var(1))'
        >>> expr.evaluate(product, [2.0, 3.0])
        21.0

    Attributes:
        arena: The arena holding the nodes.

    """

    arena: Arena = field(default_factory=Arena)
    _root: NodeId | None = field(default=None, init=False)

    @classmethod
    def from_nodes(cls, nodes: Iterable[Node], root: NodeId | None = None) -> Expression:
        """Build an expression by inserting the nodes in order.

        Raises:
            InvalidIdError: If a node references a child that comes later (or not at all).

        """
        expression = cls()
        for node in nodes:
            expression.insert(node)
        if root is not None:
            expression.set_root(root)
        return expression

    def insert(self, node: Node) -> NodeId:
        """Append a node to the arena and return its id."""
        return self.arena.insert(node)

    def get(self, node_id: NodeId) -> Node:
        """Get the node with the given id."""
        return self.arena.get(node_id)

    @property
    def root(self) -> NodeId:
        """The pinned root, or the most recently inserted node.

        Raises:
            InvalidIdError: If the expression is empty.

        """
        if self._root is not None:
            return self._root
        if not self.arena:
            raise InvalidIdError(None, 0)
        return NodeId(len(self.arena) - 1)

    def set_root(self, node_id: NodeId) -> None:
        """Pin the root of the expression to an existing node."""
        self.arena.get(node_id)
        self._root = node_id

    def constant(self, value: float) -> NodeId:
        """Insert a ``Constant`` (rounded to 32-bit precision) and return its id."""
        return self.insert(Constant(value))

    def variable(self, index: int) -> NodeId:
        """Insert a ``Variable`` reading binding ``index`` and return its id."""
        return self.insert(Variable(index))

    def add(self, left: NodeId, right: NodeId) -> NodeId:
        """Insert ``left + right`` and return its id."""
        return self.insert(Add(left, right))

    def sub(self, left: NodeId, right: NodeId) -> NodeId:
        """Insert ``left - right`` and return its id."""
        return self.insert(Sub(left, right))

    def mul(self, left: NodeId, right: NodeId) -> NodeId:
        """Insert ``left * right`` and return its id."""
        return self.insert(Mul(left, right))

    def div(self, left: NodeId, right: NodeId) -> NodeId:
        """Insert ``left / right`` and return its id."""
        return self.insert(Div(left, right))

    def exp(self, left: NodeId, right: NodeId) -> NodeId:
        """Insert ``left ^ right`` (``left`` raised to ``right``) and return its id."""
        return self.insert(Exp(left, right))

    def format(self, node_id: NodeId | None = None) -> str:
        """Render a subtree (the root by default) as parenthesized infix text."""
        return format_node(self.arena, self.root if node_id is None else node_id)

    def evaluate(
        self,
        node_id: NodeId | None = None,
        bindings: Sequence[float] = (),
        *,
        precision: Precision = Precision.DOUBLE,
    ) -> float:
        """Evaluate a subtree (the root by default) against a binding vector."""
        return evaluate_node(
            self.arena,
            self.root if node_id is None else node_id,
            bindings,
            precision=precision,
        )

    def __len__(self) -> int:
        """Return the number of nodes in the expression."""
        return len(self.arena)
