"""Point evaluation of expression trees."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum, auto
from typing import TYPE_CHECKING, TypeAlias

import numpy as np

from ._errors import MalformedEvaluationStateError, UnboundVariableError
from ._node import Add, Constant, Div, Exp, Mul, NodeKind, Sub, Variable

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from ._arena import Arena
    from ._node import NodeId

logger = logging.getLogger(__name__)


class Precision(StrEnum):
    """Floating-point width used for arithmetic during evaluation."""

    SINGLE = auto()  # binary32
    DOUBLE = auto()  # binary64

    @property
    def dtype(self) -> type[np.floating]:
        """The numpy scalar type used for this precision."""
        return np.float32 if self is Precision.SINGLE else np.float64


_OPERATIONS: dict[NodeKind, Callable[[np.floating, np.floating], np.floating]] = {
    NodeKind.ADD: np.add,
    NodeKind.SUB: np.subtract,
    NodeKind.MUL: np.multiply,
    NodeKind.DIV: np.divide,
    NodeKind.EXP: np.power,
}


@dataclass(frozen=True, slots=True)
class _Pending:
    """A subtree that has not been evaluated yet."""

    node_id: NodeId


@dataclass(frozen=True, slots=True)
class _Apply:
    """Marker for a binary operation waiting for its two operands."""

    kind: NodeKind


@dataclass(frozen=True, slots=True)
class _Resolved:
    """The value of a fully evaluated subtree."""

    value: np.floating


_Token: TypeAlias = _Pending | _Apply | _Resolved


def _lookup(bindings: Sequence[float], index: int, dtype: type[np.floating]) -> np.floating:
    if index >= len(bindings):
        raise UnboundVariableError(index, len(bindings))
    return dtype(bindings[index])


def _reduce(stack: list[_Token]) -> None:
    """Fold a resolved value on top of the stack into the entry below it.

    A pending sibling below is swapped to the top so it is evaluated next.
    A resolved value below means both operands are ready, and together with
    the marker under them they are replaced by the result.

    Raises:
        MalformedEvaluationStateError: If the entries below the value fit neither shape.

    """
    top = stack[-1]
    below = stack[-2]
    match below:
        case _Pending():
            # Left operand done; evaluate its sibling next
            stack[-2], stack[-1] = top, below
        case _Resolved(left):
            if len(stack) < 3 or not isinstance(stack[-3], _Apply):  # noqa: PLR2004
                msg = f"Two resolved values without an operator below them: {stack[-3:]!r}"
                raise MalformedEvaluationStateError(msg)
            marker = stack[-3]
            del stack[-3:]
            stack.append(_Resolved(_OPERATIONS[marker.kind](left, top.value)))
        case _:
            msg = f"Operator {below!r} has only one resolved operand"
            raise MalformedEvaluationStateError(msg)


def evaluate_node(
    arena: Arena,
    node_id: NodeId,
    bindings: Sequence[float] = (),
    *,
    precision: Precision = Precision.DOUBLE,
) -> float:
    """Evaluate the subtree rooted at ``node_id``.

    The tree is walked with a single explicit stack holding pending
    subtrees, operator markers and resolved values, simulating a post-order
    traversal without recursion. Expanding a binary node pushes its marker,
    then its right subtree, then its left subtree. When the left operand is
    resolved it is swapped below the still pending right subtree, so once
    both are resolved the stack reads ``marker, left, right`` from bottom to
    top and the operation is applied as ``left <op> right``.

    Arithmetic follows IEEE-754 semantics: division by zero gives an
    infinity, a negative base with a fractional exponent gives NaN, and NaN
    propagates.

    Args:
        arena: The arena holding the nodes.
        node_id: Root of the subtree to evaluate.
        bindings: Values of the variables, indexed by ``Variable.index``.
        precision: Floating-point width used for the arithmetic.

    Returns:
        The value of the subtree.

    Raises:
        InvalidIdError: If ``node_id`` or any id reached from it is not in the arena.
        UnboundVariableError: If a variable index is out of range for ``bindings``.
        MalformedEvaluationStateError: If the work stack ends up in an unexpected shape.

    """
    precision = Precision(precision)
    logger.debug(
        "Evaluating node %s of arena with %d nodes (%d bindings, %s precision)",
        node_id,
        len(arena),
        len(bindings),
        precision,
    )
    dtype = precision.dtype
    stack: list[_Token] = [_Pending(node_id)]

    with np.errstate(all="ignore"):
        while stack:
            top = stack[-1]
            match top:
                case _Pending(current):
                    stack.pop()
                    node = arena.get(current)
                    match node:
                        case Constant(value):
                            stack.append(_Resolved(dtype(value)))
                        case Variable(index):
                            stack.append(_Resolved(_lookup(bindings, index, dtype)))
                        case Add() | Sub() | Mul() | Div() | Exp():
                            stack.append(_Apply(node.kind))
                            stack.append(_Pending(node.right))
                            stack.append(_Pending(node.left))
                        case _:
                            msg = f"Unknown node type: {type(node)}"
                            raise TypeError(msg)

                case _Resolved(value):
                    if len(stack) == 1:
                        return float(value)
                    _reduce(stack)

                case _Apply():
                    msg = f"Operator {top!r} reached with no resolved operands"
                    raise MalformedEvaluationStateError(msg)

    msg = "Evaluation work stack emptied without producing a value"
    raise MalformedEvaluationStateError(msg)
