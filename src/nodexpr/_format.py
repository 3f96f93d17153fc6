"""Infix text rendering of expression trees."""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

import numpy as np

from ._node import OPERATOR_SYMBOLS, Add, Constant, Div, Exp, Mul, Sub, Variable

if TYPE_CHECKING:
    from ._arena import Arena
    from ._node import NodeId

logger = logging.getLogger(__name__)


def format_constant(value: float) -> str:
    """Render a constant as the shortest decimal text that round-trips as a 32-bit float.

    Positional notation is always used and a trailing ``.0`` is dropped.

    Example:
        >>> format_constant(5.0)
        '5'
        >>> format_constant(0.1)
        '0.1'

    """
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    return np.format_float_positional(np.float32(value), unique=True, trim="-")


def format_node(arena: Arena, node_id: NodeId) -> str:
    """Render the subtree rooted at ``node_id`` as fully parenthesized infix text.

    The tree is walked with an explicit work stack instead of recursion, so
    the depth of the tree is bounded by memory rather than by the Python
    call stack. Each stack entry is either a ``str`` (text emitted as is) or
    an ``int`` (a subtree still to be expanded).

    Args:
        arena: The arena holding the nodes.
        node_id: Root of the subtree to render.

    Returns:
        The rendered text, e.g. ``((5 + Var(0)) * Var(1))``.

    Raises:
        InvalidIdError: If ``node_id`` or any id reached from it is not in the arena.

    """
    logger.debug("Formatting node %s of arena with %d nodes", node_id, len(arena))

    # A non-integer seed would otherwise be emitted as literal text
    arena.get(node_id)

    output: list[str] = []
    stack: list[str | NodeId] = [node_id]

    while stack:
        token = stack.pop()
        if isinstance(token, str):
            output.append(token)
            continue

        node = arena.get(token)
        match node:
            case Variable(index):
                output.append(f"Var({index})")
            case Constant(value):
                output.append(format_constant(value))
            case Add() | Sub() | Mul() | Div() | Exp():
                # LIFO: pushed in reverse reading order
                stack.append(")")
                stack.append(node.right)
                stack.append(f" {OPERATOR_SYMBOLS[node.kind]} ")
                stack.append(node.left)
                stack.append("(")
            case _:
                msg = f"Unknown node type: {type(node)}"
                raise TypeError(msg)

    return "".join(output)
