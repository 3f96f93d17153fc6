"""Node kinds of an expression tree."""

import operator
from dataclasses import dataclass
from enum import StrEnum, auto
from typing import ClassVar, NewType

import numpy as np

NodeId = NewType("NodeId", int)
"""Stable handle of a node inside one arena."""


class NodeKind(StrEnum):
    """The kind of a node in an expression tree."""

    ADD = auto()
    SUB = auto()
    MUL = auto()
    DIV = auto()
    EXP = auto()
    VARIABLE = auto()
    CONSTANT = auto()

    @property
    def is_binary(self) -> bool:
        """Check if nodes of this kind have two children."""
        return self in OPERATOR_SYMBOLS


# Infix symbol of every binary node kind
OPERATOR_SYMBOLS: dict[NodeKind, str] = {
    NodeKind.ADD: "+",
    NodeKind.SUB: "-",
    NodeKind.MUL: "*",
    NodeKind.DIV: "/",
    NodeKind.EXP: "^",
}


@dataclass(frozen=True, slots=True)
class Add:
    """``left + right``."""

    left: NodeId
    right: NodeId

    kind: ClassVar[NodeKind] = NodeKind.ADD


@dataclass(frozen=True, slots=True)
class Sub:
    """``left - right``."""

    left: NodeId
    right: NodeId

    kind: ClassVar[NodeKind] = NodeKind.SUB


@dataclass(frozen=True, slots=True)
class Mul:
    """``left * right``."""

    left: NodeId
    right: NodeId

    kind: ClassVar[NodeKind] = NodeKind.MUL


@dataclass(frozen=True, slots=True)
class Div:
    """``left / right``."""

    left: NodeId
    right: NodeId

    kind: ClassVar[NodeKind] = NodeKind.DIV


@dataclass(frozen=True, slots=True)
class Exp:
    """``left`` raised to the power ``right``."""

    left: NodeId
    right: NodeId

    kind: ClassVar[NodeKind] = NodeKind.EXP


@dataclass(frozen=True, slots=True)
class Variable:
    """Reference to ``bindings[index]`` at evaluation time.

    The index is not checked against any binding vector here; that only
    happens when the expression is evaluated.
    """

    index: int

    kind: ClassVar[NodeKind] = NodeKind.VARIABLE

    def __post_init__(self) -> None:
        object.__setattr__(self, "index", operator.index(self.index))
        if self.index < 0:
            msg = f"Variable index must be non-negative, got {self.index}"
            raise ValueError(msg)


@dataclass(frozen=True, slots=True)
class Constant:
    """Literal value, stored with 32-bit precision.

    The value is rounded to the nearest binary32 float on construction, so
    ``Constant(0.1).value == float(numpy.float32(0.1))``.
    """

    value: float

    kind: ClassVar[NodeKind] = NodeKind.CONSTANT

    def __post_init__(self) -> None:
        with np.errstate(over="ignore"):
            object.__setattr__(self, "value", float(np.float32(self.value)))


BinaryNode = Add | Sub | Mul | Div | Exp
LeafNode = Variable | Constant
Node = BinaryNode | LeafNode

BINARY_NODE_TYPES: dict[NodeKind, type[BinaryNode]] = {
    NodeKind.ADD: Add,
    NodeKind.SUB: Sub,
    NodeKind.MUL: Mul,
    NodeKind.DIV: Div,
    NodeKind.EXP: Exp,
}
