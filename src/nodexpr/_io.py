"""Loading and exporting expressions as TOML documents."""

from __future__ import annotations

import logging
import tomllib
from typing import TYPE_CHECKING, Annotated, Literal

import tomli_w
from pydantic import BaseModel, Field, NonNegativeInt

from ._expression import Expression
from ._node import BINARY_NODE_TYPES, Add, Constant, Div, Exp, Mul, Node, NodeId, NodeKind, Sub, Variable

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

logger = logging.getLogger(__name__)


class ConstantRecord(BaseModel):
    """A ``Constant`` node in a document."""

    kind: Literal["constant"]
    value: float


class VariableRecord(BaseModel):
    """A ``Variable`` node in a document."""

    kind: Literal["variable"]
    index: NonNegativeInt


class BinaryRecord(BaseModel):
    """A binary node in a document, referencing earlier entries by position."""

    kind: Literal["add", "sub", "mul", "div", "exp"]
    left: NonNegativeInt
    right: NonNegativeInt


NodeRecord = Annotated[ConstantRecord | VariableRecord | BinaryRecord, Field(discriminator="kind")]


class ExpressionDocument(BaseModel):
    """Serialized form of an expression.

    Nodes are listed in insertion order and binary nodes refer to earlier
    entries by their position in ``nodes``.

    Attributes:
        root: Position of the root node. Defaults to the last node.
        nodes: The nodes of the expression.
        bindings: Default binding vector for evaluating the expression.

    """

    root: NonNegativeInt | None = None
    nodes: list[NodeRecord] = Field(default_factory=list)
    bindings: list[float] = Field(default_factory=list)


def _record_to_node(record: ConstantRecord | VariableRecord | BinaryRecord) -> Node:
    match record:
        case ConstantRecord(value=value):
            return Constant(value)
        case VariableRecord(index=index):
            return Variable(index)
        case BinaryRecord(kind=kind, left=left, right=right):
            return BINARY_NODE_TYPES[NodeKind(kind)](NodeId(left), NodeId(right))
        case _:
            msg = f"Unknown record type: {type(record)}"
            raise TypeError(msg)


def _node_to_record(node: Node) -> ConstantRecord | VariableRecord | BinaryRecord:
    match node:
        case Constant(value):
            return ConstantRecord(kind="constant", value=value)
        case Variable(index):
            return VariableRecord(kind="variable", index=index)
        case Add() | Sub() | Mul() | Div() | Exp():
            return BinaryRecord(kind=node.kind.value, left=node.left, right=node.right)
        case _:
            msg = f"Unknown node type: {type(node)}"
            raise TypeError(msg)


def document_to_expression(document: ExpressionDocument) -> Expression:
    """Build an expression from a validated document.

    Raises:
        InvalidIdError: If a node references a later or missing entry, or the root is out of range.

    """
    root = NodeId(document.root) if document.root is not None else None
    return Expression.from_nodes((_record_to_node(record) for record in document.nodes), root=root)


def expression_to_document(expression: Expression, bindings: Sequence[float] = ()) -> ExpressionDocument:
    """Convert an expression to its document form."""
    return ExpressionDocument(
        root=expression.root if len(expression) else None,
        nodes=[_node_to_record(node) for node in expression.arena],
        bindings=list(bindings),
    )


def load_document(path: Path) -> ExpressionDocument:
    """Load and validate an expression document from a TOML file.

    Raises:
        tomllib.TOMLDecodeError: If the file is not valid TOML.
        pydantic.ValidationError: If the content does not match the document schema.

    """
    with path.open("rb") as f:
        data = tomllib.load(f)
    document = ExpressionDocument.model_validate(data)
    logger.debug("Loaded %d nodes from %s", len(document.nodes), path)
    return document


def export_to_toml(expression: Expression, path: Path, bindings: Sequence[float] = ()) -> None:
    """Write an expression (and optional default bindings) to a TOML file."""
    document = expression_to_document(expression, bindings)
    data = document.model_dump(mode="python", exclude_none=True)

    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("wb") as f:
        tomli_w.dump(data, f)
    logger.debug("Exported %d nodes to %s", len(document.nodes), path)
