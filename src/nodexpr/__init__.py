"""Arena-backed arithmetic expression trees with iterative formatting and evaluation."""

__all__ = [
    "Add",
    "Arena",
    "BinaryNode",
    "Constant",
    "Div",
    "Exp",
    "Expression",
    "ExpressionDocument",
    "ExpressionStats",
    "InvalidIdError",
    "LeafNode",
    "MalformedEvaluationStateError",
    "Mul",
    "Node",
    "NodeId",
    "NodeKind",
    "NodexprError",
    "Precision",
    "Sub",
    "UnboundVariableError",
    "Variable",
    "depth",
    "describe",
    "document_to_expression",
    "evaluate_node",
    "export_to_toml",
    "expression_to_document",
    "format_constant",
    "format_node",
    "load_document",
    "reachable",
    "required_bindings",
    "variable_indices",
]

from ._analysis import ExpressionStats, depth, describe, reachable, required_bindings, variable_indices
from ._arena import Arena
from ._errors import InvalidIdError, MalformedEvaluationStateError, NodexprError, UnboundVariableError
from ._evaluate import Precision, evaluate_node
from ._expression import Expression
from ._format import format_constant, format_node
from ._io import ExpressionDocument, document_to_expression, export_to_toml, expression_to_document, load_document
from ._node import Add, BinaryNode, Constant, Div, Exp, LeafNode, Mul, Node, NodeId, NodeKind, Sub, Variable
