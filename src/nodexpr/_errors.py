"""Exceptions raised by the expression core."""


class NodexprError(Exception):
    """Base class for all nodexpr errors."""


class InvalidIdError(NodexprError, IndexError):
    """Raised when a node id does not refer to an entry of the arena."""

    def __init__(self, node_id: object, size: int) -> None:
        self.node_id = node_id
        self.size = size
        super().__init__(f"Invalid node id {node_id!r} for arena of size {size}")


class UnboundVariableError(NodexprError, IndexError):
    """Raised when a variable index is out of range for the supplied bindings."""

    def __init__(self, index: int, bindings_length: int) -> None:
        self.index = index
        self.bindings_length = bindings_length
        super().__init__(f"Variable {index} is unbound ({bindings_length} binding(s) supplied)")


class MalformedEvaluationStateError(NodexprError, RuntimeError):
    """Raised when the evaluation work stack is not in the expected shape.

    Arenas built through ``Arena.insert`` never reach this state, so seeing it
    means there is a bug in the evaluator or in code that bypassed insertion.
    """
