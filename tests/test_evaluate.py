"""Tests for point evaluation."""

import math

import numpy as np
import pytest

from nodexpr import (
    Arena,
    Constant,
    Expression,
    InvalidIdError,
    MalformedEvaluationStateError,
    NodeId,
    NodeKind,
    Precision,
    UnboundVariableError,
    evaluate_node,
)
from nodexpr._evaluate import _Apply, _Pending, _Resolved, _reduce


def _binary(builder: str, left: float, right: float) -> tuple[Expression, NodeId]:
    expression = Expression()
    a = expression.constant(left)
    b = expression.constant(right)
    return expression, getattr(expression, builder)(a, b)


class TestEvaluateNode:
    """Tests for evaluate_node on well-formed trees."""

    def test_product_expression(self, product_expression: tuple[Expression, NodeId]) -> None:
        """Should evaluate (5 + x) * y."""
        expression, product = product_expression
        assert evaluate_node(expression.arena, product, [2.0, 3.0]) == 21.0

    def test_subtree(self, product_expression: tuple[Expression, NodeId]) -> None:
        """Should evaluate an inner node on its own."""
        expression, _ = product_expression
        assert evaluate_node(expression.arena, NodeId(3), [2.0, 3.0]) == 7.0

    def test_constant(self) -> None:
        """Should return a constant's value."""
        arena = Arena()
        node = arena.insert(Constant(2.5))
        assert evaluate_node(arena, node) == 2.5

    def test_returns_python_float(self, product_expression: tuple[Expression, NodeId]) -> None:
        """Should return a plain float rather than a numpy scalar."""
        expression, product = product_expression
        assert type(expression.evaluate(product, [2.0, 3.0])) is float

    def test_numpy_bindings(self, product_expression: tuple[Expression, NodeId]) -> None:
        """Should accept a numpy array as the binding vector."""
        expression, product = product_expression
        assert expression.evaluate(product, np.array([2.0, 3.0])) == 21.0

    def test_extra_bindings_ignored(self, product_expression: tuple[Expression, NodeId]) -> None:
        """Should ignore bindings no variable reads."""
        expression, product = product_expression
        assert expression.evaluate(product, [2.0, 3.0, 100.0]) == 21.0

    def test_deterministic(self, product_expression: tuple[Expression, NodeId]) -> None:
        """Should give the same result on repeated evaluation."""
        expression, product = product_expression
        assert {expression.evaluate(product, [1.5, -4.0]) for _ in range(5)} == {-26.0}

    def test_shared_subexpression(self) -> None:
        """Should evaluate a node referenced twice once per reference."""
        expression = Expression()
        x = expression.variable(0)
        total = expression.add(x, expression.constant(1.0))
        square = expression.mul(total, total)
        assert expression.evaluate(square, [2.0]) == 9.0

    def test_nested_non_commutative(self) -> None:
        """Should keep operand order through nested non-commutative operations."""
        # (20 - (8 / 2)) ^ (3 - 1) = 256
        expression = Expression()
        inner = expression.div(expression.constant(8.0), expression.constant(2.0))
        base = expression.sub(expression.constant(20.0), inner)
        power = expression.sub(expression.constant(3.0), expression.constant(1.0))
        assert expression.evaluate(expression.exp(base, power)) == 256.0

    def test_both_operands_binary(self) -> None:
        """Should combine two binary subtrees."""
        # (10 - 4) / (1 + 2) = 2
        expression = Expression()
        left = expression.sub(expression.constant(10.0), expression.constant(4.0))
        right = expression.add(expression.constant(1.0), expression.constant(2.0))
        assert expression.evaluate(expression.div(left, right)) == 2.0


class TestOperandOrder:
    """Tests that the left operand is applied on the left."""

    def test_sub(self) -> None:
        """Should compute 10 - 3, not 3 - 10."""
        expression, node = _binary("sub", 10.0, 3.0)
        assert expression.evaluate(node) == 7.0

    def test_div(self) -> None:
        """Should compute 8 / 2, not 2 / 8."""
        expression, node = _binary("div", 8.0, 2.0)
        assert expression.evaluate(node) == 4.0

    def test_exp(self) -> None:
        """Should compute 2 ^ 3, not 3 ^ 2."""
        expression, node = _binary("exp", 2.0, 3.0)
        assert expression.evaluate(node) == 8.0

    def test_variables(self) -> None:
        """Should read operands by variable index, not by position."""
        expression = Expression()
        node = expression.sub(expression.variable(1), expression.variable(0))
        assert expression.evaluate(node, [1.0, 10.0]) == 9.0


class TestFloatingPointSemantics:
    """Tests for IEEE-754 results instead of exceptions."""

    def test_division_by_zero(self) -> None:
        """Should give +inf for 1 / 0."""
        expression, node = _binary("div", 1.0, 0.0)
        assert expression.evaluate(node) == math.inf

    def test_negative_division_by_zero(self) -> None:
        """Should give -inf for -1 / 0."""
        expression, node = _binary("div", -1.0, 0.0)
        assert expression.evaluate(node) == -math.inf

    def test_zero_over_zero(self) -> None:
        """Should give NaN for 0 / 0."""
        expression, node = _binary("div", 0.0, 0.0)
        assert math.isnan(expression.evaluate(node))

    def test_negative_base_fractional_exponent(self) -> None:
        """Should give NaN rather than a complex number."""
        expression, node = _binary("exp", -8.0, 0.5)
        assert math.isnan(expression.evaluate(node))

    def test_zero_to_negative_power(self) -> None:
        """Should give +inf for 0 ^ -1."""
        expression, node = _binary("exp", 0.0, -1.0)
        assert expression.evaluate(node) == math.inf

    def test_nan_propagates(self) -> None:
        """Should carry NaN through later operations."""
        expression = Expression()
        nan = expression.exp(expression.constant(-8.0), expression.constant(0.5))
        total = expression.add(nan, expression.constant(1.0))
        assert math.isnan(expression.evaluate(total))

    def test_nan_binding_propagates(self) -> None:
        """Should carry a NaN binding through multiplication by zero."""
        expression = Expression()
        node = expression.mul(expression.variable(0), expression.constant(0.0))
        assert math.isnan(expression.evaluate(node, [math.nan]))


class TestPrecision:
    """Tests for the arithmetic width."""

    def test_double_is_default(self) -> None:
        """Should use binary64 unless asked otherwise."""
        expression, node = _binary("add", 16777216.0, 1.0)
        assert expression.evaluate(node) == 16777217.0

    def test_single(self) -> None:
        """Should round every step to binary32."""
        expression, node = _binary("add", 16777216.0, 1.0)
        assert expression.evaluate(node, precision=Precision.SINGLE) == 16777216.0

    def test_single_rounds_bindings(self) -> None:
        """Should round bindings to binary32."""
        expression = Expression()
        node = expression.variable(0)
        assert expression.evaluate(node, [0.1], precision=Precision.SINGLE) == float(np.float32(0.1))

    def test_precision_by_name(self) -> None:
        """Should accept the precision's string value."""
        expression, node = _binary("add", 16777216.0, 1.0)
        assert expression.evaluate(node, precision="single") == 16777216.0  # type: ignore[arg-type]

    def test_dtype(self) -> None:
        """Should map each precision to its numpy scalar type."""
        assert Precision.SINGLE.dtype is np.float32
        assert Precision.DOUBLE.dtype is np.float64


class TestErrors:
    """Tests for evaluation errors."""

    def test_unbound_variable(self) -> None:
        """Should raise UnboundVariableError with the index and binding count."""
        expression = Expression()
        node = expression.add(expression.variable(5), expression.constant(1.0))
        with pytest.raises(UnboundVariableError) as exc_info:
            expression.evaluate(node, [1.0, 2.0])
        assert exc_info.value.index == 5
        assert exc_info.value.bindings_length == 2

    def test_unbound_variable_without_bindings(self) -> None:
        """Should raise UnboundVariableError when no bindings are given."""
        expression = Expression()
        node = expression.variable(0)
        with pytest.raises(UnboundVariableError, match="Variable 0 is unbound"):
            expression.evaluate(node)

    def test_invalid_id(self) -> None:
        """Should raise InvalidIdError for an id outside the arena."""
        arena = Arena()
        arena.insert(Constant(1.0))
        with pytest.raises(InvalidIdError):
            evaluate_node(arena, NodeId(1))

    def test_malformed_error_is_runtime_error(self) -> None:
        """Should be catchable as RuntimeError."""
        assert issubclass(MalformedEvaluationStateError, RuntimeError)


class TestWorkStack:
    """Tests for the step that folds a resolved value into the work stack."""

    def test_swaps_with_pending_sibling(self) -> None:
        """Should move a resolved left operand below its pending right sibling."""
        stack = [_Apply(NodeKind.ADD), _Pending(NodeId(0)), _Resolved(np.float64(1.0))]
        _reduce(stack)
        assert stack == [_Apply(NodeKind.ADD), _Resolved(np.float64(1.0)), _Pending(NodeId(0))]

    def test_applies_left_op_right(self) -> None:
        """Should replace marker and operands with ``left <op> right``."""
        stack = [_Apply(NodeKind.SUB), _Resolved(np.float64(10.0)), _Resolved(np.float64(3.0))]
        _reduce(stack)
        assert len(stack) == 1
        assert stack[0].value == 7.0

    def test_keeps_entries_below_the_marker(self) -> None:
        """Should leave the rest of the stack untouched after combining."""
        stack = [
            _Apply(NodeKind.MUL),
            _Pending(NodeId(4)),
            _Apply(NodeKind.DIV),
            _Resolved(np.float64(8.0)),
            _Resolved(np.float64(2.0)),
        ]
        _reduce(stack)
        assert stack[:2] == [_Apply(NodeKind.MUL), _Pending(NodeId(4))]
        assert stack[2].value == 4.0

    def test_two_values_without_marker(self) -> None:
        """Should raise MalformedEvaluationStateError for operands with no operator."""
        stack = [_Resolved(np.float64(1.0)), _Resolved(np.float64(2.0))]
        with pytest.raises(MalformedEvaluationStateError, match="without an operator"):
            _reduce(stack)

    def test_two_values_over_pending(self) -> None:
        """Should raise MalformedEvaluationStateError when a pending entry sits under two values."""
        stack = [_Pending(NodeId(0)), _Resolved(np.float64(1.0)), _Resolved(np.float64(2.0))]
        with pytest.raises(MalformedEvaluationStateError, match="without an operator"):
            _reduce(stack)

    def test_marker_with_one_operand(self) -> None:
        """Should raise MalformedEvaluationStateError for an operator missing an operand."""
        stack = [_Apply(NodeKind.ADD), _Resolved(np.float64(1.0))]
        with pytest.raises(MalformedEvaluationStateError, match="only one resolved operand"):
            _reduce(stack)


class TestDeepTrees:
    """Tests that evaluation depth is not limited by the call stack."""

    depth = 100_000

    def test_left_leaning_chain(self) -> None:
        """Should evaluate ((1 + 1) + 1) + ... without recursion."""
        expression = Expression()
        one = expression.constant(1.0)
        node = one
        for _ in range(self.depth):
            node = expression.add(node, one)
        assert expression.evaluate(node) == self.depth + 1

    def test_right_leaning_chain(self) -> None:
        """Should evaluate x - (x - (x - ...)) without recursion."""
        expression = Expression()
        x = expression.variable(0)
        node = expression.constant(0.0)
        for _ in range(self.depth):
            node = expression.sub(x, node)
        # x - (x - (x - ... (x - 0))) alternates between x and 0
        assert expression.evaluate(node, [3.0]) == 0.0

    def test_left_leaning_subtraction(self) -> None:
        """Should keep operand order along a deep left spine."""
        expression = Expression()
        one = expression.constant(1.0)
        node = expression.constant(float(self.depth))
        for _ in range(self.depth):
            node = expression.sub(node, one)
        assert expression.evaluate(node) == 0.0
