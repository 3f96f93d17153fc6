import pytest

from nodexpr import Expression, NodeId


@pytest.fixture
def product_expression() -> tuple[Expression, NodeId]:
    """Build ``(5 + Var(0)) * Var(1)`` bottom-up."""
    expression = Expression()
    five = expression.constant(5.0)
    x = expression.variable(0)
    y = expression.variable(1)
    total = expression.add(five, x)
    product = expression.mul(total, y)
    return expression, product
