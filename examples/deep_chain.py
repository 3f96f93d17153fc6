"""Build a deeply nested expression and export it to TOML.

Usage:
    python examples/deep_chain.py chain.toml 200000
    nodexpr check chain.toml
    nodexpr eval chain.toml -b 0.5
"""

import sys
from pathlib import Path

import nodexpr as nx


def build_chain(depth: int) -> nx.Expression:
    """Build ``((((x * 0.5) + 1) * 0.5) + 1) ...`` nested ``depth`` times."""
    expression = nx.Expression()
    x = expression.variable(0)
    half = expression.constant(0.5)
    one = expression.constant(1.0)

    node = x
    for _ in range(depth):
        node = expression.add(expression.mul(node, half), one)
    return expression


def main() -> None:
    output = Path(sys.argv[1]) if len(sys.argv) > 1 else Path("chain.toml")
    depth = int(sys.argv[2]) if len(sys.argv) > 2 else 100_000  # noqa: PLR2004

    expression = build_chain(depth)
    # Converges to 2 regardless of x
    print(f"value at x=0.5: {expression.evaluate(bindings=[0.5])}")  # noqa: T201
    nx.export_to_toml(expression, output, bindings=[0.5])
    print(f"wrote {len(expression)} nodes to {output}")  # noqa: T201


if __name__ == "__main__":
    main()
