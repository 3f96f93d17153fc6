"""Rich rendering utilities for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.panel import Panel
from rich.table import Table

from nodexpr._node import NodeKind

if TYPE_CHECKING:
    from rich.console import Console

    from nodexpr._analysis import ExpressionStats
    from nodexpr._node import NodeId

_KIND_STYLES = {
    NodeKind.VARIABLE: "yellow",
    NodeKind.CONSTANT: "green",
}


def _get_kind_style(kind: NodeKind) -> str:
    return _KIND_STYLES.get(kind, "cyan")


def render_stats(stats: ExpressionStats, node_id: NodeId, total_nodes: int, console: Console) -> None:
    """Render expression statistics as a Rich panel.

    Args:
        stats: Statistics of the subtree.
        node_id: Root of the described subtree.
        total_nodes: Number of nodes in the whole arena.
        console: Rich Console to output to.

    """
    summary = Table(show_header=False, box=None)
    summary.add_column("Property", style="cyan")
    summary.add_column("Value", justify="right")
    summary.add_row("Reachable nodes", f"{stats.node_count} / {total_nodes}")
    summary.add_row("Expanded tree size", str(stats.tree_size))
    summary.add_row("Depth", str(stats.depth))
    summary.add_row("Shared nodes", str(stats.shared_nodes))
    summary.add_row("Required bindings", str(stats.required_bindings))

    kinds = Table(show_header=True, header_style="bold cyan")
    kinds.add_column("Kind", style="bold")
    kinds.add_column("Count", justify="right")
    for kind in NodeKind:
        count = stats.kind_counts.get(kind, 0)
        if count:
            style = _get_kind_style(kind)
            kinds.add_row(f"[{style}]{kind.upper()}[/{style}]", str(count))

    console.print(Panel(summary, title=f"[bold]Node {node_id}[/bold]", border_style="cyan"))
    console.print(kinds)
