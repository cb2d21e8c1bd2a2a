"""Output formats for discovered trees and execution summaries (rich, json, porcelain)."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from rich.markup import escape

from archengine.core.results import Status

if TYPE_CHECKING:
    from rich.console import Console
    from rich.tree import Tree

    from archengine.core.descriptor import DescriptorNode
    from archengine.execution.coordinator import ExecutionSummary

_STATUS_MARKERS: dict[Status, str] = {
    Status.SUCCESSFUL: "[green]ok[/]",
    Status.FAILED: "[red]x[/]",
    Status.ABORTED: "[yellow]aborted[/]",
}

# ---------------------------------------------------------------------------
# Discovery trees
# ---------------------------------------------------------------------------


def _node_label(node: DescriptorNode) -> str:
    name = escape(node.display_name)
    label = f"[bold]{name}[/]" if node.is_container else name
    if node.declared_tags:
        label += " [dim]#" + " #".join(sorted(tag.name for tag in node.declared_tags)) + "[/]"
    if node.ignored_reason is not None:
        label += f" [yellow](ignored: {escape(node.ignored_reason or 'no reason')})[/]"
    return label


def _add_branch(node: DescriptorNode, branch: Tree) -> None:
    for child in node.children:
        _add_branch(child, branch.add(_node_label(child)))


def render_tree(root: DescriptorNode, console: Console) -> None:
    """Render a discovered tree with Rich."""
    from rich.tree import Tree

    if not root.children:
        console.print("[dim]No rules discovered.[/]")
        return
    tree = Tree(_node_label(root))
    _add_branch(root, tree)
    console.print(tree)
    rules = sum(1 for node in root.walk() if node.is_test)
    console.print(f"\n{rules} rules in {len(root.children)} classes")


def node_to_dict(node: DescriptorNode) -> dict[str, object]:
    """Convert a descriptor node (and its subtree) to a JSON-compatible dict."""
    return {
        "unique_id": str(node.unique_id),
        "display_name": node.display_name,
        "type": node.type.value,
        "tags": sorted(tag.name for tag in node.tags),
        "ignored": node.ignored_reason,
        "children": [node_to_dict(child) for child in node.children],
    }


def format_tree_json(root: DescriptorNode) -> str:
    return json.dumps(node_to_dict(root), indent=2)


def format_tree_porcelain(root: DescriptorNode) -> str:
    """One line per rule: ``unique_id:tag,tag``. Empty string when nothing was discovered."""
    lines = [
        f"{node.unique_id}:{','.join(sorted(tag.name for tag in node.tags))}"
        for node in root.walk()
        if node.is_test
    ]
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Execution summaries
# ---------------------------------------------------------------------------


def format_summary_rich(summary: ExecutionSummary) -> str:
    """Format an execution summary as Rich markup.

    Example output with failures::

        x [engine:archengine]/[class:shop.Arch]/[field:domain_is_pure]
          Architecture Violation [rule 'classes that ...'] was violated (1 times):
          Class <shop.domain.Order> does depend on 'shop.web'

        1 of 3 rules failed, 0 skipped (0.2s)
    """
    lines: list[str] = []
    for node, result in summary.failures:
        lines.append(f"{_STATUS_MARKERS[result.status]} {escape(str(node.unique_id))}")
        if result.message:
            lines.extend(f"  {escape(line)}" for line in result.message.splitlines())
        lines.append("")

    elapsed_s = summary.elapsed_ms / 1000
    if summary.has_failures:
        broken = summary.failed + summary.aborted
        lines.append(
            f"[red]{broken} of {summary.tests_started} rules failed[/], "
            f"{summary.skipped} skipped ({elapsed_s:.1f}s)"
        )
    else:
        lines.append(
            f"[green]All {summary.tests_started} rules passed[/], "
            f"{summary.skipped} skipped ({elapsed_s:.1f}s)"
        )
    return "\n".join(lines)


def format_summary_json(summary: ExecutionSummary) -> str:
    failures = [
        {
            "unique_id": str(node.unique_id),
            "status": result.status.value,
            "message": result.message,
            "cause": type(result.cause).__name__ if result.cause is not None else None,
        }
        for node, result in summary.failures
    ]
    output: dict[str, object] = {
        "failures": failures,
        "summary": {
            "tests_started": summary.tests_started,
            "succeeded": summary.succeeded,
            "failed": summary.failed,
            "aborted": summary.aborted,
            "skipped": summary.skipped,
            "elapsed_ms": summary.elapsed_ms,
        },
    }
    return json.dumps(output, indent=2)


def format_summary_porcelain(summary: ExecutionSummary) -> str:
    """One line per failed rule: ``status:unique_id``. Empty string when all passed."""
    return "\n".join(f"{result.status.value}:{node.unique_id}" for node, result in summary.failures)
