"""Tests for archengine.reporting — tree and summary output formats."""

from __future__ import annotations

import io
import json
from typing import TYPE_CHECKING

from rich.console import Console

from archengine.core.descriptor import DescriptorNode, NodeType
from archengine.core.results import TestResult
from archengine.discovery.builder import DescriptorTreeBuilder
from archengine.discovery.reflection import InspectReflector
from archengine.execution.coordinator import ExecutionSummary
from archengine.reporting import (
    format_summary_json,
    format_summary_porcelain,
    format_summary_rich,
    format_tree_json,
    format_tree_porcelain,
    node_to_dict,
    render_tree,
)
from testexamples.inherited_rules import IgnoredRules
from testexamples.subtwo.simple_rules import SimpleRules
from testexamples.tags.class_with_tags import ClassWithTags

if TYPE_CHECKING:
    from archengine.core.unique_id import UniqueId


def _tree(engine_id: UniqueId, *classes: type) -> DescriptorNode:
    return DescriptorTreeBuilder(InspectReflector()).build(engine_id, list(classes))


def _render(root: DescriptorNode) -> str:
    buffer = io.StringIO()
    render_tree(root, Console(file=buffer, width=200, color_system=None))
    return buffer.getvalue()


def _summary(
    failures: list[tuple[DescriptorNode, TestResult]] | None = None,
    *,
    started: int = 3,
    skipped: int = 0,
) -> ExecutionSummary:
    failures = failures or []
    failed = sum(1 for _, result in failures if result.status.value == "failed")
    aborted = len(failures) - failed
    return ExecutionSummary(
        tests_started=started,
        succeeded=started - len(failures),
        failed=failed,
        aborted=aborted,
        skipped=skipped,
        failures=failures,
        elapsed_ms=1234.0,
    )


# ---------------------------------------------------------------------------
# Trees
# ---------------------------------------------------------------------------


class TestTreeOutput:
    def test_render_empty_tree(self, engine_id: UniqueId) -> None:
        assert "No rules discovered." in _render(_tree(engine_id))

    def test_render_tree(self, engine_id: UniqueId) -> None:
        output = _render(_tree(engine_id, SimpleRules, ClassWithTags, IgnoredRules))
        assert "SimpleRules" in output
        assert "simple_rule_method_two" in output
        assert "#tag-one #tag-two" in output
        assert "(ignored: whole class disabled)" in output
        assert "8 rules in 3 classes" in output

    def test_render_escapes_markup(self, engine_id: UniqueId) -> None:
        root = _tree(engine_id)
        root.add_child(
            DescriptorNode(
                engine_id.append("class", "pkg.Odd"),
                "[bold]Odd[/]",
                NodeType.CONTAINER,
            )
        )
        assert "[bold]Odd[/]" in _render(root)

    def test_node_to_dict(self, engine_id: UniqueId) -> None:
        root = _tree(engine_id, ClassWithTags)
        data = node_to_dict(root)
        assert data["unique_id"] == "[engine:archengine]"
        assert data["type"] == "container"
        (container,) = data["children"]  # type: ignore[misc]
        assert container["display_name"] == "ClassWithTags"
        assert container["tags"] == ["tag-one", "tag-two"]
        assert container["ignored"] is None
        assert len(container["children"]) == 3

    def test_format_tree_json_parses(self, engine_id: UniqueId) -> None:
        parsed = json.loads(format_tree_json(_tree(engine_id, SimpleRules)))
        assert len(parsed["children"][0]["children"]) == 4

    def test_format_tree_porcelain(self, engine_id: UniqueId) -> None:
        lines = format_tree_porcelain(_tree(engine_id, ClassWithTags)).splitlines()
        assert len(lines) == 3
        assert lines[0] == (
            "[engine:archengine]/[class:testexamples.tags.class_with_tags.ClassWithTags]"
            "/[field:field_rule_in_class_with_tags]:tag-one,tag-two"
        )

    def test_format_tree_porcelain_empty(self, engine_id: UniqueId) -> None:
        assert format_tree_porcelain(_tree(engine_id)) == ""


# ---------------------------------------------------------------------------
# Summaries
# ---------------------------------------------------------------------------


class TestSummaryOutput:
    def test_rich_all_passed(self) -> None:
        output = format_summary_rich(_summary(skipped=1))
        assert output == "[green]All 3 rules passed[/], 1 skipped (1.2s)"

    def test_rich_with_failures(self, engine_id: UniqueId) -> None:
        root = _tree(engine_id, SimpleRules)
        leaf = root.leaves()[0]
        result = TestResult.failed("Architecture Violation [rule 'x']\nClass <a.B> does y")
        output = format_summary_rich(_summary([(leaf, result)]))

        lines = output.splitlines()
        assert lines[0].startswith("[red]x[/] \\[engine:archengine]")
        assert lines[1] == "  Architecture Violation \\[rule 'x']"
        assert lines[2] == "  Class <a.B> does y"
        assert lines[-1] == "[red]1 of 3 rules failed[/], 0 skipped (1.2s)"

    def test_rich_aborted_counts_as_failure(self, engine_id: UniqueId) -> None:
        leaf = _tree(engine_id, SimpleRules).leaves()[0]
        output = format_summary_rich(_summary([(leaf, TestResult.aborted("stop"))]))
        assert "[yellow]aborted[/]" in output
        assert output.endswith("[red]1 of 3 rules failed[/], 0 skipped (1.2s)")

    def test_json(self, engine_id: UniqueId) -> None:
        root = _tree(engine_id, SimpleRules)
        leaf = root.leaves()[0]
        failure = TestResult.failed("boom", RuntimeError("boom"))
        parsed = json.loads(format_summary_json(_summary([(leaf, failure)])))
        assert parsed["failures"] == [
            {
                "unique_id": str(leaf.unique_id),
                "status": "failed",
                "message": "boom",
                "cause": "RuntimeError",
            }
        ]
        assert parsed["summary"]["tests_started"] == 3
        assert parsed["summary"]["failed"] == 1
        assert parsed["summary"]["succeeded"] == 2

    def test_porcelain(self, engine_id: UniqueId) -> None:
        root = _tree(engine_id, SimpleRules)
        first, second = root.leaves()[:2]
        summary = _summary(
            [(first, TestResult.failed("x")), (second, TestResult.aborted("cancelled"))]
        )
        assert format_summary_porcelain(summary).splitlines() == [
            f"failed:{first.unique_id}",
            f"aborted:{second.unique_id}",
        ]

    def test_porcelain_empty_when_passed(self) -> None:
        assert format_summary_porcelain(_summary()) == ""
