"""Depth-first execution of a descriptor tree with listener notifications."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

from archengine.core.configuration import AnalysisConfiguration
from archengine.core.errors import (
    CacheComputationError,
    RuleViolationFailure,
    UnexpectedEvaluationError,
)
from archengine.core.results import Status, TestResult, format_violations
from archengine.discovery.reflection import FieldRule, MethodRule

if TYPE_CHECKING:
    from archengine.core.descriptor import DescriptorNode
    from archengine.core.unique_id import UniqueId
    from archengine.execution.cache import ClassCache
    from archengine.execution.evaluator import RuleEvaluator

logger = logging.getLogger(__name__)

CANCELLED_MESSAGE = "Execution cancelled"


# ---------------------------------------------------------------------------
# Listener
# ---------------------------------------------------------------------------


class ExecutionListener(Protocol):
    """Receives lifecycle events for every node of an executed tree."""

    def started(self, node: DescriptorNode) -> None: ...

    def finished(self, node: DescriptorNode, result: TestResult) -> None: ...

    def skipped(self, node: DescriptorNode, reason: str) -> None: ...


@dataclass(frozen=True)
class ExecutionSummary:
    """Counts of test outcomes from one run."""

    tests_started: int
    succeeded: int
    failed: int
    aborted: int
    skipped: int
    failures: list[tuple[DescriptorNode, TestResult]]
    elapsed_ms: float

    @property
    def has_failures(self) -> bool:
        return self.failed > 0 or self.aborted > 0


@dataclass
class RecordingListener:
    """Listener that keeps every event, in order. Thread-safe."""

    events: list[tuple[str, DescriptorNode, TestResult | str | None]] = field(default_factory=list)
    results: dict[UniqueId, TestResult] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)
    _started_at: float = field(default_factory=time.monotonic, repr=False)

    def started(self, node: DescriptorNode) -> None:
        with self._lock:
            self.events.append(("started", node, None))

    def finished(self, node: DescriptorNode, result: TestResult) -> None:
        with self._lock:
            self.events.append(("finished", node, result))
            self.results[node.unique_id] = result

    def skipped(self, node: DescriptorNode, reason: str) -> None:
        with self._lock:
            self.events.append(("skipped", node, reason))

    def started_ids(self) -> list[UniqueId]:
        return [node.unique_id for kind, node, _ in self.events if kind == "started"]

    def skipped_ids(self) -> list[UniqueId]:
        return [node.unique_id for kind, node, _ in self.events if kind == "skipped"]

    def result_of(self, unique_id: UniqueId) -> TestResult | None:
        return self.results.get(unique_id)

    def summary(self) -> ExecutionSummary:
        tests = [
            (node, payload)
            for kind, node, payload in self.events
            if kind == "finished" and node.is_test and isinstance(payload, TestResult)
        ]
        statuses = [result.status for _, result in tests]
        skipped = sum(1 for kind, node, _ in self.events if kind == "skipped" and node.is_test)
        return ExecutionSummary(
            tests_started=len(tests),
            succeeded=statuses.count(Status.SUCCESSFUL),
            failed=statuses.count(Status.FAILED),
            aborted=statuses.count(Status.ABORTED),
            skipped=skipped,
            failures=[
                (node, result) for node, result in tests if result.status is not Status.SUCCESSFUL
            ],
            elapsed_ms=(time.monotonic() - self._started_at) * 1000,
        )


# ---------------------------------------------------------------------------
# Coordinator
# ---------------------------------------------------------------------------


def _is_root_class_node(node: DescriptorNode) -> bool:
    """A class container whose parent is not itself owned by a rule class."""
    if node.owner is None or not node.is_container:
        return False
    parent = node.parent
    return parent is None or parent.owner is None


class ExecutionCoordinator:
    """Walk a descriptor tree depth first and report each node to a listener.

    Every entered node gets ``started`` and later ``finished``; an ignored
    node gets only ``skipped`` and nothing below it is visited. Each rule
    test evaluates against the class set cached for its owning root class.
    Once a root class subtree is done, whether normally or not, that root's
    cache entries are cleared.

    Setting *cancellation* stops the walk: nodes not yet visited are never
    started, and containers already started finish as aborted.
    """

    def __init__(self, cache: ClassCache, evaluator: RuleEvaluator) -> None:
        self._cache = cache
        self._evaluator = evaluator

    def execute(
        self,
        root: DescriptorNode,
        listener: ExecutionListener,
        cancellation: threading.Event | None = None,
    ) -> None:
        self._visit(root, listener, cancellation or threading.Event())

    def _visit(
        self, node: DescriptorNode, listener: ExecutionListener, cancellation: threading.Event
    ) -> None:
        if node.ignored_reason is not None:
            listener.skipped(node, node.ignored_reason)
            return
        if node.is_test:
            listener.started(node)
            listener.finished(node, self._evaluate(node))
            return

        listener.started(node)
        try:
            for child in node.children:
                if cancellation.is_set():
                    break
                self._visit(child, listener, cancellation)
        finally:
            if _is_root_class_node(node) and node.owner is not None:
                self._cache.clear(node.owner)

        if cancellation.is_set():
            listener.finished(node, TestResult.aborted(CANCELLED_MESSAGE))
        else:
            listener.finished(node, TestResult.successful())

    def _evaluate(self, node: DescriptorNode) -> TestResult:
        member = node.rule
        owner = node.owner
        if not isinstance(member, (FieldRule, MethodRule)) or owner is None:
            return TestResult.failed(f"{node.unique_id} has no rule to evaluate")
        configuration = node.configuration or AnalysisConfiguration()

        try:
            classes = self._cache.get(owner, configuration)
            violations = self._evaluator.evaluate(member, classes)
        except CacheComputationError as exc:
            return TestResult.failed(str(exc), exc)
        except UnexpectedEvaluationError as exc:
            logger.warning("%s", exc)
            return TestResult.failed(str(exc), exc.__cause__ or exc)
        except Exception as exc:
            logger.warning("Evaluating %s failed: %s", node.unique_id, exc)
            return TestResult.failed(f"{type(exc).__name__}: {exc}", exc)

        if not violations:
            return TestResult.successful()
        message = format_violations(member.description, violations)
        return TestResult.failed(message, RuleViolationFailure(message, violations))
